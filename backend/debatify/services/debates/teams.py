import math
import random
from typing import List, Sequence, Tuple

TEAM_FOR = 'for'
TEAM_AGAINST = 'against'
TEAM_NAMES = (TEAM_FOR, TEAM_AGAINST)


def clean_names(names: Sequence) -> List[str]:
    """Drop blank entries, keep order."""
    return [str(n).strip() for n in names or [] if n is not None and str(n).strip()]


def assign_teams(names: Sequence[str], rng=None) -> List[Tuple[str, str]]:
    """Shuffle participants and split them into two sides.

    The first ceil(n/2) shuffled names argue for the motion, the rest
    against, so an odd count puts the extra speaker on the 'for' side.
    """
    shuffled = list(names)
    (rng or random).shuffle(shuffled)
    half = math.ceil(len(shuffled) / 2)
    return [(name, TEAM_FOR if idx < half else TEAM_AGAINST) for idx, name in enumerate(shuffled)]
