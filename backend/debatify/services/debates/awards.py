AWARD_TYPES = {
    'honorable_mention': ('Honorable Mention', '🏅'),
    'best_speaker': ('Best Speaker', '🎤'),
    'best_debater': ('Best Debater', '🏆'),
    'most_creative': ('Most Creative Debater', '💡'),
}
DEFAULT_ICON = '⭐'


def is_award_type(award_type) -> bool:
    return award_type in AWARD_TYPES


def award_label(award_type: str) -> str:
    entry = AWARD_TYPES.get(award_type)
    return entry[0] if entry else award_type


def award_icon(award_type: str) -> str:
    entry = AWARD_TYPES.get(award_type)
    return entry[1] if entry else DEFAULT_ICON


def award_choices():
    return [{'value': key, 'label': label} for key, (label, _icon) in AWARD_TYPES.items()]
