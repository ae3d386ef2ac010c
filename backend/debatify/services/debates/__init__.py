"""Debate domain services: team assignment, score rules and awards.

Pure helpers imported by the HTTP routes, kept free of request handling.
"""

from .awards import AWARD_TYPES, award_choices, award_icon, award_label, is_award_type
from .scoring import clamp_score, parse_score
from .teams import TEAM_AGAINST, TEAM_FOR, TEAM_NAMES, assign_teams, clean_names
