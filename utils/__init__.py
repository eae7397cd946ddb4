"""
Terminal formatting helpers
"""
from .formatters import (
    remove_emojis,
    score_bar,
    format_score,
    format_entity_card,
    format_ranking,
    format_preferences,
    format_stats,
)

__all__ = [
    'remove_emojis',
    'score_bar',
    'format_score',
    'format_entity_card',
    'format_ranking',
    'format_preferences',
    'format_stats',
]
