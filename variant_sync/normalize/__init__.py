from .attributes import DEFAULT_RULES, KeyRule, NormalizationRules, normalize
from .values import clean, is_valid, rejection_reason

__all__ = [
    "DEFAULT_RULES",
    "KeyRule",
    "NormalizationRules",
    "clean",
    "is_valid",
    "normalize",
    "rejection_reason",
]
