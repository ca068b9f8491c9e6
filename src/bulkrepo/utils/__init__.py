"""bulkrepo utility modules."""

from bulkrepo.utils.comparison import normalize_for_comparison, pick, structurally_equal
from bulkrepo.utils.logging import configure_logging

__all__ = [
    "configure_logging",
    "normalize_for_comparison",
    "pick",
    "structurally_equal",
]
