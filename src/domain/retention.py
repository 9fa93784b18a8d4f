"""
Retention recommendation

Pure policy deciding which cleanup strategy the current log volume calls for.
"""

from enum import Enum
from typing import Any, Mapping, Union

DEFAULT_COUNT_CLEANUP_THRESHOLD = 50000
DEFAULT_AGE_CLEANUP_THRESHOLD = 10000


class Recommendation(str, Enum):
    """Cleanup strategy suggested for the current log volume"""

    count_based = "count-based"
    age_based = "age-based"
    none = "none"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    Recommendation.count_based: "Count-based cleanup is recommended",
    Recommendation.age_based: "Consider an age-based cleanup",
    Recommendation.none: "No cleanup needed at the moment",
}


def recommend(
    stats: Union[int, Mapping[str, Any], Any],
    count_threshold: int = DEFAULT_COUNT_CLEANUP_THRESHOLD,
    age_threshold: int = DEFAULT_AGE_CLEANUP_THRESHOLD,
) -> Recommendation:
    """
    Recommend a cleanup strategy from the total number of stored logs.

    Args:
        stats: LogStats-like object, a mapping with ``total_logs``, or the total itself
        count_threshold: above this total, count-based cleanup is recommended
        age_threshold: above this total, age-based cleanup is recommended

    Returns:
        Recommendation
    """
    if isinstance(stats, int):
        total_logs = stats
    elif isinstance(stats, Mapping):
        total_logs = stats["total_logs"]
    else:
        total_logs = stats.total_logs

    if total_logs > count_threshold:
        return Recommendation.count_based
    if total_logs > age_threshold:
        return Recommendation.age_based
    return Recommendation.none
