"""
Retention Use Cases

Cleanup policies and log statistics.
"""

from .cleanup_keeping_most_recent_use_case import CleanupKeepingMostRecentUseCase
from .cleanup_older_than_use_case import CleanupOlderThanUseCase
from .dtos import LogStats
from .get_log_stats_use_case import GetLogStatsUseCase

__all__ = [
    "CleanupKeepingMostRecentUseCase",
    "CleanupOlderThanUseCase",
    "GetLogStatsUseCase",
    "LogStats",
]
