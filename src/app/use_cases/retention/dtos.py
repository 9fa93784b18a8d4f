"""
Retention Use Case DTOs
"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel


class LogStats(BaseModel):
    """Aggregate view of the stored event log"""

    total_logs: int
    counts_by_level: Dict[str, int]
    counts_by_type: Dict[str, int]
    oldest_timestamp: Optional[datetime] = None
    newest_timestamp: Optional[datetime] = None
    logs_last_24h: int = 0
    logs_last_7_days: int = 0
