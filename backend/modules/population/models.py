"""
Population job data models.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PopulationReport(BaseModel):
    """Counters for one bulk population run."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    pages_fetched: int = Field(default=0, description="List pages requested")
    users_seen: int = Field(default=0, description="Entries across all pages")
    active_users: int = Field(default=0, description="Entries with the active flag set")
    batches_written: int = 0
    batches_failed: int = 0
    records_written: int = 0
    records_failed: int = 0

    @property
    def complete(self) -> bool:
        """True when every batch was written."""
        return self.batches_failed == 0
