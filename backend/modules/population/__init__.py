"""
Cache population module.

Offline job that walks the directory's user list into the profile cache.

Public API:
- BulkPopulator: The population job
- PopulationReport: Counters for one run
"""

from .models import PopulationReport
from .populator import BulkPopulator

__all__ = [
    "PopulationReport",
    "BulkPopulator",
]
