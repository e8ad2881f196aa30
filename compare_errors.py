"""
Error types raised while comparing Route 53 hosted zones.

Every error aborts the whole run; nothing is retried or recovered locally.
"""

from typing import List, Optional


class ZoneCompareError(Exception):
    """Base class for all fatal comparison errors"""


class ConfigurationError(ZoneCompareError):
    """Credentials or settings could not be loaded"""


class ZoneNotFoundError(ZoneCompareError):
    """No hosted zone in the account matches the requested name"""

    def __init__(self, zone_name: str, available_zones: Optional[List[str]] = None):
        self.zone_name = zone_name
        self.available_zones = list(available_zones or [])
        available = ', '.join(self.available_zones) if self.available_zones else '(none)'
        super().__init__(
            f"could not find hosted zone with name {zone_name}; available zones: {available}"
        )


class RetrievalError(ZoneCompareError):
    """Listing zones or record sets failed"""


class PersistError(ZoneCompareError):
    """An output artifact could not be written"""
