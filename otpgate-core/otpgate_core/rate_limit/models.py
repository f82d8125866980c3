"""
Rate Limit Models
=================
Admission decisions for identifier-keyed request windows.
"""

from typing import Optional
from dataclasses import dataclass
from enum import Enum


class AdmissionVerdict(str, Enum):
    ADMITTED = "admitted"
    REJECTED = "rejected"


@dataclass
class RateLimitInfo:
    """Outcome of one admission check, with what is left of the window."""
    key: str
    allowed: bool
    remaining: int
    limit: int
    reset_at: int  # when the oldest admitted request leaves the window
    retry_after: Optional[int] = None

    @property
    def verdict(self) -> AdmissionVerdict:
        return AdmissionVerdict.ADMITTED if self.allowed else AdmissionVerdict.REJECTED
