"""
Rate Limiting
=============
Sliding window admission control for code requests.
"""

from .models import AdmissionVerdict, RateLimitInfo
from .sliding_window import SlidingWindowLimiter, DEFAULT_RATE, DEFAULT_WINDOW_SECONDS

__all__ = [
    # Models
    "AdmissionVerdict",
    "RateLimitInfo",
    # Limiters
    "SlidingWindowLimiter",
    "DEFAULT_RATE",
    "DEFAULT_WINDOW_SECONDS",
]
