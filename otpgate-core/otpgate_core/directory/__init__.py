"""
Identity Directory
==================
Port to the durable account store and its Supabase implementation.
"""

from .models import DirectoryUser, DirectorySession
from .base import IdentityDirectory
from .supabase import SupabaseDirectory

__all__ = [
    "DirectoryUser",
    "DirectorySession",
    "IdentityDirectory",
    "SupabaseDirectory",
]
