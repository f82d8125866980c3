"""
Directory Models
================
Account and session records returned by the identity directory.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class DirectoryUser:
    """A durable account record."""
    id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    full_name: Optional[str] = None
    username: Optional[str] = None


@dataclass
class DirectorySession:
    """Credentials issued by the directory after sign-in."""
    access_token: str
    refresh_token: str
    user_id: str
    is_new_user: bool = False
