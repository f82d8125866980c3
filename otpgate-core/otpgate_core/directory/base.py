"""
Identity Directory Interface
============================
Contract for the external store of user accounts and sessions.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .models import DirectorySession, DirectoryUser


class IdentityDirectory(ABC):
    """
    Durable user/account records and session issuance.

    Lookups return None when no account matches. Any other failure is raised
    as ``DirectoryError``.
    """

    name: str = "base"

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[DirectoryUser]:
        """Look up an account by normalized email address."""

    @abstractmethod
    async def find_by_phone(self, phone: str) -> Optional[DirectoryUser]:
        """Look up an account by E.164 phone number."""

    @abstractmethod
    async def update_password(self, user_id: str, new_password: str) -> None:
        """Set a new password for an account."""

    @abstractmethod
    async def sign_in_with_id_token(self, provider: str, id_token: str) -> Optional[DirectorySession]:
        """Exchange a federated identity token for a session; None if no account exists."""

    @abstractmethod
    async def sign_up(
        self,
        email: str,
        password: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> DirectoryUser:
        """Create an account."""

    @abstractmethod
    async def sign_in_with_password(self, email: str, password: str) -> DirectorySession:
        """Open a session with email and password."""

    async def close(self) -> None:
        """Release resources."""
