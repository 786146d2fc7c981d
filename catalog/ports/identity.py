"""
Identity port (interface).
"""
from abc import ABC, abstractmethod
from typing import Optional


class IdentityProvider(ABC):
    """Provides the identity of the user performing the current operation."""

    @abstractmethod
    def current_email(self) -> Optional[str]:
        """
        Return the authenticated user's email.

        Returns:
            Email address or None for unauthenticated sessions
        """
        pass
