from __future__ import annotations

from typing import Optional, Protocol

from .model import Identity


class IdentityRepository(Protocol):
    def get_by_id(self, identity_id: str) -> Optional[Identity]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Identity]:
        raise NotImplementedError

    def create(self, *, email: str) -> str:
        """Create an unconfirmed identity without password, return its id."""

        raise NotImplementedError

    def set_password(self, identity_id: str, password_hash: str) -> bool:
        """Also marks the identity as confirmed."""

        raise NotImplementedError

    def clear_password(self, identity_id: str) -> bool:
        """Drop the password and mark the identity unconfirmed again."""

        raise NotImplementedError

    def update_email(self, identity_id: str, email: str) -> bool:
        raise NotImplementedError

    def delete(self, identity_id: str) -> bool:
        raise NotImplementedError
