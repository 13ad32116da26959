"""
Credentials -- Roles and the pluggable secret check.

Responsibility:
    Declares the two session roles and the ``CredentialCheck`` capability
    the store uses to authorize destructive deletes.
    ``StaticSecretCheck`` is the built-in implementation: one static shared
    secret per role, compared in process.

Architecture position:
    Kernel > Domain -- pure, zero I/O. Secrets are passed in by the caller;
    the kernel never reads configuration.

Non-goals:
    - No tokens, expiry or hashing. A static secret held in memory is a
      stub; a hardened deployment should provide its own CredentialCheck.
"""

from __future__ import annotations

import hmac
from collections.abc import Mapping
from enum import Enum
from typing import Protocol


class Role(str, Enum):
    """
    Session authorization level.

    ADMIN may view and mutate both categories; RESTRICTED only products.
    """

    ADMIN = "admin"
    RESTRICTED = "restricted"


class CredentialCheck(Protocol):
    """Capability that decides whether a secret belongs to a role."""

    def verify(self, role: Role, secret: str) -> bool:
        ...

    def identify(self, secret: str) -> Role | None:
        ...


class StaticSecretCheck:
    """
    One static shared secret per role.

    Contract:
        ``identify`` tries ADMIN first, then RESTRICTED, so two roles
        configured with the same secret resolve to ADMIN.
    """

    def __init__(self, secrets: Mapping[Role, str]):
        missing = [role.value for role in Role if not secrets.get(role)]
        if missing:
            raise ValueError(f"No secret configured for roles: {missing}")
        self._secrets = {Role(role): str(secret) for role, secret in secrets.items()}

    def verify(self, role: Role, secret: str) -> bool:
        expected = self._secrets.get(role)
        if expected is None or secret is None:
            return False
        return hmac.compare_digest(expected.encode("utf-8"), str(secret).encode("utf-8"))

    def identify(self, secret: str) -> Role | None:
        for role in (Role.ADMIN, Role.RESTRICTED):
            if self.verify(role, secret):
                return role
        return None
