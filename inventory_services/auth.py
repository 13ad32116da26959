"""
inventory_services.auth -- Role selection and category gating.

Responsibility:
    Turn a supplied shared secret into a Role at session start and decide
    which item categories that role may view or mutate.

Architecture position:
    Services layer. Consumes SecuritySettings from inventory_config and a
    CredentialCheck from the kernel. Called by InventoryApplication before
    every category-scoped operation.

Invariants:
    - admin may act on both categories; restricted only on products.
    - The kernel stays role-agnostic apart from the delete re-check; this
      module never mutates the store.
"""

from __future__ import annotations

from inventory_config.schema import SecuritySettings
from inventory_kernel.domain.credentials import CredentialCheck, Role, StaticSecretCheck
from inventory_kernel.domain.values import ItemType, parse_item_type
from inventory_kernel.exceptions import CategoryAccessDeniedError, InvalidCredentialsError
from inventory_kernel.logging_config import get_logger

logger = get_logger("services.auth")

# role -> categories the role may view and mutate
ROLE_CATEGORIES: dict[Role, frozenset[ItemType]] = {
    Role.ADMIN: frozenset({ItemType.PART, ItemType.PRODUCT}),
    Role.RESTRICTED: frozenset({ItemType.PRODUCT}),
}


def credentials_from_config(security: SecuritySettings) -> StaticSecretCheck:
    """Build the static secret check from configured secrets."""
    return StaticSecretCheck(
        {
            Role.ADMIN: security.admin_secret,
            Role.RESTRICTED: security.restricted_secret,
        }
    )


class RoleAuthority:
    """Resolves roles from secrets and enforces per-role category access."""

    def __init__(self, credentials: CredentialCheck):
        self._credentials = credentials

    @property
    def credentials(self) -> CredentialCheck:
        return self._credentials

    def login(self, secret: str) -> Role:
        """Return the role whose secret matches, admin checked first.

        Raises:
            InvalidCredentialsError: the secret matches neither role.
        """
        role = self._credentials.identify(secret)
        if role is None:
            logger.warning("login_rejected")
            raise InvalidCredentialsError("login")
        logger.info("login_accepted", extra={"actor_role": role.value})
        return role

    def allowed_categories(self, role: Role) -> tuple[ItemType, ...]:
        """Categories visible to ``role`` in display order (parts first)."""
        allowed = ROLE_CATEGORIES.get(Role(role), frozenset())
        return tuple(category for category in ItemType if category in allowed)

    def can_access(self, role: Role, category: ItemType | str) -> bool:
        return parse_item_type(category) in ROLE_CATEGORIES.get(Role(role), frozenset())

    def require_category(self, role: Role, category: ItemType | str) -> ItemType:
        """Return the parsed category, or raise if ``role`` may not touch it."""
        parsed = parse_item_type(category)
        if not self.can_access(role, parsed):
            logger.warning(
                "category_access_denied",
                extra={"actor_role": Role(role).value, "category": parsed.value},
            )
            raise CategoryAccessDeniedError(Role(role).value, parsed.value)
        return parsed
