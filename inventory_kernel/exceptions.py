"""
Typed Exception Hierarchy for the Inventory Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every rule the ledger enforces has its own exception class so that the
boundary that surfaces a notice can catch by type, read a stable ``code``
and pull structured attributes off the exception instead of parsing
message text.

Example - WRONG way to handle errors:
    try:
        store.create_item(draft)
    except Exception as e:
        if "already registered" in str(e):  # FRAGILE
            show_duplicate_banner()

Example - RIGHT way (what this module enables):
    try:
        store.create_item(draft)
    except DuplicateError as e:
        notice(code=e.code, field=e.field, value=e.value)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from InventoryKernelError:

    InventoryKernelError (base)
    |
    +-- ValidationError
    |   +-- MissingFieldError
    |   +-- InvalidFieldError
    |
    +-- DuplicateError
    |   +-- DuplicateCodeError
    |   +-- DuplicateDrawingNumberError
    |   +-- DuplicateSerialNumberError
    |
    +-- AuthorizationError
    |   +-- InvalidCredentialsError
    |   +-- CategoryAccessDeniedError
    |
    +-- TransportError
    |   +-- BackupNotConfiguredError
    |   +-- BackupAuthenticationError
    |   +-- BackupUploadError
    |
    +-- PersistenceError
    |
    +-- NotFoundError
        +-- ItemNotFoundError
        +-- TransactionNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                          | When Raised
----------------|-------------------------------|---------------------------------------
Validation      | MISSING_FIELD                 | Required field blank (item name)
                | INVALID_FIELD                 | Quantity/price/field out of range
----------------|-------------------------------|---------------------------------------
Duplicate       | DUPLICATE_CODE                | Code already registered
                | DUPLICATE_DRAWING_NUMBER      | Drawing number already registered
                | DUPLICATE_SERIAL_NUMBER       | Serial number already used
----------------|-------------------------------|---------------------------------------
Authorization   | INVALID_CREDENTIALS           | Wrong secret on login or delete
                | CATEGORY_ACCESS_DENIED        | Role may not touch this category
----------------|-------------------------------|---------------------------------------
Transport       | BACKUP_NOT_CONFIGURED         | No remote client id saved
                | BACKUP_AUTHENTICATION_FAILED  | Remote service refused access
                | BACKUP_UPLOAD_FAILED          | Lookup/create/overwrite failed
----------------|-------------------------------|---------------------------------------
Persistence     | PERSISTENCE_FAILED            | Local state could not be written
----------------|-------------------------------|---------------------------------------
Not found       | ITEM_NOT_FOUND                | Item id not in corpus
                | TRANSACTION_NOT_FOUND         | Transaction id not on item

===============================================================================
HANDLING PATTERNS
===============================================================================

Errors are recovered at the boundary that raised them and surfaced as a
single blocking notice (see ``inventory_services.application``). None of
them is retried automatically.
"""


class InventoryKernelError(Exception):
    """
    Base exception for all inventory kernel errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    identification.
    """

    code: str = "INVENTORY_KERNEL_ERROR"


# Validation exceptions


class ValidationError(InventoryKernelError):
    """Base exception for rejected input."""

    code: str = "VALIDATION_ERROR"


class MissingFieldError(ValidationError):
    """A required field was blank or absent."""

    code: str = "MISSING_FIELD"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Required field is blank: {field}")


class InvalidFieldError(ValidationError):
    """A field value is outside its allowed domain."""

    code: str = "INVALID_FIELD"

    def __init__(self, field: str, value: object, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value {value!r} for {field}: {reason}")


# Duplicate exceptions


class DuplicateError(InventoryKernelError):
    """Base exception for identity collisions."""

    code: str = "DUPLICATE"

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"{field} is already registered: {value}")


class DuplicateCodeError(DuplicateError):
    """Item code collides case-insensitively with an existing item."""

    code: str = "DUPLICATE_CODE"

    def __init__(self, value: str):
        super().__init__("code", value)


class DuplicateDrawingNumberError(DuplicateError):
    """Drawing number collides case-insensitively with an existing item."""

    code: str = "DUPLICATE_DRAWING_NUMBER"

    def __init__(self, value: str):
        super().__init__("drawing_number", value)


class DuplicateSerialNumberError(DuplicateError):
    """Serial number is already recorded on another transaction."""

    code: str = "DUPLICATE_SERIAL_NUMBER"

    def __init__(self, value: str):
        super().__init__("serial_number", value)


# Authorization exceptions


class AuthorizationError(InventoryKernelError):
    """Base exception for rejected credentials or role scope."""

    code: str = "AUTHORIZATION_ERROR"


class InvalidCredentialsError(AuthorizationError):
    """Supplied secret does not match."""

    code: str = "INVALID_CREDENTIALS"

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Invalid secret for {action}")


class CategoryAccessDeniedError(AuthorizationError):
    """The session role may not view or mutate this category."""

    code: str = "CATEGORY_ACCESS_DENIED"

    def __init__(self, role: str, category: str):
        self.role = role
        self.category = category
        super().__init__(f"Role {role} may not access category {category}")


# Transport exceptions


class TransportError(InventoryKernelError):
    """Base exception for backup transport failures."""

    code: str = "TRANSPORT_ERROR"


class BackupNotConfiguredError(TransportError):
    """No remote client identifier has been saved."""

    code: str = "BACKUP_NOT_CONFIGURED"

    def __init__(self):
        super().__init__("Backup destination is not configured: client id is blank")


class BackupAuthenticationError(TransportError):
    """The remote storage refused authentication."""

    code: str = "BACKUP_AUTHENTICATION_FAILED"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Backup authentication failed: {reason}")


class BackupUploadError(TransportError):
    """Lookup, create or overwrite of the backup file failed."""

    code: str = "BACKUP_UPLOAD_FAILED"

    def __init__(self, file_name: str, reason: str):
        self.file_name = file_name
        self.reason = reason
        super().__init__(f"Backup upload of {file_name} failed: {reason}")


# Persistence exceptions


class PersistenceError(InventoryKernelError):
    """Local persisted state could not be written; the corpus is unchanged."""

    code: str = "PERSISTENCE_FAILED"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Could not save {key}: {reason}")


# Lookup exceptions


class NotFoundError(InventoryKernelError):
    """Base exception for unknown identifiers."""

    code: str = "NOT_FOUND"


class ItemNotFoundError(NotFoundError):
    """Item with given ID was not found."""

    code: str = "ITEM_NOT_FOUND"

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}")


class TransactionNotFoundError(NotFoundError):
    """Transaction with given ID was not found on the item."""

    code: str = "TRANSACTION_NOT_FOUND"

    def __init__(self, item_id: str, transaction_id: str):
        self.item_id = item_id
        self.transaction_id = transaction_id
        super().__init__(
            f"Transaction {transaction_id} not found on item {item_id}"
        )
