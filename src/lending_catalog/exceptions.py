"""
Error types for the lending catalog.

Two families are kept apart:

1. **Operational failures** (``CatalogError``): expected, recoverable
   conditions raised by the catalog, such as an unknown material id or a
   checkout on an item that is already out. The presentation layer catches
   these and turns them into user-facing messages.
2. **Validation failures** (``ValidationFailure``): raised while building or
   mutating an entity with bad input. They are ``ValueError`` subclasses and
   are raised before any state is touched.

"Nothing to do" outcomes (returning an available item, cancelling a missing
reservation) are boolean results, not exceptions.
"""


class CatalogError(Exception):
    """Base exception for catalog operations."""


class NotFoundError(CatalogError):
    """Raised when a material or user lookup has no match."""


class MaterialNotFoundError(NotFoundError):
    """Raised when no material with the given id exists in the catalog."""

    def __init__(self, material_id: int, message: str = "Material not found"):
        super().__init__(f"{message}: {material_id}")
        self.material_id = material_id


class UserNotFoundError(NotFoundError):
    """Raised when no registered user matches the given name."""

    def __init__(self, user_name: str, message: str = "User not found"):
        super().__init__(f"{message}: '{user_name}'")
        self.user_name = user_name


class AlreadyOnLoanError(CatalogError):
    """Raised when a checkout is attempted on an unavailable material."""

    def __init__(self, material_id: int, message: str = "Material is already on loan"):
        super().__init__(f"{message}: {material_id}")
        self.material_id = material_id


class DuplicateMaterialError(CatalogError):
    """Raised when a material id is already registered."""

    def __init__(self, material_id: int):
        super().__init__(f"Material id {material_id} is already in the catalog")
        self.material_id = material_id


class NotReservableError(CatalogError):
    """Raised when a reservation is requested on a kind that cannot be reserved."""

    def __init__(self, material_id: int, kind: str):
        super().__init__(f"Material {material_id} ({kind}) does not support reservations")
        self.material_id = material_id
        self.kind = kind


class ValidationFailure(ValueError):
    """Base exception for invalid input at construction or mutation time."""


class InvalidAttributeError(ValidationFailure):
    """Raised when a size-like attribute (pages, duration, edition) is not positive."""

    def __init__(self, attribute: str, value: object):
        super().__init__(f"{attribute} must be greater than 0, got {value!r}")
        self.attribute = attribute
        self.value = value


class InvalidEmailError(ValidationFailure):
    """Raised when an email address is not well formed."""

    def __init__(self, email: str, message: str = "Invalid email address"):
        super().__init__(f"{message}: '{email}'")
        self.email = email
