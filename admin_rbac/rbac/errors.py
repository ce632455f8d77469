"""
Typed RBAC errors.

The evaluator, store and admin services raise these; the access guard
(`admin_rbac.rbac.guard.register_exception_handlers`) is the single
place that turns them into HTTP responses.
"""


class RBACError(Exception):
    """Base class for every error raised by the access-control core."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class Unauthenticated(RBACError):
    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class Unauthorized(RBACError):
    """The principal is known but lacks the required code(s).  `codes` lists what was missing."""

    def __init__(self, *codes: str, require_all: bool = True) -> None:
        if len(codes) == 1:
            message = f"Missing required permission: {codes[0]}"
        elif require_all:
            message = f"Missing required permissions: {', '.join(codes)}"
        else:
            message = f"Requires any of: {', '.join(codes)}"
        super().__init__(message)
        self.codes = codes
        self.code = codes[0]
        self.require_all = require_all


class NotFound(RBACError):
    def __init__(self, entity: str, entity_id: object) -> None:
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class RoleInUse(RBACError):
    def __init__(self, role_id: int) -> None:
        super().__init__("Cannot delete role that is currently assigned to users")
        self.role_id = role_id


class DuplicateRole(RBACError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Role already exists: {name}")
        self.name = name


class VersionConflict(RBACError):
    def __init__(self, role_id: int, expected: int, actual: int) -> None:
        super().__init__(
            f"Role {role_id} permissions changed concurrently "
            f"(expected version {expected}, found {actual})"
        )
        self.role_id = role_id
        self.expected = expected
        self.actual = actual


class InvalidPermissionSet(RBACError):
    """A requested permission assignment is malformed or inconsistent."""

    def __init__(
        self,
        message: str,
        *,
        unknown_ids: list[int] | None = None,
        missing_menu_codes: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.unknown_ids = unknown_ids or []
        self.missing_menu_codes = missing_menu_codes or []


class EvaluationError(RBACError):
    """The permission store could not be read.  Never means "no permission"."""


class InternalError(RBACError):
    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
