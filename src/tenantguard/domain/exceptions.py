"""Domain exceptions."""


class TenantGuardError(Exception):
    """Base exception for TenantGuard."""

    pass


class PermissionDenied(TenantGuardError):
    """Caller does not hold the permission required for the action."""

    pass


class NotFound(TenantGuardError):
    """Requested resource was not found."""

    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"{kind} not found: {key}")
        self.kind = kind
        self.key = key


class UnknownPermission(NotFound):
    """Permission name is not in the catalog."""

    def __init__(self, name: str) -> None:
        super().__init__("Permission", name)


class ValidationError(TenantGuardError):
    """Validation failed for input data."""

    pass


class ConstraintViolation(TenantGuardError):
    """Store rejected a write that would break a uniqueness invariant."""

    pass


class AuthorizationError(TenantGuardError):
    """Authorization could not be decided. Callers must treat it as a deny."""

    pass


class StoreUnavailable(AuthorizationError):
    """Persistence unreachable or timed out."""

    pass


class TenantMismatch(AuthorizationError):
    """Resolved role, override or rule belongs to another business."""

    def __init__(self, kind: str, expected: object, actual: object) -> None:
        super().__init__(f"{kind} belongs to business {actual}, request is scoped to {expected}")
        self.kind = kind
        self.expected = expected
        self.actual = actual
