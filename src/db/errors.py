# exceptions raised by the db package, handled at the view boundary


class DshError(Exception):
    """Base class for all marketplace errors."""


class ValidationError(DshError, ValueError):
    """Input payload is missing a required field or holds a malformed value."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(DshError, LookupError):
    """No record with the given id exists in the collection."""

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(f"{kind} '{record_id}' not found")
        self.kind = kind
        self.record_id = record_id


class IdentityNotFoundError(NotFoundError):
    """Login identifier matched nothing in the collection for the chosen role."""

    def __init__(self, role: str, identifier: str) -> None:
        super().__init__(role, identifier)
        self.role = role
        self.identifier = identifier


class StorageError(DshError):
    """Persisting a value failed; in-memory state stays authoritative."""

    def __init__(self, key: str, cause: BaseException) -> None:
        super().__init__(f"could not persist '{key}': {cause}")
        self.key = key
        self.cause = cause
