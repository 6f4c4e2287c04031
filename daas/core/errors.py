# ---------------------------------
# TYPED EXCEPTIONS
# ---------------------------------


class AccessRequestError(Exception):
    """Base class for every error the access workflow surfaces to callers."""
    pass


class NotFoundError(AccessRequestError):
    """Raised when a referenced user, document or access request is missing."""

    def __init__(self, entity: str, entity_id: int | None = None):
        self.entity = entity
        self.entity_id = entity_id
        message = f"{entity.capitalize()} not found"
        if entity_id is not None:
            message = f"{message}: {entity_id}"
        super().__init__(message)


class InvalidArgumentError(AccessRequestError):
    def __init__(self, field: str, reason: str = "must not be empty"):
        self.field = field
        super().__init__(f"Invalid {field}: {reason}")


class ConflictError(AccessRequestError):
    """Raised when a request is no longer pending at decision time."""

    def __init__(self, request_id: int, message: str = "Access request already decided"):
        self.request_id = request_id
        super().__init__(message)


class ForbiddenError(AccessRequestError):
    def __init__(self, user_id: int, message: str = "User is not authorized to decide access requests"):
        self.user_id = user_id
        super().__init__(message)


class StaleRecordError(RuntimeError):
    """Raised by a store when a conditional update finds a newer version."""
    pass
