"""Domain errors raised by services; ``api.outcomes`` maps them to HTTP responses."""

from typing import Dict, List, Optional


class GazetteError(Exception):
    """Base class for every error the content services raise."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(GazetteError):
    """Submitted fields were rejected; nothing was written."""

    status_code = 422

    def __init__(self, errors: Dict[str, List[str]], message: str = "Validation failed"):
        super().__init__(message)
        self.errors = errors

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls({field: [message]})


class NotFound(GazetteError):
    status_code = 404

    def __init__(self, entity: str, identifier: Optional[object] = None):
        if identifier is None:
            message = f"{entity} not found"
        else:
            message = f"{entity} {identifier} not found"
        super().__init__(message)
        self.entity = entity
        self.identifier = identifier


class ConstraintViolation(GazetteError):
    """The operation would break a referential or lifecycle rule."""

    status_code = 409


class MediaError(GazetteError):
    """An uploaded file could not be validated, written or removed."""

    status_code = 400
