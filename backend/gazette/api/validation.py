"""
Form validation shared by the endpoints.

Raw submitted fields go in; either a validated pydantic model comes out or a
``ValidationError`` carrying one list of messages per field.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, TypeVar
from fastapi import UploadFile
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from gazette.core.errors import ValidationError
from gazette.services.media import UploadedPhoto

FormT = TypeVar("FormT", bound=BaseModel)

# Location prefixes FastAPI puts in front of field names
_LOCATIONS = {"body", "query", "path", "form", "header", "cookie"}


def field_errors(errors: Iterable[Mapping[str, Any]]) -> Dict[str, List[str]]:
    """Group pydantic/FastAPI error entries by field name."""
    grouped: Dict[str, List[str]] = {}
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in _LOCATIONS]
        field = ".".join(loc) or "__all__"
        message = error.get("msg", "Invalid value")
        # pydantic prefixes custom validator messages
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        grouped.setdefault(field, []).append(message)
    return grouped


def validate_form(form_class: Type[FormT], data: Mapping[str, Any]) -> FormT:
    """
    Validate raw form fields against ``form_class``.

    Missing (None) fields are dropped so they are reported as required.

    Raises:
        ValidationError: with field-level messages
    """
    cleaned = {key: value for key, value in data.items() if value is not None}
    try:
        return form_class.model_validate(cleaned)
    except PydanticValidationError as e:
        raise ValidationError(field_errors(e.errors()))


async def read_photo(
    upload: Optional[UploadFile], max_size: int
) -> Optional[UploadedPhoto]:
    """Read an optional file field. Browsers send an empty part for "no file".

    At most ``max_size + 1`` bytes are read: enough for the store to reject an
    oversized file without buffering all of it.
    """
    if upload is None or not upload.filename:
        return None
    content = await upload.read(max_size + 1)
    if not content:
        return None
    return UploadedPhoto(filename=upload.filename, content=content)
