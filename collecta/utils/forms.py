import inspect
from typing import Any, Callable, Dict, Optional, Sequence, Type, TypeVar

from fastapi import Form, UploadFile
from pydantic import BaseModel, ValidationError

from collecta.errors import InvalidInput

M = TypeVar("M", bound=BaseModel)

LOCATION_PREFIXES = ("body", "query", "path")


def format_validation_error(errors: Sequence[Dict[str, Any]]) -> str:
    """Render the first pydantic error as `field: message`."""
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in LOCATION_PREFIXES)
    message = first.get("msg", "Invalid value.")
    return f"{location}: {message}" if location else message


def as_form(model: Type[M]) -> Callable[..., M]:
    """Build a dependency reading ``model`` from multipart or urlencoded fields.

    Every field is declared as an optional text ``Form`` parameter and handed to
    ``model`` as it was sent, so the model does the typing and range checks.
    Blank and missing fields are left out, which lets required fields report
    themselves by name.
    """
    parameters = [
        inspect.Parameter(
            name,
            inspect.Parameter.KEYWORD_ONLY,
            default=Form(None, description=field.description),
            annotation=Optional[str],
        )
        for name, field in model.model_fields.items()
    ]

    async def dependency(**fields: Optional[str]) -> M:
        try:
            return model.model_validate({k: v for k, v in fields.items() if v is not None})
        except ValidationError as e:
            raise InvalidInput(format_validation_error(e.errors())) from e

    dependency.__signature__ = inspect.Signature(parameters, return_annotation=model)
    dependency.__name__ = f"{model.__name__}Form"
    return dependency


def sent_file(file: Optional[UploadFile]) -> Optional[UploadFile]:
    """``None`` for a file input submitted without a file, as browsers send it."""
    if file is None or not file.filename:
        return None
    return file
