"""
QuickNotes Backend — Input Validation
=======================================

What:  Turns untyped caller input into CreateNoteInput / UpdateNoteInput /
       DeleteNoteInput, or raises ValidationError.
How:   Pydantic does the parsing; its errors are re-expressed as one
       {field, constraint, message} entry per violation.
When:  First step of every mutating note operation, before any store access.
"""

import logging
from typing import Any, Dict, List, Type, TypeVar

import pydantic
from pydantic import BaseModel

from quicknotes.exceptions import ValidationError
from quicknotes.schemas.note import CreateNoteInput, DeleteNoteInput, UpdateNoteInput

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# pydantic error type → constraint name reported to callers
_CONSTRAINTS = {
    "missing": "required",
    "string_too_short": "min_length",
    "string_too_long": "max_length",
    "string_type": "type",
    "model_type": "type",
    "dict_type": "type",
}

_MESSAGES = {
    ("title", "required"): "Title is required",
    ("title", "min_length"): "Title is required",
    ("title", "max_length"): "Title too long",
    ("content", "max_length"): "Content too long",
    ("id", "required"): "Note ID is required",
    ("id", "min_length"): "Note ID is required",
}


def _describe(exc: pydantic.ValidationError) -> List[Dict[str, str]]:
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "body"
        constraint = _CONSTRAINTS.get(err["type"], err["type"])
        message = _MESSAGES.get((field, constraint), err["msg"])
        errors.append({"field": field, "constraint": constraint, "message": message})
    return errors


def _parse(model: Type[ModelT], data: Any) -> ModelT:
    if data is None:
        data = {}
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as exc:
        errors = _describe(exc)
        first = errors[0]
        logger.debug("%s rejected: %s", model.__name__, errors)
        raise ValidationError(
            message=first["message"],
            field=first["field"],
            constraint=first["constraint"],
            errors=errors,
        ) from exc


def validate_create_input(data: Any) -> CreateNoteInput:
    return _parse(CreateNoteInput, data)


def validate_update_input(data: Any) -> UpdateNoteInput:
    return _parse(UpdateNoteInput, data)


def validate_delete_input(data: Any) -> DeleteNoteInput:
    return _parse(DeleteNoteInput, data)
