"""
QuickNotes Backend — Input Validation Unit Tests
==================================================

What we test:
    ✅ Title/content bounds for create and update (200 / 10,000 chars)
    ✅ Required ids for update and delete
    ✅ Field-level error structure (field, constraint, message)
"""

import pytest

from quicknotes.exceptions import ValidationError
from quicknotes.schemas.note import CONTENT_MAX_LENGTH, TITLE_MAX_LENGTH
from quicknotes.services.validation import (
    validate_create_input,
    validate_delete_input,
    validate_update_input,
)


class TestCreateValidation:

    def test_valid_input(self):
        payload = validate_create_input({"title": "Groceries", "content": "milk, eggs"})

        assert payload.title == "Groceries"
        assert payload.content == "milk, eggs"

    def test_content_defaults_to_empty(self):
        assert validate_create_input({"title": "Empty"}).content == ""

    def test_bounds_are_inclusive(self):
        payload = validate_create_input(
            {"title": "a" * TITLE_MAX_LENGTH, "content": "b" * CONTENT_MAX_LENGTH}
        )

        assert len(payload.title) == 200
        assert len(payload.content) == 10_000

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_create_input({"title": "", "content": "x"})

        assert exc_info.value.field == "title"
        assert exc_info.value.constraint == "min_length"
        assert exc_info.value.message == "Title is required"

    def test_missing_title_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_create_input({"content": "x"})

        assert exc_info.value.field == "title"
        assert exc_info.value.constraint == "required"

    def test_long_title_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_create_input({"title": "a" * 201, "content": ""})

        assert exc_info.value.constraint == "max_length"
        assert exc_info.value.message == "Title too long"

    def test_long_content_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_create_input({"title": "ok", "content": "b" * 10_001})

        assert exc_info.value.field == "content"
        assert exc_info.value.message == "Content too long"

    def test_every_violation_reported(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_create_input({"title": "", "content": "b" * 10_001})

        fields = {error["field"] for error in exc_info.value.errors}
        assert fields == {"title", "content"}
        assert exc_info.value.context["errors"] == exc_info.value.errors

    def test_non_string_title_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_create_input({"title": 42})

        assert exc_info.value.constraint == "type"

    @pytest.mark.parametrize("data", [None, "not a dict", ["title"]])
    def test_non_object_input_rejected(self, data):
        with pytest.raises(ValidationError):
            validate_create_input(data)


class TestUpdateValidation:

    def test_only_supplied_fields_are_changes(self):
        payload = validate_update_input({"id": "abc", "content": "new"})

        assert payload.changes() == {"content": "new"}

    def test_null_is_treated_as_absent(self):
        payload = validate_update_input({"id": "abc", "title": None, "content": "x"})

        assert payload.changes() == {"content": "x"}

    def test_empty_content_is_a_change(self):
        assert validate_update_input({"id": "abc", "content": ""}).changes() == {"content": ""}

    def test_no_fields_is_valid(self):
        assert validate_update_input({"id": "abc"}).changes() == {}

    def test_missing_id_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_update_input({"title": "x"})

        assert exc_info.value.field == "id"
        assert exc_info.value.message == "Note ID is required"

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_update_input({"id": "abc", "title": ""})

        assert exc_info.value.field == "title"

    def test_long_title_rejected(self):
        with pytest.raises(ValidationError):
            validate_update_input({"id": "abc", "title": "a" * 201})

    def test_long_content_rejected(self):
        with pytest.raises(ValidationError):
            validate_update_input({"id": "abc", "content": "b" * 10_001})


class TestDeleteValidation:

    def test_valid_input(self):
        assert validate_delete_input({"id": "abc"}).id == "abc"

    @pytest.mark.parametrize("data", [{}, {"id": ""}])
    def test_missing_or_empty_id_rejected(self, data):
        with pytest.raises(ValidationError) as exc_info:
            validate_delete_input(data)

        assert exc_info.value.field == "id"
