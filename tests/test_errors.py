"""Test the exception taxonomy."""

import pytest

from kv_model import errors


@pytest.mark.parametrize(
    "error, builtin",
    [
        (errors.NotFoundError("x"), LookupError),
        (errors.MultipleRecordsFoundError("x"), LookupError),
        (errors.NoMatchingIndexError("age", "eq"), ValueError),
        (errors.MissingIdentityError("id"), ValueError),
        (errors.UniqueConstraintViolation("email", "a@x.com"), ValueError),
        (errors.UnsupportedEncodingError("tags", []), TypeError),
        (errors.UnsupportedDeleteQueryError("x"), ValueError),
        (errors.StoreError("x"), OSError),
    ],
)
def test_errors_derive_from_model_error_and_builtin(error, builtin):
    """Test that every error can be caught as ModelError or as its builtin."""
    assert isinstance(error, errors.ModelError)
    assert isinstance(error, builtin)


def test_error_messages_name_fields():
    """Test that errors name the offending field."""
    assert str(errors.NoMatchingIndexError("age", "eq")) == "For query type 'eq', field 'age' does not match any indexes"
    assert str(errors.MissingIdentityError("uuid")) == "Record has no value for identity field 'uuid'"
    assert "'email'" in str(errors.UniqueConstraintViolation("email", "a@x.com"))
    assert str(errors.UnsupportedEncodingError("tags", [1])) == "Unhandled type 'list' for field 'tags'"
    assert str(errors.UnsupportedEncodingError("n", -1, "negative")) == "Unhandled type 'int' for field 'n': negative"


def test_error_attributes():
    """Test structured error attributes."""
    error = errors.UniqueConstraintViolation("email", "a@x.com")
    assert (error.field_name, error.value) == ("email", "a@x.com")
    error = errors.NoMatchingIndexError("age", "eq")
    assert (error.field_name, error.type) == ("age", "eq")
