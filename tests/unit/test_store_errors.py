from postgrest.exceptions import APIError

from backend.infra.errors import (
    classify_store_error,
    is_auth_error,
    StoreError,
    StoreAuthError,
    DuplicateKeyError,
    MissingWriteCredential,
)


def test_api_error_permission_denied_is_auth_error():
    exc = APIError({"message": "permission denied for table orders", "code": "42501", "hint": None, "details": None})
    classified = classify_store_error(exc)
    assert isinstance(classified, StoreAuthError)
    assert classified.code == "42501"


def test_api_error_unique_violation():
    exc = APIError({"message": "duplicate key value", "code": "23505", "hint": None, "details": None})
    assert isinstance(classify_store_error(exc), DuplicateKeyError)


def test_api_error_other_code_is_retryable():
    exc = APIError({"message": "canceling statement due to statement timeout", "code": "57014", "hint": None, "details": None})
    classified = classify_store_error(exc)
    assert type(classified) is StoreError
    assert not is_auth_error(exc)


def test_untyped_errors_fall_back_to_message():
    assert isinstance(classify_store_error(Exception("401 Unauthorized")), StoreAuthError)
    assert isinstance(classify_store_error(Exception("Invalid API key")), StoreAuthError)
    assert type(classify_store_error(TimeoutError("read timeout"))) is StoreError


def test_missing_write_credential_is_not_retryable():
    assert is_auth_error(MissingWriteCredential("SUPABASE_SERVICE_KEY manquant"))
