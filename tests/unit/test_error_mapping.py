"""
Domain error to HTTP status translation.
"""
import pytest

from backend.app.api.deps import to_http_exception
from backend.app.core.exceptions import (
    BreachWorkflowError, ConflictError, FieldValidationError, InvalidArgumentError,
    NotFoundError, UnknownNotificationTypeError,
)


@pytest.mark.parametrize("error,status_code", [
    (FieldValidationError("Missing required fields: severity"), 400),
    (InvalidArgumentError("Invalid status"), 400),
    (UnknownNotificationTypeError("carrier_pigeon"), 400),
    (NotFoundError("Breach incident 9 not found"), 404),
    (ConflictError("A team member with this email already exists"), 409),
    (BreachWorkflowError("unexpected"), 500),
])
def test_status_codes(error, status_code):
    exc = to_http_exception(error)
    assert exc.status_code == status_code
    assert exc.detail == str(error)


def test_unknown_type_message():
    assert str(UnknownNotificationTypeError("carrier_pigeon")) == "Unknown notification type: carrier_pigeon"
