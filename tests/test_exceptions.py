import json

import pytest

from aigateway_console.exceptions import (
    INTERNAL_ERROR,
    INVALID_PARAMETER_VALUE,
    AlreadyExistsError,
    ConsoleException,
    IncompleteGraphError,
    NotFoundError,
    StoreError,
    UnrecognizedResourceError,
    ValidationError,
)


def test_console_exception_serialization():
    exc = ConsoleException("Something broke", error_code=INVALID_PARAMETER_VALUE, extra="x")

    assert exc.get_http_status_code() == 400
    assert json.loads(exc.serialize_as_json()) == {
        "error_code": "INVALID_PARAMETER_VALUE",
        "message": "Something broke",
        "extra": "x",
    }


def test_unknown_error_code_becomes_internal_error():
    exc = ConsoleException("oops", error_code="NOT_A_CODE")
    assert exc.error_code == INTERNAL_ERROR
    assert exc.get_http_status_code() == 500


def test_invalid_parameter_value():
    exc = ConsoleException.invalid_parameter_value("bad port", field="port")
    assert exc.error_code == INVALID_PARAMETER_VALUE
    assert exc.to_dict()["field"] == "port"


@pytest.mark.parametrize(
    ("exc", "status", "extra"),
    [
        (NotFoundError("gone", kind="Backend"), 404, {"kind": "Backend"}),
        (
            AlreadyExistsError("dup", kind="Secret", name="openai-1"),
            409,
            {"kind": "Secret", "name": "openai-1"},
        ),
        (StoreError("boom", kind="BackendTLSPolicy"), 500, {"kind": "BackendTLSPolicy"}),
        (
            IncompleteGraphError("partial", missing=["Backend"]),
            500,
            {"missing": ["Backend"]},
        ),
        (UnrecognizedResourceError("what"), 500, {}),
        (ValidationError("invalid", field="name"), 400, {"field": "name"}),
    ],
)
def test_error_kinds(exc, status, extra):
    assert isinstance(exc, ConsoleException)
    assert exc.get_http_status_code() == status
    body = exc.to_dict()
    assert {k: v for k, v in body.items() if k not in ("error_code", "message")} == extra


def test_optional_details_are_omitted():
    assert NotFoundError("gone").to_dict() == {
        "error_code": "RESOURCE_DOES_NOT_EXIST",
        "message": "gone",
    }
    assert IncompleteGraphError("partial").missing == []
