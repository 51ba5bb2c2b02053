"""Unit tests for the error to HTTP status mapping."""

import importlib
import warnings

import pytest

import src.api.errors as api_errors
from src.api.errors import http_status_for
from src.services.errors import (
    ActConflictError,
    ActsError,
    InvalidInputError,
    NoBillableTripsError,
    NotFoundError,
    PermissionDeniedError,
)


class TestHttpStatusFor:
    @pytest.mark.parametrize(
        "error, expected",
        [
            (NotFoundError("act not found"), 404),
            (PermissionDeniedError("denied"), 403),
            (InvalidInputError("bad period"), 400),
            (NoBillableTripsError("no trips for selected period"), 422),
            (ActConflictError("taken"), 409),
            (ActsError("boom"), 500),
        ],
    )
    def test_status_codes(self, error, expected):
        assert http_status_for(error) == expected

    def test_subclass_uses_parent_status(self):
        class UnknownPolygonError(NotFoundError):
            pass

        assert http_status_for(UnknownPolygonError("polygon not found")) == 404

    def test_module_import_is_warning_free(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            importlib.reload(api_errors)
