# tests/adapters/test_errors.py
import sqlite3

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from marketplace.adapters.api.errors import is_unique_violation, register_exception_handlers


class PgDriverError(Exception):
    """Stands in for a PostgreSQL driver error carrying a SQLSTATE."""

    def __init__(self, message, sqlstate):
        super().__init__(message)
        self.sqlstate = sqlstate


def _integrity(orig):
    return IntegrityError("INSERT INTO orders ...", {}, orig)


@pytest.fixture
def client():
    app = FastAPI()
    register_exception_handlers(app, expose_internal_errors=False)

    @app.get("/duplicate")
    def duplicate():
        raise _integrity(sqlite3.IntegrityError("UNIQUE constraint failed: products.slug"))

    @app.get("/dangling")
    def dangling():
        raise _integrity(sqlite3.IntegrityError("FOREIGN KEY constraint failed"))

    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


class TestUniqueViolation:

    @pytest.mark.parametrize(
        "orig, expected",
        [
            (sqlite3.IntegrityError("UNIQUE constraint failed: products.slug"), True),
            (sqlite3.IntegrityError("FOREIGN KEY constraint failed"), False),
            (sqlite3.IntegrityError("CHECK constraint failed: ck_products_stock_non_negative"), False),
            (PgDriverError("duplicate key value violates unique constraint", "23505"), True),
            (PgDriverError("insert or update violates foreign key constraint", "23503"), False),
            (Exception("(1062, \"Duplicate entry 'solar' for key 'slug'\")"), True),
        ],
    )
    def test_classification(self, orig, expected):
        assert is_unique_violation(_integrity(orig)) is expected


class TestIntegrityErrorResponses:

    def test_unique_clash_is_a_conflict(self, client):
        response = client.get("/duplicate")

        assert response.status_code == 409
        assert response.json() == {"error": "Duplicate entry", "code": "DUPLICATE_ENTRY"}

    def test_other_constraint_failures_are_server_errors(self, client):
        """
        Scenario: A foreign-key violation escapes a use case.
        Expected: Generic 500, not a misleading duplicate-entry conflict.
        """
        response = client.get("/dangling")

        assert response.status_code == 500
        assert response.json() == {"error": "Something went wrong", "code": "INTERNAL_SERVER_ERROR"}
