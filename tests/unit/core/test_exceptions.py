"""
Unit tests for the exception hierarchy
"""

from dataseeder.core.exceptions.custom_exceptions import (
    CircularDependencyError,
    DataProviderError,
    DataSeederError,
    DuplicateSeederError,
    SeederError,
    SeederExecutionError,
    SeederTimeoutError,
    StorageError,
    UnknownSeederError,
)


def test_base_error_defaults():
    error = DataSeederError("Something failed")

    assert error.message == "Something failed"
    assert error.error_code == "DataSeederError"
    assert error.details == {}


def test_base_error_custom_code_and_details():
    error = StorageError("Insert failed", error_code="DB_WRITE", details={"rows": 3})

    assert error.error_code == "DB_WRITE"
    assert error.details == {"rows": 3}
    assert isinstance(error, DataSeederError)


def test_seeder_errors_share_base():
    for error in (
        DuplicateSeederError("a"),
        UnknownSeederError("a"),
        CircularDependencyError(["a"]),
        SeederTimeoutError("A", 1),
        SeederExecutionError("A", ValueError()),
    ):
        assert isinstance(error, SeederError)

    assert not isinstance(DataProviderError("x"), SeederError)


def test_duplicate_seeder_message():
    error = DuplicateSeederError("authors")

    assert error.key == "authors"
    assert "Multiple seeders with key 'authors'" in error.message
    assert error.details == {"key": "authors"}


def test_unknown_seeder_message_with_reason():
    error = UnknownSeederError("books", "factory produced a str")

    assert str(error) == "No seeder registered with key 'books': factory produced a str"


def test_circular_dependency_formats_closed_cycle():
    error = CircularDependencyError(["a", "b", "c"])

    assert error.cycle == ("a", "b", "c")
    assert str(error) == "Circular dependency detected: a -> b -> c -> a"
    assert error.details == {"cycle": ["a", "b", "c"]}


def test_timeout_message():
    error = SeederTimeoutError("AuthorSeeder", 2.5)

    assert str(error) == "Seeder AuthorSeeder timed out after 2.5 seconds"
    assert error.details["timeout_seconds"] == 2.5


def test_execution_error_keeps_cause():
    cause = KeyError("id")
    error = SeederExecutionError("BookSeeder", cause)

    assert error.cause is cause
    assert error.seeder_name == "BookSeeder"
    assert error.details["cause"] == "KeyError"
