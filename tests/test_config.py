"""
Env-driven assignment config helpers and the error-to-HTTP mapping.
"""
from booking_engine.core import assignment_config
from booking_engine.core.errors import (
    AllCandidatesConflicted,
    BookingNotFound,
    MSG_STORAGE_UNAVAILABLE,
    StorageUnavailable,
    engine_error_to_http,
)


def test_int_clamps_and_falls_back(monkeypatch):
    monkeypatch.setenv("X_TEST_INT", "500")
    assert assignment_config._int("X_TEST_INT", 5, min_val=1, max_val=60) == 60
    monkeypatch.setenv("X_TEST_INT", "0")
    assert assignment_config._int("X_TEST_INT", 5, min_val=1) == 1
    monkeypatch.setenv("X_TEST_INT", "soon")
    assert assignment_config._int("X_TEST_INT", 5) == 5
    monkeypatch.delenv("X_TEST_INT")
    assert assignment_config._int("X_TEST_INT", 7) == 7


def test_bool(monkeypatch):
    for raw, expected in [("0", False), ("false", False), ("Off", False), ("1", True), ("yes", True), ("", True)]:
        monkeypatch.setenv("X_TEST_BOOL", raw)
        assert assignment_config._bool("X_TEST_BOOL", True) is expected


def test_unknown_timezone_falls_back(monkeypatch):
    monkeypatch.setenv("X_TEST_TZ", "Mars/Olympus_Mons")
    assert assignment_config._timezone("X_TEST_TZ", "Europe/Berlin") == "Europe/Berlin"
    monkeypatch.setenv("X_TEST_TZ", "America/New_York")
    assert assignment_config._timezone("X_TEST_TZ", "Europe/Berlin") == "America/New_York"


def test_env_disables_scheduler():
    # conftest sets ASSIGNMENT_ENABLED=0 before import
    assert assignment_config.get_assignment_config().enabled is False


def test_engine_errors_map_to_http():
    assert engine_error_to_http(StorageUnavailable("pool exhausted")).status_code == 503
    assert engine_error_to_http(StorageUnavailable("pool exhausted")).detail == MSG_STORAGE_UNAVAILABLE
    not_found = engine_error_to_http(BookingNotFound(5))
    assert (not_found.status_code, not_found.detail) == (404, "Booking 5 not found")
    assert engine_error_to_http(AllCandidatesConflicted(5, [1, 2])).status_code == 500
