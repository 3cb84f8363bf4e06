import logging

from sqlalchemy import inspect

from app.init_db import init_db
from app.logging_config import SafeRequestIDFormatter
from app.utils.logger import clear_request_context, get_logger, set_request_context, set_user_context


def test_init_db_creates_tables():
    database = init_db("sqlite://")
    try:
        tables = set(inspect(database.engine).get_table_names())
        assert {"users", "streaks", "journal_entries", "public_profiles"} <= tables
    finally:
        database.dispose()


def test_logger_attaches_request_context(caplog):
    logger = get_logger("streaker.tests")
    set_request_context("req-42")
    set_user_context("user-9")
    try:
        with caplog.at_level(logging.INFO, logger="streaker.tests"):
            logger.info("ledger updated")
    finally:
        clear_request_context()

    record = caplog.records[-1]
    assert record.request_id == "req-42"
    assert record.user_id == "user-9"


def test_explicit_user_id_overrides_context(caplog):
    logger = get_logger("streaker.tests")
    with caplog.at_level(logging.INFO, logger="streaker.tests"):
        logger.info("migrated", user_id="user-3")

    assert caplog.records[-1].user_id == "user-3"
    assert not hasattr(caplog.records[-1], "request_id")


def test_formatter_fills_missing_context():
    record = logging.LogRecord("app", logging.INFO, __file__, 1, "hello", None, None)
    formatted = SafeRequestIDFormatter("[%(request_id)s] [user=%(user_id)s] %(message)s").format(record)
    assert formatted == "[no-request-id] [user=-] hello"
