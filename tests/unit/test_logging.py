"""Tests for request-correlated logging."""

import logging

import pytest

from utils.logging import (
    add_request_id,
    clear_request_context,
    set_request_context,
    setup_logging,
)


@pytest.mark.unit
def test_request_id_is_added_while_set():
    set_request_context("req-1")
    try:
        assert add_request_id(None, "info", {"event": "x"}) == {"event": "x", "request_id": "req-1"}
    finally:
        clear_request_context()

    assert add_request_id(None, "info", {"event": "x"}) == {"event": "x"}


@pytest.mark.unit
def test_setup_logging_configures_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("DEBUG", json_output=True)

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
