"""Tests for batch correlation context helpers."""

import structlog

from event_trust.utils.logging import (
    bind_batch_context,
    clear_batch_context,
    get_correlation_id,
)


class TestBatchContext:
    def test_generates_distinct_ids(self):
        assert get_correlation_id() != get_correlation_id()

    def test_bind_and_clear(self):
        correlation_id = bind_batch_context()
        try:
            assert structlog.contextvars.get_contextvars()["correlation_id"] == correlation_id
        finally:
            clear_batch_context()

        assert "correlation_id" not in structlog.contextvars.get_contextvars()

    def test_reuses_given_id(self):
        try:
            assert bind_batch_context("batch-42") == "batch-42"
        finally:
            clear_batch_context()
