# ============================================================================
# STRUCTURED LOGGING TESTS
# ============================================================================
# EPOCH: 1 - HEALTH PROBES & RESOURCE LIMITS
# STATUS: Tests - Logging formatters and context
# PURPOSE: Verify JSON/human formatting and per-task context fields
# CREATED: 19 OCT 2026
# ============================================================================
"""
Structured Logging Tests

Run with:
    pytest tests/test_logging.py -v
"""

import asyncio
import json
import logging

from core.logging import (
    ComponentType,
    HumanFormatter,
    StructuredFormatter,
    get_current_context,
    get_logger,
    log_context,
)


def _record(msg="hello", extra=None):
    record = logging.LogRecord(
        name="resources.simulator",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    if extra is not None:
        record.extra = extra
    return record


class TestLogContext:

    def test_nested_context_merges_and_unwinds(self):
        with log_context(operation="allocate"):
            with log_context(indicator="db"):
                context = get_current_context()
                assert context.operation == "allocate"
                assert context.indicator == "db"
            assert get_current_context().indicator is None
        assert get_current_context().to_dict() == {}

    def test_concurrent_tasks_keep_separate_context(self):
        async def run(name):
            with log_context(indicator=name):
                await asyncio.sleep(0.01)
                return get_current_context().indicator

        async def main():
            return await asyncio.gather(*(run(f"i{n}") for n in range(5)))

        assert asyncio.run(main()) == [f"i{n}" for n in range(5)]
        assert get_current_context().indicator is None


class TestFormatters:

    def test_structured_formatter_includes_context(self):
        with log_context(operation="leak"):
            line = StructuredFormatter().format(_record(extra={"units": 3}))
        data = json.loads(line)
        assert data["message"] == "hello"
        assert data["level"] == "INFO"
        assert data["context"] == {"operation": "leak"}
        assert data["data"] == {"units": 3}

    def test_human_formatter_inline_context(self):
        with log_context(operation="free", request_id="r-1"):
            line = HumanFormatter().format(_record())
        assert "[op=free, req=r-1]" in line
        assert line.endswith("resources.simulator [op=free, req=r-1]: hello")


class TestContextLogger:

    def test_component_added_to_extra(self):
        logger = get_logger("test.component", ComponentType.HEALTH)
        msg, kwargs = logger.process("x", {})
        assert kwargs["extra"]["extra"]["component"] == "health"

    def test_context_fields_added_to_extra(self):
        logger = get_logger("test.context")
        with log_context(indicator="externalService"):
            _, kwargs = logger.process("x", {"extra": {"k": "v"}})
        assert kwargs["extra"]["extra"] == {"k": "v", "indicator": "externalService"}
