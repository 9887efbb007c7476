"""Property-based tests for structured logging."""

import json

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from src.utils.logger import StructuredLogger


def _last_entry(capsys):
    lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
    return json.loads(lines[-1]) if lines else None


class TestLoggerJSONFormat:
    """Tests for JSON log format compliance."""

    @settings(suppress_health_check=[HealthCheck.function_scoped_fixture])
    @given(
        level=st.sampled_from(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
        message=st.text(min_size=1),
        context=st.dictionaries(
            st.text(min_size=1, max_size=20).filter(lambda x: x[0].isalpha()),
            st.one_of(st.text(), st.integers(), st.booleans()),
            max_size=5,
        ),
    )
    def test_log_entries_have_required_fields(self, capsys, level, message, context):
        """
        For any log entry written, the output is one JSON object with
        timestamp, level, component and message, and the given context.
        """
        capsys.readouterr()
        logger = StructuredLogger("PriceFetcher", level="DEBUG")
        logger.log(level, message, context or None)

        entry = _last_entry(capsys)

        assert entry["level"] == level
        assert entry["component"] == "PriceFetcher"
        assert entry["message"] == message
        assert entry["timestamp"].endswith("Z")
        assert "T" in entry["timestamp"]
        if context:
            assert entry["context"] == context
        else:
            assert "context" not in entry

    def test_error_entries_include_exception_details(self, capsys):
        logger = StructuredLogger("PriceFetcher")
        try:
            raise ConnectionError("relay unreachable")
        except ConnectionError as e:
            logger.error("All endpoints failed", exception=e)

        entry = _last_entry(capsys)

        assert entry["exception"]["type"] == "ConnectionError"
        assert entry["exception"]["message"] == "relay unreachable"
        assert "raise ConnectionError" in entry["exception"]["stack_trace"]

    def test_warning_may_carry_exception(self, capsys):
        StructuredLogger("PerformanceStore").warning(
            "Ignoring unreadable blob", exception=ValueError("bad json")
        )
        assert _last_entry(capsys)["exception"]["type"] == "ValueError"

    def test_entries_below_threshold_are_dropped(self, capsys):
        logger = StructuredLogger("TrackerService", level="WARNING")
        logger.info("hidden")
        logger.debug("hidden")

        assert _last_entry(capsys) is None

    def test_unknown_level_logs_as_info(self, capsys):
        StructuredLogger("TrackerService", level="INFO").log("verbose", "hello")
        assert _last_entry(capsys)["level"] == "INFO"

    def test_writes_to_file(self, tmp_path, capsys):
        log_file = tmp_path / "logs" / "tracker.log"
        StructuredLogger("TrackerService", file_path=str(log_file)).info("saved")

        entry = json.loads(log_file.read_text().strip())
        assert entry["message"] == "saved"
