"""Property-based tests for trace context management."""

import uuid

from hypothesis import given
from hypothesis import strategies as st

from src.utils.trace_context import get_current_trace, traced


class TestTraceContext:
    def test_no_trace_outside_a_run(self):
        assert get_current_trace() is None

    def test_generated_trace_is_uuid_and_cleared_afterwards(self):
        with traced() as trace_id:
            assert get_current_trace() == trace_id
            uuid.UUID(trace_id)

        assert get_current_trace() is None

    @given(trace_id=st.uuids().map(str))
    def test_explicit_trace_is_used(self, trace_id):
        with traced(trace_id) as active:
            assert active == trace_id
            assert get_current_trace() == trace_id
        assert get_current_trace() is None

    def test_nested_block_reuses_enclosing_trace(self):
        with traced() as outer:
            with traced() as inner:
                assert inner == outer
            assert get_current_trace() == outer

    def test_trace_restored_after_exception(self):
        try:
            with traced():
                raise RuntimeError("fetch aborted")
        except RuntimeError:
            pass

        assert get_current_trace() is None

    @given(runs=st.integers(min_value=2, max_value=5))
    def test_separate_runs_get_distinct_traces(self, runs):
        traces = []
        for _ in range(runs):
            with traced() as trace_id:
                traces.append(trace_id)
        assert len(set(traces)) == runs
