"""
Tests for the groupstats exception hierarchy.

Validates:
    - Inheritance chain (all library errors catchable via GroupStatsError)
    - Diagnostic attributes on every error carrying context
    - OperationCancelled is deliberately outside the hierarchy
"""

import pytest

from groupstats.core.exceptions import (
    ColumnNotFoundError,
    ControlGroupNotFoundError,
    EmptyInputError,
    FormatError,
    GroupStatsError,
    InsufficientDataError,
    OperationCancelled,
    PipelineTimeoutError,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Inheritance hierarchy
# ═══════════════════════════════════════════════════════════════════════


class TestInheritance:
    """Every library error is catchable via GroupStatsError."""

    @pytest.mark.parametrize("error", [
        ValidationError("bad input"),
        FormatError("bad row"),
        EmptyInputError("no rows"),
        ColumnNotFoundError("missing", column="x"),
        ControlGroupNotFoundError("missing", control_key="Control"),
        InsufficientDataError("too few", group="A", column="x", n=1),
        PipelineTimeoutError("slow", phase="load", timeout=1.0),
    ])
    def test_is_groupstats_error(self, error):
        with pytest.raises(GroupStatsError):
            raise error

    def test_cancellation_is_not_an_error(self):
        assert not isinstance(OperationCancelled("load"), GroupStatsError)


# ═══════════════════════════════════════════════════════════════════════
# Diagnostic attributes
# ═══════════════════════════════════════════════════════════════════════


class TestAttributes:

    def test_format_error_defaults(self):
        e = FormatError("bad")
        assert e.row_number is None
        assert e.column is None
        assert e.skipped_rows is None
        assert str(e) == "bad"

    def test_format_error_row(self):
        e = FormatError("bad", row_number=7, column="x", skipped_rows=3)
        assert (e.row_number, e.column, e.skipped_rows) == (7, "x", 3)

    def test_empty_input_skipped_rows(self):
        assert EmptyInputError("none").skipped_rows == 0
        assert EmptyInputError("none", skipped_rows=4).skipped_rows == 4

    def test_column_not_found(self):
        e = ColumnNotFoundError("missing", column="z", available=["a", "b"],
                                expected_kind="numeric")
        assert e.column == "z"
        assert e.available == ("a", "b")
        assert e.expected_kind == "numeric"

    def test_control_group_not_found(self):
        e = ControlGroupNotFoundError("missing", control_key="C", available=["A"])
        assert e.control_key == "C"
        assert e.available == ("A",)

    def test_insufficient_data(self):
        e = InsufficientDataError("few", group="A", column="x", n=1)
        assert (e.group, e.column, e.n, e.required) == ("A", "x", 1, 2)

    def test_timeout(self):
        e = PipelineTimeoutError("slow", phase="compute", timeout=2.5)
        assert e.phase == "compute"
        assert e.timeout == 2.5

    def test_cancelled_phase_in_message(self):
        e = OperationCancelled("load")
        assert e.phase == "load"
        assert "load" in str(e)
