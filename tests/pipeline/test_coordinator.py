"""
Tests for PipelineCoordinator.

Covers publication of complete snapshots, cancellation, failure and
timeout handling, progress reporting and the long table layout.
"""

import threading

import pytest

from groupstats.core.exceptions import (
    ColumnNotFoundError,
    ControlGroupNotFoundError,
    FormatError,
    PipelineTimeoutError,
    ValidationError,
)
from groupstats.core.progress import CancellationToken
from groupstats.pipeline import (
    AnalysisRequest,
    AnalysisResult,
    PipelineCoordinator,
    RunOutcome,
)

WIDE_REQUEST = AnalysisRequest.wide('group', 'Control', ['height', 'weight'])

LONG_CSV = (
    "group,measure,value\n"
    "Control,height,1.0\n"
    "Control,height,2.0\n"
    "Test,height,3.0\n"
    "Test,height,5.0\n"
    "Control,weight,10.0\n"
    "Test,weight,11.0\n"
    "Control,weight,12.0\n"
    "Test,weight,13.0\n"
)


def _wide_csv(n=60, shift=0.0):
    lines = ["group,height,weight"]
    for i in range(n):
        group = ('Control', 'Test_A', 'Test_B')[i % 3]
        bump = 3.0 if group == 'Test_B' else 0.0
        lines.append(f"{group},{(i % 7) + bump + shift},{50 + (i % 11)}")
    return "\n".join(lines) + "\n"


@pytest.fixture
def wide_path(write_csv):
    return write_csv(_wide_csv(), name="wide.csv")


# =====================================================================
# Successful calls
# =====================================================================


class TestRun:

    def test_run_publishes_table_and_result(self, wide_path):
        coordinator = PipelineCoordinator(max_workers=2)
        assert coordinator.run(wide_path, WIDE_REQUEST) is RunOutcome.COMPLETED
        state = coordinator.state
        assert state.generation == 1
        assert state.table.n_rows == 60
        result = state.result
        assert isinstance(result, AnalysisResult)
        assert list(result) == ['height', 'weight']
        assert result.group_sizes == {'Control': 20, 'Test_A': 20, 'Test_B': 20}

    def test_result_contents(self, wide_path):
        coordinator = PipelineCoordinator()
        coordinator.run(wide_path, WIDE_REQUEST)
        height = coordinator.result['height']
        assert list(height) == ['Control', 'Test_A', 'Test_B']
        test_b = height['Test_B']
        assert test_b.record.significant
        assert test_b.geometry.plottable
        assert test_b.geometry.n == test_b.record.n == 20
        assert height.chart.display_order == ('Control', 'Test_A', 'Test_B')
        assert height.has_significant_results()
        assert coordinator.result.stats['Test_B', 'height'] is test_b.record
        assert "height (control: Control)" in coordinator.result.summary()

    def test_byte_order_mark_file(self, write_csv):
        path = write_csv(b"\xef\xbb\xbf" + _wide_csv().encode("utf-8"), name="bom.csv")
        coordinator = PipelineCoordinator()
        assert coordinator.run(path, WIDE_REQUEST) is RunOutcome.COMPLETED
        assert coordinator.table.column_names == ('group', 'height', 'weight')
        assert list(coordinator.result) == ['height', 'weight']

    def test_load_then_analyze(self, wide_path):
        coordinator = PipelineCoordinator()
        assert coordinator.load(wide_path) is RunOutcome.COMPLETED
        assert coordinator.result is None
        assert coordinator.analyze(WIDE_REQUEST) is RunOutcome.COMPLETED
        assert coordinator.state.generation == 2
        assert coordinator.result.request == WIDE_REQUEST
        assert 'columns' in coordinator.result.timing

    def test_reanalyze_same_table(self, wide_path):
        coordinator = PipelineCoordinator()
        coordinator.load(wide_path)
        table = coordinator.table
        coordinator.analyze(WIDE_REQUEST)
        coordinator.analyze(AnalysisRequest.wide('group', 'Test_A', ['weight']))
        assert coordinator.table is table
        assert list(coordinator.result) == ['weight']
        assert coordinator.result.control_key == 'Test_A'

    def test_analyze_without_table(self):
        with pytest.raises(ValidationError, match="No table"):
            PipelineCoordinator().analyze(WIDE_REQUEST)

    def test_new_load_drops_result(self, wide_path, write_csv):
        coordinator = PipelineCoordinator()
        coordinator.run(wide_path, WIDE_REQUEST)
        coordinator.load(write_csv(_wide_csv(shift=1.0), name="other.csv"))
        assert coordinator.result is None
        assert coordinator.state.generation == 2


class TestLongLayout:

    def test_types_become_columns(self, write_csv):
        coordinator = PipelineCoordinator()
        request = AnalysisRequest.long(
            'group', 'Control', type_column='measure', value_column='value',
        )
        assert coordinator.run(write_csv(LONG_CSV), request) is RunOutcome.COMPLETED
        result = coordinator.result
        assert list(result) == ['height', 'weight']
        assert result['height']['Control'].record.mean == pytest.approx(1.5)
        assert result['height']['Test'].record.mean == pytest.approx(4.0)
        assert result['weight']['Test'].record.mean == pytest.approx(12.0)
        assert result['weight']['Control'].record.column == 'weight'

    def test_subset_of_types(self, write_csv):
        coordinator = PipelineCoordinator()
        request = AnalysisRequest.long(
            'group', 'Control', type_column='measure', value_column='value',
            data_types=['weight'],
        )
        coordinator.run(write_csv(LONG_CSV), request)
        assert list(coordinator.result) == ['weight']

    def test_unknown_type(self, write_csv):
        coordinator = PipelineCoordinator()
        request = AnalysisRequest.long(
            'group', 'Control', type_column='measure', value_column='value',
            data_types=['length'],
        )
        with pytest.raises(ColumnNotFoundError):
            coordinator.run(write_csv(LONG_CSV), request)
        assert coordinator.state.generation == 0

    def test_group_missing_from_one_type(self, write_csv):
        text = LONG_CSV + "Other,height,7.0\nOther,height,8.0\n"
        coordinator = PipelineCoordinator()
        request = AnalysisRequest.long(
            'group', 'Control', type_column='measure', value_column='value',
        )
        coordinator.run(write_csv(text), request)
        other = coordinator.result['weight']['Other']
        assert other.record.n == 0
        assert not other.geometry.plottable


# =====================================================================
# Failures keep the previous snapshot
# =====================================================================


class TestFailures:

    def test_bad_file_keeps_table(self, wide_path, write_csv):
        coordinator = PipelineCoordinator()
        coordinator.run(wide_path, WIDE_REQUEST)
        before = coordinator.state
        with pytest.raises(FormatError):
            coordinator.load(write_csv("g,g\na,1\n", name="bad.csv"))
        assert coordinator.state is before

    def test_bad_control_keeps_result(self, wide_path):
        coordinator = PipelineCoordinator()
        coordinator.run(wide_path, WIDE_REQUEST)
        before = coordinator.state
        with pytest.raises(ControlGroupNotFoundError):
            coordinator.analyze(AnalysisRequest.wide('group', 'Placebo', ['height']))
        assert coordinator.state is before

    def test_bad_column_keeps_result(self, wide_path):
        coordinator = PipelineCoordinator()
        coordinator.run(wide_path, WIDE_REQUEST)
        before = coordinator.state
        with pytest.raises(ColumnNotFoundError):
            coordinator.analyze(AnalysisRequest.wide('group', 'Control', ['height', 'nope']))
        assert coordinator.state is before

    def test_task_error_propagates_unchanged(self, wide_path, monkeypatch):
        coordinator = PipelineCoordinator()
        coordinator.load(wide_path)

        def broken(design):
            raise RuntimeError(f"boom in {design.column}")

        monkeypatch.setattr(coordinator._engine, 'solve_column', broken)
        token = CancellationToken()
        with pytest.raises(RuntimeError, match="boom"):
            coordinator.analyze(WIDE_REQUEST, cancel=token)
        assert coordinator.result is None
        assert not token.cancelled

    def test_callers_token_untouched_on_error(self, write_csv):
        token = CancellationToken()
        with pytest.raises(FormatError):
            PipelineCoordinator().load(write_csv("g,\na,1\n"), cancel=token)
        assert not token.cancelled

    def test_invalid_settings(self):
        with pytest.raises(ValidationError, match="max_workers"):
            PipelineCoordinator(max_workers=0)
        with pytest.raises(ValidationError, match="timeout"):
            PipelineCoordinator(timeout=0)
        with pytest.raises(ValidationError, match="poll_interval"):
            PipelineCoordinator(poll_interval=-1.0)


# =====================================================================
# Cancellation and timeout
# =====================================================================


class TestCancellation:

    def test_cancelled_token_before_start(self, wide_path):
        token = CancellationToken()
        token.cancel()
        coordinator = PipelineCoordinator()
        assert coordinator.run(wide_path, WIDE_REQUEST, cancel=token) is RunOutcome.CANCELLED
        assert coordinator.state.generation == 0

    def test_cancel_mid_load_keeps_previous_table(self, wide_path, write_csv):
        coordinator = PipelineCoordinator()
        coordinator.load(wide_path)
        before = coordinator.state
        big = write_csv(_wide_csv(n=3000), name="big.csv")

        def on_progress(event):
            if event.phase == 'load' and event.fraction > 0.0:
                coordinator.cancel()

        outcome = coordinator.load(big, progress=on_progress)
        assert outcome is RunOutcome.CANCELLED
        assert coordinator.state is before

    def test_cancel_during_compute(self, wide_path):
        coordinator = PipelineCoordinator()
        coordinator.load(wide_path)
        token = CancellationToken()

        def on_progress(event):
            if event.phase == 'compute':
                token.cancel()

        outcome = coordinator.analyze(WIDE_REQUEST, progress=on_progress, cancel=token)
        assert outcome is RunOutcome.CANCELLED
        assert coordinator.result is None

    def test_table_replaced_during_analysis(self, wide_path, write_csv):
        coordinator = PipelineCoordinator()
        coordinator.load(wide_path)
        other = write_csv(_wide_csv(shift=1.0), name="other.csv")
        replaced = []

        def on_progress(event):
            if event.phase == 'compute' and not replaced:
                replaced.append(coordinator.load(other))

        outcome = coordinator.analyze(WIDE_REQUEST, progress=on_progress)
        assert replaced == [RunOutcome.COMPLETED]
        assert outcome is RunOutcome.CANCELLED
        assert coordinator.result is None
        assert coordinator.state.generation == 2

    def test_timeout(self, wide_path, monkeypatch):
        coordinator = PipelineCoordinator(timeout=0.1, poll_interval=0.01)
        stopped = threading.Event()

        def slow_load(source, progress=None, cancel=None):
            cancel.wait(5.0)
            stopped.set()
            cancel.raise_if_cancelled('load')

        monkeypatch.setattr(coordinator._loader, 'load', slow_load)
        token = CancellationToken()
        with pytest.raises(PipelineTimeoutError) as exc_info:
            coordinator.load(wide_path, cancel=token)
        assert exc_info.value.phase == 'load'
        assert stopped.wait(5.0)
        assert not token.cancelled
        assert coordinator.table is None


# =====================================================================
# Progress and caching
# =====================================================================


class TestProgress:

    def test_monotonic_per_phase(self, wide_path):
        events = []
        PipelineCoordinator(progress=events.append).run(wide_path, WIDE_REQUEST)
        phases = []
        for event in events:
            if not phases or phases[-1] != event.phase:
                phases.append(event.phase)
        assert phases == ['load', 'compute']
        for phase in phases:
            fractions = [e.fraction for e in events if e.phase == phase]
            assert fractions == sorted(fractions)
            assert fractions[-1] == 1.0

    def test_per_call_callback_overrides_default(self, wide_path):
        default, specific = [], []
        coordinator = PipelineCoordinator(progress=default.append)
        coordinator.load(wide_path, progress=specific.append)
        assert specific and not default


class TestIndexCache:

    def test_index_reused(self, wide_path):
        coordinator = PipelineCoordinator()
        coordinator.run(wide_path, WIDE_REQUEST)
        index = coordinator.group_index('group')
        assert coordinator.group_index('group') is index
        assert list(index) == ['Control', 'Test_A', 'Test_B']

    def test_index_rebuilt_for_new_table(self, wide_path, write_csv):
        coordinator = PipelineCoordinator()
        coordinator.load(wide_path)
        index = coordinator.group_index('group')
        coordinator.load(write_csv(_wide_csv(shift=1.0), name="other.csv"))
        assert coordinator.group_index('group') is not index

    def test_group_index_without_table(self):
        with pytest.raises(ValidationError):
            PipelineCoordinator().group_index('group')
