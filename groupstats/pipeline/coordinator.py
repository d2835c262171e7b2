"""
PipelineCoordinator: load -> index -> statistics -> geometry -> publish.

The coordinator owns the current table and the results derived from it.
Every call builds its output off to the side and publishes it with a
single assignment under a lock, so readers only ever see a complete
snapshot: a call that fails or is cancelled leaves the previous snapshot
current.

Work runs on a ThreadPoolExecutor: the load as one task, the analysis as
one task per data column over the immutable table and group index. The
calling thread polls the futures so cancellation and the timeout are
noticed within `poll_interval`.

Usage:
    coordinator = PipelineCoordinator(max_workers=4)
    outcome = coordinator.run("runs.csv", AnalysisRequest.wide(
        'group', 'Control', ['height', 'weight']))
    if outcome is RunOutcome.COMPLETED:
        print(coordinator.result.summary())

    # From another thread:
    coordinator.cancel()
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Callable, Sequence, TypeVar

from groupstats.charts.builder import ChartGeometryBuilder, build_column_chart
from groupstats.core.compute.timing import Timer
from groupstats.core.config import LoaderConfig
from groupstats.core.exceptions import (
    ColumnNotFoundError,
    OperationCancelled,
    PipelineTimeoutError,
    ValidationError,
)
from groupstats.core.progress import CancellationToken, ProgressCallback, ProgressReporter
from groupstats.grouping.index import GroupIndex
from groupstats.pipeline.request import LONG, AnalysisRequest
from groupstats.pipeline.result import (
    AnalysisResult,
    ColumnResult,
    PipelineState,
    RunOutcome,
)
from groupstats.stats.design import ColumnDesign, check_control
from groupstats.stats.solvers import StatsEngine
from groupstats.table.loader import TableLoader
from groupstats.table.table import Table
from groupstats.table._reader import Source, describe_source
from groupstats.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

LOAD = 'load'
COMPUTE = 'compute'


@dataclass(frozen=True)
class _ColumnPlan:
    """One unit of analysis: a label, its numeric column and its rows."""
    label: str
    source_column: str
    index: GroupIndex


@dataclass(eq=False)
class _Call:
    """
    Bookkeeping of one public call.

    `caller` is the token the caller may cancel; `work` is the token the
    tasks check. Errors and timeouts stop the tasks through `work` without
    touching a token the caller may reuse.
    """
    caller: CancellationToken
    progress: ProgressCallback | None
    work: CancellationToken = field(default_factory=CancellationToken)
    # Group indices built during this call, keyed by column name
    indices: dict[str, GroupIndex] = field(default_factory=dict)

    def check(self, phase: str) -> None:
        if self.caller.cancelled:
            self.work.cancel()
        self.work.raise_if_cancelled(phase)


class PipelineCoordinator:
    """
    Runs the pipeline and publishes its snapshots.

    Parameters
    ----------
    loader_config : LoaderConfig, optional
        How sources are read.
    max_workers : int, optional
        Threads for per-column tasks; None lets the executor decide.
    timeout : float, optional
        Seconds one phase may run before PipelineTimeoutError.
    poll_interval : float
        Seconds between cancellation/timeout checks while waiting.
    progress : callable, optional
        Default observer of ProgressEvents for every call.
    """

    def __init__(
        self,
        loader_config: LoaderConfig | None = None,
        *,
        max_workers: int | None = None,
        timeout: float | None = None,
        poll_interval: float = 0.05,
        progress: ProgressCallback | None = None,
    ):
        if max_workers is not None and (
            isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1
        ):
            raise ValidationError(f"max_workers: must be a positive integer, got {max_workers!r}")
        if timeout is not None and not timeout > 0:
            raise ValidationError(f"timeout: must be positive, got {timeout!r}")
        if not poll_interval > 0:
            raise ValidationError(f"poll_interval: must be positive, got {poll_interval!r}")
        self._loader = TableLoader(loader_config)
        self._engine = StatsEngine()
        self._builder = ChartGeometryBuilder()
        self._max_workers = max_workers
        self._timeout = timeout
        self._poll_interval = poll_interval
        self._progress = progress

        self._lock = threading.Lock()
        self._state = PipelineState()
        # Group indices of the published table, keyed by column name
        self._indices: dict[str, GroupIndex] = {}
        self._active: list[_Call] = []

    # --- Published state ---

    @property
    def state(self) -> PipelineState:
        with self._lock:
            return self._state

    @property
    def table(self) -> Table | None:
        return self.state.table

    @property
    def result(self) -> AnalysisResult | None:
        return self.state.result

    def cancel(self) -> None:
        """Cancel every call currently running. Idempotent."""
        with self._lock:
            calls = list(self._active)
        for call in calls:
            call.caller.cancel()

    # --- Operations ---

    def load(
        self,
        source: Source,
        *,
        progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> RunOutcome:
        """
        Load `source` and publish it as the current table.

        Previous results are dropped with the previous table.

        Raises:
            FormatError, EmptyInputError: From the loader
            PipelineTimeoutError: The load exceeded `timeout`
        """
        with self._call(cancel, progress) as call:
            try:
                table = self._load(source, call)
            except OperationCancelled:
                logger.info(
                    "Load of %s cancelled; keeping the previous table", describe_source(source)
                )
                return RunOutcome.CANCELLED
            self._publish(table, None, call)
        return RunOutcome.COMPLETED

    def analyze(
        self,
        request: AnalysisRequest,
        *,
        progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> RunOutcome:
        """
        Compute `request` on the current table and publish the result.

        Raises:
            ValidationError: No table has been loaded
            ColumnNotFoundError, ControlGroupNotFoundError: Bad request
            PipelineTimeoutError: The computation exceeded `timeout`
        """
        table = self.table
        if table is None:
            raise ValidationError("No table loaded; call load() before analyze()")
        with self._call(cancel, progress) as call:
            try:
                result = self._analyze(table, request, call)
            except OperationCancelled:
                logger.info("Analysis cancelled; keeping the previous results")
                return RunOutcome.CANCELLED
            if not self._publish(table, result, call, expect_table=table):
                logger.info("Table replaced during analysis; result discarded")
                return RunOutcome.CANCELLED
        return RunOutcome.COMPLETED

    def run(
        self,
        source: Source,
        request: AnalysisRequest,
        *,
        progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
    ) -> RunOutcome:
        """
        Load `source`, compute `request` on it, and publish both at once.

        Nothing is published unless both phases complete.
        """
        with self._call(cancel, progress) as call:
            try:
                table = self._load(source, call)
                result = self._analyze(table, request, call)
            except OperationCancelled as e:
                logger.info("Run cancelled during %s; keeping the previous snapshot", e.phase)
                return RunOutcome.CANCELLED
            self._publish(table, result, call)
        return RunOutcome.COMPLETED

    def group_index(self, group_column: str) -> GroupIndex:
        """Index of the current table by `group_column`, built once per table."""
        table = self.table
        if table is None:
            raise ValidationError("No table loaded; call load() first")
        index = self._index_for(table, group_column, {})
        with self._lock:
            if table is self._state.table:
                self._indices.setdefault(group_column, index)
        return index

    # --- Phases ---

    def _load(self, source: Source, call: _Call) -> Table:
        name = describe_source(source)
        logger.info("Loading %s", name)
        call.check(LOAD)
        table = self._await_one(
            lambda: self._loader.load(source, progress=call.progress, cancel=call.work),
            call,
            LOAD,
        )
        logger.info("Loaded %s (%d rows)", name, table.n_rows)
        return table

    def _analyze(self, table: Table, request: AnalysisRequest, call: _Call) -> AnalysisResult:
        timer = Timer()
        timer.start()
        reporter = ProgressReporter(COMPUTE, call.progress)
        reporter.update(0.0, "Preparing analysis...")
        call.check(COMPUTE)

        with timer.section('group'):
            index = self._index_for(table, request.group_column, call.indices)
            check_control(index, request.control_group)
            plans = self._plan(table, request, index, call)

        logger.info(
            "Computing %d columns x %d groups (control %r)",
            len(plans), len(index), request.control_group,
        )
        with timer.section('columns'):
            columns = self._run_columns(table, request.control_group, plans, reporter, call)
        timer.stop()

        reporter.finish(f"Computed {len(columns)} columns")
        logger.info("Analysis complete: %d columns", len(columns))
        return AnalysisResult(
            request=request,
            columns=columns,
            group_sizes=index.sizes(),
            timing=timer.result(),
        )

    def _plan(
        self,
        table: Table,
        request: AnalysisRequest,
        index: GroupIndex,
        call: _Call,
    ) -> list[_ColumnPlan]:
        """Resolve the request to per-column work; validates every column first."""
        if request.layout != LONG:
            for column in request.data_columns:
                table.numeric(column)
            return [_ColumnPlan(c, c, index) for c in request.data_columns]

        table.numeric(request.value_column)
        types = self._index_for(table, request.type_column, call.indices)
        labels = request.data_columns or tuple(types)
        for label in labels:
            if label not in types:
                raise ColumnNotFoundError(
                    f"Data type {label!r} not found in column {request.type_column!r}. "
                    f"Available: {list(types)}",
                    column=label,
                    available=list(types),
                )
        return [
            _ColumnPlan(label, request.value_column, index.restrict(types[label]))
            for label in labels
        ]

    def _run_columns(
        self,
        table: Table,
        control_key: str,
        plans: Sequence[_ColumnPlan],
        reporter: ProgressReporter,
        call: _Call,
    ) -> dict[str, ColumnResult]:
        executor = ThreadPoolExecutor(
            max_workers=self._max_workers, thread_name_prefix='groupstats'
        )
        done: dict[str, ColumnResult] = {}
        try:
            futures = {
                executor.submit(self._column_task, table, control_key, plan, call.work): plan.label
                for plan in plans
            }

            def on_done(future: Future) -> None:
                done[futures[future]] = future.result()
                reporter.update(
                    len(done) / len(plans), f"Computed {len(done)}/{len(plans)} columns"
                )

            self._await(list(futures), call, COMPUTE, on_done)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)
        return {plan.label: done[plan.label] for plan in plans}

    def _column_task(
        self,
        table: Table,
        control_key: str,
        plan: _ColumnPlan,
        work: CancellationToken,
    ) -> ColumnResult:
        work.raise_if_cancelled(COMPUTE)
        design = ColumnDesign.build(
            table, plan.index, control_key, plan.source_column, label=plan.label
        )
        stats = self._engine.solve_column(design)
        geometries = {
            record.group: self._builder.build(design.samples[record.group], record)
            for record in stats.params
        }
        chart = build_column_chart(geometries, control_key)
        work.raise_if_cancelled(COMPUTE)
        logger.debug("Column %r done", plan.label)
        return ColumnResult(stats, chart)

    # --- Waiting ---

    def _await_one(self, fn: Callable[[], T], call: _Call, phase: str) -> T:
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix='groupstats')
        try:
            future = executor.submit(fn)
            self._await([future], call, phase)
            return future.result()
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _await(
        self,
        futures: Sequence[Future],
        call: _Call,
        phase: str,
        on_done: Callable[[Future], None] | None = None,
    ) -> None:
        """
        Wait for every future, polling for cancellation and the deadline.

        The first task exception is re-raised unchanged, after the
        remaining tasks are told to stop.
        """
        deadline = None if self._timeout is None else time.monotonic() + self._timeout
        pending = set(futures)
        try:
            while pending:
                finished, pending = wait(
                    pending, timeout=self._poll_interval, return_when=FIRST_EXCEPTION
                )
                for future in finished:
                    error = future.exception()
                    if error is not None:
                        raise error
                    if on_done is not None:
                        on_done(future)
                call.check(phase)
                if pending and deadline is not None and time.monotonic() > deadline:
                    raise PipelineTimeoutError(
                        f"{phase} did not finish within {self._timeout}s",
                        phase=phase,
                        timeout=self._timeout,
                    )
        except BaseException:
            call.work.cancel()
            for future in pending:
                future.cancel()
            raise

    # --- State ---

    def _index_for(
        self,
        table: Table,
        column: str,
        scratch: dict[str, GroupIndex],
    ) -> GroupIndex:
        """Cached index of the published table, else of this call's table."""
        with self._lock:
            published = table is self._state.table
            cached = self._indices.get(column) if published else None
        if cached is None:
            cached = scratch.get(column)
        if cached is None:
            cached = GroupIndex.build(table, column)
            scratch[column] = cached
        return cached

    def _publish(
        self,
        table: Table,
        result: AnalysisResult | None,
        call: _Call,
        *,
        expect_table: Table | None = None,
    ) -> bool:
        """Swap in the new snapshot; refuse if `expect_table` is no longer current."""
        with self._lock:
            if expect_table is not None and expect_table is not self._state.table:
                return False
            if table is not self._state.table:
                self._indices = {}
            for column, index in call.indices.items():
                self._indices.setdefault(column, index)
            self._state = PipelineState(table, result, self._state.generation + 1)
            generation = self._state.generation
        logger.debug("Published snapshot %d", generation)
        return True

    def _call(
        self,
        cancel: CancellationToken | None,
        progress: ProgressCallback | None,
    ) -> _Activation:
        return _Activation(self, _Call(cancel or CancellationToken(), progress or self._progress))


class _Activation:
    """Registers a call with its coordinator while the call runs."""

    def __init__(self, coordinator: PipelineCoordinator, call: _Call):
        self._coordinator = coordinator
        self._call = call

    def __enter__(self) -> _Call:
        with self._coordinator._lock:
            self._coordinator._active.append(self._call)
        return self._call

    def __exit__(self, *exc_info) -> None:
        with self._coordinator._lock:
            self._coordinator._active.remove(self._call)
