"""Network-wide change impact ("blast radius") analysis.

Runs the ECMP solver over every ordered pair of visible routers on a baseline
and a modified graph snapshot and classifies how each flow is affected.

Performance characteristics:
Time complexity: O(N x (V + E) log V) per snapshot. Pairs are processed grouped
by source, and one SPF run per source serves every destination of that
source. Path reconstruction adds O(V + E) per pair in the worst case.

Parallelism: the pair list is cut into contiguous, disjoint chunks executed in
a process pool. Both frozen graphs are pickled once and installed in each
worker by the executor initializer. Chunks share no state, so no locking is
needed; output order follows chunk completion.
"""

from __future__ import annotations

import math
import os
import pickle
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from itertools import groupby
from operator import itemgetter
from threading import Event
from typing import (
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    List,
    Optional,
    Sequence,
    Tuple,
)

from netimpact.config import IMPACT_CONFIG, ImpactAnalysisConfig
from netimpact.graph.build import VisibilityFilter, build_graph
from netimpact.graph.strict_multidigraph import StrictMultiDiGraph
from netimpact.logging import apply_env_log_level, export_log_level, get_logger
from netimpact.model.topology import DirectedEdge, Node, Topology, TopologyChange
from netimpact.solver.paths import shortest_path, shortest_paths_from
from netimpact.types.base import EdgeID, ImpactClass, NodeID
from netimpact.types.dto import ImpactRecord, PathResult

logger = get_logger(__name__)

Pair = Tuple[NodeID, NodeID]
ProgressCallback = Callable[[int, int], None]


class AnalysisCancelled(Exception):
    """Raised when an impact analysis is cancelled between pairs.

    Attributes:
        processed: Pairs fully processed before cancellation.
        total: Pairs scheduled.
        records: Records collected from the processed pairs.
    """

    def __init__(self, processed: int, total: int, records: List[ImpactRecord]):
        super().__init__(f"Impact analysis cancelled after {processed}/{total} pairs")
        self.processed = processed
        self.total = total
        self.records = records


def classify_impact(
    baseline: Optional[PathResult],
    modified: Optional[PathResult],
    rel_tol: Optional[float] = None,
) -> ImpactClass:
    """Classify one flow from its baseline and modified path results.

    Rules are evaluated in priority order:
      1. both unreachable -> UNCHANGED
      2. reachable -> unreachable -> LOST_CONNECTIVITY
      3. unreachable -> reachable -> GAINED_CONNECTIVITY
      4. same edge set, different cost -> COST_CHANGED
      5. different edge set, now ECMP and previously not -> MIGRATED_TO_ECMP
      6. different edge set -> REROUTED
      7. otherwise -> UNCHANGED
    """
    if rel_tol is None:
        rel_tol = IMPACT_CONFIG.cost_rel_tol
    if baseline is None and modified is None:
        return ImpactClass.UNCHANGED
    if modified is None:
        return ImpactClass.LOST_CONNECTIVITY
    if baseline is None:
        return ImpactClass.GAINED_CONNECTIVITY

    same_edges = baseline.involved_edge_ids == modified.involved_edge_ids
    same_cost = math.isclose(baseline.cost, modified.cost, rel_tol=rel_tol)

    if same_edges and not same_cost:
        return ImpactClass.COST_CHANGED
    if not same_edges and modified.is_ecmp and not baseline.is_ecmp:
        return ImpactClass.MIGRATED_TO_ECMP
    if not same_edges:
        return ImpactClass.REROUTED
    return ImpactClass.UNCHANGED


def compare_paths(
    src: NodeID,
    dest: NodeID,
    baseline: Optional[PathResult],
    modified: Optional[PathResult],
    new_edge_ids: FrozenSet[EdgeID] = frozenset(),
    rel_tol: Optional[float] = None,
) -> Optional[ImpactRecord]:
    """Diff two path results into an ImpactRecord.

    Args:
        src: Source router id.
        dest: Destination router id.
        baseline: Result on the baseline snapshot, or None if unreachable.
        modified: Result on the modified snapshot, or None if unreachable.
        new_edge_ids: Edges present only in the modified snapshot.
        rel_tol: Relative tolerance for cost comparison; defaults to
            ``IMPACT_CONFIG.cost_rel_tol`` at call time.

    Returns:
        The record, or None when neither snapshot has a flow for the pair.
    """
    if baseline is None and modified is None:
        return None

    return ImpactRecord(
        src=src,
        dest=dest,
        baseline_cost=baseline.cost if baseline is not None else None,
        modified_cost=modified.cost if modified is not None else None,
        baseline_hops=baseline.hops if baseline is not None else None,
        modified_hops=modified.hops if modified is not None else None,
        classification=classify_impact(baseline, modified, rel_tol),
        baseline_path=baseline.canonical_path if baseline is not None else (),
        modified_path=modified.canonical_path if modified is not None else (),
        was_ecmp=baseline is not None and baseline.is_ecmp,
        is_ecmp=modified is not None and modified.is_ecmp,
        path_changed=(
            baseline is None
            or modified is None
            or baseline.involved_edge_ids != modified.involved_edge_ids
        ),
        uses_new_edges=(
            modified is not None
            and not modified.involved_edge_ids.isdisjoint(new_edge_ids)
        ),
    )


def _failed_pair_record(
    src: NodeID, dest: NodeID, baseline: Optional[PathResult]
) -> ImpactRecord:
    return ImpactRecord(
        src=src,
        dest=dest,
        baseline_cost=baseline.cost if baseline is not None else None,
        modified_cost=None,
        baseline_hops=baseline.hops if baseline is not None else None,
        modified_hops=None,
        classification=ImpactClass.LOST_CONNECTIVITY,
        baseline_path=baseline.canonical_path if baseline is not None else (),
        was_ecmp=baseline is not None and baseline.is_ecmp,
        path_changed=True,
    )


def _solve_pair_isolated(
    baseline_graph: StrictMultiDiGraph,
    modified_graph: StrictMultiDiGraph,
    src: NodeID,
    dest: NodeID,
    new_edge_ids: FrozenSet[EdgeID],
    rel_tol: float,
) -> Optional[ImpactRecord]:
    baseline: Optional[PathResult] = None
    try:
        baseline = shortest_path(baseline_graph, src, dest)
        modified = shortest_path(modified_graph, src, dest)
    except Exception as exc:
        logger.warning(f"Pair {src}->{dest} failed, recorded as lost: {exc!r}")
        return _failed_pair_record(src, dest, baseline)
    return compare_paths(src, dest, baseline, modified, new_edge_ids, rel_tol)


def _pair_records(
    baseline_graph: StrictMultiDiGraph,
    modified_graph: StrictMultiDiGraph,
    pairs: Iterable[Pair],
    new_edge_ids: FrozenSet[EdgeID],
    rel_tol: float,
) -> Iterator[Optional[ImpactRecord]]:
    """Yield one record (or None for no flow) per pair, in pair order.

    Consecutive pairs sharing a source reuse one SPF run per snapshot. If that
    shared run fails, the source's pairs are solved one at a time so that only
    the failing pairs are affected.
    """
    for src, group in groupby(pairs, key=itemgetter(0)):
        dests = [dest for _, dest in group]
        try:
            baseline_map = shortest_paths_from(baseline_graph, src, dests)
            modified_map = shortest_paths_from(modified_graph, src, dests)
        except Exception as exc:
            logger.warning(
                f"SPF from {src} failed ({exc!r}); solving its {len(dests)} pairs individually"
            )
            for dest in dests:
                yield _solve_pair_isolated(
                    baseline_graph, modified_graph, src, dest, new_edge_ids, rel_tol
                )
            continue

        for dest in dests:
            yield compare_paths(
                src,
                dest,
                baseline_map[dest],
                modified_map[dest],
                new_edge_ids,
                rel_tol,
            )


# Per-process state installed by _worker_init
_shared_graphs: Optional[
    Tuple[StrictMultiDiGraph, StrictMultiDiGraph, FrozenSet[EdgeID]]
] = None


def _worker_init(graphs_pickle: bytes) -> None:
    """Install the two graph snapshots in a worker process.

    Called once per worker via ProcessPoolExecutor's initializer, so the graphs
    are deserialized once per worker rather than once per chunk.
    """
    global _shared_graphs

    _shared_graphs = pickle.loads(graphs_pickle)
    apply_env_log_level()

    worker_logger = get_logger(f"{__name__}.worker")
    worker_logger.debug(f"Worker {os.getpid()} initialized with graph snapshots")


def _analyze_chunk(args: Tuple[List[Pair], float]) -> List[ImpactRecord]:
    """Process one disjoint slice of the pair list inside a worker."""
    if _shared_graphs is None:
        raise RuntimeError("Worker not initialized with graph snapshots")

    pairs, rel_tol = args
    baseline_graph, modified_graph, new_edge_ids = _shared_graphs

    worker_logger = get_logger(f"{__name__}.worker")
    worker_logger.debug(f"Worker {os.getpid()} processing {len(pairs)} pairs")

    return [
        record
        for record in _pair_records(
            baseline_graph, modified_graph, pairs, new_edge_ids, rel_tol
        )
        if record is not None
    ]


class ImpactAnalyzer:
    """All-pairs impact analysis between two graph snapshots.

    Both snapshots must be built with the same visibility filter; use
    :meth:`from_topologies` or :meth:`from_change` to guarantee it.

    Attributes:
        baseline_graph: Graph before the change (not modified).
        modified_graph: Graph after the change (not modified).
        new_edge_ids: Edge ids present only in the modified graph.
        config: Loop configuration.
    """

    def __init__(
        self,
        baseline_graph: StrictMultiDiGraph,
        modified_graph: StrictMultiDiGraph,
        config: Optional[ImpactAnalysisConfig] = None,
    ) -> None:
        self.baseline_graph = baseline_graph
        self.modified_graph = modified_graph
        self.config = config or IMPACT_CONFIG
        self.new_edge_ids: FrozenSet[EdgeID] = frozenset(
            modified_graph.edge_ids()
        ) - frozenset(baseline_graph.edge_ids())

    @classmethod
    def from_topologies(
        cls,
        baseline: Topology,
        modified: Topology,
        visible: Optional[VisibilityFilter] = None,
        config: Optional[ImpactAnalysisConfig] = None,
    ) -> ImpactAnalyzer:
        """Build both graphs with the same visibility filter."""
        return cls(
            build_graph(baseline, visible),
            build_graph(modified, visible),
            config=config,
        )

    @classmethod
    def from_change(
        cls,
        baseline: Topology,
        change: TopologyChange,
        visible: Optional[VisibilityFilter] = None,
        config: Optional[ImpactAnalysisConfig] = None,
    ) -> ImpactAnalyzer:
        """Analyze the effect of ``change`` applied to ``baseline``."""
        return cls.from_topologies(baseline, baseline.apply(change), visible, config)

    def pairs(self) -> List[Pair]:
        """Ordered (src, dest) pairs over the visible routers, src != dest."""
        node_ids = list(self.baseline_graph.nodes)
        return [(src, dest) for src in node_ids for dest in node_ids if src != dest]

    def analyze_pair(self, src: NodeID, dest: NodeID) -> Optional[ImpactRecord]:
        """Classify a single flow; None when neither snapshot has a flow."""
        return compare_paths(
            src,
            dest,
            shortest_path(self.baseline_graph, src, dest),
            shortest_path(self.modified_graph, src, dest),
            self.new_edge_ids,
            self.config.cost_rel_tol,
        )

    def run(
        self,
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[Event] = None,
        parallelism: int = 1,
    ) -> List[ImpactRecord]:
        """Analyze every ordered pair of visible routers.

        Args:
            on_progress: Called as ``on_progress(processed_pairs, total_pairs)``.
            cancel_event: When set, the run stops between pairs (between chunks
                in parallel mode) and raises AnalysisCancelled.
            parallelism: Number of worker processes. Small workloads run
                serially regardless.

        Returns:
            Impact records. Pairs with no flow on either snapshot are omitted,
            as are UNCHANGED records when ``config.include_unchanged`` is False.
            Order is not guaranteed in parallel mode; see :func:`sort_records`.

        Raises:
            AnalysisCancelled: If ``cancel_event`` was set before completion.
        """
        pairs = self.pairs()
        total = len(pairs)
        logger.info(
            f"Analyzing impact over {total} ordered pairs "
            f"({self.baseline_graph.number_of_nodes()} visible routers)"
        )
        logger.debug(
            f"Baseline edges={self.baseline_graph.number_of_edges()}, "
            f"modified edges={self.modified_graph.number_of_edges()}, "
            f"new edges={len(self.new_edge_ids)}, parallelism={parallelism}"
        )

        start_time = time.time()
        use_parallel = parallelism > 1 and total >= self.config.parallel_min_pairs
        if use_parallel:
            records = self._run_parallel(pairs, on_progress, cancel_event, parallelism)
        else:
            records = self._run_serial(pairs, on_progress, cancel_event)
        elapsed_time = time.time() - start_time

        counts: Dict[str, int] = {}
        for record in records:
            name = record.classification.name
            counts[name] = counts.get(name, 0) + 1
        logger.info(
            f"Impact analysis completed in {elapsed_time:.2f} seconds: "
            f"{len(records)} records {counts}"
        )
        return records

    def _keep(self, record: Optional[ImpactRecord]) -> bool:
        if record is None:
            return False
        if self.config.include_unchanged:
            return True
        return record.classification != ImpactClass.UNCHANGED

    def _run_serial(
        self,
        pairs: Sequence[Pair],
        on_progress: Optional[ProgressCallback],
        cancel_event: Optional[Event],
    ) -> List[ImpactRecord]:
        """Process pairs in this thread with per-pair progress and cancellation."""
        logger.info("Running serial impact analysis")
        total = len(pairs)
        interval = max(1, self.config.progress_interval)
        log_step = max(1, total // 10)
        records: List[ImpactRecord] = []
        processed = 0

        if cancel_event is not None and cancel_event.is_set():
            raise AnalysisCancelled(processed, total, records)

        for record in _pair_records(
            self.baseline_graph,
            self.modified_graph,
            pairs,
            self.new_edge_ids,
            self.config.cost_rel_tol,
        ):
            if self._keep(record):
                records.append(record)
            processed += 1

            if on_progress is not None and (
                processed % interval == 0 or processed == total
            ):
                on_progress(processed, total)
            if total >= 20 and processed % log_step == 0:
                logger.info(
                    f"Serial analysis progress: {processed}/{total} pairs completed"
                )

            if (
                cancel_event is not None
                and cancel_event.is_set()
                and processed < total
            ):
                logger.info(f"Impact analysis cancelled at {processed}/{total} pairs")
                raise AnalysisCancelled(processed, total, records)

        if total == 0 and on_progress is not None:
            on_progress(0, 0)
        return records

    def _run_parallel(
        self,
        pairs: Sequence[Pair],
        on_progress: Optional[ProgressCallback],
        cancel_event: Optional[Event],
        parallelism: int,
    ) -> List[ImpactRecord]:
        """Process disjoint pair chunks in a process pool."""
        total = len(pairs)
        chunk_size = self.config.chunk_size(total, parallelism)
        chunks = [list(pairs[i : i + chunk_size]) for i in range(0, total, chunk_size)]
        workers = min(parallelism, len(chunks))
        logger.info(
            f"Running parallel analysis with {workers} workers for {len(chunks)} chunks "
            f"of up to {chunk_size} pairs"
        )

        graphs_pickle = pickle.dumps(
            (self.baseline_graph, self.modified_graph, self.new_edge_ids)
        )
        logger.debug(f"Serialized graph snapshots once: {len(graphs_pickle)} bytes")

        export_log_level()

        records: List[ImpactRecord] = []
        processed = 0
        rel_tol = self.config.cost_rel_tol

        with ProcessPoolExecutor(
            max_workers=workers,
            initializer=_worker_init,
            initargs=(graphs_pickle,),
        ) as pool:
            futures = {
                pool.submit(_analyze_chunk, (chunk, rel_tol)): len(chunk)
                for chunk in chunks
            }
            for future in as_completed(futures):
                records.extend(r for r in future.result() if self._keep(r))
                processed += futures[future]

                if on_progress is not None:
                    on_progress(processed, total)
                logger.info(
                    f"Parallel analysis progress: {processed}/{total} pairs completed"
                )

                if (
                    cancel_event is not None
                    and cancel_event.is_set()
                    and processed < total
                ):
                    for pending in futures:
                        pending.cancel()
                    logger.info(
                        f"Impact analysis cancelled at {processed}/{total} pairs"
                    )
                    raise AnalysisCancelled(processed, total, records)

        return records


def sort_records(records: Iterable[ImpactRecord]) -> List[ImpactRecord]:
    """Return records in deterministic (src, dest) order."""
    return sorted(records, key=lambda r: (str(r.src), str(r.dest)))


def analyze_impact(
    nodes: Iterable[Node],
    baseline_edges: Iterable[DirectedEdge],
    modified_edges: Iterable[DirectedEdge],
    visible: Optional[VisibilityFilter] = None,
    on_progress: Optional[ProgressCallback] = None,
    cancel_event: Optional[Event] = None,
    parallelism: int = 1,
    config: Optional[ImpactAnalysisConfig] = None,
) -> List[ImpactRecord]:
    """Classify every flow between visible routers under a proposed change.

    Args:
        nodes: Router records shared by both snapshots.
        baseline_edges: Edges before the change.
        modified_edges: Edges after the change.
        visible: Optional visibility predicate on node id, applied identically
            to both snapshots.
        on_progress: Optional ``(processed, total)`` callback.
        cancel_event: Optional event that cancels the run between pairs.
        parallelism: Worker processes for large workloads.
        config: Loop configuration; defaults to ``IMPACT_CONFIG``.

    Returns:
        List of ImpactRecord (see :meth:`ImpactAnalyzer.run`).
    """
    nodes = tuple(nodes)
    analyzer = ImpactAnalyzer.from_topologies(
        Topology.from_records(nodes, baseline_edges),
        Topology.from_records(nodes, modified_edges),
        visible=visible,
        config=config,
    )
    return analyzer.run(
        on_progress=on_progress, cancel_event=cancel_event, parallelism=parallelism
    )
