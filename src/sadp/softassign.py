#!/usr/bin/env python3
"""Softassign + dynamic programming matcher for contact maps.

This module provides the SADP class which aligns two contact maps by
finding a node correspondence that maximizes the number of shared,
non-crossing contacts.

The optimization runs in three stages:
1. Deterministic annealing: b grows from b0 to bf by a factor br. At each
   b, up to I0 softmax compatibility updates are made, each followed by
   up to I1 Sinkhorn passes.
2. Discretization: greedy cleanup of the relaxed matrix, then extraction
   of the heaviest non-crossing chain by dynamic programming.
3. Scoring: shared contacts are counted and their orientation verified.

Internally the map with fewer nodes indexes the rows of the match matrix.
Results are reported in the order the maps were given.

Example:
    x = ContactMap.from_edges(3, [(0, 1), (1, 2), (0, 2)])
    y = ContactMap.from_edges(3, [(0, 1), (1, 2), (0, 2)])
    result = SADP(x, y).run()
    result.matching  # [(0, 0), (1, 1), (2, 2)]
"""

import logging
import time
from typing import List, Optional

import numpy as np

from sadp import compatibility, discretize, scoring, sinkhorn, util
from sadp.config import SADPConfig
from sadp.contact_map import ContactMap
from sadp.types import MatchResult, MatchState, NodePair, Verdict

LOGGER = logging.getLogger(__name__)


class SADP:
    """Match two contact maps with softassign and dynamic programming.

    An instance holds mutable optimizer state and must not be shared
    between threads. Independent instances share nothing.
    """

    def __init__(
        self,
        first: ContactMap,
        second: ContactMap,
        config: Optional[SADPConfig] = None,
        progress: Optional[util.ProgressCallback] = None,
    ) -> None:
        """Set up a matcher for ``first`` and ``second``.

        Args:
            first: First contact map.
            second: Second contact map.
            config: Optimizer parameters; defaults to SADPConfig().
            progress: Optional callable receiving a percentage after each
                annealing step.
        """
        if first.n_nodes < second.n_nodes:
            self.x, self.y = first, second
            self.preserved_input_order = True
        else:
            self.x, self.y = second, first
            self.preserved_input_order = False
        self.config = config if config is not None else SADPConfig()
        self.progress = progress
        self.state = MatchState(self.x.n_nodes, self.y.n_nodes)
        self.state.reset(self.config.b0)
        self._kernel: Optional[compatibility.CompatibilityKernel] = None
        self._result: Optional[MatchResult] = None

    @property
    def n1(self) -> int:
        return self.x.n_nodes

    @property
    def n2(self) -> int:
        return self.y.n_nodes

    @property
    def kernel(self) -> compatibility.CompatibilityKernel:
        if self._kernel is None:
            self._kernel = compatibility.CompatibilityKernel(self.x, self.y)
        return self._kernel

    def run(self) -> MatchResult:
        """Optimize the matching and return the scored result.

        Repeated calls start again from the initial match matrix and give
        identical results.
        """
        LOGGER.info(
            f"Matching {self.x.name} ({self.n1} nodes, {self.x.n_edges} "
            f"edges) against {self.y.name} ({self.n2} nodes, "
            f"{self.y.n_edges} edges); input order preserved: "
            f"{self.preserved_input_order}"
        )
        start_time = time.perf_counter()

        self.state.reset(self.config.b0)
        self._anneal()
        assignment = discretize.cleanup(self.state.match, self.n1, self.n2)
        final_matrix = discretize.noncrossing(assignment)

        elapsed_ms = (time.perf_counter() - start_time) * 1000.0
        verdict = scoring.score_matching(final_matrix, self.x, self.y)

        self._result = MatchResult(
            matching=self._to_input_order(final_matrix),
            verdict=verdict,
            iterations=self.state.n_iterations,
            elapsed_ms=elapsed_ms,
            match_matrix=final_matrix,
            preserved_input_order=self.preserved_input_order,
        )
        LOGGER.info(
            f"Finished after {self.state.n_iterations} assignment iterations "
            f"in {elapsed_ms:.1f} ms: {verdict.ncc} shared contacts, "
            f"score={verdict.score}, feasible={verdict.is_feasible}"
        )
        return self._result

    def _anneal(self) -> None:
        """Run the continuation loop until b reaches bf."""
        config = self.config
        state = self.state
        kernel = self.kernel
        total_steps = config.outer_step_count
        LOGGER.info(
            f"Annealing b from {config.b0} to {config.bf} by {config.br} "
            f"(~{total_steps} steps)"
        )

        step = 0
        while state.b < config.bf:
            for _ in range(config.max_assignment_iterations):
                state.n_iterations += 1
                compatibility.softmax_update(state, kernel)
                sinkhorn.sinkhorn_balance(
                    state.match,
                    state.previous_sinkhorn_matrix,
                    config.max_sinkhorn_iterations,
                    config.eps1,
                )
                change = compatibility.assignment_change(state)
                if change < config.eps0:
                    break
            LOGGER.debug(
                f"Annealing step {step + 1}: b={state.b:.4f}, "
                f"assignment change={change:.6f}"
            )
            state.b *= config.br
            step += 1
            util.report_progress(self.progress, 100.0 * step / total_steps)
        if step < total_steps:
            util.report_progress(self.progress, 100.0)

    def _to_input_order(self, matrix: np.ndarray) -> List[NodePair]:
        pairs = [(int(i), int(j)) for i, j in np.argwhere(matrix > 0)]
        if not self.preserved_input_order:
            pairs = [(j, i) for i, j in pairs]
        return sorted(pairs)

    def _require_result(self) -> MatchResult:
        if self._result is None:
            raise RuntimeError("No result available; call run() first")
        return self._result

    @property
    def result(self) -> MatchResult:
        return self._require_result()

    @property
    def score(self) -> float:
        return self._require_result().score

    @property
    def ncc(self) -> int:
        return self._require_result().ncc

    @property
    def is_feasible(self) -> bool:
        return self._require_result().is_feasible

    @property
    def iterations(self) -> int:
        return self._require_result().iterations

    @property
    def elapsed_ms(self) -> float:
        return self._require_result().elapsed_ms

    @property
    def matching(self) -> List[NodePair]:
        return self._require_result().matching

    def verify(self) -> Verdict:
        """Score the final matching again from the adjacency lists."""
        result = self._require_result()
        return scoring.score_matching(result.match_matrix, self.x, self.y)


def match_contact_maps(
    first: ContactMap,
    second: ContactMap,
    config: Optional[SADPConfig] = None,
    progress: Optional[util.ProgressCallback] = None,
) -> MatchResult:
    """Run a one-off SADP match of ``first`` against ``second``."""
    return SADP(first, second, config=config, progress=progress).run()
