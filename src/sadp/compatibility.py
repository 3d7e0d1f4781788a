#!/usr/bin/env python3
"""Softmax compatibility update of the softassign relaxation.

For a candidate assignment (i, j) the compatibility Q[i, j] sums the
previous match weights M0[k, l] of neighbour pairs that lie on the same
side of their centre nodes, i.e. both k < i and l < j or both k > i and
l > j. Each term is weighted by how well the sequence separations agree:

    w = 1 / (1 + 0.1 * |r * |i - k| - |j - l||),  r = max(n1, n2) / n1

The match matrix is then set to exp(b * Q) on its real block.

CompatibilityKernel sorts the neighbour slots of both graphs once per
pair of contact maps. The weights are recomputed on every call, one chunk
of X slots at a time, into scratch buffers sized by
constants.KERNEL_CHUNK_ELEMENTS; Q and M0 are the only buffers that grow
with n1 * n2.
"""

import logging
from typing import List, Tuple

import numpy as np

from sadp import constants
from sadp.contact_map import ContactMap
from sadp.types import MatchState

LOGGER = logging.getLogger(__name__)


def _directed_edges(contact_map: ContactMap) -> Tuple[np.ndarray, np.ndarray]:
    """Return (centre, neighbour) arrays with one entry per adjacency slot."""
    centres = np.repeat(
        np.arange(contact_map.n_nodes, dtype=np.int64), contact_map.degree
    )
    neighbours = np.fromiter(
        (k for nbrs in contact_map.adjacency for k in nbrs),
        dtype=np.int64,
        count=int(contact_map.degree.sum()),
    )
    return centres, neighbours


class _Side:
    """Neighbour slots of both graphs on one side of their centre nodes.

    Y slots are kept whole; X slots are cut at node boundaries into
    chunks whose X slots times Y slots stay below the chunk budget.
    """

    def __init__(
        self,
        x_centres: np.ndarray,
        x_neighbours: np.ndarray,
        y_centres: np.ndarray,
        y_neighbours: np.ndarray,
        scale: float,
        chunk_elements: int,
    ) -> None:
        self.k = x_neighbours
        self.d1 = scale * np.abs(x_centres - x_neighbours).astype(float)
        self.l = y_neighbours
        self.d2 = np.abs(y_centres - y_neighbours).astype(float)
        self.y_nodes, self.y_starts = _segments(y_centres)

        n_slots = len(self.l)
        x_nodes, x_starts = _segments(x_centres)
        x_stops = np.append(x_starts[1:], len(x_centres))
        self.chunks: List[Tuple[int, int, np.ndarray, np.ndarray]] = []
        if n_slots == 0:
            return
        first = 0
        for last in range(len(x_nodes)):
            cells = (x_stops[last] - x_starts[first]) * n_slots
            if last > first and cells > chunk_elements:
                self._add_chunk(x_nodes, x_starts, x_stops, first, last)
                first = last
        if len(x_nodes):
            self._add_chunk(x_nodes, x_starts, x_stops, first, len(x_nodes))

    def _add_chunk(self, x_nodes, x_starts, x_stops, first, last) -> None:
        start = int(x_starts[first])
        stop = int(x_stops[last - 1])
        offsets = x_starts[first:last] - start
        self.chunks.append((start, stop, offsets, x_nodes[first:last]))

    @property
    def n_slots(self) -> int:
        return len(self.l)


def _segments(centres: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Return the distinct sorted ``centres`` and where each run starts."""
    nodes, starts = np.unique(centres, return_index=True)
    return nodes, starts


class CompatibilityKernel:
    """Neighbour-pair bookkeeping for two contact maps.

    Neighbour pairs are split by side (predecessors and successors). The
    distance weights are recomputed chunk by chunk on each call into
    scratch buffers allocated here, so memory stays bounded by the chunk
    budget instead of growing with the product of the two edge counts.
    """

    def __init__(
        self,
        x: ContactMap,
        y: ContactMap,
        chunk_elements: int = constants.KERNEL_CHUNK_ELEMENTS,
    ) -> None:
        self.n1 = x.n_nodes
        self.n2 = y.n_nodes
        self.scale = max(self.n1, self.n2) / self.n1 if self.n1 else 1.0

        x_centres, x_neighbours = _directed_edges(x)
        y_centres, y_neighbours = _directed_edges(y)
        x_side = np.sign(x_neighbours - x_centres)
        y_side = np.sign(y_neighbours - y_centres)
        self._sides = []
        for side in (-1, 1):
            xs = x_side == side
            ys = y_side == side
            self._sides.append(
                _Side(
                    x_centres[xs],
                    x_neighbours[xs],
                    y_centres[ys],
                    y_neighbours[ys],
                    self.scale,
                    chunk_elements,
                )
            )

        cells = rows = sums = 0
        for s in self._sides:
            for start, stop, offsets, _ in s.chunks:
                cells = max(cells, (stop - start) * s.n_slots)
                rows = max(rows, len(offsets) * s.n_slots)
                sums = max(sums, len(offsets) * len(s.y_nodes))
        self._terms = np.empty(cells)
        self._weights = np.empty(cells)
        self._index = np.empty(cells, dtype=np.int64)
        self._rows = np.empty(rows)
        self._sums = np.empty(sums)

        LOGGER.debug(
            f"Built compatibility kernel for {self.n1}x{self.n2} nodes, "
            f"scale r={self.scale:.4f}, chunks per side "
            f"{[len(s.chunks) for s in self._sides]}, scratch cells {cells}"
        )

    def __call__(self, previous: np.ndarray, out: np.ndarray) -> np.ndarray:
        """Write Q computed from the match matrix ``previous`` into ``out``."""
        out.fill(0.0)
        flat = previous.ravel()
        stride = previous.shape[1]
        for s in self._sides:
            n_slots = s.n_slots
            for start, stop, offsets, x_nodes in s.chunks:
                shape = (stop - start, n_slots)
                size = shape[0] * n_slots
                terms = self._terms[:size].reshape(shape)
                weights = self._weights[:size].reshape(shape)
                index = self._index[:size].reshape(shape)

                np.add(
                    (s.k[start:stop] * stride)[:, None],
                    s.l[None, :],
                    out=index,
                )
                np.take(flat, index, out=terms, mode="clip")
                np.subtract(s.d1[start:stop, None], s.d2[None, :], out=weights)
                np.abs(weights, out=weights)
                weights *= constants.DISTANCE_PENALTY
                weights += 1.0
                terms /= weights

                n_rows = len(offsets)
                rows = self._rows[: n_rows * n_slots].reshape(n_rows, n_slots)
                np.add.reduceat(terms, offsets, axis=0, out=rows)
                sums = self._sums[: n_rows * len(s.y_nodes)].reshape(
                    n_rows, len(s.y_nodes)
                )
                np.add.reduceat(rows, s.y_starts, axis=1, out=sums)
                out[np.ix_(x_nodes, s.y_nodes)] += sums
        return out


def softmax_update(state: MatchState, kernel: CompatibilityKernel) -> None:
    """Run one softmax step on ``state.match`` at the current b.

    The previous match matrix is saved to
    ``state.previous_iteration_matrix`` for the convergence test. Slack
    row and column are left untouched.
    """
    np.copyto(state.previous_iteration_matrix, state.match)
    kernel(state.previous_iteration_matrix, out=state.compatibility)
    np.exp(
        state.b * state.compatibility,
        out=state.match[: state.n1, : state.n2],
    )


def assignment_change(state: MatchState) -> float:
    """Total absolute change of the real block over the last softmax step."""
    n1, n2 = state.n1, state.n2
    return float(
        np.abs(
            state.match[:n1, :n2] - state.previous_iteration_matrix[:n1, :n2]
        ).sum()
    )
