#!/usr/bin/env python3
"""Conversion of the relaxed match matrix into a non-crossing matching.

Two steps follow the annealing loop:

1. ``cleanup`` greedily assigns every row its best still unclaimed column.
2. ``noncrossing`` keeps the heaviest strictly increasing chain of cells,
   in the manner of global sequence alignment without gap penalties.
"""

import logging

import numpy as np

LOGGER = logging.getLogger(__name__)


def cleanup(match: np.ndarray, n1: int, n2: int) -> np.ndarray:
    """Collapse the real block of ``match`` into a hard assignment.

    Rows are processed in index order. Each row takes the column with the
    largest value among those not claimed by an earlier row, the lowest
    column index winning ties.

    Args:
        match: Relaxed match matrix with at least n1 rows and n2 columns.
        n1: Number of rows to assign.
        n2: Number of candidate columns.

    Returns:
        Binary (n1, n2) matrix with exactly one 1 per row and at most one
        per column.

    Raises:
        RuntimeError: If a row finds no unclaimed column (n2 < n1).
    """
    assignment = np.zeros((n1, n2))
    claimed = np.zeros(n2, dtype=bool)
    for i in range(n1):
        if claimed.all():
            raise RuntimeError(
                f"No unclaimed column left for row {i}; the smaller graph "
                f"({n1} nodes) must index the rows of a {n1}x{n2} matrix"
            )
        candidates = np.where(claimed, -np.inf, match[i, :n2])
        j = int(np.argmax(candidates))
        assignment[i, j] = 1.0
        claimed[j] = True
    return assignment


def noncrossing(weights: np.ndarray) -> np.ndarray:
    """Extract the heaviest non-crossing matching from ``weights``.

    S[i, j] is the best total weight of a strictly increasing chain that
    ends in cell (i, j). The chain is traced back from the last row: each
    row, from the bottom up, takes the column left of the previous pick
    with the highest S (the rightmost on ties), until the first column is
    reached or the rows run out.

    Args:
        weights: Non-negative (n1, n2) matrix of cell weights.

    Returns:
        Binary (n1, n2) matrix whose ones form a strictly increasing chain.
    """
    n1, n2 = weights.shape
    scores = np.zeros((n1, n2))
    best_by_column = np.zeros(n2)
    for i in range(n1):
        if n2 == 0:
            break
        scores[i, 0] = weights[i, 0]
        scores[i, 1:] = weights[i, 1:] + np.maximum.accumulate(
            np.maximum(best_by_column[:-1], 0.0)
        )
        np.maximum(best_by_column, scores[i], out=best_by_column)

    matching = np.zeros((n1, n2))
    bound = n2
    i = n1 - 1
    while i >= 0 and bound > 0:
        row = scores[i, :bound]
        j = bound - 1 - int(np.argmax(row[::-1]))
        matching[i, j] = 1.0
        bound = j
        i -= 1
    LOGGER.debug(
        f"Non-crossing extraction kept {int(matching.sum())} of "
        f"{np.count_nonzero(weights)} weighted cells"
    )
    return matching
