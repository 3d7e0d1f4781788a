#!/usr/bin/env python3
"""Sinkhorn balancing of a non-negative match matrix.

Alternately rescales rows and columns to unit sums, driving the matrix
towards a doubly stochastic one. Rows or columns summing to exactly zero
are left as they are.
"""

import logging

import numpy as np

LOGGER = logging.getLogger(__name__)


def normalize_lines(matrix: np.ndarray, axis: int) -> int:
    """Scale rows (axis=1) or columns (axis=0) of ``matrix`` to sum to one.

    Args:
        matrix: Non-negative matrix, modified in place.
        axis: Axis along which sums are taken.

    Returns:
        Number of rows or columns skipped because their sum was zero.
    """
    sums = matrix.sum(axis=axis, keepdims=True)
    nonzero = sums != 0
    np.divide(matrix, sums, out=matrix, where=nonzero)
    return int(nonzero.size - np.count_nonzero(nonzero))


def sinkhorn_balance(
    matrix: np.ndarray,
    scratch: np.ndarray,
    max_iterations: int,
    eps: float,
) -> int:
    """Balance ``matrix`` in place by alternating row/column normalization.

    Each pass normalizes all rows, then all columns, and compares the
    result with the matrix as it was before the pass. The loop stops once
    the summed absolute change drops below ``eps`` or after
    ``max_iterations`` passes.

    Args:
        matrix: Non-negative matrix, modified in place.
        scratch: Buffer of the same shape holding the pre-pass matrix.
        max_iterations: Maximum number of passes.
        eps: Convergence threshold on the summed absolute change.

    Returns:
        Number of passes performed.
    """
    if scratch.shape != matrix.shape:
        raise ValueError(
            f"scratch shape {scratch.shape} must match matrix shape "
            f"{matrix.shape}"
        )
    skipped = 0
    passes = 0
    for passes in range(1, max_iterations + 1):
        np.copyto(scratch, matrix)
        skipped += normalize_lines(matrix, axis=1)
        skipped += normalize_lines(matrix, axis=0)
        change = float(np.abs(matrix - scratch).sum())
        if change < eps:
            break
    if skipped:
        LOGGER.warning(
            f"Skipped {skipped} zero-sum rows/columns while balancing a "
            f"{matrix.shape[0]}x{matrix.shape[1]} matrix"
        )
    LOGGER.debug(f"Sinkhorn balancing stopped after {passes} passes")
    return passes
