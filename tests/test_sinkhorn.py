import numpy as np
import pytest

from sadp import sinkhorn


def test_normalize_rows():
    matrix = np.array([[1.0, 3.0], [2.0, 2.0]])
    skipped = sinkhorn.normalize_lines(matrix, axis=1)
    assert skipped == 0
    np.testing.assert_allclose(matrix, [[0.25, 0.75], [0.5, 0.5]])


def test_normalize_skips_zero_sum_lines():
    matrix = np.array([[0.0, 0.0], [1.0, 3.0]])
    skipped = sinkhorn.normalize_lines(matrix, axis=1)
    assert skipped == 1
    np.testing.assert_array_equal(matrix[0], [0.0, 0.0])
    np.testing.assert_allclose(matrix[1], [0.25, 0.75])


@pytest.mark.parametrize("shape", [(3, 3), (4, 6), (2, 9)])
def test_balance_converges_to_doubly_stochastic(shape):
    rng = np.random.default_rng(7)
    matrix = rng.random(shape) + 0.05
    scratch = np.zeros(shape)

    # Square positive matrices balance to within eps; rectangular ones
    # cannot have all unit sums, so only the final column pass is exact.
    sinkhorn.sinkhorn_balance(matrix, scratch, max_iterations=1000, eps=1e-10)

    np.testing.assert_allclose(matrix.sum(axis=0), 1.0, atol=1e-8)
    if shape[0] == shape[1]:
        np.testing.assert_allclose(matrix.sum(axis=1), 1.0, atol=1e-6)
    assert np.all(matrix >= 0)


def test_balance_with_slack_row_and_column():
    """Real block plus slack line: all sums close to one after balancing."""
    rng = np.random.default_rng(3)
    n1, n2 = 4, 4
    matrix = rng.random((n1 + 1, n2 + 1)) + 0.1
    scratch = np.zeros_like(matrix)

    sinkhorn.sinkhorn_balance(matrix, scratch, max_iterations=500, eps=1e-12)

    np.testing.assert_allclose(matrix.sum(axis=1), 1.0, atol=1e-6)
    np.testing.assert_allclose(matrix.sum(axis=0), 1.0, atol=1e-6)


def test_balance_stops_early_on_convergence():
    matrix = np.full((3, 3), 1.0 / 3.0)
    scratch = np.zeros((3, 3))
    passes = sinkhorn.sinkhorn_balance(matrix, scratch, 30, eps=0.05)
    assert passes == 1


def test_balance_respects_iteration_limit():
    rng = np.random.default_rng(0)
    matrix = rng.random((5, 5)) * 100
    scratch = np.zeros((5, 5))
    passes = sinkhorn.sinkhorn_balance(matrix, scratch, 2, eps=0.0)
    assert passes == 2


def test_balance_all_zero_matrix_is_left_alone(caplog):
    matrix = np.zeros((3, 4))
    scratch = np.ones((3, 4))

    with caplog.at_level("WARNING"):
        passes = sinkhorn.sinkhorn_balance(matrix, scratch, 5, eps=0.05)

    assert passes == 1
    assert np.all(matrix == 0.0)
    assert np.all(np.isfinite(matrix))
    assert "zero-sum" in caplog.text


def test_balance_scratch_holds_matrix_before_last_pass():
    matrix = np.array([[2.0, 1.0], [1.0, 2.0]])
    scratch = np.zeros((2, 2))
    sinkhorn.sinkhorn_balance(matrix, scratch, 1, eps=0.0)
    np.testing.assert_array_equal(scratch, [[2.0, 1.0], [1.0, 2.0]])


def test_balance_rejects_mismatched_scratch():
    with pytest.raises(ValueError, match="scratch shape"):
        sinkhorn.sinkhorn_balance(np.ones((2, 2)), np.ones((3, 3)), 1, 0.1)
