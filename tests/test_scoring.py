import numpy as np
import pytest

from sadp import scoring
from sadp.contact_map import ContactMap
from sadp.types import Feasible, Infeasible
from tests.conftest import path_graph, triangle


def test_identity_on_triangles_scores_one():
    verdict = scoring.score_matching(np.eye(3), triangle(), triangle())

    assert isinstance(verdict, Feasible)
    assert verdict.is_feasible
    assert verdict.score == 1.0
    assert verdict.ncc == 3


def test_partial_overlap_triangle_on_path():
    x = triangle()
    y = path_graph(4)
    matching = np.zeros((3, 4))
    matching[[0, 1, 2], [0, 1, 2]] = 1.0

    verdict = scoring.score_matching(matching, x, y)

    # Contacts 0-1 and 1-2 are shared, 0-2 is not a contact of the path.
    assert verdict.ncc == 2
    assert verdict.raw_score == pytest.approx(2 / 3)
    assert verdict.score == 0.67


def test_crossing_contact_is_infeasible(caplog):
    x = path_graph(2)
    y = path_graph(2)
    reversed_matching = np.array([[0.0, 1.0], [1.0, 0.0]])

    verdict = scoring.score_matching(reversed_matching, x, y)

    assert isinstance(verdict, Infeasible)
    assert not verdict.is_feasible
    assert verdict.score == -1.0
    assert verdict.ncc == -1
    assert verdict.contact == (0, 1)
    assert verdict.image == (1, 0)
    assert "crossing" in caplog.text


def test_no_edges_scores_zero():
    x = ContactMap.from_edges(2, [])
    y = path_graph(3)
    verdict = scoring.score_matching(np.eye(2, 3), x, y)
    assert verdict.is_feasible
    assert verdict.score == 0.0
    assert verdict.ncc == 0


def test_empty_graphs_score_zero():
    x = ContactMap.from_edges(0, [])
    y = path_graph(3)
    verdict = scoring.score_matching(np.zeros((0, 3)), x, y)
    assert verdict.is_feasible
    assert verdict.score == 0.0
    assert verdict.ncc == 0


def test_unmatched_neighbours_do_not_count():
    x = path_graph(3)
    y = path_graph(3)
    matching = np.zeros((3, 3))
    matching[0, 0] = 1.0
    matching[2, 2] = 1.0

    verdict = scoring.score_matching(matching, x, y)

    assert verdict.ncc == 0
    assert verdict.score == 0.0


def test_scoring_is_idempotent():
    x = triangle()
    y = path_graph(4)
    matching = np.zeros((3, 4))
    matching[[0, 1, 2], [0, 2, 3]] = 1.0

    first = scoring.score_matching(matching, x, y)
    second = scoring.score_matching(matching, x, y)

    assert first == second


def test_shape_mismatch_rejected():
    with pytest.raises(ValueError, match="matching shape"):
        scoring.score_matching(np.eye(2), triangle(), triangle())


@pytest.mark.parametrize(
    "raw_score,expected",
    [(2 / 3, 0.67), (0.125, 0.13), (0.5, 0.5), (1.0, 1.0), (0.0, 0.0)],
)
def test_feasible_score_rounds_half_up(raw_score, expected):
    assert Feasible(raw_score=raw_score, ncc=0).score == expected
