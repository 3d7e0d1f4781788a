#!/usr/bin/env python3
"""Scoring and verification of a final node matching.

A contact (i, k) of the first graph is shared when both endpoints are
matched, to j and l, and (j, l) is a contact of the second graph. Every
shared contact must keep its orientation (k < i with l < j, or k > i
with l > j); a single reversed one makes the whole matching infeasible.
"""

import logging

import numpy as np

from sadp.contact_map import ContactMap
from sadp.types import Feasible, Infeasible, Verdict

LOGGER = logging.getLogger(__name__)


def score_matching(
    matching: np.ndarray, x: ContactMap, y: ContactMap
) -> Verdict:
    """Count shared contacts of ``matching`` and check their orientation.

    Each shared contact is seen once from each endpoint, so the raw
    count is halved. The score divides the shared contacts by the smaller
    edge count of the two graphs; it is 0 when either graph has no edges.

    Args:
        matching: (x.n_nodes, y.n_nodes) matrix, positive cells are matches.
        x: Graph indexing the rows.
        y: Graph indexing the columns.

    Returns:
        Feasible with score and shared contact count, or Infeasible naming
        the first reversed contact found.
    """
    if matching.shape != (x.n_nodes, y.n_nodes):
        raise ValueError(
            f"matching shape {matching.shape} must be "
            f"({x.n_nodes}, {y.n_nodes})"
        )
    matched = matching > 0
    hits = 0
    for i, j in np.argwhere(matched):
        for k in x.adjacency[i]:
            for l in y.adjacency[j]:
                if not matched[k, l]:
                    continue
                if (k < i and l < j) or (k > i and l > j):
                    hits += 1
                    continue
                LOGGER.warning(
                    f"Matching maps contact ({i}, {k}) of {x.name} onto "
                    f"reversed pair ({j}, {l}) of {y.name}; "
                    "non-crossing extraction produced a crossing"
                )
                return Infeasible(
                    contact=(int(i), int(k)), image=(int(j), int(l))
                )

    min_edges = min(x.n_edges, y.n_edges)
    raw_score = hits / (2.0 * min_edges) if min_edges else 0.0
    verdict = Feasible(raw_score=raw_score, ncc=hits // 2)
    LOGGER.debug(
        f"Scored matching: {verdict.ncc} shared contacts, "
        f"score={verdict.score}"
    )
    return verdict
