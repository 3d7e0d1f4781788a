"""Shared test fixtures and utilities for SADP tests."""

from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

import numpy as np
import pytest

from sadp.contact_map import ContactMap

TRIANGLE = np.array([[0, 1, 1], [1, 0, 1], [1, 1, 0]])


def path_graph(n_nodes: int, name: str = "path") -> ContactMap:
    """Contact map of a chain 0-1-...-(n-1)."""
    return ContactMap.from_edges(
        n_nodes, [(i, i + 1) for i in range(n_nodes - 1)], name=name
    )


def triangle(name: str = "triangle") -> ContactMap:
    return ContactMap.from_adjacency_matrix(TRIANGLE, name=name)


def random_contact_map(
    n_nodes: int, density: float, seed: int, name: str = "random"
) -> ContactMap:
    """Random contact map with reproducible edges."""
    rng = np.random.default_rng(seed)
    upper = np.triu(rng.random((n_nodes, n_nodes)) < density, k=1)
    return ContactMap.from_adjacency_matrix(upper | upper.T, name=name)


def protein_like_contact_map(
    n_nodes: int, extra_per_node: int, seed: int, name: str = "protein"
) -> ContactMap:
    """Chain with i+1 and i+2 contacts plus random long-range contacts."""
    rng = np.random.default_rng(seed)
    edges = [(i, i + d) for d in (1, 2) for i in range(n_nodes - d)]
    for i in range(n_nodes):
        for j in rng.integers(0, n_nodes, size=extra_per_node):
            if j != i:
                edges.append((i, int(j)))
    return ContactMap.from_edges(n_nodes, edges, name=name)


def write_contact_map_file(
    path: Path, n_nodes: int, edges: Iterable[Sequence[int]]
) -> Path:
    """Write a contact map file in the SADP text format."""
    lines = [str(n_nodes)]
    lines.extend(f"{i}\t{j}\t1\t1" for i, j in edges)
    path.write_text("\n".join(lines) + "\n")
    return path


def is_noncrossing(pairs: List[Tuple[int, int]]) -> bool:
    """True if rows and columns increase together over sorted pairs."""
    ordered = sorted(pairs)
    return all(
        i1 < i2 and j1 < j2
        for (i1, j1), (i2, j2) in zip(ordered, ordered[1:])
    )


@pytest.fixture
def triangle_files(tmp_path):
    first = write_contact_map_file(
        tmp_path / "first.cm", 3, [(0, 1), (1, 2), (0, 2)]
    )
    second = write_contact_map_file(
        tmp_path / "second.cm", 3, [(0, 1), (1, 2), (0, 2)]
    )
    return first, second
