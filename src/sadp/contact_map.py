#!/usr/bin/env python3
"""Contact maps as undirected simple graphs over residue indices.

A contact map is stored as a sorted, duplicate-free adjacency list per
node. Degree sequence and edge count are derived once at construction;
the object is immutable afterwards.

Constructors:
- ContactMap.from_adjacency_matrix: square symmetric boolean matrix
- ContactMap.from_edges: 0-based node pairs
- ContactMap.from_residue_contacts: 1-based residue serial pairs
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

import numpy as np

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContactMap:
    """Undirected contact graph with per-node neighbour lists."""

    adjacency: Tuple[Tuple[int, ...], ...]
    name: str = "NoName"
    degree: np.ndarray = field(init=False, repr=False, compare=False)
    n_edges: int = field(init=False)

    def __post_init__(self) -> None:
        adjacency = tuple(
            tuple(int(k) for k in nbrs) for nbrs in self.adjacency
        )
        n_nodes = len(adjacency)
        for i, nbrs in enumerate(adjacency):
            if any(b <= a for a, b in zip(nbrs, nbrs[1:])):
                raise ValueError(
                    f"Neighbours of node {i} must be sorted and unique; "
                    f"got {list(nbrs)} in {self.name}"
                )
            for k in nbrs:
                if k == i:
                    raise ValueError(f"Self-loop at node {i} in {self.name}")
                if not 0 <= k < n_nodes:
                    raise ValueError(
                        f"Neighbour {k} of node {i} is out of range "
                        f"[0, {n_nodes}) in {self.name}"
                    )
        neighbour_sets = [set(nbrs) for nbrs in adjacency]
        for i, nbrs in enumerate(adjacency):
            for k in nbrs:
                if i not in neighbour_sets[k]:
                    raise ValueError(
                        f"Adjacency is not symmetric: {k} in adjacency[{i}] "
                        f"but {i} not in adjacency[{k}] ({self.name})"
                    )

        degree = np.array([len(nbrs) for nbrs in adjacency], dtype=np.int64)
        object.__setattr__(self, "adjacency", adjacency)
        object.__setattr__(self, "degree", degree)
        object.__setattr__(self, "n_edges", int(degree.sum()) // 2)

        LOGGER.debug(
            f"Initialized ContactMap {self.name} "
            f"(nodes={n_nodes}, edges={self.n_edges})"
        )

    @property
    def n_nodes(self) -> int:
        return len(self.adjacency)

    @classmethod
    def from_adjacency_matrix(
        cls, matrix: np.ndarray, name: str = "NoName"
    ) -> "ContactMap":
        """Build a contact map from a square symmetric adjacency matrix.

        Non-zero off-diagonal entries are contacts. The diagonal must be
        empty.
        """
        matrix = np.asarray(matrix)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise ValueError(
                f"Adjacency matrix must be square; got shape {matrix.shape} "
                f"for {name}"
            )
        contacts = matrix != 0
        if np.any(np.diag(contacts)):
            raise ValueError(f"Adjacency matrix of {name} has self-loops")
        if not np.array_equal(contacts, contacts.T):
            raise ValueError(f"Adjacency matrix of {name} is not symmetric")
        adjacency = tuple(
            tuple(int(k) for k in np.flatnonzero(row)) for row in contacts
        )
        return cls(adjacency=adjacency, name=name)

    @classmethod
    def from_edges(
        cls,
        n_nodes: int,
        edges: Iterable[Sequence[int]],
        name: str = "NoName",
    ) -> "ContactMap":
        """Build a contact map from 0-based node pairs.

        Each contact may be listed once in either orientation or in both;
        repeated contacts are merged.
        """
        if n_nodes < 0:
            raise ValueError(f"n_nodes must be non-negative; got {n_nodes}")
        neighbours: List[set] = [set() for _ in range(n_nodes)]
        for edge in edges:
            i, j = int(edge[0]), int(edge[1])
            if i == j:
                raise ValueError(f"Self-loop at node {i} in {name}")
            for node in (i, j):
                if not 0 <= node < n_nodes:
                    raise ValueError(
                        f"Edge ({i}, {j}) references node outside "
                        f"[0, {n_nodes}) in {name}"
                    )
            neighbours[i].add(j)
            neighbours[j].add(i)
        adjacency = tuple(tuple(sorted(nbrs)) for nbrs in neighbours)
        return cls(adjacency=adjacency, name=name)

    @classmethod
    def from_residue_contacts(
        cls,
        n_residues: int,
        contacts: Iterable[Sequence[int]],
        name: str = "NoName",
    ) -> "ContactMap":
        """Build a contact map from 1-based residue serial pairs."""
        shifted = []
        for contact in contacts:
            i, j = int(contact[0]), int(contact[1])
            if i < 1 or j < 1:
                raise ValueError(
                    f"Residue serials must be 1-based; got ({i}, {j}) "
                    f"in {name}"
                )
            shifted.append((i - 1, j - 1))
        return cls.from_edges(n_residues, shifted, name=name)

    def edges(self) -> List[Tuple[int, int]]:
        """Return each contact once as (i, j) with i < j, sorted."""
        return [
            (i, k)
            for i, nbrs in enumerate(self.adjacency)
            for k in nbrs
            if k > i
        ]

    def adjacency_matrix(self) -> np.ndarray:
        """Return the boolean adjacency matrix."""
        matrix = np.zeros((self.n_nodes, self.n_nodes), dtype=bool)
        for i, k in self.edges():
            matrix[i, k] = True
            matrix[k, i] = True
        return matrix
