#!/usr/bin/env python3

import logging
from dataclasses import dataclass, field
from typing import ClassVar, List, Optional, Tuple, Union

import numpy as np

from sadp import constants

LOGGER = logging.getLogger(__name__)

NodePair = Tuple[int, int]


@dataclass(frozen=True)
class Feasible:
    """Verdict for a matching whose shared contacts are all order-consistent.

    Attributes:
        raw_score: Shared contacts divided by the smaller edge count.
        ncc: Number of shared contacts.
    """

    raw_score: float
    ncc: int
    is_feasible: ClassVar[bool] = True

    @property
    def score(self) -> float:
        """Score rounded half-up to ``constants.SCORE_DECIMALS`` places."""
        scale = 10**constants.SCORE_DECIMALS
        return float(np.floor(scale * self.raw_score + 0.5) / scale)


@dataclass(frozen=True)
class Infeasible:
    """Verdict for a matching that maps some contact onto a crossing pair.

    Attributes:
        contact: The contact (i, k) of the first graph that was mapped.
        image: The pair (j, l) of the second graph it was mapped onto.
    """

    contact: NodePair
    image: NodePair
    is_feasible: ClassVar[bool] = False
    raw_score: ClassVar[float] = constants.INFEASIBLE_SCORE
    score: ClassVar[float] = constants.INFEASIBLE_SCORE
    ncc: ClassVar[int] = constants.INFEASIBLE_NCC


Verdict = Union[Feasible, Infeasible]


@dataclass
class MatchState:
    """Mutable optimizer state owned by a single matcher.

    ``match`` has one slack row and one slack column so that rows and
    columns can both be normalized when the graphs differ in size. The
    scratch buffers are allocated once and reused by every iteration.
    """

    n1: int
    n2: int
    match: np.ndarray = field(init=False)
    compatibility: np.ndarray = field(init=False)
    previous_iteration_matrix: np.ndarray = field(init=False)
    previous_sinkhorn_matrix: np.ndarray = field(init=False)
    b: float = 0.0
    n_iterations: int = 0

    def __post_init__(self) -> None:
        shape = (self.n1 + 1, self.n2 + 1)
        self.match = np.full(shape, constants.INITIAL_MATCH_VALUE)
        self.compatibility = np.zeros((self.n1, self.n2))
        self.previous_iteration_matrix = np.zeros(shape)
        self.previous_sinkhorn_matrix = np.zeros(shape)
        LOGGER.debug(f"Allocated match state with shape {shape}")

    def reset(self, b0: float) -> None:
        """Restore the initial match matrix and annealing parameter."""
        self.match.fill(constants.INITIAL_MATCH_VALUE)
        self.b = b0
        self.n_iterations = 0


@dataclass(frozen=True)
class MatchResult:
    """Outcome of one matcher run, reported in the caller's input order.

    Attributes:
        matching: Sorted (index in first map, index in second map) pairs.
        verdict: Feasible or Infeasible scoring verdict.
        iterations: Number of assignment iterations performed.
        elapsed_ms: Wall-clock time of the optimization in milliseconds.
        match_matrix: Final binary matching with rows indexing the smaller
            map, as used internally.
        preserved_input_order: False if the maps were swapped internally.
    """

    matching: List[NodePair]
    verdict: Verdict
    iterations: int
    elapsed_ms: float
    match_matrix: Optional[np.ndarray] = field(default=None, repr=False)
    preserved_input_order: bool = True

    @property
    def score(self) -> float:
        return self.verdict.score

    @property
    def ncc(self) -> int:
        return self.verdict.ncc

    @property
    def is_feasible(self) -> bool:
        return self.verdict.is_feasible
