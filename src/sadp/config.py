#!/usr/bin/env python3
"""Configuration dataclasses for the SADP matcher.

This module provides the immutable configuration object that carries the
softassign continuation schedule, iteration limits and convergence
thresholds into a matcher instance. Each matcher owns its own config, so
any number of matchers can run side by side.
"""

import math
from dataclasses import dataclass

from sadp import constants


@dataclass(frozen=True)
class SADPConfig:
    """Parameters of the softassign + dynamic programming matcher.

    The annealing parameter is b = 1/T rather than the temperature T.

    Attributes:
        b0: Initial annealing parameter (b0 > 0).
        bf: Final annealing parameter (bf > b0).
        br: Factor by which b is multiplied after each outer step (br > 1).
        max_assignment_iterations: Softmax iterations per temperature (I0).
        max_sinkhorn_iterations: Sinkhorn passes per softmax iteration (I1).
        eps0: Convergence threshold of the assignment loop.
        eps1: Convergence threshold of the Sinkhorn loop.
    """

    b0: float = constants.DEFAULT_B0
    bf: float = constants.DEFAULT_BF
    br: float = constants.DEFAULT_BR
    max_assignment_iterations: int = constants.DEFAULT_MAX_ASSIGNMENT_ITERATIONS
    max_sinkhorn_iterations: int = constants.DEFAULT_MAX_SINKHORN_ITERATIONS
    eps0: float = constants.DEFAULT_EPS0
    eps1: float = constants.DEFAULT_EPS1

    def __post_init__(self) -> None:
        for name in ("b0", "bf", "br", "eps0", "eps1"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ValueError(f"{name} must be finite; got {value}")
        if self.b0 <= 0:
            raise ValueError(f"b0 must be positive; got {self.b0}")
        if self.bf <= self.b0:
            raise ValueError(
                f"bf ({self.bf}) must be greater than b0 ({self.b0})"
            )
        if self.br <= 1:
            raise ValueError(f"br must be greater than 1; got {self.br}")
        if self.max_assignment_iterations < 1:
            raise ValueError(
                "max_assignment_iterations must be at least 1; got "
                f"{self.max_assignment_iterations}"
            )
        if self.max_sinkhorn_iterations < 1:
            raise ValueError(
                "max_sinkhorn_iterations must be at least 1; got "
                f"{self.max_sinkhorn_iterations}"
            )
        if self.eps0 < 0:
            raise ValueError(f"eps0 must be non-negative; got {self.eps0}")
        if self.eps1 < 0:
            raise ValueError(f"eps1 must be non-negative; got {self.eps1}")

    @property
    def outer_step_count(self) -> int:
        """Number of annealing steps taken to raise b from b0 past bf.

        Solves b0 * br**x >= bf for x, so the progress of a run can be
        reported as a percentage before the run finishes.
        """
        steps = math.log(self.bf / self.b0) / math.log(self.br)
        return int(math.floor(steps)) + 1

    @classmethod
    def from_cli_args(
        cls,
        b0: float = constants.DEFAULT_B0,
        bf: float = constants.DEFAULT_BF,
        br: float = constants.DEFAULT_BR,
        assignment_iterations: int = constants.DEFAULT_MAX_ASSIGNMENT_ITERATIONS,
        sinkhorn_iterations: int = constants.DEFAULT_MAX_SINKHORN_ITERATIONS,
        eps0: float = constants.DEFAULT_EPS0,
        eps1: float = constants.DEFAULT_EPS1,
    ) -> "SADPConfig":
        """Create an SADPConfig from CLI arguments."""
        return cls(
            b0=b0,
            bf=bf,
            br=br,
            max_assignment_iterations=assignment_iterations,
            max_sinkhorn_iterations=sinkhorn_iterations,
            eps0=eps0,
            eps1=eps1,
        )
