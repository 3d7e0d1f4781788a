#!/usr/bin/env python3
"""Constants and default values for SADP.

This module defines constants used throughout the SADP package including:
- Default annealing schedule (softassign continuation parameters)
- Iteration limits and convergence thresholds
- Numerical constants of the compatibility kernel
- Contact-map file format details
"""

# Continuation (annealing) parameters, b = 1/T
DEFAULT_B0 = 0.5  # initial value, usually within (0, 2]
DEFAULT_BF = 10.0  # final value, usually within (5, 20]
DEFAULT_BR = 1.075  # multiplier per outer step, usually within [1.075, 3.0]

# Iteration limits
DEFAULT_MAX_ASSIGNMENT_ITERATIONS = 4  # I0, usually within {1, ..., 10}
DEFAULT_MAX_SINKHORN_ITERATIONS = 30  # I1, usually within {1, ..., 30}

# Convergence thresholds
DEFAULT_EPS0 = 0.5  # assignment loop, summed over the real block
DEFAULT_EPS1 = 0.05  # Sinkhorn loop, summed over the full matrix

# Every cell of the match matrix starts at this value
INITIAL_MATCH_VALUE = 0.1

# w = 1 / (1 + DISTANCE_PENALTY * |r * d1 - d2|)
DISTANCE_PENALTY = 0.1

# Reported score is rounded to this many decimals
SCORE_DECIMALS = 2

# Sentinel values of an infeasible matching
INFEASIBLE_SCORE = -1.0
INFEASIBLE_NCC = -1

# Contact-map file format
COMMENT_PREFIX = "#"

# Upper bound on the cells of one neighbour-pair chunk of the compatibility
# kernel; a single node whose slots exceed it gets a chunk of its own
KERNEL_CHUNK_ELEMENTS = 1 << 18
