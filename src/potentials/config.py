"""
Configuration & Numeric Defaults
================================
This module serves as the central registry for the physical constants and
numeric policy of the simulation engine.

Why is this file needed?
------------------------
1. Abstraction: It prevents magic numbers (tolerances, iteration caps,
   default material values) scattered throughout the grid and solver code.
2. Consistency: The grid accessors, the rasterizer and the solver all read
   the same implicit defaults for unset nodes.

Exports:
    EPSILON_0 (float): Permittivity of free space [F/m].
    DEFAULT_EPSILON_R (float): Relative permittivity of an untouched node.
    DEFAULT_RHO (float): Fixed charge density of an untouched node.
    BOUNDARY_VOLTAGE (float): Dirichlet value of free domain-boundary nodes [V].
    DEFAULT_TOLERANCE (float): Largest per-sweep voltage change accepted as converged [V].
    DEFAULT_MAX_ITERATIONS (int): Sweep cap before giving up.
    DEFAULT_RELAXATION (float): Over-relaxation factor (1.0 = plain Gauss-Seidel).
    PROGRESS_LOG_INTERVAL (int): Number of sweeps between progress log records.
"""
from scipy import constants

# Physical constants
EPSILON_0: float = constants.epsilon_0

# Implicit values of unset grid nodes
DEFAULT_EPSILON_R: float = 1.0
DEFAULT_RHO: float = 0.0
BOUNDARY_VOLTAGE: float = 0.0

# Relaxation policy
DEFAULT_TOLERANCE: float = 1e-6
DEFAULT_MAX_ITERATIONS: int = 10_000
DEFAULT_RELAXATION: float = 1.0
PROGRESS_LOG_INTERVAL: int = 500
