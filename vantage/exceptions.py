"""
Typed failures of the sensor placement pipeline.

Callers of the pipeline receive either a valid pose sequence or one of the
exceptions below. No partial or fractional solution is ever returned.

Hierarchy:
    PlacementError (RuntimeError)
    ├── DegenerateInput (also ValueError): nothing to cover in the region
    ├── InfeasibleInstance: some cell cannot be covered, or the LP is infeasible
    ├── UnboundedProblem: the LP objective is unbounded (malformed constraints)
    └── SolverError: the LP backend failed for implementation reasons
"""

from typing import Optional, Sequence


class PlacementError(RuntimeError):
    """
    Base class for all sensor placement failures.

    Attributes:
        status: Solver status that triggered the failure, if any
    """

    def __init__(self, message: str, status: Optional[str] = None):
        super().__init__(message)
        self.status = status


class DegenerateInput(PlacementError, ValueError):
    """No free cells were found while discretizing the region of interest."""


class InfeasibleInstance(PlacementError):
    """
    The coverage problem has no solution.

    Raised when a cell is visible from no candidate pose, or when the
    LP backend reports the problem infeasible.

    Attributes:
        cell_indices: Indices of the cells that cannot be covered (may be empty
            when the infeasibility was reported by the solver)
    """

    def __init__(
        self,
        message: str,
        cell_indices: Optional[Sequence[int]] = None,
        status: Optional[str] = None,
    ):
        super().__init__(message, status=status)
        self.cell_indices = list(cell_indices) if cell_indices is not None else []


class UnboundedProblem(PlacementError):
    """The LP backend reported an unbounded objective."""


class SolverError(PlacementError):
    """The LP backend failed to produce a solution."""
