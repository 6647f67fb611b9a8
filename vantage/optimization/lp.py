"""
Linear program model for the weighted set-cover relaxation.

The model is held in memory: non-negative variables with costs and bounds,
and covering constraints of the form sum(x_j for j in S_i) >= rhs. The same
model object serves the continuous relaxation and the binary final solve;
the integrality flag is fixed at construction.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import numpy as np
from scipy import sparse


@dataclass
class LPProblem:
    """
    Minimization problem ``min c^T x  s.t.  A x >= b,  lower <= x <= upper``.

    Every constraint row has unit coefficients on its variables, which is all
    the covering formulation needs.

    Attributes:
        integer: Whether every variable is restricted to integers
        name: Model name (used by file-writing backends)

    Example:
        >>> lp = LPProblem()
        >>> a = lp.add_variable(cost=1.0)
        >>> b = lp.add_variable(cost=2.0)
        >>> lp.add_cover_constraint([a, b])
        0
        >>> lp.constraint_matrix().toarray()
        array([[1., 1.]])
    """
    integer: bool = False
    name: str = "sensor_placement"

    costs: List[float] = field(init=False, default_factory=list)
    lower: List[float] = field(init=False, default_factory=list)
    upper: List[float] = field(init=False, default_factory=list)
    rows: List[np.ndarray] = field(init=False, default_factory=list)
    rhs: List[float] = field(init=False, default_factory=list)

    @property
    def num_variables(self) -> int:
        return len(self.costs)

    @property
    def num_constraints(self) -> int:
        return len(self.rows)

    def add_variable(self, cost: float = 1.0, lower: float = 0.0, upper: float = 1.0) -> int:
        """
        Add a variable and return its index.

        Raises:
            ValueError: If lower > upper
        """
        if lower > upper:
            raise ValueError(f"Variable lower bound {lower} exceeds upper bound {upper}")
        self.costs.append(float(cost))
        self.lower.append(float(lower))
        self.upper.append(float(upper))
        return len(self.costs) - 1

    def add_cover_constraint(self, indices: Sequence[int], rhs: float = 1.0) -> int:
        """
        Add ``sum(x[indices]) >= rhs`` and return the constraint index.

        An empty index set is allowed; it makes the problem infeasible when
        rhs > 0.
        """
        indices = np.unique(np.asarray(indices, dtype=np.int64))
        if len(indices) > 0 and (indices[0] < 0 or indices[-1] >= self.num_variables):
            raise ValueError(
                f"Constraint references variables outside [0, {self.num_variables}): "
                f"{indices[(indices < 0) | (indices >= self.num_variables)].tolist()}"
            )
        self.rows.append(indices)
        self.rhs.append(float(rhs))
        return len(self.rows) - 1

    def set_objective(self, costs: Sequence[float]) -> None:
        """Replace all objective coefficients."""
        costs = np.asarray(costs, dtype=np.float64).ravel()
        if len(costs) != self.num_variables:
            raise ValueError(
                f"Expected {self.num_variables} objective coefficients, got {len(costs)}"
            )
        self.costs = costs.tolist()

    def objective(self) -> np.ndarray:
        """Objective coefficients as an array."""
        return np.asarray(self.costs, dtype=np.float64)

    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """(lower, upper) variable bounds as arrays."""
        return (
            np.asarray(self.lower, dtype=np.float64),
            np.asarray(self.upper, dtype=np.float64),
        )

    def constraint_matrix(self) -> sparse.csr_matrix:
        """Constraint coefficients as a CSR matrix of shape (num_constraints, num_variables)."""
        indptr = np.zeros(self.num_constraints + 1, dtype=np.int64)
        if self.rows:
            indptr[1:] = np.cumsum([len(r) for r in self.rows])
            indices = np.concatenate(self.rows)
        else:
            indices = np.zeros(0, dtype=np.int64)
        data = np.ones(len(indices), dtype=np.float64)
        return sparse.csr_matrix(
            (data, indices, indptr),
            shape=(self.num_constraints, self.num_variables),
        )

    def constraint_rhs(self) -> np.ndarray:
        return np.asarray(self.rhs, dtype=np.float64)

    def evaluate(self, x: np.ndarray) -> float:
        """Objective value of a solution vector."""
        return float(self.objective() @ np.asarray(x, dtype=np.float64))

    def is_feasible(self, x: np.ndarray, tol: float = 1e-6) -> bool:
        """Whether x satisfies bounds and every covering constraint."""
        x = np.asarray(x, dtype=np.float64)
        lower, upper = self.bounds()
        if np.any(x < lower - tol) or np.any(x > upper + tol):
            return False
        if self.num_constraints == 0:
            return True
        return bool(np.all(self.constraint_matrix() @ x >= self.constraint_rhs() - tol))


def build_lp_problem(
    visibility: np.ndarray,
    weights: Optional[np.ndarray] = None,
    integer: bool = False,
) -> LPProblem:
    """
    Build the covering program for a visibility matrix.

    One variable per candidate (column) in [0, 1], one constraint per cell
    (row): every cell must be seen by at least one selected candidate.

    Args:
        visibility: (N, M) binary matrix
        weights: Objective weights of length M (default: all ones)
        integer: Build the binary program instead of the relaxation

    Returns:
        LPProblem with M variables and N constraints
    """
    visibility = np.asarray(visibility)
    if visibility.ndim != 2:
        raise ValueError(f"visibility must be 2D, got shape {visibility.shape}")
    n_cells, n_candidates = visibility.shape

    if weights is None:
        weights = np.ones(n_candidates)
    weights = np.asarray(weights, dtype=np.float64).ravel()
    if len(weights) != n_candidates:
        raise ValueError(
            f"weights has length {len(weights)} but visibility has {n_candidates} columns"
        )

    problem = LPProblem(integer=integer)
    for weight in weights:
        problem.add_variable(cost=weight, lower=0.0, upper=1.0)

    csr = sparse.csr_matrix(visibility != 0)
    for i in range(n_cells):
        problem.add_cover_constraint(csr.indices[csr.indptr[i]:csr.indptr[i + 1]], rhs=1.0)

    return problem
