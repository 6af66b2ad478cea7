from typing import Literal
from dataclasses import dataclass

from .constants import DEFAULT_THRESHOLD, DEFAULT_MAX_ITER, DEFAULT_SOR_RELAXATION, SolverMethod
from .spmat_errors import InvalidParameterError


@dataclass
class SolverConfig:
    """
    Configuration for solving a sparse linear system.

    This class defines which iterative method is used and how it decides
    it has converged, plus console reporting options.
    """

    method: Literal['jacobi', 'gauss_seidel', 'sor', 'cg'] = 'cg'
    """Iterative method:
    - 'jacobi': Jacobi iteration, any diagonally dominant system
    - 'gauss_seidel': Gauss-Seidel, SOR with relaxation 1
    - 'sor': successive over-relaxation with the given relaxation factor
    - 'cg': conjugate gradient, requires a symmetric positive-definite matrix
    """

    threshold: float = DEFAULT_THRESHOLD
    """Convergence threshold. Max-norm of the per-sweep change for jacobi/gauss_seidel/sor, residual 2-norm for cg."""

    max_iter: int = DEFAULT_MAX_ITER
    """Iteration cap, NonConvergenceError is raised when it is reached."""

    relaxation: float = DEFAULT_SOR_RELAXATION
    """SOR relaxation factor, must be in [1, 2). Only used by 'sor'."""

    report_every: int = 1
    """Print a progress line every this many iterations when verbose."""

    verbose: bool = False
    """Whether to print progress and timing to stdout."""

    def validate(self) -> None:
        """Validate configuration parameters."""
        if self.method not in SolverMethod.ALL:
            raise InvalidParameterError("method", self.method, f"one of {SolverMethod.ALL}")
        if self.threshold < 0:
            raise InvalidParameterError("threshold", self.threshold, "a non-negative value")
        if self.max_iter < 1:
            raise InvalidParameterError("max_iter", self.max_iter, "at least 1")
        if self.report_every < 1:
            raise InvalidParameterError("report_every", self.report_every, "at least 1")
        if self.method == SolverMethod.SOR and not (1 <= self.relaxation < 2):
            raise InvalidParameterError("relaxation", self.relaxation, "a value in [1, 2)")
