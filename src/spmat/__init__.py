"""
Sparse matrices in compressed-row storage with iterative linear solvers.

CRS storage with in-place element updates, matrix arithmetic and Jacobi, SOR/Gauss-Seidel
and conjugate gradient solvers.
"""

__version__ = "0.1.0"

from .sparse_matrix import CRSMatrix
from .matrix_ops import negate, add, subtract, multiply, transpose
from .solvers import solve_jacobi, solve_sor, solve_gauss_seidel, solve_cg
from .progress import ConvergenceHistory, ProgressPrinter
from .linear_solver import LinearSystemSolver, SolveResult
from .config import SolverConfig
from .spmat_errors import (
    ErrorKind,
    SpmatError,
    InvalidIndexError,
    DimensionMismatchError,
    SingularDiagonalError,
    NonConvergenceError,
    InvalidParameterError,
)

__all__ = [
    "CRSMatrix",
    "negate",
    "add",
    "subtract",
    "multiply",
    "transpose",
    "solve_jacobi",
    "solve_sor",
    "solve_gauss_seidel",
    "solve_cg",
    "ConvergenceHistory",
    "ProgressPrinter",
    "LinearSystemSolver",
    "SolveResult",
    "SolverConfig",
    "ErrorKind",
    "SpmatError",
    "InvalidIndexError",
    "DimensionMismatchError",
    "SingularDiagonalError",
    "NonConvergenceError",
    "InvalidParameterError",
]
