import os
import time
import numpy as np
import pandas as pd
from dataclasses import dataclass

from .sparse_matrix import CRSMatrix
from .solvers import solve_jacobi, solve_sor, solve_cg
from .progress import ConvergenceHistory, ProgressPrinter, method_label, method_metric
from .constants import SolverMethod
from .config import SolverConfig


@dataclass
class SolveResult:
    """Container for the outcome of one successful solve"""
    method: str
    solution: np.ndarray
    iterations: int  # sweeps (jacobi/sor) or CG steps performed, 0 if b was already solved by x = 0
    error: float  # final max-norm change, or squared residual r.r for cg
    elapsed: float  # wall time in seconds


class LinearSystemSolver:
    """
    Front end for the iterative solvers.

    Picks the solver named by a SolverConfig, records the convergence history of
    every solve and can export the last solution and history to csv.
    """

    def __init__(self, config: SolverConfig = SolverConfig()):
        """
        Initialize the LinearSystemSolver

        Args:
            config: SolverConfig object defining the method and its stopping criterion
        """
        self.config = config
        self.config.validate()

        self.label = method_label(self.config.method, self.config.relaxation)
        self.history = ConvergenceHistory()
        self.result = None

    def _progress_sink(self):
        printer = ProgressPrinter(self.label, method_metric(self.config.method))

        def sink(iteration: int, error) -> None:
            self.history(iteration, error)
            if self.config.verbose and iteration % self.config.report_every == 0:
                printer(iteration, error)
        return sink

    def solve(self, matrix: CRSMatrix, b) -> SolveResult:
        """
        Solve matrix @ x = b with the configured method.

        Errors raised by the solver propagate unchanged and leave no result behind.
        """
        if self.config.verbose:
            print(f"=== Solving {matrix.nrow}x{matrix.ncol} system, nnz={matrix.nnz}, method: {self.label} ===")

        self.history.clear()
        self.result = None
        kwargs = dict(threshold=self.config.threshold, max_iter=self.config.max_iter,
                      progress=self._progress_sink(), report_every=1)

        st = time.time()
        method = self.config.method
        if method == SolverMethod.JACOBI:
            x = solve_jacobi(matrix, b, **kwargs)
        elif method == SolverMethod.GAUSS_SEIDEL:
            x = solve_sor(matrix, b, relaxation=1, **kwargs)
        elif method == SolverMethod.SOR:
            x = solve_sor(matrix, b, relaxation=self.config.relaxation, **kwargs)
        else:
            x = solve_cg(matrix, b, **kwargs)
        elapsed = time.time() - st

        self.result = SolveResult(method=method, solution=x, iterations=self.history.last_iteration,
                                  error=self.history.last_error, elapsed=elapsed)
        if self.config.verbose:
            print(f"  iterations: {self.result.iterations}")
            print(f"  took: {elapsed} seconds")
        return self.result

    def get_results(self) -> dict:
        """
        Get a summary of the last solve
        """
        if self.result is None:
            return dict()
        return {
            'method': self.result.method,
            'iterations': self.result.iterations,
            'error': self.result.error,
            'elapsed': self.result.elapsed,
            'solution': self.result.solution.tolist(),
        }

    def export_to_file(self, output_dir: str, save_history: bool = True):
        if self.result is None:
            print("Warning: no solution is available")
            return

        os.makedirs(output_dir, exist_ok=True)

        df = pd.DataFrame({'index': np.arange(len(self.result.solution)), 'x': self.result.solution})
        output_file = os.path.join(output_dir, 'solution.csv')
        df.to_csv(output_file, index=False)

        if save_history:
            df = self.history.to_dataframe()
            output_file = os.path.join(output_dir, 'convergence.csv')
            df.to_csv(output_file, index=False)
