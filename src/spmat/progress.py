import pandas as pd
from dataclasses import dataclass, field

from .constants import SolverMethod, ErrorMetric


def method_label(method: str, relaxation: float = 1.0) -> str:
    """Human readable solver name used in progress lines."""
    if method == SolverMethod.JACOBI:
        return "Jacobi"
    if method == SolverMethod.GAUSS_SEIDEL or (method == SolverMethod.SOR and relaxation == 1):
        return "Gauss-Seidel"
    if method == SolverMethod.SOR:
        return f"SOR({relaxation})"
    if method == SolverMethod.CG:
        return "Conjugate Gradient"
    return method


def method_metric(method: str) -> str:
    """Name of the error metric a solver reports."""
    if method == SolverMethod.CG:
        return ErrorMetric.RESIDUAL_SQUARED
    return ErrorMetric.MAX_NORM_CHANGE


class ProgressPrinter:
    """Progress sink printing one line per report, e.g.

        Method: Jacobi, Iter 10, |x-x'|_inf = 0.0012
    """

    def __init__(self, label: str, metric: str):
        self.label = label
        self.metric = metric

    def __call__(self, iteration: int, error) -> None:
        print(f"Method: {self.label}, Iter {iteration}, {self.metric} = {error}")


@dataclass
class ConvergenceHistory:
    """Progress sink recording every (iteration, error) pair it receives."""
    iterations: list[int] = field(default_factory=list)
    errors: list[float] = field(default_factory=list)

    def __call__(self, iteration: int, error) -> None:
        self.iterations.append(iteration)
        self.errors.append(error)

    def __len__(self) -> int:
        return len(self.iterations)

    @property
    def last_iteration(self) -> int:
        return self.iterations[-1] if self.iterations else 0

    @property
    def last_error(self):
        return self.errors[-1] if self.errors else None

    def clear(self) -> None:
        self.iterations.clear()
        self.errors.clear()

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame({'iteration': self.iterations, 'error': [float(e) for e in self.errors]})
