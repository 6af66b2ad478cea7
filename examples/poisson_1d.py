import os
import sys
import numpy as np

# Add the src directory to Python path to import local spmat
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))


from spmat import CRSMatrix, LinearSystemSolver, SolverConfig



def build_system(n: int) -> tuple[CRSMatrix, np.ndarray]:
    """Finite difference discretization of -u'' = 1 on (0, 1) with u(0) = u(1) = 0."""
    h = 1.0 / (n + 1)
    a = CRSMatrix(n, n)
    for i in range(n):
        a.put(i, i, 2.0 / h ** 2)
        if i > 0:
            a.put(i, i - 1, -1.0 / h ** 2)
        if i < n - 1:
            a.put(i, i + 1, -1.0 / h ** 2)
    b = np.ones(n)
    return a, b


if __name__ == '__main__':
    n = 50
    a, b = build_system(n)
    x_grid = np.linspace(0, 1, n + 2)[1:-1]
    exact = x_grid * (1 - x_grid) / 2

    for method in ['jacobi', 'gauss_seidel', 'sor', 'cg']:
        config = SolverConfig(method=method, threshold=1e-10, relaxation=1.9, verbose=True, report_every=1000)
        solver = LinearSystemSolver(config=config)
        result = solver.solve(a, b)
        print(f"{method}: max error vs exact = {np.max(np.abs(result.solution - exact))}")

    output_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'output')
    solver.export_to_file(output_dir)
