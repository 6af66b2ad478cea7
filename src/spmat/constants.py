DEFAULT_THRESHOLD = 1e-6
DEFAULT_MAX_ITER = 1000000
DEFAULT_SOR_RELAXATION = 1.67


class SolverMethod:
    JACOBI = "jacobi"
    GAUSS_SEIDEL = "gauss_seidel"
    SOR = "sor"
    CG = "cg"

    ALL = [JACOBI, GAUSS_SEIDEL, SOR, CG]


class ErrorMetric:
    MAX_NORM_CHANGE = "|x-x'|_inf"
    RESIDUAL_SQUARED = "r^2"
