from enum import Enum


class ErrorKind(Enum):
    """The closed set of failure kinds raised by the spmat engine."""
    INVALID_INDEX = "InvalidIndex"
    DIMENSION_MISMATCH = "DimensionMismatch"
    SINGULAR_DIAGONAL = "SingularDiagonal"
    NON_CONVERGENCE = "NonConvergence"
    INVALID_PARAMETER = "InvalidParameter"


class SpmatError(ValueError):
    """Base class for all spmat errors."""
    kind: ErrorKind = None


class SpmatConfigError(SpmatError):
    """Base class for spmat configuration errors."""
    pass

class SpmatRuntimeError(SpmatError):
    """Base class for spmat runtime errors."""
    pass



class InvalidParameterError(SpmatConfigError):
    """Raised when a solver or configuration parameter is outside its valid range."""
    kind = ErrorKind.INVALID_PARAMETER

    def __init__(self, name: str, value, expected: str):
        self.name = name
        self.value = value
        self.expected = expected
        message = f"Invalid value for {name}: {value}. Expected {expected}"
        super().__init__(message)


class InvalidIndexError(SpmatRuntimeError):
    """Raised when a (row, col) index falls outside the matrix bounds."""
    kind = ErrorKind.INVALID_INDEX

    def __init__(self, row: int, col: int, shape: tuple[int, int]):
        self.row = row
        self.col = col
        self.shape = shape
        message = f"Index ({row}, {col}) out of bounds for matrix of shape {shape}"
        super().__init__(message)


class DimensionMismatchError(SpmatRuntimeError):
    """Raised when operand shapes are incompatible for an operation."""
    kind = ErrorKind.DIMENSION_MISMATCH

    def __init__(self, operation: str, left_shape, right_shape):
        self.operation = operation
        self.left_shape = left_shape
        self.right_shape = right_shape
        message = f"Incompatible shapes for {operation}: {left_shape} and {right_shape}"
        super().__init__(message)


class SingularDiagonalError(SpmatRuntimeError):
    """Raised when an iterative solver meets a row without a usable diagonal entry."""
    kind = ErrorKind.SINGULAR_DIAGONAL

    def __init__(self, row: int, method: str):
        self.row = row
        self.method = method
        message = f"Zero diagonal at row {row}, {method} cannot divide by A[{row}, {row}]"
        super().__init__(message)


class NonConvergenceError(SpmatRuntimeError):
    """Raised when an iterative solver reaches its iteration cap without converging."""
    kind = ErrorKind.NON_CONVERGENCE

    def __init__(self, method: str, max_iter: int, error=None, iterations: int = None):
        self.method = method
        self.max_iter = max_iter
        self.error = error
        self.iterations = max_iter if iterations is None else iterations

        if self.iterations < max_iter:
            message = f"{method} broke down at iteration {self.iterations} of at most {max_iter}"
        else:
            message = f"{method} did not converge within {max_iter} iterations"
        if error is not None:
            message += f" (last error: {error})"
        super().__init__(message)
