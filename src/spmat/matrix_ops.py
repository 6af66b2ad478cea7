import numpy as np

from .sparse_matrix import CRSMatrix
from .spmat_errors import DimensionMismatchError


def _from_rows(nrow: int, ncol: int, values: list, columns: list, row_start: list, dtype) -> CRSMatrix:
    # rows are assembled already sorted and zero-free, no need to go through triplet compaction
    result = CRSMatrix(nrow, ncol, dtype=dtype)
    result.values = np.array(values, dtype=result.dtype) if len(values) > 0 else np.empty(0, dtype=result.dtype)
    result.columns = np.asarray(columns, dtype=np.intp)
    result.row_start = np.asarray(row_start, dtype=np.intp)
    return result


def negate(a: CRSMatrix) -> CRSMatrix:
    """Returns a copy of a with every value sign-flipped."""
    result = a.copy()
    result.values = -result.values
    return result


def add(a: CRSMatrix, b: CRSMatrix) -> CRSMatrix:
    """
    Entry-wise sum of two matrices of equal shape.

    Each row is merged with a two-pointer walk over the sorted column lists.
    Entries that cancel to exactly zero are not stored.

    Raises:
        DimensionMismatchError: If the shapes differ
    """
    if a.shape != b.shape:
        raise DimensionMismatchError("add", a.shape, b.shape)

    dtype = np.result_type(a.dtype, b.dtype)
    a_cols, a_vals = a.columns.tolist(), a.values.tolist()
    b_cols, b_vals = b.columns.tolist(), b.values.tolist()

    values, columns, row_start = [], [], [0]
    for r in range(a.nrow):
        ia, ea = a.row_start[r], a.row_start[r + 1]
        ib, eb = b.row_start[r], b.row_start[r + 1]
        while ia < ea and ib < eb:
            if a_cols[ia] < b_cols[ib]:
                columns.append(a_cols[ia])
                values.append(a_vals[ia])
                ia += 1
            elif a_cols[ia] > b_cols[ib]:
                columns.append(b_cols[ib])
                values.append(b_vals[ib])
                ib += 1
            else:
                total = a_vals[ia] + b_vals[ib]
                if total != 0:
                    columns.append(a_cols[ia])
                    values.append(total)
                ia += 1
                ib += 1
        columns.extend(a_cols[ia:ea])
        values.extend(a_vals[ia:ea])
        columns.extend(b_cols[ib:eb])
        values.extend(b_vals[ib:eb])
        row_start.append(len(values))

    return _from_rows(a.nrow, a.ncol, values, columns, row_start, dtype)


def subtract(a: CRSMatrix, b: CRSMatrix) -> CRSMatrix:
    """Entry-wise difference a - b."""
    return add(a, negate(b))


def transpose(a: CRSMatrix) -> CRSMatrix:
    """Returns the transpose of a, rebuilt through the triplet constructor."""
    return CRSMatrix.from_triplets(a.ncol, a.nrow, a.columns, a.row_indices(), a.values, dtype=a.dtype)


def _multiply_matrix(a: CRSMatrix, b: CRSMatrix) -> CRSMatrix:
    if a.ncol != b.nrow:
        raise DimensionMismatchError("multiply", a.shape, b.shape)

    # rows of b^T are the columns of b
    bt = transpose(b)
    dtype = np.result_type(a.dtype, b.dtype)

    values, columns, row_start = [], [], [0]
    for i in range(a.nrow):
        a_start, a_end = a.row_start[i], a.row_start[i + 1]
        if a_start < a_end:
            a_cols = a.columns[a_start:a_end]
            a_vals = a.values[a_start:a_end]
            for j in range(bt.nrow):
                t_start, t_end = bt.row_start[j], bt.row_start[j + 1]
                if t_start == t_end:
                    continue
                common, ia, it = np.intersect1d(a_cols, bt.columns[t_start:t_end],
                                                assume_unique=True, return_indices=True)
                if len(common) == 0:
                    continue
                total = np.dot(a_vals[ia], bt.values[t_start:t_end][it])
                if total != 0:
                    columns.append(j)
                    values.append(total)
        row_start.append(len(values))

    return _from_rows(a.nrow, bt.nrow, values, columns, row_start, dtype)


def _multiply_vector(a: CRSMatrix, v) -> np.ndarray:
    v = np.asarray(v)
    if v.ndim != 1 or v.shape[0] != a.ncol:
        raise DimensionMismatchError("multiply", a.shape, v.shape)

    result = np.zeros(a.nrow, dtype=np.result_type(a.dtype, v.dtype))
    for r in range(a.nrow):
        start, end = a.row_start[r], a.row_start[r + 1]
        if start < end:
            result[r] = np.dot(a.values[start:end], v[a.columns[start:end]])
    return result


def multiply(a: CRSMatrix, b):
    """
    Matrix product a @ b.

    Args:
        a: Left operand
        b: A CRSMatrix with b.nrow == a.ncol, or a dense vector of length a.ncol

    Returns:
        A new CRSMatrix when b is a matrix, a dense numpy vector when b is a vector

    Raises:
        DimensionMismatchError: If the inner dimensions differ
    """
    if isinstance(b, CRSMatrix):
        return _multiply_matrix(a, b)
    return _multiply_vector(a, b)
