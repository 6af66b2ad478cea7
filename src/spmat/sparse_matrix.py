import numpy as np
from scipy import sparse

from .spmat_errors import InvalidIndexError, DimensionMismatchError, InvalidParameterError



class CRSMatrix:
    """Sparse matrix in compressed-row storage.

    Stored entries live in three parallel arrays:
        values: the non-zero scalars, in row-major order
        columns: the column index of each value, strictly increasing within a row
        row_start: offsets into values/columns, length nrow + 1, row_start[-1] == nnz

    Zero is never stored. The column count is kept separately since trailing
    all-zero columns leave no trace in the stored data.
    """

    def __init__(self, nrow: int, ncol: int, triplets=None, dtype=np.float64):
        """
        Args:
            nrow: Number of rows.
            ncol: Number of columns.
            triplets: Optional iterable of (row, col, value). Zero values are dropped,
                duplicates collapse to one entry with the last value in input order winning.
            dtype: Field type of the values. Use ``object`` for custom numeric types.
        """
        if nrow < 0 or ncol < 0:
            raise InvalidParameterError("shape", (nrow, ncol), "non-negative dimensions")
        self.nrow = int(nrow)
        self.ncol = int(ncol)
        self.dtype = np.dtype(dtype)
        self.values = np.empty(0, dtype=self.dtype)
        self.columns = np.empty(0, dtype=np.intp)
        self.row_start = np.zeros(self.nrow + 1, dtype=np.intp)

        if triplets is not None:
            triplets = list(triplets)
            rows = [t[0] for t in triplets]
            cols = [t[1] for t in triplets]
            vals = [t[2] for t in triplets]
            self._compact(rows, cols, vals)

    @classmethod
    def from_triplets(cls, nrow: int, ncol: int, rows, cols, vals, dtype=np.float64) -> 'CRSMatrix':
        """Build a matrix from three parallel arrays of row indices, column indices and values."""
        if len(rows) != len(vals) or len(cols) != len(vals):
            raise DimensionMismatchError("from_triplets", (len(rows), len(cols)), (len(vals),))
        result = cls(nrow, ncol, dtype=dtype)
        result._compact(rows, cols, vals)
        return result

    @classmethod
    def from_dense(cls, dense, dtype=None) -> 'CRSMatrix':
        """Build a matrix from a dense 2D array, keeping only the non-zero entries."""
        dense = np.asarray(dense, dtype=dtype)
        if dense.ndim != 2:
            raise InvalidParameterError("dense", dense.shape, "a 2D array")
        rows, cols = np.nonzero(dense != 0)
        return cls.from_triplets(dense.shape[0], dense.shape[1], rows, cols, dense[rows, cols], dtype=dense.dtype)

    @classmethod
    def identity(cls, n: int, dtype=np.float64) -> 'CRSMatrix':
        """Returns the n x n identity matrix."""
        one = np.ones(1, dtype=dtype)[0]
        result = cls(n, n, dtype=dtype)
        result.values = np.full(n, one, dtype=result.dtype)
        result.columns = np.arange(n, dtype=np.intp)
        result.row_start = np.arange(n + 1, dtype=np.intp)
        return result

    @classmethod
    def from_scipy(cls, matrix) -> 'CRSMatrix':
        """Build a matrix from any scipy.sparse matrix.

        Duplicate entries are summed the way scipy sums them and explicit zeros are dropped.
        """
        csr = sparse.csr_matrix(matrix, copy=True)
        csr.sum_duplicates()
        csr.eliminate_zeros()
        csr.sort_indices()
        result = cls(csr.shape[0], csr.shape[1], dtype=csr.dtype)
        result.values = np.asarray(csr.data, dtype=result.dtype)
        result.columns = np.asarray(csr.indices, dtype=np.intp)
        result.row_start = np.asarray(csr.indptr, dtype=np.intp)
        return result

    def _compact(self, rows, cols, vals) -> None:
        rows = np.asarray(rows).ravel()
        cols = np.asarray(cols).ravel()
        vals = np.asarray(vals, dtype=self.dtype).ravel()

        # indices must be integral, 1.7 is rejected rather than truncated to 1
        fractional = np.zeros(len(rows), dtype=bool)
        for idx in (rows, cols):
            if len(idx) > 0 and not np.issubdtype(idx.dtype, np.integer):
                fractional |= np.asarray(idx != np.trunc(idx.astype(np.float64)), dtype=bool)
        if np.any(fractional):
            k = np.flatnonzero(fractional)[0]
            raise InvalidIndexError(rows[k], cols[k], self.shape)
        rows = rows.astype(np.intp)
        cols = cols.astype(np.intp)

        bad = (rows < 0) | (rows >= self.nrow) | (cols < 0) | (cols >= self.ncol)
        if np.any(bad):
            k = np.flatnonzero(bad)[0]
            raise InvalidIndexError(int(rows[k]), int(cols[k]), self.shape)

        keep = np.asarray(vals != 0, dtype=bool)
        rows, cols, vals = rows[keep], cols[keep], vals[keep]

        # stable sort keeps input order among equal keys, the last of them is stored
        keys = rows * self.ncol + cols
        order = np.argsort(keys, kind='stable')
        rows, cols, vals, keys = rows[order], cols[order], vals[order], keys[order]
        last = np.ones(len(keys), dtype=bool)
        last[:-1] = keys[1:] != keys[:-1]
        rows, cols, vals = rows[last], cols[last], vals[last]

        counts = np.bincount(rows, minlength=self.nrow)
        self.values = vals
        self.columns = cols
        self.row_start = np.concatenate(([0], np.cumsum(counts))).astype(np.intp)

    @property
    def shape(self) -> tuple[int, int]:
        return (self.nrow, self.ncol)

    @property
    def nnz(self) -> int:
        """Number of stored (non-zero) entries."""
        return int(self.row_start[-1])

    @property
    def zero(self):
        """The zero of this matrix's field."""
        return np.zeros(1, dtype=self.dtype)[0]

    def _check_index(self, i: int, j: int) -> tuple[int, int]:
        if not (0 <= i < self.nrow and 0 <= j < self.ncol) or i != int(i) or j != int(j):
            raise InvalidIndexError(i, j, self.shape)
        return int(i), int(j)

    def _find(self, i: int, j: int) -> tuple[int, bool]:
        """Binary search row i for column j.

        Returns:
            The insertion offset into values/columns and whether column j is stored there.
        """
        start, end = self.row_start[i], self.row_start[i + 1]
        k = int(start + np.searchsorted(self.columns[start:end], j))
        return k, bool(k < end and self.columns[k] == j)

    def at(self, i: int, j: int):
        """Returns the value at position (i, j), or zero if nothing is stored there."""
        i, j = self._check_index(i, j)
        k, found = self._find(i, j)
        if found:
            return self.values[k]
        return self.zero

    def put(self, i: int, j: int, value) -> None:
        """Sets the value at position (i, j).

        Putting zero is a no-op, even when (i, j) already holds a non-zero value:
        stored entries cannot be cleared through put.

        Inserting a new entry shifts every later entry, so it costs O(nnz).
        """
        i, j = self._check_index(i, j)
        # zero test on the value as stored, a lossy cast can turn it into zero
        value = np.asarray(value, dtype=self.dtype)[()]
        if value == 0:
            return
        k, found = self._find(i, j)
        if found:
            self.values[k] = value
        else:
            self.values = np.insert(self.values, k, value)
            self.columns = np.insert(self.columns, k, j)
            self.row_start[i + 1:] += 1

    def __getitem__(self, key):
        """Returns the value at position (i, j).

        Args:
            key: A tuple (i, j)

        Returns:
            The value at position (i, j), or 0 if not stored.
        """
        if isinstance(key, tuple) and len(key) == 2:
            i, j = key
        else:
            raise KeyError("CRSMatrix indices must be a tuple of length 2")
        return self.at(i, j)

    def __setitem__(self, key, value) -> None:
        """Sets the value at position (i, j), see put."""
        if isinstance(key, tuple) and len(key) == 2:
            i, j = key
        else:
            raise KeyError("CRSMatrix indices must be a tuple of length 2")
        self.put(i, j, value)

    def __contains__(self, key) -> bool:
        """Checks if an entry is stored at position (i, j)."""
        if isinstance(key, tuple) and len(key) == 2:
            i, j = key
        else:
            return False
        if not (0 <= i < self.nrow and 0 <= j < self.ncol):
            return False
        return self._find(i, j)[1]

    def row_indices(self) -> np.ndarray:
        """Returns the row index of every stored entry, aligned with values and columns."""
        return np.repeat(np.arange(self.nrow, dtype=np.intp), np.diff(self.row_start))

    def items(self) -> list[tuple[tuple[int, int], object]]:
        """Returns a list of ((i, j), value) pairs in row-major order."""
        rows = self.row_indices()
        return [((int(rows[k]), int(self.columns[k])), self.values[k]) for k in range(self.nnz)]

    def diagonal(self) -> np.ndarray:
        """Returns the main diagonal as a dense vector, zero where nothing is stored."""
        n = min(self.nrow, self.ncol)
        diag = np.zeros(n, dtype=self.dtype)
        rows = self.row_indices()
        on_diag = rows == self.columns
        diag[rows[on_diag]] = self.values[on_diag]
        return diag

    def to_dense(self) -> np.ndarray:
        dense = np.zeros(self.shape, dtype=self.dtype)
        dense[self.row_indices(), self.columns] = self.values
        return dense

    def to_scipy(self) -> sparse.csr_matrix:
        """Returns a scipy.sparse.csr_matrix sharing no memory with this matrix.

        Only numeric dtypes are supported by scipy.
        """
        return sparse.csr_matrix((self.values.copy(), self.columns.copy(), self.row_start.copy()), shape=self.shape)

    def copy(self) -> 'CRSMatrix':
        """Returns a copy of the matrix."""
        result = CRSMatrix(self.nrow, self.ncol, dtype=self.dtype)
        result.values = self.values.copy()
        result.columns = self.columns.copy()
        result.row_start = self.row_start.copy()
        return result

    def is_equal(self, other: 'CRSMatrix', tol: float = 0.0) -> bool:
        """Entry-wise comparison. With tol == 0 the stored values must match exactly."""
        if self.shape != other.shape:
            return False
        if not np.array_equal(self.row_start, other.row_start) or not np.array_equal(self.columns, other.columns):
            return False
        if tol == 0:
            return bool(np.all(self.values == other.values))
        return bool(np.allclose(self.values.astype(np.float64), other.values.astype(np.float64), rtol=tol, atol=tol))

    def transpose(self) -> 'CRSMatrix':
        from .matrix_ops import transpose
        return transpose(self)

    @property
    def T(self) -> 'CRSMatrix':
        return self.transpose()

    def __neg__(self) -> 'CRSMatrix':
        from .matrix_ops import negate
        return negate(self)

    def __add__(self, other: 'CRSMatrix') -> 'CRSMatrix':
        from .matrix_ops import add
        return add(self, other)

    def __sub__(self, other: 'CRSMatrix') -> 'CRSMatrix':
        from .matrix_ops import subtract
        return subtract(self, other)

    def __matmul__(self, other):
        from .matrix_ops import multiply
        return multiply(self, other)

    __mul__ = __matmul__

    def __repr__(self) -> str:
        return f"CRSMatrix(shape={self.shape}, nnz={self.nnz}, dtype={self.dtype})"

    def __str__(self) -> str:
        """Dense rendering for debugging: one line per row, values joined by ', '."""
        dense = self.to_dense()
        return "\n".join(", ".join(str(v) for v in row) for row in dense)
