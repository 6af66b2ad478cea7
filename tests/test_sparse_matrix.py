import pytest
import os
import sys
import numpy as np
from fractions import Fraction
from scipy import sparse

# Add the src directory to Python path to import local spmat
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from spmat import CRSMatrix, InvalidIndexError, DimensionMismatchError, ErrorKind
from test_utils import validate_crs_invariants, random_sparse


def test_empty_matrix_is_all_zero():
    m = CRSMatrix(3, 4)
    assert m.shape == (3, 4)
    assert m.nnz == 0
    assert list(m.row_start) == [0, 0, 0, 0]
    for i in range(3):
        for j in range(4):
            assert m.at(i, j) == 0
    validate_crs_invariants(m)


def test_triplets_are_sorted_and_compacted():
    m = CRSMatrix(3, 3, [(2, 2, 9.0), (0, 1, 2.0), (1, 0, 3.0), (0, 0, 1.0), (2, 0, 7.0)])
    assert list(m.values) == [1.0, 2.0, 3.0, 7.0, 9.0]
    assert list(m.columns) == [0, 1, 0, 0, 2]
    assert list(m.row_start) == [0, 2, 3, 5]
    validate_crs_invariants(m)


def test_triplets_drop_zero_values():
    m = CRSMatrix(2, 2, [(0, 0, 0.0), (1, 1, 3.0), (0, 1, 0)])
    assert m.nnz == 1
    assert m.at(1, 1) == 3.0
    assert (0, 0) not in m


def test_exact_duplicate_triplets_collapse():
    m = CRSMatrix(2, 2, [(1, 0, 4.0), (1, 0, 4.0), (1, 0, 4.0)])
    assert m.nnz == 1
    assert m.at(1, 0) == 4.0


def test_same_key_different_value_last_write_wins():
    m = CRSMatrix(1, 1, [(0, 0, 5), (0, 0, 7)])
    assert m.nnz == 1
    assert m.at(0, 0) == 7

    m = CRSMatrix(2, 3, [(1, 2, 1.0), (0, 0, 5.0), (1, 2, 2.0), (0, 0, 3.0)])
    assert m.nnz == 2
    assert m.at(0, 0) == 3.0
    assert m.at(1, 2) == 2.0
    validate_crs_invariants(m)


def test_triplets_out_of_range_raise():
    with pytest.raises(InvalidIndexError) as exc_info:
        CRSMatrix(2, 2, [(0, 0, 1.0), (2, 0, 1.0)])
    assert exc_info.value.kind == ErrorKind.INVALID_INDEX
    assert exc_info.value.row == 2

    with pytest.raises(InvalidIndexError):
        CRSMatrix(2, 2, [(0, 2, 1.0)])
    with pytest.raises(InvalidIndexError):
        CRSMatrix(2, 2, [(-1, 0, 1.0)])


def test_out_of_range_index_raises_even_for_zero_value():
    with pytest.raises(InvalidIndexError):
        CRSMatrix(2, 2, [(5, 5, 0.0)])


def test_from_triplets_parallel_arrays():
    m = CRSMatrix.from_triplets(2, 3, [1, 0], [2, 1], [6.0, 5.0])
    assert m.at(0, 1) == 5.0
    assert m.at(1, 2) == 6.0

    with pytest.raises(DimensionMismatchError):
        CRSMatrix.from_triplets(2, 3, [1, 0], [2], [6.0, 5.0])


def test_put_then_at_returns_value():
    rng = np.random.default_rng(0)
    m = CRSMatrix(6, 5)
    written = {}
    for _ in range(40):
        i, j = int(rng.integers(0, 6)), int(rng.integers(0, 5))
        v = float(rng.integers(1, 100))
        m.put(i, j, v)
        written[(i, j)] = v
        assert m.at(i, j) == v
        validate_crs_invariants(m)

    for (i, j), v in written.items():
        assert m.at(i, j) == v
    assert m.nnz == len(written)
    for i in range(6):
        for j in range(5):
            if (i, j) not in written:
                assert m.at(i, j) == 0


def test_put_inserts_in_sorted_position():
    m = CRSMatrix(3, 5)
    m.put(1, 3, 1.0)
    m.put(1, 0, 2.0)
    m.put(1, 4, 3.0)
    m.put(0, 2, 4.0)
    m.put(2, 1, 5.0)
    m.put(1, 2, 6.0)
    assert list(m.row_start) == [0, 1, 5, 6]
    assert list(m.columns) == [2, 0, 2, 3, 4, 1]
    assert list(m.values) == [4.0, 2.0, 6.0, 1.0, 3.0, 5.0]


def test_put_overwrites_existing_entry():
    m = CRSMatrix(2, 2, [(0, 1, 1.0)])
    m.put(0, 1, 8.0)
    assert m.nnz == 1
    assert m.at(0, 1) == 8.0


def test_put_zero_does_not_clear_existing_entry():
    m = CRSMatrix(2, 2, [(0, 1, 1.0)])
    m.put(0, 1, 0.0)
    assert m.at(0, 1) == 1.0
    m.put(1, 1, 0.0)
    assert m.nnz == 1
    assert (1, 1) not in m


def test_put_and_at_out_of_range_raise():
    m = CRSMatrix(2, 3)
    with pytest.raises(InvalidIndexError):
        m.put(2, 0, 1.0)
    with pytest.raises(InvalidIndexError):
        m.put(0, 3, 1.0)
    with pytest.raises(InvalidIndexError):
        m.at(2, 0)
    with pytest.raises(InvalidIndexError):
        m.at(0, 3)
    with pytest.raises(InvalidIndexError):
        m.at(-1, 0)


def test_item_access():
    m = CRSMatrix(2, 2)
    m[1, 0] = 3.5
    assert m[1, 0] == 3.5
    assert m[0, 0] == 0
    assert (1, 0) in m
    assert (0, 0) not in m
    assert (5, 5) not in m
    with pytest.raises(KeyError):
        m[1]


def test_trailing_zero_columns_are_kept():
    m = CRSMatrix(2, 5, [(0, 0, 1.0)])
    assert m.ncol == 5
    assert m.to_dense().shape == (2, 5)


def test_dense_round_trip():
    rng = np.random.default_rng(1)
    m = random_sparse(rng, 5, 7)
    validate_crs_invariants(m)
    again = CRSMatrix.from_dense(m.to_dense())
    assert again.is_equal(m)


def test_identity():
    eye = CRSMatrix.identity(4)
    assert np.array_equal(eye.to_dense(), np.eye(4))
    validate_crs_invariants(eye)


def test_diagonal_reports_missing_as_zero():
    m = CRSMatrix(3, 3, [(0, 0, 2.0), (2, 2, 5.0), (1, 0, 1.0)])
    assert list(m.diagonal()) == [2.0, 0.0, 5.0]


def test_items_in_row_major_order():
    m = CRSMatrix(2, 2, [(1, 1, 4.0), (0, 1, 2.0)])
    assert m.items() == [((0, 1), 2.0), ((1, 1), 4.0)]


def test_copy_is_independent():
    m = CRSMatrix(2, 2, [(0, 0, 1.0)])
    c = m.copy()
    c.put(1, 1, 2.0)
    assert m.nnz == 1
    assert c.nnz == 2


def test_str_renders_dense_rows():
    m = CRSMatrix(2, 3, [(0, 0, 1.0), (1, 2, 2.5)])
    assert str(m) == "1.0, 0.0, 0.0\n0.0, 0.0, 2.5"


def test_repr():
    m = CRSMatrix(2, 3, [(0, 0, 1.0)])
    assert repr(m) == "CRSMatrix(shape=(2, 3), nnz=1, dtype=float64)"


def test_scipy_round_trip():
    rng = np.random.default_rng(2)
    m = random_sparse(rng, 6, 4)
    sp = m.to_scipy()
    assert sp.shape == (6, 4)
    assert np.array_equal(sp.toarray(), m.to_dense())
    assert CRSMatrix.from_scipy(sp).is_equal(m)


def test_from_scipy_sums_duplicates_and_drops_zeros():
    coo = sparse.coo_matrix(([1.0, 2.0, 0.0], ([0, 0, 1], [1, 1, 0])), shape=(2, 2))
    m = CRSMatrix.from_scipy(coo)
    assert m.nnz == 1
    assert m.at(0, 1) == 3.0


def test_custom_field_values():
    m = CRSMatrix(2, 2, [(0, 0, Fraction(1, 3)), (1, 1, Fraction(0))], dtype=object)
    assert m.nnz == 1
    assert m.at(0, 0) == Fraction(1, 3)
    assert m.at(1, 1) == 0
    m.put(0, 1, Fraction(2, 7))
    assert m.at(0, 1) == Fraction(2, 7)
    assert str(m) == "1/3, 2/7\n0, 0"


def test_put_value_that_casts_to_zero_is_not_stored():
    m = CRSMatrix(2, 2, dtype=np.int64)
    m.put(0, 0, 0.5)
    assert m.nnz == 0
    validate_crs_invariants(m)

    m.put(1, 1, 3.7)
    assert m.at(1, 1) == 3
    validate_crs_invariants(m)


def test_fractional_indices_raise():
    with pytest.raises(InvalidIndexError):
        CRSMatrix(3, 3, [(1.7, 0, 1.0)])
    with pytest.raises(InvalidIndexError):
        CRSMatrix.from_triplets(3, 3, [0], [2.5], [1.0])
    m = CRSMatrix(3, 3)
    with pytest.raises(InvalidIndexError):
        m.put(1.7, 0, 1.0)
    with pytest.raises(InvalidIndexError):
        m.at(0, 0.5)


def test_integral_float_indices_accepted():
    m = CRSMatrix(3, 3, [(1.0, 2.0, 4.0)])
    assert m.at(1, 2) == 4.0
    m.put(2.0, 0.0, 5.0)
    assert m.at(2, 0) == 5.0
