"""
MLE module tests: mle.py (dense, dense-reference, sparse)
"""
import pytest

from zkp.sumcheck.errors import InvalidArgumentError
from zkp.sumcheck.field import FR, random_point
from zkp.sumcheck.mle import (
    DenseMLE,
    DenseRefMLE,
    SparseMLE,
    fold_table,
    log2_exact,
)


def brute_force_eval(table, point):
    """Σ_b table[b] · Π_i (r_i if bit_i(b) else 1 − r_i)"""
    field = type(point[0])
    result = field(0)
    for b, value in enumerate(table):
        weight = field(1)
        for i, r in enumerate(point):
            weight = weight * (r if (b >> i) & 1 else 1 - r)
        result = result + value * weight
    return result


def random_table(num_variables, rng, field=FR):
    return [field(rng.randrange(field.field_modulus)) for _ in range(1 << num_variables)]


# =====================================================================
# 테이블 헬퍼
# =====================================================================

class TestTableHelpers:
    def test_log2_exact(self):
        assert log2_exact(1) == 0
        assert log2_exact(2) == 1
        assert log2_exact(1024) == 10

    @pytest.mark.parametrize("length", [0, 3, 6, 12])
    def test_log2_rejects_non_power_of_two(self, length):
        with pytest.raises(InvalidArgumentError):
            log2_exact(length)

    def test_fold_first_variable(self):
        table = [FR(1), FR(2), FR(3), FR(4)]
        assert fold_table(table, FR(5)) == [FR(6), FR(8)]


# =====================================================================
# DenseMLE
# =====================================================================

class TestDenseMLE:
    def test_num_variables(self):
        assert DenseMLE.from_evaluations([1, 2, 3, 4]).num_variables() == 2
        assert DenseMLE.from_evaluations([7]).num_variables() == 0

    def test_little_endian_index(self):
        f = DenseMLE.from_evaluations([1, 2, 3, 4])
        # 인덱스 2 = (x1=0, x2=1)
        assert f.eval_binary(2) == FR(3)
        assert f.eval_at([FR(0), FR(1)]) == FR(3)
        assert f.eval_at([FR(1), FR(0)]) == FR(2)

    def test_eval_at_concrete(self):
        f = DenseMLE.from_evaluations([1, 2, 3, 4])
        # x1=5: [6, 8], x2=7: 6 + 7·2
        assert f.eval_at([FR(5), FR(7)]) == FR(20)

    @pytest.mark.parametrize("num_variables", list(range(1, 13)))
    def test_eval_matches_brute_force(self, num_variables, rng):
        table = random_table(num_variables, rng)
        f = DenseMLE(table)
        point = random_point(FR, num_variables, rng)
        assert f.eval_at(point) == brute_force_eval(table, point)

    def test_eval_at_on_hypercube_matches_table(self, rng):
        table = random_table(3, rng)
        f = DenseMLE(table)
        for index in range(8):
            point = [FR((index >> i) & 1) for i in range(3)]
            assert f.eval_at(point) == table[index]

    def test_partial_then_full(self, rng):
        f = DenseMLE(random_table(5, rng))
        point = random_point(FR, 5, rng)
        partial = f.eval_partial_at(point[:2])
        assert partial.num_variables() == 3
        assert partial.eval_at(point[2:]) == f.eval_at(point)

    def test_partial_with_empty_prefix(self, rng):
        table = random_table(3, rng)
        assert DenseMLE(table).eval_partial_at([]).table() == table

    def test_rejects_non_power_of_two(self):
        with pytest.raises(InvalidArgumentError):
            DenseMLE.from_evaluations([1, 2, 3])
        with pytest.raises(InvalidArgumentError):
            DenseMLE([])

    def test_rejects_declared_size_mismatch(self):
        with pytest.raises(InvalidArgumentError):
            DenseMLE([FR(1), FR(2)], num_variables=2)

    def test_rejects_plain_integers(self):
        with pytest.raises(InvalidArgumentError):
            DenseMLE([1, 2])
        with pytest.raises(InvalidArgumentError):
            DenseRefMLE([1, 2])

    def test_rejects_mixed_fields(self, F97):
        with pytest.raises(InvalidArgumentError):
            DenseMLE([FR(1), F97(2)])

    def test_rejects_wrong_point_length(self):
        f = DenseMLE.from_evaluations([1, 2, 3, 4])
        with pytest.raises(InvalidArgumentError):
            f.eval_at([FR(1)])
        with pytest.raises(InvalidArgumentError):
            f.eval_partial_at([FR(1), FR(2), FR(3)])

    def test_rejects_index_out_of_range(self):
        f = DenseMLE.from_evaluations([1, 2])
        with pytest.raises(InvalidArgumentError):
            f.eval_binary(2)

    def test_table_is_a_copy(self):
        values = [FR(1), FR(2)]
        f = DenseMLE(values)
        values[0] = FR(9)
        f.table()[1] = FR(9)
        assert f.table() == [FR(1), FR(2)]

    def test_scaled(self):
        f = DenseMLE.from_evaluations([1, 2, 3, 4]).scaled(FR(3))
        assert f.table() == [FR(3), FR(6), FR(9), FR(12)]


# =====================================================================
# DenseRefMLE
# =====================================================================

class TestDenseRefMLE:
    def test_reads_through_reference(self):
        backing = [FR(1), FR(2), FR(3), FR(4)]
        f = DenseRefMLE(backing)
        backing[3] = FR(10)
        assert f.eval_binary(3) == FR(10)
        assert f.eval_at([FR(1), FR(1)]) == FR(10)

    def test_matches_dense(self, rng):
        table = random_table(4, rng)
        point = random_point(FR, 4, rng)
        assert DenseRefMLE(table).eval_at(point) == DenseMLE(table).eval_at(point)

    def test_partial_returns_owned_dense(self, rng):
        table = random_table(3, rng)
        partial = DenseRefMLE(table).eval_partial_at([FR(4)])
        assert isinstance(partial, DenseMLE)
        assert partial.table() == fold_table(table, FR(4))

    def test_detects_resized_backing(self):
        backing = [FR(1), FR(2)]
        f = DenseRefMLE(backing)
        backing.append(FR(3))
        with pytest.raises(InvalidArgumentError):
            f.num_variables()
        with pytest.raises(InvalidArgumentError):
            f.eval_at([FR(1)])


# =====================================================================
# SparseMLE
# =====================================================================

class TestSparseMLE:
    def test_absent_entries_are_zero(self):
        s = SparseMLE(2, [(3, FR(4))])
        assert s.eval_binary(0) == FR(0)
        assert s.eval_binary(3) == FR(4)
        assert s.table() == [FR(0), FR(0), FR(0), FR(4)]

    def test_accepts_dict(self):
        s = SparseMLE(2, {1: FR(5)})
        assert s.sparse_table() == [(1, FR(5))]

    def test_drops_zero_values(self):
        s = SparseMLE(2, [(0, FR(0)), (1, FR(2))])
        assert s.num_nonzero() == 1

    def test_rejects_duplicate_index(self):
        with pytest.raises(InvalidArgumentError):
            SparseMLE(2, [(1, FR(1)), (1, FR(2))])

    def test_rejects_index_out_of_range(self):
        with pytest.raises(InvalidArgumentError):
            SparseMLE(2, [(4, FR(1))])

    def test_rejects_plain_integers(self):
        with pytest.raises(InvalidArgumentError):
            SparseMLE(1, [(0, 3)])
        with pytest.raises(InvalidArgumentError):
            SparseMLE.from_dense_table([0, 5])

    def test_rejects_value_from_other_field(self, F97):
        with pytest.raises(InvalidArgumentError):
            SparseMLE(2, [(1, FR(1))], field=F97)

    def test_sparse_table_sorted(self):
        s = SparseMLE(3, [(6, FR(1)), (2, FR(2)), (5, FR(3))])
        assert [i for i, _ in s.sparse_table()] == [2, 5, 6]

    def test_to_dense_and_back(self, rng):
        table = random_table(4, rng)
        table[3] = FR(0)
        dense = SparseMLE.from_dense_table(table).to_dense()
        assert dense.table() == table

    def test_eval_matches_dense_over_100_points(self, rng):
        num_variables = 7
        entries = [(index, FR(rng.randrange(1, FR.field_modulus)))
                   for index in rng.sample(range(1 << num_variables), 11)]
        sparse = SparseMLE(num_variables, entries)
        dense = sparse.to_dense()
        for _ in range(100):
            point = random_point(FR, num_variables, rng)
            assert sparse.eval_at(point) == dense.eval_at(point)

    def test_partial_eval_matches_dense_over_100_points(self, rng):
        num_variables = 6
        entries = [(index, FR(rng.randrange(1, FR.field_modulus)))
                   for index in rng.sample(range(1 << num_variables), 9)]
        sparse = SparseMLE(num_variables, entries)
        dense = sparse.to_dense()
        for trial in range(100):
            point = random_point(FR, num_variables, rng)
            k = trial % (num_variables + 1)
            fixed = sparse.eval_partial_at(point[:k])
            assert fixed.num_variables() == num_variables - k
            assert fixed.table() == dense.eval_partial_at(point[:k]).table()
            assert fixed.eval_at(point[k:]) == dense.eval_at(point)

    def test_single_entry_uses_unit_window(self):
        s = SparseMLE(3, [(5, FR(2))])
        point = [FR(3), FR(4), FR(5)]
        # 5 = (1, 0, 1): 2 · 3 · (1 − 4) · 5
        assert s.eval_at(point) == FR(2) * FR(3) * (1 - FR(4)) * FR(5)

    def test_empty_sparse_is_zero(self):
        s = SparseMLE(3, [])
        assert s.eval_at([FR(3), FR(4), FR(5)]) == FR(0)
        assert s.eval_partial_at([FR(1)]).num_variables() == 2

    def test_rejects_long_prefix(self):
        with pytest.raises(InvalidArgumentError):
            SparseMLE(1, [(0, FR(1))]).eval_partial_at([FR(1), FR(2)])
