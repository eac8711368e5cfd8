import pytest

from zkp.sumcheck.eq import eq_eval, eq_evals, eq_extension
from zkp.sumcheck.errors import InvalidArgumentError
from zkp.sumcheck.field import FR, random_point


def hypercube_point(index, num_variables):
    return [FR((index >> i) & 1) for i in range(num_variables)]


class TestEqTable:
    def test_empty_point(self):
        assert eq_evals([]) == [FR(1)]

    def test_single_variable(self):
        assert eq_evals([FR(7)]) == [FR(1) - FR(7), FR(7)]

    def test_matches_closed_form(self, rng):
        g = random_point(FR, 4, rng)
        table = eq_evals(g)
        assert len(table) == 16
        for z in range(16):
            assert table[z] == eq_eval(g, hypercube_point(z, 4))

    def test_sums_to_one(self, rng):
        table = eq_evals(random_point(FR, 5, rng))
        total = FR(0)
        for v in table:
            total = total + v
        assert total == FR(1)

    def test_boolean_point_is_indicator(self):
        g = hypercube_point(6, 3)
        table = eq_evals(g)
        assert table == [FR(1) if z == 6 else FR(0) for z in range(8)]

    def test_small_field(self, F97):
        g = [F97(3), F97(50)]
        table = eq_evals(g)
        assert table[3] == F97(3 * 50)
        assert table[0] == F97(1 - 3) * F97(1 - 50)


class TestEqEval:
    def test_symmetric(self, rng):
        x = random_point(FR, 3, rng)
        y = random_point(FR, 3, rng)
        assert eq_eval(x, y) == eq_eval(y, x)

    def test_length_mismatch(self):
        with pytest.raises(InvalidArgumentError):
            eq_eval([FR(1)], [FR(1), FR(0)])


class TestEqExtension:
    def test_product_is_eq(self, rng):
        t = random_point(FR, 3, rng)
        mles = eq_extension(t)
        assert len(mles) == 3
        for x in range(8):
            product = FR(1)
            for mle in mles:
                product = product * mle.eval_binary(x)
            assert product == eq_eval(t, hypercube_point(x, 3))

    def test_product_at_random_point(self, rng):
        t = random_point(FR, 2, rng)
        r = random_point(FR, 2, rng)
        product = FR(1)
        for mle in eq_extension(t):
            product = product * mle.eval_at(r)
        assert product == eq_eval(t, r)

    def test_rejects_empty(self):
        with pytest.raises(InvalidArgumentError):
            eq_extension([])
