"""
GKR Round Sum-check Tests
==========================

두 단계 GKR 라운드 축약을 테스트한다.

테스트 범위:
  - phase 1 / phase 2 초기화가 직접 계산과 일치
  - F97 위의 3차원 구체 시나리오: 참인 합, 증명, 검증, 남은 주장 확인
  - FR 위의 무작위 시나리오
  - 틀린 합 / 조작된 메시지 거부, 모양 오류
  - 비대화식 generate_claim_and_proof / verify_claim, 바이트 직렬화
"""

import random
import pytest

from zkp.gkr.round_function import GKRFunction, initialize_phase_one, initialize_phase_two
from zkp.gkr.round_sumcheck import (
    GKRProof,
    generate_claim,
    generate_claim_and_proof,
    prove,
    verify,
    verify_claim,
)
from zkp.sumcheck.errors import InvalidArgumentError, RejectError
from zkp.sumcheck.example import gkr_example
from zkp.sumcheck.field import FR, random_point
from zkp.sumcheck.mle import DenseMLE, SparseMLE
from zkp.sumcheck.protocol import ProverMessage
from zkp.sumcheck.transcript import Transcript


DIM = 3


def bits(index, dim, field):
    return [field((index >> i) & 1) for i in range(dim)]


def brute_force_sum(f1, f2, f3, g):
    """Σ_{x,y} f1(g,x,y)·f2(x)·f3(y)"""
    field = type(g[0])
    dim = len(g)
    total = field(0)
    for x in range(1 << dim):
        for y in range(1 << dim):
            point = list(g) + bits(x, dim, field) + bits(y, dim, field)
            total = total + f1.eval_at(point) * f2.eval_binary(x) * f3.eval_binary(y)
    return total


# ─────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────

@pytest.fixture(scope="module")
def f97_gkr(F97):
    """F97 위의 명시적 3차원 GKR 함수."""
    f1 = SparseMLE(3 * DIM, [
        (5, F97(3)),
        (77, F97(10)),
        (130, F97(42)),
        (300, F97(7)),
        (301, F97(88)),
        (511, F97(1)),
    ], field=F97)
    f2 = DenseMLE.from_evaluations([4, 8, 15, 16, 23, 42, 0, 96], F97)
    f3 = DenseMLE.from_evaluations([1, 1, 2, 3, 5, 8, 13, 21], F97)
    g = [F97(2), F97(5), F97(11)]
    return f1, f2, f3, g


@pytest.fixture(scope="module")
def fr_gkr():
    rng = random.Random(77)
    dim = 2
    entries = [(i, FR(rng.randrange(1, FR.field_modulus)))
               for i in rng.sample(range(1 << (3 * dim)), 10)]
    f1 = SparseMLE(3 * dim, entries)
    f2 = DenseMLE([FR(rng.randrange(FR.field_modulus)) for _ in range(1 << dim)])
    f3 = DenseMLE([FR(rng.randrange(FR.field_modulus)) for _ in range(1 << dim)])
    g = random_point(FR, dim, rng)
    return f1, f2, f3, g


# ─────────────────────────────────────────────────────────────────────
# 초기화
# ─────────────────────────────────────────────────────────────────────

class TestPhaseInitialization:
    def test_phase_one_h_g(self, f97_gkr, F97):
        f1, _, f3, g = f97_gkr
        h_g, _ = initialize_phase_one(f1, f3, g)
        assert h_g.num_variables() == DIM
        for x in range(1 << DIM):
            expected = F97(0)
            for y in range(1 << DIM):
                point = g + bits(x, DIM, F97) + bits(y, DIM, F97)
                expected = expected + f1.eval_at(point) * f3.eval_binary(y)
            assert h_g.eval_binary(x) == expected

    def test_phase_one_fixes_g(self, f97_gkr):
        f1, _, f3, g = f97_gkr
        _, f1_g = initialize_phase_one(f1, f3, g)
        assert f1_g.num_variables() == 2 * DIM
        assert f1_g.table() == f1.eval_partial_at(g).table()

    def test_phase_two(self, f97_gkr, F97):
        f1, _, f3, g = f97_gkr
        _, f1_g = initialize_phase_one(f1, f3, g)
        u = [F97(7), F97(0), F97(60)]
        v = [F97(1), F97(33), F97(95)]
        f1_gu = initialize_phase_two(f1_g, u)
        assert isinstance(f1_gu, DenseMLE)
        assert f1_gu.eval_at(v) == f1.eval_at(g + u + v)

    def test_phase_one_rejects_bad_dimension(self, f97_gkr, F97):
        f1, _, f3, _ = f97_gkr
        with pytest.raises(InvalidArgumentError):
            initialize_phase_one(f1, f3, [F97(1), F97(2)])

    def test_phase_two_rejects_bad_dimension(self, f97_gkr, F97):
        f1, _, f3, g = f97_gkr
        _, f1_g = initialize_phase_one(f1, f3, g)
        with pytest.raises(InvalidArgumentError):
            initialize_phase_two(f1_g, [F97(1)])


class TestGKRFunction:
    def test_dim(self, f97_gkr):
        f1, f2, f3, _ = f97_gkr
        assert GKRFunction(f1, f2, f3).dim == DIM

    def test_rejects_f2_f3_mismatch(self, f97_gkr, F97):
        f1, f2, _, _ = f97_gkr
        with pytest.raises(InvalidArgumentError):
            GKRFunction(f1, f2, DenseMLE.from_evaluations([1, 2], F97))

    def test_rejects_f1_mismatch(self, f97_gkr, F97):
        _, f2, f3, _ = f97_gkr
        with pytest.raises(InvalidArgumentError):
            GKRFunction(SparseMLE(8, [], field=F97), f2, f3)


# ─────────────────────────────────────────────────────────────────────
# 증명 / 검증
# ─────────────────────────────────────────────────────────────────────

class TestGKRRound:
    def test_small_field_scenario(self, f97_gkr, F97):
        f1, f2, f3, g = f97_gkr
        claimed_sum = brute_force_sum(f1, f2, f3, g)
        assert generate_claim(f1, f2, f3, g).sum == claimed_sum

        proof = prove(Transcript(F97), f1, f2, f3, g)
        assert len(proof.phase1_sumcheck_msgs) == DIM
        assert len(proof.phase2_sumcheck_msgs) == DIM
        assert proof.extract_sum() == claimed_sum

        subclaim = verify(Transcript(F97), DIM, proof, claimed_sum)
        assert len(subclaim.u) == DIM and len(subclaim.v) == DIM
        u, v = list(subclaim.u), list(subclaim.v)
        expected = f1.eval_at(g + u + v) * f2.eval_at(u) * f3.eval_at(v)
        assert subclaim.expected_evaluation == expected
        assert subclaim.verify_subclaim(f1, f2, f3, g)

    def test_large_field_scenario(self, fr_gkr):
        f1, f2, f3, g = fr_gkr
        claimed_sum = brute_force_sum(f1, f2, f3, g)
        proof = prove(Transcript(), f1, f2, f3, g)
        subclaim = verify(Transcript(), 2, proof, claimed_sum)
        assert subclaim.verify_subclaim(f1, f2, f3, g)

    def test_wrong_sum_rejected(self, f97_gkr, F97):
        f1, f2, f3, g = f97_gkr
        claimed_sum = generate_claim(f1, f2, f3, g).sum
        proof = prove(Transcript(F97), f1, f2, f3, g)
        with pytest.raises(RejectError) as exc:
            verify(Transcript(F97), DIM, proof, claimed_sum + 1)
        assert exc.value.round == 1

    def test_tampered_phase_two_rejected(self, fr_gkr):
        f1, f2, f3, g = fr_gkr
        claimed_sum = generate_claim(f1, f2, f3, g).sum
        proof = prove(Transcript(), f1, f2, f3, g)
        first = proof.phase2_sumcheck_msgs[0].evaluations
        bad = GKRProof(
            proof.phase1_sumcheck_msgs,
            [ProverMessage([first[0] + 1, first[1], first[2]])] + list(proof.phase2_sumcheck_msgs[1:]),
        )
        with pytest.raises(RejectError):
            verify(Transcript(), 2, bad, claimed_sum)

    def test_wrong_shape(self, f97_gkr, F97):
        f1, f2, f3, g = f97_gkr
        proof = prove(Transcript(F97), f1, f2, f3, g)
        with pytest.raises(InvalidArgumentError):
            verify(Transcript(F97), DIM + 1, proof, F97(0))
        short_msg = GKRProof(
            [ProverMessage([F97(1), F97(2)])] + list(proof.phase1_sumcheck_msgs[1:]),
            proof.phase2_sumcheck_msgs,
        )
        with pytest.raises(InvalidArgumentError):
            verify(Transcript(F97), DIM, short_msg, F97(0))

    def test_prove_rejects_wrong_g(self, f97_gkr, F97):
        f1, f2, f3, _ = f97_gkr
        with pytest.raises(InvalidArgumentError):
            prove(Transcript(F97), f1, f2, f3, [F97(1)])


class TestNonInteractive:
    def test_claim_and_proof(self, f97_gkr):
        f1, f2, f3, g = f97_gkr
        claim, proof = generate_claim_and_proof(f1, f2, f3, g)
        assert claim.dim == DIM
        assert proof.extract_sum() == claim.sum
        subclaim = verify_claim(claim, proof)
        assert subclaim.verify_subclaim(f1, f2, f3, g)

    def test_proof_bound_to_claim(self, fr_gkr):
        f1, f2, f3, g = fr_gkr
        _, bound = generate_claim_and_proof(f1, f2, f3, g)
        plain = prove(Transcript(), f1, f2, f3, g)
        # 첫 메시지는 챌린지 이전이므로 같고, 이후 메시지는 챌린지가 달라 바뀐다
        assert bound.phase1_sumcheck_msgs[0] == plain.phase1_sumcheck_msgs[0]
        assert bound.phase1_sumcheck_msgs[1] != plain.phase1_sumcheck_msgs[1]

    def test_deterministic_bytes(self, f97_gkr, F97):
        f1, f2, f3, g = f97_gkr
        _, proof1 = generate_claim_and_proof(f1, f2, f3, g)
        _, proof2 = generate_claim_and_proof(f1, f2, f3, g)
        assert proof1.to_bytes() == proof2.to_bytes()
        assert GKRProof.from_bytes(proof1.to_bytes(), F97) == proof1

    def test_example_generator(self):
        f1, f2, f3, g = gkr_example()
        claim, proof = generate_claim_and_proof(f1, f2, f3, g)
        assert verify_claim(claim, proof).verify_subclaim(f1, f2, f3, g)
