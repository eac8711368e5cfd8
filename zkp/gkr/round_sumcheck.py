"""
GKR 라운드 Sum-check (두 단계 축약)
=====================================

Σ_{x,y} f1(g,x,y)·f2(x)·f3(y) = S 를 두 번의 sum-check로 증명한다.

  ┌─────────────────────────────────────────────────────┐
  │  Phase 1: Σ_x h_g(x)·f2(x) = S                      │
  │    l 라운드, 메시지 길이 3 → 챌린지 u               │
  │    남은 주장: h_g(u)·f2(u) = e₁                      │
  ├─────────────────────────────────────────────────────┤
  │  Phase 2: Σ_y f1(g,u,y)·f2(u)·f3(y) = e₁            │
  │    l 라운드, 메시지 길이 3 → 챌린지 v               │
  │    남은 주장: f1(g,u,v)·f2(u)·f3(v) = e₂            │
  └─────────────────────────────────────────────────────┘

h_g(u)·f2(u) = Σ_y f1(g,u,y)·f3(y)·f2(u) 이므로 phase 1의 남은 주장이
곧 phase 2의 합이 된다. 두 단계는 하나의 트랜스크립트를 공유하며,
매 라운드 prover 메시지를 흡수한 뒤 챌린지를 뽑는다.

사용 예시:
    >>> claim, proof = generate_claim_and_proof(f1, f2, f3, g)
    >>> subclaim = verify_claim(claim, proof)
    >>> subclaim.verify_subclaim(f1, f2, f3, g)
    True
"""

import logging

from zkp.gkr.round_function import GKRFunction, initialize_phase_one, initialize_phase_two
from zkp.sumcheck.encoding import ByteReader, encode_u64
from zkp.sumcheck.errors import InvalidArgumentError
from zkp.sumcheck.field import FR
from zkp.sumcheck.mle import DenseMLE
from zkp.sumcheck.products import ListOfProducts, PolynomialInfo
from zkp.sumcheck.protocol.prover import ProverMessage, prover_init, prove_round
from zkp.sumcheck.protocol.verifier import (
    check_and_generate_subclaim,
    sample_round,
    verifier_init,
    verify_round,
)
from zkp.sumcheck.transcript import Transcript


logger = logging.getLogger(__name__)


# 두 단계 모두 곱 항의 길이가 2 → 메시지 길이 3
PHASE_MULTIPLICANDS = 2


class GKRClaim:
    """GKR 라운드 주장: 점 g에서 합이 sum 이다."""

    def __init__(self, g, sum):
        self.g = tuple(g)
        self.sum = sum

    @property
    def dim(self):
        return len(self.g)

    def __repr__(self):
        return f"GKRClaim(g={[int(v) for v in self.g]}, sum={int(self.sum)})"


class GKRProof:
    """phase 1 메시지 l개와 phase 2 메시지 l개."""

    def __init__(self, phase1_sumcheck_msgs, phase2_sumcheck_msgs):
        self.phase1_sumcheck_msgs = tuple(phase1_sumcheck_msgs)
        self.phase2_sumcheck_msgs = tuple(phase2_sumcheck_msgs)

    @property
    def dim(self):
        return len(self.phase1_sumcheck_msgs)

    def extract_sum(self):
        """주장된 합 g_1(0) + g_1(1) (phase 1 첫 메시지)."""
        if not self.phase1_sumcheck_msgs:
            raise InvalidArgumentError("빈 증명에서는 합을 꺼낼 수 없습니다")
        first = self.phase1_sumcheck_msgs[0].evaluations
        return first[0] + first[1]

    def to_bytes(self):
        """u64 dim + phase 1 메시지들 + phase 2 메시지들."""
        out = bytearray(encode_u64(self.dim))
        for msg in self.phase1_sumcheck_msgs + self.phase2_sumcheck_msgs:
            out.extend(msg.to_bytes())
        return bytes(out)

    @classmethod
    def from_bytes(cls, data, field=FR):
        reader = ByteReader(data)
        dim = reader.read_u64()
        phase1 = [ProverMessage.read_from(reader, field) for _ in range(dim)]
        phase2 = [ProverMessage.read_from(reader, field) for _ in range(dim)]
        reader.finish()
        return cls(phase1, phase2)

    def __eq__(self, other):
        if not isinstance(other, GKRProof):
            return NotImplemented
        return (list(self.phase1_sumcheck_msgs) == list(other.phase1_sumcheck_msgs)
                and list(self.phase2_sumcheck_msgs) == list(other.phase2_sumcheck_msgs))


class GKRRoundSubClaim:
    """남은 주장: f1(g,u,v)·f2(u)·f3(v) = expected_evaluation."""

    def __init__(self, u, v, expected_evaluation):
        self.u = tuple(u)
        self.v = tuple(v)
        self.expected_evaluation = expected_evaluation

    def verify_subclaim(self, f1, f2, f3, g):
        """함수에 직접 접근할 수 있는 verifier가 남은 주장을 확인한다."""
        dim = len(g)
        if len(self.u) != dim or len(self.v) != dim:
            raise InvalidArgumentError(
                f"서브클레임의 차원이 g와 다릅니다: {len(self.u)}, {len(self.v)} != {dim}"
            )
        gkr = GKRFunction(f1, f2, f3)
        return gkr.evaluate(g, self.u, self.v) == self.expected_evaluation

    def __repr__(self):
        return (f"GKRRoundSubClaim(u={[int(x) for x in self.u]}, v={[int(x) for x in self.v]}, "
                f"expected_evaluation={int(self.expected_evaluation)})")


# ─────────────────────────────────────────────────────────────────────
# Prover / Verifier
# ─────────────────────────────────────────────────────────────────────

def _run_phase(transcript, polynomial):
    """공유 트랜스크립트로 한 단계 sum-check를 실행한다.

    Returns:
        (메시지 리스트, 챌린지 리스트)
    """
    state = prover_init(polynomial)
    verifier_msg = None
    messages = []
    for _ in range(polynomial.num_variables):
        prover_msg = prove_round(state, verifier_msg)
        transcript.feed(prover_msg)
        messages.append(prover_msg)
        verifier_msg = sample_round(transcript)
    state.randomness.append(verifier_msg.randomness)
    return messages, state.randomness


def prove(transcript, f1, f2, f3, g):
    """GKR 라운드 증명을 만든다.

    Args:
        transcript: 공유 트랜스크립트 (Transcript 또는 RandomChallenger)
        f1: 3l 변수 희소 MLE
        f2, f3: l 변수 MLE
        g: 길이 l의 점

    Returns:
        GKRProof
    """
    gkr = GKRFunction(f1, f2, f3)
    dim = gkr.dim
    if len(g) != dim:
        raise InvalidArgumentError(f"g의 길이가 차원과 다릅니다: {len(g)} != {dim}")

    # ── Phase 1: Σ_x h_g(x)·f2(x) ──
    h_g, f1_g = initialize_phase_one(f1, f3, g)
    phase1 = ListOfProducts(dim)
    phase1.add_product_of_mles([h_g, DenseMLE(f2.table())])
    phase1_msgs, u = _run_phase(transcript, phase1)

    # ── Phase 2: Σ_y f1(g,u,y)·f2(u)·f3(y) ──
    f1_gu = initialize_phase_two(f1_g, u)
    f2_u = f2.eval_at(u)
    phase2 = ListOfProducts(dim)
    phase2.add_product_of_mles([f1_gu, DenseMLE(f3.table()).scaled(f2_u)])
    phase2_msgs, _ = _run_phase(transcript, phase2)

    logger.debug("GKR round proof generated: dim=%d", dim)
    return GKRProof(phase1_msgs, phase2_msgs)


def verify(transcript, dim, proof, claimed_sum):
    """GKR 라운드 증명을 검증한다.

    Returns:
        GKRRoundSubClaim(u, v, expected_evaluation)

    Raises:
        InvalidArgumentError: 증명의 모양이 (dim + dim)개의 길이 3 메시지가 아닐 때
        RejectError: 어느 단계에서든 메시지가 주장과 일치하지 않을 때
    """
    if (len(proof.phase1_sumcheck_msgs) != dim
            or len(proof.phase2_sumcheck_msgs) != dim):
        raise InvalidArgumentError(
            f"증명의 라운드 수가 맞지 않습니다: "
            f"{len(proof.phase1_sumcheck_msgs)} + {len(proof.phase2_sumcheck_msgs)} != {dim} + {dim}"
        )
    for msg in proof.phase1_sumcheck_msgs + proof.phase2_sumcheck_msgs:
        if len(msg) != PHASE_MULTIPLICANDS + 1:
            raise InvalidArgumentError(f"메시지 길이는 3이어야 합니다: {len(msg)}")

    info = PolynomialInfo(PHASE_MULTIPLICANDS, dim)

    # ── Phase 1 ──
    state = verifier_init(info)
    for msg in proof.phase1_sumcheck_msgs:
        transcript.feed(msg)
        verify_round(msg, state, transcript)
    phase1_subclaim = check_and_generate_subclaim(state, claimed_sum)

    # ── Phase 2: phase 1의 기대값이 새 주장 ──
    state = verifier_init(info)
    for msg in proof.phase2_sumcheck_msgs:
        transcript.feed(msg)
        verify_round(msg, state, transcript)
    phase2_subclaim = check_and_generate_subclaim(state, phase1_subclaim.expected_evaluation)

    logger.info("GKR round verified: dim=%d", dim)
    return GKRRoundSubClaim(phase1_subclaim.point, phase2_subclaim.point,
                            phase2_subclaim.expected_evaluation)


# ─────────────────────────────────────────────────────────────────────
# 주장 생성 / 비대화식 실행
# ─────────────────────────────────────────────────────────────────────

def generate_claim(f1, f2, f3, g):
    """참인 합 Σ_x h_g(x)·f2(x)로 주장을 만든다."""
    gkr = GKRFunction(f1, f2, f3)
    if len(g) != gkr.dim:
        raise InvalidArgumentError(f"g의 길이가 차원과 다릅니다: {len(g)} != {gkr.dim}")
    h_g, _ = initialize_phase_one(f1, f3, g)
    total = f1.field(0)
    for h, f in zip(h_g.table(), f2.table()):
        total = total + h * f
    return GKRClaim(g, total)


def _claim_transcript(claim, field):
    transcript = Transcript(field)
    transcript.feed(list(claim.g))
    transcript.feed(claim.sum)
    return transcript


def generate_claim_and_proof(f1, f2, f3, g):
    """주장과 비대화식 증명을 함께 만든다.

    새 트랜스크립트에 g와 합을 먼저 흡수하므로 증명은 주장에 묶인다.
    """
    claim = generate_claim(f1, f2, f3, g)
    transcript = _claim_transcript(claim, f1.field)
    proof = prove(transcript, f1, f2, f3, g)
    return claim, proof


def verify_claim(claim, proof):
    """generate_claim_and_proof의 결과를 검증한다."""
    field = type(claim.sum)
    transcript = _claim_transcript(claim, field)
    return verify(transcript, claim.dim, proof, claim.sum)
