"""
Multilinear Sum-check — 비대화식 프로토콜 오케스트레이터
=========================================================

주장 Σ_{x ∈ {0,1}^n} P(x) = S 를 단일 점 주장 P(r) = e 로 축약한다.

  ┌─────────────────────────────────────────────────────┐
  │  트랜스크립트 ← PolynomialInfo (m, n)                │
  ├─────────────────────────────────────────────────────┤
  │  Round k = 1..n                                      │
  │  Prover → Verifier: g_k(0..m)    (트랜스크립트에 흡수)│
  │  Verifier → Prover: r_k          (트랜스크립트에서 추출)│
  ├─────────────────────────────────────────────────────┤
  │  Verifier: 모든 라운드 검사 → SubClaim(r, e)          │
  └─────────────────────────────────────────────────────┘

**서브프로토콜 모드**:
  R1CS 논증처럼 sum-check를 여러 번 이어 붙이는 상위 프로토콜은
  하나의 트랜스크립트를 공유해야 한다. prove_as_subprotocol /
  verify_as_subprotocol은 호출자가 준 트랜스크립트를 그대로 사용한다.

**대화식 모드**:
  run_interactive는 RandomChallenger처럼 진짜 난수를 쓰는 챌린저로
  prover와 verifier를 번갈아 실행한다.

사용 예시:
    >>> from zkp.sumcheck.protocol import prove, verify, extract_sum
    >>> proof = prove(poly)
    >>> subclaim = verify(poly.info(), extract_sum(proof), proof)
    >>> poly.evaluate(subclaim.point) == subclaim.expected_evaluation
    True
"""

import logging

from zkp.sumcheck.encoding import ByteReader, encode_u64
from zkp.sumcheck.errors import InvalidArgumentError
from zkp.sumcheck.field import FR, field_of
from zkp.sumcheck.transcript import Transcript
from zkp.sumcheck.protocol.prover import ProverMessage, ProverState, prover_init, prove_round
from zkp.sumcheck.protocol.verifier import (
    SubClaim,
    VerifierMessage,
    VerifierState,
    check_and_generate_subclaim,
    sample_round,
    verifier_init,
    verify_round,
)


logger = logging.getLogger(__name__)


class Proof:
    """sum-check 증명: n개의 ProverMessage."""

    def __init__(self, messages):
        self.messages = tuple(messages)

    def __len__(self):
        return len(self.messages)

    def __iter__(self):
        return iter(self.messages)

    def __getitem__(self, index):
        return self.messages[index]

    def __eq__(self, other):
        if not isinstance(other, Proof):
            return NotImplemented
        return list(self.messages) == list(other.messages)

    def to_bytes(self):
        """u64 라운드 수 + 각 라운드의 평가값 벡터."""
        out = bytearray(encode_u64(len(self.messages)))
        for msg in self.messages:
            out.extend(msg.to_bytes())
        return bytes(out)

    @classmethod
    def read_from(cls, reader, field):
        count = reader.read_u64()
        return cls([ProverMessage.read_from(reader, field) for _ in range(count)])

    @classmethod
    def from_bytes(cls, data, field=FR):
        """바이트열에서 증명을 복원한다.

        Raises:
            SerializationError: 잘렸거나 뒤에 남는 바이트가 있을 때
        """
        reader = ByteReader(data)
        proof = cls.read_from(reader, field)
        reader.finish()
        return proof

    def __repr__(self):
        return f"Proof({list(self.messages)})"


# ─────────────────────────────────────────────────────────────────────
# 서브프로토콜 (공유 트랜스크립트)
# ─────────────────────────────────────────────────────────────────────

def prove_as_subprotocol(transcript, polynomial):
    """주어진 트랜스크립트로 sum-check 증명을 만든다.

    Returns:
        (Proof, ProverState): 마지막 챌린지까지 randomness에 담긴 prover 상태.
            상위 프로토콜은 state.randomness를 평가점으로 사용한다.
    """
    transcript.feed(polynomial.info())

    state = prover_init(polynomial)
    verifier_msg = None
    messages = []
    for _ in range(polynomial.num_variables):
        prover_msg = prove_round(state, verifier_msg)
        transcript.feed(prover_msg)
        messages.append(prover_msg)
        verifier_msg = sample_round(transcript)
    state.randomness.append(verifier_msg.randomness)

    logger.debug("sum-check proof generated: %d rounds", len(messages))
    return Proof(messages), state


def verify_as_subprotocol(transcript, info, claimed_sum, proof):
    """주어진 트랜스크립트로 증명을 검증하고 SubClaim을 반환한다.

    Raises:
        InvalidArgumentError: 증명의 라운드 수 또는 메시지 길이가 맞지 않을 때
        RejectError: 증명이 주장과 일치하지 않을 때
    """
    if len(proof) != info.num_variables:
        raise InvalidArgumentError(
            f"증명의 라운드 수가 변수 개수와 다릅니다: {len(proof)} != {info.num_variables}"
        )
    transcript.feed(info)

    state = verifier_init(info)
    for prover_msg in proof:
        transcript.feed(prover_msg)
        verify_round(prover_msg, state, transcript)
    return check_and_generate_subclaim(state, claimed_sum)


# ─────────────────────────────────────────────────────────────────────
# 단독 실행
# ─────────────────────────────────────────────────────────────────────

def prove(polynomial):
    """새 트랜스크립트로 비대화식 증명을 만든다."""
    transcript = Transcript(polynomial.field)
    proof, _ = prove_as_subprotocol(transcript, polynomial)
    return proof


def verify(info, claimed_sum, proof, field=None):
    """새 트랜스크립트로 비대화식 증명을 검증한다.

    field를 주지 않으면 증명 메시지의 원소에서 체를 읽는다.
    claimed_sum은 정수여도 되며 그 체의 원소로 변환된다.
    """
    if field is None:
        field = _proof_field(proof)
    transcript = Transcript(field)
    return verify_as_subprotocol(transcript, info, field(claimed_sum), proof)


def _proof_field(proof):
    for msg in proof:
        if msg.evaluations:
            return field_of(msg.evaluations[0])
    return FR


def extract_sum(proof):
    """증명이 주장하는 합 g_1(0) + g_1(1)."""
    if len(proof) == 0:
        raise InvalidArgumentError("빈 증명에서는 합을 꺼낼 수 없습니다")
    first = proof[0].evaluations
    return first[0] + first[1]


def run_interactive(polynomial, claimed_sum, challenger):
    """prover와 verifier를 번갈아 실행하는 대화식 sum-check.

    Args:
        polynomial: ListOfProducts
        claimed_sum: 주장하는 합 S
        challenger: squeeze_field_element()를 가진 챌린저 (예: RandomChallenger)

    Returns:
        (Proof, SubClaim)
    """
    prover_state = prover_init(polynomial)
    verifier_state = verifier_init(polynomial.info())
    verifier_msg = None
    messages = []
    for _ in range(polynomial.num_variables):
        prover_msg = prove_round(prover_state, verifier_msg)
        messages.append(prover_msg)
        challenger.feed(prover_msg)
        verifier_msg = verify_round(prover_msg, verifier_state, challenger)
    return Proof(messages), check_and_generate_subclaim(verifier_state, claimed_sum)


__all__ = [
    "Proof",
    "ProverMessage",
    "ProverState",
    "SubClaim",
    "VerifierMessage",
    "VerifierState",
    "check_and_generate_subclaim",
    "extract_sum",
    "prove",
    "prove_as_subprotocol",
    "prove_round",
    "prover_init",
    "run_interactive",
    "sample_round",
    "verifier_init",
    "verify",
    "verify_as_subprotocol",
    "verify_round",
]
