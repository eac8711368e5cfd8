"""
Sum-check Verifier
===================

verifier는 라운드마다 prover 메시지를 기록하고 챌린지 r_k를 뽑는다.
일관성 검사는 모든 라운드가 끝난 뒤 한 번에 수행한다.

**최종 검사 (check_and_generate_subclaim)**:
  expected ← 주장된 합 S
  각 라운드 k에 대해:
    1. 메시지 길이 = m + 1                      (아니면 InvalidArgumentError)
    2. g_k(0) + g_k(1) = expected               (아니면 RejectError)
    3. expected ← g_k(r_k)                      (라그랑주 보간)
  남은 주장 P(r_1, ..., r_n) = expected 를 SubClaim으로 반환한다.

**상태 전이**:
  ROUND ──(n번째 메시지)──► FINISHED ──(검사)──► CONVINCED / REJECTED

  검사는 기록을 소비하지 않으므로 다시 호출해도 같은 결과가 나온다.

사용 예시:
    >>> state = verifier_init(poly.info())
    >>> for msg in proof:
    ...     verify_round(msg, state, transcript)
    >>> subclaim = check_and_generate_subclaim(state, claimed_sum)
"""

import logging

from zkp.sumcheck.encoding import encode_field_element
from zkp.sumcheck.errors import InvalidArgumentError, InvalidOperationError, RejectError
from zkp.sumcheck.interpolation import interpolate_uni_poly


logger = logging.getLogger(__name__)


# 검증 상태
ROUND = "round"
FINISHED = "finished"
CONVINCED = "convinced"
REJECTED = "rejected"


class VerifierMessage:
    """verifier가 보내는 라운드 챌린지."""

    def __init__(self, randomness):
        self.randomness = randomness

    def to_bytes(self):
        return encode_field_element(self.randomness)

    def __repr__(self):
        return f"VerifierMessage({int(self.randomness)})"


class VerifierState:
    """verifier의 라운드 간 상태.

    속성:
        round: 현재 라운드 (1부터)
        num_vars, max_multiplicands: PolynomialInfo에서 복사
        polynomials_received: 받은 평가값 벡터들
        randomness: 뽑은 챌린지들
        status: ROUND / FINISHED / CONVINCED / REJECTED
    """

    def __init__(self, num_vars, max_multiplicands):
        self.round = 1
        self.num_vars = num_vars
        self.max_multiplicands = max_multiplicands
        self.polynomials_received = []
        self.randomness = []
        self.status = ROUND

    @property
    def finished(self):
        return self.status != ROUND


class SubClaim:
    """sum-check가 남기는 단일 점 평가 주장: P(point) = expected_evaluation."""

    def __init__(self, point, expected_evaluation):
        self.point = tuple(point)
        self.expected_evaluation = expected_evaluation

    def __eq__(self, other):
        if not isinstance(other, SubClaim):
            return NotImplemented
        return (list(self.point) == list(other.point)
                and self.expected_evaluation == other.expected_evaluation)

    def __repr__(self):
        return (f"SubClaim(point={[int(v) for v in self.point]}, "
                f"expected_evaluation={int(self.expected_evaluation)})")


def verifier_init(info):
    """PolynomialInfo로 verifier 상태를 만든다."""
    if info.num_variables < 1:
        raise InvalidArgumentError(f"변수 개수는 1 이상이어야 합니다: {info.num_variables}")
    if info.max_multiplicands < 1:
        raise InvalidArgumentError(
            f"곱 항의 길이는 1 이상이어야 합니다: {info.max_multiplicands}"
        )
    return VerifierState(info.num_variables, info.max_multiplicands)


def sample_round(challenger):
    """검증 없이 챌린지만 뽑는다 (prover 쪽 Fiat-Shamir 시뮬레이션용)."""
    return VerifierMessage(challenger.squeeze_field_element())


def verify_round(prover_msg, state, challenger):
    """prover 메시지를 기록하고 챌린지를 반환한다.

    메시지의 내용은 여기서 검사하지 않는다 (check_and_generate_subclaim에서 수행).

    Raises:
        InvalidOperationError: 이미 n개 라운드를 모두 받은 경우
    """
    if state.finished:
        raise InvalidOperationError("verifier가 이미 모든 라운드를 받았습니다")

    msg = sample_round(challenger)
    state.randomness.append(msg.randomness)
    state.polynomials_received.append(list(prover_msg.evaluations))

    if state.round == state.num_vars:
        state.status = FINISHED
    else:
        state.round += 1
    return msg


def check_and_generate_subclaim(state, asserted_sum):
    """기록된 모든 라운드를 검사하고 SubClaim을 만든다.

    Args:
        state: FINISHED 이후의 VerifierState
        asserted_sum: prover가 주장한 Σ P(x)

    Returns:
        SubClaim(point=(r_1, ..., r_n), expected_evaluation)

    Raises:
        InvalidOperationError: 아직 모든 라운드를 받지 않았을 때
        InvalidArgumentError: 라운드 수 또는 메시지 길이가 맞지 않을 때
        RejectError: g_k(0) + g_k(1)이 기대값과 다를 때
    """
    if not state.finished:
        raise InvalidOperationError("verifier가 아직 모든 라운드를 받지 않았습니다")
    if len(state.polynomials_received) != state.num_vars:
        raise InvalidArgumentError(
            f"라운드 수가 맞지 않습니다: {len(state.polynomials_received)} != {state.num_vars}"
        )

    expected = asserted_sum
    for i, evaluations in enumerate(state.polynomials_received):
        if len(evaluations) != state.max_multiplicands + 1:
            raise InvalidArgumentError(
                f"라운드 {i + 1}의 메시지 길이가 {state.max_multiplicands + 1}이 아닙니다: "
                f"{len(evaluations)}"
            )
        if evaluations[0] + evaluations[1] != expected:
            state.status = REJECTED
            logger.warning("sum-check rejected at round %d of %d", i + 1, state.num_vars)
            raise RejectError(
                f"라운드 {i + 1}: prover 메시지가 주장과 일치하지 않습니다", round=i + 1
            )
        expected = interpolate_uni_poly(evaluations, state.randomness[i])

    state.status = CONVINCED
    logger.info("sum-check verifier convinced after %d rounds", state.num_vars)
    return SubClaim(state.randomness, expected)
