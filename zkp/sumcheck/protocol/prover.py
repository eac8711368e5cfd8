"""
Sum-check Prover: 북키핑 테이블 폴딩
=====================================

  ┌──────────────────────────────────────────────────────┐
  │  라운드 k (1 ≤ k ≤ n)                                │
  │  Verifier → Prover: r_{k−1}   (k ≥ 2)               │
  │  Prover → Verifier: [g_k(0), g_k(1), ..., g_k(m)]    │
  └──────────────────────────────────────────────────────┘

**라운드 다항식**:
  g_k(X) = Σ_{b ∈ {0,1}^{n−k}} P(r_1, ..., r_{k−1}, X, b)

**북키핑 테이블**:
  prover는 각 MLE의 dense 사본을 소유한다. 챌린지 r을 받으면
  모든 테이블의 첫 번째 변수를 r로 고정한다 (길이 절반).

      t[b] = t[2b] + r·(t[2b+1] − t[2b])

  그러면 g_k(t)는 각 b에 대해 t[2b] + t·(t[2b+1] − t[2b])를 곱한 값의 합이다.
  t = 0..m 에 대해 시작값 t[2b]에 증분 step을 더해 가며 계산한다.

사용:
    이 모듈은 보통 zkp.sumcheck.protocol.prove()를 통해 실행된다.
"""

import logging

from zkp.sumcheck.encoding import ByteReader, encode_field_vector
from zkp.sumcheck.errors import (
    InternalCorruptionError,
    InvalidArgumentError,
    InvalidOperationError,
)


logger = logging.getLogger(__name__)


class ProverMessage:
    """한 라운드의 prover 메시지: g_k(0), ..., g_k(m)."""

    def __init__(self, evaluations):
        self.evaluations = list(evaluations)

    def to_bytes(self):
        return encode_field_vector(self.evaluations)

    @classmethod
    def read_from(cls, reader, field):
        return cls(reader.read_field_vector(field))

    @classmethod
    def from_bytes(cls, data, field):
        reader = ByteReader(data)
        msg = cls.read_from(reader, field)
        reader.finish()
        return msg

    def __eq__(self, other):
        if not isinstance(other, ProverMessage):
            return NotImplemented
        return self.evaluations == other.evaluations

    def __len__(self):
        return len(self.evaluations)

    def __repr__(self):
        return f"ProverMessage({[int(v) for v in self.evaluations]})"


class ProverState:
    """prover의 라운드 간 상태.

    속성:
        randomness: 지금까지 받은 챌린지 r_1, r_2, ...
        products: (coefficient, [handle, ...]) 리스트
        flattened_ml_extensions: 핸들별 북키핑 테이블 (prover 소유의 사본)
        num_vars: 변수 개수 n
        max_multiplicands: m
        round: 마지막으로 보낸 라운드 번호 (시작 전 0)
    """

    def __init__(self, products, tables, num_vars, max_multiplicands, field):
        self.randomness = []
        self.products = products
        self.flattened_ml_extensions = tables
        self.num_vars = num_vars
        self.max_multiplicands = max_multiplicands
        self.field = field
        self.round = 0


def prover_init(polynomial):
    """다항식으로부터 prover 상태를 만든다.

    모든 MLE 테이블을 복사하므로 이후 원본을 바꿔도 상태에 영향이 없다.

    Raises:
        InvalidArgumentError: 변수가 0개이거나 곱 항이 없을 때
    """
    if polynomial.num_variables == 0:
        raise InvalidArgumentError("상수를 증명하려고 했습니다 (변수 0개)")
    if not polynomial.products:
        raise InvalidArgumentError("곱 항이 없는 다항식은 증명할 수 없습니다")

    tables = [mle.table() for mle in polynomial.flattened_ml_extensions]
    products = [(coefficient, list(handles)) for coefficient, handles in polynomial.products]
    return ProverState(products, tables, polynomial.num_variables,
                       polynomial.max_multiplicands, polynomial.field)


def prove_round(state, verifier_msg=None):
    """다음 라운드의 prover 메시지를 만든다.

    Args:
        state: ProverState (제자리에서 갱신됨)
        verifier_msg: 직전 라운드의 VerifierMessage (첫 라운드에서는 None)

    Returns:
        ProverMessage

    Raises:
        InvalidOperationError: 첫 라운드에 메시지를 주거나, 이후 라운드에
            메시지를 빠뜨리거나, n 라운드를 넘어 호출했을 때
    """
    if state.round >= state.num_vars:
        raise InvalidOperationError(
            f"prover가 이미 {state.num_vars}개 라운드를 모두 마쳤습니다"
        )

    # ── 1. 챌린지 반영: 모든 테이블의 첫 변수를 r로 고정 ──
    if verifier_msg is not None:
        if state.round == 0:
            raise InvalidOperationError("첫 라운드는 prover가 먼저 시작해야 합니다")
        r = verifier_msg.randomness
        state.randomness.append(r)
        for table in state.flattened_ml_extensions:
            half = len(table) // 2
            for b in range(half):
                table[b] = table[2 * b] + r * (table[2 * b + 1] - table[2 * b])
            del table[half:]
    elif state.round > 0:
        raise InvalidOperationError("verifier 메시지가 비어 있습니다")

    state.round += 1

    expected_length = 1 << (state.num_vars - state.round + 1)
    for handle, table in enumerate(state.flattened_ml_extensions):
        if len(table) != expected_length:
            raise InternalCorruptionError(
                f"북키핑 테이블 {handle}의 길이가 {expected_length}이 아닙니다: {len(table)}"
            )

    # ── 2. g_k(0..m) 계산 ──
    degree = state.max_multiplicands
    zero = state.field(0)
    sums = [zero] * (degree + 1)
    for b in range(1 << (state.num_vars - state.round)):
        for coefficient, handles in state.products:
            product = [coefficient] * (degree + 1)
            for handle in handles:
                table = state.flattened_ml_extensions[handle]
                start = table[2 * b]
                step = table[2 * b + 1] - start
                for t in range(degree + 1):
                    product[t] = product[t] * start
                    start = start + step
            for t in range(degree + 1):
                sums[t] = sums[t] + product[t]

    logger.debug("sum-check prover round %d/%d: %d evaluations",
                 state.round, state.num_vars, len(sums))
    return ProverMessage(sums)
