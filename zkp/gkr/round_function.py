"""
GKR 라운드 함수와 두 단계 초기화
=================================

GKR 프로토콜의 한 층(layer)은 다음 형태의 합을 증명한다.

    Σ_{x, y ∈ {0,1}^l} f1(g, x, y) · f2(x) · f3(y)

  - f1: 배선 술어(wiring predicate), 3l 변수, 대부분 0 → 희소(sparse)
  - f2, f3: 다음 층의 값, l 변수 → 밀집(dense)
  - g: 이전 층에서 받은 점 (길이 l)

**변수 배치**:
  f1의 인덱스에서 하위 l비트가 g, 다음 l비트가 x, 상위 l비트가 y이다.

**Phase 1 — h_g 만들기**:
  h_g(x) = Σ_y f1(g, x, y) · f3(y)

  I(g) 테이블(eq_evals)을 만든 뒤 f1의 0이 아닌 원소 (z, x, y, v)마다
      h_g[x] += I(g)[z] · v · f3[y]
  를 누적한다. 비용은 O(nnz + 2^l)이다. 동시에 f1(g, ·, ·)를 희소 형태로 만든다.

**Phase 2 — f1(g, u, ·)**:
  phase 1에서 얻은 u로 f1_g의 앞쪽 l개 변수를 고정한 dense 테이블.

사용 예시:
    >>> gkr = GKRFunction(f1, f2, f3)
    >>> h_g, f1_g = initialize_phase_one(gkr.f1, gkr.f3, g)
    >>> f1_gu = initialize_phase_two(f1_g, u)
"""

from zkp.sumcheck.eq import eq_evals
from zkp.sumcheck.errors import InvalidArgumentError
from zkp.sumcheck.mle import DenseMLE, SparseMLE


class GKRFunction:
    """검증된 (f1, f2, f3) 묶음.

    Raises:
        InvalidArgumentError: f2, f3의 변수 개수가 다르거나
            f1의 변수 개수가 3·dim이 아닐 때
    """

    def __init__(self, f1, f2, f3):
        dim = f2.num_variables()
        if f3.num_variables() != dim:
            raise InvalidArgumentError(
                f"f2와 f3의 변수 개수가 다릅니다: {dim} != {f3.num_variables()}"
            )
        if f1.num_variables() != 3 * dim:
            raise InvalidArgumentError(
                f"f1의 변수 개수는 3·{dim}이어야 합니다: {f1.num_variables()}"
            )
        if dim == 0:
            raise InvalidArgumentError("GKR 함수의 차원은 1 이상이어야 합니다")
        self.f1 = f1
        self.f2 = f2
        self.f3 = f3
        self.dim = dim

    def evaluate(self, g, x, y):
        """f1(g, x, y) · f2(x) · f3(y)"""
        return self.f1.eval_at(list(g) + list(x) + list(y)) * self.f2.eval_at(x) * self.f3.eval_at(y)


def initialize_phase_one(f1, f3, g):
    """h_g와 f1(g, ·, ·)를 만든다.

    Args:
        f1: 3l 변수 MLE (보통 SparseMLE)
        f3: l 변수 MLE
        g: 길이 l의 점

    Returns:
        (DenseMLE h_g, SparseMLE f1_g): f1_g의 인덱스는 x | (y << l)
    """
    dim = len(g)
    if f1.num_variables() != 3 * dim or f3.num_variables() != dim:
        raise InvalidArgumentError(
            f"차원이 맞지 않습니다: f1 {f1.num_variables()}, f3 {f3.num_variables()}, g {dim}"
        )
    field = f1.field
    eq_g = eq_evals(g, field)
    f3_table = f3.table()
    mask = (1 << dim) - 1

    h_g = [field(0)] * (1 << dim)
    f1_g = {}
    for index, value in f1.sparse_table():
        z = index & mask
        x = (index >> dim) & mask
        y = index >> (2 * dim)
        weighted = eq_g[z] * value
        h_g[x] = h_g[x] + weighted * f3_table[y]
        key = x | (y << dim)
        f1_g[key] = f1_g[key] + weighted if key in f1_g else weighted

    return DenseMLE(h_g), SparseMLE(2 * dim, f1_g, field=field)


def initialize_phase_two(f1_g, u):
    """f1(g, u, ·)를 dense MLE로 만든다."""
    if f1_g.num_variables() != 2 * len(u):
        raise InvalidArgumentError(
            f"f1_g의 변수 개수는 2·{len(u)}이어야 합니다: {f1_g.num_variables()}"
        )
    fixed = f1_g.eval_partial_at(u)
    if isinstance(fixed, SparseMLE):
        return fixed.to_dense()
    return fixed
