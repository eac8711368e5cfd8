"""
다중선형 확장 (Multilinear Extension, MLE)
============================================

함수 f: {0,1}^n → F 를 F^n 전체로 다중선형 확장한 다항식.

**인덱스 규칙 (리틀엔디안)**:
  하이퍼큐브 점 (x_1, ..., x_n)의 인덱스는 Σ x_{i+1}·2^i 이다.
  즉 인덱스의 i번째 비트가 변수 x_{i+1}의 값이다.

**세 가지 저장 방식**:
  - DenseMLE    : 길이 2^n 테이블을 소유 (복사본)
  - DenseRefMLE : 호출자가 가진 리스트를 복사 없이 참조
  - SparseMLE   : 0이 아닌 원소만 {인덱스: 값}으로 보관

**폴딩 (첫 번째 변수 고정)**:
  x_1 = r 로 고정하면 테이블 길이가 절반이 된다.

      a'[b] = a[2b]·(1 − r) + a[2b+1]·r = a[2b] + r·(a[2b+1] − a[2b])

  앞쪽 변수부터 차례로 고정하면 eval_at / eval_partial_at이 된다.

사용 예시:
    >>> from zkp.sumcheck.mle import DenseMLE, SparseMLE
    >>> f = DenseMLE.from_evaluations([1, 2, 3, 4])   # n = 2
    >>> f.eval_binary(2)        # f(0, 1) = 3
    >>> f.eval_at([FR(5), FR(7)])
    >>> s = SparseMLE(2, [(3, FR(4))])
    >>> s.to_dense().table()    # [0, 0, 0, 4]
"""

from zkp.sumcheck.eq import eq_evals
from zkp.sumcheck.errors import InvalidArgumentError
from zkp.sumcheck.field import FR, field_of


# ─────────────────────────────────────────────────────────────────────
# 테이블 헬퍼
# ─────────────────────────────────────────────────────────────────────

def log2_exact(length):
    """길이가 2의 거듭제곱이면 log2(length)를 반환한다."""
    if length <= 0 or length & (length - 1):
        raise InvalidArgumentError(f"테이블 길이는 2의 거듭제곱이어야 합니다: {length}")
    return length.bit_length() - 1


def fold_table(table, r):
    """첫 번째 변수를 r로 고정한 새 테이블 (길이 절반)."""
    return [table[2 * b] + r * (table[2 * b + 1] - table[2 * b])
            for b in range(len(table) // 2)]


def fix_variables(table, prefix):
    """앞쪽 len(prefix)개의 변수를 prefix로 고정한다."""
    for r in prefix:
        table = fold_table(table, r)
    return table


def _check_point_length(point, num_variables, exact):
    if exact and len(point) != num_variables:
        raise InvalidArgumentError(
            f"평가점의 길이가 변수 개수와 다릅니다: {len(point)} != {num_variables}"
        )
    if len(point) > num_variables:
        raise InvalidArgumentError(
            f"고정할 변수가 너무 많습니다: {len(point)} > {num_variables}"
        )


# ─────────────────────────────────────────────────────────────────────
# 공통 인터페이스
# ─────────────────────────────────────────────────────────────────────

class MultilinearExtension:
    """모든 MLE 저장 방식이 구현하는 인터페이스.

    sum-check 엔진은 이 인터페이스만 사용하므로 저장 방식과 무관하게 동작한다.

    속성:
        field: 평가값이 속한 체 클래스
    """

    field = FR

    def num_variables(self):
        raise NotImplementedError

    def eval_binary(self, index):
        """하이퍼큐브 점 index에서의 값. O(1)."""
        raise NotImplementedError

    def eval_at(self, point):
        """임의의 점 point ∈ F^n에서의 값."""
        raise NotImplementedError

    def eval_partial_at(self, prefix):
        """앞쪽 변수들을 prefix로 고정한 (n − |prefix|)변수 MLE."""
        raise NotImplementedError

    def table(self):
        """길이 2^n의 dense 테이블 사본."""
        raise NotImplementedError

    def sparse_table(self):
        """0이 아닌 (인덱스, 값) 쌍 리스트 (인덱스 오름차순)."""
        return [(i, v) for i, v in enumerate(self.table()) if v != 0]

    def _check_index(self, index):
        size = 1 << self.num_variables()
        if not 0 <= index < size:
            raise InvalidArgumentError(f"인덱스가 범위를 벗어났습니다: {index} (크기 {size})")

    def __repr__(self):
        return f"{type(self).__name__}(num_variables={self.num_variables()})"


# ─────────────────────────────────────────────────────────────────────
# Dense
# ─────────────────────────────────────────────────────────────────────

class DenseMLE(MultilinearExtension):
    """길이 2^n 테이블을 소유하는 MLE.

    Args:
        evaluations: 하이퍼큐브 위의 값 리스트 (복사되어 저장됨)
        num_variables: 지정하면 len(evaluations) == 2^num_variables 를 검사
    """

    def __init__(self, evaluations, num_variables=None):
        evaluations = list(evaluations)
        nv = log2_exact(len(evaluations))
        if num_variables is not None and nv != num_variables:
            raise InvalidArgumentError(
                f"테이블 길이 {len(evaluations)}가 변수 {num_variables}개와 맞지 않습니다"
            )
        field = field_of(evaluations[0])
        for value in evaluations:
            if type(value) is not field:
                field_of(value)
                raise InvalidArgumentError(
                    f"서로 다른 체의 원소가 섞여 있습니다: {type(value).__name__}, {field.__name__}"
                )
        self.evaluations = evaluations
        self.nv = nv
        self.field = field

    @classmethod
    def from_evaluations(cls, values, field=FR):
        """정수 또는 체 원소 리스트로부터 만든다."""
        return cls([field(v) for v in values])

    def num_variables(self):
        return self.nv

    def eval_binary(self, index):
        self._check_index(index)
        return self.evaluations[index]

    def eval_at(self, point):
        _check_point_length(point, self.nv, exact=True)
        return fix_variables(self.evaluations, point)[0]

    def eval_partial_at(self, prefix):
        _check_point_length(prefix, self.nv, exact=False)
        return DenseMLE(fix_variables(self.evaluations, prefix))

    def table(self):
        return list(self.evaluations)

    def scaled(self, factor):
        """모든 평가값에 factor를 곱한 새 MLE."""
        return DenseMLE([v * factor for v in self.evaluations])


class DenseRefMLE(MultilinearExtension):
    """호출자 소유의 리스트를 참조하는 MLE.

    생성 시점의 길이를 기억해 두고, 이후 호출마다 참조 리스트가
    여전히 같은 길이인지 확인한다. 리스트의 원소를 바꾸면 MLE 값도 바뀐다.
    """

    def __init__(self, backing):
        self.backing = backing
        self.nv = log2_exact(len(backing))
        self.field = field_of(backing[0])

    def num_variables(self):
        if len(self.backing) != 1 << self.nv:
            raise InvalidArgumentError(
                f"참조 테이블의 길이가 바뀌었습니다: {len(self.backing)} != {1 << self.nv}"
            )
        return self.nv

    def eval_binary(self, index):
        self._check_index(index)
        return self.backing[index]

    def eval_at(self, point):
        _check_point_length(point, self.num_variables(), exact=True)
        return fix_variables(self.backing, point)[0]

    def eval_partial_at(self, prefix):
        _check_point_length(prefix, self.num_variables(), exact=False)
        return DenseMLE(fix_variables(self.backing, prefix))

    def table(self):
        self.num_variables()
        return list(self.backing)


# ─────────────────────────────────────────────────────────────────────
# Sparse
# ─────────────────────────────────────────────────────────────────────

class SparseMLE(MultilinearExtension):
    """0이 아닌 평가값만 보관하는 MLE.

    Args:
        num_variables: 변수 개수 n
        entries: (인덱스, 값) 쌍의 iterable 또는 {인덱스: 값} dict
        field: 값의 체 (entries가 비어 있을 때 필요, 기본값 FR)

    Raises:
        InvalidArgumentError: 인덱스 ≥ 2^n 이거나 같은 인덱스가 두 번 나올 때
    """

    def __init__(self, num_variables, entries=(), field=None):
        if num_variables < 0:
            raise InvalidArgumentError(f"변수 개수는 음수일 수 없습니다: {num_variables}")
        if isinstance(entries, dict):
            entries = entries.items()
        size = 1 << num_variables
        evaluations = {}
        for index, value in entries:
            if not 0 <= index < size:
                raise InvalidArgumentError(f"인덱스가 범위를 벗어났습니다: {index} (크기 {size})")
            if index in evaluations:
                raise InvalidArgumentError(f"중복된 인덱스입니다: {index}")
            evaluations[index] = value
            value_field = field_of(value)
            if field is None:
                field = value_field
            elif value_field is not field:
                raise InvalidArgumentError(
                    f"서로 다른 체의 원소가 섞여 있습니다: {value_field.__name__}, {field.__name__}"
                )
        self.nv = num_variables
        self.field = field if field is not None else FR
        self.evaluations = {i: v for i, v in evaluations.items() if v != 0}

    @classmethod
    def from_dense_table(cls, table):
        """dense 테이블에서 0이 아닌 원소만 골라 만든다."""
        nv = log2_exact(len(table))
        return cls(nv, [(i, v) for i, v in enumerate(table) if v != 0], field=field_of(table[0]))

    def num_variables(self):
        return self.nv

    def num_nonzero(self):
        return len(self.evaluations)

    def eval_binary(self, index):
        self._check_index(index)
        return self.evaluations.get(index, self.field(0))

    def eval_at(self, point):
        _check_point_length(point, self.nv, exact=True)
        return self.eval_partial_at(point).eval_binary(0)

    def eval_partial_at(self, prefix):
        """앞쪽 변수들을 윈도우 단위로 고정한다.

        윈도우 크기 w = max(1, floor(log2(nnz))). 윈도우마다 eq 테이블을
        만들어 두고 각 원소를 idx → idx >> w 로 재배치하며
        eq[idx & (2^w − 1)]·값을 누적한다. 비용은 nnz × 윈도우 수에
        비례하며 2^n에 의존하지 않는다.
        """
        _check_point_length(prefix, self.nv, exact=False)
        nnz = len(self.evaluations)
        window = max(1, nnz.bit_length() - 1) if nnz else max(1, len(prefix))
        current = dict(self.evaluations)
        nv = self.nv
        remaining = list(prefix)
        while remaining:
            focus, remaining = remaining[:window], remaining[window:]
            k = len(focus)
            pre = eq_evals(focus, self.field)
            mask = (1 << k) - 1
            folded = {}
            for index, value in current.items():
                key = index >> k
                term = pre[index & mask] * value
                if key in folded:
                    folded[key] = folded[key] + term
                else:
                    folded[key] = term
            current = folded
            nv -= k
        return SparseMLE(nv, current, field=self.field)

    def table(self):
        zero = self.field(0)
        out = [zero] * (1 << self.nv)
        for index, value in self.evaluations.items():
            out[index] = value
        return out

    def sparse_table(self):
        return sorted(self.evaluations.items(), key=lambda item: item[0])

    def to_dense(self):
        return DenseMLE(self.table())
