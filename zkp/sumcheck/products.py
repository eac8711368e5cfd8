"""
곱의 합 다항식 (List of Products)
==================================

sum-check가 증명하는 다항식

    P(x) = Σ_i c_i · Π_j MLE_{i,j}(x)

을 표현한다.

**아레나(arena)와 핸들**:
  여러 곱 항이 같은 MLE를 공유할 수 있으므로 MLE는
  flattened_ml_extensions 리스트에 한 번만 저장하고, 곱 항은
  그 리스트의 정수 인덱스(핸들)를 가리킨다. 같은 객체를 두 번
  add_mle 하면 같은 핸들을 돌려준다.

**PolynomialInfo**:
  verifier가 알아야 하는 모양 정보 (max_multiplicands, num_variables).
  라운드 메시지 길이는 max_multiplicands + 1 이다.

사용 예시:
    >>> poly = ListOfProducts(num_variables=3)
    >>> a, b = poly.add_mle(f), poly.add_mle(g)
    >>> poly.add_product([a, b], coefficient=FR(2))
    >>> poly.add_product_of_mles([f])
    >>> poly.info()
    PolynomialInfo(max_multiplicands=2, num_variables=3)
"""

from zkp.sumcheck.encoding import ByteReader, encode_u64
from zkp.sumcheck.errors import InvalidArgumentError
from zkp.sumcheck.field import FR


class PolynomialInfo:
    """다항식의 모양 정보 (verifier 키).

    속성:
        max_multiplicands: 곱 항 하나에 들어 있는 MLE 수의 최댓값
        num_variables: 변수 개수
    """

    def __init__(self, max_multiplicands, num_variables):
        self.max_multiplicands = max_multiplicands
        self.num_variables = num_variables

    def to_bytes(self):
        return encode_u64(self.max_multiplicands) + encode_u64(self.num_variables)

    @classmethod
    def from_bytes(cls, data):
        reader = ByteReader(data)
        info = cls(reader.read_u64(), reader.read_u64())
        reader.finish()
        return info

    def __eq__(self, other):
        if not isinstance(other, PolynomialInfo):
            return NotImplemented
        return (self.max_multiplicands == other.max_multiplicands
                and self.num_variables == other.num_variables)

    def __repr__(self):
        return (f"PolynomialInfo(max_multiplicands={self.max_multiplicands}, "
                f"num_variables={self.num_variables})")


class ListOfProducts:
    """MLE 곱 항들의 일차 결합.

    속성:
        num_variables: 모든 MLE가 공유하는 변수 개수
        max_multiplicands: 가장 긴 곱 항의 길이
        products: (coefficient, [handle, ...]) 리스트
        flattened_ml_extensions: 핸들이 가리키는 MLE 아레나
    """

    def __init__(self, num_variables):
        if num_variables < 0:
            raise InvalidArgumentError(f"변수 개수는 음수일 수 없습니다: {num_variables}")
        self.num_variables = num_variables
        self.max_multiplicands = 0
        self.products = []
        self.flattened_ml_extensions = []

    @property
    def field(self):
        if self.flattened_ml_extensions:
            return self.flattened_ml_extensions[0].field
        return FR

    def add_mle(self, mle):
        """MLE를 아레나에 등록하고 핸들을 반환한다 (같은 객체는 같은 핸들)."""
        if mle.num_variables() != self.num_variables:
            raise InvalidArgumentError(
                f"MLE의 변수 개수가 다릅니다: {mle.num_variables()} != {self.num_variables}"
            )
        for handle, existing in enumerate(self.flattened_ml_extensions):
            if existing is mle:
                return handle
        self.flattened_ml_extensions.append(mle)
        return len(self.flattened_ml_extensions) - 1

    def add_product(self, handles, coefficient=None):
        """핸들 리스트로 곱 항 coefficient · Π MLE[h]를 추가한다."""
        handles = list(handles)
        if not handles:
            raise InvalidArgumentError("빈 곱 항은 추가할 수 없습니다")
        for handle in handles:
            if not 0 <= handle < len(self.flattened_ml_extensions):
                raise InvalidArgumentError(f"알 수 없는 MLE 핸들입니다: {handle}")
        field = self.field
        coefficient = field(1) if coefficient is None else field(coefficient)
        self.products.append((coefficient, handles))
        self.max_multiplicands = max(self.max_multiplicands, len(handles))

    def add_product_of_mles(self, mles, coefficient=None):
        """MLE들을 등록하고 그 곱을 항으로 추가한다."""
        mles = list(mles)
        if not mles:
            raise InvalidArgumentError("빈 곱 항은 추가할 수 없습니다")
        handles = [self.add_mle(mle) for mle in mles]
        self.add_product(handles, coefficient)

    def info(self):
        return PolynomialInfo(self.max_multiplicands, self.num_variables)

    def evaluate(self, point):
        """P(point)를 계산한다."""
        if len(point) != self.num_variables:
            raise InvalidArgumentError(
                f"평가점의 길이가 변수 개수와 다릅니다: {len(point)} != {self.num_variables}"
            )
        evaluations = [mle.eval_at(point) for mle in self.flattened_ml_extensions]
        result = self.field(0)
        for coefficient, handles in self.products:
            term = coefficient
            for handle in handles:
                term = term * evaluations[handle]
            result = result + term
        return result

    def sum_over_hypercube(self):
        """Σ_{x ∈ {0,1}^n} P(x) 를 직접 계산한다 (정직한 주장을 만들 때 사용)."""
        tables = [mle.table() for mle in self.flattened_ml_extensions]
        result = self.field(0)
        for b in range(1 << self.num_variables):
            for coefficient, handles in self.products:
                term = coefficient
                for handle in handles:
                    term = term * tables[handle][b]
                result = result + term
        return result
