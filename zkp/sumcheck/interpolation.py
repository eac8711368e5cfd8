"""
라그랑주 보간 (Lagrange Interpolation)
========================================

prover 메시지 [g(0), g(1), ..., g(m)]로부터 라운드 다항식 g의
임의 점 평가값 g(r)을 계산한다.

**최적화된 형태**:
  노드 0..m에 대해

      prod      = Π_j (r − j)
      divisor_i = Π_{j≠i} (i − j) = (−1)^(m−i) · i! · (m−i)!
      g(r)      = Σ_i g(i) · prod / (divisor_i · (r − i))

  divisor_i는 파이썬 정수로 정확하게 계산한 뒤 체로 옮긴다.

**동점 처리 (tie-break)**:
  r이 노드 i와 같으면 r − i = 0 이므로 위 식은 0/0이 된다.
  이 경우 g(i)를 그대로 반환한다.

사용 예시:
    >>> from zkp.sumcheck.interpolation import interpolate_uni_poly
    >>> interpolate_uni_poly([FR(1), FR(3), FR(5)], FR(10))   # g(x) = 2x + 1
    21
"""

from zkp.sumcheck.errors import InvalidArgumentError


def _check_nodes(evals, at):
    if not evals:
        raise InvalidArgumentError("보간할 평가값이 없습니다")
    field = type(at)
    if len(evals) > field.field_modulus:
        raise InvalidArgumentError(
            f"노드 0..{len(evals) - 1}이(가) 체 위수 {field.field_modulus} 안에서 서로 다르지 않습니다"
        )
    return field


def interpolate_uni_poly(evals, at):
    """노드 0..len−1 위의 값 evals를 지나는 다항식을 at에서 평가한다.

    Args:
        evals: [p(0), p(1), ..., p(m)] 체 원소 리스트
        at: 평가점 (체 원소)

    Returns:
        p(at)

    Raises:
        InvalidArgumentError: evals가 비어 있거나 노드가 체 안에서 겹칠 때
    """
    field = _check_nodes(evals, at)
    length = len(evals)

    for i in range(length):
        if at == i:
            return evals[i]

    prod = field(1)
    for j in range(length):
        prod = prod * (at - j)

    # factorials[k] = k!
    factorials = [1] * length
    for k in range(1, length):
        factorials[k] = factorials[k - 1] * k

    result = field(0)
    for i in range(length):
        divisor = factorials[i] * factorials[length - 1 - i]
        if (length - 1 - i) % 2:
            divisor = -divisor
        result = result + evals[i] * prod / (field(divisor) * (at - i))
    return result


def interpolate_naive(evals, at):
    """Σ y_i · Π_{j≠i} (at − j) / (i − j) 를 그대로 계산하는 참조 구현."""
    field = _check_nodes(evals, at)
    result = field(0)
    for i, y in enumerate(evals):
        term = y
        for j in range(len(evals)):
            if j != i:
                term = term * (at - j) / field(i - j)
        result = result + term
    return result
