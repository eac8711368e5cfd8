"""
동등 확장(Equality Extension) eq(g, ·)
=======================================

불리언 하이퍼큐브 위에서 g와 같을 때만 1인 지시 함수의 다중선형 확장:

    eq(g, z) = Π_i ( g_i·z_i + (1 − g_i)·(1 − z_i) )

**테이블 I(g)**:
  z ∈ {0,1}^n 전체에 대한 eq(g, z)를 한 번에 계산한다.
  길이 1 테이블 [1]에서 시작해 좌표 하나마다 크기를 두 배로 늘린다.

      I[i | 2^k] = I[i] · g_k
      I[i]       = I[i] − I[i | 2^k]        (= I[i] · (1 − g_k))

  인덱스의 i번째 비트가 g_i에 대응한다 (리틀엔디안). 비용 O(2^n).

사용 예시:
    >>> from zkp.sumcheck.eq import eq_evals, eq_eval
    >>> table = eq_evals([FR(2), FR(5)])
    >>> table[3] == eq_eval([FR(2), FR(5)], [FR(1), FR(1)])
    True
"""

from zkp.sumcheck.errors import InvalidArgumentError
from zkp.sumcheck.field import FR


def eq_evals(point, field=None):
    """I(point) 테이블을 계산한다.

    Args:
        point: 체 원소 리스트 (길이 n)
        field: point가 비어 있을 때 사용할 체 (기본값: FR)

    Returns:
        list: 길이 2^n, table[z] = eq(point, z)
    """
    if field is None:
        field = type(point[0]) if point else FR
    table = [field(1)]
    for k, r in enumerate(point):
        half = 1 << k
        table.extend([field(0)] * half)
        for i in range(half):
            table[half | i] = table[i] * r
            table[i] = table[i] - table[half | i]
    return table


def eq_eval(x, y):
    """두 점의 eq(x, y)를 닫힌 식으로 계산한다."""
    if len(x) != len(y):
        raise InvalidArgumentError(f"두 점의 길이가 다릅니다: {len(x)} != {len(y)}")
    if not x:
        return FR(1)
    result = type(x[0])(1)
    for xi, yi in zip(x, y):
        result = result * (xi * yi + (1 - xi) * (1 - yi))
    return result


def eq_extension(t):
    """eq(t, ·)를 좌표별 다중선형 확장들의 곱으로 표현한다.

    i번째 MLE는 len(t)개 변수 위에서 x ↦ 2·t_i·x_i − x_i − t_i + 1 이고,
    모든 MLE의 곱이 eq(t, x)이다.

    sum-check의 곱 항에 그대로 넣을 수 있는 형태이다
    (예: R1CS 논증에서 eq(t, x)·(Az·Bz − Cz)).

    Returns:
        list[DenseMLE]: len(t)개의 MLE
    """
    from zkp.sumcheck.mle import DenseMLE

    if not t:
        raise InvalidArgumentError("eq_extension에는 최소 한 개의 좌표가 필요합니다")
    dim = len(t)
    field = type(t[0])
    result = []
    for i, ti in enumerate(t):
        evaluations = []
        for x in range(1 << dim):
            xi = field((x >> i) & 1)
            evaluations.append(ti * xi + ti * xi - xi - ti + 1)
        result.append(DenseMLE(evaluations))
    return result
