"""
Sum-check 기반 모듈: 유한체(Finite Field)
==========================================

sum-check 프로토콜과 GKR 라운드 축약 전체에서 사용되는 소수체를 정의한다.

**기본 유한체 FR**:
  bn128 타원곡선의 스칼라 필드. 다중선형 확장(MLE)의 평가값,
  prover 메시지, verifier 챌린지가 모두 이 체의 원소이다.
  - 위수 p ≈ 2^254 → 라운드당 건전성 오류 ≈ 차수 / p

**작은 체 (테스트용)**:
  `make_field(97)` 처럼 임의의 소수 위수를 가진 체를 만든다.
  작은 체에서는 조작된 증명이 우연히 통과할 확률이 커지므로
  결정론적 시나리오 재현에 쓰인다.

사용 예시:
    >>> from zkp.sumcheck.field import FR, make_field
    >>> FR(3) * FR(7)        # FR(21)
    >>> F97 = make_field(97)
    >>> F97(50) + F97(50)    # F97(3)
"""

from py_ecc.fields import bn128_FQ as FQ
from py_ecc.fields.field_elements import FQ as PrimeFieldElement
from py_ecc import bn128

from zkp.sumcheck.errors import InvalidArgumentError


# ─────────────────────────────────────────────────────────────────────
# 기본 유한체 FR
# ─────────────────────────────────────────────────────────────────────

class FR(FQ):
    """bn128 스칼라 필드 위의 유한체 원소.

    py_ecc의 FQ 클래스를 상속하여 +, -, *, /, ** 연산을 제공한다.

    속성:
        field_modulus: bn128 곡선 위수 (소수 p)
    """
    field_modulus = bn128.curve_order


# 곡선 위수 (필드 크기)
CURVE_ORDER = bn128.curve_order


_FIELD_CACHE = {CURVE_ORDER: FR}

# 결정론적 Miller-Rabin 밑. 3.3 × 10^24 미만의 수에 대해 정확하다.
_MILLER_RABIN_BASES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37, 41)


def is_prime(n):
    """고정된 밑으로 Miller-Rabin 소수 판정을 한다.

    작은 소수로 나누어 본 뒤, n − 1 = d·2^s 로 분해하여
    각 밑 a에 대해 a^d ≡ 1 또는 a^(d·2^j) ≡ −1 (mod n) 인지 확인한다.
    """
    if n < 2:
        return False
    for p in _MILLER_RABIN_BASES:
        if n % p == 0:
            return n == p
    d, s = n - 1, 0
    while d % 2 == 0:
        d //= 2
        s += 1
    for a in _MILLER_RABIN_BASES:
        x = pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(s - 1):
            x = x * x % n
            if x == n - 1:
                break
        else:
            return False
    return True


def make_field(modulus):
    """주어진 소수 위수의 유한체 클래스를 반환한다.

    같은 위수로 여러 번 호출하면 같은 클래스를 돌려준다
    (서로 다른 클래스의 원소가 섞이지 않도록).

    Args:
        modulus: 소수 위수

    Returns:
        FQ 서브클래스

    Raises:
        InvalidArgumentError: modulus가 소수가 아닐 때

    예시:
        >>> F97 = make_field(97)
        >>> F97(96) + F97(1) == F97(0)
        True
    """
    field = _FIELD_CACHE.get(modulus)
    if field is None:
        if not is_prime(modulus):
            raise InvalidArgumentError(f"체의 위수는 소수여야 합니다: {modulus}")
        field = type(f"F{modulus}", (PrimeFieldElement,), {"field_modulus": modulus})
        _FIELD_CACHE[modulus] = field
    return field


def field_of(value):
    """체 원소의 체 클래스를 반환한다.

    Raises:
        InvalidArgumentError: value가 체 원소가 아닐 때 (예: 정수)
    """
    if not isinstance(value, PrimeFieldElement):
        raise InvalidArgumentError(
            f"체 원소가 필요합니다: {value!r} ({type(value).__name__})"
        )
    return type(value)


def byte_length(field):
    """정규 인코딩에 쓰는 바이트 길이 ceil(bitlen(p) / 8)."""
    return (field.field_modulus.bit_length() + 7) // 8


def random_element(field, rng):
    """rng(random.Random)로 균일한 체 원소를 뽑는다."""
    return field(rng.randrange(field.field_modulus))


def random_point(field, num_variables, rng):
    """길이 num_variables의 무작위 평가점을 만든다."""
    return [random_element(field, rng) for _ in range(num_variables)]
