"""
Sum-check Fiat-Shamir Transcript
==================================

비대화식(non-interactive) 변환을 위한 결정론적 난수 생성기.

**Fiat-Shamir 변환**:
  대화식 sum-check에서 verifier는 매 라운드 무작위 챌린지 r_k를 보낸다.
  Fiat-Shamir 변환은 지금까지 오간 모든 메시지를 해시하여 r_k를 만든다.
  prover와 verifier가 같은 순서로 feed 하면 같은 챌린지를 얻는다.

**Blake2b-512 상태 기계**:
  - feed(msg): msg를 정규 바이트열로 직렬화하여 누적 다이제스트에 흡수
  - squeeze_bytes(n): 현재 다이제스트의 사본을 확정하여 64바이트 블록을 얻고,
    블록을 다 쓰면 그 블록을 다이제스트에 흡수한 뒤 새 블록을 만든다.
    마지막 블록도 다이제스트에 흡수하므로 연속된 squeeze는 서로 다른 값을 낸다.
  - squeeze_field_element(): L+16 바이트를 리틀엔디안 정수로 읽어 mod p
    (L = 위수의 바이트 길이, 여분 128비트로 편향을 무시할 수 있게 함)

시드는 없다. 같은 feed/squeeze 호출 순서는 항상 같은 출력을 낸다.

사용 예시:
    >>> t = Transcript()
    >>> t.feed(polynomial.info())
    >>> t.feed(prover_msg)
    >>> r = t.squeeze_field_element()
"""

import hashlib
import random

from zkp.sumcheck.encoding import encode_message
from zkp.sumcheck.field import FR, byte_length, random_element


TRANSCRIPT_DIGEST_SIZE = 64

# 체 원소를 뽑을 때 위수 길이에 더하는 여분 바이트
WIDE_REDUCTION_EXTRA_BYTES = 16


class Transcript:
    """Blake2b-512 기반 Fiat-Shamir 트랜스크립트.

    속성:
        field: squeeze_field_element가 반환하는 체 클래스
    """

    def __init__(self, field=FR):
        self.field = field
        self._digest = hashlib.blake2b(digest_size=TRANSCRIPT_DIGEST_SIZE)

    def feed(self, message):
        """메시지를 트랜스크립트에 흡수한다.

        Raises:
            SerializationError: 직렬화할 수 없는 메시지
        """
        self._digest.update(encode_message(message))

    def squeeze_bytes(self, n):
        """n바이트의 의사난수를 뽑는다."""
        output = self._digest.copy().digest()
        out = bytearray()
        ptr = 0
        while len(out) < n:
            out.append(output[ptr])
            ptr += 1
            if ptr == TRANSCRIPT_DIGEST_SIZE:
                self._digest.update(output)
                output = self._digest.copy().digest()
                ptr = 0
        self._digest.update(output)
        return bytes(out)

    def squeeze_field_element(self):
        """균일에 가까운 체 원소 챌린지를 뽑는다."""
        width = byte_length(self.field) + WIDE_REDUCTION_EXTRA_BYTES
        value = int.from_bytes(self.squeeze_bytes(width), "little")
        return self.field(value % self.field.field_modulus)

    def squeeze_field_elements(self, count):
        return [self.squeeze_field_element() for _ in range(count)]


class RandomChallenger:
    """대화식 실행용 챌린저. Transcript와 같은 인터페이스를 가진다.

    verifier가 진짜 난수로 챌린지를 고른다. feed는 아무 것도 하지 않는다.

    Args:
        field: 챌린지의 체
        rng: random.Random 인스턴스 (재현이 필요하면 시드를 준다)
    """

    def __init__(self, field=FR, rng=None):
        self.field = field
        self.rng = rng if rng is not None else random.SystemRandom()

    def feed(self, message):
        pass

    def squeeze_field_element(self):
        return random_element(self.field, self.rng)

    def squeeze_field_elements(self, count):
        return [self.squeeze_field_element() for _ in range(count)]
