"""
정규(canonical) 바이트 인코딩
===============================

트랜스크립트 흡수와 증명 직렬화가 공유하는 바이트 형식.

  - 체 원소: 정규 정수의 리틀엔디안 고정폭 L = ceil(bitlen(p)/8) 바이트
  - 정수 (길이/개수): u64 리틀엔디안
  - 벡터: u64 길이 접두사 + 각 원소

사용 예시:
    >>> from zkp.sumcheck.encoding import encode_field_vector, ByteReader
    >>> data = encode_field_vector([FR(1), FR(2)])
    >>> ByteReader(data).read_field_vector(FR)
    [1, 2]
"""

from py_ecc.fields.field_elements import FQ as PrimeFieldElement

from zkp.sumcheck.errors import SerializationError
from zkp.sumcheck.field import byte_length


U64_MAX = (1 << 64) - 1


def encode_u64(value):
    if value < 0 or value > U64_MAX:
        raise SerializationError(f"u64 범위를 벗어난 값입니다: {value}")
    return value.to_bytes(8, "little")


def encode_field_element(element):
    """체 원소 → 리틀엔디안 고정폭 바이트열."""
    width = byte_length(type(element))
    return int(element).to_bytes(width, "little")


def encode_field_vector(elements):
    out = bytearray(encode_u64(len(elements)))
    for element in elements:
        out.extend(encode_field_element(element))
    return bytes(out)


def encode_message(message):
    """트랜스크립트에 넣을 수 있는 임의의 메시지를 정규 바이트열로 바꾼다.

    지원 형식:
        - to_bytes() 메서드를 가진 객체 (ProverMessage, PolynomialInfo, 증명)
        - 체 원소
        - 음이 아닌 정수 (u64)
        - bytes / bytearray (그대로)
        - 위 형식들의 list / tuple (u64 길이 접두사)

    Raises:
        SerializationError: 지원하지 않는 형식
    """
    if isinstance(message, PrimeFieldElement):
        return encode_field_element(message)
    if hasattr(message, "to_bytes") and not isinstance(message, int):
        return message.to_bytes()
    if isinstance(message, bool):
        raise SerializationError("bool은 직렬화할 수 없습니다")
    if isinstance(message, int):
        return encode_u64(message)
    if isinstance(message, (bytes, bytearray)):
        return bytes(message)
    if isinstance(message, (list, tuple)):
        out = bytearray(encode_u64(len(message)))
        for item in message:
            out.extend(encode_message(item))
        return bytes(out)
    raise SerializationError(f"직렬화할 수 없는 메시지 형식입니다: {type(message).__name__}")


class ByteReader:
    """바이트열을 앞에서부터 소비하는 디코더."""

    def __init__(self, data):
        self.data = bytes(data)
        self.offset = 0

    def read(self, n):
        end = self.offset + n
        if end > len(self.data):
            raise SerializationError(
                f"입력이 잘렸습니다: {n}바이트가 필요하지만 {len(self.data) - self.offset}바이트 남음"
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def read_u64(self):
        return int.from_bytes(self.read(8), "little")

    def read_field_element(self, field):
        value = int.from_bytes(self.read(byte_length(field)), "little")
        if value >= field.field_modulus:
            raise SerializationError(f"정규형이 아닌 체 원소입니다: {value}")
        return field(value)

    def read_field_vector(self, field):
        length = self.read_u64()
        remaining = len(self.data) - self.offset
        if length * byte_length(field) > remaining:
            raise SerializationError(f"벡터 길이가 남은 입력보다 깁니다: {length}")
        return [self.read_field_element(field) for _ in range(length)]

    def finish(self):
        """남은 바이트가 없는지 확인한다."""
        if self.offset != len(self.data):
            raise SerializationError(
                f"디코딩 후 {len(self.data) - self.offset}바이트가 남았습니다"
            )
