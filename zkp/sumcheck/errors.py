"""
Sum-check 오류 분류
=====================

프로토콜 계층 전체에서 쓰는 예외 계층.

  SumcheckError
  ├── InvalidArgumentError   (ValueError)   잘못된 형태/크기의 입력
  ├── InvalidOperationError  (RuntimeError) 상태 기계를 잘못된 순서로 호출
  ├── InternalCorruptionError               내부 불변식 위반
  ├── RejectError                           verifier가 증명을 거부함
  └── SerializationError     (ValueError)   바이트 인코딩/디코딩 실패

RejectError는 정상적인 verifier 동작이다. 거짓 증명을 거부하는 것은
호출자의 실수가 아니므로 InvalidArgumentError와 구분한다.
"""


class SumcheckError(Exception):
    """이 패키지에서 발생하는 모든 오류의 기반 클래스."""


class InvalidArgumentError(SumcheckError, ValueError):
    pass


class InvalidOperationError(SumcheckError, RuntimeError):
    pass


class InternalCorruptionError(SumcheckError):
    pass


class RejectError(SumcheckError):
    """검증 실패. round 속성에 처음 불일치한 라운드(1부터)를 담는다."""

    def __init__(self, message, round=None):
        super().__init__(message)
        self.round = round


class SerializationError(SumcheckError, ValueError):
    pass
