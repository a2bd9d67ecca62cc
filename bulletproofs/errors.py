"""
R1CS 증명 시스템 오류 분류
============================

  R1CSError
  ├── ConstructionError      회로 작성자의 오용 (증명 바이트 생성 전에 발생)
  │   ├── MissingAssignment       witness 값 없이 할당 요청
  │   ├── UnsatisfiedConstraint   Prover 자체 검사에서 제약 불만족
  │   ├── InvalidGeneratorsLength 생성자 용량 부족
  │   ├── PhaseError              상태 기계 단계에 맞지 않는 API 호출
  │   ├── UnknownVariable         이 제약 시스템이 할당하지 않은 변수
  │   └── GadgetError             가젯 입력 오류
  ├── FormatError            직렬화된 증명의 형식 오류
  └── VerificationError      형식은 올바르지만 관계가 성립하지 않는 증명

모든 오류는 현재 증명/검증 호출에 대해 최종적이며, 라이브러리 내부에서
잡아서 재시도하지 않는다.
"""


class R1CSError(Exception):
    """R1CS 증명 시스템의 기본 예외."""


class ConstructionError(R1CSError):
    """회로 구성 단계의 오류. 증명 바이트가 만들어지기 전에 발생한다."""


class MissingAssignment(ConstructionError):
    """Prover에서 witness 값 없이 변수 할당을 요청했다."""

    def __init__(self, message="변수 할당에 witness 값이 필요합니다"):
        super().__init__(message)


class UnsatisfiedConstraint(ConstructionError):
    """제약이 witness 하에서 0으로 평가되지 않는다.

    속성:
        index: 실패한 제약의 순번 (상수 제약의 즉시 검사에서는 None)
    """

    def __init__(self, index=None, message=None):
        self.index = index
        if message is None:
            if index is None:
                message = "0이 아닌 상수 제약입니다"
            else:
                message = f"제약 {index}이(가) 만족되지 않습니다"
        super().__init__(message)


class InvalidGeneratorsLength(ConstructionError):
    """생성자 벡터의 용량이 패딩된 회로 크기보다 작다."""

    def __init__(self, required, capacity):
        self.required = required
        self.capacity = capacity
        super().__init__(
            f"생성자 {required}개가 필요하지만 용량은 {capacity}개입니다"
        )


class PhaseError(ConstructionError):
    """현재 단계(Phase)에서 허용되지 않는 호출."""


class UnknownVariable(ConstructionError):
    """다른 제약 시스템에서 온 변수처럼, 이 시스템이 할당한 적 없는 변수를 썼다.

    속성:
        variable: 문제의 Variable
    """

    def __init__(self, variable):
        self.variable = variable
        super().__init__(f"할당되지 않은 변수입니다: {variable!r}")


class GadgetError(ConstructionError):
    """가젯이 잘못된 입력을 받았다."""

    def __init__(self, description):
        self.description = description
        super().__init__(f"가젯 오류: {description}")


class FormatError(R1CSError):
    """직렬화된 증명이 잘못된 형식이다."""


class VerificationError(R1CSError):
    """증명 검증 실패."""

    def __init__(self, message="증명 검증에 실패했습니다"):
        super().__init__(message)
