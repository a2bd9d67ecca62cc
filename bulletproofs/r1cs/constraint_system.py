"""
제약 시스템(Constraint System) 인터페이스
==========================================

회로 작성 코드는 이 인터페이스에 대해 한 번만 작성되고 두 번 실행된다:
  - Prover: witness를 가지고 실행 → 증명 생성
  - Verifier: witness 없이 커밋먼트만으로 실행 → 증명 검증
두 실행은 변수 할당과 제약 추가를 정확히 같은 순서로 해야 한다.
순서가 다르면 평탄화(flatten)된 가중치 벡터가 달라져 검증이 실패한다.

**기능 집합**:
  | 연산                           | 인터페이스                     |
  |--------------------------------|--------------------------------|
  | 외부 변수 할당 (commit)         | Prover.commit / Verifier.commit |
  | 곱셈 게이트 할당                | multiply, allocate, allocate_multiplier |
  | 제약 추가                       | constrain                      |
  | 무작위 제약 예약                | specify_randomized_constraints |
  | 챌린지 요청 (2단계에서만)        | challenge_scalar               |

**상태 기계 (Phase)**:

  INITIAL ──(1단계 커밋먼트 흡수)──▶ RANDOMIZED ──(콜백 완료)──▶ FINALIZED ──▶ CLOSED
     │                                   │
     │ 할당/제약/예약 가능                │ 할당/제약/챌린지 가능 (예약된 콜백 안에서)
     ▼                                   ▼

  CLOSED 이후의 모든 호출은 PhaseError.

**무작위 제약 (2단계)**:
  specify_randomized_constraints(callback)로 예약된 콜백은
  1단계 커밋먼트 A_I1, A_O1, S1이 트랜스크립트에 흡수된 뒤
  등록 순서대로 정확히 한 번씩 실행된다. 콜백은 challenge_scalar를
  제공하는 RandomizedConstraintSystem을 인자로 받는다.
  여러 개의 동등성 검사를 하나의 무작위 선형 검사로 묶는 데 쓰인다.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from bulletproofs.errors import PhaseError, UnknownVariable, UnsatisfiedConstraint
from bulletproofs.r1cs.linear_combination import VariableKind


class Phase(Enum):
    INITIAL = "initial"
    RANDOMIZED = "randomized"
    FINALIZED = "finalized"
    CLOSED = "closed"


@dataclass(frozen=True)
class Metrics:
    """제약 시스템 크기 통계.

    속성:
        multipliers: 곱셈 게이트 수
        constraints: 전체 제약 수
        phase_one_constraints: 1단계 제약 수
        phase_two_constraints: 2단계(무작위) 제약 수
    """
    multipliers: int
    constraints: int
    phase_one_constraints: int
    phase_two_constraints: int


def check_constant_constraint(lc):
    """상수 항만 있는 제약이 0이 아니면 즉시 실패시킨다.

    선형결합을 소비하지 않는다. 빈 선형결합은 통과한다.

    Raises:
        UnsatisfiedConstraint: 상수 합이 0이 아닐 때
    """
    if lc.is_constant() and int(lc.constant_value()) != 0:
        raise UnsatisfiedConstraint()


def check_variables(lc, num_committed, num_multipliers):
    """선형결합의 모든 변수가 이 제약 시스템에서 할당된 것인지 확인한다.

    Raises:
        UnknownVariable: 인덱스가 할당된 변수 수를 넘을 때
    """
    for var, _ in lc.terms:
        if var.kind == VariableKind.ONE:
            continue
        if var.kind == VariableKind.COMMITTED:
            bound = num_committed
        else:
            bound = num_multipliers
        if not 0 <= var.index < bound:
            raise UnknownVariable(var)


def require_phase(cs, *allowed):
    """현재 단계가 allowed 중 하나인지 확인한다."""
    if cs.phase not in allowed:
        names = ", ".join(p.name for p in allowed)
        raise PhaseError(
            f"{type(cs).__name__}이(가) {cs.phase.name} 단계입니다 (허용: {names})"
        )


class ConstraintSystem(ABC):
    """Prover와 Verifier가 공유하는 기본 제약 시스템 인터페이스."""

    @property
    @abstractmethod
    def transcript(self):
        """이 세션이 독점하는 Fiat-Shamir 트랜스크립트."""

    @abstractmethod
    def multiply(self, left, right):
        """곱셈 게이트를 할당하고 입력을 left, right 선형결합에 묶는다.

        Returns:
            (Variable, Variable, Variable): 왼쪽, 오른쪽, 출력 배선
        """

    @abstractmethod
    def allocate(self, assignment=None):
        """단일 변수를 할당한다 (두 번의 호출이 한 게이트를 공유)."""

    @abstractmethod
    def allocate_multiplier(self, input_assignments=None):
        """입력 제약 없이 곱셈 게이트를 할당한다.

        Args:
            input_assignments: Prover에서는 (left, right) 값, Verifier는 무시
        """

    @abstractmethod
    def metrics(self):
        """Metrics를 반환한다."""

    @abstractmethod
    def constrain(self, lc):
        """lc = 0 제약을 추가한다."""


class RandomizableConstraintSystem(ConstraintSystem):
    """1단계 제약 시스템: 무작위 제약을 예약할 수 있다."""

    @abstractmethod
    def specify_randomized_constraints(self, callback):
        """callback(cs: RandomizedConstraintSystem)을 2단계로 예약한다."""


class RandomizedConstraintSystem(ConstraintSystem):
    """2단계 제약 시스템: 트랜스크립트 챌린지를 얻을 수 있다."""

    @abstractmethod
    def challenge_scalar(self, label):
        """1단계 커밋먼트에 묶인 챌린지 스칼라를 반환한다."""


def collect_metrics(cs, multipliers):
    """Prover/Verifier 공통 Metrics 계산.

    2단계 전에는 예약된 콜백 수를 2단계 제약 수로 센다.
    """
    if cs.num_phase_one_constraints is None:
        phase_one = len(cs.constraints)
        phase_two = len(cs.deferred_constraints)
    else:
        phase_one = cs.num_phase_one_constraints
        phase_two = len(cs.constraints) - phase_one
    return Metrics(
        multipliers=multipliers,
        constraints=phase_one + phase_two,
        phase_one_constraints=phase_one,
        phase_two_constraints=phase_two,
    )
