"""
재사용 가능한 R1CS 가젯
=========================

제약 시스템 인터페이스에 대해 한 번만 작성된 회로 코드.
같은 함수가 Prover(witness 포함)와 Verifier(커밋먼트만)에서 그대로 실행된다.

**가젯 목록**:
  | 가젯            | 증명 내용                          | 곱셈 게이트 | 단계  |
  |-----------------|------------------------------------|-------------|-------|
  | example_gadget  | (a1 + a2)(b1 + b2) = c1 + c2        | 1           | 1     |
  | range_gadget    | 0 ≤ v < 2ⁿ                         | n           | 1     |
  | shuffle_gadget  | y는 x의 순열                        | 2(k - 1)    | 2     |

**셔플 가젯**:
  두 다항식이 같으면 근의 다중집합이 같다:
    Π (xᵢ - z) = Π (yᵢ - z)
  z는 1단계 커밋먼트(즉 xᵢ, yᵢ) 이후에 정해지는 챌린지이므로
  Prover가 z에 맞춰 값을 고를 수 없다 (Schwartz-Zippel).

사용 예시:
    >>> proof, inputs, outputs = ShuffleProof.prove(
    ...     pc_gens, bp_gens, Transcript(b"ShuffleTest"), [3, 7, 1], [1, 3, 7])
    >>> proof.verify(pc_gens, bp_gens, Transcript(b"ShuffleTest"), inputs, outputs)
"""

from functools import reduce

from bulletproofs.errors import GadgetError
from bulletproofs.field import FR, CURVE_ORDER, random_scalar
from bulletproofs.r1cs.linear_combination import LinearCombination
from bulletproofs.r1cs.proof import R1CSProof
from bulletproofs.r1cs.prover import Prover
from bulletproofs.r1cs.verifier import Verifier


# 비트 분해가 필드에서 감기지(wrap) 않는 최대 비트 수
MAX_RANGE_BITS = CURVE_ORDER.bit_length() - 1


def example_gadget(cs, a1, a2, b1, b2, c1, c2):
    """(a1 + a2)·(b1 + b2) = c1 + c2 를 강제한다.

    인자는 모두 Variable, 스칼라, LinearCombination 중 하나이다.
    """
    _, _, c_var = cs.multiply(a1 + a2, b1 + b2)
    cs.constrain(c1 + c2 - c_var)


def range_gadget(cs, v, v_assignment, n):
    """v가 [0, 2ⁿ) 안에 있음을 비트 분해로 강제한다.

    비트마다 곱셈 게이트 하나 (a, b, o)를 할당하고:
      - o = a·b = 0      (둘 중 하나는 0)
      - a = 1 - b        (둘 다 0 또는 1)
      - v = Σ bᵢ·2ⁱ

    Args:
        cs: ConstraintSystem
        v: 범위를 검사할 선형결합 (또는 Variable)
        v_assignment: Prover에서는 v의 값, Verifier에서는 None
        n: 비트 수

    Raises:
        GadgetError: n이 1 이상 MAX_RANGE_BITS 이하가 아닐 때
    """
    if not 1 <= n <= MAX_RANGE_BITS:
        raise GadgetError(f"비트 수는 1 이상 {MAX_RANGE_BITS} 이하여야 합니다: {n}")
    if v_assignment is not None and int(v_assignment) < 0:
        raise GadgetError("음수는 비트 분해할 수 없습니다")

    v = LinearCombination.from_(v)
    exp_2 = FR(1)
    for i in range(n):
        if v_assignment is None:
            assignment = None
        else:
            bit = (int(v_assignment) >> i) & 1
            assignment = (1 - bit, bit)
        a, b, o = cs.allocate_multiplier(assignment)

        cs.constrain(o)
        cs.constrain(a + (b - 1))
        v -= b * exp_2
        exp_2 = exp_2 + exp_2

    cs.constrain(v)


def shuffle_gadget(cs, x, y):
    """y가 x의 순열임을 강제한다.

    k = len(x) ≥ 2 이면 무작위 제약을 예약하고, 챌린지 z에 대해
    Π (xᵢ - z) = Π (yᵢ - z) 를 곱셈 게이트 사슬로 검사한다.

    Args:
        cs: RandomizableConstraintSystem
        x, y: 같은 길이의 Variable 리스트

    Raises:
        GadgetError: 길이가 다를 때
    """
    if len(x) != len(y):
        raise GadgetError(f"입력 {len(x)}개와 출력 {len(y)}개의 길이가 다릅니다")
    k = len(x)
    if k == 0:
        return
    if k == 1:
        cs.constrain(y[0] - x[0])
        return

    x = list(x)
    y = list(y)

    def randomized(rcs):
        z = rcs.challenge_scalar(b"shuffle challenge")
        first_mulx_out = _product_chain(rcs, x, z)
        first_muly_out = _product_chain(rcs, y, z)
        rcs.constrain(first_mulx_out - first_muly_out)

    cs.specify_randomized_constraints(randomized)


def _product_chain(cs, values, z):
    # Π (values[i] - z), 마지막 두 원소부터 앞쪽으로 곱해 나간다
    k = len(values)
    _, _, last_out = cs.multiply(values[k - 1] - z, values[k - 2] - z)

    def step(prev_out, i):
        _, _, out = cs.multiply(prev_out, values[i] - z)
        return out

    return reduce(step, reversed(range(k - 2)), last_out)


class ShuffleProof:
    """셔플 가젯 하나로 구성된 증명과 그 입출력 커밋먼트 처리."""

    def __init__(self, proof):
        self.proof = proof

    @staticmethod
    def _domain_sep(transcript, k):
        transcript.append_message(b"dom-sep", b"ShuffleProof")
        transcript.append_u64(b"k", k)

    @classmethod
    def prove(cls, pc_gens, bp_gens, transcript, inputs, outputs, rng=None):
        """outputs가 inputs의 순열임을 증명한다.

        Returns:
            (ShuffleProof, 입력 커밋먼트 리스트, 출력 커밋먼트 리스트)
        """
        if len(inputs) != len(outputs):
            raise GadgetError(
                f"입력 {len(inputs)}개와 출력 {len(outputs)}개의 길이가 다릅니다"
            )
        cls._domain_sep(transcript, len(inputs))

        prover = Prover(pc_gens, transcript)
        input_commitments, input_vars = [], []
        for value in inputs:
            V, var = prover.commit(value, random_scalar(rng))
            input_commitments.append(V)
            input_vars.append(var)
        output_commitments, output_vars = [], []
        for value in outputs:
            V, var = prover.commit(value, random_scalar(rng))
            output_commitments.append(V)
            output_vars.append(var)

        shuffle_gadget(prover, input_vars, output_vars)
        proof = prover.prove(bp_gens, rng)
        return cls(proof), input_commitments, output_commitments

    def verify(self, pc_gens, bp_gens, transcript, input_commitments,
               output_commitments, rng=None):
        """증명을 검증한다.

        Raises:
            VerificationError: 검증 실패
            GadgetError: 커밋먼트 수가 다를 때
        """
        if len(input_commitments) != len(output_commitments):
            raise GadgetError(
                f"입력 {len(input_commitments)}개와 "
                f"출력 {len(output_commitments)}개의 길이가 다릅니다"
            )
        self._domain_sep(transcript, len(input_commitments))

        verifier = Verifier(transcript)
        input_vars = [verifier.commit(V) for V in input_commitments]
        output_vars = [verifier.commit(V) for V in output_commitments]

        shuffle_gadget(verifier, input_vars, output_vars)
        verifier.verify(self.proof, pc_gens, bp_gens, rng)

    def to_bytes(self):
        return self.proof.to_bytes()

    @classmethod
    def from_bytes(cls, data):
        return cls(R1CSProof.from_bytes(data))
