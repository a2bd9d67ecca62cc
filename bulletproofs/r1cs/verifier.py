"""
R1CS Verifier
===============

witness 없이 커밋먼트만으로 같은 회로 코드를 실행한 뒤
증명이 모든 제약을 만족하는 witness의 존재를 보이는지 검사한다.

**검증 과정**:
  1. 트랜스크립트 재생: m → A_I1, A_O1, S1 → (2단계 콜백) → A_I2, A_O2, S2
     → y, z → T_1, T_3..T_6 → u, x → t_x, t_x_blinding, e_blinding → w
  2. 제약 평탄화: W_L, W_R, W_O, W_V 그리고 상수 열 w_c
  3. 내적 논증 챌린지 재생 → (u², u⁻², s)
  4. 무작위 r로 묶은 하나의 다중 스칼라 곱셈 ("mega check")

**Mega check**:
  두 가지 검사를 무작위 r로 결합한다:
    - t(x) 검사:  t_x·B + t̃_x·B̃ = x²·(⟨W_V, V⟩ + (w_c + δ)·B) + Σ xⁱ·T_i
    - 내적 검사:  P = ⟨l(x), G'⟩ + ⟨r(x), H'⟩ + t_x·Q 에 대한 IPA
  모든 항을 한쪽으로 넘겨 결과가 항등원인지 확인한다.

  δ(y, z) = ⟨y⁻ⁿ ∘ W_R, W_L⟩

사용 예시:
    >>> verifier = Verifier(Transcript(b"example"))
    >>> x = verifier.commit(V)
    >>> verifier.constrain(x + 2 - 5)
    >>> verifier.verify(proof, PedersenGens(), BulletproofGens(16))
"""

import logging

from bulletproofs.errors import InvalidGeneratorsLength, VerificationError
from bulletproofs.field import FR, multiscalar_mul
from bulletproofs.util import exp_iter, inner_product, next_power_of_two
from bulletproofs.r1cs.constraint_system import (
    Phase,
    RandomizableConstraintSystem, RandomizedConstraintSystem,
    check_constant_constraint, check_variables, collect_metrics, require_phase,
)
from bulletproofs.r1cs.linear_combination import (
    LinearCombination, Variable, VariableKind,
)


logger = logging.getLogger(__name__)


class Verifier(RandomizableConstraintSystem):
    """witness가 없는 제약 시스템.

    속성:
        V: 외부 입력 커밋먼트
        num_vars: 할당된 곱셈 게이트 수
        constraints: 추가 순서대로의 제약
        deferred_constraints: 2단계 콜백 (등록 순서)
        phase: 상태 기계 단계
    """

    def __init__(self, transcript):
        self._transcript = transcript
        self._transcript.r1cs_domain_sep()

        self.V = []
        self.num_vars = 0
        self.constraints = []
        self.deferred_constraints = []
        self.pending_multiplier = None
        self.num_phase_one_constraints = None
        self.phase = Phase.INITIAL

    @property
    def transcript(self):
        return self._transcript

    def commit(self, commitment):
        """Prover가 보낸 커밋먼트 V를 받아 Committed 변수를 할당한다."""
        require_phase(self, Phase.INITIAL)
        i = len(self.V)
        self.V.append(commitment)
        self._transcript.append_point(b"V", commitment)
        return Variable.committed(i)

    def multiply(self, left, right):
        require_phase(self, Phase.INITIAL, Phase.RANDOMIZED)
        left = LinearCombination.from_(left)
        right = LinearCombination.from_(right)
        l_var, r_var, o_var = self._new_gate()

        left -= l_var
        right -= r_var
        self.constrain(left)
        self.constrain(right)
        return l_var, r_var, o_var

    def allocate(self, assignment=None):
        require_phase(self, Phase.INITIAL, Phase.RANDOMIZED)
        if self.pending_multiplier is None:
            i = self.num_vars
            self.num_vars += 1
            self.pending_multiplier = i
            return Variable.multiplier_left(i)

        i = self.pending_multiplier
        self.pending_multiplier = None
        return Variable.multiplier_right(i)

    def allocate_multiplier(self, input_assignments=None):
        require_phase(self, Phase.INITIAL, Phase.RANDOMIZED)
        return self._new_gate()

    def _new_gate(self):
        i = self.num_vars
        self.num_vars += 1
        return (
            Variable.multiplier_left(i),
            Variable.multiplier_right(i),
            Variable.multiplier_output(i),
        )

    def metrics(self):
        return collect_metrics(self, self.num_vars)

    def constrain(self, lc):
        require_phase(self, Phase.INITIAL, Phase.RANDOMIZED)
        lc = LinearCombination.from_(lc)
        check_variables(lc, len(self.V), self.num_vars)
        check_constant_constraint(lc)
        self.constraints.append(lc)

    def specify_randomized_constraints(self, callback):
        require_phase(self, Phase.INITIAL)
        self.deferred_constraints.append(callback)

    # ─────────────────────────────────────────────────────────────
    # 검증
    # ─────────────────────────────────────────────────────────────

    def flattened_constraints(self, z):
        """Prover.flattened_constraints와 같은 평탄화에 상수 열 w_c를 더한다.

        Returns:
            (wL, wR, wO, wV, wc)
        """
        n = self.num_vars
        m = len(self.V)
        wL = [FR(0)] * n
        wR = [FR(0)] * n
        wO = [FR(0)] * n
        wV = [FR(0)] * m
        wc = FR(0)

        exp_z = z
        for lc in self.constraints:
            for var, coeff in lc.terms:
                kind = var.kind
                if kind == VariableKind.MULTIPLIER_LEFT:
                    wL[var.index] = wL[var.index] + exp_z * coeff
                elif kind == VariableKind.MULTIPLIER_RIGHT:
                    wR[var.index] = wR[var.index] + exp_z * coeff
                elif kind == VariableKind.MULTIPLIER_OUTPUT:
                    wO[var.index] = wO[var.index] + exp_z * coeff
                elif kind == VariableKind.COMMITTED:
                    wV[var.index] = wV[var.index] - exp_z * coeff
                else:
                    wc = wc - exp_z * coeff
            exp_z = exp_z * z

        return wL, wR, wO, wV, wc

    def _create_randomized_constraints(self):
        self.pending_multiplier = None
        self.num_phase_one_constraints = len(self.constraints)

        if not self.deferred_constraints:
            self._transcript.r1cs_1phase_domain_sep()
            return

        self._transcript.r1cs_2phase_domain_sep()
        callbacks, self.deferred_constraints = self.deferred_constraints, []
        self.phase = Phase.RANDOMIZED
        wrapped = RandomizingVerifier(self)
        for callback in callbacks:
            callback(wrapped)

    def verify(self, proof, pc_gens, bp_gens, rng=None):
        """증명을 검증한다. 이후 이 Verifier는 CLOSED가 된다.

        Args:
            proof: R1CSProof
            pc_gens: PedersenGens (Prover와 같은 것)
            bp_gens: BulletproofGens (패딩된 게이트 수 이상의 용량)
            rng: mega check 가중치용 외부 난수 생성기 (기본값 SystemRandom)

        Returns:
            None (검증 성공)

        Raises:
            VerificationError: 검증 실패
            InvalidGeneratorsLength: 생성자 부족
            PhaseError: INITIAL이 아닌 상태에서 호출
        """
        require_phase(self, Phase.INITIAL)
        try:
            self._verify(proof, pc_gens, bp_gens, rng)
        finally:
            self.phase = Phase.CLOSED

    def _verify(self, proof, pc_gens, bp_gens, rng):
        transcript = self._transcript
        transcript.append_u64(b"m", len(self.V))

        n1 = self.num_vars

        transcript.validate_and_append_point(b"A_I1", proof.A_I1)
        transcript.validate_and_append_point(b"A_O1", proof.A_O1)
        transcript.validate_and_append_point(b"S1", proof.S1)

        # ── 2단계: 무작위 제약 ──
        self._create_randomized_constraints()
        self.phase = Phase.FINALIZED

        n = self.num_vars
        n2 = n - n1
        padded_n = next_power_of_two(n)
        pad = padded_n - n

        if bp_gens.gens_capacity < padded_n:
            raise InvalidGeneratorsLength(padded_n, bp_gens.gens_capacity)

        # 2단계 게이트가 없으면 A_I2, A_O2, S2는 항등원이어도 된다
        transcript.append_point(b"A_I2", proof.A_I2)
        transcript.append_point(b"A_O2", proof.A_O2)
        transcript.append_point(b"S2", proof.S2)
        logger.debug("replaying %d multipliers (%d phase two, padded to %d)",
                     n, n2, padded_n)

        y = transcript.challenge_scalar(b"y")
        z = transcript.challenge_scalar(b"z")

        transcript.validate_and_append_point(b"T_1", proof.T_1)
        transcript.validate_and_append_point(b"T_3", proof.T_3)
        transcript.validate_and_append_point(b"T_4", proof.T_4)
        transcript.validate_and_append_point(b"T_5", proof.T_5)
        transcript.validate_and_append_point(b"T_6", proof.T_6)

        u = transcript.challenge_scalar(b"u")
        x = transcript.challenge_scalar(b"x")

        transcript.append_scalar(b"t_x", proof.t_x)
        transcript.append_scalar(b"t_x_blinding", proof.t_x_blinding)
        transcript.append_scalar(b"e_blinding", proof.e_blinding)

        w = transcript.challenge_scalar(b"w")

        wL, wR, wO, wV, wc = self.flattened_constraints(z)

        # mega check 결합용 무작위 가중치
        r = transcript.build_rng().finalize(rng).random_scalar()

        xx = x * x
        rxx = r * xx
        xxx = x * xx

        # t(x) 검사의 T 점 계수: r·(x·T_1 + x³·T_3 + ...)
        T_scalars = [r * x, rxx * x, rxx * xx, rxx * xxx, rxx * xx * xx]
        T_points = [proof.T_1, proof.T_3, proof.T_4, proof.T_5, proof.T_6]

        y_inv = FR(1) / y
        y_inv_vec = exp_iter(y_inv, padded_n)
        yneg_wR = [wR_i * y_inv_i for wR_i, y_inv_i in zip(wR, y_inv_vec)]
        yneg_wR += [FR(0)] * pad

        delta = inner_product(yneg_wR[:n], wL)

        u_for_g = [FR(1)] * n1 + [u] * (n2 + pad)
        u_for_h = u_for_g

        ipp = proof.ipp_proof
        u_sq, u_inv_sq, s = ipp.verification_scalars(padded_n, transcript)

        a = ipp.a
        b = ipp.b

        wL_padded = wL + [FR(0)] * pad
        wO_padded = wO + [FR(0)] * pad
        s_inv = list(reversed(s))

        g_scalars = [
            u_for_g[i] * (x * yneg_wR[i] - a * s[i])
            for i in range(padded_n)
        ]
        h_scalars = [
            u_for_h[i] * (y_inv_vec[i] * (x * wL_padded[i] + wO_padded[i] - b * s_inv[i]) - FR(1))
            for i in range(padded_n)
        ]

        scalars = (
            [
                x, xx, xxx,
                u * x, u * xx, u * xxx,
                w * (proof.t_x - a * b) + r * (xx * (wc + delta) - proof.t_x),
                -proof.e_blinding - r * proof.t_x_blinding,
            ]
            + [wV_i * rxx for wV_i in wV]
            + T_scalars
            + g_scalars
            + h_scalars
            + u_sq
            + u_inv_sq
        )
        points = (
            [
                proof.A_I1, proof.A_O1, proof.S1,
                proof.A_I2, proof.A_O2, proof.S2,
                pc_gens.B, pc_gens.B_blinding,
            ]
            + self.V
            + T_points
            + bp_gens.G(padded_n)
            + bp_gens.H(padded_n)
            + ipp.L_vec
            + ipp.R_vec
        )

        mega_check = multiscalar_mul(scalars, points)
        if mega_check is not None:
            logger.debug("mega check failed")
            raise VerificationError()
        logger.debug("proof verified: %d constraints", len(self.constraints))


class RandomizingVerifier(RandomizedConstraintSystem):
    """2단계 콜백에 전달되는 Verifier 래퍼."""

    def __init__(self, verifier):
        self.verifier = verifier

    @property
    def transcript(self):
        return self.verifier.transcript

    def multiply(self, left, right):
        return self.verifier.multiply(left, right)

    def allocate(self, assignment=None):
        return self.verifier.allocate(assignment)

    def allocate_multiplier(self, input_assignments=None):
        return self.verifier.allocate_multiplier(input_assignments)

    def metrics(self):
        return self.verifier.metrics()

    def constrain(self, lc):
        self.verifier.constrain(lc)

    def challenge_scalar(self, label):
        require_phase(self.verifier, Phase.RANDOMIZED)
        return self.verifier.transcript.challenge_scalar(label)

    def specify_randomized_constraints(self, callback):
        # 2단계 안에서는 새 콜백을 예약할 수 없다 (PhaseError)
        self.verifier.specify_randomized_constraints(callback)
