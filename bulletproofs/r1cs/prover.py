"""
R1CS Prover
=============

witness를 보유한 제약 시스템 구현. 회로 코드를 실행해 변수와 제약을 모은 뒤
prove()로 전체 R1CS 인스턴스를 하나의 내적 관계로 환원하여 증명한다.

**증명 흐름**:

  ┌─────────────────────────────────────────────────────────┐
  │  1단계: V 커밋(commit 호출 시) → m                       │
  │  자체 검사: 1단계 제약이 witness 하에서 0인가?            │
  │  Prover → Verifier: A_I1, A_O1, S1                      │
  ├─────────────────────────────────────────────────────────┤
  │  2단계: 예약된 콜백 실행 (challenge_scalar 사용 가능)     │
  │  자체 검사: 2단계 제약                                   │
  │  Prover → Verifier: A_I2, A_O2, S2                      │
  ├─────────────────────────────────────────────────────────┤
  │  Verifier → Prover: y, z  (Fiat-Shamir)                 │
  │  제약 평탄화: W_L, W_R, W_O, W_V  (행 가중치 z^q)         │
  │  Prover → Verifier: T_1, T_3, T_4, T_5, T_6             │
  ├─────────────────────────────────────────────────────────┤
  │  Verifier → Prover: u, x                                │
  │  Prover → Verifier: t_x, t_x_blinding, e_blinding       │
  ├─────────────────────────────────────────────────────────┤
  │  Verifier → Prover: w                                   │
  │  내적 논증: ⟨l(x), r(x)⟩ = t_x  (Q = w·B)                │
  └─────────────────────────────────────────────────────────┘

**벡터 다항식** (n: 게이트 수, yⁿ = [1, y, ..., y^(n-1)]):
  l(x) = (a_L + y⁻ⁿ∘w_R)·x + a_O·x² + s_L·x³
  r(x) = (w_O − yⁿ) + (yⁿ∘a_R + w_L)·x + yⁿ∘s_R·x³
  t(x) = ⟨l(x), r(x)⟩.  t₂는 V와 공개 가중치로 결정되므로 커밋하지 않는다.

**자체 검사**:
  증명 바이트를 만들기 전에 모든 제약을 witness로 평가한다.
  하나라도 0이 아니면 UnsatisfiedConstraint로 즉시 중단한다.
  (회로 작성 버그가 검증되지 않는 증명으로 인코딩되지 않도록)

사용 예시:
    >>> prover = Prover(PedersenGens(), Transcript(b"example"))
    >>> V, x = prover.commit(FR(3), random_scalar())
    >>> prover.constrain(x + 2 - 5)
    >>> proof = prover.prove(BulletproofGens(16))
"""

import logging

from bulletproofs.errors import (
    InvalidGeneratorsLength, MissingAssignment, UnsatisfiedConstraint,
)
from bulletproofs.field import FR, to_scalar, ec_mul, multiscalar_mul, scalar_to_bytes
from bulletproofs.inner_product_proof import InnerProductProof
from bulletproofs.util import Poly6, VecPoly3, exp_iter, next_power_of_two
from bulletproofs.r1cs.constraint_system import (
    Phase,
    RandomizableConstraintSystem, RandomizedConstraintSystem,
    check_constant_constraint, check_variables, collect_metrics, require_phase,
)
from bulletproofs.r1cs.linear_combination import (
    LinearCombination, Variable, VariableKind,
)
from bulletproofs.r1cs.proof import R1CSProof


logger = logging.getLogger(__name__)


class Prover(RandomizableConstraintSystem):
    """witness를 보유하는 제약 시스템.

    속성 (witness, Prover 전용):
        a_L, a_R, a_O: 곱셈 게이트의 왼쪽/오른쪽/출력 값
        v, v_blinding: 커밋된 외부 입력 값과 블라인딩

    속성 (공개 구조):
        V: 외부 입력 커밋먼트
        constraints: 추가 순서대로의 제약 (평탄화 행 순서)
        deferred_constraints: 2단계 콜백 (등록 순서)
        phase: 상태 기계 단계
    """

    def __init__(self, pc_gens, transcript):
        """Prover를 만든다.

        Args:
            pc_gens: PedersenGens
            transcript: 이 증명 세션만 사용하는 Transcript
        """
        self.pc_gens = pc_gens
        self._transcript = transcript
        self._transcript.r1cs_domain_sep()

        self.V = []
        self.v = []
        self.v_blinding = []
        self.a_L = []
        self.a_R = []
        self.a_O = []
        self.constraints = []
        self.deferred_constraints = []
        self.pending_multiplier = None
        self.num_phase_one_constraints = None
        self.phase = Phase.INITIAL

    @property
    def transcript(self):
        return self._transcript

    # ─────────────────────────────────────────────────────────────
    # 제약 시스템 연산
    # ─────────────────────────────────────────────────────────────

    def commit(self, v, v_blinding):
        """외부 입력 v를 커밋하고 Committed 변수를 할당한다.

        Args:
            v: witness 값
            v_blinding: 블라인딩 인자

        Returns:
            (V, Variable): 커밋먼트 점과 변수
        """
        require_phase(self, Phase.INITIAL)
        v = to_scalar(v)
        v_blinding = to_scalar(v_blinding)
        i = len(self.V)
        V = self.pc_gens.commit(v, v_blinding)
        self.V.append(V)
        self.v.append(v)
        self.v_blinding.append(v_blinding)
        self._transcript.append_point(b"V", V)
        return V, Variable.committed(i)

    def multiply(self, left, right):
        require_phase(self, Phase.INITIAL, Phase.RANDOMIZED)
        left = LinearCombination.from_(left)
        right = LinearCombination.from_(right)
        l = self.eval(left)
        r = self.eval(right)
        o = l * r

        i = len(self.a_L)
        l_var = Variable.multiplier_left(i)
        r_var = Variable.multiplier_right(i)
        o_var = Variable.multiplier_output(i)
        self.a_L.append(l)
        self.a_R.append(r)
        self.a_O.append(o)

        left -= l_var
        right -= r_var
        self.constrain(left)
        self.constrain(right)
        return l_var, r_var, o_var

    def allocate(self, assignment=None):
        require_phase(self, Phase.INITIAL, Phase.RANDOMIZED)
        if assignment is None:
            raise MissingAssignment()
        scalar = to_scalar(assignment)

        if self.pending_multiplier is None:
            i = len(self.a_L)
            self.pending_multiplier = i
            self.a_L.append(scalar)
            self.a_R.append(FR(0))
            self.a_O.append(FR(0))
            return Variable.multiplier_left(i)

        i = self.pending_multiplier
        self.pending_multiplier = None
        self.a_R[i] = scalar
        self.a_O[i] = self.a_L[i] * scalar
        return Variable.multiplier_right(i)

    def allocate_multiplier(self, input_assignments=None):
        require_phase(self, Phase.INITIAL, Phase.RANDOMIZED)
        if input_assignments is None:
            raise MissingAssignment()
        left, right = input_assignments
        left = to_scalar(left)
        right = to_scalar(right)

        i = len(self.a_L)
        self.a_L.append(left)
        self.a_R.append(right)
        self.a_O.append(left * right)
        return (
            Variable.multiplier_left(i),
            Variable.multiplier_right(i),
            Variable.multiplier_output(i),
        )

    def metrics(self):
        return collect_metrics(self, len(self.a_L))

    def constrain(self, lc):
        require_phase(self, Phase.INITIAL, Phase.RANDOMIZED)
        lc = LinearCombination.from_(lc)
        check_variables(lc, len(self.V), len(self.a_L))
        check_constant_constraint(lc)
        self.constraints.append(lc)

    def specify_randomized_constraints(self, callback):
        require_phase(self, Phase.INITIAL)
        self.deferred_constraints.append(callback)

    def eval(self, lc):
        """현재 witness로 선형결합의 값을 계산한다.

        Raises:
            UnknownVariable: 이 Prover가 할당하지 않은 변수가 있을 때
        """
        check_variables(lc, len(self.v), len(self.a_L))
        total = FR(0)
        for var, coeff in lc.terms:
            kind = var.kind
            if kind == VariableKind.MULTIPLIER_LEFT:
                value = self.a_L[var.index]
            elif kind == VariableKind.MULTIPLIER_RIGHT:
                value = self.a_R[var.index]
            elif kind == VariableKind.MULTIPLIER_OUTPUT:
                value = self.a_O[var.index]
            elif kind == VariableKind.COMMITTED:
                value = self.v[var.index]
            else:
                value = FR(1)
            total = total + coeff * value
        return total

    # ─────────────────────────────────────────────────────────────
    # 증명 생성
    # ─────────────────────────────────────────────────────────────

    def _check_constraints(self, start=0):
        for q in range(start, len(self.constraints)):
            if int(self.eval(self.constraints[q])) != 0:
                raise UnsatisfiedConstraint(q)

    def flattened_constraints(self, z):
        """제약을 z의 거듭제곱으로 가중합하여 배선별 가중치 벡터로 평탄화한다.

        q번째 제약의 가중치는 z^(q+1). 열은 배선 인덱스이다.

        Returns:
            (wL, wR, wO, wV)
        """
        n = len(self.a_L)
        m = len(self.V)
        wL = [FR(0)] * n
        wR = [FR(0)] * n
        wO = [FR(0)] * n
        wV = [FR(0)] * m

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
                # One: 상수항은 Prover가 다룰 필요가 없다
            exp_z = exp_z * z

        return wL, wR, wO, wV

    def _create_randomized_constraints(self):
        # 1단계 커밋먼트에 이미 포함되었으므로 대기 중인 게이트를 비운다
        self.pending_multiplier = None
        self.num_phase_one_constraints = len(self.constraints)

        if not self.deferred_constraints:
            self._transcript.r1cs_1phase_domain_sep()
            return

        self._transcript.r1cs_2phase_domain_sep()
        callbacks, self.deferred_constraints = self.deferred_constraints, []
        self.phase = Phase.RANDOMIZED
        wrapped = RandomizingProver(self)
        for callback in callbacks:
            callback(wrapped)

    def prove(self, bp_gens, rng=None):
        """증명을 생성한다. 이후 이 Prover는 CLOSED가 된다.

        Args:
            bp_gens: BulletproofGens (패딩된 게이트 수 이상의 용량)
            rng: 외부 난수 생성기 (random.Random 호환, 기본값 SystemRandom).
                 같은 seed와 같은 witness면 같은 증명 바이트가 나온다.

        Returns:
            R1CSProof

        Raises:
            UnsatisfiedConstraint: 자체 검사 실패
            InvalidGeneratorsLength: 생성자 부족
            PhaseError: INITIAL이 아닌 상태에서 호출
        """
        require_phase(self, Phase.INITIAL)
        try:
            return self._prove(bp_gens, rng)
        finally:
            self.phase = Phase.CLOSED

    def _prove(self, bp_gens, rng):
        pc_gens = self.pc_gens
        transcript = self._transcript

        # 커밋된 변수 수를 접미사로 기록
        transcript.append_u64(b"m", len(self.V))

        # 트랜스크립트 + witness + 외부 난수로 블라인딩 RNG 구성
        builder = transcript.build_rng()
        for v_b in self.v_blinding:
            builder.rekey_with_witness_bytes(b"v_blinding", scalar_to_bytes(v_b))
        blinding_rng = builder.finalize(rng)

        self._check_constraints()

        # ── 1단계 커밋먼트 ──
        n1 = len(self.a_L)
        if bp_gens.gens_capacity < n1:
            raise InvalidGeneratorsLength(n1, bp_gens.gens_capacity)
        G = bp_gens.G(n1)
        H = bp_gens.H(n1)

        i_blinding1 = blinding_rng.random_scalar()
        o_blinding1 = blinding_rng.random_scalar()
        s_blinding1 = blinding_rng.random_scalar()
        s_L1 = [blinding_rng.random_scalar() for _ in range(n1)]
        s_R1 = [blinding_rng.random_scalar() for _ in range(n1)]

        A_I1 = multiscalar_mul(
            [i_blinding1] + self.a_L + self.a_R,
            [pc_gens.B_blinding] + G + H,
        )
        A_O1 = multiscalar_mul([o_blinding1] + self.a_O, [pc_gens.B_blinding] + G)
        S1 = multiscalar_mul([s_blinding1] + s_L1 + s_R1, [pc_gens.B_blinding] + G + H)

        transcript.append_point(b"A_I1", A_I1)
        transcript.append_point(b"A_O1", A_O1)
        transcript.append_point(b"S1", S1)
        logger.debug("phase one committed: %d multipliers, %d constraints",
                     n1, len(self.constraints))

        # ── 2단계: 무작위 제약 ──
        num_phase_one = len(self.constraints)
        self._create_randomized_constraints()
        self.phase = Phase.FINALIZED
        self._check_constraints(num_phase_one)

        n = len(self.a_L)
        n2 = n - n1
        padded_n = next_power_of_two(n)
        pad = padded_n - n
        if bp_gens.gens_capacity < padded_n:
            raise InvalidGeneratorsLength(padded_n, bp_gens.gens_capacity)
        G = bp_gens.G(padded_n)
        H = bp_gens.H(padded_n)

        if n2 > 0:
            i_blinding2 = blinding_rng.random_scalar()
            o_blinding2 = blinding_rng.random_scalar()
            s_blinding2 = blinding_rng.random_scalar()
        else:
            i_blinding2 = o_blinding2 = s_blinding2 = FR(0)
        s_L2 = [blinding_rng.random_scalar() for _ in range(n2)]
        s_R2 = [blinding_rng.random_scalar() for _ in range(n2)]

        if n2 > 0:
            A_I2 = multiscalar_mul(
                [i_blinding2] + self.a_L[n1:] + self.a_R[n1:],
                [pc_gens.B_blinding] + G[n1:n] + H[n1:n],
            )
            A_O2 = multiscalar_mul(
                [o_blinding2] + self.a_O[n1:],
                [pc_gens.B_blinding] + G[n1:n],
            )
            S2 = multiscalar_mul(
                [s_blinding2] + s_L2 + s_R2,
                [pc_gens.B_blinding] + G[n1:n] + H[n1:n],
            )
        else:
            A_I2 = A_O2 = S2 = None

        transcript.append_point(b"A_I2", A_I2)
        transcript.append_point(b"A_O2", A_O2)
        transcript.append_point(b"S2", S2)
        logger.debug("phase two committed: %d multipliers (padded to %d), %d constraints",
                     n2, padded_n, len(self.constraints))

        # ── l(x), r(x), t(x) ──
        y = transcript.challenge_scalar(b"y")
        z = transcript.challenge_scalar(b"z")

        wL, wR, wO, wV = self.flattened_constraints(z)

        l_poly = VecPoly3.zero(n)
        r_poly = VecPoly3.zero(n)

        exp_y = exp_iter(y, padded_n)
        y_inv = FR(1) / y
        exp_y_inv = exp_iter(y_inv, padded_n)

        s_L = s_L1 + s_L2
        s_R = s_R1 + s_R2
        l0, l1, l2, l3 = l_poly.coeffs
        r0, r1, r2, r3 = r_poly.coeffs
        for i in range(n):
            l1[i] = self.a_L[i] + exp_y_inv[i] * wR[i]
            l2[i] = self.a_O[i]
            l3[i] = s_L[i]
            r0[i] = wO[i] - exp_y[i]
            r1[i] = exp_y[i] * self.a_R[i] + wL[i]
            r3[i] = exp_y[i] * s_R[i]

        t_poly = VecPoly3.special_inner_product(l_poly, r_poly)

        t_1_blinding = blinding_rng.random_scalar()
        t_3_blinding = blinding_rng.random_scalar()
        t_4_blinding = blinding_rng.random_scalar()
        t_5_blinding = blinding_rng.random_scalar()
        t_6_blinding = blinding_rng.random_scalar()

        T_1 = pc_gens.commit(t_poly.t1, t_1_blinding)
        T_3 = pc_gens.commit(t_poly.t3, t_3_blinding)
        T_4 = pc_gens.commit(t_poly.t4, t_4_blinding)
        T_5 = pc_gens.commit(t_poly.t5, t_5_blinding)
        T_6 = pc_gens.commit(t_poly.t6, t_6_blinding)

        transcript.append_point(b"T_1", T_1)
        transcript.append_point(b"T_3", T_3)
        transcript.append_point(b"T_4", T_4)
        transcript.append_point(b"T_5", T_5)
        transcript.append_point(b"T_6", T_6)

        u = transcript.challenge_scalar(b"u")
        x = transcript.challenge_scalar(b"x")

        # t_2_blinding = ⟨W_V, v_blinding⟩
        t_2_blinding = FR(0)
        for w_i, v_b in zip(wV, self.v_blinding):
            t_2_blinding = t_2_blinding + w_i * v_b

        t_blinding_poly = Poly6(
            t_1_blinding, t_2_blinding, t_3_blinding,
            t_4_blinding, t_5_blinding, t_6_blinding,
        )

        t_x = t_poly.eval(x)
        t_x_blinding = t_blinding_poly.eval(x)

        l_vec = l_poly.eval(x) + [FR(0)] * pad
        r_vec = r_poly.eval(x) + [FR(0)] * pad

        # 패딩 게이트는 a_L = a_R = a_O = 0 이므로 r(x) = -yⁱ 만 남는다
        for i in range(n, padded_n):
            r_vec[i] = -exp_y[i]

        i_blinding = i_blinding1 + u * i_blinding2
        o_blinding = o_blinding1 + u * o_blinding2
        s_blinding = s_blinding1 + u * s_blinding2

        e_blinding = x * (i_blinding + x * (o_blinding + x * s_blinding))

        transcript.append_scalar(b"t_x", t_x)
        transcript.append_scalar(b"t_x_blinding", t_x_blinding)
        transcript.append_scalar(b"e_blinding", e_blinding)

        # ── 내적 논증 ──
        w = transcript.challenge_scalar(b"w")
        Q = ec_mul(pc_gens.B, w)

        G_factors = [FR(1)] * n1 + [u] * (n2 + pad)
        H_factors = [y_i * g_i for y_i, g_i in zip(exp_y_inv, G_factors)]

        ipp_proof = InnerProductProof.create(
            transcript, Q, G_factors, H_factors, G, H, l_vec, r_vec,
        )
        logger.debug("proof created: %d inner-product rounds", len(ipp_proof.L_vec))

        return R1CSProof(
            A_I1, A_O1, S1, A_I2, A_O2, S2,
            T_1, T_3, T_4, T_5, T_6,
            t_x, t_x_blinding, e_blinding, ipp_proof,
        )


class RandomizingProver(RandomizedConstraintSystem):
    """2단계 콜백에 전달되는 Prover 래퍼. challenge_scalar를 추가로 제공한다."""

    def __init__(self, prover):
        self.prover = prover

    @property
    def transcript(self):
        return self.prover.transcript

    def multiply(self, left, right):
        return self.prover.multiply(left, right)

    def allocate(self, assignment=None):
        return self.prover.allocate(assignment)

    def allocate_multiplier(self, input_assignments=None):
        return self.prover.allocate_multiplier(input_assignments)

    def metrics(self):
        return self.prover.metrics()

    def constrain(self, lc):
        self.prover.constrain(lc)

    def eval(self, lc):
        return self.prover.eval(lc)

    def specify_randomized_constraints(self, callback):
        # 2단계 안에서는 새 콜백을 예약할 수 없다 (PhaseError)
        self.prover.specify_randomized_constraints(callback)

    def challenge_scalar(self, label):
        require_phase(self.prover, Phase.RANDOMIZED)
        return self.prover.transcript.challenge_scalar(label)
