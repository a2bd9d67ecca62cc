"""
선형결합 대수 테스트
=====================

Variable 전순서, 연산자 오버로딩, simplify() 병합 규칙을 테스트한다.

테스트 범위:
  - 변수 생성/동등성/해시/정렬
  - 스칼라(int, FR)와 섞인 산술 (양방향)
  - Variable 불변성
  - 병합 법칙: 그룹화, 0 계수 유지(기본)와 제거(prune)
  - 부정과 스칼라 곱의 분배
  - 삽입 순서와 무관한 정렬 결과
"""

import pytest

from bulletproofs.field import FR
from bulletproofs.r1cs.linear_combination import (
    LinearCombination, Variable, VariableKind,
)


A = Variable.committed(0)
B = Variable.multiplier_left(1)
C = Variable.multiplier_output(0)
ONE = Variable.one()


def _terms(lc):
    return [(var, int(coeff)) for var, coeff in lc.get_terms()]


# =====================================================================
# Variable
# =====================================================================

class TestVariable:
    def test_total_order_by_kind(self):
        vs = [
            Variable.one(),
            Variable.multiplier_output(0),
            Variable.multiplier_right(0),
            Variable.multiplier_left(0),
            Variable.committed(0),
        ]
        kinds = [v.kind for v in sorted(vs)]
        assert kinds == [
            VariableKind.COMMITTED,
            VariableKind.MULTIPLIER_LEFT,
            VariableKind.MULTIPLIER_RIGHT,
            VariableKind.MULTIPLIER_OUTPUT,
            VariableKind.ONE,
        ]

    def test_order_within_kind_by_index(self):
        assert Variable.committed(1) < Variable.committed(2)
        assert Variable.committed(99) < Variable.multiplier_left(0)

    def test_equality_and_hash(self):
        assert Variable.committed(3) == Variable.committed(3)
        assert Variable.committed(3) != Variable.multiplier_left(3)
        assert len({Variable.committed(3), Variable.committed(3)}) == 1

    def test_one_is_single_instance(self):
        assert Variable(VariableKind.ONE, 5) == Variable.one()

    def test_repr(self):
        assert repr(Variable.multiplier_right(2)) == "MultiplierRight(2)"
        assert repr(Variable.one()) == "One()"

    def test_immutable(self):
        var = Variable.committed(0)
        with pytest.raises(AttributeError):
            var.index = 1
        with pytest.raises(AttributeError):
            var.kind = VariableKind.MULTIPLIER_LEFT
        with pytest.raises(AttributeError):
            del var.index
        assert var == Variable.committed(0)

    def test_hash_stable_as_simplify_key(self):
        var = Variable.committed(0)
        lc = var + var * 2
        with pytest.raises(AttributeError):
            var.index = 5
        assert _terms(lc.simplify()) == [(Variable.committed(0), 3)]


# =====================================================================
# 산술
# =====================================================================

class TestArithmetic:
    def test_add_concatenates(self):
        assert _terms(A + B) == [(A, 1), (B, 1)]

    def test_no_eager_merge(self):
        assert _terms(A + A) == [(A, 1), (A, 1)]

    def test_scalar_lifts_to_one(self):
        assert _terms(A + 5) == [(A, 1), (ONE, 5)]
        assert _terms(5 + A) == [(ONE, 5), (A, 1)]

    def test_reverse_subtraction(self):
        assert _terms(5 - A) == [(ONE, 5), (A, -1 % FR.field_modulus)]

    def test_scalar_multiplication_both_sides(self):
        assert _terms(A * 3) == [(A, 3)]
        assert _terms(3 * A) == [(A, 3)]
        assert _terms(A * FR(3)) == [(A, 3)]

    def test_field_scalar_either_side(self):
        p = FR.field_modulus
        assert _terms(A + FR(2)) == [(A, 1), (ONE, 2)]
        assert _terms(FR(2) + A) == [(ONE, 2), (A, 1)]
        assert _terms(FR(5) - A) == [(ONE, 5), (A, p - 1)]
        assert _terms(FR(3) * A) == [(A, 3)]

    def test_field_scalar_times_combination(self):
        c = FR(7)
        assert _terms(c * (A + B)) == [(A, 7), (B, 7)]
        assert _terms(c * (A + 1)) == [(A, 7), (ONE, 7)]
        p = FR.field_modulus
        assert _terms(c - (A + B)) == [(ONE, 7), (A, p - 1), (B, p - 1)]
        assert _terms(c + (A + B)) == [(ONE, 7), (A, 1), (B, 1)]

    def test_field_arithmetic_unchanged(self):
        assert FR(2) + FR(3) == FR(5)
        assert FR(2) - 3 == FR(-1)
        assert FR(4) * FR(5) == FR(20)
        assert isinstance(FR(2) * 3, FR)

    def test_field_scalar_with_unsupported_operand(self):
        with pytest.raises(TypeError):
            FR(2) + "x"

    def test_variable_times_variable_rejected(self):
        with pytest.raises(TypeError):
            A * B
        with pytest.raises(TypeError):
            (A + B) * (A + B)

    def test_unsupported_operand(self):
        with pytest.raises(TypeError):
            A + "x"

    def test_iadd_appends_in_place(self):
        lc = LinearCombination.from_(A)
        same = lc
        lc += B
        lc -= 2
        assert lc is same
        assert _terms(lc) == [(A, 1), (B, 1), (ONE, -2 % FR.field_modulus)]

    def test_binary_ops_do_not_mutate(self):
        lc = LinearCombination.from_(A)
        _ = lc + B
        _ = lc - B
        assert _terms(lc) == [(A, 1)]

    def test_from_copies(self):
        lc = A + B
        copy = LinearCombination.from_(lc)
        copy += C
        assert len(lc) == 2

    def test_empty_is_zero(self):
        lc = LinearCombination()
        assert len(lc) == 0
        assert lc.is_constant()
        assert lc.constant_value() == FR(0)

    def test_constant_detection(self):
        assert LinearCombination.from_(3).is_constant()
        assert not (A + 3).is_constant()
        assert (ONE * 2 + 3).constant_value() == FR(5)


# =====================================================================
# simplify
# =====================================================================

class TestSimplify:
    def test_groups_and_sums(self):
        lc = (A + B * 2 + A * 3).simplify()
        assert _terms(lc) == [(A, 4), (B, 2)]

    def test_self_subtraction_keeps_zero_coefficients(self):
        lc = (A + B) - (A + B)
        assert _terms(lc.simplify()) == [(A, 0), (B, 0)]

    def test_prune_drops_zero_coefficients(self):
        lc = (A + B + C) - (A + B)
        assert _terms(lc.simplify(prune=True)) == [(C, 1)]

    def test_negation_distributes(self):
        lc = -(A + B * 3 - 2)
        p = FR.field_modulus
        assert _terms(lc) == [(A, p - 1), (B, p - 3), (ONE, 2)]

    def test_scalar_multiplication_distributes(self):
        lhs = ((A + B) * 5).simplify()
        rhs = (A * 5 + B * 5).simplify()
        assert lhs == rhs

    def test_insertion_order_irrelevant(self):
        first = (C + 7 + B * 2 + A).simplify()
        second = (A + 7 + B + C + B).simplify()
        assert first == second
        assert [var for var, _ in first] == [A, B, C, ONE]

    def test_consumes_receiver(self):
        lc = A + B
        out = lc.simplify()
        assert len(lc) == 0
        assert len(out) == 2

    def test_constants_merge(self):
        assert _terms((A + 2 + 3).simplify()) == [(A, 1), (ONE, 5)]

    def test_empty(self):
        assert len(LinearCombination().simplify()) == 0
