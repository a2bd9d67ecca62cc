"""
공유 유틸리티
=============

Prover, Verifier, 내적 논증에서 공유하는 벡터/다항식 도구.

**주요 기능**:
  - inner_product: 두 FR 벡터의 내적 ⟨a, b⟩
  - exp_iter: 거듭제곱 벡터 [1, x, x², ..., x^(n-1)]
  - next_power_of_two: 곱셈 게이트 수 패딩 (0 → 1)
  - VecPoly3: 계수가 벡터인 3차 다항식 l(x), r(x)
  - Poly6: t(x) = ⟨l(x), r(x)⟩ 의 1..6차 계수

**t(x) 구조**:
  l(x) = l₁·x + l₂·x² + l₃·x³        (l₀ = 0)
  r(x) = r₀ + r₁·x + r₃·x³           (r₂ = 0)
  따라서 t(x)는 상수항 없이 x..x⁶ 항만 가진다.
"""

from bulletproofs.field import FR


def inner_product(a, b):
    """⟨a, b⟩ = Σ aᵢ·bᵢ

    Raises:
        ValueError: 길이가 다를 때
    """
    if len(a) != len(b):
        raise ValueError(f"내적 길이 불일치: {len(a)} != {len(b)}")
    out = FR(0)
    for a_i, b_i in zip(a, b):
        out = out + a_i * b_i
    return out


def exp_iter(x, n):
    """[1, x, x², ..., x^(n-1)]"""
    powers = []
    current = FR(1)
    for _ in range(n):
        powers.append(current)
        current = current * x
    return powers


def next_power_of_two(n):
    """n 이상의 가장 작은 2의 거듭제곱 (n = 0이면 1)."""
    if n <= 1:
        return 1
    return 1 << (n - 1).bit_length()


class VecPoly3:
    """벡터 계수 3차 다항식: v(x) = v₀ + v₁·x + v₂·x² + v₃·x³"""

    def __init__(self, coeffs):
        self.coeffs = coeffs

    @classmethod
    def zero(cls, n):
        return cls([[FR(0)] * n for _ in range(4)])

    def eval(self, x):
        """각 성분을 Horner 방식으로 평가한다."""
        v0, v1, v2, v3 = self.coeffs
        return [
            v0[i] + x * (v1[i] + x * (v2[i] + x * v3[i]))
            for i in range(len(v0))
        ]

    @staticmethod
    def special_inner_product(lhs, rhs):
        """l₀ = 0, r₂ = 0 을 가정하고 ⟨l(x), r(x)⟩ 를 계산한다."""
        l = lhs.coeffs
        r = rhs.coeffs
        t1 = inner_product(l[1], r[0])
        t2 = inner_product(l[1], r[1]) + inner_product(l[2], r[0])
        t3 = inner_product(l[2], r[1]) + inner_product(l[3], r[0])
        t4 = inner_product(l[1], r[3]) + inner_product(l[3], r[1])
        t5 = inner_product(l[2], r[3])
        t6 = inner_product(l[3], r[3])
        return Poly6(t1, t2, t3, t4, t5, t6)


class Poly6:
    """t(x) = t₁·x + t₂·x² + ... + t₆·x⁶"""

    def __init__(self, t1, t2, t3, t4, t5, t6):
        self.t1 = t1
        self.t2 = t2
        self.t3 = t3
        self.t4 = t4
        self.t5 = t5
        self.t6 = t6

    def eval(self, x):
        return x * (self.t1 + x * (self.t2 + x * (self.t3 + x * (self.t4 + x * (self.t5 + x * self.t6)))))
