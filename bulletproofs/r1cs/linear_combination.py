"""
선형결합(Linear Combination) 대수
==================================

회로 작성 코드가 변수와 스칼라로 자연스러운 산술식을 쓰면
그 결과가 선형결합 LinearCombination이 된다.

**변수(Variable)**:
  | 종류               | 의미                         |
  |--------------------|------------------------------|
  | Committed(i)       | i번째 외부 입력 (커밋먼트 V_i) |
  | MultiplierLeft(i)  | i번째 곱셈 게이트의 왼쪽 입력  |
  | MultiplierRight(i) | i번째 곱셈 게이트의 오른쪽 입력 |
  | MultiplierOutput(i)| i번째 곱셈 게이트의 출력       |
  | One()              | 상수 1                        |

  전순서: Committed < MultiplierLeft < MultiplierRight < MultiplierOutput < One,
  같은 종류끼리는 인덱스 오름차순. simplify()의 정렬 키로 쓰인다.

**선형결합**:
  (Variable, FR) 항의 순서 있는 리스트. 덧셈은 항 리스트를 이어 붙일 뿐
  같은 변수를 즉시 합치지 않는다. 합치기는 simplify()에서만 한다.

    x + y * 3 - 5   →   [(x, 1), (y, 3), (One, -5)]

  스칼라(int, FR)는 어느 쪽에 와도 된다:  3 * x, FR(5) - x, c * (x + y)

사용 예시:
    >>> a = Variable.committed(0)
    >>> b = Variable.multiplier_output(0)
    >>> lc = a + b * 2 - 7
    >>> lc.simplify().get_terms()
"""

from enum import IntEnum
from functools import total_ordering

from bulletproofs.field import FR, to_scalar


class VariableKind(IntEnum):
    """변수 종류. 값의 순서가 곧 Variable의 전순서이다."""
    COMMITTED = 0
    MULTIPLIER_LEFT = 1
    MULTIPLIER_RIGHT = 2
    MULTIPLIER_OUTPUT = 3
    ONE = 4


_KIND_NAMES = {
    VariableKind.COMMITTED: "Committed",
    VariableKind.MULTIPLIER_LEFT: "MultiplierLeft",
    VariableKind.MULTIPLIER_RIGHT: "MultiplierRight",
    VariableKind.MULTIPLIER_OUTPUT: "MultiplierOutput",
    VariableKind.ONE: "One",
}


@total_ordering
class Variable:
    """제약 시스템 안의 변수에 대한 참조.

    불변이며 해시 가능하다. 정렬 키는 (kind, index).
    """

    __slots__ = ("kind", "index")

    def __init__(self, kind, index=0):
        kind = VariableKind(kind)
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "index", 0 if kind == VariableKind.ONE else index)

    def __setattr__(self, name, value):
        raise AttributeError(f"Variable은 불변입니다: {name}")

    def __delattr__(self, name):
        raise AttributeError(f"Variable은 불변입니다: {name}")

    @classmethod
    def committed(cls, index):
        return cls(VariableKind.COMMITTED, index)

    @classmethod
    def multiplier_left(cls, index):
        return cls(VariableKind.MULTIPLIER_LEFT, index)

    @classmethod
    def multiplier_right(cls, index):
        return cls(VariableKind.MULTIPLIER_RIGHT, index)

    @classmethod
    def multiplier_output(cls, index):
        return cls(VariableKind.MULTIPLIER_OUTPUT, index)

    @classmethod
    def one(cls):
        return cls(VariableKind.ONE)

    def _key(self):
        return (int(self.kind), self.index)

    def __eq__(self, other):
        if not isinstance(other, Variable):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other):
        if not isinstance(other, Variable):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        if self.kind == VariableKind.ONE:
            return "One()"
        return f"{_KIND_NAMES[self.kind]}({self.index})"

    # ── 변수 산술 → 선형결합 ──

    def __neg__(self):
        return -LinearCombination.from_(self)

    def __add__(self, other):
        if not _is_liftable(other):
            return NotImplemented
        return LinearCombination.from_(self) + other

    def __radd__(self, other):
        if not _is_liftable(other):
            return NotImplemented
        return LinearCombination.from_(other) + self

    def __sub__(self, other):
        if not _is_liftable(other):
            return NotImplemented
        return LinearCombination.from_(self) - other

    def __rsub__(self, other):
        if not _is_liftable(other):
            return NotImplemented
        return LinearCombination.from_(other) - self

    def __mul__(self, other):
        if not _is_scalar(other):
            return NotImplemented
        return LinearCombination._wrap([(self, to_scalar(other))])

    __rmul__ = __mul__


def _is_scalar(value):
    return isinstance(value, (int, FR))


def _is_liftable(value):
    return isinstance(value, (Variable, LinearCombination)) or _is_scalar(value)


def _lift(value):
    """Variable, 스칼라, 선형결합을 항 리스트(새 리스트)로 바꾼다."""
    if isinstance(value, LinearCombination):
        return list(value.terms)
    if isinstance(value, Variable):
        return [(value, FR(1))]
    if _is_scalar(value):
        return [(Variable.one(), to_scalar(value))]
    raise TypeError(
        f"선형결합으로 변환할 수 없는 타입입니다: {type(value).__name__}"
    )


def _negated(terms):
    return [(var, -coeff) for var, coeff in terms]


class LinearCombination:
    """(Variable, FR) 항의 리스트로 표현된 선형결합.

    빈 선형결합은 영 다항식이며 어디서든 유효하다.
    simplify() 전의 항 순서는 의미가 없으므로 호출자가 의존해서는 안 된다.

    속성:
        terms: [(Variable, FR), ...]
    """

    __slots__ = ("terms",)

    def __init__(self, terms=None):
        if terms is None:
            self.terms = []
        else:
            self.terms = [(var, to_scalar(coeff)) for var, coeff in terms]

    @classmethod
    def _wrap(cls, terms):
        lc = cls.__new__(cls)
        lc.terms = terms
        return lc

    @classmethod
    def from_(cls, value):
        """Variable(계수 1), 스칼라(One의 계수), 선형결합(복사)을 선형결합으로 만든다."""
        return cls._wrap(_lift(value))

    def get_terms(self):
        return self.terms

    def __iter__(self):
        return iter(self.terms)

    def __len__(self):
        return len(self.terms)

    def __repr__(self):
        inner = ", ".join(f"({var!r}, {int(coeff)})" for var, coeff in self.terms)
        return f"LinearCombination([{inner}])"

    def __eq__(self, other):
        if not isinstance(other, LinearCombination):
            return NotImplemented
        if len(self.terms) != len(other.terms):
            return False
        return all(
            v1 == v2 and c1 == c2
            for (v1, c1), (v2, c2) in zip(self.terms, other.terms)
        )

    __hash__ = None

    # ── 산술 ──

    def __add__(self, other):
        if not _is_liftable(other):
            return NotImplemented
        return LinearCombination._wrap(self.terms + _lift(other))

    def __radd__(self, other):
        if not _is_liftable(other):
            return NotImplemented
        return LinearCombination._wrap(_lift(other) + self.terms)

    def __iadd__(self, other):
        if not _is_liftable(other):
            return NotImplemented
        self.terms.extend(_lift(other))
        return self

    def __sub__(self, other):
        if not _is_liftable(other):
            return NotImplemented
        return LinearCombination._wrap(self.terms + _negated(_lift(other)))

    def __rsub__(self, other):
        if not _is_liftable(other):
            return NotImplemented
        return LinearCombination._wrap(_lift(other) + _negated(self.terms))

    def __isub__(self, other):
        if not _is_liftable(other):
            return NotImplemented
        self.terms.extend(_negated(_lift(other)))
        return self

    def __neg__(self):
        return LinearCombination._wrap(_negated(self.terms))

    def __mul__(self, other):
        if not _is_scalar(other):
            return NotImplemented
        scalar = to_scalar(other)
        return LinearCombination._wrap(
            [(var, coeff * scalar) for var, coeff in self.terms]
        )

    __rmul__ = __mul__

    # ── 상수 판별 ──

    def is_constant(self):
        """모든 항이 One 변수인가? (빈 선형결합 포함)"""
        return all(var.kind == VariableKind.ONE for var, _ in self.terms)

    def constant_value(self):
        """One 항 계수의 합."""
        total = FR(0)
        for var, coeff in self.terms:
            if var.kind == VariableKind.ONE:
                total = total + coeff
        return total

    # ── 정규화 ──

    def simplify(self, prune=False):
        """같은 변수의 계수를 합치고 Variable 순서로 정렬한 선형결합을 반환한다.

        이 메서드는 수신자를 소비한다: 항 리스트를 꺼내 오므로 원래 객체는
        빈 선형결합이 되며, 호출 후에는 반환값만 사용해야 한다.
        대규모 선형결합의 메모리를 즉시 돌려주기 위함이다.

        Args:
            prune: True이면 합이 0인 항을 제거한다. 기본값은 유지(False).

        Returns:
            LinearCombination: 변수마다 최대 한 항, 전순서로 정렬됨

        복잡도: O(n log n)
        """
        terms, self.terms = self.terms, []
        grouped = {}
        for var, coeff in terms:
            if var in grouped:
                grouped[var] = grouped[var] + coeff
            else:
                grouped[var] = coeff
        out = [(var, grouped[var]) for var in sorted(grouped)]
        if prune:
            out = [(var, coeff) for var, coeff in out if int(coeff) != 0]
        return LinearCombination._wrap(out)
