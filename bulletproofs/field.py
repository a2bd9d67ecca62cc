"""
기반 모듈: 스칼라 필드(Scalar Field) 및 G1 그룹 연산
======================================================

R1CS 증명 시스템 전체에서 사용되는 대수적 도구를 정의한다.

**스칼라 필드 FR**:
  bn128 타원곡선의 스칼라 필드. 선형결합 계수, witness 값,
  블라인딩 인자, Fiat-Shamir 챌린지가 모두 FR 원소이다.
  - 위수(order) r ≈ 2^254, 소수체(prime field)

**그룹 G1**:
  Pedersen 커밋먼트와 내적 논증(inner-product argument)에 사용되는
  bn128 G1 점. py_ecc의 아핀 좌표 튜플 (x, y)로 표현하며
  항등원(무한원점)은 None이다.

**직렬화**:
  - 스칼라: 32바이트 빅엔디안, r 미만이어야 한다 (정규형)
  - 점: 32바이트 압축 형식 (x 좌표 + 플래그 2비트)

사용 예시:
    >>> from bulletproofs.field import FR, G1, ec_mul, compress_point
    >>> P = ec_mul(G1, FR(5))
    >>> len(compress_point(P))  # 32
"""

import hashlib
import secrets

from py_ecc.fields import bn128_FQ as FQ
from py_ecc import bn128

from bulletproofs.errors import FormatError


# ─────────────────────────────────────────────────────────────────────
# 스칼라 필드 FR
# ─────────────────────────────────────────────────────────────────────

class FR(FQ):
    """bn128 스칼라 필드 위의 유한체 원소.

    py_ecc의 FQ 클래스를 상속하여 +, -, *, /, ** 연산을 제공한다.

    int/FQ가 아닌 피연산자에는 NotImplemented를 돌려주어
    FR(3) * x, c - lc 처럼 FR이 왼쪽에 와도 상대 타입의
    __radd__/__rsub__/__rmul__이 호출되게 한다.
    """
    field_modulus = bn128.curve_order

    def __add__(self, other):
        if not isinstance(other, (int, FQ)):
            return NotImplemented
        return super().__add__(other)

    def __sub__(self, other):
        if not isinstance(other, (int, FQ)):
            return NotImplemented
        return super().__sub__(other)

    def __mul__(self, other):
        if not isinstance(other, (int, FQ)):
            return NotImplemented
        return super().__mul__(other)


# 곡선 위수 (스칼라 필드 크기)
CURVE_ORDER = bn128.curve_order

# 기저 필드 크기 (점 좌표의 범위)
FIELD_MODULUS = bn128.field_modulus

# 직렬화 폭 (바이트)
SCALAR_SIZE = 32
POINT_SIZE = 32

# 압축 점 플래그 (바이트 0의 상위 2비트)
_SIGN_FLAG = 0x80
_INFINITY_FLAG = 0x40


def to_scalar(value):
    """int 또는 FR을 FR로 변환한다."""
    if isinstance(value, FR):
        return value
    if isinstance(value, int):
        return FR(value)
    raise TypeError(f"스칼라는 int 또는 FR이어야 합니다: {type(value).__name__}")


def random_scalar(rng=None):
    """균일 분포의 FR 원소를 생성한다.

    Args:
        rng: randrange()를 제공하는 난수 생성기 (random.Random 호환).
             None이면 secrets.SystemRandom을 사용한다.
    """
    if rng is None:
        rng = secrets.SystemRandom()
    return FR(rng.randrange(CURVE_ORDER))


# ─────────────────────────────────────────────────────────────────────
# G1 상수 및 연산
# ─────────────────────────────────────────────────────────────────────

# G1 그룹 생성자 (generator)
G1 = bn128.G1

# 영점 (point at infinity) - 항등원
Z1 = None


def ec_mul(point, scalar):
    """타원곡선 스칼라 곱셈: scalar · point.

    Args:
        point: G1 점 또는 None (항등원)
        scalar: 정수 또는 FR 원소

    Returns:
        scalar · point

    예시:
        >>> P = ec_mul(G1, FR(5))  # 5·G1
    """
    if point is None:
        return None
    scalar = int(scalar) % CURVE_ORDER
    if scalar == 0:
        return None
    return bn128.multiply(point, scalar)


def ec_add(p1, p2):
    """타원곡선 점 덧셈: p1 + p2 (None은 항등원)."""
    return bn128.add(p1, p2)


def ec_neg(point):
    """타원곡선 점의 역원: -point."""
    if point is None:
        return None
    return bn128.neg(point)


def multiscalar_mul(scalars, points):
    """다중 스칼라 곱셈: Σ sᵢ · Pᵢ.

    계수가 0인 항은 건너뛴다.

    Args:
        scalars: FR 또는 int 시퀀스
        points: G1 점 시퀀스 (None 허용)

    Returns:
        G1 점 (모든 항이 소거되면 None)

    Raises:
        ValueError: 두 시퀀스의 길이가 다를 때
    """
    scalars = list(scalars)
    points = list(points)
    if len(scalars) != len(points):
        raise ValueError(
            f"스칼라 수 {len(scalars)}와 점 수 {len(points)}가 일치하지 않습니다"
        )
    result = Z1
    for s, p in zip(scalars, points):
        result = ec_add(result, ec_mul(p, s))
    return result


# ─────────────────────────────────────────────────────────────────────
# 직렬화
# ─────────────────────────────────────────────────────────────────────

def scalar_to_bytes(scalar):
    """FR 원소를 32바이트 빅엔디안으로 직렬화한다."""
    return (int(scalar) % CURVE_ORDER).to_bytes(SCALAR_SIZE, "big")


def scalar_from_bytes(data):
    """32바이트 빅엔디안에서 FR 원소를 복원한다.

    Raises:
        FormatError: 길이가 32가 아니거나 값이 r 이상일 때 (비정규형)
    """
    if len(data) != SCALAR_SIZE:
        raise FormatError(f"스칼라는 {SCALAR_SIZE}바이트여야 합니다: {len(data)}")
    value = int.from_bytes(data, "big")
    if value >= CURVE_ORDER:
        raise FormatError("정규형이 아닌 스칼라입니다")
    return FR(value)


def _curve_rhs(x):
    # y² = x³ + 3
    return (x * x * x + int(bn128.b)) % FIELD_MODULUS


def _sqrt(value):
    # FIELD_MODULUS ≡ 3 (mod 4) 이므로 제곱근은 value^((p+1)/4)
    root = pow(value, (FIELD_MODULUS + 1) // 4, FIELD_MODULUS)
    if root * root % FIELD_MODULUS != value:
        return None
    return root


def compress_point(point):
    """G1 점을 32바이트로 압축한다.

    형식:
        - 바이트 0의 0x80 비트: y 좌표의 홀짝
        - 바이트 0의 0x40 비트: 무한원점 (나머지 비트는 모두 0)
        - 나머지: x 좌표 빅엔디안 (bn128의 p < 2^254이므로 상위 2비트는 비어 있음)
    """
    if point is None:
        return bytes([_INFINITY_FLAG]) + b"\x00" * (POINT_SIZE - 1)
    x, y = point
    out = bytearray(int(x).to_bytes(POINT_SIZE, "big"))
    if int(y) & 1:
        out[0] |= _SIGN_FLAG
    return bytes(out)


def decompress_point(data):
    """32바이트 압축 형식에서 G1 점을 복원한다.

    Raises:
        FormatError: 길이, 플래그, x 좌표 범위가 잘못되었거나
                     x가 곡선 위의 점에 대응하지 않을 때
    """
    if len(data) != POINT_SIZE:
        raise FormatError(f"압축 점은 {POINT_SIZE}바이트여야 합니다: {len(data)}")
    flags = data[0] & (_SIGN_FLAG | _INFINITY_FLAG)
    body = bytes([data[0] & 0x3F]) + bytes(data[1:])
    if flags & _INFINITY_FLAG:
        if flags != _INFINITY_FLAG or any(body):
            raise FormatError("잘못된 무한원점 인코딩입니다")
        return None
    x = int.from_bytes(body, "big")
    if x >= FIELD_MODULUS:
        raise FormatError("x 좌표가 기저 필드 범위를 벗어났습니다")
    y = _sqrt(_curve_rhs(x))
    if y is None:
        raise FormatError("x 좌표가 곡선 위의 점이 아닙니다")
    if (y & 1) != (1 if flags & _SIGN_FLAG else 0):
        y = FIELD_MODULUS - y
    return (bn128.FQ(x), bn128.FQ(y))


def hash_to_point(label):
    """레이블을 이산로그가 알려지지 않은 G1 점으로 사상한다.

    try-and-increment: SHA-256(label ‖ counter)를 x 좌표로 삼아
    곡선 위의 점이 나올 때까지 counter를 증가시킨다.
    bn128 G1의 cofactor는 1이므로 곡선 위의 모든 점이 그룹 원소이다.

    Args:
        label: 바이트열 레이블

    Returns:
        G1 점
    """
    counter = 0
    while True:
        digest = hashlib.sha256(label + counter.to_bytes(4, "big")).digest()
        x = int.from_bytes(digest, "big") % FIELD_MODULUS
        y = _sqrt(_curve_rhs(x))
        if y is not None and y != 0:
            return (bn128.FQ(x), bn128.FQ(y))
        counter += 1
