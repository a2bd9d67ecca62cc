"""
R1CS Fiat-Shamir Transcript
=============================

비대화식(non-interactive) 변환을 위한 Fiat-Shamir 해싱 구현.

**동작 원리**:
  Prover가 커밋먼트를 보낼 때마다 트랜스크립트에 기록하고,
  Verifier의 랜덤 챌린지 대신 지금까지의 상태를 해시하여 챌린지를 얻는다.
  Verifier도 같은 순서로 같은 데이터를 기록하면 같은 챌린지가 재구성된다.
  기록 순서가 한 번이라도 어긋나면 모든 이후 챌린지가 달라진다.

**R1CS 증명의 기록 순서**:
  dom-sep("r1cs v1") → V₁..V_m → m
  → A_I1, A_O1, S1 → dom-sep(1phase|2phase) → [phase-2 챌린지]
  → A_I2, A_O2, S2 → y, z → T_1, T_3..T_6 → u, x
  → t_x, t_x_blinding, e_blinding → w → 내적 논증(L, R, u)*

**프레이밍**:
  레이블과 메시지 앞에 4바이트 길이를 붙여
  ("ab", "c")와 ("a", "bc")가 같은 상태를 만들지 않도록 한다.

사용 예시:
    >>> t = Transcript(b"example")
    >>> t.append_point(b"V", commitment)
    >>> y = t.challenge_scalar(b"y")
"""

import hashlib
import secrets

from bulletproofs.errors import VerificationError
from bulletproofs.field import FR, CURVE_ORDER, compress_point, scalar_to_bytes


def _frame(data):
    return len(data).to_bytes(4, "big") + data


class Transcript:
    """SHA-256 기반 Fiat-Shamir 트랜스크립트.

    속성:
        state: 현재까지 누적된 해시 입력 바이트열

    보안 주의:
        하나의 증명 세션에 하나의 인스턴스만 사용한다.
        서로 다른 증명 사이에서 공유하면 안 된다.
    """

    def __init__(self, label=b"r1cs"):
        """트랜스크립트를 초기화한다.

        Args:
            label: 프로토콜/애플리케이션 도메인 분리용 레이블
        """
        self.state = bytearray()
        self.append_message(b"dom-sep", label)

    def append_message(self, label, message):
        """레이블이 붙은 바이트열을 기록한다."""
        self.state.extend(_frame(label))
        self.state.extend(_frame(bytes(message)))

    def append_u64(self, label, value):
        """부호 없는 64비트 정수를 기록한다 (리틀엔디안)."""
        self.append_message(label, int(value).to_bytes(8, "little"))

    def append_scalar(self, label, scalar):
        """FR 스칼라 값을 32바이트 빅엔디안으로 기록한다."""
        self.append_message(label, scalar_to_bytes(scalar))

    def append_point(self, label, point):
        """G1 점을 압축 형식으로 기록한다 (무한원점 허용)."""
        self.append_message(label, compress_point(point))

    def validate_and_append_point(self, label, point):
        """G1 점을 기록하되, 무한원점이면 거부한다.

        Raises:
            VerificationError: point가 항등원일 때
        """
        if point is None:
            raise VerificationError(f"{label.decode()}이(가) 항등원입니다")
        self.append_point(label, point)

    def challenge_scalar(self, label):
        """트랜스크립트로부터 챌린지 스칼라를 생성한다.

        현재 상태를 SHA-256으로 해싱하여 FR 원소를 도출하고,
        다이제스트를 상태에 다시 추가한다 (체이닝).

        Args:
            label: 바이트열 레이블 (예: b"y")

        Returns:
            FR: 챌린지 스칼라
        """
        self.state.extend(_frame(label))
        h = hashlib.sha256(bytes(self.state)).digest()
        challenge = FR(int.from_bytes(h, "big") % CURVE_ORDER)
        self.state.extend(h)
        return challenge

    def clone(self):
        """같은 상태를 가진 독립된 트랜스크립트를 반환한다."""
        other = Transcript.__new__(Transcript)
        other.state = bytearray(self.state)
        return other

    # ── 도메인 분리자 ──

    def r1cs_domain_sep(self):
        self.append_message(b"dom-sep", b"r1cs v1")

    def r1cs_1phase_domain_sep(self):
        self.append_message(b"dom-sep", b"r1cs-1phase")

    def r1cs_2phase_domain_sep(self):
        self.append_message(b"dom-sep", b"r1cs-2phase")

    def innerproduct_domain_sep(self, n):
        self.append_message(b"dom-sep", b"ipp v1")
        self.append_u64(b"n", n)

    # ── 트랜스크립트 기반 난수 ──

    def build_rng(self):
        """현재 상태로 키가 설정된 TranscriptRngBuilder를 반환한다."""
        return TranscriptRngBuilder(bytes(self.state))


class TranscriptRngBuilder:
    """트랜스크립트 상태, witness, 외부 난수를 결합하는 RNG 빌더.

    외부 난수 생성기가 약하더라도 witness가 섞이므로 블라인딩이 예측되지 않고,
    witness가 반복되더라도 외부 난수가 섞이므로 블라인딩이 재사용되지 않는다.
    """

    def __init__(self, seed):
        self._hasher = hashlib.sha256(b"transcript-rng")
        self._hasher.update(_frame(seed))

    def rekey_with_witness_bytes(self, label, witness):
        """witness 바이트를 키에 섞는다."""
        self._hasher.update(_frame(label))
        self._hasher.update(_frame(bytes(witness)))
        return self

    def finalize(self, rng=None):
        """외부 난수 32바이트를 섞어 TranscriptRng를 만든다.

        Args:
            rng: getrandbits()를 제공하는 난수 생성기 (random.Random 호환).
                 None이면 secrets.SystemRandom을 사용한다.
        """
        if rng is None:
            rng = secrets.SystemRandom()
        self._hasher.update(rng.getrandbits(256).to_bytes(32, "big"))
        return TranscriptRng(self._hasher.digest())


class TranscriptRng:
    """SHA-256 카운터 모드로 FR 원소를 생성한다."""

    def __init__(self, key):
        self._key = key
        self._counter = 0

    def random_scalar(self):
        h = hashlib.sha256(self._key + self._counter.to_bytes(8, "big")).digest()
        self._counter += 1
        return FR(int.from_bytes(h, "big") % CURVE_ORDER)
