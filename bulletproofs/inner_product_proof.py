"""
내적 논증 (Inner-Product Argument)
====================================

길이 n인 벡터 a, b에 대해 다음 관계를 log₂(n) 라운드로 증명한다:

    P = ⟨a, G'⟩ + ⟨b, H'⟩ + ⟨a, b⟩·Q
    (G'ᵢ = g_factorᵢ·Gᵢ,  H'ᵢ = h_factorᵢ·Hᵢ)

**접기(Folding)**:
  매 라운드 벡터를 절반으로 나누고 (a_L, a_R), 교차항 커밋먼트
    L = ⟨a_L, G_R⟩ + ⟨b_R, H_L⟩ + ⟨a_L, b_R⟩·Q
    R = ⟨a_R, G_L⟩ + ⟨b_L, H_R⟩ + ⟨a_R, b_L⟩·Q
  를 보낸 뒤 챌린지 u로 접는다:
    a' = u·a_L + u⁻¹·a_R,   b' = u⁻¹·b_L + u·b_R
    G' = u⁻¹·G_L + u·G_R,   H' = u·H_L + u⁻¹·H_R
  첫 라운드에서 g/h factor를 함께 접어 넣는다.

**검증 스칼라**:
  최종 생성자 G_final = Σ sᵢ·Gᵢ 이며 sᵢ는 챌린지들의 곱으로 결정된다.
  Verifier는 접기를 직접 하지 않고 (u², u⁻², s)만 계산해
  하나의 다중 스칼라 곱셈에 합친다.

사용 예시:
    >>> proof = InnerProductProof.create(t, Q, gf, hf, G, H, a, b)
    >>> proof.verify(n, t2, gf, hf, P, Q, G, H)
"""

from bulletproofs.errors import FormatError, VerificationError
from bulletproofs.field import (
    FR, POINT_SIZE, SCALAR_SIZE,
    multiscalar_mul,
    compress_point, decompress_point, scalar_from_bytes, scalar_to_bytes,
)
from bulletproofs.util import inner_product


class InnerProductProof:
    """내적 논증 증명.

    속성:
        L_vec, R_vec: 라운드별 교차항 커밋먼트 (G1 점, 길이 log₂ n)
        a, b: 완전히 접힌 벡터의 마지막 원소 (FR)
    """

    def __init__(self, L_vec, R_vec, a, b):
        self.L_vec = L_vec
        self.R_vec = R_vec
        self.a = a
        self.b = b

    @classmethod
    def create(cls, transcript, Q, G_factors, H_factors, G_vec, H_vec, a_vec, b_vec):
        """내적 논증을 생성한다.

        Args:
            transcript: Fiat-Shamir 트랜스크립트 (상태가 진행됨)
            Q: ⟨a, b⟩에 곱해지는 점
            G_factors, H_factors: 생성자별 스칼라 인자
            G_vec, H_vec: 생성자 벡터
            a_vec, b_vec: witness 벡터

        Raises:
            ValueError: 길이가 일치하지 않거나 2의 거듭제곱이 아닐 때
        """
        n = len(G_vec)
        if not (len(H_vec) == len(a_vec) == len(b_vec) == len(G_factors) == len(H_factors) == n):
            raise ValueError("내적 논증 입력 벡터의 길이가 일치하지 않습니다")
        if n == 0 or n & (n - 1) != 0:
            raise ValueError(f"n은 2의 거듭제곱이어야 합니다: {n}")

        transcript.innerproduct_domain_sep(n)

        a = list(a_vec)
        b = list(b_vec)
        G = list(G_vec)
        H = list(H_vec)
        L_vec = []
        R_vec = []

        # ── 첫 라운드: factor를 접어 넣는다 ──
        if n != 1:
            n //= 2
            a_L, a_R = a[:n], a[n:]
            b_L, b_R = b[:n], b[n:]
            G_L, G_R = G[:n], G[n:]
            H_L, H_R = H[:n], H[n:]

            c_L = inner_product(a_L, b_R)
            c_R = inner_product(a_R, b_L)

            L = multiscalar_mul(
                [a_L[i] * G_factors[n + i] for i in range(n)]
                + [b_R[i] * H_factors[i] for i in range(n)]
                + [c_L],
                G_R + H_L + [Q],
            )
            R = multiscalar_mul(
                [a_R[i] * G_factors[i] for i in range(n)]
                + [b_L[i] * H_factors[n + i] for i in range(n)]
                + [c_R],
                G_L + H_R + [Q],
            )
            L_vec.append(L)
            R_vec.append(R)
            transcript.append_point(b"L", L)
            transcript.append_point(b"R", R)

            u = transcript.challenge_scalar(b"u")
            u_inv = FR(1) / u

            a = [a_L[i] * u + u_inv * a_R[i] for i in range(n)]
            b = [b_L[i] * u_inv + u * b_R[i] for i in range(n)]
            G = [
                multiscalar_mul([u_inv * G_factors[i], u * G_factors[n + i]], [G_L[i], G_R[i]])
                for i in range(n)
            ]
            H = [
                multiscalar_mul([u * H_factors[i], u_inv * H_factors[n + i]], [H_L[i], H_R[i]])
                for i in range(n)
            ]

        # ── 나머지 라운드 ──
        while n != 1:
            n //= 2
            a_L, a_R = a[:n], a[n:]
            b_L, b_R = b[:n], b[n:]
            G_L, G_R = G[:n], G[n:]
            H_L, H_R = H[:n], H[n:]

            c_L = inner_product(a_L, b_R)
            c_R = inner_product(a_R, b_L)

            L = multiscalar_mul(a_L + b_R + [c_L], G_R + H_L + [Q])
            R = multiscalar_mul(a_R + b_L + [c_R], G_L + H_R + [Q])
            L_vec.append(L)
            R_vec.append(R)
            transcript.append_point(b"L", L)
            transcript.append_point(b"R", R)

            u = transcript.challenge_scalar(b"u")
            u_inv = FR(1) / u

            a = [a_L[i] * u + u_inv * a_R[i] for i in range(n)]
            b = [b_L[i] * u_inv + u * b_R[i] for i in range(n)]
            G = [multiscalar_mul([u_inv, u], [G_L[i], G_R[i]]) for i in range(n)]
            H = [multiscalar_mul([u, u_inv], [H_L[i], H_R[i]]) for i in range(n)]

        return cls(L_vec, R_vec, a[0], b[0])

    def verification_scalars(self, n, transcript):
        """챌린지를 재생하여 (u², u⁻², s)를 계산한다.

        Args:
            n: 벡터 길이 (2^len(L_vec)이어야 함)
            transcript: Prover와 같은 상태의 트랜스크립트

        Returns:
            (u_sq, u_inv_sq, s): 라운드별 u², u⁻² 리스트와 길이 n의 s 벡터

        Raises:
            VerificationError: 라운드 수가 n과 맞지 않거나 L/R이 항등원일 때
        """
        lg_n = len(self.L_vec)
        if lg_n >= 32 or len(self.R_vec) != lg_n or n != (1 << lg_n):
            raise VerificationError("내적 논증의 라운드 수가 맞지 않습니다")

        transcript.innerproduct_domain_sep(n)

        challenges = []
        for L, R in zip(self.L_vec, self.R_vec):
            transcript.validate_and_append_point(b"L", L)
            transcript.validate_and_append_point(b"R", R)
            challenges.append(transcript.challenge_scalar(b"u"))

        challenges_inv = [FR(1) / u for u in challenges]
        allinv = FR(1)
        for u_inv in challenges_inv:
            allinv = allinv * u_inv

        challenges_sq = [u * u for u in challenges]
        challenges_inv_sq = [u_inv * u_inv for u_inv in challenges_inv]

        # sᵢ = Π u_j^(±1), 부호는 i의 비트에 따라 결정된다
        s = [allinv]
        for i in range(1, n):
            lg_i = i.bit_length() - 1
            k = 1 << lg_i
            u_lg_i_sq = challenges_sq[(lg_n - 1) - lg_i]
            s.append(s[i - k] * u_lg_i_sq)

        return challenges_sq, challenges_inv_sq, s

    def verify(self, n, transcript, G_factors, H_factors, P, Q, G, H):
        """내적 관계 P = ⟨a, G'⟩ + ⟨b, H'⟩ + ⟨a, b⟩·Q 를 검증한다.

        Raises:
            VerificationError: 검증 실패
        """
        u_sq, u_inv_sq, s = self.verification_scalars(n, transcript)

        g_times_a_times_s = [self.a * s_i * g_i for g_i, s_i in zip(G_factors, s)]
        h_times_b_div_s = [
            self.b * s_i_inv * h_i for h_i, s_i_inv in zip(H_factors, reversed(s))
        ]
        neg_u_sq = [-x for x in u_sq]
        neg_u_inv_sq = [-x for x in u_inv_sq]

        expect_P = multiscalar_mul(
            [self.a * self.b] + g_times_a_times_s + h_times_b_div_s + neg_u_sq + neg_u_inv_sq,
            [Q] + list(G) + list(H) + self.L_vec + self.R_vec,
        )
        if expect_P != P:
            raise VerificationError("내적 논증 검증에 실패했습니다")

    # ── 직렬화 ──

    def serialized_size(self):
        return 4 + 2 * len(self.L_vec) * POINT_SIZE + 2 * SCALAR_SIZE

    def to_bytes(self):
        """라운드 수(u32 BE) ‖ (L ‖ R)* ‖ a ‖ b"""
        out = bytearray(len(self.L_vec).to_bytes(4, "big"))
        for L, R in zip(self.L_vec, self.R_vec):
            out.extend(compress_point(L))
            out.extend(compress_point(R))
        out.extend(scalar_to_bytes(self.a))
        out.extend(scalar_to_bytes(self.b))
        return bytes(out)

    @classmethod
    def from_bytes(cls, data):
        """to_bytes()의 역.

        Raises:
            FormatError: 길이나 원소 인코딩이 잘못되었을 때
        """
        if len(data) < 4:
            raise FormatError("내적 논증 길이 접두사가 없습니다")
        lg_n = int.from_bytes(data[:4], "big")
        if lg_n >= 32:
            raise FormatError(f"내적 논증 라운드 수가 너무 큽니다: {lg_n}")
        expected = 4 + 2 * lg_n * POINT_SIZE + 2 * SCALAR_SIZE
        if len(data) != expected:
            raise FormatError(
                f"내적 논증은 {expected}바이트여야 합니다: {len(data)}"
            )
        pos = 4
        L_vec = []
        R_vec = []
        for _ in range(lg_n):
            L_vec.append(decompress_point(data[pos:pos + POINT_SIZE]))
            pos += POINT_SIZE
            R_vec.append(decompress_point(data[pos:pos + POINT_SIZE]))
            pos += POINT_SIZE
        a = scalar_from_bytes(data[pos:pos + SCALAR_SIZE])
        pos += SCALAR_SIZE
        b = scalar_from_bytes(data[pos:pos + SCALAR_SIZE])
        return cls(L_vec, R_vec, a, b)
