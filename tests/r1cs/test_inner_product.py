"""
내적 논증 테스트
=================

InnerProductProof의 생성/검증과 직렬화를 테스트한다.
  P = ⟨a, G'⟩ + ⟨b, H'⟩ + ⟨a, b⟩·Q
"""

import random

import pytest

from bulletproofs.errors import FormatError, VerificationError
from bulletproofs.field import FR, G1, ec_mul, multiscalar_mul, random_scalar
from bulletproofs.generators import BulletproofGens
from bulletproofs.inner_product_proof import InnerProductProof
from bulletproofs.transcript import Transcript
from bulletproofs.util import exp_iter, inner_product


def _instance(n, seed):
    rng = random.Random(seed)
    gens = BulletproofGens(n)
    G = gens.G(n)
    H = gens.H(n)
    Q = ec_mul(G1, FR(99))
    a = [random_scalar(rng) for _ in range(n)]
    b = [random_scalar(rng) for _ in range(n)]
    y_inv = random_scalar(rng)
    G_factors = [FR(1)] * n
    H_factors = exp_iter(y_inv, n)
    P = multiscalar_mul(
        [a_i * g for a_i, g in zip(a, G_factors)]
        + [b_i * h for b_i, h in zip(b, H_factors)]
        + [inner_product(a, b)],
        G + H + [Q],
    )
    proof = InnerProductProof.create(
        Transcript(b"ipp test"), Q, G_factors, H_factors, G, H, a, b,
    )
    return {
        "n": n, "G": G, "H": H, "Q": Q, "P": P,
        "G_factors": G_factors, "H_factors": H_factors, "proof": proof,
    }


@pytest.fixture(scope="module")
def ipp4():
    return _instance(4, seed=1)


def _verify(inst, proof=None, P=None):
    (proof or inst["proof"]).verify(
        inst["n"], Transcript(b"ipp test"),
        inst["G_factors"], inst["H_factors"],
        inst["P"] if P is None else P, inst["Q"], inst["G"], inst["H"],
    )


class TestInnerProductProof:
    def test_rounds(self, ipp4):
        assert len(ipp4["proof"].L_vec) == 2
        assert len(ipp4["proof"].R_vec) == 2

    def test_verifies(self, ipp4):
        _verify(ipp4)

    def test_single_element(self):
        inst = _instance(1, seed=2)
        assert inst["proof"].L_vec == []
        _verify(inst)

    def test_wrong_P_rejected(self, ipp4):
        with pytest.raises(VerificationError):
            _verify(ipp4, P=ec_mul(G1, FR(5)))

    def test_tampered_scalar_rejected(self, ipp4):
        p = ipp4["proof"]
        forged = InnerProductProof(p.L_vec, p.R_vec, p.a + FR(1), p.b)
        with pytest.raises(VerificationError):
            _verify(ipp4, proof=forged)

    def test_wrong_transcript_rejected(self, ipp4):
        with pytest.raises(VerificationError):
            ipp4["proof"].verify(
                ipp4["n"], Transcript(b"other"),
                ipp4["G_factors"], ipp4["H_factors"],
                ipp4["P"], ipp4["Q"], ipp4["G"], ipp4["H"],
            )

    def test_round_count_mismatch(self, ipp4):
        with pytest.raises(VerificationError):
            ipp4["proof"].verification_scalars(8, Transcript(b"ipp test"))

    def test_create_rejects_non_power_of_two(self):
        gens = BulletproofGens(3)
        ones = [FR(1)] * 3
        with pytest.raises(ValueError):
            InnerProductProof.create(
                Transcript(b"ipp test"), G1, ones, ones,
                gens.G(3), gens.H(3), ones, ones,
            )

    def test_create_rejects_length_mismatch(self):
        gens = BulletproofGens(2)
        ones = [FR(1)] * 2
        with pytest.raises(ValueError):
            InnerProductProof.create(
                Transcript(b"ipp test"), G1, ones, ones,
                gens.G(2), gens.H(2), ones, [FR(1)],
            )


class TestInnerProductSerialization:
    def test_roundtrip_verifies(self, ipp4):
        data = ipp4["proof"].to_bytes()
        assert len(data) == ipp4["proof"].serialized_size() == 4 + 4 * 32 + 64
        _verify(ipp4, proof=InnerProductProof.from_bytes(data))

    def test_truncated(self, ipp4):
        with pytest.raises(FormatError):
            InnerProductProof.from_bytes(ipp4["proof"].to_bytes()[:-1])

    def test_missing_prefix(self):
        with pytest.raises(FormatError):
            InnerProductProof.from_bytes(b"\x00\x00")

    def test_oversized_round_count(self):
        with pytest.raises(FormatError):
            InnerProductProof.from_bytes((40).to_bytes(4, "big"))
