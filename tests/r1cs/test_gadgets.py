"""
가젯 테스트
============

같은 가젯 코드가 Prover와 Verifier에서 함께 동작하는지 테스트한다.

테스트 범위:
  - example_gadget: (a1 + a2)(b1 + b2) = c1 + c2
  - range_gadget: 비트 분해 범위 증명
  - shuffle_gadget / ShuffleProof: 2단계 무작위 제약
"""

import random

import pytest

from bulletproofs.errors import GadgetError, UnsatisfiedConstraint, VerificationError
from bulletproofs.field import random_scalar
from bulletproofs.transcript import Transcript
from bulletproofs.r1cs.gadgets import (
    MAX_RANGE_BITS, ShuffleProof, example_gadget, range_gadget, shuffle_gadget,
)
from bulletproofs.r1cs.linear_combination import Variable
from bulletproofs.r1cs.prover import Prover
from bulletproofs.r1cs.verifier import Verifier


# ─────────────────────────────────────────────────────────────────────
# example_gadget
# ─────────────────────────────────────────────────────────────────────

def _example_roundtrip(pc_gens, bp_gens, a1, a2, b1, b2, c1, c2):
    rng = random.Random(7)
    prover = Prover(pc_gens, Transcript(b"R1CSExampleGadget"))
    commitments, variables = [], []
    for value in (a1, a2, b1, b2, c1):
        V, var = prover.commit(value, random_scalar(rng))
        commitments.append(V)
        variables.append(var)
    example_gadget(prover, *variables, c2)
    proof = prover.prove(bp_gens, rng)

    verifier = Verifier(Transcript(b"R1CSExampleGadget"))
    variables = [verifier.commit(V) for V in commitments]
    example_gadget(verifier, *variables, c2)
    verifier.verify(proof, pc_gens, bp_gens)


class TestExampleGadget:
    def test_accepts(self, pc_gens, bp_gens):
        _example_roundtrip(pc_gens, bp_gens, 3, 4, 6, 1, 40, 9)

    def test_wrong_public_constant_rejected(self, pc_gens, bp_gens):
        rng = random.Random(7)
        prover = Prover(pc_gens, Transcript(b"R1CSExampleGadget"))
        commitments, variables = [], []
        for value in (3, 4, 6, 1, 40):
            V, var = prover.commit(value, random_scalar(rng))
            commitments.append(V)
            variables.append(var)
        example_gadget(prover, *variables, 9)
        proof = prover.prove(bp_gens, rng)

        verifier = Verifier(Transcript(b"R1CSExampleGadget"))
        variables = [verifier.commit(V) for V in commitments]
        example_gadget(verifier, *variables, 10)
        with pytest.raises(VerificationError):
            verifier.verify(proof, pc_gens, bp_gens)

    def test_unsatisfied(self, pc_gens, bp_gens):
        with pytest.raises(UnsatisfiedConstraint):
            _example_roundtrip(pc_gens, bp_gens, 3, 4, 6, 1, 40, 10)


# ─────────────────────────────────────────────────────────────────────
# range_gadget
# ─────────────────────────────────────────────────────────────────────

def _range_roundtrip(pc_gens, bp_gens, v, n):
    rng = random.Random(11)
    prover = Prover(pc_gens, Transcript(b"RangeProofTest"))
    V, var = prover.commit(v, random_scalar(rng))
    range_gadget(prover, var, v, n)
    proof = prover.prove(bp_gens, rng)

    verifier = Verifier(Transcript(b"RangeProofTest"))
    var = verifier.commit(V)
    range_gadget(verifier, var, None, n)
    verifier.verify(proof, pc_gens, bp_gens)
    return proof


class TestRangeGadget:
    @pytest.mark.parametrize("v", [0, 1, 200, 255])
    def test_in_range(self, pc_gens, bp_gens, v):
        proof = _range_roundtrip(pc_gens, bp_gens, v, 8)
        assert len(proof.ipp_proof.L_vec) == 3

    def test_out_of_range(self, pc_gens, bp_gens):
        with pytest.raises(UnsatisfiedConstraint):
            _range_roundtrip(pc_gens, bp_gens, 256, 8)

    def test_gate_count(self, pc_gens):
        prover = Prover(pc_gens, Transcript(b"RangeProofTest"))
        _, var = prover.commit(5, 1)
        range_gadget(prover, var, 5, 4)
        metrics = prover.metrics()
        assert metrics.multipliers == 4
        assert metrics.constraints == 2 * 4 + 1

    @pytest.mark.parametrize("n", [0, MAX_RANGE_BITS + 1])
    def test_bad_bit_count(self, pc_gens, n):
        prover = Prover(pc_gens, Transcript(b"RangeProofTest"))
        _, var = prover.commit(5, 1)
        with pytest.raises(GadgetError):
            range_gadget(prover, var, 5, n)

    def test_negative_assignment(self, pc_gens):
        prover = Prover(pc_gens, Transcript(b"RangeProofTest"))
        _, var = prover.commit(5, 1)
        with pytest.raises(GadgetError):
            range_gadget(prover, var, -1, 8)


# ─────────────────────────────────────────────────────────────────────
# shuffle
# ─────────────────────────────────────────────────────────────────────

@pytest.fixture(scope="module")
def shuffle3(pc_gens, bp_gens):
    proof, inputs, outputs = ShuffleProof.prove(
        pc_gens, bp_gens, Transcript(b"ShuffleTest"),
        [3, 7, 1], [1, 3, 7], random.Random(3),
    )
    return {"proof": proof, "inputs": inputs, "outputs": outputs}


class TestShuffle:
    def test_accepts(self, pc_gens, bp_gens, shuffle3):
        shuffle3["proof"].verify(
            pc_gens, bp_gens, Transcript(b"ShuffleTest"),
            shuffle3["inputs"], shuffle3["outputs"],
        )

    def test_uses_two_phases(self, shuffle3):
        proof = shuffle3["proof"].proof
        assert proof.A_I2 is not None
        # 2(k - 1) = 4 게이트, 모두 2단계
        assert len(proof.ipp_proof.L_vec) == 2

    def test_bytes_roundtrip(self, pc_gens, bp_gens, shuffle3):
        decoded = ShuffleProof.from_bytes(shuffle3["proof"].to_bytes())
        decoded.verify(
            pc_gens, bp_gens, Transcript(b"ShuffleTest"),
            shuffle3["inputs"], shuffle3["outputs"],
        )

    def test_forged_output_rejected(self, pc_gens, bp_gens, shuffle3):
        outputs = list(shuffle3["outputs"])
        outputs[2] = pc_gens.commit(8, random_scalar(random.Random(4)))
        with pytest.raises(VerificationError):
            shuffle3["proof"].verify(
                pc_gens, bp_gens, Transcript(b"ShuffleTest"),
                shuffle3["inputs"], outputs,
            )

    def test_not_a_permutation(self, pc_gens, bp_gens):
        with pytest.raises(UnsatisfiedConstraint):
            ShuffleProof.prove(
                pc_gens, bp_gens, Transcript(b"ShuffleTest"),
                [3, 7, 1], [1, 3, 8], random.Random(3),
            )

    def test_single_element(self, pc_gens, bp_gens):
        proof, inputs, outputs = ShuffleProof.prove(
            pc_gens, bp_gens, Transcript(b"ShuffleTest"), [5], [5], random.Random(3),
        )
        assert proof.proof.A_I2 is None
        proof.verify(pc_gens, bp_gens, Transcript(b"ShuffleTest"), inputs, outputs)

    def test_length_mismatch(self, pc_gens, bp_gens):
        with pytest.raises(GadgetError):
            ShuffleProof.prove(
                pc_gens, bp_gens, Transcript(b"ShuffleTest"), [1, 2], [1],
            )

    def test_gadget_length_mismatch(self):
        verifier = Verifier(Transcript(b"ShuffleTest"))
        with pytest.raises(GadgetError):
            shuffle_gadget(verifier, [Variable.committed(0)], [])

    def test_gadget_queues_one_callback(self):
        verifier = Verifier(Transcript(b"ShuffleTest"))
        x = [verifier.commit(None) for _ in range(2)]
        y = [verifier.commit(None) for _ in range(2)]
        shuffle_gadget(verifier, x, y)
        assert len(verifier.deferred_constraints) == 1
        assert verifier.metrics().phase_two_constraints == 1
