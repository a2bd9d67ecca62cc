"""
R1CS Bulletproofs E2E 데모
============================

이 스크립트는 R1CS 증명 시스템의 전체 흐름을 시연한다.

실행:
    python -m bulletproofs.r1cs.example

흐름:
    1. 생성자 준비 (신뢰 설정 없음)
    2. 1단계 회로: (a1 + a2)(b1 + b2) = c1 + c2  증명/검증
    3. 2단계 회로: 셔플 [3, 7, 1, 4] → [4, 1, 7, 3]  증명/검증
    4. 조작된 커밋먼트로 검증 (거부되어야 함)
"""

import logging
import random

from bulletproofs.errors import VerificationError
from bulletproofs.generators import BulletproofGens, PedersenGens
from bulletproofs.transcript import Transcript
from bulletproofs.field import random_scalar
from bulletproofs.r1cs.gadgets import ShuffleProof, example_gadget
from bulletproofs.r1cs.prover import Prover
from bulletproofs.r1cs.verifier import Verifier


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")
    rng = random.Random(12345)

    print("=" * 60)
    print("  R1CS Bulletproofs Demo")
    print("  회로 1: (3 + 4)(6 + 1) = 40 + 9")
    print("  회로 2: 셔플 [3, 7, 1, 4] → [4, 1, 7, 3]")
    print("=" * 60)

    # ── 1. 생성자 ──
    print("\n[1] 생성자 준비...")
    pc_gens = PedersenGens()
    bp_gens = BulletproofGens(gens_capacity=8)
    print(f"    G, H 생성자 수: {bp_gens.gens_capacity}")

    # ── 2. 1단계 회로 ──
    print("\n[2] 예제 가젯 증명...")
    prover = Prover(pc_gens, Transcript(b"R1CSExampleGadget"))
    commitments = []
    variables = []
    for value in (3, 4, 6, 1, 40):
        V, var = prover.commit(value, random_scalar(rng))
        commitments.append(V)
        variables.append(var)
    a1, a2, b1, b2, c1 = variables
    example_gadget(prover, a1, a2, b1, b2, c1, 9)
    metrics = prover.metrics()
    print(f"    곱셈 게이트: {metrics.multipliers}, 제약: {metrics.constraints}")

    proof = prover.prove(bp_gens, rng)
    print(f"    증명 크기: {proof.serialized_size()} bytes")

    print("\n    검증 중...")
    verifier = Verifier(Transcript(b"R1CSExampleGadget"))
    a1, a2, b1, b2, c1 = [verifier.commit(V) for V in commitments]
    example_gadget(verifier, a1, a2, b1, b2, c1, 9)
    verifier.verify(proof, pc_gens, bp_gens, rng)
    print("    결과: ✓ 검증 성공")

    # ── 3. 2단계 회로 ──
    print("\n[3] 셔플 증명 (무작위 제약)...")
    inputs = [3, 7, 1, 4]
    outputs = [4, 1, 7, 3]
    shuffle_proof, input_comms, output_comms = ShuffleProof.prove(
        pc_gens, bp_gens, Transcript(b"ShuffleDemo"), inputs, outputs, rng,
    )
    print(f"    증명 크기: {len(shuffle_proof.to_bytes())} bytes")
    shuffle_proof.verify(
        pc_gens, bp_gens, Transcript(b"ShuffleDemo"), input_comms, output_comms, rng,
    )
    print("    결과: ✓ 검증 성공")

    # ── 4. 조작된 커밋먼트 ──
    print("\n[4] 출력 커밋먼트를 값 5의 커밋먼트로 바꿔 검증...")
    forged = list(output_comms)
    forged[0] = pc_gens.commit(5, random_scalar(rng))
    try:
        shuffle_proof.verify(
            pc_gens, bp_gens, Transcript(b"ShuffleDemo"), input_comms, forged, rng,
        )
        print("    결과: ✗ 조작된 증명이 통과했습니다")
    except VerificationError:
        print("    결과: ✓ 거부됨 (VerificationError)")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
