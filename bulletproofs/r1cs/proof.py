"""
R1CS 증명 데이터와 직렬화
==========================

**증명 구성**:
  | 원소                 | 종류 | 의미                                  |
  |----------------------|------|---------------------------------------|
  | A_I1, A_O1, S1       | G1   | 1단계 배선 a_L‖a_R, a_O, 마스크 커밋   |
  | A_I2, A_O2, S2       | G1   | 2단계 배선 커밋 (없으면 항등원)        |
  | T_1, T_3..T_6        | G1   | t(x) 계수 커밋 (t_2는 V로부터 유도)    |
  | t_x, t_x_blinding    | FR   | t(x)와 그 블라인딩의 평가값            |
  | e_blinding           | FR   | 합성 커밋먼트의 블라인딩               |
  | ipp_proof            | IPA  | l(x), r(x)에 대한 내적 논증            |

**바이트 형식**:
  version(1) ‖ 점들(32 × 8 또는 11) ‖ 스칼라(32 × 3) ‖ IPA

  version = 0 (ONE_PHASE): A_I2, A_O2, S2가 모두 항등원이므로 생략
  version = 1 (TWO_PHASE): 11개 점 모두 포함
"""

from dataclasses import dataclass
from typing import Optional

from bulletproofs.errors import FormatError
from bulletproofs.field import (
    FR, POINT_SIZE, SCALAR_SIZE,
    compress_point, decompress_point, scalar_from_bytes, scalar_to_bytes,
)
from bulletproofs.inner_product_proof import InnerProductProof


ONE_PHASE_COMMITMENTS = 0
TWO_PHASE_COMMITMENTS = 1


@dataclass(frozen=True)
class R1CSProof:
    """Prover.prove()가 만들고 Verifier.verify()가 소비하는 증명.

    생성 후에는 불변이다. 2단계가 없으면 A_I2, A_O2, S2는 None이다.
    """
    A_I1: Optional[tuple]
    A_O1: Optional[tuple]
    S1: Optional[tuple]
    A_I2: Optional[tuple]
    A_O2: Optional[tuple]
    S2: Optional[tuple]
    T_1: Optional[tuple]
    T_3: Optional[tuple]
    T_4: Optional[tuple]
    T_5: Optional[tuple]
    T_6: Optional[tuple]
    t_x: FR
    t_x_blinding: FR
    e_blinding: FR
    ipp_proof: InnerProductProof

    def _missing_phase2_commitments(self):
        return self.A_I2 is None and self.A_O2 is None and self.S2 is None

    def serialized_size(self):
        num_points = 8 if self._missing_phase2_commitments() else 11
        return (
            1
            + num_points * POINT_SIZE
            + 3 * SCALAR_SIZE
            + self.ipp_proof.serialized_size()
        )

    def to_bytes(self):
        out = bytearray()
        if self._missing_phase2_commitments():
            out.append(ONE_PHASE_COMMITMENTS)
            points = [self.A_I1, self.A_O1, self.S1]
        else:
            out.append(TWO_PHASE_COMMITMENTS)
            points = [self.A_I1, self.A_O1, self.S1, self.A_I2, self.A_O2, self.S2]
        points += [self.T_1, self.T_3, self.T_4, self.T_5, self.T_6]
        for point in points:
            out.extend(compress_point(point))
        for scalar in (self.t_x, self.t_x_blinding, self.e_blinding):
            out.extend(scalar_to_bytes(scalar))
        out.extend(self.ipp_proof.to_bytes())
        return bytes(out)

    @classmethod
    def from_bytes(cls, data):
        """바이트열에서 증명을 복원한다.

        Raises:
            FormatError: 버전, 길이, 원소 인코딩이 잘못되었을 때
        """
        data = bytes(data)
        if len(data) < 1:
            raise FormatError("빈 증명입니다")
        version = data[0]
        if version == ONE_PHASE_COMMITMENTS:
            num_points = 8
        elif version == TWO_PHASE_COMMITMENTS:
            num_points = 11
        else:
            raise FormatError(f"알 수 없는 증명 버전입니다: {version}")

        header = 1 + num_points * POINT_SIZE + 3 * SCALAR_SIZE
        if len(data) < header:
            raise FormatError(f"증명이 너무 짧습니다: {len(data)} < {header}")

        pos = 1
        points = []
        for _ in range(num_points):
            points.append(decompress_point(data[pos:pos + POINT_SIZE]))
            pos += POINT_SIZE
        scalars = []
        for _ in range(3):
            scalars.append(scalar_from_bytes(data[pos:pos + SCALAR_SIZE]))
            pos += SCALAR_SIZE
        ipp_proof = InnerProductProof.from_bytes(data[pos:])

        if version == ONE_PHASE_COMMITMENTS:
            A_I1, A_O1, S1, T_1, T_3, T_4, T_5, T_6 = points
            A_I2 = A_O2 = S2 = None
        else:
            A_I1, A_O1, S1, A_I2, A_O2, S2, T_1, T_3, T_4, T_5, T_6 = points
            if A_I2 is None and A_O2 is None and S2 is None:
                # 정규 인코딩은 이 경우 version 0을 사용한다
                raise FormatError("2단계 커밋먼트가 모두 항등원인 version 1 증명입니다")

        t_x, t_x_blinding, e_blinding = scalars
        return cls(A_I1, A_O1, S1, A_I2, A_O2, S2,
                   T_1, T_3, T_4, T_5, T_6,
                   t_x, t_x_blinding, e_blinding, ipp_proof)
