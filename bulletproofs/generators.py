"""
Pedersen / Bulletproofs 생성자(Generators)
============================================

증명 시스템의 공개 파라미터를 결정론적으로 생성한다.

**PedersenGens**:
  스칼라 하나에 대한 Pedersen 커밋먼트용 생성자 쌍 (B, B̃).
    Com(v, ṽ) = v·B + ṽ·B̃
  B는 G1 생성자, B̃는 레이블 해시로 얻은 점이다.

**BulletproofGens**:
  벡터 Pedersen 커밋먼트용 생성자 벡터 G = (G₀, G₁, ...), H = (H₀, H₁, ...).
  곱셈 게이트 배선 벡터 a_L, a_R, a_O에 커밋할 때 사용되며,
  패딩된 곱셈 게이트 수만큼 필요하다.

**신뢰 설정이 필요 없음**:
  KZG의 SRS와 달리 비밀 값 τ가 없다. 모든 점은 hash_to_point로
  얻으므로 서로 간의 이산로그를 아무도 모른다.

사용 예시:
    >>> pc_gens = PedersenGens()
    >>> bp_gens = BulletproofGens(gens_capacity=16)
    >>> len(bp_gens.G(8))  # 8
"""

from bulletproofs.field import G1, ec_add, ec_mul, hash_to_point


class PedersenGens:
    """스칼라 Pedersen 커밋먼트 생성자.

    속성:
        B: 값에 곱해지는 생성자 (G1 생성자)
        B_blinding: 블라인딩 인자에 곱해지는 생성자
    """

    def __init__(self, B=None, B_blinding=None):
        self.B = G1 if B is None else B
        if B_blinding is None:
            B_blinding = hash_to_point(b"PedersenGens.B_blinding")
        self.B_blinding = B_blinding

    def commit(self, value, blinding):
        """Com(value, blinding) = value·B + blinding·B_blinding"""
        return ec_add(ec_mul(self.B, value), ec_mul(self.B_blinding, blinding))


class BulletproofGens:
    """확장 가능한 벡터 커밋먼트 생성자.

    속성:
        gens_capacity: 현재 생성된 G, H 각각의 개수
        G_vec, H_vec: 생성자 리스트

    같은 label과 인덱스는 항상 같은 점을 만들므로,
    용량을 늘려도 기존 원소는 변하지 않는다.
    """

    def __init__(self, gens_capacity, label=b"BulletproofGens"):
        self.label = label
        self.gens_capacity = 0
        self.G_vec = []
        self.H_vec = []
        self.increase_capacity(gens_capacity)

    def increase_capacity(self, new_capacity):
        """용량을 new_capacity까지 늘린다 (줄이지는 않는다)."""
        for i in range(self.gens_capacity, new_capacity):
            index = i.to_bytes(4, "big")
            self.G_vec.append(hash_to_point(self.label + b".G" + index))
            self.H_vec.append(hash_to_point(self.label + b".H" + index))
        self.gens_capacity = max(self.gens_capacity, new_capacity)

    def G(self, n):
        """처음 n개의 G 생성자."""
        if n > self.gens_capacity:
            raise ValueError(f"G 생성자 {n}개를 요청했지만 용량은 {self.gens_capacity}입니다")
        return self.G_vec[:n]

    def H(self, n):
        """처음 n개의 H 생성자."""
        if n > self.gens_capacity:
            raise ValueError(f"H 생성자 {n}개를 요청했지만 용량은 {self.gens_capacity}입니다")
        return self.H_vec[:n]
