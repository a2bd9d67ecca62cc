"""R1CS 테스트 공용 fixture."""

import pytest

from bulletproofs.generators import BulletproofGens, PedersenGens


@pytest.fixture(scope="session")
def pc_gens():
    return PedersenGens()


@pytest.fixture(scope="session")
def bp_gens():
    """테스트 회로의 최대 패딩 크기(16)를 덮는 생성자."""
    return BulletproofGens(gens_capacity=16)
