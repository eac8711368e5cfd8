import sys
import os
import random
import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from zkp.sumcheck.field import make_field


# ── 테스트 상수 ──
SMALL_MODULUS = 97
TEST_SEED = 20240611


@pytest.fixture(scope="session")
def F97():
    """위수 97의 작은 체."""
    return make_field(SMALL_MODULUS)


@pytest.fixture
def rng():
    """테스트마다 같은 시드로 시작하는 난수 생성기."""
    return random.Random(TEST_SEED)
