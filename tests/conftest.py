import pytest

from evm_signature import Signature
from evm_signature.utils import SECP256K1_N
from tests.constants import MAINNET_V_28, TEST_R, TEST_S, TEST_S_INT


@pytest.fixture
def signature() -> Signature:
    """Create a signature with y_parity = 1 and no chain binding."""
    return Signature.from_({"r": TEST_R, "s": TEST_S, "v": 28})


@pytest.fixture
def chain_bound_signature() -> Signature:
    """Create a mainnet EIP-155 signature."""
    return Signature.from_({"r": TEST_R, "s": TEST_S, "v": MAINNET_V_28})


@pytest.fixture
def frozen_signature(signature: Signature) -> Signature:
    return signature.freeze()


@pytest.fixture
def high_s_int() -> int:
    """The high-s twin of TEST_S."""
    return SECP256K1_N - TEST_S_INT
