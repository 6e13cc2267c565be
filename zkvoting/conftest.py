import pytest

from zkvoting.crypto_utils.curves import ED25519, SECP256K1
from zkvoting.ecelgamal import ECEG_generate_keys


@pytest.fixture(params=[ED25519, SECP256K1], ids=["ed25519", "secp256k1"])
def curve(request):
    return request.param


@pytest.fixture
def keys(curve):
    """Paire (sk, Pub) de l'autorité sur la courbe testée"""
    return ECEG_generate_keys(curve)
