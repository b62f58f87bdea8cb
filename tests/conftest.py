import pytest

SUNSCREEN = (b"Ladies and Gentlemen of the class of '99: If I could offer you only one tip "
             b"for the future, sunscreen would be it.")


@pytest.fixture
def rfc_key():
    return bytes(range(32))


@pytest.fixture
def rfc_nonce():
    return bytes.fromhex("000000000000004a00000000")


@pytest.fixture
def sunscreen():
    return SUNSCREEN
