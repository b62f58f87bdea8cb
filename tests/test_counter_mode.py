import numpy as np
import pytest

import arxstream.stream_mode.counter_mode as counter_mode
from arxstream.cipher_core import generate_block
from arxstream.stream_mode import ChaCha20, apply, decrypt, encrypt, keystream

SUNSCREEN_CIPHERTEXT = bytes.fromhex(
    "6e2e359a2568f98041ba0728dd0d6981"
    "e97e7aec1d4360c20a27afccfd9fae0b"
    "f91b65c5524733ab8f593dabcd62b357"
    "1639d624e65152ab8f530c359f0861d8"
    "07ca0dbf500d6a6156a38e088a22b65e"
    "52bc514d16ccf806818ce91ab7793736"
    "5af90bbf74a35be6b40b8eedf2785e42"
    "874d"
)


@pytest.fixture
def recorded_counters(monkeypatch):
    """Record the counter of every block the scalar engine generates."""
    counters = []
    original = counter_mode.block_words

    def recording(state, rounds):
        counters.append(state[12])
        return original(state, rounds)

    monkeypatch.setattr(counter_mode, "block_words", recording)
    return counters


@pytest.mark.parametrize("vectorized", [False, True])
def test_rfc_encryption_vector(rfc_key, rfc_nonce, sunscreen, vectorized):
    out = bytearray(len(sunscreen))
    apply(out, sunscreen, rfc_key, rfc_nonce, 1, vectorized=vectorized)
    assert bytes(out) == SUNSCREEN_CIPHERTEXT


def test_decrypt_vector(rfc_key, rfc_nonce, sunscreen):
    assert decrypt(SUNSCREEN_CIPHERTEXT, rfc_key, rfc_nonce, counter=1) == sunscreen


@pytest.mark.parametrize("length", [1, 63, 64, 65, 200, 1000])
def test_involution(length):
    key = bytes(range(32))
    nonce = bytes(range(12))
    data = bytes((i * 7) % 256 for i in range(length))

    ciphertext = bytearray(length)
    apply(ciphertext, data, key, nonce, 3)
    plaintext = bytearray(length)
    apply(plaintext, ciphertext, key, nonce, 3)

    assert bytes(ciphertext) != data
    assert bytes(plaintext) == data


@pytest.mark.parametrize("length, blocks", [(1, 1), (64, 1), (65, 2), (128, 2), (129, 3)])
def test_blocks_consumed_in_counter_order(recorded_counters, length, blocks):
    apply(bytearray(length), bytes(length), bytes(32), bytes(12), 10)
    assert recorded_counters == list(range(10, 10 + blocks))


def test_zero_length_generates_no_blocks(recorded_counters):
    out = bytearray()
    apply(out, b"", bytes(32), bytes(12), 0)
    assert out == bytearray()
    assert recorded_counters == []


def test_counter_wraps_in_engine(recorded_counters):
    apply(bytearray(130), bytes(130), bytes(32), bytes(12), 2 ** 32 - 1)
    assert recorded_counters == [2 ** 32 - 1, 0, 1]


def test_keystream_is_block_sequence():
    key = bytes(range(32))
    nonce = bytes(12)
    stream = keystream(key, nonce, 150, counter=4)
    expected = b''.join(generate_block(key, nonce, c) for c in (4, 5, 6))[:150]
    assert stream == expected


@pytest.mark.parametrize("vectorized", [False, True])
def test_partial_block_stays_inside_output(vectorized):
    backing = bytearray(b"\xaa" * 100)
    view = memoryview(backing)[:70]

    apply(view, bytes(70), bytes(32), bytes(12), 0, vectorized=vectorized)

    expected = (generate_block(bytes(32), bytes(12), 0) + generate_block(bytes(32), bytes(12), 1))[:70]
    assert bytes(backing[:70]) == expected
    assert bytes(backing[70:]) == b"\xaa" * 30


def test_in_place_operation():
    key = bytes(range(32))
    nonce = bytes(12)
    data = bytes(range(256)) * 3
    buffer = bytearray(data)

    apply(buffer, buffer, key, nonce, 0)
    expected = bytearray(len(data))
    apply(expected, data, key, nonce, 0)

    assert buffer == expected


def test_numpy_buffers():
    data = np.arange(300, dtype=np.uint8)
    out = np.zeros(300, dtype=np.uint8)
    apply(out, data, bytes(32), bytes(12), 0)

    reference = bytearray(300)
    apply(reference, data.tobytes(), bytes(32), bytes(12), 0)
    assert out.tobytes() == bytes(reference)


@pytest.mark.parametrize("length", [0, 1, 64, 1000, 64 * 1024 + 17, 3 * 64 * 1024])
def test_vectorized_matches_scalar(length):
    key = bytes(range(32, 64))
    nonce = bytes(range(12))
    data = bytes(i % 251 for i in range(length))

    scalar = bytearray(length)
    apply(scalar, data, key, nonce, 2 ** 32 - 5)
    vector = bytearray(length)
    apply(vector, data, key, nonce, 2 ** 32 - 5, vectorized=True)

    assert vector == scalar


@pytest.mark.parametrize("kwargs", [
    dict(key=bytes(31), nonce=bytes(12), initial_counter=0),
    dict(key=bytes(32), nonce=bytes(13), initial_counter=0),
    dict(key=bytes(32), nonce=bytes(12), initial_counter=-1),
    dict(key=bytes(32), nonce=bytes(12), initial_counter=0, rounds=5),
])
def test_invalid_parameters_leave_output_untouched(recorded_counters, kwargs):
    out = bytearray(b"\x11" * 10)
    with pytest.raises(ValueError):
        apply(out, bytes(10), **kwargs)
    assert out == bytearray(b"\x11" * 10)
    assert recorded_counters == []


def test_length_mismatch_rejected(recorded_counters):
    out = bytearray(b"\x11" * 10)
    with pytest.raises(ValueError, match="length"):
        apply(out, bytes(11), bytes(32), bytes(12), 0)
    assert out == bytearray(b"\x11" * 10)
    assert recorded_counters == []


def test_readonly_output_rejected():
    with pytest.raises(ValueError, match="writable"):
        apply(bytes(10), bytes(10), bytes(32), bytes(12), 0)


def test_non_buffer_input_rejected():
    with pytest.raises(ValueError):
        apply(bytearray(5), "hello", bytes(32), bytes(12), 0)


class TestChaCha20:

    def test_counter_advances_per_block(self):
        cipher = ChaCha20(bytes(32), bytes(12), initial_counter=5)
        assert cipher.counter == 5
        cipher.crypt(bytes(65))
        assert cipher.counter == 7
        cipher.crypt(b"")
        assert cipher.counter == 7

    def test_each_call_starts_on_fresh_block(self):
        key = bytes(range(32))
        nonce = bytes(12)
        cipher = ChaCha20(key, nonce)

        first = cipher.keystream(10)
        second = cipher.keystream(10)

        assert first == generate_block(key, nonce, 0)[:10]
        assert second == generate_block(key, nonce, 1)[:10]

    def test_reset_counter(self):
        cipher = ChaCha20(bytes(32), bytes(12))
        first = cipher.crypt(b"attack at dawn")
        cipher.reset_counter(0)
        assert cipher.crypt(first) == b"attack at dawn"

        with pytest.raises(ValueError):
            cipher.reset_counter(2 ** 32)

    def test_crypt_into(self, rfc_key, rfc_nonce, sunscreen):
        cipher = ChaCha20(rfc_key, rfc_nonce, initial_counter=1)
        out = bytearray(len(sunscreen))
        cipher.crypt_into(sunscreen, out)
        assert bytes(out) == SUNSCREEN_CIPHERTEXT
        assert cipher.counter == 3

    def test_vectorized_instance_matches(self, rfc_key, rfc_nonce, sunscreen):
        cipher = ChaCha20(rfc_key, rfc_nonce, initial_counter=1, vectorized=True)
        assert cipher.crypt(sunscreen) == SUNSCREEN_CIPHERTEXT
        assert cipher.counter == 3

    def test_failed_call_keeps_counter(self):
        cipher = ChaCha20(bytes(32), bytes(12), initial_counter=9)
        with pytest.raises(ValueError):
            cipher.crypt_into(bytes(10), bytearray(9))
        assert cipher.counter == 9

    def test_counter_wraps(self):
        cipher = ChaCha20(bytes(32), bytes(12), initial_counter=2 ** 32 - 1)
        cipher.crypt(bytes(128))
        assert cipher.counter == 1

    def test_bad_construction(self):
        with pytest.raises(ValueError):
            ChaCha20(bytes(32), bytes(8))
        with pytest.raises(ValueError):
            ChaCha20(bytes(32), bytes(12), rounds=3)

    def test_bad_keystream_length(self):
        with pytest.raises(ValueError):
            ChaCha20(bytes(32), bytes(12)).keystream(-1)


def test_encrypt_generates_nonce():
    key = bytes(range(32))
    ciphertext, nonce = encrypt(b"hello world", key)
    assert len(nonce) == 12
    assert decrypt(ciphertext, key, nonce) == b"hello world"


def test_encrypt_with_given_nonce(rfc_key, rfc_nonce, sunscreen):
    ciphertext, nonce = encrypt(sunscreen, rfc_key, rfc_nonce, counter=1)
    assert nonce == rfc_nonce
    assert ciphertext == SUNSCREEN_CIPHERTEXT


@pytest.mark.parametrize("vectorized", [False, True])
@pytest.mark.parametrize("counter", [np.uint32(1), np.int64(1)])
def test_numpy_integer_initial_counter(rfc_key, rfc_nonce, sunscreen, counter, vectorized):
    out = bytearray(len(sunscreen))
    apply(out, sunscreen, rfc_key, rfc_nonce, counter, vectorized=vectorized)
    assert bytes(out) == SUNSCREEN_CIPHERTEXT


def test_numpy_integers_in_stateful_cipher():
    key = bytes(range(32))
    nonce = bytes(12)
    cipher = ChaCha20(key, nonce, initial_counter=np.uint32(2), rounds=np.int64(20))

    stream = cipher.keystream(np.int64(10))
    assert stream == generate_block(key, nonce, 2)[:10]
    assert cipher.counter == 3
    assert type(cipher.counter) is int

    cipher.reset_counter(np.uint32(2 ** 32 - 1))
    cipher.keystream(np.int64(65))
    assert cipher.counter == 1
    assert type(cipher.counter) is int


def test_module_keystream_numpy_length():
    key = bytes(range(32))
    assert keystream(key, bytes(12), np.int64(10), counter=np.uint32(4)) == generate_block(key, bytes(12), 4)[:10]
