from __future__ import annotations

import random

import pytest

from vmpckit.libs.crypto import VMPC, InvalidKeyOrIVSize
from vmpckit.libs.crypto import vmpc

_rng = random.Random(20251123)


def randbytes(n: int) -> bytes:
    return bytes(_rng.randrange(0, 256) for _ in range(n))


# Test key and IV published at http://www.vmpcfunction.com/cipher.htm
KEY = bytes.fromhex("9661410AB797D8A9EB767C21172DF6C7")
IV = bytes.fromhex("4B5C2F003E67F39557A8D26F3DA2B155")

STREAM_LEN = 102400

VECTORS_KSA = [
    (0, 0xA8), (1, 0x24), (2, 0x79), (3, 0xF5),
    (252, 0xB8), (253, 0xFC), (254, 0x66), (255, 0xA4),
    (1020, 0xE0), (1021, 0x56), (1022, 0x40), (1023, 0xA5),
    (102396, 0x81), (102397, 0xCA), (102398, 0x49), (102399, 0x9A),
]  # fmt: skip

VECTORS_KSA3 = [
    (0, 0xB6), (1, 0xEB), (2, 0xAE), (3, 0xFE),
    (252, 0x48), (253, 0x17), (254, 0x24), (255, 0x73),
    (1020, 0x1D), (1021, 0xAE), (1022, 0xC3), (1023, 0x5A),
    (102396, 0x1D), (102397, 0xA7), (102398, 0xE1), (102399, 0xDC),
]  # fmt: skip


@pytest.fixture(scope="module")
def stream_ksa() -> bytes:
    return vmpc.new(KEY, IV).crypt(bytes(STREAM_LEN))


@pytest.fixture(scope="module")
def stream_ksa3() -> bytes:
    return vmpc.new3(KEY, IV).crypt(bytes(STREAM_LEN))


# ===========================================================
# Known-answer vectors
# ===========================================================


@pytest.mark.parametrize("idx,val", VECTORS_KSA)
def test_known_answer_standard(stream_ksa, idx, val):
    assert stream_ksa[idx] == val


@pytest.mark.parametrize("idx,val", VECTORS_KSA3)
def test_known_answer_ksa3(stream_ksa3, idx, val):
    assert stream_ksa3[idx] == val


def test_ksa3_keyword_matches_factory(stream_ksa3):
    cipher = VMPC(KEY, IV, ksa3=True)
    assert cipher.keystream(1024) == stream_ksa3[:1024]


def test_ksa3_equals_manual_key_iv_key_passes(stream_ksa3):
    cipher = VMPC(KEY, IV)
    cipher.schedule(KEY)
    assert cipher.keystream(256) == stream_ksa3[:256]


def test_keystream_equals_crypt_of_zero_bytes(stream_ksa):
    assert vmpc.new(KEY, IV).keystream(4096) == stream_ksa[:4096]


# ===========================================================
# Key / IV length validation
# ===========================================================


@pytest.mark.parametrize("n", list(range(0, 16)) + [65, 66, 100, 256])
def test_invalid_key_size(n):
    with pytest.raises(InvalidKeyOrIVSize) as excinfo:
        VMPC(randbytes(n))
    assert excinfo.value.size == n


@pytest.mark.parametrize("n", [1, 15, 65, 128])
def test_invalid_iv_size(n):
    with pytest.raises(InvalidKeyOrIVSize) as excinfo:
        VMPC(randbytes(16), randbytes(n))
    assert excinfo.value.size == n


@pytest.mark.parametrize("n", [16, 40, 64])
@pytest.mark.parametrize("ksa3", [False, True])
def test_valid_sizes(n, ksa3):
    cipher = VMPC(randbytes(n), randbytes(n), ksa3=ksa3)
    assert sorted(cipher.permutation) == list(range(256))


def test_invalid_size_is_value_error():
    with pytest.raises(ValueError, match="invalid key/iv size 8"):
        vmpc.new(b"\x00" * 8)


def test_schedule_rejects_bad_size_without_mutation():
    cipher = VMPC(KEY)
    before = (cipher.permutation, cipher.running_state)
    with pytest.raises(InvalidKeyOrIVSize):
        cipher.schedule(b"short")
    assert (cipher.permutation, cipher.running_state) == before


# ===========================================================
# IV handling
# ===========================================================


def test_empty_iv_is_no_iv():
    key = randbytes(32)
    a = VMPC(key).keystream(2048)
    b = VMPC(key, b"").keystream(2048)
    c = VMPC(key, bytearray()).keystream(2048)
    assert a == b == c


def test_empty_iv_is_no_iv_ksa3():
    key = randbytes(32)
    assert VMPC(key, ksa3=True).keystream(512) == vmpc.new3(key, b"").keystream(512)


def test_iv_changes_keystream():
    key = randbytes(16)
    assert VMPC(key).keystream(64) != VMPC(key, randbytes(16)).keystream(64)


def test_schedule_carries_running_state():
    cipher = VMPC(KEY)
    s_after_key = cipher.running_state
    cipher.schedule(IV)

    restarted = VMPC(KEY)
    restarted._s = 0
    restarted.schedule(IV)

    assert vmpc.new(KEY, IV).permutation == cipher.permutation
    if s_after_key != 0:
        assert restarted.permutation != cipher.permutation


# ===========================================================
# Encryption / decryption
# ===========================================================


@pytest.mark.parametrize("ksa3", [False, True])
@pytest.mark.parametrize("n", [0, 1, 255, 256, 257, 1000, 4096])
def test_encrypt_decrypt_roundtrip(ksa3, n):
    key = randbytes(64)
    iv = randbytes(64)
    pt = randbytes(n)

    ct = VMPC(key, iv, ksa3=ksa3).encrypt(pt)
    assert len(ct) == n
    assert VMPC(key, iv, ksa3=ksa3).decrypt(ct) == pt


def test_ciphertext_differs_from_plaintext():
    pt = b"The quick brown fox jumps over the lazy dog"
    assert VMPC(KEY, IV).crypt(pt) != pt


def test_empty_input_leaves_state_untouched():
    cipher = VMPC(KEY, IV)
    before = (cipher.permutation, cipher.running_state)
    assert cipher.crypt(b"") == b""
    assert (cipher.permutation, cipher.running_state) == before


@pytest.mark.parametrize("chunk", [256, 512, 1024])
def test_incremental_calls_match_one_shot(stream_ksa, chunk):
    cipher = vmpc.new(KEY, IV)
    out = bytearray()
    for _ in range(0, 8192, chunk):
        out += cipher.crypt(bytes(chunk))
    assert bytes(out) == stream_ksa[:8192]


def test_incremental_index_restarts_per_call(stream_ksa):
    cipher = vmpc.new(KEY, IV)
    first = cipher.crypt(bytes(100))
    second = cipher.crypt(bytes(100))
    assert first == stream_ksa[:100]
    assert first + second != stream_ksa[:200]


def test_crypt_into_in_place(stream_ksa):
    buf = bytearray(1024)
    vmpc.new(KEY, IV).crypt_into(buf)
    assert bytes(buf) == stream_ksa[:1024]


def test_crypt_into_memoryview_slice(stream_ksa):
    buf = bytearray(b"\xff" * 16 + bytes(512))
    vmpc.new(KEY, IV).crypt_into(memoryview(buf)[16:])
    assert buf[:16] == b"\xff" * 16
    assert bytes(buf[16:]) == stream_ksa[:512]


def test_crypt_into_rejects_readonly_buffer():
    with pytest.raises(TypeError):
        vmpc.new(KEY, IV).crypt_into(bytes(16))


def test_accepts_bytes_like_key_and_data():
    pt = randbytes(300)
    ct = VMPC(bytearray(KEY), memoryview(IV)).crypt(memoryview(pt))
    assert VMPC(KEY, IV).crypt(bytearray(ct)) == pt


def test_negative_keystream_length():
    with pytest.raises(ValueError):
        VMPC(KEY).keystream(-1)


@pytest.mark.parametrize("data", [5, 0, "text", [1, 2, 3]])
def test_crypt_rejects_non_bytes_input(data):
    cipher = VMPC(KEY, IV)
    before = (cipher.permutation, cipher.running_state)
    with pytest.raises(TypeError):
        cipher.crypt(data)
    assert (cipher.permutation, cipher.running_state) == before


# ===========================================================
# Permutation invariant
# ===========================================================


def test_permutation_invariant_after_every_step():
    cipher = VMPC(randbytes(40), randbytes(24), ksa3=True)
    assert sorted(cipher.permutation) == list(range(256))
    for n in (1, 7, 256, 300, 1):
        cipher.crypt(randbytes(n))
        assert sorted(cipher.permutation) == list(range(256))
        assert 0 <= cipher.running_state <= 255


def test_permutation_snapshot_is_a_copy():
    cipher = VMPC(KEY)
    snap = cipher.permutation
    cipher.crypt(bytes(10))
    assert snap != cipher.permutation


# ===========================================================
# Wipe
# ===========================================================


def test_wipe_zeroes_state():
    cipher = VMPC(KEY, IV, ksa3=True)
    cipher.crypt(randbytes(77))
    cipher.wipe()
    assert cipher.permutation == (0,) * 256
    assert cipher.running_state == 0
    assert cipher.is_wiped


def test_wipe_is_idempotent():
    cipher = VMPC(KEY)
    cipher.wipe()
    cipher.wipe()
    assert cipher.permutation == (0,) * 256
    assert cipher.running_state == 0


def test_crypt_after_wipe_raises():
    cipher = VMPC(KEY)
    cipher.wipe()
    with pytest.raises(ValueError, match="wiped"):
        cipher.crypt(b"data")


def test_context_manager_wipes_on_exit():
    with VMPC(KEY, IV) as cipher:
        assert not cipher.is_wiped
        cipher.crypt(b"payload")
    assert cipher.is_wiped
    assert cipher.permutation == (0,) * 256


def test_context_manager_wipes_on_error():
    with pytest.raises(RuntimeError):
        with VMPC(KEY) as cipher:
            raise RuntimeError("boom")
    assert cipher.is_wiped


def test_cipher_keeps_no_key_reference():
    key = bytearray(KEY)
    cipher = VMPC(key, IV)
    assert all(value is not key for value in vars(cipher).values())
