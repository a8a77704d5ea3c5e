"""
VMPC stream cipher with the standard and the KSA3 key scheduling.

See http://www.vmpcfunction.com/cipher.htm for the reference description
and test vectors.
"""

from __future__ import annotations

import types
from typing import Self

from .errors import InvalidKeyOrIVSize

BytesLike = bytes | bytearray | memoryview

key_size = range(16, 65)
iv_size = range(16, 65)

KSA_ROUNDS = 768


class VMPC:
    """VMPC cipher state: a byte permutation ``P`` and the running byte ``s``.

    Encryption and decryption are the same operation. Each instance carries
    one logical stream; successive :meth:`crypt` calls continue the keystream
    where the previous call stopped.
    """

    def __init__(
        self,
        key: BytesLike,
        iv: BytesLike = b"",
        *,
        ksa3: bool = False,
    ) -> None:
        """
        Args:
            key: Key bytes, 16 to 64 bytes long.
            iv: Initialization vector, 16 to 64 bytes long. An empty IV means
                "no IV" and skips the IV pass.
            ksa3: Run the key pass a second time after the IV pass.

        Raises:
            InvalidKeyOrIVSize: If the key or a non-empty IV has an invalid
                length.
        """
        self._P = list(range(256))
        self._s = 0
        self._wiped = False

        self.schedule(key)
        if len(iv):
            self.schedule(iv)
        if ksa3:
            self.schedule(key)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        self.wipe()

    @property
    def permutation(self) -> tuple[int, ...]:
        """Snapshot of the current permutation."""
        return tuple(self._P)

    @property
    def running_state(self) -> int:
        return self._s

    @property
    def is_wiped(self) -> bool:
        return self._wiped

    def schedule(self, material: BytesLike) -> None:
        """Run one 768-round KSA pass over a key or IV.

        The pass continues from the current running state, so chaining passes
        (key, IV, key) depends on the order they are applied in.

        Args:
            material: Key or IV bytes, 16 to 64 bytes long.

        Raises:
            InvalidKeyOrIVSize: If ``material`` has an invalid length. The
                state is not modified in that case.
        """
        with memoryview(material) as raw, raw.cast("B") as mv:
            mlen = len(mv)
            if mlen not in key_size:
                raise InvalidKeyOrIVSize(mlen)

            P = self._P
            s = self._s
            for m in range(KSA_ROUNDS):
                n = m & 0xFF
                s = P[(s + P[n] + mv[m % mlen]) & 0xFF]
                P[n], P[s] = P[s], P[n]
            self._s = s

    def crypt(self, data: BytesLike) -> bytes:
        """Encrypts/Decrypts data

        Args:
            data: Input bytes, either plaintext or ciphertext.

        Returns:
            Output bytes after XOR with the VMPC keystream.

        Raises:
            TypeError: If ``data`` is not a bytes-like object.
            ValueError: If the cipher state was wiped.
        """
        out = bytearray(memoryview(data))
        self.crypt_into(out)
        return bytes(out)

    encrypt = crypt
    decrypt = crypt

    def crypt_into(self, buffer: bytearray | memoryview) -> None:
        """XOR a writable buffer with the keystream in place.

        The positional index ``n`` used by the permutation update restarts at
        zero for every call, so splitting a message into chunks only yields
        the same output as a single call when every chunk but the last has a
        length that is a multiple of 256.

        Args:
            buffer: Writable bytes-like object, e.g. a ``bytearray``.

        Raises:
            ValueError: If the cipher state was wiped.
        """
        if self._wiped:
            raise ValueError("Cipher state has been wiped")

        with memoryview(buffer) as raw, raw.cast("B") as buf:
            P = self._P
            s = self._s
            for k in range(len(buf)):
                n = k & 0xFF
                s = P[(s + P[n]) & 0xFF]
                buf[k] ^= P[(P[P[s]] + 1) & 0xFF]
                P[n], P[s] = P[s], P[n]
            self._s = s

    def keystream(self, length: int) -> bytes:
        """Return ``length`` raw keystream bytes.

        Equivalent to encrypting ``length`` zero bytes.
        """
        if length < 0:
            raise ValueError("length must not be negative")
        return self.crypt(bytes(length))

    def wipe(self) -> None:
        """Zero the permutation and running state.

        After wiping, the instance no longer holds a permutation and refuses
        further transforms.
        """
        P = self._P
        for i in range(256):
            P[i] = 0
        self._s = 0
        self._wiped = True


def new(key: BytesLike, iv: BytesLike = b"") -> VMPC:
    """Create a VMPC cipher with the standard key scheduling."""
    return VMPC(key, iv)


def new3(key: BytesLike, iv: BytesLike = b"") -> VMPC:
    """Create a VMPC cipher with the KSA3 key scheduling (key, IV, key)."""
    return VMPC(key, iv, ksa3=True)
