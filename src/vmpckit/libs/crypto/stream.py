from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO

from .vmpc import VMPC

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 65536


def _read_chunk(src: BinaryIO, chunk_size: int) -> bytearray:
    """Read exactly ``chunk_size`` bytes, or fewer only at end of stream.

    Raw files, pipes and sockets may return short reads; those are joined so
    chunk boundaries do not depend on how the source delivers data.
    """
    buf = bytearray()
    while len(buf) < chunk_size:
        data = src.read(chunk_size - len(buf))
        if not data:
            break
        buf += data
    return buf


def crypt_stream(
    cipher: VMPC,
    src: BinaryIO,
    dst: BinaryIO,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """Encrypt/Decrypt a binary stream chunk by chunk.

    Every chunk is passed to a separate :meth:`VMPC.crypt_into` call, and the
    keystream position index restarts with each call. The decrypting side has
    to use the same ``chunk_size`` as the encrypting side.

    Args:
        cipher: Initialized cipher carrying the stream state.
        src: Readable binary stream.
        dst: Writable binary stream.
        chunk_size: Number of bytes processed per call. Defaults to 65536.

    Returns:
        Total number of bytes written to ``dst``.

    Raises:
        ValueError: If ``chunk_size`` is not positive.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be a positive integer")

    total = 0
    while buf := _read_chunk(src, chunk_size):
        cipher.crypt_into(buf)
        dst.write(buf)
        total += len(buf)

    logger.debug("Processed %d bytes in chunks of %d", total, chunk_size)
    return total


def crypt_file(
    cipher: VMPC,
    src_path: str | Path,
    dst_path: str | Path,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> int:
    """Encrypt/Decrypt a file into another file.

    Args:
        cipher: Initialized cipher carrying the stream state.
        src_path: Path of the input file.
        dst_path: Path of the output file. Missing parent directories are
            created.
        chunk_size: Number of bytes processed per call. Defaults to 65536.

    Returns:
        Total number of bytes written.
    """
    src = Path(src_path)
    dst = Path(dst_path)
    dst.parent.mkdir(parents=True, exist_ok=True)

    with src.open("rb") as fin, dst.open("wb") as fout:
        total = crypt_stream(cipher, fin, fout, chunk_size)

    logger.info("Wrote %d bytes: %s -> %s", total, src, dst)
    return total
