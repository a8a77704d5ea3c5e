"""
Pure Python implementation of the VMPC stream cipher.
"""

__all__ = [
    "VMPC",
    "InvalidKeyOrIVSize",
    "crypt_file",
    "crypt_stream",
    "new",
    "new3",
]

from .errors import InvalidKeyOrIVSize
from .stream import crypt_file, crypt_stream
from .vmpc import VMPC, new, new3
