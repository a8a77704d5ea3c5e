"""
Defines structured configuration models using dataclasses.
"""

from dataclasses import dataclass


@dataclass
class CipherConfig:
    """Default parameters for encrypting/decrypting streams.

    Attributes:
        key: Key bytes, or None when no key is configured.
        iv: Initialization vector bytes; empty means no IV.
        ksa3: Whether the KSA3 key scheduling is used.
        chunk_size: Number of bytes handed to the cipher per call.
    """

    key: bytes | None = None
    iv: bytes = b""
    ksa3: bool = False
    chunk_size: int = 65536


@dataclass
class LogConfig:
    """Logging configuration.

    Attributes:
        log_level: Name of the logging level, e.g. "INFO".
        log_dir: Directory for log files; None disables file logging.
    """

    log_level: str = "INFO"
    log_dir: str | None = None
