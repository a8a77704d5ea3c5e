from __future__ import annotations

import binascii
from pathlib import Path
from typing import Any

from vmpckit.schemas import CipherConfig, LogConfig


class ConfigAdapter:
    """Typed accessor over a loaded settings mapping.

    Values in ``[cipher]`` override those in ``[general]``; anything missing
    falls back to the dataclass defaults.

    Args:
        config (dict[str, Any]): Settings mapping, usually from
            :func:`load_config`.
    """

    def __init__(self, config: dict[str, Any]) -> None:
        self._config: dict[str, Any] = dict(config)

    def get_config(self) -> dict[str, Any]:
        """Return the full raw configuration mapping."""
        return self._config

    def get_cipher_config(self) -> CipherConfig:
        """Build a CipherConfig from ``[general]`` and ``[cipher]``.

        Returns:
            CipherConfig: Resolved cipher defaults.

        Raises:
            ValueError: If ``key`` or ``iv`` is not valid hex, or
                ``chunk_size`` is not a positive integer.
        """
        cfg = {**self._gen_cfg(), **self._cipher_cfg()}

        key = self._hex_field(cfg, "key")
        iv = self._hex_field(cfg, "iv")

        chunk_size = cfg.get("chunk_size", 65536)
        if (
            isinstance(chunk_size, bool)
            or not isinstance(chunk_size, int)
            or chunk_size <= 0
        ):
            raise ValueError(f"chunk_size must be a positive integer, got {chunk_size!r}")

        return CipherConfig(
            key=key or None,
            iv=iv,
            ksa3=bool(cfg.get("ksa3", False)),
            chunk_size=chunk_size,
        )

    def get_log_config(self) -> LogConfig:
        """Build a LogConfig from ``[general.debug]``."""
        debug_cfg = self._gen_cfg().get("debug") or {}
        return LogConfig(
            log_level=self.get_log_level(),
            log_dir=debug_cfg.get("log_dir") or None,
        )

    def get_log_level(self) -> str:
        """Return the configured logging level.

        Returns:
            str: Logging level or ``"INFO"`` if missing.
        """
        debug_cfg = self._gen_cfg().get("debug") or {}
        return str(debug_cfg.get("log_level") or "INFO").upper()

    def get_log_dir(self) -> Path | None:
        """Return the absolute log directory, or None if file logging is off."""
        log_dir = self.get_log_config().log_dir
        return Path(log_dir).expanduser().resolve() if log_dir else None

    def _gen_cfg(self) -> dict[str, Any]:
        general = self._config.get("general")
        return general if isinstance(general, dict) else {}

    def _cipher_cfg(self) -> dict[str, Any]:
        cipher = self._config.get("cipher")
        return cipher if isinstance(cipher, dict) else {}

    @staticmethod
    def _hex_field(cfg: dict[str, Any], name: str) -> bytes:
        """Decode a hex string field; missing or empty yields ``b""``.

        Raises:
            ValueError: If the value is not a string of hex digits.
        """
        raw = cfg.get(name) or ""
        if not isinstance(raw, str):
            raise ValueError(f"{name} must be a hex string, got {type(raw).__name__}")
        try:
            return bytes.fromhex(raw)
        except ValueError as e:
            raise ValueError(f"{name} is not valid hex: {e}") from e
