"""
Command-line entry point: ``vmpckit crypt``, ``vmpckit keystream``,
``vmpckit config init`` and ``vmpckit config export``.
"""

from __future__ import annotations

import argparse
import logging
import sys
from contextlib import ExitStack
from pathlib import Path
from typing import BinaryIO

from vmpckit.infra.config import (
    ConfigAdapter,
    copy_default_config,
    load_config,
    save_config_file,
)
from vmpckit.infra.logger import setup_logging
from vmpckit.infra.paths import DEFAULT_CONFIG_FILENAME
from vmpckit.libs.crypto import VMPC, InvalidKeyOrIVSize, crypt_stream
from vmpckit.schemas import CipherConfig
from vmpckit.version import __version__

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_IO_ERROR = 1
EXIT_USAGE = 2


def _hex_bytes(value: str) -> bytes:
    try:
        return bytes.fromhex(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not a hex string: {value!r}") from e


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from e
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value}")
    return number


def _add_cipher_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-k", "--key", type=_hex_bytes, help="key as hex (16-64 bytes)")
    parser.add_argument("--iv", type=_hex_bytes, help="IV as hex (16-64 bytes)")
    parser.add_argument(
        "--ksa3",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="use the KSA3 key scheduling",
    )
    parser.add_argument("-o", "--output", type=Path, help="output file (default: stdout)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vmpckit",
        description="Encrypt and decrypt data with the VMPC stream cipher.",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("-c", "--config", type=Path, help="settings file")
    parser.add_argument("--log-level", help="override the configured log level")

    sub = parser.add_subparsers(dest="command", required=True)

    crypt = sub.add_parser(
        "crypt",
        aliases=["encrypt", "decrypt"],
        help="XOR input with the keystream",
    )
    _add_cipher_args(crypt)
    crypt.add_argument("-i", "--input", type=Path, help="input file (default: stdin)")
    crypt.add_argument("--chunk-size", type=_positive_int, help="bytes per cipher call")
    crypt.set_defaults(func=cmd_crypt)

    ks = sub.add_parser("keystream", help="write raw keystream bytes")
    _add_cipher_args(ks)
    ks.add_argument("-n", "--length", type=_positive_int, required=True)
    ks.add_argument("--hex", action="store_true", help="write hex instead of raw bytes")
    ks.set_defaults(func=cmd_keystream)

    config = sub.add_parser("config", help="manage the settings file")
    config_sub = config.add_subparsers(dest="config_command", required=True)
    init = config_sub.add_parser("init", help="write the sample settings file")
    init.add_argument("path", nargs="?", type=Path, default=Path(DEFAULT_CONFIG_FILENAME))
    init.add_argument("--force", action="store_true", help="overwrite an existing file")
    init.set_defaults(func=cmd_config_init)

    export = config_sub.add_parser(
        "export",
        help="save a TOML/JSON settings file as the per-user settings.json",
    )
    export.add_argument(
        "source", nargs="?", type=Path, default=Path(DEFAULT_CONFIG_FILENAME)
    )
    export.add_argument(
        "-o", "--output", type=Path, help="destination (default: per-user settings)"
    )
    export.set_defaults(func=cmd_config_export)

    return parser


def _load_settings(config_path: Path | None) -> ConfigAdapter:
    try:
        return ConfigAdapter(load_config(config_path))
    except FileNotFoundError:
        logger.debug("No settings file found, using defaults")
        return ConfigAdapter({})


def _resolve_cipher_config(args: argparse.Namespace, adapter: ConfigAdapter) -> CipherConfig:
    """Merge command-line options over the configured cipher defaults."""
    cfg = adapter.get_cipher_config()
    if args.key is not None:
        cfg.key = args.key
    if args.iv is not None:
        cfg.iv = args.iv
    if args.ksa3 is not None:
        cfg.ksa3 = args.ksa3
    if getattr(args, "chunk_size", None) is not None:
        cfg.chunk_size = args.chunk_size
    if not cfg.key:
        raise ValueError("No key given (use --key or set [cipher].key)")
    return cfg


def _open_output(stack: ExitStack, path: Path | None) -> BinaryIO:
    if path is None:
        return sys.stdout.buffer
    path.parent.mkdir(parents=True, exist_ok=True)
    return stack.enter_context(path.open("wb"))


def cmd_crypt(args: argparse.Namespace, adapter: ConfigAdapter) -> int:
    cfg = _resolve_cipher_config(args, adapter)

    with ExitStack() as stack:
        cipher = stack.enter_context(VMPC(cfg.key, cfg.iv, ksa3=cfg.ksa3))
        src: BinaryIO = (
            stack.enter_context(args.input.open("rb"))
            if args.input is not None
            else sys.stdin.buffer
        )
        dst = _open_output(stack, args.output)
        total = crypt_stream(cipher, src, dst, cfg.chunk_size)
        dst.flush()

    logger.info("Processed %d bytes (ksa3=%s, iv=%s)", total, cfg.ksa3, bool(cfg.iv))
    return EXIT_OK


def cmd_keystream(args: argparse.Namespace, adapter: ConfigAdapter) -> int:
    cfg = _resolve_cipher_config(args, adapter)

    with ExitStack() as stack:
        cipher = stack.enter_context(VMPC(cfg.key, cfg.iv, ksa3=cfg.ksa3))
        data = cipher.keystream(args.length)
        dst = _open_output(stack, args.output)
        dst.write(data.hex().encode("ascii") + b"\n" if args.hex else data)
        dst.flush()

    return EXIT_OK


def cmd_config_init(args: argparse.Namespace, adapter: ConfigAdapter) -> int:
    copy_default_config(args.path, overwrite=args.force)
    return EXIT_OK


def cmd_config_export(args: argparse.Namespace, adapter: ConfigAdapter) -> int:
    save_config_file(args.source, args.output)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        adapter = _load_settings(args.config)
        log_cfg = adapter.get_log_config()
        setup_logging(args.log_level or log_cfg.log_level, log_cfg.log_dir)
        return args.func(args, adapter)
    except InvalidKeyOrIVSize as e:
        logger.error("Invalid key or IV length: %d bytes (expected 16-64)", e.size)
        return EXIT_USAGE
    except ValueError as e:
        logger.error("%s", e)
        return EXIT_USAGE
    except OSError as e:
        logger.error("I/O error: %s", e)
        return EXIT_IO_ERROR
