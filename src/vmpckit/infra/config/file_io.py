from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any

from vmpckit.infra.paths import DEFAULT_CONFIG_FILE, SETTING_PATH

logger = logging.getLogger(__name__)

LOCAL_FILENAMES = ("settings.toml", "settings.json")


def _resolve_file_path(
    user_path: str | Path | None,
    local_filenames: tuple[str, ...],
    fallback_path: Path,
) -> Path | None:
    """
    Find the settings file to load.

    Candidates, first match wins:
        1. ``user_path``, when given and pointing at a file
        2. any of ``local_filenames`` in the current working directory
        3. ``fallback_path``

    An explicit ``user_path`` that does not exist only logs a warning; the
    remaining candidates are still tried.

    Args:
        user_path: Path passed by the caller, if any.
        local_filenames: File names looked up in the working directory.
        fallback_path: Per-user settings file.

    Returns:
        Resolved path, or None if nothing was found.
    """
    if user_path:
        path = Path(user_path).expanduser().resolve()
        if path.is_file():
            return path
        logger.warning("Specified file not found: %s", path)

    for name in local_filenames:
        local_path = (Path.cwd() / name).resolve()
        if local_path.is_file():
            logger.debug("Using local file: %s", local_path)
            return local_path

    if fallback_path.is_file():
        return fallback_path.resolve()

    return None


def _load_by_extension(path: Path) -> dict[str, Any]:
    """
    Parse a ``.toml`` or ``.json`` settings file.

    Args:
        path: Settings file path.

    Returns:
        Top-level mapping of the file.

    Raises:
        ValueError: On an unknown extension, a parse error, or a top-level
            value that is not a table/object.
    """
    ext = path.suffix.lower()

    if ext == ".toml":
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {path}: {e}") from e

    elif ext == ".json":
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

    else:
        raise ValueError(f"Unsupported config file extension: {ext}")

    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a dict, got {type(data)} in {path}")

    return data


def load_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """
    Load the settings mapping.

    Args:
        config_path: Optional explicit settings file.

    Returns:
        Parsed settings.

    Raises:
        FileNotFoundError: If no settings file exists at any candidate path.
        ValueError: If the file cannot be parsed.
    """
    path = _resolve_file_path(
        user_path=config_path,
        local_filenames=LOCAL_FILENAMES,
        fallback_path=SETTING_PATH,
    )

    if not path:
        raise FileNotFoundError("No valid config file found.")

    logger.debug("Loading configuration from: %s", path)
    return _load_by_extension(path)


def copy_default_config(target: Path, overwrite: bool = False) -> None:
    """
    Write the bundled sample settings to ``target``.

    Args:
        target: Destination file.
        overwrite: Replace an existing file instead of failing.

    Raises:
        FileExistsError: If ``target`` exists and ``overwrite`` is False.
    """
    if target.exists() and not overwrite:
        raise FileExistsError(f"Config file already exists: {target}")

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(DEFAULT_CONFIG_FILE.read_bytes())
    logger.info("Sample configuration written to: %s", target)


def save_config(
    config: dict[str, Any],
    output_path: str | Path | None = None,
) -> Path:
    """
    Write a settings mapping as JSON.

    Args:
        config: Settings mapping.
        output_path: Destination file; defaults to the per-user settings
            file that :func:`load_config` falls back to.

    Returns:
        Absolute path of the written file.

    Raises:
        OSError: If the file cannot be written.
    """
    output = Path(SETTING_PATH if output_path is None else output_path)
    output = output.expanduser().resolve()
    output.parent.mkdir(parents=True, exist_ok=True)

    try:
        with output.open("w", encoding="utf-8") as f:
            json.dump(config, f, indent=2, ensure_ascii=False)
    except OSError as e:
        logger.error("Failed to write config JSON '%s': %s", output, e)
        raise

    logger.info("Configuration saved to JSON: %s", output)
    return output


def save_config_file(
    source_path: str | Path,
    output_path: str | Path | None = None,
) -> Path:
    """
    Convert a TOML/JSON settings file into the JSON settings file.

    Args:
        source_path: Settings file to read.
        output_path: Destination file; defaults to the per-user settings file.

    Returns:
        Absolute path of the written file.

    Raises:
        FileNotFoundError: If ``source_path`` does not exist.
        ValueError: If ``source_path`` cannot be parsed.
    """
    source = Path(source_path).expanduser().resolve()
    if not source.is_file():
        raise FileNotFoundError(f"Source file not found: {source}")

    return save_config(_load_by_extension(source), output_path)
