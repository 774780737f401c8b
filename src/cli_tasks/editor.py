"""External editor round-trip for editing a task description."""

from __future__ import annotations

import logging
import os
from pathlib import Path
import shlex
import subprocess
import tempfile

from .models import ConfigError, EditorLaunchError, TempFileError


logger = logging.getLogger(__name__)

TEMP_PREFIX = "task-"
TEMP_SUFFIX = ".txt"


def resolve_editor(configured: str | None = None, environ: dict[str, str] | None = None) -> list[str]:
    """Return the editor command as an argv list.

    ``EDITOR`` wins over the config file value. The value is split
    shell-style so commands like ``code --wait`` work.
    """
    env = os.environ if environ is None else environ
    raw = (env.get("EDITOR") or "").strip() or (configured or "").strip()
    if not raw:
        raise ConfigError("No editor configured. Set the EDITOR environment variable.")
    try:
        command = shlex.split(raw)
    except ValueError as exc:
        raise ConfigError(f"Unable to parse editor command {raw!r}: {exc}") from exc
    if not command:
        raise ConfigError("No editor configured. Set the EDITOR environment variable.")
    return command


def _write_buffer(text: str) -> Path:
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            prefix=TEMP_PREFIX,
            suffix=TEMP_SUFFIX,
            delete=False,
        ) as fh:
            fh.write(text)
    except OSError as exc:
        raise TempFileError(f"Unable to create edit buffer: {exc}") from exc
    return Path(fh.name)


def _read_buffer(path: Path) -> str:
    try:
        with path.open("r", encoding="utf-8", newline="") as fh:
            return fh.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise TempFileError(f"Unable to read edit buffer {path}: {exc}") from exc


def run_editor(command: list[str], path: Path) -> int:
    cmd = [*command, str(path)]
    cmd_text = shlex.join(cmd)
    logger.debug("Launching editor: %s", cmd_text)
    try:
        result = subprocess.run(cmd, check=False)
    except FileNotFoundError as exc:
        raise EditorLaunchError(f"Editor not found: {command[0]}") from exc
    except OSError as exc:
        raise EditorLaunchError(f"Unable to run `{cmd_text}` ({exc}).") from exc
    if result.returncode != 0:
        logger.warning("`%s` exited with code %d; keeping file contents.", cmd_text, result.returncode)
    return result.returncode


def edit_text(text: str, command: list[str]) -> tuple[str, Path]:
    """Open ``text`` in the editor and return the saved contents verbatim.

    The buffer path is returned with the contents so the caller can remove
    it once the edit has been stored.
    """
    path = _write_buffer(text)
    run_editor(command, path)
    return _read_buffer(path), path


def discard_buffer(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.warning("Unable to remove edit buffer %s: %s", path, exc)
