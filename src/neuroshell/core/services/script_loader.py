"""
Script file loading.

A script is a text file of command lines. Blank lines and `%%` comments are
dropped, and a line ending in `...` is joined with the line after it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from neuroshell.constants import (
    COMMAND_ESCAPE,
    COMMENT_PREFIX,
    LINE_CONTINUATION,
    SCRIPT_EXTENSION,
)
from neuroshell.core.common.exceptions import ScriptLoadError

logger = logging.getLogger(__name__)


def split_script_lines(text: str) -> list[str]:
    """Turn script text into executable lines."""
    lines: list[str] = []
    pending: list[str] = []

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not pending and (not line or line.startswith(COMMENT_PREFIX)):
            continue
        if line.endswith(LINE_CONTINUATION):
            pending.append(line[: -len(LINE_CONTINUATION)].rstrip())
            continue
        pending.append(line)
        joined = " ".join(part for part in pending if part)
        pending = []
        if joined:
            lines.append(joined)

    if pending:
        joined = " ".join(part for part in pending if part)
        if joined:
            lines.append(joined)
    return lines


def script_command_line(path: str, arguments: str = "") -> str:
    """Build the command line that runs `path` with `arguments`.

    Raises:
        ScriptLoadError: If the path is empty or contains whitespace or `[`,
            which the parser would split off as a message or options
    """
    if not path or "[" in path or any(ch.isspace() for ch in path):
        raise ScriptLoadError(
            f"Script path '{path}' cannot be run: it must be non-empty and "
            "contain no whitespace or '['",
            path=path,
        )
    line = f"{COMMAND_ESCAPE}{path}"
    if arguments.strip():
        line = f"{line} {arguments.strip()}"
    return line


class ScriptLoader:
    """Resolves and reads script files."""

    def __init__(
        self,
        base_dir: str | Path | None = None,
        extension: str = SCRIPT_EXTENSION,
    ) -> None:
        self._base_dir = Path(base_dir) if base_dir is not None else None
        self._extension = extension

    @property
    def extension(self) -> str:
        return self._extension

    def is_script(self, name: str) -> bool:
        return name.endswith(self._extension) and len(name) > len(self._extension)

    def resolve(self, name: str) -> Path:
        """Map a script name to an existing file.

        Raises:
            ScriptLoadError: If the path escapes with '..' or does not exist
        """
        if ".." in Path(name).parts:
            raise ScriptLoadError(
                f"Script path '{name}' must not contain '..'", path=name
            )
        path = Path(name).expanduser()
        if not path.is_absolute() and self._base_dir is not None:
            path = self._base_dir / path
        if not path.is_file():
            raise ScriptLoadError(f"Script not found: {name}", path=name)
        return path

    def load(self, name: str) -> list[str]:
        path = self.resolve(name)
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ScriptLoadError(f"Cannot read script {name}: {exc}", path=name) from exc
        lines = split_script_lines(text)
        logger.debug("Loaded %d line(s) from %s", len(lines), path)
        return lines
