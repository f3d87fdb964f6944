"""
Parses command-language lines into structured commands.

The parser never raises: malformed input degrades to a best-effort command so
the interpreter stays usable interactively.
"""

import logging
import re
from collections.abc import Callable

from neuroshell.constants import COMMAND_ESCAPE, COMMENT_PREFIX, DEFAULT_COMMAND
from neuroshell.core.domain.parsed_command import ParsedCommand, ParseMode

logger = logging.getLogger(__name__)

_BRACKET_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_-]*")


def _scan(text: str, stop_chars: str, start_depth: int = 0) -> list[int]:
    """Return positions of top-level `stop_chars` in `text`.

    Characters inside quotes, after a backslash, or inside nested brackets are
    skipped. Double quotes open a quoted run anywhere; single quotes only at
    the start of a token, so apostrophes in plain words stay literal. A `]`
    that closes the bracket level `start_depth` is reported when `]` is among
    the stop characters.
    """
    positions: list[int] = []
    depth = start_depth
    quote_char: str | None = None
    escape_next = False
    token_start = True

    for index, char in enumerate(text):
        if escape_next:
            escape_next = False
            continue

        if quote_char is not None:
            if char == "\\":
                escape_next = True
            elif char == quote_char:
                quote_char = None
            continue

        if char == "\\":
            escape_next = True
            token_start = False
            continue

        if char == '"' or (char == "'" and token_start):
            quote_char = char
            token_start = False
            continue

        if char == "[":
            depth += 1
            token_start = True
            continue

        if char == "]":
            if depth == start_depth and "]" in stop_chars:
                positions.append(index)
                break
            if depth > 0:
                depth -= 1
            token_start = False
            continue

        if char in stop_chars and depth == start_depth:
            positions.append(index)
            token_start = True
            continue

        if char in ",=":
            token_start = True
        elif not char.isspace():
            token_start = False

    return positions


def _unquote(value: str) -> str:
    """Strip one level of surrounding quotes and unescape what they protect."""
    value = value.strip()
    if len(value) < 2 or value[0] not in "\"'" or value[-1] != value[0]:
        return value

    inner = value[1:-1]
    result: list[str] = []
    escape_next = False
    for char in inner:
        if escape_next:
            if char not in ("\\", '"', "'"):
                result.append("\\")
            result.append(char)
            escape_next = False
        elif char == "\\":
            escape_next = True
        else:
            result.append(char)
    if escape_next:
        result.append("\\")
    return "".join(result)


def split_options(content: str) -> dict[str, str]:
    """Parse KeyValue bracket content into an ordered option mapping.

    `a=1, b="x, y", flag` yields {"a": "1", "b": "x, y", "flag": ""}.
    """
    options: dict[str, str] = {}
    parts: list[str] = []
    cursor = 0
    for position in _scan(content, ","):
        parts.append(content[cursor:position])
        cursor = position + 1
    parts.append(content[cursor:])

    for part in parts:
        if not part.strip():
            continue
        equals = _scan(part, "=")
        if equals:
            key = _unquote(part[: equals[0]])
            value = _unquote(part[equals[0] + 1 :])
        else:
            key, value = _unquote(part), ""
        if not key:
            logger.debug("Ignoring option without a key: %r", part)
            continue
        options[key] = value
    return options


def find_bracket_end(text: str, open_index: int) -> int:
    """Return the index of the `]` that balances `text[open_index]`, or -1."""
    if open_index >= len(text) or text[open_index] != "[":
        return -1
    found = _scan(text[open_index + 1 :], "]")
    if not found:
        return -1
    return open_index + 1 + found[0]


class CommandParser:
    """Parses one line of command-language text into a ParsedCommand."""

    def __init__(
        self,
        parse_mode_resolver: Callable[[str], ParseMode] | None = None,
        default_command: Callable[[], str] | None = None,
    ) -> None:
        """Initialize the parser.

        Args:
            parse_mode_resolver: Maps a command name to its parse mode.
                Unknown names are treated as KeyValue.
            default_command: Returns the command name that wraps lines
                without a leading escape character.
        """
        self._parse_mode_resolver = parse_mode_resolver or (
            lambda _name: ParseMode.KEY_VALUE
        )
        self._default_command = default_command or (lambda: DEFAULT_COMMAND)

    def parse(self, line: str) -> ParsedCommand:
        """
        Parse a single line.

        Args:
            line: Raw input text.

        Returns:
            The parsed command. Blank lines and %% comments yield an empty
            command; text without a leading backslash yields the default
            command carrying the whole line as its message.
        """
        text = line.strip()
        if not text or text.startswith(COMMENT_PREFIX):
            return ParsedCommand.empty()

        if not text.startswith(COMMAND_ESCAPE):
            return self._wrap_default(text)

        body = text[len(COMMAND_ESCAPE) :]
        if not body.strip():
            return ParsedCommand.empty()
        if body[0].isspace():
            return self._wrap_default(body.strip())

        bracketed = self._parse_bracket_form(body)
        if bracketed is not None:
            return bracketed

        parts = body.split(None, 1)
        name = parts[0]
        message = parts[1].strip() if len(parts) > 1 else ""
        return self._build(name, None, message)

    def _parse_bracket_form(self, body: str) -> ParsedCommand | None:
        bracket_index = body.find("[")
        if bracket_index <= 0:
            return None

        whitespace = re.search(r"\s", body)
        if whitespace is not None and whitespace.start() < bracket_index:
            return None

        name = body[:bracket_index]
        if not _BRACKET_NAME.fullmatch(name):
            return None

        end = find_bracket_end(body, bracket_index)
        if end == -1:
            logger.debug("Unbalanced bracket in %r, using simple form", body)
            return None

        content = body[bracket_index + 1 : end]
        message = body[end + 1 :].strip()
        return self._build(name, content, message)

    def _build(self, name: str, content: str | None, message: str) -> ParsedCommand:
        mode = self._resolve_mode(name)
        if mode is ParseMode.RAW:
            return ParsedCommand(
                name=name,
                parse_mode=mode,
                bracket_content=content or "",
                message=message,
            )
        return ParsedCommand(
            name=name,
            parse_mode=mode,
            options=split_options(content) if content else {},
            message=message,
        )

    def _wrap_default(self, message: str) -> ParsedCommand:
        return self._build(self._current_default(), None, message)

    def _current_default(self) -> str:
        name = self._default_command()
        return name.strip().lstrip(COMMAND_ESCAPE) or DEFAULT_COMMAND

    def _resolve_mode(self, name: str) -> ParseMode:
        try:
            return self._parse_mode_resolver(name)
        except Exception:
            logger.warning("Parse mode lookup failed for %r", name, exc_info=True)
            return ParseMode.KEY_VALUE
