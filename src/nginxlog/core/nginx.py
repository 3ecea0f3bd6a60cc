"""
nginx configuration support.

Extracts ``log_format`` templates from nginx configuration text and builds
readers from them, so callers can parse access logs by format name.

A directive looks like::

    log_format main escape=default '$remote_addr - $remote_user [$time_local] '
                                   '"$request" $status';

Its arguments after the name are concatenated exactly as nginx does,
without inserting separators between them.
"""

import re
from typing import Any, Dict, Iterator, List, Optional, Tuple

import structlog

from ..config import ReaderSettings, get_settings
from .compiler import CompiledFormat, compile_format
from .exceptions import IoError, NginxFormatNotFound
from .reader import Reader

logger = structlog.get_logger(__name__)

_CONFIG_TOKEN_RE = re.compile(
    r"""
      (?P<space>\s+)
    | (?P<comment>\#[^\n]*)
    | (?P<quoted>'(?:[^'\\]|\\.?)*(?:'|\Z)|"(?:[^"\\]|\\.?)*(?:"|\Z))
    | (?P<punct>[;{}])
    | (?P<word>[^\s;{}'"]+)
    """,
    re.VERBOSE | re.DOTALL,
)

# Escapes nginx resolves inside quoted strings; any other backslash is kept.
_QUOTED_ESCAPES = {'"': '"', "'": "'", "\\": "\\", "t": "\t", "r": "\r", "n": "\n"}
_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)

Token = Tuple[str, str]


def _unquote(token: str) -> str:
    quote = token[0]
    body = token[1:-1] if len(token) > 1 and token.endswith(quote) else token[1:]
    return _ESCAPE_RE.sub(lambda m: _QUOTED_ESCAPES.get(m.group(1), m.group(0)), body)


def _tokenize_config(text: str) -> Iterator[Token]:
    """Yield ``(kind, value)`` tokens, dropping whitespace and comments."""
    for match in _CONFIG_TOKEN_RE.finditer(text):
        kind = match.lastgroup
        value = match.group()
        if kind in ("space", "comment"):
            continue
        if kind == "quoted":
            yield "word", _unquote(value)
        else:
            yield kind, value


def _iter_log_formats(text: str, directive: str) -> Iterator[Tuple[str, str]]:
    """Yield ``(name, template)`` for every format directive, in order."""
    tokens = _tokenize_config(text)
    statement_start = True

    for kind, value in tokens:
        if kind == "punct":
            statement_start = True
            continue

        if not (statement_start and value == directive):
            statement_start = False
            continue

        statement_start = False
        name: Optional[str] = None
        segments: List[str] = []

        for kind, value in tokens:
            if kind == "punct":
                statement_start = True
                break
            if name is None:
                name = value
            elif not segments and value.startswith("escape="):
                continue
            else:
                segments.append(value)

        if name is not None:
            yield name, "".join(segments)


def _read_config(config: Any, settings: ReaderSettings) -> str:
    if hasattr(config, "read"):
        try:
            config = config.read()
        except (OSError, ValueError) as e:
            logger.error("Failed to read nginx configuration", error=str(e))
            raise IoError(e) from e

    if isinstance(config, bytes):
        try:
            return config.decode(settings.encoding, settings.decode_errors)
        except UnicodeDecodeError as e:
            raise IoError(e) from e
    return config


def find_nginx_formats(config: Any, settings: Optional[ReaderSettings] = None) -> Dict[str, str]:
    """
    Return every format declared in ``config`` as ``{name: template}``.

    Names keep declaration order. When a name is declared more than once
    the first declaration wins.
    """
    settings = settings or get_settings()
    text = _read_config(config, settings)

    formats: Dict[str, str] = {}
    for name, template in _iter_log_formats(text, settings.directive):
        if name in formats:
            logger.debug("Ignoring duplicate log format", format_name=name)
            continue
        formats[name] = template
    return formats


def extract_nginx_format(
    config: Any,
    format_name: str,
    settings: Optional[ReaderSettings] = None,
) -> str:
    """
    Return the template of the first ``format_name`` directive in ``config``.

    ``config`` is configuration text, bytes, or a readable file object.
    """
    settings = settings or get_settings()
    text = _read_config(config, settings)

    for name, template in _iter_log_formats(text, settings.directive):
        if name == format_name:
            logger.debug("Found log format", format_name=format_name)
            return template

    raise NginxFormatNotFound(format_name)


class NginxReader(Reader):
    """
    Reader whose format is looked up by name in an nginx configuration.

    Construction fails with NginxFormatNotFound, IoError or InvalidFormat,
    whichever stage fails first; afterwards it behaves like ``Reader``.
    """

    def __init__(
        self,
        source: Any,
        config: Any,
        format_name: str,
        settings: Optional[ReaderSettings] = None,
    ) -> None:
        settings = settings or get_settings()
        template = extract_nginx_format(config, format_name, settings)
        compiled_format = compile_format(template)

        self.format_name = format_name
        self.template = template
        self._init(source, compiled_format, settings)

    @classmethod
    def with_format(
        cls,
        source: Any,
        compiled_format: CompiledFormat,
        settings: Optional[ReaderSettings] = None,
        format_name: Optional[str] = None,
    ) -> "NginxReader":
        """Create a reader that shares a format already extracted and compiled."""
        reader = cls.__new__(cls)
        reader.format_name = format_name
        reader.template = compiled_format.template
        reader._init(source, compiled_format, settings)
        return reader
