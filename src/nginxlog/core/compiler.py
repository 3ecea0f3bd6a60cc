"""
Format template compiler.

Turns a template such as ``$remote_addr [$time_local] "$request"`` into an
ordered tuple of field names and one anchored regular expression with a
capture group per field, in the same order.

Each field captures everything up to the first character of the literal
text that follows it, so quotes and brackets in the template act as
delimiters. A field that ends the template captures the rest of the line.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import structlog

from .entry import Entry
from .exceptions import DEFAULT_PREVIEW_CHARS, InvalidFormat, LineFormatMismatch

logger = structlog.get_logger(__name__)

# No escape syntax exists for a literal "$": every "$" starts a field.
_PLACEHOLDER_RE = re.compile(r"\$([A-Za-z0-9_]*)")


@dataclass(frozen=True)
class Literal:
    """Literal text between fields, matched verbatim."""
    text: str


@dataclass(frozen=True)
class Placeholder:
    """A ``$name`` field."""
    name: str


Segment = Union[Literal, Placeholder]


@dataclass(frozen=True)
class CompiledFormat:
    """
    A compiled template.

    Immutable and shared by the reader that owns it; ``field_names[i]`` is
    the name of capture group ``i + 1`` of ``pattern``.
    """

    template: str
    field_names: Tuple[str, ...]
    pattern: "re.Pattern[str]"

    def match(self, line: str) -> Optional[Tuple[str, ...]]:
        """Return the captured values of ``line``, or None if it does not match."""
        match = self.pattern.fullmatch(line)
        if match is None:
            return None
        return match.groups()

    def parse_line(
        self,
        line: str,
        line_number: Optional[int] = None,
        preview_chars: int = DEFAULT_PREVIEW_CHARS,
    ) -> Entry:
        """Parse one log line into a new entry."""
        values = self.match(line)
        if values is None:
            raise LineFormatMismatch(line, self.template, line_number, preview_chars)
        return Entry(zip(self.field_names, values))


def tokenize_template(template: str) -> List[Segment]:
    """
    Split a template into literal and placeholder segments.

    Literal segments are never empty. Raises InvalidFormat when a "$" is
    not followed by at least one identifier character.
    """
    segments: List[Segment] = []
    position = 0

    for match in _PLACEHOLDER_RE.finditer(template):
        if match.start() > position:
            segments.append(Literal(template[position:match.start()]))

        name = match.group(1)
        if not name:
            raise InvalidFormat(template, f"empty field name at position {match.start()}")

        segments.append(Placeholder(name))
        position = match.end()

    if position < len(template):
        segments.append(Literal(template[position:]))

    return segments


def _capture_group(following: Optional[Segment]) -> str:
    if following is None:
        return "(.*)"
    # Tokenizer guarantees the segment after a placeholder is a non-empty literal
    return f"([^{re.escape(following.text[0])}]*)"


def compile_format(template: str) -> CompiledFormat:
    """
    Compile a format template.

    Raises InvalidFormat when the template has no fields, repeats a field
    name, places two fields next to each other with no literal text in
    between, or otherwise yields an unusable pattern.
    """
    segments = tokenize_template(template)

    field_names: List[str] = []
    parts: List[str] = []

    for index, segment in enumerate(segments):
        if isinstance(segment, Literal):
            parts.append(re.escape(segment.text))
            continue

        if segment.name in field_names:
            raise InvalidFormat(template, f"duplicate field name '{segment.name}'")

        following = segments[index + 1] if index + 1 < len(segments) else None
        if isinstance(following, Placeholder):
            raise InvalidFormat(
                template,
                f"fields '{segment.name}' and '{following.name}' are not separated by literal text",
            )

        field_names.append(segment.name)
        parts.append(_capture_group(following))

    if not field_names:
        raise InvalidFormat(template, "format declares no fields")

    regex = r"\A" + "".join(parts) + r"\Z"
    try:
        pattern = re.compile(regex, re.DOTALL)
    except re.error as e:
        raise InvalidFormat(template, f"cannot compile pattern: {e}") from e

    if pattern.groups != len(field_names):
        raise InvalidFormat(
            template,
            f"pattern has {pattern.groups} groups for {len(field_names)} fields",
        )

    logger.debug(
        "Compiled log format",
        fields=len(field_names),
        pattern=regex,
    )

    return CompiledFormat(
        template=template,
        field_names=tuple(field_names),
        pattern=pattern,
    )
