"""
Parsed log entry with typed, fallible field access.

Values are stored as the strings extracted from the log line. Numeric
accessors parse on every read and raise instead of returning defaults.
"""

import hashlib
import json
import math
import re
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Dict, Iterable, Iterator, Optional, Union

from ..models.entry import EntryFields
from .exceptions import FieldNotFound, FieldParseError

INT32_MIN, INT32_MAX = -(2**31), 2**31 - 1
INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1
UINT64_MAX = 2**64 - 1

# Python's int()/float() also accept surrounding whitespace and digit
# underscores; log values must be bare numbers.
_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


class Entry(Mapping):
    """
    One parsed log line as an ordered ``field name -> string`` mapping.

    Entries are independent of the reader that produced them and can be
    freely mutated, projected and merged.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: Optional[Union[Mapping, Iterable]] = None) -> None:
        self._fields: Dict[str, str] = {}
        if fields is not None:
            items = fields.items() if isinstance(fields, Mapping) else fields
            for name, value in items:
                self.set_field(name, value)

    @classmethod
    def from_fields(cls, fields: Mapping) -> "Entry":
        """Create an entry from a mapping of field names to string values."""
        return cls(fields)

    @classmethod
    def from_dict(cls, data: Any) -> "Entry":
        """Create an entry from its serialized mapping, validating value types."""
        return cls(EntryFields.model_validate(data).root)

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> "Entry":
        """Create an entry from the JSON produced by :meth:`to_json`."""
        return cls(EntryFields.model_validate_json(data).root)

    # Mapping protocol

    def __getitem__(self, name: str) -> str:
        return self.field(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._fields!r})"

    # Typed accessors

    def field(self, name: str) -> str:
        """Return the raw string value of ``name``."""
        try:
            return self._fields[name]
        except KeyError:
            raise FieldNotFound(name) from None

    def int_field(self, name: str) -> int:
        """Return ``name`` parsed as a signed 32-bit integer."""
        return self._parse_int(name, "int32", INT32_MIN, INT32_MAX)

    def int64_field(self, name: str) -> int:
        """Return ``name`` parsed as a signed 64-bit integer."""
        return self._parse_int(name, "int64", INT64_MIN, INT64_MAX)

    def float_field(self, name: str) -> float:
        """Return ``name`` parsed as a 64-bit float."""
        value = self.field(name)
        if not _FLOAT_RE.fullmatch(value):
            raise FieldParseError(name, value, "float64")
        return float(value)

    def _parse_int(self, name: str, target_type: str, low: int, high: int) -> int:
        value = self.field(name)
        if not _INT_RE.fullmatch(value):
            raise FieldParseError(name, value, target_type)
        number = int(value)
        if not low <= number <= high:
            raise FieldParseError(name, value, target_type)
        return number

    # Mutation

    def set_field(self, name: str, value: str) -> None:
        """Insert or overwrite ``name`` with a string value."""
        if not isinstance(name, str):
            raise TypeError(f"field name must be str, not {type(name).__name__}")
        if not isinstance(value, str):
            raise TypeError(f"value of field '{name}' must be str, not {type(value).__name__}")
        self._fields[name] = value

    def set_uint_field(self, name: str, value: int) -> None:
        """Store a non-negative integer as its decimal string."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"value of field '{name}' must be int, not {type(value).__name__}")
        if not 0 <= value <= UINT64_MAX:
            raise ValueError(f"value of field '{name}' must fit in an unsigned 64-bit integer, got {value}")
        self.set_field(name, str(value))

    def set_float_field(self, name: str, value: float) -> None:
        """
        Store a float as its shortest round-tripping decimal string.

        Finite values are written in positional notation (``1e20`` is stored
        as ``"100000000000000000000"``); infinities and NaN keep ``repr``.
        """
        number = float(value)
        if math.isfinite(number):
            self.set_field(name, format(Decimal(repr(number)), "f"))
        else:
            self.set_field(name, repr(number))

    def merge(self, other: Mapping) -> None:
        """Overlay the fields of ``other`` onto this entry, overwriting collisions."""
        for name, value in other.items():
            self.set_field(name, value)

    def partial(self, names: Iterable[str]) -> "Entry":
        """
        Project this entry onto ``names``.

        The result holds only the requested fields that exist here, in the
        requested order. Missing names are skipped.
        """
        projected = type(self)()
        for name in names:
            if name in self._fields:
                projected._fields[name] = self._fields[name]
        return projected

    def fields_hash(self, names: Iterable[str]) -> str:
        """
        Digest the values of ``names`` for grouping and deduplication.

        Equal ``(name, value)`` sequences give equal digests. A missing field
        contributes ``null``, distinct from an empty value. Not for security.
        """
        pairs = [[name, self._fields.get(name)] for name in names]
        payload = json.dumps(pairs, separators=(",", ":"))
        return hashlib.sha256(payload.encode("ascii")).hexdigest()

    def copy(self) -> "Entry":
        duplicate = type(self)()
        duplicate._fields = dict(self._fields)
        return duplicate

    # Serialization

    def to_dict(self) -> Dict[str, str]:
        """Return a plain dict copy, in field order."""
        return dict(self._fields)

    def to_json(self, indent: Optional[int] = None) -> str:
        return EntryFields(self._fields).model_dump_json(indent=indent)
