"""
Serialized form of a parsed log entry.

An entry serializes to a flat JSON object mapping field name to the raw
string value, with fields kept in the order they were parsed or set.
"""

from typing import Dict

from pydantic import RootModel


class EntryFields(RootModel[Dict[str, str]]):
    """
    Field name to string value mapping.

    Values are never coerced: numbers must be stored through the
    numeric setters on ``Entry``, which format them as strings.
    """

    root: Dict[str, str]
