"""
Resolved value model for the data engine.

A field lookup can return anything a data source stores: a string, a
number, a list of checkbox values, an attachment record, a taxonomy term.
ResolvedValue classifies the raw value once so every consumer (filters,
final rendering) branches on an explicit kind instead of guessing.

Kinds:
- SCALAR: str, int, float, bool, Decimal, date/datetime
- NULL: None
- LIST_OF_SCALAR: list/tuple of scalars (None entries allowed)
- STRUCTURED: mapping or object carrying fields (attachment, Term, ...)
- COMPOSITE: anything else (lists of structured values, sets, ...)

Only SCALAR and LIST_OF_SCALAR render to text.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Mapping, Optional


LIST_SEPARATOR = ', '
MEDIA_LIBRARY_TYPE = 'media_library'
VECTOR_IMAGE_MIME_TYPE = 'image/svg+xml'

SCALAR_TYPES = (str, int, float, bool, Decimal, date, datetime)


class ValueKind(Enum):
    """Kinds of resolved values."""
    SCALAR = 'scalar'
    NULL = 'null'
    LIST_OF_SCALAR = 'list_of_scalar'
    STRUCTURED = 'structured'
    COMPOSITE = 'composite'


@dataclass
class Term:
    """
    A taxonomy term attached to a record (category, tag, ...).

    Renders as its name when no property is requested.
    """
    term_id: int = 0
    name: str = ""
    slug: str = ""
    taxonomy: str = ""
    description: str = ""
    link: str = ""
    parent: int = 0
    count: int = 0


def is_scalar(value: Any) -> bool:
    return isinstance(value, SCALAR_TYPES)


def is_term_list(value: Any) -> bool:
    """A non-empty list whose first element is a Term."""
    return isinstance(value, (list, tuple)) and len(value) > 0 and isinstance(value[0], Term)


def is_empty_item(item: Any) -> bool:
    """Entries dropped from multi-value output (None, '', False, empty containers)."""
    if item is None or item is False:
        return True
    if isinstance(item, str):
        return item == ''
    if isinstance(item, (list, tuple, dict)):
        return len(item) == 0
    return False


def unwrap_media_library_value(value: Any) -> Any:
    """
    Replace a {type: "media_library", value: X} wrapper by X.

    Icon/picker fields store either a library item or a raw value under
    this shape; everything downstream wants the inner value.
    """
    if (
        isinstance(value, Mapping)
        and value.get('type') == MEDIA_LIBRARY_TYPE
        and 'value' in value
        and value.get('value') is not None
    ):
        return value['value']
    return value


def is_vector_image(value: Any) -> bool:
    """True for attachment records carrying the SVG mime type."""
    return isinstance(value, Mapping) and value.get('mime_type') == VECTOR_IMAGE_MIME_TYPE


def attachment_id(value: Mapping) -> Optional[Any]:
    for key in ('ID', 'id'):
        if value.get(key) is not None:
            return value[key]
    return None


def scalar_to_text(value: Any) -> str:
    """Render a scalar the way templates expect it."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return '1' if value else ''
    if isinstance(value, float):
        if value != value or value in (float('inf'), float('-inf')):
            return str(value)
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        return value.isoformat(sep=' ')
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def join_scalars(items, separator: str = LIST_SEPARATOR) -> str:
    return separator.join(scalar_to_text(item) for item in items if not is_empty_item(item))


def classify(value: Any) -> ValueKind:
    if value is None:
        return ValueKind.NULL
    if is_scalar(value):
        return ValueKind.SCALAR
    if isinstance(value, (list, tuple)):
        if all(item is None or is_scalar(item) for item in value):
            return ValueKind.LIST_OF_SCALAR
        return ValueKind.COMPOSITE
    if isinstance(value, Mapping) or hasattr(value, '__dict__'):
        return ValueKind.STRUCTURED
    return ValueKind.COMPOSITE


@dataclass
class ResolvedValue:
    """A raw value together with its kind."""
    raw: Any = None
    kind: ValueKind = ValueKind.NULL
    terms: List[Term] = field(default_factory=list)

    @classmethod
    def of(cls, raw: Any) -> 'ResolvedValue':
        return cls(raw=raw, kind=classify(raw))

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    def render(self) -> str:
        """Final stringification; non-renderable kinds become ''."""
        if self.kind is ValueKind.SCALAR:
            return scalar_to_text(self.raw)
        if self.kind is ValueKind.LIST_OF_SCALAR:
            return join_scalars(self.raw)
        if self.kind is ValueKind.NULL:
            return ''
        # STRUCTURED / COMPOSITE need a property access or a filter first
        return ''
