"""
Value resolver for the data engine.

Fetches raw field values from data sources and turns a parsed tag path
into a ResolvedValue:
- per-pass cache keyed by (source, record_id, field), None included
- loop row lookups that bypass data sources and the cache
- media library unwrapping and vector image inlining
- taxonomy term lists (rendered as names, raw terms kept for filters)
- .label metadata access and generic path traversal
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple
import logging

from dataengine.parser.ast import Tag
from dataengine.sources.base import AttachmentStore, DataSource, DataSourceError
from dataengine.values import (
    LIST_SEPARATOR,
    ResolvedValue,
    Term,
    attachment_id,
    is_term_list,
    is_vector_image,
    scalar_to_text,
    unwrap_media_library_value
)

logger = logging.getLogger(__name__)

LABEL_PROPERTY = 'label'

_MISSING = object()


@contextmanager
def source_errors(source_name: str):
    """Raise any failure inside the block as DataSourceError."""
    try:
        yield
    except DataSourceError:
        raise
    except Exception as e:
        raise DataSourceError(source_name, str(e)) from e


@dataclass
class LoopRowContext:
    """
    Field values of one row of a repeated structure.

    Attributes:
        values: Row field map
        keyword: Source keyword that reads from this row
    """
    values: Mapping[str, Any] = field(default_factory=dict)
    keyword: str = 'row'

    def get(self, field_name: str) -> Any:
        return self.values.get(field_name)


def traverse(value: Any, parts: List[str]) -> Any:
    """
    Walk a dotted path into a value.

    Mappings are indexed by key, objects by attribute. Any step that
    cannot be taken yields None.
    """
    value = unwrap_media_library_value(value)

    for part in parts:
        if isinstance(value, Mapping):
            if part not in value:
                return None
            value = value[part]
        elif hasattr(value, '__dict__') and not part.startswith('_') and hasattr(value, part):
            value = getattr(value, part)
        else:
            return None

    return value


def render_terms(terms: List[Any], prop: Optional[str] = None) -> str:
    """Term names (or one property of each term) joined with ', '."""
    values = []

    for term in terms:
        if not isinstance(term, Term):
            continue

        if prop is None:
            values.append(term.name)
        elif hasattr(term, prop):
            values.append(scalar_to_text(getattr(term, prop)))

    return LIST_SEPARATOR.join(values)


class ValueResolver:
    """
    Resolves tag paths against data sources.

    One resolver serves one rendering pass: its cache and term context are
    never shared between passes.

    Usage:
        resolver = ValueResolver({'custom': custom_source, 'native': native_source})
        value = resolver.resolve_tag(tag, record_id=42)
        value.render()
    """

    def __init__(
        self,
        sources: Mapping[str, DataSource],
        attachments: Optional[AttachmentStore] = None,
        row_keyword: str = 'row'
    ):
        self.sources = sources
        self.attachments = attachments
        self.row_keyword = row_keyword

        self._cache: Optional[Dict[Tuple[str, Any, str], Any]] = None
        self.terms: Dict[str, List[Term]] = {}

    @property
    def cache(self) -> Dict[Tuple[str, Any, str], Any]:
        # Created on first lookup
        if self._cache is None:
            self._cache = {}
        return self._cache

    def fetch(self, source: str, field_name: str, record_id: Any = None) -> Any:
        """
        Raw value from the data source registered for a keyword.

        Results (None included) are cached for the rest of the pass.
        Failures of the data source are raised as DataSourceError.
        """
        key = (source, record_id, field_name)

        cached = self.cache.get(key, _MISSING)
        if cached is not _MISSING:
            logger.debug(f"Cache hit for {source}:{record_id}:{field_name}")
            return cached

        logger.debug(f"Cache miss for {source}:{record_id}:{field_name}")

        data_source = self.sources.get(source)
        value = None
        if data_source is not None:
            with source_errors(source):
                value = data_source.get_value(field_name, record_id)

        self.cache[key] = value
        return value

    def resolve(
        self,
        source: str,
        field_name: str,
        record_id: Any = None,
        row: Optional[LoopRowContext] = None
    ) -> ResolvedValue:
        """Resolve a bare field (no property path)."""
        if source == self.row_keyword:
            raw = row.get(field_name) if row is not None else None
        else:
            raw = self.fetch(source, field_name, record_id)

        return ResolvedValue.of(raw)

    def resolve_metadata(self, source: str, field_name: str, record_id: Any = None) -> Dict[str, Any]:
        """Field metadata ({label, kind, ...}); empty dict when unknown."""
        data_source = self.sources.get(source)
        if data_source is None:
            return {}
        with source_errors(source):
            return data_source.get_field_metadata(field_name, record_id) or {}

    def resolve_tag(
        self,
        tag: Tag,
        record_id: Any = None,
        row: Optional[LoopRowContext] = None
    ) -> ResolvedValue:
        """
        Resolve a tag's full path.

        Args:
            tag: Parsed tag
            record_id: Record the lookup is for
            row: Current loop row, if rendering a loop item

        Returns:
            ResolvedValue (term lists carry their raw terms)
        """
        is_row = tag.source == self.row_keyword
        properties = tag.properties

        if properties and properties[-1] == LABEL_PROPERTY and not is_row:
            metadata = self.resolve_metadata(tag.source, tag.field_name, record_id)
            return ResolvedValue.of(metadata.get('label', ''))

        raw = self.resolve(tag.source, tag.field_name, record_id, row).raw

        if is_term_list(raw):
            key = self.terms_key(tag)
            self.terms[key] = list(raw)
            resolved = ResolvedValue.of(render_terms(raw, properties[0] if properties else None))
            resolved.terms = list(raw)
            return resolved

        if properties:
            return ResolvedValue.of(traverse(raw, properties))

        value = unwrap_media_library_value(raw)

        if is_vector_image(value):
            logger.debug(f"Rendering SVG content for field: {tag.field_name}")
            return ResolvedValue.of(self.inline_vector_content(value))

        if isinstance(value, Term):
            return ResolvedValue.of(value.name)

        return ResolvedValue.of(value)

    def terms_key(self, tag: Tag) -> str:
        """Term context key: the field name, prefixed for row fields."""
        if tag.source == self.row_keyword:
            return f"{self.row_keyword}_{tag.field_name}"
        return tag.field_name

    def inline_vector_content(self, value: Mapping) -> Optional[str]:
        """
        Text content of an SVG attachment, or None when it cannot be read.
        """
        if self.attachments is None:
            return None

        with source_errors('attachments'):
            path = self.attachments.get_attached_file(attachment_id(value))
            if not path:
                return None
            content = self.attachments.read_text(path)

        if content is not None:
            logger.debug(f"SVG content loaded from: {path}")
        return content
