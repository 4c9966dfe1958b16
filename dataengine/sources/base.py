"""
Base classes for data sources.

A data source answers field lookups for one tag source keyword
(custom fields, native record properties). The loop row source is not a
data source: rows are handed to the processor directly.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import re

# Encoding named by an XML declaration, e.g. <?xml version="1.0" encoding="ISO-8859-1"?>
XML_ENCODING_RE = re.compile(rb"""^(?:\xef\xbb\xbf)?\s*<\?xml[^>]*?encoding=["']([A-Za-z0-9._\-]+)["']""")


def decode_text(data: bytes) -> str:
    """
    Decode file content: the declared XML encoding if any, then UTF-8,
    then ISO-8859-1 (which accepts any byte sequence).
    """
    match = XML_ENCODING_RE.match(data)
    encodings = [match.group(1).decode('ascii')] if match else []

    for encoding in encodings + ['utf-8-sig']:
        try:
            return data.decode(encoding)
        except (LookupError, ValueError):
            continue

    return data.decode('latin-1')


class DataSourceError(Exception):
    """Error raised by a host data source while fetching a field."""
    def __init__(self, source_name: str, message: str):
        self.source_name = source_name
        super().__init__(f"Data source '{source_name}' failed: {message}")


class DataSource(ABC):
    """
    Abstract base class for data sources.

    Subclasses must implement:
    - get_value(): fetch one field of a record
    - get_field_metadata(): descriptive metadata (label, kind, ...)
    """

    source_name: str = ""

    @abstractmethod
    def get_value(self, field_name: str, record_id: Any = None) -> Any:
        """
        Fetch a single named field's value for a record.

        Args:
            field_name: Field to look up
            record_id: Record identifier (None = host default record)

        Returns:
            The raw value, or None when the field does not exist
        """
        pass

    @abstractmethod
    def get_field_metadata(self, field_name: str, record_id: Any = None) -> Optional[Dict[str, Any]]:
        """
        Fetch descriptive metadata for a field.

        Returns:
            Dict with at least 'label' and 'kind', or None if unknown
        """
        pass

    def get_all_known_fields(self, record_id: Any = None) -> List[Dict[str, str]]:
        """
        List the fields this source knows about (editor autocomplete).

        Returns:
            List of {'name': ..., 'label': ...}
        """
        return []

    def __repr__(self):
        return f"<DataSource: {self.source_name or self.__class__.__name__}>"


class AttachmentStore(ABC):
    """
    Backing store for attachment files.

    Used to inline the textual content of vector images.
    """

    @abstractmethod
    def get_attached_file(self, attachment_id: Any) -> Optional[str]:
        """Return the filesystem path of an attachment, or None."""
        pass

    def read_text(self, path: str) -> Optional[str]:
        """Read a file's textual content; None if it cannot be read."""
        try:
            with open(path, 'rb') as fh:
                return decode_text(fh.read())
        except OSError:
            return None
