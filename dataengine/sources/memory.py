"""
In-memory data sources.

- DictDataSource: custom field store, {record_id: {field: value}}
- ObjectDataSource: native record properties read from plain objects
- FileAttachmentStore: attachment id -> file path mapping
"""

import os
from typing import Any, Callable, Dict, List, Mapping, Optional

from dataengine.sources.base import DataSource, AttachmentStore


class DictDataSource(DataSource):
    """
    Custom field store backed by dictionaries.

    Usage:
        source = DictDataSource(
            records={42: {'price': 19.5, 'gallery': [...]}},
            fields={'price': {'label': 'Price', 'kind': 'number'}}
        )

    Records may be keyed by any hashable id. Lookups with record_id=None
    use default_record_id.
    """

    source_name = "custom"

    def __init__(
        self,
        records: Optional[Dict[Any, Dict[str, Any]]] = None,
        fields: Optional[Dict[str, Dict[str, Any]]] = None,
        default_record_id: Any = None
    ):
        self.records = records or {}
        self.fields = fields or {}
        self.default_record_id = default_record_id

    def _record(self, record_id: Any) -> Dict[str, Any]:
        if record_id is None:
            record_id = self.default_record_id
        return self.records.get(record_id) or {}

    def get_value(self, field_name: str, record_id: Any = None) -> Any:
        return self._record(record_id).get(field_name)

    def get_field_metadata(self, field_name: str, record_id: Any = None) -> Optional[Dict[str, Any]]:
        metadata = self.fields.get(field_name)
        if metadata is None:
            return None
        return {'name': field_name, **metadata}

    def get_all_known_fields(self, record_id: Any = None) -> List[Dict[str, str]]:
        names = list(self.fields.keys())
        if record_id is not None or self.default_record_id is not None:
            names += [name for name in self._record(record_id) if name not in self.fields]

        return [
            {'name': name, 'label': self.fields.get(name, {}).get('label', name)}
            for name in names
        ]


class ObjectDataSource(DataSource):
    """
    Native record properties read from objects (or mappings).

    Usage:
        source = ObjectDataSource(
            records={42: post},
            computed={'permalink': lambda post: f"/posts/{post.slug}"}
        )

    Computed fields take precedence over attributes.
    """

    source_name = "native"

    def __init__(
        self,
        records: Optional[Dict[Any, Any]] = None,
        computed: Optional[Dict[str, Callable[[Any], Any]]] = None,
        labels: Optional[Dict[str, str]] = None,
        default_record_id: Any = None
    ):
        self.records = records or {}
        self.computed = computed or {}
        self.labels = labels or {}
        self.default_record_id = default_record_id

    def _record(self, record_id: Any) -> Any:
        if record_id is None:
            record_id = self.default_record_id
        return self.records.get(record_id)

    def get_value(self, field_name: str, record_id: Any = None) -> Any:
        record = self._record(record_id)
        if record is None:
            return None

        if field_name in self.computed:
            return self.computed[field_name](record)

        if isinstance(record, Mapping):
            return record.get(field_name)

        if field_name.startswith('_'):
            return None

        return getattr(record, field_name, None)

    def get_field_metadata(self, field_name: str, record_id: Any = None) -> Optional[Dict[str, Any]]:
        if field_name not in self.labels and field_name not in self.computed:
            return None
        return {
            'name': field_name,
            'label': self.labels.get(field_name, field_name),
            'kind': 'computed' if field_name in self.computed else 'property'
        }

    def get_all_known_fields(self, record_id: Any = None) -> List[Dict[str, str]]:
        names = list(self.labels.keys())
        names += [name for name in self.computed if name not in names]

        record = self._record(record_id)
        if record is not None:
            attributes = record.keys() if isinstance(record, Mapping) else getattr(record, '__dict__', {}).keys()
            names += [name for name in attributes if name not in names and not name.startswith('_')]

        return [{'name': name, 'label': self.labels.get(name, name)} for name in names]


class FileAttachmentStore(AttachmentStore):
    """
    Attachment store mapping ids to files on disk.

    Relative paths are resolved against base_dir.
    """

    def __init__(self, paths: Optional[Dict[Any, str]] = None, base_dir: Optional[str] = None):
        self.paths = paths or {}
        self.base_dir = base_dir

    def get_attached_file(self, attachment_id: Any) -> Optional[str]:
        path = self.paths.get(attachment_id)
        if path is None and attachment_id is not None:
            path = self.paths.get(str(attachment_id))
        if not path:
            return None

        if self.base_dir and not os.path.isabs(path):
            path = os.path.join(self.base_dir, path)

        return path if os.path.isfile(path) else None
