"""
Data Source Module

Provides the abstraction the engine reads field values from, plus
in-memory implementations for hosts and tests.
"""

from dataengine.sources.base import DataSource, AttachmentStore, DataSourceError
from dataengine.sources.memory import DictDataSource, ObjectDataSource, FileAttachmentStore

__all__ = [
    'DataSource',
    'AttachmentStore',
    'DataSourceError',
    'DictDataSource',
    'ObjectDataSource',
    'FileAttachmentStore'
]
