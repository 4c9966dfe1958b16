"""
Data Engine

Template engine for rendering record data into text:
- Tags: %custom:price|number_format(2)%
- Conditionals: [if:%custom:price% > 100]...[elseif:...]...[else]...[/if]
- Fallbacks: %native:subtitle%[fallback]No subtitle[/fallback]
- Loop items: %row:name% inside a repeated template

Usage:
    from dataengine import TemplateProcessor, DictDataSource

    processor = TemplateProcessor(sources={'custom': DictDataSource({42: {'price': 19.5}})})
    result = processor.process('%custom:price|number_format(2)%', record_id=42)
"""

from dataengine.config import Config
from dataengine.values import Term, ResolvedValue, ValueKind
from dataengine.sources import (
    DataSource,
    AttachmentStore,
    DataSourceError,
    DictDataSource,
    ObjectDataSource,
    FileAttachmentStore
)
from dataengine.filters import FilterRegistry, FilterError, create_default_registry
from dataengine.engine import Diagnostic, RenderResult, TemplateProcessor
from dataengine.logging_config import setup_logging

__all__ = [
    'Config',
    'Term',
    'ResolvedValue',
    'ValueKind',
    'DataSource',
    'AttachmentStore',
    'DataSourceError',
    'DictDataSource',
    'ObjectDataSource',
    'FileAttachmentStore',
    'FilterRegistry',
    'FilterError',
    'create_default_registry',
    'Diagnostic',
    'RenderResult',
    'TemplateProcessor',
    'setup_logging'
]
