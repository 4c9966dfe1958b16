"""
Pytest fixtures for data engine tests
"""

import pytest
from dataclasses import dataclass, field
from typing import Any, Dict, List
from unittest.mock import MagicMock

from dataengine.config import Config
from dataengine.engine.processor import TemplateProcessor
from dataengine.sources import DictDataSource, ObjectDataSource, DataSource
from dataengine.values import Term


@dataclass
class MockPost:
    """Mock native record"""
    ID: int = 42
    title: str = 'Hello'
    slug: str = 'hello'
    status: str = 'publish'
    subtitle: str = ''
    views: int = 1500
    categories: List[Term] = field(default_factory=list)
    author: Dict[str, Any] = field(default_factory=dict)


@pytest.fixture
def terms():
    """Two taxonomy terms"""
    return [
        Term(term_id=1, name='News', slug='news', taxonomy='category', link='/category/news'),
        Term(term_id=2, name='Sports', slug='sports', taxonomy='category', link='/category/sports'),
    ]


@pytest.fixture
def custom_source():
    """Custom field store with one record"""
    return DictDataSource(
        records={
            42: {
                'price': 19.5,
                'stock': 0,
                'zero_text': '0',
                'empty': '',
                'colors': ['Red', '', None, 'Green', 'Blue'],
                'hero_image': {'ID': 7, 'url': 'https://cdn.test/hero.jpg', 'alt': 'Hero'},
                'icon': {'type': 'media_library', 'value': {'ID': 9, 'url': '/icon.png'}},
                'intro': '<p>Welcome to the <b>shop</b></p>',
                'featured': 'yes',
                'event_date': '2024-01-15 14:30:00',
                'features': [
                    {'name': 'A', 'note': 'first'},
                    {'name': 'B', 'note': 'second'},
                ],
            },
            43: {
                'price': 150,
            },
        },
        fields={
            'price': {'label': 'Price', 'kind': 'number'},
            'colors': {'label': 'Colors', 'kind': 'checkbox'},
            'hero_image': {'label': 'Hero Image', 'kind': 'image'},
        },
        default_record_id=42
    )


@pytest.fixture
def native_source(terms):
    """Native record properties"""
    post = MockPost(categories=terms, author={'name': 'Ana', 'email': 'ana@example.com'})
    return ObjectDataSource(
        records={42: post},
        computed={'permalink': lambda p: f"https://example.com/{p.slug}/"},
        labels={'title': 'Title'},
        default_record_id=42
    )


@pytest.fixture
def processor(custom_source, native_source):
    """Processor with custom and native sources"""
    return TemplateProcessor(
        sources={'custom': custom_source, 'native': native_source},
        config=Config,
        locale='en_US'
    )


@pytest.fixture
def failing_source():
    """Data source whose lookups raise"""
    source = MagicMock(spec=DataSource)
    source.get_value.side_effect = RuntimeError('database is down')
    source.get_field_metadata.return_value = None
    source.get_all_known_fields.return_value = []
    return source
