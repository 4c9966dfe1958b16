"""
Tests for the resolved value model
"""

from datetime import date, datetime
from decimal import Decimal

from dataengine.values import (
    ResolvedValue,
    Term,
    ValueKind,
    classify,
    is_term_list,
    is_vector_image,
    join_scalars,
    scalar_to_text,
    unwrap_media_library_value
)


class TestClassify:
    """Test value kinds"""

    def test_scalars(self):
        """Test scalar kinds"""
        for value in ('x', 1, 1.5, True, Decimal('2.5'), date(2024, 1, 1)):
            assert classify(value) is ValueKind.SCALAR

    def test_null(self):
        assert classify(None) is ValueKind.NULL

    def test_list_of_scalar(self):
        """Test None entries are allowed in scalar lists"""
        assert classify(['a', None, 2]) is ValueKind.LIST_OF_SCALAR

    def test_structured(self):
        """Test mappings and objects"""
        assert classify({'url': '/x'}) is ValueKind.STRUCTURED
        assert classify(Term(name='News')) is ValueKind.STRUCTURED

    def test_composite(self):
        """Test lists of structured values"""
        assert classify([{'a': 1}]) is ValueKind.COMPOSITE
        assert classify({1, 2}) is ValueKind.COMPOSITE


class TestRender:
    """Test final stringification"""

    def test_scalar(self):
        assert ResolvedValue.of('Hello').render() == 'Hello'

    def test_integer_float(self):
        """Test whole floats render without a decimal part"""
        assert ResolvedValue.of(150.0).render() == '150'
        assert ResolvedValue.of(19.5).render() == '19.5'

    def test_bool(self):
        """Test booleans render as '1' / ''"""
        assert ResolvedValue.of(True).render() == '1'
        assert ResolvedValue.of(False).render() == ''

    def test_zero(self):
        assert ResolvedValue.of(0).render() == '0'

    def test_null(self):
        value = ResolvedValue.of(None)

        assert value.is_null
        assert value.render() == ''

    def test_list_joined(self):
        """Test multi-value rendering drops empty entries"""
        assert ResolvedValue.of(['Red', '', None, 'Blue']).render() == 'Red, Blue'

    def test_structured_is_empty(self):
        """Test structured values need a property access"""
        assert ResolvedValue.of({'url': '/x'}).render() == ''
        assert ResolvedValue.of([{'url': '/x'}]).render() == ''

    def test_datetime(self):
        assert scalar_to_text(datetime(2024, 1, 15, 14, 30)) == '2024-01-15 14:30:00'

    def test_join_scalars_separator(self):
        assert join_scalars(['a', 'b'], ' | ') == 'a | b'


class TestPreprocessing:
    """Test media library unwrapping and vector image detection"""

    def test_unwrap_media_library(self):
        inner = {'ID': 9, 'url': '/icon.png'}
        assert unwrap_media_library_value({'type': 'media_library', 'value': inner}) is inner

    def test_unwrap_leaves_other_values(self):
        """Test other shapes are untouched"""
        value = {'type': 'url', 'value': 'x'}

        assert unwrap_media_library_value(value) is value
        assert unwrap_media_library_value('text') == 'text'
        assert unwrap_media_library_value({'type': 'media_library', 'value': None})['value'] is None

    def test_vector_image(self):
        assert is_vector_image({'ID': 3, 'mime_type': 'image/svg+xml'})
        assert not is_vector_image({'ID': 3, 'mime_type': 'image/png'})
        assert not is_vector_image('image/svg+xml')

    def test_term_list(self):
        assert is_term_list([Term(name='A')])
        assert not is_term_list([])
        assert not is_term_list(['A'])
