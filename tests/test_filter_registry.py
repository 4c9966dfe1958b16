"""
Tests for FilterRegistry
"""

import logging

import pytest

from dataengine.filters import BUILTIN_FILTERS, FilterError, create_default_registry
from dataengine.parser.ast import FilterInvocation


def chain(*names_and_args):
    return [FilterInvocation(name=name, args=list(args)) for name, *args in names_and_args]


class TestRegistry:
    """Test lookup and registration"""

    def test_builtins_and_aliases(self):
        registry = create_default_registry()

        assert registry.get('upper') is registry.get('uppercase')
        assert registry.has('number_format')
        assert 'term_links' in registry.list_filters()

    def test_builtins_read_only(self):
        """Test the shared table cannot be mutated"""
        with pytest.raises(TypeError):
            BUILTIN_FILTERS['x'] = None

    def test_register_filter(self, caplog):
        registry = create_default_registry()

        with caplog.at_level(logging.INFO, logger='dataengine'):
            registry.register_filter('shout', lambda value, suffix='!': f"{value}{suffix}")

        assert registry.apply('hi', chain(('shout', '!!'))) == 'hi!!'
        assert "Custom filter 'shout' registered." in caplog.text

    def test_custom_overrides_builtin(self):
        """Test last registration wins over built-ins"""
        registry = create_default_registry()
        registry.register_filter('uppercase', lambda value: 'custom')

        assert registry.apply('x', chain(('uppercase',))) == 'custom'

    def test_registries_are_isolated(self):
        first = create_default_registry()
        second = create_default_registry()
        first.register_filter('only_here', lambda value: value)

        assert first.has('only_here')
        assert not second.has('only_here')

    def test_get_or_raise(self):
        with pytest.raises(FilterError):
            create_default_registry().get_or_raise('nope')

    def test_describe(self):
        entries = {e['name']: e for e in create_default_registry().describe()}

        assert entries['truncate']['args'] == ['length', 'suffix']
        assert entries['upper']['description'] == 'Convert text to uppercase'


class TestApply:
    """Test chain application"""

    def test_left_to_right(self):
        registry = create_default_registry()
        result = registry.apply('hello world', chain(('truncate', '5', ''), ('uppercase',)))

        assert result == 'HELLO'

    def test_unknown_filter_skipped(self, caplog):
        """Test only the unknown filter is a no-op"""
        registry = create_default_registry()
        diagnostics = []

        with caplog.at_level(logging.WARNING, logger='dataengine'):
            result = registry.apply(
                'hello',
                chain(('nope',), ('uppercase',)),
                on_diagnostic=lambda *d: diagnostics.append(d)
            )

        assert result == 'HELLO'
        assert "Unknown filter applied: 'nope'." in caplog.text
        assert diagnostics[0][1] == 'unknown_filter'

    def test_failing_filter_passes_value(self):
        """Test exceptions in filters are contained"""
        registry = create_default_registry()
        registry.register_filter('boom', lambda value: 1 / 0)
        diagnostics = []

        result = registry.apply('x', chain(('boom',), ('append', '!')), on_diagnostic=lambda *d: diagnostics.append(d))

        assert result == 'x!'
        assert diagnostics[0][1] == 'filter_failed'

    def test_type_can_change(self):
        registry = create_default_registry()
        assert registry.apply(['a', 'b'], chain(('count',))) == 2
