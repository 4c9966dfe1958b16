"""
Tests for list filters
"""

from dataengine.filters.lists import (
    LimitFilter,
    JoinFilter,
    SortFilter,
    ExcludeFilter,
    WrapFilter,
    FirstFilter,
    LastFilter,
    CountFilter,
    TermLinksFilter
)
from dataengine.values import Term


COLORS = ['Red', '', None, 'Green', 'Blue']


class TestListFilters:
    """Test multi-value filters on lists and joined strings"""

    def test_limit(self):
        assert LimitFilter().apply(COLORS, ['2'], {}) == 'Red, Green'

    def test_limit_on_string(self):
        """Test joined strings are split on ', '"""
        assert LimitFilter().apply('a, b, c', ['2'], {}) == 'a, b'

    def test_join(self):
        assert JoinFilter().apply(COLORS, [' / '], {}) == 'Red / Green / Blue'

    def test_join_resplits_string(self):
        assert JoinFilter().apply('a, b', ['|'], {}) == 'a|b'

    def test_sort(self):
        assert SortFilter().apply(COLORS, [], {}) == 'Blue, Green, Red'

    def test_sort_desc(self):
        assert SortFilter().apply(COLORS, ['desc'], {}) == 'Red, Green, Blue'
        assert SortFilter().apply(COLORS, ['reverse'], {}) == 'Red, Green, Blue'

    def test_exclude(self):
        assert ExcludeFilter().apply(COLORS, ['Red', 'Blue'], {}) == 'Green'

    def test_wrap(self):
        assert WrapFilter().apply(['a', 'b'], ['<li>', '</li>', ''], {}) == '<li>a</li><li>b</li>'

    def test_wrap_default_separator(self):
        assert WrapFilter().apply(['a', 'b'], ['[', ']'], {}) == '[a], [b]'

    def test_first_last(self):
        assert FirstFilter().apply(COLORS, [], {}) == 'Red'
        assert LastFilter().apply(COLORS, [], {}) == 'Blue'

    def test_first_of_empty(self):
        assert FirstFilter().apply([], [], {}) == ''
        assert LastFilter().apply(None, [], {}) == ''

    def test_count(self):
        assert CountFilter().apply(COLORS, [], {}) == 3
        assert CountFilter().apply('', [], {}) == 0

    def test_scalar_is_one_item(self):
        assert CountFilter().apply('single', [], {}) == 1


class TestTermLinks:
    """Test term_links"""

    def test_links(self):
        terms = [Term(name='News', link='/news'), Term(name='A & B', link='/a-b')]
        context = {'terms': {'categories': terms}, 'terms_key': 'categories'}

        result = TermLinksFilter().apply('News, A & B', [], context)

        assert result == '<a href="/news">News</a>, <a href="/a-b">A &amp; B</a>'

    def test_separator(self):
        context = {'terms': {'tags': [Term(name='x', link='/x'), Term(name='y', link='/y')]}, 'terms_key': 'tags'}
        assert TermLinksFilter().apply('x, y', [' | '], context) == '<a href="/x">x</a> | <a href="/y">y</a>'

    def test_passthrough_without_terms(self):
        assert TermLinksFilter().apply('plain', [], {}) == 'plain'
