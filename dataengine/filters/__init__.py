"""
Filter Module for the data engine

Provides value filters that can be applied via pipe syntax:
%custom:field|filter(arg)%
"""

from types import MappingProxyType
from typing import Dict

from dataengine.filters.base import BaseFilter, CallableFilter, FilterError, FilterRegistry
from dataengine.filters.text import (
    UppercaseFilter,
    LowercaseFilter,
    CapitalizeFilter,
    TitleFilter,
    TrimFilter,
    StripTagsFilter,
    TruncateFilter,
    ReplaceFilter,
    DefaultFilter,
    AppendFilter,
    PrependFilter,
    BooleanFilter
)
from dataengine.filters.number import (
    NumberFormatFilter,
    RoundFilter,
    AbsFilter,
    PercentFilter,
    CurrencyFilter
)
from dataengine.filters.date import (
    DateFormatFilter,
    RelativeDateFilter
)
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


def _build_builtins() -> Dict[str, BaseFilter]:
    table = {}
    filters = [
        # Text filters
        UppercaseFilter(),
        LowercaseFilter(),
        CapitalizeFilter(),
        TitleFilter(),
        TrimFilter(),
        StripTagsFilter(),
        TruncateFilter(),
        ReplaceFilter(),
        DefaultFilter(),
        AppendFilter(),
        PrependFilter(),
        BooleanFilter(),

        # Number filters
        NumberFormatFilter(),
        RoundFilter(),
        AbsFilter(),
        PercentFilter(),
        CurrencyFilter(),

        # Date filters
        DateFormatFilter(),
        RelativeDateFilter(),

        # List filters
        LimitFilter(),
        JoinFilter(),
        SortFilter(),
        ExcludeFilter(),
        WrapFilter(),
        FirstFilter(),
        LastFilter(),
        CountFilter(),
        TermLinksFilter(),
    ]

    for filter_obj in filters:
        table[filter_obj.name] = filter_obj
        for alias in filter_obj.aliases:
            table[alias] = filter_obj

    return table


# Read-only table shared by every registry
BUILTIN_FILTERS = MappingProxyType(_build_builtins())


def create_default_registry() -> FilterRegistry:
    """Create a registry with all built-in filters and no custom ones."""
    return FilterRegistry(BUILTIN_FILTERS)


__all__ = [
    'BaseFilter',
    'CallableFilter',
    'FilterError',
    'FilterRegistry',
    'BUILTIN_FILTERS',
    'create_default_registry',
    # Text
    'UppercaseFilter',
    'LowercaseFilter',
    'CapitalizeFilter',
    'TitleFilter',
    'TrimFilter',
    'StripTagsFilter',
    'TruncateFilter',
    'ReplaceFilter',
    'DefaultFilter',
    'AppendFilter',
    'PrependFilter',
    'BooleanFilter',
    # Number
    'NumberFormatFilter',
    'RoundFilter',
    'AbsFilter',
    'PercentFilter',
    'CurrencyFilter',
    # Date
    'DateFormatFilter',
    'RelativeDateFilter',
    # List
    'LimitFilter',
    'JoinFilter',
    'SortFilter',
    'ExcludeFilter',
    'WrapFilter',
    'FirstFilter',
    'LastFilter',
    'CountFilter',
    'TermLinksFilter',
]
