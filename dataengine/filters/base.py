"""
Base classes for filters.

Filters are transformations applied to tag values via pipe syntax:
%custom:field|filter(arg1, arg2)%
"""

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional
import logging

from dataengine.values import (
    LIST_SEPARATOR,
    ValueKind,
    classify,
    is_empty_item,
    scalar_to_text
)

logger = logging.getLogger(__name__)


class FilterError(Exception):
    """Error during filter lookup or execution."""
    def __init__(self, filter_name: str, message: str, value: Any = None):
        self.filter_name = filter_name
        self.value = value
        super().__init__(f"Filter '{filter_name}' failed: {message}")


def to_text(value: Any) -> str:
    """Coerce a filter input to text; lists are joined, structured values are ''."""
    kind = classify(value)
    if kind is ValueKind.SCALAR:
        return scalar_to_text(value)
    if kind is ValueKind.LIST_OF_SCALAR:
        return LIST_SEPARATOR.join(scalar_to_text(item) for item in value if not is_empty_item(item))
    return ''


def to_list(value: Any) -> List[str]:
    """
    Coerce a filter input to a list of non-empty strings.

    Strings are split on the canonical ', ' separator.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [to_text(item) for item in value if not is_empty_item(item) and to_text(item) != '']
    text = to_text(value)
    if text == '':
        return []
    return [item for item in text.split(LIST_SEPARATOR) if item.strip() != '']


def arg_int(args: List[Any], index: int, default: int) -> int:
    try:
        return int(float(str(args[index]).strip()))
    except (IndexError, ValueError, TypeError):
        return default


def arg_str(args: List[Any], index: int, default: str) -> str:
    if index < len(args) and args[index] is not None:
        return str(args[index])
    return default


class BaseFilter(ABC):
    """
    Base class for built-in filters.

    Subclasses must implement:
    - name: The filter name (e.g., 'uppercase', 'truncate')
    - apply(): The transformation logic

    Optional:
    - aliases: Alternative names
    - args: Argument names shown in the editor dictionary
    - description: One-line description for the editor dictionary
    """

    name: str = ""
    aliases: List[str] = []
    args: List[str] = []
    description: str = ""

    @abstractmethod
    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> Any:
        """
        Apply the filter to a value.

        Args:
            value: The current value (scalar, list, structured object or None)
            args: Positional arguments as written in the template
            context: Per-call context ('locale', 'field_name', 'terms')

        Returns:
            The transformed value
        """
        pass

    def describe(self) -> Dict[str, Any]:
        return {'name': self.name, 'args': list(self.args), 'description': self.description}

    def __repr__(self):
        return f"<Filter: {self.name}>"


class CallableFilter(BaseFilter):
    """
    A filter registered at runtime as a plain function.

    The function is called as fn(value, *args).
    """

    def __init__(self, name: str, fn: Callable[..., Any], description: str = ""):
        self.name = name
        self.fn = fn
        self.description = description or (fn.__doc__ or "").strip().split('\n')[0]
        self.args = []

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> Any:
        return self.fn(value, *args)


class FilterRegistry:
    """
    Registry of available filters.

    Built-in filters live in a shared read-only table; filters registered
    through register_filter() go to an instance-owned overlay that wins
    over the built-ins. Last registration wins, there is no namespacing.
    """

    def __init__(self, builtins: Optional[Mapping[str, BaseFilter]] = None):
        self._builtins: Mapping[str, BaseFilter] = MappingProxyType(dict(builtins or {}))
        self._custom: Dict[str, BaseFilter] = {}

    def register(self, filter_obj: BaseFilter):
        """Register a filter object under its name and aliases."""
        self._custom[filter_obj.name] = filter_obj

        for alias in getattr(filter_obj, 'aliases', []):
            self._custom[alias] = filter_obj

    def register_filter(self, name: str, fn: Callable[..., Any]):
        """
        Register a custom filter function.

        Args:
            name: Filter name used in templates
            fn: Callable taking (value, *args) and returning the new value
        """
        self._custom[name] = CallableFilter(name, fn)
        logger.info(f"Custom filter '{name}' registered.")

    def get(self, name: str) -> Optional[BaseFilter]:
        """Get a filter by name (custom overlay first)."""
        if name in self._custom:
            return self._custom[name]
        return self._builtins.get(name)

    def get_or_raise(self, name: str) -> BaseFilter:
        filter_obj = self.get(name)
        if filter_obj is None:
            raise FilterError(name, f"Unknown filter: {name}")
        return filter_obj

    def has(self, name: str) -> bool:
        return name in self._custom or name in self._builtins

    def list_filters(self) -> List[str]:
        """List all registered filter names (aliases included)."""
        return sorted(set(self._builtins) | set(self._custom))

    def describe(self) -> List[Dict[str, Any]]:
        """Filter entries for the editor dictionary, one per filter name."""
        entries = {}
        for name in self.list_filters():
            filter_obj = self.get(name)
            entry = filter_obj.describe()
            entry['name'] = name
            entries[name] = entry
        return list(entries.values())

    def apply(self, value: Any, filters, context: Optional[Dict[str, Any]] = None, on_diagnostic=None) -> Any:
        """
        Apply a filter chain left to right.

        Unknown filters and failing filters are skipped: the value passes
        through unchanged and the chain continues.

        Args:
            value: Value to transform
            filters: Iterable of FilterInvocation
            context: Per-call context handed to each filter
            on_diagnostic: Optional callback(level, code, message)

        Returns:
            Transformed value
        """
        context = context or {}

        for invocation in filters:
            filter_obj = self.get(invocation.name)

            if filter_obj is None:
                message = f"Unknown filter applied: '{invocation.name}'."
                logger.warning(message)
                if on_diagnostic:
                    on_diagnostic('WARNING', 'unknown_filter', message)
                continue

            try:
                value = filter_obj.apply(value, list(invocation.args), context)
            except Exception as e:
                message = f"Filter '{invocation.name}' failed: {e}"
                logger.warning(message)
                if on_diagnostic:
                    on_diagnostic('WARNING', 'filter_failed', message)

        return value
