"""
List filters for the data engine.

Multi-value fields (checkboxes, selects, relationships) arrive either as a
list or as text joined with ", ". Every filter here accepts both, drops
empty entries and, unless it reduces to one value, rejoins with ", ".

- limit, join, sort, exclude, wrap
- first, last, count
- term_links
"""

from typing import Any, Dict, List
from html import escape

from dataengine.filters.base import BaseFilter, arg_int, arg_str, to_list
from dataengine.values import LIST_SEPARATOR, Term


class LimitFilter(BaseFilter):
    """
    Keep the first N entries.

    Usage: %custom:tags|limit(3)%
    """
    name = "limit"
    args = ["count"]
    description = "Keep the first N items"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        items = to_list(value)
        count = max(arg_int(args, 0, len(items)), 0)
        return LIST_SEPARATOR.join(items[:count])


class JoinFilter(BaseFilter):
    """
    Rejoin entries with another separator.

    Usage: %custom:features|join(' / ')%
    """
    name = "join"
    aliases = ["separator"]
    args = ["separator"]
    description = "Join items with a separator"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        return arg_str(args, 0, LIST_SEPARATOR).join(to_list(value))


class SortFilter(BaseFilter):
    """
    Sort entries lexicographically.

    Usage: %custom:tags|sort%
           %custom:tags|sort('desc')%
    """
    name = "sort"
    args = ["direction"]
    description = "Sort items (asc or desc)"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        direction = arg_str(args, 0, 'asc').strip().lower()
        reverse = direction in ('desc', 'reverse')
        return LIST_SEPARATOR.join(sorted(to_list(value), reverse=reverse))


class ExcludeFilter(BaseFilter):
    """
    Drop entries equal to any of the arguments.

    Usage: %custom:colors|exclude('Red', 'Blue')%
    """
    name = "exclude"
    args = ["values"]
    description = "Remove the given items"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        excluded = {str(arg).strip() for arg in args}
        return LIST_SEPARATOR.join(item for item in to_list(value) if item.strip() not in excluded)


class WrapFilter(BaseFilter):
    """
    Wrap each entry with a prefix and suffix.

    Usage: %custom:features|wrap('<li>', '</li>', '')%

    Params:
        - prefix (str): Text before each item
        - suffix (str): Text after each item
        - separator (str): Joins the wrapped items (default: ", ")
    """
    name = "wrap"
    args = ["prefix", "suffix", "separator"]
    description = "Wrap each item"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        prefix = arg_str(args, 0, '')
        suffix = arg_str(args, 1, '')
        separator = arg_str(args, 2, LIST_SEPARATOR)
        return separator.join(f"{prefix}{item}{suffix}" for item in to_list(value))


class FirstFilter(BaseFilter):
    """
    First entry.

    Usage: %custom:gallery_captions|first%
    """
    name = "first"
    description = "First item"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        items = to_list(value)
        return items[0] if items else ''


class LastFilter(BaseFilter):
    """
    Last entry.

    Usage: %custom:gallery_captions|last%
    """
    name = "last"
    description = "Last item"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        items = to_list(value)
        return items[-1] if items else ''


class CountFilter(BaseFilter):
    """
    Number of entries.

    Usage: %custom:tags|count%
    """
    name = "count"
    aliases = ["length"]
    description = "Number of items"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> int:
        return len(to_list(value))


class TermLinksFilter(BaseFilter):
    """
    Render taxonomy terms behind the current tag as links.

    Usage: %native:categories|term_links%
           %native:categories|term_links(' | ')%

    Reads the raw terms the resolver stored for this tag; passes the value
    through when there are none.
    """
    name = "term_links"
    args = ["separator"]
    description = "Taxonomy terms as links"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> Any:
        terms = context.get('terms', {}).get(context.get('terms_key'))
        if not terms:
            return value

        links = [
            f'<a href="{escape(term.link, quote=True)}">{escape(term.name, quote=False)}</a>'
            for term in terms
            if isinstance(term, Term)
        ]
        return arg_str(args, 0, LIST_SEPARATOR).join(links)
