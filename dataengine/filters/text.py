"""
Text filters for the data engine.

Provides string manipulation filters:
- uppercase, lowercase, capitalize, title
- trim, strip_tags, truncate
- replace, default, append, prepend
- boolean
"""

from typing import Any, Dict, List
import re

from dataengine.filters.base import BaseFilter, arg_int, arg_str, to_text


TAG_RE = re.compile(r'<[^>]*>')

TRUE_WORDS = frozenset([
    'true', '1', 'yes', 'on', 'y',
    'tak',      # pl
    'sim',      # pt
    'oui',      # fr
    'ja',       # de / nl
    'si', 'sí', # es / it
])


def strip_tags(text: str) -> str:
    return TAG_RE.sub('', text)


class UppercaseFilter(BaseFilter):
    """
    Convert value to uppercase.

    Usage: %custom:name|uppercase%
    """
    name = "uppercase"
    aliases = ["upper"]
    description = "Convert text to uppercase"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        return to_text(value).upper()


class LowercaseFilter(BaseFilter):
    """
    Convert value to lowercase.

    Usage: %custom:name|lowercase%
    """
    name = "lowercase"
    aliases = ["lower"]
    description = "Convert text to lowercase"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        return to_text(value).lower()


class CapitalizeFilter(BaseFilter):
    """
    Uppercase the first character, leave the rest untouched.

    Usage: %custom:name|capitalize%
    """
    name = "capitalize"
    aliases = ["ucfirst"]
    description = "Uppercase the first letter"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        text = to_text(value)
        return text[:1].upper() + text[1:]


class TitleFilter(BaseFilter):
    """
    Capitalize first letter of each word.

    Usage: %custom:name|title%
    """
    name = "title"
    aliases = ["ucwords"]
    description = "Capitalize each word"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        return to_text(value).title()


class TrimFilter(BaseFilter):
    """
    Remove leading and trailing whitespace (or the given characters).

    Usage: %custom:value|trim%
           %custom:value|trim('/')%
    """
    name = "trim"
    args = ["characters"]
    description = "Strip surrounding whitespace"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        chars = args[0] if args and args[0] != '' else None
        return to_text(value).strip(chars)


class StripTagsFilter(BaseFilter):
    """
    Remove HTML tags.

    Usage: %native:post_content|strip_tags%
    """
    name = "strip_tags"
    description = "Remove HTML tags"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        return strip_tags(to_text(value))


class TruncateFilter(BaseFilter):
    """
    Truncate tag-stripped text to a number of characters.

    Usage: %native:post_content|truncate(100)%
           %native:post_content|truncate(20, ' [more]')%

    Params:
        - length (int): Maximum number of characters (default: 100)
        - suffix (str): Appended when the text was cut (default: "...")
    """
    name = "truncate"
    args = ["length", "suffix"]
    description = "Shorten text to N characters"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        text = strip_tags(to_text(value))

        length = max(arg_int(args, 0, 100), 0)
        suffix = arg_str(args, 1, "...")

        if len(text) <= length:
            return text

        return text[:length] + suffix


class ReplaceFilter(BaseFilter):
    """
    Replace occurrences of a string.

    Usage: %custom:value|replace('old', 'new')%

    Params:
        - search (str): String to find
        - replacement (str): String to replace with (default: "")
    """
    name = "replace"
    args = ["search", "replacement"]
    description = "Replace text"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        text = to_text(value)

        if not args or args[0] == '':
            return text

        return text.replace(args[0], arg_str(args, 1, ''))


class DefaultFilter(BaseFilter):
    """
    Provide a default value if the input is empty or None.

    Usage: %custom:value|default('N/A')%

    Zero ("0") is a value, not an absence.
    """
    name = "default"
    args = ["value"]
    description = "Use a default when empty"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> Any:
        if to_text(value) == '':
            return arg_str(args, 0, '')
        return value


class AppendFilter(BaseFilter):
    """
    Append text to a non-empty value.

    Usage: %custom:price|append(' EUR')%
    """
    name = "append"
    aliases = ["suffix"]
    args = ["text"]
    description = "Append text when not empty"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        text = to_text(value)
        if text == '':
            return text
        return text + ''.join(args)


class PrependFilter(BaseFilter):
    """
    Prepend text to a non-empty value.

    Usage: %custom:phone|prepend('tel: ')%
    """
    name = "prepend"
    aliases = ["prefix"]
    args = ["text"]
    description = "Prepend text when not empty"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        text = to_text(value)
        if text == '':
            return text
        return ''.join(args) + text


class BooleanFilter(BaseFilter):
    """
    Parse a boolean-ish value.

    Usage: [if:%custom:featured|boolean% == '1']...[/if]

    true/1/yes/on (case-insensitive, plus a few locale variants such as
    'tak', 'sim', 'oui', 'ja', 'si') are True; everything else is False.
    """
    name = "boolean"
    aliases = ["to_bool", "bool"]
    description = "Parse yes/no text into a boolean"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> bool:
        if isinstance(value, bool):
            return value
        return to_text(value).strip().lower() in TRUE_WORDS
