"""
Parser for the data engine template grammar.

Turns the constructs recognised by the lexer into syntax nodes:
- Tags: %custom:price|number_format(2)%
- Filter chains: |truncate(20, '...')|uppercase
- Conditions: %custom:price% > '100'
- Conditional blocks: [if:...]...[elseif:...]...[else]...[/if]
"""

from typing import Dict, List, Optional, Sequence

from dataengine.config import Config
from dataengine.parser.lexer import (
    Lexer,
    Token,
    TokenType,
    CONDITION_RE,
    FILTER_RE,
    get_patterns
)
from dataengine.parser.ast import (
    Tag,
    FilterInvocation,
    ComparisonOp,
    ConditionExpr,
    Branch,
    ConditionalBlock,
    FallbackBlock
)


QUOTES = ('"', "'")


def split_top_level(text: str, separator: str) -> List[str]:
    """
    Split on a separator that is not inside quotes or parentheses.

    Example: split_top_level("replace('a|b', 'c')|upper", '|')
             -> ["replace('a|b', 'c')", 'upper']
    """
    parts = []
    current = []
    quote = None
    depth = 0

    for char in text:
        if quote:
            current.append(char)
            if char == quote:
                quote = None
            continue

        if char in QUOTES:
            quote = char
        elif char == '(':
            depth += 1
        elif char == ')' and depth > 0:
            depth -= 1
        elif char == separator and depth == 0:
            parts.append(''.join(current))
            current = []
            continue

        current.append(char)

    parts.append(''.join(current))
    return parts


def unquote(arg: str) -> str:
    """Strip whitespace and one pair of surrounding quotes."""
    arg = arg.strip()
    if len(arg) >= 2 and arg[0] in QUOTES and arg[-1] == arg[0]:
        return arg[1:-1]
    return arg


class TagParser:
    """
    Parser for tags, filter chains, conditions and conditional blocks.

    Usage:
        parser = TagParser(('custom', 'native', 'row'))
        tag = parser.parse_tag('%custom:price|number_format(2)%')
    """

    def __init__(self, keywords: Optional[Sequence[str]] = None):
        self.keywords = tuple(keywords or Config.source_keywords())
        self.patterns = get_patterns(self.keywords)

    def lexer(self, text: str) -> Lexer:
        return Lexer(text, self.keywords)

    def parse_tag(self, text: str, position: int = 0) -> Optional[Tag]:
        """
        Parse a single tag.

        Args:
            text: Tag text including the % delimiters

        Returns:
            Tag, or None if the text is not a tag for a known source
        """
        match = self.patterns.tag.fullmatch(text.strip())
        if not match:
            return None

        path = [segment for segment in match.group('path').split('.') if segment]
        filters = self.parse_filters(match.group('filters') or '')

        return Tag(
            source=match.group('source'),
            path=path,
            filters=filters,
            text=match.group(0),
            position=position
        )

    def parse_filters(self, filters_string: str) -> List[FilterInvocation]:
        """
        Parse a filter chain (without the leading '|').

        Parts that are not 'name' or 'name(args)' are skipped.
        """
        filters = []
        if not filters_string or not filters_string.strip():
            return filters

        for part in split_top_level(filters_string, '|'):
            part = part.strip()
            match = FILTER_RE.match(part)
            if not match:
                continue

            args_string = match.group('args')
            args = []
            if args_string is not None and args_string.strip():
                args = [unquote(arg) for arg in split_top_level(args_string, ',')]

            filters.append(FilterInvocation(name=match.group('name'), args=args))

        return filters

    def invalid_filter_parts(self, filters_string: str) -> List[str]:
        """Filter chain parts that do not parse (used by validation)."""
        if not filters_string or not filters_string.strip():
            return []
        return [
            part.strip()
            for part in split_top_level(filters_string, '|')
            if not FILTER_RE.match(part.strip())
        ]

    def parse_condition(self, condition_string: str) -> Optional[ConditionExpr]:
        """
        Parse '<tag> <operator> <literal>'.

        Returns:
            ConditionExpr, or None when the condition is malformed
        """
        match = CONDITION_RE.match(condition_string or '')
        if not match:
            return None

        return ConditionExpr(
            tag_text=match.group('tag'),
            operator=ComparisonOp(match.group('op')),
            literal=match.group('literal')
        )

    def find_conditional_block(self, text: str) -> Optional[ConditionalBlock]:
        """
        Locate the first complete [if]...[/if] block.

        The closing marker is found by depth counting, so nested blocks stay
        inside their parent's branch bodies. Branch separators only count at
        the top level of the block. An [if:] without a matching [/if] is
        skipped and the search continues with the next opening marker.
        """
        markers = list(self.lexer(text).markers())

        for index, opener in enumerate(markers):
            if opener.type != TokenType.IF_OPEN:
                continue

            block = self._close_block(text, opener, markers[index + 1:])
            if block is not None:
                return block

        return None

    def _close_block(self, text: str, opener: Token, rest: List[Token]) -> Optional[ConditionalBlock]:
        depth = 0
        separators = []

        for token in rest:
            if token.type == TokenType.IF_OPEN:
                depth += 1
            elif token.type == TokenType.IF_CLOSE:
                if depth == 0:
                    return self._build_block(text, opener, separators, token)
                depth -= 1
            elif depth == 0:
                separators.append(token)

        return None

    def _build_block(
        self,
        text: str,
        opener: Token,
        separators: List[Token],
        closer: Token
    ) -> ConditionalBlock:
        branches = []
        condition = opener.argument
        body_start = opener.end
        branch_pos = opener.position

        for separator in separators:
            branches.append(Branch(condition=condition, body=text[body_start:separator.position], position=branch_pos))
            condition = separator.argument if separator.type == TokenType.ELSE_IF else None
            body_start = separator.end
            branch_pos = separator.position

        branches.append(Branch(condition=condition, body=text[body_start:closer.position], position=branch_pos))

        return ConditionalBlock(position=opener.position, end=closer.end, branches=branches)

    def extract_tags(self, text: str) -> List[str]:
        """
        Extract all tag strings from text without resolving them.

        Returns:
            Tag strings (including delimiters) in source order
        """
        return [match.group(0) for match in self.patterns.tag.finditer(text or '')]

    def parse_fallback(self, text: str, position: int = 0) -> Optional[FallbackBlock]:
        """
        Parse a single %tag%[fallback]...[/fallback] block.

        Returns:
            FallbackBlock spanning the whole text, or None
        """
        match = self.patterns.fallback.fullmatch(text)
        if not match:
            return None

        return FallbackBlock(
            position=position,
            end=position + len(text),
            tag_text=match.group('fb_tag'),
            body=match.group('fb_body')
        )

    def validate(self, text: str) -> Dict[str, List[str]]:
        """
        Check template structure.

        Reports unbalanced conditional markers, malformed conditions and
        filter chain parts that do not parse.

        Returns:
            Dict with 'valid' (bool), 'errors' (list), 'warnings' (list)
        """
        errors = []
        warnings = []
        depth = 0

        for token in self.lexer(text).markers():
            if token.type == TokenType.IF_OPEN:
                depth += 1
            elif token.type == TokenType.IF_CLOSE:
                if depth == 0:
                    errors.append(f"Unexpected [/if] at position {token.position}")
                    continue
                depth -= 1
            elif depth == 0:
                errors.append(f"Unexpected {token.value} outside of [if] block at position {token.position}")

            if token.argument is not None and self.parse_condition(token.argument) is None:
                errors.append(f"Malformed condition '{token.argument}' at position {token.position}")

        if depth > 0:
            errors.append(f"{depth} unclosed [if] block(s)")

        for match in self.patterns.tag.finditer(text or ''):
            for part in self.invalid_filter_parts(match.group('filters') or ''):
                warnings.append(f"Invalid filter '{part}' in {match.group(0)}")

        return {
            'valid': not errors,
            'errors': errors,
            'warnings': warnings
        }
