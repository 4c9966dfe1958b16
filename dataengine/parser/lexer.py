"""
Lexer for the data engine template grammar.

Recognises three classes of constructs inside arbitrary text, in this
priority:
- Conditional markers: [if:...], [elseif:...] / [else if:...], [else], [/if]
- Fallback wrappers: %source:path%[fallback]...[/fallback]
- Bare tags: %source:path|filter(args)|filter%

Everything else is literal text.
"""

from enum import Enum
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator, Optional, Sequence, Tuple
import re


# Filter chain: any run of non-delimiter characters or quoted strings,
# so a '%' inside a quoted argument does not close the tag.
FILTER_CHAIN = r"""(?:[^%'"]|'[^']*'|"[^"]*")+"""

# Any %...% span, used for tags embedded in conditions
ANY_TAG = r"""%(?:[^%'"\s]|'[^']*'|"[^"]*")(?:[^%'"]|'[^']*'|"[^"]*")*%"""

IF_OPEN = r"\[if:(?P<if_cond>[^\]]+)\]"
ELSE_IF = r"\[else\s?if:(?P<elif_cond>[^\]]+)\]"
ELSE = r"\[else\]"
IF_CLOSE = r"\[/if\]"

MARKER_RE = re.compile(
    f"(?P<if_open>{IF_OPEN})|(?P<else_if>{ELSE_IF})|(?P<else_marker>{ELSE})|(?P<if_close>{IF_CLOSE})"
)

CONDITION_RE = re.compile(
    r"^\s*(?P<tag>" + ANY_TAG + r")\s+"
    r"(?P<op>==|!=|>=|<=|>|<|not_contains|contains)\s+"
    r"'?(?P<literal>[^']*?)'?\s*$",
    re.DOTALL
)

FILTER_RE = re.compile(r"^(?P<name>[A-Za-z0-9_]+)(?:\((?P<args>.*)\))?$", re.DOTALL)


class TokenType(Enum):
    """Token types for the template lexer."""
    TEXT = 'TEXT'

    # Conditional markers
    IF_OPEN = 'IF_OPEN'         # [if:condition]
    ELSE_IF = 'ELSE_IF'         # [elseif:condition]
    ELSE = 'ELSE'               # [else]
    IF_CLOSE = 'IF_CLOSE'       # [/if]

    # Tags
    FALLBACK = 'FALLBACK'       # %tag%[fallback]body[/fallback]
    TAG = 'TAG'                 # %tag%


@dataclass
class Token:
    """A token produced by the lexer."""
    type: TokenType
    value: str
    position: int
    end: int
    argument: Optional[str] = None   # condition of IF_OPEN / ELSE_IF

    @property
    def is_marker(self) -> bool:
        return self.type in (TokenType.IF_OPEN, TokenType.ELSE_IF, TokenType.ELSE, TokenType.IF_CLOSE)

    def __repr__(self):
        return f"Token({self.type.name}, {self.value!r}, pos={self.position})"


class TagPatterns:
    """
    Compiled tag patterns for one set of source keywords.

    Attributes:
        tag: Bare tag with named groups source/path/filters
        fallback: Tag followed by [fallback]body[/fallback]
        token: Combined pattern in lexer priority order
    """

    def __init__(self, keywords: Tuple[str, ...]):
        self.keywords = keywords
        sources = '|'.join(re.escape(k) for k in sorted(keywords, key=len, reverse=True))

        tag_body = rf"%(?:{sources}):[\w.\-]+(?:\s*\|\s*{FILTER_CHAIN})?%"

        self.tag = re.compile(
            rf"%(?P<source>{sources}):(?P<path>[\w.\-]+)(?:\s*\|\s*(?P<filters>{FILTER_CHAIN}))?%"
        )
        self.fallback = re.compile(
            rf"(?P<fb_tag>{tag_body})\[fallback\](?P<fb_body>.*?)\[/fallback\]",
            re.DOTALL
        )
        self.token = re.compile(
            rf"{MARKER_RE.pattern}"
            rf"|(?P<fallback>(?P<fb_tag>{tag_body})\[fallback\](?P<fb_body>.*?)\[/fallback\])"
            rf"|(?P<tag>{tag_body})",
            re.DOTALL
        )


@lru_cache(maxsize=32)
def get_patterns(keywords: Tuple[str, ...]) -> TagPatterns:
    """Compiled patterns are shared between processors with the same keywords."""
    return TagPatterns(tuple(keywords))


class Lexer:
    """
    Lexer for template text.

    tokens() is a generator: it scans lazily and cannot be restarted;
    create a new Lexer (or call tokens() again) to rescan.
    """

    def __init__(self, text: str, keywords: Sequence[str]):
        self.text = text or ''
        self.patterns = get_patterns(tuple(keywords))

    def tokens(self, include_text: bool = False) -> Iterator[Token]:
        """
        Yield tokens in source order.

        Args:
            include_text: Also yield TEXT tokens for literal runs
        """
        pos = 0

        for match in self.patterns.token.finditer(self.text):
            if include_text and match.start() > pos:
                yield Token(TokenType.TEXT, self.text[pos:match.start()], pos, match.start())

            yield self._token_from_match(match)
            pos = match.end()

        if include_text and pos < len(self.text):
            yield Token(TokenType.TEXT, self.text[pos:], pos, len(self.text))

    def markers(self) -> Iterator[Token]:
        """Yield only conditional markers."""
        for match in MARKER_RE.finditer(self.text):
            yield self._token_from_match(match)

    def _token_from_match(self, match) -> Token:
        groups = match.groupdict()
        start, end, value = match.start(), match.end(), match.group(0)

        if groups.get('if_open'):
            return Token(TokenType.IF_OPEN, value, start, end, groups['if_cond'])
        if groups.get('else_if'):
            return Token(TokenType.ELSE_IF, value, start, end, groups['elif_cond'])
        if groups.get('else_marker'):
            return Token(TokenType.ELSE, value, start, end)
        if groups.get('if_close'):
            return Token(TokenType.IF_CLOSE, value, start, end)
        if groups.get('fallback'):
            return Token(TokenType.FALLBACK, value, start, end)
        return Token(TokenType.TAG, value, start, end)
