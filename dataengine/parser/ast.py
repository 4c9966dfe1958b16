"""
Syntax nodes for the data engine template grammar.

Templates are rewritten in place rather than compiled into a tree, so the
nodes here describe one recognised construct at a time together with its
span in the current text.
"""

from dataclasses import dataclass, field
from typing import List, Optional
from enum import Enum


class ComparisonOp(Enum):
    """Comparison operators for conditions."""
    EQ = '=='
    NE = '!='
    GT = '>'
    GTE = '>='
    LT = '<'
    LTE = '<='
    CONTAINS = 'contains'
    NOT_CONTAINS = 'not_contains'

    @property
    def is_numeric(self) -> bool:
        return self in (ComparisonOp.GT, ComparisonOp.GTE, ComparisonOp.LT, ComparisonOp.LTE)


@dataclass
class Node:
    """Base class for syntax nodes."""
    position: int = 0


@dataclass
class FilterInvocation(Node):
    """
    A filter applied to a tag value.

    Example: truncate(20, '...') in %custom:intro|truncate(20, '...')%
    Arguments stay untyped strings; each filter coerces them itself.
    """
    name: str = ""
    args: List[str] = field(default_factory=list)


@dataclass
class Tag(Node):
    """
    A field reference with optional filters.

    Example: %custom:hero_image.url|lowercase%

    Attributes:
        source: Source keyword ('custom', 'native', 'row')
        path: Path segments ['hero_image', 'url']
        filters: Filters to apply left to right
        text: The original tag text including delimiters
    """
    source: str = ""
    path: List[str] = field(default_factory=list)
    filters: List[FilterInvocation] = field(default_factory=list)
    text: str = ""

    @property
    def field_name(self) -> str:
        return self.path[0] if self.path else ""

    @property
    def properties(self) -> List[str]:
        return self.path[1:]


@dataclass
class ConditionExpr(Node):
    """
    A condition of an [if] / [elseif] marker.

    Example: %custom:price|round% >= '100'
    """
    tag_text: str = ""
    operator: ComparisonOp = ComparisonOp.EQ
    literal: str = ""


@dataclass
class Branch(Node):
    """
    One branch of a conditional block.

    condition is None for the [else] branch.
    """
    condition: Optional[str] = None
    body: str = ""

    @property
    def is_else(self) -> bool:
        return self.condition is None


@dataclass
class ConditionalBlock(Node):
    """
    A complete [if]...[/if] block located in a template.

    Example:
        [if:%custom:price% > 100]Premium[elseif:%custom:price% > 50]Standard[else]Basic[/if]

    Attributes:
        end: Offset just past the closing [/if]
        branches: Branches in source order
    """
    end: int = 0
    branches: List[Branch] = field(default_factory=list)


@dataclass
class FallbackBlock(Node):
    """
    A tag followed by a default fragment.

    Example: %native:subtitle%[fallback]No subtitle[/fallback]
    """
    end: int = 0
    tag_text: str = ""
    body: str = ""
