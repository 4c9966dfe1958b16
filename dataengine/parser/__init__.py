"""
Template Parser Module

Provides lexing of the tag/block grammar and parsing into syntax nodes.
"""

from dataengine.parser.lexer import Lexer, Token, TokenType, TagPatterns, get_patterns
from dataengine.parser.ast import (
    ComparisonOp,
    FilterInvocation,
    Tag,
    ConditionExpr,
    Branch,
    ConditionalBlock,
    FallbackBlock
)
from dataengine.parser.parser import TagParser, split_top_level, unquote

__all__ = [
    'Lexer',
    'Token',
    'TokenType',
    'TagPatterns',
    'get_patterns',
    'TagParser',
    'split_top_level',
    'unquote',
    'ComparisonOp',
    'FilterInvocation',
    'Tag',
    'ConditionExpr',
    'Branch',
    'ConditionalBlock',
    'FallbackBlock'
]
