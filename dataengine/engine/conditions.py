"""
Condition evaluator for [if] / [elseif] markers.

A condition is '<tag> <operator> <literal>':
    %custom:price% > '100'
    %native:post_status% == 'publish'
    %custom:tags|lowercase% contains 'sale'

The tag goes through the full substitution pipeline (filters included)
before it is compared.
"""

from typing import Callable, Optional
import logging
import re

from dataengine.parser.ast import ComparisonOp, ConditionExpr
from dataengine.parser.parser import TagParser

logger = logging.getLogger(__name__)

LEADING_NUMBER_RE = re.compile(r'^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?')


def to_float(value: str) -> float:
    """
    Lenient float parse: the leading numeric part of the text, 0.0 if none.

    Examples: '19.5' -> 19.5, '12px' -> 12.0, 'abc' -> 0.0
    """
    match = LEADING_NUMBER_RE.match(value or '')
    if not match:
        return 0.0
    try:
        return float(match.group(0))
    except (ValueError, OverflowError):
        return 0.0


def compare(left: str, op: ComparisonOp, right: str) -> bool:
    """Compare a rendered tag value with a literal."""
    if op.is_numeric:
        left_num, right_num = to_float(left), to_float(right)

        if op == ComparisonOp.GT:
            return left_num > right_num
        if op == ComparisonOp.GTE:
            return left_num >= right_num
        if op == ComparisonOp.LT:
            return left_num < right_num
        return left_num <= right_num

    if op == ComparisonOp.EQ:
        return left == right
    if op == ComparisonOp.NE:
        return left != right
    if op == ComparisonOp.CONTAINS:
        return right in left
    return right not in left


class ConditionEvaluator:
    """
    Evaluates condition strings.

    Args:
        parser: Parser used to read the condition
        render_tag: Callback rendering a tag string to its final text
        on_diagnostic: Optional callback(level, code, message)
    """

    def __init__(
        self,
        parser: TagParser,
        render_tag: Callable[[str], str],
        on_diagnostic: Optional[Callable[[str, str, str], None]] = None
    ):
        self.parser = parser
        self.render_tag = render_tag
        self.on_diagnostic = on_diagnostic

    def parse(self, condition: str) -> Optional[ConditionExpr]:
        expr = self.parser.parse_condition(condition)
        if expr is None:
            message = f"Malformed condition: '{condition}'"
            logger.warning(message)
            if self.on_diagnostic:
                self.on_diagnostic('WARNING', 'malformed_condition', message)
        return expr

    def evaluate(self, condition: str) -> bool:
        """
        Evaluate a condition string.

        Returns:
            The comparison result; False for malformed conditions
        """
        expr = self.parse(condition)
        if expr is None:
            return False

        left = self.render_tag(expr.tag_text)
        result = compare(left, expr.operator, expr.literal)

        logger.debug(f"Condition {expr.tag_text} {expr.operator.value} '{expr.literal}' -> {result}")
        return result
