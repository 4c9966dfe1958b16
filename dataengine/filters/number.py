"""
Number filters for the data engine.

Provides number formatting:
- number_format: Decimal places and separators
- round: Round to decimal places
- abs: Absolute value
- percent: Format as percentage
- currency: Format as currency
"""

from typing import Any, Dict, List, Optional
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

from dataengine.filters.base import BaseFilter, arg_int, arg_str, to_text


# Currency configurations
CURRENCY_CONFIG = {
    'USD': {
        'symbol': '$',
        'decimal_sep': '.',
        'thousand_sep': ',',
        'decimal_places': 2,
        'symbol_position': 'before',
        'symbol_space': False,
    },
    'EUR': {
        'symbol': '€',
        'decimal_sep': ',',
        'thousand_sep': '.',
        'decimal_places': 2,
        'symbol_position': 'after',
        'symbol_space': True,
    },
    'GBP': {
        'symbol': '£',
        'decimal_sep': '.',
        'thousand_sep': ',',
        'decimal_places': 2,
        'symbol_position': 'before',
        'symbol_space': False,
    },
    'PLN': {
        'symbol': 'zł',
        'decimal_sep': ',',
        'thousand_sep': ' ',
        'decimal_places': 2,
        'symbol_position': 'after',
        'symbol_space': True,
    },
    'BRL': {
        'symbol': 'R$',
        'decimal_sep': ',',
        'thousand_sep': '.',
        'decimal_places': 2,
        'symbol_position': 'before',
        'symbol_space': True,
    },
}

NUMERIC_RE = re.compile(r'^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$')


def numeric_value(value: Any) -> Optional[float]:
    """
    Strict numeric check: numbers and plain numeric strings only.

    Returns:
        The float value, or None for anything else ('1,234', 'abc', lists)
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if isinstance(value, str) and NUMERIC_RE.match(value):
        return float(value)
    return None


def parse_number(value: Any) -> float:
    """
    Parse a value into a number, accepting formatted input.

    Handles:
    - int, float, Decimal
    - Strings with currency symbols and either separator convention
      (1.234,56 or 1,234.56)

    Raises:
        ValueError: If the value cannot be read as a number
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"Cannot parse {value!r} as number")

    if isinstance(value, (int, float, Decimal)):
        return float(value)

    value_str = to_text(value).strip()

    if not value_str:
        raise ValueError("Cannot parse empty string as number")

    # Remove currency symbols and spaces
    value_str = re.sub(r'[R$€£¥₹zł\s]', '', value_str)

    if ',' in value_str and '.' in value_str:
        # The last separator is the decimal one
        if value_str.rfind(',') > value_str.rfind('.'):
            value_str = value_str.replace('.', '').replace(',', '.')
        else:
            value_str = value_str.replace(',', '')
    elif ',' in value_str:
        # Exactly 1-2 digits after a single comma: decimal comma
        parts = value_str.split(',')
        if len(parts) == 2 and len(parts[1]) <= 2:
            value_str = value_str.replace(',', '.')
        else:
            value_str = value_str.replace(',', '')

    try:
        return float(value_str)
    except ValueError:
        raise ValueError(f"Cannot parse '{value}' as number")


def format_number(
    value: float,
    decimal_places: int = 2,
    decimal_sep: str = '.',
    thousand_sep: str = ','
) -> str:
    """Format a number with separators, rounding half away from zero."""
    decimal_places = max(decimal_places, 0)

    try:
        quantum = Decimal(1).scaleb(-decimal_places)
        rounded = Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return str(value)

    formatted = f"{abs(rounded):.{decimal_places}f}"
    is_negative = rounded < 0

    if '.' in formatted:
        integer_part, decimal_part = formatted.split('.')
    else:
        integer_part, decimal_part = formatted, None

    # Add thousand separators from right to left
    if thousand_sep:
        result_chars = []
        for i, char in enumerate(reversed(integer_part)):
            if i > 0 and i % 3 == 0:
                result_chars.append(thousand_sep)
            result_chars.append(char)
        integer_part = ''.join(reversed(result_chars))

    if is_negative:
        integer_part = '-' + integer_part

    if decimal_part is not None:
        return f"{integer_part}{decimal_sep}{decimal_part}"
    return integer_part


class NumberFormatFilter(BaseFilter):
    """
    Format a number with decimal places and separators.

    Usage: %custom:price|number_format(2)%
           %custom:price|number_format(2, ',', '.')%

    Params:
        - decimals (int): Number of decimal places (default: 2)
        - dec_point (str): Decimal separator (default: ".")
        - thousands_sep (str): Thousands separator (default: ",")

    Non-numeric input is returned as text.
    """
    name = "number_format"
    args = ["decimals", "dec_point", "thousands_sep"]
    description = "Format a number"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        number = numeric_value(value)
        if number is None:
            return to_text(value)

        return format_number(
            number,
            decimal_places=arg_int(args, 0, 2),
            decimal_sep=arg_str(args, 1, '.'),
            thousand_sep=arg_str(args, 2, ',')
        )


class RoundFilter(BaseFilter):
    """
    Round a number to decimal places.

    Usage: %custom:rating|round(1)%

    Params:
        - decimals (int): Number of decimal places (default: 0)
    """
    name = "round"
    args = ["decimals"]
    description = "Round a number"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> Any:
        try:
            number = parse_number(value)
        except ValueError:
            return to_text(value)

        decimals = arg_int(args, 0, 0)
        rounded = float(Decimal(repr(number)).quantize(Decimal(1).scaleb(-max(decimals, 0)), rounding=ROUND_HALF_UP))

        if decimals <= 0:
            return int(rounded)
        return rounded


class AbsFilter(BaseFilter):
    """
    Get absolute value of a number.

    Usage: %custom:balance|abs%
    """
    name = "abs"
    description = "Absolute value"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> Any:
        try:
            return abs(parse_number(value))
        except ValueError:
            return to_text(value)


class PercentFilter(BaseFilter):
    """
    Format a number as percentage.

    Usage: %custom:ratio|percent%          # 0.15 -> 15%
           %custom:ratio|percent(2)%       # 0.1567 -> 15.67%
           %custom:share|percent(0, false)%  # 15 -> 15%

    Params:
        - decimals (int): Number of decimal places (default: 0)
        - multiply (bool): Whether to multiply by 100 (default: true)
    """
    name = "percent"
    aliases = ["percentage"]
    args = ["decimals", "multiply"]
    description = "Format as percentage"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        try:
            number = parse_number(value)
        except ValueError:
            return to_text(value)

        multiply = arg_str(args, 1, 'true').strip().lower() not in ('false', '0', 'no', 'off')
        if multiply:
            number *= 100

        decimal_sep = ',' if str(context.get('locale', 'en_US')).startswith(('pt', 'pl')) else '.'

        formatted = format_number(
            number,
            decimal_places=arg_int(args, 0, 0),
            decimal_sep=decimal_sep,
            thousand_sep=''
        )

        return f"{formatted}%"


class CurrencyFilter(BaseFilter):
    """
    Format a number as currency.

    Usage: %custom:price|currency%
           %custom:price|currency('EUR')%

    Params:
        - currency_code (str): ISO currency code (default: USD)

    Supported currencies:
        - USD: $1,234.56
        - EUR: 1.234,56 €
        - GBP: £1,234.56
        - PLN: 1 234,56 zł
        - BRL: R$ 1.234,56
    """
    name = "currency"
    aliases = ["money"]
    args = ["currency_code"]
    description = "Format as currency"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        if to_text(value) == '':
            return ''

        currency_code = arg_str(args, 0, 'USD').upper()
        config = CURRENCY_CONFIG.get(currency_code, CURRENCY_CONFIG['USD'])

        try:
            number = parse_number(value)
        except ValueError:
            return to_text(value)

        formatted = format_number(
            number,
            decimal_places=config['decimal_places'],
            decimal_sep=config['decimal_sep'],
            thousand_sep=config['thousand_sep']
        )

        symbol = config['symbol']
        space = ' ' if config['symbol_space'] else ''

        if config['symbol_position'] == 'before':
            return f"{symbol}{space}{formatted}"
        return f"{formatted}{space}{symbol}"
