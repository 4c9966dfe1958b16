"""
Date filters for the data engine.

Provides date formatting:
- date_format: Format dates with PHP-style format letters
- relative_date: Human-readable relative dates
"""

from typing import Any, Callable, Dict, List, Optional
from datetime import date, datetime, time, timezone
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta
import calendar

from dataengine.filters.base import BaseFilter, arg_str, to_text
from dataengine.filters.number import numeric_value


DEFAULT_FORMAT = 'Y-m-d H:i:s'
DEFAULT_LOCALE = 'en_US'

# Month names for locales
MONTH_NAMES = {
    'en_US': [
        'January', 'February', 'March', 'April', 'May', 'June',
        'July', 'August', 'September', 'October', 'November', 'December'
    ],
    'pt_BR': [
        'Janeiro', 'Fevereiro', 'Março', 'Abril', 'Maio', 'Junho',
        'Julho', 'Agosto', 'Setembro', 'Outubro', 'Novembro', 'Dezembro'
    ],
    'pl_PL': [
        'Styczeń', 'Luty', 'Marzec', 'Kwiecień', 'Maj', 'Czerwiec',
        'Lipiec', 'Sierpień', 'Wrzesień', 'Październik', 'Listopad', 'Grudzień'
    ],
}

WEEKDAY_NAMES = {
    'en_US': [
        'Monday', 'Tuesday', 'Wednesday', 'Thursday',
        'Friday', 'Saturday', 'Sunday'
    ],
    'pt_BR': [
        'Segunda-feira', 'Terça-feira', 'Quarta-feira', 'Quinta-feira',
        'Sexta-feira', 'Sábado', 'Domingo'
    ],
    'pl_PL': [
        'Poniedziałek', 'Wtorek', 'Środa', 'Czwartek',
        'Piątek', 'Sobota', 'Niedziela'
    ],
}


def normalize_locale(locale: Optional[str]) -> str:
    """Map 'pt', 'pt-BR', 'pl_PL'... onto a supported locale (en_US otherwise)."""
    if not locale:
        return DEFAULT_LOCALE
    locale = str(locale).strip().replace('-', '_')
    if locale in MONTH_NAMES:
        return locale
    prefix = locale[:2].lower()
    for known in MONTH_NAMES:
        if known.lower().startswith(prefix):
            return known
    return DEFAULT_LOCALE


def parse_date(value: Any) -> datetime:
    """
    Parse a value into a datetime object.

    Handles:
    - datetime and date objects
    - Unix timestamps, numbers or numeric strings (milliseconds when > 1e11)
    - ISO format strings
    - Various string formats (via dateutil)

    Raises:
        ValueError: If the value is empty or cannot be parsed
    """
    if isinstance(value, datetime):
        return value

    if isinstance(value, date):
        return datetime.combine(value, time())

    if value is None or value == '':
        raise ValueError("Cannot parse empty value as date")

    timestamp = numeric_value(value)
    if timestamp is not None:
        # Large numbers are milliseconds
        if timestamp > 1e11:
            timestamp /= 1000
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)

    value_str = to_text(value).strip()

    if not value_str:
        raise ValueError("Cannot parse empty string as date")

    # Try ISO format first
    try:
        return datetime.fromisoformat(value_str.replace('Z', '+00:00'))
    except ValueError:
        pass

    # Try dateutil parser (handles many formats)
    try:
        return date_parser.parse(value_str)
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Cannot parse '{value}' as date: {e}")


def _offset(dt: datetime, colon: bool) -> str:
    delta = dt.utcoffset()
    seconds = int(delta.total_seconds()) if delta is not None else 0
    sign = '-' if seconds < 0 else '+'
    hours, minutes = divmod(abs(seconds) // 60, 60)
    separator = ':' if colon else ''
    return f"{sign}{hours:02d}{separator}{minutes:02d}"


def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def _unix(dt: datetime) -> int:
    return int(as_utc(dt).timestamp())


def _ordinal_suffix(day: int) -> str:
    if 11 <= day % 100 <= 13:
        return 'th'
    return {1: 'st', 2: 'nd', 3: 'rd'}.get(day % 10, 'th')


def _hour12(dt: datetime) -> int:
    return dt.hour % 12 or 12


def _month_name(dt: datetime, locale: str) -> str:
    return MONTH_NAMES[locale][dt.month - 1]


def _weekday_name(dt: datetime, locale: str) -> str:
    return WEEKDAY_NAMES[locale][dt.weekday()]


# Format letter -> formatter(dt, locale)
FORMAT_LETTERS: Dict[str, Callable[[datetime, str], str]] = {
    # Day
    'd': lambda dt, loc: f"{dt.day:02d}",
    'j': lambda dt, loc: str(dt.day),
    'D': lambda dt, loc: _weekday_name(dt, loc)[:3],
    'l': lambda dt, loc: _weekday_name(dt, loc),
    'N': lambda dt, loc: str(dt.isoweekday()),
    'w': lambda dt, loc: str(dt.isoweekday() % 7),
    'z': lambda dt, loc: str(dt.timetuple().tm_yday - 1),
    'S': lambda dt, loc: _ordinal_suffix(dt.day),

    # Week
    'W': lambda dt, loc: f"{dt.isocalendar()[1]:02d}",

    # Month
    'F': lambda dt, loc: _month_name(dt, loc),
    'M': lambda dt, loc: _month_name(dt, loc)[:3],
    'm': lambda dt, loc: f"{dt.month:02d}",
    'n': lambda dt, loc: str(dt.month),
    't': lambda dt, loc: str(calendar.monthrange(dt.year, dt.month)[1]),

    # Year
    'L': lambda dt, loc: '1' if calendar.isleap(dt.year) else '0',
    'Y': lambda dt, loc: f"{dt.year:04d}",
    'y': lambda dt, loc: f"{dt.year % 100:02d}",

    # Time
    'a': lambda dt, loc: 'am' if dt.hour < 12 else 'pm',
    'A': lambda dt, loc: 'AM' if dt.hour < 12 else 'PM',
    'g': lambda dt, loc: str(_hour12(dt)),
    'G': lambda dt, loc: str(dt.hour),
    'h': lambda dt, loc: f"{_hour12(dt):02d}",
    'H': lambda dt, loc: f"{dt.hour:02d}",
    'i': lambda dt, loc: f"{dt.minute:02d}",
    's': lambda dt, loc: f"{dt.second:02d}",
    'u': lambda dt, loc: f"{dt.microsecond:06d}",
    'v': lambda dt, loc: f"{dt.microsecond // 1000:03d}",

    # Timezone
    'e': lambda dt, loc: dt.tzname() or 'UTC',
    'T': lambda dt, loc: dt.tzname() or 'UTC',
    'P': lambda dt, loc: _offset(dt, colon=True),
    'O': lambda dt, loc: _offset(dt, colon=False),

    # Full date/time
    'c': lambda dt, loc: format_date(dt, 'Y-m-d\\TH:i:sP', DEFAULT_LOCALE),
    'r': lambda dt, loc: format_date(dt, 'D, d M Y H:i:s O', DEFAULT_LOCALE),
    'U': lambda dt, loc: str(_unix(dt)),
}


def format_date(dt: datetime, format_str: str, locale: str = DEFAULT_LOCALE) -> str:
    """
    Format a datetime using PHP date() format letters.

    Letters without a meaning are copied as is; a backslash escapes the
    next character.

    Example: format_date(dt, 'd \\d\\e F \\d\\e Y', 'pt_BR') -> '15 de Janeiro de 2024'
    """
    locale = normalize_locale(locale)
    result = []
    escaped = False

    for char in format_str:
        if escaped:
            result.append(char)
            escaped = False
        elif char == '\\':
            escaped = True
        elif char in FORMAT_LETTERS:
            result.append(FORMAT_LETTERS[char](dt, locale))
        else:
            result.append(char)

    return ''.join(result)


class DateFormatFilter(BaseFilter):
    """
    Format a date value.

    Usage: %custom:event_date|date_format('d/m/Y')%
           %custom:event_date|date_format('j F Y', 'pl_PL')%

    Params:
        - format (str): PHP date() format (default: "Y-m-d H:i:s")
        - locale (str): Locale for month/day names (default: processor locale)

    Unparseable or empty input renders as "".
    """
    name = "date_format"
    aliases = ["date"]
    args = ["format", "locale"]
    description = "Format a date"

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        if value is None or value == '':
            return ''

        format_str = arg_str(args, 0, '') or DEFAULT_FORMAT
        locale = arg_str(args, 1, '') or context.get('locale', DEFAULT_LOCALE)

        try:
            dt = parse_date(value)
        except ValueError:
            return ''

        return format_date(dt, format_str, locale)


class RelativeDateFilter(BaseFilter):
    """
    Format date as relative time (e.g., "2 days ago", "in 3 months").

    Usage: %native:post_date|relative_date%
           %native:post_date|relative_date('pt_BR')%

    Params:
        - locale (str): Locale for output (default: processor locale)
    """
    name = "relative_date"
    aliases = ["timeago", "ago"]
    args = ["locale"]
    description = "Time distance from now"

    # unit -> (one, few, many); few/many only differ in Polish
    UNITS = {
        'en_US': {
            'second': ('second', 'seconds', 'seconds'),
            'minute': ('minute', 'minutes', 'minutes'),
            'hour': ('hour', 'hours', 'hours'),
            'day': ('day', 'days', 'days'),
            'week': ('week', 'weeks', 'weeks'),
            'month': ('month', 'months', 'months'),
            'year': ('year', 'years', 'years'),
        },
        'pt_BR': {
            'second': ('segundo', 'segundos', 'segundos'),
            'minute': ('minuto', 'minutos', 'minutos'),
            'hour': ('hora', 'horas', 'horas'),
            'day': ('dia', 'dias', 'dias'),
            'week': ('semana', 'semanas', 'semanas'),
            'month': ('mês', 'meses', 'meses'),
            'year': ('ano', 'anos', 'anos'),
        },
        'pl_PL': {
            'second': ('sekundę', 'sekundy', 'sekund'),
            'minute': ('minutę', 'minuty', 'minut'),
            'hour': ('godzinę', 'godziny', 'godzin'),
            'day': ('dzień', 'dni', 'dni'),
            'week': ('tydzień', 'tygodnie', 'tygodni'),
            'month': ('miesiąc', 'miesiące', 'miesięcy'),
            'year': ('rok', 'lata', 'lat'),
        },
    }

    PHRASES = {
        'en_US': ("{} ago", "in {}"),
        'pt_BR': ("há {}", "em {}"),
        'pl_PL': ("{} temu", "za {}"),
    }

    def apply(self, value: Any, args: List[str], context: Dict[str, Any]) -> str:
        if value is None or value == '':
            return ''

        locale = normalize_locale(arg_str(args, 0, '') or context.get('locale', DEFAULT_LOCALE))

        try:
            dt = parse_date(value)
        except ValueError:
            return ''

        now = as_utc(context.get('now') or datetime.now(timezone.utc))
        dt = as_utc(dt)
        count, unit = self.distance(now, dt)
        is_past = now >= dt

        past, future = self.PHRASES[locale]
        phrase = past if is_past else future
        return phrase.format(f"{count} {self.unit_name(locale, unit, count)}")

    @staticmethod
    def distance(now: datetime, dt: datetime):
        """Largest whole unit between two datetimes, as (count, unit)."""
        total_seconds = abs((now - dt).total_seconds())

        if total_seconds < 60:
            return int(total_seconds), 'second'
        if total_seconds < 3600:
            return int(total_seconds / 60), 'minute'
        if total_seconds < 86400:
            return int(total_seconds / 3600), 'hour'
        if total_seconds < 604800:
            return int(total_seconds / 86400), 'day'

        start, end = sorted((now, dt))
        delta = relativedelta(end, start)
        if delta.years:
            return delta.years, 'year'
        if delta.months:
            return delta.months, 'month'
        return int(total_seconds / 604800), 'week'

    def unit_name(self, locale: str, unit: str, count: int) -> str:
        one, few, many = self.UNITS[locale][unit]
        if count == 1:
            return one
        if locale == 'pl_PL':
            if count % 10 in (2, 3, 4) and count % 100 not in (12, 13, 14):
                return few
            return many
        return few
