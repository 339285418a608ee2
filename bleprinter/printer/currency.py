"""Default currency formatter used when the caller does not supply one."""
import math
from typing import Callable, Optional

CurrencyFormatter = Callable[[float, str], str]

# code: (symbol, symbol before amount, decimals)
CURRENCIES = {
    "USD": ("$", True, 2),
    "PKR": ("₨", True, 2),
    "EUR": ("€", True, 2),
    "GBP": ("£", True, 2),
    "INR": ("₹", True, 2),
}


def _encodable(text: str, encoding: str) -> bool:
    try:
        text.encode(encoding)
    except UnicodeEncodeError:
        return False
    return True


def format_currency(amount: Optional[float], currency_code: str = "USD",
                    encoding: Optional[str] = None) -> str:
    """Format an amount with its currency symbol. Unknown codes use USD.

    When ``encoding`` is given and the symbol has no glyph in that code page,
    the ISO code is printed instead (``EUR 22.00``).
    """
    if amount is None or math.isnan(amount):
        amount = 0
    code = (currency_code or "USD").upper()
    if code not in CURRENCIES:
        code = "USD"
    symbol, before, decimals = CURRENCIES[code]
    value = f"{amount:.{decimals}f}"
    if encoding and not _encodable(symbol, encoding):
        return f"{code} {value}"
    return f"{symbol}{value}" if before else f"{value}{symbol}"


def currency_formatter(encoding: str) -> CurrencyFormatter:
    """Default formatter restricted to what ``encoding`` can print."""
    def formatter(amount, currency_code):
        return format_currency(amount, currency_code, encoding=encoding)
    return formatter
