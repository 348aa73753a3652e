from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal("0.01")
# largest value SQLite stores in an INTEGER column
MAX_CENTS = 2**63 - 1
_CURRENCY_SYMBOLS = ("₹", "€", "$", "£")


def parse_amount(text) -> Decimal | None:
    """Parse a user-typed amount, or return None when it is not a number."""
    text = (str(text) if text is not None else "").strip()
    if not text:
        return None
    cleaned = text
    for symbol in _CURRENCY_SYMBOLS:
        cleaned = cleaned.replace(symbol, "")
    cleaned = (
        cleaned.replace("\u202f", "")
        .replace("\u00a0", "")
        .replace(" ", "")
    )
    if not cleaned:
        return None
    if "," in cleaned and "." in cleaned:
        if cleaned.rfind(",") > cleaned.rfind("."):
            cleaned = cleaned.replace(".", "")
            cleaned = cleaned.replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif "," in cleaned:
        cleaned = cleaned.replace(",", ".")
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None
    return value


def quantize(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value) -> int:
    if isinstance(value, float):
        value = repr(value)
    return int(quantize(value) * 100)


def from_cents(cents) -> Decimal:
    return (Decimal(int(cents)) / 100).quantize(CENT)


def format_amount(value: Decimal, symbol: str = "") -> str:
    value = quantize(value)
    text = "0.00" if value == 0 else f"{value:,.2f}"
    return f"{symbol}{text}"
