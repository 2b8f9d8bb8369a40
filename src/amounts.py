from decimal import Decimal, InvalidOperation

# Four fractional digits, both on input and on output.
PRECISION = 4
QUANTUM = Decimal(1).scaleb(-PRECISION)
ZERO = Decimal("0")

# Largest single amount. 2**32 of them still sum within the default 28-digit context.
MAX_INTEGER_DIGITS = 14
MAX_AMOUNT = Decimal(10) ** MAX_INTEGER_DIGITS - QUANTUM


def parse_amount(text: str) -> Decimal:
    """
    Parse a fixed-point amount with at most four fractional digits.

    Raises ValueError for anything that is not a finite, non-negative decimal
    of the allowed precision. Surrounding whitespace is ignored.
    """
    try:
        amount = Decimal(text.strip())
    except InvalidOperation:
        raise ValueError(f"not a decimal amount: {text!r}") from None

    if not amount.is_finite():
        raise ValueError(f"amount must be finite: {text!r}")
    if amount < 0:
        raise ValueError(f"amount must not be negative: {text!r}")
    if amount.as_tuple().exponent < -PRECISION:
        raise ValueError(f"amount has more than {PRECISION} fractional digits: {text!r}")
    if amount > MAX_AMOUNT:
        raise ValueError(f"amount exceeds {MAX_AMOUNT}: {text!r}")

    return amount


def format_amount(value: Decimal) -> str:
    """Render with exactly four fractional digits, e.g. 1.5 -> '1.5000'."""
    quantized = value.quantize(QUANTUM)
    if quantized.is_zero():
        quantized = quantized.copy_abs()
    return f"{quantized:f}"
