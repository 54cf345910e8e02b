def format_php(centavos: int) -> str:
    """Format centavos as PHP string: 25720 -> '₱257.20'"""
    sign = "-" if centavos < 0 else ""
    return f"{sign}₱{abs(centavos) / 100:,.2f}"


def parse_php(text: str) -> int | None:
    """Parse a peso amount string into centavos. Returns None on invalid input.

    Accepts formats like '257', '257.20', '₱1,257.20'.
    """
    text = text.strip().removeprefix("₱").replace(",", "").strip()
    if not text:
        return None
    try:
        return int(round(float(text) * 100))
    except ValueError:
        return None
