import math
import re
from typing import Optional

_LEADING_FLOAT = re.compile(r"\d+(?:\.\d+)?|\.\d+")


def _leading_float(text: str) -> Optional[float]:
    m = _LEADING_FLOAT.match(text)
    return float(m.group(0)) if m else None


def parse_price(text: Optional[str]) -> Optional[float]:
    """
    Parse a store price such as "1.234,56€", "899,00 €" or "1,299.99".

    Everything except digits, commas and periods is dropped. When both
    separators appear, the last one is the decimal point and the other one
    groups thousands; a lone comma is the decimal point.
    """
    if not text:
        return None
    cleaned = re.sub(r"[^\d,.]", "", text)
    if "," in cleaned and "." in cleaned:
        if cleaned.rfind(",") > cleaned.rfind("."):
            cleaned = cleaned.replace(".", "").replace(",", ".", 1)
        else:
            cleaned = cleaned.replace(",", "")
    else:
        cleaned = cleaned.replace(",", ".", 1)
    return _leading_float(cleaned)


def parse_display_price(text: Optional[str]) -> Optional[float]:
    # Looser variant used on rendered cards: first numeric run only.
    if not text:
        return None
    m = re.search(r"[\d,.]+", text)
    if not m:
        return None
    return _leading_float(m.group(0).replace(",", ".", 1))


def detect_currency(text: str, default: str = "EUR") -> str:
    currency = default
    if "$" in text or "USD" in text:
        currency = "USD"
    if "€" in text or "EUR" in text:
        currency = "EUR"
    return currency


def format_price(currency: str, value: Optional[float]) -> str:
    return f"{currency} {value:.2f}" if value else ""


def discount_percent(current: Optional[float], original: Optional[float]) -> str:
    if original and current and original > current:
        return f"{math.floor((1 - current / original) * 100 + 0.5)}%"
    return ""


def parse_sales(text: str) -> int:
    m = re.search(r"(\d+)", text or "")
    return int(m.group(1)) if m else 0
