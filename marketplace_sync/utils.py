# -*- coding: utf-8 -*-
import asyncio
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


def run_async(coro):
    """Sync wrapper for non-async contexts (Flask request thread'inde event loop yok)"""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        asyncio.set_event_loop(None)
        loop.close()


def to_decimal(value) -> Decimal:
    """Sayıya çevir; 'abc', NaN ve sonsuz değerler ValueError yükseltir"""
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"Geçersiz sayı: {value}")
    if not number.is_finite():
        raise ValueError(f"Geçersiz sayı: {value}")
    return number


def round_price(value) -> float:
    """2 haneye yuvarla (banker's rounding değil, 0.005 yukarı)"""
    return float(to_decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def parse_float(value, default: float = 0.0) -> float:
    """Excel hücresini sayıya çevir; '1.234,50' gibi Türkçe biçimleri de dener"""
    if value is None:
        return default
    text = str(value).strip().replace("₺", "").replace("TL", "").strip()
    if not text:
        return default
    for candidate in (text, text.replace(".", "").replace(",", "."), text.replace(",", ".")):
        try:
            number = Decimal(candidate)
        except InvalidOperation:
            continue
        if number.is_finite():
            return float(number)
    return default


def parse_int(value, default: int = 0) -> int:
    number = parse_float(value, default=None)
    if number is None:
        return default
    return int(number)


def clean_str(value) -> str:
    """Hücre değerini kırpılmış string'e çevir; boş/NaN için ''"""
    if value is None:
        return ""
    text = str(value).strip()
    if text.lower() in ("nan", "none"):
        return ""
    # Excel sayısal barkodları '8690000000001.0' olarak okunabiliyor
    if text.endswith(".0") and text[:-2].isdigit():
        text = text[:-2]
    return text
