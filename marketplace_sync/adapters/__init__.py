# -*- coding: utf-8 -*-
"""
Platform Adapters - Her platform için özel fiyat/stok gönderim adaptörleri
"""

from typing import Optional

from models import Platform
from .base import (
    BasePlatformAdapter,
    ProductUpdate,
    RemoteTarget,
    SyncOutcome,
    SyncResult,
)
from .trendyol import TrendyolAdapter
from .woocommerce import WooCommerceAdapter

PLATFORM_ADAPTERS = {
    Platform.TRENDYOL: TrendyolAdapter,
    Platform.WOOCOMMERCE: WooCommerceAdapter,
}


def get_adapter(account, session=None, timeout=None) -> Optional[BasePlatformAdapter]:
    """Hesabın platformu için adaptör döndür; adaptör yoksa None"""
    adapter_class = PLATFORM_ADAPTERS.get(account.platform)
    if adapter_class is None:
        return None
    return adapter_class(account, session=session, timeout=timeout)


__all__ = [
    'BasePlatformAdapter',
    'ProductUpdate',
    'RemoteTarget',
    'SyncOutcome',
    'SyncResult',
    'TrendyolAdapter',
    'WooCommerceAdapter',
    'PLATFORM_ADAPTERS',
    'get_adapter',
]
