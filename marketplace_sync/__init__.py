# -*- coding: utf-8 -*-
"""
Marketplace Sync - Pazaryeri Fiyat/Stok Senkronizasyonu ve Ürün Eşleştirme
===========================================================================
Katalog ürünlerini pazaryeri hesaplarıyla (Trendyol, WooCommerce) eşleştirir,
fiyatları yüzdesel kurallarla aktarır ve müşteri sorularını içeri alır.

Kullanım:
    from marketplace_sync import resolve_tenant, bulk_update_prices

    ctx = resolve_tenant()
    result = bulk_update_prices(ctx, "base_price", 3, "inc_percent", 10)
"""

from .tenant import TenantContext, resolve_tenant, tenant_query
from .catalog import list_accounts, match_product, unmatch_product, search_remote_products
from .excel_matching import parse_vendor_export, bulk_match
from .pricing import (
    compute_new_price,
    bulk_update_prices,
    update_product_price,
    manual_link,
    sync_product_to_marketplaces,
)
from .questions import sync_questions, answer_question, list_questions
from .routes import marketplace_sync_bp

__all__ = [
    'TenantContext',
    'resolve_tenant',
    'tenant_query',
    'list_accounts',
    'match_product',
    'unmatch_product',
    'search_remote_products',
    'parse_vendor_export',
    'bulk_match',
    'compute_new_price',
    'bulk_update_prices',
    'update_product_price',
    'manual_link',
    'sync_product_to_marketplaces',
    'sync_questions',
    'answer_question',
    'list_questions',
    'marketplace_sync_bp',
]
