# -*- coding: utf-8 -*-
"""
Fiyat yayılım motoru (Price Propagation Engine)
===============================================
- Tek bağlantı fiyat güncellemesi
- Kaynak pazardan (veya ana fiyattan) hedef pazara yüzdesel toplu fiyat aktarımı
- Manuel bağlantı oluşturma
- Ürün bilgilerini tüm aktif pazaryerlerine gönderme
"""

from decimal import Decimal
from typing import Any, Dict, List

from flask import current_app

from models import db, CatalogProduct, ProductMarketplaceLink, LinkStatus
from logger_config import sync_logger as logger

from .adapters import ProductUpdate
from .catalog import create_link, get_account, get_link, get_product
from .errors import ValidationError, VendorError
from .service import PushJob, apply_sync_result, push_updates
from .tenant import TenantContext, tenant_query
from .utils import round_price, run_async, to_decimal

BASE_PRICE_SOURCE = "base_price"

OPERATIONS = ("copy", "inc_percent", "dec_percent")


def compute_new_price(base_price, operation: str, value=0) -> float:
    """
    copy        -> round(P, 2)
    inc_percent -> round(P * (1 + V/100), 2)
    dec_percent -> round(P * (1 - V/100), 2)
    """
    try:
        price = to_decimal(base_price)
        percent = to_decimal(value or 0) / Decimal("100")
    except ValueError:
        raise ValidationError(f"Geçersiz değer: {value}")

    if operation == "copy":
        return round_price(price)
    if operation == "inc_percent":
        return round_price(price * (Decimal("1") + percent))
    if operation == "dec_percent":
        return round_price(price * (Decimal("1") - percent))

    raise ValidationError(f"Geçersiz işlem: {operation}")


def _sync_settings():
    config = current_app.config
    return config.get("SYNC_MAX_CONCURRENCY", 5), config.get("VENDOR_TIMEOUT", 30)


# ════════════════════════════════════════════════════════════════════
# TEK GÜNCELLEME
# ════════════════════════════════════════════════════════════════════

def update_product_price(ctx: TenantContext, link_id, new_price) -> Dict[str, Any]:
    """
    Tek bağlantının fiyatını pazaryerine gönder ve sonucu kaydet.
    Başarısızlıkta hata durumu kaydedilir, ardından VendorError yükseltilir.
    """
    if link_id in (None, "") or new_price in (None, ""):
        raise ValidationError()
    try:
        price = round_price(new_price)
    except (ArithmeticError, ValueError):
        raise ValidationError()
    if price <= 0:
        raise ValidationError()

    link = get_link(ctx, link_id)
    update = ProductUpdate(price=price)
    max_concurrency, timeout = _sync_settings()

    [(_, result)] = run_async(push_updates([PushJob.for_link(link, update)], max_concurrency, timeout))

    apply_sync_result(link, result, update)
    db.session.commit()

    if not result.success:
        logger.error(f"[PRICING] Bağlantı {link.id} güncellenemedi: {result.error_message}")
        raise VendorError(f"Pazaryeri güncellemesi başarısız: {result.error_message}")

    logger.info(f"[PRICING] Bağlantı {link.id} -> {price} ({result.outcome.value})")
    return {"success": True, "outcome": result.outcome.value, "link": link.to_dict()}


# ════════════════════════════════════════════════════════════════════
# TOPLU FİYAT AKTARIMI
# ════════════════════════════════════════════════════════════════════

def _base_price_for(product: CatalogProduct, source_market_id):
    if str(source_market_id) == BASE_PRICE_SOURCE:
        return product.price
    for link in product.links:
        if str(link.marketplace_id) == str(source_market_id):
            return link.current_sale_price
    return None


def bulk_update_prices(ctx: TenantContext, source_market_id, target_market_id, operation: str, value=0) -> Dict[str, Any]:
    """
    Kaynak fiyattan hedef pazaryerine toplu fiyat aktarımı.

    Args:
        source_market_id: Kaynak hesap ID'si veya 'base_price'
        target_market_id: Hedef hesap ID'si
        operation: copy | inc_percent | dec_percent
        value: Yüzde değeri

    Returns:
        {"success", "count", "skipped", "errors": [{product_id, link_id, error}]}
    """
    if target_market_id in (None, ""):
        raise ValidationError("Hedef Pazar Seçilmedi")
    if operation not in OPERATIONS:
        raise ValidationError(f"Geçersiz işlem: {operation}")
    compute_new_price(1, operation, value)  # geçersiz yüzde değeri burada reddedilir

    products = tenant_query(CatalogProduct, ctx).all()

    jobs: List[PushJob] = []
    links_by_id: Dict[Any, ProductMarketplaceLink] = {}
    skipped = 0
    errors = []

    for product in products:
        target_link = next(
            (l for l in product.links if str(l.marketplace_id) == str(target_market_id)), None
        )
        if target_link is None:
            continue

        base = _base_price_for(product, source_market_id)
        if not base or base <= 0:
            skipped += 1
            continue

        new_price = compute_new_price(base, operation, value)
        if new_price <= 0:
            # Sıfır veya negatif fiyat pazaryerine gönderilmez
            errors.append({"product_id": product.id, "link_id": target_link.id, "error": "Eksik veri."})
            continue
        if target_link.current_sale_price is not None and round_price(target_link.current_sale_price) == new_price:
            skipped += 1
            continue

        jobs.append(PushJob.for_link(target_link, ProductUpdate(price=new_price)))
        links_by_id[target_link.id] = target_link

    logger.info(f"[PRICING] Toplu güncelleme: {len(jobs)} iş, {skipped} atlandı (tenant={ctx.tenant_id})")

    max_concurrency, timeout = _sync_settings()
    results = run_async(push_updates(jobs, max_concurrency, timeout)) if jobs else []

    count = 0
    for job, result in results:
        link = links_by_id[job.key]
        apply_sync_result(link, result, job.update)
        if result.success:
            count += 1
        else:
            errors.append({"product_id": link.product_id, "link_id": link.id, "error": result.error_message})

    db.session.commit()

    if errors:
        logger.warning(f"[PRICING] Toplu güncellemede {len(errors)} hata")
    return {"success": True, "count": count, "skipped": skipped, "errors": errors}


# ════════════════════════════════════════════════════════════════════
# MANUEL BAĞLANTI
# ════════════════════════════════════════════════════════════════════

def manual_link(ctx: TenantContext, product_id, marketplace_id, remote_id, remote_initial_price=0) -> ProductMarketplaceLink:
    """Ürünü uzak ilan ID'si ile elle bağla"""
    if not remote_id or not str(remote_id).strip():
        raise ValidationError()

    try:
        price = round_price(remote_initial_price or 0)
    except ValueError:
        raise ValidationError(f"Geçersiz fiyat: {remote_initial_price}")

    product = get_product(ctx, product_id)
    account = get_account(ctx, marketplace_id)
    remote_id = str(remote_id).strip()

    return create_link(
        ctx, product, account,
        remote_product_id=remote_id,
        remote_variant_id=remote_id,
        barcode=product.barcode,
        price=price,
    )


# ════════════════════════════════════════════════════════════════════
# ÜRÜN SENKRONİZASYONU
# ════════════════════════════════════════════════════════════════════

def sync_product_to_marketplaces(ctx: TenantContext, product_id, update: ProductUpdate) -> Dict[str, Any]:
    """
    Ürünün fiyat/stok/isim/açıklama bilgisini tüm aktif bağlantılara gönder.
    Bir pazaryerindeki hata diğerlerini durdurmaz.
    """
    if update.is_empty():
        raise ValidationError("Güncellenecek alan yok")
    if update.price is not None and not update.price > 0:
        raise ValidationError()

    product = get_product(ctx, product_id)
    links = [l for l in product.links if l.status == LinkStatus.ACTIVE]
    if not links:
        return {"success": True, "results": []}

    max_concurrency, timeout = _sync_settings()
    results = run_async(push_updates([PushJob.for_link(l, update) for l in links], max_concurrency, timeout))

    by_id = {l.id: l for l in links}
    report = []
    for job, result in results:
        link = by_id[job.key]
        apply_sync_result(link, result, update)
        report.append({
            "link_id": link.id,
            "marketplace": link.account.display_name,
            "success": result.success,
            "outcome": result.outcome.value,
            "error": result.error_message,
        })

    db.session.commit()
    logger.info(f"[SYNC] Ürün {product.id}: {sum(1 for r in report if r['success'])}/{len(report)} pazaryeri güncellendi")
    return {"success": all(r["success"] for r in report), "results": report}
