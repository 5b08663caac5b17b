# -*- coding: utf-8 -*-
"""
Excel ile toplu eşleştirme
==========================
Pazaryeri ürün listesi (Trendyol / WooCommerce / genel Excel) okunur, barkod
üzerinden katalog ürünleriyle eşleştirilir ve bağlantılar tek seferde eklenir.
"""

import io
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

import pandas as pd
from sqlalchemy.exc import SQLAlchemyError

from models import db, CatalogProduct, ProductMarketplaceLink, LinkStatus
from logger_config import app_logger as logger

from .catalog import find_account_by_name
from .errors import EmptyResult
from .tenant import TenantContext, tenant_query
from .utils import clean_str, parse_float, parse_int


# Platforma göre olası sütun başlıkları (ilk bulunan kullanılır)
COLUMN_MAPS = {
    "trendyol": {
        "barcode": ["Barkod", "barcode"],
        "remote_id": ["Partner ID", "Ürün ID", "productContentId"],
        "title": ["Ürün Adı", "title"],
        "price": ["Satış Fiyatı (KDV Dahil)", "Satış Fiyatı"],
        "stock": ["Stok", "stock"],
        "model_code": ["Model Kodu"],
    },
    "woo": {
        "barcode": ["SKU", "sku", "Barkod"],
        "remote_id": ["ID", "id", "Ürün ID"],
        "title": ["Name", "name", "Ürün Adı"],
        "price": ["Price", "price", "Fiyat"],
        "stock": ["Stock", "stock", "Stok"],
        "sku": ["SKU", "sku"],
    },
    "generic": {
        "barcode": ["Barkod", "barcode", "SKU", "sku"],
        "remote_id": ["ID", "id", "Ürün ID", "Partner ID"],
        "title": ["Ürün Adı", "title", "Name", "name"],
        "price": ["Fiyat", "price", "Price"],
        "stock": ["Stok", "stock", "Stock"],
    },
}


@dataclass
class ParsedRow:
    barcode: str
    remote_id: str
    title: str = ""
    price: float = 0.0
    stock: int = 0
    model_code: Optional[str] = None
    sku: Optional[str] = None


@dataclass
class MatchResult:
    matched: int = 0
    skipped: int = 0
    not_found: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)


def column_map_for(platform_hint: Optional[str]) -> Dict[str, List[str]]:
    hint = (platform_hint or "").lower()
    if "trendyol" in hint:
        return COLUMN_MAPS["trendyol"]
    if "woo" in hint:
        return COLUMN_MAPS["woo"]
    return COLUMN_MAPS["generic"]


def _pick(row, columns: List[str], candidates: List[str]):
    for name in candidates:
        if name in columns:
            return row.get(name)
    return None


def parse_vendor_export(ctx: TenantContext, file_bytes: bytes, platform_hint: Optional[str] = None) -> List[ParsedRow]:
    """
    Excel dosyasının ilk sayfasını oku ve satırları ParsedRow listesine çevir.
    Barkodu veya uzak ID'si boş olan satırlar atlanır.
    """
    try:
        df = pd.read_excel(io.BytesIO(file_bytes), engine='openpyxl', dtype=str)
    except Exception as e:
        logger.error(f"[EXCEL] Dosya okunamadı (tenant={ctx.tenant_id}): {e}")
        raise EmptyResult(f"Excel dosyası okunamadı: {e}")

    df.columns = [str(c).strip() for c in df.columns]
    columns = list(df.columns)
    mapping = column_map_for(platform_hint)

    rows = []
    for record in df.to_dict(orient='records'):
        barcode = clean_str(_pick(record, columns, mapping["barcode"]))
        remote_id = clean_str(_pick(record, columns, mapping["remote_id"]))
        if not barcode or not remote_id:
            continue

        rows.append(ParsedRow(
            barcode=barcode,
            remote_id=remote_id,
            title=clean_str(_pick(record, columns, mapping["title"])),
            price=parse_float(_pick(record, columns, mapping["price"])),
            stock=parse_int(_pick(record, columns, mapping["stock"])),
            model_code=clean_str(_pick(record, columns, mapping.get("model_code", []))) or None,
            sku=clean_str(_pick(record, columns, mapping.get("sku", []))) or None,
        ))

    if not rows:
        raise EmptyResult()

    logger.info(f"[EXCEL] {len(rows)} geçerli satır okundu (hint={platform_hint})")
    return rows


def bulk_match(ctx: TenantContext, rows: List[ParsedRow], marketplace_name: str) -> MatchResult:
    """
    Satırları barkod ile katalogla eşleştir.
    Aynı ürün bu hesaba zaten bağlıysa (veya aynı dosyada tekrar ediyorsa) satır atlanır.
    """
    account = find_account_by_name(ctx, marketplace_name)
    result = MatchResult()

    products_by_barcode = {
        p.barcode.strip(): p for p in tenant_query(CatalogProduct, ctx).all() if p.barcode and p.barcode.strip()
    }
    linked_product_ids = {
        link.product_id for link in tenant_query(ProductMarketplaceLink, ctx).filter(
            ProductMarketplaceLink.marketplace_id == account.id
        ).all()
    }

    staged = []
    for row in rows:
        product = products_by_barcode.get((row.barcode or "").strip())
        if product is None:
            result.not_found += 1
            result.errors.append(f"Barkod bulunamadı: {row.barcode} ({row.title or 'İsimsiz'})")
            continue

        if product.id in linked_product_ids:
            result.skipped += 1
            continue

        staged.append(ProductMarketplaceLink(
            tenant_id=ctx.tenant_id,
            product_id=product.id,
            marketplace_id=account.id,
            remote_product_id=row.remote_id,
            remote_variant_id=row.remote_id,
            barcode=row.barcode,
            current_sale_price=row.price,
            stock_quantity=row.stock,
            status=LinkStatus.ACTIVE,
        ))
        linked_product_ids.add(product.id)

    if staged:
        try:
            db.session.add_all(staged)
            db.session.commit()
            result.matched = len(staged)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"[EXCEL] Toplu eşleştirme kaydedilemedi: {e}", exc_info=True)
            result.matched = 0
            result.errors = [f"Veritabanı hatası: {e}"]

    logger.info(
        f"[EXCEL] {account.display_name}: eşleşen={result.matched} atlanan={result.skipped} "
        f"bulunamayan={result.not_found}"
    )
    return result
