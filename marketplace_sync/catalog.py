# -*- coding: utf-8 -*-
"""
Katalog ve pazaryeri bağlantı kayıtları (Catalog Store + Link Registry)
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError

from models import db, CatalogProduct, MarketplaceAccount, ProductMarketplaceLink, LinkStatus
from logger_config import app_logger as logger

from .adapters import get_adapter
from .errors import AccountNotFound, DuplicateLink, LinkNotFound, ProductNotFound, VendorError
from .tenant import TenantContext, tenant_query
from .utils import run_async


# ════════════════════════════════════════════════════════════════════
# HESAPLAR
# ════════════════════════════════════════════════════════════════════

def list_accounts(ctx: TenantContext) -> List[Dict[str, Any]]:
    accounts = tenant_query(MarketplaceAccount, ctx).order_by(MarketplaceAccount.id).all()
    return [a.to_dict() for a in accounts]


def get_account(ctx: TenantContext, account_id) -> MarketplaceAccount:
    account = tenant_query(MarketplaceAccount, ctx).filter(MarketplaceAccount.id == account_id).first()
    if account is None:
        raise AccountNotFound()
    return account


def find_account_by_name(ctx: TenantContext, marketplace_name: str, fuzzy: bool = True) -> MarketplaceAccount:
    """
    Mağaza adına göre hesap bul; bulunamazsa platform değerinde arama yap.
    Birden fazla hesap eşleşirse en küçük ID'li olan seçilir.
    """
    name = (marketplace_name or "").strip()
    if not name:
        raise AccountNotFound(f"Pazaryeri bulunamadı: {marketplace_name}")

    query = tenant_query(MarketplaceAccount, ctx).order_by(MarketplaceAccount.id)
    account = query.filter(MarketplaceAccount.store_name == name).first()
    if account is not None:
        return account

    if fuzzy:
        hint = name.lower()
        for candidate in query.all():
            if hint in candidate.platform.value:
                return candidate

    raise AccountNotFound(f"Pazaryeri bulunamadı: {marketplace_name}")


# ════════════════════════════════════════════════════════════════════
# ÜRÜN LİSTELERİ
# ════════════════════════════════════════════════════════════════════

def _search_filter(search: str, include_barcode: bool = False):
    pattern = f"%{search.strip()}%"
    clauses = [CatalogProduct.name.ilike(pattern), CatalogProduct.code.ilike(pattern)]
    if include_barcode:
        clauses.append(CatalogProduct.barcode.ilike(pattern))
    return or_(*clauses)


def _product_row(product: CatalogProduct) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "code": product.code,
        "barcode": product.barcode,
        "stock": product.stock,
        "price": product.price,
        "cost_price": product.cost_price,
        "matches": [link.to_dict() for link in product.links],
    }


def get_pricing_products(ctx: TenantContext, search: str = "") -> List[Dict[str, Any]]:
    """Fiyat yönetimi ekranı için ürünler ve bağlantıları"""
    query = tenant_query(CatalogProduct, ctx)
    if search:
        query = query.filter(_search_filter(search))
    return [_product_row(p) for p in query.order_by(CatalogProduct.name).all()]


def get_matching_products(ctx: TenantContext, search: str = "", match_filter: str = "all") -> List[Dict[str, Any]]:
    """
    Eşleştirme ekranı için ürünler.
    match_filter: all | matched | unmatched
    """
    query = tenant_query(CatalogProduct, ctx)
    if search and search.strip():
        query = query.filter(_search_filter(search, include_barcode=True))

    products = query.order_by(CatalogProduct.name).all()
    if match_filter == "matched":
        products = [p for p in products if p.links]
    elif match_filter == "unmatched":
        products = [p for p in products if not p.links]

    return [_product_row(p) for p in products]


def get_product(ctx: TenantContext, product_id) -> CatalogProduct:
    product = tenant_query(CatalogProduct, ctx).filter(CatalogProduct.id == product_id).first()
    if product is None:
        raise ProductNotFound()
    return product


def get_link(ctx: TenantContext, link_id) -> ProductMarketplaceLink:
    link = tenant_query(ProductMarketplaceLink, ctx).filter(ProductMarketplaceLink.id == link_id).first()
    if link is None:
        raise LinkNotFound()
    return link


# ════════════════════════════════════════════════════════════════════
# EŞLEŞTİRME
# ════════════════════════════════════════════════════════════════════

def create_link(ctx: TenantContext, product: CatalogProduct, account: MarketplaceAccount,
                remote_product_id, remote_variant_id=None, barcode: Optional[str] = None,
                price: float = 0.0, stock: int = 0) -> ProductMarketplaceLink:
    """
    Ürün-pazaryeri bağlantısı oluştur ve kaydet.
    Aynı (ürün, hesap) çifti için ikinci bağlantı DuplicateLink yükseltir.
    """
    exists = tenant_query(ProductMarketplaceLink, ctx).filter(
        ProductMarketplaceLink.product_id == product.id,
        ProductMarketplaceLink.marketplace_id == account.id,
    ).first()
    if exists is not None:
        raise DuplicateLink()

    link = ProductMarketplaceLink(
        tenant_id=ctx.tenant_id,
        product_id=product.id,
        marketplace_id=account.id,
        remote_product_id=str(remote_product_id),
        remote_variant_id=str(remote_variant_id) if remote_variant_id else None,
        barcode=barcode,
        current_sale_price=price or 0,
        stock_quantity=stock or 0,
        status=LinkStatus.ACTIVE,
    )
    db.session.add(link)
    try:
        db.session.commit()
    except IntegrityError:
        # Eşzamanlı bir istek aynı çifti eklemiş olabilir
        db.session.rollback()
        raise DuplicateLink()

    logger.info(f"[MATCH] Ürün {product.id} -> {account.display_name} ({link.remote_product_id}) bağlandı")
    return link


def match_product(ctx: TenantContext, product_id, marketplace_name: str, remote_product_id,
                  remote_variant_id=None, remote_data: Optional[Dict[str, Any]] = None) -> ProductMarketplaceLink:
    """Uzak aramadan seçilen ilanı ürüne bağla (mağaza adı tam eşleşmeli)"""
    account = find_account_by_name(ctx, marketplace_name, fuzzy=False)
    product = get_product(ctx, product_id)
    remote_data = remote_data or {}

    return create_link(
        ctx, product, account,
        remote_product_id=remote_product_id,
        remote_variant_id=remote_variant_id,
        barcode=remote_data.get("barcode"),
        price=remote_data.get("price") or 0,
        stock=remote_data.get("stock") or 0,
    )


def unmatch_product(ctx: TenantContext, link_id) -> None:
    link = get_link(ctx, link_id)
    db.session.delete(link)
    db.session.commit()
    logger.info(f"[MATCH] Bağlantı {link_id} silindi (tenant={ctx.tenant_id})")


def search_remote_products(ctx: TenantContext, marketplace_name: str, query: str) -> List[Dict[str, Any]]:
    """Pazaryeri API'sinde ilan ara; 3 karakterden kısa sorgular boş döner"""
    if not query or len(query.strip()) < 3:
        return []

    account = find_account_by_name(ctx, marketplace_name)
    adapter = get_adapter(account)
    if adapter is None:
        raise VendorError(f"{account.platform.value} için ürün arama desteklenmiyor")

    async def _search():
        async with adapter:
            return await adapter.search_products(query.strip())

    return run_async(_search())
