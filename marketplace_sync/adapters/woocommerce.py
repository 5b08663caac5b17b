# -*- coding: utf-8 -*-
"""
WooCommerce Platform Adapter
WooCommerce REST API ile fiyat/stok senkronizasyonu
"""

import asyncio
from datetime import datetime
from typing import List, Dict, Any, Optional

import aiohttp

from models import Platform
from logger_config import sync_logger as logger
from ..errors import VendorError
from .base import BasePlatformAdapter, ProductUpdate, RemoteTarget, SyncOutcome, SyncResult


def normalize_store_url(url: Optional[str]) -> str:
    """Mağaza adresine şema ekle, sondaki '/' karakterini kaldır"""
    url = (url or "").strip()
    if url and not url.startswith("http"):
        url = "https://" + url
    return url.rstrip("/")


class WooCommerceAdapter(BasePlatformAdapter):
    """WooCommerce senkronizasyon adaptörü"""

    PLATFORM = Platform.WOOCOMMERCE
    API_VERSION = "wc/v3"

    def _init_config(self):
        """WooCommerce API yapılandırması"""
        self.store_url = normalize_store_url(self.account.base_url)
        self.consumer_key = self.account.api_key
        self.consumer_secret = self.account.api_secret

        if all([self.store_url, self.consumer_key, self.consumer_secret]):
            self.is_configured = True
            self._auth = aiohttp.BasicAuth(self.consumer_key, self.consumer_secret)
        else:
            self.is_configured = False
            self._auth = None
            missing = [k for k, v in {
                "base_url": self.store_url,
                "api_key": self.consumer_key,
                "api_secret": self.consumer_secret
            }.items() if not v]
            logger.warning(f"[WOOCOMMERCE] {self.account.display_name} eksik credentials: {missing}")

    @property
    def api_url(self) -> str:
        return f"{self.store_url}/wp-json/{self.API_VERSION}"

    @staticmethod
    def build_payload(update: ProductUpdate) -> Dict[str, Any]:
        """WooCommerce fiyat alanlarını string bekler"""
        payload: Dict[str, Any] = {}
        if update.price is not None:
            payload["regular_price"] = str(update.price)
            payload["price"] = str(update.price)
        if update.stock is not None:
            payload["stock_quantity"] = max(0, int(update.stock))
            payload["manage_stock"] = True
        if update.name:
            payload["name"] = update.name
        if update.description:
            payload["description"] = update.description
        return payload

    async def update_product(self, target: RemoteTarget, update: ProductUpdate) -> SyncResult:
        """
        Tek ürünü güncelle.
        API: PUT /wp-json/wc/v3/products/{id}
        """
        if not self.is_configured:
            return self._not_configured()

        payload = self.build_payload(update)
        if not payload:
            return SyncResult(outcome=SyncOutcome.UNCHANGED,
                              response_data={"message": "WooCommerce için güncellenecek alan yok"})

        url = f"{self.api_url}/products/{target.remote_product_id}"
        sent_at = datetime.utcnow()

        try:
            status, text, data = await self._request("PUT", url, json=payload, auth=self._auth,
                                                     headers={"Content-Type": "application/json"})
        except asyncio.TimeoutError:
            logger.error(f"[WOOCOMMERCE] ❌ İstek zaman aşımı (ID: {target.remote_product_id})")
            return SyncResult.failed("İstek zaman aşımı (timeout)", sent_at=sent_at)
        except aiohttp.ClientError as e:
            logger.error(f"[WOOCOMMERCE] ❌ Bağlantı hatası (ID: {target.remote_product_id}): {e}")
            return SyncResult.failed(f"Bağlantı hatası: {e}", sent_at=sent_at)

        if 200 <= status < 300:
            logger.info(f"[WOOCOMMERCE] ✅ Ürün {target.remote_product_id} güncellendi")
            return SyncResult(outcome=SyncOutcome.CONFIRMED, response_data=data, sent_at=sent_at)

        error_msg = f"WooCommerce Hatası: HTTP {status}: {text}"
        logger.error(f"[WOOCOMMERCE] ❌ {error_msg[:500]}")
        return SyncResult.failed(error_msg, response_data=data, sent_at=sent_at)

    async def search_products(self, query: str) -> List[Dict[str, Any]]:
        """WooCommerce 'search' parametresi ile ürün ara"""
        if not self.is_configured:
            raise VendorError(f"{self.account.display_name}: Eksik API bilgisi")

        url = f"{self.api_url}/products"

        try:
            status, text, data = await self._request("GET", url, params={"search": query}, auth=self._auth)
        except (asyncio.TimeoutError, aiohttp.ClientError) as e:
            raise VendorError(f"WooCommerce Bağlantı Hatası: {e}")

        if status != 200:
            raise VendorError(f"WooCommerce Bağlantı Hatası: HTTP {status}")

        results = []
        for p in data if isinstance(data, list) else []:
            images = p.get("images") or []
            results.append({
                "id": p.get("id"),
                "platform": "WooCommerce",
                "title": p.get("name"),
                "barcode": p.get("sku"),
                "imageUrl": images[0].get("src") if images else None,
                "price": p.get("price"),
                "stock": p.get("stock_quantity"),
                "variantId": p.get("id"),
                "raw_data": p,
            })
        return results
