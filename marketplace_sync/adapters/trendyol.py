# -*- coding: utf-8 -*-
"""
Trendyol Platform Adapter
Trendyol API ile fiyat/stok güncelleme, ürün arama ve müşteri soruları
"""

import asyncio
import base64
from datetime import datetime
from typing import List, Dict, Any, Optional

import aiohttp

from models import Platform
from logger_config import sync_logger as logger
from ..errors import VendorError
from .base import BasePlatformAdapter, ProductUpdate, RemoteTarget, SyncOutcome, SyncResult


class TrendyolAdapter(BasePlatformAdapter):
    """Trendyol senkronizasyon adaptörü"""

    PLATFORM = Platform.TRENDYOL
    BASE_URL = "https://api.trendyol.com/sapigw"
    QNA_BASE_URL = "https://apigw.trendyol.com/integration/qna"
    PAGE_CONCURRENCY = 5  # Soru sayfaları için aynı anda en fazla 5 istek

    def _init_config(self):
        """Trendyol API yapılandırması"""
        self.api_key = self.account.api_key
        self.api_secret = self.account.api_secret
        self.supplier_id = self.account.supplier_id

        if all([self.api_key, self.api_secret, self.supplier_id]):
            self.is_configured = True
            # Basic auth header
            credentials = f"{self.api_key}:{self.api_secret}"
            self._auth_header = base64.b64encode(credentials.encode()).decode()
        else:
            self.is_configured = False
            self._auth_header = None
            missing = [k for k, v in {"api_key": self.api_key, "api_secret": self.api_secret,
                                      "supplier_id": self.supplier_id}.items() if not v]
            logger.warning(f"[TRENDYOL] {self.account.display_name} eksik credentials: {missing}")

    def _get_headers(self) -> Dict[str, str]:
        """API request headers"""
        return {
            "Authorization": f"Basic {self._auth_header}",
            "Content-Type": "application/json",
            "User-Agent": f"{self.supplier_id} - SelfIntegration"
        }

    async def update_product(self, target: RemoteTarget, update: ProductUpdate) -> SyncResult:
        """
        Trendyol'a fiyat/stok gönder.
        API: POST /sapigw/suppliers/{supplierId}/products/price-and-inventory

        Trendyol isteği asenkron işler ve sadece batchRequestId döner; bu yüzden
        başarılı sonuç SUBMITTED'dır, "uygulandı" anlamına gelmez.
        """
        if not self.is_configured:
            return self._not_configured()

        # Kalem barkod ile anahtarlanır; barkod yoksa uzak ID denenir
        item: Dict[str, Any] = {"barcode": target.barcode or target.remote_product_id}
        if update.price is not None:
            item["salePrice"] = update.price
            item["listPrice"] = update.price
        if update.stock is not None:
            item["quantity"] = max(0, int(update.stock))  # Negatif olamaz

        if len(item) == 1:
            return SyncResult(outcome=SyncOutcome.UNCHANGED,
                              response_data={"message": "Trendyol için güncellenecek alan yok"})

        url = f"{self.BASE_URL}/suppliers/{self.supplier_id}/products/price-and-inventory"
        sent_at = datetime.utcnow()

        try:
            status, text, data = await self._request("POST", url, json={"items": [item]},
                                                     headers=self._get_headers())
        except asyncio.TimeoutError:
            logger.error(f"[TRENDYOL] ❌ İstek zaman aşımı ({item['barcode']})")
            return SyncResult.failed("İstek zaman aşımı (timeout)", sent_at=sent_at)
        except aiohttp.ClientError as e:
            logger.error(f"[TRENDYOL] ❌ Bağlantı hatası ({item['barcode']}): {e}")
            return SyncResult.failed(f"Bağlantı hatası: {e}", sent_at=sent_at)

        batch_id = data.get("batchRequestId") if isinstance(data, dict) else None
        if batch_id:
            logger.info(f"[TRENDYOL] ✅ {item['barcode']} kuyruğa alındı (batch: {batch_id})")
            return SyncResult(
                outcome=SyncOutcome.SUBMITTED,
                batch_request_id=str(batch_id),
                response_data=data,
                sent_at=sent_at,
            )

        error_msg = f"Trendyol güncelleme reddedildi: HTTP {status}: {text[:300]}"
        logger.error(f"[TRENDYOL] ❌ {error_msg}")
        return SyncResult.failed(error_msg, response_data=data, sent_at=sent_at)

    async def check_batch_status(self, batch_request_id: str) -> Dict[str, Any]:
        """
        Batch istek durumunu kontrol et
        API: GET /sapigw/suppliers/{supplierId}/products/batch-requests/{batchRequestId}
        """
        url = f"{self.BASE_URL}/suppliers/{self.supplier_id}/products/batch-requests/{batch_request_id}"

        try:
            status, text, data = await self._request("GET", url, headers=self._get_headers())
        except (asyncio.TimeoutError, aiohttp.ClientError) as e:
            return {"error": str(e) or "timeout"}

        if status == 200 and isinstance(data, dict):
            return data
        return {"error": f"HTTP {status}"}

    async def search_products(self, query: str) -> List[Dict[str, Any]]:
        """
        Trendyol ilanlarında ara.
        Sayısal sorgu barkod filtresi olarak gönderilir, diğerleri başlıkta yerel olarak süzülür.
        """
        if not self.is_configured:
            raise VendorError(f"{self.account.display_name}: Eksik API bilgisi")

        url = f"{self.BASE_URL}/suppliers/{self.supplier_id}/products"
        params = {"size": 20, "approved": "true"}
        is_barcode = query.isdigit()
        if is_barcode:
            params["barcode"] = query

        try:
            status, text, data = await self._request("GET", url, params=params, headers=self._get_headers())
        except (asyncio.TimeoutError, aiohttp.ClientError) as e:
            raise VendorError(f"Trendyol Hatası: {e}")

        if status != 200:
            raise VendorError(f"Trendyol API Hatası: {status}")

        results = []
        for p in (data or {}).get("content", []):
            images = p.get("images") or []
            results.append({
                "id": p.get("productContentId") or p.get("productMainId"),
                "platform": "Trendyol",
                "title": p.get("title") or "",
                "barcode": p.get("barcode"),
                "imageUrl": images[0].get("url") if images else None,
                "price": p.get("salePrice") or p.get("listPrice"),
                "stock": p.get("quantity"),
                "variantId": p.get("productContentId"),
                "raw_data": p,
            })

        if not is_barcode:
            q_lower = query.lower()
            results = [r for r in results if q_lower in r["title"].lower()]

        return results

    # ════════════════════════════════════════════════════════════════════
    # MÜŞTERİ SORULARI
    # ════════════════════════════════════════════════════════════════════

    async def fetch_questions(self, start_date: datetime, end_date: datetime, page_size: int = 50) -> List[Dict[str, Any]]:
        """
        Tarih aralığındaki tüm müşteri sorularını çek.
        İlk sayfa hatası VendorError yükseltir; sonraki sayfalardaki hatalar loglanıp atlanır.
        """
        url = f"{self.QNA_BASE_URL}/sellers/{self.supplier_id}/questions/filter"
        params = {
            "supplierId": self.supplier_id,
            "startDate": int(start_date.timestamp() * 1000),
            "endDate": int(end_date.timestamp() * 1000),
            "page": 0,
            "size": page_size,
            "orderByField": "CreatedDate",
            "orderByDirection": "DESC"
        }

        try:
            status, text, data = await self._request("GET", url, params=params, headers=self._get_headers())
        except (asyncio.TimeoutError, aiohttp.ClientError) as e:
            raise VendorError(f"{self.account.display_name}: {str(e) or 'İstek zaman aşımı (timeout)'}")

        if status != 200 or not isinstance(data, dict):
            raise VendorError(f"{self.account.display_name}: {status} - {text[:300]}")

        all_questions = list(data.get("content") or [])
        total_pages = int(data.get("totalPages") or 1)
        logger.info(f"[TRENDYOL] {self.account.display_name}: {data.get('totalElements', len(all_questions))} soru, {total_pages} sayfa")

        if total_pages > 1:
            semaphore = asyncio.Semaphore(self.PAGE_CONCURRENCY)
            tasks = [self._fetch_questions_page(url, dict(params, page=page), semaphore)
                     for page in range(1, total_pages)]
            for page_questions in await asyncio.gather(*tasks):
                all_questions.extend(page_questions)

        return all_questions

    async def _fetch_questions_page(self, url: str, params: Dict[str, Any], semaphore: asyncio.Semaphore) -> List[Dict[str, Any]]:
        async with semaphore:
            try:
                status, text, data = await self._request("GET", url, params=params, headers=self._get_headers())
            except (asyncio.TimeoutError, aiohttp.ClientError) as e:
                logger.error(f"[TRENDYOL] Sayfa {params['page']} çekilirken hata: {e}")
                return []

            if status != 200 or not isinstance(data, dict):
                logger.error(f"[TRENDYOL] Sayfa {params['page']} için API Hatası: {status} - {text[:300]}")
                return []
            return list(data.get("content") or [])

    async def answer_question(self, remote_question_id, text: str) -> SyncResult:
        """
        Soruya cevap gönder.
        API: POST /integration/qna/sellers/{supplierId}/questions/{id}/answers
        """
        if not self.is_configured:
            return self._not_configured()

        url = f"{self.QNA_BASE_URL}/sellers/{self.supplier_id}/questions/{remote_question_id}/answers"

        try:
            status, body, data = await self._request("POST", url, json={"text": text},
                                                     headers=self._get_headers())
        except asyncio.TimeoutError:
            return SyncResult.failed("İstek zaman aşımı (timeout)")
        except aiohttp.ClientError as e:
            return SyncResult.failed(f"Bağlantı hatası: {e}")

        if 200 <= status < 300:
            logger.info(f"[TRENDYOL] Soru #{remote_question_id} için cevap gönderildi")
            return SyncResult(outcome=SyncOutcome.CONFIRMED, response_data=data)

        logger.error(f"[TRENDYOL] Cevap gönderilirken API Hatası: {status} - {body[:300]}")
        return SyncResult.failed(f"Trendyol Hatası: {body[:300]}")


def parse_trendyol_timestamp(value) -> Optional[datetime]:
    """Trendyol milisaniye timestamp'ini datetime'a çevir"""
    if not value:
        return None
    try:
        return datetime.fromtimestamp(int(value) / 1000)
    except (TypeError, ValueError, OverflowError, OSError):
        return None
