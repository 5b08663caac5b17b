# -*- coding: utf-8 -*-
"""
Base Platform Adapter - Tüm platform adaptörlerinin temel sınıfı
"""

import enum
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Any, Optional, Tuple

import aiohttp

from models import Platform
from logger_config import sync_logger as logger


class SyncOutcome(str, enum.Enum):
    """Uzak güncelleme sonucu"""
    CONFIRMED = "confirmed"            # Pazaryeri yazmayı senkron onayladı
    SUBMITTED = "submitted"            # Asenkron kuyruğa alındı (ör. Trendyol batchRequestId)
    SKIPPED_NO_ADAPTER = "no_adapter"  # Platform için adaptör yok, sadece yerel kayıt güncellenir
    UNCHANGED = "unchanged"            # Gönderilecek alan yok
    FAILED = "failed"


@dataclass
class RemoteTarget:
    """Uzak ilanı tanımlayan bilgiler"""
    remote_product_id: str
    remote_variant_id: Optional[str] = None
    barcode: Optional[str] = None

    @classmethod
    def from_link(cls, link) -> "RemoteTarget":
        return cls(
            remote_product_id=link.remote_product_id,
            remote_variant_id=link.remote_variant_id,
            barcode=link.barcode,
        )


@dataclass
class ProductUpdate:
    """Pazaryerine gönderilecek alanlar; None olanlar gönderilmez"""
    price: Optional[float] = None
    stock: Optional[int] = None
    name: Optional[str] = None
    description: Optional[str] = None

    def is_empty(self) -> bool:
        return all(v is None for v in (self.price, self.stock, self.name, self.description))


@dataclass
class SyncResult:
    """Senkronizasyon sonucu"""
    outcome: SyncOutcome
    error_message: Optional[str] = None
    response_data: Optional[Any] = None
    batch_request_id: Optional[str] = None
    sent_at: Optional[datetime] = None
    response_at: Optional[datetime] = field(default_factory=datetime.utcnow)

    @property
    def success(self) -> bool:
        return self.outcome != SyncOutcome.FAILED

    @classmethod
    def failed(cls, message: str, **kwargs) -> "SyncResult":
        return cls(outcome=SyncOutcome.FAILED, error_message=message, **kwargs)

    @classmethod
    def no_adapter(cls, platform) -> "SyncResult":
        return cls(
            outcome=SyncOutcome.SKIPPED_NO_ADAPTER,
            response_data={"message": f"{platform} için adaptör yok, sadece yerel kayıt güncellendi"},
        )


class BasePlatformAdapter(ABC):
    """
    Tüm platform adaptörlerinin temel sınıfı.
    Her platform bu sınıftan türetilmeli ve gerekli metodları implement etmeli.

    Adaptör bir MarketplaceAccount ile kurulur; HTTP session dışarıdan verilirse
    (toplu işlemlerde paylaşılan session) kapatma sorumluluğu çağırandadır.
    """

    PLATFORM: Platform = None
    TIMEOUT: int = 30

    def __init__(self, account, session: Optional[aiohttp.ClientSession] = None, timeout: Optional[int] = None):
        self.account = account
        self.is_configured = False
        self.timeout = timeout or self.TIMEOUT
        self._session = session
        self._owns_session = session is None
        self._init_config()

    @property
    def label(self) -> str:
        return self.PLATFORM.value.upper() if self.PLATFORM else "BASE"

    @abstractmethod
    def _init_config(self):
        """Platform yapılandırmasını hesap bilgilerinden başlat (API keys, URLs vs.)"""

    @abstractmethod
    async def update_product(self, target: RemoteTarget, update: ProductUpdate) -> SyncResult:
        """
        Uzak ilanda fiyat/stok/isim/açıklama güncelle.

        Args:
            target: Uzak ilan bilgisi
            update: Gönderilecek alanlar

        Returns:
            SyncResult
        """

    @abstractmethod
    async def search_products(self, query: str) -> List[Dict[str, Any]]:
        """Platformdaki ilanları ara (manuel eşleştirme için)"""

    async def update_price(self, target: RemoteTarget, price: float) -> SyncResult:
        return await self.update_product(target, ProductUpdate(price=price))

    async def update_stock(self, target: RemoteTarget, quantity: int) -> SyncResult:
        return await self.update_product(target, ProductUpdate(stock=quantity))

    async def get_session(self) -> aiohttp.ClientSession:
        """HTTP session al veya oluştur"""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def close_session(self):
        """Sadece adaptörün kendi açtığı session'ı kapat"""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close_session()

    async def _request(self, method: str, url: str, **kwargs) -> Tuple[int, str, Any]:
        """
        İstek gönder, (status, ham metin, çözümlenmiş JSON veya None) döndür.
        Zaman aşımı ve bağlantı hataları çağırana yükselir.
        """
        session = await self.get_session()
        kwargs.setdefault("timeout", aiohttp.ClientTimeout(total=self.timeout))
        logger.info(f"[{self.label}] {method} {url}")

        async with session.request(method, url, **kwargs) as response:
            text = await response.text()
            try:
                data = json.loads(text) if text else None
            except ValueError:
                data = None
            logger.info(f"[{self.label}] Response: {response.status}")
            return response.status, text, data

    def _not_configured(self) -> SyncResult:
        message = f"{self.account.display_name}: Eksik API bilgisi"
        logger.warning(f"[{self.label}] {message}")
        return SyncResult.failed(message)

    def __repr__(self):
        return f"<{self.__class__.__name__} configured={self.is_configured}>"
