# -*- coding: utf-8 -*-
"""
Remote Sync Service - Pazaryerlerine güncelleme gönderimi ve yerel kayıt güncellemesi
=====================================================================================
Uzak çağrılar tek bir event loop içinde sınırlı eşzamanlılıkla yapılır; veritabanı
güncellemeleri (apply_sync_result) her zaman istek thread'inde, gather'dan sonra yapılır.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Tuple

import aiohttp

from models import LinkStatus
from logger_config import sync_logger as logger

from .adapters import ProductUpdate, RemoteTarget, SyncResult, get_adapter


@dataclass
class PushJob:
    """Tek bir uzak güncelleme işi"""
    key: Any
    account: Any
    target: RemoteTarget
    update: ProductUpdate

    @classmethod
    def for_link(cls, link, update: ProductUpdate, key=None) -> "PushJob":
        return cls(key=key if key is not None else link.id, account=link.account,
                   target=RemoteTarget.from_link(link), update=update)


async def push_updates(jobs: List[PushJob], max_concurrency: int = 5, timeout: int = 30) -> List[Tuple[PushJob, SyncResult]]:
    """
    İşleri sınırlı eşzamanlılıkla pazaryerlerine gönder.

    Args:
        jobs: Gönderilecek işler
        max_concurrency: Aynı anda en fazla kaç istek
        timeout: İstek başına zaman aşımı (saniye)

    Returns:
        (iş, sonuç) listesi; giriş sırası korunur
    """
    if not jobs:
        return []

    semaphore = asyncio.Semaphore(max(1, max_concurrency))
    client_timeout = aiohttp.ClientTimeout(total=timeout)

    async with aiohttp.ClientSession(timeout=client_timeout) as session:

        async def _run(job: PushJob) -> SyncResult:
            adapter = get_adapter(job.account, session=session, timeout=timeout)
            if adapter is None:
                logger.info(f"[SYNC] {job.account.platform.value} için adaptör yok, iş {job.key} yerel olarak işaretlenecek")
                return SyncResult.no_adapter(job.account.platform.value)

            async with semaphore:
                try:
                    return await asyncio.wait_for(adapter.update_product(job.target, job.update), timeout)
                except asyncio.TimeoutError:
                    logger.error(f"[SYNC] İş {job.key} zaman aşımına uğradı ({timeout}s)")
                    return SyncResult.failed("İstek zaman aşımı (timeout)")

        outcomes = await asyncio.gather(*[_run(job) for job in jobs], return_exceptions=True)

    results = []
    for job, outcome in zip(jobs, outcomes):
        if isinstance(outcome, BaseException):
            logger.error(f"[SYNC] İş {job.key} beklenmeyen hata: {outcome}", exc_info=outcome)
            outcome = SyncResult.failed(f"Beklenmeyen hata: {outcome}")
        results.append((job, outcome))
    return results


def apply_sync_result(link, result: SyncResult, update: ProductUpdate) -> None:
    """
    Uzak çağrının sonucunu bağlantı kaydına yaz (commit çağırana ait).
    Başarısızlıkta fiyat değişmez, hata mesajı saklanır.
    """
    link.last_sync_outcome = result.outcome.value

    if result.success:
        if update.price is not None:
            link.current_sale_price = update.price
        if update.stock is not None:
            link.stock_quantity = update.stock
        link.status = LinkStatus.ACTIVE
        link.last_error_message = None
        link.last_success_date = datetime.utcnow()
    else:
        link.status = LinkStatus.ERROR
        link.last_error_message = result.error_message or "Bilinmeyen Hata"
