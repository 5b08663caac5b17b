# -*- coding: utf-8 -*-
"""
Pazaryeri Müşteri Soruları
==========================
Trendyol mağazalarından soruları çeker, yerel tabloya tekrarsız olarak yazar
ve cevapları pazaryerine gönderir.

Uzak soru ID'si yerelde raw_data['id'] içinde saklanır; aynı uzak soru için
her zaman tek satır bulunur.
"""

import asyncio
import hashlib
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy import String, cast
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models import db, ExternalQuestion, MarketplaceAccount, Platform
from logger_config import sync_logger as logger

from .adapters import get_adapter
from .adapters.trendyol import parse_trendyol_timestamp
from .errors import (
    AccountNotFound,
    QuestionNotFound,
    RemoteIdMissing,
    ValidationError,
    VendorError,
)
from .tenant import TenantContext, tenant_query
from .utils import run_async

STATUS_WAITING = "WAITING_FOR_ANSWER"
STATUS_ANSWERED = "ANSWERED"
STATUS_REJECTED = "REJECTED"
STATUS_REPORTED = "REPORTED"

# Ekran sekmesi -> veritabanındaki durum değerleri (eski Türkçe kayıtlar dahil)
QUESTION_STATUS_TABS = {
    "waiting": [STATUS_WAITING, "Cevap Bekliyor"],
    "answered": [STATUS_ANSWERED, "Cevaplandı"],
    "rejected": [STATUS_REJECTED, "Reddedildi"],
    "reported": [STATUS_REPORTED, "Bildirildi"],
}
TAB_ALIASES = {
    "Cevap Bekliyor": "waiting",
    "Cevaplandı": "answered",
    "Reddedildi": "rejected",
    "Bildirildi": "reported",
}
ALL_TABS = ("all", "Tümü")

LIST_LIMIT = 100

# 52 bit: JavaScript istemcilerinde de kayıpsız temsil edilir
SYNTHETIC_ID_BITS = 52


@dataclass
class QuestionSyncResult:
    saved_count: int = 0
    new_count: int = 0
    warnings: List[str] = field(default_factory=list)

    def to_dict(self):
        return asdict(self)


def synthetic_question_id(tenant_id: str, platform, remote_id, attempt: int = 0) -> int:
    """(tenant, platform, uzak ID) üçlüsünden kararlı pozitif tamsayı üret"""
    platform_value = platform.value if isinstance(platform, Platform) else str(platform)
    key = f"{tenant_id}:{platform_value}:{remote_id}"
    if attempt:
        key = f"{key}:{attempt}"
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
    return int(digest[:SYNTHETIC_ID_BITS // 4], 16)


def find_question_by_remote_id(ctx: TenantContext, remote_id) -> Optional[ExternalQuestion]:
    return tenant_query(ExternalQuestion, ctx).filter(
        cast(ExternalQuestion.raw_data['id'].as_string(), String) == str(remote_id)
    ).first()


def _question_fields(account: MarketplaceAccount, q: Dict[str, Any]) -> Dict[str, Any]:
    answer = q.get("answer") or {}
    return {
        "store_id": account.id,
        "customer_id": str(q["customerId"]) if q.get("customerId") is not None else None,
        "customer_name": q.get("userName"),
        "product_name": q.get("productName"),
        "product_image": q.get("imageUrl"),
        "web_url": q.get("webUrl"),
        "text": q.get("text", ""),
        "status": q.get("status") or STATUS_WAITING,
        "created_date": parse_trendyol_timestamp(q.get("creationDate")),
        "answer_text": answer.get("text"),
        "answer_date": parse_trendyol_timestamp(answer.get("creationDate")),
        "raw_data": q,
    }


def _save_question(ctx: TenantContext, account: MarketplaceAccount, q: Dict[str, Any], attempt: int = 0) -> bool:
    """
    Soruyu SAVEPOINT içinde ekle/güncelle.
    Returns: yeni satır eklendiyse True
    """
    remote_id = q.get("id")
    fields = _question_fields(account, q)

    with db.session.begin_nested():
        existing = find_question_by_remote_id(ctx, remote_id)
        if existing is not None:
            for key, value in fields.items():
                setattr(existing, key, value)
            return False

        db.session.add(ExternalQuestion(
            id=synthetic_question_id(ctx.tenant_id, account.platform, remote_id, attempt),
            tenant_id=ctx.tenant_id,
            **fields
        ))
        return True


async def _fetch_all(accounts: List[MarketplaceAccount], start: datetime, end: datetime, page_size: int, timeout: int):
    async def _fetch(account):
        async with get_adapter(account, timeout=timeout) as adapter:
            return await adapter.fetch_questions(start, end, page_size)

    return await asyncio.gather(*[_fetch(a) for a in accounts], return_exceptions=True)


def sync_questions(ctx: TenantContext) -> QuestionSyncResult:
    """
    Tüm Trendyol mağazalarının son sorularını çek ve kaydet.
    Bir mağazadaki hata uyarı olarak döner, diğer mağazalar işlenmeye devam eder.
    """
    result = QuestionSyncResult()

    accounts = tenant_query(MarketplaceAccount, ctx).filter(
        MarketplaceAccount.platform == Platform.TRENDYOL,
        MarketplaceAccount.is_active.is_(True),
    ).order_by(MarketplaceAccount.id).all()

    if not accounts:
        result.warnings.append("Trendyol mağazası bulunamadı.")
        return result

    ready = []
    for account in accounts:
        if account.has_credentials():
            ready.append(account)
        else:
            result.warnings.append(f"{account.display_name}: Eksik API bilgisi")

    if not ready:
        return result

    config = current_app.config
    end = datetime.now()
    start = end - timedelta(days=config.get("QUESTION_LOOKBACK_DAYS", 14))
    fetched = run_async(_fetch_all(ready, start, end,
                                   config.get("QUESTION_PAGE_SIZE", 50),
                                   config.get("VENDOR_TIMEOUT", 30)))

    for account, questions in zip(ready, fetched):
        if isinstance(questions, BaseException):
            if isinstance(questions, VendorError):
                message = questions.message
            else:
                message = f"{account.display_name}: {questions}"
            logger.error(f"[QUESTIONS] Sorular çekilemedi: {message}")
            result.warnings.append(message)
            continue

        for q in questions:
            if not q.get("id"):
                continue
            try:
                created = _save_question(ctx, account, q)
            except IntegrityError:
                # Eşzamanlı ekleme veya kimlik çakışması: bir kez daha dene
                logger.warning(f"[QUESTIONS] Soru {q.get('id')} kaydedilirken çakışma, tekrar deneniyor")
                try:
                    created = _save_question(ctx, account, q, attempt=1)
                except IntegrityError as e:
                    logger.error(f"[QUESTIONS] Soru {q.get('id')} kaydedilemedi: {e}")
                    continue

            result.saved_count += 1
            if created:
                result.new_count += 1

    db.session.commit()
    logger.info(f"[QUESTIONS] tenant={ctx.tenant_id}: {result.saved_count} soru kaydedildi, {result.new_count} yeni")
    return result


def answer_question(ctx: TenantContext, question_id, text: str, store_id) -> Dict[str, Any]:
    """
    Soruya cevap gönder. Pazaryeri reddederse yerel kayıt değişmez.
    """
    text = (text or "").strip()
    if not text or question_id in (None, "") or store_id in (None, ""):
        raise ValidationError("Eksik bilgi")

    account = tenant_query(MarketplaceAccount, ctx).filter(MarketplaceAccount.id == store_id).first()
    if account is None:
        raise AccountNotFound("Mağaza yetkisi yok.")

    question = tenant_query(ExternalQuestion, ctx).filter(ExternalQuestion.id == question_id).first()
    if question is None:
        raise QuestionNotFound()
    if question.store_id != account.id:
        # Cevap yalnızca sorunun geldiği mağazanın bilgileriyle gönderilir
        raise AccountNotFound("Mağaza yetkisi yok.")

    remote_id = (question.raw_data or {}).get("id")
    if not remote_id:
        raise RemoteIdMissing()

    adapter = get_adapter(account, timeout=current_app.config.get("VENDOR_TIMEOUT", 30))
    if adapter is None or not hasattr(adapter, "answer_question"):
        raise VendorError(f"{account.platform.value} için soru cevaplama desteklenmiyor")

    async def _answer():
        async with adapter:
            return await adapter.answer_question(remote_id, text)

    sync_result = run_async(_answer())
    if not sync_result.success:
        raise VendorError(sync_result.error_message)

    question.status = STATUS_ANSWERED
    question.answer_text = text
    question.answer_date = datetime.now()
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"[QUESTIONS] Cevap gönderildi ama yerel kayıt güncellenemedi: {e}", exc_info=True)
        return {"success": True, "local_updated": False}

    return {"success": True, "local_updated": True}


def list_questions(ctx: TenantContext, store_id=None, status_tab: str = "waiting") -> List[Dict[str, Any]]:
    query = tenant_query(ExternalQuestion, ctx)

    if store_id not in (None, "") and store_id not in ALL_TABS:
        query = query.filter(ExternalQuestion.store_id == store_id)

    tab = TAB_ALIASES.get(status_tab, status_tab or "waiting")
    if tab not in ALL_TABS:
        statuses = QUESTION_STATUS_TABS.get(tab)
        if statuses is None:
            raise ValidationError(f"Geçersiz sekme: {status_tab}")
        query = query.filter(ExternalQuestion.status.in_(statuses))

    questions = query.order_by(ExternalQuestion.created_date.desc()).limit(LIST_LIMIT).all()
    return [q.to_dict() for q in questions]
