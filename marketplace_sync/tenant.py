# -*- coding: utf-8 -*-
"""
Tenant Resolver - Oturumdaki kullanıcının organizasyonunu çözer.

Her domain fonksiyonu ilk parametre olarak bir TenantContext alır ve
tüm sorguları tenant_query() ile kurar.
"""

from dataclasses import dataclass
from typing import Optional

from flask_login import current_user

from logger_config import app_logger as logger
from .errors import Unauthorized


@dataclass(frozen=True)
class TenantContext:
    tenant_id: str
    user_id: Optional[int] = None
    username: Optional[str] = None


def tenant_id_for_user(user) -> str:
    """Organizasyon varsa onu, yoksa kullanıcının kişisel alanını döndür"""
    if getattr(user, 'organization_id', None):
        return user.organization_id
    return f"user_{user.id}"


def resolve_tenant() -> TenantContext:
    """
    Aktif oturumdan TenantContext üretir.
    Önbellek yok; her çağrıda oturum yeniden okunur.
    """
    if not current_user or not current_user.is_authenticated:
        logger.warning("[TENANT] Oturum bulunamadı, işlem reddedildi")
        raise Unauthorized()

    return TenantContext(
        tenant_id=tenant_id_for_user(current_user),
        user_id=current_user.id,
        username=current_user.username,
    )


def tenant_query(model, ctx: TenantContext):
    """Kiracıya göre filtrelenmiş sorgu"""
    if ctx is None or not ctx.tenant_id:
        raise Unauthorized()
    return model.query.filter(model.tenant_id == ctx.tenant_id)
