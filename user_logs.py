from flask import request
from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError
from models import db, UserLog
from datetime import datetime
import json

from logger_config import app_logger as logger

# İşlem tiplerinin Türkçe karşılıkları
ACTION_TYPE_MAP = {
    'LOGIN': 'Giriş',
    'LOGOUT': 'Çıkış',
    'PRICE_UPDATE': 'Fiyat Güncelleme',
    'BULK_PRICE_UPDATE': 'Toplu Fiyat Güncelleme',
    'MANUAL_LINK': 'Manuel Eşleştirme',
    'MATCH': 'Eşleştirme',
    'UNMATCH': 'Eşleştirme Silme',
    'EXCEL_MATCH': 'Excel ile Eşleştirme',
    'PRODUCT_SYNC': 'Ürün Senkronizasyonu',
    'QUESTION_SYNC': 'Soru Senkronizasyonu',
    'QUESTION_ANSWER': 'Soru Cevaplama',
}


def translate_action_type(action: str) -> str:
    return ACTION_TYPE_MAP.get(action, action)


def log_user_action(action: str, details=None, tenant_id: str = None) -> None:
    """
    Kullanıcı işlemini user_logs tablosuna yaz.

    Args:
        action: İşlem tipi (örn: 'PRICE_UPDATE')
        details: İşlem detayları (dict veya string)
        tenant_id: İşlemin yapıldığı organizasyon

    Örnek:
        log_user_action('PRICE_UPDATE', {'link_id': 12, 'fiyat': 110.0}, tenant_id=ctx.tenant_id)
    """
    if not current_user.is_authenticated:
        return

    extended_details = {
        'Kullanıcı': current_user.username,
        'İşlem': translate_action_type(action),
        'Tarayıcı': request.user_agent.string,
        'Zaman': datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
    }
    if details:
        if isinstance(details, dict):
            for k, v in details.items():
                extended_details[k.replace('_', ' ').title()] = v
        else:
            extended_details['Detay'] = str(details)

    try:
        new_log = UserLog(
            tenant_id=tenant_id,
            user_id=current_user.id,
            action=action,
            details=json.dumps(extended_details, ensure_ascii=False, default=str),
            ip_address=request.remote_addr,
            page_url=request.url
        )
        db.session.add(new_log)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Log kaydedilemedi: {e}")
