# -*- coding: utf-8 -*-
"""
Pazaryeri senkronizasyon hataları.
Mesajlar olduğu gibi kullanıcıya gösterilir.
"""


class SyncError(Exception):
    """Tüm senkronizasyon hatalarının temel sınıfı"""
    status_code = 400
    default_message = "İşlem başarısız"

    def __init__(self, message=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class Unauthorized(SyncError):
    status_code = 401
    default_message = "Unauthorized"


class ValidationError(SyncError):
    status_code = 400
    default_message = "Eksik veri."


class AccountNotFound(SyncError):
    status_code = 404
    default_message = "Mağaza bulunamadı."


class ProductNotFound(SyncError):
    status_code = 404
    default_message = "Ürün bulunamadı."


class LinkNotFound(SyncError):
    status_code = 404
    default_message = "Bağlantı bulunamadı."


class QuestionNotFound(SyncError):
    status_code = 404
    default_message = "Soru bulunamadı."


class DuplicateLink(SyncError):
    status_code = 409
    default_message = "Bu ürün zaten bu pazaryerine bağlı."


class EmptyResult(SyncError):
    status_code = 422
    default_message = "Excel dosyasında geçerli ürün bulunamadı. Lütfen dosya formatını kontrol edin."


class RemoteIdMissing(SyncError):
    status_code = 422
    default_message = "Soru kaynağı bulunamadı (Remote ID eksik)."


class VendorError(SyncError):
    """Pazaryeri API çağrısı başarısız oldu veya reddedildi"""
    status_code = 502
    default_message = "Pazaryeri güncellemesi başarısız"
