from datetime import datetime
import enum

from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from sqlalchemy import JSON
from sqlalchemy.orm import validates


db = SQLAlchemy()


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Platform(str, enum.Enum):
    """Desteklenen pazaryeri platformları (kapalı küme)"""
    TRENDYOL = "trendyol"
    WOOCOMMERCE = "woocommerce"
    HEPSIBURADA = "hepsiburada"
    N11 = "n11"
    AMAZON = "amazon"
    IDEFIX = "idefix"

    @classmethod
    def parse(cls, label):
        """
        Entegrasyon ekranından gelen serbest platform adını enum'a çevirir.
        Eski kayıtlardaki etiketler ("Trendyol", "WooCommerce", "woo") alias tablosuyla eşlenir.
        """
        if isinstance(label, cls):
            return label
        key = str(label or '').strip().lower().replace(' ', '').replace('-', '').replace('_', '')
        if key in PLATFORM_ALIASES:
            return PLATFORM_ALIASES[key]
        raise ValueError(f"Bilinmeyen platform: {label}")


PLATFORM_ALIASES = {
    "trendyol": Platform.TRENDYOL,
    "woocommerce": Platform.WOOCOMMERCE,
    "woo": Platform.WOOCOMMERCE,
    "wordpress": Platform.WOOCOMMERCE,
    "hepsiburada": Platform.HEPSIBURADA,
    "hb": Platform.HEPSIBURADA,
    "n11": Platform.N11,
    "amazon": Platform.AMAZON,
    "idefix": Platform.IDEFIX,
}


class LinkStatus(str, enum.Enum):
    ACTIVE = "active"
    ERROR = "error"


class User(db.Model, UserMixin):
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(150), unique=True, nullable=False)
    email = db.Column(db.String(150), unique=True, nullable=False)
    password = db.Column(db.String(256), nullable=False)  # Hashlenmiş şifre
    role = db.Column(db.String(50), default='worker')
    # Kimlik sağlayıcıdan gelen organizasyon; yoksa kişisel alan kullanılır
    organization_id = db.Column(db.String(64), nullable=True, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class CatalogProduct(db.Model):
    """Kiracıya ait ana ürün kaydı (fiyat/stok için tek doğru kaynak)"""
    __tablename__ = 'catalog_products'

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    code = db.Column(db.String(100))
    barcode = db.Column(db.String(100), index=True)
    stock = db.Column(db.Integer, nullable=False, default=0)
    price = db.Column(db.Float, default=0.0)
    cost_price = db.Column(db.Float, default=0.0)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    links = db.relationship('ProductMarketplaceLink', back_populates='product',
                            cascade='all, delete', lazy='selectin')

    __table_args__ = (
        db.UniqueConstraint('tenant_id', 'barcode', name='uq_catalog_tenant_barcode'),
        db.CheckConstraint('stock >= 0', name='ck_catalog_stock_non_negative'),
    )

    def __repr__(self):
        return f"<CatalogProduct {self.barcode} tenant={self.tenant_id}>"


class MarketplaceAccount(db.Model):
    """Bağlı pazaryeri mağaza hesabı ve API bilgileri"""
    __tablename__ = 'marketplace_accounts'

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.String(64), nullable=False, index=True)
    platform = db.Column(
        db.Enum(Platform, values_callable=_enum_values, native_enum=False, length=32),
        nullable=False
    )
    store_name = db.Column(db.String(150), nullable=False)
    api_key = db.Column(db.String(255))
    api_secret = db.Column(db.String(255))
    supplier_id = db.Column(db.String(64))
    base_url = db.Column(db.String(255))
    is_active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    links = db.relationship('ProductMarketplaceLink', back_populates='account',
                            cascade='all, delete', passive_deletes=True)

    @validates('platform')
    def validate_platform(self, key, value):
        return Platform.parse(value)

    @property
    def display_name(self):
        return self.store_name or self.platform.value

    def has_credentials(self):
        if self.platform == Platform.TRENDYOL:
            return all([self.api_key, self.api_secret, self.supplier_id])
        if self.platform == Platform.WOOCOMMERCE:
            return all([self.api_key, self.api_secret, self.base_url])
        return all([self.api_key, self.api_secret])

    def to_dict(self):
        return {
            "id": self.id,
            "store_name": self.store_name,
            "platform": self.platform.value,
        }

    def __repr__(self):
        return f"<MarketplaceAccount {self.store_name} ({self.platform.value})>"


class ProductMarketplaceLink(db.Model):
    """Bir katalog ürününün bir pazaryeri hesabındaki ilan karşılığı"""
    __tablename__ = 'product_marketplaces'

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.String(64), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey('catalog_products.id', ondelete='CASCADE'), nullable=False)
    marketplace_id = db.Column(db.Integer, db.ForeignKey('marketplace_accounts.id', ondelete='CASCADE'), nullable=False)
    remote_product_id = db.Column(db.String(100), nullable=False)
    remote_variant_id = db.Column(db.String(100))
    barcode = db.Column(db.String(100))  # Trendyol gibi barkod isteyen API'ler için kopya
    current_sale_price = db.Column(db.Float, default=0.0)
    stock_quantity = db.Column(db.Integer, default=0)
    status = db.Column(
        db.Enum(LinkStatus, values_callable=_enum_values, native_enum=False, length=16),
        nullable=False, default=LinkStatus.ACTIVE
    )
    last_sync_outcome = db.Column(db.String(20))  # confirmed | submitted | no_adapter | failed
    last_success_date = db.Column(db.DateTime)
    last_error_message = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    product = db.relationship('CatalogProduct', back_populates='links')
    account = db.relationship('MarketplaceAccount', back_populates='links', lazy='joined')

    # Bir ürün bir pazaryeri hesabına yalnızca bir kez bağlanabilir
    __table_args__ = (
        db.UniqueConstraint('product_id', 'marketplace_id', name='uq_link_product_marketplace'),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "remote_product_id": self.remote_product_id,
            "remote_variant_id": self.remote_variant_id,
            "barcode": self.barcode,
            "price": self.current_sale_price,
            "stock": self.stock_quantity,
            "status": self.status.value if self.status else None,
            "last_sync_outcome": self.last_sync_outcome,
            "last_error_message": self.last_error_message,
            "marketplace": self.account.display_name if self.account else '?',
            "platform": self.account.platform.value if self.account else None,
            "marketplace_id": self.marketplace_id,
        }

    def __repr__(self):
        return f"<Link product={self.product_id} market={self.marketplace_id} remote={self.remote_product_id}>"


class ExternalQuestion(db.Model):
    """Pazaryerinden çekilen müşteri sorusu"""
    __tablename__ = 'marketplace_questions'

    # Yerel olarak türetilen kimlik (bkz. marketplace_sync.questions.synthetic_question_id)
    id = db.Column(db.BigInteger, primary_key=True, autoincrement=False)
    tenant_id = db.Column(db.String(64), nullable=False, index=True)
    store_id = db.Column(db.Integer, db.ForeignKey('marketplace_accounts.id', ondelete='CASCADE'), nullable=False)
    customer_id = db.Column(db.String(64))
    customer_name = db.Column(db.String(150))
    product_name = db.Column(db.String(255))
    product_image = db.Column(db.String(500))
    web_url = db.Column(db.String(500))
    text = db.Column(db.Text)
    status = db.Column(db.String(50), index=True)
    created_date = db.Column(db.DateTime)
    answer_text = db.Column(db.Text)
    answer_date = db.Column(db.DateTime)
    raw_data = db.Column(JSON)  # Ham API cevabı; uzak soru ID'si buradan okunur

    account = db.relationship('MarketplaceAccount', lazy='joined')

    def to_dict(self):
        return {
            "id": self.id,
            "store_id": self.store_id,
            "text": self.text,
            "customer_name": self.customer_name,
            "product_name": self.product_name,
            "product_image": self.product_image,
            "web_url": self.web_url,
            "status": self.status,
            "created_date": self.created_date.isoformat() if self.created_date else None,
            "answer_text": self.answer_text,
            "answer_date": self.answer_date.isoformat() if self.answer_date else None,
            "marketplace_accounts": self.account.to_dict() if self.account else None,
        }

    def __repr__(self):
        return f'<ExternalQuestion {self.id}>'


class UserLog(db.Model):
    __tablename__ = 'user_logs'
    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.String(64), index=True)
    # user_id null olabilir (örn: sistem logları için)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True, index=True)
    action = db.Column(db.String(255), nullable=False, index=True)
    details = db.Column(db.Text)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, index=True)
    ip_address = db.Column(db.String(45))  # IPv6 desteği için 45 karakter
    page_url = db.Column(db.String(255))

    user = db.relationship('User', backref=db.backref('logs', lazy='dynamic'))
