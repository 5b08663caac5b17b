import io
import json

import pandas as pd
import pytest
from werkzeug.security import generate_password_hash

from app import create_app
from models import db as _db, User, CatalogProduct, MarketplaceAccount, ProductMarketplaceLink, Platform
from marketplace_sync.tenant import TenantContext


# ──────────────────────────────────────────────────────────────────────────────
# Uygulama / veritabanı
# ──────────────────────────────────────────────────────────────────────────────
@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def user(db):
    user = User(username='ayse', email='ayse@example.com', role='admin',
                password=generate_password_hash('gizli123'), organization_id='org-1')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def ctx(user):
    return TenantContext(tenant_id='org-1', user_id=user.id, username=user.username)


@pytest.fixture
def other_ctx():
    return TenantContext(tenant_id='org-2')


@pytest.fixture
def auth_client(client, user):
    with client.session_transaction() as sess:
        sess['_user_id'] = str(user.id)
        sess['_fresh'] = True
    return client


# ──────────────────────────────────────────────────────────────────────────────
# Kayıt yardımcıları
# ──────────────────────────────────────────────────────────────────────────────
def make_product(ctx, barcode, price=100.0, name=None, code=None, stock=10):
    product = CatalogProduct(tenant_id=ctx.tenant_id, name=name or f"Ürün {barcode}",
                             code=code or barcode, barcode=barcode, price=price, stock=stock)
    _db.session.add(product)
    _db.session.commit()
    return product


def make_account(ctx, platform=Platform.WOOCOMMERCE, store_name=None, **credentials):
    defaults = {
        Platform.TRENDYOL: {'api_key': 'key', 'api_secret': 'secret', 'supplier_id': '12345'},
        Platform.WOOCOMMERCE: {'api_key': 'ck_test', 'api_secret': 'cs_test', 'base_url': 'shop.example.com'},
    }.get(Platform.parse(platform), {'api_key': 'key', 'api_secret': 'secret'})
    defaults.update(credentials)
    account = MarketplaceAccount(tenant_id=ctx.tenant_id, platform=platform,
                                 store_name=store_name or Platform.parse(platform).value, **defaults)
    _db.session.add(account)
    _db.session.commit()
    return account


def make_link(ctx, product, account, price=100.0, remote_id=None, barcode=None):
    link = ProductMarketplaceLink(
        tenant_id=ctx.tenant_id,
        product_id=product.id,
        marketplace_id=account.id,
        remote_product_id=remote_id or f"R-{product.barcode}",
        barcode=barcode or product.barcode,
        current_sale_price=price,
    )
    _db.session.add(link)
    _db.session.commit()
    return link


def make_xlsx(rows):
    """Satır sözlüklerinden bellekte xlsx üret"""
    buffer = io.BytesIO()
    pd.DataFrame(rows).to_excel(buffer, index=False, engine='openpyxl')
    return buffer.getvalue()


# ──────────────────────────────────────────────────────────────────────────────
# Sahte aiohttp session
# ──────────────────────────────────────────────────────────────────────────────
class FakeResponse:
    def __init__(self, status=200, body=None):
        self.status = status
        if body is None:
            self._text = ''
        elif isinstance(body, str):
            self._text = body
        else:
            self._text = json.dumps(body)

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """session.request(...) çağrılarını kaydeder, sıradaki cevabı döner"""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.calls.append({'method': method, 'url': url, **kwargs})
        response = self.responses.pop(0) if self.responses else FakeResponse(200, {})
        if isinstance(response, BaseException):
            raise response
        return response

    async def close(self):
        self.closed = True
