import dataclasses

import pytest

from models import User, CatalogProduct, Platform
from marketplace_sync.errors import Unauthorized
from marketplace_sync.tenant import TenantContext, resolve_tenant, tenant_id_for_user, tenant_query

from conftest import make_product


def test_tenant_prefers_organization():
    user = User(id=7, username='x', email='x@example.com', password='-', organization_id='org-9')
    assert tenant_id_for_user(user) == 'org-9'


def test_tenant_falls_back_to_personal_scope():
    user = User(id=7, username='x', email='x@example.com', password='-')
    assert tenant_id_for_user(user) == 'user_7'


def test_resolve_tenant_without_login_raises(app):
    with app.test_request_context('/'):
        with pytest.raises(Unauthorized):
            resolve_tenant()


def test_resolve_tenant_from_session(app, user):
    from flask_login import login_user

    with app.test_request_context('/'):
        login_user(user)
        ctx = resolve_tenant()

    assert ctx == TenantContext(tenant_id='org-1', user_id=user.id, username='ayse')


def test_context_is_immutable(ctx):
    with pytest.raises(dataclasses.FrozenInstanceError):
        ctx.tenant_id = 'org-2'


def test_tenant_query_isolates_rows(ctx, other_ctx):
    make_product(ctx, 'A1')
    make_product(other_ctx, 'B1')

    assert [p.barcode for p in tenant_query(CatalogProduct, ctx).all()] == ['A1']
    assert [p.barcode for p in tenant_query(CatalogProduct, other_ctx).all()] == ['B1']


def test_same_barcode_allowed_in_different_tenants(ctx, other_ctx):
    make_product(ctx, 'SAME')
    make_product(other_ctx, 'SAME')
    assert CatalogProduct.query.filter_by(barcode='SAME').count() == 2


def test_tenant_query_rejects_empty_context(app):
    with pytest.raises(Unauthorized):
        tenant_query(CatalogProduct, TenantContext(tenant_id=''))


@pytest.mark.parametrize('label,expected', [
    ('Trendyol', Platform.TRENDYOL),
    ('WooCommerce', Platform.WOOCOMMERCE),
    ('woo', Platform.WOOCOMMERCE),
    (' Hepsi Burada ', Platform.HEPSIBURADA),
    (Platform.N11, Platform.N11),
])
def test_platform_parse_aliases(label, expected):
    assert Platform.parse(label) == expected


def test_platform_parse_has_no_substring_matching():
    with pytest.raises(ValueError):
        Platform.parse('trendyol-butik')
