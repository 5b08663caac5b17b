import pytest

from models import db, Platform, ProductMarketplaceLink
from marketplace_sync import catalog
from marketplace_sync.adapters import get_adapter
from marketplace_sync.catalog import (
    find_account_by_name,
    get_matching_products,
    get_pricing_products,
    list_accounts,
    match_product,
    search_remote_products,
    unmatch_product,
)
from marketplace_sync.errors import AccountNotFound, DuplicateLink, LinkNotFound, ProductNotFound, VendorError

from conftest import FakeResponse, FakeSession, make_account, make_link, make_product


def test_list_accounts_is_tenant_scoped(ctx, other_ctx):
    make_account(ctx, Platform.TRENDYOL, 'Trendyol Mağaza')
    make_account(ctx, Platform.WOOCOMMERCE, 'Web')
    make_account(other_ctx, Platform.TRENDYOL, 'Yabancı')

    accounts = list_accounts(ctx)

    assert [a['store_name'] for a in accounts] == ['Trendyol Mağaza', 'Web']
    assert accounts[0]['platform'] == 'trendyol'


# ──────────────────────────────────────────────────────────────────────────────
# Hesap çözümleme
# ──────────────────────────────────────────────────────────────────────────────
def test_find_account_prefers_exact_store_name(ctx):
    first = make_account(ctx, Platform.TRENDYOL, 'Trendyol')
    make_account(ctx, Platform.WOOCOMMERCE, 'Trendyol')  # aynı isim, ikinci kayıt
    web = make_account(ctx, Platform.WOOCOMMERCE, 'Web Sitesi')

    assert find_account_by_name(ctx, ' Web Sitesi ').id == web.id
    assert find_account_by_name(ctx, 'Trendyol').id == first.id


def test_find_account_falls_back_to_platform_hint(ctx):
    first = make_account(ctx, Platform.WOOCOMMERCE, 'Web 1')
    make_account(ctx, Platform.WOOCOMMERCE, 'Web 2')

    assert find_account_by_name(ctx, 'Woo').id == first.id
    with pytest.raises(AccountNotFound):
        find_account_by_name(ctx, 'Woo', fuzzy=False)


def test_find_account_ignores_other_tenants(ctx, other_ctx):
    make_account(other_ctx, Platform.TRENDYOL, 'Trendyol Mağaza')

    with pytest.raises(AccountNotFound) as exc:
        find_account_by_name(ctx, 'Trendyol Mağaza')
    assert exc.value.message == 'Pazaryeri bulunamadı: Trendyol Mağaza'


# ──────────────────────────────────────────────────────────────────────────────
# Ürün listeleri
# ──────────────────────────────────────────────────────────────────────────────
def test_pricing_products_include_matches(ctx, other_ctx):
    product = make_product(ctx, 'ABC123', name='Kazak')
    make_product(other_ctx, 'XYZ', name='Yabancı')
    account = make_account(ctx, Platform.TRENDYOL, 'Trendyol Mağaza')
    make_link(ctx, product, account, price=250.0)

    [row] = get_pricing_products(ctx)

    assert row['id'] == product.id
    assert row['matches'][0]['marketplace'] == 'Trendyol Mağaza'
    assert row['matches'][0]['price'] == 250.0


def test_pricing_search_matches_name_and_code(ctx):
    make_product(ctx, 'B1', name='Keten Gömlek', code='GML-01')
    make_product(ctx, 'B2', name='Triko Kazak', code='KZK-02')

    assert [p['code'] for p in get_pricing_products(ctx, 'gömlek')] == ['GML-01']
    assert [p['code'] for p in get_pricing_products(ctx, 'kzk')] == ['KZK-02']


def test_matching_products_filters(ctx):
    matched = make_product(ctx, '111', name='A Ürün')
    unmatched = make_product(ctx, '222', name='B Ürün')
    make_link(ctx, matched, make_account(ctx, Platform.WOOCOMMERCE, 'Web'))

    assert [p['id'] for p in get_matching_products(ctx)] == [matched.id, unmatched.id]
    assert [p['id'] for p in get_matching_products(ctx, match_filter='matched')] == [matched.id]
    assert [p['id'] for p in get_matching_products(ctx, match_filter='unmatched')] == [unmatched.id]
    assert [p['id'] for p in get_matching_products(ctx, search='222')] == [unmatched.id]


# ──────────────────────────────────────────────────────────────────────────────
# Eşleştirme
# ──────────────────────────────────────────────────────────────────────────────
def test_match_product_creates_link(ctx):
    product = make_product(ctx, 'ABC123')
    account = make_account(ctx, Platform.TRENDYOL, 'Trendyol Mağaza')

    link = match_product(ctx, product.id, 'Trendyol Mağaza', 77, remote_variant_id=78,
                         remote_data={'barcode': 'ABC123', 'price': 300, 'stock': 2})

    assert (link.product_id, link.marketplace_id) == (product.id, account.id)
    assert (link.remote_product_id, link.remote_variant_id) == ('77', '78')
    assert link.current_sale_price == 300
    assert link.tenant_id == ctx.tenant_id


def test_match_product_twice_is_duplicate(ctx):
    product = make_product(ctx, 'ABC123')
    make_account(ctx, Platform.TRENDYOL, 'Trendyol Mağaza')
    match_product(ctx, product.id, 'Trendyol Mağaza', 77)

    with pytest.raises(DuplicateLink):
        match_product(ctx, product.id, 'Trendyol Mağaza', 99)
    assert ProductMarketplaceLink.query.count() == 1


def test_match_product_requires_exact_store_name(ctx):
    product = make_product(ctx, 'ABC123')
    make_account(ctx, Platform.TRENDYOL, 'Trendyol Mağaza')

    with pytest.raises(AccountNotFound):
        match_product(ctx, product.id, 'trendyol', 77)


def test_match_product_of_other_tenant(ctx, other_ctx):
    foreign = make_product(other_ctx, 'ABC123')
    make_account(ctx, Platform.TRENDYOL, 'Trendyol Mağaza')

    with pytest.raises(ProductNotFound):
        match_product(ctx, foreign.id, 'Trendyol Mağaza', 77)


def test_unmatch_product(ctx):
    link = make_link(ctx, make_product(ctx, 'ABC123'), make_account(ctx))

    unmatch_product(ctx, link.id)

    assert db.session.get(ProductMarketplaceLink, link.id) is None


def test_unmatch_product_of_other_tenant(ctx, other_ctx):
    link = make_link(other_ctx, make_product(other_ctx, 'ABC123'), make_account(other_ctx))

    with pytest.raises(LinkNotFound):
        unmatch_product(ctx, link.id)
    assert ProductMarketplaceLink.query.count() == 1


# ──────────────────────────────────────────────────────────────────────────────
# Uzak arama
# ──────────────────────────────────────────────────────────────────────────────
def test_search_remote_short_query_returns_empty(ctx):
    assert search_remote_products(ctx, 'Web', 'ab') == []
    assert search_remote_products(ctx, 'Web', '  ab  ') == []


def test_search_remote_uses_account_adapter(ctx, monkeypatch):
    make_account(ctx, Platform.WOOCOMMERCE, 'Web')
    session = FakeSession([FakeResponse(200, [{'id': 5, 'name': 'Keten Gömlek', 'sku': 'S5', 'price': '99'}])])
    monkeypatch.setattr(catalog, 'get_adapter', lambda account: get_adapter(account, session=session))

    results = search_remote_products(ctx, 'Web', ' gömlek ')

    assert [r['id'] for r in results] == [5]
    assert session.calls[0]['params'] == {'search': 'gömlek'}


def test_search_remote_without_adapter(ctx):
    make_account(ctx, Platform.HEPSIBURADA, 'HB Mağaza')

    with pytest.raises(VendorError):
        search_remote_products(ctx, 'HB Mağaza', 'kazak')
