import asyncio
import base64
from datetime import datetime

import aiohttp
import pytest

from models import MarketplaceAccount, Platform
from marketplace_sync.adapters import (
    ProductUpdate,
    RemoteTarget,
    SyncOutcome,
    TrendyolAdapter,
    WooCommerceAdapter,
    get_adapter,
)
from marketplace_sync.adapters.trendyol import parse_trendyol_timestamp
from marketplace_sync.adapters.woocommerce import normalize_store_url
from marketplace_sync.errors import VendorError

from conftest import FakeResponse, FakeSession


def trendyol_account(**overrides):
    fields = dict(platform=Platform.TRENDYOL, store_name='Trendyol Mağaza',
                  api_key='key', api_secret='secret', supplier_id='12345')
    fields.update(overrides)
    return MarketplaceAccount(**fields)


def woo_account(**overrides):
    fields = dict(platform=Platform.WOOCOMMERCE, store_name='Web Sitesi',
                  api_key='ck_test', api_secret='cs_test', base_url='shop.example.com/')
    fields.update(overrides)
    return MarketplaceAccount(**fields)


# ──────────────────────────────────────────────────────────────────────────────
# Adaptör seçimi
# ──────────────────────────────────────────────────────────────────────────────
def test_get_adapter_by_platform():
    assert isinstance(get_adapter(trendyol_account()), TrendyolAdapter)
    assert isinstance(get_adapter(woo_account()), WooCommerceAdapter)


def test_get_adapter_returns_none_for_unsupported_platform():
    account = MarketplaceAccount(platform='Hepsiburada', store_name='HB', api_key='k', api_secret='s')
    assert account.platform == Platform.HEPSIBURADA
    assert get_adapter(account) is None


def test_injected_session_is_not_closed_by_adapter():
    session = FakeSession()

    async def scenario():
        async with WooCommerceAdapter(woo_account(), session=session):
            pass

    asyncio.run(scenario())
    assert session.closed is False


# ──────────────────────────────────────────────────────────────────────────────
# WooCommerce
# ──────────────────────────────────────────────────────────────────────────────
@pytest.mark.parametrize('raw,expected', [
    ('shop.example.com', 'https://shop.example.com'),
    ('https://shop.example.com/', 'https://shop.example.com'),
    ('http://localhost:8000', 'http://localhost:8000'),
    (None, ''),
])
def test_normalize_store_url(raw, expected):
    assert normalize_store_url(raw) == expected


def test_woo_payload_uses_string_prices():
    payload = WooCommerceAdapter.build_payload(ProductUpdate(price=110.0, stock=-3, name='Elbise'))
    assert payload == {
        'regular_price': '110.0',
        'price': '110.0',
        'stock_quantity': 0,
        'manage_stock': True,
        'name': 'Elbise',
    }


def test_woo_update_confirmed_on_2xx():
    session = FakeSession([FakeResponse(200, {'id': 55, 'price': '110.0'})])
    adapter = WooCommerceAdapter(woo_account(), session=session)

    result = asyncio.run(adapter.update_price(RemoteTarget(remote_product_id='55'), 110.0))

    assert result.outcome == SyncOutcome.CONFIRMED
    assert result.success
    call = session.calls[0]
    assert call['method'] == 'PUT'
    assert call['url'] == 'https://shop.example.com/wp-json/wc/v3/products/55'
    assert call['json'] == {'regular_price': '110.0', 'price': '110.0'}
    assert call['auth'] == aiohttp.BasicAuth('ck_test', 'cs_test')


def test_woo_update_failed_on_non_2xx_keeps_body():
    session = FakeSession([FakeResponse(400, '{"code":"woocommerce_rest_invalid"}')])
    adapter = WooCommerceAdapter(woo_account(), session=session)

    result = asyncio.run(adapter.update_stock(RemoteTarget(remote_product_id='55'), 4))

    assert result.outcome == SyncOutcome.FAILED
    assert result.error_message == 'WooCommerce Hatası: HTTP 400: {"code":"woocommerce_rest_invalid"}'
    assert session.calls[0]['json'] == {'stock_quantity': 4, 'manage_stock': True}


def test_woo_connection_error_becomes_failed_result():
    session = FakeSession([aiohttp.ClientConnectionError('bağlantı reddedildi')])
    adapter = WooCommerceAdapter(woo_account(), session=session)

    result = asyncio.run(adapter.update_price(RemoteTarget(remote_product_id='55'), 10.0))

    assert result.outcome == SyncOutcome.FAILED
    assert 'bağlantı reddedildi' in result.error_message


def test_woo_missing_credentials_fails_without_request():
    session = FakeSession()
    adapter = WooCommerceAdapter(woo_account(api_secret=None), session=session)

    result = asyncio.run(adapter.update_price(RemoteTarget(remote_product_id='55'), 10.0))

    assert result.outcome == SyncOutcome.FAILED
    assert result.error_message == 'Web Sitesi: Eksik API bilgisi'
    assert session.calls == []


def test_woo_search_maps_products():
    session = FakeSession([FakeResponse(200, [
        {'id': 9, 'name': 'Keten Gömlek', 'sku': '869001', 'price': '450',
         'stock_quantity': 3, 'images': [{'src': 'https://img/1.jpg'}]},
    ])])
    adapter = WooCommerceAdapter(woo_account(), session=session)

    results = asyncio.run(adapter.search_products('gömlek'))

    assert results[0]['id'] == 9
    assert results[0]['barcode'] == '869001'
    assert results[0]['imageUrl'] == 'https://img/1.jpg'
    assert session.calls[0]['params'] == {'search': 'gömlek'}


def test_woo_search_raises_on_error_status():
    adapter = WooCommerceAdapter(woo_account(), session=FakeSession([FakeResponse(500, 'down')]))
    with pytest.raises(VendorError):
        asyncio.run(adapter.search_products('gömlek'))


# ──────────────────────────────────────────────────────────────────────────────
# Trendyol
# ──────────────────────────────────────────────────────────────────────────────
def test_trendyol_update_submitted_with_batch_id():
    session = FakeSession([FakeResponse(200, {'batchRequestId': 'b-42'})])
    adapter = TrendyolAdapter(trendyol_account(), session=session)

    result = asyncio.run(adapter.update_product(
        RemoteTarget(remote_product_id='R1', barcode='ABC123'), ProductUpdate(price=110.0, stock=5)))

    assert result.outcome == SyncOutcome.SUBMITTED
    assert result.batch_request_id == 'b-42'
    call = session.calls[0]
    assert call['url'] == 'https://api.trendyol.com/sapigw/suppliers/12345/products/price-and-inventory'
    assert call['json'] == {'items': [{'barcode': 'ABC123', 'salePrice': 110.0, 'listPrice': 110.0, 'quantity': 5}]}
    expected_auth = base64.b64encode(b'key:secret').decode()
    assert call['headers']['Authorization'] == f'Basic {expected_auth}'
    assert call['headers']['User-Agent'] == '12345 - SelfIntegration'


def test_trendyol_update_falls_back_to_remote_id_as_barcode():
    session = FakeSession([FakeResponse(200, {'batchRequestId': 'b-1'})])
    adapter = TrendyolAdapter(trendyol_account(), session=session)

    asyncio.run(adapter.update_price(RemoteTarget(remote_product_id='R1'), 20.0))

    assert session.calls[0]['json']['items'][0]['barcode'] == 'R1'


def test_trendyol_update_without_batch_id_fails():
    session = FakeSession([FakeResponse(200, {'errors': []})])
    adapter = TrendyolAdapter(trendyol_account(), session=session)

    result = asyncio.run(adapter.update_price(RemoteTarget(remote_product_id='R1', barcode='B'), 20.0))

    assert result.outcome == SyncOutcome.FAILED
    assert result.error_message.startswith('Trendyol güncelleme reddedildi: HTTP 200')


def test_trendyol_nothing_to_send_is_unchanged():
    session = FakeSession()
    adapter = TrendyolAdapter(trendyol_account(), session=session)

    result = asyncio.run(adapter.update_product(RemoteTarget(remote_product_id='R1'), ProductUpdate(name='x')))

    assert result.outcome == SyncOutcome.UNCHANGED
    assert session.calls == []


def test_trendyol_search_uses_barcode_filter_for_digits():
    session = FakeSession([FakeResponse(200, {'content': [
        {'productContentId': 77, 'title': 'Triko Kazak', 'barcode': '8690001', 'salePrice': 300, 'quantity': 2},
    ]})])
    adapter = TrendyolAdapter(trendyol_account(), session=session)

    results = asyncio.run(adapter.search_products('8690001'))

    assert session.calls[0]['params']['barcode'] == '8690001'
    assert results[0]['id'] == 77
    assert results[0]['price'] == 300


def test_trendyol_search_filters_titles_locally():
    session = FakeSession([FakeResponse(200, {'content': [
        {'productContentId': 1, 'title': 'Triko Kazak'},
        {'productContentId': 2, 'title': 'Keten Pantolon'},
    ]})])
    adapter = TrendyolAdapter(trendyol_account(), session=session)

    results = asyncio.run(adapter.search_products('kazak'))

    assert 'barcode' not in session.calls[0]['params']
    assert [r['id'] for r in results] == [1]


def test_trendyol_fetch_questions_reads_all_pages():
    session = FakeSession([
        FakeResponse(200, {'content': [{'id': 1}], 'totalPages': 3, 'totalElements': 3}),
        FakeResponse(200, {'content': [{'id': 2}]}),
        FakeResponse(500, 'hata'),
    ])
    adapter = TrendyolAdapter(trendyol_account(), session=session)

    questions = asyncio.run(adapter.fetch_questions(datetime(2026, 1, 1), datetime(2026, 1, 15)))

    # Hatalı sayfa atlanır, diğerleri döner
    assert [q['id'] for q in questions] == [1, 2]
    assert len(session.calls) == 3
    assert session.calls[0]['url'] == 'https://apigw.trendyol.com/integration/qna/sellers/12345/questions/filter'


def test_trendyol_fetch_questions_first_page_failure_raises():
    adapter = TrendyolAdapter(trendyol_account(), session=FakeSession([FakeResponse(401, 'unauthorized')]))
    with pytest.raises(VendorError) as exc:
        asyncio.run(adapter.fetch_questions(datetime(2026, 1, 1), datetime(2026, 1, 15)))
    assert '401' in exc.value.message


def test_trendyol_answer_question():
    session = FakeSession([FakeResponse(200, '')])
    adapter = TrendyolAdapter(trendyol_account(), session=session)

    result = asyncio.run(adapter.answer_question(987, 'Merhaba, stokta var.'))

    assert result.outcome == SyncOutcome.CONFIRMED
    assert session.calls[0]['url'].endswith('/sellers/12345/questions/987/answers')
    assert session.calls[0]['json'] == {'text': 'Merhaba, stokta var.'}


def test_trendyol_answer_question_rejected():
    adapter = TrendyolAdapter(trendyol_account(), session=FakeSession([FakeResponse(400, 'too short')]))
    result = asyncio.run(adapter.answer_question(987, 'ok'))
    assert result.outcome == SyncOutcome.FAILED
    assert result.error_message == 'Trendyol Hatası: too short'


def test_parse_trendyol_timestamp():
    assert parse_trendyol_timestamp(None) is None
    assert parse_trendyol_timestamp('abc') is None
    assert parse_trendyol_timestamp(1700000000000) == datetime.fromtimestamp(1700000000)
