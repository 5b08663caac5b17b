# -*- coding: utf-8 -*-
"""
Pazaryeri Senkronizasyon API Endpoint'leri
"""

from flask import Blueprint, request, jsonify
from flask_login import login_required
from sqlalchemy.exc import SQLAlchemyError

from models import db
from logger_config import api_logger as logger, db_logger
from user_logs import log_user_action

from .adapters import ProductUpdate
from .catalog import (
    find_account_by_name,
    get_matching_products,
    get_pricing_products,
    list_accounts,
    match_product,
    search_remote_products,
    unmatch_product,
)
from .errors import SyncError, ValidationError
from .excel_matching import bulk_match, parse_vendor_export
from .pricing import bulk_update_prices, manual_link, sync_product_to_marketplaces, update_product_price
from .questions import answer_question, list_questions, sync_questions
from .tenant import resolve_tenant
from .utils import parse_float, parse_int


marketplace_sync_bp = Blueprint('marketplace_sync', __name__, url_prefix='/pazaryeri/api')


@marketplace_sync_bp.errorhandler(SyncError)
def handle_sync_error(error):
    logger.warning(f"[API] {request.method} {request.path} -> {error.status_code}: {error.message}")
    return jsonify({'success': False, 'error': error.message}), error.status_code


@marketplace_sync_bp.errorhandler(SQLAlchemyError)
def handle_db_error(error):
    db.session.rollback()
    db_logger.error(f"[API] Veritabanı hatası ({request.path}): {error}", exc_info=True)
    return jsonify({'success': False, 'error': 'Veritabanı hatası'}), 500


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError()
    return data


# ════════════════════════════════════════════════════════════════════
# HESAPLAR
# ════════════════════════════════════════════════════════════════════

@marketplace_sync_bp.route('/accounts', methods=['GET'])
@login_required
def accounts():
    ctx = resolve_tenant()
    return jsonify({'success': True, 'data': list_accounts(ctx)})


# ════════════════════════════════════════════════════════════════════
# FİYAT YÖNETİMİ
# ════════════════════════════════════════════════════════════════════

@marketplace_sync_bp.route('/pricing/products', methods=['GET'])
@login_required
def pricing_products():
    ctx = resolve_tenant()
    search = request.args.get('search', '')
    return jsonify({'success': True, 'data': get_pricing_products(ctx, search)})


@marketplace_sync_bp.route('/pricing/update', methods=['POST'])
@login_required
def pricing_update():
    """Tek bağlantı fiyat güncellemesi"""
    ctx = resolve_tenant()
    data = _json_body()

    result = update_product_price(ctx, data.get('link_id'), data.get('new_price'))
    log_user_action('PRICE_UPDATE', {'link_id': data.get('link_id'), 'fiyat': data.get('new_price')},
                    tenant_id=ctx.tenant_id)
    return jsonify(result)


@marketplace_sync_bp.route('/pricing/bulk-update', methods=['POST'])
@login_required
def pricing_bulk_update():
    """Kaynak pazardan hedef pazara toplu fiyat aktarımı"""
    ctx = resolve_tenant()
    data = _json_body()

    result = bulk_update_prices(
        ctx,
        source_market_id=data.get('source_market_id'),
        target_market_id=data.get('target_market_id'),
        operation=data.get('operation'),
        value=data.get('value') or 0,
    )
    log_user_action('BULK_PRICE_UPDATE', {
        'kaynak': data.get('source_market_id'),
        'hedef': data.get('target_market_id'),
        'işlem': data.get('operation'),
        'güncellenen': result['count'],
        'hata': len(result['errors']),
    }, tenant_id=ctx.tenant_id)
    return jsonify(result)


@marketplace_sync_bp.route('/pricing/manual-link', methods=['POST'])
@login_required
def pricing_manual_link():
    ctx = resolve_tenant()
    data = _json_body()

    link = manual_link(
        ctx,
        product_id=data.get('product_id'),
        marketplace_id=data.get('marketplace_id'),
        remote_id=data.get('remote_id'),
        remote_initial_price=data.get('remote_initial_price') or 0,
    )
    log_user_action('MANUAL_LINK', {'ürün': data.get('product_id'), 'uzak_id': data.get('remote_id')},
                    tenant_id=ctx.tenant_id)
    return jsonify({'success': True, 'data': link.to_dict()})


# ════════════════════════════════════════════════════════════════════
# EŞLEŞTİRME
# ════════════════════════════════════════════════════════════════════

@marketplace_sync_bp.route('/matching/products', methods=['GET'])
@login_required
def matching_products():
    ctx = resolve_tenant()
    search = request.args.get('search', '')
    match_filter = request.args.get('filter', 'all')
    return jsonify({'success': True, 'data': get_matching_products(ctx, search, match_filter)})


@marketplace_sync_bp.route('/matching/search-remote', methods=['GET'])
@login_required
def matching_search_remote():
    ctx = resolve_tenant()
    marketplace = request.args.get('marketplace', '')
    query = request.args.get('query', '')
    return jsonify({'success': True, 'data': search_remote_products(ctx, marketplace, query)})


@marketplace_sync_bp.route('/matching/match', methods=['POST'])
@login_required
def matching_match():
    ctx = resolve_tenant()
    data = _json_body()
    if not data.get('product_id') or not data.get('marketplace') or not data.get('remote_product_id'):
        raise ValidationError()

    link = match_product(
        ctx,
        product_id=data['product_id'],
        marketplace_name=data['marketplace'],
        remote_product_id=data['remote_product_id'],
        remote_variant_id=data.get('remote_variant_id'),
        remote_data=data.get('remote_data'),
    )
    log_user_action('MATCH', {'ürün': data['product_id'], 'pazaryeri': data['marketplace']},
                    tenant_id=ctx.tenant_id)
    return jsonify({'success': True, 'data': link.to_dict()})


@marketplace_sync_bp.route('/matching/<int:link_id>', methods=['DELETE'])
@login_required
def matching_unmatch(link_id):
    ctx = resolve_tenant()
    unmatch_product(ctx, link_id)
    log_user_action('UNMATCH', {'bağlantı': link_id}, tenant_id=ctx.tenant_id)
    return jsonify({'success': True})


@marketplace_sync_bp.route('/matching/excel', methods=['POST'])
@login_required
def matching_excel():
    """Excel dosyası ile toplu eşleştirme (multipart: file, marketplace)"""
    ctx = resolve_tenant()
    upload = request.files.get('file')
    marketplace = request.form.get('marketplace', '')
    if upload is None or not upload.filename:
        raise ValidationError("Dosya seçilmedi")
    if not marketplace:
        raise ValidationError("Pazaryeri seçilmedi")

    account = find_account_by_name(ctx, marketplace)
    rows = parse_vendor_export(ctx, upload.read(), account.platform.value)
    result = bulk_match(ctx, rows, marketplace)
    log_user_action('EXCEL_MATCH', {
        'dosya': upload.filename,
        'pazaryeri': marketplace,
        'eşleşen': result.matched,
        'bulunamayan': result.not_found,
    }, tenant_id=ctx.tenant_id)
    return jsonify({'success': True, **result.to_dict()})


# ════════════════════════════════════════════════════════════════════
# ÜRÜN SENKRONİZASYONU
# ════════════════════════════════════════════════════════════════════

@marketplace_sync_bp.route('/products/<int:product_id>/sync', methods=['POST'])
@login_required
def product_sync(product_id):
    ctx = resolve_tenant()
    data = _json_body()

    update = ProductUpdate(
        price=parse_float(data.get('price'), default=None),
        stock=parse_int(data.get('stock'), default=None),
        name=data.get('name'),
        description=data.get('description'),
    )
    result = sync_product_to_marketplaces(ctx, product_id, update)
    log_user_action('PRODUCT_SYNC', {'ürün': product_id, 'başarılı': result['success']},
                    tenant_id=ctx.tenant_id)
    return jsonify(result)


# ════════════════════════════════════════════════════════════════════
# MÜŞTERİ SORULARI
# ════════════════════════════════════════════════════════════════════

@marketplace_sync_bp.route('/questions', methods=['GET'])
@login_required
def questions():
    ctx = resolve_tenant()
    store_id = request.args.get('store_id')
    status_tab = request.args.get('status', 'waiting')
    return jsonify({'success': True, 'data': list_questions(ctx, store_id, status_tab)})


@marketplace_sync_bp.route('/questions/sync', methods=['POST'])
@login_required
def questions_sync():
    ctx = resolve_tenant()
    result = sync_questions(ctx)
    log_user_action('QUESTION_SYNC', {'kaydedilen': result.saved_count, 'yeni': result.new_count},
                    tenant_id=ctx.tenant_id)
    return jsonify({'success': True, **result.to_dict()})


@marketplace_sync_bp.route('/questions/<int:question_id>/answer', methods=['POST'])
@login_required
def questions_answer(question_id):
    ctx = resolve_tenant()
    data = _json_body()

    result = answer_question(ctx, question_id, data.get('text'), data.get('store_id'))
    log_user_action('QUESTION_ANSWER', {'soru': question_id}, tenant_id=ctx.tenant_id)
    return jsonify(result)
