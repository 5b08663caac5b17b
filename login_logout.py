from flask import request, jsonify, Blueprint
from flask_login import login_user, logout_user, current_user
from werkzeug.security import check_password_hash
from models import User
from logger_config import app_logger as logger
from user_logs import log_user_action
from marketplace_sync.tenant import tenant_id_for_user

login_logout_bp = Blueprint('login_logout', __name__)


@login_logout_bp.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or request.form
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''

    user = User.query.filter_by(username=username).first()
    if user is None or not check_password_hash(user.password, password):
        logger.warning(f"Hatalı giriş denemesi: {username}")
        return jsonify({'success': False, 'error': 'Kullanıcı adı veya şifre yanlış!'}), 401

    login_user(user, remember=True)
    logger.info(f"Giriş yapan kullanıcı: {user.username}, rolü: {user.role}")
    log_user_action('LOGIN', tenant_id=tenant_id_for_user(user))
    return jsonify({'success': True, 'user': {'id': user.id, 'username': user.username, 'role': user.role}})


# Oturumu kapatma
@login_logout_bp.route('/logout', methods=['POST'])
def logout():
    if current_user.is_authenticated:
        log_user_action('LOGOUT', tenant_id=tenant_id_for_user(current_user))
        logout_user()
    return jsonify({'success': True, 'message': 'Başarıyla çıkış yaptınız.'})
