from flask import Blueprint
from sqlalchemy import text

from models import db

health_bp = Blueprint('health', __name__)

@health_bp.route('/health', methods=['GET'])
def health_check():
    """Liveness/readiness probe endpoint"""
    db.session.execute(text('SELECT 1'))
    return {'status': 'ok'}, 200
