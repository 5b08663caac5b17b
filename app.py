# -*- coding: utf-8 -*-

import os
from dotenv import load_dotenv
load_dotenv()

from flask import Flask, jsonify
from flask_cors import CORS
from flask_login import LoginManager

from config import config_map, DevelopmentConfig
from models import db, User
from logger_config import app_logger as logger
from routes import register_blueprints

login_manager = LoginManager()


# ──────────────────────────────────────────────────────────────────────────────
# Flask Uygulaması
# ──────────────────────────────────────────────────────────────────────────────
def create_app(config_name=None):
    app = Flask(__name__)

    env = config_name or os.getenv('FLASK_ENV', 'development')
    app.config.from_object(config_map.get(env, DevelopmentConfig))

    db.init_app(app)
    CORS(app, supports_credentials=True)

    login_manager.init_app(app)
    register_blueprints(app)

    logger.info(f"Uygulama başlatıldı (ortam: {env})")
    return app


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'success': False, 'error': 'Unauthorized'}), 401
