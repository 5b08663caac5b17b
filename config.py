# config.py - Application configuration classes
import os

from dotenv import load_dotenv

load_dotenv()


class BaseConfig:
    SECRET_KEY = os.getenv('SECRET_KEY', 'default_secret')
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'DATABASE_URL',
        'sqlite:///app.db'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    MAX_CONTENT_LENGTH = 10 * 1024 * 1024  # 10 MB (Excel yüklemeleri)

    # Pazaryeri senkronizasyon ayarları
    SYNC_MAX_CONCURRENCY = int(os.getenv('SYNC_MAX_CONCURRENCY', 5))
    VENDOR_TIMEOUT = int(os.getenv('VENDOR_TIMEOUT', 30))  # saniye
    QUESTION_LOOKBACK_DAYS = int(os.getenv('QUESTION_LOOKBACK_DAYS', 14))
    QUESTION_PAGE_SIZE = int(os.getenv('QUESTION_PAGE_SIZE', 50))


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class ProductionConfig(BaseConfig):
    DEBUG = False


class TestingConfig(BaseConfig):
    TESTING = True
    SECRET_KEY = 'test_secret'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SYNC_MAX_CONCURRENCY = 2
    VENDOR_TIMEOUT = 5


config_map = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
}
