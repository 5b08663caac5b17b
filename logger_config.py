import logging
import logging.handlers
import os

LOG_DIR = os.getenv('LOG_DIR', 'logs')

# Log dizini oluştur
if not os.path.exists(LOG_DIR):
    os.makedirs(LOG_DIR)


def setup_logger(name, log_file, level=logging.INFO):
    formatter = logging.Formatter(
        '%(asctime)s %(levelname)s [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Modül tekrar import edildiğinde handler'lar çoğalmasın
    if logger.handlers:
        return logger

    # File handler
    file_handler = logging.handlers.RotatingFileHandler(
        os.path.join(LOG_DIR, log_file),
        maxBytes=5*1024*1024,  # 5MB
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


# Ana loglayıcıları oluştur
app_logger = setup_logger('app', 'app.log')
sync_logger = setup_logger('sync', 'sync.log')
api_logger = setup_logger('api', 'api.log')
db_logger = setup_logger('database', 'database.log')
