#!/usr/bin/env python3
import os

from app import create_app

app = create_app()

if __name__ == '__main__':
    print("Flask app başlatılıyor...")
    app.run(host='0.0.0.0', port=int(os.getenv('PORT', 8080)), debug=app.config.get('DEBUG', False), use_reloader=False)
