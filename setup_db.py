from app import create_app
from models import db

if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        # Eksik tabloları oluştur (üretimde alembic migration kullanılır)
        print("Veritabanı tabloları oluşturuluyor...")
        db.create_all()
        print("Veritabanı tabloları başarıyla oluşturuldu!")
