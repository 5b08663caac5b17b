"""
Central blueprint registration for the Flask app.
"""
def register_blueprints(app):
    # Import blueprint objects
    from login_logout import login_logout_bp
    from routes.common.health import health_bp
    from marketplace_sync import marketplace_sync_bp  # 🔄 PAZARYERİ SENKRONİZASYONU

    # Register all blueprints
    for bp in [
        login_logout_bp,
        health_bp,
        marketplace_sync_bp,
    ]:
        app.register_blueprint(bp)
