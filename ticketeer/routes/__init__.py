from ticketeer.routes.admin import admin_bp
from ticketeer.routes.orders import orders_bp


def register_blueprints(app):
    app.register_blueprint(orders_bp)
    app.register_blueprint(admin_bp)


__all__ = ["admin_bp", "orders_bp", "register_blueprints"]
