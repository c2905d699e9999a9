from ticketeer.security.admin import admin_required, current_admin_id

__all__ = ["admin_required", "current_admin_id"]
