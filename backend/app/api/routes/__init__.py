from app.api.routes import auth, calendar, call_logs, clients, messages, properties, saved_searches, search

__all__ = [
    "auth",
    "search",
    "saved_searches",
    "properties",
    "clients",
    "call_logs",
    "calendar",
    "messages",
]
