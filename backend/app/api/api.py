from fastapi import APIRouter

from app.api.routes import auth, calendar, call_logs, clients, messages, properties, saved_searches, search

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(search.router)
api_router.include_router(saved_searches.router)
api_router.include_router(properties.router)
api_router.include_router(clients.router)
api_router.include_router(call_logs.router)
api_router.include_router(calendar.router)
api_router.include_router(messages.router)
