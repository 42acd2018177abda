#backend/app/api/api.py
from fastapi import APIRouter
from app.api.v1.endpoints import users, products, favorites, conversations, messages, notifications, admin

api_router = APIRouter()

# Incluir routers para diferentes recursos
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(favorites.router, prefix="/favorites", tags=["favorites"])
api_router.include_router(conversations.router, prefix="/conversations", tags=["conversations"])
api_router.include_router(messages.router, prefix="/messages", tags=["messages"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
