# backend/skoropad/api/v1/routers.py
from fastapi import APIRouter
from skoropad.api.v1 import auth, users, advertisements, conversations, admin

# Main API router (/v1)
api_router = APIRouter(prefix="/v1")

# 1. Auth
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])

# 2. Profiles
api_router.include_router(users.router)

# 3. Listings
api_router.include_router(advertisements.router)

# 4. Messaging
api_router.include_router(conversations.router)
api_router.include_router(conversations.messages_router)

# 5. Admin panel
api_router.include_router(admin.router)
