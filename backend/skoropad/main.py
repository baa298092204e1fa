from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqladmin import Admin
import logging
import os

from skoropad.core import config

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

from skoropad.api.v1.routers import api_router
from skoropad.db.database import engine, init_db, load_models
from skoropad.db.database_redis import RedisManager
from skoropad.admin_auth import authentication_backend
from skoropad.admin_panel import ADMIN_VIEWS

logger = logging.getLogger(__name__)

load_models()

app = FastAPI(title="Skoropad API")

# CORS: the web client is served from a different origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
async def on_startup():
    """
    Creates missing tables (and demo data when SEED_DEMO_DATA is set).
    """
    await init_db()
    logger.info("Skoropad API started (redis notifications: %s)", RedisManager.is_enabled())

app.include_router(api_router)

# uploaded listing images
os.makedirs(config.UPLOAD_DIR, exist_ok=True)
app.mount(config.UPLOAD_URL_PREFIX, StaticFiles(directory=config.UPLOAD_DIR), name="uploads")

# read-only back-office for moderators and admins
admin = Admin(app, engine, authentication_backend=authentication_backend, title="Skoropad Admin")
for view in ADMIN_VIEWS:
    admin.add_view(view)

@app.get("/")
async def root():
    return {"message": "Welcome to Skoropad API"}

@app.on_event("shutdown")
async def on_shutdown():
    await RedisManager.close()
