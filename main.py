import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from menu_admin.config import settings
import menu_admin.db.models  # noqa: F401  (registers all models on Base.metadata)
from menu_admin.health import router as health_router
from menu_admin.menu_imports.routes import router as menu_imports_router
from menu_admin.images.routes import router as images_router
from menu_admin.storage.service import get_storage_service
from menu_admin.error_handler import exception_handler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

# Set log level for application modules to INFO
logging.getLogger('menu_admin').setLevel(logging.INFO)

# Keep external libraries at WARNING to reduce noise
logging.getLogger('uvicorn').setLevel(logging.WARNING)
logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
logging.getLogger('httpx').setLevel(logging.WARNING)
logging.getLogger('openai').setLevel(logging.WARNING)

app = FastAPI(
    title="Menu Admin API",
    version="1.0.0",
    docs_url="/docs" if settings.ENV == "development" else None,
)

# CORS Configuration
if settings.ENV == "development":
    origins = ["http://localhost:3000", "http://localhost:5173"]  # Admin panel dev server
else:
    origins = [settings.WEB_APP_URL]  # Production domain

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

exception_handler(app)

app.include_router(health_router, tags=["health"])
app.include_router(menu_imports_router, prefix="/api/menu-imports", tags=["menu-imports"])
app.include_router(images_router, prefix="/api/images", tags=["images"])

# Images published without Supabase are served from local disk
storage_service = get_storage_service()
if not storage_service.use_supabase:
    app.mount(
        "/uploads",
        StaticFiles(directory=storage_service.local_storage_path, check_dir=False),
        name="uploads",
    )
