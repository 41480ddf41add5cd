"""
Portfolio API gateway

Serves the blog and image routers from a single app. Each service can also
be run on its own (apps.blog.main:app, apps.images.main:app).

    uvicorn app.main:app --host 0.0.0.0 --port 8000
"""
import logging
import os

from fastapi import FastAPI

from apps.shared.cors import setup_cors
from apps.shared.database import check_db_connection
from apps.shared.errors import setup_error_handlers
from apps.shared.headers import setup_response_headers
from apps.blog.main import router as blog_router
from apps.images.main import router as images_router

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Portfolio API",
    version="1.0.0",
    description="Blog posts and image uploads for the portfolio site",
)

setup_cors(app)
setup_response_headers(app)
setup_error_handlers(app)

app.include_router(blog_router)
app.include_router(images_router)


@app.get("/health")
def health():
    db_connected = check_db_connection()
    return {
        "status": "ok" if db_connected else "degraded",
        "services": ["blog", "images"],
        "database": "connected" if db_connected else "disconnected",
    }
