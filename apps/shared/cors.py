"""Centralised CORS configuration for the portfolio API."""

import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


# Production origins (always allowed)
PRODUCTION_ORIGINS = [
    "https://portfolio-sohail-gidwanis-projects.vercel.app",
]

# Development origins (only outside production)
DEV_ORIGINS = [
    "http://localhost:3000",
    "https://localhost:3000",
    "http://localhost:5173",
]


def get_allowed_origins() -> list[str]:
    """Build the list of allowed CORS origins for the current environment."""
    origins = list(PRODUCTION_ORIGINS)

    # FRONTEND_URL may hold a comma separated list (preview deployments etc.)
    frontend_urls = os.getenv("FRONTEND_URL", "")
    for url in frontend_urls.split(","):
        clean_url = url.strip().rstrip("/")
        if clean_url and clean_url not in origins:
            origins.append(clean_url)

    if os.getenv("ENVIRONMENT", "development") != "production":
        origins.extend(DEV_ORIGINS)

    return origins


def setup_cors(app: FastAPI) -> None:
    """Add the CORS middleware to a FastAPI app."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
