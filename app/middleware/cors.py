"""CORS configuration. Credentials are allowed so the refresh cookie is sent."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import Settings


def configure_cors(app: FastAPI, settings: Settings) -> None:
    origins = settings.cors_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[] if origins == ["*"] else origins,
        # Browsers refuse a literal "*" together with credentials; echo the origin instead
        allow_origin_regex=".*" if origins == ["*"] else None,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
