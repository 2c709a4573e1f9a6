from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "SiteHub API"
    ENV: str = "development"

    # -------------------------------------------------
    # Frontend Domains
    # -------------------------------------------------
    FRONTEND_DOMAIN: Optional[str] = Field(None, env="FRONTEND_DOMAIN")

    FRONTEND_DOMAINS: List[str] = [
        "http://localhost:3000",
    ]

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Primary DB & Auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = Field(None, env="SUPABASE_URL")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(None, env="SUPABASE_SERVICE_ROLE_KEY")

    # -------------------------------------------------
    # S3 Blob Storage
    # -------------------------------------------------
    AWS_ACCESS_KEY_ID: Optional[str] = Field(None, env="AWS_ACCESS_KEY_ID")
    AWS_SECRET_ACCESS_KEY: Optional[str] = Field(None, env="AWS_SECRET_ACCESS_KEY")
    AWS_BUCKET_NAME: Optional[str] = Field(None, env="AWS_BUCKET_NAME")
    AWS_REGION: str = Field("eu-central-1", env="AWS_REGION")

    # Cache-Control max-age on streamed photos/videos/models
    FILE_CACHE_SECONDS: int = Field(3600, env="FILE_CACHE_SECONDS")

    # Avatar / cover uploads
    PORTFOLIO_IMAGE_MAX_BYTES: int = Field(10 * 1024 * 1024, env="PORTFOLIO_IMAGE_MAX_BYTES")

    # -------------------------------------------------
    # BIM / IFC parameter tree transform (external service)
    # -------------------------------------------------
    BIM_TREE_SERVICE_URL: Optional[str] = Field(None, env="BIM_TREE_SERVICE_URL")
    BIM_TREE_TIMEOUT_SECONDS: int = Field(120, env="BIM_TREE_TIMEOUT_SECONDS")

    # -------------------------------------------------
    # Commerce platform (paid downloads)
    # -------------------------------------------------
    COMMERCE_SHOP_DOMAIN: Optional[str] = Field(None, env="COMMERCE_SHOP_DOMAIN")
    DOWNLOAD_CURRENCY: str = Field("RUB", env="DOWNLOAD_CURRENCY")

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
cors_origins = []

# 1) add the deployed frontend domain
if settings.FRONTEND_DOMAIN:
    domain = settings.FRONTEND_DOMAIN
    if not domain.startswith("http"):
        domain = f"https://{domain}"
    cors_origins.append(domain.rstrip("/"))

# 2) add static frontend domains
cors_origins.extend([d.rstrip("/") for d in settings.FRONTEND_DOMAINS])

# 3) remove duplicates
settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))


def is_commerce_configured() -> bool:
    return bool(settings.COMMERCE_SHOP_DOMAIN)
