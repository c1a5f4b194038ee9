from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field, validator
from dotenv import load_dotenv
import logging

load_dotenv()
logger = logging.getLogger(__name__)

class Settings(BaseSettings):
    # Cache namespace and lifetime
    CACHE_PREFIX: str = Field(default="api_cache_", min_length=1, description="Reserved key prefix for cache entries")
    CACHE_DEFAULT_TTL_MS: int = Field(default=5 * 60 * 1000, ge=1, description="TTL used when a write gives none")

    # Persistence backend
    CACHE_BACKEND: str = Field(default="memory", description="memory or redis")
    REDIS_URL: Optional[str] = Field(default=None, description="Redis connection URL for the redis backend")
    CACHE_MEMORY_QUOTA: int = Field(default=5 * 1024 * 1024, ge=1, description="Memory backend quota in characters")

    # Maintenance
    CACHE_SWEEP_INTERVAL_MINUTES: int = Field(default=0, ge=0, description="0 disables scheduled sweeps")

    # Environment
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    @validator('CACHE_BACKEND')
    def validate_backend(cls, v):
        if v not in ("memory", "redis"):
            raise ValueError('CACHE_BACKEND must be "memory" or "redis"')
        return v

    @validator('REDIS_URL')
    def validate_redis_url(cls, v):
        if v is not None and not v.startswith(('redis://', 'rediss://')):
            raise ValueError('REDIS_URL must be a valid Redis connection string')
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

try:
    settings = Settings()
    logger.info("Configuration loaded successfully")
except Exception as e:
    logger.critical(f"Failed to load configuration: {str(e)}")
    raise
