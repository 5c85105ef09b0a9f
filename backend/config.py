import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    # API Keys
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")

    # Model Settings
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    QUIZ_LANGUAGE: str = os.getenv("QUIZ_LANGUAGE", "Bahasa Indonesia")

    # Upstream learning platform
    DICODING_BASE_URL: str = os.getenv(
        "DICODING_BASE_URL",
        "https://learncheck-dicoding-mock-666748076441.europe-west1.run.app/api"
    )
    REQUEST_TIMEOUT: float = float(os.getenv("REQUEST_TIMEOUT", "10"))

    # Key-value store Settings
    STORE_BACKEND: str = os.getenv("STORE_BACKEND", "redis")  # redis | mongodb | memory
    REDIS_URL: str = os.getenv("REDIS_URL", "")
    MONGODB_URI: str = os.getenv("MONGODB_URI", "")
    DATABASE_NAME: str = os.getenv("DATABASE_NAME", "learncheck")
    CACHE_COLLECTION: str = os.getenv("CACHE_COLLECTION", "kv_store")

    # Cache and rate limit policy
    CACHE_NAMESPACE: str = os.getenv("CACHE_NAMESPACE", "learncheck")
    QUIZ_CACHE_TTL: int = 86400  # 24 hours
    RATE_LIMIT_WINDOW: int = 60
    RATE_LIMIT_MAX_REQUESTS: int = 5

    # Server Settings
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3001"))

    @classmethod
    def validate_config(cls):
        if not cls.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY is required")
        if cls.STORE_BACKEND not in ("redis", "mongodb", "memory"):
            raise ValueError(f"Unknown STORE_BACKEND: {cls.STORE_BACKEND}")
        if cls.STORE_BACKEND == "redis" and not cls.REDIS_URL:
            raise ValueError("REDIS_URL is required when STORE_BACKEND=redis")
        if cls.STORE_BACKEND == "mongodb" and not cls.MONGODB_URI:
            raise ValueError("MONGODB_URI is required when STORE_BACKEND=mongodb")
