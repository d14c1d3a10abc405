import sys

from pydantic_settings import BaseSettings

_ENV_FILE = None if "pytest" in sys.modules else ".env"


class Settings(BaseSettings):
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    EMPLOYEE_API_BASE_URL: str = ""
    EMPLOYEE_API_TIMEOUT: float = 10.0

    CACHE_FILE: str = ".employee_cache.json"
    CACHE_SLOT: str = "employees"

    # Per-operation switch between serving from the cache and failing loudly
    DEGRADE_LIST: bool = True
    DEGRADE_GET: bool = True
    DEGRADE_ADD: bool = True
    DEGRADE_UPDATE: bool = True
    DEGRADE_DELETE: bool = True

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    model_config = {
        "env_file": _ENV_FILE,
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


settings = Settings()
