import os
import threading


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ["true", "1", "yes", "on"]


class BackendSettings:
    _instance = None
    _lock = threading.Lock()

    def __init__(self):
        self.DEBUG_MODE = os.environ.get("DEBUG_MODE", "development")

        # Security: Force disable debug info in API responses (overrides DEBUG_MODE)
        self.DISABLE_API_DEBUG_INFO = _env_flag("DISABLE_API_DEBUG_INFO", "false")

        # Token settings
        self.JWT_SECRET = os.environ.get("JWT_SECRET", "change-me-in-production")
        self.JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
        self.ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))

        # Comma separated list, "*" allows every origin
        self.CORS_ORIGINS = [
            origin.strip()
            for origin in os.environ.get("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]

        # Realtime channel
        self.WS_SEND_TIMEOUT = float(os.environ.get("WS_SEND_TIMEOUT", "5.0"))

        # Projects
        self.PROJECT_DEFAULT_MAX_MEMBERS = int(os.environ.get("PROJECT_DEFAULT_MAX_MEMBERS", "5"))

        # Error registry override (defaults to the yaml shipped with the package)
        self.ERROR_REGISTRY_PATH = os.environ.get("ERROR_REGISTRY_PATH", None)

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(BackendSettings, cls).__new__(cls)
        return cls._instance

    @property
    def include_debug_info(self) -> bool:
        return (
            self.DEBUG_MODE in ("dev", "development", "local")
            and not self.DISABLE_API_DEBUG_INFO
        )


settings = BackendSettings()
