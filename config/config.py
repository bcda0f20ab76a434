import os


def _flag(name: str, default: str) -> bool:
    return bool(int(os.environ.get(name, default)))


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key"

    # Punch store (MySQL)
    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "attendance_audit")

    # Report cache (Redis)
    REDIS_ENABLED = _flag("REDIS_ENABLED", "1")
    REDIS_HOST = os.environ.get("REDIS_HOST", "127.0.0.1")
    REDIS_PORT = int(os.environ.get("REDIS_PORT", "6379"))
    REDIS_PASSWORD = os.environ.get("REDIS_PASSWORD", "")
    REDIS_DB = int(os.environ.get("REDIS_DB", "0"))
    CACHE_TIMEOUT_SECONDS = float(os.environ.get("CACHE_TIMEOUT_SECONDS", "2"))

    CACHE_TTL_INDIVIDUAL = int(os.environ.get("CACHE_TTL_INDIVIDUAL", "300"))
    CACHE_TTL_GROUP_SMALL = int(os.environ.get("CACHE_TTL_GROUP_SMALL", "600"))
    CACHE_TTL_GROUP_MEDIUM = int(os.environ.get("CACHE_TTL_GROUP_MEDIUM", "900"))
    CACHE_TTL_GROUP_LARGE = int(os.environ.get("CACHE_TTL_GROUP_LARGE", "1200"))
    CACHE_TTL_MANAGEMENT = int(os.environ.get("CACHE_TTL_MANAGEMENT", "600"))

    PUNCH_ROW_LIMIT = int(os.environ.get("PUNCH_ROW_LIMIT", "50000"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_JSON = _flag("LOG_JSON", "0")

    AUTO_INIT_DB = _flag("AUTO_INIT_DB", "0")


def db_config(cfg=Config) -> dict:
    return {
        "host": cfg.DB_HOST,
        "port": cfg.DB_PORT,
        "user": cfg.DB_USER,
        "password": cfg.DB_PASSWORD,
        "database": cfg.DB_NAME,
    }


def redis_config(cfg=Config, *, enabled=None) -> dict:
    return {
        "enabled": cfg.REDIS_ENABLED if enabled is None else enabled,
        "host": cfg.REDIS_HOST,
        "port": cfg.REDIS_PORT,
        "password": cfg.REDIS_PASSWORD,
        "db": cfg.REDIS_DB,
        "socket_timeout": cfg.CACHE_TIMEOUT_SECONDS,
    }


def cache_ttl(cfg=Config) -> dict:
    return {
        "individual": cfg.CACHE_TTL_INDIVIDUAL,
        "group_small": cfg.CACHE_TTL_GROUP_SMALL,
        "group_medium": cfg.CACHE_TTL_GROUP_MEDIUM,
        "group_large": cfg.CACHE_TTL_GROUP_LARGE,
        "management": cfg.CACHE_TTL_MANAGEMENT,
    }
