import os

from .config import Config, cache_ttl, db_config, redis_config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = db_config()
REDIS_CONFIG = redis_config()
CACHE_TTL = cache_ttl()

PUNCH_ROW_LIMIT = Config.PUNCH_ROW_LIMIT

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL
LOG_JSON = bool(int(os.getenv("LOG_JSON", "1")))

AUTO_INIT_DB = False
