from .config import Config, cache_ttl, db_config, redis_config

SECRET_KEY = "test-secret"

DB_CONFIG = db_config()
# Tests never need a live Redis; the in-memory client stands in.
REDIS_CONFIG = redis_config(enabled=False)
CACHE_TTL = cache_ttl()

PUNCH_ROW_LIMIT = Config.PUNCH_ROW_LIMIT

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
LOG_JSON = False

AUTO_INIT_DB = False
