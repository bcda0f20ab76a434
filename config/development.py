from .config import Config, cache_ttl, db_config, redis_config

SECRET_KEY = Config.SECRET_KEY

DB_CONFIG = db_config()
REDIS_CONFIG = redis_config()
CACHE_TTL = cache_ttl()

PUNCH_ROW_LIMIT = Config.PUNCH_ROW_LIMIT

DEBUG = True
LOG_LEVEL = "DEBUG"
LOG_JSON = Config.LOG_JSON

# If enabled, app will apply database/schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = Config.AUTO_INIT_DB
