"""
Application configuration with fail-fast validation.

All values are validated once at import time by config_validator.
"""
from .config_validator import validate_production_config
from .services.games_service import DEFAULT_GAMES_FILE_PATH

class Config:
    """Configuration built from validated environment variables."""

    _validated_config = validate_production_config()

    # Flask Debug Mode
    DEBUG = _validated_config['DEBUG']

    # Slot machine
    INITIAL_BALANCE = _validated_config['INITIAL_BALANCE']
    MAX_BATCH_SPINS = _validated_config['MAX_BATCH_SPINS']
    MAX_SIMULATION_SPINS = _validated_config['MAX_SIMULATION_SPINS']

    # Game catalog
    GAMES_FILE_PATH = _validated_config['GAMES_FILE_PATH'] or DEFAULT_GAMES_FILE_PATH
    CATALOG_CACHE_TTL = _validated_config['CATALOG_CACHE_TTL']
    DEFAULT_PAGE = _validated_config['DEFAULT_PAGE']
    DEFAULT_PAGE_LIMIT = _validated_config['DEFAULT_PAGE_LIMIT']

    # Rate limiting (Flask-Limiter reads the RATELIMIT_* keys)
    RATELIMIT_STORAGE_URI = _validated_config['RATELIMIT_STORAGE_URI']
    RATELIMIT_ENABLED = True
    RATELIMIT_DEFAULT = "200 per day;50 per hour"
    RATELIMIT_HEADERS_ENABLED = True
    SPIN_RATE_LIMIT = _validated_config['SPIN_RATE_LIMIT']
    SIMULATION_RATE_LIMIT = _validated_config['SIMULATION_RATE_LIMIT']

    # CORS
    CORS_ORIGINS_LIST = _validated_config['CORS_ORIGINS']


class TestingConfig(Config):
    TESTING = True
    DEBUG = False
    # Disable rate limiting for tests
    RATELIMIT_ENABLED = False
    INITIAL_BALANCE = 20
    GAMES_FILE_PATH = DEFAULT_GAMES_FILE_PATH
    CATALOG_CACHE_TTL = 300
    DEFAULT_PAGE_LIMIT = 10
    MAX_BATCH_SPINS = 10_000
    MAX_SIMULATION_SPINS = 1_000_000
