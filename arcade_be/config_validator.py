"""
Configuration validation and startup checks.

This module implements fail-fast validation so that a misconfigured
deployment refuses to start instead of running with unsafe or nonsensical
settings (e.g. a non-numeric starting balance or an unbounded simulation size).
"""

import os
import sys
import warnings
from typing import List, Optional


class ConfigValidationError(Exception):
    """Raised when critical configuration is missing or invalid."""
    pass


TRUTHY = ('true', '1', 't')


class ConfigValidator:
    """Validates application configuration and enforces production rules."""

    def __init__(self, is_production: bool = None):
        """
        Initialize the configuration validator.

        Args:
            is_production: If None, production is assumed only when FLASK_ENV=production
        """
        if is_production is None:
            is_production = os.getenv('FLASK_ENV', '').lower() == 'production'

        self.is_production = is_production
        self.is_testing = os.getenv('TESTING', 'False').lower() in TRUTHY
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate_positive_int_env_var(self, var_name: str, default: int) -> int:
        """
        Read an integer environment variable that must be strictly positive.

        Args:
            var_name: Name of the environment variable
            default: Value used when the variable is unset

        Returns:
            The parsed value, or the default when unset

        Raises:
            ConfigValidationError: If the value is not an integer or not positive
        """
        raw_value = os.getenv(var_name)
        if raw_value is None or raw_value.strip() == '':
            return default
        try:
            value = int(raw_value)
        except ValueError:
            raise ConfigValidationError(f"{var_name} must be an integer, got '{raw_value}'")
        if value <= 0:
            raise ConfigValidationError(f"{var_name} must be a positive integer, got {value}")
        return value

    def validate_game_config(self) -> dict:
        """Validate slot machine and simulation limits."""
        config = {
            'INITIAL_BALANCE': self.validate_positive_int_env_var('INITIAL_BALANCE', 20),
            'MAX_BATCH_SPINS': self.validate_positive_int_env_var('MAX_BATCH_SPINS', 10_000),
            'MAX_SIMULATION_SPINS': self.validate_positive_int_env_var('MAX_SIMULATION_SPINS', 10_000_000),
        }
        if config['MAX_SIMULATION_SPINS'] > 50_000_000:
            self.warnings.append(
                f"MAX_SIMULATION_SPINS={config['MAX_SIMULATION_SPINS']} allows Monte Carlo requests "
                "that can hold a worker for minutes."
            )
        return config

    def validate_catalog_config(self) -> dict:
        """Validate game catalog file location, cache TTL and pagination defaults."""
        games_file_path: Optional[str] = os.getenv('GAMES_FILE_PATH')
        if games_file_path and not os.path.isfile(games_file_path):
            message = f"GAMES_FILE_PATH '{games_file_path}' does not point to a file"
            if self.is_production:
                self.errors.append(f"CRITICAL: {message}")
            else:
                self.warnings.append(f"WARNING: {message}")

        return {
            'GAMES_FILE_PATH': games_file_path,
            'CATALOG_CACHE_TTL': self.validate_positive_int_env_var('CATALOG_CACHE_TTL', 300),
            'DEFAULT_PAGE': 1,
            'DEFAULT_PAGE_LIMIT': self.validate_positive_int_env_var('DEFAULT_PAGE_LIMIT', 10),
        }

    def validate_rate_limiting_config(self) -> str:
        """Validate rate limiting configuration."""
        rate_limit_uri = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')

        if rate_limit_uri == 'memory://' and self.is_production:
            self.errors.append(
                "CRITICAL: Rate limiting uses memory:// storage in production. "
                "This is not suitable for multi-process deployments. "
                "Set RATELIMIT_STORAGE_URI to a Redis URL (e.g., redis://localhost:6379/0)"
            )

        return rate_limit_uri

    def validate_cors_config(self) -> List[str]:
        """Validate CORS configuration."""
        cors_origins = os.getenv('CORS_ORIGINS', '')

        if not cors_origins and self.is_production:
            self.errors.append(
                "CRITICAL: CORS_ORIGINS must be set in production to specify allowed frontend domains"
            )
            return []

        if cors_origins:
            origins = [origin.strip() for origin in cors_origins.split(',') if origin.strip()]
            for origin in origins:
                if origin != '*' and not origin.startswith(('http://', 'https://')):
                    self.warnings.append(f"CORS origin '{origin}' should include protocol (http:// or https://)")
            return origins

        return []

    def validate_all(self) -> dict:
        """
        Validate all configuration settings.

        Returns:
            Dictionary containing validated configuration values

        Raises:
            ConfigValidationError: If configuration is invalid, or incomplete in production
        """
        config = {}

        try:
            config.update(self.validate_game_config())
            config.update(self.validate_catalog_config())
            config['RATELIMIT_STORAGE_URI'] = self.validate_rate_limiting_config()
            config['CORS_ORIGINS'] = self.validate_cors_config()

            config['DEBUG'] = os.getenv('FLASK_DEBUG', 'False').lower() in TRUTHY
            config['SPIN_RATE_LIMIT'] = os.getenv('SPIN_RATE_LIMIT', '60 per minute')
            config['SIMULATION_RATE_LIMIT'] = os.getenv('SIMULATION_RATE_LIMIT', '10 per minute')

            if self.is_production and config['DEBUG']:
                self.errors.append("CRITICAL: DEBUG mode must be disabled in production (set FLASK_DEBUG=False)")

            if self.errors:
                error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {error}" for error in self.errors)
                if self.warnings:
                    error_msg += "\n\nWarnings:\n" + "\n".join(f"  - {warning}" for warning in self.warnings)
                raise ConfigValidationError(error_msg)

            for warning in self.warnings:
                warnings.warn(warning, UserWarning)

            return config

        except ConfigValidationError:
            raise
        except Exception as e:
            raise ConfigValidationError(f"Configuration validation error: {str(e)}") from e


def validate_production_config() -> dict:
    """
    Validate configuration with fail-fast behavior.

    Returns:
        Dictionary of validated configuration values

    Raises:
        SystemExit: If validation fails; the process must not start misconfigured
    """
    try:
        validator = ConfigValidator()
        return validator.validate_all()
    except ConfigValidationError as e:
        print("\nCONFIGURATION VALIDATION FAILED\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        print("\nHow to fix:", file=sys.stderr)
        print("1. Set the environment variables listed above (or add them to .env)", file=sys.stderr)
        print("2. Numeric settings must be positive integers", file=sys.stderr)
        print("\nApplication startup ABORTED\n", file=sys.stderr)

        sys.exit(1)
