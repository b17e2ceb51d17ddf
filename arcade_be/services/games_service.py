"""
Games Catalog Service
Loads the game catalog from JSON, caches it in memory, and serves search + pagination
"""

import json
import logging
import os
import threading
import time

from ..schemas import GameSchema
from ..utils.validators import validate_positive_int

logger = logging.getLogger(__name__)

DEFAULT_GAMES_FILE_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'data', 'game-data.json'))
DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 10
DEFAULT_CACHE_TTL = 300  # seconds


class GamesService:
    """Read-only catalog with a time-bounded in-memory cache"""

    def __init__(self, games_file_path=DEFAULT_GAMES_FILE_PATH, cache_ttl=DEFAULT_CACHE_TTL, clock=time.monotonic):
        self.games_file_path = games_file_path
        self.cache_ttl = cache_ttl
        self._clock = clock
        self._cached_games = None
        self._loaded_at = None
        self._lock = threading.Lock()

    def init_app(self, app):
        self.games_file_path = app.config.get('GAMES_FILE_PATH', self.games_file_path)
        self.cache_ttl = app.config.get('CATALOG_CACHE_TTL', self.cache_ttl)
        self.invalidate()
        app.extensions['games_catalog'] = self

    def load_games(self):
        """
        Reads the catalog file. A missing or malformed file is logged and yields an empty catalog
        so the search endpoint keeps answering.
        """
        try:
            with open(self.games_file_path, 'r', encoding='utf-8') as f:
                games = json.load(f)
        except FileNotFoundError:
            logger.error(f"Game catalog file not found at {self.games_file_path}")
            return []
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load or parse game catalog from {self.games_file_path}: {e}")
            return []

        if not isinstance(games, list):
            logger.error(f"Game catalog at {self.games_file_path} is not a list; ignoring it")
            return []
        return [game for game in games if isinstance(game, dict)]

    def get_all(self):
        with self._lock:
            now = self._clock()
            expired = self._loaded_at is None or (now - self._loaded_at) >= self.cache_ttl
            if self._cached_games is None or expired:
                self._cached_games = self.load_games()
                self._loaded_at = now
                logger.info(f"Game catalog cache refreshed: {len(self._cached_games)} games")
            return self._cached_games

    def invalidate(self):
        with self._lock:
            self._cached_games = None
            self._loaded_at = None

    def get_games(self, search='', page=DEFAULT_PAGE, limit=DEFAULT_PAGE_LIMIT):
        """
        Filters the catalog by a case-insensitive title substring and returns one page.

        Raises:
            InvalidArgumentException: If page or limit is not a positive integer.

        Returns:
            dict: ``total`` (size of the filtered set), ``page``, ``limit`` and
            ``paginated_games`` serialized through GameSchema.
        """
        validate_positive_int(page, 'page')
        validate_positive_int(limit, 'limit')
        query = (search or '').lower().strip()
        games = self.get_all()

        if query:
            filtered_games = [
                game for game in games
                if isinstance(game.get('title'), str) and query in game['title'].lower()
            ]
        else:
            filtered_games = games

        start_index = (page - 1) * limit
        end_index = page * limit
        paginated_games = filtered_games[start_index:end_index]

        logger.info(f"Catalog search '{query}' page {page} limit {limit}: {len(filtered_games)} matches")
        return {
            'total': len(filtered_games),
            'page': page,
            'limit': limit,
            'paginated_games': GameSchema(many=True).dump(paginated_games),
        }
