import os
import logging
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)

@dataclass
class ServerConfig:
    """HTTP gateway configuration"""
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    cors_allow_methods: List[str] = field(default_factory=lambda: [
        "GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"
    ])
    cors_allow_headers: List[str] = field(default_factory=lambda: [
        "Origin", "Content-Length", "Content-Type", "Authorization"
    ])

@dataclass
class SearchConfig:
    """Upstream search provider configuration"""
    search_url: str = "https://html.duckduckgo.com/html/"
    timeout: float = 10.0
    user_agent: Optional[str] = None
    default_num_results: int = 10

@dataclass
class CacheConfig:
    """Configuration of the two in-memory caches"""
    default_ttl: int = 24 * 60 * 60  # 24 hours

@dataclass
class ContentExtractionConfig:
    """Page fetching and text extraction configuration"""
    default_max_content_length: int = 8000
    max_concurrent_fetches: int = 5
    fetch_timeout: float = 10.0
    max_page_bytes: int = 10 * 1024 * 1024  # 10MB

@dataclass
class ResearcherConfig:
    """Top level configuration"""
    log_level: str = "INFO"
    log_file: Optional[str] = None

    server: ServerConfig = field(default_factory=ServerConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    content_extraction: ContentExtractionConfig = field(default_factory=ContentExtractionConfig)

class Settings:
    """Configuration manager backed by environment variables"""

    def __init__(self, environ: Optional[Dict[str, str]] = None):
        self._environ = os.environ if environ is None else environ
        self.config = ResearcherConfig()
        self._load_from_environment()

    def _get_int(self, name: str) -> Optional[int]:
        value = self._environ.get(name)
        if not value:
            return None
        try:
            return int(value)
        except ValueError:
            logger.warning(f"{name} is not a valid integer, keeping the default")
            return None

    def _get_float(self, name: str) -> Optional[float]:
        value = self._environ.get(name)
        if not value:
            return None
        try:
            return float(value)
        except ValueError:
            logger.warning(f"{name} is not a valid number, keeping the default")
            return None

    def _load_from_environment(self):
        """Overlay environment variables on the defaults"""
        env = self._environ

        # Server
        if env.get('RESEARCHER_HOST'):
            self.config.server.host = env['RESEARCHER_HOST']

        port = self._get_int('RESEARCHER_PORT')
        if port is not None:
            self.config.server.port = port

        if env.get('RESEARCHER_DEBUG'):
            self.config.server.debug = env['RESEARCHER_DEBUG'].lower() in ('true', '1', 'yes')

        if env.get('CORS_ALLOW_ORIGINS'):
            origins = [o.strip() for o in env['CORS_ALLOW_ORIGINS'].split(',') if o.strip()]
            if origins:
                self.config.server.cors_allow_origins = origins

        # Search provider
        if env.get('SEARCH_URL'):
            self.config.search.search_url = env['SEARCH_URL']

        timeout = self._get_float('REQUEST_TIMEOUT')
        if timeout is not None:
            self.config.search.timeout = timeout
            self.config.content_extraction.fetch_timeout = timeout

        if env.get('USER_AGENT'):
            self.config.search.user_agent = env['USER_AGENT']

        num_results = self._get_int('DEFAULT_NUM_RESULTS')
        if num_results is not None:
            self.config.search.default_num_results = num_results

        # Cache
        ttl = self._get_int('CACHE_TTL')
        if ttl is not None:
            self.config.cache.default_ttl = ttl

        # Extraction
        max_length = self._get_int('MAX_CONTENT_LENGTH')
        if max_length is not None:
            self.config.content_extraction.default_max_content_length = max_length

        max_fetches = self._get_int('MAX_CONCURRENT_FETCHES')
        if max_fetches is not None:
            self.config.content_extraction.max_concurrent_fetches = max_fetches

        # Logging
        if env.get('LOG_LEVEL'):
            self.config.log_level = env['LOG_LEVEL'].upper()

        if env.get('LOG_FILE'):
            self.config.log_file = env['LOG_FILE']

    def setup_logging(self):
        """Configure logging from the settings"""
        log_level = getattr(logging, self.config.log_level, logging.INFO)

        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

        logging.basicConfig(
            level=log_level,
            format=log_format,
            datefmt="%Y-%m-%d %H:%M:%S"
        )

        if self.config.log_file:
            file_handler = logging.FileHandler(self.config.log_file)
            file_handler.setLevel(log_level)
            file_handler.setFormatter(logging.Formatter(log_format))
            logging.getLogger('researcher').addHandler(file_handler)

        # Keep third party libraries quiet
        external_loggers = {
            'httpx': logging.WARNING,
            'httpcore': logging.WARNING,
            'urllib3': logging.WARNING,
            'bs4': logging.WARNING
        }

        for logger_name, level in external_loggers.items():
            logging.getLogger(logger_name).setLevel(level)

    def validate_config(self) -> bool:
        """Validate the configuration, logging every problem found"""
        errors = []

        if not (1 <= self.config.server.port <= 65535):
            errors.append(f"Invalid port: {self.config.server.port}")

        if not self.config.search.search_url.startswith(('http://', 'https://')):
            errors.append(f"Invalid search URL: {self.config.search.search_url}")

        if self.config.search.timeout <= 0:
            errors.append("timeout must be positive")

        if self.config.cache.default_ttl <= 0:
            errors.append("cache TTL must be positive")

        if self.config.content_extraction.max_concurrent_fetches < 1:
            errors.append("max_concurrent_fetches must be at least 1")

        if self.config.content_extraction.default_max_content_length < 0:
            errors.append("max_content_length cannot be negative")

        if errors:
            for error in errors:
                logger.error(f"Invalid configuration: {error}")
            return False

        return True

    def to_dict(self) -> Dict[str, Any]:
        """Dump the configuration as a dictionary (for debugging)"""
        return {
            'server': {
                'host': self.config.server.host,
                'port': self.config.server.port,
                'debug': self.config.server.debug,
                'cors_allow_origins': self.config.server.cors_allow_origins
            },
            'search': {
                'search_url': self.config.search.search_url,
                'timeout': self.config.search.timeout,
                'default_num_results': self.config.search.default_num_results
            },
            'cache': {
                'default_ttl': self.config.cache.default_ttl
            },
            'content_extraction': {
                'default_max_content_length': self.config.content_extraction.default_max_content_length,
                'max_concurrent_fetches': self.config.content_extraction.max_concurrent_fetches,
                'fetch_timeout': self.config.content_extraction.fetch_timeout
            },
            'log_level': self.config.log_level
        }

# Global instance
settings = Settings()
