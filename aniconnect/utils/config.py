"""
Configuration management for the backend API, identity provider and application settings.
"""

import os
from dataclasses import dataclass, field
from typing import Dict

from dotenv import load_dotenv

load_dotenv()


@dataclass
class BackendConfig:
    """Configuration for the AniConnect REST backend."""
    base_url: str
    timeout: float
    image_base_url: str


@dataclass
class CognitoConfig:
    """Configuration for the Amazon Cognito user pool used for sign-in."""
    region: str
    client_id: str
    user_pool_id: str


@dataclass
class CatalogConfig:
    """Configuration for the movie catalog home screen."""
    home_genres: Dict[str, int] = field(default_factory=dict)


@dataclass
class AppConfig:
    """Main application configuration."""
    environment: str
    log_level: str
    backend: BackendConfig
    cognito: CognitoConfig
    catalog: CatalogConfig


def _parse_genres(value: str) -> Dict[str, int]:
    """Parse 'Action:28,Drama:18' into an ordered title -> genre id mapping."""
    genres = {}
    for item in value.split(','):
        if ':' not in item:
            continue
        title, genre_id = item.rsplit(':', 1)
        genres[title.strip()] = int(genre_id)
    return genres


def load_config() -> AppConfig:
    """Load configuration from environment variables with defaults."""
    environment = os.getenv('ENVIRONMENT', 'development')

    # Backend configuration
    backend_config = BackendConfig(base_url=os.getenv('ANICONNECT_API_BASE_URL', 'https://ani-connect-backend.vercel.app/api'),
                                   timeout=float(os.getenv('ANICONNECT_API_TIMEOUT', '30.0')),
                                   image_base_url=os.getenv('ANICONNECT_IMAGE_BASE_URL', 'https://image.tmdb.org/t/p/w500'))

    # Cognito configuration
    cognito_config = CognitoConfig(region=os.getenv('COGNITO_AWS_REGION', 'us-east-1'),
                                   client_id=os.getenv('COGNITO_CLIENT_ID', ''),
                                   user_pool_id=os.getenv('COGNITO_USER_POOL_ID', ''))

    # Catalog configuration
    catalog_config = CatalogConfig(home_genres=_parse_genres(os.getenv('ANICONNECT_HOME_GENRES', 'Action:28,Drama:18')))

    return AppConfig(environment=environment,
                     log_level=os.getenv('LOG_LEVEL', 'INFO'),
                     backend=backend_config,
                     cognito=cognito_config,
                     catalog=catalog_config)


# Global configuration instance
config = load_config()
