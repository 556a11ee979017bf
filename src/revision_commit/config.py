"""Configuration loading for the revcommit CLI."""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


DEFAULT_SVN_BINARY = "svn"
DEFAULT_COMMIT_LOCALE = "en_US.UTF-8"
DEFAULT_TIMEOUT_S = 30.0


@dataclass
class Config:
    """Application configuration loaded from environment."""
    
    review_url: str
    api_token: str
    owner_id: str
    svn_binary: str = DEFAULT_SVN_BINARY
    commit_locale: str = DEFAULT_COMMIT_LOCALE
    timeout: float = DEFAULT_TIMEOUT_S


class ConfigError(Exception):
    """Raised when required configuration is missing."""
    pass


def load_config(require_all: bool = True) -> Optional[Config]:
    """
    Load configuration from environment variables.
    
    Args:
        require_all: If True, raises ConfigError if required vars are missing.
                     If False, returns None for missing config.
    
    Returns:
        Config object if all required vars present, None if require_all=False and missing.
    
    Raises:
        ConfigError: If require_all=True and required vars are missing,
                     or if REVCOMMIT_TIMEOUT_S is not a number.
    """
    load_dotenv()
    
    review_url = os.environ.get("REVCOMMIT_REVIEW_URL")
    api_token = os.environ.get("REVCOMMIT_API_TOKEN")
    owner_id = os.environ.get("REVCOMMIT_OWNER_ID")
    
    missing = []
    if not review_url:
        missing.append("REVCOMMIT_REVIEW_URL")
    if not api_token:
        missing.append("REVCOMMIT_API_TOKEN")
    if not owner_id:
        missing.append("REVCOMMIT_OWNER_ID")
    
    if missing:
        if require_all:
            raise ConfigError(
                f"Missing required environment variables: {', '.join(missing)}\n"
                f"Please set them in your environment or create a .env file."
            )
        return None
    
    raw_timeout = os.environ.get("REVCOMMIT_TIMEOUT_S", str(DEFAULT_TIMEOUT_S))
    try:
        timeout = float(raw_timeout)
    except ValueError:
        raise ConfigError(f"REVCOMMIT_TIMEOUT_S must be a number, got: {raw_timeout!r}")
    
    return Config(
        review_url=review_url.rstrip("/"),
        api_token=api_token,
        owner_id=owner_id,
        svn_binary=os.environ.get("REVCOMMIT_SVN") or DEFAULT_SVN_BINARY,
        commit_locale=os.environ.get("REVCOMMIT_LOCALE") or DEFAULT_COMMIT_LOCALE,
        timeout=timeout,
    )
