"""Runtime settings, read from command line flags and the environment."""

import os
from dataclasses import dataclass

from releaser.cache import DEFAULT_CACHE_ROOT
from releaser.errors import ConfigError

DEFAULT_CLONE_URL = "https://github.com/{org}/{repo}"


@dataclass(frozen=True)
class Settings:
    token: str
    org: str | None = None
    cache_dir: str = DEFAULT_CACHE_ROOT
    # Format string with {org} and {repo}
    clone_url: str = DEFAULT_CLONE_URL


def env_default(name: str, fallback: str | None = None) -> str | None:
    return os.environ.get(name) or fallback


def load_settings(
    token: str | None,
    org: str | None,
    cache_dir: str | None = None,
    clone_url: str | None = None,
) -> Settings:
    """Build Settings, failing when no GitHub token is configured."""
    if not token:
        raise ConfigError("Github auth not configured (use --token or GITHUB_TOKEN)")
    return Settings(
        token=token,
        org=org or None,
        cache_dir=cache_dir or DEFAULT_CACHE_ROOT,
        clone_url=clone_url or DEFAULT_CLONE_URL,
    )
