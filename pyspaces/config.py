"""Configuration management for pyspaces.

Values are resolved from explicit arguments first, then environment
variables, then the config file at ~/.config/pyspaces/config.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .exceptions import SpacesConfigError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "pyspaces"
CONFIG_FILE = CONFIG_DIR / "config"

# Environment variable names, also used as keys in the config file
ENV_REGION = "SPACES_REGION"
ENV_NAME = "SPACES_NAME"
ENV_KEY = "SPACES_KEY"
ENV_SECRET = "SPACES_SECRET"
ENV_ENDPOINT = "SPACES_ENDPOINT"

DEFAULT_ENDPOINT_TEMPLATE = "https://{region}.digitaloceanspaces.com"


@dataclass
class SpacesCredentials:
    """Connection settings for a single bucket."""

    region: str
    """Region slug, e.g. ``nyc3``"""

    key: str
    """Access key ID"""

    secret: str
    """Secret access key"""

    name: str
    """Bucket name"""

    endpoint: Optional[str] = None
    """Endpoint URL (derived from the region when not set)"""

    @property
    def endpoint_url(self) -> str:
        """Endpoint URL used by the S3 client."""
        if self.endpoint:
            return self.endpoint
        return DEFAULT_ENDPOINT_TEMPLATE.format(region=self.region)

    def __repr__(self) -> str:
        return (
            f"SpacesCredentials(region={self.region!r}, name={self.name!r}, "
            f"endpoint={self.endpoint_url!r})"
        )


class Config:
    """Reads and writes pyspaces settings."""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = config_file or CONFIG_FILE
        self._file_values: Optional[dict[str, str]] = None

    def _load_file(self) -> dict[str, str]:
        """Parse the config file into a dict of KEY=value pairs."""
        if self._file_values is not None:
            return self._file_values

        values: dict[str, str] = {}
        if self.config_file.exists():
            try:
                with open(self.config_file, encoding="utf-8") as f:
                    for line in f:
                        line = line.strip()
                        if not line or line.startswith("#") or "=" not in line:
                            continue
                        name, value = line.split("=", 1)
                        values[name.strip()] = value.strip()
            except OSError as e:
                raise SpacesConfigError(
                    f"Cannot read config file {self.config_file}: {e}"
                ) from e
            logger.debug(f"Loaded {len(values)} value(s) from {self.config_file}")

        self._file_values = values
        return values

    def get(self, name: str) -> Optional[str]:
        """Get a setting from the environment or the config file."""
        value = os.environ.get(name)
        if value:
            return value
        return self._load_file().get(name) or None

    def get_config_path(self) -> Path:
        """Return the config file location."""
        return self.config_file

    def is_configured(self) -> bool:
        """Check whether all required credentials are available."""
        return all(self.get(n) for n in (ENV_REGION, ENV_NAME, ENV_KEY, ENV_SECRET))

    def credentials(
        self,
        region: Optional[str] = None,
        name: Optional[str] = None,
        key: Optional[str] = None,
        secret: Optional[str] = None,
        endpoint: Optional[str] = None,
    ) -> SpacesCredentials:
        """Build credentials, falling back to environment and config file.

        Raises:
            SpacesConfigError: If any required value is missing
        """
        resolved = {
            ENV_REGION: region or self.get(ENV_REGION),
            ENV_NAME: name or self.get(ENV_NAME),
            ENV_KEY: key or self.get(ENV_KEY),
            ENV_SECRET: secret or self.get(ENV_SECRET),
        }
        missing = [n for n, v in resolved.items() if not v]
        if missing:
            raise SpacesConfigError(
                f"Missing configuration: {', '.join(missing)}. "
                "Set the environment variables or run 'pyspaces init'."
            )

        return SpacesCredentials(
            region=resolved[ENV_REGION],  # type: ignore[arg-type]
            name=resolved[ENV_NAME],  # type: ignore[arg-type]
            key=resolved[ENV_KEY],  # type: ignore[arg-type]
            secret=resolved[ENV_SECRET],  # type: ignore[arg-type]
            endpoint=endpoint or self.get(ENV_ENDPOINT),
        )

    def save_credentials(self, credentials: SpacesCredentials) -> None:
        """Write credentials to the config file (readable by owner only)."""
        self.config_file.parent.mkdir(parents=True, exist_ok=True)
        lines = [
            f"{ENV_REGION}={credentials.region}",
            f"{ENV_NAME}={credentials.name}",
            f"{ENV_KEY}={credentials.key}",
            f"{ENV_SECRET}={credentials.secret}",
        ]
        if credentials.endpoint:
            lines.append(f"{ENV_ENDPOINT}={credentials.endpoint}")

        with open(self.config_file, "w", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")
        self.config_file.chmod(0o600)
        self._file_values = None
        logger.debug(f"Saved credentials to {self.config_file}")


config = Config()
