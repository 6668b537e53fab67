import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError
from .schemas import Config

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    # Namespace every action targets unless --namespace is given
    namespace: str = "default"

    # Chain type for the node: "local" or "testnet"
    chain: str = "local"

    # Optional YAML file overriding the default service configuration
    config_path: str = ""

    # Kubeconfig context to use outside the cluster (empty = current context)
    kube_context: str = ""

    # Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="SFCTL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


@lru_cache()
def get_settings():
    return Settings()


def load_config(path: Optional[str] = None) -> Config:
    """
    Resolve the service configuration tree.

    Without a path every section takes its defaults. With a path, the YAML
    file is merged over the defaults section by section: a section missing
    from the file keeps its defaults, a section set to null becomes absent
    (any action targeting it then fails), and a section given as a mapping is
    validated with defaults filling the keys it omits.

    Args:
        path: Optional path to a YAML override file

    Returns:
        Fully resolved Config

    Raises:
        ConfigurationError: If the file cannot be read or fails validation
    """
    if not path:
        return Config.default()

    try:
        with Path(path).open("r", encoding="utf-8") as fh:
            overrides = yaml.safe_load(fh) or {}
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse config file {path}: {e}") from e

    if not isinstance(overrides, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping of sections")

    data = {section: {} for section in Config.model_fields}
    data.update(overrides)

    try:
        config = Config.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Failed to load config from {path}: {e}") from e

    absent = [name for name in Config.model_fields if getattr(config, name) is None]
    logger.info(f"[CONFIG] Loaded {path} (absent sections: {', '.join(absent) or 'none'})")
    return config
