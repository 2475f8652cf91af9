"""
Import Configuration

Handles configuration loading and logging setup.
"""

import logging
import logging.config
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


CONFIG_ENV_VAR = "RDE_IMPORT_CONFIG"

# Default config locations
DEFAULT_CONFIG_PATHS = [
    Path("config/rde_import.yaml"),
    Path.home() / ".rde" / "config.yaml",
    Path("/etc/rde-import/config.yaml"),
]

DEFAULT_LOG_DIR = "/var/log/rde-import/"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class OracleConfig:
    """Oracle store configuration. The password comes from RDE_DB_PASSWORD."""
    user: str
    dsn: str
    pool_min: int = 2
    pool_max: int = 10
    pool_increment: int = 1


@dataclass
class ImportSettings:
    """Import run settings."""
    concurrency: int = 8
    registry_suffix: str = "ARI"


@dataclass
class ImportConfig:
    """Complete import configuration."""
    oracle: Optional[OracleConfig] = None
    imports: ImportSettings = field(default_factory=ImportSettings)
    logging_config: Optional[str] = "config/logging.yaml"

    @classmethod
    def from_dict(cls, data: dict) -> "ImportConfig":
        """
        Create config from dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            ImportConfig instance

        Raises:
            ValueError: If a section is incomplete or out of range
        """
        oracle = None
        oracle_data = data.get("oracle") or {}
        if oracle_data:
            if not oracle_data.get("user") or not oracle_data.get("dsn"):
                raise ValueError("Oracle user and dsn are required in configuration")
            oracle = OracleConfig(
                user=oracle_data["user"],
                dsn=oracle_data["dsn"],
                pool_min=oracle_data.get("pool_min", 2),
                pool_max=oracle_data.get("pool_max", 10),
                pool_increment=oracle_data.get("pool_increment", 1),
            )

        import_data = data.get("import") or {}
        imports = ImportSettings(
            concurrency=import_data.get("concurrency", 8),
            registry_suffix=import_data.get("registry_suffix", "ARI"),
        )
        if imports.concurrency < 1:
            raise ValueError("import.concurrency must be at least 1")

        return cls(
            oracle=oracle,
            imports=imports,
            logging_config=_expand_path(data.get("logging_config", "config/logging.yaml")),
        )

    @classmethod
    def from_file(cls, path: Path) -> "ImportConfig":
        """Load config from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def find_and_load(cls, path: Optional[Path] = None) -> "ImportConfig":
        """
        Load config from an explicit path, RDE_IMPORT_CONFIG, or default locations.

        Returns:
            ImportConfig instance (defaults if no file is found)
        """
        if path is not None:
            return cls.from_file(Path(path))

        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return cls.from_file(Path(_expand_path(env_path)))

        for candidate in DEFAULT_CONFIG_PATHS:
            if candidate.exists():
                return cls.from_file(candidate)
        return cls()

    def oracle_dict(self) -> Dict[str, Any]:
        """Oracle section in the form create_pool() takes."""
        if self.oracle is None:
            raise ValueError("No oracle section in configuration")
        return asdict(self.oracle)


def _expand_path(path: Optional[str]) -> Optional[str]:
    """Expand environment variables and ~ in path."""
    if path is None:
        return None
    return os.path.expandvars(os.path.expanduser(path))


def setup_logging(config: ImportConfig, level: Optional[int] = None) -> None:
    """
    Configure logging from the YAML file named in config.

    Falls back to basicConfig when no logging file exists. File handlers
    pointing at an unwritable log directory are moved to ./logs/.
    """
    logging_config = Path(config.logging_config) if config.logging_config else None
    if logging_config is not None and logging_config.exists():
        with open(logging_config, "r") as f:
            log_config = yaml.safe_load(f)

        log_dir = Path(DEFAULT_LOG_DIR)
        if not log_dir.exists():
            try:
                log_dir.mkdir(parents=True, exist_ok=True)
            except PermissionError:
                for handler in log_config.get("handlers", {}).values():
                    if "filename" in handler:
                        handler["filename"] = handler["filename"].replace(
                            DEFAULT_LOG_DIR,
                            "./logs/"
                        )
                Path("./logs").mkdir(exist_ok=True)

        logging.config.dictConfig(log_config)
    else:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    if level is not None:
        logging.getLogger("rde").setLevel(level)


def create_sample_config() -> str:
    """
    Generate sample configuration YAML.

    Returns:
        Sample config as YAML string
    """
    return """# RDE Import Configuration
# Copy to config/rde_import.yaml or point RDE_IMPORT_CONFIG at it

oracle:
  user: rde_import
  dsn: localhost:1521/REGISTRY
  pool_min: 2
  pool_max: 10
  pool_increment: 1
  # password is read from RDE_DB_PASSWORD

import:
  concurrency: 8
  registry_suffix: ARI

logging_config: config/logging.yaml
"""
