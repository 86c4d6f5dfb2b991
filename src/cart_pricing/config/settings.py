"""
Centralized settings and path configuration for cart pricing.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional


ENV_PREFIX = "CART_PRICING_"


def get_project_root() -> Path:
    """Get the project root directory (where pyproject.toml lives)."""
    # Walk up from this file to find the project root
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'pyproject.toml').exists():
            return parent
    # Fallback to 3 levels up from this file
    return Path(__file__).resolve().parent.parent.parent.parent


def get_default_data_dir() -> Path:
    """The data directory shipped inside the package."""
    return Path(__file__).resolve().parent.parent / 'data'


@dataclass
class Settings:
    """Application settings with sensible defaults."""

    # Project paths
    project_root: Path
    data_dir: Path

    # Input files
    catalog_csv: Path
    sales_csv: Path

    # HTTP server
    api_host: str = "0.0.0.0"
    api_port: int = 3000

    log_level: str = "INFO"

    @classmethod
    def load(cls, project_root: Optional[Path] = None, data_dir: Optional[Path] = None) -> 'Settings':
        """Load settings from the project structure and CART_PRICING_* variables."""
        root = project_root or get_project_root()

        env_data_dir = os.environ.get(f"{ENV_PREFIX}DATA_DIR")
        if data_dir is None:
            data_dir = Path(env_data_dir) if env_data_dir else get_default_data_dir()

        return cls(
            project_root=root,
            data_dir=data_dir,
            catalog_csv=data_dir / 'catalog.csv',
            sales_csv=data_dir / 'sales.csv',
            api_host=os.environ.get(f"{ENV_PREFIX}HOST", "0.0.0.0"),
            api_port=int(os.environ.get(f"{ENV_PREFIX}PORT", "3000")),
            log_level=os.environ.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper(),
        )


# Default settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reset_settings():
    """Forget the cached settings so the next get_settings() reloads them."""
    global _settings
    _settings = None
