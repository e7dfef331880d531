"""
Configuration loading for dyngraph deployments.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from ..core.defs import SYSTEM_PREFIX


@dataclass
class DynGraphConfig:
    """Main dyngraph configuration."""
    system_prefix: str = SYSTEM_PREFIX
    schema_path: Optional[str] = None
    schema_url: Optional[str] = None
    data_service_url: str = "http://localhost:8055"
    database_url: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"])
    request_timeout: float = 30.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DynGraphConfig":
        """Create config from dictionary."""
        defaults = cls()
        return cls(
            system_prefix=data.get("system_prefix", defaults.system_prefix),
            schema_path=data.get("schema_path"),
            schema_url=data.get("schema_url"),
            data_service_url=data.get("data_service_url", defaults.data_service_url),
            database_url=data.get("database_url") or os.getenv("DATABASE_URL"),
            host=data.get("host", defaults.host),
            port=int(data.get("port", defaults.port)),
            cors_origins=list(data.get("cors_origins", defaults.cors_origins)),
            request_timeout=float(data.get("request_timeout", defaults.request_timeout)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for YAML serialization."""
        return {
            "system_prefix": self.system_prefix,
            "schema_path": self.schema_path,
            "schema_url": self.schema_url,
            "data_service_url": self.data_service_url,
            "database_url": self.database_url,
            "host": self.host,
            "port": self.port,
            "cors_origins": self.cors_origins,
            "request_timeout": self.request_timeout,
        }

    def save(self, path: Path | str = "dyngraph.yaml") -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        content = yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)
        path.write_text(content)


def load_config(path: Path | str = "dyngraph.yaml") -> DynGraphConfig | None:
    """Load configuration from YAML file."""
    path = Path(path)
    if not path.exists():
        return None

    data = yaml.safe_load(path.read_text()) or {}
    return DynGraphConfig.from_dict(data)
