"""YAML configuration file for the exporter.

The file only carries the tenant mapping::

    roles:
      blue: arn:aws:iam::111111111111:role/ecs-exporter
      green: arn:aws:iam::222222222222:role/ecs-exporter

Each key is the island label published on the metrics, each value the role
assumed to reach that island. An empty file or a file without ``roles`` means
a single tenant reached with the ambient credentials.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import yaml

from ecs_collectors.errors import ConfigError


@dataclass(frozen=True)
class ExporterConfig:
    roles: Mapping[str, str] = field(default_factory=dict)


def parse_config(data: Optional[Any]) -> ExporterConfig:
    """Validate a decoded YAML document and build an ExporterConfig."""
    if data is None:
        return ExporterConfig()
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping", {"type": type(data).__name__})
    roles = data.get("roles") or {}
    if not isinstance(roles, dict):
        raise ConfigError("'roles' must be a mapping of island -> role", {"type": type(roles).__name__})
    out: Dict[str, str] = {}
    for island, role in roles.items():
        out[str(island)] = "" if role is None else str(role)
    return ExporterConfig(roles=out)


def load_config(path: str) -> ExporterConfig:
    """Read and parse the YAML config at ``path``; an empty path yields defaults."""
    if not path:
        return ExporterConfig()
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"cannot parse config file {path}: {exc}") from exc
    return parse_config(data)
