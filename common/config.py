from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, PrivateAttr, ValidationError

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Configuración inválida o ilegible. Fatal en el arranque."""


def _default_env_file() -> str:
    return str(Path.cwd() / ".env")


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    debug: bool
    config_file: str
    log_level: str


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("RUUVI_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    host = os.getenv("RUUVI_HOST", "0.0.0.0")
    port = int(os.getenv("RUUVI_PORT", "7361"))
    debug = _env_flag("RUUVI_DEBUG")
    config_file = os.getenv("RUUVI_CONFIG_FILE", "")
    log_level = os.getenv("RUUVI_LOG_LEVEL", "INFO").upper()

    return Settings(
        host=host,
        port=port,
        debug=debug,
        config_file=config_file,
        log_level=log_level,
    )


class TagOverride(BaseModel):
    # ID del tag; sirve de clave.
    id: str
    # Si no está vacío, se usa en lugar del nombre reportado.
    name: str = ""


class TagConfig(BaseModel):
    """Overrides por tag, leídos del YAML de configuración.

    tags:
      - id: "AA:BB:CC:DD:EE:FF"
        name: "Office"
    """

    tags: List[TagOverride] = Field(default_factory=list)

    _names: Dict[str, str] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context) -> None:
        self._names = {t.id: t.name for t in self.tags if t.name}

    def names(self) -> Dict[str, str]:
        return dict(self._names)

    def lookup(self, sensor_id: str) -> Optional[str]:
        """Capacidad de solo lectura sensor_id -> nombre configurado."""
        return self._names.get(sensor_id)


def load_tag_config(path: Optional[str]) -> TagConfig:
    """Carga el YAML de overrides. Sin ruta devuelve una config vacía.

    Raises:
        ConfigError: si el archivo no se puede leer o no es válido
    """
    if not path:
        return TagConfig()

    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Unable to read {path!r}: {e}") from e

    try:
        data = yaml.safe_load(raw) or {}
        cfg = TagConfig.model_validate(data)
    except (yaml.YAMLError, ValidationError) as e:
        raise ConfigError(f"Unable to parse {path!r}: {e}") from e

    for tag in cfg.tags:
        logger.info("[CONFIG] Mapping %r to %r", tag.id, tag.name)
    return cfg
