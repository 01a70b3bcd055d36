"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP/IA) y la capa de caché lean config de forma
  consistente (timeouts, ventanas de frescura, deduplicación de avisos).
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "qldt"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "qldt"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "qldt"
    return Path.home() / ".config" / "qldt"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# QLDT user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


# Ventanas de frescura por familia de Query Key (primer elemento de la clave).
DEFAULT_STALE_SECONDS: dict[str, float] = {
    "courses": 300.0,
    "lessons": 300.0,
    "tests": 300.0,
    "questions": 30.0,
    "departments": 300.0,
    "positions": 300.0,
}


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters/caché.
    """

    model_config = SettingsConfigDict(
        env_prefix="QLDT_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    api_base_url: str = Field(
        default="http://localhost:5228/api",
        min_length=8,
        description="Base URL de la API REST de formación.",
    )
    api_token: str | None = Field(
        default=None,
        description="Bearer token emitido por el flujo de autenticación externo.",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="qldt-client/0.1",
        min_length=1,
        description="User-Agent enviado a la API.",
    )

    default_page_size: int = Field(
        default=10,
        ge=1,
        description="Tamaño de página por defecto para listados paginados.",
    )
    max_page_size: int = Field(
        default=24,
        ge=1,
        description="Límite del backend: valores >= a este se omiten del query string.",
    )

    default_stale_seconds: float = Field(
        default=60.0,
        ge=0,
        description="Ventana de frescura para familias sin valor específico.",
    )
    stale_seconds: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_STALE_SECONDS),
        description="Ventana de frescura por familia de Query Key (segundos).",
    )
    gc_seconds: float = Field(
        default=300.0,
        ge=0,
        description="Tiempo sin observadores tras el cual una entrada de caché es recolectable.",
    )
    notify_dedupe_seconds: float = Field(
        default=2.0,
        ge=0,
        description="Ventana en la que avisos iguales (tipo + mensaje) se muestran una sola vez.",
    )

    ai_api_key: str | None = Field(
        default=None,
        description="API key para el proveedor IA (compatible OpenAI).",
    )
    ai_base_url: str = Field(
        default="https://api.openai.com/v1",
        min_length=8,
        description="Base URL compatible OpenAI.",
    )
    ai_model: str = Field(
        default="gpt-4o-mini",
        min_length=1,
        description="Modelo usado por el asistente de planificación de clases.",
    )
    ai_timeout_seconds: float = Field(
        default=45.0,
        gt=0,
        description="Timeout para llamadas al proveedor IA (segundos).",
    )

    log_level: str = Field(
        default="INFO",
        description="Nivel de logging (DEBUG, INFO, WARNING, ...).",
    )
    log_file: Path | None = Field(
        default=None,
        description="Ruta opcional de fichero de log.",
    )

    @property
    def asset_base_url(self) -> str:
        """Origen de ficheros estáticos: la base de la API sin el sufijo `/api`."""

        base = self.api_base_url.rstrip("/")
        if base.endswith("/api"):
            base = base[: -len("/api")]
        return base

    def stale_seconds_for(self, family: str) -> float:
        return self.stale_seconds.get(family, self.default_stale_seconds)
