"""Prepper-backed configuration loader for Lettering."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping, Sequence

from dotenv import dotenv_values
from prepper import (
    Field,
    IoError,
    SchemaError,
    SchemaModel,
    ValidationError,
    model_validator,
)
from prepper.config import ConfigInstance
from prepper.loaders import _parse_file, _path_to_source, discover_file_paths
from prepper.merge import merge_layer
from prepper.provenance import ProvenanceRecorder

from .errors import ConfigurationError
from .localization import DEFAULT_MISSING_MARKER, DEFAULT_TABLE

APP_NAME = "Lettering"


class LetteringConfig(SchemaModel):
    """Schema describing all supported configuration options."""

    LETTERING_LOCALE_DIR: str | None = Field(
        default=None,
        description="Directory holding <table>.strings localization files.",
    )
    LETTERING_LOCALE: str | None = Field(
        default=None,
        description="Locale whose <locale>.lproj directory is searched first.",
    )
    LETTERING_DEFAULT_TABLE: str = Field(default=DEFAULT_TABLE)
    LETTERING_MISSING_MARKER: str = Field(default=DEFAULT_MISSING_MARKER)
    LETTERING_DEFAULT_FONT_SIZE: float = Field(default=14.0)
    LETTERING_DEBUG: bool = Field(default=False)

    @model_validator(mode="before")
    def _normalise_table(data: Any) -> Any:
        if isinstance(data, dict):
            raw_value = data.get("LETTERING_DEFAULT_TABLE")
            if isinstance(raw_value, str):
                normalized = raw_value.strip()
                if normalized.endswith(".strings"):
                    normalized = normalized[: -len(".strings")]
                data["LETTERING_DEFAULT_TABLE"] = normalized or DEFAULT_TABLE
        return data


@lru_cache(maxsize=1)
def _load_config_instance(app_dir: Path | None = None) -> ConfigInstance:
    """Load configuration layers once and cache the immutable instance."""

    base_dir = app_dir or Path.cwd()
    try:
        provenance = ProvenanceRecorder()
        combined = _load_discovered_yaml(app_dir=base_dir, provenance=provenance)
        _merge_env_sources(
            combined,
            provenance=provenance,
            app_dir=base_dir,
            schema=LetteringConfig,
        )

        model = LetteringConfig.validate(combined, provenance=provenance)
        _validate_settings(model)

        return ConfigInstance(
            model=model,
            provenance=provenance,
            env_prefix=None,
            schema_cls=LetteringConfig,
        )
    except IoError as exc:
        raise ConfigurationError(
            f"Configuration files could not be read: {exc}"
        ) from exc
    except SchemaError as exc:
        raise ConfigurationError(f"Configuration schema error: {exc}") from exc
    except ValidationError as exc:
        issues = _format_validation_errors(exc.to_dict())
        raise ConfigurationError(issues) from exc


def _load_discovered_yaml(
    *,
    app_dir: Path,
    provenance: ProvenanceRecorder,
) -> dict[str, Any]:
    """Load YAML configuration files using Prepper's discovery rules."""

    result: dict[str, Any] = {}
    discovered = discover_file_paths(
        APP_NAME,
        "yaml",
        app_dir=app_dir,
        extra_paths=None,
    )
    for path, label in discovered:
        parsed = _parse_file(path, "yaml")
        if not isinstance(parsed, Mapping):
            raise IoError(
                f"Invalid configuration file {path}: expected a mapping at the root."
            )
        source = _path_to_source(label, "yaml", path)
        merge_layer(result, parsed, provenance=provenance, source=source, layer="file")
    return result


def _merge_env_sources(
    target: dict[str, Any],
    *,
    provenance: ProvenanceRecorder,
    app_dir: Path,
    schema: type[SchemaModel],
) -> None:
    """Merge .env and process environment variables into the target mapping."""

    allowed = set(schema.__field_infos__.keys())

    def merge_values(values: Mapping[str, str], *, source_prefix: str) -> None:
        for key, value in sorted(values.items()):
            if value is None:
                continue
            if key not in allowed:
                continue
            merge_layer(
                target,
                {key: value},
                provenance=provenance,
                source=f"env:{source_prefix}:{key}",
                layer="env",
            )

    dotenv_path = app_dir / ".env"
    if dotenv_path.exists():
        dotenv_content = dotenv_values(dotenv_path)
        merge_values(
            {k: v for k, v in dotenv_content.items() if v is not None},
            source_prefix=".env",
        )

    merge_values(
        {k: v for k, v in os.environ.items() if isinstance(v, str)},
        source_prefix="process",
    )


def _validate_settings(settings: LetteringConfig) -> None:
    errors: list[str] = []

    if not settings.LETTERING_DEFAULT_FONT_SIZE > 0:
        errors.append("LETTERING_DEFAULT_FONT_SIZE must be a positive number.")
    if not settings.LETTERING_MISSING_MARKER:
        errors.append(
            "LETTERING_MISSING_MARKER must not be empty; missing translations "
            "have to stay visible."
        )
    locale_dir = settings.LETTERING_LOCALE_DIR
    if locale_dir and not Path(locale_dir).expanduser().is_dir():
        errors.append(f"LETTERING_LOCALE_DIR '{locale_dir}' is not a directory.")

    if errors:
        bullet_list = "\n".join(f"- {message}" for message in errors)
        raise ConfigurationError(
            "Configuration validation errors detected:\n" + bullet_list
        )


def _format_validation_errors(entries: Sequence[dict[str, Any]]) -> str:
    details: list[str] = []
    for entry in entries:
        path = entry.get("path") or []
        if isinstance(path, (list, tuple)):
            location = ".".join(str(part) for part in path if part not in {None, ""})
        else:
            location = str(path)
        message = str(entry.get("message") or entry.get("msg") or "Invalid value")
        source = entry.get("source")
        origin = f" (source: {source})" if source else ""
        prefix = f"{location}: " if location else ""
        details.append(f"- {prefix}{message}{origin}")
    return "Configuration validation errors detected:\n" + "\n".join(details)


def get_config(app_dir: Path | None = None) -> ConfigInstance:
    """Return the immutable configuration instance."""

    return _load_config_instance(app_dir=app_dir)


def get_settings(app_dir: Path | None = None) -> LetteringConfig:
    """Return the validated schema model for typed access."""

    return get_config(app_dir=app_dir).model()


def clear_cache() -> None:
    """Forget the cached configuration so the next call reloads it."""

    _load_config_instance.cache_clear()
