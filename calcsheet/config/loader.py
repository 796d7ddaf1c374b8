from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Template loader.

Responsibilities:
- Load YAML templates from calcsheet/config/templates/<id>.yml
- Validate them against template_schema.json
- Fall back to the capstone template for an unknown id (logged at WARN)
- Cache loaded templates per id
"""

__all__ = [
    "ConfigError",
    "TemplateSubSubsection",
    "TemplateSubsection",
    "TemplateSection",
    "Template",
    "DEFAULT_TEMPLATE_ID",
    "DEFAULT_COLUMNS",
    "TEMPLATES_DIR",
    "SCHEMA_PATH",
    "template_path",
    "load_template_file",
    "load_template",
    "clear_template_cache",
]

logger = logging.getLogger(__name__)

_config_dir = Path(__file__).parent
TEMPLATES_DIR = _config_dir / "templates"
SCHEMA_PATH = _config_dir / "template_schema.json"

DEFAULT_TEMPLATE_ID = "capstone"

# column labels used when no template could be loaded
DEFAULT_COLUMNS: tuple[str, ...] = (
    "Estimate", "Particulars", "Takeoff", "Unit", "QTY", "Length", "Width", "Height",
    "FT", "SQ FT", "LBS", "CY", "QTY",
)


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class TemplateSubSubsection:
    name: str


@dataclass(frozen=True)
class TemplateSubsection:
    name: str
    sub_subsections: tuple[TemplateSubSubsection, ...] = ()


@dataclass(frozen=True)
class TemplateSection:
    section: str
    subsections: tuple[TemplateSubsection, ...] = ()

    @property
    def subsection_names(self) -> list[str]:
        return [s.name for s in self.subsections]


@dataclass(frozen=True)
class Template:
    id: str
    name: str
    columns: tuple[str, ...]
    structure: tuple[TemplateSection, ...]

    def section(self, name: str) -> TemplateSection | None:
        return next((s for s in self.structure if s.section == name), None)


_cache: dict[str, Template] = {}


def _validate_template_schema(data: dict[str, Any]) -> None:
    """Validate template data against the JSON schema.

    Raises:
        ConfigError: schema file missing or not valid JSON, or the template
            violates the schema.
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"template schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"template validation failed: {e.message}") from e


def _build_template(data: dict[str, Any]) -> Template:
    sections = tuple(
        TemplateSection(
            section=raw["section"],
            subsections=tuple(
                TemplateSubsection(
                    name=sub["name"],
                    sub_subsections=tuple(TemplateSubSubsection(name=s["name"]) for s in sub.get("sub_subsections", [])),
                )
                for sub in raw.get("subsections", [])
            ),
        )
        for raw in data["structure"]
    )
    return Template(id=data["id"], name=data["name"], columns=tuple(data["columns"]), structure=sections)


def template_path(template_id: str) -> Path:
    return TEMPLATES_DIR / f"{template_id}.yml"


def load_template_file(path: Path) -> Template:
    if not path.exists():
        raise ConfigError(f"template file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    _validate_template_schema(data)
    return _build_template(data)


def load_template(template_id: str | None = None) -> Template:
    """Return the template for ``template_id``, falling back to capstone.

    Only the fallback itself is permissive: a shipped template that fails
    to parse or validate raises ConfigError.
    """
    requested = template_id or DEFAULT_TEMPLATE_ID
    if requested in _cache:
        return _cache[requested]
    path = template_path(requested)
    if not path.exists() and requested != DEFAULT_TEMPLATE_ID:
        logger.warning(f"unknown template '{requested}', using '{DEFAULT_TEMPLATE_ID}'")
        template = load_template(DEFAULT_TEMPLATE_ID)
    else:
        template = load_template_file(path)
    _cache[requested] = template
    return template


def clear_template_cache() -> None:
    _cache.clear()
