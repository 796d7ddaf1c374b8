from __future__ import annotations

import json

import jsonschema
import pytest
import yaml

from calcsheet.config.loader import SCHEMA_PATH, template_path

"""Template schema contract: the shipped templates validate, malformed ones do not."""


@pytest.fixture()
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


@pytest.fixture()
def capstone() -> dict:
    return yaml.safe_load(template_path("capstone").read_text(encoding="utf-8"))


def test_capstone_template_is_valid(schema, capstone):
    jsonschema.validate(capstone, schema)


def test_twelve_columns_rejected(schema, capstone):
    capstone["columns"] = capstone["columns"][:12]
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(capstone, schema)


def test_unknown_subsection_key_rejected(schema, capstone):
    capstone["structure"][0]["subsections"][0]["formula"] = "=C1"
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(capstone, schema)


def test_section_requires_name(schema, capstone):
    capstone["structure"].append({"subsections": []})
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(capstone, schema)
