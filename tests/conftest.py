import json
from pathlib import Path

import pytest

from declkit.core.schema import ApiDocument, PathId
from declkit.core.overrides import OverrideTable
from declkit.core.traverse import TraverseContext
from declkit.generators.typescript.pipeline import create_renderer


SAMPLE_DIR = Path(__file__).parent / "sample"


@pytest.fixture()
def sample_api() -> dict:
    return json.loads((SAMPLE_DIR / "extension_api.json").read_text())


@pytest.fixture()
def document() -> ApiDocument:
    return ApiDocument.model_validate({
        "api": {
            "tabs": {"namespace": "tabs"},
            "devtools.panels": {"namespace": "devtools.panels"},
        }
    })


@pytest.fixture()
def overrides() -> OverrideTable:
    return OverrideTable()


@pytest.fixture()
def context(overrides) -> TraverseContext:
    return TraverseContext(overrides.is_visible)


@pytest.fixture()
def renderer(document, overrides):
    return create_renderer(document, overrides)


@pytest.fixture()
def tab_id() -> PathId:
    return PathId.for_namespace("tabs").child("Tab")
