"""Shared test fixtures."""

import os
import os.path as path
import textwrap
import typing as T

import pytest

from apkbuild.buildsystem.catalog import PipelineCatalog
from apkbuild.data.spec import Spec


@pytest.fixture
def make_spec() -> T.Callable[..., Spec]:
    """Builds a spec that compiles, with the given top-level keys replaced."""

    def _make(**overrides: T.Any) -> Spec:
        document: dict[str, T.Any] = {
            "name": "foo",
            "version": "1.0",
            "description": "The foo package",
            "url": "https://example.org/foo",
            "license": "MIT",
            "pipeline": [{"run": "echo hi"}],
        }
        document.update(overrides)
        return Spec.model_validate(document)

    return _make


@pytest.fixture
def bundled_catalog() -> PipelineCatalog:
    return PipelineCatalog()


@pytest.fixture
def catalog_root(tmp_path: T.Any) -> str:
    return str(tmp_path / "catalog")


@pytest.fixture
def write_pipeline(catalog_root: str) -> T.Callable[[str, str], None]:
    """Writes a pipeline definition into the temporary catalog."""

    def _write(name: str, contents: str) -> None:
        filename = path.join(catalog_root, *name.split("/")) + ".yaml"
        os.makedirs(path.dirname(filename), exist_ok=True)
        with open(filename, "w") as f:
            f.write(textwrap.dedent(contents))

    return _write


@pytest.fixture
def temp_catalog(catalog_root: str) -> PipelineCatalog:
    os.makedirs(catalog_root, exist_ok=True)
    return PipelineCatalog(catalog_root)
