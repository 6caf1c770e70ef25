import pydantic
import pytest

from apkbuild.constants import DEFAULT_INSTALL_DIR
from apkbuild.data.spec import PipelineStep, load_spec
from apkbuild.errors import SchemaError

FULL_SPEC = """\
name: hello
version: 2.12.1
epoch: 2
description: GNU hello
url: https://www.gnu.org/software/hello/
license: GPL-3.0-or-later
copyright:
  - attestation: Free Software Foundation
    license: GPL-3.0-or-later
dependencies:
  runtime:
    - musl
environment:
  contents:
    repositories:
      - https://dl-cdn.alpinelinux.org/alpine/edge/testing
    packages:
      - build-base
sources:
  main:
    context:
      name: context
pipeline:
  - uses: fetch
    with:
      url: https://ftp.gnu.org/gnu/hello/hello-${{package.version}}.tar.gz
      strip-components: 1
      extract: true
  - run: |
      make install DESTDIR=/pkg
build:
  source_dir: hello
"""


def test_load_full_spec() -> None:
    spec = load_spec(FULL_SPEC)

    assert spec.name == "hello"
    assert spec.version == "2.12.1"
    assert spec.epoch == 2
    assert spec.copyright[0].attestation == "Free Software Foundation"
    assert spec.dependencies.runtime == ["musl"]
    assert spec.environment.contents.packages == ["build-base"]
    assert spec.sources["main"].context is not None
    assert spec.sources["main"].context.name == "context"
    assert spec.build.source_dir == "hello"
    assert spec.build.install_dir == DEFAULT_INSTALL_DIR


def test_step_arguments_keep_their_types() -> None:
    spec = load_spec(FULL_SPEC)

    fetch = spec.pipeline[0]
    assert fetch.uses == "fetch"
    assert fetch.with_["strip-components"] == 1
    assert isinstance(fetch.with_["strip-components"], int)
    assert fetch.with_["extract"] is True
    assert spec.pipeline[1].run == "make install DESTDIR=/pkg\n"


def test_defaults_fill_in_missing_fields() -> None:
    spec = load_spec("name: foo\nversion: '1.0'\n")

    assert spec.epoch == 0
    assert spec.description == ""
    assert spec.pipeline == []
    assert spec.sources == {}
    assert spec.environment.contents.repositories == []
    assert spec.build.install_dir == "/usr"


def test_empty_values_mean_unset() -> None:
    spec = load_spec("name: foo\ndescription:\nbuild:\n  install_dir: ''\n")

    assert spec.description == ""
    assert spec.build.install_dir == "/usr"


def test_unknown_top_level_keys_are_ignored() -> None:
    spec = load_spec("name: foo\nsubpackages: [foo-doc]\n")
    assert spec.name == "foo"


def test_numeric_version_is_text() -> None:
    spec = load_spec("name: foo\nversion: 1.5\n")
    assert spec.version == "1.5"


def test_float_like_scalars_keep_their_text() -> None:
    spec = load_spec(
        "name: foo\n"
        "version: 1.10\n"
        "pipeline:\n"
        "  - uses: fetch\n"
        "    with:\n"
        "      url: https://example.org/foo-${{package.version}}.tar.gz\n"
        "      strip-components: 2.50\n"
    )

    assert spec.version == "1.10"
    assert spec.pipeline[0].with_["strip-components"] == "2.50"


def test_empty_step_arguments_are_blank() -> None:
    spec = load_spec("pipeline:\n  - uses: fetch\n    with:\n      url:\n      directory:\n")
    assert spec.pipeline[0].with_ == {"url": "", "directory": ""}


def test_spec_is_immutable() -> None:
    spec = load_spec("name: foo\n")
    with pytest.raises(pydantic.ValidationError):
        spec.name = "bar"  # type: ignore[misc]


@pytest.mark.parametrize(
    "document",
    [
        "- just\n- a list\n",
        "name: [unclosed\n",
        "name: foo\nepoch: -1\n",
        "name: foo\npipeline:\n  - run: echo\n    with:\n      x: [1, 2]\n",
    ],
)
def test_malformed_specs(document: str) -> None:
    with pytest.raises(SchemaError):
        load_spec(document)


def test_step_form_properties() -> None:
    assert PipelineStep(run="echo hi").is_inline
    assert not PipelineStep(run="  \n").is_inline
    assert PipelineStep(uses="fetch").is_reference
    assert not PipelineStep().is_reference
    assert PipelineStep.model_validate({"uses": "fetch", "with": {"url": "x"}}).with_ == {
        "url": "x"
    }
