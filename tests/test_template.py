import typing as T

from apkbuild.buildsystem.template import (
    INPUT_PLACEHOLDER_RE,
    substitute_package,
    substitute_script,
)
from apkbuild.data.spec import Spec


def test_package_placeholders(make_spec: T.Callable[..., Spec]) -> None:
    spec = make_spec(name="hello", version="2.12")
    assert (
        substitute_package("${{package.name}}-${{package.version}}/${{package.name}}", spec)
        == "hello-2.12/hello"
    )


def test_all_scopes(make_spec: T.Callable[..., Spec]) -> None:
    spec = make_spec(name="hello", version="2.12")
    template = (
        "cd ${{inputs.dir}}\n"
        "make install DESTDIR=${{targets.contextdir}} NAME=${{package.name}}\n"
        "echo ${{inputs.opts}}\n"
    )

    script = substitute_script(template, {"dir": "/src/hello", "opts": "-j2"}, spec)

    assert script == (
        "cd /src/hello\n"
        "make install DESTDIR=/pkg NAME=hello\n"
        "echo -j2\n"
    )


def test_unknown_input_placeholders_are_removed(make_spec: T.Callable[..., Spec]) -> None:
    script = substitute_script(
        "echo ${{inputs.known}} ${{inputs.typo}}${{inputs.other-typo}}!\n",
        {"known": "yes"},
        make_spec(),
    )
    assert script == "echo yes !\n"
    assert not INPUT_PLACEHOLDER_RE.search(script)


def test_other_shell_syntax_is_left_alone(make_spec: T.Callable[..., Spec]) -> None:
    template = 'echo "${HOME}" ${ref:+--branch "$ref"} $(nproc) ${{unknown.scope}}\n'
    assert substitute_script(template, {}, make_spec()) == template


def test_input_values_are_inserted_verbatim(make_spec: T.Callable[..., Spec]) -> None:
    script = substitute_script("x=${{inputs.a}}\n", {"a": "${{package.name}}"}, make_spec())
    # Package placeholders in input values are handled while resolving inputs.
    assert script == "x=${{package.name}}\n"


def test_substitution_is_deterministic(make_spec: T.Callable[..., Spec]) -> None:
    spec = make_spec()
    inputs = {"a": "1", "b": "2"}
    template = "${{inputs.a}} ${{inputs.b}} ${{inputs.c}}"
    assert substitute_script(template, inputs, spec) == substitute_script(template, inputs, spec)
