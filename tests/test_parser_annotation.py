import pytest

from zignif import NifOption, NifParseError, parse


def _header(name: str, arity: int) -> str:
    params = ", ".join(f"a{i}: i64" for i in range(arity))
    return f"fn {name}({params}) i64 {{\n"


def test_annotation_without_options() -> None:
    out = parse("/// nif: forty_seven/0\n" + _header("forty_seven", 0), "test.zig")
    (decl,) = out.declarations
    assert decl.name == "forty_seven"
    assert decl.arity == 0
    assert decl.opts == ()


@pytest.mark.parametrize("opt", ["long", "dirty", "threaded"])
def test_single_option(opt: str) -> None:
    out = parse(f"/// nif: go/1 {opt}\n" + _header("go", 1), "test.zig")
    assert out.declarations[0].opts == (NifOption(opt),)


def test_options_keep_their_order() -> None:
    out = parse("/// nif: go/1 dirty long\n" + _header("go", 1), "test.zig")
    assert out.declarations[0].opts == (NifOption.DIRTY, NifOption.LONG)


def test_annotation_tolerates_whitespace() -> None:
    src = "   ///   nif:   go/1    threaded   \n" + _header("go", 1)
    out = parse(src, "test.zig")
    assert out.declarations[0].name == "go"
    assert out.declarations[0].opts == (NifOption.THREADED,)


@pytest.mark.parametrize(
    "line",
    [
        "/// nif: go/1 fast\n",
        "/// nif: go/1 longer\n",
        "/// nif: go\n",
        "/// nif: go/x\n",
        "/// nif: /1\n",
        "/// nif: go/1long\n",
    ],
)
def test_malformed_annotation_is_a_hard_error(line: str) -> None:
    with pytest.raises(NifParseError) as err:
        parse("const x = 1;\n" + line + _header("go", 1), "test.zig")
    assert err.value.line == 2
    assert err.value.file == "test.zig"
    assert "malformed nif declaration" in err.value.description


def test_second_annotation_leaves_the_first_dangling() -> None:
    src = "/// nif: a/0\n/// nif: b/0\n" + _header("b", 0)
    with pytest.raises(NifParseError) as err:
        parse(src, "test.zig")
    assert err.value.line == 1
    assert err.value.description == "missing function header for nif a"


def test_quadruple_slash_is_not_an_annotation() -> None:
    src = "//// nif: go/1\nconst x = 1;\n"
    out = parse(src, "test.zig")
    assert out.declarations == []
    assert out.code.endswith(src)
