import pytest

from zignif.types import TypeSpelling, is_env_handle, recognize_type


@pytest.mark.parametrize(
    "text",
    ["bool", "void", "u8", "i32", "i64", "c_int", "c_long", "isize", "usize", "f16", "f32", "f64"],
)
def test_scalars_are_recognized(text: str) -> None:
    assert recognize_type(text) == text


@pytest.mark.parametrize(
    "text",
    ["beam.env", "beam.pid", "beam.atom", "beam.term", "beam.binary", "beam.res",
     "?*e.ErlNifEnv", "e.ErlNifTerm", "e.ErlNifPid", "e.ErlNifBinary"],
)
def test_bridge_scalars_are_recognized(text: str) -> None:
    assert recognize_type(text) is TypeSpelling(text)


def test_surrounding_whitespace_is_ignored() -> None:
    assert recognize_type("  i64 ") is TypeSpelling.I64


@pytest.mark.parametrize("text", ["[]i64", "[ ]i64", "[] i64", "[ ] i64"])
def test_slices_normalize_to_one_spelling(text: str) -> None:
    t = recognize_type(text)
    assert t is TypeSpelling.SLICE_I64
    assert str(t) == "[]i64"
    assert t.is_slice
    assert t.element is TypeSpelling.I64


def test_slice_of_terms() -> None:
    assert recognize_type("[]beam.term") is TypeSpelling.SLICE_BEAM_TERM


@pytest.mark.parametrize("text", ["[*c]u8", "[ * c ] u8", "[*c] u8", "[* c]u8"])
def test_c_string_is_not_a_slice(text: str) -> None:
    t = recognize_type(text)
    assert t is TypeSpelling.C_STRING
    assert not t.is_slice
    assert t.element is None


@pytest.mark.parametrize(
    "text",
    ["", "foo_t", "u16", "[]bool", "[*c]i32", "*u8", "?i32", "!void", "[]", "i32 extra", "u8x"],
)
def test_non_members_are_rejected(text: str) -> None:
    assert recognize_type(text) is None


def test_env_handles() -> None:
    assert is_env_handle(TypeSpelling.BEAM_ENV)
    assert is_env_handle(TypeSpelling.ERL_NIF_ENV)
    assert not is_env_handle(TypeSpelling.BEAM_TERM)
