import pytest

from swiftdemangle import InvalidSubstitution, Kind, UnknownProduction, demangle, parse
from swiftdemangle.codegen.options import CORPUS_OPTIONS
from swiftdemangle.grammar.legacy import is_legacy_symbol


def test_legacy_detection():
    assert is_legacy_symbol("_TF4main3fooFT_T_")
    assert is_legacy_symbol("_TtSi")
    assert not is_legacy_symbol("_T04main3fooyyF")
    assert not is_legacy_symbol("$s4main3fooyyF")


@pytest.mark.parametrize("mangled, expected", [
    ("_TF4main3fooFT_T_", "main.foo() -> ()"),
    ("_TF4main3fooFT1xSi_T_", "main.foo(x: Swift.Int) -> ()"),
    ("_TFSs3absuRxs16SignedNumberTyperFxx", "Swift.abs<A where A: Swift.SignedNumberType>(A) -> A"),
    ("_TtGV4main3FooS0__", "main.Foo<main.Foo>"),
    ("_TFF4main3fooFT_T_U_FT_T_", "closure #1 () -> () in main.foo() -> ()"),
    ("_TtTSiSS_", "(Swift.Int, Swift.String)"),
    ("_TtC4main3Foo", "main.Foo"),
    ("_TMaC4main3Foo", "type metadata accessor for main.Foo"),
    ("_TtP_", "Any"),
    ("_TIF1t1fFT1iSi1sSS_T_A_", "default argument 0 of t.f(i: Swift.Int, s: Swift.String) -> ()"),
    ("_TIvV1t1s1aSii", "variable initialization expression of t.s.a : Swift.Int"),
    ("_TFC3foo3barau3basSi", "foo.bar.bas.unsafeMutableAddressor : Swift.Int"),
    ("_TFC3foo3barlO3basSi", "foo.bar.bas.owningAddressor : Swift.Int"),
    ("_TttSi_", "(Swift.Int...)"),
    ("_TtBv4Bi8_", "Builtin.Vec4xInt8"),
    ("_TwxxSi", "destroy value witness for Swift.Int"),
    ("_TWVSi", "value witness table for Swift.Int"),
])
def test_legacy_output(mangled, expected):
    assert demangle(mangled) == expected


def test_legacy_optional_sugar():
    assert demangle("_TtGSqSi_", CORPUS_OPTIONS) == "Swift.Int?"
    assert demangle("_TtGSqSi_") == "Swift.Optional<Swift.Int>"


def test_legacy_and_current_share_node_kinds():
    old = parse("_TF4main3fooFT_T_")
    assert old.kind == Kind.GLOBAL
    assert old.children[0].kind == Kind.FUNCTION
    assert old.children[0].children[0].text == "main"
    assert old.children[0].children[1].text == "foo"


def test_legacy_type_mangling_root():
    tree = parse("_TtC4main3Foo")
    assert tree.children[0].kind == Kind.TYPE_MANGLING


def test_legacy_bad_substitution():
    with pytest.raises(InvalidSubstitution):
        parse("_TtS5_")


def test_legacy_initializer_needs_a_kind():
    with pytest.raises(UnknownProduction):
        parse("_TIvV1t1s1aSi")


def test_legacy_addressor_needs_a_kind():
    with pytest.raises(UnknownProduction):
        parse("_TFC3foo3barax3basSi")


def test_legacy_variadic_marker_is_on_last_element():
    tup = parse("_TtTSiSS_").children[0].children[0].children[0]
    assert all(len(e.children) == 1 for e in tup.children)
    tup = parse("_TttSiSS_").children[0].children[0].children[0]
    assert [c.kind for c in tup.children[-1].children] == [Kind.TYPE, Kind.VARIADIC_MARKER]
    assert [c.kind for c in tup.children[0].children] == [Kind.TYPE]


def test_legacy_imported_modules():
    assert demangle("_TtCSo8NSObject") == "__C.NSObject"
