import pytest

from swiftdemangle import (
    DemangleError, InvalidIdentifierEncoding, InvalidSubstitution, Kind, Limits, MalformedInput,
    SymbolTooComplex, UnknownProduction, UnsupportedManglingVersion, parse,
)
from swiftdemangle.grammar.ast import node
from swiftdemangle.grammar.errors import describe


def test_global_function_tree():
    tree = parse("$s4main3fooyyF")
    assert tree.kind == Kind.GLOBAL
    fn = tree.children[0]
    assert fn.kind == Kind.FUNCTION
    assert fn.children[0] == node(Kind.MODULE, "main")
    assert fn.children[1] == node(Kind.IDENTIFIER, "foo")
    assert fn.children[2].kind == Kind.TYPE


def test_other_prefixes_parse_the_same_body():
    expected = parse("$s4main3fooyyF")
    assert parse("_$s4main3fooyyF") == expected
    assert parse("$S4main3fooyyF") == expected


def test_type_mangling():
    tree = parse("Si", is_type=True)
    assert tree.kind == Kind.TYPE
    st = tree.children[0]
    assert st.kind == Kind.STRUCTURE
    assert st.children[0].text == "Swift"
    assert st.children[1].text == "Int"


def test_back_reference_is_equal_to_spelled_out_name():
    assert parse("$s4main3FooVABVD") == parse("$s4main3FooV3FooVD")


def test_suffix_keeps_leading_dot():
    tree = parse("$s4main3fooyyF.suffix")
    assert tree.children[-1] == node(Kind.SUFFIX, ".suffix")


def test_depth_is_not_part_of_equality():
    a = node(Kind.IDENTIFIER, "x")
    b = node(Kind.IDENTIFIER, "x")
    b.depth = 7
    assert a == b
    assert hash(a) == hash(b)


def test_arity_is_checked_on_construction():
    with pytest.raises(MalformedInput):
        node(Kind.STRUCTURE, None, node(Kind.IDENTIFIER, "x"))
    ty = node(Kind.TYPE, None, node(Kind.IDENTIFIER, "x"))
    with pytest.raises(MalformedInput):
        ty.add_child(node(Kind.IDENTIFIER, "y"))


def test_dump_lists_kinds_and_contents():
    text = parse("$s4main3fooyyF").dump()
    lines = text.splitlines()
    assert lines[0] == "Global"
    assert lines[1] == "  Function"
    assert "    Module 'main'" in lines


# ------------------------------
# 오류
# ------------------------------

def test_out_of_range_substitution():
    with pytest.raises(InvalidSubstitution):
        parse("$s4main3FooVAZ3BarVD")


def test_unknown_operator_reports_offset():
    with pytest.raises(UnknownProduction) as ei:
        parse("$s4main3fooyyF!")
    assert ei.value.pos == 14
    assert ei.value.text == "$s4main3fooyyF!"


def test_unsupported_prefix():
    with pytest.raises(UnsupportedManglingVersion):
        parse("@__swiftmacro_x")


def test_missing_body():
    with pytest.raises(MalformedInput):
        parse("$s")


def test_unrecognized_prefix():
    with pytest.raises(DemangleError):
        parse("main.foo")


def test_truncated_identifier():
    with pytest.raises(InvalidIdentifierEncoding):
        parse("$s4mai")


def test_errors_share_a_base_class():
    for bad in ("$s", "$s4mai", "$s4main3FooVAZ3BarVD", "$s4main3fooyyF!"):
        with pytest.raises(DemangleError):
            parse(bad)


def test_describe_names_the_error():
    with pytest.raises(DemangleError) as ei:
        parse("$s4main3fooyyF!")
    msg = describe(ei.value)
    assert msg.startswith("UnknownProduction:")
    assert msg.endswith("at offset 14")


# ------------------------------
# 제한
# ------------------------------

def test_depth_limit():
    with pytest.raises(SymbolTooComplex):
        parse("$s4main3fooyyF", limits=Limits(max_depth=4))


def test_node_limit():
    with pytest.raises(SymbolTooComplex):
        parse("$s4main3fooyyF", limits=Limits(max_nodes=3))


def test_deeply_nested_type_is_rejected_without_recursion_error():
    mangled = "$s" + "Si" + "Sg" * 500 + "D"
    with pytest.raises(SymbolTooComplex):
        parse(mangled)


# ------------------------------
# `_T0` 인자 레이블
# ------------------------------

def test_old_function_type_labels_come_from_tuple_elements():
    fn = parse("_T03foo3barC3basyAA3zimCAE_tF").children[0]
    assert fn.kind == Kind.FUNCTION
    labels = fn.children[2]
    assert labels.kind == Kind.LABEL_LIST
    assert labels.children == [node(Kind.IDENTIFIER, "zim")]
    args = fn.children[3].children[0].children[0]
    assert args.kind == Kind.ARGUMENT_TUPLE
    elem = args.children[0].children[0].children[0]
    assert elem.kind == Kind.TUPLE_ELEMENT
    assert [c.kind for c in elem.children] == [Kind.TYPE]


def test_old_function_type_unlabeled_element_gets_marker():
    fn = parse("_T04main3fooySi_Si1xtF").children[0]
    labels = fn.children[2]
    assert [c.kind for c in labels.children] == [Kind.FIRST_ELEMENT_MARKER, Kind.IDENTIFIER]
    assert labels.children[1].text == "x"


def test_old_function_type_without_params_has_no_labels():
    fn = parse("_T04main3fooyyF").children[0]
    assert [c.kind for c in fn.children] == [Kind.MODULE, Kind.IDENTIFIER, Kind.TYPE]


def test_imported_module_shortcuts():
    assert parse("So6CGRectV", is_type=True).children[0].children[0] == node(Kind.MODULE, "__C")
    assert parse("SC4FlagV", is_type=True).children[0].children[0] == node(Kind.MODULE, "__C_Synthesized")


# ------------------------------
# 반복 치환과 노드 제한
# ------------------------------

def test_standard_substitution_repeats_count_against_node_limit():
    with pytest.raises(SymbolTooComplex):
        parse("$sS200iD", limits=Limits(max_nodes=100))


def test_multi_substitution_repeats_count_against_node_limit():
    with pytest.raises(SymbolTooComplex):
        parse("$s4main3FooVA200AD", limits=Limits(max_nodes=100))


def test_huge_repeat_chain_is_rejected():
    with pytest.raises(SymbolTooComplex):
        parse("$s4main" + "S2048i" * 40 + "D")
