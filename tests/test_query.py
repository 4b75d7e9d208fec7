from swiftdemangle import Kind, parse
from swiftdemangle.codegen import query
from swiftdemangle.grammar.ast import node


def _swift_int():
    return node(Kind.TYPE, None, node(Kind.STRUCTURE, None, node(Kind.MODULE, "Swift"), node(Kind.IDENTIFIER, "Int")))


def test_identifier():
    assert query.identifier(parse("$s4main3fooyyF")) == "foo"
    assert query.identifier(node(Kind.GLOBAL, None, node(Kind.MODULE, "main"))) is None


def test_test_name():
    assert query.test_name(parse("$s4main3foo1xySiF")) == ["main", "foo(x)"]
    assert query.test_name(parse("$s4main3fooyySiF")) == ["main", "foo"]
    assert query.test_name(parse("$s4main3FooVACycfC")) == ["main", "Foo"]
    assert query.test_name(parse("$s4main3fooSivg")) == ["main", "foo", "getter"]


def test_test_name_of_unnamed_kind_is_empty():
    assert query.test_name(node(Kind.TUPLE)) == []


def test_module():
    assert query.module(parse("$s4main3fooyyF")) == "main"
    assert query.module(parse("$sSa6appendyyxnF")) == "Swift"


def test_module_prefers_specialization_argument_over_stdlib():
    tree = node(
        Kind.GLOBAL, None,
        node(Kind.GENERIC_SPECIALIZATION, None,
             node(Kind.GENERIC_SPECIALIZATION_PARAM, None,
                  node(Kind.TYPE, None,
                       node(Kind.STRUCTURE, None, node(Kind.MODULE, "other"), node(Kind.IDENTIFIER, "Bar"))))),
        node(Kind.FUNCTION, None, node(Kind.MODULE, "Swift"), node(Kind.IDENTIFIER, "foo")),
    )
    assert query.module(tree) == "other"


def test_module_keeps_non_stdlib_owner():
    tree = node(
        Kind.GLOBAL, None,
        node(Kind.GENERIC_SPECIALIZATION, None,
             node(Kind.GENERIC_SPECIALIZATION_PARAM, None, _swift_int())),
        node(Kind.FUNCTION, None, node(Kind.MODULE, "main"), node(Kind.IDENTIFIER, "foo")),
    )
    assert query.module(tree) == "main"


def test_type_name():
    assert query.type_name(parse("$s4main3FooVN")) == "Foo"
    assert query.type_name(parse("$s4main3fooSivg")) == "Int"


def test_to_dict():
    record = query.to_dict(parse("$s4main3foo1xySiF"), "$s4main3foo1xySiF")
    assert record["identifier"] == "foo"
    assert record["name"] == "foo"
    assert record["module"] == "main"
    assert record["testName"] == ["main", "foo(x)"]
    assert record["description"] == "main.foo(x: Swift.Int) -> ()"
    assert record["mangled"] == "$s4main3foo1xySiF"
    assert set(record) == {"name", "type", "identifier", "module", "testName", "typeName", "description",
                           "mangled"}


def test_test_name_of_outlined_destroy():
    n = node(Kind.OUTLINED_DESTROY, None, _swift_int())
    assert query.test_name(n) == ["Swift", "Int", "outlined destroy"]


def test_test_name_of_old_labeled_function():
    assert query.test_name(parse("_T03foo3barC3basyAA3zimCAE_tF")) == ["foo", "bar", "bas(zim)"]
