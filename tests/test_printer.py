import pytest

from swiftdemangle import Kind, PrintOptions, demangle, parse, print_node
from swiftdemangle.codegen.options import CORPUS_OPTIONS
from swiftdemangle.codegen.printer import generic_parameter_name
from swiftdemangle.grammar.ast import node


@pytest.mark.parametrize("mangled, expected", [
    ("$s4main3fooyyF", "main.foo() -> ()"),
    ("$s4main3foo1xySiF", "main.foo(x: Swift.Int) -> ()"),
    ("$s4main3fooyySiF", "main.foo(Swift.Int) -> ()"),
    ("$sSa6appendyyxnF", "Swift.Array.append(__owned A) -> ()"),
    ("$s4main3fooyyxlF", "main.foo<A>(A) -> ()"),
    ("$s4main3fooyyxSQRzlF", "main.foo<A where A: Swift.Equatable>(A) -> ()"),
    ("$s4main3FooVACycfC", "main.Foo.init() -> main.Foo"),
    ("$s4main3fooyyFyycfU_", "closure #1 () -> () in main.foo() -> ()"),
    ("$s4main3fooSivg", "main.foo.getter : Swift.Int"),
    ("$s4main3FooVSQAAWP", "protocol witness table for main.Foo : Swift.Equatable in main"),
    ("$s4main3FooVSQAASQ2eeoiySbx_xtFZTW",
     "protocol witness for static Swift.Equatable.== infix(A, A) -> Swift.Bool "
     "in conformance main.Foo : Swift.Equatable in main"),
    ("$s4main3fooyyxlFSi_Tg5", "generic specialization <Swift.Int> of main.foo<A>(A) -> ()"),
    ("$s4main3fooyySiFTf4d_n",
     "function signature specialization <Arg[0] = Dead> of main.foo(Swift.Int) -> ()"),
    ("$s4main3fooyyFTA", "partial apply forwarder for main.foo() -> ()"),
    ("$s4main3fooyyYaKF", "main.foo() async throws -> ()"),
    ("$sSiSSIegyd_SSSiIegyd_TR",
     "reabstraction thunk helper from @escaping @callee_guaranteed (@unowned Swift.String) -> "
     "(@unowned Swift.Int) to @escaping @callee_guaranteed (@unowned Swift.Int) -> (@unowned Swift.String)"),
    ("$sBowxx", "destroy value witness for Builtin.NativeObject"),
    ("$sBi64_D", "Builtin.Int64"),
    ("$sypD", "Any"),
    ("$syXlD", "Swift.AnyObject"),
    ("$s4main3FooVMn", "nominal type descriptor for main.Foo"),
    ("$s4main3FooCMa", "type metadata accessor for main.Foo"),
    ("$s4main3FooVN", "type metadata for main.Foo"),
    ("$s4main3FooV5otherE3baryyF", "(extension in other):main.Foo.bar() -> ()"),
    ("$s4main3FooVABVD", "main.Foo.Foo"),
    ("$s4main003tdaSivg", "main.ü.getter : Swift.Int"),
    ("$sSo6CGRectVD", "__C.CGRect"),
    ("$sSC4FlagVD", "__C_Synthesized.Flag"),
])
def test_default_output(mangled, expected):
    assert demangle(mangled) == expected


def test_unmangled_suffix():
    assert demangle("$s4main3fooyyF.suffix") == "main.foo() -> () with unmangled suffix \".suffix\""


def test_type_mangling_output():
    assert demangle("Si", is_type=True) == "Swift.Int"


# ------------------------------
# 설탕 구문
# ------------------------------

@pytest.mark.parametrize("mangled, plain, sugared", [
    ("$sSiSgD", "Swift.Optional<Swift.Int>", "Swift.Int?"),
    ("$sSaySiGD", "Swift.Array<Swift.Int>", "[Swift.Int]"),
    ("$sSDySSSiGD", "Swift.Dictionary<Swift.String, Swift.Int>", "[Swift.String : Swift.Int]"),
])
def test_sugar(mangled, plain, sugared):
    assert demangle(mangled) == plain
    assert demangle(mangled, CORPUS_OPTIONS) == sugared


# ------------------------------
# 토글
# ------------------------------

def test_without_qualified_entities():
    assert demangle("$s4main3fooyyF", PrintOptions.SHOW_FUNCTION_ARGUMENT_TYPES) == "foo() -> ()"


def test_without_argument_types_prints_labels_only():
    assert demangle("$s4main3foo1xySiF", PrintOptions.NONE) == "foo(x:)"


def test_hide_stdlib_module():
    opts = PrintOptions.DEFAULT & ~PrintOptions.DISPLAY_STDLIB_MODULE
    assert demangle("Si", opts, is_type=True) == "Int"
    assert demangle("$s4main3foo1xySiF", opts) == "main.foo(x: Int) -> ()"


def test_hide_where_clauses():
    opts = PrintOptions.DEFAULT & ~PrintOptions.DISPLAY_WHERE_CLAUSES
    assert demangle("$s4main3fooyyxSQRzlF", opts) == "main.foo<A>(A) -> ()"


def test_shorten_partial_apply():
    opts = PrintOptions.DEFAULT | PrintOptions.SHORTEN_PARTIAL_APPLY
    assert demangle("$s4main3fooyyFTA", opts) == "partial apply for main.foo() -> ()"


def test_shorten_thunk():
    opts = PrintOptions.DEFAULT | PrintOptions.SHORTEN_THUNK
    assert demangle("$sSiSSIegyd_SSSiIegyd_TR", opts) == (
        "thunk for @escaping @callee_guaranteed (@unowned Swift.String) -> (@unowned Swift.Int)")


def test_simplified_value_witness():
    assert demangle("$sBowxx", PrintOptions.SIMPLIFIED) == "destroy for Builtin.NativeObject"


@pytest.mark.parametrize("mangled, long, short", [
    ("$s4main3foo1xySiF", "", ""),
    ("$sBowxx", "destroy value witness for", "destroy for"),
    ("$s4main3fooyyFTA", "partial apply forwarder for", "partial apply for"),
    ("$sSiSSIegyd_SSSiIegyd_TR",
     "reabstraction thunk helper from @escaping @callee_guaranteed (@unowned Swift.String) -> "
     "(@unowned Swift.Int) to @escaping @callee_guaranteed (@unowned Swift.Int) -> (@unowned Swift.String)",
     "thunk for @escaping @callee_guaranteed (@unowned Swift.String) -> (@unowned Swift.Int)"),
])
def test_simplified_differs_from_default_only_in_shortened_forms(mangled, long, short):
    full = demangle(mangled, PrintOptions.DEFAULT)
    assert long in full
    assert demangle(mangled, PrintOptions.SIMPLIFIED) == full.replace(long, short)


def test_qualify_entities_only_adds_module_qualification():
    tree = parse("$s4main3foo1xySiF")
    qualified = print_node(tree, PrintOptions.DEFAULT)
    plain = print_node(tree, PrintOptions.DEFAULT ^ PrintOptions.QUALIFY_ENTITIES)
    assert qualified == "main.foo(x: Swift.Int) -> ()"
    assert plain == "foo(x: Int) -> ()"
    assert qualified.replace("main.", "").replace("Swift.", "") == plain


def test_options_are_independent_of_the_tree():
    tree = parse("$s4main3foo1xySiF")
    before = tree.dump()
    print_node(tree, PrintOptions.NONE)
    print_node(tree, PrintOptions.SIMPLIFIED)
    assert tree.dump() == before
    assert print_node(tree) == "main.foo(x: Swift.Int) -> ()"


# ------------------------------
# 폴백
# ------------------------------

def test_unhandled_kind_uses_fallback():
    tree = node(Kind.ANONYMOUS_CONTEXT, None, node(Kind.IDENTIFIER, "x"))
    assert print_node(tree) == "AnonymousContext(x)"


def test_malformed_tree_never_raises():
    out = print_node(node(Kind.PROTOCOL_WITNESS))
    assert isinstance(out, str)
    assert out.startswith("protocol witness for ")


def test_node_str_uses_default_options():
    assert str(parse("$s4main3fooyyF")) == "main.foo() -> ()"


@pytest.mark.parametrize("depth, index, name", [
    (0, 0, "A"),
    (0, 1, "B"),
    (0, 26, "AB"),
    (1, 0, "A1"),
    (2, 3, "D2"),
])
def test_generic_parameter_name(depth, index, name):
    assert generic_parameter_name(depth, index) == name


def test_imported_module_hidden_without_objc_flag():
    opts = PrintOptions.DEFAULT ^ PrintOptions.DISPLAY_OBJC_MODULE
    assert demangle("$sSo6CGRectVD", opts) == "CGRect"
    assert demangle("$sSC4FlagVD", opts) == "Flag"
