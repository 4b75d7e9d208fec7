# swiftdemangle/codegen/printer.py
"""Node Printer (트리 → 사람이 읽는 문자열)

개요
----
- `print_node(tree, options)` 는 **전역 함수(total)** 다. 어떤 트리가 와도 예외 없이 문자열을 돌려준다.
- Kind별 서식 규칙은 `NodePrinter._dispatch` 한 곳에 모여 있다.
  * "접두 문구 + 자식" 형태(`type metadata for X`)는 `_PREFIX_TEXT` 표로 처리
  * 엔티티(함수/변수/타입 선언 …)는 `print_entity` 로 문맥(context)을 접두(`a.b`)/접미(`b in a`) 형태 중 하나로 출력
- 표기 토글은 PrintOptions 비트로만 결정된다(프리셋 전용 코드 경로 없음).
- 표에 없는 Kind는 `Kind(자식, 자식, ...)` 구조 표기로 대신한다.

엔티티 문맥 규칙
----------------
- 여러 단어로 된 이름(`closure #1`)이나 지역 이름(`x #1`)은 문맥을 뒤에 ` in <ctx>` 로 붙인다.
- 타입을 함께 출력하는 엔티티가 다른 엔티티의 문맥이 되면 역시 접미 형태로 밀려난다.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Optional

from ..grammar.ast import Kind, Node
from ..grammar.parser import MANGLING_MODULE_CLANG_IMPORTER, MANGLING_MODULE_OBJC, STDLIB_NAME
from ..grammar.specials import FunctionSigSpecializationParamKind as _P, value_witness_name
from .options import PrintOptions

OBJC_MODULE_NAMES = (MANGLING_MODULE_OBJC, MANGLING_MODULE_CLANG_IMPORTER)
LLDB_EXPRESSIONS_MODULE_PREFIX = "__lldb_expr_"

# 트리 높이는 파서 가드가 제한하지만, 손으로 만든 트리를 위한 안전 한도
MAX_PRINT_DEPTH = 768

# 타입 출력 방식(print_entity)
NO_TYPE, WITH_COLON, FUNCTION_STYLE = 0, 1, 2

_FUNCTION_TYPE_KINDS = frozenset([
    Kind.FUNCTION_TYPE, Kind.NO_ESCAPE_FUNCTION_TYPE, Kind.UNCURRIED_FUNCTION_TYPE,
    Kind.C_FUNCTION_POINTER, Kind.THIN_FUNCTION_TYPE,
])

_SIMPLE_TYPE_KINDS = frozenset([
    Kind.ASSOCIATED_TYPE, Kind.ASSOCIATED_TYPE_REF, Kind.BOUND_GENERIC_CLASS, Kind.BOUND_GENERIC_ENUM,
    Kind.BOUND_GENERIC_STRUCTURE, Kind.BOUND_GENERIC_PROTOCOL, Kind.BOUND_GENERIC_OTHER_NOMINAL_TYPE,
    Kind.BOUND_GENERIC_TYPE_ALIAS, Kind.BOUND_GENERIC_FUNCTION, Kind.BUILTIN_TYPE_NAME, Kind.CLASS,
    Kind.DEPENDENT_GENERIC_TYPE, Kind.DEPENDENT_MEMBER_TYPE, Kind.DEPENDENT_GENERIC_PARAM_TYPE,
    Kind.DYNAMIC_SELF, Kind.ENUM, Kind.ERROR_TYPE, Kind.EXISTENTIAL_METATYPE, Kind.METATYPE,
    Kind.METATYPE_REPRESENTATION, Kind.MODULE, Kind.TUPLE, Kind.PROTOCOL, Kind.RETURN_TYPE,
    Kind.SIL_BOX_TYPE, Kind.STRUCTURE, Kind.OTHER_NOMINAL_TYPE, Kind.TUPLE_ELEMENT_NAME, Kind.TYPE_LIST,
    Kind.LABEL_LIST, Kind.TYPE_ALIAS, Kind.OPAQUE_RETURN_TYPE, Kind.QUALIFIED_ARCHETYPE, Kind.ARCHETYPE,
    Kind.ARCHETYPE_REF, Kind.SELF_TYPE_REF, Kind.GENERIC_TYPE,
])

_EXISTENTIAL_KINDS = frozenset([
    Kind.EXISTENTIAL_METATYPE, Kind.PROTOCOL_LIST, Kind.PROTOCOL_LIST_WITH_CLASS,
    Kind.PROTOCOL_LIST_WITH_ANY_OBJECT,
])

# ---- "문구 + 자식" 형태 ----
_PREFIX_TEXT: Dict[Kind, str] = {
    Kind.TYPE_METADATA: "type metadata for ",
    Kind.TYPE_METADATA_ACCESS_FUNCTION: "type metadata accessor for ",
    Kind.FULL_TYPE_METADATA: "full type metadata for ",
    Kind.TYPE_METADATA_INSTANTIATION_FUNCTION: "type metadata instantiation function for ",
    Kind.TYPE_METADATA_INSTANTIATION_CACHE: "type metadata instantiation cache for ",
    Kind.TYPE_METADATA_SINGLETON_INITIALIZATION_CACHE: "type metadata singleton initialization cache for ",
    Kind.TYPE_METADATA_LAZY_CACHE: "lazy cache variable for type metadata for ",
    Kind.TYPE_METADATA_COMPLETION_FUNCTION: "type metadata completion function for ",
    Kind.METACLASS: "metaclass for ",
    Kind.NOMINAL_TYPE_DESCRIPTOR: "nominal type descriptor for ",
    Kind.CLASS_METADATA_BASE_OFFSET: "class metadata base offset for ",
    Kind.PROTOCOL_DESCRIPTOR: "protocol descriptor for ",
    Kind.PROTOCOL_SELF_CONFORMANCE_DESCRIPTOR: "protocol self-conformance descriptor for ",
    Kind.PROTOCOL_CONFORMANCE_DESCRIPTOR: "protocol conformance descriptor for ",
    Kind.GENERIC_TYPE_METADATA_PATTERN: "generic type metadata pattern for ",
    Kind.METHOD_LOOKUP_FUNCTION: "method lookup function for ",
    Kind.OBJ_C_METADATA_UPDATE_FUNCTION: "ObjC metadata update function for ",
    Kind.PROPERTY_DESCRIPTOR: "property descriptor for ",
    Kind.OPAQUE_TYPE_DESCRIPTOR: "opaque type descriptor for ",
    Kind.EXTENSION_DESCRIPTOR: "extension descriptor ",
    Kind.MODULE_DESCRIPTOR: "module descriptor ",
    Kind.ENUM_CASE: "enum case for ",
    Kind.VALUE_WITNESS_TABLE: "value witness table for ",
    Kind.PROTOCOL_WITNESS_TABLE: "protocol witness table for ",
    Kind.PROTOCOL_WITNESS_TABLE_PATTERN: "protocol witness table pattern for ",
    Kind.GENERIC_PROTOCOL_WITNESS_TABLE: "generic protocol witness table for ",
    Kind.GENERIC_PROTOCOL_WITNESS_TABLE_INSTANTIATION_FUNCTION:
        "instantiation function for generic protocol witness table for ",
    Kind.RESILIENT_PROTOCOL_WITNESS_TABLE: "resilient protocol witness table for ",
    Kind.PROTOCOL_WITNESS_TABLE_ACCESSOR: "protocol witness table accessor for ",
    Kind.CURRY_THUNK: "curry thunk of ",
    Kind.DISPATCH_THUNK: "dispatch thunk of ",
    Kind.METHOD_DESCRIPTOR: "method descriptor for ",
    Kind.PROTOCOL_SELF_CONFORMANCE_WITNESS: "protocol self-conformance witness for ",
    Kind.OBJ_C_ATTRIBUTE: "@objc ",
    Kind.NON_OBJ_C_ATTRIBUTE: "@nonobjc ",
    Kind.DYNAMIC_ATTRIBUTE: "dynamic ",
    Kind.DIRECT_METHOD_REFERENCE_ATTRIBUTE: "super ",
    Kind.V_TABLE_ATTRIBUTE: "override ",
    Kind.MERGED_FUNCTION: "merged ",
    Kind.DYNAMICALLY_REPLACEABLE_FUNCTION_VAR: "dynamically replaceable variable for ",
    Kind.DYNAMICALLY_REPLACEABLE_FUNCTION_KEY: "dynamically replaceable key for ",
    Kind.DYNAMICALLY_REPLACEABLE_FUNCTION_IMPL: "dynamically replaceable thunk for ",
    Kind.ASYNC_FUNCTION_POINTER: "async function pointer to ",
    Kind.OUTLINED_COPY: "outlined copy of ",
    Kind.OUTLINED_CONSUME: "outlined consume of ",
    Kind.OUTLINED_RETAIN: "outlined retain of ",
    Kind.OUTLINED_RELEASE: "outlined release of ",
    Kind.OUTLINED_INITIALIZE_WITH_TAKE: "outlined init with take of ",
    Kind.OUTLINED_INITIALIZE_WITH_COPY: "outlined init with copy of ",
    Kind.OUTLINED_ASSIGN_WITH_TAKE: "outlined assign with take of ",
    Kind.OUTLINED_ASSIGN_WITH_COPY: "outlined assign with copy of ",
    Kind.OUTLINED_DESTROY: "outlined destroy of ",
    Kind.WEAK: "weak ",
    Kind.UNOWNED: "unowned ",
    Kind.UNMANAGED: "unowned(unsafe) ",
    Kind.IN_OUT: "inout ",
    Kind.SHARED: "__shared ",
    Kind.OWNED: "__owned ",
    Kind.SIL_BOX_TYPE: "@box ",
    Kind.STATIC: "static ",
}

# ---- 잎 노드 고정 문구 ----
_FIXED_TEXT: Dict[Kind, str] = {
    Kind.DYNAMIC_SELF: "Self",
    Kind.ERROR_TYPE: "<ERROR TYPE>",
    Kind.OPAQUE_RETURN_TYPE: "some",
    Kind.IMPL_ESCAPING: "@escaping",
    Kind.IS_SERIALIZED: "serialized",
    Kind.THROWS_ANNOTATION: " throws",
    Kind.ASYNC_ANNOTATION: " async",
    Kind.CONCURRENT_FUNCTION_TYPE: "@Sendable ",
    Kind.VARIADIC_MARKER: "...",
    Kind.UNKNOWN_INDEX: "unknown index",
}

_ACCESSOR_NAMES: Dict[Kind, str] = {
    Kind.GETTER: "getter",
    Kind.GLOBAL_GETTER: "getter",
    Kind.SETTER: "setter",
    Kind.WILL_SET: "willset",
    Kind.DID_SET: "didset",
    Kind.READ_ACCESSOR: "read",
    Kind.MODIFY_ACCESSOR: "modify",
    Kind.MATERIALIZE_FOR_SET: "materializeForSet",
    Kind.UNSAFE_ADDRESSOR: "unsafeAddressor",
    Kind.UNSAFE_MUTABLE_ADDRESSOR: "unsafeMutableAddressor",
    Kind.OWNING_ADDRESSOR: "owningAddressor",
    Kind.OWNING_MUTABLE_ADDRESSOR: "owningMutableAddressor",
    Kind.NATIVE_OWNING_ADDRESSOR: "nativeOwningAddressor",
    Kind.NATIVE_OWNING_MUTABLE_ADDRESSOR: "nativeOwningMutableAddressor",
    Kind.NATIVE_PINNING_ADDRESSOR: "nativePinningAddressor",
    Kind.NATIVE_PINNING_MUTABLE_ADDRESSOR: "nativePinningMutableAddressor",
}

_SPECIALIZATION_TEXT: Dict[Kind, tuple] = {
    Kind.GENERIC_SPECIALIZATION: ("generic specialization", ""),
    Kind.GENERIC_SPECIALIZATION_PRESPECIALIZED: ("generic pre-specialization", ""),
    Kind.GENERIC_SPECIALIZATION_NOT_RE_ABSTRACTED: ("generic not re-abstracted specialization", ""),
    Kind.GENERIC_SPECIALIZATION_IN_RESILIENCE_DOMAIN: ("generic specialization", ""),
    Kind.INLINED_GENERIC_FUNCTION: ("inlined generic function", ""),
    Kind.GENERIC_PARTIAL_SPECIALIZATION: ("generic partial specialization", "Signature = "),
    Kind.GENERIC_PARTIAL_SPECIALIZATION_NOT_RE_ABSTRACTED:
        ("generic not-reabstracted partial specialization", "Signature = "),
    Kind.FUNCTION_SIGNATURE_SPECIALIZATION: ("function signature specialization", ""),
}

_LAYOUT_NAMES = {
    "U": "_UnknownLayout", "R": "_RefCountedObject", "N": "_NativeRefCountedObject", "C": "AnyObject",
    "D": "_NativeClass", "T": "_Trivial", "E": "_Trivial", "e": "_Trivial", "M": "_TrivialAtMost",
    "m": "_TrivialAtMost",
}


def generic_parameter_name(depth: int, index: int) -> str:
    """(0,0) → A, (0,1) → B, (0,26) → AB, (1,0) → A1"""
    name: List[str] = []
    while True:
        name.append(chr(ord("A") + index % 26))
        index //= 26
        if not index:
            break
    return "".join(name) + (str(depth) if depth else "")


def _is_swift_module(n: Node) -> bool:
    return n.kind == Kind.MODULE and n.text == STDLIB_NAME


def _is_identifier(n: Node, text: str) -> bool:
    return n.kind == Kind.IDENTIFIER and n.text == text


def _child_of_kind(n: Node, kind: Kind) -> Optional[Node]:
    for c in n.children:
        if c.kind == kind:
            return c
    return None


def is_simple_type(n: Node) -> bool:
    if n.kind == Kind.TYPE:
        return bool(n.children) and is_simple_type(n.children[0])
    if n.kind == Kind.PROTOCOL_LIST:
        return bool(n.children) and len(n.children[0].children) <= 1
    return n.kind in _SIMPLE_TYPE_KINDS


def need_space_before_type(n: Node) -> bool:
    if n.kind == Kind.TYPE:
        return bool(n.children) and need_space_before_type(n.children[0])
    return n.kind not in (Kind.FUNCTION_TYPE, Kind.NO_ESCAPE_FUNCTION_TYPE, Kind.UNCURRIED_FUNCTION_TYPE,
                          Kind.DEPENDENT_GENERIC_TYPE)


class NodePrinter:
    """
    NodePrinter
    ===========
    print_node 호출 하나가 쓰는 출력 버퍼와 옵션.
    각 처리기는 (node, depth, as_prefix_context)를 받아 아직 출력하지 못한 접미 문맥(Node)을 돌려줄 수 있다.
    """

    def __init__(self, options: PrintOptions):
        self.opts = options
        self.out: List[str] = []
        self.specialization_prefix_printed = False
        H = Callable[[Node, int, bool], Optional[Node]]
        self._dispatch: Dict[Kind, H] = {
            Kind.GLOBAL: self._children,
            Kind.TYPE: self._children,
            Kind.TYPE_MANGLING: self._children,
            Kind.TYPE_LIST: self._children,
            Kind.DECL_CONTEXT: self._children,
            Kind.LABEL_LIST: self._nothing,
            Kind.SPECIALIZATION_PASS_ID: self._nothing,
            Kind.EMPTY_LIST: self._nothing,
            Kind.FIRST_ELEMENT_MARKER: self._nothing,
            Kind.SUFFIX: self._suffix,
            Kind.IDENTIFIER: self._text,
            Kind.BUILTIN_TYPE_NAME: self._text,
            Kind.IMPL_CONVENTION: self._text,
            Kind.IMPL_FUNCTION_ATTRIBUTE: self._text,
            Kind.METATYPE_REPRESENTATION: self._text,
            Kind.TUPLE_ELEMENT_NAME: lambda n, d, p: self.w(f"{n.text}: "),
            Kind.FUNCTION_SIGNATURE_SPECIALIZATION_PARAM_PAYLOAD: self._text,
            Kind.ARCHETYPE: self._text,
            Kind.ARCHETYPE_REF: self._text,
            Kind.NUMBER: self._index,
            Kind.INDEX: self._index,
            Kind.MODULE: self._module,
            Kind.LOCAL_DECL_NAME: self._local_decl_name,
            Kind.PRIVATE_DECL_NAME: self._private_decl_name,
            Kind.RELATED_ENTITY_DECL_NAME: self._related_entity_decl_name,
            Kind.INFIX_OPERATOR: lambda n, d, p: self.w(f"{n.text} infix"),
            Kind.PREFIX_OPERATOR: lambda n, d, p: self.w(f"{n.text} prefix"),
            Kind.POSTFIX_OPERATOR: lambda n, d, p: self.w(f"{n.text} postfix"),
            # 엔티티
            Kind.CLASS: self._nominal,
            Kind.STRUCTURE: self._nominal,
            Kind.ENUM: self._nominal,
            Kind.PROTOCOL: self._nominal,
            Kind.TYPE_ALIAS: self._nominal,
            Kind.OTHER_NOMINAL_TYPE: self._nominal,
            Kind.GENERIC_TYPE_PARAM_DECL: self._nominal,
            Kind.FUNCTION: self._function,
            Kind.BOUND_GENERIC_FUNCTION: self._function,
            Kind.VARIABLE: lambda n, d, p: self.print_entity(n, d, p, WITH_COLON, True),
            Kind.SUBSCRIPT: lambda n, d, p: self.print_entity(n, d, p, WITH_COLON, False, overwrite_name="subscript"),
            Kind.ALLOCATOR: self._allocator,
            Kind.CONSTRUCTOR: lambda n, d, p: self.print_entity(n, d, p, FUNCTION_STYLE, False, "init"),
            Kind.DESTRUCTOR: lambda n, d, p: self.print_entity(n, d, p, NO_TYPE, False, "deinit"),
            Kind.DEALLOCATOR: self._deallocator,
            Kind.I_VAR_INITIALIZER: lambda n, d, p: self.print_entity(n, d, p, NO_TYPE, False, "__ivar_initializer"),
            Kind.I_VAR_DESTROYER: lambda n, d, p: self.print_entity(n, d, p, NO_TYPE, False, "__ivar_destroyer"),
            Kind.EXPLICIT_CLOSURE: self._closure,
            Kind.IMPLICIT_CLOSURE: self._closure,
            Kind.DEFAULT_ARGUMENT_INITIALIZER: self._default_argument,
            Kind.INITIALIZER: lambda n, d, p: self.print_entity(
                n, d, p, NO_TYPE, False, "variable initialization expression"),
            Kind.EXTENSION: self._extension,
            # 타입
            Kind.TUPLE: self._tuple,
            Kind.TUPLE_ELEMENT: self._tuple_element,
            Kind.FUNCTION_TYPE: self._function_type,
            Kind.NO_ESCAPE_FUNCTION_TYPE: self._function_type,
            Kind.UNCURRIED_FUNCTION_TYPE: self._function_type,
            Kind.AUTO_CLOSURE_TYPE: self._function_type,
            Kind.ESCAPING_AUTO_CLOSURE_TYPE: self._function_type,
            Kind.THIN_FUNCTION_TYPE: self._function_type,
            Kind.C_FUNCTION_POINTER: self._function_type,
            Kind.OBJ_C_BLOCK: self._function_type,
            Kind.ESCAPING_OBJ_C_BLOCK: self._function_type,
            Kind.ARGUMENT_TUPLE: lambda n, d, p: self.print_function_parameters(
                None, n, d, self.has(PrintOptions.SHOW_FUNCTION_ARGUMENT_TYPES)),
            Kind.RETURN_TYPE: self._return_type,
            Kind.GLOBAL_ACTOR_FUNCTION_TYPE: self._global_actor,
            Kind.BOUND_GENERIC_CLASS: self._bound_generic,
            Kind.BOUND_GENERIC_STRUCTURE: self._bound_generic,
            Kind.BOUND_GENERIC_ENUM: self._bound_generic,
            Kind.BOUND_GENERIC_PROTOCOL: self._bound_generic,
            Kind.BOUND_GENERIC_OTHER_NOMINAL_TYPE: self._bound_generic,
            Kind.BOUND_GENERIC_TYPE_ALIAS: self._bound_generic,
            Kind.DEPENDENT_GENERIC_TYPE: self._dependent_generic_type,
            Kind.DEPENDENT_GENERIC_SIGNATURE: self._generic_signature,
            Kind.DEPENDENT_PSEUDOGENERIC_SIGNATURE: self._generic_signature,
            Kind.DEPENDENT_GENERIC_PARAM_TYPE: lambda n, d, p: self.w(
                generic_parameter_name(n.children[0].index or 0, n.children[1].index or 0)),
            Kind.DEPENDENT_GENERIC_CONFORMANCE_REQUIREMENT: lambda n, d, p: self._join(n, d, ": "),
            Kind.DEPENDENT_GENERIC_SAME_TYPE_REQUIREMENT: lambda n, d, p: self._join(n, d, " == "),
            Kind.DEPENDENT_GENERIC_LAYOUT_REQUIREMENT: self._layout_requirement,
            Kind.DEPENDENT_MEMBER_TYPE: lambda n, d, p: self._join(n, d, "."),
            Kind.DEPENDENT_ASSOCIATED_TYPE_REF: self._dependent_associated_type_ref,
            Kind.ASSOCIATED_TYPE_REF: self._associated_type_ref,
            Kind.METATYPE: self._metatype,
            Kind.EXISTENTIAL_METATYPE: self._existential_metatype,
            Kind.PROTOCOL_LIST: self._protocol_list,
            Kind.PROTOCOL_LIST_WITH_CLASS: self._protocol_list_with_class,
            Kind.PROTOCOL_LIST_WITH_ANY_OBJECT: self._protocol_list_with_any_object,
            Kind.QUALIFIED_ARCHETYPE: self._qualified_archetype,
            Kind.SELF_TYPE_REF: self._self_type_ref,
            Kind.IMPL_FUNCTION_TYPE: self._impl_function_type,
            Kind.IMPL_PARAMETER: lambda n, d, p: self._join(n, d, " "),
            Kind.IMPL_RESULT: lambda n, d, p: self._join(n, d, " "),
            Kind.IMPL_ERROR_RESULT: self._impl_error_result,
            # 전역 심볼
            Kind.VALUE_WITNESS: self._value_witness,
            Kind.PROTOCOL_CONFORMANCE: self._protocol_conformance,
            Kind.PROTOCOL_WITNESS: self._protocol_witness,
            Kind.PARTIAL_APPLY_FORWARDER: self._partial_apply,
            Kind.PARTIAL_APPLY_OBJ_C_FORWARDER: self._partial_apply,
            Kind.REABSTRACTION_THUNK: self._reabstraction_thunk,
            Kind.REABSTRACTION_THUNK_HELPER: self._reabstraction_thunk,
            Kind.V_TABLE_THUNK: self._vtable_thunk,
            Kind.ASYNC_AWAIT_RESUME_PARTIAL_FUNCTION: self._async_resume_partial,
            Kind.ASYNC_SUSPEND_RESUME_PARTIAL_FUNCTION: self._async_resume_partial,
            Kind.OUTLINED_VARIABLE: lambda n, d, p: self.w(f"outlined variable #{n.index} of "),
            Kind.OUTLINED_BRIDGED_METHOD: lambda n, d, p: self.w(f"outlined bridged method ({n.text}) of "),
            Kind.FIELD_OFFSET: self._field_offset,
            Kind.DIRECTNESS: lambda n, d, p: self.w("indirect " if n.index else "direct "),
            Kind.ANONYMOUS_DESCRIPTOR: self._anonymous_descriptor,
            Kind.LAZY_PROTOCOL_WITNESS_TABLE_ACCESSOR: self._lazy_witness_table,
            Kind.LAZY_PROTOCOL_WITNESS_TABLE_CACHE_VARIABLE: self._lazy_witness_table,
            Kind.ASSOCIATED_TYPE_METADATA_ACCESSOR: self._associated_type_metadata_accessor,
            Kind.ASSOCIATED_TYPE_WITNESS_TABLE_ACCESSOR: self._associated_type_witness_table_accessor,
            Kind.BASE_WITNESS_TABLE_ACCESSOR: self._base_witness_table_accessor,
            Kind.ASSOC_TYPE_PATH: lambda n, d, p: self._join(n, d, "."),
            Kind.GENERIC_SPECIALIZATION_PARAM: self._generic_specialization_param,
            Kind.FUNCTION_SIGNATURE_SPECIALIZATION_PARAM: self._func_spec_param,
            Kind.FUNCTION_SIGNATURE_SPECIALIZATION_RETURN: self._func_spec_param,
            Kind.FUNCTION_SIGNATURE_SPECIALIZATION_PARAM_KIND: self._func_spec_param_kind,
            Kind.KEY_PATH_GETTER_THUNK_HELPER: self._key_path_accessor,
            Kind.KEY_PATH_SETTER_THUNK_HELPER: self._key_path_accessor,
            Kind.KEY_PATH_EQUALS_THUNK_HELPER: self._key_path_index,
            Kind.KEY_PATH_HASH_THUNK_HELPER: self._key_path_index,
        }
        for kind in _SPECIALIZATION_TEXT:
            self._dispatch[kind] = self._specialization
        for kind in _ACCESSOR_NAMES:
            self._dispatch[kind] = self._accessor

    # ------------------------------
    # 기본 도구
    # ------------------------------

    def has(self, flag: PrintOptions) -> bool:
        return bool(self.opts & flag)

    def w(self, s: str) -> None:
        self.out.append(s)

    def size(self) -> int:
        return sum(len(s) for s in self.out)

    def render(self, n: Node) -> str:
        self.print(n, 0)
        return "".join(self.out)

    def print(self, n: Node, depth: int, as_prefix_context: bool = False) -> Optional[Node]:
        if depth > MAX_PRINT_DEPTH:
            self.w("<<too complex>>")
            return None
        text = _PREFIX_TEXT.get(n.kind)
        if text is not None:
            self.w(text)
            self._children(n, depth, False)
            return None
        fixed = _FIXED_TEXT.get(n.kind)
        if fixed is not None:
            self.w(fixed)
            return None
        handler = self._dispatch.get(n.kind)
        if handler is None:
            return self._fallback(n, depth)
        try:
            return handler(n, depth, as_prefix_context)
        except (IndexError, AttributeError, TypeError):
            # 기대한 모양이 아닌 트리(손으로 조립한 경우 등)는 구조 표기로
            return self._fallback(n, depth)

    def _fallback(self, n: Node, depth: int) -> None:
        self.w(n.kind.value)
        if n.contents is not None:
            self.w(f"({n.contents!r})" if isinstance(n.contents, str) else f"({n.contents})")
        if n.children:
            self.w("(")
            self._join(n, depth, ", ")
            self.w(")")
        return None

    def _children(self, n: Node, depth: int, _prefix: bool = False) -> None:
        for c in n.children:
            self.print(c, depth + 1)
        return None

    def _join(self, n: Node, depth: int, sep: str, nodes: Optional[List[Node]] = None) -> None:
        for i, c in enumerate(n.children if nodes is None else nodes):
            if i:
                self.w(sep)
            self.print(c, depth + 1)
        return None

    def _nothing(self, n: Node, depth: int, prefix: bool) -> None:
        return None

    def _text(self, n: Node, depth: int, prefix: bool) -> None:
        self.w(n.text)

    def _index(self, n: Node, depth: int, prefix: bool) -> None:
        self.w(str(n.index))

    def _suffix(self, n: Node, depth: int, prefix: bool) -> None:
        if self.has(PrintOptions.DISPLAY_UNMANGLED_SUFFIX):
            escaped = n.text.replace("\\", "\\\\").replace('"', '\\"')
            self.w(f' with unmangled suffix "{escaped}"')

    def _module(self, n: Node, depth: int, prefix: bool) -> None:
        if self.has(PrintOptions.DISPLAY_MODULE_NAMES):
            self.w(n.text)

    # ------------------------------
    # 이름
    # ------------------------------

    def _local_decl_name(self, n: Node, depth: int, prefix: bool) -> None:
        self.print(n.children[1], depth + 1)
        self.w(f" #{(n.children[0].index or 0) + 1}")

    def _private_decl_name(self, n: Node, depth: int, prefix: bool) -> None:
        show = self.has(PrintOptions.SHOW_PRIVATE_DISCRIMINATORS)
        if len(n.children) > 1:
            if show:
                self.w("(")
            self.print(n.children[1], depth + 1)
            if show:
                self.w(f" in {n.children[0].text})")
        elif show:
            self.w(f"(in {n.children[0].text})")

    def _related_entity_decl_name(self, n: Node, depth: int, prefix: bool) -> None:
        self.w(f"related decl '{n.children[0].text}' for ")
        self.print(n.children[1], depth + 1)

    # ------------------------------
    # 엔티티
    # ------------------------------

    def should_print_context(self, ctx: Node) -> bool:
        if not self.has(PrintOptions.QUALIFY_ENTITIES):
            return False
        if ctx.kind == Kind.MODULE:
            if ctx.text == STDLIB_NAME:
                return self.has(PrintOptions.DISPLAY_STDLIB_MODULE)
            if ctx.text in OBJC_MODULE_NAMES:
                return self.has(PrintOptions.DISPLAY_OBJC_MODULE)
            if ctx.text.startswith(LLDB_EXPRESSIONS_MODULE_PREFIX):
                return self.has(PrintOptions.DISPLAY_DEBUGGER_GENERATED_MODULE)
        return True

    def print_entity(self, entity: Node, depth: int, as_prefix_context: bool, type_printing: int,
                     has_name: bool, extra_name: str = "", extra_index: int = -1,
                     overwrite_name: str = "") -> Optional[Node]:
        generic_args: Optional[Node] = None
        if entity.kind == Kind.BOUND_GENERIC_FUNCTION:
            generic_args = entity.children[1]
            entity = entity.children[0]

        multi_word = " " in extra_name
        local_name = has_name and len(entity.children) > 1 and entity.children[1].kind == Kind.LOCAL_DECL_NAME
        if local_name:
            multi_word = True

        if as_prefix_context and (type_printing != NO_TYPE or multi_word):
            return entity

        postfix: Optional[Node] = None
        ctx = entity.children[0]
        if self.should_print_context(ctx):
            if multi_word:
                postfix = ctx
            else:
                before = self.size()
                postfix = self.print(ctx, depth + 1, True)
                if self.size() != before:
                    self.w(".")

        if has_name or overwrite_name:
            if extra_name and multi_word:
                self.w(extra_name)
                if extra_index >= 0:
                    self.w(str(extra_index))
                self.w(" of ")
                extra_name, extra_index = "", -1
            before = self.size()
            if overwrite_name:
                self.w(overwrite_name)
            else:
                name = entity.children[1]
                if name.kind != Kind.PRIVATE_DECL_NAME:
                    self.print(name, depth + 1)
                private = _child_of_kind(entity, Kind.PRIVATE_DECL_NAME)
                if private is not None:
                    self.print(private, depth + 1)
            if self.size() != before and extra_name:
                self.w(".")
        if extra_name:
            self.w(extra_name)
            if extra_index >= 0:
                self.w(str(extra_index))

        if type_printing != NO_TYPE:
            ty = _child_of_kind(entity, Kind.TYPE)
            if ty is None:
                return self._fallback(entity, depth)
            ty = ty.children[0]
            if type_printing == FUNCTION_STYLE:
                t = ty
                while t.kind == Kind.DEPENDENT_GENERIC_TYPE:
                    t = t.children[1].children[0]
                if t.kind not in _FUNCTION_TYPE_KINDS:
                    type_printing = WITH_COLON
            if type_printing == WITH_COLON:
                if self.has(PrintOptions.DISPLAY_ENTITY_TYPES):
                    self.w(" : ")
                    self.print_entity_type(entity, ty, generic_args, depth)
            else:
                if multi_word or need_space_before_type(ty):
                    self.w(" ")
                self.print_entity_type(entity, ty, generic_args, depth)

        if not as_prefix_context and postfix is not None:
            if entity.kind in (Kind.DEFAULT_ARGUMENT_INITIALIZER, Kind.INITIALIZER):
                self.w(" of ")
            else:
                self.w(" in ")
            self.print(postfix, depth + 1)
            postfix = None
        return postfix

    def print_entity_type(self, entity: Node, ty: Node, generic_args: Optional[Node], depth: int) -> None:
        labels = _child_of_kind(entity, Kind.LABEL_LIST)
        if labels is None and generic_args is None:
            self.print(ty, depth + 1)
            return
        if generic_args is not None:
            self.w("<")
            self._join(generic_args, depth, ", ")
            self.w(">")
        if ty.kind == Kind.DEPENDENT_GENERIC_TYPE:
            if generic_args is None:
                self.print(ty.children[0], depth + 1)
            dependent = ty.children[1]
            if need_space_before_type(dependent):
                self.w(" ")
            ty = dependent.children[0]
        self.print_function_type(labels, ty, depth)

    def _nominal(self, n: Node, depth: int, prefix: bool) -> Optional[Node]:
        return self.print_entity(n, depth, prefix, NO_TYPE, True)

    def _function(self, n: Node, depth: int, prefix: bool) -> Optional[Node]:
        return self.print_entity(n, depth, prefix, FUNCTION_STYLE, True)

    def _allocator(self, n: Node, depth: int, prefix: bool) -> Optional[Node]:
        name = "__allocating_init" if n.children[0].kind == Kind.CLASS else "init"
        return self.print_entity(n, depth, prefix, FUNCTION_STYLE, False, name)

    def _deallocator(self, n: Node, depth: int, prefix: bool) -> Optional[Node]:
        name = "__deallocating_deinit" if n.children[0].kind == Kind.CLASS else "deinit"
        return self.print_entity(n, depth, prefix, NO_TYPE, False, name)

    def _closure(self, n: Node, depth: int, prefix: bool) -> Optional[Node]:
        name = "closure #" if n.kind == Kind.EXPLICIT_CLOSURE else "implicit closure #"
        style = FUNCTION_STYLE if self.has(PrintOptions.SHOW_FUNCTION_ARGUMENT_TYPES) else NO_TYPE
        return self.print_entity(n, depth, prefix, style, False, name, (n.children[1].index or 0) + 1)

    def _default_argument(self, n: Node, depth: int, prefix: bool) -> Optional[Node]:
        return self.print_entity(n, depth, prefix, NO_TYPE, False, "default argument ", n.children[1].index or 0)

    def _accessor(self, n: Node, depth: int, prefix: bool) -> Optional[Node]:
        storage = n.children[0]
        name = _ACCESSOR_NAMES[n.kind]
        if storage.kind == Kind.SUBSCRIPT:
            return self.print_entity(storage, depth, prefix, WITH_COLON, False, name, -1, "subscript")
        if storage.kind == Kind.VARIABLE:
            return self.print_entity(storage, depth, prefix, WITH_COLON, True, name)
        self.print(storage, depth + 1)
        self.w(f".{name}")
        return None

    def _extension(self, n: Node, depth: int, prefix: bool) -> None:
        if self.has(PrintOptions.QUALIFY_ENTITIES) and self.has(PrintOptions.DISPLAY_EXTENSION_CONTEXTS):
            self.w("(extension in ")
            self.print(n.children[0], depth + 1, True)
            self.w("):")
        self.print(n.children[1], depth + 1)
        if len(n.children) == 3 and not self.has(PrintOptions.PRINT_FOR_TYPE_NAME):
            self.print(n.children[2], depth + 1)

    # ------------------------------
    # 함수 타입
    # ------------------------------

    def _function_type(self, n: Node, depth: int, prefix: bool) -> None:
        self.print_function_type(None, n, depth)

    def print_function_type(self, labels: Optional[Node], fn: Node, depth: int) -> None:
        if len(fn.children) < 2:
            self._fallback(fn, depth)
            return
        k = fn.kind
        if k in (Kind.AUTO_CLOSURE_TYPE, Kind.ESCAPING_AUTO_CLOSURE_TYPE):
            self.w("@autoclosure ")
        elif k == Kind.THIN_FUNCTION_TYPE:
            self.w("@convention(thin) ")
        elif k == Kind.C_FUNCTION_POINTER:
            self.w("@convention(c) ")
        elif k == Kind.ESCAPING_OBJ_C_BLOCK:
            self.w("@escaping @convention(block) ")
        elif k == Kind.OBJ_C_BLOCK:
            self.w("@convention(block) ")

        i = 0
        is_async = is_throws = is_sendable = False
        if fn.children[i].kind == Kind.GLOBAL_ACTOR_FUNCTION_TYPE:
            self.print(fn.children[i], depth + 1)
            i += 1
        if fn.children[i].kind == Kind.THROWS_ANNOTATION:
            is_throws = True
            i += 1
        if fn.children[i].kind == Kind.CONCURRENT_FUNCTION_TYPE:
            is_sendable = True
            i += 1
        if fn.children[i].kind == Kind.ASYNC_ANNOTATION:
            is_async = True
            i += 1

        if is_sendable:
            self.w("@Sendable ")
        show_types = self.has(PrintOptions.SHOW_FUNCTION_ARGUMENT_TYPES)
        self.print_function_parameters(labels, fn.children[i], depth, show_types)
        if not show_types:
            return
        if is_async:
            self.w(" async")
        if is_throws:
            self.w(" throws")
        self.print(fn.children[i + 1], depth + 1)

    def print_function_parameters(self, labels: Optional[Node], arg_tuple: Node, depth: int,
                                  show_types: bool) -> None:
        if arg_tuple.kind != Kind.ARGUMENT_TUPLE:
            self._fallback(arg_tuple, depth)
            return
        params = arg_tuple.children[0].children[0]
        has_labels = labels is not None and len(labels.children) > 0

        def label_for(i: int) -> str:
            lbl = labels.children[i] if labels is not None and i < len(labels.children) else None
            return lbl.text if lbl is not None and lbl.kind == Kind.IDENTIFIER else "_"

        if params.kind != Kind.TUPLE:
            if show_types:
                self.w("(")
                if has_labels:
                    self.w(f"{label_for(0)}: ")
                self.print(params, depth + 1)
                self.w(")")
            else:
                self.w(f"({label_for(0)}:)" if has_labels else "(_:)")
            return

        self.w("(")
        for i, param in enumerate(params.children):
            if i and show_types:
                self.w(", ")
            if has_labels:
                self.w(f"{label_for(i)}:")
            elif not show_types:
                name = _child_of_kind(param, Kind.TUPLE_ELEMENT_NAME)
                self.w(f"{name.text}:" if name is not None else "_:")
            if has_labels and show_types:
                self.w(" ")
            if show_types:
                self.print(param, depth + 1)
        self.w(")")

    def _return_type(self, n: Node, depth: int, prefix: bool) -> None:
        self.w(" -> ")
        self._children(n, depth)

    def _global_actor(self, n: Node, depth: int, prefix: bool) -> None:
        if n.children:
            self.w("@")
            self.print(n.children[0], depth + 1)
            self.w(" ")

    # ------------------------------
    # 튜플/제네릭
    # ------------------------------

    def _tuple(self, n: Node, depth: int, prefix: bool) -> None:
        self.w("(")
        self._join(n, depth, ", ")
        self.w(")")

    def _tuple_element(self, n: Node, depth: int, prefix: bool) -> None:
        label = _child_of_kind(n, Kind.TUPLE_ELEMENT_NAME)
        if label is not None:
            self.w(f"{label.text}: ")
        ty = _child_of_kind(n, Kind.TYPE)
        if ty is not None:
            self.print(ty, depth + 1)
        if _child_of_kind(n, Kind.VARIADIC_MARKER) is not None:
            self.w("...")

    def _print_with_parens(self, ty: Node, depth: int) -> None:
        parens = not is_simple_type(ty)
        if parens:
            self.w("(")
        self.print(ty, depth + 1)
        if parens:
            self.w(")")

    def _find_sugar(self, n: Node) -> str:
        unbound = n.children[0].children[0]
        args = n.children[1].children
        if len(unbound.children) < 2 or not _is_swift_module(unbound.children[0]):
            return ""
        name = unbound.children[1]
        if len(args) == 1:
            if unbound.kind == Kind.ENUM and _is_identifier(name, "Optional"):
                return "optional"
            if unbound.kind == Kind.ENUM and _is_identifier(name, "ImplicitlyUnwrappedOptional"):
                return "iuo"
            if unbound.kind == Kind.STRUCTURE and _is_identifier(name, "Array"):
                return "array"
        if len(args) == 2 and unbound.kind == Kind.STRUCTURE and _is_identifier(name, "Dictionary"):
            return "dictionary"
        return ""

    def _bound_generic_no_sugar(self, n: Node, depth: int) -> None:
        self.print(n.children[0], depth + 1)
        self.w("<")
        self._join(n.children[1], depth, ", ")
        self.w(">")

    def _bound_generic(self, n: Node, depth: int, prefix: bool) -> None:
        if (len(n.children) != 2 or not self.has(PrintOptions.SYNTHESIZE_SUGAR)
                or n.kind == Kind.BOUND_GENERIC_CLASS):
            self._bound_generic_no_sugar(n, depth)
            return
        if n.kind == Kind.BOUND_GENERIC_PROTOCOL:
            self._children(n.children[1], depth)
            self.w(" as ")
            self.print(n.children[0], depth + 1)
            return
        sugar = self._find_sugar(n)
        args = n.children[1].children
        if sugar in ("optional", "iuo"):
            self._print_with_parens(args[0], depth)
            self.w("?" if sugar == "optional" else "!")
        elif sugar == "array":
            self.w("[")
            self.print(args[0], depth + 1)
            self.w("]")
        elif sugar == "dictionary":
            self.w("[")
            self.print(args[0], depth + 1)
            self.w(" : ")
            self.print(args[1], depth + 1)
            self.w("]")
        else:
            self._bound_generic_no_sugar(n, depth)

    def _dependent_generic_type(self, n: Node, depth: int, prefix: bool) -> None:
        self.print(n.children[0], depth + 1)
        if need_space_before_type(n.children[1]):
            self.w(" ")
        self.print(n.children[1], depth + 1)

    def _generic_signature(self, n: Node, depth: int, prefix: bool) -> None:
        count = len(n.children)
        level = 0
        while level < count and n.children[level].kind == Kind.DEPENDENT_GENERIC_PARAM_COUNT:
            self.w("><" if level else "<")
            params = n.children[level].index or 0
            for i in range(params):
                if i:
                    self.w(", ")
                if i >= 128:
                    self.w("...")
                    break
                self.w(generic_parameter_name(level, i))
            level += 1
        if level == 0:
            self.w("<")
        if level != count and self.has(PrintOptions.DISPLAY_WHERE_CLAUSES):
            self.w(" where ")
            self._join(n, depth, ", ", n.children[level:])
        self.w(">")

    def _layout_requirement(self, n: Node, depth: int, prefix: bool) -> None:
        self.print(n.children[0], depth + 1)
        self.w(": ")
        self.w(_LAYOUT_NAMES.get(n.children[1].text, n.children[1].text))
        if len(n.children) > 2:
            self.w("(")
            self.print(n.children[2], depth + 1)
            if len(n.children) > 3:
                self.w(", ")
                self.print(n.children[3], depth + 1)
            self.w(")")

    def _dependent_associated_type_ref(self, n: Node, depth: int, prefix: bool) -> None:
        if n.children:
            self.print(n.children[0], depth + 1)
            self.w(".")
        self.w(n.text)

    def _associated_type_ref(self, n: Node, depth: int, prefix: bool) -> None:
        self.print(n.children[0], depth + 1)
        self.w(f".{n.children[1].text}")

    def _metatype(self, n: Node, depth: int, prefix: bool) -> None:
        idx = 0
        if len(n.children) == 2:
            self.print(n.children[0], depth + 1)
            self.w(" ")
            idx = 1
        ty = n.children[idx].children[0]
        self._print_with_parens(ty, depth)
        self.w(".Protocol" if ty.kind in _EXISTENTIAL_KINDS else ".Type")

    def _existential_metatype(self, n: Node, depth: int, prefix: bool) -> None:
        idx = 0
        if len(n.children) == 2:
            self.print(n.children[0], depth + 1)
            self.w(" ")
            idx = 1
        self.print(n.children[idx], depth + 1)
        self.w(".Type")

    def _protocol_list(self, n: Node, depth: int, prefix: bool) -> None:
        tlist = n.children[0]
        if not tlist.children:
            self.w("Any")
        else:
            self._join(tlist, depth, " & ")

    def _protocol_list_with_class(self, n: Node, depth: int, prefix: bool) -> None:
        self.print(n.children[1], depth + 1)
        self.w(" & ")
        self._join(n.children[0].children[0], depth, " & ")

    def _protocol_list_with_any_object(self, n: Node, depth: int, prefix: bool) -> None:
        tlist = n.children[0].children[0]
        if tlist.children:
            self._join(tlist, depth, " & ")
            self.w(" & ")
        if self.has(PrintOptions.QUALIFY_ENTITIES) and self.has(PrintOptions.DISPLAY_STDLIB_MODULE):
            self.w(f"{STDLIB_NAME}.")
        self.w("AnyObject")

    def _qualified_archetype(self, n: Node, depth: int, prefix: bool) -> None:
        if self.has(PrintOptions.SHORTEN_ARCHETYPE):
            self.w("(archetype)")
            return
        self.w(f"(archetype {n.children[0].index} of ")
        self.print(n.children[1], depth + 1)
        self.w(")")

    def _self_type_ref(self, n: Node, depth: int, prefix: bool) -> None:
        self.print(n.children[0], depth + 1)
        self.w(".Self")

    # ------------------------------
    # SIL 구현 함수 타입
    # ------------------------------

    def _impl_function_type(self, n: Node, depth: int, prefix: bool) -> None:
        state = 0  # 0=속성, 1=매개변수, 2=결과

        def advance(to: int) -> None:
            nonlocal state
            while state < to:
                self.w("(" if state == 0 else ") -> (")
                state += 1

        for c in n.children:
            if c.kind == Kind.IMPL_PARAMETER:
                if state == 1:
                    self.w(", ")
                advance(1)
                self.print(c, depth + 1)
            elif c.kind in (Kind.IMPL_RESULT, Kind.IMPL_ERROR_RESULT):
                if state == 2:
                    self.w(", ")
                advance(2)
                self.print(c, depth + 1)
            else:
                self.print(c, depth + 1)
                self.w(" ")
        advance(2)
        self.w(")")

    def _impl_error_result(self, n: Node, depth: int, prefix: bool) -> None:
        self.w("@error ")
        self._join(n, depth, " ")

    # ------------------------------
    # 전역 심볼
    # ------------------------------

    def _value_witness(self, n: Node, depth: int, prefix: bool) -> None:
        self.w(value_witness_name(n.children[0].index or 0))
        self.w(" for " if self.has(PrintOptions.SHORTEN_VALUE_WITNESS) else " value witness for ")
        self.print(n.children[1], depth + 1)

    def _protocol_conformance(self, n: Node, depth: int, prefix: bool) -> None:
        if len(n.children) == 4:
            self.w("property behavior storage of ")
            self.print(n.children[2], depth + 1)
            self.w(" in ")
            self.print(n.children[0], depth + 1)
            self.w(" : ")
            self.print(n.children[1], depth + 1)
            return
        self.print(n.children[0], depth + 1)
        if self.has(PrintOptions.DISPLAY_PROTOCOL_CONFORMANCES):
            self.w(" : ")
            self.print(n.children[1], depth + 1)
            self.w(" in ")
            self.print(n.children[2], depth + 1)

    def _protocol_witness(self, n: Node, depth: int, prefix: bool) -> None:
        self.w("protocol witness for ")
        self.print(n.children[1], depth + 1)
        self.w(" in conformance ")
        self.print(n.children[0], depth + 1)

    def _partial_apply(self, n: Node, depth: int, prefix: bool) -> None:
        if self.has(PrintOptions.SHORTEN_PARTIAL_APPLY):
            self.w("partial apply")
        elif n.kind == Kind.PARTIAL_APPLY_OBJ_C_FORWARDER:
            self.w("partial apply ObjC forwarder")
        else:
            self.w("partial apply forwarder")
        if n.children:
            self.w(" for ")
            self._children(n, depth)

    def _reabstraction_thunk(self, n: Node, depth: int, prefix: bool) -> None:
        if self.has(PrintOptions.SHORTEN_THUNK):
            self.w("thunk for ")
            self.print(n.children[-1], depth + 1)
            return
        self.w("reabstraction thunk ")
        if n.kind == Kind.REABSTRACTION_THUNK_HELPER:
            self.w("helper ")
        idx = 0
        if len(n.children) == 3:
            self.print(n.children[0], depth + 1)
            self.w(" ")
            idx = 1
        self.w("from ")
        self.print(n.children[idx + 1], depth + 1)
        self.w(" to ")
        self.print(n.children[idx], depth + 1)

    def _vtable_thunk(self, n: Node, depth: int, prefix: bool) -> None:
        self.w("vtable thunk for ")
        self.print(n.children[1], depth + 1)
        self.w(" dispatching to ")
        self.print(n.children[0], depth + 1)

    def _async_resume_partial(self, n: Node, depth: int, prefix: bool) -> None:
        if not self.has(PrintOptions.SHOW_ASYNC_RESUME_PARTIAL):
            return
        self.w("(")
        self.print(n.children[0], depth + 1)
        self.w(")")
        if n.kind == Kind.ASYNC_AWAIT_RESUME_PARTIAL_FUNCTION:
            self.w(" await resume partial function for ")
        else:
            self.w(" suspend resume partial function for ")

    def _field_offset(self, n: Node, depth: int, prefix: bool) -> None:
        self.print(n.children[0], depth + 1)
        self.w("field offset for ")
        self.print(n.children[1], depth + 1)

    def _anonymous_descriptor(self, n: Node, depth: int, prefix: bool) -> None:
        self.w("anonymous descriptor ")
        self.print(n.children[0], depth + 1)
        if len(n.children) > 1:
            self.w(" ")
            self.print(n.children[1], depth + 1)

    def _lazy_witness_table(self, n: Node, depth: int, prefix: bool) -> None:
        if n.kind == Kind.LAZY_PROTOCOL_WITNESS_TABLE_ACCESSOR:
            self.w("lazy protocol witness table accessor for type ")
        else:
            self.w("lazy protocol witness table cache variable for type ")
        self.print(n.children[0], depth + 1)
        self.w(" and conformance ")
        self.print(n.children[1], depth + 1)

    def _associated_type_metadata_accessor(self, n: Node, depth: int, prefix: bool) -> None:
        self.w("associated type metadata accessor for ")
        self.print(n.children[1], depth + 1)
        self.w(" in ")
        self.print(n.children[0], depth + 1)

    def _associated_type_witness_table_accessor(self, n: Node, depth: int, prefix: bool) -> None:
        self.w("associated type witness table accessor for ")
        self.print(n.children[1], depth + 1)
        self.w(" : ")
        self.print(n.children[2], depth + 1)
        self.w(" in ")
        self.print(n.children[0], depth + 1)

    def _base_witness_table_accessor(self, n: Node, depth: int, prefix: bool) -> None:
        self.w("base witness table accessor for ")
        self.print(n.children[1], depth + 1)
        self.w(" in ")
        self.print(n.children[0], depth + 1)

    def _key_path_accessor(self, n: Node, depth: int, prefix: bool) -> None:
        if n.kind == Kind.KEY_PATH_GETTER_THUNK_HELPER:
            self.w("key path getter for ")
        else:
            self.w("key path setter for ")
        self.print(n.children[0], depth + 1)
        self.w(" : ")
        for c in n.children[1:]:
            if c.kind == Kind.IS_SERIALIZED:
                self.w(", ")
            self.print(c, depth + 1)

    def _key_path_index(self, n: Node, depth: int, prefix: bool) -> None:
        if n.kind == Kind.KEY_PATH_EQUALS_THUNK_HELPER:
            self.w("key path index equality operator for ")
        else:
            self.w("key path index hash function for ")
        rest = list(n.children)
        serialized = bool(rest) and rest[-1].kind == Kind.IS_SERIALIZED
        if serialized:
            rest.pop()
        if rest and rest[-1].kind == Kind.DEPENDENT_GENERIC_SIGNATURE:
            self.print(rest.pop(), depth + 1)
        self.w("(")
        self._join(n, depth, ", ", rest)
        self.w(")")
        if serialized:
            self.w(", serialized")

    # ------------------------------
    # 특수화
    # ------------------------------

    def _specialization(self, n: Node, depth: int, prefix: bool) -> None:
        description, param_prefix = _SPECIALIZATION_TEXT[n.kind]
        if not self.has(PrintOptions.DISPLAY_GENERIC_SPECIALIZATIONS):
            if not self.specialization_prefix_printed:
                self.w("specialized ")
                self.specialization_prefix_printed = True
            return
        self.w(f"{description} <")
        sep = ""
        arg_num = 0
        for c in n.children:
            if c.kind == Kind.SPECIALIZATION_PASS_ID:
                continue
            if c.kind == Kind.IS_SERIALIZED:
                self.w(sep)
                sep = ", "
                self.print(c, depth + 1)
                continue
            if c.children:
                self.w(sep)
                self.w(param_prefix)
                sep = ", "
                if c.kind == Kind.FUNCTION_SIGNATURE_SPECIALIZATION_PARAM:
                    self.w(f"Arg[{arg_num}] = ")
                elif c.kind == Kind.FUNCTION_SIGNATURE_SPECIALIZATION_RETURN:
                    self.w("Return = ")
                self.print(c, depth + 1)
            arg_num += 1
        self.w("> of ")

    def _generic_specialization_param(self, n: Node, depth: int, prefix: bool) -> None:
        self.print(n.children[0], depth + 1)
        for i, c in enumerate(n.children[1:]):
            self.w(" with " if i == 0 else " and ")
            self.print(c, depth + 1)

    def _func_spec_param(self, n: Node, depth: int, prefix: bool) -> None:
        if not n.children:
            return
        kind = n.children[0].index or 0
        if kind in (_P.CONSTANT_PROP_FUNCTION, _P.CONSTANT_PROP_GLOBAL, _P.CONSTANT_PROP_INTEGER,
                    _P.CONSTANT_PROP_FLOAT):
            self.w("[")
            self.print(n.children[0], depth + 1)
            self.w(" : ")
            self.print(n.children[1], depth + 1)
            self.w("]")
        elif kind == _P.CONSTANT_PROP_STRING:
            self.w("[")
            self.print(n.children[0], depth + 1)
            self.w(" : ")
            self.print(n.children[1], depth + 1)
            self.w("'")
            if len(n.children) > 2:
                self.print(n.children[2], depth + 1)
            self.w("']")
        else:
            self.print(n.children[0], depth + 1)

    def _func_spec_param_kind(self, n: Node, depth: int, prefix: bool) -> None:
        raw = n.index or 0
        parts: List[str] = []
        if raw & _P.EXISTENTIAL_TO_GENERIC:
            parts.append("Existential To Protocol Constrained Generic")
        if raw & _P.DEAD:
            parts.append("Dead")
        if raw & _P.OWNED_TO_GUARANTEED:
            parts.append("Owned To Guaranteed")
        if raw & _P.GUARANTEED_TO_OWNED:
            parts.append("Guaranteed To Owned")
        if raw & _P.SROA:
            parts.append("Exploded")
        if parts:
            self.w(" and ".join(parts))
            return
        self.w({
            _P.BOX_TO_VALUE: "Value Promoted from Box",
            _P.BOX_TO_STACK: "Stack Promoted from Box",
            _P.IN_OUT_TO_OUT: "InOut Converted to Out",
            _P.CONSTANT_PROP_FUNCTION: "Constant Propagated Function",
            _P.CONSTANT_PROP_GLOBAL: "Constant Propagated Global",
            _P.CONSTANT_PROP_INTEGER: "Constant Propagated Integer",
            _P.CONSTANT_PROP_FLOAT: "Constant Propagated Float",
            _P.CONSTANT_PROP_STRING: "Constant Propagated String",
            _P.CLOSURE_PROP: "Closure Propagated",
        }.get(raw, f"<unknown parameter kind {raw}>"))


def print_node(tree: Node, options: PrintOptions = PrintOptions.DEFAULT) -> str:
    """트리를 문자열로. 실패하지 않는다."""
    return NodePrinter(options).render(tree)
