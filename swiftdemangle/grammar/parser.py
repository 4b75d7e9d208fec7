"""swiftdemangle 문법 엔진 (현행 접두사 계열)
- 접두사: `$s` `$S` `$e` `_$s` `_$S` `_$e` `_T0`
- 본문은 후위(postfix) 연산자열: 연산자 하나가 노드 스택에서 피연산자를 꺼내(pop) 새 노드를 만들어 다시 넣는다(push)
- 스택에 남은 노드는 순서대로 Global 노드의 자식이 된다
- 치환 가능한 생산(식별자, 명목 타입, 제네릭 적용 등)은 완성 즉시 치환표에 기록
- `.` 이후의 나머지는 Suffix 노드

특수 연산자(T/W/M/w/X/I/B/Y)는 specials.py 의 믹스인에서 처리한다.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from .ast import Kind, Node
from .errors import DemangleError, MalformedInput, UnknownProduction, UnsupportedManglingVersion
from .identifier import WordTable, decode_identifier
from .specials import SpecialProductions
from .substitution import SubstitutionTable, decode_multi_index
from ..lex import Cursor, Guard, Limits, DEFAULT_LIMITS

STDLIB_NAME = "Swift"
MANGLING_MODULE_OBJC = "__C"
MANGLING_MODULE_CLANG_IMPORTER = "__C_Synthesized"
MAX_REPEAT_COUNT = 2048

# ---- 접두사 ----
CURRENT_PREFIXES = ("_T0", "$S", "$s", "$e", "_$S", "_$s", "_$e")
UNSUPPORTED_PREFIXES = ("@__swiftmacro_",)


def mangling_prefix_length(text: str) -> int:
    for p in CURRENT_PREFIXES:
        if text.startswith(p):
            return len(p)
    return 0


# ---- 종류 묶음 ----
_CONTEXT_KINDS = frozenset([
    Kind.ALLOCATOR, Kind.ANONYMOUS_CONTEXT, Kind.CLASS, Kind.CONSTRUCTOR, Kind.DEALLOCATOR,
    Kind.DEFAULT_ARGUMENT_INITIALIZER, Kind.DESTRUCTOR, Kind.DID_SET, Kind.ENUM, Kind.EXPLICIT_CLOSURE,
    Kind.EXTENSION, Kind.FUNCTION, Kind.GETTER, Kind.GLOBAL_GETTER, Kind.I_VAR_INITIALIZER,
    Kind.I_VAR_DESTROYER, Kind.IMPLICIT_CLOSURE, Kind.INITIALIZER, Kind.MATERIALIZE_FOR_SET,
    Kind.MODIFY_ACCESSOR, Kind.MODULE, Kind.NATIVE_OWNING_ADDRESSOR, Kind.NATIVE_OWNING_MUTABLE_ADDRESSOR,
    Kind.NATIVE_PINNING_ADDRESSOR, Kind.NATIVE_PINNING_MUTABLE_ADDRESSOR, Kind.OTHER_NOMINAL_TYPE,
    Kind.OWNING_ADDRESSOR, Kind.OWNING_MUTABLE_ADDRESSOR, Kind.PROTOCOL, Kind.READ_ACCESSOR, Kind.SETTER,
    Kind.STATIC, Kind.STRUCTURE, Kind.SUBSCRIPT, Kind.TYPE_ALIAS, Kind.UNSAFE_ADDRESSOR,
    Kind.UNSAFE_MUTABLE_ADDRESSOR, Kind.VARIABLE, Kind.WILL_SET, Kind.OPAQUE_RETURN_TYPE_OF,
])

_DECL_NAME_KINDS = frozenset([
    Kind.IDENTIFIER, Kind.LOCAL_DECL_NAME, Kind.PRIVATE_DECL_NAME, Kind.RELATED_ENTITY_DECL_NAME,
    Kind.PREFIX_OPERATOR, Kind.POSTFIX_OPERATOR, Kind.INFIX_OPERATOR,
])

_ANY_GENERIC_KINDS = frozenset([
    Kind.STRUCTURE, Kind.CLASS, Kind.ENUM, Kind.PROTOCOL, Kind.OTHER_NOMINAL_TYPE, Kind.TYPE_ALIAS,
])

_REQUIREMENT_KINDS = frozenset([
    Kind.DEPENDENT_GENERIC_SAME_TYPE_REQUIREMENT, Kind.DEPENDENT_GENERIC_LAYOUT_REQUIREMENT,
    Kind.DEPENDENT_GENERIC_CONFORMANCE_REQUIREMENT,
])

FUNCTION_ATTR_KINDS = frozenset([
    Kind.FUNCTION_SIGNATURE_SPECIALIZATION, Kind.GENERIC_SPECIALIZATION,
    Kind.GENERIC_SPECIALIZATION_PRESPECIALIZED, Kind.INLINED_GENERIC_FUNCTION,
    Kind.GENERIC_SPECIALIZATION_NOT_RE_ABSTRACTED, Kind.GENERIC_PARTIAL_SPECIALIZATION,
    Kind.GENERIC_PARTIAL_SPECIALIZATION_NOT_RE_ABSTRACTED, Kind.GENERIC_SPECIALIZATION_IN_RESILIENCE_DOMAIN,
    Kind.OBJ_C_ATTRIBUTE, Kind.NON_OBJ_C_ATTRIBUTE, Kind.DYNAMIC_ATTRIBUTE,
    Kind.DIRECT_METHOD_REFERENCE_ATTRIBUTE, Kind.V_TABLE_ATTRIBUTE, Kind.PARTIAL_APPLY_FORWARDER,
    Kind.PARTIAL_APPLY_OBJ_C_FORWARDER, Kind.OUTLINED_VARIABLE, Kind.OUTLINED_BRIDGED_METHOD,
    Kind.MERGED_FUNCTION, Kind.DYNAMICALLY_REPLACEABLE_FUNCTION_IMPL,
    Kind.DYNAMICALLY_REPLACEABLE_FUNCTION_KEY, Kind.DYNAMICALLY_REPLACEABLE_FUNCTION_VAR,
    Kind.ASYNC_FUNCTION_POINTER, Kind.ASYNC_AWAIT_RESUME_PARTIAL_FUNCTION,
    Kind.ASYNC_SUSPEND_RESUME_PARTIAL_FUNCTION,
])


def is_context(k: Kind) -> bool:
    return k in _CONTEXT_KINDS


def is_decl_name(k: Kind) -> bool:
    return k in _DECL_NAME_KINDS


def is_any_generic(k: Kind) -> bool:
    return k in _ANY_GENERIC_KINDS


def is_entity(k: Kind) -> bool:
    return k == Kind.TYPE or is_context(k)


def is_requirement(k: Kind) -> bool:
    return k in _REQUIREMENT_KINDS


def is_function_attr(k: Kind) -> bool:
    return k in FUNCTION_ATTR_KINDS


# ---- 표준 치환 `S<c>` / `Sc<c>` ----
STANDARD_TYPES: Dict[str, tuple] = {
    "A": (Kind.STRUCTURE, "AutoreleasingUnsafeMutablePointer"),
    "a": (Kind.STRUCTURE, "Array"),
    "b": (Kind.STRUCTURE, "Bool"),
    "D": (Kind.STRUCTURE, "Dictionary"),
    "d": (Kind.STRUCTURE, "Double"),
    "f": (Kind.STRUCTURE, "Float"),
    "h": (Kind.STRUCTURE, "Set"),
    "I": (Kind.STRUCTURE, "DefaultIndices"),
    "i": (Kind.STRUCTURE, "Int"),
    "J": (Kind.STRUCTURE, "Character"),
    "N": (Kind.STRUCTURE, "ClosedRange"),
    "n": (Kind.STRUCTURE, "Range"),
    "O": (Kind.STRUCTURE, "ObjectIdentifier"),
    "P": (Kind.STRUCTURE, "UnsafePointer"),
    "p": (Kind.STRUCTURE, "UnsafeMutablePointer"),
    "R": (Kind.STRUCTURE, "UnsafeBufferPointer"),
    "r": (Kind.STRUCTURE, "UnsafeMutableBufferPointer"),
    "S": (Kind.STRUCTURE, "String"),
    "s": (Kind.STRUCTURE, "Substring"),
    "u": (Kind.STRUCTURE, "UInt"),
    "V": (Kind.STRUCTURE, "UnsafeRawPointer"),
    "v": (Kind.STRUCTURE, "UnsafeMutableRawPointer"),
    "W": (Kind.STRUCTURE, "UnsafeRawBufferPointer"),
    "w": (Kind.STRUCTURE, "UnsafeMutableRawBufferPointer"),
    "q": (Kind.ENUM, "Optional"),
    "B": (Kind.PROTOCOL, "BinaryFloatingPoint"),
    "E": (Kind.PROTOCOL, "Encodable"),
    "e": (Kind.PROTOCOL, "Decodable"),
    "F": (Kind.PROTOCOL, "FloatingPoint"),
    "G": (Kind.PROTOCOL, "RandomNumberGenerator"),
    "H": (Kind.PROTOCOL, "Hashable"),
    "j": (Kind.PROTOCOL, "Numeric"),
    "K": (Kind.PROTOCOL, "BidirectionalCollection"),
    "k": (Kind.PROTOCOL, "RandomAccessCollection"),
    "L": (Kind.PROTOCOL, "Comparable"),
    "l": (Kind.PROTOCOL, "Collection"),
    "M": (Kind.PROTOCOL, "MutableCollection"),
    "m": (Kind.PROTOCOL, "RangeReplaceableCollection"),
    "Q": (Kind.PROTOCOL, "Equatable"),
    "T": (Kind.PROTOCOL, "Sequence"),
    "t": (Kind.PROTOCOL, "IteratorProtocol"),
    "U": (Kind.PROTOCOL, "UnsignedInteger"),
    "X": (Kind.PROTOCOL, "RangeExpression"),
    "x": (Kind.PROTOCOL, "Strideable"),
    "Y": (Kind.PROTOCOL, "RawRepresentable"),
    "y": (Kind.PROTOCOL, "StringProtocol"),
    "Z": (Kind.PROTOCOL, "SignedInteger"),
    "z": (Kind.PROTOCOL, "BinaryInteger"),
}

STANDARD_CONCURRENCY_TYPES: Dict[str, tuple] = {
    "A": (Kind.PROTOCOL, "Actor"),
    "C": (Kind.STRUCTURE, "CheckedContinuation"),
    "c": (Kind.STRUCTURE, "UnsafeContinuation"),
    "E": (Kind.STRUCTURE, "CancellationError"),
    "e": (Kind.STRUCTURE, "UnownedSerialExecutor"),
    "F": (Kind.PROTOCOL, "Executor"),
    "f": (Kind.PROTOCOL, "SerialExecutor"),
    "G": (Kind.STRUCTURE, "TaskGroup"),
    "g": (Kind.STRUCTURE, "ThrowingTaskGroup"),
    "I": (Kind.PROTOCOL, "AsyncIteratorProtocol"),
    "i": (Kind.PROTOCOL, "AsyncSequence"),
    "J": (Kind.STRUCTURE, "UnownedJob"),
    "M": (Kind.CLASS, "MainActor"),
    "P": (Kind.STRUCTURE, "TaskPriority"),
    "S": (Kind.STRUCTURE, "AsyncStream"),
    "s": (Kind.STRUCTURE, "AsyncThrowingStream"),
    "T": (Kind.STRUCTURE, "Task"),
    "t": (Kind.STRUCTURE, "UnsafeCurrentTask"),
}

# 연산자 식별자 `o` : 소문자 → 기호
_OP_CHARS = "& @/= >    <*!|+?%-~   ^ ."

KindPred = Union[Kind, Sequence[Kind], Callable[[Kind], bool], None]


class Demangler(SpecialProductions):
    """
    Demangler
    =========
    parse 호출 하나가 소유하는 상태 묶음: 커서, 치환표, 단어 사전, 가드, 노드 스택.
    인스턴스를 여러 호출에서 공유하지 않는다.
    """

    def __init__(self, text: str, limits: Limits = DEFAULT_LIMITS):
        self.cur = Cursor(text)
        self.guard = Guard(self.cur, limits)
        self.subs = SubstitutionTable(self.cur)
        self.words = WordTable()
        self.stack: List[Node] = []
        self.old_function_type_mangling = False
        self._dispatch: Dict[str, Callable[[], Node]] = {
            "A": self.demangle_multi_substitutions,
            "B": self.demangle_builtin_type,
            "C": lambda: self.demangle_any_generic_type(Kind.CLASS),
            "D": lambda: self._node(Kind.TYPE_MANGLING, None, self._pop_req(Kind.TYPE)),
            "E": self.demangle_extension_context,
            "F": self.demangle_plain_function,
            "G": self.demangle_bound_generic_type,
            "I": self.demangle_impl_function_type,
            "K": lambda: self._node(Kind.THROWS_ANNOTATION),
            "L": self.demangle_local_identifier,
            "M": self.demangle_metatype,
            "N": lambda: self._node(Kind.TYPE_METADATA, None, self._pop_req(Kind.TYPE)),
            "O": lambda: self.demangle_any_generic_type(Kind.ENUM),
            "P": lambda: self.demangle_any_generic_type(Kind.PROTOCOL),
            "Q": self.demangle_archetype,
            "R": self.demangle_generic_requirement,
            "S": self.demangle_standard_substitution,
            "T": self.demangle_thunk_or_specialization,
            "V": lambda: self.demangle_any_generic_type(Kind.STRUCTURE),
            "W": self.demangle_witness,
            "X": self.demangle_special_type,
            "Y": self.demangle_type_annotation,
            "Z": lambda: self._node(Kind.STATIC, None, self._pop_req(is_entity)),
            "a": lambda: self.demangle_any_generic_type(Kind.TYPE_ALIAS),
            "c": lambda: self.pop_function_type(Kind.FUNCTION_TYPE),
            "d": lambda: self._node(Kind.VARIADIC_MARKER),
            "f": self.demangle_function_entity,
            "h": lambda: self._type(self._node(Kind.SHARED, None, self.pop_type_and_get_child())),
            "i": self.demangle_subscript,
            "l": lambda: self.demangle_generic_signature(has_param_counts=False),
            "m": lambda: self._type(self._node(Kind.METATYPE, None, self._pop_req(Kind.TYPE))),
            "n": lambda: self._type(self._node(Kind.OWNED, None, self.pop_type_and_get_child())),
            "o": self.demangle_operator_identifier,
            "p": self.demangle_protocol_list_type,
            "q": lambda: self._type(self.demangle_generic_param_index()),
            "r": lambda: self.demangle_generic_signature(has_param_counts=True),
            "s": lambda: self._node(Kind.MODULE, STDLIB_NAME),
            "t": self.pop_tuple,
            "u": self.demangle_generic_type,
            "v": self.demangle_variable,
            "w": self.demangle_value_witness,
            "x": lambda: self._type(self.dependent_generic_param_type(0, 0)),
            "y": lambda: self._node(Kind.EMPTY_LIST),
            "z": lambda: self._type(self._node(Kind.IN_OUT, None, self.pop_type_and_get_child())),
            "_": lambda: self._node(Kind.FIRST_ELEMENT_MARKER),
        }

    # ------------------------------
    # 오류/노드 헬퍼
    # ------------------------------

    def _malformed(self, message: str) -> MalformedInput:
        return self.cur.fail(message)

    def _unknown(self, what: str, pos: Optional[int] = None) -> UnknownProduction:
        p = self.cur.pos if pos is None else pos
        return UnknownProduction(f"Unknown {what}", self.cur.text, p)

    def _node(self, kind: Kind, contents=None, *children: Optional[Node]) -> Node:
        """자식 중 하나라도 None이면 MalformedInput(피연산자 누락)."""
        for c in children:
            if c is None:
                raise self._malformed(f"Missing operand for {kind.value}")
        self.guard.count_node()
        n = Node(kind, contents, list(children))
        self.guard.check_depth(n.depth)
        return n

    def _add(self, parent: Node, child: Optional[Node]) -> Node:
        if child is None:
            raise self._malformed(f"Missing operand for {parent.kind.value}")
        parent.add_child(child)
        self.guard.check_depth(parent.depth)
        return parent

    def _add_opt(self, parent: Node, child: Optional[Node]) -> Node:
        if child is not None:
            self._add(parent, child)
        return parent

    def _type(self, child: Optional[Node]) -> Node:
        return self._node(Kind.TYPE, None, child)

    def _swift_type(self, kind: Kind, name: str) -> Node:
        return self._type(self._node(kind, None, self._node(Kind.MODULE, STDLIB_NAME),
                                     self._node(Kind.IDENTIFIER, name)))

    def _change_kind(self, n: Node, kind: Kind) -> Node:
        """같은 내용/자식으로 종류만 바꾼 새 노드(원본은 치환표가 공유하므로 건드리지 않는다)"""
        return self._node(kind, n.contents, *n.children)

    # ------------------------------
    # 노드 스택
    # ------------------------------

    def push(self, n: Node) -> None:
        self.stack.append(n)

    def _pop(self, match: KindPred = None) -> Optional[Node]:
        if not self.stack:
            return None
        top = self.stack[-1]
        if match is None:
            ok = True
        elif isinstance(match, Kind):
            ok = top.kind == match
        elif callable(match):
            ok = match(top.kind)
        else:
            ok = top.kind in match
        if not ok:
            return None
        return self.stack.pop()

    def _pop_req(self, match: KindPred = None) -> Node:
        n = self._pop(match)
        if n is None:
            want = match.value if isinstance(match, Kind) else "operand"
            got = self.stack[-1].kind.value if self.stack else "empty stack"
            raise self._malformed(f"Expected {want} on node stack, found {got}")
        return n

    # ------------------------------
    # 최상위
    # ------------------------------

    def demangle_symbol(self) -> Node:
        text = self.cur.text
        for p in UNSUPPORTED_PREFIXES:
            if text.startswith(p):
                raise UnsupportedManglingVersion(f"Mangling prefix {p!r} is not supported", text, 0)
        plen = mangling_prefix_length(text)
        if plen == 0:
            raise self._malformed("Unrecognized mangling prefix")
        self.old_function_type_mangling = text.startswith("_T0")
        self.cur.pos = plen
        if self.cur.at_end():
            raise self._malformed("Missing symbol body after prefix")
        self.parse_and_push_nodes()

        top = self._node(Kind.GLOBAL)
        parent = top
        while True:
            attr = self._pop(is_function_attr)
            if attr is None:
                break
            self._add(parent, attr)
            if attr.kind in (Kind.PARTIAL_APPLY_FORWARDER, Kind.PARTIAL_APPLY_OBJ_C_FORWARDER):
                parent = attr
        for n in self.stack:
            self._add(parent, n.children[0] if n.kind == Kind.TYPE else n)
        if not top.children:
            raise self._malformed("Symbol has no content")
        return top

    def demangle_type(self) -> Node:
        """접두사 없는 타입 맹글. 스택에 Type 하나만 남아야 한다."""
        if self.cur.at_end():
            raise self._malformed("Empty type mangling")
        self.parse_and_push_nodes()
        if len(self.stack) != 1 or self.stack[0].kind != Kind.TYPE:
            raise self._malformed("Type mangling did not reduce to a single type")
        return self.stack[0]

    def parse_and_push_nodes(self) -> None:
        while not self.cur.at_end():
            self.push(self.demangle_operator())

    def demangle_operator(self) -> Node:
        c = self.cur.advance()
        fn = self._dispatch.get(c)
        if fn is not None:
            return fn()
        self.cur.push_back()
        if c == ".":
            return self._node(Kind.SUFFIX, self.cur.take_all())
        if self.cur.is_digit():
            return self.demangle_identifier()
        raise self._unknown(f"operator {c!r}")

    # ------------------------------
    # 식별자
    # ------------------------------

    def demangle_identifier(self) -> Node:
        ident = self._node(Kind.IDENTIFIER, decode_identifier(self.cur, self.words))
        self.subs.record(ident)
        return ident

    def demangle_index(self) -> int:
        """`_` → 0, `<n>_` → n+1"""
        if self.cur.next_if("_"):
            return 0
        if self.cur.is_digit():
            n = self.cur.read_integer()
            if self.cur.next_if("_"):
                return n + 1
        raise self._malformed("Malformed index")

    def demangle_index_as_node(self) -> Node:
        return self._node(Kind.NUMBER, self.demangle_index())

    def demangle_natural(self) -> Optional[int]:
        return self.cur.read_integer_opt()

    def demangle_local_identifier(self) -> Node:
        if self.cur.next_if("L"):
            discriminator = self._pop_req(Kind.IDENTIFIER)
            name = self._pop_req(is_decl_name)
            return self._node(Kind.PRIVATE_DECL_NAME, None, discriminator, name)
        if self.cur.next_if("l"):
            discriminator = self._pop_req(Kind.IDENTIFIER)
            return self._node(Kind.PRIVATE_DECL_NAME, None, discriminator)
        c = self.cur.peek()
        if ("a" <= c <= "j") or ("A" <= c <= "J"):
            self.cur.advance()
            name = self._pop_req()
            return self._node(Kind.RELATED_ENTITY_DECL_NAME, None, self._node(Kind.IDENTIFIER, c), name)
        discriminator = self.demangle_index_as_node()
        name = self._pop_req(is_decl_name)
        return self._node(Kind.LOCAL_DECL_NAME, None, discriminator, name)

    def demangle_operator_identifier(self) -> Node:
        start = self.cur.pos
        ident = self._pop_req(Kind.IDENTIFIER)
        chars: List[str] = []
        for c in ident.text:
            if ord(c) >= 0x80:
                chars.append(c)
                continue
            if not ("a" <= c <= "z"):
                raise self._unknown(f"operator character {c!r}", start)
            o = _OP_CHARS[ord(c) - ord("a")]
            if o == " ":
                raise self._unknown(f"operator character {c!r}", start)
            chars.append(o)
        op = "".join(chars)
        c = self.cur.advance()
        if c == "i":
            return self._node(Kind.INFIX_OPERATOR, op)
        if c == "p":
            return self._node(Kind.PREFIX_OPERATOR, op)
        if c == "P":
            return self._node(Kind.POSTFIX_OPERATOR, op)
        raise self._unknown(f"operator fixity {c!r}", self.cur.pos - 1)

    # ------------------------------
    # 치환
    # ------------------------------

    def demangle_multi_substitutions(self) -> Node:
        repeat = -1
        while True:
            c = self.cur.advance()
            if "a" <= c <= "z":
                self.push(self._push_multi_substitutions(repeat, decode_multi_index(c)))
                repeat = -1
                continue
            if "A" <= c <= "Z":
                return self._push_multi_substitutions(repeat, decode_multi_index(c))
            if c == "_":
                return self.subs.resolve(repeat + 27)
            self.cur.push_back()
            repeat = self.demangle_natural()
            if repeat is None:
                raise self._malformed(f"Unexpected {c!r} in substitution")

    def _push_multi_substitutions(self, repeat: int, idx: int) -> Node:
        if repeat > MAX_REPEAT_COUNT:
            raise self._malformed("Substitution repeat count too large")
        n = self.subs.resolve(idx)
        self._push_repeated(n, repeat)
        return n

    def _push_repeated(self, n: Node, repeat: int) -> None:
        """반복 치환은 같은 노드를 여러 번 올리므로, 올릴 때마다 노드 수에 센다."""
        while repeat > 1:
            self.guard.count_node()
            self.push(n)
            repeat -= 1

    def demangle_standard_substitution(self) -> Node:
        c = self.cur.advance()
        if c == "o":
            return self._node(Kind.MODULE, MANGLING_MODULE_OBJC)
        if c == "C":
            return self._node(Kind.MODULE, MANGLING_MODULE_CLANG_IMPORTER)
        if c == "g":
            opt = self._type(self._node(Kind.BOUND_GENERIC_ENUM, None,
                                        self._swift_type(Kind.ENUM, "Optional"),
                                        self._node(Kind.TYPE_LIST, None, self._pop_req(Kind.TYPE))))
            self.subs.record(opt)
            return opt
        self.cur.push_back()
        repeat = self.demangle_natural()
        if repeat is not None and repeat > MAX_REPEAT_COUNT:
            raise self._malformed("Substitution repeat count too large")
        second_level = self.cur.next_if("c")
        pos = self.cur.pos
        c = self.cur.advance()
        table = STANDARD_CONCURRENCY_TYPES if second_level else STANDARD_TYPES
        entry = table.get(c)
        if entry is None:
            raise self._unknown(f"standard substitution {'Sc' if second_level else 'S'}{c}", pos)
        n = self._swift_type(*entry)
        if repeat is not None:
            self._push_repeated(n, repeat)
        return n

    # ------------------------------
    # 문맥/명목 타입
    # ------------------------------

    def pop_module(self) -> Optional[Node]:
        ident = self._pop(Kind.IDENTIFIER)
        if ident is not None:
            return self._change_kind(ident, Kind.MODULE)
        return self._pop(Kind.MODULE)

    def pop_context(self) -> Node:
        mod = self.pop_module()
        if mod is not None:
            return mod
        ty = self._pop(Kind.TYPE)
        if ty is not None:
            child = ty.children[0]
            if not is_context(child.kind):
                raise self._malformed(f"{child.kind.value} cannot be used as a context")
            return child
        return self._pop_req(is_context)

    def pop_type_and_get_child(self) -> Node:
        return self._pop_req(Kind.TYPE).children[0]

    def pop_type_and_get_any_generic(self) -> Node:
        child = self.pop_type_and_get_child()
        if not is_any_generic(child.kind):
            raise self._malformed(f"Expected a nominal type, found {child.kind.value}")
        return child

    def demangle_any_generic_type(self, kind: Kind) -> Node:
        name = self._pop_req(is_decl_name)
        ctx = self.pop_context()
        nty = self._type(self._node(kind, None, ctx, name))
        self.subs.record(nty)
        return nty

    def demangle_extension_context(self) -> Node:
        sig = self._pop(Kind.DEPENDENT_GENERIC_SIGNATURE)
        module = self.pop_module()
        ty = self.pop_type_and_get_any_generic()
        ext = self._node(Kind.EXTENSION, None, module, ty)
        return self._add_opt(ext, sig)

    def pop_protocol(self) -> Node:
        ty = self._pop(Kind.TYPE)
        if ty is not None:
            if not ty.children or ty.children[0].kind != Kind.PROTOCOL:
                raise self._malformed("Expected a protocol type")
            return ty
        name = self._pop_req(is_decl_name)
        ctx = self.pop_context()
        return self._type(self._node(Kind.PROTOCOL, None, ctx, name))

    # ------------------------------
    # 제네릭 적용
    # ------------------------------

    def pop_type_list(self) -> Node:
        root = self._node(Kind.TYPE_LIST)
        if self._pop(Kind.EMPTY_LIST) is None:
            while True:
                first = self._pop(Kind.FIRST_ELEMENT_MARKER) is not None
                self._add(root, self._pop_req(Kind.TYPE))
                if first:
                    break
            root.reverse_children()
        return root

    def demangle_bound_generic_type(self) -> Node:
        type_lists: List[Node] = []
        while True:
            tlist = self._node(Kind.TYPE_LIST)
            type_lists.append(tlist)
            while True:
                ty = self._pop(Kind.TYPE)
                if ty is None:
                    break
                self._add(tlist, ty)
            tlist.reverse_children()
            if self._pop(Kind.EMPTY_LIST) is not None:
                break
            if self._pop(Kind.FIRST_ELEMENT_MARKER) is None:
                raise self._malformed("Expected generic argument list separator")
        nominal = self.pop_type_and_get_any_generic()
        bound = self.demangle_bound_generic_args(nominal, type_lists, 0)
        nty = self._type(bound)
        self.subs.record(nty)
        return nty

    def demangle_bound_generic_args(self, nominal: Node, type_lists: List[Node], idx: int) -> Node:
        with self.guard:
            if idx >= len(type_lists) or not nominal.children:
                raise self._malformed("Too few generic argument lists")
            context = nominal.children[0]
            consumes = nominal.kind not in (Kind.VARIABLE, Kind.SUBSCRIPT, Kind.IMPLICIT_CLOSURE,
                                            Kind.EXPLICIT_CLOSURE, Kind.DEFAULT_ARGUMENT_INITIALIZER,
                                            Kind.INITIALIZER)
            args = type_lists[idx]
            if consumes:
                idx += 1
            if idx < len(type_lists):
                if context.kind == Kind.EXTENSION:
                    parent = self.demangle_bound_generic_args(context.children[1], type_lists, idx)
                    parent = self._node(Kind.EXTENSION, None, context.children[0], parent)
                    if len(context.children) == 3:
                        self._add(parent, context.children[2])
                else:
                    parent = self.demangle_bound_generic_args(context, type_lists, idx)
                nominal = self._node(nominal.kind, None, parent, *nominal.children[1:])
            if not consumes or not args.children:
                return nominal
            bound_kinds = {
                Kind.CLASS: Kind.BOUND_GENERIC_CLASS,
                Kind.STRUCTURE: Kind.BOUND_GENERIC_STRUCTURE,
                Kind.ENUM: Kind.BOUND_GENERIC_ENUM,
                Kind.PROTOCOL: Kind.BOUND_GENERIC_PROTOCOL,
                Kind.OTHER_NOMINAL_TYPE: Kind.BOUND_GENERIC_OTHER_NOMINAL_TYPE,
                Kind.TYPE_ALIAS: Kind.BOUND_GENERIC_TYPE_ALIAS,
            }
            if nominal.kind in (Kind.FUNCTION, Kind.CONSTRUCTOR):
                return self._node(Kind.BOUND_GENERIC_FUNCTION, None, nominal, args)
            bk = bound_kinds.get(nominal.kind)
            if bk is None:
                if nominal.kind == Kind.MODULE:
                    raise self._malformed("Too many generic argument lists")
                raise self._malformed(f"{nominal.kind.value} cannot have generic arguments")
            return self._node(bk, None, self._type(nominal), args)

    def demangle_generic_type(self) -> Node:
        sig = self._pop_req(Kind.DEPENDENT_GENERIC_SIGNATURE)
        ty = self._pop_req(Kind.TYPE)
        return self._type(self._node(Kind.DEPENDENT_GENERIC_TYPE, None, sig, ty))

    # ------------------------------
    # 함수/튜플
    # ------------------------------

    def pop_function_type(self, kind: Kind) -> Node:
        ft = self._node(kind)
        self._add_opt(ft, self._pop(Kind.GLOBAL_ACTOR_FUNCTION_TYPE))
        self._add_opt(ft, self._pop(Kind.THROWS_ANNOTATION))
        self._add_opt(ft, self._pop(Kind.CONCURRENT_FUNCTION_TYPE))
        self._add_opt(ft, self._pop(Kind.ASYNC_ANNOTATION))
        self._add(ft, self.pop_function_params(Kind.ARGUMENT_TUPLE))
        self._add(ft, self.pop_function_params(Kind.RETURN_TYPE))
        return self._type(ft)

    def pop_function_params(self, kind: Kind) -> Node:
        if self._pop(Kind.EMPTY_LIST) is not None:
            params = self._type(self._node(Kind.TUPLE))
        else:
            params = self._pop_req(Kind.TYPE)
        return self._node(kind, None, params)

    def pop_function_param_labels(self, ty: Optional[Node]) -> Tuple[Optional[Node], Optional[Node]]:
        """
        인자 레이블 목록을 꺼낸다. (labels, ty) 쌍을 돌려준다.
        `_T0` 형식에서는 레이블이 튜플 원소 이름으로 붙어 있으므로, 이름을 떼어 낸
        새 함수 타입을 만들어 ty 자리에 돌려준다(공유 노드는 고치지 않는다).
        """
        if not self.old_function_type_mangling and self._pop(Kind.EMPTY_LIST) is not None:
            return self._node(Kind.LABEL_LIST), ty
        if ty is None or ty.kind != Kind.TYPE:
            return None, ty
        fn = ty.children[0]
        generic = None
        if fn.kind == Kind.DEPENDENT_GENERIC_TYPE:
            generic = fn
            fn = fn.children[1].children[0]
        if fn.kind not in (Kind.FUNCTION_TYPE, Kind.NO_ESCAPE_FUNCTION_TYPE):
            return None, ty
        arg_idx = next((i for i, c in enumerate(fn.children) if c.kind == Kind.ARGUMENT_TUPLE), None)
        if arg_idx is None:
            return None, ty
        params = fn.children[arg_idx].children[0].children[0]
        n_params = len(params.children) if params.kind == Kind.TUPLE else 1
        if n_params == 0:
            return None, ty
        if self.old_function_type_mangling:
            return self._split_tuple_labels(ty, generic, fn, arg_idx, params)
        labels = self._node(Kind.LABEL_LIST)
        has_labels = False
        for _ in range(n_params):
            label = self._pop((Kind.IDENTIFIER, Kind.FIRST_ELEMENT_MARKER))
            if label is None:
                raise self._malformed("Missing argument label")
            self._add(labels, label)
            has_labels = has_labels or label.kind != Kind.FIRST_ELEMENT_MARKER
        if not has_labels:
            return self._node(Kind.LABEL_LIST), ty
        labels.reverse_children()
        return labels, ty

    def _split_tuple_labels(self, ty: Node, generic: Optional[Node], fn: Node,
                            arg_idx: int, params: Node) -> Tuple[Node, Node]:
        if params.kind != Kind.TUPLE:
            return self._node(Kind.LABEL_LIST), ty
        labels = self._node(Kind.LABEL_LIST)
        elems: List[Node] = []
        has_labels = False
        for elem in params.children:
            name = next((c for c in elem.children if c.kind == Kind.TUPLE_ELEMENT_NAME), None)
            if name is None:
                self._add(labels, self._node(Kind.FIRST_ELEMENT_MARKER))
                elems.append(elem)
                continue
            has_labels = True
            self._add(labels, self._node(Kind.IDENTIFIER, name.text))
            rest = [c for c in elem.children if c is not name]
            elems.append(self._node(Kind.TUPLE_ELEMENT, None, *rest))
        if not has_labels:
            return self._node(Kind.LABEL_LIST), ty
        args = self._node(Kind.ARGUMENT_TUPLE, None, self._type(self._node(Kind.TUPLE, None, *elems)))
        fn_children = list(fn.children)
        fn_children[arg_idx] = args
        new_fn = self._type(self._node(fn.kind, fn.contents, *fn_children))
        if generic is not None:
            new_fn = self._type(self._node(Kind.DEPENDENT_GENERIC_TYPE, None, generic.children[0], new_fn))
        return labels, new_fn

    def pop_tuple(self) -> Node:
        root = self._node(Kind.TUPLE)
        if self._pop(Kind.EMPTY_LIST) is None:
            while True:
                first = self._pop(Kind.FIRST_ELEMENT_MARKER) is not None
                elem = self._node(Kind.TUPLE_ELEMENT)
                variadic = self._pop(Kind.VARIADIC_MARKER)
                ident = self._pop(Kind.IDENTIFIER)
                if ident is not None:
                    self._add(elem, self._node(Kind.TUPLE_ELEMENT_NAME, ident.text))
                self._add(elem, self._pop_req(Kind.TYPE))
                self._add_opt(elem, variadic)
                self._add(root, elem)
                if first:
                    break
            root.reverse_children()
        return self._type(root)

    # ------------------------------
    # 엔티티
    # ------------------------------

    def demangle_plain_function(self) -> Node:
        sig = self._pop(Kind.DEPENDENT_GENERIC_SIGNATURE)
        ty = self.pop_function_type(Kind.FUNCTION_TYPE)
        labels, ty = self.pop_function_param_labels(ty)
        if sig is not None:
            ty = self._type(self._node(Kind.DEPENDENT_GENERIC_TYPE, None, sig, ty))
        name = self._pop_req(is_decl_name)
        ctx = self.pop_context()
        if labels is not None:
            return self._node(Kind.FUNCTION, None, ctx, name, labels, ty)
        return self._node(Kind.FUNCTION, None, ctx, name, ty)

    def demangle_entity(self, kind: Kind) -> Node:
        ty = self._pop_req(Kind.TYPE)
        labels, ty = self.pop_function_param_labels(ty)
        name = self._pop_req(is_decl_name)
        ctx = self.pop_context()
        if labels is not None:
            return self._node(kind, None, ctx, name, labels, ty)
        return self._node(kind, None, ctx, name, ty)

    def demangle_variable(self) -> Node:
        return self.demangle_accessor(self.demangle_entity(Kind.VARIABLE))

    def demangle_subscript(self) -> Node:
        private_name = self._pop(Kind.PRIVATE_DECL_NAME)
        ty = self._pop_req(Kind.TYPE)
        labels, ty = self.pop_function_param_labels(ty)
        ctx = self.pop_context()
        sub = self._node(Kind.SUBSCRIPT, None, ctx)
        self._add_opt(sub, labels)
        self._add(sub, ty)
        self._add_opt(sub, private_name)
        return self.demangle_accessor(sub)

    _ACCESSORS = {
        "m": Kind.MATERIALIZE_FOR_SET, "s": Kind.SETTER, "g": Kind.GETTER, "G": Kind.GLOBAL_GETTER,
        "w": Kind.WILL_SET, "W": Kind.DID_SET, "r": Kind.READ_ACCESSOR, "M": Kind.MODIFY_ACCESSOR,
    }
    _MUTABLE_ADDRESSORS = {
        "O": Kind.OWNING_MUTABLE_ADDRESSOR, "o": Kind.NATIVE_OWNING_MUTABLE_ADDRESSOR,
        "p": Kind.NATIVE_PINNING_MUTABLE_ADDRESSOR, "u": Kind.UNSAFE_MUTABLE_ADDRESSOR,
    }
    _ADDRESSORS = {
        "O": Kind.OWNING_ADDRESSOR, "o": Kind.NATIVE_OWNING_ADDRESSOR,
        "p": Kind.NATIVE_PINNING_ADDRESSOR, "u": Kind.UNSAFE_ADDRESSOR,
    }

    def demangle_accessor(self, child: Node) -> Node:
        pos = self.cur.pos
        c = self.cur.advance()
        if c == "p":
            return child
        if c in ("a", "l"):
            table = self._MUTABLE_ADDRESSORS if c == "a" else self._ADDRESSORS
            c2 = self.cur.advance()
            kind = table.get(c2)
            if kind is None:
                raise self._unknown(f"addressor kind {c}{c2}", pos)
        else:
            kind = self._ACCESSORS.get(c)
            if kind is None:
                raise self._unknown(f"accessor kind {c!r}", pos)
        return self._node(kind, None, child)

    _FUNCTION_ENTITIES = {
        "D": (Kind.DEALLOCATOR, "none"),
        "d": (Kind.DESTRUCTOR, "none"),
        "E": (Kind.I_VAR_DESTROYER, "none"),
        "e": (Kind.I_VAR_INITIALIZER, "none"),
        "i": (Kind.INITIALIZER, "none"),
        "C": (Kind.ALLOCATOR, "type_and_private_name"),
        "c": (Kind.CONSTRUCTOR, "type_and_private_name"),
        "U": (Kind.EXPLICIT_CLOSURE, "type_and_index"),
        "u": (Kind.IMPLICIT_CLOSURE, "type_and_index"),
        "A": (Kind.DEFAULT_ARGUMENT_INITIALIZER, "index"),
    }

    def demangle_function_entity(self) -> Node:
        pos = self.cur.pos
        c = self.cur.advance()
        if c == "p":
            return self.demangle_entity(Kind.GENERIC_TYPE_PARAM_DECL)
        entry = self._FUNCTION_ENTITIES.get(c)
        if entry is None:
            raise self._unknown(f"function entity kind {c!r}", pos)
        kind, args = entry
        name_or_index = param_type = labels = None
        if args == "type_and_private_name":
            name_or_index = self._pop(Kind.PRIVATE_DECL_NAME)
            param_type = self._pop_req(Kind.TYPE)
            labels, param_type = self.pop_function_param_labels(param_type)
        elif args == "type_and_index":
            name_or_index = self.demangle_index_as_node()
            param_type = self._pop_req(Kind.TYPE)
        elif args == "index":
            name_or_index = self.demangle_index_as_node()
        entity = self._node(kind, None, self.pop_context())
        if args == "index":
            self._add(entity, name_or_index)
        elif args == "type_and_private_name":
            self._add_opt(entity, labels)
            self._add(entity, param_type)
            self._add_opt(entity, name_or_index)
        elif args == "type_and_index":
            self._add(entity, name_or_index)
            self._add(entity, param_type)
        return entity

    # ------------------------------
    # 제네릭 시그니처/매개변수
    # ------------------------------

    def dependent_generic_param_type(self, depth: int, index: int) -> Node:
        return self._node(Kind.DEPENDENT_GENERIC_PARAM_TYPE, None,
                          self._node(Kind.INDEX, depth), self._node(Kind.INDEX, index))

    def demangle_generic_param_index(self) -> Node:
        if self.cur.next_if("d"):
            depth = self.demangle_index() + 1
            index = self.demangle_index()
            return self.dependent_generic_param_type(depth, index)
        if self.cur.next_if("z"):
            return self.dependent_generic_param_type(0, 0)
        return self.dependent_generic_param_type(0, self.demangle_index() + 1)

    def demangle_generic_signature(self, has_param_counts: bool) -> Node:
        sig = self._node(Kind.DEPENDENT_GENERIC_SIGNATURE)
        if has_param_counts:
            while not self.cur.next_if("l"):
                count = 0 if self.cur.next_if("z") else self.demangle_index() + 1
                self._add(sig, self._node(Kind.DEPENDENT_GENERIC_PARAM_COUNT, count))
        else:
            self._add(sig, self._node(Kind.DEPENDENT_GENERIC_PARAM_COUNT, 1))
        n_counts = len(sig.children)
        while True:
            req = self._pop(is_requirement)
            if req is None:
                break
            self._add(sig, req)
        sig.reverse_children(n_counts)
        return sig

    _REQUIREMENT_CODES = {
        "c": ("base_class", "assoc"), "C": ("base_class", "compound_assoc"),
        "b": ("base_class", "generic"), "B": ("base_class", "substitution"),
        "t": ("same_type", "assoc"), "T": ("same_type", "compound_assoc"),
        "s": ("same_type", "generic"), "S": ("same_type", "substitution"),
        "m": ("layout", "assoc"), "M": ("layout", "compound_assoc"),
        "l": ("layout", "generic"), "L": ("layout", "substitution"),
        "p": ("protocol", "assoc"), "P": ("protocol", "compound_assoc"),
        "Q": ("protocol", "substitution"),
    }

    def demangle_generic_requirement(self) -> Node:
        c = self.cur.advance()
        entry = self._REQUIREMENT_CODES.get(c)
        if entry is None:
            self.cur.push_back()
            entry = ("protocol", "generic")
        constraint, type_kind = entry

        if type_kind == "generic":
            constr_ty = self._type(self.demangle_generic_param_index())
        elif type_kind == "assoc":
            constr_ty = self.demangle_associated_type_simple(self.demangle_generic_param_index())
            self.subs.record(constr_ty)
        elif type_kind == "compound_assoc":
            constr_ty = self.demangle_associated_type_compound(self.demangle_generic_param_index())
            self.subs.record(constr_ty)
        else:
            constr_ty = self._pop_req(Kind.TYPE)

        if constraint == "protocol":
            return self._node(Kind.DEPENDENT_GENERIC_CONFORMANCE_REQUIREMENT, None, constr_ty, self.pop_protocol())
        if constraint == "base_class":
            return self._node(Kind.DEPENDENT_GENERIC_CONFORMANCE_REQUIREMENT, None, constr_ty,
                              self._pop_req(Kind.TYPE))
        if constraint == "same_type":
            return self._node(Kind.DEPENDENT_GENERIC_SAME_TYPE_REQUIREMENT, None, constr_ty,
                              self._pop_req(Kind.TYPE))

        pos = self.cur.pos
        c = self.cur.advance()
        size = alignment = None
        if c in "URNCDT":
            pass
        elif c in "EM":
            size = self.demangle_index_as_node()
            alignment = self.demangle_index_as_node()
        elif c in "em":
            size = self.demangle_index_as_node()
        else:
            raise self._unknown(f"layout constraint {c!r}", pos)
        req = self._node(Kind.DEPENDENT_GENERIC_LAYOUT_REQUIREMENT, None, constr_ty, self._node(Kind.IDENTIFIER, c))
        self._add_opt(req, size)
        self._add_opt(req, alignment)
        return req

    # ------------------------------
    # 연관 타입/아키타입
    # ------------------------------

    def pop_assoc_type_name(self) -> Node:
        proto = self._pop(Kind.TYPE)
        if proto is not None and proto.children[0].kind != Kind.PROTOCOL:
            raise self._malformed("Associated type must be qualified by a protocol")
        ident = self._pop_req(Kind.IDENTIFIER)
        ref = self._node(Kind.DEPENDENT_ASSOCIATED_TYPE_REF, ident.text)
        return self._add_opt(ref, proto)

    def demangle_associated_type_simple(self, param: Optional[Node]) -> Node:
        name = self.pop_assoc_type_name()
        base = self._type(param) if param is not None else self._pop_req(Kind.TYPE)
        return self._type(self._node(Kind.DEPENDENT_MEMBER_TYPE, None, base, name))

    def demangle_associated_type_compound(self, param: Optional[Node]) -> Node:
        names: List[Node] = []
        while True:
            first = self._pop(Kind.FIRST_ELEMENT_MARKER) is not None
            names.append(self.pop_assoc_type_name())
            if first:
                break
        base = self._type(param) if param is not None else self._pop_req(Kind.TYPE)
        while names:
            base = self._type(self._node(Kind.DEPENDENT_MEMBER_TYPE, None, base, names.pop()))
        return base

    def demangle_archetype(self) -> Node:
        pos = self.cur.pos
        c = self.cur.advance()
        if c == "a":
            ident = self._pop_req(Kind.IDENTIFIER)
            arche = self.pop_type_and_get_child()
            assoc = self._type(self._node(Kind.ASSOCIATED_TYPE_REF, None, arche, ident))
            self.subs.record(assoc)
            return assoc
        if c == "r":
            return self._type(self._node(Kind.OPAQUE_RETURN_TYPE))
        if c == "x":
            t = self.demangle_associated_type_simple(None)
        elif c == "X":
            t = self.demangle_associated_type_compound(None)
        elif c == "y":
            t = self.demangle_associated_type_simple(self.demangle_generic_param_index())
        elif c == "Y":
            t = self.demangle_associated_type_compound(self.demangle_generic_param_index())
        elif c == "z":
            t = self.demangle_associated_type_simple(self.dependent_generic_param_type(0, 0))
        elif c == "Z":
            t = self.demangle_associated_type_compound(self.dependent_generic_param_type(0, 0))
        else:
            raise self._unknown(f"archetype kind {c!r}", pos)
        self.subs.record(t)
        return t

    # ------------------------------
    # 프로토콜 합성
    # ------------------------------

    def pop_protocol_list(self) -> Node:
        tlist = self._node(Kind.TYPE_LIST)
        plist = self._node(Kind.PROTOCOL_LIST, None, tlist)
        if self._pop(Kind.EMPTY_LIST) is None:
            while True:
                first = self._pop(Kind.FIRST_ELEMENT_MARKER) is not None
                self._add(tlist, self.pop_protocol())
                if first:
                    break
            tlist.reverse_children()
        return plist

    def demangle_protocol_list_type(self) -> Node:
        return self._type(self.pop_protocol_list())

    def pop_protocol_conformance(self) -> Node:
        sig = self._pop(Kind.DEPENDENT_GENERIC_SIGNATURE)
        module = self.pop_module()
        proto = self.pop_protocol()
        ty = self._pop(Kind.TYPE)
        ident = None
        if ty is None:
            ident = self._pop_req(Kind.IDENTIFIER)
            ty = self._pop_req(Kind.TYPE)
        if sig is not None:
            ty = self._type(self._node(Kind.DEPENDENT_GENERIC_TYPE, None, sig, ty))
        conf = self._node(Kind.PROTOCOL_CONFORMANCE, None, ty, proto, module)
        return self._add_opt(conf, ident)


# ------------------------------
# 공개 진입점
# ------------------------------

def parse(mangled: str, is_type: bool = False, *, limits: Optional[Limits] = None) -> Node:
    """
    맹글된 이름 하나를 트리로 만든다.
    - is_type=True  : 접두사 없는 타입 맹글(예: "Si")
    - 현행 접두사   : Demangler
    - 그 밖의 `_T`   : 레거시 문법(legacy.py)
    실패는 DemangleError 하위 클래스(첫 오류, 입력 오프셋 포함).
    """
    from .legacy import LegacyDemangler, is_legacy_symbol

    lim = limits or DEFAULT_LIMITS
    if is_type:
        d = Demangler(mangled, lim)
        run = d.demangle_type
    elif mangling_prefix_length(mangled) == 0 and is_legacy_symbol(mangled):
        d = LegacyDemangler(mangled, lim)
        run = d.demangle_top_level
    else:
        d = Demangler(mangled, lim)
        run = d.demangle_symbol
    try:
        return run()
    except DemangleError as e:
        if not e.text:
            e.text = mangled
            e.pos = d.cur.pos
        raise
