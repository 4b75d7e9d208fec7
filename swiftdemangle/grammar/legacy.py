# swiftdemangle/grammar/legacy.py
"""레거시 문법 엔진 (`_T` / `_Tt`)

현행 문법(parser.py)과 달리 **전위(prefix) 재귀 하강**이다.
- 태그 한 글자가 뒤따르는 생산의 모양을 정한다(`F` 함수, `v` 변수, `C`/`V`/`O` 명목 타입 …)
- 모듈, 명목 타입, 프로토콜은 완성 즉시 치환표에 기록되고 `S<index>_`로 다시 가리킨다
- 재귀 진입마다 Guard를 거친다
- 트리는 현행 엔진과 같은 Kind 집합으로 만든다 → 프린터/질의 함수는 그대로 쓴다

지원하지 않는 가지는 UnknownProduction.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Tuple

from .ast import Kind, Node
from .errors import MalformedInput, UnknownProduction
from .identifier import decode_punycode
from .specials import VALUE_WITNESS_CODES
from .parser import MANGLING_MODULE_CLANG_IMPORTER, MANGLING_MODULE_OBJC, STDLIB_NAME
from .substitution import SubstitutionTable
from ..lex import Cursor, Guard, Limits, DEFAULT_LIMITS

LEGACY_PREFIX = "_T"

# 레거시 표준 치환 (`S` + 한 글자)
LEGACY_STANDARD_TYPES: Dict[str, Tuple[Kind, str]] = {
    "a": (Kind.STRUCTURE, "Array"),
    "b": (Kind.STRUCTURE, "Bool"),
    "c": (Kind.STRUCTURE, "UnicodeScalar"),
    "d": (Kind.STRUCTURE, "Double"),
    "f": (Kind.STRUCTURE, "Float"),
    "i": (Kind.STRUCTURE, "Int"),
    "P": (Kind.STRUCTURE, "UnsafePointer"),
    "p": (Kind.STRUCTURE, "UnsafeMutablePointer"),
    "Q": (Kind.ENUM, "ImplicitlyUnwrappedOptional"),
    "q": (Kind.ENUM, "Optional"),
    "R": (Kind.STRUCTURE, "UnsafeBufferPointer"),
    "r": (Kind.STRUCTURE, "UnsafeMutableBufferPointer"),
    "S": (Kind.STRUCTURE, "String"),
    "u": (Kind.STRUCTURE, "UInt"),
    "V": (Kind.STRUCTURE, "UnsafeRawPointer"),
    "v": (Kind.STRUCTURE, "UnsafeMutableRawPointer"),
}

_LEGACY_MODULES = {"s": STDLIB_NAME, "o": MANGLING_MODULE_OBJC, "C": MANGLING_MODULE_CLANG_IMPORTER}

_LEGACY_BUILTIN = {
    "O": "Builtin.UnknownObject",
    "o": "Builtin.NativeObject",
    "b": "Builtin.BridgeObject",
    "p": "Builtin.RawPointer",
    "w": "Builtin.Word",
    "t": "Builtin.SILToken",
}

_ATTRIBUTES = {
    "o": Kind.OBJ_C_ATTRIBUTE,
    "O": Kind.NON_OBJ_C_ATTRIBUTE,
    "D": Kind.DYNAMIC_ATTRIBUTE,
    "d": Kind.DIRECT_METHOD_REFERENCE_ATTRIBUTE,
    "V": Kind.V_TABLE_ATTRIBUTE,
}

_METADATA = {
    "P": Kind.GENERIC_TYPE_METADATA_PATTERN,
    "a": Kind.TYPE_METADATA_ACCESS_FUNCTION,
    "L": Kind.TYPE_METADATA_LAZY_CACHE,
    "m": Kind.METACLASS,
    "n": Kind.NOMINAL_TYPE_DESCRIPTOR,
    "f": Kind.FULL_TYPE_METADATA,
}

_ACCESSORS = {
    "g": Kind.GETTER,
    "s": Kind.SETTER,
    "m": Kind.MATERIALIZE_FOR_SET,
    "w": Kind.WILL_SET,
    "W": Kind.DID_SET,
    "a": Kind.UNSAFE_MUTABLE_ADDRESSOR,
    "l": Kind.UNSAFE_ADDRESSOR,
}

# `a`/`l` 다음 글자: 주소 지정자 종류
_ADDRESSORS = {
    "a": {"O": Kind.OWNING_MUTABLE_ADDRESSOR, "o": Kind.NATIVE_OWNING_MUTABLE_ADDRESSOR,
          "p": Kind.NATIVE_PINNING_MUTABLE_ADDRESSOR, "u": Kind.UNSAFE_MUTABLE_ADDRESSOR},
    "l": {"O": Kind.OWNING_ADDRESSOR, "o": Kind.NATIVE_OWNING_ADDRESSOR,
          "p": Kind.NATIVE_PINNING_ADDRESSOR, "u": Kind.UNSAFE_ADDRESSOR},
}

_NOMINAL = {"C": Kind.CLASS, "V": Kind.STRUCTURE, "O": Kind.ENUM}

_BOUND_GENERIC = {
    Kind.CLASS: Kind.BOUND_GENERIC_CLASS,
    Kind.STRUCTURE: Kind.BOUND_GENERIC_STRUCTURE,
    Kind.ENUM: Kind.BOUND_GENERIC_ENUM,
    Kind.PROTOCOL: Kind.BOUND_GENERIC_PROTOCOL,
    Kind.TYPE_ALIAS: Kind.BOUND_GENERIC_TYPE_ALIAS,
}

_OP_CHARS = "& @/= >    <*!|+?%-~   ^ ."
_OPERATOR_KINDS = {"p": Kind.PREFIX_OPERATOR, "P": Kind.POSTFIX_OPERATOR, "i": Kind.INFIX_OPERATOR}

_VALUE_WITNESS_INDEX = {code: i for i, (code, _) in enumerate(VALUE_WITNESS_CODES)}


def is_legacy_symbol(text: str) -> bool:
    """`_T` 로 시작하되 현행 `_T0` 이 아닌 입력"""
    return text.startswith(LEGACY_PREFIX) and not text.startswith("_T0")


class LegacyDemangler:
    """
    LegacyDemangler
    ===============
    parse 호출 하나의 상태: 커서, 가드, 치환표.
    진입점은 `demangle_top_level()` 하나.
    """

    def __init__(self, text: str, limits: Limits = DEFAULT_LIMITS):
        self.cur = Cursor(text)
        self.guard = Guard(self.cur, limits)
        self.subs = SubstitutionTable(self.cur)

    # ------------------------------
    # 공통 도구
    # ------------------------------

    def _unknown(self, what: str, pos: Optional[int] = None) -> UnknownProduction:
        return UnknownProduction(f"Unknown {what}", self.cur.text, self.cur.pos if pos is None else pos)

    def _node(self, kind: Kind, contents=None, *children: Node) -> Node:
        self.guard.count_node()
        n = Node(kind, contents, list(children))
        self.guard.check_depth(n.depth)
        return n

    def _add(self, parent: Node, child: Node) -> Node:
        parent.add_child(child)
        self.guard.check_depth(parent.depth)
        return parent

    def _type(self, child: Node) -> Node:
        return self._node(Kind.TYPE, None, child)

    def _module(self, name: str) -> Node:
        return self._node(Kind.MODULE, name)

    def demangle_index(self) -> int:
        """`_` → 0, `<n>_` → n+1"""
        if self.cur.next_if("_"):
            return 0
        start = self.cur.pos
        n = self.cur.read_integer()
        if not self.cur.next_if("_"):
            raise MalformedInput("Malformed index", self.cur.text, start)
        return n + 1

    # ------------------------------
    # 최상위 / 전역
    # ------------------------------

    def demangle_top_level(self) -> Node:
        self.cur.expect(LEGACY_PREFIX)
        top = self._node(Kind.GLOBAL)
        if self.cur.next_if("t"):
            self._add(top, self._node(Kind.TYPE_MANGLING, None, self.demangle_type()))
        else:
            if self.cur.peek() == "T" and self.cur.peek_at(1) in _ATTRIBUTES:
                self.cur.advance()
                self._add(top, self._node(_ATTRIBUTES[self.cur.advance()]))
            self.demangle_global(top)
        if not self.cur.at_end():
            self._add(top, self._node(Kind.SUFFIX, self.cur.take_all()))
        return top

    def demangle_global(self, top: Node) -> None:
        """전역 심볼 하나를 top의 자식으로 붙인다(부분 적용 전달자는 자기 자식으로)."""
        with self.guard:
            pos = self.cur.pos
            if self.cur.next_if("PA"):
                kind = Kind.PARTIAL_APPLY_OBJ_C_FORWARDER if self.cur.next_if("o") else Kind.PARTIAL_APPLY_FORWARDER
                forwarder = self._node(kind)
                if self.cur.next_if("__T"):
                    self.demangle_global(forwarder)
                self._add(top, forwarder)
                return
            if self.cur.next_if("M"):
                self._add(top, self.demangle_metadata())
                return
            if self.cur.next_if("w"):
                code = self.cur.take(2) if self.cur.remaining() >= 2 else self.cur.take_all()
                idx = _VALUE_WITNESS_INDEX.get(code)
                if idx is None:
                    raise self._unknown(f"value witness {code!r}", pos + 1)
                self._add(top, self._node(Kind.VALUE_WITNESS, None, self._node(Kind.INDEX, idx),
                                          self.demangle_type()))
                return
            if self.cur.next_if("W"):
                self._add(top, self.demangle_witness())
                return
            if self.cur.next_if("T"):
                self._add(top, self.demangle_thunk())
                return
            self._add(top, self.demangle_entity())

    def demangle_metadata(self) -> Node:
        c = self.cur.peek()
        if c in _METADATA:
            self.cur.advance()
            return self._node(_METADATA[c], None, self.demangle_type())
        if c == "p":
            self.cur.advance()
            return self._node(Kind.PROTOCOL_DESCRIPTOR, None, self.demangle_protocol_name())
        return self._node(Kind.TYPE_METADATA, None, self.demangle_type())

    def demangle_witness(self) -> Node:
        pos = self.cur.pos
        c = self.cur.advance()
        if c == "V":
            return self._node(Kind.VALUE_WITNESS_TABLE, None, self.demangle_type())
        if c == "v":
            d = self.cur.advance()
            if d not in "di":
                raise self._unknown(f"field offset directness {d!r}", pos + 1)
            directness = self._node(Kind.DIRECTNESS, 0 if d == "d" else 1)
            return self._node(Kind.FIELD_OFFSET, None, directness, self.demangle_entity())
        if c == "P":
            return self._node(Kind.PROTOCOL_WITNESS_TABLE, None, self.demangle_protocol_conformance())
        if c == "G":
            return self._node(Kind.GENERIC_PROTOCOL_WITNESS_TABLE, None, self.demangle_protocol_conformance())
        if c == "I":
            return self._node(Kind.GENERIC_PROTOCOL_WITNESS_TABLE_INSTANTIATION_FUNCTION, None,
                              self.demangle_protocol_conformance())
        if c == "a":
            return self._node(Kind.PROTOCOL_WITNESS_TABLE_ACCESSOR, None, self.demangle_protocol_conformance())
        if c in "lL":
            kind = (Kind.LAZY_PROTOCOL_WITNESS_TABLE_ACCESSOR if c == "l"
                    else Kind.LAZY_PROTOCOL_WITNESS_TABLE_CACHE_VARIABLE)
            ty = self.demangle_type()
            return self._node(kind, None, ty, self.demangle_protocol_conformance())
        if c == "t":
            conf = self.demangle_protocol_conformance()
            name = self.demangle_decl_name()
            return self._node(Kind.ASSOCIATED_TYPE_METADATA_ACCESSOR, None, conf, name)
        if c == "T":
            conf = self.demangle_protocol_conformance()
            name = self.demangle_decl_name()
            proto = self.demangle_protocol_name()
            return self._node(Kind.ASSOCIATED_TYPE_WITNESS_TABLE_ACCESSOR, None, conf, name, proto)
        raise self._unknown(f"witness table kind {c!r}", pos)

    def demangle_thunk(self) -> Node:
        pos = self.cur.pos
        c = self.cur.advance()
        if c == "W":
            conf = self.demangle_protocol_conformance()
            return self._node(Kind.PROTOCOL_WITNESS, None, conf, self.demangle_entity())
        if c in "Rr":
            kind = Kind.REABSTRACTION_THUNK_HELPER if c == "R" else Kind.REABSTRACTION_THUNK
            thunk = self._node(kind)
            if self.cur.peek() == "u":
                self.cur.advance()
                self._add(thunk, self.demangle_generic_signature())
            self._add(thunk, self.demangle_type())
            self._add(thunk, self.demangle_type())
            return thunk
        raise self._unknown(f"thunk kind {c!r}", pos)

    def demangle_protocol_conformance(self) -> Node:
        with self.guard:
            ty = self.demangle_type()
            proto = self.demangle_protocol_name()
            module = self.demangle_module()
            return self._node(Kind.PROTOCOL_CONFORMANCE, None, ty, proto, module)

    # ------------------------------
    # 엔티티
    # ------------------------------

    def demangle_entity(self) -> Node:
        with self.guard:
            is_static = self.cur.next_if("Z")
            pos = self.cur.pos
            c = self.cur.advance()
            if c == "F":
                entity = self.demangle_function_entity()
            elif c == "v":
                ctx = self.demangle_context()
                name = self.demangle_decl_name()
                entity = self._node(Kind.VARIABLE, None, ctx, name, self.demangle_type())
            elif c == "i":
                ctx = self.demangle_context()
                entity = self._node(Kind.SUBSCRIPT, None, ctx, self.demangle_type())
            elif c == "I":
                entity = self.demangle_initializer_entity()
            else:
                raise self._unknown(f"entity kind {c!r}", pos)
            if is_static:
                return self._node(Kind.STATIC, None, entity)
            return entity

    def demangle_initializer_entity(self) -> Node:
        """`I` 다음: 문맥 + (`A<index>` 기본 인자 | `i` 변수 초기화 식)"""
        ctx = self.demangle_context()
        pos = self.cur.pos
        if self.cur.next_if("A"):
            index = self._node(Kind.NUMBER, self.demangle_index())
            return self._node(Kind.DEFAULT_ARGUMENT_INITIALIZER, None, ctx, index)
        if self.cur.next_if("i"):
            return self._node(Kind.INITIALIZER, None, ctx)
        raise self._unknown(f"initializer kind {self.cur.peek()!r}", pos)

    def demangle_function_entity(self) -> Node:
        ctx = self.demangle_context()
        pos = self.cur.pos
        c = self.cur.peek()
        if c == "D":
            self.cur.advance()
            return self._node(Kind.DEALLOCATOR, None, ctx)
        if c == "d":
            self.cur.advance()
            return self._node(Kind.DESTRUCTOR, None, ctx)
        if c == "e":
            self.cur.advance()
            return self._node(Kind.I_VAR_INITIALIZER, None, ctx)
        if c == "E":
            self.cur.advance()
            return self._node(Kind.I_VAR_DESTROYER, None, ctx)
        if c in "Cc":
            self.cur.advance()
            kind = Kind.ALLOCATOR if c == "C" else Kind.CONSTRUCTOR
            return self._node(kind, None, ctx, self.demangle_type())
        if c in "Uu":
            self.cur.advance()
            kind = Kind.EXPLICIT_CLOSURE if c == "U" else Kind.IMPLICIT_CLOSURE
            index = self._node(Kind.NUMBER, self.demangle_index())
            return self._node(kind, None, ctx, index, self.demangle_type())
        if c == "A":
            self.cur.advance()
            index = self._node(Kind.NUMBER, self.demangle_index())
            return self._node(Kind.DEFAULT_ARGUMENT_INITIALIZER, None, ctx, index)
        if c == "i":
            self.cur.advance()
            return self._node(Kind.INITIALIZER, None, ctx)
        if c in _ACCESSORS:
            self.cur.advance()
            kind = _ACCESSORS[c]
            if c in _ADDRESSORS:
                k = self.cur.advance()
                kind = _ADDRESSORS[c].get(k)
                if kind is None:
                    raise self._unknown(f"addressor kind {c}{k}", pos)
            name = self.demangle_decl_name()
            var = self._node(Kind.VARIABLE, None, ctx, name, self.demangle_type())
            return self._node(kind, None, var)
        if c and (c.isdigit() or c in "oLPX"):
            name = self.demangle_decl_name()
            return self._node(Kind.FUNCTION, None, ctx, name, self.demangle_type())
        raise self._unknown(f"function entity {c!r}", pos)

    # ------------------------------
    # 문맥 / 이름
    # ------------------------------

    def demangle_context(self) -> Node:
        with self.guard:
            pos = self.cur.pos
            c = self.cur.peek()
            if c == "E":
                self.cur.advance()
                module = self.demangle_module()
                return self._node(Kind.EXTENSION, None, module, self.demangle_context())
            if c == "e":
                self.cur.advance()
                module = self.demangle_module()
                self.cur.expect("u")
                sig = self.demangle_generic_signature()
                return self._node(Kind.EXTENSION, None, module, self.demangle_context(), sig)
            if c == "S":
                self.cur.advance()
                return self.demangle_substitution()
            if c in _NOMINAL or c == "P":
                return self.demangle_nominal_or_protocol()
            if c and c in "FvIiZ":
                return self.demangle_entity()
            if c and (c in "sX" or c.isdigit()):
                return self.demangle_module()
            raise self._unknown(f"context {c!r}", pos)

    def demangle_module(self) -> Node:
        pos = self.cur.pos
        if self.cur.next_if("s"):
            return self._module(STDLIB_NAME)
        if self.cur.next_if("S"):
            m = self.demangle_substitution()
            if m.kind != Kind.MODULE:
                raise MalformedInput("Expected a module substitution", self.cur.text, pos)
            return m
        ident = self.demangle_identifier()
        m = self._module(ident.text)
        self.subs.record(m)
        return m

    def demangle_nominal_or_protocol(self) -> Node:
        c = self.cur.advance()
        kind = Kind.PROTOCOL if c == "P" else _NOMINAL[c]
        ctx = self.demangle_context()
        name = self.demangle_decl_name()
        n = self._node(kind, None, ctx, name)
        self.subs.record(n)
        return n

    def demangle_protocol_name(self) -> Node:
        """`S<index>_` 또는 (문맥 + 이름). 결과는 Type(Protocol)"""
        with self.guard:
            pos = self.cur.pos
            if self.cur.next_if("S"):
                sub = self.demangle_substitution()
                if sub.kind == Kind.PROTOCOL:
                    return self._type(sub)
                if sub.kind != Kind.MODULE:
                    raise MalformedInput("Expected a protocol substitution", self.cur.text, pos)
                ctx = sub
            elif self.cur.next_if("P"):
                ctx = self.demangle_context()
            elif self.cur.next_if("s"):
                ctx = self._module(STDLIB_NAME)
            else:
                ctx = self.demangle_context()
            proto = self._node(Kind.PROTOCOL, None, ctx, self.demangle_decl_name())
            self.subs.record(proto)
            return self._type(proto)

    def demangle_substitution(self) -> Node:
        """`S` 다음: 표준 치환 한 글자 또는 `<index>`"""
        pos = self.cur.pos
        c = self.cur.peek()
        if c in _LEGACY_MODULES:
            self.cur.advance()
            return self._module(_LEGACY_MODULES[c])
        if c in LEGACY_STANDARD_TYPES:
            self.cur.advance()
            kind, name = LEGACY_STANDARD_TYPES[c]
            return self._node(kind, None, self._module(STDLIB_NAME), self._node(Kind.IDENTIFIER, name))
        if c == "_" or c.isdigit():
            return self.subs.resolve(self.demangle_index())
        raise self._unknown(f"substitution {c!r}", pos)

    def demangle_decl_name(self) -> Node:
        with self.guard:
            if self.cur.next_if("L"):
                index = self._node(Kind.NUMBER, self.demangle_index())
                return self._node(Kind.LOCAL_DECL_NAME, None, index, self.demangle_identifier())
            if self.cur.next_if("P"):
                discriminator = self.demangle_identifier()
                return self._node(Kind.PRIVATE_DECL_NAME, None, discriminator, self.demangle_identifier())
            return self.demangle_identifier()

    def demangle_identifier(self) -> Node:
        """`[X]<len><chars>` 또는 연산자 `o[pPi]<len><op-letters>`"""
        pos = self.cur.pos
        punycoded = self.cur.next_if("X")
        op_kind: Optional[Kind] = None
        if self.cur.next_if("o"):
            k = self.cur.advance()
            op_kind = _OPERATOR_KINDS.get(k)
            if op_kind is None:
                raise self._unknown(f"operator fixity {k!r}", self.cur.pos - 1)
        if not self.cur.is_digit():
            raise MalformedInput("Expected identifier length", self.cur.text, self.cur.pos)
        text = self.cur.read_length_prefixed_span()
        if punycoded:
            decoded = decode_punycode(text)
            if decoded is None:
                raise MalformedInput("Malformed punycode identifier", self.cur.text, pos)
            text = decoded
        if op_kind is None:
            return self._node(Kind.IDENTIFIER, text)
        chars: List[str] = []
        for c in text:
            o = _OP_CHARS[ord(c) - ord("a")] if "a" <= c <= "z" else " "
            if o == " " and ord(c) < 0x80:
                raise self._unknown(f"operator character {c!r}", pos)
            chars.append(c if ord(c) >= 0x80 else o)
        return self._node(op_kind, "".join(chars))

    # ------------------------------
    # 제네릭 시그니처
    # ------------------------------

    def demangle_generic_signature(self) -> Node:
        """`u` 다음: (개수*)? ('R' 요구조건*)? 'r'. 개수가 없으면 매개변수 1개"""
        with self.guard:
            sig = self._node(Kind.DEPENDENT_GENERIC_SIGNATURE)
            counts: List[int] = []
            while self.cur.peek() not in ("R", "r", ""):
                if self.cur.next_if("z"):
                    counts.append(0)
                else:
                    counts.append(self.demangle_index() + 1)
            for n in counts or [1]:
                self._add(sig, self._node(Kind.DEPENDENT_GENERIC_PARAM_COUNT, n))
            if self.cur.next_if("r"):
                return sig
            self.cur.expect("R")
            while not self.cur.next_if("r"):
                if self.cur.at_end():
                    raise MalformedInput("Unterminated generic signature", self.cur.text, self.cur.pos)
                self._add(sig, self.demangle_generic_requirement())
            return sig

    def demangle_generic_requirement(self) -> Node:
        subject = self._type(self.demangle_generic_param_index())
        if self.cur.next_if("z"):
            return self._node(Kind.DEPENDENT_GENERIC_SAME_TYPE_REQUIREMENT, None, subject, self.demangle_type())
        return self._node(Kind.DEPENDENT_GENERIC_CONFORMANCE_REQUIREMENT, None, subject,
                          self.demangle_protocol_name())

    def demangle_generic_param_index(self) -> Node:
        """`x` → (0,0), `d<i><j>` → (i+1, j), `<index>` → (0, index+1)"""
        if self.cur.next_if("x"):
            depth, index = 0, 0
        elif self.cur.next_if("d"):
            depth = self.demangle_index() + 1
            index = self.demangle_index()
        else:
            depth, index = 0, self.demangle_index() + 1
        return self._dependent_param(depth, index)

    def _dependent_param(self, depth: int, index: int) -> Node:
        return self._node(Kind.DEPENDENT_GENERIC_PARAM_TYPE, None,
                          self._node(Kind.INDEX, depth), self._node(Kind.INDEX, index))

    # ------------------------------
    # 타입
    # ------------------------------

    def demangle_type(self) -> Node:
        with self.guard:
            return self._type(self.demangle_type_body())

    def demangle_type_body(self) -> Node:
        pos = self.cur.pos
        c = self.cur.advance()
        if c == "B":
            return self.demangle_builtin_type()
        if c == "a":
            ctx = self.demangle_context()
            alias = self._node(Kind.TYPE_ALIAS, None, ctx, self.demangle_decl_name())
            self.subs.record(alias)
            return alias
        if c in "Ff":
            return self.demangle_function_type(Kind.FUNCTION_TYPE if c == "F" else Kind.UNCURRIED_FUNCTION_TYPE)
        if c == "b":
            return self.demangle_function_type(Kind.OBJ_C_BLOCK)
        if c == "c":
            return self.demangle_function_type(Kind.C_FUNCTION_POINTER)
        if c == "K":
            return self.demangle_function_type(Kind.AUTO_CLOSURE_TYPE)
        if c == "D":
            return self._node(Kind.DYNAMIC_SELF, None, self.demangle_type())
        if c == "G":
            return self.demangle_bound_generic()
        if c == "M":
            return self._node(Kind.METATYPE, None, self.demangle_type())
        if c == "P":
            if self.cur.next_if("M"):
                return self._node(Kind.EXISTENTIAL_METATYPE, None, self.demangle_type())
            return self.demangle_protocol_list()
        if c == "x":
            return self._dependent_param(0, 0)
        if c == "q":
            return self.demangle_generic_param_index()
        if c == "Q":
            return self.demangle_archetype()
        if c == "R":
            return self._node(Kind.IN_OUT, None, self.demangle_type())
        if c == "S":
            sub = self.demangle_substitution()
            if sub.kind == Kind.MODULE:
                raise MalformedInput("Module substitution used as a type", self.cur.text, pos)
            return sub
        if c in "Tt":
            return self.demangle_tuple(variadic=c == "t")
        if c == "u":
            sig = self.demangle_generic_signature()
            return self._node(Kind.DEPENDENT_GENERIC_TYPE, None, sig, self.demangle_type())
        if c in _NOMINAL:
            self.cur.push_back()
            return self.demangle_nominal_or_protocol()
        if c == "X":
            k = self.cur.advance()
            if k == "f":
                return self.demangle_function_type(Kind.THIN_FUNCTION_TYPE)
            if k == "w":
                return self._node(Kind.WEAK, None, self.demangle_type())
            if k == "o":
                return self._node(Kind.UNOWNED, None, self.demangle_type())
            if k == "u":
                return self._node(Kind.UNMANAGED, None, self.demangle_type())
            raise self._unknown(f"type 'X{k}'", pos)
        if c == "E" and self.cur.next_if("RR"):
            return self._node(Kind.ERROR_TYPE)
        raise self._unknown(f"type {c!r}", pos)

    def demangle_builtin_type(self) -> Node:
        pos = self.cur.pos
        c = self.cur.advance()
        if c in _LEGACY_BUILTIN:
            return self._node(Kind.BUILTIN_TYPE_NAME, _LEGACY_BUILTIN[c])
        if c in "fi":
            size = self.cur.read_integer()
            self.cur.expect("_")
            return self._node(Kind.BUILTIN_TYPE_NAME, ("Builtin.FPIEEE" if c == "f" else "Builtin.Int") + str(size))
        if c == "v":
            elts = self.cur.read_integer()
            self.cur.expect("B")
            if self.cur.peek() not in ("i", "f", "p"):
                raise self._unknown(f"vector element type {self.cur.peek()!r}", self.cur.pos)
            elt = self.demangle_builtin_type()
            return self._node(Kind.BUILTIN_TYPE_NAME, f"Builtin.Vec{elts}x{elt.text[len('Builtin.'):]}")
        raise self._unknown(f"builtin type {c!r}", pos)

    def demangle_function_type(self, kind: Kind) -> Node:
        fn = self._node(kind)
        if self.cur.next_if("z"):
            self._add(fn, self._node(Kind.THROWS_ANNOTATION))
        args = self.demangle_type()
        result = self.demangle_type()
        self._add(fn, self._node(Kind.ARGUMENT_TUPLE, None, args))
        self._add(fn, self._node(Kind.RETURN_TYPE, None, result))
        return fn

    def demangle_bound_generic(self) -> Node:
        unbound = self.demangle_type()
        args = self._node(Kind.TYPE_LIST)
        while not self.cur.next_if("_"):
            if self.cur.at_end():
                raise MalformedInput("Unterminated generic argument list", self.cur.text, self.cur.pos)
            self._add(args, self.demangle_type())
        kind = _BOUND_GENERIC.get(unbound.children[0].kind, Kind.BOUND_GENERIC_OTHER_NOMINAL_TYPE)
        bound = self._node(kind, None, unbound, args)
        self.subs.record(bound)
        return bound

    def demangle_protocol_list(self) -> Node:
        types = self._node(Kind.TYPE_LIST)
        while not self.cur.next_if("_"):
            if self.cur.at_end():
                raise MalformedInput("Unterminated protocol composition", self.cur.text, self.cur.pos)
            self._add(types, self.demangle_protocol_name())
        return self._node(Kind.PROTOCOL_LIST, None, types)

    def demangle_archetype(self) -> Node:
        if self.cur.next_if("d"):
            depth = self.demangle_index() + 1
            return self._dependent_param(depth, self.demangle_index())
        return self._dependent_param(0, self.demangle_index())

    def demangle_tuple(self, variadic: bool = False) -> Node:
        """`T`/`t` 다음: 원소* `_`. `t` 는 마지막 원소가 가변 인자"""
        tup = self._node(Kind.TUPLE)
        while not self.cur.next_if("_"):
            if self.cur.at_end():
                raise MalformedInput("Unterminated tuple", self.cur.text, self.cur.pos)
            elt = self._node(Kind.TUPLE_ELEMENT)
            if self.cur.is_digit():
                self._add(elt, self._node(Kind.TUPLE_ELEMENT_NAME, self.demangle_identifier().text))
            self._add(elt, self.demangle_type())
            self._add(tup, elt)
        if variadic and tup.children:
            self._add(tup.children[-1], self._node(Kind.VARIADIC_MARKER))
        return tup
