"""특수 연산자 생산 (현행 접두사 계열)

Demangler가 상속하는 믹스인. 스택/치환표/커서 헬퍼(_node, _pop, pop_context ...)는
parser.Demangler 쪽에 있고, 여기에는 한 글자 태그 뒤에 부태그가 오는 연산자만 모은다.

- B : 내장(Builtin) 타입
- I : 구현(impl) 함수 타입 (SIL 관례 표기)
- M : 메타데이터/디스크립터
- T : 썽크(thunk)와 특수화(specialization)
- W : 증인(witness) 테이블 계열
- w : 값 증인(value witness)
- X : 특수 타입(탈출 불가 함수, 약한 참조, 메타타입 표현 ...)
- Y : 함수 타입 주석(async, @Sendable, 글로벌 액터)
"""

from __future__ import annotations
from typing import Dict, List, Optional, Tuple

from .ast import Kind, Node

# ---- 값 증인 ----
VALUE_WITNESS_CODES: List[Tuple[str, str]] = [
    ("al", "allocateBuffer"),
    ("ca", "assignWithCopy"),
    ("ta", "assignWithTake"),
    ("de", "deallocateBuffer"),
    ("xx", "destroy"),
    ("XX", "destroyBuffer"),
    ("Xx", "destroyArray"),
    ("CP", "initializeBufferWithCopyOfBuffer"),
    ("Cp", "initializeBufferWithCopy"),
    ("cp", "initializeWithCopy"),
    ("Tk", "initializeBufferWithTake"),
    ("tk", "initializeWithTake"),
    ("pr", "projectBuffer"),
    ("TK", "initializeBufferWithTakeOfBuffer"),
    ("Cc", "initializeArrayWithCopy"),
    ("Tt", "initializeArrayWithTakeFrontToBack"),
    ("tT", "initializeArrayWithTakeBackToFront"),
    ("xs", "storeExtraInhabitant"),
    ("xg", "getExtraInhabitantIndex"),
    ("ug", "getEnumTag"),
    ("up", "destructiveProjectEnumData"),
    ("ui", "destructiveInjectEnumTag"),
    ("et", "getEnumTagSinglePayload"),
    ("st", "storeEnumTagSinglePayload"),
]
_VALUE_WITNESS_INDEX: Dict[str, int] = {code: i for i, (code, _) in enumerate(VALUE_WITNESS_CODES)}


def value_witness_name(index: int) -> str:
    if 0 <= index < len(VALUE_WITNESS_CODES):
        return VALUE_WITNESS_CODES[index][1]
    return f"<unknown value witness {index}>"


# ---- 함수 시그니처 특수화 매개변수 종류 ----
class FunctionSigSpecializationParamKind:
    CONSTANT_PROP_FUNCTION = 0
    CONSTANT_PROP_GLOBAL = 1
    CONSTANT_PROP_INTEGER = 2
    CONSTANT_PROP_FLOAT = 3
    CONSTANT_PROP_STRING = 4
    CLOSURE_PROP = 5
    BOX_TO_VALUE = 6
    BOX_TO_STACK = 7
    IN_OUT_TO_OUT = 8
    # 아래는 비트 집합으로 조합된다
    DEAD = 1 << 6
    OWNED_TO_GUARANTEED = 1 << 7
    SROA = 1 << 8
    GUARANTEED_TO_OWNED = 1 << 9
    EXISTENTIAL_TO_GENERIC = 1 << 10


_P = FunctionSigSpecializationParamKind

_BUILTIN_SIMPLE = {
    "b": "Builtin.BridgeObject",
    "B": "Builtin.UnsafeValueBuffer",
    "e": "Builtin.Executor",
    "I": "Builtin.IntLiteral",
    "O": "Builtin.UnknownObject",
    "o": "Builtin.NativeObject",
    "p": "Builtin.RawPointer",
    "t": "Builtin.SILToken",
    "w": "Builtin.Word",
    "c": "Builtin.RawUnsafeContinuation",
    "D": "Builtin.DefaultActorStorage",
    "j": "Builtin.Job",
}

_METADATA_OF_TYPE = {
    "a": Kind.TYPE_METADATA_ACCESS_FUNCTION,
    "f": Kind.FULL_TYPE_METADATA,
    "i": Kind.TYPE_METADATA_INSTANTIATION_FUNCTION,
    "I": Kind.TYPE_METADATA_INSTANTIATION_CACHE,
    "l": Kind.TYPE_METADATA_SINGLETON_INITIALIZATION_CACHE,
    "L": Kind.TYPE_METADATA_LAZY_CACHE,
    "m": Kind.METACLASS,
    "n": Kind.NOMINAL_TYPE_DESCRIPTOR,
    "o": Kind.CLASS_METADATA_BASE_OFFSET,
    "P": Kind.GENERIC_TYPE_METADATA_PATTERN,
    "r": Kind.TYPE_METADATA_COMPLETION_FUNCTION,
    "u": Kind.METHOD_LOOKUP_FUNCTION,
    "U": Kind.OBJ_C_METADATA_UPDATE_FUNCTION,
}

_WITNESS_OF_CONFORMANCE = {
    "P": Kind.PROTOCOL_WITNESS_TABLE,
    "p": Kind.PROTOCOL_WITNESS_TABLE_PATTERN,
    "G": Kind.GENERIC_PROTOCOL_WITNESS_TABLE,
    "I": Kind.GENERIC_PROTOCOL_WITNESS_TABLE_INSTANTIATION_FUNCTION,
    "r": Kind.RESILIENT_PROTOCOL_WITNESS_TABLE,
    "a": Kind.PROTOCOL_WITNESS_TABLE_ACCESSOR,
}

_OUTLINED = {
    "y": Kind.OUTLINED_COPY,
    "e": Kind.OUTLINED_CONSUME,
    "r": Kind.OUTLINED_RETAIN,
    "s": Kind.OUTLINED_RELEASE,
    "b": Kind.OUTLINED_INITIALIZE_WITH_TAKE,
    "c": Kind.OUTLINED_INITIALIZE_WITH_COPY,
    "d": Kind.OUTLINED_ASSIGN_WITH_TAKE,
    "f": Kind.OUTLINED_ASSIGN_WITH_COPY,
    "h": Kind.OUTLINED_DESTROY,
}

_SPECIAL_FUNCTION_TYPES = {
    "E": Kind.NO_ESCAPE_FUNCTION_TYPE,
    "A": Kind.ESCAPING_AUTO_CLOSURE_TYPE,
    "f": Kind.THIN_FUNCTION_TYPE,
    "K": Kind.AUTO_CLOSURE_TYPE,
    "U": Kind.UNCURRIED_FUNCTION_TYPE,
    "L": Kind.ESCAPING_OBJ_C_BLOCK,
    "B": Kind.OBJ_C_BLOCK,
    "C": Kind.C_FUNCTION_POINTER,
}

_SPECIAL_WRAPPERS = {
    "o": Kind.UNOWNED,
    "u": Kind.UNMANAGED,
    "w": Kind.WEAK,
    "b": Kind.SIL_BOX_TYPE,
    "D": Kind.DYNAMIC_SELF,
}

_METATYPE_REPRESENTATIONS = {"t": "@thin", "T": "@thick", "o": "@objc_metatype"}

_THUNK_OF_ENTITY = {
    "c": Kind.CURRY_THUNK,
    "j": Kind.DISPATCH_THUNK,
    "q": Kind.METHOD_DESCRIPTOR,
    "S": Kind.PROTOCOL_SELF_CONFORMANCE_WITNESS,
}

_THUNK_ATTRIBUTES = {
    "o": Kind.OBJ_C_ATTRIBUTE,
    "O": Kind.NON_OBJ_C_ATTRIBUTE,
    "D": Kind.DYNAMIC_ATTRIBUTE,
    "d": Kind.DIRECT_METHOD_REFERENCE_ATTRIBUTE,
    "a": Kind.PARTIAL_APPLY_OBJ_C_FORWARDER,
    "A": Kind.PARTIAL_APPLY_FORWARDER,
    "m": Kind.MERGED_FUNCTION,
    "X": Kind.DYNAMICALLY_REPLACEABLE_FUNCTION_VAR,
    "x": Kind.DYNAMICALLY_REPLACEABLE_FUNCTION_KEY,
    "I": Kind.DYNAMICALLY_REPLACEABLE_FUNCTION_IMPL,
    "u": Kind.ASYNC_FUNCTION_POINTER,
}

_GENERIC_SPECIALIZATIONS = {
    "g": Kind.GENERIC_SPECIALIZATION,
    "G": Kind.GENERIC_SPECIALIZATION_NOT_RE_ABSTRACTED,
    "B": Kind.GENERIC_SPECIALIZATION_IN_RESILIENCE_DOMAIN,
    "s": Kind.GENERIC_SPECIALIZATION_PRESPECIALIZED,
    "i": Kind.INLINED_GENERIC_FUNCTION,
}

_IMPL_CALLEE = {"y": "@callee_unowned", "g": "@callee_guaranteed", "x": "@callee_owned", "t": "@convention(thin)"}
_IMPL_FUNCTION_ATTR = {
    "B": "@convention(block)",
    "C": "@convention(c)",
    "M": "@convention(method)",
    "O": "@convention(objc_method)",
    "K": "@convention(closure)",
    "W": "@convention(witness_method)",
}
_IMPL_PARAM = {
    "i": "@in", "c": "@in_constant", "l": "@inout", "b": "@inout_aliasable", "n": "@in_guaranteed",
    "X": "@in_cxx", "x": "@owned", "g": "@guaranteed", "e": "@deallocating", "y": "@unowned",
}
_IMPL_RESULT = {"r": "@out", "o": "@owned", "d": "@unowned", "u": "@unowned_inner_pointer", "a": "@autoreleased"}


class SpecialProductions:
    """Demangler 믹스인: 부태그를 갖는 연산자들"""

    # ------------------------------
    # B / Y / w
    # ------------------------------

    def demangle_builtin_type(self) -> Node:
        pos = self.cur.pos
        c = self.cur.advance()
        if c in _BUILTIN_SIMPLE:
            name = _BUILTIN_SIMPLE[c]
        elif c in "fi":
            size = self.demangle_index() - 1
            if size <= 0 or size > 4096:
                raise self._malformed(f"Builtin bit width {size} out of range")
            name = ("Builtin.FPIEEE" if c == "f" else "Builtin.Int") + str(size)
        elif c == "v":
            elts = self.demangle_index() - 1
            if elts <= 0 or elts > 1024:
                raise self._malformed(f"Builtin vector width {elts} out of range")
            elt = self.pop_type_and_get_child()
            if elt.kind != Kind.BUILTIN_TYPE_NAME or not elt.text.startswith("Builtin."):
                raise self._malformed("Builtin vector element must be a builtin type")
            name = f"Builtin.Vec{elts}x{elt.text[len('Builtin.'):]}"
        else:
            raise self._unknown(f"builtin type {c!r}", pos)
        return self._type(self._node(Kind.BUILTIN_TYPE_NAME, name))

    def demangle_type_annotation(self) -> Node:
        pos = self.cur.pos
        c = self.cur.advance()
        if c == "a":
            return self._node(Kind.ASYNC_ANNOTATION)
        if c == "b":
            return self._node(Kind.CONCURRENT_FUNCTION_TYPE)
        if c == "c":
            return self._node(Kind.GLOBAL_ACTOR_FUNCTION_TYPE, None, self._pop_req(Kind.TYPE))
        raise self._unknown(f"type annotation {c!r}", pos)

    def demangle_value_witness(self) -> Node:
        pos = self.cur.pos
        code = self.cur.take(2) if self.cur.remaining() >= 2 else self.cur.take_all()
        idx = _VALUE_WITNESS_INDEX.get(code)
        if idx is None:
            raise self._unknown(f"value witness {code!r}", pos)
        return self._node(Kind.VALUE_WITNESS, None, self._node(Kind.INDEX, idx), self._pop_req(Kind.TYPE))

    # ------------------------------
    # M
    # ------------------------------

    def demangle_metatype(self) -> Node:
        pos = self.cur.pos
        c = self.cur.advance()
        kind = _METADATA_OF_TYPE.get(c)
        if kind is not None:
            return self._node(kind, None, self._pop_req(Kind.TYPE))
        if c == "p":
            return self._node(Kind.PROTOCOL_DESCRIPTOR, None, self.pop_protocol())
        if c == "S":
            return self._node(Kind.PROTOCOL_SELF_CONFORMANCE_DESCRIPTOR, None, self.pop_protocol())
        if c == "c":
            return self._node(Kind.PROTOCOL_CONFORMANCE_DESCRIPTOR, None, self.pop_protocol_conformance())
        if c == "V":
            return self._node(Kind.PROPERTY_DESCRIPTOR, None, self._pop_req(self._is_entity))
        if c == "Q":
            return self._node(Kind.OPAQUE_TYPE_DESCRIPTOR, None, self._pop_req())
        if c == "X":
            return self.demangle_private_context_descriptor()
        raise self._unknown(f"metadata kind {c!r}", pos)

    def demangle_private_context_descriptor(self) -> Node:
        pos = self.cur.pos
        c = self.cur.advance()
        if c == "E":
            return self._node(Kind.EXTENSION_DESCRIPTOR, None, self.pop_context())
        if c == "M":
            module = self.pop_module()
            return self._node(Kind.MODULE_DESCRIPTOR, None, module)
        if c == "Y":
            discriminator = self._pop_req()
            return self._node(Kind.ANONYMOUS_DESCRIPTOR, None, self.pop_context(), discriminator)
        if c == "X":
            return self._node(Kind.ANONYMOUS_DESCRIPTOR, None, self.pop_context())
        raise self._unknown(f"context descriptor kind {c!r}", pos)

    # ------------------------------
    # W
    # ------------------------------

    def pop_assoc_type_path(self) -> Node:
        path = self._node(Kind.ASSOC_TYPE_PATH)
        while True:
            first = self._pop(Kind.FIRST_ELEMENT_MARKER) is not None
            self._add(path, self._pop_req(self._is_decl_name))
            if first:
                break
        path.reverse_children()
        return path

    def demangle_witness(self) -> Node:
        pos = self.cur.pos
        c = self.cur.advance()
        kind = _WITNESS_OF_CONFORMANCE.get(c)
        if kind is not None:
            return self._node(kind, None, self.pop_protocol_conformance())
        if c == "C":
            return self._node(Kind.ENUM_CASE, None, self._pop_req(self._is_entity))
        if c == "V":
            return self._node(Kind.VALUE_WITNESS_TABLE, None, self._pop_req(Kind.TYPE))
        if c == "v":
            dpos = self.cur.pos
            d = self.cur.advance()
            if d not in "di":
                raise self._unknown(f"field offset directness {d!r}", dpos)
            directness = self._node(Kind.DIRECTNESS, 0 if d == "d" else 1)
            return self._node(Kind.FIELD_OFFSET, None, directness, self._pop_req(self._is_entity))
        if c in "lL":
            conf = self.pop_protocol_conformance()
            ty = self._pop_req(Kind.TYPE)
            kind = Kind.LAZY_PROTOCOL_WITNESS_TABLE_ACCESSOR if c == "l" else Kind.LAZY_PROTOCOL_WITNESS_TABLE_CACHE_VARIABLE
            return self._node(kind, None, ty, conf)
        if c == "t":
            name = self._pop_req(self._is_decl_name)
            conf = self.pop_protocol_conformance()
            return self._node(Kind.ASSOCIATED_TYPE_METADATA_ACCESSOR, None, conf, name)
        if c == "T":
            proto_ty = self._pop_req(Kind.TYPE)
            path = self.pop_assoc_type_path()
            conf = self.pop_protocol_conformance()
            return self._node(Kind.ASSOCIATED_TYPE_WITNESS_TABLE_ACCESSOR, None, conf, path, proto_ty)
        if c == "b":
            proto_ty = self._pop_req(Kind.TYPE)
            conf = self.pop_protocol_conformance()
            return self._node(Kind.BASE_WITNESS_TABLE_ACCESSOR, None, conf, proto_ty)
        if c == "O":
            opos = self.cur.pos
            o = self.cur.advance()
            kind = _OUTLINED.get(o)
            if kind is None:
                raise self._unknown(f"outlined operation {o!r}", opos)
            sig = self._pop(Kind.DEPENDENT_GENERIC_SIGNATURE)
            ty = self._pop_req(Kind.TYPE)
            return self._add_opt(self._node(kind, None, ty), sig)
        raise self._unknown(f"witness kind {c!r}", pos)

    # ------------------------------
    # X
    # ------------------------------

    def demangle_special_type(self) -> Node:
        pos = self.cur.pos
        c = self.cur.advance()
        kind = _SPECIAL_FUNCTION_TYPES.get(c)
        if kind is not None:
            return self.pop_function_type(kind)
        kind = _SPECIAL_WRAPPERS.get(c)
        if kind is not None:
            return self._type(self._node(kind, None, self._pop_req(Kind.TYPE)))
        if c in "Mm":
            rep = self.demangle_metatype_representation()
            ty = self._pop_req(Kind.TYPE)
            kind = Kind.METATYPE if c == "M" else Kind.EXISTENTIAL_METATYPE
            return self._type(self._node(kind, None, rep, ty))
        if c == "p":
            return self._type(self._node(Kind.EXISTENTIAL_METATYPE, None, self._pop_req(Kind.TYPE)))
        if c == "c":
            superclass = self._pop_req(Kind.TYPE)
            protocols = self.pop_protocol_list()
            return self._type(self._node(Kind.PROTOCOL_LIST_WITH_CLASS, None, protocols, superclass))
        if c == "l":
            return self._type(self._node(Kind.PROTOCOL_LIST_WITH_ANY_OBJECT, None, self.pop_protocol_list()))
        if c == "e":
            return self._type(self._node(Kind.ERROR_TYPE))
        raise self._unknown(f"special type {c!r}", pos)

    def demangle_metatype_representation(self) -> Node:
        pos = self.cur.pos
        c = self.cur.advance()
        rep = _METATYPE_REPRESENTATIONS.get(c)
        if rep is None:
            raise self._unknown(f"metatype representation {c!r}", pos)
        return self._node(Kind.METATYPE_REPRESENTATION, rep)

    # ------------------------------
    # I
    # ------------------------------

    def demangle_impl_function_type(self) -> Node:
        fn = self._node(Kind.IMPL_FUNCTION_TYPE)
        sig = self._pop(Kind.DEPENDENT_GENERIC_SIGNATURE)
        if sig is not None and self.cur.next_if("P"):
            sig = self._change_kind(sig, Kind.DEPENDENT_PSEUDOGENERIC_SIGNATURE)
        if self.cur.next_if("e"):
            self._add(fn, self._node(Kind.IMPL_ESCAPING))

        pos = self.cur.pos
        c = self.cur.advance()
        callee = _IMPL_CALLEE.get(c)
        if callee is None:
            raise self._unknown(f"callee convention {c!r}", pos)
        self._add(fn, self._node(Kind.IMPL_CONVENTION, callee))

        attr = _IMPL_FUNCTION_ATTR.get(self.cur.peek())
        if attr is not None:
            self.cur.advance()
            self._add(fn, self._node(Kind.IMPL_FUNCTION_ATTRIBUTE, attr))
        self._add_opt(fn, sig)

        n_types = 0
        while self.cur.peek() in _IMPL_PARAM:
            conv = _IMPL_PARAM[self.cur.advance()]
            self._add(fn, self._node(Kind.IMPL_PARAMETER, None, self._node(Kind.IMPL_CONVENTION, conv)))
            n_types += 1
        while self.cur.peek() in _IMPL_RESULT:
            conv = _IMPL_RESULT[self.cur.advance()]
            self._add(fn, self._node(Kind.IMPL_RESULT, None, self._node(Kind.IMPL_CONVENTION, conv)))
            n_types += 1
        if self.cur.next_if("z"):
            epos = self.cur.pos
            e = self.cur.advance()
            conv = _IMPL_RESULT.get(e)
            if conv is None:
                raise self._unknown(f"error result convention {e!r}", epos)
            self._add(fn, self._node(Kind.IMPL_ERROR_RESULT, None, self._node(Kind.IMPL_CONVENTION, conv)))
            n_types += 1
        self.cur.expect("_")

        for i in range(n_types):
            slot = fn.children[len(fn.children) - i - 1]
            self._add(slot, self._pop_req(Kind.TYPE))
            self.guard.check_depth(slot.depth + 1)
        fn.depth = 1 + max(ch.depth for ch in fn.children)
        return self._type(fn)

    # ------------------------------
    # T
    # ------------------------------

    def demangle_thunk_or_specialization(self) -> Node:
        pos = self.cur.pos
        c = self.cur.advance()
        kind = _THUNK_OF_ENTITY.get(c)
        if kind is not None:
            return self._node(kind, None, self._pop_req(self._is_entity))
        kind = _THUNK_ATTRIBUTES.get(c)
        if kind is not None:
            return self._node(kind)
        kind = _GENERIC_SPECIALIZATIONS.get(c)
        if kind is not None:
            return self.demangle_generic_specialization(kind)
        if c in "QY":
            kind = Kind.ASYNC_AWAIT_RESUME_PARTIAL_FUNCTION if c == "Q" else Kind.ASYNC_SUSPEND_RESUME_PARTIAL_FUNCTION
            return self._node(kind, None, self.demangle_index_as_node())
        if c == "V":
            base = self._pop_req(self._is_entity)
            derived = self._pop_req(self._is_entity)
            return self._node(Kind.V_TABLE_THUNK, None, derived, base)
        if c == "W":
            entity = self._pop_req(self._is_entity)
            conf = self.pop_protocol_conformance()
            return self._node(Kind.PROTOCOL_WITNESS, None, conf, entity)
        if c in "Rr":
            thunk = self._node(Kind.REABSTRACTION_THUNK_HELPER if c == "R" else Kind.REABSTRACTION_THUNK)
            self._add_opt(thunk, self._pop(Kind.DEPENDENT_GENERIC_SIGNATURE))
            ty2 = self._pop_req(Kind.TYPE)
            self._add(thunk, self._pop_req(Kind.TYPE))
            return self._add(thunk, ty2)
        if c in "pP":
            kind = Kind.GENERIC_PARTIAL_SPECIALIZATION if c == "p" else Kind.GENERIC_PARTIAL_SPECIALIZATION_NOT_RE_ABSTRACTED
            spec = self.demangle_spec_attributes(kind)
            return self._add(spec, self._node(Kind.GENERIC_SPECIALIZATION_PARAM, None, self._pop_req(Kind.TYPE)))
        if c == "f":
            return self.demangle_function_specialization()
        if c in "Kk":
            return self.demangle_key_path_accessor_thunk(
                Kind.KEY_PATH_GETTER_THUNK_HELPER if c == "K" else Kind.KEY_PATH_SETTER_THUNK_HELPER)
        if c in "Hh":
            return self.demangle_key_path_index_thunk(
                Kind.KEY_PATH_EQUALS_THUNK_HELPER if c == "H" else Kind.KEY_PATH_HASH_THUNK_HELPER)
        if c == "v":
            return self._node(Kind.OUTLINED_VARIABLE, self.demangle_index())
        if c == "e":
            start = self.cur.pos
            while self.cur.peek() in "ngu" and self.cur.peek():
                self.cur.advance()
            params = self.cur.text[start:self.cur.pos]
            self.cur.expect("_")
            return self._node(Kind.OUTLINED_BRIDGED_METHOD, params)
        raise self._unknown(f"thunk kind {c!r}", pos)

    def demangle_spec_attributes(self, kind: Kind) -> Node:
        is_serialized = self.cur.next_if("q")
        c = self.cur.advance()
        if not ("0" <= c <= "9"):
            raise self._malformed(f"Expected specialization pass id, got {c!r}")
        spec = self._node(kind)
        if is_serialized:
            self._add(spec, self._node(Kind.IS_SERIALIZED))
        self._add(spec, self._node(Kind.SPECIALIZATION_PASS_ID, ord(c) - ord("0")))
        return spec

    def demangle_generic_specialization(self, kind: Kind) -> Node:
        spec = self.demangle_spec_attributes(kind)
        tlist = self.pop_type_list()
        for ty in tlist.children:
            self._add(spec, self._node(Kind.GENERIC_SPECIALIZATION_PARAM, None, ty))
        return spec

    def demangle_function_specialization(self) -> Node:
        spec = self.demangle_spec_attributes(Kind.FUNCTION_SIGNATURE_SPECIALIZATION)
        while not self.cur.next_if("_"):
            self._add(spec, self.demangle_func_spec_param(Kind.FUNCTION_SIGNATURE_SPECIALIZATION_PARAM))
        if not self.cur.next_if("n"):
            self._add(spec, self.demangle_func_spec_param(Kind.FUNCTION_SIGNATURE_SPECIALIZATION_RETURN))

        # 상수 전파 페이로드는 스택에서 역순으로 꺼낸다
        for param in reversed(spec.children):
            if param.kind != Kind.FUNCTION_SIGNATURE_SPECIALIZATION_PARAM or not param.children:
                continue
            pk = param.children[0].index
            if pk in (_P.CONSTANT_PROP_FUNCTION, _P.CONSTANT_PROP_GLOBAL):
                name = self._pop_req(Kind.IDENTIFIER)
                self._add(param, self._node(Kind.FUNCTION_SIGNATURE_SPECIALIZATION_PARAM_PAYLOAD, name.text))
            elif pk == _P.CONSTANT_PROP_STRING:
                name = self._pop_req(Kind.IDENTIFIER)
                self._add(param, self._node(Kind.FUNCTION_SIGNATURE_SPECIALIZATION_PARAM_PAYLOAD, name.text))
        return spec

    def _func_spec_param_kind(self, param: Node, value: int) -> Node:
        return self._add(param, self._node(Kind.FUNCTION_SIGNATURE_SPECIALIZATION_PARAM_KIND, value))

    def demangle_func_spec_param(self, kind: Kind) -> Node:
        param = self._node(kind)
        pos = self.cur.pos
        c = self.cur.advance()
        if c == "n":
            return param
        if c == "c":
            raise self._unknown("closure-propagation specialization", pos)
        if c == "p":
            ppos = self.cur.pos
            p = self.cur.advance()
            if p == "f":
                return self._func_spec_param_kind(param, _P.CONSTANT_PROP_FUNCTION)
            if p == "g":
                return self._func_spec_param_kind(param, _P.CONSTANT_PROP_GLOBAL)
            if p in "id":
                self._func_spec_param_kind(param, _P.CONSTANT_PROP_INTEGER if p == "i" else _P.CONSTANT_PROP_FLOAT)
                start = self.cur.pos
                while self.cur.peek() and self.cur.peek() != "_":
                    self.cur.advance()
                if self.cur.pos == start:
                    raise self._malformed("Missing constant payload")
                literal = self.cur.text[start:self.cur.pos]
                self.cur.expect("_")
                return self._add(param, self._node(Kind.FUNCTION_SIGNATURE_SPECIALIZATION_PARAM_PAYLOAD, literal))
            if p == "s":
                epos = self.cur.pos
                e = self.cur.advance()
                encoding = {"b": "u8", "w": "u16", "c": "objc"}.get(e)
                if encoding is None:
                    raise self._unknown(f"string encoding {e!r}", epos)
                self._func_spec_param_kind(param, _P.CONSTANT_PROP_STRING)
                return self._add(param, self._node(Kind.FUNCTION_SIGNATURE_SPECIALIZATION_PARAM_PAYLOAD, encoding))
            raise self._unknown(f"constant propagation kind {p!r}", ppos)
        if c == "e":
            value = _P.EXISTENTIAL_TO_GENERIC
            if self.cur.next_if("D"):
                value |= _P.DEAD
            if self.cur.next_if("G"):
                value |= _P.OWNED_TO_GUARANTEED
            if self.cur.next_if("O"):
                value |= _P.GUARANTEED_TO_OWNED
            if self.cur.next_if("X"):
                value |= _P.SROA
            return self._func_spec_param_kind(param, value)
        if c == "d":
            value = _P.DEAD
            if self.cur.next_if("G"):
                value |= _P.OWNED_TO_GUARANTEED
            if self.cur.next_if("O"):
                value |= _P.GUARANTEED_TO_OWNED
            if self.cur.next_if("X"):
                value |= _P.SROA
            return self._func_spec_param_kind(param, value)
        if c == "g":
            value = _P.OWNED_TO_GUARANTEED
            if self.cur.next_if("X"):
                value |= _P.SROA
            return self._func_spec_param_kind(param, value)
        if c == "o":
            value = _P.GUARANTEED_TO_OWNED
            if self.cur.next_if("X"):
                value |= _P.SROA
            return self._func_spec_param_kind(param, value)
        simple = {"x": _P.SROA, "i": _P.BOX_TO_VALUE, "s": _P.BOX_TO_STACK, "r": _P.IN_OUT_TO_OUT}.get(c)
        if simple is not None:
            return self._func_spec_param_kind(param, simple)
        raise self._unknown(f"function signature specialization parameter {c!r}", pos)

    def demangle_key_path_accessor_thunk(self, kind: Kind) -> Node:
        is_serialized = self.cur.next_if("q")
        types: List[Node] = []
        n = self._pop_req(Kind.TYPE)
        while n is not None and n.kind == Kind.TYPE:
            types.append(n)
            n = self._pop()
        if n is None:
            raise self._malformed("Key path thunk is missing its declaration")
        if n.kind == Kind.DEPENDENT_GENERIC_SIGNATURE:
            decl = self._pop_req()
            result = self._node(kind, None, decl, n)
        else:
            result = self._node(kind, None, n)
        for ty in reversed(types):
            self._add(result, ty)
        if is_serialized:
            self._add(result, self._node(Kind.IS_SERIALIZED))
        return result

    def demangle_key_path_index_thunk(self, kind: Kind) -> Node:
        is_serialized = self.cur.next_if("q")
        sig: Optional[Node] = None
        types: List[Node] = []
        n = self._pop_req((Kind.TYPE, Kind.DEPENDENT_GENERIC_SIGNATURE))
        if n.kind == Kind.DEPENDENT_GENERIC_SIGNATURE:
            sig = n
        else:
            types.append(n)
        while self.stack:
            types.append(self._pop_req(Kind.TYPE))
        result = self._node(kind)
        for ty in reversed(types):
            self._add(result, ty)
        self._add_opt(result, sig)
        if is_serialized:
            self._add(result, self._node(Kind.IS_SERIALIZED))
        return result

    # ---- parser 모듈의 판정 함수(순환 import 회피) ----

    @staticmethod
    def _is_entity(k: Kind) -> bool:
        from .parser import is_entity
        return is_entity(k)

    @staticmethod
    def _is_context(k: Kind) -> bool:
        from .parser import is_context
        return is_context(k)

    @staticmethod
    def _is_decl_name(k: Kind) -> bool:
        from .parser import is_decl_name
        return is_decl_name(k)
