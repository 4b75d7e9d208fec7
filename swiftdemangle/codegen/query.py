# swiftdemangle/codegen/query.py
"""트리 질의(읽기 전용)

완성된 트리에서 도구 친화적인 요약 값을 뽑는다.
- identifier : 너비 우선으로 처음 만나는 Identifier 이름
- test_name  : 선언 엔티티의 점 구분 이름 조각들 (["main", "Foo", "init(a,b)"])
- module     : 너비 우선으로 처음 만나는 Module (제네릭 특수화 인자의 모듈로 대체될 수 있음)
- type_name  : 선언 타입 이름
- to_dict    : 위 값 + 사람이 읽는 설명을 묶은 JSON 레코드
"""

from __future__ import annotations
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from ..grammar.ast import Kind, Node
from .options import PrintOptions
from .printer import STDLIB_NAME, print_node


def identifier(n: Node) -> Optional[str]:
    queue: Deque[Node] = deque([n])
    while queue:
        item = queue.popleft()
        if item.kind == Kind.IDENTIFIER:
            return item.contents if item.has_text else None
        queue.extend(item.children)
    return None


# ------------------------------
# test_name
# ------------------------------

# 첫 자식 이름 뒤에 붙이는 꼬리표
_SUFFIXES: Dict[Kind, str] = {
    Kind.I_VAR_DESTROYER: "ivar_destroyer",
    Kind.DEALLOCATOR: "deallocator",
    Kind.INITIALIZER: "init",
    Kind.TYPE_METADATA_ACCESS_FUNCTION: "typeMetadataAccess",
    Kind.TYPE_METADATA_COMPLETION_FUNCTION: "typeMetadataCompletion",
    Kind.OUTLINED_DESTROY: "outlined destroy",
    Kind.OUTLINED_RELEASE: "outlined release",
    Kind.OUTLINED_RETAIN: "outlined retain",
    Kind.OUTLINED_INITIALIZE_WITH_COPY: "outlined init",
    Kind.OUTLINED_INITIALIZE_WITH_TAKE: "outlined init",
    Kind.OUTLINED_ASSIGN_WITH_COPY: "outlined assign",
    Kind.OUTLINED_ASSIGN_WITH_TAKE: "outlined assign",
    Kind.GETTER: "getter",
    Kind.SETTER: "setter",
    Kind.DID_SET: "didset",
    Kind.WILL_SET: "willset",
    Kind.UNSAFE_MUTABLE_ADDRESSOR: "addressor",
    Kind.OBJ_C_METADATA_UPDATE_FUNCTION: "metadata update",
    Kind.DESTRUCTOR: "deinit",
    Kind.VALUE_WITNESS: "value witness",
}

# 자식들의 이름을 이어 붙이기만 하는 종류
_CONCAT = frozenset([
    Kind.TYPE_ALIAS, Kind.PROTOCOL, Kind.ENUM, Kind.STRUCTURE, Kind.CLASS, Kind.MODIFY_ACCESSOR,
    Kind.PARTIAL_APPLY_FORWARDER, Kind.PARTIAL_APPLY_OBJ_C_FORWARDER, Kind.TYPE, Kind.STATIC,
    Kind.TYPE_MANGLING,
])

# 첫 자식에게 그대로 위임하는 종류
_FIRST_CHILD = frozenset([
    Kind.LAZY_PROTOCOL_WITNESS_TABLE_ACCESSOR, Kind.PROTOCOL_WITNESS_TABLE_ACCESSOR,
    Kind.BASE_WITNESS_TABLE_ACCESSOR, Kind.BOUND_GENERIC_CLASS, Kind.PROTOCOL_CONFORMANCE,
    Kind.EXPLICIT_CLOSURE, Kind.IMPLICIT_CLOSURE, Kind.DEFAULT_ARGUMENT_INITIALIZER,
])


def _concat(nodes: List[Node]) -> List[str]:
    out: List[str] = []
    for c in nodes:
        out.extend(test_name(c))
    return out


def _first_component(n: Node, suffix: str) -> List[str]:
    if not n.children:
        return []
    return test_name(n.children[0]) + [suffix]


def _with_labels(prefix: List[str], name: str, labels: Node) -> List[str]:
    args = _concat(labels.children)
    if not args:
        return prefix + [name]
    return prefix + [f"{name}({','.join(args)})"]


def test_name(n: Node) -> List[str]:
    """선언 엔티티의 이름 조각. 이름이 없는 종류는 []"""
    k = n.kind
    if k == Kind.GLOBAL:
        for c in n.children:
            result = test_name(c)
            if result:
                return result
        return []
    if k in (Kind.MODULE, Kind.IDENTIFIER):
        return [n.contents] if n.has_text else []
    if k in _FIRST_CHILD:
        return test_name(n.children[0]) if n.children else []
    if k in _SUFFIXES:
        return _first_component(n, _SUFFIXES[k])
    if k in _CONCAT:
        return _concat(n.children)
    if k == Kind.PROTOCOL_WITNESS:
        ident = identifier(n.children[1])
        return test_name(n.children[0]) + ([ident] if ident is not None else [])
    if k == Kind.PRIVATE_DECL_NAME:
        # 이름 없는 선언(이니셜라이저 등)은 판별자만 가진다
        return test_name(n.children[1]) if len(n.children) >= 2 else []
    if k == Kind.EXTENSION:
        return test_name(n.children[1])
    if k == Kind.VARIABLE:
        return _concat([c for c in n.children if c.kind != Kind.TYPE])
    if k == Kind.FUNCTION:
        if len(n.children) >= 3 and n.children[2].kind == Kind.LABEL_LIST:
            names = test_name(n.children[1])
            if names:
                return _with_labels(test_name(n.children[0]), names[0], n.children[2])
        return _concat(n.children)
    if k in (Kind.CONSTRUCTOR, Kind.ALLOCATOR):
        if len(n.children) >= 2 and n.children[1].kind == Kind.LABEL_LIST:
            return _with_labels(test_name(n.children[0]), "init", n.children[1])
        return _concat(n.children)
    return []


# ------------------------------
# module / type_name
# ------------------------------

def module(n: Node) -> Optional[str]:
    """
    너비 우선으로 처음 만나는 모듈 이름.
    표준 라이브러리 모듈이면, 앞서 본 제네릭 특수화 인자(또는 Optional 류 인자)의 모듈로 대체한다.
    """
    specialized: Optional[str] = None
    queue: Deque[Node] = deque([n])
    while queue:
        item = queue.popleft()
        if item.kind == Kind.MODULE:
            if specialized is not None and item.text == STDLIB_NAME:
                return specialized
            return item.text
        if item.kind == Kind.BOUND_GENERIC_ENUM:
            for c in item.children:
                if c.kind == Kind.TYPE_LIST and specialized is None:
                    specialized = module(c)
        elif item.kind == Kind.GENERIC_SPECIALIZATION:
            for c in item.children:
                if c.kind == Kind.GENERIC_SPECIALIZATION_PARAM and specialized is None:
                    specialized = module(c)
            continue
        queue.extend(item.children)
    return None


def type_name(n: Node) -> Optional[str]:
    queue: Deque[Node] = deque([n])
    fallback: Optional[str] = None
    while queue:
        item = queue.popleft()
        k = item.kind
        if k == Kind.ENUM:
            if module(item) == STDLIB_NAME:
                fallback = next((t for t in map(type_name, item.children) if t is not None), None)
            else:
                queue.extend(item.children)
        elif k == Kind.IDENTIFIER:
            if item.has_text:
                return item.contents
        elif k in (Kind.FUNCTION, Kind.VARIABLE):
            if k == Kind.FUNCTION:
                inner = next((c for c in item.children if c.kind == Kind.FUNCTION), None)
                found = type_name(inner) if inner is not None else None
                if found is not None:
                    return found
            queue.extend(c for c in item.children if c.kind not in (Kind.IDENTIFIER, Kind.LOCAL_DECL_NAME))
        elif k == Kind.EXTENSION:
            queue.extend(item.children[1:])
        elif k in (Kind.LABEL_LIST, Kind.MODULE):
            continue
        elif k == Kind.PRIVATE_DECL_NAME:
            queue.extend(c for c in item.children
                         if not (c.kind == Kind.IDENTIFIER and c.text.startswith("_")))
        else:
            queue.extend(item.children)
    return fallback


# ------------------------------
# JSON 레코드
# ------------------------------

def to_dict(n: Node, mangled: Optional[str] = None, options: PrintOptions = PrintOptions.DEFAULT) -> Dict[str, Any]:
    ident = identifier(n)
    tname = type_name(n)
    return {
        "name": ident,
        "type": tname,
        "identifier": ident,
        "module": module(n),
        "testName": test_name(n),
        "typeName": tname,
        "description": print_node(n, options),
        "mangled": mangled,
    }
