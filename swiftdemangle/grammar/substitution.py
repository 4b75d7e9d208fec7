"""치환표(SubstitutionTable)

맹글 압축 방식: 완성된 하위 트리를 처음 등장한 순서대로 기록해 두고,
뒤에서는 짧은 역참조 코드로 다시 가리킨다.
- 기록은 해당 생산이 **끝나는 순간**에만 일어난다 → 앞쪽 참조만 가능
- resolve는 기록된 노드 객체를 그대로 돌려준다(공유; 이후 수정 금지)
- 범위 밖 참조는 InvalidSubstitution
"""

from __future__ import annotations
from typing import List

from .ast import Node
from .errors import InvalidSubstitution
from ..lex import Cursor


class SubstitutionTable:
    def __init__(self, cursor: Cursor):
        self.cursor = cursor
        self.entries: List[Node] = []

    def __len__(self) -> int:
        return len(self.entries)

    def record(self, node: Node) -> None:
        self.entries.append(node)

    def resolve(self, index: int) -> Node:
        if index < 0 or index >= len(self.entries):
            raise InvalidSubstitution(
                f"Back-reference {index} out of range ({len(self.entries)} recorded)",
                self.cursor.text, self.cursor.pos)
        return self.entries[index]

    def clear(self) -> None:
        self.entries.clear()


def decode_multi_index(c: str) -> int:
    """`A` 치환 한 글자: 대문자는 마지막 항목, 소문자는 계속. 'a'/'A' → 0"""
    if "a" <= c <= "z":
        return ord(c) - ord("a")
    return ord(c) - ord("A")


def read_base62_index(cursor: Cursor) -> int:
    """
    `_` → 0, `<base62>_` → value + 1
    base62 숫자: 0-9, a-z(10..35), A-Z(36..61)
    """
    if cursor.next_if("_"):
        return 0
    start = cursor.pos
    value = 0
    while not cursor.next_if("_"):
        c = cursor.peek()
        if not c:
            raise cursor.fail("Unterminated index", start)
        if "0" <= c <= "9":
            d = ord(c) - ord("0")
        elif "a" <= c <= "z":
            d = ord(c) - ord("a") + 10
        elif "A" <= c <= "Z":
            d = ord(c) - ord("A") + 36
        else:
            raise cursor.fail(f"Invalid index character {c!r}")
        cursor.pos += 1
        value = value * 62 + d
    return value + 1
