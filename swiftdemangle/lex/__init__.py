"""swiftdemangle 커서(runtime) — 맹글된 이름 위를 한 글자씩 전진하는 읽기 전용 뷰.

특징
----
- 공백 없는 ASCII 토큰 스트림을 다룬다(맹글 문법은 한 글자 태그 + 10진 정수 + 길이접두 문자열).
- 되감기는 **직전 한 글자**까지만 허용(`push_back`). 문법상 한 토큰 lookahead면 충분하다.
- 모든 실패는 현재 오프셋을 담은 `MalformedInput`으로 보고한다.

API
---
- `Cursor(text, pos=0)`
    - `peek() -> str`            : 다음 글자(끝이면 "")
    - `advance() -> str`         : 다음 글자를 소비(끝이면 MalformedInput)
    - `next_if(lit) -> bool`     : lit가 있으면 소비하고 True
    - `expect(lit) -> None`      : lit가 없으면 MalformedInput
    - `read_integer() -> int`    : 10진수(오버플로 검사)
    - `read_length_prefixed_span() -> str`
- `Limits(max_depth, max_nodes)` / `Guard` — 재귀 깊이·노드 수 제한
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from ..grammar.errors import MalformedInput, SymbolTooComplex

# 인덱스/길이로 쓰는 정수의 상한(부호 없는 32비트)
MAX_NATURAL = (1 << 32) - 1


class Cursor:
    def __init__(self, text: str, pos: int = 0):
        self.text = text
        self.pos = pos

    # ------------------------------
    # 상태 조회
    # ------------------------------

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def remaining(self) -> int:
        return len(self.text) - self.pos

    def rest(self) -> str:
        return self.text[self.pos:]

    def peek(self) -> str:
        if self.pos >= len(self.text):
            return ""
        return self.text[self.pos]

    def peek_at(self, offset: int) -> str:
        i = self.pos + offset
        if 0 <= i < len(self.text):
            return self.text[i]
        return ""

    def fail(self, message: str, pos: Optional[int] = None) -> MalformedInput:
        """현재 위치의 MalformedInput을 만든다(raise는 호출자가)."""
        return MalformedInput(message, self.text, self.pos if pos is None else pos)

    # ------------------------------
    # 소비
    # ------------------------------

    def advance(self) -> str:
        if self.pos >= len(self.text):
            raise self.fail("Unexpected end of input")
        c = self.text[self.pos]
        self.pos += 1
        return c

    def push_back(self) -> None:
        if self.pos == 0:
            raise self.fail("Cannot push back at start of input")
        self.pos -= 1

    def next_if(self, lit: str) -> bool:
        if self.text.startswith(lit, self.pos):
            self.pos += len(lit)
            return True
        return False

    def expect(self, lit: str) -> None:
        if not self.next_if(lit):
            got = self.peek() or "end of input"
            raise self.fail(f"Expected {lit!r}, got {got!r}")

    def take(self, n: int) -> str:
        if n < 0 or self.pos + n > len(self.text):
            raise self.fail(f"Span of {n} characters exceeds input")
        s = self.text[self.pos:self.pos + n]
        self.pos += n
        return s

    def take_all(self) -> str:
        s = self.text[self.pos:]
        self.pos = len(self.text)
        return s

    def is_digit(self) -> bool:
        c = self.peek()
        return "0" <= c <= "9" if c else False

    def read_integer(self) -> int:
        """10진 자연수. 숫자가 하나도 없으면 MalformedInput."""
        start = self.pos
        value = 0
        while self.is_digit():
            value = value * 10 + (ord(self.text[self.pos]) - 48)
            if value > MAX_NATURAL:
                raise self.fail("Integer overflow", start)
            self.pos += 1
        if self.pos == start:
            got = self.peek() or "end of input"
            raise self.fail(f"Expected a decimal integer, got {got!r}")
        return value

    def read_integer_opt(self) -> Optional[int]:
        """숫자가 없으면 None(소비 없음)."""
        if not self.is_digit():
            return None
        return self.read_integer()

    def read_length_prefixed_span(self) -> str:
        """`<len><chars>` 형태. 길이 0은 허용하지 않는다."""
        start = self.pos
        n = self.read_integer()
        if n == 0:
            raise self.fail("Zero-length identifier", start)
        return self.take(n)


# ------------------------------
# 깊이/크기 가드
# ------------------------------

@dataclass(frozen=True)
class Limits:
    """parse 호출 하나에 적용되는 제한값

    - max_depth : 트리 높이 상한(프린터의 재귀 한도 안쪽이어야 한다)
    - max_nodes : 노드 생성 횟수 상한
    """
    max_depth: int = 128
    max_nodes: int = 1 << 16


DEFAULT_LIMITS = Limits()


class Guard:
    """문법 엔진이 노드를 만들 때마다, 재귀 진입마다 참조하는 카운터."""

    def __init__(self, cursor: Cursor, limits: Limits = DEFAULT_LIMITS):
        self.cursor = cursor
        self.limits = limits
        self.nodes = 0
        self.recursion = 0

    def _too_complex(self, what: str) -> SymbolTooComplex:
        return SymbolTooComplex(f"Symbol too complex ({what})", self.cursor.text, self.cursor.pos)

    def count_node(self) -> None:
        self.nodes += 1
        if self.nodes > self.limits.max_nodes:
            raise self._too_complex(f"more than {self.limits.max_nodes} nodes")

    def check_depth(self, depth: int) -> None:
        if depth > self.limits.max_depth:
            raise self._too_complex(f"nesting deeper than {self.limits.max_depth}")

    def enter(self) -> "Guard":
        self.recursion += 1
        if self.recursion > self.limits.max_depth:
            self.recursion -= 1
            raise self._too_complex(f"recursion deeper than {self.limits.max_depth}")
        return self

    def leave(self) -> None:
        self.recursion -= 1

    def __enter__(self) -> "Guard":
        return self.enter()

    def __exit__(self, *exc) -> None:
        self.leave()
