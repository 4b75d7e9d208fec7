"""식별자 디코더

세 가지 인코딩을 푼다.
1) `<len><chars>`                       — 길이접두 원문
2) `0<words...><len><chars>...`         — 단어 치환: 앞서 본 카멜케이스 단어를 a-z/A-Z 한 글자로 재사용
3) `00<len>[_]<punycode>`               — 유니코드 식별자(Swift 변형 punycode: 구분자 '_', 숫자 a-z A-J)

단어 사전은 parse 호출마다 새로 만든다(최대 26개).
"""

from __future__ import annotations
from typing import List

from .errors import InvalidIdentifierEncoding
from ..lex import Cursor

MAX_WORDS = 26


# ------------------------------
# 단어 사전
# ------------------------------

def _is_word_start(c: str) -> bool:
    return c != "" and not ("0" <= c <= "9") and c != "_"


def _is_word_end(c: str, prev: str) -> bool:
    if c == "_" or c == "":
        return True
    return not prev.isupper() and c.isupper()


class WordTable:
    def __init__(self):
        self.words: List[str] = []

    def __len__(self) -> int:
        return len(self.words)

    def __getitem__(self, i: int) -> str:
        return self.words[i]

    def add_words_of(self, ident: str) -> None:
        """
        식별자를 단어 경계로 쪼개 사전에 추가.
        - 단어 시작: 숫자/'_'가 아닌 글자
        - 단어 끝  : '_' 또는 소문자→대문자 경계, 문자열 끝
        - 2글자 미만은 버린다
        """
        start = -1
        for i in range(len(ident) + 1):
            c = ident[i] if i < len(ident) else ""
            if start >= 0 and _is_word_end(c, ident[i - 1]):
                if i - start >= 2 and len(self.words) < MAX_WORDS:
                    self.words.append(ident[start:i])
                start = -1
            if start < 0 and _is_word_start(c):
                start = i


# ------------------------------
# 식별자
# ------------------------------

def _bad(cursor: Cursor, message: str, pos: int) -> InvalidIdentifierEncoding:
    return InvalidIdentifierEncoding(message, cursor.text, pos)


def decode_identifier(cursor: Cursor, words: WordTable) -> str:
    """커서가 숫자 위에 있을 때 호출한다."""
    start = cursor.pos
    has_word_substs = False
    is_punycoded = False
    if cursor.next_if("0"):
        if cursor.next_if("0"):
            is_punycoded = True
        else:
            has_word_substs = True

    parts: List[str] = []
    while True:
        while has_word_substs and cursor.peek().isalpha():
            c = cursor.advance()
            if c.islower():
                idx = ord(c) - ord("a")
            else:
                idx = ord(c) - ord("A")
                has_word_substs = False
            if idx >= len(words):
                raise _bad(cursor, f"Word substitution {c!r} refers to an unknown word", cursor.pos - 1)
            parts.append(words[idx])
        if cursor.next_if("0"):
            break
        n_pos = cursor.pos
        if not cursor.is_digit():
            raise _bad(cursor, "Expected identifier length", n_pos)
        n = cursor.read_integer()
        if n <= 0:
            raise _bad(cursor, "Zero-length identifier", n_pos)
        if is_punycoded:
            cursor.next_if("_")
        if cursor.remaining() < n:
            raise _bad(cursor, f"Identifier length {n} exceeds input", n_pos)
        chunk = cursor.take(n)
        if is_punycoded:
            decoded = decode_punycode(chunk)
            if decoded is None:
                raise _bad(cursor, "Malformed punycode identifier", n_pos)
            parts.append(decoded)
        else:
            parts.append(chunk)
            words.add_words_of(chunk)
        if not has_word_substs:
            break

    ident = "".join(parts)
    if not ident:
        raise _bad(cursor, "Empty identifier", start)
    return ident


# ------------------------------
# punycode (Swift 변형)
# ------------------------------

_BASE, _TMIN, _TMAX, _SKEW, _DAMP = 36, 1, 26, 38, 700
_INITIAL_BIAS, _INITIAL_N = 72, 128
_INT32_MAX = (1 << 31) - 1


def _digit_value(c: str) -> int:
    if "a" <= c <= "z":
        return ord(c) - ord("a")
    if "A" <= c <= "J":
        return ord(c) - ord("A") + 26
    return -1


def _adapt(delta: int, numpoints: int, first: bool) -> int:
    delta = delta // _DAMP if first else delta // 2
    delta += delta // numpoints
    k = 0
    while delta > ((_BASE - _TMIN) * _TMAX) // 2:
        delta //= _BASE - _TMIN
        k += _BASE
    return k + ((_BASE - _TMIN + 1) * delta) // (delta + _SKEW)


def decode_punycode(s: str):
    """성공하면 str, 페이로드가 잘못되면 None"""
    n, i, bias = _INITIAL_N, 0, _INITIAL_BIAS
    out: List[int] = []
    delim = s.rfind("_")
    if delim >= 0:
        for c in s[:delim]:
            if ord(c) >= 0x80:
                return None
            out.append(ord(c))
        s = s[delim + 1:]

    pos = 0
    while pos < len(s):
        old_i, w, k = i, 1, _BASE
        while True:
            if pos >= len(s):
                return None
            digit = _digit_value(s[pos])
            pos += 1
            if digit < 0:
                return None
            if digit > (_INT32_MAX - i) // w:
                return None
            i += digit * w
            t = _TMIN if k <= bias else _TMAX if k >= bias + _TMAX else k - bias
            if digit < t:
                break
            if w > _INT32_MAX // (_BASE - t):
                return None
            w *= _BASE - t
            k += _BASE
        bias = _adapt(i - old_i, len(out) + 1, old_i == 0)
        if i // (len(out) + 1) > _INT32_MAX - n:
            return None
        n += i // (len(out) + 1)
        i %= len(out) + 1
        if n < 0x80:
            return None
        out.insert(i, n)
        i += 1

    chars: List[str] = []
    for cp in out:
        # 0xD800 + ASCII 는 식별자에 못 쓰는 ASCII 기호를 옮겨 담은 것
        if 0xD800 <= cp < 0xD880:
            cp -= 0xD800
        if cp > 0x10FFFF or 0xD800 <= cp < 0xE000:
            return None
        chars.append(chr(cp))
    return "".join(chars)
