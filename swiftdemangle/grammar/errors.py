"""디맹글 오류 분류

모든 파싱 실패는 `DemangleError`의 하위 클래스로 보고된다.
- 오류는 입력 문자열(`text`)과 0-기준 위치(`pos`)를 함께 가진다.
- 메시지 말미에는 입력 원문과 캐럿(^) 줄을 붙여 실패 위치를 보여준다.
- 한 번의 parse 호출 안에서 첫 오류가 곧 최종 결과다(재시도/부분 복구 없음).
"""

from __future__ import annotations
from typing import Optional


def _snippet_caret_at_pos(text: str, pos: int) -> str:
    """입력 한 줄 + 임의 위치 pos에 캐럿"""
    pos = max(0, min(pos, len(text)))
    return f"{text}\n{' ' * pos}^"


class DemangleError(Exception):
    """parse 실패의 공통 기반 클래스"""

    def __init__(self, message: str, text: str = "", pos: int = 0):
        self.message = message
        self.text = text
        self.pos = pos
        super().__init__(message, text, pos)

    def __str__(self) -> str:
        if not self.text:
            return self.message
        return f"{self.message} at offset {self.pos}\n{_snippet_caret_at_pos(self.text, self.pos)}"


class MalformedInput(DemangleError):
    """입력이 필요한 곳에서 끝났거나 기대한 토큰이 없음"""


class UnknownProduction(DemangleError):
    """현재 문법 버전에서 인식할 수 없는 태그"""


class InvalidSubstitution(DemangleError):
    """치환표 범위를 벗어난 역참조(전방 참조 포함)"""


class InvalidIdentifierEncoding(DemangleError):
    """식별자 길이 불일치, 단어 치환 색인 오류, punycode 페이로드 오류"""


class SymbolTooComplex(DemangleError):
    """깊이/노드 수 제한 초과"""


class UnsupportedManglingVersion(DemangleError):
    """인식은 되지만 구현되지 않은 맹글링 접두사"""


def describe(exc: BaseException, text: Optional[str] = None) -> str:
    """CLI/JSON 출력용 한 줄 설명. 캐럿 스니펫은 뺀다."""
    if isinstance(exc, DemangleError):
        return f"{type(exc).__name__}: {exc.message} at offset {exc.pos}"
    return f"{type(exc).__name__}: {exc}" if text is None else f"{type(exc).__name__}: {exc} ({text!r})"
