# swiftdemangle/codegen/options.py
"""Print Options
- 출력 표기 토글 21개를 고정폭 비트 플래그(IntFlag)로 묶는다.
- 프리셋(DEFAULT / SIMPLIFIED)은 토글들의 합집합일 뿐 별도 코드 경로가 아니다.
- 문자열 목록("qualifyEntities,shortenThunk")을 플래그로 바꾸는 `parse_names` 제공(CLI --options).
"""

from __future__ import annotations
from enum import IntFlag
from typing import List, Tuple

import regex


class PrintOptions(IntFlag):
    SYNTHESIZE_SUGAR = 1 << 0
    QUALIFY_ENTITIES = 1 << 1
    DISPLAY_EXTENSION_CONTEXTS = 1 << 2
    DISPLAY_UNMANGLED_SUFFIX = 1 << 3
    DISPLAY_MODULE_NAMES = 1 << 4
    DISPLAY_GENERIC_SPECIALIZATIONS = 1 << 5
    DISPLAY_PROTOCOL_CONFORMANCES = 1 << 6
    DISPLAY_WHERE_CLAUSES = 1 << 7
    DISPLAY_ENTITY_TYPES = 1 << 8
    SHORTEN_PARTIAL_APPLY = 1 << 9
    SHORTEN_THUNK = 1 << 10
    SHORTEN_VALUE_WITNESS = 1 << 11
    SHORTEN_ARCHETYPE = 1 << 12
    SHOW_PRIVATE_DISCRIMINATORS = 1 << 13
    SHOW_FUNCTION_ARGUMENT_TYPES = 1 << 14
    SHOW_ASYNC_RESUME_PARTIAL = 1 << 15
    DISPLAY_STDLIB_MODULE = 1 << 16
    DISPLAY_DEBUGGER_GENERATED_MODULE = 1 << 17
    PRINT_FOR_TYPE_NAME = 1 << 18
    SHOW_CLOSURE_SIGNATURE = 1 << 19
    DISPLAY_OBJC_MODULE = 1 << 20

    NONE = 0

    DEFAULT = (DISPLAY_DEBUGGER_GENERATED_MODULE | QUALIFY_ENTITIES | DISPLAY_EXTENSION_CONTEXTS
               | DISPLAY_UNMANGLED_SUFFIX | DISPLAY_MODULE_NAMES | DISPLAY_GENERIC_SPECIALIZATIONS
               | DISPLAY_PROTOCOL_CONFORMANCES | DISPLAY_WHERE_CLAUSES | DISPLAY_ENTITY_TYPES
               | SHOW_PRIVATE_DISCRIMINATORS | SHOW_FUNCTION_ARGUMENT_TYPES | SHOW_ASYNC_RESUME_PARTIAL
               | DISPLAY_STDLIB_MODULE | DISPLAY_OBJC_MODULE | SHOW_CLOSURE_SIGNATURE)

    # DEFAULT 위에 짧게 줄이는 토글 + 설탕 구문
    SIMPLIFIED = (DEFAULT | SYNTHESIZE_SUGAR | SHORTEN_PARTIAL_APPLY | SHORTEN_THUNK
                  | SHORTEN_VALUE_WITNESS | SHORTEN_ARCHETYPE)

    @classmethod
    def parse_names(cls, text: str) -> Tuple["PrintOptions", List[str]]:
        """
        쉼표/공백으로 구분된 이름 목록 → (플래그, 알 수 없는 이름들)
        - 대소문자, '_' / '-' 는 무시: "displayObjCModule" == "DISPLAY_OBJC_MODULE" == "display-objc-module"
        - 프리셋 이름(default, simplified)도 허용
        """
        table = {_normalize(name): member for name, member in cls.__members__.items()}
        table.update((alias, cls[name]) for alias, name in _ALIASES.items())
        flags = cls.NONE
        unknown: List[str] = []
        for word in regex.split(r"[,\s]+", text.strip()):
            if not word:
                continue
            member = table.get(_normalize(word))
            if member is None:
                unknown.append(word)
            else:
                flags |= member
        return flags, unknown


# 예전 도구에서 쓰던 긴 이름
_ALIASES = {"synthesizesugarontypes": "SYNTHESIZE_SUGAR"}


def _normalize(name: str) -> str:
    return regex.sub(r"[_\-]", "", name).lower()


# 기준 코퍼스는 DEFAULT에 설탕 구문을 더한 설정으로 기록되어 있다
CORPUS_OPTIONS = PrintOptions.DEFAULT | PrintOptions.SYNTHESIZE_SUGAR
