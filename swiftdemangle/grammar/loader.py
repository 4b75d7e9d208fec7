"""(코퍼스) `input ---> output` 줄 형식 로더"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib    import Path
from typing     import List

import regex as re

# 구분자는 정확히 ' ---> '. 그보다 짧은 화살표(' --> ', ' -> ')만 있는 줄은 건너뛴다
_ARROW = re.compile(r" ---> ")
_SHORT_ARROW = re.compile(r" -{1,2}> ")
# 출력 앞의 `{...} ` 주석(예: "{T:$s...} ")
_BRACE_PREFIX = re.compile(r"^\{[^}]*\} ")


@dataclass(frozen=True)
class CorpusEntry:
    """
    CorpusEntry
    ===========
    - mangled  : 입력 심볼
    - expected : 기대 출력. mangled와 같으면 "파싱 실패가 정답"
    - line     : 원본 파일 줄 번호(1-기준)
    """
    mangled: str
    expected: str
    line: int = 0

    @property
    def expects_failure(self) -> bool:
        return self.mangled == self.expected


def load_corpus_text(path: str) -> str:
    """
    Load Corpus Text
    """
    text = Path(path).read_text(encoding="utf-8")
    return text.replace("\r\n", "\n").replace("\r", "\n")


def parse_corpus(text: str) -> List[CorpusEntry]:
    """
    빈 줄과 `#` 주석 줄은 무시.
    - 입력의 선행 `__` 는 `_` 로 줄인다
    - 출력의 `{...} ` 주석은 떼어낸다
    - ' ---> ' 없이 짧은 화살표만 있는 줄은 건너뛴다
    - 그 밖에 나눌 수 없는 줄은 ValueError
    """
    entries: List[CorpusEntry] = []
    for lineno, raw in enumerate(text.split("\n"), start=1):
        line = raw.rstrip()
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        parts = _ARROW.split(line)
        if len(parts) != 2:
            if _SHORT_ARROW.search(line):
                continue
            raise ValueError(f"line {lineno}: cannot split corpus entry {line!r}")
        mangled, expected = parts[0].strip(), parts[1].strip()
        if mangled.startswith("__"):
            mangled = mangled[1:]
        expected = _BRACE_PREFIX.sub("", expected, count=1)
        entries.append(CorpusEntry(mangled, expected, lineno))
    return entries


def load_corpus(path: str) -> List[CorpusEntry]:
    return parse_corpus(load_corpus_text(path))
