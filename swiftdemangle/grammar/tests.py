"""기준 코퍼스 스모크 러너

    $ python -m swiftdemangle.grammar.tests [CORPUS]

코퍼스의 각 줄을 parse → print 한 결과와 기대 출력을 비교해 OK/FAIL을 찍는다.
기대 출력이 입력과 같은 줄은 "파싱이 실패해야 함"을 뜻한다.
"""

from __future__ import annotations
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import regex

from .errors import DemangleError, describe
from .loader import CorpusEntry, load_corpus
from .parser import parse
from ..codegen.options import CORPUS_OPTIONS, PrintOptions
from ..codegen.printer import print_node

CORPUS = Path("tests/data/manglings.txt")


@dataclass
class CorpusResult:
    entry: CorpusEntry
    ok: bool
    got: Optional[str] = None       # 출력 문자열(파싱 성공 시)
    error: Optional[str] = None     # describe()된 오류(파싱 실패 시)


@dataclass
class CorpusReport:
    results: List[CorpusResult] = field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failed(self) -> int:
        return len(self.results) - self.passed

    def summary(self) -> dict:
        return {"total": len(self.results), "successful": self.passed, "errors": self.failed}


def check_entry(entry: CorpusEntry, options: PrintOptions = CORPUS_OPTIONS) -> CorpusResult:
    try:
        tree = parse(entry.mangled)
    except DemangleError as e:
        return CorpusResult(entry, entry.expects_failure, error=describe(e))
    got = print_node(tree, options)
    if entry.expects_failure:
        return CorpusResult(entry, False, got=got)
    return CorpusResult(entry, got == entry.expected, got=got)


def run_corpus(entries: List[CorpusEntry], options: PrintOptions = CORPUS_OPTIONS) -> CorpusReport:
    report = CorpusReport()
    for entry in entries:
        report.results.append(check_entry(entry, options))
    return report


def format_result(r: CorpusResult) -> str:
    e = r.entry
    if r.ok:
        if e.expects_failure:
            return f"OK   {e.mangled} (rejected: {r.error})"
        return f"OK   {e.mangled} -> {r.got}"
    if r.error is not None:
        return f"FAIL {e.mangled} - {r.error}\n  Expected: {e.expected}"
    if e.expects_failure:
        return f"FAIL {e.mangled}\n  Expected a parse failure\n  Got:      {r.got}"
    return f"FAIL {e.mangled}\n  Expected: {e.expected}\n  Got:      {r.got}"


# ------------------------------
# pytest 케이스 생성 / 성능 측정
# ------------------------------

_GENERATED_HEADER = '''import pytest

from swiftdemangle import DemangleError, parse, print_node
from swiftdemangle.codegen.options import CORPUS_OPTIONS
'''


def _test_function_name(mangled: str) -> str:
    name = mangled.replace(".", "dot").replace("@", "at").replace("$", "dollar")
    return "test_" + regex.sub(r"[^0-9A-Za-z_]", "_", name)


def generate_test_cases(entries: List[CorpusEntry]) -> str:
    """
    코퍼스 → pytest 모듈 소스.
    - 같은 입력은 한 번만
    - 실패가 기대되는 줄은 pytest.raises(DemangleError)
    """
    chunks = [_GENERATED_HEADER]
    seen_inputs = set()
    used_names: Dict[str, int] = {}
    for e in entries:
        if e.mangled in seen_inputs:
            continue
        seen_inputs.add(e.mangled)
        name = _test_function_name(e.mangled)
        n = used_names.get(name, 0)
        used_names[name] = n + 1
        if n:
            name = f"{name}_{n}"
        if e.expects_failure:
            body = (f"    mangled = {e.mangled!r}\n"
                    f"    with pytest.raises(DemangleError):\n"
                    f"        parse(mangled)\n")
        else:
            body = (f"    mangled = {e.mangled!r}\n"
                    f"    expected = {e.expected!r}\n"
                    f"    assert print_node(parse(mangled), CORPUS_OPTIONS) == expected\n")
        chunks.append(f"\ndef {name}():\n{body}")
    return "\n".join(chunks)


@dataclass
class PerformanceReport:
    symbols: int
    iterations: int
    seconds: float
    failures: int = 0


def performance_run(entries: List[CorpusEntry], iterations: int = 10000,
                    options: PrintOptions = CORPUS_OPTIONS) -> PerformanceReport:
    """각 입력을 iterations 번 parse + print. 실패한 입력은 세기만 한다."""
    failures = 0
    start = time.perf_counter()
    for e in entries:
        for _ in range(iterations):
            try:
                print_node(parse(e.mangled), options)
            except DemangleError:
                failures += 1
    return PerformanceReport(len(entries), iterations, time.perf_counter() - start, failures)


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    path = Path(argv[0]) if argv else CORPUS
    try:
        entries = load_corpus(str(path))
    except (OSError, ValueError) as e:
        print(f"[ERROR] {type(e).__name__}: {e}")
        return 2
    report = run_corpus(entries)
    for r in report.results:
        print(format_result(r))
    print(f"\nTest Summary: {report.passed} successful, {report.failed} errors")
    return 0 if report.failed == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
