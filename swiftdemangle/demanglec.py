# swiftdemangle/demanglec.py
"""demanglec – swiftdemangle CLI

사용 예)
    $ python -m swiftdemangle single '$s4main3fooyyF'
    $ python -m swiftdemangle single Si --is-type --options simplified
    $ python -m swiftdemangle batch -i symbols.txt --json -o out.json --continue-on-error
    $ python -m swiftdemangle test tests/data/manglings.txt

기능
----
- single : 심볼 하나를 디맹글해 출력(--json 이면 질의 레코드)
- batch  : 줄 단위 입력(파일 또는 stdin)을 차례로 디맹글
- test   : 기준 코퍼스(`input ---> output`)를 돌려 OK/FAIL 요약
           (--generate-tests 는 pytest 함수 생성, --performance 는 반복 시간 측정)

종료 코드: 0 성공, 1 디맹글 실패/코퍼스 불일치, 2 사용법·입출력 오류
디버그 모드(-D/--debug)를 켜면 트리 덤프를 stderr로 출력합니다.
"""

from __future__ import annotations
import argparse
import json
import pathlib
import sys
from typing import List, Optional

# ------------------------------
# 헬퍼
# ------------------------------

def _eprint(*args, **kw) -> None:
    print(*args, file=sys.stderr, **kw)


def _resolve_options(text: Optional[str]):
    """--options 문자열 → PrintOptions. 미지정이면 DEFAULT, 모르는 이름은 경고 후 무시."""
    from .codegen.options import PrintOptions

    if text is None:
        return PrintOptions.DEFAULT
    flags, unknown = PrintOptions.parse_names(text)
    for name in unknown:
        _eprint(f"[WARN] Unknown print option '{name}'")
    return flags


def _write_output(text: str, path: Optional[str]) -> None:
    if path is None:
        print(text)
        return
    out_path = pathlib.Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(text + "\n", encoding="utf-8")


def _read_lines(path: Optional[str]) -> List[str]:
    if path is None:
        content = sys.stdin.read()
    else:
        content = pathlib.Path(path).read_text(encoding="utf-8")
    return [line.strip() for line in content.splitlines() if line.strip()]

# ------------------------------
# 커맨드 구현
# ------------------------------

def cmd_single(args) -> int:
    from .grammar.errors import DemangleError, describe
    from .grammar.parser import parse
    from .codegen.printer import print_node
    from .codegen.query import to_dict

    options = _resolve_options(args.options)
    try:
        tree = parse(args.symbol, is_type=args.is_type)
    except DemangleError as e:
        if args.json:
            print(json.dumps({"error": describe(e), "input": args.symbol, "isType": args.is_type}, indent=2))
        else:
            _eprint("[ERROR]", describe(e))
            if args.debug:
                _eprint(str(e))
        return 1

    if args.debug:
        _eprint("[DEBUG] tree\n" + tree.dump())

    if args.json:
        print(json.dumps(to_dict(tree, args.symbol, options), ensure_ascii=False))
    else:
        print(print_node(tree, options))
    return 0


def cmd_batch(args) -> int:
    from .grammar.errors import DemangleError, describe
    from .grammar.parser import parse
    from .codegen.printer import print_node
    from .codegen.query import to_dict

    options = _resolve_options(args.options)
    try:
        lines = _read_lines(args.input)
    except OSError as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
        return 2

    out: List[str] = []
    results, errors = [], []
    ok = failed = 0
    for lineno, symbol in enumerate(lines, start=1):
        try:
            tree = parse(symbol, is_type=args.is_type)
        except DemangleError as e:
            failed += 1
            if args.json:
                errors.append({"input": symbol, "error": describe(e)})
                continue
            _eprint(f"[ERROR] line {lineno}: {describe(e)}")
            if not args.continue_on_error:
                # 요약 없이 그때까지의 결과만 남기고 바로 끝낸다
                return _flush_partial(out, args.output)
            continue
        ok += 1
        if args.json:
            results.append(to_dict(tree, symbol, options))
        else:
            out.append(f"{symbol} -> {print_node(tree, options)}")
        if args.debug:
            _eprint(f"[DEBUG] line {lineno}\n" + tree.dump())

    try:
        if args.json:
            _write_output(json.dumps({"results": results, "errors": errors}, ensure_ascii=False, indent=2),
                          args.output)
        else:
            out.append(f"\nSummary: {ok} successful, {failed} errors")
            _write_output("\n".join(out), args.output)
    except OSError as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
        return 2

    if failed and not args.continue_on_error:
        return 1
    return 0


def _flush_partial(out: List[str], path: Optional[str]) -> int:
    if out:
        try:
            _write_output("\n".join(out), path)
        except OSError as e:
            _eprint("[ERROR]", type(e).__name__, str(e))
            return 2
    return 1


def cmd_test(args) -> int:
    from .grammar.loader import load_corpus
    from .grammar.tests import CORPUS, format_result, generate_test_cases, performance_run, run_corpus
    from .codegen.query import to_dict

    path = args.corpus or str(CORPUS)
    try:
        entries = load_corpus(path)
    except (OSError, ValueError) as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
        return 2
    if args.debug:
        _eprint(f"[DEBUG] corpus={path} entries={len(entries)}")

    if args.generate_tests:
        print(generate_test_cases(entries))
        return 0
    if args.performance:
        if args.iterations < 1:
            _eprint("[ERROR] --iterations must be at least 1")
            return 2
        perf = performance_run(entries, args.iterations)
        print(f"Performance: {perf.symbols} symbols x {perf.iterations} iterations in {perf.seconds:.3f}s"
              f" ({perf.failures} failed parses)")
        return 0

    report = run_corpus(entries)
    if args.json:
        from .grammar.parser import parse
        records, errors = [], []
        for r in report.results:
            if r.error is not None:
                errors.append({"input": r.entry.mangled, "expected": r.entry.expected, "error": r.error})
            else:
                records.append(to_dict(parse(r.entry.mangled), r.entry.mangled))
        print(json.dumps({"summary": report.summary(), "results": records, "errors": errors},
                         ensure_ascii=False, indent=2))
    else:
        for r in report.results:
            print(format_result(r))
        print(f"\nTest Summary: {report.passed} successful, {report.failed} errors")
    return 0 if report.failed == 0 else 1

# ------------------------------
# 엔트리포인트
# ------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="swiftdemangle", description="Swift symbol demangler CLI")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_single = sub.add_parser("single", help="심볼 하나를 디맹글합니다")
    p_single.add_argument("symbol", help="맹글된 심볼")
    p_single.add_argument("--json", action="store_true", help="JSON 레코드로 출력")
    p_single.add_argument("--is-type", action="store_true", help="입력을 접두사 없는 타입 맹글로 취급")
    p_single.add_argument("--options", help="출력 옵션(쉼표 구분, 예: qualifyEntities,shortenThunk)")
    p_single.add_argument("-D", "--debug", action="store_true", help="트리 덤프를 stderr로 출력")
    p_single.set_defaults(func=cmd_single)

    p_batch = sub.add_parser("batch", help="여러 심볼을 줄 단위로 디맹글합니다")
    p_batch.add_argument("-i", "--input", help="입력 파일(미지정시 stdin)")
    p_batch.add_argument("-o", "--output", help="출력 파일(미지정시 stdout)")
    p_batch.add_argument("--json", action="store_true", help="JSON으로 출력")
    p_batch.add_argument("--is-type", action="store_true", help="입력을 접두사 없는 타입 맹글로 취급")
    p_batch.add_argument("--options", help="출력 옵션(쉼표 구분)")
    p_batch.add_argument("--continue-on-error", action="store_true", help="실패한 줄이 있어도 계속 진행")
    p_batch.add_argument("-D", "--debug", action="store_true", help="트리 덤프를 stderr로 출력")
    p_batch.set_defaults(func=cmd_batch)

    p_test = sub.add_parser("test", help="기준 코퍼스를 실행합니다")
    p_test.add_argument("corpus", nargs="?", help="코퍼스 파일(기본: tests/data/manglings.txt)")
    p_test.add_argument("--json", action="store_true", help="JSON으로 출력")
    p_test.add_argument("--generate-tests", action="store_true", help="코퍼스로부터 pytest 테스트 함수를 생성해 출력")
    p_test.add_argument("--performance", action="store_true", help="코퍼스를 반복 디맹글하며 시간을 잽니다")
    p_test.add_argument("--iterations", type=int, default=10000, help="--performance 반복 횟수(기본 10000)")
    p_test.add_argument("-D", "--debug", action="store_true", help="디버그 정보를 출력")
    p_test.set_defaults(func=cmd_test)

    args = ap.parse_args(argv)
    return int(args.func(args))

if __name__ == "__main__":
    sys.exit(main())
