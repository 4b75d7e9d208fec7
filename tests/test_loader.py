import pytest

from swiftdemangle.grammar.loader import CorpusEntry, load_corpus, parse_corpus
from swiftdemangle.grammar.tests import check_entry, format_result, main as corpus_main, run_corpus


def test_parse_corpus_rules():
    text = "\n".join([
        "# comment",
        "",
        "__$s4main3fooyyF ---> {T:$s4main3fooyyF} main.foo() -> ()",
        "$sSiD -> skipped",
        "$sSiD --> skipped",
        "  $sypD ---> Any  ",
    ])
    entries = parse_corpus(text)
    assert entries == [
        CorpusEntry("_$s4main3fooyyF", "main.foo() -> ()", 3),
        CorpusEntry("$sypD", "Any", 6),
    ]


def test_parse_corpus_rejects_unsplittable_line():
    with pytest.raises(ValueError):
        parse_corpus("$s4main3fooyyF main.foo")


def test_expects_failure():
    assert CorpusEntry("x", "x").expects_failure
    assert not CorpusEntry("x", "y").expects_failure


def test_check_entry():
    assert check_entry(CorpusEntry("$sSiSgD", "Swift.Int?")).ok
    assert not check_entry(CorpusEntry("$sSiSgD", "Swift.Int")).ok
    rejected = check_entry(CorpusEntry("$s4main3FooVAZ3BarVD", "$s4main3FooVAZ3BarVD"))
    assert rejected.ok
    assert rejected.error.startswith("InvalidSubstitution")
    assert not check_entry(CorpusEntry("$sypD", "$sypD")).ok


def test_format_result():
    ok = check_entry(CorpusEntry("$sypD", "Any"))
    assert format_result(ok) == "OK   $sypD -> Any"
    bad = check_entry(CorpusEntry("$sypD", "Swift.Any"))
    assert format_result(bad) == "FAIL $sypD\n  Expected: Swift.Any\n  Got:      Any"


def test_bundled_corpus_passes(corpus_path):
    report = run_corpus(load_corpus(str(corpus_path)))
    failures = [format_result(r) for r in report.results if not r.ok]
    assert failures == []
    assert report.summary()["total"] == len(report.results)


def test_corpus_main(corpus_path, capsys):
    assert corpus_main([str(corpus_path)]) == 0
    out = capsys.readouterr().out
    assert "Test Summary:" in out
    assert "0 errors" in out


def test_corpus_main_missing_file(tmp_path, capsys):
    assert corpus_main([str(tmp_path / "missing.txt")]) == 2
    assert "[ERROR]" in capsys.readouterr().out
