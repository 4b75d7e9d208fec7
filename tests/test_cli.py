import json

import pytest

from swiftdemangle.demanglec import main


def test_single(capsys):
    assert main(["single", "$s4main3fooyyF"]) == 0
    assert capsys.readouterr().out.strip() == "main.foo() -> ()"


def test_single_type_with_options(capsys):
    assert main(["single", "SiSg", "--is-type", "--options", "default,synthesizeSugar"]) == 0
    assert capsys.readouterr().out.strip() == "Swift.Int?"


def test_single_unknown_option_warns(capsys):
    assert main(["single", "$s4main3fooyyF", "--options", "qualifyEntities,nope"]) == 0
    captured = capsys.readouterr()
    assert "[WARN]" in captured.err
    assert "nope" in captured.err


def test_single_json(capsys):
    assert main(["single", "$s4main3fooyyF", "--json"]) == 0
    record = json.loads(capsys.readouterr().out)
    assert record["identifier"] == "foo"
    assert record["module"] == "main"
    assert record["description"] == "main.foo() -> ()"


def test_single_error(capsys):
    assert main(["single", "$s4main3FooVAZ3BarVD"]) == 1
    assert "[ERROR] InvalidSubstitution" in capsys.readouterr().err


def test_single_error_json(capsys):
    assert main(["single", "$s4mai", "--json"]) == 1
    record = json.loads(capsys.readouterr().out)
    assert record["input"] == "$s4mai"
    assert record["isType"] is False
    assert record["error"].startswith("InvalidIdentifierEncoding")


def test_single_debug_dumps_tree(capsys):
    assert main(["single", "$s4main3fooyyF", "-D"]) == 0
    assert "[DEBUG] tree" in capsys.readouterr().err


def test_batch_stops_at_first_error(tmp_path, capsys):
    src = tmp_path / "symbols.txt"
    src.write_text("$s4main3fooyyF\n$s4mai\n$sypD\n", encoding="utf-8")
    assert main(["batch", "-i", str(src)]) == 1
    out = capsys.readouterr().out
    assert "$s4main3fooyyF -> main.foo() -> ()" in out
    assert "$sypD" not in out
    assert "Summary" not in out


def test_batch_continue_on_error(tmp_path, capsys):
    src = tmp_path / "symbols.txt"
    src.write_text("$s4main3fooyyF\n$s4mai\n\n$sypD\n", encoding="utf-8")
    assert main(["batch", "-i", str(src), "--continue-on-error"]) == 0
    captured = capsys.readouterr()
    assert "$sypD -> Any" in captured.out
    assert "Summary: 2 successful, 1 errors" in captured.out
    assert "[ERROR] line 2" in captured.err


def test_batch_json_to_file(tmp_path):
    src = tmp_path / "symbols.txt"
    dst = tmp_path / "out" / "result.json"
    src.write_text("$s4main3fooyyF\n$s4mai\n", encoding="utf-8")
    assert main(["batch", "-i", str(src), "--json", "-o", str(dst)]) == 1
    data = json.loads(dst.read_text(encoding="utf-8"))
    assert [r["mangled"] for r in data["results"]] == ["$s4main3fooyyF"]
    assert data["errors"][0]["input"] == "$s4mai"


def test_batch_missing_input(tmp_path, capsys):
    assert main(["batch", "-i", str(tmp_path / "nope.txt")]) == 2
    assert "[ERROR]" in capsys.readouterr().err


def test_test_command(corpus_path, capsys):
    assert main(["test", str(corpus_path)]) == 0
    out = capsys.readouterr().out
    assert "OK   $s4main3fooyyF -> main.foo() -> ()" in out
    assert "Test Summary:" in out


def test_test_command_json(corpus_path, capsys):
    assert main(["test", str(corpus_path), "--json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["summary"]["errors"] == 0
    assert data["summary"]["total"] == data["summary"]["successful"]


def test_missing_subcommand():
    with pytest.raises(SystemExit) as ei:
        main([])
    assert ei.value.code == 2


def test_batch_stops_without_output_when_first_line_fails(tmp_path, capsys):
    src = tmp_path / "symbols.txt"
    src.write_text("$s4mai\n$sypD\n", encoding="utf-8")
    assert main(["batch", "-i", str(src)]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "[ERROR] line 1" in captured.err


def test_test_command_generates_pytest_functions(corpus_path, capsys):
    assert main(["test", str(corpus_path), "--generate-tests"]) == 0
    source = capsys.readouterr().out
    assert source.startswith("import pytest")
    assert "def test_dollars4main3fooyyF():" in source
    assert "with pytest.raises(DemangleError):" in source
    namespace = {}
    exec(compile(source, "<generated>", "exec"), namespace)
    cases = [fn for name, fn in namespace.items() if name.startswith("test_")]
    assert cases
    for case in cases:
        case()


def test_test_command_performance(corpus_path, capsys):
    assert main(["test", str(corpus_path), "--performance", "--iterations", "2"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Performance: ")
    assert "x 2 iterations" in out
    assert "(4 failed parses)" in out


def test_test_command_performance_rejects_zero_iterations(corpus_path, capsys):
    assert main(["test", str(corpus_path), "--performance", "--iterations", "0"]) == 2
    assert "[ERROR]" in capsys.readouterr().err
