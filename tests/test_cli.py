import csv
import json
import logging
from pathlib import Path

from wedlock import extract, main, metrics


def _dump(tmp_path: Path) -> Path:
    fn = {
        "kind": "machine_function",
        "name": "main",
        "number": 0,
        "operand": "@main",
        "target": "x86_64",
        "module": {"name": "prog.ll", "source_file_name": "prog.c"},
        "frame_info": {"stack_size": 8},
        "blocks": [
            {"number": 0, "ir_operand": "%entry", "succs": [1],
             "instrs": [{"opcode": 1, "flags": 1}]},
            {"number": 1, "ir_operand": "%exit", "preds": [0],
             "instrs": [{"opcode": 2, "flags": 2}, {"opcode": 3, "return": True}]},
        ],
    }
    path = tmp_path / "dump.ndjson"
    path.write_text(json.dumps(fn) + "\n" + json.dumps(dict(fn, name="aux", number=1)) + "\n", "utf-8")
    return path


def _extract(tmp_path: Path) -> Path:
    out = tmp_path / "wedlock.jsonl"
    rc = extract.main(["--input", str(_dump(tmp_path)), "--wedlock-output", str(out)])
    assert rc == 0
    return out


def test_extract_writes_one_line_per_function(tmp_path: Path) -> None:
    out = _extract(tmp_path)
    lines = out.read_text("utf-8").splitlines()
    assert [json.loads(line)["function"]["name"] for line in lines] == ["main", "aux"]


def test_extract_disabled_writes_nothing(tmp_path: Path) -> None:
    out = tmp_path / "wedlock.jsonl"
    rc = extract.main(
        ["--input", str(_dump(tmp_path)), "--wedlock-output", str(out), "--no-wedlock"]
    )
    assert rc == 0
    assert not out.exists()


def test_extract_fails_before_reading_input(tmp_path: Path, caplog) -> None:
    out = tmp_path / "missing" / "wedlock.jsonl"
    with caplog.at_level(logging.ERROR):
        rc = extract.main(
            ["--input", str(tmp_path / "no-such-dump.ndjson"), "--wedlock-output", str(out)]
        )
    assert rc == 1
    assert f"Failed to open {out}" in caplog.text


def test_summary_cli(tmp_path: Path, capsys) -> None:
    out = _extract(tmp_path)
    assert main.main([str(out), "--show-blocks"]) == 0
    text = capsys.readouterr().out
    assert "functions: 2" in text
    assert "blocks: 4" in text
    assert "prologue sites: 2" in text
    assert ".LBB0_0 [prologue fallthrough] -> .LBB0_1*" in text


def test_metrics_cli(tmp_path: Path) -> None:
    out = _extract(tmp_path)
    csv_path = tmp_path / "metrics.csv"
    assert metrics.main(["--records", str(out), "--out", str(csv_path)]) == 0

    with open(csv_path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["fn"] for r in rows] == ["main", "aux"]
    assert rows[0]["bb_count"] == "2"
    assert rows[0]["inst_count"] == "3"
    assert rows[0]["frame_setup_count"] == "1"
    assert rows[0]["frame_destroy_count"] == "1"
    assert rows[0]["prologue_blocks"] == "1"
    assert rows[0]["epilogue_blocks"] == "1"
    assert rows[0]["module"] == "prog.ll"
