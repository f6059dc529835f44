from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pytest

from rolling_mad import __version__, cli


def _write_samples(path: Path, values) -> Path:
    pd.DataFrame({"value": values}).to_csv(path, index=False)
    return path


def test_cli_score_writes_csv_output(tmp_path: Path) -> None:
    samples = _write_samples(tmp_path / "samples.csv", [1, 2, 3, None, 4, 5, 100])
    output = tmp_path / "scored.csv"

    code = cli.main(["score", str(samples), "--setsize", "5", "--output", str(output)])

    assert code == 0
    scored = pd.read_csv(output)
    assert list(scored.columns) == ["rownum", "median", "mad", "cutoff"]
    assert scored["rownum"].tolist() == list(range(1, 8))
    assert scored["median"].notna().tolist() == [False] * 5 + [True, True]
    assert scored.loc[5, "cutoff"] == pytest.approx(2 / 1.4826)


def test_cli_score_json_uses_config_file_with_flag_override(tmp_path: Path, capsys) -> None:
    samples = tmp_path / "samples.json"
    samples.write_text(json.dumps([1, 2, 3, 4]), encoding="utf-8")
    config = tmp_path / "mad.yml"
    config.write_text("setsize: 10\ncconst: 2.0\n", encoding="utf-8")

    code = cli.main(["score", str(samples), "--config", str(config), "--setsize", "3", "--json"])

    assert code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["config"] == {"setsize": 3, "cconst": 2.0}
    assert payload["records"][2] == {"rownum": 3, "median": 2.0, "mad": 2.0, "cutoff": 0.5}
    assert payload["errors"] == []


def test_cli_score_reports_stream_error(tmp_path: Path, capsys) -> None:
    samples = tmp_path / "samples.jsonl"
    samples.write_text('1\n2\n"bad"\n3\n', encoding="utf-8")

    code = cli.main(["score", str(samples), "--setsize", "2", "--json"])

    assert code == 1
    captured = capsys.readouterr()
    payload = json.loads(captured.out)
    assert len(payload["records"]) == 2
    assert payload["errors"][0]["rownum"] == 3
    assert "row 3" in captured.err


def test_cli_score_rejects_invalid_setsize(tmp_path: Path, capsys) -> None:
    samples = _write_samples(tmp_path / "samples.csv", [1, 2, 3])

    code = cli.main(["score", str(samples), "--setsize", "0"])

    assert code == 2
    assert "setsize" in capsys.readouterr().err


def test_cli_score_partitioned_output(tmp_path: Path) -> None:
    samples = tmp_path / "multi.csv"
    pd.DataFrame({"host": ["a", "b", "a", "b"], "value": [1.0, 10.0, 3.0, 30.0]}).to_csv(samples, index=False)
    output = tmp_path / "scored.csv"

    code = cli.main(
        ["score", str(samples), "--setsize", "2", "--partition-column", "host", "--workers", "2", "--output", str(output)]
    )

    assert code == 0
    scored = pd.read_csv(output)
    assert list(scored.columns) == ["partition", "rownum", "median", "mad", "cutoff"]
    assert scored["partition"].tolist() == ["a", "a", "b", "b"]
    assert scored["median"].tolist()[1::2] == [2.0, 20.0]


def test_cli_validate_reports_errors(tmp_path: Path, capsys) -> None:
    good = tmp_path / "good.yml"
    good.write_text("window_size: 4\n", encoding="utf-8")
    bad = tmp_path / "bad.yml"
    bad.write_text("setsize: 0\n", encoding="utf-8")

    assert cli.main(["validate", str(good), "--json"]) == 0
    assert json.loads(capsys.readouterr().out)["normalized"] == {"setsize": 4, "cconst": 1.4826}

    assert cli.main(["validate", str(bad), "--json"]) == 1
    payload = json.loads(capsys.readouterr().out)
    assert payload["valid"] is False
    assert payload["errors"]


def test_cli_version(capsys) -> None:
    assert cli.main(["version"]) == 0
    assert capsys.readouterr().out.strip() == __version__


def test_cli_score_json_and_output_together(tmp_path: Path, capsys) -> None:
    samples = _write_samples(tmp_path / "samples.csv", [1, 2, 3, 4])
    output = tmp_path / "scored.json"

    code = cli.main(["score", str(samples), "--setsize", "3", "--output", str(output), "--json"])

    assert code == 0
    captured = capsys.readouterr()
    payload = json.loads(captured.out)
    assert len(payload["records"]) == 4
    assert json.loads(output.read_text(encoding="utf-8")) == payload["records"]
    assert "Wrote 4 records" in captured.err
