from __future__ import annotations

import json
from pathlib import Path

import pytest

from voxel_surface.cli import format_area, main as cli_main


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_format_area_one_decimal() -> None:
    assert format_area(62.0) == "62.0"
    assert format_area(0.0) == "0.0"
    assert format_area(1234.54) == "1234.5"
    assert format_area(1234567.0) == "1234567.0"


def test_run_prints_only_the_area(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write(tmp_path / "placenta.txt", "2.0, 3.0, 5.0\n")
    rc = cli_main(["run", "--input", str(path)])
    assert rc == 0
    out = capsys.readouterr().out
    assert out == "62.0\n"


def test_run_empty_file_prints_zero(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write(tmp_path / "placenta.txt", "")
    assert cli_main(["run", "--input", str(path)]) == 0
    assert capsys.readouterr().out == "0.0\n"


def test_run_missing_and_malformed_exit_codes_differ(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc_missing = cli_main(["run", "--input", str(tmp_path / "absent.txt")])
    captured = capsys.readouterr()
    assert rc_missing == 2
    assert captured.out == ""
    assert "File not found" in captured.err

    bad = _write(tmp_path / "bad.txt", "1, 2, 3\n1, two, 3\n")
    rc_bad = cli_main(["run", "--input", str(bad)])
    captured = capsys.readouterr()
    assert rc_bad == 3
    assert captured.out == ""
    assert "line 2" in captured.err


def test_run_mismatch_policy(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write(tmp_path / "v.txt", "0, 0, 0\n5, 1, 5\n10, 2, 10\n")

    assert cli_main(["run", "--input", str(path)]) == 4
    assert capsys.readouterr().out == ""

    assert cli_main(["run", "--input", str(path), "--mismatch_policy", "min"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "90.0\n"
    assert "WARNING" in captured.err


def test_run_rejects_negative_tolerance(tmp_path: Path) -> None:
    path = _write(tmp_path / "v.txt", "1, 2, 3\n")
    assert cli_main(["run", "--input", str(path), "--tolerance", "-1"]) == 2


def test_run_writes_outdir_artifacts(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = _write(tmp_path / "v.txt", "4, 1, 2\n5, 1, 2\n6, 1, 2\n")
    outdir = tmp_path / "out"
    rc = cli_main(["run", "--input", str(path), "--outdir", str(outdir), "--mismatch_policy", "min", "--plots"])
    assert rc == 0
    assert capsys.readouterr().out == "68.0\n"

    info = json.loads((outdir / "run_info.json").read_text(encoding="utf-8"))
    assert info["result"]["area_formatted"] == "68.0"
    assert info["result"]["boundary_counts"] == {"rl": 2, "fh": 3, "ap": 3}
    assert info["params"]["mismatch_policy"] == "min"
    assert "numpy" in info["versions"]

    import pandas as pd

    df = pd.read_csv(outdir / "boundary_voxels.csv")
    assert df["is_rl"].tolist() == [True, False, True]
    assert (outdir / "boundary_counts.png").exists()
    assert (outdir / "boundary_projections.png").exists()


def test_synth_then_run(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    out = tmp_path / "synthetic_corners.txt"
    rc = cli_main(["synth", "--out", str(out), "--preset", "corners", "--size", "1", "--shuffle", "--seed", "4"])
    assert rc == 0
    assert len(out.read_text(encoding="utf-8").splitlines()) == 8
    capsys.readouterr()

    assert cli_main(["run", "--input", str(out), "--mismatch_policy", "strict"]) == 0
    assert capsys.readouterr().out == "1200.0\n"


def test_main_py_defaults_read_placenta_txt(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    import main

    monkeypatch.chdir(tmp_path)
    assert main.DEFAULT_RUN_CONFIG.to_argv()[:3] == ["run", "--input", "placenta.txt"]

    assert main.main([]) == 2
    assert "File not found" in capsys.readouterr().err

    _write(tmp_path / "placenta.txt", "2.0, 3.0, 5.0\n")
    assert main.main([]) == 0
    assert capsys.readouterr().out == "62.0\n"


def test_main_py_config_validation() -> None:
    import main

    with pytest.raises(ValueError):
        main.RunConfig(mismatch_policy="longest").validate()
    with pytest.raises(ValueError):
        main.RunConfig(tolerance=-0.5).validate()
    with pytest.raises(ValueError):
        main.RunConfig(plots=True).validate()


def test_run_default_uses_single_precision(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    # 1.3 + 1 == 2.3 holds in float32 only, so the middle voxel is interior by default.
    path = _write(tmp_path / "v.txt", "1.3, 1.3, 1.3\n2.3, 2.3, 2.3\n3.3, 3.3, 3.3")
    assert cli_main(["run", "--input", str(path)]) == 0
    assert capsys.readouterr().out == "75.5\n"

    assert cli_main(["run", "--input", str(path), "--precision", "float64"]) == 0
    assert capsys.readouterr().out == "107.2\n"


def test_run_non_utf8_file_is_malformed(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "v.txt"
    path.write_bytes(b"1, 2, 3\n\xff\xfe, 2, 3\n")
    assert cli_main(["run", "--input", str(path)]) == 3
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "line 2" in captured.err
    assert "UTF-8" in captured.err

    path.write_bytes(b"\xff")
    assert cli_main(["run", "--input", str(path)]) == 3


def test_run_unreadable_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    path = _write(tmp_path / "v.txt", "1, 2, 3\n")

    def _denied(self: Path) -> bytes:
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "read_bytes", _denied)
    assert cli_main(["run", "--input", str(path)]) == 5
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "cannot read" in captured.err


@pytest.mark.parametrize("tolerance", ["nan", "inf", "-inf"])
def test_run_rejects_non_finite_tolerance(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], tolerance: str
) -> None:
    path = _write(tmp_path / "v.txt", "4, 1, 1\n5, 1, 1\n6, 1, 1\n")
    rc = cli_main(["run", "--input", str(path), "--mismatch_policy", "min", "--tolerance", tolerance])
    captured = capsys.readouterr()
    assert rc == 2
    assert captured.out == ""
    assert "--tolerance" in captured.err


def test_main_py_config_rejects_non_finite_tolerance() -> None:
    import main

    assert main.RunConfig().precision == "float32"
    with pytest.raises(ValueError):
        main.RunConfig(tolerance=float("nan")).validate()
    with pytest.raises(ValueError):
        main.RunConfig(tolerance=float("inf")).to_argv()
