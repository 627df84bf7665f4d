from __future__ import annotations

import csv
import json
import sys
from pathlib import Path

import pytest
from loguru import logger

from hanging_app.__main__ import main
from hanging_app.core.loader import discover_tools, get_tool
from hanging_app.core.paths import create_run_dir
from hanging_app.core.schema_utils import validate_inputs
from hanging_app.core.settings import save_settings, settings_path

from .models import PlacementConfig
from .tool import TOOL


@pytest.fixture(autouse=True)
def _user_data(tmp_path, monkeypatch):
    # keep run packages, logs and settings out of the real user profile
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    yield tmp_path
    # drop the file sinks the CLI installs, back to the stock stderr sink
    logger.remove()
    logger.add(sys.stderr)


def _assert_exists(p: Path) -> None:
    assert p.exists(), f"Missing: {p}"


def _check_outputs(run_dir: Path) -> None:
    _assert_exists(run_dir / "report.html")
    _assert_exists(run_dir / "report.pdf")
    _assert_exists(run_dir / "calc_trace.json")
    _assert_exists(run_dir / "results.json")
    _assert_exists(run_dir / "results.xlsx")
    _assert_exists(run_dir / "nail_marks.csv")
    _assert_exists(run_dir / "run.log")


def test_smoke_case_1():
    inputs = TOOL.default_inputs()
    res = TOOL.run_batch(inputs)
    assert res["ok"] is True
    run_dir = Path(res["run_dir"])
    _check_outputs(run_dir)
    assert "Batch run complete" in (run_dir / "run.log").read_text(encoding="utf-8")


def test_smoke_case_2():
    inputs = TOOL.default_inputs()
    inputs.update(
        {
            "units": "inches",
            "target_centroid": 57,
            "wall_width": 144,
            "configuration": "custom",
            "artworks": [
                {"id": 1, "width": 16, "height": 20, "wire_offset": 3, "hanger_offset": 1},
                {"id": 2, "mounting_type": "dring", "width": 24, "height": 18,
                 "mounting_vertical_offset": 2.5, "mounting_horizontal_offset": 2},
                {"id": 3, "width": 12, "height": 12, "wire_offset": 2, "hanger_offset": 1},
            ],
            "layout": {"rows": 2, "cols": 2, "horizontal_gap": 3, "vertical_gap": 3},
        }
    )
    res = TOOL.run_batch(inputs)
    assert res["ok"] is True
    run_dir = Path(res["run_dir"])
    _check_outputs(run_dir)

    assert [r["position"] for r in res["results"]] == ["Row 1, Col 1", "Row 1, Col 2", "Row 2, Col 1"]

    with (run_dir / "nail_marks.csv").open(encoding="utf-8", newline="") as f:
        marks = list(csv.DictReader(f))
    # one wire nail each for artworks 1 and 3, a pair for the D-ring piece
    assert [m["nail"] for m in marks] == ["wire", "left", "right", "wire"]
    assert {m["units"] for m in marks} == {"inches"}

    trace = json.loads((run_dir / "calc_trace.json").read_text(encoding="utf-8"))
    assert trace["meta"]["input_hash"] == res["input_hash"]
    assert trace["summary"]["nails"] == 4
    assert trace["tables"]["layout"]["arrangement"] == "grid"
    assert "Row 2, Col 1" in (run_dir / "report.html").read_text(encoding="utf-8")


def test_run_batch_same_inputs_same_hash():
    inputs = TOOL.default_inputs()
    a = TOOL.run_batch(inputs)
    b = TOOL.run_batch(dict(inputs))
    assert a["input_hash"] == b["input_hash"]
    assert a["run_dir"] != b["run_dir"]


def test_compute_is_headless(_user_data):
    out = TOOL.compute({"wall_width": 200, "artworks": [{"width": 50, "height": 70, "wire_offset": 10}]})
    assert out["ok"] is True
    assert out["results"][0]["nail_height"] == 179.94
    assert "center of your wall" in out["usage"]
    assert not (_user_data / "ArtHangingToolbox" / "art_placement").exists()


def test_default_inputs_follow_settings():
    save_settings({"art_placement": {"units": "inches", "wall_width": 120, "configuration": "vertical"}})
    d = TOOL.default_inputs()
    assert d["units"] == "inches"
    assert d["target_centroid"] == 60.0
    assert d["wall_width"] == 120.0
    assert d["configuration"] == "vertical"
    assert d["artworks"][0]["hanger_offset"] == 1.0


def test_unreadable_settings_are_ignored():
    settings_path().write_text("{not json", encoding="utf-8")
    assert TOOL.default_inputs() == PlacementConfig().model_dump()


def test_discover_tools():
    ids = [t.meta.id for t in discover_tools()]
    assert ids == ["art_placement"]


def test_cli_compute_json(tmp_path, capsys):
    cfg = tmp_path / "wall.json"
    cfg.write_text(
        json.dumps(
            {
                "configuration": "vertical",
                "target_centroid": 150,
                "artworks": [{"height": 50, "wire_offset": 5, "hanger_offset": 2}, {"height": 30}],
                "layout": {"vertical_gap": 10},
            }
        ),
        encoding="utf-8",
    )
    assert main(["compute", str(cfg), "--json"]) == 0
    rows = json.loads(capsys.readouterr().out)
    assert [r["centroid"] for r in rows] == [130.0, 180.0]
    assert rows[0]["nail_height"] == 152.0


def test_cli_compute_text_in_inches(capsys):
    assert main(["compute", "--units", "inches"]) == 0
    out = capsys.readouterr().out
    assert "Artwork 1" in out
    assert "Nail height: 61.00in from floor" in out
    assert "measure up to the nail height" in out


def test_cli_rejects_invalid_configuration(tmp_path, capsys):
    cfg = tmp_path / "bad.json"
    cfg.write_text(json.dumps({"configuration": "diagonal"}), encoding="utf-8")
    assert main(["compute", str(cfg)]) == 2
    assert capsys.readouterr().out == ""


def test_cli_batch(capsys):
    assert main(["compute", "--batch"]) == 0
    out = capsys.readouterr().out
    run_dir = Path(out.strip().split(" written to ", 1)[1])
    _check_outputs(run_dir)


def test_cli_list(capsys):
    assert main(["list"]) == 0
    assert "art_placement" in capsys.readouterr().out


def test_get_tool():
    assert get_tool("art_placement") is TOOL
    with pytest.raises(KeyError):
        get_tool("no_such_tool")


def test_validate_inputs_locates_bad_artwork():
    data, err = validate_inputs(PlacementConfig, {"artworks": [{"width": 1}, {"mounting_type": "cleat"}]})
    assert data == {}
    assert err.startswith("artworks.2")
    data, err = validate_inputs(PlacementConfig, {"wall_width": "abc"})
    assert err is None and data["wall_width"] == 0.0


def test_cli_unreadable_file(tmp_path):
    cfg = tmp_path / "broken.json"
    cfg.write_text("{oops", encoding="utf-8")
    assert main(["compute", str(cfg)]) == 2
    assert main(["compute", str(tmp_path / "missing.json")]) == 2


def test_run_dirs_are_per_tool_and_unique(_user_data):
    a = create_run_dir("art_placement", "abcdef123456")
    b = create_run_dir("art_placement", "abcdef123456")
    assert a != b
    assert a.parent == _user_data / "ArtHangingToolbox" / "art_placement" / "runs"
    assert a.name.split("_")[-1].startswith("abcdef")
    assert list(a.iterdir()) == []
    assert create_run_dir("other_tool").parent.parent.name == "other_tool"
