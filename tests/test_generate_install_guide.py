import json
import os

import pytest

import generate_install_guide
from generate_install_guide import EXIT_INPUT_ERROR, main

SNAPSHOT = {
    "rackName": "IDF 2",
    "rackUnits": 6,
    "equipment": [
        {"id": "sw", "name": "Access Switch", "type": "switch", "rackUnits": 1, "position": 1,
         "powerConsumption": 60},
        {"id": "pp", "name": "Patch Panel", "type": "panel", "rackUnits": 1, "position": 2},
    ],
    "wiringDiagram": {"cableRuns": [], "conduitRuns": []},
    "powerRequirements": {"totalPower": 60, "availablePower": 300},
}


@pytest.fixture
def snapshot_file(tmp_path):
    path = tmp_path / "idf.json"
    path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")
    return str(path)


def test_preview_only(snapshot_file, capsys):
    assert main([snapshot_file, "--no-pdf"]) == 0
    out = capsys.readouterr().out
    assert "EQUIPMENT RACK INSTALLATION GUIDE" in out
    assert "Access Switch" in out


def test_single_view_as_json(snapshot_file, capsys):
    assert main([snapshot_file, "--no-pdf", "--view", "power", "--json"]) == 0
    out = capsys.readouterr().out
    payload = json.loads(out[out.index("{"):])
    assert [block["type"] for block in payload["blocks"]] == ["TitleBlock", "Section", "Section"]


def test_missing_snapshot(tmp_path, capsys):
    assert main([str(tmp_path / "missing.json"), "--no-pdf"]) == EXIT_INPUT_ERROR
    assert "not found" in capsys.readouterr().out


def test_malformed_snapshot(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"rackName": "x"}), encoding="utf-8")
    assert main([str(path), "--no-pdf"]) == EXIT_INPUT_ERROR


def test_exports_pdf(snapshot_file, tmp_path, capsys):
    out_dir = tmp_path / "guides"
    assert main([snapshot_file, "--output", str(out_dir), "--company", "BlueDog Group"]) == 0
    assert os.path.exists(out_dir / "IDF 2-installation-guide.pdf")
    assert "✅ Installation guide exported as PDF" in capsys.readouterr().out


def test_export_failure_exit_code(snapshot_file, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    assert main([snapshot_file, "--output", str(blocker)]) == generate_install_guide.EXIT_EXPORT_ERROR


def test_malformed_cable_route(tmp_path, capsys):
    data = dict(SNAPSHOT, wiringDiagram={"cableRuns": [{"source": "Rack", "destination": "Office", "route": 5}]})
    path = tmp_path / "bad-route.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    assert main([str(path), "--no-pdf"]) == EXIT_INPUT_ERROR
    assert "❌" in capsys.readouterr().out


def test_stray_csv_cells_are_ignored(snapshot_file, tmp_path, capsys):
    csv_path = tmp_path / "equipment.csv"
    csv_path.write_text("Name,Rack Units,Position\nCore Switch,1,3\n,,,stray\n", encoding="utf-8")
    assert main([snapshot_file, "--equipment-csv", str(csv_path), "--no-pdf"]) == 0
    assert "Core Switch" in capsys.readouterr().out
