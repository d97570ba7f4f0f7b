import importlib
import json
import sys

import pytest


@pytest.fixture()
def run_module():
    # Ensure a clean import each time
    if "run" in sys.modules:
        del sys.modules["run"]
    return importlib.import_module("run")


def test_version_flag_outputs_version(run_module, capsys):
    ver = run_module.__version__
    # argparse handles --version and exits by raising SystemExit
    with pytest.raises(SystemExit) as exc:
        run_module.parse_args(["--version"])
    assert exc.value.code == 0
    captured = capsys.readouterr().out
    assert ver in captured
    assert "cryptgen" in captured


def test_no_command_prints_help(run_module, capsys):
    assert run_module.main([]) == 0
    assert "generate" in capsys.readouterr().out


def test_generate_writes_file_that_validates(run_module, tmp_path, capsys):
    out = tmp_path / "nested" / "dungeon.json"
    assert run_module.main(["generate", "--seed", "abc", "--out", str(out), "--quiet"]) == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["seed"] == "abc"
    assert data["grid"]["width"] == 25 and data["grid"]["height"] == 17
    capsys.readouterr()
    assert run_module.main(["validate", str(out)]) == 0
    assert "OK" in capsys.readouterr().out


def test_generate_echoes_parseable_json(run_module, tmp_path, capsys):
    out = tmp_path / "echo.json"
    assert run_module.main(["generate", "--seed", "abc", "--out", str(out)]) == 0
    captured = capsys.readouterr()
    echoed = json.loads(captured.out)
    assert echoed == json.loads(out.read_text(encoding="utf-8"))
    assert "event=dungeon_generated" in captured.err
    assert "event=dungeon_written" in captured.err


def test_generate_uses_two_space_indent(run_module, tmp_path):
    out = tmp_path / "d.json"
    run_module.main(["generate", "--seed", "abc", "--width", "5", "--height", "5", "--out", str(out), "--quiet"])
    assert out.read_text(encoding="utf-8").startswith('{\n  "id"')


def test_generate_same_seed_same_grid(run_module, tmp_path):
    a, b = tmp_path / "a.json", tmp_path / "b.json"
    run_module.main(["generate", "--seed", "same", "--out", str(a), "--quiet"])
    run_module.main(["generate", "--seed", "same", "--out", str(b), "--quiet"])
    ga = json.loads(a.read_text(encoding="utf-8"))["grid"]
    gb = json.loads(b.read_text(encoding="utf-8"))["grid"]
    assert ga == gb


def test_generate_rooms_layout(run_module, tmp_path):
    out = tmp_path / "rooms.json"
    args = ["generate", "--layout", "rooms", "--seed", "5", "--width", "20", "--height", "15"]
    assert run_module.main(args + ["--out", str(out), "--quiet"]) == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["entrances"] == [{"x": 1, "y": 1}]
    assert data["exits"] == [{"x": 18, "y": 13}]
    assert run_module.main(["validate", str(out)]) == 0


def test_generate_rejects_bad_dimensions(run_module, tmp_path, capsys):
    out = tmp_path / "bad.json"
    assert run_module.main(["generate", "--width", "2", "--seed", "abc", "--out", str(out)]) == 1
    assert not out.exists()
    assert "width" in capsys.readouterr().err


def test_bad_env_value_is_reported(run_module, monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("CRYPTGEN_WIDTH", "wide")
    assert run_module.main(["generate", "--out", str(tmp_path / "x.json")]) == 1
    assert "CRYPTGEN_WIDTH" in capsys.readouterr().err


def test_env_file_argument(run_module, tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("CRYPTGEN_WIDTH=11\nCRYPTGEN_HEIGHT=9\n")
    out = tmp_path / "env.json"
    assert run_module.main(["--env-file", str(env_file), "generate", "--seed", "e", "--out", str(out), "--quiet"]) == 0
    grid = json.loads(out.read_text(encoding="utf-8"))["grid"]
    assert (grid["width"], grid["height"]) == (11, 9)


def test_validate_reports_field_errors(run_module, tmp_path, capsys):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"id": "x"}))
    assert run_module.main(["validate", str(bad)]) == 1
    out = capsys.readouterr().out
    assert "INVALID" in out
    assert "seed: missing required field (required)" in out


def test_validate_missing_file(run_module, tmp_path):
    assert run_module.main(["validate", str(tmp_path / "nope.json")]) == 1


def test_import_legacy(run_module, tmp_path):
    src = tmp_path / "legacy.json"
    src.write_text(json.dumps([["room", "room", "path"], ["wall", "room", "room"]]))
    out = tmp_path / "imported.json"
    assert run_module.main(["import-legacy", str(src), "--seed", "old", "--out", str(out)]) == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["seed"] == "old"
    assert data["grid"]["tiles"] == [["floor", "floor", "floor"], ["wall", "floor", "floor"]]
    assert data["entrances"] == [{"x": 0, "y": 0}]
    assert data["exits"] == [{"x": 2, "y": 1}]


def test_import_legacy_rejects_non_grid(run_module, tmp_path):
    src = tmp_path / "legacy.json"
    src.write_text(json.dumps({"tiles": []}))
    assert run_module.main(["import-legacy", str(src)]) == 1


def test_render_generated(run_module, capsys):
    assert run_module.main(["render", "--seed", "abc"]) == 0
    lines = capsys.readouterr().out.rstrip("\n").split("\n")
    assert len(lines) == 17
    assert "^" in "".join(lines) and "V" in "".join(lines)


def test_lookup_ref(run_module, capsys):
    ref = "my-guild-7-L2-1700000000000-x1y2"
    assert run_module.main(["lookup-ref", ref]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["guild"] == "my-guild"
    assert payload["dungeonNumber"] == 7
    assert payload["level"] == 2
    assert run_module.main(["lookup-ref", "nope"]) == 1


def test_lookup_ref_overflowing_numbers_do_not_crash(run_module, capsys):
    assert run_module.main(["lookup-ref", "guild-1e400-L2-1700000000000-x1y2"]) == 1
    assert "Could not parse ref" in capsys.readouterr().err
    assert run_module.main(["lookup-ref", "guild-7-L1e400-1700000000000-x1y2"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["dungeonNumber"] == 7
    assert isinstance(payload["level"], int)


def test_diagnose_seeds_script(capsys):
    from scripts.diagnose_seeds import main as diagnose

    assert diagnose(["abc", "12345"]) == 0
    report = json.loads(capsys.readouterr().out)
    assert [r["seed"] for r in report["results"]] == ["abc", "12345"]
    assert all(r["ok"] for r in report["results"])
