import json

from floorgen.logging_utils import get_logger


def test_key_value_format(monkeypatch, capsys):
    monkeypatch.setenv("FLOORGEN_LOG_LEVEL", "debug")
    get_logger("floorgen.test").info(event="partition_done", leaves=12, note="two words", skipped=None)
    line = capsys.readouterr().out.strip()
    assert line.startswith("level=info ts=")
    assert "event=partition_done" in line
    assert "leaves=12" in line
    assert "note=two_words" in line
    assert "skipped" not in line
    assert "logger=floorgen.test" in line


def test_json_mode(monkeypatch, capsys):
    monkeypatch.setenv("FLOORGEN_LOG_LEVEL", "info")
    monkeypatch.setenv("FLOORGEN_LOG_JSON", "1")
    get_logger("floorgen.test").warn(event="corridor_carve_failure", room_a=1, room_b=2)
    rec = json.loads(capsys.readouterr().out)
    assert rec["level"] == "warn"
    assert rec["room_a"] == 1 and rec["room_b"] == 2
    assert isinstance(rec["ts"], int)


def test_level_threshold(monkeypatch, capsys):
    monkeypatch.setenv("FLOORGEN_LOG_LEVEL", "warn")
    log = get_logger("floorgen.test")
    log.debug(event="hidden")
    log.info(event="hidden")
    log.warn(event="shown")
    out = capsys.readouterr().out
    assert "hidden" not in out
    assert "event=shown" in out


def test_errors_go_to_stderr(capsys):
    get_logger("floorgen.test").error(event="boom")
    captured = capsys.readouterr()
    assert "event=boom" in captured.err
    assert captured.out == ""


def test_logger_cache():
    assert get_logger("floorgen.x") is get_logger("floorgen.x")


def test_generation_logs_summary(monkeypatch, capsys):
    from floorgen.dungeon import FloorConfig, generate

    monkeypatch.setenv("FLOORGEN_LOG_LEVEL", "info")
    generate(FloorConfig(width=30, height=20, seed=8))
    out = capsys.readouterr().out
    assert "event=floor_generated" in out
    assert "seed=8" in out


def test_coordinates_render_as_pairs(monkeypatch, capsys):
    monkeypatch.setenv("FLOORGEN_LOG_LEVEL", "debug")
    get_logger("floorgen.locks").debug(event="lock_placed", room=4, door=(22, 4))
    line = capsys.readouterr().out
    assert "door=22,4" in line
    assert "room=4" in line
