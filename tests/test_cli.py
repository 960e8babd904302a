import sys

import pytest
from PIL import Image

import confetti_maker
import main
from confetti_maker.core import presets
from confetti_maker.core.renderer import RasterRenderer, RenderedSequence


@pytest.fixture(autouse=True)
def isolated_presets(tmp_path, monkeypatch):
    monkeypatch.setattr(presets, '_manager', presets.PresetManager(tmp_path / "presets"))


def run_cli(monkeypatch, *argv):
    monkeypatch.setattr(sys, 'argv', ['main.py', *argv])
    main.main()


def test_generate_gif(tmp_path, monkeypatch, capsys):
    output = tmp_path / "party.gif"
    run_cli(monkeypatch, '-o', str(output), '--width', '120', '--height', '80',
            '--frames', '3', '--seed', '1', '--shapes', 'circle,star')
    assert output.exists()
    with Image.open(output) as img:
        assert img.size == (120, 80)
    out = capsys.readouterr().out
    assert "Generating" in out
    assert "Done!" in out


def test_generate_spritesheet_from_preset(tmp_path, monkeypatch, capsys):
    output = tmp_path / "sheet.png"
    run_cli(monkeypatch, '-o', str(output), '-f', 'spritesheet', '--preset', 'blizzard',
            '--width', '60', '--height', '40', '--frames', '2')
    assert "Using preset: blizzard" in capsys.readouterr().out
    with Image.open(output) as img:
        assert img.size == (120, 40)


def test_settings_file(tmp_path, monkeypatch):
    settings = tmp_path / "settings.yaml"
    settings.write_text("frame_count: 2\ncolors: ['#ff00ff']\n", encoding='utf-8')
    output = tmp_path / "frames"
    run_cli(monkeypatch, '-o', str(output), '-f', 'frames', '--settings', str(settings),
            '--width', '50', '--height', '40')
    assert len(list(output.glob("*.png"))) == 2


def test_empty_frame(tmp_path, monkeypatch):
    output = tmp_path / "empty.png"
    run_cli(monkeypatch, '--empty-frame', '-o', str(output), '--width', '30', '--height', '20')
    with Image.open(output) as img:
        assert img.size == (30, 20)


def test_unknown_preset_exits(monkeypatch, capsys):
    with pytest.raises(SystemExit) as exc:
        run_cli(monkeypatch, '--preset', 'nope')
    assert exc.value.code == 1
    assert "Error: Preset 'nope' not found" in capsys.readouterr().out


def test_list_presets(monkeypatch, capsys):
    with pytest.raises(SystemExit) as exc:
        run_cli(monkeypatch, '--list-presets')
    assert exc.value.code == 0
    assert "celebration" in capsys.readouterr().out


def test_preset_info(monkeypatch, capsys):
    with pytest.raises(SystemExit):
        run_cli(monkeypatch, '--preset-info', 'gold_rush')
    out = capsys.readouterr().out
    assert "Preset: gold_rush" in out
    assert "Zoom: 12" in out


def test_save_preset(tmp_path, monkeypatch):
    run_cli(monkeypatch, '-o', str(tmp_path / "x.gif"), '--amount', '20', '--frames', '1',
            '--width', '30', '--height', '30', '--save-preset', 'sparse')
    assert presets.get_preset('sparse').config.amount == 20.0


def test_library_generate_returns_sequence():
    sequence = confetti_maker.generate(
        width=120, height=80, frame_count=2, seed=1, renderer=RasterRenderer(quiet=True)
    )
    assert isinstance(sequence, RenderedSequence)
    assert len(sequence) == 2


def test_library_generate_exports(tmp_path):
    output = tmp_path / "lib.gif"
    confetti_maker.generate(
        str(output), width=60, height=40, preset='celebration', frame_count=2,
        renderer=RasterRenderer(quiet=True),
    )
    assert output.exists()


def test_library_generate_unknown_preset():
    with pytest.raises(ValueError):
        confetti_maker.generate(preset='nope')
