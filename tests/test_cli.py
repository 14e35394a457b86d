"""Tests for the birdlab command-line interface."""

import json

import pytest

from birdlab.cli import build_parser, main


class TestParser:
    """Tests for argument parsing."""

    def test_classify_defaults(self):
        args = build_parser().parse_args(["classify", "clip.wav"])

        assert args.command == "classify"
        assert args.path == "clip.wav"
        assert args.model == "precision"
        assert not args.json

    def test_rejects_unknown_model(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["classify", "clip.wav", "--model", "turbo"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestCommands:
    """Tests for command output."""

    def test_models_lists_variants(self, capsys):
        assert main(["models"]) == 0

        out = capsys.readouterr().out
        assert "E_model" in out
        assert "N_Enrich_model" in out
        assert "High Precision" in out

    def test_classify_text(self, tmp_path, sine_wav_bytes, capsys):
        path = tmp_path / "clip.wav"
        path.write_bytes(sine_wav_bytes)

        code = main(["classify", str(path), "--models-dir", str(tmp_path / "models")])

        assert code == 0
        out = capsys.readouterr().out
        assert "mock inference" in out
        assert "Other" in out
        assert "Robin" in out

    def test_classify_json(self, tmp_path, sine_wav_bytes, capsys):
        path = tmp_path / "clip.wav"
        path.write_bytes(sine_wav_bytes)

        code = main(
            [
                "classify",
                str(path),
                "--model",
                "efficiency",
                "--models-dir",
                str(tmp_path / "models"),
                "--json",
            ]
        )

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["model"] == "efficiency"
        assert payload["mel_shape"] == [55, 40]
        assert [r["species"] for r in payload["results"]] == ["Other", "Robin"]

    def test_classify_missing_file(self, tmp_path, capsys):
        code = main(["classify", str(tmp_path / "missing.wav")])

        assert code == 1
        assert "not found" in capsys.readouterr().err
