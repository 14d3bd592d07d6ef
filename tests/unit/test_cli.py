"""
Unit Tests for the Command-Line Interface
"""
import json

import pytest

from dcm_support import cli


@pytest.fixture(autouse=True)
def quiet_cli(monkeypatch):
    """Keep the CLI from reconfiguring the root logger during tests."""
    monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: None)
    for var in ("DCM_FALLBACK_POLICY", "DCM_ENGINE_CONFIG", "DCM_BATCH_WORKERS"):
        monkeypatch.delenv(var, raising=False)


class TestEvaluateCommand:

    def test_evaluate(self, capsys):
        code = cli.main([
            "evaluate", "--age", "65", "--sex", "M", "--mjoa", "13",
            "--duration-months", "12", "--t2-signal", "bright", "--levels", "3",
            "--canal-ratio", "<50%",
        ])
        output = json.loads(capsys.readouterr().out)

        assert code == cli.EXIT_OK
        assert output["result"]["label"] == "surgery_recommended"
        assert output["result"]["best_approach"] == "posterior"
        assert output["fallbacks"] == []

    def test_evaluate_reports_fallbacks(self, capsys):
        code = cli.main([
            "evaluate", "--age", "65", "--sex", "M", "--mjoa", "abc",
            "--duration-months", "2", "--t2-signal", "none", "--levels", "1",
            "--canal-ratio", "<50%", "--opll",
        ])
        output = json.loads(capsys.readouterr().out)

        assert code == cli.EXIT_OK
        assert output["patient"]["mjoa"] == 18
        assert output["patient"]["opll"] is True
        assert [f["field"] for f in output["fallbacks"]] == ["mjoa"]

    def test_evaluate_strict(self, capsys):
        code = cli.main(["--strict", "evaluate", "--mjoa", "abc"])
        error = json.loads(capsys.readouterr().err.strip().splitlines()[-1])

        assert code == cli.EXIT_VALIDATION
        assert error["error"] == "FIELD_VALIDATION_ERROR"

    def test_evaluate_strict_after_subcommand(self, capsys):
        code = cli.main(["evaluate", "--mjoa", "abc", "--strict"])
        captured = capsys.readouterr()
        error = json.loads(captured.err.strip().splitlines()[-1])

        assert code == cli.EXIT_VALIDATION
        assert captured.out == ""
        assert error["error"] == "FIELD_VALIDATION_ERROR"
        assert error["details"]["field"] == "mjoa"

    def test_log_level_after_subcommand(self, monkeypatch, capsys):
        calls = []
        monkeypatch.setattr(cli, "setup_logging", lambda *args, **kwargs: calls.append(args))
        code = cli.main(["evaluate", "--mjoa", "13", "--log-level", "DEBUG"])

        assert code == cli.EXIT_OK
        assert calls[0][0] == "DEBUG"

    def test_shared_options_default_when_absent(self):
        args = cli.build_parser().parse_args(["evaluate"])
        assert args.strict is False
        assert args.log_level is None

    def test_invalid_environment_setting(self, monkeypatch, capsys):
        monkeypatch.setenv("DCM_FALLBACK_POLICY", "bogus")
        code = cli.main(["evaluate", "--mjoa", "13"])
        captured = capsys.readouterr()
        error = json.loads(captured.err.strip().splitlines()[-1])

        assert code == cli.EXIT_VALIDATION
        assert captured.out == ""
        assert error["error"] == "CONFIG_ERROR"
        assert error["details"]["invalid_settings"] == ["fallback_policy"]


class TestBatchCommand:

    def test_batch(self, sample_csv_file, capsys):
        code = cli.main(["batch", str(sample_csv_file), "--workers", "2"])
        output = json.loads(capsys.readouterr().out)

        assert code == cli.EXIT_OK
        assert output["summary"]["total"] == 2
        assert output["summary"]["surgery_recommended"] == 2
        assert output["fallbacks"] == {}

    def test_batch_missing_columns(self, tmp_path, capsys):
        path = tmp_path / "bad.csv"
        path.write_text("age,sex\n65,M\n", encoding="utf-8")
        code = cli.main(["batch", str(path)])
        error = json.loads(capsys.readouterr().err.strip().splitlines()[-1])

        assert code == cli.EXIT_VALIDATION
        assert error["error"] == "BATCH_HEADER_ERROR"
        assert "mjoa" in error["details"]["missing_columns"]

    def test_batch_strict_after_subcommand(self, tmp_path, capsys):
        path = tmp_path / "cohort.csv"
        path.write_text(
            "age,sex,mjoa,duration_months,levels,canal_ratio,t2_signal\n"
            "65,M,abc,12,3,<50%,bright\n",
            encoding="utf-8",
        )
        code = cli.main(["batch", str(path), "--strict"])
        error = json.loads(capsys.readouterr().err.strip().splitlines()[-1])

        assert code == cli.EXIT_VALIDATION
        assert error["error"] == "FIELD_VALIDATION_ERROR"
        assert error["details"]["row"] == 1
