"""Tests for the CLI entry point."""

import json

import pytest
from click.testing import CliRunner

import dnsrank.cli as cli_mod
from dnsrank.cli import main


@pytest.fixture(autouse=True)
def _isolate(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    """No user config file, no global logging reconfiguration."""
    monkeypatch.setattr("dnsrank.config.DEFAULT_CONFIG_PATH", tmp_path / "nope.yaml")
    monkeypatch.setattr(cli_mod, "configure_logging", lambda: None)


def _invoke(*args: str):
    return CliRunner().invoke(main, list(args))


class TestCliHelp:
    """--help flags produce usage information."""

    def test_group_help(self) -> None:
        result = _invoke("--help")
        assert result.exit_code == 0
        assert "find the fastest DNS resolver" in result.output
        assert "run" in result.output
        assert "list-available" in result.output

    def test_run_help(self) -> None:
        result = _invoke("run", "--help")
        assert result.exit_code == 0
        for flag in ("--parallel", "--attempts", "--top", "--simulate", "--config"):
            assert flag in result.output

    def test_version(self) -> None:
        result = _invoke("--version")
        assert result.exit_code == 0
        assert "1.0.0" in result.output


class TestListAvailable:
    """list-available prints the built-in registry."""

    def test_lists_resolvers(self) -> None:
        result = _invoke("list-available")
        assert result.exit_code == 0
        assert "8.8.8.8" in result.output
        assert "quad9" in result.output


class TestRunSimulated:
    """run --simulate exercises the whole pipeline offline."""

    def test_json_output(self) -> None:
        result = _invoke(
            "run", "--simulate", "--seed", "1", "--json",
            "-r", "google", "-r", "quad9", "-r", "cloudflare", "-n", "2", "-k", "2",
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["metadata"]["endpoints"] == 3
        assert data["metadata"]["attempts_per_endpoint"] == 2
        assert len(data["ranking"]) == 3
        assert len(data["recommended"]) == 2
        means = [r["latency_ms"]["avg"] for r in data["ranking"]]
        assert means == sorted(means)

    def test_all_resolvers_by_default(self) -> None:
        result = _invoke("run", "--simulate", "--json", "-n", "1")
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.output)["ranking"]) == 12

    def test_custom_resolver(self) -> None:
        result = _invoke("run", "--simulate", "--json", "-c", "192.0.2.1")
        assert result.exit_code == 0, result.output
        ranking = json.loads(result.output)["ranking"]
        assert [r["address"] for r in ranking] == ["192.0.2.1"]

    def test_top_zero(self) -> None:
        result = _invoke("run", "--simulate", "--json", "-r", "google", "-k", "0")
        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["recommended"] == []

    def test_table_output(self) -> None:
        result = _invoke("run", "--simulate", "--seed", "5", "-r", "quad9")
        assert result.exit_code == 0, result.output
        assert "Quad9" in result.output
        assert "Recommended resolvers" in result.output

    def test_quiet_prints_nothing(self) -> None:
        result = _invoke("run", "--simulate", "-q", "-r", "quad9")
        assert result.exit_code == 0
        assert result.output == ""

    def test_output_csv(self, tmp_path) -> None:
        path = tmp_path / "out.csv"
        result = _invoke("run", "--simulate", "-q", "-r", "quad9", "-o", str(path))
        assert result.exit_code == 0
        assert path.read_text(encoding="utf-8").splitlines()[1].startswith("1,Quad9,9.9.9.9")

    def test_output_defaults_to_json(self, tmp_path) -> None:
        result = _invoke("run", "--simulate", "-q", "-r", "quad9", "-o", str(tmp_path / "out"))
        assert result.exit_code == 0
        saved = json.loads((tmp_path / "out.json").read_text(encoding="utf-8"))
        assert saved["ranking"][0]["name"] == "Quad9"


class TestRunErrors:
    """Invalid input exits non-zero with a message."""

    def test_unknown_resolver(self) -> None:
        result = _invoke("run", "--simulate", "-r", "nope")
        assert result.exit_code == 1
        assert "Unknown resolver" in result.output

    def test_zero_parallel_rejected(self) -> None:
        result = _invoke("run", "--simulate", "--parallel", "0")
        assert result.exit_code == 2
        assert "Invalid value" in result.output

    def test_zero_attempts_rejected(self) -> None:
        result = _invoke("run", "--simulate", "--attempts", "0")
        assert result.exit_code == 2

    def test_invalid_transport(self) -> None:
        result = _invoke("run", "--simulate", "-t", "doh")
        assert result.exit_code == 2

    def test_missing_config_file(self, tmp_path) -> None:
        result = _invoke("run", "--simulate", "--config", str(tmp_path / "missing.yaml"))
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_invalid_config_value(self, tmp_path) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text("concurrency: 0\n", encoding="utf-8")
        result = _invoke("run", "--simulate", "--config", str(cfg_file))
        assert result.exit_code == 1
        assert "concurrency" in result.output


class TestRunConfig:
    """Config file values apply unless a flag overrides them."""

    def test_config_values_used(self, tmp_path) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(
            "attempts_per_endpoint: 4\nresolvers: [quad9, google]\ntop_k: 1\n",
            encoding="utf-8",
        )
        result = _invoke("run", "--simulate", "--json", "--config", str(cfg_file))

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["metadata"]["attempts_per_endpoint"] == 4
        assert len(data["ranking"]) == 2
        assert len(data["recommended"]) == 1

    def test_flags_override_config(self, tmp_path) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text("attempts_per_endpoint: 4\nresolvers: [quad9]\n", encoding="utf-8")
        result = _invoke(
            "run", "--simulate", "--json", "--config", str(cfg_file), "-n", "1", "-r", "google",
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["metadata"]["attempts_per_endpoint"] == 1
        assert [r["address"] for r in data["ranking"]] == ["8.8.8.8"]
