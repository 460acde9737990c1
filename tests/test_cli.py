"""
================================================================================
Testes de Integração do CLI
================================================================================

Testes para os comandos do CLI `autoapi`.
"""

from __future__ import annotations

import json
import logging
import zipfile
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from autoapi import __version__
from autoapi.cli.main import cli
from autoapi.cli.utils import format_duration, parse_key_values
from autoapi.models import GeneratedTestPlan, PlanConfigHints, ResultStatus, TestCase, TestResult


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("AUTOAPI_LLM_MODE", "AUTOAPI_AI_API_KEY", "GEMINI_API_KEY",
                 "AUTOAPI_BASE_URL", "AUTOAPI_USE_PROXY", "AUTOAPI_PACE_MS", "AUTOAPI_VERBOSE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def runner() -> CliRunner:
    """CliRunner para testar comandos Click."""
    return CliRunner()


@pytest.fixture
def plan_file(tmp_path: Path) -> str:
    """Plano salvo como `autoapi generate` salvaria."""
    plan = GeneratedTestPlan(
        config=PlanConfigHints(base_url="https://api.example.com"),
        cases=[
            TestCase(id="TC-1", title="Listar", method="GET", endpoint="/users", expected_status=200),
            TestCase(id="TC-2", title="Criar", method="POST", endpoint="/users",
                     body={"name": "Ana"}, expected_status=201),
        ],
    )
    path = tmp_path / "plan.json"
    path.write_text(plan.to_json(), encoding="utf-8")
    return str(path)


@pytest.fixture
def plan_without_base_url(tmp_path: Path) -> str:
    """Plano sem dica de base URL."""
    plan = GeneratedTestPlan(
        cases=[TestCase(id="TC-1", method="GET", endpoint="/users", expected_status=200)],
    )
    path = tmp_path / "no-base.json"
    path.write_text(plan.to_json(), encoding="utf-8")
    return str(path)


def fake_execute(statuses: dict[str, ResultStatus]) -> Any:
    def _execute(case: TestCase, config: Any, **kwargs: Any) -> TestResult:
        status = statuses.get(case.id, ResultStatus.PASS)
        return TestResult(
            test_case_id=case.id,
            status=status,
            actual_status=case.expected_status if status == ResultStatus.PASS else 500,
            latency_ms=5,
            timestamp="2024-01-01T00:00:00.000Z",
        )
    return _execute


# =============================================================================
# TESTES DE HELP E VERSION
# =============================================================================


class TestCliHelp:
    """Testes do help e version."""

    def test_help_shows_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("generate", "preview", "run", "serve"):
            assert command in result.output

    def test_version_shows_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


# =============================================================================
# TESTES DO COMANDO GENERATE
# =============================================================================


class TestGenerateCommand:
    """Testes do comando generate."""

    def test_generate_with_mock(self, runner: CliRunner) -> None:
        """--mock gera e salva o plano sem rede."""
        with runner.isolated_filesystem():
            Path("docs.md").write_text("GET /users lista usuários", encoding="utf-8")

            result = runner.invoke(cli, ["generate", "docs.md", "--mock", "-o", "out/plan.json"])

            assert result.exit_code == 0, result.output
            plan = GeneratedTestPlan.from_json(Path("out/plan.json").read_text(encoding="utf-8"))
            assert len(plan.cases) == 3
            assert "Plano salvo" in result.output

    def test_generate_json_output(self, runner: CliRunner) -> None:
        with runner.isolated_filesystem():
            Path("docs.md").write_text("docs", encoding="utf-8")

            result = runner.invoke(cli, ["-q", "--json", "generate", "docs.md", "--mock"])

            assert result.exit_code == 0
            output = json.loads(result.output)
            assert output["success"] is True
            assert output["cases"] == 3
            assert output["provider"] == "mock"

    def test_generate_missing_api_key(self, runner: CliRunner) -> None:
        with runner.isolated_filesystem():
            Path("docs.md").write_text("docs", encoding="utf-8")

            result = runner.invoke(cli, ["generate", "docs.md", "--provider", "gemini"])

            assert result.exit_code == 1
            assert "API key" in result.output

    def test_generate_without_documentation(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["generate", "--mock"])

        assert result.exit_code == 1
        assert "documentação" in result.output

    def test_generate_missing_file(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["generate", "nonexistent.md"])
        assert result.exit_code != 0


# =============================================================================
# TESTES DO COMANDO PREVIEW
# =============================================================================


class TestPreviewCommand:
    """Testes do comando preview."""

    def test_preview_json(self, runner: CliRunner, plan_file: str) -> None:
        result = runner.invoke(cli, [
            "-q", "--json", "preview", plan_file,
            "-H", "X-Env=qa", "-Q", "debug=1", "-B", "source=ci", "-t", "tok",
        ])

        assert result.exit_code == 0, result.output
        previews = json.loads(result.output)
        assert previews[0]["url"] == "https://api.example.com/users?debug=1"
        assert previews[0]["body"] is None
        assert previews[1]["body"] == {"name": "Ana", "source": "ci"}
        assert previews[1]["headers"]["X-Env"] == "qa"
        assert previews[1]["headers"]["Authorization"] == "Bearer tok"

    def test_preview_rich(self, runner: CliRunner, plan_file: str) -> None:
        result = runner.invoke(cli, ["preview", plan_file])

        assert result.exit_code == 0
        assert "TC-2" in result.output

    def test_invalid_key_value(self, runner: CliRunner, plan_file: str) -> None:
        result = runner.invoke(cli, ["preview", plan_file, "-H", "sem-igual"])
        assert result.exit_code == 2


# =============================================================================
# TESTES DO COMANDO RUN
# =============================================================================


class TestRunCommand:
    """Testes do comando run."""

    def test_run_all_pass(self, runner: CliRunner, plan_file: str) -> None:
        with patch("autoapi.runner.execute_test_case", side_effect=fake_execute({})):
            result = runner.invoke(cli, ["run", plan_file, "--pace-ms", "0"])

        assert result.exit_code == 0, result.output
        assert "PASSOU" in result.output

    def test_run_with_failure_exits_1(self, runner: CliRunner, plan_file: str) -> None:
        statuses = {"TC-1": ResultStatus.FAIL}
        with patch("autoapi.runner.execute_test_case", side_effect=fake_execute(statuses)):
            result = runner.invoke(cli, ["run", plan_file, "--pace-ms", "0"])

        assert result.exit_code == 1

    def test_run_json_output(self, runner: CliRunner, plan_file: str) -> None:
        statuses = {"TC-2": ResultStatus.ERROR}
        with patch("autoapi.runner.execute_test_case", side_effect=fake_execute(statuses)):
            result = runner.invoke(cli, ["-q", "--json", "run", plan_file, "--pace-ms", "0"])

        output = json.loads(result.output)
        assert output["success"] is False
        assert output["stats"]["errors"] == 1
        assert [r["id"] for r in output["results"]] == ["TC-1", "TC-2"]

    def test_fail_fast(self, runner: CliRunner, plan_file: str) -> None:
        statuses = {"TC-1": ResultStatus.FAIL}
        with patch("autoapi.runner.execute_test_case", side_effect=fake_execute(statuses)) as mock:
            result = runner.invoke(cli, ["-q", "--json", "run", plan_file, "--pace-ms", "0", "--fail-fast"])

        assert mock.call_count == 1
        assert json.loads(result.output)["stopped"] is True

    def test_plan_hint_fills_base_url(self, runner: CliRunner, plan_file: str) -> None:
        with patch("autoapi.runner.execute_test_case", side_effect=fake_execute({})) as mock:
            runner.invoke(cli, ["run", plan_file, "--pace-ms", "0"])

        config = mock.call_args.args[1]
        assert config.base_url == "https://api.example.com"

    def test_cli_base_url_beats_hint(self, runner: CliRunner, plan_file: str) -> None:
        with patch("autoapi.runner.execute_test_case", side_effect=fake_execute({})) as mock:
            runner.invoke(cli, ["run", plan_file, "--pace-ms", "0", "-u", "https://staging.example.com"])

        assert mock.call_args.args[1].base_url == "https://staging.example.com"

    def test_report_and_export(self, runner: CliRunner, plan_file: str, tmp_path: Path) -> None:
        report = tmp_path / "report.md"
        bundle = tmp_path / "bundle.zip"
        with patch("autoapi.runner.execute_test_case", side_effect=fake_execute({})):
            result = runner.invoke(cli, [
                "run", plan_file, "--pace-ms", "0",
                "--report", str(report), "--export", str(bundle),
            ])

        assert result.exit_code == 0
        assert "# Relatório de Testes de API" in report.read_text(encoding="utf-8")
        with zipfile.ZipFile(bundle) as archive:
            assert "bundle/report.md" in archive.namelist()

    def test_missing_base_url_refuses_to_start(
        self, runner: CliRunner, plan_without_base_url: str
    ) -> None:
        """Sem base URL nada é enviado, nem mesmo ao relay."""
        with patch("autoapi.runner.execute_test_case") as mock:
            result = runner.invoke(cli, [
                "run", plan_without_base_url, "--pace-ms", "0",
                "--proxy", "--proxy-url", "http://relay.local/proxy",
            ])

        assert result.exit_code == 1
        assert "Base URL não configurada" in result.output
        mock.assert_not_called()

    def test_missing_base_url_json_error(
        self, runner: CliRunner, plan_without_base_url: str
    ) -> None:
        with patch("autoapi.runner.execute_test_case") as mock:
            result = runner.invoke(cli, ["-q", "--json", "run", plan_without_base_url])

        assert result.exit_code == 1
        assert '"CONFIGURATION_ERROR"' in result.output
        mock.assert_not_called()

    def test_unwritable_report(self, runner: CliRunner, plan_file: str, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("", encoding="utf-8")

        with patch("autoapi.runner.execute_test_case", side_effect=fake_execute({})):
            result = runner.invoke(cli, [
                "run", plan_file, "--pace-ms", "0", "--report", str(blocker / "report.md"),
            ])

        assert result.exit_code == 1
        assert "Não foi possível salvar" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_invalid_plan(self, runner: CliRunner, tmp_path: Path) -> None:
        bad = tmp_path / "bad.json"
        bad.write_text('{"cases": [{"method": "GET"}]}', encoding="utf-8")

        result = runner.invoke(cli, ["run", str(bad)])

        assert result.exit_code == 1
        assert "Plano inválido" in result.output


class TestSettingsVerbose:
    def test_verbose_setting_enables_debug(
        self, runner: CliRunner, plan_file: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("AUTOAPI_VERBOSE", "true")

        result = runner.invoke(cli, ["preview", plan_file])

        assert result.exit_code == 0
        assert logging.getLogger().level == logging.DEBUG

    def test_quiet_wins_over_verbose_setting(
        self, runner: CliRunner, plan_file: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("AUTOAPI_VERBOSE", "true")

        runner.invoke(cli, ["-q", "preview", plan_file])

        assert logging.getLogger().level == logging.ERROR


# =============================================================================
# TESTES DO COMANDO SERVE
# =============================================================================


class TestServeCommand:
    @patch("autoapi.cli.commands.serve_cmd.uvicorn.run")
    def test_serve_starts_relay(
        self, mock_run: Any, runner: CliRunner, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        # serve exporta a config do relay por ambiente; o monkeypatch restaura
        monkeypatch.setenv("AUTOAPI_RELAY_HOST", "")
        monkeypatch.setenv("AUTOAPI_RELAY_PORT", "")
        result = runner.invoke(cli, ["-q", "serve"])

        assert result.exit_code == 0
        args, kwargs = mock_run.call_args
        assert args == ("autoapi.relay.app:get_app",)
        assert kwargs["factory"] is True
        assert kwargs["port"] == 3001


# =============================================================================
# TESTES DE UTILITÁRIOS
# =============================================================================


class TestUtils:
    def test_parse_key_values(self) -> None:
        assert parse_key_values(["a=1", "b=x=y", "c="], "-H") == {"a": "1", "b": "x=y", "c": ""}

    @pytest.mark.parametrize("ms, expected", [(50, "50ms"), (1500, "1.5s"), (65000, "1m 5s")])
    def test_format_duration(self, ms: int, expected: str) -> None:
        assert format_duration(ms) == expected
