"""Tests for the plan, apply, validate, graph and template commands."""

import json
from pathlib import Path
import pytest
from click.testing import CliRunner
from stackplan import __version__
from stackplan.cli.main import cli


DECLARATION = """
stack: demo
resources:
  vpc:
    kind: network
    config:
      cidr_block: 10.0.0.0/16
  public:
    kind: subnet
    config:
      network: ${vpc}
      cidr_block: 10.0.0.0/24
  lb:
    kind: load-balancer
    config:
      subnets: ['${public}']
"""


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Empty project directory with no user or project config."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: home))
    monkeypatch.chdir(tmp_path)
    declaration = tmp_path / "stack.yaml"
    declaration.write_text(DECLARATION, encoding="utf-8")
    return tmp_path


class TestPlanApplyCommands:
    """Test the plan / apply cycle."""

    def test_plan_apply_plan(self, workspace):
        runner = CliRunner()
        state = str(workspace / "state.json")

        result = runner.invoke(cli, ['plan', 'stack.yaml', '--state', state])
        assert result.exit_code == 2
        assert "3 to create" in result.output

        result = runner.invoke(cli, ['apply', 'stack.yaml', '--state', state])
        assert result.exit_code == 0
        assert "Apply complete: 3 succeeded." in result.output
        assert "lb.dns_name" in result.output

        result = runner.invoke(cli, ['plan', 'stack.yaml', '--state', state])
        assert result.exit_code == 0
        assert "No changes" in result.output

    def test_default_state_path_from_config(self, workspace):
        runner = CliRunner()
        result = runner.invoke(cli, ['apply', 'stack.yaml', '--quiet'])

        assert result.exit_code == 0
        saved = json.loads((workspace / ".stackplan" / "state.json").read_text(encoding="utf-8"))
        assert list(saved["entries"]) == ["vpc", "public", "lb"]

    def test_plan_json_output(self, workspace):
        runner = CliRunner()
        result = runner.invoke(cli, ['plan', 'stack.yaml', '--state', str(workspace / "s.json"), '--json', '--quiet'])

        assert result.exit_code == 2
        data = json.loads(result.output)
        assert [a["node_id"] for a in data["actions"]] == ["vpc", "public", "lb"]
        assert {a["action"] for a in data["actions"]} == {"CREATE"}

    def test_apply_concurrency_option_validated(self, workspace):
        runner = CliRunner()
        result = runner.invoke(cli, ['apply', 'stack.yaml', '--concurrency', '0'])
        assert result.exit_code != 0

    def test_missing_file(self, workspace):
        runner = CliRunner()
        result = runner.invoke(cli, ['plan', 'nonexistent.yaml'])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_invalid_declaration(self, workspace):
        (workspace / "bad.yaml").write_text(
            "resources:\n  sg:\n    kind: security-group\n    config:\n      network: ${missing}\n",
            encoding="utf-8",
        )
        runner = CliRunner()
        result = runner.invoke(cli, ['plan', 'bad.yaml', '--state', str(workspace / "s.json")])
        assert result.exit_code == 1
        assert "missing" in result.output


class TestValidateAndGraphCommands:

    def test_validate(self, workspace):
        result = CliRunner().invoke(cli, ['validate', 'stack.yaml'])
        assert result.exit_code == 0
        assert "Declaration valid: stack 'demo' with 3 resources" in result.output

    def test_validate_schema_error(self, workspace):
        (workspace / "bad.yaml").write_text(
            "resources:\n  vpc:\n    kind: network\n    config: {}\n", encoding="utf-8"
        )
        result = CliRunner().invoke(cli, ['validate', 'bad.yaml'])
        assert result.exit_code == 1
        assert "vpc" in result.output

    def test_graph(self, workspace):
        result = CliRunner().invoke(cli, ['graph', 'stack.yaml'])
        assert result.exit_code == 0
        assert "Stack demo: 3 resources" in result.output
        assert result.output.index("vpc") < result.output.index("lb")


class TestTemplateAndVersionCommands:

    def test_template_to_file_then_validate(self, workspace):
        runner = CliRunner()
        result = runner.invoke(cli, ['template', 'web-service', '--no-cdn', '-o', 'web.yaml'])
        assert result.exit_code == 0
        assert (workspace / "web.yaml").exists()

        result = runner.invoke(cli, ['validate', 'web.yaml'])
        assert result.exit_code == 0
        assert "with 10 resources" in result.output

    def test_template_cdn_without_load_balancer(self, workspace):
        result = CliRunner().invoke(cli, ['template', 'web-service', '--no-load-balancer'])
        assert result.exit_code == 1
        assert "Tip:" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ['version'])
        assert result.exit_code == 0
        assert f"stackplan version {__version__}" in result.output
