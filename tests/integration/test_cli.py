import json
import os

from click.testing import CliRunner

from apphost.CLI.main import cli

PLAYGROUND_MANIFEST = os.path.join(os.path.dirname(__file__), "..", "..", "manifests", "playground.json")


def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(cli, ['--help'])
    assert result.exit_code == 0
    assert 'publish-playground' in result.output
    assert 'validate' in result.output


def test_cli_validate_playground():
    runner = CliRunner()
    result = runner.invoke(cli, ['validate', PLAYGROUND_MANIFEST])
    assert result.exit_code == 0
    assert 'is valid.' in result.output


def test_cli_validate_missing_file():
    runner = CliRunner()
    result = runner.invoke(cli, ['validate', 'non_existent.json'])
    assert result.exit_code == 1
    assert 'Error: Cannot read manifest non_existent.json' in result.output


def test_cli_validate_broken_reference(tmp_path):
    manifest = tmp_path / "manifest.json"
    manifest.write_text(json.dumps({"resources": {
        "api": {"type": "project.v0", "path": "api.csproj", "env": {"DB": "{db.connectionString}"}},
    }}))
    runner = CliRunner()
    result = runner.invoke(cli, ['validate', str(manifest)])
    assert result.exit_code == 1
    assert "Invalid: api: {db.connectionString}: unknown resource 'db'" in result.output


def test_cli_show():
    runner = CliRunner()
    result = runner.invoke(cli, ['show', PLAYGROUND_MANIFEST])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    names = [line.split()[0] for line in lines[2:]]
    assert names.index("surrealdb") < names.index("db") < names.index("api")
    assert "container.v0" in result.output


def test_cli_publish_and_convert(tmp_path):
    runner = CliRunner()
    out = tmp_path / "aspire-manifest.json"
    result = runner.invoke(cli, ['publish-playground', '-o', str(out)])
    assert result.exit_code == 0
    assert out.exists()

    result = runner.invoke(cli, ['validate', str(out)])
    assert result.exit_code == 0

    compose_dir = tmp_path / "compose"
    result = runner.invoke(cli, ['convert', str(out), '-o', str(compose_dir)])
    assert result.exit_code == 0
    assert (compose_dir / "docker-compose.yml").exists()
    assert (compose_dir / ".env").exists()


def test_cli_self_referencing_manifest(tmp_path):
    manifest = tmp_path / "manifest.json"
    manifest.write_text(json.dumps({"resources": {
        "x": {"type": "container.v0", "image": "redis",
              "connectionString": "{x.connectionString}", "env": {"C": "{x.connectionString}"}},
    }}))
    runner = CliRunner()

    result = runner.invoke(cli, ['validate', str(manifest)])
    assert result.exit_code == 1
    assert "Circular reference detected involving x" in result.output

    result = runner.invoke(cli, ['convert', str(manifest), '-o', str(tmp_path / "compose")])
    assert result.exit_code == 1
    assert "Error: " in result.output
    assert not isinstance(result.exception, RecursionError)
