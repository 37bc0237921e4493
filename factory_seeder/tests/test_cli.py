"""Tests for the command line interface."""

import argparse
import json
from unittest.mock import patch

import pytest
import yaml
from sqlalchemy import select
from structlog.testing import capture_logs

from factory_seeder import cli
from tests.sample_app.models import User


@pytest.fixture(autouse=True)
def captured_logs(monkeypatch):
    """Capture log events so stdout only holds command output."""
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)
    with capture_logs() as logs:
        yield logs


@pytest.fixture
def seeds_dir(tmp_path):
    directory = tmp_path / "seeds"
    directory.mkdir()
    (directory / cli.EXAMPLE_SEED_FILE).write_text(cli.EXAMPLE_SEED)
    return directory


@pytest.fixture
def config_file(tmp_path, seeds_dir, engine):
    """YAML config pointing at the sample factories and the in-memory database."""
    path = tmp_path / "factory_seeder.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "app_env": "testing",
                "database_url": "sqlite://",
                "factory_paths": [],
                "factory_modules": ["tests.sample_app.factories"],
                "custom_seeds_dir": str(seeds_dir),
            }
        )
    )
    return path


def run(config_file, *argv):
    return cli.main(["--config", str(config_file), *argv])


class TestHelpers:
    def test_parse_attributes_decodes_scalars(self):
        assert cli.parse_attributes("email=a@b.c, age=30,admin=true,note=null,ids=[1],eq=a=b") == {
            "email": "a@b.c",
            "age": 30,
            "admin": True,
            "note": None,
            "ids": "[1]",
            "eq": "a=b",
        }

    def test_parse_attributes_empty(self):
        assert cli.parse_attributes(None) == {}
        assert cli.parse_attributes("") == {}

    def test_parse_key_values_rejects_bad_pairs(self):
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_key_values(["novalue"])
        with pytest.raises(argparse.ArgumentTypeError):
            cli.parse_key_values(["=value"])

    def test_parse_traits(self):
        assert cli.parse_traits(" admin, ,veteran") == ["admin", "veteran"]

    def test_choose_factory(self, capsys):
        assert cli.choose_factory(["post", "user"], prompt=lambda _: "2") == "user"
        assert cli.choose_factory(["post", "user"], prompt=lambda _: "post") == "post"
        assert cli.choose_factory(["post", "user"], prompt=lambda _: "9") is None
        assert cli.choose_factory(["post", "user"], prompt=lambda _: "widget") is None
        assert "  1. post" in capsys.readouterr().out


class TestList:
    def test_lists_factories(self, config_file, capsys):
        assert run(config_file, "list") == 0

        out = capsys.readouterr().out
        assert "Found 6 factories:" in out
        assert "  user" in out

    def test_no_factories(self, tmp_path, capsys):
        path = tmp_path / "empty.yaml"
        path.write_text(yaml.safe_dump({"factory_paths": [str(tmp_path / "nothing")]}))

        assert cli.main(["--config", str(path), "list"]) == 0
        assert "No factories found" in capsys.readouterr().out


class TestGenerate:
    def test_generates_records(self, config_file, db_session, capsys):
        code = run(config_file, "generate", "user", "-c", "2", "-t", "admin", "-a", "name=Ada,age=40")

        assert code == 0
        out = capsys.readouterr().out
        assert "Generated 2/2 user records" in out
        assert "Strategy: create" in out
        assert "Traits: admin" in out
        assert "Attributes: {'name': 'Ada', 'age': 40}" in out
        users = db_session.scalars(select(User)).all()
        assert [(u.name, u.age, u.role) for u in users] == [("Ada", 40, "admin")] * 2

    def test_environment_default_count(self, config_file, db_session, capsys):
        assert run(config_file, "generate", "gadget") == 0

        assert "Generated 5/5 gadget records" in capsys.readouterr().out

    def test_record_failures_exit_nonzero(self, config_file, capsys):
        assert run(config_file, "generate", "explosive", "-c", "2") == 1

        out = capsys.readouterr().out
        assert "Generated 0/2 explosive records" in out
        assert "ERROR: Failed to generate explosive #1: kaboom" in out

    def test_unknown_factory(self, config_file, capsys):
        assert run(config_file, "generate", "widget") == 1

        out = capsys.readouterr().out
        assert "ERROR: Factory 'widget' not found" in out
        assert "Available: account, comment, explosive, gadget, post, user" in out

    def test_unknown_trait(self, config_file, capsys):
        assert run(config_file, "generate", "user", "-t", "flying") == 1

        assert "ERROR: Unknown traits for factory 'user': flying" in capsys.readouterr().out

    def test_stripped_attributes_are_reported(self, config_file, capsys):
        assert run(config_file, "generate", "post", "-c", "1", "-a", "comments=spam") == 0

        assert "Ignored attribute comments: collection association" in capsys.readouterr().out

    def test_interactive_selection(self, config_file, monkeypatch, capsys):
        monkeypatch.setattr("builtins.input", lambda _: "gadget")

        assert run(config_file, "generate", "-c", "1", "-s", "build") == 0
        assert "Generated 1/1 gadget records" in capsys.readouterr().out

    def test_invalid_interactive_selection(self, config_file, monkeypatch, capsys):
        monkeypatch.setattr("builtins.input", lambda _: "0")

        assert run(config_file, "generate") == 1
        assert "ERROR: Invalid selection" in capsys.readouterr().out

    def test_verbose_prints_summary(self, config_file, capsys):
        assert run(config_file, "-v", "generate", "user", "-c", "1") == 0

        assert "Generation Summary:" in capsys.readouterr().out

    def test_blocked_in_production(self, tmp_path, capsys):
        path = tmp_path / "prod.yaml"
        path.write_text(yaml.safe_dump({"app_env": "production"}))

        assert cli.main(["--config", str(path), "generate", "user"]) == 1
        assert "Cannot generate seed data in the production environment" in capsys.readouterr().out


class TestPreview:
    def test_preview_prints_json(self, config_file, capsys):
        assert run(config_file, "preview", "user", "-c", "2", "-t", "veteran") == 0

        out = capsys.readouterr().out
        header, body = out.split("\n", 1)
        assert header == "Preview for user:"
        data = json.loads(body)
        assert data["count"] == 2
        assert data["preview"][0]["attributes"]["age"] == 70

    def test_unknown_factory(self, config_file, capsys):
        assert run(config_file, "preview", "widget") == 1


class TestSeeds:
    def test_lists_seeds(self, config_file, capsys):
        assert run(config_file, "seeds") == 0

        out = capsys.readouterr().out
        assert "hello_world: Print a greeting a few times" in out
        assert "    name (string, required)" in out
        assert "    count (integer, default=1)" in out

    def test_search_without_matches(self, config_file, capsys):
        assert run(config_file, "seeds", "zzz") == 0

        assert "No custom seeds found matching 'zzz'" in capsys.readouterr().out

    def test_run_seed(self, config_file, capsys):
        assert run(config_file, "run-seed", "hello_world", "-p", "name=Ada", "-p", "count=2") == 0

        out = capsys.readouterr().out
        assert "Seed 'hello_world' executed successfully" in out
        assert json.loads(out.split("\n", 1)[1]) == ["Hello, Ada!", "Hello, Ada!"]

    def test_run_seed_invalid_arguments(self, config_file, capsys):
        assert run(config_file, "run-seed", "hello_world", "-p", "count=20") == 1

        out = capsys.readouterr().out
        assert "Seed 'hello_world' failed: Missing required parameters: name" in out
        assert "must be <= 10" in out

    def test_unknown_seed(self, config_file, capsys):
        assert run(config_file, "run-seed", "nope") == 1

        out = capsys.readouterr().out
        assert "ERROR: Seed 'nope' not found" in out
        assert "Available: hello_world" in out

    def test_malformed_param_is_usage_error(self, config_file):
        with pytest.raises(SystemExit) as exc_info:
            run(config_file, "run-seed", "hello_world", "-p", "oops")

        assert exc_info.value.code == 2


class TestInit:
    def test_writes_config_and_example_seed(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "factories").mkdir()

        assert cli.main(["init"]) == 0

        config = yaml.safe_load((tmp_path / "factory_seeder.yaml").read_text())
        assert config == {
            "factory_paths": ["factories"],
            "custom_seeds_dir": "db/factory_seeds",
            "verbose": True,
        }
        assert (tmp_path / "db" / "factory_seeds" / "example_seed.py").read_text() == cli.EXAMPLE_SEED
        assert "FactorySeeder initialized!" in capsys.readouterr().out

    def test_refuses_to_overwrite(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "factory_seeder.yaml").write_text("verbose: false\n")

        assert cli.main(["init"]) == 1
        assert "already exists" in capsys.readouterr().out

        assert cli.main(["init", "--force"]) == 0
        assert yaml.safe_load((tmp_path / "factory_seeder.yaml").read_text())["verbose"] is True


def test_web_starts_uvicorn(config_file, capsys):
    with patch("factory_seeder.cli.uvicorn.run") as mock_run:
        assert run(config_file, "web", "--port", "9000") == 0

    _, kwargs = mock_run.call_args
    assert kwargs["host"] == "localhost"
    assert kwargs["port"] == 9000
    assert "http://localhost:9000" in capsys.readouterr().out


def test_missing_config_file(tmp_path, capsys, captured_logs):
    assert cli.main(["--config", str(tmp_path / "missing.yaml"), "list"]) == 1

    assert "ERROR: Config file not found" in capsys.readouterr().out
    failure = next(e for e in captured_logs if e["event"] == "cli.command_failed")
    assert failure["error_type"] == "FileNotFoundError"


def test_command_is_required():
    with pytest.raises(SystemExit):
        cli.main([])
