"""
Unit tests for the command-line interface.

Database access is replaced with a stub pool so only argument handling and
exit codes are exercised.
"""

from unittest.mock import MagicMock

import pytest

from person_etl.cli import batch_cli
from person_etl.core.models import COMPLETED, FAILED, RunResult


@pytest.fixture
def stub_pool(monkeypatch):
    pool = MagicMock()
    pool.__enter__ = MagicMock(return_value=pool)
    pool.__exit__ = MagicMock(return_value=False)
    monkeypatch.setattr(
        batch_cli.DatabaseConnectionPool, "from_settings", classmethod(lambda cls, settings: pool)
    )
    return pool


@pytest.fixture
def launched(monkeypatch):
    """Capture the settings the job is wired from and return a canned result"""
    calls = {}

    def fake_from_settings(cls, settings, pool):
        calls["settings"] = settings
        job = MagicMock()
        job.launch.return_value = calls.get("result", RunResult(run_id="r1", status=COMPLETED))
        return job

    monkeypatch.setattr(batch_cli.ImportPersonsJob, "from_settings", classmethod(fake_from_settings))
    return calls


def test_run_exit_code_completed(stub_pool, launched):
    code = batch_cli.main(["run", "--input", "people.csv", "--chunk-size", "25", "--db-password", "pw"])

    assert code == batch_cli.EXIT_OK
    settings = launched["settings"]
    assert settings.input_path == "people.csv"
    assert settings.chunk_size == 25
    assert settings.database.password.get_secret_value() == "pw"


def test_run_exit_code_failed(stub_pool, launched):
    launched["result"] = RunResult(run_id="r1", status=FAILED)

    code = batch_cli.main(["run", "--db-password", "pw"])

    assert code == batch_cli.EXIT_FAILED


def test_strict_flag(stub_pool, launched):
    batch_cli.main(["run", "--strict", "--no-create-table", "--db-password", "pw"])

    assert launched["settings"].tokenizer.strict is True
    assert launched["settings"].create_table is False


def test_json_output(stub_pool, launched, capsys):
    batch_cli.main(["run", "--json", "--db-password", "pw"])

    assert '"status": "COMPLETED"' in capsys.readouterr().out


def test_invalid_chunk_size_fails_before_connecting(stub_pool, launched):
    code = batch_cli.main(["run", "--chunk-size", "0", "--db-password", "pw"])

    assert code == batch_cli.EXIT_FAILED
    assert "settings" not in launched


def test_no_command_prints_help(capsys):
    assert batch_cli.main([]) == batch_cli.EXIT_FAILED
    assert "usage" in capsys.readouterr().out
