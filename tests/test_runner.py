"""Tests for the fintrack-init entry point."""

import pytest

from fintrack import runner
from fintrack.db import FinanceRepository


@pytest.fixture(autouse=True)
def quiet(monkeypatch):
    monkeypatch.setattr(runner, "configure_logging", lambda *args, **kwargs: None)
    monkeypatch.setattr(runner, "ensure_directories", lambda: None)


def test_initializes_database(tmp_path, capsys):
    db_path = tmp_path / "init.db"
    assert runner.main(["--db", str(db_path)]) == 0
    assert db_path.exists()
    assert "Database ready" in capsys.readouterr().out


def test_provisions_named_user(tmp_path):
    db_path = tmp_path / "init.db"
    repository = FinanceRepository(db_path)
    user = repository.users.create_user("erin", "hash", "salt")

    assert runner.main(["--db", str(db_path), "--user", "erin"]) == 0
    assert repository.accounts.count_accounts(user.id) == 3
    assert repository.categories.count_categories(user.id) == 19


def test_unknown_user(tmp_path):
    assert runner.main(["--db", str(tmp_path / "init.db"), "--user", "nobody"]) == 1
