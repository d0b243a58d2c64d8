import json
import logging

import pytest
from click.testing import CliRunner

from cli.main import cli
from compaction.recovery import Phase
from conftest import ALIAS_ROWS, create_database, read_rows


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def config_path(tmp_path):
    db_dir = tmp_path / "xax_db"
    db_dir.mkdir()
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "database": {"db_dir": str(db_dir)},
        "logging": {"file": str(tmp_path / "logs" / "xax_compact.log")},
    }))
    return path


def invoke(config_path, *args):
    return CliRunner().invoke(cli, ["--config", str(config_path), *args])


def test_config_init(tmp_path):
    path = tmp_path / "config.json"
    result = CliRunner().invoke(cli, ["--config", str(path), "config", "init"])

    assert result.exit_code == 0
    assert json.loads(path.read_text())["database"]["type"] == "sqlite"


def test_config_show(config_path, tmp_path):
    result = invoke(config_path, "config", "show")

    assert result.exit_code == 0
    assert f"{(tmp_path / 'xax_db').as_posix()}/xax;MV_STORE=FALSE" in result.output
    assert "not found" in result.output


def test_compact_command(config_path, tmp_path):
    db_file = tmp_path / "xax_db" / "xax.h2.db"
    create_database(db_file, ALIAS_ROWS)

    result = invoke(config_path, "compact")

    assert result.exit_code == 0
    assert "successfully compacted" in result.output
    assert read_rows(db_file) == sorted(ALIAS_ROWS)
    log_text = (tmp_path / "logs" / "xax_compact.log").read_text()
    assert "Creating the SQL script" in log_text


def test_compact_command_without_database(config_path):
    result = invoke(config_path, "compact")
    assert result.exit_code == 1


def test_compact_command_rejects_other_engines(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "database": {"type": "postgresql"},
        "logging": {"file": str(tmp_path / "xax_compact.log")},
    }))

    result = CliRunner().invoke(cli, ["--config", str(path), "compact"])

    assert result.exit_code == 1
    assert "must be 'sqlite'" in result.output
    log_text = (tmp_path / "xax_compact.log").read_text()
    assert "ERROR" in log_text and "must be 'sqlite'" in log_text


def test_recover_without_journal(config_path):
    result = invoke(config_path, "recover")

    assert result.exit_code == 0
    assert "No interrupted compaction found" in result.output


def test_recover_restores_backup(config_path, tmp_path):
    db_dir = tmp_path / "xax_db"
    create_database(db_dir / "xax.h2.db.bak", ALIAS_ROWS)
    (db_dir / "xax.h2.db").write_bytes(b"half built")
    (db_dir / "compact.phase").write_text(json.dumps({
        "phase": Phase.SWAPPED.value, "live_file": "xax.h2.db",
    }))

    result = invoke(config_path, "recover")

    assert result.exit_code == 0
    assert "Original database restored" in result.output
    assert sorted(p.name for p in db_dir.iterdir()) == ["xax.h2.db"]
    assert read_rows(db_dir / "xax.h2.db") == sorted(ALIAS_ROWS)


def test_aliases_list(config_path, tmp_path):
    create_database(tmp_path / "xax_db" / "xax.h2.db", ALIAS_ROWS)

    result = invoke(config_path, "aliases", "list", "--account", "100", "--timestamp", "30")

    assert result.exit_code == 0
    assert "Beta" in result.output
    assert "alpha" not in result.output
    assert "Showing 3 of 4 aliases" in result.output


def test_aliases_list_json(config_path, tmp_path):
    create_database(tmp_path / "xax_db" / "xax.h2.db", ALIAS_ROWS)

    result = invoke(config_path, "aliases", "list", "-a", "200", "--json")

    assert result.exit_code == 0
    assert json.loads(result.output) == {"aliases": [{
        "alias": "4",
        "account": "200",
        "aliasName": "gamma",
        "aliasURI": "acct:gamma",
        "timestamp": 20,
    }]}


def test_recover_with_unreadable_journal(config_path, tmp_path):
    (tmp_path / "xax_db" / "compact.phase").write_text('"SWAPPED"')

    result = invoke(config_path, "recover")

    assert result.exit_code == 1
    assert "Unreadable compaction journal" in result.output
    log_text = (tmp_path / "logs" / "xax_compact.log").read_text()
    assert "Unreadable compaction journal" in log_text
