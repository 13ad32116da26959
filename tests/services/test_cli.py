"""Command line round trips against a file-backed SQLite database."""

import pytest

from inventory_kernel.db.engine import reset_engine
from inventory_services.cli import main


@pytest.fixture
def cli_config(tmp_path):
    path = tmp_path / "cli.yaml"
    path.write_text(
        "storage:\n"
        f'  database_url: "sqlite:///{(tmp_path / "cli.db").as_posix()}"\n'
        "backup:\n"
        f'  directory: "{(tmp_path / "backups").as_posix()}"\n',
        encoding="utf-8",
    )
    yield str(path)
    reset_engine()


def _run(cli_config, capsys, *args, secret="0000"):
    code = main(["--config", cli_config, "--secret", secret, *args])
    out, err = capsys.readouterr()
    return code, out.strip(), err.strip()


class TestCli:

    def test_add_item_then_list(self, cli_config, capsys):
        code, item_id, _ = _run(
            cli_config, capsys,
            "add-item", "--type", "part", "--name", "widget", "--code", "x1",
            "--initial-quantity", "3",
        )
        assert code == 0
        assert item_id.startswith("item-")

        code, out, _ = _run(cli_config, capsys, "list", "--category", "part")
        assert code == 0
        assert out.split("\t") == [item_id, "X1", "WIDGET", "-", "3"]

    def test_transactions_and_stats(self, cli_config, capsys):
        _, item_id, _ = _run(
            cli_config, capsys,
            "add-item", "--type", "product", "--name", "box", "--initial-quantity", "5",
        )
        code, txn_id, _ = _run(
            cli_config, capsys,
            "add-txn", item_id, "--type", "consumption", "--quantity", "2", "--serial", "SN-1",
        )
        assert code == 0

        _, out, _ = _run(cli_config, capsys, "stats")
        assert "product\titems=1\tstock=3" in out

        code, _, _ = _run(cli_config, capsys, "delete-txn", item_id, txn_id)
        assert code == 0
        _, out, _ = _run(cli_config, capsys, "stats")
        assert "product\titems=1\tstock=5" in out

    def test_duplicate_serial_reports_notice(self, cli_config, capsys):
        _, item_id, _ = _run(
            cli_config, capsys, "add-item", "--type", "product", "--name", "box",
        )
        _run(cli_config, capsys, "add-txn", item_id, "--type", "purchase", "--quantity", "1",
             "--serial", "sn-7")
        code, _, err = _run(
            cli_config, capsys,
            "add-txn", item_id, "--type", "purchase", "--quantity", "1", "--serial", "SN-7",
        )
        assert code == 1
        assert "DUPLICATE_SERIAL_NUMBER" in err

    def test_bad_secret(self, cli_config, capsys):
        code, _, err = _run(cli_config, capsys, "stats", secret="9999")
        assert code == 1
        assert "INVALID_CREDENTIALS" in err

    def test_restricted_cannot_list_parts(self, cli_config, capsys):
        code, _, err = _run(cli_config, capsys, "list", "--category", "part", secret="1111")
        assert code == 1
        assert "CATEGORY_ACCESS_DENIED" in err

    def test_delete_item_with_wrong_confirmation(self, cli_config, capsys):
        _, item_id, _ = _run(cli_config, capsys, "add-item", "--type", "part", "--name", "a")
        code, _, err = _run(cli_config, capsys, "delete-item", item_id, "--confirm-secret", "x")
        assert code == 1
        assert "INVALID_CREDENTIALS" in err

        code, _, _ = _run(cli_config, capsys, "delete-item", item_id)
        assert code == 0
        _, out, _ = _run(cli_config, capsys, "list", "--category", "part")
        assert out == ""

    def test_update_item_rejects_bad_assignment(self, cli_config, capsys):
        _, item_id, _ = _run(cli_config, capsys, "add-item", "--type", "part", "--name", "a")
        code, _, err = _run(cli_config, capsys, "update-item", item_id, "--set", "spec")
        assert code == 1
        assert "FIELD=VALUE" in err

    def test_export_and_backup(self, cli_config, capsys, tmp_path):
        _run(cli_config, capsys, "add-item", "--type", "part", "--name", "a", "--code", "c1")

        code, path, _ = _run(
            cli_config, capsys, "export", "--category", "part", "--directory", str(tmp_path / "out")
        )
        assert code == 0
        assert path.endswith(".csv")

        code, _, err = _run(cli_config, capsys, "backup")
        assert code == 1
        assert "BACKUP_NOT_CONFIGURED" in err

        assert _run(cli_config, capsys, "configure-backup", "--client-id", "local")[0] == 0
        code, file_id, _ = _run(cli_config, capsys, "backup")
        assert code == 0
        assert (tmp_path / "backups" / file_id).is_file()

    def test_missing_secret(self, cli_config, capsys, monkeypatch):
        monkeypatch.delenv("INVENTORY_SECRET", raising=False)
        code = main(["--config", cli_config, "stats"])
        assert code == 1
        assert "No secret given" in capsys.readouterr().err
