"""
Tests for the command line interface against a temporary SQLite store.
"""

import csv

import pytest

from closedjobs import __version__
from closedjobs.app import main
from closedjobs.storage import SqlRecordStore, StoreError

LOGIN = ["--username", "clerk", "--password", "s3cret"]


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Run the CLI in a temp dir with a SQLite store and known credentials."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CLOSEDJOBS_BACKEND", "sqlite")
    monkeypatch.setenv("CLOSEDJOBS_DB", str(tmp_path / "jobs.db"))
    monkeypatch.setenv("CLOSEDJOBS_USERNAME", "clerk")
    monkeypatch.setenv("CLOSEDJOBS_PASSWORD", "s3cret")
    monkeypatch.setenv("CLOSEDJOBS_LOG_LEVEL", "CRITICAL")
    monkeypatch.delenv("CLOSEDJOBS_BATCH_SIZE", raising=False)
    return tmp_path


def run(*args):
    main(LOGIN + list(args))


def failing_select_all(self):
    raise StoreError("select_all failed")


class TestCli:

    def test_version(self, capsys):
        main(["--version"])
        assert capsys.readouterr().out.strip() == __version__

    def test_add_then_list(self, cli_env, capsys):
        run("add", "--job-number", "J1", "--client-name", "Acme", "--amount", "99.5", "--closed")
        assert "Job added successfully!" in capsys.readouterr().out

        run("list")
        out = capsys.readouterr().out
        assert "Found 1 jobs" in out
        assert "Job Number: J1" in out
        assert "Amount: 99.50" in out
        assert "Closed: Yes" in out

    def test_list_empty(self, cli_env, capsys):
        run("list")
        assert "No jobs in store." in capsys.readouterr().out

    def test_bad_field_value_exits_2(self, cli_env, capsys):
        with pytest.raises(SystemExit) as excinfo:
            run("add", "--job-number", "J1", "--client-name", "Acme", "--date-invoiced", "yesterday")
        assert excinfo.value.code == 2
        assert "dateInvoiced" in capsys.readouterr().out

    def test_blank_required_field_exits_2(self, cli_env, capsys):
        with pytest.raises(SystemExit) as excinfo:
            run("add", "--job-number", "J1", "--client-name", "  ")
        assert excinfo.value.code == 2
        assert "clientName" in capsys.readouterr().out

    def test_wrong_password(self, cli_env):
        with pytest.raises(SystemExit) as excinfo:
            main(["--username", "clerk", "--password", "guess", "list"])
        assert excinfo.value.code == "Invalid username or password"

    def test_password_prompt(self, cli_env, monkeypatch, capsys):
        monkeypatch.setattr("closedjobs.app.getpass.getpass", lambda prompt: "s3cret")
        main(["--username", "clerk", "list"])
        assert "No jobs in store." in capsys.readouterr().out

    def test_edit(self, cli_env, capsys):
        run("add", "--job-number", "J1", "--client-name", "Acme")
        run("edit", "--id", "1", "--client-name", "Acme Ltd", "--invoice-number", "INV-1")
        assert "Job updated successfully!" in capsys.readouterr().out

        run("list")
        out = capsys.readouterr().out
        assert "Client: Acme Ltd" in out
        assert "Job Number: J1" in out
        assert "Invoice Number: INV-1" in out

    def test_edit_unknown_id(self, cli_env, capsys):
        with pytest.raises(SystemExit) as excinfo:
            run("edit", "--id", "42", "--client-name", "x")
        assert excinfo.value.code == 1
        assert "Job not found: 42" in capsys.readouterr().out

    def test_delete(self, cli_env, capsys):
        run("add", "--job-number", "J1", "--client-name", "Acme")
        run("add", "--job-number", "J2", "--client-name", "Beta")
        run("delete", "--id", "1")
        assert "Job deleted successfully!" in capsys.readouterr().out

        run("list")
        out = capsys.readouterr().out
        assert "Job Number: J2" in out
        assert "Job Number: J1" not in out

    def test_delete_all(self, cli_env, capsys, monkeypatch):
        monkeypatch.setenv("CLOSEDJOBS_BATCH_SIZE", "2")
        for n in range(5):
            run("add", "--job-number", f"J{n}", "--client-name", "Acme")

        run("delete-all", "--yes")
        assert "All jobs deleted successfully!" in capsys.readouterr().out

        run("list")
        assert "No jobs in store." in capsys.readouterr().out

    def test_add_and_delete_all_load_list_first(self, cli_env, capsys, monkeypatch):
        run("add", "--job-number", "J1", "--client-name", "Acme")
        capsys.readouterr()
        monkeypatch.setattr(SqlRecordStore, "select_all", failing_select_all)

        with pytest.raises(SystemExit) as excinfo:
            run("add", "--job-number", "J1", "--client-name", "Acme")
        assert excinfo.value.code == 1
        assert "Error fetching jobs. Please try again." in capsys.readouterr().out

        with pytest.raises(SystemExit) as excinfo:
            run("delete-all", "--yes")
        assert excinfo.value.code == 1
        assert "Error fetching jobs. Please try again." in capsys.readouterr().out

        store = SqlRecordStore(cli_env / "jobs.db")
        assert store.select_count() == 1
        store.close()

    def test_delete_all_declined(self, cli_env, capsys, monkeypatch):
        run("add", "--job-number", "J1", "--client-name", "Acme")
        monkeypatch.setattr("builtins.input", lambda prompt: "n")

        run("delete-all")
        assert "Aborted." in capsys.readouterr().out

        run("list")
        assert "Job Number: J1" in capsys.readouterr().out

    def test_print_with_csv(self, cli_env, capsys):
        run("add", "--job-number", "J1", "--client-name", "Acme", "--date-invoiced", "2025-03-14")
        capsys.readouterr()

        run("print", "--csv", "export/jobs.csv")
        out = capsys.readouterr().out
        assert out.startswith("Closed Jobs")
        assert "2025-03-14" in out
        assert "Wrote 1 jobs to export/jobs.csv" in out

        with (cli_env / "export" / "jobs.csv").open(newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows[1][:4] == ["1", "J1", "Acme", "2025-03-14"]

    def test_supabase_without_url_exits(self, cli_env, monkeypatch):
        monkeypatch.setenv("CLOSEDJOBS_BACKEND", "supabase")
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.setenv("SUPABASE_KEY", "k")

        with pytest.raises(SystemExit) as excinfo:
            run("list")
        assert "SUPABASE_URL" in str(excinfo.value.code)
