import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from main import main
from settings import get_settings


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    for name in ("LEDGER_WORKERS", "LEDGER_LOG_LEVEL", "LEDGER_QUEUE_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


SAMPLE = '\n'.join([
    "type, client, tx, amount",
    "deposit, 1, 1, 1.0",
    "deposit, 2, 2, 2.0",
    "deposit, 1, 3, 2.0",
    "withdrawal, 1, 4, 1.5",
    "withdrawal, 2, 5, 3.0",
])

EXPECTED = (
    "client,available,held,total,locked\n"
    "1,1.5000,0.0000,1.5000,false\n"
    "2,2.0000,0.0000,2.0000,false\n"
)


class TestMain:
    def test_prints_accounts(self, tmp_path, capsys):
        csv_file = tmp_path / "transactions.csv"
        csv_file.write_text(SAMPLE)

        assert main([str(csv_file)]) == 0
        assert capsys.readouterr().out == EXPECTED

    def test_partitioned_run_prints_same_output(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setenv("LEDGER_WORKERS", "4")
        monkeypatch.setenv("LEDGER_QUEUE_TIMEOUT", "0.01")
        csv_file = tmp_path / "transactions.csv"
        csv_file.write_text(SAMPLE)

        assert main([str(csv_file)]) == 0
        assert capsys.readouterr().out == EXPECTED

    def test_missing_file_exits_non_zero(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.csv")]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "nope.csv" in captured.err

    def test_malformed_rows_still_exit_zero(self, tmp_path, capsys):
        csv_file = tmp_path / "transactions.csv"
        csv_file.write_text("type,client,tx,amount\ndeposit,1,1,abc\ndeposit,1,2,3\n")

        assert main([str(csv_file)]) == 0
        assert capsys.readouterr().out == (
            "client,available,held,total,locked\n"
            "1,3.0000,0.0000,3.0000,false\n"
        )

    def test_oversized_amount_skipped(self, tmp_path, capsys):
        csv_file = tmp_path / "transactions.csv"
        csv_file.write_text(
            "type,client,tx,amount\n"
            "deposit,1,1,1000000000000000000000000\n"
            "deposit,2,2,99999999999999.9999\n"
            "deposit,2,3,99999999999999.9999\n"
        )

        assert main([str(csv_file)]) == 0
        assert capsys.readouterr().out == (
            "client,available,held,total,locked\n"
            "2,199999999999999.9998,0.0000,199999999999999.9998,false\n"
        )

    @pytest.mark.parametrize("argv", [[], ["a.csv", "b.csv"]])
    def test_usage(self, argv, capsys):
        assert main(argv) == 1
        assert "Usage" in capsys.readouterr().err

    def test_invalid_configuration(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setenv("LEDGER_WORKERS", "0")
        csv_file = tmp_path / "transactions.csv"
        csv_file.write_text(SAMPLE)

        assert main([str(csv_file)]) == 1
        assert "LEDGER_" in capsys.readouterr().err
