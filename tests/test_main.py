import sys
import os
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from main import main


class TestMain:
    def test_usage(self, capsys):
        assert main([]) == 1
        assert "Usage" in capsys.readouterr().err

    def test_outputs_accounts(self, tmp_path, capsys, monkeypatch):
        monkeypatch.setenv("PAYMENTS_NUM_WORKERS", "2")
        csv_file = tmp_path / "input.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 2, 2, 2.0",
            "deposit, 1, 1, 1.0",
            "deposit, 1, 3, 2.0",
            "withdrawal, 1, 4, 1.5",
            "withdrawal, 2, 5, 3.0",
            "withdrawal, 9, 6, 3.0",
        ]))

        assert main([str(csv_file)]) == 0

        assert capsys.readouterr().out == (
            "client,available,held,total,locked\n"
            "1,1.5000,0.0000,1.5000,false\n"
            "2,2.0000,0.0000,2.0000,false\n"
        )

    def test_locked_account_output(self, tmp_path, capsys):
        csv_file = tmp_path / "input.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 1, 1, 10",
            "withdrawal, 1, 2, 10",
            "dispute, 1, 1,",
            "chargeback, 1, 1,",
        ]))

        assert main([str(csv_file)]) == 0

        assert capsys.readouterr().out.splitlines()[1] == "1,-10.0000,0.0000,-10.0000,true"

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.csv")]) == 1
        assert capsys.readouterr().out == ""

    def test_sub_precision_amounts_keep_total_consistent(self, tmp_path, capsys):
        csv_file = tmp_path / "input.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 1, 1, 0.00005",
            "deposit, 1, 2, 0.00005",
            "dispute, 1, 2,",
        ]))

        assert main([str(csv_file)]) == 0

        _, available, held, total, _ = capsys.readouterr().out.splitlines()[1].split(",")
        assert Decimal(available) + Decimal(held) == Decimal(total)

    def test_oversized_amount_row_skipped(self, tmp_path, capsys):
        csv_file = tmp_path / "input.csv"
        csv_file.write_text('\n'.join([
            "type, client, tx, amount",
            "deposit, 1, 1, 5.0",
            "deposit, 2, 2, 123456789012345678901234567",
            "deposit, 2, 3, 1.0",
        ]))

        assert main([str(csv_file)]) == 0

        assert capsys.readouterr().out == (
            "client,available,held,total,locked\n"
            "1,5.0000,0.0000,5.0000,false\n"
            "2,1.0000,0.0000,1.0000,false\n"
        )

    def test_invalid_configuration(self, tmp_path, capsys, monkeypatch):
        csv_file = tmp_path / "input.csv"
        csv_file.write_text("type, client, tx, amount\ndeposit, 1, 1, 1.0")
        monkeypatch.setenv("PAYMENTS_NUM_WORKERS", "many")

        assert main([str(csv_file)]) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Invalid PAYMENTS_* configuration" in captured.err
