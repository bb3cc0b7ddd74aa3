"""Tests for the command line interface"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from solana_lens.cli import build_parser, main, summarize_activity
from solana_lens.models.ledger import AccountActivity, ProgramInvocation
from solana_lens.services.solana_client import SourceUnavailableError


@pytest.fixture
def rpc():
    """Patch the CLI's SolanaClient and yield the client it opens"""
    client = MagicMock()
    with patch("solana_lens.cli.SolanaClient") as client_cls:
        client_cls.return_value.__aenter__.return_value = client
        yield client


class TestParser:
    """Test argument parsing"""

    def test_defaults(self):
        """Test snapshot defaults"""
        args = build_parser().parse_args(["snapshot"])
        assert args.blocks == 5
        assert args.rpc is None
        assert args.json is False

    def test_analyze_options(self):
        """Test analyze takes a program and limit"""
        args = build_parser().parse_args(["analyze", "Prog1111", "-l", "10", "-r", "http://localhost:8899"])
        assert args.program_id == "Prog1111"
        assert args.limit == 10
        assert args.rpc == "http://localhost:8899"

    @pytest.mark.parametrize("argv", [
        ["snapshot", "-b", "-1"],
        ["watch", "-b", "0"],
        ["snapshot", "--blocks", "many"],
        ["analyze", "Prog1111", "-l", "0"],
    ])
    def test_non_positive_sizes_rejected(self, argv, capsys):
        """Test block windows and limits must be positive integers"""
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(argv)

        assert exc_info.value.code == 2
        err = capsys.readouterr().err
        assert "--blocks" in err or "--limit" in err

    def test_positive_size_accepted(self):
        """Test a positive window parses as an int"""
        assert build_parser().parse_args(["watch", "-b", "12"]).blocks == 12

    def test_command_required(self):
        """Test a subcommand must be given"""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


class TestSummarizeActivity:
    """Test analyze footer figures"""

    def test_summary(self):
        """Test fees, success rate and account counts"""
        activity = [
            ProgramInvocation(signature="a", program_id="P", slot=2, fee=0.000005, success=True,
                              accounts=["A", "B"], inner_instructions=3),
            ProgramInvocation(signature="b", program_id="P", slot=1, fee=0.000010, success=False,
                              accounts=["B", "C"], inner_instructions=1),
        ]
        summary = summarize_activity(activity)

        assert summary["total_fees"] == pytest.approx(0.000015)
        assert summary["success_rate"] == 50.0
        assert summary["avg_inner"] == 2.0
        assert summary["unique_accounts"] == 3

    def test_empty(self):
        """Test no activity gives zeros"""
        assert summarize_activity([])["success_rate"] == 0.0


class TestCommands:
    """Test command execution"""

    def test_account(self, rpc, capsys):
        """Test account details are printed"""
        rpc.get_account_info = AsyncMock(return_value=AccountActivity(
            address="Acct",
            lamports=2_500_000_000,
            owner="11111111111111111111111111111111",
            executable=False,
            data_size=0,
        ))

        assert main(["account", "Acct"]) == 0
        out = capsys.readouterr().out
        assert "System Program" in out
        assert "2.500000000 SOL" in out

    def test_account_not_found(self, rpc, capsys):
        """Test a missing account exits non-zero"""
        rpc.get_account_info = AsyncMock(return_value=None)

        assert main(["account", "Acct"]) == 1
        assert "Account not found." in capsys.readouterr().out

    def test_rpc_error_reported(self, rpc, capsys):
        """Test RPC failures print an error and exit non-zero"""
        rpc.get_network_stats = AsyncMock(side_effect=SourceUnavailableError("connection refused"))

        assert main(["stats"]) == 1
        assert "connection refused" in capsys.readouterr().err

    def test_analyze_without_activity(self, rpc, capsys):
        """Test analyze reports when a program has no activity"""
        rpc.get_program_activity = AsyncMock(return_value=[])

        assert main(["analyze", "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4"]) == 0
        out = capsys.readouterr().out
        assert "Jupiter v6" in out
        assert "No recent activity" in out
        rpc.get_program_activity.assert_awaited_once_with("JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4", 25)
