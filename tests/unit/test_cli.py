"""Tests for the command line interface."""
import json
import signal
import socket
from unittest.mock import Mock

from typer.testing import CliRunner

from swarmpy import SwarmClient
from swarmpy.cli import main as cli_main
from swarmpy.cli.main import app, format_size, row_style, detach_on_interrupt, restore_interrupt
from swarmpy.core.exceptions import RemoteError
from swarmpy.core.upload import SessionState
from swarmpy.core.upload.models import TransferStatus


runner = CliRunner()


def closed_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


def use_transport(monkeypatch, transport, session_config):
    """Make every command talk to transport instead of a Bee node."""
    def client(self):
        return SwarmClient(
            self.state_dir, api_client=transport, session_config=session_config, batch_id='ab' * 32
        )

    monkeypatch.setattr(cli_main.Options, 'client', client)


class TestFormatSize:
    """Tests for format_size."""

    def test_units(self):
        """Test unit selection."""
        assert format_size(0) == '0 B'
        assert format_size(512) == '512.00 B'
        assert format_size(1536) == '1.50 KB'
        assert format_size(5 * 1024 * 1024) == '5.00 MB'
        assert format_size(3 * 1024 ** 4) == '3.00 TB'


class TestRowStyle:
    """Tests for transfer list colouring."""

    def test_phases(self):
        """Test one colour per propagation phase."""
        assert row_style(TransferStatus(uid=1)) == 'bright_black'
        assert row_style(TransferStatus(uid=1, split=2, synced=2)) == 'green'
        assert row_style(TransferStatus(uid=1, split=2, sent=1)) == 'cyan'
        assert row_style(TransferStatus(uid=1, split=2, seen=1)) == 'yellow'
        assert row_style(TransferStatus(uid=1, split=2)) == ''


class TestBatchCommand:
    """Tests for the batch command."""

    def test_set_and_show(self, state_dir):
        """Test saving then showing the batch id."""
        result = runner.invoke(app, ['--state-dir', str(state_dir), 'batch', 'f00d' * 16])

        assert result.exit_code == 0
        assert json.loads((state_dir / 'config.json').read_text()) == {'batchId': 'f00d' * 16}

        result = runner.invoke(app, ['--state-dir', str(state_dir), 'batch'])

        assert result.exit_code == 0
        assert 'f00d' in result.output

    def test_not_set(self, state_dir):
        """Test the hint when no batch id is configured."""
        result = runner.invoke(app, ['--state-dir', str(state_dir), 'batch'])

        assert result.exit_code == 0
        assert 'NOT SET' in result.output


class TestUploadCommand:
    """Tests for the upload command."""

    def test_requires_batch_id(self, state_dir, tmp_path):
        """Test upload refuses to start without a batch id."""
        path = tmp_path / 'a.txt'
        path.write_text('a')

        result = runner.invoke(app, ['--state-dir', str(state_dir), 'upload', str(path), '--yes'])

        assert result.exit_code == 1
        assert 'Batch ID not set' in result.output

    def test_empty_directory(self, state_dir, tmp_path):
        """Test an empty directory is rejected before upload."""
        empty = tmp_path / 'empty'
        empty.mkdir()

        result = runner.invoke(
            app, ['--state-dir', str(state_dir), 'upload', str(empty), '--yes'],
            env={'SWARM_BATCH_ID': 'ab' * 32}
        )

        assert result.exit_code == 1
        assert 'empty' in result.output

    def test_background_failure(self, state_dir, tmp_path, transport, session_config, monkeypatch):
        """Test a payload failure after detach is reported with exit code 1."""
        path = tmp_path / 'a.txt'
        path.write_text('a')
        transport.payload_error = RemoteError(500, 'boom')
        use_transport(monkeypatch, transport, session_config)

        result = runner.invoke(app, ['--state-dir', str(state_dir), 'upload', str(path), '--yes', '--background'])

        assert result.exit_code == 1
        assert 'running in background' in result.output
        assert 'Upload failed' in result.output

    def test_background_success(self, state_dir, tmp_path, transport, session_config, monkeypatch):
        """Test a detached upload prints its reference once it lands."""
        path = tmp_path / 'a.txt'
        path.write_text('a')
        use_transport(monkeypatch, transport, session_config)

        result = runner.invoke(app, ['--state-dir', str(state_dir), 'upload', str(path), '--yes', '--background'])

        assert result.exit_code == 0
        assert transport.REFERENCE in result.output


class TestInterruptHandler:
    """Tests for Ctrl-C handling during uploads."""

    def test_installed_for_detach(self):
        """Test SIGINT is routed to session.detach."""
        loop = Mock()
        session = Mock()

        assert detach_on_interrupt(loop, session)
        loop.add_signal_handler.assert_called_once_with(signal.SIGINT, session.detach)

    def test_unsupported_loop(self):
        """Test loops without signal support are tolerated."""
        loop = Mock()
        loop.add_signal_handler.side_effect = NotImplementedError
        loop.remove_signal_handler.side_effect = NotImplementedError

        assert not detach_on_interrupt(loop, Mock())
        restore_interrupt(loop)

    def test_not_installed_before_transfer(self, state_dir, tmp_path, transport, session_config, monkeypatch):
        """Test Ctrl-C keeps its default meaning until the tag exists."""
        path = tmp_path / 'a.txt'
        path.write_text('a')
        use_transport(monkeypatch, transport, session_config)
        seen = []

        def record(loop, session):
            seen.append(session.state)
            return True

        monkeypatch.setattr(cli_main, 'detach_on_interrupt', record)

        result = runner.invoke(app, ['--state-dir', str(state_dir), 'upload', str(path), '--yes'])

        assert result.exit_code == 0
        assert seen == [SessionState.TRANSFERRING]


class TestLsCommand:
    """Tests for the ls command."""

    def test_unreachable(self, state_dir):
        """Test a clear message when the node is down."""
        result = runner.invoke(
            app, ['--state-dir', str(state_dir), '--gateway', f"http://127.0.0.1:{closed_port()}", 'ls']
        )

        assert result.exit_code == 1
        assert 'unreachable' in result.output
