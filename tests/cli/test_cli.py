# tests/cli/test_cli.py
"""Tests for the crystal-transfer CLI.

Stores are SQLite files under tmp_path, selected through a settings file
with driver: sqlite.
"""

from pathlib import Path

import pytest
import yaml
from click.testing import Result
from typer.testing import CliRunner

from crystal_transfer import __version__
from crystal_transfer.cli import app
from crystal_transfer.contracts.enums import StorageMethod
from crystal_transfer.core.hashes import encode_hash
from crystal_transfer.core.store import CursorResolver, TraceStoreDB
from tests.conftest import block_hash, block_rows, insert_rows

runner = CliRunner()


@pytest.fixture
def stores(tmp_path: Path) -> tuple[Path, Path, Path]:
    """Source with blocks 0..20, empty destination, and a settings file pointing at both."""
    source_path = tmp_path / "source.db"
    destination_path = tmp_path / "destination.db"

    with TraceStoreDB(f"sqlite:///{source_path}", create_tables=True) as db:
        insert_rows(db, [row for n in range(21) for row in block_rows(n, count=2)])
    TraceStoreDB(f"sqlite:///{destination_path}", create_tables=True).close()

    settings_path = tmp_path / "settings.yaml"
    settings_path.write_text(
        yaml.safe_dump(
            {
                "source": {"driver": "sqlite", "database": str(source_path)},
                "destination": {"driver": "sqlite", "database": str(destination_path)},
                "chunk_size": 10,
            }
        )
    )
    return settings_path, source_path, destination_path


def invoke(*args: str) -> Result:
    return runner.invoke(app, ["--no-dotenv", *args])


class TestCLIBasics:
    def test_version_flag(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("run", "status", "show", "exists", "methods"):
            assert command in result.stdout

    def test_methods(self) -> None:
        result = invoke("methods")

        assert result.exit_code == 0
        assert result.stdout.split() == [method.value for method in StorageMethod]


class TestSettingsErrors:
    def test_missing_settings_file(self, tmp_path: Path) -> None:
        result = invoke("status", "--settings", str(tmp_path / "nope.yaml"))

        assert result.exit_code == 1
        assert "Settings file not found" in result.output

    def test_invalid_settings(self, tmp_path: Path) -> None:
        settings_path = tmp_path / "settings.yaml"
        settings_path.write_text("chunk_size: 0\n")

        result = invoke("status", "--settings", str(settings_path))

        assert result.exit_code == 1
        assert "chunk_size" in result.output

    def test_zero_chunk_size_option_rejected(self, stores: tuple[Path, Path, Path]) -> None:
        settings_path, _, _ = stores

        result = invoke("run", "--settings", str(settings_path), "--chunk-size", "0")

        assert result.exit_code != 0


class TestRun:
    def test_run_copies_blocks(self, stores: tuple[Path, Path, Path]) -> None:
        settings_path, _, destination_path = stores

        result = invoke("run", "--settings", str(settings_path))

        assert result.exit_code == 0, result.output
        assert "Blocks 0..20: 2 chunks" in result.stdout
        assert "Written: 20" in result.stdout
        # Chunks stop once the cursor reaches the target block
        with TraceStoreDB(f"sqlite:///{destination_path}") as db:
            assert CursorResolver(db).max_block_number() == 19

    def test_second_run_resumes(self, stores: tuple[Path, Path, Path]) -> None:
        settings_path, _, _ = stores
        invoke("run", "--settings", str(settings_path))

        result = invoke("run", "--settings", str(settings_path))

        assert result.exit_code == 0, result.output
        assert "Blocks 20..20: 0 chunks" in result.stdout

    def test_dry_run_leaves_destination_empty(self, stores: tuple[Path, Path, Path]) -> None:
        settings_path, _, _ = stores

        result = invoke("run", "--settings", str(settings_path), "--dry-run", "--chunk-size", "5")

        assert result.exit_code == 0, result.output
        assert "Blocks 0..20: 4 chunks" in result.stdout
        assert "Written: 0" in result.stdout

        status = invoke("status", "--settings", str(settings_path))
        assert "Destination next block: 0" in status.stdout

    def test_empty_source_fails(self, tmp_path: Path) -> None:
        source_path = tmp_path / "empty.db"
        TraceStoreDB(f"sqlite:///{source_path}", create_tables=True).close()
        settings_path = tmp_path / "settings.yaml"
        settings_path.write_text(
            yaml.safe_dump(
                {
                    "source": {"driver": "sqlite", "database": str(source_path)},
                    "destination": {"driver": "sqlite", "database": str(tmp_path / "dst.db")},
                }
            )
        )

        result = invoke("run", "--settings", str(settings_path))

        assert result.exit_code == 1
        assert "nothing to transfer" in result.output


class TestInspectionCommands:
    def test_status(self, stores: tuple[Path, Path, Path]) -> None:
        settings_path, _, _ = stores

        result = invoke("status", "--settings", str(settings_path))

        assert result.exit_code == 0, result.output
        assert "Source target block: 20" in result.stdout
        assert "Destination next block: 0" in result.stdout
        assert "Remaining: 20" in result.stdout

    def test_status_fresh_destination(self, stores: tuple[Path, Path, Path], tmp_path: Path) -> None:
        _, source_path, _ = stores
        settings_path = tmp_path / "fresh.yaml"
        settings_path.write_text(
            yaml.safe_dump(
                {
                    "source": {"driver": "sqlite", "database": str(source_path)},
                    "destination": {"driver": "sqlite", "database": str(tmp_path / "fresh.db")},
                }
            )
        )

        result = invoke("status", "--settings", str(settings_path))

        assert result.exit_code == 0, result.output
        assert "Destination next block: 0 (not initialized" in result.stdout
        assert "Remaining: 20" in result.stdout

    def test_show(self, stores: tuple[Path, Path, Path]) -> None:
        settings_path, _, _ = stores

        result = invoke("show", "7", "--settings", str(settings_path))

        assert result.exit_code == 0, result.output
        assert encode_hash(block_hash(7)) in result.stdout
        assert '"method": "Put"' in result.stdout

    def test_exists_source(self, stores: tuple[Path, Path, Path]) -> None:
        settings_path, _, _ = stores

        present = invoke("exists", block_hash(3).hex(), "--source", "--settings", str(settings_path))
        absent = invoke("exists", block_hash(3).hex(), "--settings", str(settings_path))

        assert present.exit_code == 0
        assert present.stdout.strip().endswith("present")
        assert absent.exit_code == 0
        assert absent.stdout.strip().endswith("absent")

    def test_exists_rejects_malformed_hex(self, stores: tuple[Path, Path, Path]) -> None:
        settings_path, _, _ = stores

        result = invoke("exists", "deadbeeg", "--settings", str(settings_path))

        assert result.exit_code == 1
        assert "non-hex" in result.output

    def test_exists_rejects_prefixed_hash(self, stores: tuple[Path, Path, Path]) -> None:
        settings_path, _, _ = stores

        result = invoke("exists", encode_hash(block_hash(3)), "--source", "--settings", str(settings_path))

        assert result.exit_code == 1
        assert "non-hex" in result.output
