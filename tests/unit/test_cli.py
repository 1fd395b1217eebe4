"""
Unit tests for the Click-based CLI.
"""

import zipfile

import httpx
import pytest
import respx
from click.testing import CliRunner

from epubclean import __version__
from epubclean.cli.commands import cli


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def in_tmp(tmp_path, monkeypatch):
    """Run the command from the temporary directory so extracted/ lands there."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Strip formatting artifacts" in result.output

    def test_cli_no_command(self, runner):
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert "Commands:" in result.output

    def test_version_command(self, runner):
        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    @pytest.mark.parametrize(
        "command", ["extract", "clean", "decode-entities", "process", "pack", "fetch-cover"]
    )
    def test_commands_are_registered(self, runner, command):
        result = runner.invoke(cli, [command, "--help"])
        assert result.exit_code == 0

    def test_missing_argument(self, runner):
        result = runner.invoke(cli, ["extract"])
        assert result.exit_code != 0


class TestExtractCommand:
    """Test the extract command."""

    def test_extracts_to_extracted_dir(self, runner, in_tmp, sample_epub):
        result = runner.invoke(cli, ["extract", str(sample_epub)])

        assert result.exit_code == 0
        assert (in_tmp / "extracted" / "book" / "OEBPS" / "chapter1.xhtml").exists()

    def test_missing_file_exits_1(self, runner, in_tmp):
        result = runner.invoke(cli, ["extract", "missing.epub"])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "EPUB file not found" in result.output


class TestCleanCommand:
    """Test the clean command."""

    def test_cleans_directory(self, runner, extracted_dir):
        result = runner.invoke(cli, ["clean", str(extracted_dir)])

        assert result.exit_code == 0
        assert "Cleaned 1 file(s)" in result.output
        assert not (extracted_dir / "OEBPS" / "style.css").exists()

    def test_missing_directory_exits_1(self, runner, tmp_path):
        result = runner.invoke(cli, ["clean", str(tmp_path / "nope")])

        assert result.exit_code == 1
        assert "Directory not found" in result.output

    def test_malformed_markup_exits_1(self, runner, extracted_dir):
        (extracted_dir / "OEBPS" / "chapter1.xhtml").write_text("<html><body>")

        result = runner.invoke(cli, ["clean", str(extracted_dir)])

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestDecodeEntitiesCommand:
    """Test the decode-entities command."""

    def test_decodes_directory(self, runner, extracted_dir):
        result = runner.invoke(cli, ["decode-entities", str(extracted_dir)])

        assert result.exit_code == 0
        assert "Decoded entities in 1 file(s)" in result.output

    def test_invalid_reference_exits_1(self, runner, extracted_dir):
        (extracted_dir / "OEBPS" / "chapter1.xhtml").write_text("<p>&#x110000;</p>")

        result = runner.invoke(cli, ["decode-entities", str(extracted_dir)])

        assert result.exit_code == 1
        assert "Invalid character reference" in result.output

    def test_non_utf8_file_exits_1(self, runner, extracted_dir):
        (extracted_dir / "OEBPS" / "chapter1.xhtml").write_bytes(b"<p>caf\xe9 &#233;</p>")

        result = runner.invoke(cli, ["decode-entities", str(extracted_dir)])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "not valid UTF-8" in result.output


class TestPackCommand:
    """Test the pack command."""

    def test_packs_directory(self, runner, extracted_dir, tmp_path):
        output = tmp_path / "packed.epub"

        result = runner.invoke(cli, ["pack", str(extracted_dir), str(output)])

        assert result.exit_code == 0
        with zipfile.ZipFile(output) as epub:
            assert epub.infolist()[0].filename == "mimetype"


class TestProcessCommand:
    """Test the process command."""

    def test_process_creates_cleaned_epub(self, runner, in_tmp, sample_epub):
        result = runner.invoke(cli, ["process", str(sample_epub)])

        assert result.exit_code == 0
        assert (in_tmp / "book.cleaned.epub").exists()
        assert not (in_tmp / "extracted" / "book").exists()

    def test_keep_extracted(self, runner, in_tmp, sample_epub):
        result = runner.invoke(cli, ["process", str(sample_epub), "--keep-extracted"])

        assert result.exit_code == 0
        assert (in_tmp / "extracted" / "book").is_dir()

    def test_missing_file_exits_1(self, runner, in_tmp):
        result = runner.invoke(cli, ["process", "missing.epub"])

        assert result.exit_code == 1
        assert "Error:" in result.output

    @respx.mock
    def test_fetch_cover_not_found_still_succeeds(self, runner, in_tmp, sample_epub):
        respx.get("https://covers.openlibrary.org/b/isbn/0198534531-L.jpg").mock(
            return_value=httpx.Response(404)
        )

        result = runner.invoke(cli, ["process", str(sample_epub), "--fetch-cover"])

        assert result.exit_code == 0
        with zipfile.ZipFile(in_tmp / "book.cleaned.epub") as epub:
            assert epub.read("OEBPS/images/cover.jpg") == b"\xff\xd8\xff\xe0original-cover"

    @respx.mock
    def test_fetch_cover_transport_error_exits_1(self, runner, in_tmp, sample_epub):
        respx.get("https://covers.openlibrary.org/b/isbn/0198534531-L.jpg").mock(
            side_effect=httpx.ConnectError("offline")
        )

        result = runner.invoke(cli, ["process", str(sample_epub), "--fetch-cover"])

        assert result.exit_code == 1
        assert "offline" in result.output


class TestFetchCoverCommand:
    """Test the fetch-cover command."""

    @respx.mock
    def test_updates_cover(self, runner, extracted_dir):
        respx.get("https://covers.openlibrary.org/b/isbn/0198534531-L.jpg").mock(
            return_value=httpx.Response(200, content=b"\xff\xd8" + b"\x00" * 5000)
        )

        result = runner.invoke(cli, ["fetch-cover", str(extracted_dir)])

        assert result.exit_code == 0
        assert "Cover updated" in result.output
        assert len((extracted_dir / "OEBPS" / "images" / "cover.jpg").read_bytes()) == 5002


class TestLoggingOptions:
    """Test the global logging options."""

    def test_log_file_receives_records(self, runner, extracted_dir, tmp_path):
        log_file = tmp_path / "run.log"

        result = runner.invoke(cli, ["--log-file", str(log_file), "clean", str(extracted_dir)])

        assert result.exit_code == 0
        assert "Cleaning complete!" in log_file.read_text(encoding="utf-8")

    def test_invalid_log_level(self, runner):
        result = runner.invoke(cli, ["--log-level", "LOUD", "version"])
        assert result.exit_code != 0
