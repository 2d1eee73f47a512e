# tests/core/test_cli.py
from unittest.mock import MagicMock, patch

import pytest

from calamine import cli

ARTICLE = (
    '<html><body><nav><a href="/">Home</a></nav>'
    '<article><h1>Title</h1><p>Body text.</p></article></body></html>'
)


@pytest.fixture
def article_file(tmp_path):
    """Een fixture die een HTML-bestand met een article aanmaakt."""
    path = tmp_path / "page.html"
    path.write_text(ARTICLE, encoding="utf-8")
    return path


def test_extract_to_stdout(article_file, capsys):
    """Test of extract de content naar stdout schrijft."""
    exit_code = cli.handle_extract([str(article_file), "--content-only"])
    out = capsys.readouterr().out
    assert exit_code == 0
    assert out == "<article><h1>Title</h1><p>Body text.</p></article>\n"


def test_extract_from_stdin(capsys):
    exit_code = cli.handle_extract(["-"], _stdin=ARTICLE)
    out = capsys.readouterr().out
    assert exit_code == 0
    assert out.startswith("<html><body><article>")


def test_extract_to_file(article_file, tmp_path, capsys):
    target = tmp_path / "out.html"
    exit_code = cli.handle_extract([str(article_file), "--annotate", "-o", str(target)])

    assert exit_code == 0
    assert "✅" in capsys.readouterr().out
    assert 'data-calamine-root="signature"' in target.read_text(encoding="utf-8")


def test_extract_custom_signature(article_file, capsys):
    """Met een eigen signature-lijst wordt de standaardlijst vervangen."""
    exit_code = cli.handle_extract([str(article_file), "--signature", "nav", "--content-only"])
    out = capsys.readouterr().out
    assert exit_code == 0
    assert out == '<nav><a href="/">Home</a></nav>\n'


def test_extract_missing_file(tmp_path, capsys):
    exit_code = cli.handle_extract([str(tmp_path / "missing.html")])
    assert exit_code == 1
    assert "❌" in capsys.readouterr().out


def test_extract_invalid_settings(article_file, capsys):
    exit_code = cli.handle_extract([str(article_file), "--row-scan-limit", "-5"])
    assert exit_code == 1
    assert "Invalid extraction settings" in capsys.readouterr().out


def test_extract_bad_arguments():
    assert cli.handle_extract([]) == 1


@patch("calamine.cli.ExtractionController")
def test_batch_success(mock_controller_class, tmp_path, capsys):
    """Test of batch de controller aanroept en een samenvatting print."""
    mock_controller = MagicMock()
    mock_controller.extract_directory.return_value = {
        "documents_total": 2, "documents_success": 2, "documents_failed": 0,
        "failed": [], "duration_s": 0.1, "documents_per_s": 20.0,
    }
    mock_controller_class.return_value = mock_controller

    exit_code = cli.handle_batch([str(tmp_path), str(tmp_path / "out"), "--workers", "3", "--no-progress"])

    assert exit_code == 0
    assert "✅ Extracted 2/2 documents" in capsys.readouterr().out
    kwargs = mock_controller.extract_directory.call_args.kwargs
    assert kwargs["workers"] == 3
    assert kwargs["show_progress"] is False


@patch("calamine.cli.ExtractionController")
def test_batch_with_failures(mock_controller_class, tmp_path, capsys):
    mock_controller_class.return_value.extract_directory.return_value = {
        "documents_total": 2, "documents_success": 1, "documents_failed": 1,
        "failed": ["broken.html"], "duration_s": 0.1, "documents_per_s": 20.0,
    }
    exit_code = cli.handle_batch([str(tmp_path), str(tmp_path / "out")])
    assert exit_code == 2
    assert "broken.html" in capsys.readouterr().out


def test_batch_rejects_missing_directory(tmp_path, capsys):
    exit_code = cli.handle_batch([str(tmp_path / "nope"), str(tmp_path / "out")])
    assert exit_code == 1
    assert "is not a directory" in capsys.readouterr().out


def test_batch_rejects_zero_workers(tmp_path, capsys):
    assert cli.handle_batch([str(tmp_path), str(tmp_path / "out"), "--workers", "0"]) == 1


@patch("calamine.cli.configure_from_settings")
def test_main_dispatch(mock_configure, capsys):
    """Test de dispatch van subcommando's en het help-scherm."""
    assert cli.main(["help"]) == 0
    assert "calamine extract" in capsys.readouterr().out

    assert cli.main(["bogus"]) == 1
    assert "Unknown command: bogus" in capsys.readouterr().out

    assert cli.main(["--log-level", "DEBUG", "help"]) == 0
    assert mock_configure.call_args.kwargs["level_override"] == "DEBUG"
