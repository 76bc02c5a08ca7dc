"""Tests for CLI commands."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from docanswer.cli import _ensure_db_parent, _setup_logging, app
from docanswer.errors import LLMUnavailableError
from docanswer.index.storage import SQLiteDocumentStore
from docanswer.web.app import _resolve_db_path


runner = CliRunner()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Database with two stored documents."""
    path = tmp_path / "cli.db"
    store = SQLiteDocumentStore(path)
    store.add_document(
        {
            "title": "料金プラン",
            "type": "manual",
            "sections": {"pricing": ["月額3万円"]},
            "user_id": "u1",
        }
    )
    store.add_document(
        {"title": "就業規則", "type": "policy", "sections": {"rules": "9時始業"}, "user_id": "u2"}
    )
    store.close()
    return path


class TestSetupLogging:
    """Tests for _setup_logging helper."""

    def test_setup_logging_verbose(self) -> None:
        """Verbose mode sets DEBUG level."""
        with patch("docanswer.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=True)
            assert mock_config.call_args[1]["level"] == logging.DEBUG

    def test_setup_logging_normal(self) -> None:
        """Normal mode sets INFO level."""
        with patch("docanswer.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=False)
            assert mock_config.call_args[1]["level"] == logging.INFO


def test_ensure_db_parent_creates_directory(tmp_path: Path) -> None:
    """Creates parent directory if it doesn't exist."""
    db = tmp_path / "subdir" / "test.db"
    _ensure_db_parent(db)
    assert db.parent.exists()


class TestAddCommand:
    """Tests for the add command."""

    def test_add_records(self, tmp_path: Path) -> None:
        """Stores each record in the JSON file."""
        source = tmp_path / "docs.json"
        source.write_text(
            json.dumps([{"title": "議事録"}, {"title": "契約書", "type": "contract"}], ensure_ascii=False),
            encoding="utf-8",
        )
        db = tmp_path / "out" / "docs.db"

        result = runner.invoke(app, ["add", str(source), "--db", str(db), "--company", "acme"])

        assert result.exit_code == 0
        store = SQLiteDocumentStore(db)
        try:
            records = store.list_documents(company="acme")
        finally:
            store.close()
        assert sorted(r["title"] for r in records) == ["契約書", "議事録"]
        assert all(r["user_id"] == "import" for r in records)

    def test_add_skips_invalid_record(self, tmp_path: Path) -> None:
        """Reports records without a title."""
        source = tmp_path / "docs.json"
        source.write_text(json.dumps([{"description": "no title"}]), encoding="utf-8")

        result = runner.invoke(app, ["add", str(source), "--db", str(tmp_path / "d.db")])

        assert result.exit_code == 0
        assert "Skipped record" in result.output

    def test_add_missing_file(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["add", str(tmp_path / "none.json"), "--db", str(tmp_path / "d.db")])
        assert result.exit_code != 0


class TestImportCommand:
    """Tests for the import command."""

    def test_import_no_files(self, tmp_path: Path) -> None:
        """Shows warning when nothing is importable."""
        empty_dir = tmp_path / "empty"
        empty_dir.mkdir()

        result = runner.invoke(app, ["import", str(empty_dir), "--db", str(tmp_path / "d.db")])

        assert result.exit_code == 0
        assert "No importable files found" in result.output

    def test_import_folder(self, tmp_path: Path) -> None:
        """Imports text files and reports counts."""
        folder = tmp_path / "docs"
        folder.mkdir()
        (folder / "rules.md").write_text("規則\n遅刻は報告する", encoding="utf-8")

        result = runner.invoke(
            app, ["import", str(folder), "--db", str(tmp_path / "d.db"), "--type", "policy"]
        )

        assert result.exit_code == 0
        assert "Inserted: 1" in result.output

    def test_import_unknown_type(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["import", str(tmp_path), "--type", "memo"])
        assert result.exit_code != 0


class TestSearchCommand:
    """Tests for the search command."""

    def test_search_answer(self, db_path: Path) -> None:
        """Prints the answer and the ranked documents."""
        result = runner.invoke(app, ["search", "料金について教えて", "--db", str(db_path)])

        assert result.exit_code == 0
        assert "料金プランについて" in result.output
        assert "月額3万円" in result.output

    def test_search_no_match(self, db_path: Path) -> None:
        result = runner.invoke(app, ["search", "採用", "--db", str(db_path)])
        assert result.exit_code == 0
        assert "該当する情報が見つかりませんでした。" in result.output

    def test_search_type_filter(self, db_path: Path) -> None:
        """Restricts the corpus to the given type."""
        result = runner.invoke(app, ["search", "料金", "--type", "policy", "--db", str(db_path)])
        assert "該当する情報が見つかりませんでした。" in result.output

    def test_search_missing_database(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["search", "料金", "--db", str(tmp_path / "none.db")])
        assert result.exit_code != 0

    def test_search_empty_query(self, db_path: Path) -> None:
        result = runner.invoke(app, ["search", "  ", "--db", str(db_path)])
        assert result.exit_code != 0


class TestListCommand:
    """Tests for the list command."""

    def test_list(self, db_path: Path) -> None:
        result = runner.invoke(app, ["list", "--db", str(db_path)])
        assert result.exit_code == 0
        assert "料金プラン" in result.output
        assert "就業規則" in result.output

    def test_list_by_user(self, db_path: Path) -> None:
        result = runner.invoke(app, ["list", "--db", str(db_path), "--user", "u2"])
        assert "就業規則" in result.output
        assert "料金プラン" not in result.output

    def test_list_missing_database(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["list", "--db", str(tmp_path / "none.db")])
        assert result.exit_code == 0
        assert "Database not found" in result.output


class TestDeleteCommand:
    """Tests for the delete command."""

    def test_delete(self, db_path: Path) -> None:
        result = runner.invoke(app, ["delete", "1", "--db", str(db_path)])
        assert result.exit_code == 0
        assert "Deleted document 1." in result.output

    def test_delete_missing(self, db_path: Path) -> None:
        result = runner.invoke(app, ["delete", "999", "--db", str(db_path)])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestPruneCommand:
    """Tests for the prune command."""

    def test_prune(self, tmp_path: Path) -> None:
        """Removes documents whose files are gone."""
        db = tmp_path / "p.db"
        store = SQLiteDocumentStore(db)
        store.upsert_source({"title": "gone", "user_id": "u1"}, tmp_path / "gone.txt", "h")
        store.close()

        result = runner.invoke(app, ["prune", "--db", str(db)])

        assert result.exit_code == 0
        assert "Removed 1 orphaned documents." in result.output


class TestSummarizeCommand:
    """Tests for the summarize command."""

    @patch("docanswer.cli.Summarizer")
    def test_summarize(self, mock_summarizer_class: MagicMock, db_path: Path) -> None:
        """Prints the generated summary."""
        mock_summarizer_class.return_value.summarize.return_value = "経営層向けの要約"

        result = runner.invoke(app, ["summarize", "2", "--db", str(db_path), "--role", "backoffice"])

        assert result.exit_code == 0
        assert "経営層向けの要約" in result.output
        content, role, document_type = mock_summarizer_class.return_value.summarize.call_args.args
        assert content.startswith("就業規則")
        assert role.value == "backoffice"
        assert document_type == "policy"

    @patch("docanswer.cli.Summarizer")
    def test_summarize_unavailable(self, mock_summarizer_class: MagicMock, db_path: Path) -> None:
        mock_summarizer_class.return_value.summarize.side_effect = LLMUnavailableError(
            "OPENAI_API_KEY is not set"
        )
        result = runner.invoke(app, ["summarize", "1", "--db", str(db_path)])
        assert result.exit_code == 1
        assert "OPENAI_API_KEY is not set" in result.output

    def test_summarize_missing_document(self, db_path: Path) -> None:
        result = runner.invoke(app, ["summarize", "999", "--db", str(db_path)])
        assert result.exit_code == 1


class TestClassifyCommand:
    """Tests for the classify command."""

    @patch("docanswer.cli.MeetingNoteClassifier")
    def test_classify(self, mock_classifier_class: MagicMock, tmp_path: Path) -> None:
        """Prints the category of the notes."""
        notes = tmp_path / "週次定例.md"
        notes.write_text("採用面接の日程を決めた", encoding="utf-8")
        mock_classifier_class.return_value.classify.return_value = "人事・採用"

        result = runner.invoke(app, ["classify", str(notes)])

        assert result.exit_code == 0
        assert "人事・採用" in result.output
        mock_classifier_class.return_value.classify.assert_called_once_with(
            "週次定例", "採用面接の日程を決めた"
        )

    @patch("docanswer.cli.MeetingNoteClassifier")
    def test_classify_with_title(self, mock_classifier_class: MagicMock, tmp_path: Path) -> None:
        notes = tmp_path / "notes.txt"
        notes.write_text("見積もりを提示した", encoding="utf-8")
        mock_classifier_class.return_value.classify.return_value = "営業・商談"

        result = runner.invoke(app, ["classify", str(notes), "--title", "A社訪問"])

        assert result.exit_code == 0
        assert mock_classifier_class.return_value.classify.call_args.args[0] == "A社訪問"

    @patch("docanswer.cli.MeetingNoteClassifier")
    def test_classify_unavailable(self, mock_classifier_class: MagicMock, tmp_path: Path) -> None:
        notes = tmp_path / "notes.txt"
        notes.write_text("内容", encoding="utf-8")
        mock_classifier_class.return_value.classify.side_effect = LLMUnavailableError(
            "OPENAI_API_KEY is not set"
        )

        result = runner.invoke(app, ["classify", str(notes)])

        assert result.exit_code == 1
        assert "OPENAI_API_KEY is not set" in result.output

    def test_classify_empty_file(self, tmp_path: Path) -> None:
        notes = tmp_path / "notes.txt"
        notes.write_text("  \n", encoding="utf-8")
        result = runner.invoke(app, ["classify", str(notes)])
        assert result.exit_code != 0


class TestWebCommand:
    """Tests for the web command."""

    def test_web_uses_given_database(
        self, db_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Starts the server with the --db database as the request default."""
        monkeypatch.setenv("DOCANSWER_DB", "unused.db")
        mock_uvicorn = MagicMock()

        with patch.dict(sys.modules, {"uvicorn": mock_uvicorn}):
            result = runner.invoke(app, ["web", "--db", str(db_path), "--port", "9000"])

        assert result.exit_code == 0
        assert os.environ["DOCANSWER_DB"] == str(db_path)
        assert _resolve_db_path(None) == db_path
        assert mock_uvicorn.run.call_args.kwargs["port"] == 9000
