"""CLI integration tests for recette."""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from recette.cli import app
from recette.core import decode, encode
from recette.models import Document
from recette.services import BrowserPrintBackend


@pytest.fixture(autouse=True)
def in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run every CLI test from an empty directory without a settle delay."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "recette.toml").write_text("[render]\nsettle_delay = 0\n")
    return tmp_path


class TestVersionAndHelp:
    """Tests for --version and --help."""

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "recette 0.1.0" in result.output

    def test_help_lists_commands(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("new", "show", "set", "step", "preview", "print", "export", "save"):
            assert command in result.output

    def test_no_args_shows_help(self, runner: CliRunner) -> None:
        result = runner.invoke(app, [])
        assert "Usage:" in result.output


class TestInitCommand:
    """Tests for recette init."""

    def test_existing_config_kept(self, runner: CliRunner, in_tmp: Path) -> None:
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0
        assert "already exists" in result.output
        assert (in_tmp / "recette.toml").read_text() == "[render]\nsettle_delay = 0\n"

    def test_creates_config(self, runner: CliRunner, in_tmp: Path) -> None:
        (in_tmp / "recette.toml").unlink()
        result = runner.invoke(app, ["init"])
        assert result.exit_code == 0
        assert (in_tmp / "recette.toml").exists()


class TestNewCommand:
    """Tests for recette new."""

    def test_uses_export_name(self, runner: CliRunner, in_tmp: Path) -> None:
        result = runner.invoke(app, ["new", "--number", "ERP-77", "--name", "Facturation"])
        assert result.exit_code == 0
        document = decode((in_tmp / "cahier-recette-ERP-77.json").read_bytes())
        assert document.jira_number == "ERP-77"
        assert document.jira_name == "Facturation"
        assert [step.title for step in document.steps] == ["Étape 1"]

    def test_fallback_name(self, runner: CliRunner, in_tmp: Path) -> None:
        assert runner.invoke(app, ["new"]).exit_code == 0
        assert (in_tmp / "cahier-recette-export.json").exists()

    def test_refuses_overwrite(self, runner: CliRunner, document_file: Path) -> None:
        before = document_file.read_bytes()
        result = runner.invoke(app, ["new", "--out", str(document_file)])
        assert result.exit_code == 1
        assert "already exists" in result.output
        assert document_file.read_bytes() == before

    def test_force_overwrite(self, runner: CliRunner, document_file: Path) -> None:
        result = runner.invoke(app, ["new", "--out", str(document_file), "--force"])
        assert result.exit_code == 0
        assert decode(document_file.read_bytes()).jira_number == ""


class TestShowAndSql:
    """Tests for read-only commands."""

    def test_show(self, runner: CliRunner, document_file: Path) -> None:
        result = runner.invoke(app, ["show", str(document_file)])
        assert result.exit_code == 0
        assert "ERP-1234" in result.output
        assert "FPOST" in result.output
        assert "Lancer le batch" in result.output

    def test_show_json(self, runner: CliRunner, document_file: Path) -> None:
        result = runner.invoke(app, ["--json", "show", str(document_file)])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["jiraNumber"] == "ERP-1234"
        assert data["conclusion"] == "KO"

    def test_sql(self, runner: CliRunner, document_file: Path) -> None:
        result = runner.invoke(app, ["sql", str(document_file)])
        assert result.exit_code == 0
        assert "like '%1234J%';" in result.output

    def test_missing_file(self, runner: CliRunner, in_tmp: Path) -> None:
        result = runner.invoke(app, ["show", str(in_tmp / "nope.json")])
        assert result.exit_code == 1
        assert "Document not found" in result.output

    def test_malformed_file(self, runner: CliRunner, in_tmp: Path) -> None:
        path = in_tmp / "bad.json"
        path.write_text('{"jiraNumber": "ERP-1"}')
        result = runner.invoke(app, ["show", str(path)])
        assert result.exit_code == 1
        assert "steps" in result.output


class TestBrokenConfig:
    """Tests for an unreadable recette.toml."""

    def test_toml_syntax_error(self, runner: CliRunner, document_file: Path, in_tmp: Path) -> None:
        (in_tmp / "recette.toml").write_text("[render\n")
        result = runner.invoke(app, ["show", str(document_file)])
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Invalid recette.toml" in result.output

    def test_invalid_value(self, runner: CliRunner, in_tmp: Path) -> None:
        (in_tmp / "recette.toml").write_text("[render]\nsettle_delay = -1\n")
        result = runner.invoke(app, ["new"])
        assert result.exit_code == 1
        assert "Invalid recette.toml" in result.output
        assert not (in_tmp / "cahier-recette-export.json").exists()


class TestBracketedStepIds:
    """Step ids are opaque and may look like console markup."""

    @pytest.fixture
    def bracket_file(self, in_tmp: Path, sample_document: Document) -> Path:
        steps = (sample_document.steps[0].model_copy(update={"id": "[/dim]"}),)
        path = in_tmp / "brackets.json"
        path.write_bytes(encode(sample_document.model_copy(update={"steps": steps})))
        return path

    def test_step_list(self, runner: CliRunner, bracket_file: Path) -> None:
        result = runner.invoke(app, ["step", "list", str(bracket_file)])
        assert result.exit_code == 0
        assert "[/dim]" in result.output

    def test_show(self, runner: CliRunner, bracket_file: Path) -> None:
        result = runner.invoke(app, ["show", str(bracket_file)])
        assert result.exit_code == 0
        assert "[/dim]" in result.output

    def test_remove_unknown_bracketed_id(self, runner: CliRunner, bracket_file: Path) -> None:
        result = runner.invoke(app, ["step", "remove", str(bracket_file), "[bold]"])
        assert result.exit_code == 0
        assert "No step [bold]" in result.output


class TestSetCommand:
    """Tests for recette set."""

    def test_set_conclusion(self, runner: CliRunner, document_file: Path) -> None:
        result = runner.invoke(app, ["set", str(document_file), "conclusion", "OK"])
        assert result.exit_code == 0
        assert decode(document_file.read_bytes()).conclusion.value == "OK"

    def test_invalid_value_leaves_file(self, runner: CliRunner, document_file: Path) -> None:
        before = document_file.read_bytes()
        result = runner.invoke(app, ["set", str(document_file), "environment", "PROD"])
        assert result.exit_code == 1
        assert "Invalid value" in result.output
        assert document_file.read_bytes() == before

    def test_unknown_field(self, runner: CliRunner, document_file: Path) -> None:
        result = runner.invoke(app, ["set", str(document_file), "owner", "me"])
        assert result.exit_code == 1
        assert "Unknown field" in result.output


class TestImageCommand:
    """Tests for recette image."""

    def test_attach_and_clear(self, runner: CliRunner, document_file: Path, in_tmp: Path) -> None:
        image = in_tmp / "shot.png"
        image.write_bytes(b"\x89PNG")
        result = runner.invoke(app, ["image", str(document_file), str(image)])
        assert result.exit_code == 0
        attached = decode(document_file.read_bytes()).attached_image
        assert attached == "data:image/png;base64,iVBORw=="

        result = runner.invoke(app, ["image", str(document_file), "--clear"])
        assert result.exit_code == 0
        assert decode(document_file.read_bytes()).attached_image is None

    def test_requires_image_or_clear(self, runner: CliRunner, document_file: Path) -> None:
        result = runner.invoke(app, ["image", str(document_file)])
        assert result.exit_code == 1


class TestStepCommands:
    """Tests for recette step ..."""

    def test_add(self, runner: CliRunner, document_file: Path) -> None:
        result = runner.invoke(app, ["step", "add", str(document_file)])
        assert result.exit_code == 0
        document = decode(document_file.read_bytes())
        assert len(document.steps) == 3
        assert document.steps[-1].title == "Étape 3"
        assert document.step_ids()[:2] == ["s1", "s2"]

    def test_add_with_title(self, runner: CliRunner, document_file: Path) -> None:
        result = runner.invoke(app, ["step", "add", str(document_file), "--title", "Contrôle"])
        assert result.exit_code == 0
        assert decode(document_file.read_bytes()).steps[-1].title == "Contrôle"

    def test_remove(self, runner: CliRunner, document_file: Path) -> None:
        result = runner.invoke(app, ["step", "remove", str(document_file), "s1"])
        assert result.exit_code == 0
        document = decode(document_file.read_bytes())
        assert document.step_ids() == ["s2"]
        assert document.steps[0].title == "Vérifier"

    def test_remove_unknown_is_noop(self, runner: CliRunner, document_file: Path) -> None:
        before = document_file.read_bytes()
        result = runner.invoke(app, ["step", "remove", str(document_file), "zz"])
        assert result.exit_code == 0
        assert "No step zz" in result.output
        assert document_file.read_bytes() == before

    def test_title(self, runner: CliRunner, document_file: Path) -> None:
        result = runner.invoke(app, ["step", "title", str(document_file), "s2", "Contrôle"])
        assert result.exit_code == 0
        assert decode(document_file.read_bytes()).steps[1].title == "Contrôle"

    def test_title_unknown_step(self, runner: CliRunner, document_file: Path) -> None:
        result = runner.invoke(app, ["step", "title", str(document_file), "zz", "x"])
        assert result.exit_code == 1
        assert "Step not found" in result.output

    def test_list_json(self, runner: CliRunner, document_file: Path) -> None:
        result = runner.invoke(app, ["--json", "step", "list", str(document_file)])
        assert result.exit_code == 0
        assert [s["id"] for s in json.loads(result.stdout)["steps"]] == ["s1", "s2"]

    def test_edit_from_file(self, runner: CliRunner, document_file: Path, in_tmp: Path) -> None:
        markup = in_tmp / "step.html"
        markup.write_text("<h1>Titre</h1><ul><li>un</li></ul>", encoding="utf-8")
        result = runner.invoke(
            app, ["step", "edit", str(document_file), "s2", "--content-file", str(markup)]
        )
        assert result.exit_code == 0
        content = decode(document_file.read_bytes()).steps[1].content
        assert content == "<h1>Titre</h1><ul><li>un</li></ul>"

    def test_edit_in_editor(self, runner: CliRunner, document_file: Path) -> None:
        with (
            patch("recette.services.surfaces.shutil.which", return_value="/usr/bin/vi"),
            patch("recette.services.surfaces.click.edit", return_value="<p>edited</p>\n") as edit,
        ):
            result = runner.invoke(
                app, ["step", "edit", str(document_file), "s1", "--editor", "vi"]
            )
        assert result.exit_code == 0
        edit.assert_called_once_with(
            "<p><strong>Run</strong> it</p>", editor="vi", extension=".html"
        )
        assert decode(document_file.read_bytes()).steps[0].content == "<p>edited</p>"

    def test_edit_without_editor(
        self, runner: CliRunner, document_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("VISUAL", raising=False)
        monkeypatch.delenv("EDITOR", raising=False)
        before = document_file.read_bytes()
        result = runner.invoke(app, ["step", "edit", str(document_file), "s1"])
        assert result.exit_code == 1
        assert "unavailable" in result.output
        assert document_file.read_bytes() == before


class TestSaveCommand:
    """Tests for recette save."""

    def test_save_under_export_name(
        self, runner: CliRunner, document_file: Path, in_tmp: Path
    ) -> None:
        result = runner.invoke(app, ["save", str(document_file), "--dir", str(in_tmp / "out")])
        assert result.exit_code == 0
        saved = in_tmp / "out" / "cahier-recette-ERP-1234.json"
        assert decode(saved.read_bytes()) == decode(document_file.read_bytes())


class TestRenderCommands:
    """Tests for preview, print and export."""

    def test_preview(self, runner: CliRunner, document_file: Path, in_tmp: Path) -> None:
        out = in_tmp / "preview.html"
        result = runner.invoke(app, ["preview", str(document_file), "--out", str(out)])
        assert result.exit_code == 0
        html = out.read_text(encoding="utf-8")
        assert "BON POUR PROD KO" in html
        assert "window.print()" not in html

    def test_print(self, runner: CliRunner, document_file: Path, in_tmp: Path) -> None:
        opener = MagicMock(return_value=True)
        with patch(
            "recette.commands.render.BrowserPrintBackend",
            lambda: BrowserPrintBackend(directory=in_tmp, opener=opener),
        ):
            result = runner.invoke(app, ["print", str(document_file)])
        assert result.exit_code == 0
        opener.assert_called_once()

    def test_print_requires_identifiers(self, runner: CliRunner, in_tmp: Path) -> None:
        assert runner.invoke(app, ["new"]).exit_code == 0
        result = runner.invoke(app, ["print", str(in_tmp / "cahier-recette-export.json")])
        assert result.exit_code == 1
        assert "JIRA number and name" in result.output

    def test_export_pdf(self, runner: CliRunner, document_file: Path, in_tmp: Path) -> None:
        weasyprint = MagicMock()
        out = in_tmp / "record.pdf"
        with patch.dict(sys.modules, {"weasyprint": weasyprint}):
            result = runner.invoke(app, ["export", str(document_file), "--out", str(out)])
        assert result.exit_code == 0
        html = weasyprint.HTML.call_args.kwargs["string"]
        assert "Étape 1 : Lancer le batch" in html
        weasyprint.HTML.return_value.write_pdf.assert_called_once_with(
            str(out), stylesheets=[weasyprint.CSS.return_value]
        )
        assert "#step-1, #step-2, #conclusion" in weasyprint.CSS.call_args.kwargs["string"]

    def test_export_backend_failure(self, runner: CliRunner, document_file: Path) -> None:
        weasyprint = MagicMock()
        weasyprint.HTML.return_value.write_pdf.side_effect = OSError("disk full")
        with patch.dict(sys.modules, {"weasyprint": weasyprint}):
            result = runner.invoke(app, ["export", str(document_file)])
        assert result.exit_code == 1
        assert "disk full" in result.output
