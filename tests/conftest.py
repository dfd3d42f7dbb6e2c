"""Shared test fixtures for recette tests."""

import datetime
from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner

from recette.core import DocumentStore, encode, new_document
from recette.models import Conclusion, Document, Environment, RecordType, Step


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def id_factory() -> Callable[[], str]:
    """Deterministic step id generator: id-0, id-1, ..."""
    counter = iter(range(1000))

    def make() -> str:
        return f"id-{next(counter)}"

    return make


@pytest.fixture
def blank_document(id_factory: Callable[[], str]) -> Document:
    """Initial session document dated 2026-01-04."""
    return new_document(today=datetime.date(2026, 1, 4), id_factory=id_factory)


@pytest.fixture
def store(blank_document: Document, id_factory: Callable[[], str]) -> DocumentStore:
    return DocumentStore(blank_document, id_factory=id_factory)


@pytest.fixture
def sample_document() -> Document:
    """A filled-in test record with two steps."""
    return Document(
        jira_number="ERP-1234",
        jira_name="Batch de facturation",
        record_type=RecordType.TMA,
        date=datetime.date(2026, 1, 4),
        environment=Environment.FPOST,
        conclusion=Conclusion.KO,
        attached_image="data:image/png;base64,iVBORw0KGgo=",
        steps=(
            Step(id="s1", title="Lancer le batch", content="<p><strong>Run</strong> it</p>"),
            Step(id="s2", title="Vérifier", content=""),
        ),
    )


@pytest.fixture
def document_file(tmp_path: Path, sample_document: Document) -> Path:
    """Sample document written to disk."""
    path = tmp_path / "record.json"
    path.write_bytes(encode(sample_document))
    return path
