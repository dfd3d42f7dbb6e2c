"""Document model for test records.

A test record carries header metadata, a conclusion flag, an optional
screenshot and an ordered list of rich-text steps. Models are frozen:
every mutation produces a new value through the store.
"""

import datetime
from enum import Enum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RecordType(str, Enum):
    """Kind of test record."""

    TMD = "TMD"
    TMA = "TMA"


class Environment(str, Enum):
    """Environment the test was executed against."""

    FRECMCOR = "FRECMCOR"
    FPOST = "FPOST"


class Conclusion(str, Enum):
    """Go/no-go verdict for production."""

    OK = "OK"
    KO = "KO"

    @property
    def passed(self) -> bool:
        return self is Conclusion.OK


class Step(BaseModel):
    """One titled block of rich-text markup.

    Attributes:
        id: Opaque token generated once at creation, never reused.
        title: User-editable title. Not renumbered when steps move.
        content: Markup fragment produced by the editing surface. An empty
            string means the step was never touched.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1, description="Unique step token")
    title: str = Field(description="Step title")
    content: str = Field(description="Rich-text markup fragment")


class Document(BaseModel):
    """Test record document.

    Field aliases match the persisted interchange keys, so files saved by
    earlier versions of the tool restore unchanged.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    jira_number: str = Field(alias="jiraNumber", description="JIRA identifier")
    jira_name: str = Field(alias="jiraName", description="JIRA short description")
    record_type: RecordType = Field(alias="type", description="Record type")
    date: datetime.date = Field(description="Test date")
    environment: Environment = Field(description="Test environment")
    conclusion: Conclusion = Field(description="Production verdict")
    attached_image: str | None = Field(
        default=None, alias="localImage", description="Screenshot as a data URI"
    )
    steps: tuple[Step, ...] = Field(description="Steps in display order")

    @field_validator("attached_image")
    @classmethod
    def validate_data_uri(cls, value: str | None) -> str | None:
        """Only data URIs are accepted for the screenshot."""
        if value is not None and not value.startswith("data:"):
            raise ValueError("attached image must be a data: URI")
        return value

    @model_validator(mode="after")
    def validate_unique_step_ids(self) -> Self:
        """Step ids must be unique within a document."""
        seen: set[str] = set()
        for step in self.steps:
            if step.id in seen:
                raise ValueError(f"Duplicate step id: {step.id}")
            seen.add(step.id)
        return self

    def find_step(self, step_id: str) -> Step | None:
        """Return the step with the given id, or None."""
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def step_ids(self) -> list[str]:
        return [step.id for step in self.steps]

    def is_print_ready(self) -> bool:
        """True when both JIRA identifiers are filled in."""
        return bool(self.jira_number.strip() and self.jira_name.strip())
