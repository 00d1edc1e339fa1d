"""Pydantic schemas describing a database bootstrap run."""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional

PREVIEW_LENGTH = 80


class ExecutionOutcome(BaseModel):
    """Result of executing one statement or one whole file."""
    source: str  # file name or step label the statement came from
    statement: str
    ok: bool
    error: Optional[str] = None
    skipped: bool = False

    @property
    def preview(self) -> str:
        """Statement text truncated for log lines."""
        text = " ".join(self.statement.split())
        if len(text) <= PREVIEW_LENGTH:
            return text
        return text[:PREVIEW_LENGTH] + "..."


class MigrationStep(BaseModel):
    """A follow-up SQL file applied after the base schema is in place."""
    path: str = Field(..., min_length=1)
    required: bool = False
    description: Optional[str] = None

    @field_validator('path')
    def path_is_sql_file(cls, v):
        if not v.strip().lower().endswith('.sql'):
            raise ValueError('Migration step must point to a .sql file')
        return v.strip()

    @property
    def label(self) -> str:
        return self.description or self.path


class InitReport(BaseModel):
    """Ordered outcomes of one initialization run."""
    strategy: str = Field(..., pattern="^(init|fallback)$")
    outcomes: List[ExecutionOutcome] = Field(default_factory=list)

    def record(self, outcome: ExecutionOutcome) -> ExecutionOutcome:
        self.outcomes.append(outcome)
        return outcome

    @property
    def succeeded(self) -> List[ExecutionOutcome]:
        return [o for o in self.outcomes if o.ok and not o.skipped]

    @property
    def failed(self) -> List[ExecutionOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def skipped(self) -> List[ExecutionOutcome]:
        return [o for o in self.outcomes if o.skipped]

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)

    def summary(self) -> str:
        return (
            f"{len(self.succeeded)} succeeded, {len(self.failed)} failed, "
            f"{len(self.skipped)} skipped"
        )
