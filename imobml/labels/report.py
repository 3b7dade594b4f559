from pydantic import BaseModel, Field
from typing import List, Dict


class LabelingReport(BaseModel):
    """Track labeling progress and errors."""

    attempted: List[str] = Field(default_factory=list)
    labeled: Dict[str, int] = Field(default_factory=dict)
    censored: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    failures: Dict[str, str] = Field(default_factory=dict)

    @property
    def labeled_count(self) -> int:
        return len(self.labeled)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    def add_attempt(self, analysis_id: str) -> None:
        self.attempted.append(analysis_id)

    def add_label(self, analysis_id: str, days: int, censored: bool) -> None:
        self.labeled[analysis_id] = days
        if censored:
            self.censored.append(analysis_id)

    def add_skip(self, analysis_id: str) -> None:
        self.skipped.append(analysis_id)

    def add_failure(self, analysis_id: str, error: str) -> None:
        self.failures[analysis_id] = error
