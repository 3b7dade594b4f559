from pydantic import BaseModel, Field
from typing import List, Dict


class PriceWatchReport(BaseModel):
    """Track price watch progress and errors."""

    attempted: List[str] = Field(default_factory=list)
    changes: Dict[str, float] = Field(default_factory=dict)
    unchanged: List[str] = Field(default_factory=list)
    failures: Dict[str, str] = Field(default_factory=dict)

    @property
    def change_count(self) -> int:
        return len(self.changes)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    def add_attempt(self, url: str) -> None:
        self.attempted.append(url)

    def add_change(self, url: str, price: float) -> None:
        self.changes[url] = price

    def add_unchanged(self, url: str) -> None:
        self.unchanged.append(url)

    def add_failure(self, url: str, error: str) -> None:
        self.failures[url] = error
