"""Pull request results, specifications and providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from libgitops.transaction.commit import CommitResult


@dataclass
class PullRequestResult(CommitResult):
    """A transaction result that asks for a pull request to be created."""

    labels: list[str] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)
    milestone: str = ""

    def validate(self) -> None:
        """Validate the commit fields; labels, assignees and milestone are optional."""
        super().validate()


@dataclass
class PullRequestSpec(PullRequestResult):
    """Everything a provider needs to create a pull request."""

    main_branch: str = ""
    merge_branch: str = ""
    repository_ref: object | None = None

    def _missing_fields(self) -> list[str]:
        missing = super()._missing_fields()
        if not self.main_branch:
            missing.append("main_branch")
        if not self.merge_branch:
            missing.append("merge_branch")
        if self.repository_ref is None:
            missing.append("repository_ref")
        return missing

    def validate(self) -> None:
        """Raise ValidationError if a commit field, a branch or the repository is missing."""
        super().validate()


class PullRequestProvider(ABC):
    """Something that can create pull requests."""

    @abstractmethod
    def create_pull_request(self, spec: PullRequestSpec) -> None:
        """Create a pull request as described by *spec*."""