"""Results of transactions and the errors transactions raise."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


class ValidationError(ValueError):
    """Required fields of a result are not set."""

    def __init__(self, struct: str, missing: Iterable[str]) -> None:
        self.struct = struct
        self.missing = tuple(missing)
        super().__init__(f"{struct}: required fields are not set: {', '.join(self.missing)}")


class AbortTransactionError(Exception):
    """Raised by a transaction function to abort the transaction."""

    def __init__(self, message: str = "transaction aborted") -> None:
        super().__init__(message)


class TransactionActiveError(Exception):
    """A transaction is already active."""

    def __init__(self, message: str = "transaction is active") -> None:
        super().__init__(message)


class NoPullRequestProviderError(Exception):
    """A pull request was asked for but no provider was given."""

    def __init__(self, message: str = "no pull request provider given") -> None:
        super().__init__(message)


@dataclass
class CommitResult:
    """The outcome of a transaction, used to make a commit."""

    author_name: str = ""
    author_email: str = ""
    title: str = ""
    description: str = ""

    @property
    def message(self) -> str:
        """The title, followed by a newline and the description if set."""
        if not self.description:
            return self.title
        return f"{self.title}\n{self.description}"

    def _missing_fields(self) -> list[str]:
        required = ("author_name", "author_email", "title")
        return [name for name in required if not getattr(self, name)]

    def validate(self) -> None:
        """Raise ValidationError if a required field is empty."""
        missing = self._missing_fields()
        if missing:
            raise ValidationError(type(self).__name__, missing)