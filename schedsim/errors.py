from __future__ import annotations

from typing import Iterable, List


class SchedulerError(Exception):
    """Base class for every error raised by schedsim."""


class ValidationError(SchedulerError, ValueError):
    """
    Input rejected before any scheduling runs.

    Collects one message per problem so that every bad process can be
    reported in a single pass.
    """

    def __init__(self, problems: str | Iterable[str]):
        if isinstance(problems, str):
            problems = [problems]
        self.problems: List[str] = list(problems)
        super().__init__("; ".join(self.problems))


class PreconditionError(SchedulerError):
    """Metrics requested on an empty or unfinished process set."""
