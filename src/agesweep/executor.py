from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import TextIO

from agesweep.audit import AuditLog, deleted_message, error_message, skipped_message
from agesweep.errors import ErrorCategory
from agesweep.models import CleanupCandidate
from agesweep.summary import SummaryAggregator

logger = logging.getLogger(__name__)

ConfirmFn = Callable[[CleanupCandidate], bool]

SKIP_WHAT_IF = "WhatIf"
SKIP_DECLINED = "Declined"


def approve_all(candidate: CleanupCandidate) -> bool:
    return True


def deny_all(candidate: CleanupCandidate) -> bool:
    return False


class PromptConfirm:
    """Interactive per-file confirmation.

    Answers: ``y`` delete this file, ``n`` (default) keep it, ``a`` delete
    this and every remaining file, ``q`` keep this and every remaining file.
    """

    def __init__(
        self,
        input_fn: Callable[[str], str] | None = None,
        output: TextIO | None = None,
    ) -> None:
        self._input = input_fn if input_fn is not None else _read_answer
        self._output = output if output is not None else sys.stdout
        self._sticky: bool | None = None

    def __call__(self, candidate: CleanupCandidate) -> bool:
        if self._sticky is not None:
            return self._sticky
        question = (
            f"Delete {candidate.full_path} ({candidate.size_mb:.2f} MB, "
            f"{candidate.source_location_description})? [y/N/a/q]: "
        )
        try:
            answer = self._input(question).strip().lower()
        except EOFError:
            print("", file=self._output)
            self._sticky = False
            return False
        if answer in {"a", "all"}:
            self._sticky = True
            return True
        if answer in {"q", "quit"}:
            self._sticky = False
            return False
        return answer in {"y", "yes"}


def _read_answer(question: str) -> str:
    return input(question)


class ExecutionGate:
    """Single decision point in front of every deletion.

    ``what_if`` overrides confirmation: the candidate is skipped and
    ``confirm`` is never consulted.
    """

    def __init__(self, confirm: ConfirmFn, what_if: bool = False) -> None:
        self.confirm = confirm
        self.what_if = what_if

    def decide(self, candidate: CleanupCandidate) -> tuple[bool, str]:
        if self.what_if:
            return False, SKIP_WHAT_IF
        if self.confirm(candidate):
            return True, ""
        return False, SKIP_DECLINED

    def proceed(self, candidate: CleanupCandidate) -> bool:
        return self.decide(candidate)[0]


def delete_file(path: Path) -> None:
    path.unlink()


class Deleter:
    def __init__(
        self,
        gate: ExecutionGate,
        audit: AuditLog,
        aggregator: SummaryAggregator,
        unlink: Callable[[Path], None] = delete_file,
    ) -> None:
        self.gate = gate
        self.audit = audit
        self.aggregator = aggregator
        self._unlink = unlink

    def process(self, candidate: CleanupCandidate) -> bool:
        """Gate and delete one candidate. Returns True when it was deleted."""
        proceed, reason = self.gate.decide(candidate)
        if not proceed:
            self.audit.log(skipped_message(candidate, reason))
            self.aggregator.add_skipped()
            return False

        try:
            self._unlink(candidate.full_path)
        except OSError as exc:
            message = error_message(candidate, exc)
            self.audit.log(message)
            self.aggregator.add_skipped()
            self.aggregator.record_error(
                ErrorCategory.DELETION, str(candidate.full_path), message
            )
            return False

        self.audit.log(deleted_message(candidate))
        self.aggregator.add_deleted()
        return True
