"""Operator approval before the mutating deploy call."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

APPROVAL_PROMPT = "Do you want to proceed with deployment? (Y/N): "


class ApprovalState(Enum):
    """Lifecycle of an approval gate."""

    PENDING = "pending"
    RESOLVED = "resolved"


class ApprovalDecision(Enum):
    """Outcome of an approval gate."""

    PROCEED = "proceed"
    ABORT = "abort"


class ApprovalGate:
    """Single-shot confirmation step.

    Resolves at most once. With ``assume_yes`` it resolves to PROCEED without
    reading input. Otherwise exactly one answer is read; only ``y`` (any case)
    proceeds. Empty input, ``n``, ``yes``, EOF and Ctrl-C all abort.
    """

    def __init__(
        self,
        read_input: Callable[[str], str],
        *,
        assume_yes: bool = False,
        prompt: str = APPROVAL_PROMPT,
    ) -> None:
        """Initialize the gate.

        Args:
            read_input: Callable that shows a prompt and returns one line
            assume_yes: Skip the prompt and proceed
            prompt: Prompt text shown to the operator
        """
        self._read_input = read_input
        self.assume_yes = assume_yes
        self.prompt = prompt
        self.state = ApprovalState.PENDING
        self.decision: ApprovalDecision | None = None

    def resolve(self) -> ApprovalDecision:
        """Resolve the gate, prompting the operator if needed."""
        if self.decision is not None:
            return self.decision

        if self.assume_yes:
            decision = ApprovalDecision.PROCEED
        else:
            try:
                answer = self._read_input(self.prompt)
            except (KeyboardInterrupt, EOFError):
                answer = ""
            if answer.strip().lower() == "y":
                decision = ApprovalDecision.PROCEED
            else:
                decision = ApprovalDecision.ABORT

        self.decision = decision
        self.state = ApprovalState.RESOLVED
        return decision
