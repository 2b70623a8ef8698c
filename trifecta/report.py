"""
Per-item outcomes collected while bootstrapping or syncing a workspace.
"""
from enum import Enum
from typing import Optional, List, Dict, Any
from dataclasses import dataclass, field


class StepStatus(str, Enum):
    """Outcome of a single bootstrap item."""
    CREATED = "created"
    EXISTS = "exists"
    REPLACED = "replaced"
    UPDATED = "updated"
    ATTEMPTED = "attempted"
    SKIPPED = "skipped"
    FAILED = "failed"


# Statuses that imply the filesystem (or an external tool) was changed.
# ATTEMPTED is excluded: the package manager may have had nothing to install.
MUTATING_STATUSES = {StepStatus.CREATED, StepStatus.REPLACED, StepStatus.UPDATED}


@dataclass
class StepOutcome:
    """Result of one item within a step (a directory, a symlink, a repo...)."""
    step: str
    item: str
    status: StepStatus
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'step': self.step,
            'item': self.item,
            'status': self.status.value,
            'message': self.message,
        }


@dataclass
class BootstrapReport:
    """Ordered collection of step outcomes for one run."""
    outcomes: List[StepOutcome] = field(default_factory=list)

    def record(self, step: str, item: str, status: StepStatus,
               message: Optional[str] = None) -> StepOutcome:
        outcome = StepOutcome(step=step, item=item, status=status, message=message)
        self.outcomes.append(outcome)
        return outcome

    def for_step(self, step: str) -> List[StepOutcome]:
        return [o for o in self.outcomes if o.step == step]

    def get(self, step: str, item: str) -> Optional[StepOutcome]:
        """Get the outcome for a specific item, or None if it was never reached."""
        for outcome in self.outcomes:
            if outcome.step == step and outcome.item == item:
                return outcome
        return None

    def with_status(self, status: StepStatus) -> List[StepOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def failures(self) -> List[StepOutcome]:
        return self.with_status(StepStatus.FAILED)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    @property
    def mutation_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status in MUTATING_STATUSES)

    def counts(self) -> Dict[str, int]:
        """Count outcomes by status value."""
        counts: Dict[str, int] = {}
        for outcome in self.outcomes:
            counts[outcome.status.value] = counts.get(outcome.status.value, 0) + 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {
            'counts': self.counts(),
            'outcomes': [o.to_dict() for o in self.outcomes],
        }
