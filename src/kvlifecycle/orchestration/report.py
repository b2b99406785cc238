"""Step-by-step record of a lifecycle run."""

from typing import List, Optional

from pydantic import Field

from kvlifecycle.constants import LifecycleState, StepOutcome
from kvlifecycle.types.base import KVBaseModel


class StepRecord(KVBaseModel):
    step: str
    outcome: StepOutcome
    state: LifecycleState
    detail: Optional[str] = None


class LifecycleReport(KVBaseModel):
    """Outcome of a lifecycle run.

    ``failed_step`` and ``error`` describe the failure that ended the run.
    ``cleanup_error`` is set independently when the best-effort resource
    group deletion after that failure also failed.
    """

    run_id: Optional[str] = None
    state: LifecycleState = LifecycleState.UNSTARTED
    steps: List[StepRecord] = Field(default_factory=list)
    created_vaults: List[str] = Field(default_factory=list)
    subscription_vaults: List[str] = Field(default_factory=list)
    group_vaults: List[str] = Field(default_factory=list)
    failed_step: Optional[str] = None
    error: Optional[str] = None
    cleanup_error: Optional[str] = None

    def record(self, step: str, outcome: StepOutcome, detail: Optional[str] = None) -> StepRecord:
        entry = StepRecord(step=step, outcome=outcome, state=self.state, detail=detail)
        self.steps.append(entry)
        return entry

    def outcome_of(self, step: str) -> Optional[StepOutcome]:
        """Return the last recorded outcome of ``step``."""
        for entry in reversed(self.steps):
            if entry.step == step:
                return StepOutcome(entry.outcome)
        return None

    @property
    def succeeded(self) -> bool:
        return self.failed_step is None and LifecycleState(self.state) == LifecycleState.TORN_DOWN
