"""Run-scoped observability context."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from opentelemetry.trace import Status, StatusCode
from pydantic import Field

from kvlifecycle.logging import get_logger
from kvlifecycle.logging.filters import clear_run_context, set_run_context
from kvlifecycle.telemetry import get_tracer
from kvlifecycle.types.base import KVBaseModel


class LifecycleRunContext(KVBaseModel):
    """Observability context propagated across one lifecycle run."""

    run_id: str
    subscription_id: Optional[str] = None
    attributes: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def generate(cls, **kwargs: Any) -> "LifecycleRunContext":
        """Generate a new context with a unique run id."""
        return cls(run_id=str(uuid.uuid4()), **kwargs)

    def to_telemetry_dict(self) -> Dict[str, str]:
        payload: Dict[str, str] = {"run_id": self.run_id}
        if self.subscription_id:
            payload["subscription_id"] = self.subscription_id
        for key, value in (self.attributes or {}).items():
            if value is not None:
                payload[f"ctx.{key}"] = str(value)
        return payload


@contextmanager
def lifecycle_run_scope(
    ctx: LifecycleRunContext,
    *,
    operation: str = "kvlifecycle.run",
) -> Iterator[LifecycleRunContext]:
    """Apply logging + tracing scope for a lifecycle run."""
    telemetry = ctx.to_telemetry_dict()

    set_run_context(run_id=ctx.run_id, subscription_id=ctx.subscription_id)

    tracer = get_tracer("kvlifecycle")
    with tracer.start_as_current_span(operation) as span:
        for key, value in telemetry.items():
            span.set_attribute(f"kvlifecycle.{key}", value)

        try:
            yield ctx
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR))
            get_logger(__name__).error(
                "Lifecycle run failed",
                extra={**telemetry, "operation.name": operation},
            )
            raise
        finally:
            clear_run_context()
