from unittest.mock import MagicMock

import pytest

from kvlifecycle.common import ErrorCode, LifecycleError
from kvlifecycle.logging.filters import run_id_var, subscription_id_var
from kvlifecycle.observability import LifecycleRunContext, lifecycle_run_scope
from kvlifecycle.utils import traced


def test_run_scope_sets_and_clears_context():
    ctx = LifecycleRunContext.generate(subscription_id="sub1", attributes={"resource_group": "g1"})

    with lifecycle_run_scope(ctx) as active:
        assert active is ctx
        assert run_id_var.get() == ctx.run_id
        assert subscription_id_var.get() == "sub1"

    assert run_id_var.get() is None
    assert subscription_id_var.get() is None


def test_run_scope_clears_context_on_error():
    ctx = LifecycleRunContext.generate()

    with pytest.raises(RuntimeError):
        with lifecycle_run_scope(ctx):
            raise RuntimeError("boom")

    assert run_id_var.get() is None


def test_telemetry_dict_skips_empty_values():
    ctx = LifecycleRunContext(run_id="r1", attributes={"resource_group": "g1", "missing": None})

    assert ctx.to_telemetry_dict() == {"run_id": "r1", "ctx.resource_group": "g1"}


def test_traced_records_error_code_on_span(monkeypatch):
    span = MagicMock()
    tracer = MagicMock()
    tracer.start_as_current_span.return_value.__enter__.return_value = span
    monkeypatch.setattr("kvlifecycle.utils.decorators.get_tracer", lambda name: tracer)

    @traced(span_name="kvlifecycle.test", attributes={"arm.operation": "get", "skip": None})
    def failing():
        raise LifecycleError("boom", error_code=ErrorCode.RESOURCE_NOT_FOUND)

    with pytest.raises(LifecycleError):
        failing()

    tracer.start_as_current_span.assert_called_once()
    span.set_attribute.assert_any_call("arm.operation", "get")
    span.set_attribute.assert_any_call("kvlifecycle.error_code", "REMOTE_002")
