"""Tests for the lifecycle orchestrator against the in-memory backend."""

from unittest.mock import MagicMock

import pytest
from pydantic import SecretStr

from kvlifecycle.clients import InMemoryResourceGroupsClient, InMemoryVaultsClient, ManagementClients
from kvlifecycle.common import LifecycleStateError, MalformedIdentifierError, RemoteOperationFailedError
from kvlifecycle.constants import ClientBackend, LifecycleState, ResourceKind, StepOutcome, TeardownMode
from kvlifecycle.orchestration import (
    DELETE_GROUP_STEP,
    TEARDOWN_PROMPT,
    LifecycleContext,
    LifecycleOrchestrator,
    broaden_permissions,
)
from kvlifecycle.types import SessionToken

TENANT_GUID = "72f988bf-86f1-41af-91ab-2d7cd011db47"


class RecordingGroups(InMemoryResourceGroupsClient):
    def __init__(self, store, calls):
        super().__init__(store)
        self.calls = calls

    def create_or_update(self, name, location, tags=None):
        self.calls.append(("group.create_or_update", name))
        return super().create_or_update(name, location, tags)

    def delete(self, name):
        self.calls.append(("group.delete", name))
        super().delete(name)


class RecordingVaults(InMemoryVaultsClient):
    def __init__(self, store, calls):
        super().__init__(store)
        self.calls = calls

    def create_or_update(self, resource_group, name, parameters):
        self.calls.append(("vault.create_or_update", name))
        return super().create_or_update(resource_group, name, parameters)

    def delete(self, resource_group, name):
        self.calls.append(("vault.delete", name))
        super().delete(resource_group, name)


@pytest.fixture
def calls():
    return []


@pytest.fixture
def recording_context(credentials, settings, store, calls):
    clients = ManagementClients(
        resource_groups=RecordingGroups(store, calls),
        vaults=RecordingVaults(store, calls),
        backend=ClientBackend.MEMORY,
    )
    return LifecycleContext(credentials=credentials, settings=settings, clients=clients)


def _with_settings(context, **changes):
    settings = context.settings.model_copy(update=changes)
    return LifecycleContext(
        credentials=context.credentials,
        settings=settings,
        clients=context.clients,
        token=context.token,
    )


class TestRun:
    """Full runs of the lifecycle."""

    def test_successful_run_tears_everything_down(self, context, store):
        echo = MagicMock()

        report = LifecycleOrchestrator(context, echo=echo).run()

        assert report.succeeded
        assert LifecycleState(report.state) == LifecycleState.TORN_DOWN
        assert report.created_vaults == ["v1", "v2"]
        assert report.run_id
        assert store.groups == {}
        assert store.vaults == {}
        echo.assert_any_call("Creating resource group")
        echo.assert_any_call("Deleting resource group")

    def test_created_vault_is_readable_before_teardown(self, context, store):
        seen = {}

        def pause(prompt):
            seen["vault"] = context.clients.vaults.get("g1", "v1")

        interactive = _with_settings(context, teardown_mode=TeardownMode.PROMPT)
        LifecycleOrchestrator(interactive, echo=MagicMock(), pause=pause).run()

        vault = seen["vault"]
        assert vault.name == "v1"
        assert vault.location == "westus"
        assert vault.properties.tenant_id == "t1"

    def test_update_enables_deployment_and_broadens_secrets(self, context):
        seen = {}

        def pause(prompt):
            seen["vault"] = context.clients.vaults.get("g1", "v1")

        interactive = _with_settings(context, teardown_mode=TeardownMode.PROMPT)
        LifecycleOrchestrator(interactive, echo=MagicMock(), pause=pause).run()

        vault = seen["vault"]
        assert vault.properties.enabled_for_deployment is True
        assert vault.properties.enabled_for_template_deployment is True
        policy = vault.properties.access_policies[0]
        assert policy.permissions.secrets == ["all"]
        assert policy.permissions.keys == ["all"]
        assert policy.object_id == "c1"
        assert vault.location == "westus"
        assert vault.properties.sku.name == "standard"

    def test_second_vault_policy(self, context):
        seen = {}

        def pause(prompt):
            seen["vault"] = context.clients.vaults.get("g1", "v2")

        interactive = _with_settings(context, teardown_mode=TeardownMode.PROMPT)
        LifecycleOrchestrator(interactive, echo=MagicMock(), pause=pause).run()

        vault = seen["vault"]
        assert vault.location == "eastus"
        permissions = vault.properties.access_policies[0].permissions
        assert permissions.keys == ["list", "get", "decrypt"]
        assert permissions.secrets == ["get"]

    def test_listing_contains_exactly_the_created_vaults(self, context):
        report = LifecycleOrchestrator(context, echo=MagicMock()).run()

        assert sorted(report.subscription_vaults) == ["v1", "v2"]
        assert sorted(report.group_vaults) == ["v1", "v2"]

    def test_principal_object_id_setting(self, context):
        seen = {}

        def pause(prompt):
            seen["vault"] = context.clients.vaults.get("g1", "v1")

        configured = _with_settings(
            context, teardown_mode=TeardownMode.PROMPT, principal_object_id="oid-1"
        )
        LifecycleOrchestrator(configured, echo=MagicMock(), pause=pause).run()

        assert seen["vault"].properties.access_policies[0].object_id == "oid-1"

    def test_vaults_deleted_before_group(self, recording_context, calls):
        LifecycleOrchestrator(recording_context, echo=MagicMock()).run()

        deletes = [c for c in calls if c[0].endswith(".delete")]
        assert deletes == [
            ("vault.delete", "v1"),
            ("vault.delete", "v2"),
            ("group.delete", "g1"),
        ]

    def test_single_vault_variant(self, context):
        single = _with_settings(context, create_second_vault=False)

        report = LifecycleOrchestrator(single, echo=MagicMock()).run()

        assert report.created_vaults == ["v1"]
        assert report.subscription_vaults == ["v1"]
        assert report.outcome_of("create_second_vault") is None

    def test_unattended_does_not_pause(self, context):
        pause = MagicMock()

        LifecycleOrchestrator(context, echo=MagicMock(), pause=pause).run()

        pause.assert_not_called()

    def test_interactive_pauses_once_before_teardown(self, context, store):
        interactive = _with_settings(context, teardown_mode=TeardownMode.PROMPT)
        vault_counts = []
        pause = MagicMock(side_effect=lambda prompt: vault_counts.append(len(store.vaults)))

        LifecycleOrchestrator(interactive, echo=MagicMock(), pause=pause).run()

        pause.assert_called_once_with(TEARDOWN_PROMPT)
        assert vault_counts == [2]

    def test_steps_recorded_in_order(self, context):
        report = LifecycleOrchestrator(context, echo=MagicMock()).run()

        assert [s.step for s in report.steps] == [
            "create_resource_group",
            "create_vault",
            "get_vault",
            "configure_vault",
            "create_second_vault",
            "list_vaults",
            "delete_vault",
            "delete_vault",
            DELETE_GROUP_STEP,
        ]
        assert all(s.outcome == StepOutcome.SUCCEEDED for s in report.steps)


class TestFailures:
    """A failure aborts the run and the resource group is still cleaned up."""

    def test_group_creation_failure_skips_cleanup(self, recording_context, store, calls):
        store.inject_failure(ResourceKind.RESOURCE_GROUP, "create_or_update")
        orchestrator = LifecycleOrchestrator(recording_context, echo=MagicMock())

        with pytest.raises(RemoteOperationFailedError):
            orchestrator.run()

        assert orchestrator.report.failed_step == "create_resource_group"
        assert ("group.delete", "g1") not in calls
        assert orchestrator.state == LifecycleState.UNSTARTED

    def test_vault_creation_failure_deletes_group(self, recording_context, store, calls):
        store.inject_failure(ResourceKind.VAULT, "create_or_update")
        orchestrator = LifecycleOrchestrator(recording_context, echo=MagicMock())

        with pytest.raises(RemoteOperationFailedError) as exc_info:
            orchestrator.run()

        assert exc_info.value.operation == "create_or_update"
        assert orchestrator.report.failed_step == "create_vault"
        assert orchestrator.state == LifecycleState.GROUP_CREATED
        assert orchestrator.report.outcome_of(DELETE_GROUP_STEP) == StepOutcome.SUCCEEDED
        assert calls.count(("vault.create_or_update", "v1")) == 1
        assert store.groups == {}

    def test_get_failure_reports_get_step(self, context, store):
        store.inject_failure(ResourceKind.VAULT, "get")
        orchestrator = LifecycleOrchestrator(context, echo=MagicMock())

        with pytest.raises(RemoteOperationFailedError):
            orchestrator.run()

        assert orchestrator.report.failed_step == "get_vault"
        assert orchestrator.state == LifecycleState.VAULT_CREATED

    def test_vault_delete_failure_still_deletes_group(self, recording_context, store, calls):
        store.inject_failure(ResourceKind.VAULT, "delete")
        orchestrator = LifecycleOrchestrator(recording_context, echo=MagicMock())

        with pytest.raises(RemoteOperationFailedError) as exc_info:
            orchestrator.run()

        assert exc_info.value.resource_kind == "vault"
        assert exc_info.value.operation == "delete"
        report = orchestrator.report
        assert report.failed_step == "delete_vault"
        assert report.cleanup_error is None
        assert calls[-1] == ("group.delete", "g1")
        assert ("vault.delete", "v2") not in calls
        assert store.groups == {}
        assert not report.succeeded

    def test_cleanup_failure_is_reported_separately(self, recording_context, store, calls):
        store.inject_failure(ResourceKind.VAULT, "delete")
        store.inject_failure(ResourceKind.RESOURCE_GROUP, "delete", RuntimeError("group locked"))
        orchestrator = LifecycleOrchestrator(recording_context, echo=MagicMock())

        with pytest.raises(RemoteOperationFailedError) as exc_info:
            orchestrator.run()

        assert exc_info.value.resource_kind == "vault"
        report = orchestrator.report
        assert report.failed_step == "delete_vault"
        assert "group locked" in report.cleanup_error
        assert report.outcome_of(DELETE_GROUP_STEP) == StepOutcome.FAILED
        assert ("group.delete", "g1") in calls

    def test_group_delete_failure_after_success(self, context, store):
        store.inject_failure(ResourceKind.RESOURCE_GROUP, "delete")
        orchestrator = LifecycleOrchestrator(context, echo=MagicMock())

        with pytest.raises(RemoteOperationFailedError) as exc_info:
            orchestrator.run()

        assert exc_info.value.resource_kind == "resource_group"
        assert orchestrator.report.failed_step == DELETE_GROUP_STEP
        assert orchestrator.state == LifecycleState.LISTED


class TestSteps:
    def test_configure_before_create_is_rejected(self, context):
        orchestrator = LifecycleOrchestrator(context, echo=MagicMock())

        with pytest.raises(LifecycleStateError):
            orchestrator.configure_vault()

    def test_delete_before_listing_is_rejected(self, context):
        orchestrator = LifecycleOrchestrator(context, echo=MagicMock())

        with pytest.raises(LifecycleStateError):
            orchestrator.delete_vaults()

    def test_update_vault_keeps_unmodified_fields(self, context):
        context.clients.resource_groups.create_or_update("g1", "westus")
        orchestrator = LifecycleOrchestrator(context, echo=MagicMock())
        parameters = orchestrator.initial_vault_parameters()
        parameters.tags = {"env": "dev"}
        parameters.properties.enable_soft_delete = True
        context.clients.vaults.create_or_update("g1", "v1", parameters)

        def enable_deployment(request):
            request.properties.enabled_for_deployment = True

        updated = orchestrator.update_vault("g1", "v1", enable_deployment)

        assert updated.properties.enabled_for_deployment is True
        assert updated.tags == {"env": "dev"}
        assert updated.properties.enable_soft_delete is True
        assert updated.properties.access_policies[0].permissions.secrets == ["get", "list"]

    def test_broaden_permissions_requires_a_policy(self, context):
        parameters = LifecycleOrchestrator(context).initial_vault_parameters()
        parameters.properties.access_policies = []

        with pytest.raises(ValueError):
            broaden_permissions(parameters)

    def test_initial_parameters(self, context):
        parameters = LifecycleOrchestrator(context).initial_vault_parameters()

        assert parameters.location == "westus"
        assert parameters.properties.tenant_id == "t1"
        policy = parameters.properties.access_policies[0]
        assert policy.object_id == "c1"
        assert policy.permissions.keys == ["get", "list"]
        assert policy.permissions.secrets == ["get", "list"]


class TestBootstrap:
    def test_token_acquired_once_per_run(self, credentials, settings, store):
        provider = MagicMock()
        provider.acquire.return_value = SessionToken(token=SecretStr("tok"), expires_on=4_000_000_000)

        context = LifecycleContext.bootstrap(credentials, settings, token_provider=provider, store=store)
        LifecycleOrchestrator(context, echo=MagicMock()).run()

        provider.acquire.assert_called_once_with()
        assert context.token.token.get_secret_value() == "tok"

    def test_memory_backend_without_provider(self, credentials, settings, store):
        context = LifecycleContext.bootstrap(credentials, settings, store=store)

        assert context.token is None
        assert context.clients.backend == ClientBackend.MEMORY

    def test_azure_backend_builds_provider(self, credentials, settings, monkeypatch):
        credentials = credentials.model_copy(update={"tenant_id": TENANT_GUID})
        token = SessionToken(token=SecretStr("tok"), expires_on=4_000_000_000)
        provider_cls = MagicMock()
        provider_cls.return_value.acquire.return_value = token
        factory = MagicMock()
        monkeypatch.setattr("kvlifecycle.orchestration.context.TokenProvider", provider_cls)
        monkeypatch.setattr("kvlifecycle.orchestration.context.create_management_clients", factory)
        azure_settings = settings.model_copy(update={"backend": ClientBackend.AZURE})

        context = LifecycleContext.bootstrap(credentials, azure_settings)

        provider_cls.return_value.acquire.assert_called_once_with()
        credential = factory.call_args.args[1]
        assert credential.get_token("scope").token == "tok"
        assert context.clients is factory.return_value

    @pytest.mark.parametrize("tenant_id", ["contoso.onmicrosoft.com", "t1"])
    def test_azure_backend_requires_guid_tenant(self, credentials, settings, monkeypatch, tenant_id):
        provider_cls = MagicMock()
        factory = MagicMock()
        monkeypatch.setattr("kvlifecycle.orchestration.context.TokenProvider", provider_cls)
        monkeypatch.setattr("kvlifecycle.orchestration.context.create_management_clients", factory)
        credentials = credentials.model_copy(update={"tenant_id": tenant_id})
        azure_settings = settings.model_copy(update={"backend": ClientBackend.AZURE})

        with pytest.raises(MalformedIdentifierError) as exc_info:
            LifecycleContext.bootstrap(credentials, azure_settings)

        assert exc_info.value.field == "AZURE_TENANT_ID"
        provider_cls.assert_not_called()
        factory.assert_not_called()

    def test_memory_backend_accepts_short_tenant(self, credentials, settings, store):
        context = LifecycleContext.bootstrap(credentials, settings, store=store)

        report = LifecycleOrchestrator(context, echo=MagicMock()).run()

        assert context.credentials.tenant_id == "t1"
        assert report.succeeded


class TestTeardownConfirmation:
    def test_aborted_confirmation_names_its_step(self, context, store):
        store.inject_failure(ResourceKind.RESOURCE_GROUP, "delete", RuntimeError("group locked"))
        interactive = _with_settings(context, teardown_mode=TeardownMode.PROMPT)
        pause = MagicMock(side_effect=EOFError("stdin closed"))
        orchestrator = LifecycleOrchestrator(interactive, echo=MagicMock(), pause=pause)

        with pytest.raises(EOFError):
            orchestrator.run()

        report = orchestrator.report
        assert report.failed_step == "confirm_teardown"
        assert report.error == "stdin closed"
        assert "group locked" in report.cleanup_error
        assert report.outcome_of("confirm_teardown") == StepOutcome.FAILED

    def test_failure_outside_a_step_is_not_blamed_on_cleanup(self, context, store):
        store.inject_failure(ResourceKind.RESOURCE_GROUP, "delete", RuntimeError("group locked"))

        def echo(line):
            if line == "Deleting resource group":
                raise BrokenPipeError("stdout closed")

        orchestrator = LifecycleOrchestrator(context, echo=echo)

        with pytest.raises(BrokenPipeError):
            orchestrator.run()

        report = orchestrator.report
        assert report.failed_step == "run"
        assert report.error == "stdout closed"
        assert report.outcome_of(DELETE_GROUP_STEP) == StepOutcome.FAILED
        assert "group locked" in report.cleanup_error

    def test_confirmation_recorded_on_success(self, context):
        interactive = _with_settings(context, teardown_mode=TeardownMode.PROMPT)

        report = LifecycleOrchestrator(interactive, echo=MagicMock(), pause=MagicMock()).run()

        assert report.outcome_of("confirm_teardown") == StepOutcome.SUCCEEDED


def test_report_to_dict_uses_plain_values(context):
    report = LifecycleOrchestrator(context, echo=MagicMock()).run()

    data = report.to_dict()

    assert data["state"] == "torn_down"
    assert data["steps"][0] == {
        "step": "create_resource_group",
        "outcome": "succeeded",
        "state": "unstarted",
    }
    assert "failed_step" not in data
