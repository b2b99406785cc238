"""Lifecycle orchestrator.

Runs the fixed sequence against the client facade::

    Unstarted -> GroupCreated -> VaultCreated -> VaultConfigured
              -> [SecondVaultCreated] -> Listed -> TornDown

Each transition requires the previous remote call to have succeeded. The
first failure aborts the run; the only recovery is the best-effort deletion
of the resource group registered when it was created. Nothing is retried.
"""

from contextlib import ExitStack, contextmanager
from typing import Callable, Dict, FrozenSet, Iterator, List, Optional

from kvlifecycle.constants import (
    KeyPermission,
    LifecycleState,
    SecretPermission,
    StepOutcome,
    TeardownMode,
    VAULT_SUBSCRIPTION_FILTER,
)
from kvlifecycle.common.exceptions import LifecycleStateError
from kvlifecycle.logging import get_logger
from kvlifecycle.observability.context import LifecycleRunContext, lifecycle_run_scope
from kvlifecycle.presenter import format_resource_summary, format_vault
from kvlifecycle.types.resources import (
    AccessPolicyEntry,
    Permissions,
    Sku,
    Vault,
    VaultCreateOrUpdateParameters,
    VaultProperties,
)
from .context import LifecycleContext
from .report import LifecycleReport
from .scope import DELETE_GROUP_STEP, resource_group_scope

logger = get_logger(__name__)

Echo = Callable[[str], None]
Pause = Callable[[str], None]
VaultMutation = Callable[[VaultCreateOrUpdateParameters], None]

TEARDOWN_PROMPT = "Press enter to delete the Key Vaults..."

_ALLOWED_FROM: Dict[LifecycleState, FrozenSet[LifecycleState]] = {
    LifecycleState.GROUP_CREATED: frozenset({LifecycleState.UNSTARTED}),
    LifecycleState.VAULT_CREATED: frozenset({LifecycleState.GROUP_CREATED}),
    LifecycleState.VAULT_CONFIGURED: frozenset({LifecycleState.VAULT_CREATED}),
    LifecycleState.SECOND_VAULT_CREATED: frozenset({LifecycleState.VAULT_CONFIGURED}),
    LifecycleState.LISTED: frozenset({
        LifecycleState.VAULT_CONFIGURED,
        LifecycleState.SECOND_VAULT_CREATED,
    }),
    LifecycleState.TORN_DOWN: frozenset({LifecycleState.LISTED}),
}


def _wait_for_enter(prompt: str) -> None:
    input(prompt)


def broaden_permissions(parameters: VaultCreateOrUpdateParameters) -> None:
    """Enable deployment access and grant all key and secret operations.

    Applied to the first access policy; everything else is left as it was.
    """
    properties = parameters.properties
    properties.enabled_for_deployment = True
    properties.enabled_for_template_deployment = True
    if not properties.access_policies:
        raise ValueError("Vault has no access policy to broaden")
    permissions = properties.access_policies[0].permissions
    permissions.keys = [KeyPermission.ALL]
    permissions.secrets = [SecretPermission.ALL]


class LifecycleOrchestrator:
    """Sequences the vault lifecycle for one run.

    Attributes:
        context: Credentials, settings and clients for the run
        state: Last state reached
        report: Step-by-step outcome, readable after ``run`` returns or raises
    """

    def __init__(
        self,
        context: LifecycleContext,
        echo: Echo = print,
        pause: Optional[Pause] = None,
    ):
        """Initialize the orchestrator.

        Args:
            context: Bootstrapped run context
            echo: Receives each human-readable output line or block
            pause: Called before teardown when the settings ask for a
                prompt; defaults to waiting for enter on stdin
        """
        self.context = context
        self.settings = context.settings
        self._groups = context.clients.resource_groups
        self._vaults = context.clients.vaults
        self._echo = echo
        self._pause = pause or _wait_for_enter
        self.state = LifecycleState.UNSTARTED
        self.report = LifecycleReport()

    # -- state handling -------------------------------------------------

    def _advance(self, target: LifecycleState) -> None:
        allowed = _ALLOWED_FROM[target]
        if self.state not in allowed:
            raise LifecycleStateError(
                current=self.state.value,
                expected=sorted(s.value for s in allowed),
                target=target.value,
            )
        logger.debug(f"Lifecycle state {self.state.value} -> {target.value}")
        self.state = target
        self.report.state = target

    def _require(self, *states: LifecycleState) -> None:
        if self.state not in states:
            raise LifecycleStateError(
                current=self.state.value,
                expected=[s.value for s in states],
                target="(step)",
            )

    @contextmanager
    def _step(self, name: str) -> Iterator[None]:
        try:
            yield
        except Exception as exc:
            self.report.record(name, StepOutcome.FAILED, str(exc))
            if self.report.failed_step is None:
                self.report.failed_step = name
                self.report.error = str(exc)
            raise
        self.report.record(name, StepOutcome.SUCCEEDED)

    # -- request building -------------------------------------------------

    @property
    def principal_object_id(self) -> str:
        return self.settings.principal_object_id or self.context.credentials.client_id

    def _policy(self, keys: List[KeyPermission], secrets: List[SecretPermission]) -> AccessPolicyEntry:
        return AccessPolicyEntry(
            tenant_id=self.context.credentials.tenant_id,
            object_id=self.principal_object_id,
            permissions=Permissions(keys=keys, secrets=secrets),
        )

    def initial_vault_parameters(self) -> VaultCreateOrUpdateParameters:
        """Parameters for the primary vault: read-only access for the principal."""
        return VaultCreateOrUpdateParameters(
            location=self.settings.location,
            tags=dict(self.settings.tags),
            properties=VaultProperties(
                tenant_id=self.context.credentials.tenant_id,
                sku=Sku(),
                access_policies=[
                    self._policy(
                        keys=[KeyPermission.GET, KeyPermission.LIST],
                        secrets=[SecretPermission.GET, SecretPermission.LIST],
                    )
                ],
            ),
        )

    def second_vault_parameters(self) -> VaultCreateOrUpdateParameters:
        return VaultCreateOrUpdateParameters(
            location=self.settings.second_location,
            tags=dict(self.settings.tags),
            properties=VaultProperties(
                tenant_id=self.context.credentials.tenant_id,
                sku=Sku(),
                access_policies=[
                    self._policy(
                        keys=[KeyPermission.LIST, KeyPermission.GET, KeyPermission.DECRYPT],
                        secrets=[SecretPermission.GET],
                    )
                ],
            ),
        )

    # -- operations ---------------------------------------------------------

    def update_vault(self, resource_group: str, name: str, mutate: VaultMutation) -> Vault:
        """Merge-then-replace update of a vault.

        The management API has no partial update: reads the current vault,
        applies ``mutate`` to a full copy of its state and resubmits the
        whole object.

        Args:
            resource_group: Group holding the vault
            name: Vault name
            mutate: Edits the request in place

        Returns:
            The vault as returned by the create-or-update call
        """
        current = self._vaults.get(resource_group, name)
        parameters = current.to_parameters()
        mutate(parameters)
        return self._vaults.create_or_update(resource_group, name, parameters)

    def create_vault(self) -> Vault:
        self._require(LifecycleState.GROUP_CREATED)
        name = self.settings.vault_name
        self._echo("Creating Key Vault")
        with self._step("create_vault"):
            vault = self._vaults.create_or_update(
                self.settings.group_name, name, self.initial_vault_parameters()
            )
        self.report.created_vaults.append(vault.name)
        self._advance(LifecycleState.VAULT_CREATED)
        return vault

    def show_vault(self, name: str) -> Vault:
        self._echo("Getting Key Vault")
        with self._step("get_vault"):
            vault = self._vaults.get(self.settings.group_name, name)
        self._echo(format_vault(vault))
        return vault

    def configure_vault(self) -> Vault:
        self._require(LifecycleState.VAULT_CREATED)
        self._echo("Updating Key Vault to enable deployments and broaden permissions")
        with self._step("configure_vault"):
            vault = self.update_vault(
                self.settings.group_name, self.settings.vault_name, broaden_permissions
            )
        self._echo(format_vault(vault))
        self._advance(LifecycleState.VAULT_CONFIGURED)
        return vault

    def create_second_vault(self) -> Vault:
        self._require(LifecycleState.VAULT_CONFIGURED)
        self._echo("Creating another Key Vault")
        with self._step("create_second_vault"):
            vault = self._vaults.create_or_update(
                self.settings.group_name,
                self.settings.second_vault_name,
                self.second_vault_parameters(),
            )
        self.report.created_vaults.append(vault.name)
        self._echo(format_vault(vault))
        self._advance(LifecycleState.SECOND_VAULT_CREATED)
        return vault

    def list_vaults(self) -> None:
        self._echo("List all Key Vaults in subscription")
        with self._step("list_vaults"):
            subscription_vaults = self._vaults.list_by_subscription(VAULT_SUBSCRIPTION_FILTER)
            for resource in subscription_vaults:
                self._echo(format_resource_summary(resource))

            self._echo("List all Key Vaults in resource group")
            group_vaults = self._vaults.list_by_resource_group(self.settings.group_name)
            for vault in group_vaults:
                self._echo(f"\t{vault.name}")

        self.report.subscription_vaults = [r.name for r in subscription_vaults]
        self.report.group_vaults = [v.name for v in group_vaults]
        self._advance(LifecycleState.LISTED)

    def delete_vaults(self) -> None:
        """Delete the vaults created in this run, in creation order."""
        self._require(LifecycleState.LISTED)
        self._echo("Deleting Key Vaults")
        for name in self.report.created_vaults:
            with self._step("delete_vault"):
                self._vaults.delete(self.settings.group_name, name)
            self._echo(f"\tDeleted '{name}'")

    def run(self) -> LifecycleReport:
        """Execute the whole lifecycle.

        Returns:
            The report of a fully successful run (state TORN_DOWN)

        Raises:
            LifecycleError: The first failure; ``report`` says which step
                failed and how the cleanup went
        """
        settings = self.settings
        run_ctx = LifecycleRunContext.generate(
            subscription_id=self.context.credentials.subscription_id,
            attributes={
                "resource_group": settings.group_name,
                "teardown_mode": TeardownMode(settings.teardown_mode).value,
                "second_vault": settings.create_second_vault,
            },
        )
        self.report.run_id = run_ctx.run_id

        try:
            with lifecycle_run_scope(run_ctx), ExitStack() as stack:
                self._echo("Creating resource group")
                with self._step("create_resource_group"):
                    stack.enter_context(
                        resource_group_scope(
                            self._groups,
                            settings.group_name,
                            settings.location,
                            report=self.report,
                        )
                    )
                self._advance(LifecycleState.GROUP_CREATED)

                self.create_vault()
                self.show_vault(settings.vault_name)
                self.configure_vault()
                if settings.create_second_vault:
                    self.create_second_vault()
                self.list_vaults()

                if settings.prompts_before_teardown:
                    with self._step("confirm_teardown"):
                        self._pause(TEARDOWN_PROMPT)
                self.delete_vaults()
                self._echo("Deleting resource group")
        except Exception as exc:
            if self.report.failed_step is None:
                # A failed cleanup after the error is reported as cleanup_error
                failed = [
                    s.step for s in self.report.steps
                    if s.outcome == StepOutcome.FAILED
                    and not (self.report.cleanup_error and s.step == DELETE_GROUP_STEP)
                ]
                self.report.failed_step = failed[-1] if failed else "run"
                self.report.error = str(exc)
            raise

        self._advance(LifecycleState.TORN_DOWN)
        logger.info(
            "Lifecycle completed",
            extra={"vaults": self.report.created_vaults},
        )
        return self.report
