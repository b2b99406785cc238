"""Azure Resource Manager backed clients.

Wraps ``ResourceManagementClient`` (azure-mgmt-resource) and
``KeyVaultManagementClient`` (azure-mgmt-keyvault). SDK models are
converted to the package's typed records at this boundary and every
``AzureError`` is re-raised as RemoteOperationFailedError.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from azure.core.exceptions import AzureError, ResourceNotFoundError
from azure.mgmt.keyvault import KeyVaultManagementClient
from azure.mgmt.keyvault import models as kv_models
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.resource.resources import models as resource_models

from kvlifecycle.common.exceptions import ErrorCode, RemoteOperationFailedError
from kvlifecycle.constants import ResourceKind, VAULT_SUBSCRIPTION_FILTER
from kvlifecycle.logging import get_logger
from kvlifecycle.types.resources import (
    AccessPolicyEntry,
    Permissions,
    ResourceGroup,
    ResourceSummary,
    Sku,
    Vault,
    VaultCreateOrUpdateParameters,
    VaultProperties,
)
from kvlifecycle.utils.decorators import traced

logger = get_logger(__name__)


@contextmanager
def _remote_call(kind: ResourceKind, operation: str, name: Optional[str] = None) -> Iterator[None]:
    try:
        yield
    except ResourceNotFoundError as e:
        raise RemoteOperationFailedError(
            resource_kind=kind.value,
            operation=operation,
            cause=e,
            resource_name=name,
            error_code=ErrorCode.RESOURCE_NOT_FOUND,
        ) from e
    except AzureError as e:
        raise RemoteOperationFailedError(
            resource_kind=kind.value,
            operation=operation,
            cause=e,
            resource_name=name,
        ) from e


def _value(obj: Any) -> Any:
    """Unwrap SDK enum members to their string values."""
    return getattr(obj, "value", obj)


def _span_attributes(kind: ResourceKind, operation: str, **kwargs: Any) -> Dict[str, Any]:
    attributes = {
        "arm.resource_kind": kind.value,
        "arm.operation": operation,
    }
    for key, value in kwargs.items():
        if value is not None:
            attributes[f"arm.{key}"] = value
    return attributes


# SDK -> record conversions

def _permissions_from_sdk(permissions: Optional[kv_models.Permissions]) -> Permissions:
    if permissions is None:
        return Permissions()
    return Permissions(
        keys=[_value(p) for p in (permissions.keys or [])],
        secrets=[_value(p) for p in (permissions.secrets or [])],
    )


def resource_group_from_sdk(group: resource_models.ResourceGroup) -> ResourceGroup:
    properties = getattr(group, "properties", None)
    return ResourceGroup(
        name=group.name,
        location=group.location,
        id=group.id,
        tags=dict(group.tags) if group.tags else None,
        provisioning_state=getattr(properties, "provisioning_state", None),
    )


def vault_from_sdk(vault: kv_models.Vault) -> Vault:
    properties = None
    if vault.properties is not None:
        sdk_props = vault.properties
        policies = [
            AccessPolicyEntry(
                tenant_id=str(policy.tenant_id),
                object_id=policy.object_id,
                application_id=str(policy.application_id) if policy.application_id else None,
                permissions=_permissions_from_sdk(policy.permissions),
            )
            for policy in (sdk_props.access_policies or [])
        ]
        sku = Sku()
        if sdk_props.sku is not None:
            sku = Sku(family=_value(sdk_props.sku.family), name=_value(sdk_props.sku.name))
        properties = VaultProperties(
            tenant_id=str(sdk_props.tenant_id),
            sku=sku,
            access_policies=policies,
            enabled_for_deployment=sdk_props.enabled_for_deployment,
            enabled_for_disk_encryption=sdk_props.enabled_for_disk_encryption,
            enabled_for_template_deployment=sdk_props.enabled_for_template_deployment,
            enable_soft_delete=sdk_props.enable_soft_delete,
            vault_uri=sdk_props.vault_uri,
        )
    return Vault(
        name=vault.name,
        id=vault.id,
        type=vault.type,
        location=vault.location,
        tags=dict(vault.tags) if vault.tags else None,
        properties=properties,
    )


def resource_summary_from_sdk(resource: Any) -> ResourceSummary:
    return ResourceSummary(
        name=resource.name,
        id=resource.id,
        type=resource.type,
        location=resource.location,
        tags=dict(resource.tags) if resource.tags else None,
    )


# record -> SDK conversions

def vault_parameters_to_sdk(
    parameters: VaultCreateOrUpdateParameters,
) -> kv_models.VaultCreateOrUpdateParameters:
    props = parameters.properties
    return kv_models.VaultCreateOrUpdateParameters(
        location=parameters.location,
        tags=dict(parameters.tags) or None,
        properties=kv_models.VaultProperties(
            tenant_id=props.tenant_id,
            sku=kv_models.Sku(family=props.sku.family, name=props.sku.name),
            access_policies=[
                kv_models.AccessPolicyEntry(
                    tenant_id=policy.tenant_id,
                    object_id=policy.object_id,
                    application_id=policy.application_id,
                    permissions=kv_models.Permissions(
                        keys=list(policy.permissions.keys),
                        secrets=list(policy.permissions.secrets),
                    ),
                )
                for policy in props.access_policies
            ],
            enabled_for_deployment=props.enabled_for_deployment,
            enabled_for_disk_encryption=props.enabled_for_disk_encryption,
            enabled_for_template_deployment=props.enabled_for_template_deployment,
            enable_soft_delete=props.enable_soft_delete,
        ),
    )


class AzureResourceGroupsClient:
    """Resource group operations through ``ResourceManagementClient``."""

    kind = ResourceKind.RESOURCE_GROUP

    def __init__(self, client: ResourceManagementClient):
        self._client = client

    @traced(
        span_name="kvlifecycle.arm.resource_groups.create_or_update",
        attribute_getter=lambda self, name, location, tags=None: _span_attributes(
            ResourceKind.RESOURCE_GROUP, "create_or_update", name=name, location=location
        ),
    )
    def create_or_update(
        self,
        name: str,
        location: str,
        tags: Optional[Dict[str, str]] = None,
    ) -> ResourceGroup:
        with _remote_call(self.kind, "create_or_update", name):
            group = self._client.resource_groups.create_or_update(
                name,
                resource_models.ResourceGroup(location=location, tags=tags),
            )
        logger.debug(f"Resource group '{name}' created or updated in {location}")
        return resource_group_from_sdk(group)

    @traced(
        span_name="kvlifecycle.arm.resource_groups.get",
        attribute_getter=lambda self, name: _span_attributes(
            ResourceKind.RESOURCE_GROUP, "get", name=name
        ),
    )
    def get(self, name: str) -> ResourceGroup:
        with _remote_call(self.kind, "get", name):
            return resource_group_from_sdk(self._client.resource_groups.get(name))

    @traced(span_name="kvlifecycle.arm.resource_groups.list")
    def list(self, filter: Optional[str] = None) -> List[ResourceGroup]:
        with _remote_call(self.kind, "list"):
            return [
                resource_group_from_sdk(group)
                for group in self._client.resource_groups.list(filter=filter)
            ]

    @traced(
        span_name="kvlifecycle.arm.resource_groups.delete",
        attribute_getter=lambda self, name: _span_attributes(
            ResourceKind.RESOURCE_GROUP, "delete", name=name
        ),
    )
    def delete(self, name: str) -> None:
        with _remote_call(self.kind, "delete", name):
            poller = self._client.resource_groups.begin_delete(name)
            poller.result()
        logger.debug(f"Resource group '{name}' deleted")


class AzureVaultsClient:
    """Vault operations through ``KeyVaultManagementClient``.

    Subscription-wide listing goes through the generic resources API of
    ``ResourceManagementClient`` because the vaults API does not accept an
    arbitrary OData filter.
    """

    kind = ResourceKind.VAULT

    def __init__(
        self,
        client: KeyVaultManagementClient,
        resource_client: ResourceManagementClient,
    ):
        self._client = client
        self._resource_client = resource_client

    @traced(
        span_name="kvlifecycle.arm.vaults.create_or_update",
        attribute_getter=lambda self, resource_group, name, parameters: _span_attributes(
            ResourceKind.VAULT,
            "create_or_update",
            resource_group=resource_group,
            name=name,
            location=parameters.location,
        ),
    )
    def create_or_update(
        self,
        resource_group: str,
        name: str,
        parameters: VaultCreateOrUpdateParameters,
    ) -> Vault:
        with _remote_call(self.kind, "create_or_update", name):
            poller = self._client.vaults.begin_create_or_update(
                resource_group, name, vault_parameters_to_sdk(parameters)
            )
            vault = poller.result()
        return vault_from_sdk(vault)

    @traced(
        span_name="kvlifecycle.arm.vaults.get",
        attribute_getter=lambda self, resource_group, name: _span_attributes(
            ResourceKind.VAULT, "get", resource_group=resource_group, name=name
        ),
    )
    def get(self, resource_group: str, name: str) -> Vault:
        with _remote_call(self.kind, "get", name):
            return vault_from_sdk(self._client.vaults.get(resource_group, name))

    @traced(
        span_name="kvlifecycle.arm.vaults.list_by_resource_group",
        attribute_getter=lambda self, resource_group: _span_attributes(
            ResourceKind.VAULT, "list_by_resource_group", resource_group=resource_group
        ),
    )
    def list_by_resource_group(self, resource_group: str) -> List[Vault]:
        with _remote_call(self.kind, "list_by_resource_group"):
            return [
                vault_from_sdk(vault)
                for vault in self._client.vaults.list_by_resource_group(resource_group)
            ]

    @traced(span_name="kvlifecycle.arm.vaults.list_by_subscription")
    def list_by_subscription(
        self,
        filter: Optional[str] = VAULT_SUBSCRIPTION_FILTER,
    ) -> List[ResourceSummary]:
        with _remote_call(self.kind, "list_by_subscription"):
            return [
                resource_summary_from_sdk(resource)
                for resource in self._resource_client.resources.list(filter=filter)
            ]

    @traced(
        span_name="kvlifecycle.arm.vaults.delete",
        attribute_getter=lambda self, resource_group, name: _span_attributes(
            ResourceKind.VAULT, "delete", resource_group=resource_group, name=name
        ),
    )
    def delete(self, resource_group: str, name: str) -> None:
        with _remote_call(self.kind, "delete", name):
            self._client.vaults.delete(resource_group, name)
        logger.debug(f"Vault '{name}' deleted from '{resource_group}'")
