"""Key Vault constants and enumerations.

Values mirror the strings accepted by the Azure Resource Manager
``Microsoft.KeyVault/vaults`` API so they can be passed to the SDK as-is.
"""

from enum import Enum


VAULT_RESOURCE_TYPE = "Microsoft.KeyVault/vaults"

# OData filter for the generic resource listing at subscription scope
VAULT_SUBSCRIPTION_FILTER = f"resourceType eq '{VAULT_RESOURCE_TYPE}'"


class KeyPermission(str, Enum):
    """Permissions a principal can hold on the keys of a vault."""

    ALL = "all"
    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"
    WRAP_KEY = "wrapKey"
    UNWRAP_KEY = "unwrapKey"
    SIGN = "sign"
    VERIFY = "verify"
    GET = "get"
    LIST = "list"
    CREATE = "create"
    UPDATE = "update"
    IMPORT = "import"
    DELETE = "delete"
    BACKUP = "backup"
    RESTORE = "restore"
    RECOVER = "recover"
    PURGE = "purge"


class SecretPermission(str, Enum):
    """Permissions a principal can hold on the secrets of a vault."""

    ALL = "all"
    GET = "get"
    LIST = "list"
    SET = "set"
    DELETE = "delete"
    BACKUP = "backup"
    RESTORE = "restore"
    RECOVER = "recover"
    PURGE = "purge"


class SkuName(str, Enum):
    """Pricing tier of a vault.

    Values:
        STANDARD: Software-protected keys
        PREMIUM: Adds HSM-protected keys
    """

    STANDARD = "standard"
    PREMIUM = "premium"


class SkuFamily(str, Enum):
    """SKU family. The API only defines family ``A``."""

    A = "A"
