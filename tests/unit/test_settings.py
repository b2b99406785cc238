import pytest
from pydantic import ValidationError

from kvlifecycle.constants import ClientBackend, TeardownMode
from kvlifecycle.settings import CloudSettings, LifecycleSettings, get_settings, reload_settings


class TestLifecycleSettings:
    def test_defaults(self, clean_env):
        settings = LifecycleSettings(_env_file=None)

        assert settings.location == "westus"
        assert settings.second_location == "eastus"
        assert settings.create_second_vault is True
        assert settings.prompts_before_teardown

    def test_reads_prefixed_environment(self, clean_env):
        clean_env.setenv("KVLIFECYCLE_GROUP_NAME", "g9")
        clean_env.setenv("KVLIFECYCLE_TEARDOWN_MODE", "auto")
        clean_env.setenv("KVLIFECYCLE_BACKEND", "memory")
        clean_env.setenv("KVLIFECYCLE_TAGS", '{"owner": "kv"}')

        settings = LifecycleSettings(_env_file=None)

        assert settings.group_name == "g9"
        assert settings.teardown_mode == TeardownMode.AUTO
        assert settings.backend == ClientBackend.MEMORY
        assert settings.tags == {"owner": "kv"}
        assert not settings.prompts_before_teardown

    def test_vault_names_must_differ(self, clean_env):
        with pytest.raises(ValidationError):
            LifecycleSettings(_env_file=None, vault_name="v1", second_vault_name="v1")

    def test_same_names_allowed_for_single_vault(self, clean_env):
        settings = LifecycleSettings(
            _env_file=None, vault_name="v1", second_vault_name="v1", create_second_vault=False
        )

        assert settings.vault_name == "v1"


def test_cloud_scope_strips_trailing_slash():
    cloud = CloudSettings(_env_file=None, resource_manager_endpoint="https://management.azure.com/")

    assert cloud.management_scope == "https://management.azure.com/.default"
    assert cloud.authority == "https://login.microsoftonline.com"


def test_get_settings_is_cached(clean_env):
    first = reload_settings()

    assert get_settings() is first
    assert get_settings(force_reload=True) is not first
