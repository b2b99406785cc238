from pydantic_settings import BaseSettings, SettingsConfigDict


class KVBaseSettings(BaseSettings):
    """Base class for all kvlifecycle settings.

    Values are read from the environment first, then from a ``.env`` file in
    the working directory, then from the defaults declared on each field.
    Subclasses set their own ``env_prefix``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        str_strip_whitespace=True,
    )
