"""Base model class for all kvlifecycle records."""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class KVBaseModel(BaseModel):
    """Base model for kvlifecycle records.

    Enum fields hold their string values and assignments are validated, so
    records edited in place (a vault update request, a run report) stay
    well-formed.
    """
    model_config = ConfigDict(
        use_enum_values=True,
        validate_assignment=True
    )

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-compatible dict, secrets masked and None fields dropped."""
        return self.model_dump(mode="json", exclude_none=True)
