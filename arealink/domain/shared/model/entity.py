"""Base class for domain entities."""

from pydantic import BaseModel, ConfigDict


class Entity(BaseModel):
    """A domain object with identity.

    Entities are mutable pydantic models; assignments are re-validated so
    invariants declared on fields hold after mutation.
    """

    model_config = ConfigDict(validate_assignment=True, arbitrary_types_allowed=True)
