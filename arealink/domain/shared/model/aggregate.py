"""Base class for aggregate roots."""

from arealink.domain.shared.model.entity import Entity


class Aggregate(Entity):
    """An entity that is the consistency boundary for its children."""
