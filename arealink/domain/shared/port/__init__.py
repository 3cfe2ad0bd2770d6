"""Base class for ports (interfaces implemented by infrastructure adapters)."""

from typing import Protocol


class Port(Protocol):
    """Marker base for all ports.

    Ports are Protocols declared in the domain layer. Adapters in
    infrastructure/ subclass them explicitly.
    """
