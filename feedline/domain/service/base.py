"""Base class for domain services."""


class Service:
    """Marker base for stateless domain services.

    Services are built per request by the container and hold only their
    collaborators, never per-call state.
    """
