"""Base service class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold the comment engine's logic: they own no transport
    and receive every collaborator through their constructor.
    """

    pass
