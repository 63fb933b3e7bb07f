"""Exception types raised by the Host Bridge core.

Connectivity problems are never raised to callers: the connection
supervisor absorbs them into its state machine. The exceptions below
signal programming or configuration mistakes made by feature modules.
"""


class EntityError(ValueError):
    """Base class for entity contract violations."""


class DuplicateEntityError(EntityError):
    """Two live entities were given the same id."""


class ImmutableEntityError(EntityError):
    """An entity's id was changed after it was registered with the hub."""


class UnknownEntityKindError(EntityError):
    """An entity class declared a kind outside the closed set, or reused one."""


class IntegrationError(RuntimeError):
    """The integration table was declared inconsistently."""
