"""Handler modules for CRD resources."""

# Import handlers to register them - all handlers register themselves via @kopf decorators
from . import key  # noqa: F401
from . import repository  # noqa: F401
