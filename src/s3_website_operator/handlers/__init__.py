"""Handler modules for CRD resources."""

# Import handlers to register them via their @kopf decorators
from . import website  # noqa: F401
