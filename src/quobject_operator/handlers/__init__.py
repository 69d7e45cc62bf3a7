"""Handler modules for CRD resources."""

# Import handlers to register them - handlers register themselves via @kopf decorators
from . import artifacts  # noqa: F401
from . import bucket_claim  # noqa: F401
