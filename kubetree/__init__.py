"""KubeTree - incremental Kubernetes resource tree with live change feeds."""

import logging

__version__ = "0.3.0"

# The terminal belongs to the TUI; records are dropped unless a handler is configured.
logging.getLogger(__name__).addHandler(logging.NullHandler())
