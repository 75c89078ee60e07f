"""Interactive line selector for shell pipelines."""

import logging

__version__ = "0.1.0"

# stderr belongs to the UI; records go nowhere unless a log file is configured
logging.getLogger("linepick").addHandler(logging.NullHandler())
