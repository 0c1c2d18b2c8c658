"""Camera projection and multi-source synchronization for multi-robot recordings."""

__version__ = "0.1.0"

from . import calibration
from . import field
from . import sync
from . import utils
from .exceptions import InvalidStateError, OutOfRangeError
