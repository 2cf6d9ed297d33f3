from .events import Emitter
from .logs import configure_logging
