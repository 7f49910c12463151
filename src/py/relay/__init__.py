from .config import RelayConfig  # NOQA: F401
from .dispatcher import RequestDispatcher  # NOQA: F401
from .http.model import HTTPRequest, HTTPResponse  # NOQA: F401
from .server import run  # NOQA: F401

__version__ = "1.0.0"

# EOF
