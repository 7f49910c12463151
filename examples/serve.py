"""
Preview Server Example

This starts Relay programmatically rather than through the `relay` command.
Features shown:
- Building a configuration for a given directory
- Tuning the server options (keep-alive, workers)
- Disabling live reload with `RELAY_LIVE_RELOAD=0`

Usage:
    python serve.py [DIRECTORY]

Test with:
    http://localhost:8080/                  # Index page or directory listing
    http://localhost:8080/__relay_check__   # Live reload check
"""

import sys
from os import getenv

from relay import RelayConfig, run
from relay.server import ServerOptions
from relay.utils.logging import info

if __name__ == "__main__":
	config = RelayConfig.Make(
		sys.argv[1] if len(sys.argv) > 1 else ".",
		liveReload=getenv("RELAY_LIVE_RELOAD", "1") == "1",
	)
	info("Starting preview server", Root=str(config.root))
	run(config, ServerOptions(keepalive=5.0, workers=4))

# EOF
