"""
Snapshot Example

The dispatcher can be used without a server: this prints the status and
headers Relay would send for each of the given paths, which is handy to
check how files are going to be typed.

Usage:
    python snapshot.py DIRECTORY PATH...
"""

import sys

from relay import RelayConfig, RequestDispatcher

if __name__ == "__main__":
	dispatcher = RequestDispatcher(RelayConfig.Make(sys.argv[1], liveReload=False))
	for path in sys.argv[2:]:
		res = dispatcher.dispatch(path)
		print(f"{path}: {res.status} {res.message}")
		for k, v in res.headers.headers.items():
			print(f"  {k}: {v}")

# EOF
