import argparse
import os
import sys

from .config import PORT, RelayConfig
from .server import run


def main(args: list[str] | None = None) -> None:
	parser = argparse.ArgumentParser(
		prog="relay",
		description="Zero-config HTTP server for instant site previews",
		formatter_class=argparse.ArgumentDefaultsHelpFormatter,
	)
	parser.add_argument(
		"directory",
		nargs="?",
		default=".",
		help="Directory to serve",
	)
	parser.add_argument(
		"-p",
		"--port",
		action="store",
		dest="port",
		type=int,
		default=PORT,
		help="Port to run the server on",
	)
	parser.add_argument(
		"-d",
		"--disable-live-reload",
		action="store_true",
		dest="disableLiveReload",
		help="Disable live reload on file changes",
	)
	options = parser.parse_args(sys.argv[1:] if args is None else args)
	root = os.path.abspath(options.directory)
	if not os.path.exists(root):
		parser.error(f"Path does not exist: {root}")
	elif not os.path.isdir(root):
		parser.error(f"Path is not a directory: {root}")
	run(
		RelayConfig.Make(
			root,
			port=options.port,
			liveReload=not options.disableLiveReload,
		)
	)


if __name__ == "__main__":
	main()

# EOF
