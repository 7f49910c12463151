import asyncio
import os
import socket
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from signal import SIGINT, SIGTERM
from typing import Any, Callable, NamedTuple

from .config import RelayConfig
from .dispatcher import RequestDispatcher
from .http.model import HTTPProcessingStatus, HTTPRequest, HTTPResponse
from .http.parser import HTTPParser
from .utils.io import LineTooLong
from .utils.logging import debug, error, event, exception, info, logged, warning

SERVER_ERROR: bytes = (
	b"HTTP/1.1 500 Internal Server Error\r\n"
	b"Content-Type: text/plain\r\n"
	b"Content-Length: 21\r\n"
	b"Connection: close\r\n"
	b"\r\n"
	b"Internal server error"
)

BAD_REQUEST: bytes = (
	b"HTTP/1.1 400 Bad Request\r\n"
	b"Content-Type: text/plain\r\n"
	b"Content-Length: 11\r\n"
	b"Connection: close\r\n"
	b"\r\n"
	b"Bad request"
)


@dataclass(slots=True)
class ServerState:
	isRunning: bool = True

	def stop(self) -> None:
		info("Server stopping…")
		self.isRunning = False

	def onException(
		self, loop: asyncio.AbstractEventLoop, context: dict[str, Any]
	) -> None:
		e = context.get("exception")
		if e:
			exception(e)


class ServerOptions(NamedTuple):
	backlog: int = 256
	# This is the polling timeout for accepting new requests, so that we
	# notice a stop request in a timely manner.
	polling: float = 1.0
	readsize: int = 4_096
	keepalive: float = 15.0
	# Alternate ports to try when the configured one is taken
	retries: int = 4
	workers: int = os.cpu_count() or 1
	condition: Callable[[], bool] | None = None
	stopSignals: bool = True


class AIOSocketServer:
	"""AsyncIO backend using sockets directly. Connections are processed as
	tasks on the loop, while the dispatcher, which does blocking filesystem
	work, runs on a thread pool."""

	@classmethod
	async def OnRequest(
		cls,
		dispatcher: RequestDispatcher,
		client: socket.socket,
		*,
		loop: asyncio.AbstractEventLoop,
		executor: ThreadPoolExecutor,
		config: RelayConfig,
		options: ServerOptions,
	) -> None:
		"""Processes the requests sent on the client socket, until the
		connection is closed or the keep-alive timeout expires."""
		parser: HTTPParser = HTTPParser()
		keep_alive: bool = True
		status: HTTPProcessingStatus = HTTPProcessingStatus.Processing
		req_count: int = 0
		res_count: int = 0
		try:
			while keep_alive:
				try:
					chunk = await asyncio.wait_for(
						loop.sock_recv(client, options.readsize),
						timeout=options.keepalive,
					)
				except asyncio.TimeoutError:
					status = HTTPProcessingStatus.Timeout
					break
				if not chunk:
					# A no-data means a close
					status = HTTPProcessingStatus.NoData
					break
				# With HTTP pipelining, we may receive more than one request
				# in the same payload.
				for atom in parser.feed(chunk):
					if not isinstance(atom, HTTPRequest):
						continue
					req_count += 1
					if config.logRequests and logged(event):
						event(atom.method, atom.path)
					keep_alive = keep_alive and atom.keepAlive
					if await cls.SendResponse(
						atom, dispatcher, client, loop=loop, executor=executor
					):
						res_count += 1
					else:
						keep_alive = False
					if not keep_alive:
						break
			if req_count != res_count:
				warning(
					"Incomplete responses",
					Requests=req_count,
					Responses=res_count,
					Status=status.name,
				)
		except LineTooLong as e:
			warning("Rejected request", Reason=str(e))
			await loop.sock_sendall(client, BAD_REQUEST)
		except (BrokenPipeError, ConnectionResetError):
			logged(debug) and debug("Client closed the connection early")
		except Exception as e:
			exception(e)
		finally:
			client.close()

	@staticmethod
	async def SendResponse(
		request: HTTPRequest,
		dispatcher: RequestDispatcher,
		client: socket.socket,
		*,
		loop: asyncio.AbstractEventLoop,
		executor: ThreadPoolExecutor,
	) -> HTTPResponse | None:
		"""Processes the request with the dispatcher and sends the response
		on the client socket."""
		try:
			res: HTTPResponse = await loop.run_in_executor(
				executor, dispatcher.process, request
			)
		except Exception as e:
			exception(e, f"Failed to process {request.method} {request.path}")
			await loop.sock_sendall(client, SERVER_ERROR)
			return None
		if not request.keepAlive:
			res.setHeader("Connection", "close")
		await loop.sock_sendall(client, res.head())
		if res.body:
			await loop.sock_sendall(client, res.body.payload)
		return res

	@staticmethod
	def Bind(config: RelayConfig, options: ServerOptions) -> tuple[socket.socket, int]:
		"""Binds the server socket, trying the next ports when the configured
		one is already in use."""
		server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
		server.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
		for port in range(config.port, config.port + options.retries + 1):
			try:
				server.bind((config.host, port))
				if port != config.port:
					info(f"Found alternate available port: {port}")
				# Port `0` lets the system pick one
				return server, server.getsockname()[1]
			except OSError:
				if port == config.port + options.retries:
					error(
						f"Unable to bind to {config.host}:{config.port}, aborting.",
						"HOSTPORTERR",
					)
					server.close()
					raise
				warning(f"Port {port} is in use, trying {port + 1}")
		raise RuntimeError("No port to bind to")

	@classmethod
	async def Serve(
		cls,
		config: RelayConfig,
		options: ServerOptions = ServerOptions(),
	) -> None:
		"""Main server coroutine."""
		server, port = cls.Bind(config, options)
		server.listen(options.backlog)
		# This is what we need to use it with asyncio
		server.setblocking(False)

		dispatcher = RequestDispatcher(config)
		executor = ThreadPoolExecutor(
			max_workers=options.workers, thread_name_prefix="relay"
		)
		tasks: set[asyncio.Task[None]] = set()
		loop = asyncio.get_running_loop()

		state = ServerState()
		# Signal handlers can only be registered from the main thread
		if (
			options.stopSignals
			and threading.current_thread() is threading.main_thread()
		):
			loop.add_signal_handler(SIGINT, state.stop)
			loop.add_signal_handler(SIGTERM, state.stop)
		loop.set_exception_handler(state.onException)

		info(
			f"Relay running at http://localhost:{port}",
			icon="📡",
			Host=config.host,
			Port=port,
		)
		info(
			"Live Reload",
			icon="✓" if config.liveReload else "⤬",
			Enabled=config.liveReload,
		)
		info("Serving", Root=str(config.root))

		try:
			while state.isRunning:
				if options.condition and not options.condition():
					break
				try:
					client, _ = await asyncio.wait_for(
						loop.sock_accept(server), timeout=options.polling
					)
				except asyncio.TimeoutError:
					continue
				except OSError as e:
					# This can be: [OSError] [Errno 24] Too many open files
					if e.errno == 24:
						await asyncio.sleep(0.1)
					else:
						exception(e)
					continue
				task = loop.create_task(
					cls.OnRequest(
						dispatcher,
						client,
						loop=loop,
						executor=executor,
						config=config,
						options=options,
					)
				)
				tasks.add(task)
				task.add_done_callback(tasks.discard)
		finally:
			server.close()
			for task in tasks:
				task.cancel()
			await asyncio.gather(*tasks, return_exceptions=True)
			executor.shutdown(wait=True)


def run(config: RelayConfig, options: ServerOptions = ServerOptions()) -> None:
	"""High level function to run the server until it is stopped."""
	try:
		asyncio.run(AIOSocketServer.Serve(config, options))
	except KeyboardInterrupt:
		event("ManualShutdown")
	event("EOK")


# EOF
