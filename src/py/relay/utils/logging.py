import os
import sys
from contextvars import ContextVar
from enum import Enum
from typing import Any, Callable, NamedTuple, TextIO, TypeAlias

from ..config import LOG_LEVEL

# --
# Structured logging to stderr. Each entry is a single line with the origin,
# an optional icon, the message and its context as `Key=value` pairs, coloured
# by level unless `NO_COLOR` is set.

# SEE: https://no-color.org/
NO_COLOR: bool = "NO_COLOR" in os.environ
FORCE_COLOR: bool = "FORCE_COLOR" in os.environ
COLOR: bool = FORCE_COLOR or not NO_COLOR

LogOrigin: ContextVar[str] = ContextVar("LogOrigin", default="relay")

TValue: TypeAlias = bool | int | float | str | None


class Term:
	BOLD: str = "\033[1m" if COLOR else ""
	RESET: str = "\033[0m" if COLOR else ""

	@staticmethod
	def Color(color: int) -> str:
		return f"\033[0;38;5;{color}m" if COLOR else ""


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30
	Error = 40  # A managed error
	Exception = 50  # An un-managed error


LOG_LEVEL_COLOR: dict[LogLevel, int] = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
	LogLevel.Exception: 124,
}

THRESHOLD: LogLevel = {
	"debug": LogLevel.Debug,
	"info": LogLevel.Info,
	"warning": LogLevel.Warning,
	"error": LogLevel.Error,
}.get(LOG_LEVEL, LogLevel.Info)


class LogEntry(NamedTuple):
	origin: str
	level: LogLevel
	message: str
	context: dict[str, TValue]
	icon: str | None = None
	# Events are named occurrences, like a request, with an optional value
	isEvent: bool = False
	value: Any = None


def formatValue(value: Any) -> str:
	if value is None or value == "":
		return "◌"
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	elif isinstance(value, str) and " " in value:
		return repr(value)
	elif isinstance(value, (list, tuple)):
		return ",".join(formatValue(_) for _ in value)
	else:
		return str(value)


def formatEntry(entry: LogEntry) -> str:
	clr: str = Term.Color(LOG_LEVEL_COLOR[entry.level])
	head: str = f"{clr}{Term.BOLD}[{entry.origin}]"
	if entry.isEvent:
		head += f" {entry.message}{Term.RESET}"
		if entry.value is not None:
			head += f" {formatValue(entry.value)}"
	else:
		head += Term.RESET
		if entry.icon:
			head += f" {entry.icon}"
		head += f" {entry.message}"
	context: str = " ".join(
		f"{Term.BOLD}{k}{Term.RESET}={formatValue(v)}"
		for k, v in entry.context.items()
	)
	return f"{head} {context}{Term.RESET}" if context else f"{head}{Term.RESET}"


def send(entry: LogEntry, stream: TextIO | None = None) -> LogEntry:
	if entry.level.value >= THRESHOLD.value:
		out = stream or sys.stderr
		out.write(formatEntry(entry) + "\n")
		out.flush()
	return entry


def log(
	level: LogLevel,
	message: str,
	context: dict[str, TValue],
	*,
	icon: str | None = None,
	isEvent: bool = False,
	value: Any = None,
) -> LogEntry:
	return send(
		LogEntry(LogOrigin.get(), level, message, context, icon, isEvent, value)
	)


def debug(message: str, *, icon: str | None = None, **context: TValue) -> LogEntry:
	return log(LogLevel.Debug, message, context, icon=icon)


def info(message: str, *, icon: str | None = None, **context: TValue) -> LogEntry:
	return log(LogLevel.Info, message, context, icon=icon)


def warning(message: str, *, icon: str | None = None, **context: TValue) -> LogEntry:
	return log(LogLevel.Warning, message, context, icon=icon)


def error(
	message: str, code: str | int | None = None, *, icon: str | None = None, **context: TValue
) -> LogEntry:
	"""Logs a managed error, identified by an optional `code`."""
	if code is not None:
		context = {"Code": code, **context}
	return log(LogLevel.Error, message, context, icon=icon)


def event(name: str, value: Any = None, **context: TValue) -> LogEntry:
	return log(LogLevel.Info, name, context, isEvent=True, value=value)


def exception(exception: BaseException, message: str | None = None) -> BaseException:
	"""Writes the exception and its traceback to stderr. This never raises,
	so that it can be used within exception handlers, and returns the
	exception so that it can be re-raised with `raise exception(e)`."""
	try:
		name: str = f"[{exception.__class__.__name__}] {exception}"
		lines: list[str] = [f"!!! EXCP {f'{message}: {name}' if message else name}"]
		tb = exception.__traceback__
		while tb:
			code = tb.tb_frame.f_code
			lines.append(
				f"... in {code.co_name:15s} at {tb.tb_lineno:4d} in {code.co_filename}"
			)
			tb = tb.tb_next
		sys.stderr.write("\n".join(lines) + "\n")
		sys.stderr.flush()
	except Exception:  # nosec: B110
		pass
	return exception


def logged(item: Callable[..., Any]) -> bool:
	"""Tells if the given logging function is currently enabled, so that
	costly log entries are only built when they are going to be output."""
	if item is debug:
		return THRESHOLD is LogLevel.Debug
	elif item is info or item is event:
		return THRESHOLD.value <= LogLevel.Info.value
	elif item is warning:
		return THRESHOLD.value <= LogLevel.Warning.value
	else:
		return True


# EOF
