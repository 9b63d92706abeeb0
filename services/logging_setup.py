from __future__ import annotations

import logging
import os
import sys
import threading
import time
from contextlib import contextmanager
from typing import Any
from loguru import logger
import traceback


LOG_FORMAT = (
	"{level.icon} <green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
	"<blue>{thread.name:^10}-{thread.id:^8}</blue> | "
	"[<level>{level:<8}</level>] | "
	"<white>{name}.{function}:{line}</white> | "
	"<level>{message}</level>"
)

DEFAULT_FILE_LEVEL = "DEBUG"

SENSITIVE_KEYS = frozenset({
	"authorization",
	"token", "access_token", "refresh_token", "authtoken",
	"password", "pwd", "pass",
})


def _install_global_exception_hooks() -> None:
	"""Ensure uncaught exceptions always end up in logs."""
	def _sys_hook(exc_type, exc_value, exc_tb):
		try:
			logger.opt(exception=(exc_type, exc_value, exc_tb)).critical("Uncaught exception")
		except Exception:
			sys.stderr.write("Uncaught exception:\n")
			traceback.print_exception(exc_type, exc_value, exc_tb, file=sys.stderr)

	def _thread_hook(args):
		thread_name = getattr(args.thread, "name", "unknown")
		try:
			logger.opt(exception=(args.exc_type, args.exc_value, args.exc_traceback)).critical(
				f"[_thread_hook] - uncaught_thread_exception - thread={thread_name}"
			)
		except Exception:
			sys.stderr.write(f"Uncaught exception in thread {thread_name}:\n")
			traceback.print_exception(args.exc_type, args.exc_value, args.exc_traceback, file=sys.stderr)

	sys.excepthook = _sys_hook
	threading.excepthook = _thread_hook


def _parse_level(level_value) -> str:
	"""
	Accepts:
	- int (logging.INFO style)
	- str ("INFO")
	Returns a Loguru level name.
	"""
	if isinstance(level_value, int):
		mapping = {
			logging.CRITICAL: "CRITICAL",
			logging.ERROR: "ERROR",
			logging.WARNING: "WARNING",
			logging.INFO: "INFO",
			logging.DEBUG: "DEBUG",
		}
		return mapping.get(level_value, "INFO")

	if isinstance(level_value, str):
		val = level_value.strip().upper()
		if val in ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"):
			return val

	return "INFO"


def setup_logging(
	app_name: str = "app",
	log_dir: str = "log",
	log_level: str | int | None = None,
	file_level: str | int | None = None,
) -> None:
	"""
	Loguru setup for the dashboard process:
	- console colored
	- rotating file (10 MB) with zip compression
	- retention count (50 files)
	- custom level colors
	"""

	configured_level = log_level if log_level is not None else os.getenv("LOG_LEVEL", "INFO")
	console_level = _parse_level(configured_level)
	configured_file_level = file_level if file_level is not None else os.getenv("LOG_FILE_LEVEL", DEFAULT_FILE_LEVEL)
	resolved_file_level = _parse_level(configured_file_level)

	os.makedirs(log_dir, exist_ok=True)
	log_path = get_log_file_path(app_name=app_name, log_dir=log_dir)

	logger.remove()

	logger.configure(
		handlers=[
			{
				"sink": sys.stdout,
				"format": LOG_FORMAT,
				"colorize": True,
				"level": console_level,
			},
			{
				"sink": log_path,
				"format": LOG_FORMAT,
				"rotation": "10 MB",
				"compression": "zip",
				"retention": 50,      # keep 50 rotated files
				"colorize": False,
				"level": resolved_file_level,
			},
		]
	)
	_install_global_exception_hooks()

	logger.level("ERROR", color="<fg #ff0000>")
	logger.level("WARNING", color="<fg #f9ff5c>")
	logger.level("INFO", color="<cyan>")
	logger.level("DEBUG", color="<fg #1cfc03>")
	logger.level("CRITICAL", color="<fg #960000>")
	logger.level("TRACE", color="<white>")
	logger.level("SUCCESS", color="<fg #00ff22>")

	logger.info(
		f"[setup_logging] - logger_initialized - app_name={app_name} console_level={console_level} file_level={resolved_file_level} log_path={log_path}"
	)


def get_log_file_path(app_name: str = "app", log_dir: str = "log") -> str:
	return os.path.join(log_dir, f"{app_name}.log")


def redact_for_log(value: Any) -> Any:
	if isinstance(value, dict):
		out = {}
		for k, v in value.items():
			if str(k).lower() in SENSITIVE_KEYS:
				out[k] = "***REDACTED***"
			else:
				out[k] = redact_for_log(v)
		return out

	if isinstance(value, list):
		return [redact_for_log(v) for v in value]

	return value


def summarize_for_log(payload: Any, *, max_items: int = 10, max_text: int = 140) -> Any:
	if payload is None:
		return None
	if isinstance(payload, dict):
		items = list(payload.items())[:max_items]
		return {str(k): summarize_for_log(v, max_items=max_items, max_text=max_text) for k, v in items}
	if isinstance(payload, (list, tuple, set)):
		limited = list(payload)[:max_items]
		return [summarize_for_log(v, max_items=max_items, max_text=max_text) for v in limited]
	text = str(payload)
	if len(text) > max_text:
		return f"{text[:max_text]}...({len(text)} chars)"
	return text


@contextmanager
def log_timing(method_name: str, **context: Any):
	start = time.perf_counter()
	context_txt = " ".join([f"{k}={summarize_for_log(v)}" for k, v in context.items()])
	logger.debug(f"[{method_name}] - start {context_txt}".strip())
	try:
		yield
		duration_ms = round((time.perf_counter() - start) * 1000, 2)
		logger.debug(f"[{method_name}] - end - duration_ms={duration_ms} {context_txt}".strip())
	except Exception:
		duration_ms = round((time.perf_counter() - start) * 1000, 2)
		logger.exception(f"[{method_name}] - failed - duration_ms={duration_ms} {context_txt}".strip())
		raise
