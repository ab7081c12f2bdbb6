import logging
import time
from collections.abc import Callable, Coroutine
from functools import wraps
from typing import Any, ParamSpec, TypeVar

logger = logging.getLogger(__name__)

P = ParamSpec('P')
R = TypeVar('R')

# Schemes passed through untouched by normalize_url()
URL_SCHEMES = ('http://', 'https://', 'file://', 'data:', 'about:', 'chrome://', 'chrome-extension://')
RELATIVE_URL_PREFIXES = ('/', './', '../')
LOOPBACK_PREFIXES = ('localhost', '127.0.0.1')


def time_execution_sync(additional_text: str = '') -> Callable[[Callable[P, R]], Callable[P, R]]:
	def decorator(func: Callable[P, R]) -> Callable[P, R]:
		@wraps(func)
		def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
			start_time = time.time()
			result = func(*args, **kwargs)
			execution_time = time.time() - start_time
			if execution_time > 0.25:
				logger.debug(f'⏳ {additional_text.strip("-")}() took {execution_time:.2f}s')
			return result

		return wrapper

	return decorator


def time_execution_async(
	additional_text: str = '',
) -> Callable[[Callable[P, Coroutine[Any, Any, R]]], Callable[P, Coroutine[Any, Any, R]]]:
	def decorator(func: Callable[P, Coroutine[Any, Any, R]]) -> Callable[P, Coroutine[Any, Any, R]]:
		@wraps(func)
		async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
			start_time = time.time()
			result = await func(*args, **kwargs)
			execution_time = time.time() - start_time
			if execution_time > 0.25:
				logger.debug(f'⏳ {additional_text.strip("-")}() took {execution_time:.2f}s')
			return result

		return wrapper

	return decorator


def normalize_url(url: str) -> str:
	"""Turn a loosely typed URL into something the browser can navigate to.

	'example.com'    -> 'https://example.com'
	'google'         -> 'https://www.google.com'
	'localhost:3000' -> 'http://localhost:3000'
	'about:blank'    -> 'about:blank'
	"""
	trimmed = url.strip()

	if trimmed.startswith(URL_SCHEMES):
		return trimmed

	if trimmed.startswith(RELATIVE_URL_PREFIXES):
		return trimmed

	if trimmed.startswith(LOOPBACK_PREFIXES):
		return f'http://{trimmed}'

	if '.' in trimmed:
		return f'https://{trimmed}'

	# a bare word is taken as a .com domain
	return f'https://www.{trimmed}.com'


def _log_pretty_url(s: str, max_len: int | None = 22) -> str:
	"""Truncate/pretty-print a URL with a maximum length, removing the protocol and www. prefix"""
	s = s.replace('https://', '').replace('http://', '').replace('www.', '')
	if max_len is not None and len(s) > max_len:
		return s[:max_len] + '…'
	return s
