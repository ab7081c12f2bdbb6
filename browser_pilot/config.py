"""Environment-driven configuration for browser-pilot.

Values are read from the environment every time they are accessed, so tests and
embedding applications can change them at runtime. A ``.env`` file in the
working directory is loaded once on import.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

TRUTHY_VALUES = frozenset({'1', 'true', 't', 'yes', 'y', 'on'})


def _env_bool(name: str, default: bool) -> bool:
	value = os.getenv(name)
	if value is None or value.strip() == '':
		return default
	return value.strip().lower() in TRUTHY_VALUES


def _env_int(name: str, default: int) -> int:
	value = os.getenv(name)
	if not value:
		return default
	try:
		return int(value)
	except ValueError:
		return default


class Config:
	"""Lazy view over the BROWSER_PILOT_* environment variables"""

	@property
	def BROWSER_PILOT_LOGGING_LEVEL(self) -> str:
		return os.getenv('BROWSER_PILOT_LOGGING_LEVEL', 'info').lower()

	@property
	def BROWSER_PILOT_SETUP_LOGGING(self) -> bool:
		return _env_bool('BROWSER_PILOT_SETUP_LOGGING', True)

	@property
	def BROWSER_PILOT_HEADLESS(self) -> bool:
		return _env_bool('BROWSER_PILOT_HEADLESS', True)

	@property
	def BROWSER_PILOT_EXECUTABLE_PATH(self) -> str | None:
		return os.getenv('BROWSER_PILOT_EXECUTABLE_PATH') or None

	@property
	def BROWSER_PILOT_USER_DATA_DIR(self) -> Path | None:
		value = os.getenv('BROWSER_PILOT_USER_DATA_DIR')
		return Path(value).expanduser() if value else None

	@property
	def BROWSER_PILOT_CDP_URL(self) -> str | None:
		return os.getenv('BROWSER_PILOT_CDP_URL') or None

	@property
	def BROWSER_PILOT_WINDOW_WIDTH(self) -> int:
		return _env_int('BROWSER_PILOT_WINDOW_WIDTH', 1280)

	@property
	def BROWSER_PILOT_WINDOW_HEIGHT(self) -> int:
		return _env_int('BROWSER_PILOT_WINDOW_HEIGHT', 800)

	@property
	def BROWSER_PILOT_CHROMIUM_SANDBOX(self) -> bool:
		return _env_bool('BROWSER_PILOT_CHROMIUM_SANDBOX', True)


CONFIG = Config()
