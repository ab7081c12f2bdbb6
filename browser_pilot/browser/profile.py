from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from browser_pilot.config import CONFIG

CHROME_DEFAULT_ARGS = [
	'--disable-blink-features=AutomationControlled',
	'--no-first-run',
	'--no-default-browser-check',
]


class BrowserProfile(BaseModel):
	"""How to get a browser: launch one, or connect to one that is already running"""

	model_config = ConfigDict(extra='forbid', validate_assignment=True)

	headless: bool = Field(default_factory=lambda: CONFIG.BROWSER_PILOT_HEADLESS)
	executable_path: str | None = Field(default_factory=lambda: CONFIG.BROWSER_PILOT_EXECUTABLE_PATH)
	user_data_dir: Path | None = Field(default_factory=lambda: CONFIG.BROWSER_PILOT_USER_DATA_DIR)
	cdp_url: str | None = Field(
		default_factory=lambda: CONFIG.BROWSER_PILOT_CDP_URL,
		description='DevTools websocket or HTTP root of a running browser; set to connect instead of launching',
	)
	window_width: int = Field(default_factory=lambda: CONFIG.BROWSER_PILOT_WINDOW_WIDTH, gt=0)
	window_height: int = Field(default_factory=lambda: CONFIG.BROWSER_PILOT_WINDOW_HEIGHT, gt=0)
	chromium_sandbox: bool = Field(default_factory=lambda: CONFIG.BROWSER_PILOT_CHROMIUM_SANDBOX)
	args: list[str] = Field(default_factory=list)
	keep_alive: bool = Field(default=False, description='leave the browser running when the session stops')

	def launch_args(self) -> list[str]:
		args = [*CHROME_DEFAULT_ARGS, f'--window-size={self.window_width},{self.window_height}', *self.args]
		return list(dict.fromkeys(args))

	def launch_kwargs(self) -> dict[str, Any]:
		"""Keyword arguments for chromium.launch() / launch_persistent_context()"""
		kwargs: dict[str, Any] = {
			'headless': self.headless,
			'args': self.launch_args(),
			'chromium_sandbox': self.chromium_sandbox,
		}
		if self.executable_path:
			kwargs['executable_path'] = self.executable_path
		return kwargs

	@property
	def viewport(self) -> dict[str, int]:
		return {'width': self.window_width, 'height': self.window_height}
