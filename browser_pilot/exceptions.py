from typing import Any

from bubus import BaseEvent


class BrowserError(Exception):
	"""Base class for all browser errors"""

	message: str
	details: dict[str, Any] | None = None
	while_handling_event: BaseEvent[Any] | None = None

	def __init__(self, message: str, details: dict[str, Any] | None = None, event: BaseEvent[Any] | None = None):
		self.message = message
		super().__init__(message)
		self.details = details
		self.while_handling_event = event

	def __str__(self) -> str:
		if self.details:
			return f'{self.message} ({self.details})'
		return self.message


class LaunchFailedError(BrowserError):
	"""The browser process could not be launched"""


class ConnectionFailedError(BrowserError):
	"""Could not attach to an already running browser"""


class NavigationFailedError(BrowserError):
	"""Navigation (or waiting for it to finish) failed"""


class ExtractionFailedError(BrowserError):
	"""The DOM extraction script failed to run or returned something unparseable"""


class ElementNotFoundError(BrowserError):
	"""No element in the page matches the locator"""


class TabOperationFailedError(BrowserError):
	"""Creating, switching or closing a tab failed"""


class NoActivePageError(BrowserError):
	"""No open page reports itself visible"""


class AmbiguousTargetError(BrowserError):
	"""Both a selector and an index were given for one element"""


class MissingTargetError(BrowserError):
	"""Neither a selector nor an index was given"""


class UnknownIndexError(BrowserError):
	"""The index is not in the current snapshot (re-extract the DOM after navigating)"""

	def __init__(self, index: int, reason: str | None = None):
		self.index = index
		super().__init__(reason or f'No element with index {index}', details=None)


class ActionFailedError(BrowserError):
	"""The engine failed while performing a command"""

	def __init__(self, command: str, reason: str, event: BaseEvent[Any] | None = None):
		self.command = command
		self.reason = reason
		super().__init__(f'Action {command!r} failed: {reason}', event=event)
