"""Commands carried on the BrowserSession event bus.

The bus handles one event at a time, so every command that reads or changes
session state (including opening tabs) is serialized through it. Handlers
return a JSON-able payload dict. No event has a timeout of its own; waits are
bounded by the engine's timeouts.
"""

from typing import Any

from bubus import BaseEvent


class NavigateToUrlEvent(BaseEvent[dict[str, Any]]):
	url: str
	wait_for_load: bool = True

	event_timeout: float | None = None


class GoBackEvent(BaseEvent[dict[str, Any]]):
	event_timeout: float | None = None


class GoForwardEvent(BaseEvent[dict[str, Any]]):
	event_timeout: float | None = None


class ClickElementEvent(BaseEvent[dict[str, Any]]):
	"""Exactly one of selector / index is set"""

	selector: str | None = None
	index: int | None = None

	event_timeout: float | None = None


class TypeTextEvent(BaseEvent[dict[str, Any]]):
	text: str
	selector: str | None = None
	index: int | None = None
	clear: bool = False

	event_timeout: float | None = None


class GetTextEvent(BaseEvent[dict[str, Any]]):
	"""Reads the whole page's text when neither selector nor index is set"""

	selector: str | None = None
	index: int | None = None

	event_timeout: float | None = None


class EvaluateEvent(BaseEvent[dict[str, Any]]):
	script: str

	event_timeout: float | None = None


class ExtractDomEvent(BaseEvent[dict[str, Any]]):
	simplify: bool = True

	event_timeout: float | None = None


class NewTabEvent(BaseEvent[dict[str, Any]]):
	url: str

	event_timeout: float | None = None


class SwitchTabEvent(BaseEvent[dict[str, Any]]):
	tab_index: int

	event_timeout: float | None = None


class CloseTabEvent(BaseEvent[dict[str, Any]]):
	event_timeout: float | None = None


class ListTabsEvent(BaseEvent[dict[str, Any]]):
	event_timeout: float | None = None
