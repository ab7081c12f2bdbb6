from browser_pilot.config import CONFIG
from browser_pilot.logging_config import setup_logging

if CONFIG.BROWSER_PILOT_SETUP_LOGGING:
	setup_logging()

from browser_pilot.browser import BrowserProfile, BrowserSession  # noqa: E402
from browser_pilot.controller.service import Controller  # noqa: E402
from browser_pilot.controller.views import ActionResult  # noqa: E402
from browser_pilot.dom.service import DomService  # noqa: E402
from browser_pilot.dom.views import BoundingBox, DomTree, ElementNode  # noqa: E402
from browser_pilot.dom.selector_map import ElementSelector, SelectorMap  # noqa: E402
from browser_pilot.utils import normalize_url  # noqa: E402

__all__ = [
	'ActionResult',
	'BoundingBox',
	'BrowserProfile',
	'BrowserSession',
	'Controller',
	'DomService',
	'DomTree',
	'ElementNode',
	'ElementSelector',
	'SelectorMap',
	'normalize_url',
]
