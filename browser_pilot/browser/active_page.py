"""Picking the page the next command should act on."""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from browser_pilot.exceptions import NoActivePageError

if TYPE_CHECKING:
	from playwright.async_api import Page

PAGE_STATE_SCRIPT = "() => ({visible: document.visibilityState === 'visible', focused: document.hasFocus()})"


class ActivePageResolver:
	"""Chooses the user-visible, focused page out of all open pages.

	Pass 1 takes the first page that is both visible and focused. Headless and
	automated browsers often have no OS-level focus at all, so pass 2 falls back
	to the first page that is merely visible. Pages whose state cannot be read
	(crashed, closed, detached) are skipped. Every call re-reads every page.
	"""

	def __init__(self, logger: logging.Logger | None = None):
		self.logger = logger or logging.getLogger(__name__)

	async def _read_state(self, page: 'Page') -> tuple[bool, bool] | None:
		try:
			state: Any = await page.evaluate(PAGE_STATE_SCRIPT)
		except Exception as e:
			self.logger.debug(f'Skipping page while resolving active page: {type(e).__name__}: {e}')
			return None
		if not isinstance(state, dict):
			return None
		return bool(state.get('visible')), bool(state.get('focused'))

	async def resolve(self, pages: Sequence['Page']) -> 'Page':
		states: list[tuple['Page', bool, bool]] = []
		for page in pages:
			state = await self._read_state(page)
			if state is not None:
				states.append((page, *state))

		for page, visible, focused in states:
			if visible and focused:
				return page

		for page, visible, _ in states:
			if visible:
				return page

		raise NoActivePageError(f'No visible page among {len(pages)} open page(s)')
