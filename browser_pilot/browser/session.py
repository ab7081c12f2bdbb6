import asyncio
import logging
import weakref
from functools import cached_property, partial
from typing import Any, TypeVar

import httpx
from bubus import BaseEvent, EventBus
from playwright.async_api import Browser, BrowserContext, Frame, Locator, Page, Playwright, async_playwright
from uuid_extensions import uuid7str

from browser_pilot.browser.active_page import ActivePageResolver
from browser_pilot.browser.events import (
	ClickElementEvent,
	CloseTabEvent,
	EvaluateEvent,
	ExtractDomEvent,
	GetTextEvent,
	GoBackEvent,
	GoForwardEvent,
	ListTabsEvent,
	NavigateToUrlEvent,
	NewTabEvent,
	SwitchTabEvent,
	TypeTextEvent,
)
from browser_pilot.browser.profile import BrowserProfile
from browser_pilot.browser.views import PageInfo, TabInfo
from browser_pilot.dom.selector_map import ElementSelector
from browser_pilot.dom.service import DomService
from browser_pilot.dom.views import DomTree
from browser_pilot.exceptions import (
	ActionFailedError,
	AmbiguousTargetError,
	BrowserError,
	ConnectionFailedError,
	ElementNotFoundError,
	LaunchFailedError,
	MissingTargetError,
	NavigationFailedError,
	TabOperationFailedError,
	UnknownIndexError,
)
from browser_pilot.utils import _log_pretty_url

T = TypeVar('T', bound=BaseEvent[Any])


class BrowserSession:
	"""
	The one owner of all mutable browser state: the engine handles, the page the
	agent last focused, and the most recent DOM snapshot.

	Every command goes through self.event_bus, which runs one handler at a time.
	Callers should use dispatch() (or the helper methods that wrap it) rather
	than touching pages directly, so tab creation and element actions can never
	interleave.
	"""

	def __init__(
		self,
		browser_profile: BrowserProfile | None = None,
		browser_context: BrowserContext | None = None,
		**profile_overrides: Any,
	):
		self.id = uuid7str()
		if browser_profile is None:
			browser_profile = BrowserProfile(**profile_overrides)
		elif profile_overrides:
			browser_profile = browser_profile.model_copy(update=profile_overrides)
		self.browser_profile = browser_profile

		self.playwright: Playwright | None = None
		self.browser: Browser | None = None
		self.browser_context: BrowserContext | None = browser_context
		self._owns_context = browser_context is None

		self.agent_focus: Page | None = None
		self._dom_snapshot: tuple[Page, DomTree] | None = None
		self._pages_lock = asyncio.Lock()
		self._watched_pages: weakref.WeakSet[Page] = weakref.WeakSet()
		self._started = False

		self.active_page_resolver = ActivePageResolver(logger=self.logger)
		self.event_bus = EventBus(name=f'BrowserSession_{self.id[-4:]}')
		self._register_handlers()

	@cached_property
	def logger(self) -> logging.Logger:
		return logging.getLogger(f'browser_pilot.BrowserSession🆂 {self.id[-4:]}')

	def __repr__(self) -> str:
		return f'BrowserSession🆂 {self.id[-4:]} (started={self._started})'

	def _register_handlers(self) -> None:
		self.event_bus.on(NavigateToUrlEvent, self.on_NavigateToUrlEvent)
		self.event_bus.on(GoBackEvent, self.on_GoBackEvent)
		self.event_bus.on(GoForwardEvent, self.on_GoForwardEvent)
		self.event_bus.on(ClickElementEvent, self.on_ClickElementEvent)
		self.event_bus.on(TypeTextEvent, self.on_TypeTextEvent)
		self.event_bus.on(GetTextEvent, self.on_GetTextEvent)
		self.event_bus.on(EvaluateEvent, self.on_EvaluateEvent)
		self.event_bus.on(ExtractDomEvent, self.on_ExtractDomEvent)
		self.event_bus.on(NewTabEvent, self.on_NewTabEvent)
		self.event_bus.on(SwitchTabEvent, self.on_SwitchTabEvent)
		self.event_bus.on(CloseTabEvent, self.on_CloseTabEvent)
		self.event_bus.on(ListTabsEvent, self.on_ListTabsEvent)

	# --- Lifecycle ---

	async def start(self) -> 'BrowserSession':
		if self._started:
			return self

		if self.browser_context is None:
			await self._setup_playwright()
		assert self.browser_context is not None

		self.browser_context.on('page', self._watch_page)
		for page in self.browser_context.pages:
			self._watch_page(page)

		if not self.browser_context.pages:
			try:
				page = await self.browser_context.new_page()
			except Exception as e:
				raise LaunchFailedError(f'Failed to create tab: {e}') from e
			self._watch_page(page)

		self.agent_focus = self.browser_context.pages[0]
		self._started = True
		self.logger.info(f'🌎 Browser session started with {len(self.browser_context.pages)} tab(s)')
		return self

	async def _setup_playwright(self) -> None:
		profile = self.browser_profile
		try:
			self.playwright = await async_playwright().start()
		except Exception as e:
			raise LaunchFailedError(f'Failed to start playwright: {e}') from e

		chromium = self.playwright.chromium

		if profile.cdp_url:
			ws_url = await self._resolve_cdp_ws_url(profile.cdp_url)
			try:
				self.browser = await chromium.connect_over_cdp(ws_url)
			except Exception as e:
				raise ConnectionFailedError(f'Failed to connect to {ws_url}: {e}') from e
			if self.browser.contexts:
				self.browser_context = self.browser.contexts[0]
			else:
				self.browser_context = await self.browser.new_context(viewport=profile.viewport)
			self.logger.debug(f'🔌 Connected to running browser at {ws_url}')
			return

		try:
			if profile.user_data_dir:
				profile.user_data_dir.mkdir(parents=True, exist_ok=True)
				self.browser_context = await chromium.launch_persistent_context(
					str(profile.user_data_dir), viewport=profile.viewport, **profile.launch_kwargs()
				)
			else:
				self.browser = await chromium.launch(**profile.launch_kwargs())
				self.browser_context = await self.browser.new_context(viewport=profile.viewport)
		except Exception as e:
			raise LaunchFailedError(str(e)) from e
		self.logger.debug(f'🚀 Launched chromium (headless={profile.headless})')

	@staticmethod
	async def _resolve_cdp_ws_url(cdp_url: str) -> str:
		"""Accept either a ws:// endpoint or the DevTools HTTP root"""
		if cdp_url.startswith('ws'):
			return cdp_url
		url = cdp_url.rstrip('/')
		if not url.endswith('/json/version'):
			url = url + '/json/version'
		try:
			async with httpx.AsyncClient() as client:
				version_info = await client.get(url)
				version_info.raise_for_status()
				return version_info.json()['webSocketDebuggerUrl']
		except (httpx.HTTPError, KeyError, ValueError) as e:
			raise ConnectionFailedError(f'Could not read websocket URL from {url}: {e}') from e

	async def stop(self) -> None:
		"""Stop the session, leaving the browser running if keep_alive is set"""
		if self.browser_profile.keep_alive:
			self.logger.debug('🕊️ keep_alive=True, leaving browser running')
			self._started = False
			await self.event_bus.stop()
			return
		await self.kill()

	async def kill(self) -> None:
		await self.close()
		if self._owns_context:
			for closer in (self.browser_context, self.browser):
				if closer is None:
					continue
				try:
					await closer.close()
				except Exception as e:
					self.logger.debug(f'Ignoring error while closing {type(closer).__name__}: {e}')
			if self.playwright is not None:
				await self.playwright.stop()
			self.browser_context = None
			self.browser = None
			self.playwright = None
		self.agent_focus = None
		self._dom_snapshot = None
		self._started = False
		await self.event_bus.stop()

	async def close(self) -> None:
		"""Close every tab. Best effort: a tab that fails to close does not stop the rest."""
		if self.browser_context is None:
			return
		for page in list(self.browser_context.pages):
			try:
				await page.close()
			except Exception as e:
				self.logger.debug(f'Ignoring error while closing tab {page.url}: {e}')

	async def __aenter__(self) -> 'BrowserSession':
		return await self.start()

	async def __aexit__(self, exc_type, exc_value, traceback) -> None:
		await self.stop()

	# --- Command channel ---

	async def dispatch(self, event: BaseEvent[Any]) -> dict[str, Any]:
		"""Run one command through the event bus and return its payload, re-raising handler errors as-is"""
		if not self._started:
			raise BrowserError('Browser session is not started')
		dispatched = self.event_bus.dispatch(event)
		await dispatched
		for event_result in dispatched.event_results.values():
			error = getattr(event_result, 'error', None)
			if isinstance(error, BaseException):
				if isinstance(error, BrowserError) and error.while_handling_event is None:
					error.while_handling_event = event
				raise error
		result = await dispatched.event_result(raise_if_any=True, raise_if_none=False)
		return result or {}

	# --- Pages and snapshot state ---

	def _watch_page(self, page: Page) -> None:
		if page in self._watched_pages:
			return
		self._watched_pages.add(page)
		page.on('framenavigated', partial(self._on_frame_navigated, page))
		page.on('close', self._on_page_closed)

	def _on_frame_navigated(self, page: Page, frame: Frame) -> None:
		if frame.parent_frame is not None:
			return
		if self._dom_snapshot is not None and self._dom_snapshot[0] is page:
			self._invalidate_dom_snapshot(f'page navigated to {_log_pretty_url(frame.url)}')

	def _on_page_closed(self, page: Page) -> None:
		if self.agent_focus is page:
			self.agent_focus = None
		if self._dom_snapshot is not None and self._dom_snapshot[0] is page:
			self._invalidate_dom_snapshot('page closed')

	def _invalidate_dom_snapshot(self, reason: str) -> None:
		if self._dom_snapshot is not None:
			self.logger.debug(f'🧹 Dropping DOM snapshot: {reason}')
		self._dom_snapshot = None

	def _context_pages(self) -> list[Page]:
		if self.browser_context is None:
			raise BrowserError('Browser session is not started')
		return [page for page in self.browser_context.pages if not page.is_closed()]

	async def get_pages(self) -> list[Page]:
		"""Open pages, the agent's focused page first and the rest in tab order"""
		async with self._pages_lock:
			pages = self._context_pages()
		if self.agent_focus is not None and self.agent_focus in pages:
			pages.remove(self.agent_focus)
			pages.insert(0, self.agent_focus)
		return pages

	async def get_current_page(self) -> Page:
		return await self.active_page_resolver.resolve(await self.get_pages())

	async def get_tabs(self) -> list[TabInfo]:
		async with self._pages_lock:
			pages = self._context_pages()
		tabs = []
		for tab_index, page in enumerate(pages):
			try:
				title = await page.title()
			except Exception:
				title = ''
			tabs.append(TabInfo(tab_index=tab_index, url=page.url, title=title, is_focused=page is self.agent_focus))
		return tabs

	def get_dom_snapshot(self) -> DomTree | None:
		return self._dom_snapshot[1] if self._dom_snapshot else None

	def _selector_for_index(self, page: Page, index: int) -> ElementSelector:
		if self._dom_snapshot is None or self._dom_snapshot[0] is not page:
			raise UnknownIndexError(index, f'No DOM snapshot for the current page, extract the DOM before using index {index}')
		selector = self._dom_snapshot[1].get_selector(index)
		if selector is None:
			raise UnknownIndexError(index)
		return selector

	@staticmethod
	def _check_target(selector: str | None, index: int | None) -> None:
		if selector is not None and index is not None:
			raise AmbiguousTargetError("Cannot specify both 'selector' and 'index'. Use one or the other.")
		if selector is None and index is None:
			raise MissingTargetError("Must specify either 'selector' or 'index'.")

	async def _resolve_target(self, selector: str | None, index: int | None) -> tuple[Page, str, str]:
		"""-> (page, method, css_selector) where method is 'css' or 'index'"""
		self._check_target(selector, index)
		page = await self.get_current_page()
		if index is not None:
			return page, 'index', self._selector_for_index(page, index).css_selector
		assert selector is not None
		return page, 'css', selector

	async def find_element(self, css_selector: str, page: Page | None = None) -> Locator:
		"""Wait (up to the engine timeout) for the selector to match and return the first match"""
		if page is None:
			page = await self.get_current_page()
		locator = page.locator(css_selector).first
		try:
			await locator.wait_for(state='attached')
		except Exception as e:
			raise ElementNotFoundError(f"Element '{css_selector}' not found: {e}") from e
		return locator

	async def _goto(self, page: Page, url: str, wait_for_load: bool = True) -> None:
		try:
			await page.goto(url, wait_until='commit')
		except Exception as e:
			raise NavigationFailedError(f'Failed to navigate to {url}: {e}') from e
		if wait_for_load:
			await self._wait_for_load(page)

	@staticmethod
	async def _wait_for_load(page: Page) -> None:
		try:
			await page.wait_for_load_state('load')
		except Exception as e:
			raise NavigationFailedError(f'Navigation timeout: {e}') from e

	# --- Convenience wrappers around dispatch() ---

	async def navigate(self, url: str, wait_for_load: bool = True) -> dict[str, Any]:
		return await self.dispatch(NavigateToUrlEvent(url=url, wait_for_load=wait_for_load))

	async def wait_for_navigation(self) -> None:
		await self._wait_for_load(await self.get_current_page())

	async def go_back(self) -> dict[str, Any]:
		return await self.dispatch(GoBackEvent())

	async def go_forward(self) -> dict[str, Any]:
		return await self.dispatch(GoForwardEvent())

	async def new_tab(self, url: str) -> dict[str, Any]:
		return await self.dispatch(NewTabEvent(url=url))

	async def switch_tab(self, tab_index: int) -> dict[str, Any]:
		return await self.dispatch(SwitchTabEvent(tab_index=tab_index))

	async def close_active_tab(self) -> dict[str, Any]:
		return await self.dispatch(CloseTabEvent())

	async def extract_dom(self, simplify: bool = False) -> DomTree:
		await self.dispatch(ExtractDomEvent(simplify=simplify))
		tree = self.get_dom_snapshot()
		assert tree is not None
		return tree

	# --- Event handlers ---

	async def on_NavigateToUrlEvent(self, event: NavigateToUrlEvent) -> dict[str, Any]:
		page = await self.get_current_page()
		self._invalidate_dom_snapshot('navigation requested')
		await self._goto(page, event.url, event.wait_for_load)
		self.agent_focus = page
		self.logger.info(f'🔗 Navigated to {event.url}')
		return {'url': page.url}

	async def on_GoBackEvent(self, event: GoBackEvent) -> dict[str, Any]:
		page = await self.get_current_page()
		self._invalidate_dom_snapshot('history back')
		try:
			await page.go_back()
		except Exception as e:
			raise NavigationFailedError(f'Failed to go back: {e}') from e
		self.logger.info('🔙 Navigated back')
		return {'url': page.url}

	async def on_GoForwardEvent(self, event: GoForwardEvent) -> dict[str, Any]:
		page = await self.get_current_page()
		self._invalidate_dom_snapshot('history forward')
		try:
			await page.go_forward()
		except Exception as e:
			raise NavigationFailedError(f'Failed to go forward: {e}') from e
		self.logger.info('🔜 Navigated forward')
		return {'url': page.url}

	async def on_ClickElementEvent(self, event: ClickElementEvent) -> dict[str, Any]:
		page, method, css_selector = await self._resolve_target(event.selector, event.index)
		element = await self.find_element(css_selector, page)
		try:
			await element.click()
		except Exception as e:
			raise ActionFailedError('click', str(e), event=event) from e

		self.logger.info(f'🖱️ Clicked {css_selector}' + (f' (index {event.index})' if event.index is not None else ''))
		result: dict[str, Any] = {'method': method, 'selector': css_selector}
		if event.index is not None:
			result['index'] = event.index
		return result

	async def on_TypeTextEvent(self, event: TypeTextEvent) -> dict[str, Any]:
		page, method, css_selector = await self._resolve_target(event.selector, event.index)
		element = await self.find_element(css_selector, page)
		try:
			if event.clear:
				await element.fill('')
			await element.press_sequentially(event.text)
		except Exception as e:
			raise ActionFailedError('input', str(e), event=event) from e

		self.logger.info(f'⌨️ Typed {len(event.text)} characters into {css_selector}')
		result: dict[str, Any] = {'method': method, 'selector': css_selector, 'text_length': len(event.text)}
		if event.index is not None:
			result['index'] = event.index
		return result

	async def on_GetTextEvent(self, event: GetTextEvent) -> dict[str, Any]:
		if event.selector is None and event.index is None:
			page = await self.get_current_page()
			method, css_selector = 'css', 'body'
			element = page.locator(css_selector).first
		else:
			page, method, css_selector = await self._resolve_target(event.selector, event.index)
			element = await self.find_element(css_selector, page)
		try:
			text = await element.inner_text()
		except Exception as e:
			raise ActionFailedError('get_text', str(e), event=event) from e
		result: dict[str, Any] = {'method': method, 'selector': css_selector, 'text': text, 'length': len(text)}
		if event.index is not None:
			result['index'] = event.index
		return result

	async def on_EvaluateEvent(self, event: EvaluateEvent) -> dict[str, Any]:
		page = await self.get_current_page()
		try:
			value = await page.evaluate(event.script)
		except Exception as e:
			raise ActionFailedError('evaluate', str(e), event=event) from e
		return {'result': value}

	async def on_ExtractDomEvent(self, event: ExtractDomEvent) -> dict[str, Any]:
		page = await self.get_current_page()
		dom_service = DomService(page, logger=self.logger)
		tree = await dom_service.extract()
		if event.simplify:
			tree.simplify()
		self._dom_snapshot = (page, tree)

		try:
			title = await page.title()
		except Exception:
			title = ''
		page_info = PageInfo(
			url=page.url,
			title=title,
			element_count=tree.count_elements(),
			interactive_count=tree.count_interactive(),
		)
		self.logger.info(f'🌳 Indexed {page_info.interactive_count} interactive elements on {_log_pretty_url(page.url)}')
		elements = [
			{'index': index, **selector.model_dump(include={'tag_name', 'css_selector', 'text'}, exclude_none=True)}
			for index, selector in tree.selector_map
		]
		return {**page_info.model_dump(), 'elements': elements, 'dom': tree.interactive_elements_to_string()}

	async def on_NewTabEvent(self, event: NewTabEvent) -> dict[str, Any]:
		assert self.browser_context is not None
		try:
			page = await self.browser_context.new_page()
		except Exception as e:
			raise TabOperationFailedError(f'Failed to create tab: {e}') from e
		self._watch_page(page)
		self._invalidate_dom_snapshot('new tab opened')

		await self._goto(page, event.url)
		try:
			await page.bring_to_front()
		except Exception as e:
			raise TabOperationFailedError(f'Failed to activate tab: {e}') from e
		self.agent_focus = page
		self.logger.info(f'🗂️ Opened new tab with {event.url}')
		return {'url': page.url}

	async def on_SwitchTabEvent(self, event: SwitchTabEvent) -> dict[str, Any]:
		async with self._pages_lock:
			pages = self._context_pages()
		if not 0 <= event.tab_index < len(pages):
			raise TabOperationFailedError(f'Tab index {event.tab_index} out of range ({len(pages)} open)')
		page = pages[event.tab_index]
		try:
			await page.bring_to_front()
		except Exception as e:
			raise TabOperationFailedError(f'Failed to activate tab: {e}') from e
		self.agent_focus = page
		self._invalidate_dom_snapshot('switched tab')
		self.logger.info(f'🔄 Switched to tab #{event.tab_index} ({_log_pretty_url(page.url)})')
		return {'tab_index': event.tab_index, 'url': page.url}

	async def on_CloseTabEvent(self, event: CloseTabEvent) -> dict[str, Any]:
		page = await self.get_current_page()
		closed_url = page.url
		try:
			await page.close()
		except Exception as e:
			raise TabOperationFailedError(f'Failed to close tab: {e}') from e
		self._invalidate_dom_snapshot('tab closed')

		async with self._pages_lock:
			remaining = self._context_pages()
		self.agent_focus = remaining[0] if remaining else None
		self.logger.info(f'🗑️ Closed tab {_log_pretty_url(closed_url)}')
		return {'closed_url': closed_url, 'remaining_tabs': len(remaining)}

	async def on_ListTabsEvent(self, event: ListTabsEvent) -> dict[str, Any]:
		return {'tabs': [tab.model_dump() for tab in await self.get_tabs()]}
