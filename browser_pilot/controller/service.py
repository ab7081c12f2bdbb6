import asyncio
import logging
from typing import Any

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
from browser_pilot.browser.session import BrowserSession
from browser_pilot.controller.registry.service import Registry
from browser_pilot.controller.registry.views import ToolManifestEntry
from browser_pilot.controller.views import (
	ActionResult,
	ClickElementAction,
	EvaluateAction,
	GetDomAction,
	GetTextAction,
	InputTextAction,
	NavigateAction,
	NewTabAction,
	NoParamsAction,
	SwitchTabAction,
	WaitAction,
)
from browser_pilot.exceptions import BrowserError
from browser_pilot.utils import normalize_url

logger = logging.getLogger(__name__)


class Controller:
	"""Routes named commands to the browser session.

	The session is passed in on every call; the controller itself holds no
	browser state, only the table of registered actions.
	"""

	def __init__(self, exclude_actions: list[str] | None = None):
		self.registry = Registry(exclude_actions)

		"""Register all default browser actions"""

		# Navigation Actions
		@self.registry.action('Navigate to a specified URL in the browser', param_model=NavigateAction)
		async def navigate(params: NavigateAction, browser_session: BrowserSession):
			normalized_url = normalize_url(params.url)
			await browser_session.dispatch(NavigateToUrlEvent(url=normalized_url, wait_for_load=params.wait_for_load))
			return {'original_url': params.url, 'normalized_url': normalized_url, 'waited': params.wait_for_load}

		@self.registry.action('Go back in browser history', param_model=NoParamsAction)
		async def go_back(_: NoParamsAction, browser_session: BrowserSession):
			return await browser_session.dispatch(GoBackEvent())

		@self.registry.action('Go forward in browser history', param_model=NoParamsAction)
		async def go_forward(_: NoParamsAction, browser_session: BrowserSession):
			return await browser_session.dispatch(GoForwardEvent())

		@self.registry.action('Wait for a specified duration in milliseconds', param_model=WaitAction)
		async def wait(params: WaitAction, browser_session: BrowserSession):
			await asyncio.sleep(params.duration_ms / 1000)
			return {'waited_ms': params.duration_ms}

		# Element Interaction Actions
		@self.registry.action(
			'Click on an element specified by CSS selector or by index from the last get_dom snapshot',
			param_model=ClickElementAction,
		)
		async def click(params: ClickElementAction, browser_session: BrowserSession):
			return await browser_session.dispatch(ClickElementEvent(selector=params.selector, index=params.index))

		@self.registry.action(
			'Fill an input field with text; target it by CSS selector or by index from the last get_dom snapshot',
			param_model=InputTextAction,
		)
		async def input(params: InputTextAction, browser_session: BrowserSession):
			return await browser_session.dispatch(
				TypeTextEvent(selector=params.selector, index=params.index, text=params.text, clear=params.clear)
			)

		# Content Actions
		@self.registry.action(
			'Extract text content from the page or from one element (CSS selector or index)', param_model=GetTextAction
		)
		async def get_text(params: GetTextAction, browser_session: BrowserSession):
			return await browser_session.dispatch(GetTextEvent(selector=params.selector, index=params.index))

		@self.registry.action(
			'Snapshot the page and number its interactive elements; indices stay valid until the page navigates',
			param_model=GetDomAction,
		)
		async def get_dom(params: GetDomAction, browser_session: BrowserSession):
			return await browser_session.dispatch(ExtractDomEvent(simplify=params.simplify))

		@self.registry.action('Execute JavaScript code in the browser context', param_model=EvaluateAction)
		async def evaluate(params: EvaluateAction, browser_session: BrowserSession):
			return await browser_session.dispatch(EvaluateEvent(script=params.script))

		# Tab Management Actions
		@self.registry.action('Open a URL in a new tab and bring it to the front', param_model=NewTabAction)
		async def new_tab(params: NewTabAction, browser_session: BrowserSession):
			normalized_url = normalize_url(params.url)
			await browser_session.dispatch(NewTabEvent(url=normalized_url))
			return {
				'original_url': params.url,
				'normalized_url': normalized_url,
				'message': f'Opened new tab with URL: {normalized_url}',
			}

		@self.registry.action('Switch to the tab at tab_index (see list_tabs)', param_model=SwitchTabAction)
		async def switch_tab(params: SwitchTabAction, browser_session: BrowserSession):
			return await browser_session.dispatch(SwitchTabEvent(tab_index=params.tab_index))

		@self.registry.action('Close the active tab', param_model=NoParamsAction)
		async def close_tab(_: NoParamsAction, browser_session: BrowserSession):
			return await browser_session.dispatch(CloseTabEvent())

		@self.registry.action('List open tabs', param_model=NoParamsAction)
		async def list_tabs(_: NoParamsAction, browser_session: BrowserSession):
			return await browser_session.dispatch(ListTabsEvent())

	def get_tool_manifest(self) -> list[ToolManifestEntry]:
		return self.registry.get_tool_manifest()

	async def execute(self, action_name: str, params: dict[str, Any] | None, browser_session: BrowserSession) -> ActionResult:
		"""Run one command; failures raise the typed BrowserError"""
		data = await self.registry.execute_action(action_name, params or {}, browser_session)
		return ActionResult(success=True, data=data)

	async def act(self, action_name: str, params: dict[str, Any] | None, browser_session: BrowserSession) -> ActionResult:
		"""Run one command and always return an envelope, never raise"""
		try:
			return await self.execute(action_name, params, browser_session)
		except BrowserError as e:
			logger.warning(f'❌ {action_name} failed: {e}')
			return ActionResult(success=False, error=str(e))
		except Exception as e:
			logger.error(f'❌ {action_name} failed unexpectedly: {type(e).__name__}: {e}')
			return ActionResult(success=False, error=f'{type(e).__name__}: {e}')
