"""
In-memory stand-ins for the parts of Playwright's async API that browser-pilot uses.

They let the session, controller and DOM service run without launching a
browser. Each FakePage keeps the DOM tree it will report to the extraction
script and a table of CSS selector -> FakeElement for element actions.
"""

import json
from typing import Any

import pytest

from browser_pilot.browser.active_page import PAGE_STATE_SCRIPT
from browser_pilot.browser.session import BrowserSession
from browser_pilot.dom.service import get_extraction_script


def make_node(tag_name: str, *children: dict, visible: bool = True, text: str | None = None, **attributes: str) -> dict:
	"""Build one node of the extraction script's JSON schema"""
	return {
		'tag_name': tag_name,
		'attributes': attributes,
		'text_content': text,
		'children': list(children),
		'is_visible': visible,
		'is_interactive': False,
		'bounding_box': {'x': 0, 'y': 0, 'width': 100, 'height': 20} if visible else None,
	}


def sample_dom() -> dict:
	"""
	body
	  header > button#nav-btn "Menu"              -> index 0
	  main > a[href=/page] "Click here"           -> index 1
	         div.content "Some text"
	         div.card.primary[onclick]            -> index 2
	         script
	         input (hidden)
	  footer > span[role=link] "Terms"            -> index 3
	"""
	return make_node(
		'body',
		make_node('header', make_node('button', text='Menu', id='nav-btn')),
		make_node(
			'main',
			make_node('a', text='Click here', href='/page'),
			make_node('div', text='Some text', **{'class': 'content'}),
			make_node('div', text='Card', onclick='open()', **{'class': 'card primary'}),
			make_node('script', text="alert('x')"),
			make_node('input', visible=False, type='text'),
		),
		make_node('footer', make_node('span', text='Terms', role='link')),
	)


class FakeElement:
	def __init__(self, text: str = '', click_error: Exception | None = None):
		self.text = text
		self.value = ''
		self.clicks = 0
		self.click_error = click_error


class FakeLocator:
	def __init__(self, page: 'FakePage', selector: str):
		self.page = page
		self.selector = selector

	@property
	def first(self) -> 'FakeLocator':
		return self

	def _element(self) -> FakeElement:
		if self.selector not in self.page.elements:
			raise TimeoutError(f'Timeout 30000ms exceeded waiting for locator({self.selector!r})')
		return self.page.elements[self.selector]

	async def wait_for(self, state: str = 'visible', timeout: float | None = None) -> None:
		self._element()

	async def click(self) -> None:
		element = self._element()
		if element.click_error is not None:
			raise element.click_error
		element.clicks += 1
		self.page.actions.append(('click', self.selector))

	async def fill(self, value: str) -> None:
		self._element().value = value
		self.page.actions.append(('fill', self.selector))

	async def press_sequentially(self, text: str) -> None:
		self._element().value += text
		self.page.actions.append(('type', self.selector))

	async def inner_text(self) -> str:
		return self._element().text


class FakeFrame:
	def __init__(self, url: str, parent_frame: 'FakeFrame | None' = None):
		self.url = url
		self.parent_frame = parent_frame


class FakePage:
	def __init__(
		self,
		url: str = 'about:blank',
		title: str = '',
		visible: bool = True,
		focused: bool = False,
		dom: dict | str | None = None,
		crashed: bool = False,
	):
		self.url = url
		self._title = title
		self.visible = visible
		self.focused = focused
		self.dom = dom if dom is not None else make_node('body')
		self.crashed = crashed
		self.context: 'FakeContext | None' = None
		self.elements: dict[str, FakeElement] = {}
		self.actions: list[tuple[str, str]] = []
		self.handlers: dict[str, list] = {}
		self.history = [url]
		self.history_position = 0
		self.evaluate_result: Any = None
		self.goto_error: Exception | None = None
		self.close_error: Exception | None = None
		self.brought_to_front = 0
		self._closed = False

	def on(self, event: str, handler) -> None:
		self.handlers.setdefault(event, []).append(handler)

	def emit(self, event: str, *args) -> None:
		for handler in self.handlers.get(event, []):
			handler(*args)

	async def evaluate(self, script: str, arg: Any = None) -> Any:
		if self.crashed:
			raise RuntimeError('Target page, context or browser has been closed')
		if script == PAGE_STATE_SCRIPT:
			return {'visible': self.visible, 'focused': self.focused}
		if script == get_extraction_script():
			return self.dom if isinstance(self.dom, str) else json.dumps(self.dom)
		if isinstance(self.evaluate_result, Exception):
			raise self.evaluate_result
		return self.evaluate_result

	def locator(self, selector: str) -> FakeLocator:
		return FakeLocator(self, selector)

	def _navigated(self, url: str) -> None:
		self.url = url
		self.emit('framenavigated', FakeFrame(url))

	async def goto(self, url: str, wait_until: str | None = None, **kwargs) -> None:
		if self.goto_error is not None:
			raise self.goto_error
		self.history = self.history[: self.history_position + 1] + [url]
		self.history_position += 1
		self._navigated(url)

	async def wait_for_load_state(self, state: str = 'load', **kwargs) -> None:
		pass

	async def go_back(self, **kwargs) -> None:
		if self.history_position > 0:
			self.history_position -= 1
			self._navigated(self.history[self.history_position])

	async def go_forward(self, **kwargs) -> None:
		if self.history_position < len(self.history) - 1:
			self.history_position += 1
			self._navigated(self.history[self.history_position])

	async def title(self) -> str:
		return self._title

	async def bring_to_front(self) -> None:
		self.brought_to_front += 1

	async def close(self) -> None:
		if self.close_error is not None:
			raise self.close_error
		self._closed = True
		if self.context is not None and self in self.context.pages:
			self.context.pages.remove(self)
		self.emit('close', self)

	def is_closed(self) -> bool:
		return self._closed


class FakeContext:
	def __init__(self, *pages: FakePage):
		self.pages: list[FakePage] = []
		self.handlers: dict[str, list] = {}
		for page in pages:
			self.add_page(page)

	def add_page(self, page: FakePage) -> FakePage:
		page.context = self
		self.pages.append(page)
		for handler in self.handlers.get('page', []):
			handler(page)
		return page

	def on(self, event: str, handler) -> None:
		self.handlers.setdefault(event, []).append(handler)

	async def new_page(self) -> FakePage:
		return self.add_page(FakePage())

	async def close(self) -> None:
		pass


@pytest.fixture
def fake_page() -> FakePage:
	page = FakePage(url='https://example.com/', title='Example', dom=sample_dom())
	page.elements['#nav-btn'] = FakeElement(text='Menu')
	page.elements['body > main:nth-child(2) > a:nth-child(1)'] = FakeElement(text='Click here')
	page.elements['div.card'] = FakeElement(text='Card')
	page.elements['body'] = FakeElement(text='Menu Click here Some text Card Terms')
	page.elements['#search'] = FakeElement()
	return page


@pytest.fixture
def fake_context(fake_page) -> FakeContext:
	return FakeContext(fake_page)


@pytest.fixture
async def browser_session(fake_context):
	"""A started BrowserSession driving the fake context"""
	browser_session = BrowserSession(browser_context=fake_context, headless=True)
	await browser_session.start()
	yield browser_session
	await browser_session.kill()


@pytest.fixture
def page_factory():
	return FakePage
