import pytest

from browser_pilot.browser.active_page import ActivePageResolver
from browser_pilot.exceptions import NoActivePageError


@pytest.fixture
def resolver():
	return ActivePageResolver()


async def test_visible_and_focused_page_wins(resolver, page_factory):
	background = page_factory(url='https://a.test/', visible=True, focused=False)
	foreground = page_factory(url='https://b.test/', visible=True, focused=True)

	assert await resolver.resolve([background, foreground]) is foreground


async def test_falls_back_to_first_visible_page(resolver, page_factory):
	hidden = page_factory(url='https://a.test/', visible=False)
	first_visible = page_factory(url='https://b.test/', visible=True)
	second_visible = page_factory(url='https://c.test/', visible=True)

	assert await resolver.resolve([hidden, first_visible, second_visible]) is first_visible


@pytest.mark.parametrize(
	'states, expected',
	[
		([(False, False), (True, True), (False, False)], 1),
		([(False, False), (False, False), (True, False)], 2),
		([(True, False), (False, True), (True, True)], 2),
		([(False, False), (False, False), (False, False)], None),
	],
)
async def test_three_pages(resolver, page_factory, states, expected):
	pages = [
		page_factory(url=f'https://page{i}.test/', visible=visible, focused=focused) for i, (visible, focused) in enumerate(states)
	]

	if expected is None:
		with pytest.raises(NoActivePageError):
			await resolver.resolve(pages)
	else:
		assert await resolver.resolve(pages) is pages[expected]


async def test_no_visible_page(resolver, page_factory):
	pages = [page_factory(visible=False), page_factory(visible=False, focused=True)]

	with pytest.raises(NoActivePageError):
		await resolver.resolve(pages)


async def test_no_pages(resolver):
	with pytest.raises(NoActivePageError):
		await resolver.resolve([])


async def test_unreadable_pages_are_skipped(resolver, page_factory):
	crashed = page_factory(url='https://crashed.test/', visible=True, focused=True, crashed=True)
	healthy = page_factory(url='https://ok.test/', visible=True)

	assert await resolver.resolve([crashed, healthy]) is healthy

	with pytest.raises(NoActivePageError):
		await resolver.resolve([crashed])


async def test_state_is_reread_on_every_call(resolver, page_factory):
	first = page_factory(visible=True, focused=True)
	second = page_factory(visible=True)

	assert await resolver.resolve([first, second]) is first

	first.focused = False
	second.focused = True
	assert await resolver.resolve([first, second]) is second
