import pytest

from browser_pilot.utils import normalize_url


@pytest.mark.parametrize(
	'url,expected',
	[
		('https://example.com', 'https://example.com'),
		('http://example.com/path?q=1', 'http://example.com/path?q=1'),
		('file:///tmp/page.html', 'file:///tmp/page.html'),
		('about:blank', 'about:blank'),
		('data:text/html,<p>hi</p>', 'data:text/html,<p>hi</p>'),
		('chrome://version', 'chrome://version'),
		('example.com', 'https://example.com'),
		('docs.python.org/3/', 'https://docs.python.org/3/'),
		('google', 'https://www.google.com'),
		('localhost:3000', 'http://localhost:3000'),
		('127.0.0.1:8080/health', 'http://127.0.0.1:8080/health'),
		('/relative/path', '/relative/path'),
		('./here', './here'),
		('../up', '../up'),
		('  example.com  ', 'https://example.com'),
	],
)
def test_normalize_url(url, expected):
	assert normalize_url(url) == expected


def test_normalize_url_is_idempotent():
	for url in ['example.com', 'google', 'localhost:3000', 'about:blank']:
		once = normalize_url(url)
		assert normalize_url(once) == once
