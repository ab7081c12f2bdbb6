import importlib.resources
import json
import logging
from functools import cache
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from browser_pilot.dom.views import DomTree, ElementNode
from browser_pilot.exceptions import ExtractionFailedError
from browser_pilot.utils import time_execution_async, time_execution_sync

if TYPE_CHECKING:
	from playwright.async_api import Page

DOM_EXTRACTION_SCRIPT_VERSION = 2


@cache
def get_extraction_script() -> str:
	return importlib.resources.files('browser_pilot.dom').joinpath('extract_dom.js').read_text(encoding='utf-8')


def _replace_lone_surrogates(value: Any) -> Any:
	"""Lone UTF-16 surrogates (half of a broken emoji) become U+FFFD"""
	if isinstance(value, str):
		return value.encode('utf-16', 'surrogatepass').decode('utf-16', 'replace')
	if isinstance(value, list):
		return [_replace_lone_surrogates(item) for item in value]
	if isinstance(value, dict):
		return {_replace_lone_surrogates(key): _replace_lone_surrogates(item) for key, item in value.items()}
	return value


class DomService:
	"""
	Takes indexed snapshots of a page.

	Each call to extract() runs the extraction script in the page, parses the
	result into an ElementNode tree and numbers the interactive, visible
	elements in document order. A snapshot is only valid for the page state it
	was taken from; navigating invalidates every index in it.
	"""

	def __init__(self, page: 'Page', logger: logging.Logger | None = None):
		self.page = page
		self.logger = logger or logging.getLogger(__name__)

	@time_execution_async('--extract_dom')
	async def extract(self) -> DomTree:
		raw = await self._evaluate_extraction_script()
		root = self.parse_extraction_result(raw)
		tree = DomTree(root)
		tree.build_selector_map()
		self.logger.debug(
			f'🌳 Extracted DOM (script v{DOM_EXTRACTION_SCRIPT_VERSION}): '
			f'{tree.count_elements()} elements, {tree.count_interactive()} interactive'
		)
		return tree

	async def extract_simplified(self) -> DomTree:
		tree = await self.extract()
		tree.simplify()
		return tree

	async def _evaluate_extraction_script(self) -> Any:
		try:
			return await self.page.evaluate(get_extraction_script())
		except Exception as e:
			raise ExtractionFailedError(f'Failed to execute DOM extraction script: {type(e).__name__}: {e}') from e

	@staticmethod
	@time_execution_sync('--parse_extraction_result')
	def parse_extraction_result(raw: Any) -> ElementNode:
		"""The script hands back a JSON string; anything else is a parse failure."""
		if raw is None:
			raise ExtractionFailedError('No value returned from DOM extraction')
		if not isinstance(raw, str):
			raise ExtractionFailedError(f'DOM extraction returned {type(raw).__name__}, expected a JSON string')
		try:
			data = json.loads(raw)
		except json.JSONDecodeError as e:
			raise ExtractionFailedError(f'Failed to parse DOM JSON: {e}') from e
		try:
			return ElementNode.model_validate(_replace_lone_surrogates(data))
		except ValidationError as e:
			raise ExtractionFailedError(f'DOM JSON does not match the element schema: {e}') from e
