import json
from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict


class ElementSelector(BaseModel):
	"""Everything needed to find one indexed element again in the live page"""

	model_config = ConfigDict(extra='forbid', frozen=True)

	css_selector: str
	tag_name: str
	xpath: str | None = None
	id: str | None = None
	text: str | None = None  # preview, capped by cap_text_length()

	def best_selector(self) -> str:
		return self.css_selector


class SelectorMap:
	"""Insertion-ordered map from element index to the locator for that element.

	Indices start at 0 and only ever grow; removing an entry never renumbers
	the others and a removed index is not handed out again until clear().
	"""

	def __init__(self):
		self._map: dict[int, ElementSelector] = {}
		self._next_index = 0

	def register(self, selector: ElementSelector) -> int:
		index = self._next_index
		self._map[index] = selector
		self._next_index += 1
		return index

	def get(self, index: int) -> ElementSelector | None:
		return self._map.get(index)

	def update(self, index: int, selector: ElementSelector) -> None:
		if index not in self._map:
			raise KeyError(index)
		self._map[index] = selector

	def contains(self, index: int) -> bool:
		return index in self._map

	def remove(self, index: int) -> ElementSelector | None:
		return self._map.pop(index, None)

	def clear(self) -> None:
		self._map.clear()
		self._next_index = 0

	def indices(self) -> list[int]:
		return list(self._map.keys())

	def selectors(self) -> list[ElementSelector]:
		return list(self._map.values())

	def items(self) -> list[tuple[int, ElementSelector]]:
		return list(self._map.items())

	def find_by_css_selector(self, css_selector: str) -> int | None:
		for index, selector in self._map.items():
			if selector.css_selector == css_selector:
				return index
		return None

	def find_by_id(self, element_id: str) -> int | None:
		for index, selector in self._map.items():
			if selector.id == element_id:
				return index
		return None

	@property
	def is_empty(self) -> bool:
		return not self._map

	def to_json(self) -> str:
		data = {str(index): selector.model_dump(exclude_none=True) for index, selector in self._map.items()}
		return json.dumps(data, indent=2, ensure_ascii=False)

	def __len__(self) -> int:
		return len(self._map)

	def __contains__(self, index: object) -> bool:
		return index in self._map

	def __iter__(self) -> Iterator[tuple[int, ElementSelector]]:
		return iter(list(self._map.items()))

	def __repr__(self) -> str:
		return f'SelectorMap(len={len(self._map)}, next_index={self._next_index})'
