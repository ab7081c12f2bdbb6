from __future__ import annotations

from collections import Counter

from pydantic import BaseModel, Field

from browser_pilot.dom.clickable_elements import ClickableElementDetector
from browser_pilot.dom.selector_map import ElementSelector, SelectorMap
from browser_pilot.dom.utils import cap_text_length, child_css_path, child_xpath, class_names, css_escape

# Tags dropped by ElementNode.simplify()
NON_CONTENT_TAGS = frozenset({'script', 'style', 'noscript'})


class BoundingBox(BaseModel):
	"""Viewport-relative rectangle reported by the renderer"""

	x: float
	y: float
	width: float
	height: float

	def is_visible(self) -> bool:
		return self.width > 0 and self.height > 0

	def area(self) -> float:
		return self.width * self.height


class ElementNode(BaseModel):
	"""One element of the extracted page.

	Parents own their children outright; there are no back-references. The
	index is only ever set on nodes that were interactive and visible when the
	selector map was last built.
	"""

	tag_name: str
	attributes: dict[str, str] = Field(default_factory=dict)
	text_content: str | None = None
	children: list[ElementNode] = Field(default_factory=list)
	index: int | None = None
	is_visible: bool = False
	is_interactive: bool = False
	bounding_box: BoundingBox | None = None
	nth_child: int | None = None  # 1-based position among the live element's siblings, as reported by the page

	def add_attribute(self, key: str, value: str) -> None:
		self.attributes[key] = value

	def add_child(self, child: ElementNode) -> None:
		self.children.append(child)

	def get_attribute(self, key: str) -> str | None:
		return self.attributes.get(key)

	def has_class(self, class_name: str) -> bool:
		class_attr = self.attributes.get('class')
		if not class_attr:
			return False
		return class_name in class_attr.split()

	@property
	def id(self) -> str | None:
		return self.attributes.get('id')

	def is_tag(self, tag: str) -> bool:
		return self.tag_name.lower() == tag.lower()

	def compute_interactivity(self) -> bool:
		self.is_interactive = ClickableElementDetector.is_interactive(self)
		return self.is_interactive

	def simplify(self) -> None:
		"""Recursively drop script/style/noscript children. Running it twice changes nothing."""
		self.children = [child for child in self.children if child.tag_name.lower() not in NON_CONTENT_TAGS]
		for child in self.children:
			child.simplify()

	def to_simple_string(self) -> str:
		parts = [f'<{self.tag_name}']
		if self.id is not None:
			parts.append(f' id="{self.id}"')
		class_attr = self.attributes.get('class')
		if class_attr is not None:
			parts.append(f' class="{class_attr}"')
		if self.index is not None:
			parts.append(f' data-index="{self.index}"')
		parts.append('>')
		if self.text_content and self.text_content.strip():
			parts.append(self.text_content.strip())
		return ''.join(parts)


class DomTree:
	"""A snapshot of one page: the element tree plus the index -> locator map.

	The selector map is always rebuilt wholesale on a fresh SelectorMap and
	swapped in at the end, so root and selector_map never disagree.
	"""

	def __init__(self, root: ElementNode, selector_map: SelectorMap | None = None):
		self.root = root
		self.selector_map = selector_map if selector_map is not None else SelectorMap()

	def build_selector_map(self) -> SelectorMap:
		selector_map = SelectorMap()
		candidate_counts = self._count_locator_candidates()
		root_xpath = '/html/body' if self.root.is_tag('body') else f'//{self.root.tag_name}'
		self._traverse_and_index(self.root, self.root.tag_name, root_xpath, selector_map, candidate_counts)
		self.selector_map = selector_map
		return selector_map

	@classmethod
	def _traverse_and_index(
		cls, node: ElementNode, css_path: str, xpath: str, selector_map: SelectorMap, candidate_counts: Counter[str]
	) -> None:
		# pre-order: a parent is indexed before its children, children in document order
		node.compute_interactivity()
		if node.is_interactive and node.is_visible:
			node.index = selector_map.register(cls._build_selector(node, css_path, xpath, candidate_counts))
		else:
			node.index = None

		same_tag_counts: dict[str, int] = {}
		for position, child in enumerate(node.children, start=1):
			if child.nth_child is not None:
				position = child.nth_child
			tag = child.tag_name.lower()
			same_tag_counts[tag] = same_tag_counts.get(tag, 0) + 1
			cls._traverse_and_index(
				child,
				child_css_path(css_path, child.tag_name, position),
				child_xpath(xpath, tag, same_tag_counts[tag]),
				selector_map,
				candidate_counts,
			)

	def _count_locator_candidates(self) -> Counter[str]:
		"""How many nodes of the tree each #id and tag.class selector would match"""
		counts: Counter[str] = Counter()
		stack = [self.root]
		while stack:
			node = stack.pop()
			if node.id:
				counts[f'#{css_escape(node.id)}'] += 1
			for class_name in set(class_names(node.attributes.get('class'))):
				counts[f'{node.tag_name.lower()}.{css_escape(class_name)}'] += 1
			stack.extend(node.children)
		return counts

	@staticmethod
	def _build_selector(node: ElementNode, css_path: str, xpath: str, candidate_counts: Counter[str]) -> ElementSelector:
		# #id, then tag.firstClass, then the path; a candidate matching more than one node is skipped
		element_id = node.id
		classes = class_names(node.attributes.get('class'))
		candidates = []
		if element_id:
			candidates.append(f'#{css_escape(element_id)}')
		if classes:
			candidates.append(f'{node.tag_name.lower()}.{css_escape(classes[0])}')
		css_selector = next((candidate for candidate in candidates if candidate_counts[candidate] == 1), css_path)

		return ElementSelector(
			css_selector=css_selector,
			tag_name=node.tag_name,
			xpath=xpath,
			id=element_id or None,
			text=cap_text_length(node.text_content) if node.text_content else None,
		)

	def simplify(self) -> None:
		self.root.simplify()
		self.build_selector_map()

	def to_json(self) -> str:
		return self.root.model_dump_json(indent=2, exclude_none=True)

	def get_selector(self, index: int) -> ElementSelector | None:
		return self.selector_map.get(index)

	def interactive_indices(self) -> list[int]:
		return self.selector_map.indices()

	def count_elements(self) -> int:
		count = 0
		stack = [self.root]
		while stack:
			node = stack.pop()
			count += 1
			stack.extend(node.children)
		return count

	def count_interactive(self) -> int:
		return len(self.selector_map)

	def find_node_by_index(self, index: int) -> ElementNode | None:
		stack = [self.root]
		while stack:
			node = stack.pop()
			if node.index == index:
				return node
			stack.extend(reversed(node.children))
		return None

	def indexed_nodes(self) -> list[ElementNode]:
		"""Indexed nodes in document order"""
		nodes: list[ElementNode] = []
		stack = [self.root]
		while stack:
			node = stack.pop()
			if node.index is not None:
				nodes.append(node)
			stack.extend(reversed(node.children))
		return nodes

	def interactive_elements_to_string(self) -> str:
		return '\n'.join(f'[{node.index}]{node.to_simple_string()}' for node in self.indexed_nodes())

	def __repr__(self) -> str:
		return f'DomTree(root=<{self.root.tag_name}>, elements={self.count_elements()}, interactive={self.count_interactive()})'
