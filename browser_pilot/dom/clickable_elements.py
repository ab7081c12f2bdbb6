from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from browser_pilot.dom.views import ElementNode

INTERACTIVE_TAGS = frozenset({'button', 'a', 'input', 'select', 'textarea', 'label'})

INTERACTIVE_ROLES = frozenset(
	{
		'button',
		'link',
		'tab',
		'menuitem',
		'menuitemcheckbox',
		'menuitemradio',
		'checkbox',
		'radio',
		'switch',
		'option',
		'combobox',
		'textbox',
		'searchbox',
	}
)

EVENT_HANDLER_PREFIX = 'on'


class ClickableElementDetector:
	"""Decides whether a node is actionable.

	Signals are OR-combined: any one of them makes the element interactive and
	nothing disqualifies it afterwards.
	"""

	@staticmethod
	def _has_interactive_tag(node: 'ElementNode') -> bool:
		return node.tag_name.lower() in INTERACTIVE_TAGS

	@staticmethod
	def _has_event_handlers(node: 'ElementNode') -> bool:
		"""on* attributes, or role="button" spelled out literally"""
		if any(key.lower().startswith(EVENT_HANDLER_PREFIX) for key in node.attributes):
			return True
		return node.attributes.get('role') == 'button'

	@staticmethod
	def _has_interactive_role(node: 'ElementNode') -> bool:
		role = node.attributes.get('role')
		if not role:
			return False
		return role.strip().lower() in INTERACTIVE_ROLES

	@staticmethod
	def is_interactive(node: 'ElementNode') -> bool:
		return (
			ClickableElementDetector._has_interactive_tag(node)
			or ClickableElementDetector._has_event_handlers(node)
			or ClickableElementDetector._has_interactive_role(node)
		)
