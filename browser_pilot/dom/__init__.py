from browser_pilot.dom.selector_map import ElementSelector, SelectorMap
from browser_pilot.dom.service import DomService
from browser_pilot.dom.views import BoundingBox, DomTree, ElementNode

__all__ = ['BoundingBox', 'DomService', 'DomTree', 'ElementNode', 'ElementSelector', 'SelectorMap']
