from pydantic import BaseModel, ConfigDict


class TabInfo(BaseModel):
	"""Represents information about a browser tab"""

	model_config = ConfigDict(extra='forbid')

	tab_index: int  # position in the context's page list, what switch_tab expects
	url: str
	title: str
	is_focused: bool = False


class PageInfo(BaseModel):
	"""What get_dom reports about the page a snapshot came from"""

	url: str
	title: str
	element_count: int
	interactive_count: int
