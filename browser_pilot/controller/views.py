from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# Action Input Models
class ElementTargetAction(BaseModel):
	"""Target one element by CSS selector or by snapshot index, never both"""

	selector: str | None = Field(default=None, description='CSS selector of the element (use either this or index)')
	index: int | None = Field(default=None, ge=0, description='Element index from the last get_dom snapshot (use either this or selector)')


class NavigateAction(BaseModel):
	url: str = Field(description='URL to open; a bare domain or word is completed (example.com -> https://example.com)')
	wait_for_load: bool = Field(default=True, description='wait for the load event before returning')


class ClickElementAction(ElementTargetAction):
	pass


class InputTextAction(ElementTargetAction):
	text: str = Field(description='Text to type into the element')
	clear: bool = Field(default=False, description='clear the existing value first')


class GetTextAction(ElementTargetAction):
	"""Without selector or index the text of the whole page is returned"""


class GetDomAction(BaseModel):
	simplify: bool = Field(default=True, description='drop script/style/noscript nodes before indexing')


class NewTabAction(BaseModel):
	url: str


class SwitchTabAction(BaseModel):
	tab_index: int = Field(ge=0)


class EvaluateAction(BaseModel):
	script: str = Field(description='JavaScript expression or function source to evaluate in the page')


class WaitAction(BaseModel):
	duration_ms: int = Field(ge=0, description='Duration in milliseconds')


class NoParamsAction(BaseModel):
	"""
	Accepts absolutely anything in the incoming data
	and discards it, so the final parsed model is empty.
	"""

	model_config = ConfigDict(extra='ignore')


class ActionResult(BaseModel):
	"""Uniform envelope returned by every command"""

	model_config = ConfigDict(extra='forbid')

	success: bool = True
	data: dict[str, Any] | None = None
	error: str | None = None

	def to_envelope(self) -> dict[str, Any]:
		return self.model_dump(exclude_none=True)
