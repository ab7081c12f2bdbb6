from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ConfigDict


class RegisteredAction(BaseModel):
	"""Model for a registered action"""

	name: str
	description: str
	function: Callable[..., Awaitable[Any]]
	param_model: type[BaseModel]

	model_config = ConfigDict(arbitrary_types_allowed=True)

	def prompt_description(self) -> str:
		"""One-line description of the action for a remote controller's prompt"""
		skip_keys = ['title']
		s = f'{self.description}: \n'
		s += '{' + str(self.name) + ': '
		s += str(
			{
				k: {sub_k: sub_v for sub_k, sub_v in v.items() if sub_k not in skip_keys}
				for k, v in self.param_model.model_json_schema().get('properties', {}).items()
			}
		)
		s += '}'
		return s

	def to_manifest_entry(self) -> 'ToolManifestEntry':
		return ToolManifestEntry(name=self.name, description=self.description, parameters=self.param_model.model_json_schema())


class ToolManifestEntry(BaseModel):
	"""What the protocol layer advertises for one command"""

	name: str
	description: str
	parameters: dict[str, Any]


class ActionRegistry(BaseModel):
	"""Model representing the action registry"""

	actions: dict[str, RegisteredAction] = {}

	def get_prompt_description(self) -> str:
		return '\n'.join(action.prompt_description() for action in self.actions.values())
