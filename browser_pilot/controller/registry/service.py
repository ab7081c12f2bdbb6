import inspect
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ValidationError

from browser_pilot.controller.registry.views import ActionRegistry, RegisteredAction, ToolManifestEntry
from browser_pilot.controller.views import NoParamsAction
from browser_pilot.exceptions import ActionFailedError, BrowserError
from browser_pilot.utils import time_execution_async

if TYPE_CHECKING:
	from browser_pilot.browser.session import BrowserSession

logger = logging.getLogger(__name__)


class Registry:
	"""Service for registering and managing actions"""

	def __init__(self, exclude_actions: list[str] | None = None):
		self.registry = ActionRegistry()
		self.exclude_actions = exclude_actions or []

	def action(self, description: str, param_model: type[BaseModel] | None = None) -> Callable:
		"""Decorator for registering actions.

		The decorated coroutine is called as func(params, browser_session) where
		params is an instance of param_model.
		"""

		def decorator(func: Callable) -> Callable:
			if func.__name__ in self.exclude_actions:
				return func
			if not inspect.iscoroutinefunction(func):
				raise TypeError(f'Action {func.__name__} must be an async function')

			self.registry.actions[func.__name__] = RegisteredAction(
				name=func.__name__,
				description=description,
				function=func,
				param_model=param_model or NoParamsAction,
			)
			return func

		return decorator

	@time_execution_async('--execute_action')
	async def execute_action(self, action_name: str, params: dict[str, Any], browser_session: 'BrowserSession') -> Any:
		"""Validate params against the action's model and run it. Failures surface as BrowserError subclasses."""
		action = self.registry.actions.get(action_name)
		if action is None:
			raise ActionFailedError(action_name, 'Unknown action')

		try:
			validated_params = action.param_model.model_validate(params)
		except ValidationError as e:
			raise ActionFailedError(action_name, f'Invalid parameters: {e}') from e

		try:
			return await action.function(validated_params, browser_session)
		except BrowserError:
			raise
		except Exception as e:
			logger.debug(f'Action {action_name} raised {type(e).__name__}: {e}')
			raise ActionFailedError(action_name, f'{type(e).__name__}: {e}') from e

	def get_tool_manifest(self) -> list[ToolManifestEntry]:
		return [action.to_manifest_entry() for action in self.registry.actions.values()]

	def get_prompt_description(self) -> str:
		return self.registry.get_prompt_description()
