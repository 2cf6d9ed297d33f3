# Native libraries
import inspect, logging
from typing import Any, Callable


# ---------------------> Logging setup


log = logging.getLogger(__name__)


# ---------------------> External Classes


class Emitter:
	def __init__(self) -> None:
		self.listeners: dict[str, list[Callable]] = {}

	def on(self, event: str, callback: Callable = None) -> Callable:
		# Registers a listener, works as a decorator when no callback is given
		#   - callback may be a plain function or a coroutine function

		def decorator(func: Callable) -> Callable:
			self.listeners.setdefault(event, []).append(func)
			return func

		return decorator(callback) if callback is not None else decorator

	def remove_listener(self, event: str, callback: Callable) -> None:
		if callback in self.listeners.get(event, []):
			self.listeners[event].remove(callback)

	def listener_count(self, event: str) -> int:
		return len(self.listeners.get(event, []))

	async def emit(self, event: str, *args: Any) -> None:
		# A failing listener is logged and does not stop the others
		for listener in list(self.listeners.get(event, [])):
			try:
				result = listener(*args)
				if inspect.isawaitable(result):
					await result
			except Exception as err:
				log.error(f'Listener `{getattr(listener, "__name__", listener)}` for {event} failed: {err}')
