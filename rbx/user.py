
# Native libraries
from __future__ import annotations

import asyncio, logging
from typing import TYPE_CHECKING, Any

# Local libraries
from . import errors
from .api import Api, api as default_api

if TYPE_CHECKING:
	from .client import Client


# ---------------------> Logging setup


log = logging.getLogger(__name__)


# ---------------------> External Classes


class User:
	"""
	A platform user, identified by id or by username.

	A new user is not ready to use: the missing half of its identity is resolved
	in a preparation task scheduled on the running event loop. Await
	`User.new(...)` or `user.wait_until_ready()` before calling anything remote.

	Users obtained through a `Client` share its session handle and can perform
	the logged-in actions (befriending, blocking, messaging, ...).
	"""

	def __init__(self, resolvable: int | str, client: Client = None, api: Api = None) -> None:
		if isinstance(resolvable, bool) or not isinstance(resolvable, (int, str)) or resolvable == '':
			raise errors.InvalidArgumentError(resolvable)

		self.ready = False
		self.client = client
		self.api = client.api if client is not None else (api or default_api)

		self._id = resolvable if isinstance(resolvable, int) else None
		self._username = resolvable if isinstance(resolvable, str) else None

		self._preparation = asyncio.get_running_loop().create_task(self._prepare_once())
		self._preparation.add_done_callback(_retrieve)

	@classmethod
	async def new(cls, resolvable: int | str, client: Client = None, api: Api = None) -> User:
		return await cls(resolvable, client, api).wait_until_ready()

	def __str__(self) -> str:
		return self._username or f'User#{self._id}'

	def __repr__(self) -> str:
		return f'<{type(self).__name__} id={self._id} username={self._username!r} ready={self.ready}>'

	@property
	def id(self) -> int | None:
		return self._id

	@property
	def username(self) -> str | None:
		return self._username

	@property
	def handle(self) -> Any:
		return self.client.handle if self.client is not None else None

	# ---------------------> Lookups

	@staticmethod
	async def get_id_from_username(username: str, api: Api = None) -> int:
		return await (api or default_api).get_id_from_username(username)

	@staticmethod
	async def get_username_from_id(id: int, api: Api = None) -> str:
		return await (api or default_api).get_username_from_id(id)

	# ---------------------> Readiness

	async def prepare(self) -> None:
		# Resolves whichever half of the identity is missing, never both
		if self._username and self._id is None:
			try:
				self._id = await self.api.get_id_from_username(self._username)
			except errors.ResolutionError as err:
				raise errors.ResolutionError('Invalid username') from err

		elif self._id is not None and not self._username:
			try:
				self._username = await self.api.get_username_from_id(self._id)
			except errors.ResolutionError as err:
				raise errors.ResolutionError('Invalid user id') from err

	async def _prepare_once(self) -> User:
		try:
			await self.prepare()
		except Exception as err:
			log.error(f'Failed to prepare {self!r}: {err}')
			raise

		self.ready = True
		log.debug(f'{self!r} is ready')
		return self

	async def wait_until_ready(self) -> User:
		if self.ready:
			return self

		# Every waiter shares the one preparation task, a cancelled waiter must not cancel it
		return await asyncio.shield(self._preparation)

	def ensure_ready(self) -> None:
		if not self.ready or self._id is None:
			raise errors.NotReadyError(self)

	def ensure_authorized(self, action: str) -> None:
		self.ensure_ready()

		if self.handle is None:
			raise errors.UnauthorizedError(action)

	# ---------------------> Profile readers

	async def get_blurb(self) -> str:
		self.ensure_ready()
		return await self.api.get_blurb(self._id)

	async def get_status(self) -> str:
		self.ensure_ready()
		return await self.api.get_status(self._id)

	async def get_friends(self, page: int = None, limit: int = None) -> list:
		self.ensure_ready()
		return await self.api.get_friends(self._id, 'AllFriends', page, limit, self.handle)

	# ---------------------> Authenticated actions

	async def remove_friend(self) -> Any:
		self.ensure_authorized('remove_friend')
		return await self.api.remove_friend(self._id, self.handle)

	async def accept_friend_request(self) -> Any:
		self.ensure_authorized('accept_friend_request')
		return await self.api.accept_friend_request(self._id, self.handle)

	async def decline_friend_request(self) -> Any:
		self.ensure_authorized('decline_friend_request')
		return await self.api.decline_friend_request(self._id, self.handle)

	async def send_friend_request(self) -> Any:
		self.ensure_authorized('send_friend_request')
		return await self.api.send_friend_request(self._id, self.handle)

	async def block(self) -> Any:
		self.ensure_authorized('block')
		return await self.api.block(self._id, self.handle)

	async def unblock(self) -> Any:
		self.ensure_authorized('unblock')
		return await self.api.unblock(self._id, self.handle)

	async def follow(self) -> Any:
		self.ensure_authorized('follow')
		return await self.api.follow(self._id, self.handle)

	async def unfollow(self) -> Any:
		self.ensure_authorized('unfollow')
		return await self.api.unfollow(self._id, self.handle)

	async def send_message(self, subject: str, body: str) -> Any:
		self.ensure_authorized('send_message')
		return await self.api.send_message(self._id, subject, body, self.handle)


# ---------------------> Internal Functions


def _retrieve(task: asyncio.Task) -> None:
	# Failures are logged by the task itself and re-raised to whoever awaits it
	if not task.cancelled():
		task.exception()
