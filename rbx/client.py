
# Native libraries
from __future__ import annotations

import asyncio, logging
from typing import Any, Callable

# Local libraries
from . import errors
from .api import FEEDS, Api, api as default_api
from .user import User
from .utility import Emitter


# ---------------------> Logging setup


log = logging.getLogger(__name__)


# ---------------------> External Classes


class Client(User, Emitter):
	"""
	The logged in user. Actions on the platform are performed as this user.

	Not ready to use until it has resolved its id and logged in, await
	`Client.new(...)` or `client.wait_until_ready()`.

	Events, registered with `client.on(event, callback)`:
	  - friend_request  -> a ready `User` bound to this client
	  - message         -> the raw message payload
	  - notification    -> (name, message)

	The feed behind an event is only opened once the first listener for it is
	registered, and only once per client.
	"""

	def __init__(self, username: str, password: str, api: Api = None) -> None:
		if not isinstance(username, str):
			raise errors.InvalidArgumentError(username)

		Emitter.__init__(self)
		self.api = api or default_api
		self.password = password
		self.feeds = {feed: False for feed in FEEDS}

		self._handle = self.api.create_handle()
		self._feed_tasks: set[asyncio.Task] = set()

		User.__init__(self, username, client=self)

	@classmethod
	async def new(cls, username: str, password: str, api: Api = None) -> Client:
		return await cls(username, password, api).wait_until_ready()

	@property
	def handle(self) -> Any:
		return self._handle

	# ---------------------> Readiness

	async def prepare(self) -> None:
		if self._username and self._id is None:
			try:
				self._id = await self.api.get_id_from_username(self._username)
			except errors.ResolutionError as err:
				raise errors.InvalidCredentialsError() from err

		try:
			await self.api.login(self._username, self.password, self._handle)
		except (errors.AuthenticationError, errors.TransportError) as err:
			raise errors.AuthenticationError() from err

	# ---------------------> Users

	async def get_user(self, resolvable: int | str) -> User:
		return await User.new(resolvable, client=self)

	async def get_messages(self, page: int = None, limit: int = None, tab: str = 'Inbox') -> Any:
		self.ensure_authorized('get_messages')
		return await self.api.get_messages(page, limit, tab, self._handle)

	async def get_friend_requests(self, page: int = None, limit: int = None) -> list:
		self.ensure_authorized('get_friend_requests')
		return await self.api.get_friends(self._id, 'FriendRequests', page, limit, self._handle)

	# ---------------------> Feeds

	def on(self, event: str, callback: Callable = None) -> Callable:
		registered = Emitter.on(self, event, callback)

		if event in self.feeds and not self.feeds[event]:
			task = asyncio.get_running_loop().create_task(self._activate(event))
			self._feed_tasks.add(task)
			task.add_done_callback(self._feed_tasks.discard)

		return registered

	async def _activate(self, feed: str) -> None:
		try:
			await self.wait_until_ready()
		except Exception as err:
			log.error(f'Feed {feed} was not opened, {self} never became ready: {err}')
			return

		# Registrations that raced each other all land here, only the first opens the feed
		if self.feeds[feed]:
			return
		self.feeds[feed] = True
		log.info(f'Opening {feed} feed for {self}')

		try:
			async for item in self.api.open_feed(feed, self._handle):
				if isinstance(item, Exception):
					log.error(f'The {feed} feed for {self} reported an error: {item}')
					continue

				try:
					await self._dispatch(feed, item)
				except Exception as err:
					log.error(f'Dropped {feed} event for {self}: {err}')
		except Exception as err:
			log.error(f'The {feed} feed for {self} stopped: {err}')

	async def _dispatch(self, feed: str, item: Any) -> None:
		if feed == 'friend_request':
			await self.emit(feed, await self.get_user(item))
		elif feed == 'notification':
			name, message = item
			await self.emit(feed, name, message)
		else:
			await self.emit(feed, item)
