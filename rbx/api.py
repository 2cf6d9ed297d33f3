
# Native libraries
import asyncio, logging
from os import getenv
from typing import Any, AsyncIterator, Awaitable, Callable

# External libraries
import dotenv
import requests

# Local libraries
from . import errors

# Constants
USERS_URL = 'https://users.roblox.com/v1'
AUTH_URL = 'https://auth.roblox.com/v2'
FRIENDS_URL = 'https://friends.roblox.com/v1'
ACCOUNT_URL = 'https://accountsettings.roblox.com/v1'
MESSAGES_URL = 'https://privatemessages.roblox.com/v1'
NOTIFICATIONS_URL = 'https://notifications.roblox.com/v2'
FEEDS = ('friend_request', 'message', 'notification')
FRIENDS_PAGE_SIZE = 200


# ---------------------> Environment setup


dotenv.load_dotenv()

REQUEST_TIMEOUT = float(getenv('ROBLOX_TIMEOUT', '10'))
POLL_INTERVAL = float(getenv('ROBLOX_POLL_INTERVAL', '10'))


# ---------------------> Logging setup


log = logging.getLogger(__name__)


# ---------------------> External Classes


class Api:
	"""
	Everything the entities need from the platform.

	Handles are opaque to the entities: they are created by `create_handle`,
	filled in by `login` and passed back unchanged to every authenticated call.
	"""

	def create_handle(self) -> Any:
		raise NotImplementedError

	# Identity

	async def get_id_from_username(self, username: str) -> int:
		raise NotImplementedError

	async def get_username_from_id(self, id: int) -> str:
		raise NotImplementedError

	async def login(self, username: str, password: str, handle: Any) -> Any:
		raise NotImplementedError

	# Authenticated actions

	async def remove_friend(self, id: int, handle: Any) -> Any:
		raise NotImplementedError

	async def accept_friend_request(self, id: int, handle: Any) -> Any:
		raise NotImplementedError

	async def decline_friend_request(self, id: int, handle: Any) -> Any:
		raise NotImplementedError

	async def send_friend_request(self, id: int, handle: Any) -> Any:
		raise NotImplementedError

	async def block(self, id: int, handle: Any) -> Any:
		raise NotImplementedError

	async def unblock(self, id: int, handle: Any) -> Any:
		raise NotImplementedError

	async def follow(self, id: int, handle: Any) -> Any:
		raise NotImplementedError

	async def unfollow(self, id: int, handle: Any) -> Any:
		raise NotImplementedError

	async def send_message(self, id: int, subject: str, body: str, handle: Any) -> Any:
		raise NotImplementedError

	# Profile readers

	async def get_blurb(self, id: int) -> str:
		raise NotImplementedError

	async def get_status(self, id: int) -> str:
		raise NotImplementedError

	async def get_friends(self, id: int, scope: str, page: int = None, limit: int = None, handle: Any = None) -> list:
		raise NotImplementedError

	async def get_messages(self, page: int, limit: int, tab: str, handle: Any) -> Any:
		raise NotImplementedError

	# Feeds

	def open_feed(self, kind: str, handle: Any) -> AsyncIterator:
		# Infinite and not restartable, one per kind in FEEDS
		# Subscription failures are yielded as Exception items, the feed keeps going after them
		raise NotImplementedError

class WebApi(Api):
	def __init__(self, session: requests.Session = None, timeout: float = REQUEST_TIMEOUT, poll_interval: float = POLL_INTERVAL) -> None:
		self.session = session if session is not None else requests.Session()
		self.timeout = timeout
		self.poll_interval = poll_interval

	def create_handle(self) -> requests.Session:
		return requests.Session()

	# ---------------------> Transport

	async def request(self, handle: requests.Session | None, method: str, url: str, **kwargs) -> Any:
		return await asyncio.to_thread(self._send, handle if handle is not None else self.session, method, url, **kwargs)

	def _send(self, handle: requests.Session, method: str, url: str, **kwargs) -> Any:
		try:
			response = handle.request(method, url, timeout=self.timeout, **kwargs)

			# Writes without a valid token are refused once, the refusal carries the token to use
			token = response.headers.get('x-csrf-token')
			if response.status_code == 403 and token and handle.headers.get('X-CSRF-TOKEN') != token:
				handle.headers['X-CSRF-TOKEN'] = token
				response = handle.request(method, url, timeout=self.timeout, **kwargs)

		except requests.RequestException as err:
			raise errors.TransportError(f'{method} {url} failed: {err}') from err

		if not response.ok:
			raise errors.TransportError(f'{method} {url} failed', response.status_code)
		if not response.content:
			return None

		try:
			return response.json()
		except ValueError:
			return response.text

	# ---------------------> Identity

	async def get_id_from_username(self, username: str) -> int:
		data = await self.request(None, 'POST', f'{USERS_URL}/usernames/users', json={'usernames': [username], 'excludeBannedUsers': False})
		if not isinstance(data, dict):
			raise errors.TransportError(f'Username lookup for {username} returned an unexpected body')
		if not data.get('data'):
			raise errors.UserNotFoundError(username)
		return int(data['data'][0]['id'])

	async def get_username_from_id(self, id: int) -> str:
		try:
			data = await self.request(None, 'GET', f'{USERS_URL}/users/{id}')
		except errors.TransportError as err:
			if err.status in (400, 404):
				raise errors.UserNotFoundError(id) from err
			raise

		if not isinstance(data, dict) or 'name' not in data:
			raise errors.TransportError(f'User lookup for {id} returned an unexpected body')
		return data['name']

	async def login(self, username: str, password: str, handle: requests.Session) -> requests.Session:
		try:
			await self.request(handle, 'POST', f'{AUTH_URL}/login', json={'ctype': 'Username', 'cvalue': username, 'password': password})
		except errors.TransportError as err:
			raise errors.AuthenticationError(f"Couldn't log in as {username}: {err}") from err

		if '.ROBLOSECURITY' not in handle.cookies:
			raise errors.AuthenticationError(f"Couldn't log in as {username}: no session cookie was issued")

		log.info(f'Logged in as {username}')
		return handle

	# ---------------------> Authenticated actions

	async def remove_friend(self, id: int, handle: requests.Session) -> Any:
		return await self.request(handle, 'POST', f'{FRIENDS_URL}/users/{id}/unfriend')

	async def accept_friend_request(self, id: int, handle: requests.Session) -> Any:
		return await self.request(handle, 'POST', f'{FRIENDS_URL}/users/{id}/accept-friend-request')

	async def decline_friend_request(self, id: int, handle: requests.Session) -> Any:
		return await self.request(handle, 'POST', f'{FRIENDS_URL}/users/{id}/decline-friend-request')

	async def send_friend_request(self, id: int, handle: requests.Session) -> Any:
		return await self.request(handle, 'POST', f'{FRIENDS_URL}/users/{id}/request-friendship')

	async def block(self, id: int, handle: requests.Session) -> Any:
		return await self.request(handle, 'POST', f'{ACCOUNT_URL}/users/{id}/block')

	async def unblock(self, id: int, handle: requests.Session) -> Any:
		return await self.request(handle, 'POST', f'{ACCOUNT_URL}/users/{id}/unblock')

	async def follow(self, id: int, handle: requests.Session) -> Any:
		return await self.request(handle, 'POST', f'{FRIENDS_URL}/users/{id}/follow')

	async def unfollow(self, id: int, handle: requests.Session) -> Any:
		return await self.request(handle, 'POST', f'{FRIENDS_URL}/users/{id}/unfollow')

	async def send_message(self, id: int, subject: str, body: str, handle: requests.Session) -> Any:
		return await self.request(handle, 'POST', f'{MESSAGES_URL}/messages/send', json={'recipientid': id, 'subject': subject, 'body': body})

	# ---------------------> Profile readers

	async def get_blurb(self, id: int) -> str:
		data = await self.request(None, 'GET', f'{USERS_URL}/users/{id}')
		return data['description']

	async def get_status(self, id: int) -> str:
		data = await self.request(None, 'GET', f'{USERS_URL}/users/{id}/status')
		return data['status']

	async def get_friends(self, id: int, scope: str, page: int = None, limit: int = None, handle: requests.Session = None) -> list:
		if scope == 'AllFriends':
			data = await self.request(handle, 'GET', f'{FRIENDS_URL}/users/{id}/friends')
		elif scope == 'FriendRequests':
			data = await self.request(handle, 'GET', f'{FRIENDS_URL}/my/friends/requests', params={'limit': 100})
		else:
			raise ValueError(f'Unknown friend scope ({scope})')

		return paginate(data['data'], page, limit)

	async def get_messages(self, page: int, limit: int, tab: str, handle: requests.Session) -> Any:
		params = {'pageNumber': page or 0, 'pageSize': limit or 20, 'messageTab': tab}
		return await self.request(handle, 'GET', f'{MESSAGES_URL}/messages', params=params)

	# ---------------------> Feeds

	def open_feed(self, kind: str, handle: requests.Session) -> AsyncIterator:
		polls = {
			'friend_request': self._poll_friend_requests,
			'message': self._poll_messages,
			'notification': self._poll_notifications
		}

		if kind not in polls:
			raise errors.UnknownFeedError(kind)
		return self._feed(kind, polls[kind], handle)

	async def _feed(self, kind: str, poll: Callable[[requests.Session], Awaitable[list]], handle: requests.Session) -> AsyncIterator:
		# The first successful poll is the baseline, only items that appear later are yielded
		seen = None

		while True:
			try:
				items = await poll(handle)
			except Exception as err:
				log.debug(f'Polling the {kind} feed failed: {err}')
				yield err
			else:
				if seen is not None:
					for key, item in items:
						if key not in seen:
							yield item
				seen = {key for key, _ in items}

			await asyncio.sleep(self.poll_interval)

	async def _poll_friend_requests(self, handle: requests.Session) -> list:
		data = await self.request(handle, 'GET', f'{FRIENDS_URL}/my/friends/requests', params={'limit': 100})
		return [(request['id'], int(request['id'])) for request in data['data']]

	async def _poll_messages(self, handle: requests.Session) -> list:
		data = await self.request(handle, 'GET', f'{MESSAGES_URL}/messages', params={'pageNumber': 0, 'pageSize': 20, 'messageTab': 'Inbox'})
		return [(message['id'], message) for message in data['collection']]

	async def _poll_notifications(self, handle: requests.Session) -> list:
		data = await self.request(handle, 'GET', f'{NOTIFICATIONS_URL}/stream-notifications/get-recent', params={'startIndex': 0, 'maxRows': 10})
		return [(notification['id'], (notification.get('notificationSourceType'), notification.get('content'))) for notification in data]


# ---------------------> External Functions


def paginate(items: list, page: int = None, limit: int = None) -> list:
	# Slices a list into pages
	#   - page is zero based                                    default is the first page
	#   - limit is the page size                                default is everything, or FRIENDS_PAGE_SIZE once a page is asked for

	if limit is None:
		if page is None:
			return list(items)
		limit = FRIENDS_PAGE_SIZE

	start = (page or 0) * limit
	return list(items[start:start + limit])


# Singleton
api = WebApi()
