class InvalidArgumentError(TypeError):
	def __init__(self, given: object):
		super().__init__(f'Expected a user id (int) or username (str), got {type(given).__name__}')

class ResolutionError(Exception):
	def __init__(self, detail: str = 'User could not be found'):
		super().__init__(detail)

class UserNotFoundError(ResolutionError):
	def __init__(self, resolvable: int | str):
		self.resolvable = resolvable
		super().__init__(f'User could not be found ({resolvable})')

class InvalidCredentialsError(ResolutionError):
	def __init__(self):
		super().__init__('Invalid username')

class AuthenticationError(Exception):
	def __init__(self, detail: str = "Couldn't log in"):
		super().__init__(detail)

class NotReadyError(Exception):
	def __init__(self, entity: object):
		super().__init__(f'{entity} is not ready, use `await User.new` or `await user.wait_until_ready()`')

class UnauthorizedError(Exception):
	def __init__(self, action: str):
		self.action = action
		super().__init__(f'{action} requires you to be logged in, use `client.get_user`')

class TransportError(Exception):
	def __init__(self, detail: str, status: int | None = None):
		self.status = status
		super().__init__(detail if status is None else f'{detail} (HTTP {status})')

class UnknownFeedError(Exception):
	def __init__(self, kind: str):
		super().__init__(f'Unknown feed ({kind})')
