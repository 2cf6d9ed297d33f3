from . import errors

from .api import Api, WebApi, FEEDS
from .client import Client
from .user import User
