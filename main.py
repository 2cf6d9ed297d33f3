# Native libraries
import asyncio, logging, os

# External libraries
import dotenv

# Local libraries
from rbx import Client, User, utility


# ---------------------> Setup


# Logging
utility.configure_logging('logConfig.json')
log = logging.getLogger('root')

# Environment variables
dotenv.load_dotenv()


# ---------------------> Main


async def main() -> None:
	client = await Client.new(os.getenv('ROBLOX_USERNAME'), os.getenv('ROBLOX_PASSWORD'))
	log.info(f'Succesful login as {client} ({client.id})')

	@client.on('friend_request')
	async def on_friend_request(user: User) -> None:
		log.info(f'Accepting friend request from {user} ({user.id})')
		await user.accept_friend_request()

	@client.on('message')
	async def on_message(message: dict) -> None:
		log.info(f'Received message `{message.get("subject")}`')

	@client.on('notification')
	async def on_notification(name: str, message: object) -> None:
		log.info(f'Received notification {name}: {message}')

	# Feeds run until the process is stopped
	await asyncio.Event().wait()

if __name__ == '__main__':
	asyncio.run(main())
