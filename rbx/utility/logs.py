# Native libraries
import json, logging
from logging.config import dictConfig
from os.path import exists


# ---------------------> External Functions


def configure_logging(path: str = 'logConfig.json', level: int = logging.INFO) -> None:
	# Configures logging from a dictConfig JSON file
	#   - path contains the JSON config                         default is 'logConfig.json'
	#   - level is used for a basic setup if path is missing    default is INFO

	if not exists(path):
		logging.basicConfig(level=level, format='%(asctime)s %(levelname)-8s %(name)s: %(message)s')
		return

	with open(path) as file:
		dictConfig(json.load(file))
