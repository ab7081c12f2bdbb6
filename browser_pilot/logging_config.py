import logging
import sys

from browser_pilot.config import CONFIG

RESULT_LEVEL = 35


def addLoggingLevel(levelName: str, levelNum: int, methodName: str | None = None) -> None:
	"""
	Comprehensively adds a new logging level to the `logging` module and the
	currently configured logging class.

	Raises AttributeError if the level name is already an attribute of the
	`logging` module or if the method name is already present.
	"""
	if not methodName:
		methodName = levelName.lower()

	if hasattr(logging, levelName):
		raise AttributeError(f'{levelName} already defined in logging module')
	if hasattr(logging, methodName):
		raise AttributeError(f'{methodName} already defined in logging module')
	if hasattr(logging.getLoggerClass(), methodName):
		raise AttributeError(f'{methodName} already defined in logger class')

	def logForLevel(self, message, *args, **kwargs):
		if self.isEnabledFor(levelNum):
			self._log(levelNum, message, args, **kwargs)

	def logToRoot(message, *args, **kwargs):
		logging.log(levelNum, message, *args, **kwargs)

	logging.addLevelName(levelNum, levelName)
	setattr(logging, levelName, levelNum)
	setattr(logging.getLoggerClass(), methodName, logForLevel)
	setattr(logging, methodName, logToRoot)


class BrowserPilotFormatter(logging.Formatter):
	def format(self, record: logging.LogRecord) -> str:
		# browser_pilot.browser.session -> session
		if isinstance(record.name, str) and record.name.startswith('browser_pilot.'):
			record.name = record.name.split('.')[-1]
		return super().format(record)


def setup_logging(log_level: str | None = None, force_setup: bool = False) -> logging.Logger:
	"""Attach one stream handler to the browser_pilot logger.

	Safe to call more than once; the handler is only installed the first time
	unless force_setup is set.
	"""
	try:
		addLoggingLevel('RESULT', RESULT_LEVEL)
	except AttributeError:
		pass

	log_type = (log_level or CONFIG.BROWSER_PILOT_LOGGING_LEVEL).lower()
	logger = logging.getLogger('browser_pilot')

	if logger.handlers and not force_setup:
		return logger
	for handler in list(logger.handlers):
		logger.removeHandler(handler)

	console = logging.StreamHandler(sys.stderr)
	if log_type == 'result':
		console.setLevel(RESULT_LEVEL)
		console.setFormatter(BrowserPilotFormatter('%(message)s'))
	else:
		console.setFormatter(BrowserPilotFormatter('%(levelname)-8s [%(name)s] %(message)s'))
	logger.addHandler(console)

	if log_type == 'result':
		logger.setLevel(RESULT_LEVEL)
	elif log_type == 'debug':
		logger.setLevel(logging.DEBUG)
	elif log_type in ('warning', 'error'):
		logger.setLevel(getattr(logging, log_type.upper()))
	else:
		logger.setLevel(logging.INFO)
	logger.propagate = False

	for third_party in ('asyncio', 'websockets', 'httpx', 'httpcore', 'bubus', 'playwright'):
		third_party_logger = logging.getLogger(third_party)
		third_party_logger.setLevel(logging.WARNING)

	logger.debug(f'browser_pilot logging configured at level {log_type}')
	return logger
