import logging
import json
import os
from pathlib import Path
import threading


class SingletonLogger:
    """
    Singleton logger that ensures only one logger instance is created per application run.
    """
    _instance = None
    _lock = threading.Lock()
    _logger = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(SingletonLogger, cls).__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            with self._lock:
                if not self._initialized:
                    self._logger = None
                    self._initialized = True

    def get_logger(self, name: str = "abacus") -> logging.Logger:
        """
        Get a logger under the shared "abacus" root.

        The root logger (and its handlers) is created once. Dotted names such
        as "abacus.buisness.assets" are returned as children so records keep
        their area in the "logger" field while sharing the root's handlers.

        Args:
            name (str): Logger name, normally "abacus.<area>"

        Returns:
            logging.Logger: Configured logger instance
        """
        if self._logger is None:
            with self._lock:
                if self._logger is None:
                    self._logger = self._create_logger()
        if name and name != "abacus" and name.startswith("abacus."):
            return self._logger.getChild(name[len("abacus."):])
        return self._logger

    def _create_logger(self) -> logging.Logger:
        """
        Create the root logger with file and console handlers.

        File handlers are written under ABACUS_LOG_DIR (default "logs") and
        can be switched off with ABACUS_LOG_TO_FILE=false.

        Returns:
            logging.Logger: Configured logger instance
        """
        logger = logging.getLogger("abacus")
        logger.setLevel(logging.DEBUG)

        # Clear any existing handlers
        logger.handlers.clear()

        formatter = JsonFormatter({
            "level": "levelname",
            "logger": "name",
            "module": "module",
            "function": "funcName",
            "line": "lineno",
            "message": "message"
        })

        log_to_file = os.environ.get('ABACUS_LOG_TO_FILE', 'True').lower() in ('true', '1', 'yes', 'on')
        if log_to_file:
            logs_dir = Path(os.environ.get('ABACUS_LOG_DIR', 'logs'))
            logs_dir.mkdir(parents=True, exist_ok=True)

            # Fixed filenames, cleared on each run
            file_handler = logging.FileHandler(logs_dir / "abacus.log", mode='w', encoding='utf-8')
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

            error_file_handler = logging.FileHandler(logs_dir / "errors.log", mode='w', encoding='utf-8')
            error_file_handler.setLevel(logging.ERROR)
            error_file_handler.setFormatter(formatter)
            logger.addHandler(error_file_handler)

        level_name = os.environ.get('ABACUS_LOG_LEVEL', 'DEBUG').upper()
        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, level_name, logging.DEBUG))
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        return logger


class JsonFormatter(logging.Formatter):
    """
    Formatter that outputs JSON strings after parsing the LogRecord.

    @param dict fmt_dict: Key: logging format attribute pairs. Defaults to {"message": "message"}.
    @param str time_format: time.strftime() format string. Default: "%Y-%m-%dT%H:%M:%S"
    @param str msec_format: Microsecond formatting. Appended at the end. Default: "%s.%03dZ"
    """
    def __init__(self, fmt_dict: dict = None, time_format: str = "%Y-%m-%dT%H:%M:%S", msec_format: str = "%s.%03dZ"):
        super().__init__()
        self.fmt_dict = fmt_dict if fmt_dict is not None else {"message": "message"}
        self.default_time_format = time_format
        self.default_msec_format = msec_format
        self.datefmt = None

    def usesTime(self) -> bool:
        """
        Overwritten to look for the attribute in the format dict values instead of the fmt string.
        """
        return "asctime" in self.fmt_dict.values()

    def formatMessage(self, record) -> dict:
        """
        Overwritten to return a dictionary of the relevant LogRecord attributes instead of a string.
        KeyError is raised if an unknown attribute is provided in the fmt_dict.
        """
        return {fmt_key: record.__dict__[fmt_val] for fmt_key, fmt_val in self.fmt_dict.items()}

    def format(self, record) -> str:
        """
        Mostly the same as the parent's class method, the difference being that a dict is manipulated and dumped as JSON
        instead of a string.
        """
        record.message = record.getMessage()

        if self.usesTime():
            record.asctime = self.formatTime(record, self.datefmt)

        message_dict = self.formatMessage(record)

        if record.exc_info:
            # Cache the traceback text to avoid converting it multiple times
            if not record.exc_text:
                record.exc_text = self.formatException(record.exc_info)

        if record.exc_text:
            message_dict["exc_info"] = record.exc_text

        if record.stack_info:
            message_dict["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(message_dict, default=str)


def get_logger(name: str = "abacus") -> logging.Logger:
    """
    Get a logger from the singleton.

    Args:
        name (str): Logger name, e.g. "abacus.routes.assets"

    Returns:
        logging.Logger: Logger sharing the singleton's handlers
    """
    return SingletonLogger().get_logger(name)
