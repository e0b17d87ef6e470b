"""
Logging setup for Hadal.

Everything goes to a log file under the working directory; the terminal is
reserved for the practice prompts, so only critical records reach it.
"""
import os
import logging

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s - %(message)s'

# Client libraries that log every RPC at DEBUG
NOISY_LOGGERS = ("google.auth", "google.api_core", "grpc", "urllib3")


def setup_logging(log_file_path: str, level: str = "DEBUG") -> str:
    """
    Route all records to `log_file_path`.

    Args:
        log_file_path: Log file, appended to; its directory is created
        level: Minimum level written to the file

    Returns:
        Path to the log file
    """
    directory = os.path.dirname(log_file_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    to_file = logging.FileHandler(log_file_path, mode='a', encoding='utf-8')
    to_file.setLevel(getattr(logging, level.upper(), logging.DEBUG))
    to_file.setFormatter(logging.Formatter(LOG_FORMAT))

    to_console = logging.StreamHandler()
    to_console.setLevel(logging.CRITICAL)
    to_console.setFormatter(logging.Formatter('%(message)s'))

    root.setLevel(logging.DEBUG)
    root.addHandler(to_file)
    root.addHandler(to_console)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file_path
