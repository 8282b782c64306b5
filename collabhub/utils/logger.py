import logging
import os

DEFAULT_LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'logs')


def setup_logger(name='collabhub', log_dir=None, console_level=None):
    """Set up a logger with console and file output.

    Creates a logger that writes:
    - INFO and above to console (or console_level if given)
    - DEBUG and above to file (<log_dir>/server.log)

    Calling it again for a logger that already has handlers returns the
    logger unchanged.

    Args:
        name (str, optional): Logger name. Defaults to 'collabhub'
        log_dir (str, optional): Directory for server.log. Defaults to
            COLLABHUB_LOG_DIR or the package logs directory
        console_level (str, optional): Console level name. Defaults to
            COLLABHUB_LOG_LEVEL or INFO

    Returns:
        logging.Logger: Configured logger instance

    Side Effects:
        - Creates log directory if it doesn't exist
        - Creates/appends to server.log file
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.DEBUG)

    log_dir = log_dir or os.getenv('COLLABHUB_LOG_DIR', DEFAULT_LOG_DIR)
    console_level = console_level or os.getenv('COLLABHUB_LOG_LEVEL', 'INFO')

    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(name)s - %(message)s')

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(getattr(logging, console_level.upper(), logging.INFO))

    # File handler - ensure log directory exists
    os.makedirs(log_dir, exist_ok=True)
    file_handler = logging.FileHandler(os.path.join(log_dir, 'server.log'), encoding='utf-8')
    file_handler.setFormatter(formatter)
    file_handler.setLevel(logging.DEBUG)

    logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    return logger
