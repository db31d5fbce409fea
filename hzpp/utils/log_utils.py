import logging
import os
from logging.handlers import RotatingFileHandler

from hzpp.config import Config


def setup_logging(log_to_file: bool = True):
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # console
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_fmt = logging.Formatter(
        '[%(asctime)s] %(levelname)s %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )
    console_handler.setFormatter(console_fmt)
    root_logger.addHandler(console_handler)

    if not log_to_file:
        return
    log_dir = os.path.join(Config.WORK_DIR, 'log')
    os.makedirs(log_dir, exist_ok=True)
    file_handler = RotatingFileHandler(
        filename=os.path.join(log_dir, 'hzpp.log'),
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)
    file_fmt = logging.Formatter(
        '%(asctime)s %(levelname)-5s %(name)-20s %(message)s'
    )
    file_handler.setFormatter(file_fmt)
    root_logger.addHandler(file_handler)
