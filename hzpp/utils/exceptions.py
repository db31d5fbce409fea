import logging
from typing import List

logger = logging.getLogger(__name__)


class BusinessException(Exception):
    def __init__(self, message):
        super().__init__(message)
        self.message = message


class FetchException(BusinessException):
    def __init__(self, message='Failed to fetch data.'):
        super().__init__(message)


class InvalidDataException(BusinessException):
    """The site answered with its own error page"""


class ParseException(BusinessException):
    def __init__(self, message, violations: List[str] = None):
        super().__init__(message)
        self.violations = violations or []


class PreconditionException(BusinessException):
    pass


class InputException(BusinessException):
    pass


async def exception_handler(message, exc: Exception):
    if isinstance(exc, InputException):
        await message.reply(content=f'Input error: {exc.message}')
    elif isinstance(exc, PreconditionException):
        await message.reply(content=f'Not configured: {exc.message}')
    elif isinstance(exc, ParseException):
        logger.warning(f'parse failure, violations:{exc.violations}')
        await message.reply(content=exc.message)
    elif isinstance(exc, BusinessException):
        await message.reply(content=exc.message)
    elif isinstance(exc, TypeError):
        logger.exception(exc)
        await message.reply(content='Invalid command arguments')
    else:
        logger.exception(exc)
        await message.reply(content='Command failed')
