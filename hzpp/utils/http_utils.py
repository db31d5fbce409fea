import logging
from typing import Iterable

import httpx

from hzpp.config import Config
from hzpp.utils.exceptions import FetchException, InvalidDataException

hzpp_headers = {
    'accept': 'text/html,application/xhtml+xml',
    'accept-language': 'hr-HR,hr;q=0.9,en;q=0.8',
    'User-Agent': 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/135.0.0.0 Safari/537.36',
}
# body of the portal's error page
ERROR_MARKERS = ('došlo je do pogreške',)
logger = logging.getLogger(__name__)


async def fetch(_url, method: str = 'get', *, invalid_message: str = 'Invalid data.',
                error_markers: Iterable[str] = ERROR_MARKERS, client: httpx.AsyncClient = None,
                **kwargs) -> httpx.Response:
    """
    GET or POST a page and return the response.
    :raises FetchException: network error or non 200 status
    :raises InvalidDataException: 200 with the site's error page, message is `invalid_message`
    """
    headers = {**hzpp_headers, **(kwargs.get('headers') or {})}
    logger.info(f'fetch url:{_url} method:{method}')
    if method not in ('get', 'post'):
        raise ValueError('Method must be "get" or "post"')

    async def _send(_client: httpx.AsyncClient) -> httpx.Response:
        if method == 'get':
            return await _client.get(_url, headers=headers, params=kwargs.get('params'))
        return await _client.post(_url, headers=headers, data=kwargs.get('data'))

    try:
        if client:
            resp = await _send(client)
        else:
            async with httpx.AsyncClient(timeout=Config.HTTP_TIMEOUT) as _client:
                resp = await _send(_client)
    except httpx.HTTPError as e:
        logger.warning(f'fetch url:{_url} method:{method} failed, err:{e!r}')
        raise FetchException() from e

    if resp.status_code != 200:
        logger.warning(
            f'fetch url:{_url} method:{method} failed, status_code:{resp.status_code} text:{resp.text[0:100]}...')
        raise FetchException()
    if any(marker in resp.text for marker in error_markers):
        logger.warning(f'fetch url:{_url} method:{method} returned an error page')
        raise InvalidDataException(invalid_message)
    return resp


def get_cookie_header(resp: httpx.Response) -> str:
    """Session cookies of a response, formatted for a Cookie request header"""
    return '; '.join(x.split(';')[0] for x in resp.headers.get_list('set-cookie'))
