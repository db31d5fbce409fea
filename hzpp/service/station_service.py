import asyncio
import logging
import urllib.parse
from typing import Awaitable, Callable, List, Optional

from async_lru import alru_cache

from hzpp import config
from hzpp.schemas.JourneySchemas import Station, RollingStockInfo
from hzpp.utils import http_utils
from hzpp.utils.html_utils import parse_html, text_of, has_class_xpath
from hzpp.utils.station_utils import match_station_name, find_stations_by_keyword
from hzpp.utils.validation_utils import parse_or_raise

logger = logging.getLogger(__name__)


def parse_station_page(html: str) -> List[Station]:
    tree = parse_html(html)
    stations = []
    for option in tree.xpath('//select[@id="StartId"]/option'):
        _id = option.get('value')
        name = text_of(option)
        if _id and name:
            stations.append({'id': _id, 'name': name})
    return parse_or_raise(List[Station], stations, 'station')


async def fetch_stations() -> List[Station]:
    resp = await http_utils.fetch(config.PORTAL_URL, invalid_message='Invalid station data.')
    stations = parse_station_page(resp.text)
    logger.info(f'loaded {len(stations)} stations')
    return stations


class StationDirectory:
    """
    Refreshable handle to the station list of the portal. Loaded lazily once, `refresh()`
    replaces the snapshot. Readers get the current snapshot and never mutate it.
    """

    def __init__(self, stations: List[Station] = None,
                 loader: Callable[[], Awaitable[List[Station]]] = fetch_stations):
        self._stations: Optional[List[Station]] = list(stations) if stations is not None else None
        self._loader = loader
        self._lock = asyncio.Lock()

    async def get(self, force: bool = False) -> List[Station]:
        if self._stations is not None and not force:
            return self._stations
        async with self._lock:
            if self._stations is None or force:
                self._stations = await self._loader()
            return self._stations

    async def refresh(self) -> List[Station]:
        return await self.get(force=True)

    async def get_by_id(self, station_id: str) -> Optional[Station]:
        stations = await self.get()
        return next((x for x in stations if x.id == station_id), None)

    async def match(self, name: str) -> Optional[Station]:
        return match_station_name(await self.get(), name)

    async def search(self, keyword: str) -> List[Station]:
        return find_stations_by_keyword(await self.get(), keyword)


def parse_rolling_stock_page(html: str) -> List[RollingStockInfo]:
    tree = parse_html(html)
    items = []
    for box in tree.xpath(f'//*[{has_class_xpath("articlebox")}]'):
        images = box.xpath('.//img/@src')
        names = box.xpath('.//h3')
        name = text_of(names[0]) if names else ''
        if images and name:
            items.append({'name': name, 'image': urllib.parse.urljoin(config.BASE_URL, images[0].strip())})
    return parse_or_raise(List[RollingStockInfo], items, 'rolling stock')


@alru_cache(maxsize=8, ttl=3600)
async def fetch_rolling_stock(url: str) -> List[RollingStockInfo]:
    resp = await http_utils.fetch(url, invalid_message='Invalid static data.')
    return parse_rolling_stock_page(resp.text)


class RollingStockCatalog:
    """Locomotive, wagon and train type pages, each cached for an hour by `fetch_rolling_stock`"""
    urls = {
        'locomotives': config.LOCOMOTIVES_URL,
        'wagons': config.WAGONS_URL,
        'train_types': config.TRAINS_URL,
    }

    async def get(self, kind: str, force: bool = False) -> List[RollingStockInfo]:
        url = self.urls[kind]
        if force:
            fetch_rolling_stock.cache_invalidate(url)
        return await fetch_rolling_stock(url)

    async def get_locomotives(self, force: bool = False) -> List[RollingStockInfo]:
        return await self.get('locomotives', force)

    async def get_wagons(self, force: bool = False) -> List[RollingStockInfo]:
        return await self.get('wagons', force)

    async def get_train_types(self, force: bool = False) -> List[RollingStockInfo]:
        return await self.get('train_types', force)
