from dotenv import load_dotenv
import os

from pydantic import BaseModel

load_dotenv()

BASE_URL = 'https://www.hzpp.hr'
PORTAL_URL = 'https://prodaja.hzpp.hr/hr/Ticket/Journey'
TRANSPORTATIONS_URL = 'https://prodaja.hzpp.hr/hr/Ticket/GetTransportations'
TRAIN_COMPOSITION_URL = 'https://traindelay.hzpp.hr/train/composition'

LOCOMOTIVES_URL = 'https://www.hzpp.hr/lokomotive'
TRAINS_URL = 'https://www.hzpp.hr/vlakovi'
WAGONS_URL = 'https://www.hzpp.hr/vagoni'


class Config:
    AUTH_TOKEN = os.getenv("HZPP_AUTH_TOKEN", "")
    MINUTE_DEVIATION = int(os.getenv("HZPP_MINUTE_DEVIATION", 15))
    CACHE_TTL = int(os.getenv("HZPP_CACHE_TTL", 10800))
    CACHE_MAXSIZE = int(os.getenv("HZPP_CACHE_MAXSIZE", 256))
    HTTP_TIMEOUT = float(os.getenv("HZPP_HTTP_TIMEOUT", 20))
    TIMEZONE = os.getenv("HZPP_TIMEZONE", "Europe/Zagreb")
    WORK_DIR = os.getenv("WORK_DIR", ".")


class ManagerConfig(BaseModel):
    # minutes around the scheduled departure in which live info is fetched, -1 fetches always
    minute_deviation_train_info: int = Config.MINUTE_DEVIATION
    # 0 disables caching
    cache_ttl_seconds: int = Config.CACHE_TTL
    cache_maxsize: int = Config.CACHE_MAXSIZE
    auth_token: str = Config.AUTH_TOKEN
