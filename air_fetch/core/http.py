import requests
from requests.adapters import HTTPAdapter

from .. import __version__

UA = f"air-fetch/{__version__}"


def make_session() -> requests.Session:
    # One session per invocation, shared by the registry lookup and the downloads.
    # No retry policy: a failed request surfaces to the caller as-is.
    adapter = HTTPAdapter(max_retries=0, pool_connections=4, pool_maxsize=4)
    s = requests.Session()
    s.mount("http://", adapter); s.mount("https://", adapter)
    s.headers.update({"User-Agent": UA})
    return s
