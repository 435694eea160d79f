import copy
import json

import httpx
import pytest

from encora_provider.core.config import ProviderConfig, get_settings

ENCORA_HOST = "encora.it"
STAGEMEDIA_HOST = "stagemedia.me"

WICKED_RECORDING = {
    "id": 4821,
    "show": "Wicked",
    "tour": "Broadway",
    "master": "dreamer",
    "date": {
        "full_date": "2024-12-31",
        "month_known": True,
        "day_known": True,
        "date_variant": None,
        "time": None,
    },
    "nft": {"nft_date": None, "nft_forever": False},
    "cast": [
        {
            "performer": {"id": 11, "name": "Cynthia Erivo", "slug": "cynthia-erivo"},
            "character": {"id": 1, "name": "Elphaba", "order": 0},
            "status": None,
        },
        {
            "performer": {"id": 12, "name": "Jane Doe"},
            "character": {"id": 2, "name": "Glinda", "order": 1},
            "status": {"label": "Understudy", "abbreviation": "u/s"},
        },
    ],
    "notes": "Great capture.",
    "master_notes": "Slight obstruction in act two.",
    "metadata": {
        "show_id": 77,
        "venue": "Gershwin Theatre",
        "city": "New York",
        "recording_type": "video",
        "amount_recorded": "full show",
        "has_subtitles": False,
        "is_concert": False,
        "show_description": "The untold story of the witches of Oz.",
    },
}


@pytest.fixture(autouse=True)
def reset_env(monkeypatch):
    for name in (
        "ENCORA_API_KEY",
        "STAGEMEDIA_API_KEY",
        "ENCORA_ADD_MASTER_DIRECTOR",
        "ENCORA_TITLE_FORMAT",
        "ENCORA_DATE_REPLACE_CHAR",
        "ENCORA_GENERATE_THUMBNAILS",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def recording_payload():
    return copy.deepcopy(WICKED_RECORDING)


@pytest.fixture
def config():
    return ProviderConfig(encora_api_key="encora-key", stagemedia_api_key="stage-key")


class FakeRemote:
    """Routes requests for both services and records what was asked for."""

    def __init__(self):
        self.routes = {}
        self.requests = []

    def add(self, host, path, *, status=200, json_body=None, content=None):
        self.routes[(host, path)] = (status, json_body, content)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.url.host, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        status, json_body, content = route
        if content is not None:
            return httpx.Response(status, content=content)
        return httpx.Response(status, content=json.dumps(json_body).encode("utf-8"))

    @property
    def transport(self):
        return httpx.MockTransport(self.handler)

    def paths(self, host):
        return [request.url.path for request in self.requests if request.url.host == host]


@pytest.fixture
def remote():
    return FakeRemote()


class RecordingThumbnails:
    def __init__(self):
        self.calls = []

    async def generate(self, media_path, directory):
        self.calls.append((media_path, directory))


@pytest.fixture
def thumbnails():
    return RecordingThumbnails()
