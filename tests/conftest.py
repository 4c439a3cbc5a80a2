import httpx
import pytest

from movie_bff.config import Settings


def make_response(status_code=200, json=None, content=None, method='GET',
                  url='https://upstream.test/'):
    """Build a real httpx.Response bound to a request, so raise_for_status works."""
    kwargs = {}
    if json is not None:
        kwargs['json'] = json
    if content is not None:
        kwargs['content'] = content
    return httpx.Response(status_code, request=httpx.Request(method, url), **kwargs)


class FakeHttpClient:
    """Stands in for httpx.AsyncClient; records every call it receives."""

    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.calls = []

    async def _answer(self, method, url, **kwargs):
        self.calls.append({'method': method, 'url': url, **kwargs})
        if self.exc is not None:
            raise self.exc
        return self.response

    async def get(self, url, params=None):
        return await self._answer('GET', url, params=params)

    async def post(self, url, params=None, json=None, headers=None):
        return await self._answer('POST', url, params=params, json=json, headers=headers)


@pytest.fixture
def settings():
    return Settings(API_KEY_MOVIES='tmdb-key', APIKEY='firebase-key', _env_file=None)
