import json

import pytest
import requests
from requests.structures import CaseInsensitiveDict


def make_response(body, status_code=200, headers=None):
    """Canned requests.Response, as if it had come off the wire."""
    response = requests.Response()
    response.status_code = status_code
    response._content = (body if isinstance(body, str) else json.dumps(body)).encode("utf-8")
    response.headers = CaseInsensitiveDict(headers or {})
    response.encoding = "utf-8"
    return response


class FakeSession:
    """
    Stands in for requests.Session: records every call and answers with a canned response.
    """
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response

    @property
    def last_body(self) -> str:
        data = self.calls[-1].get("data")
        return data.decode("utf-8") if data else ""


@pytest.fixture
def andorra_points():
    from routeclient import GeoPoint
    return GeoPoint(42.509225, 1.534728), GeoPoint(42.512602, 1.551558)
