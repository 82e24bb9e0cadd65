import copy
import logging
from typing import Any, Dict, List, Optional, Tuple

import pytest

import konverge
from konverge._cogs.clients import api, errors
from konverge._cogs.configs.configuration import Settings, settings_var


@pytest.fixture()
def settings():
    return Settings()


@pytest.fixture()
def settings_via_contextvar(settings):
    token = settings_var.set(settings)
    try:
        yield settings
    finally:
        settings_var.reset(token)


@pytest.fixture()
def logger():
    return logging.getLogger('konverge.tests')


@pytest.fixture(autouse=True)
def registry():
    registry = konverge.DriverRegistry()
    konverge.set_default_registry(registry)
    return registry


def _not_found(url: str) -> errors.APINotFoundError:
    payload = {'kind': 'Status', 'code': 404, 'reason': 'NotFound', 'message': f"{url} not found"}
    return errors.APINotFoundError(payload, status=404)  # type: ignore


class FakeAPI:
    """
    A fake of the Kubernetes API at the level of the parsed JSON responses.

    The responses are queued per method & URL: the payloads are returned,
    the exceptions are raised. The last response stays for all later calls.
    Unknown URLs fail with 404, as the real API does.
    """

    def __init__(self) -> None:
        super().__init__()
        self.responses: Dict[Tuple[str, str], List[Any]] = {}
        self.calls: List[Tuple[str, str, Optional[Any]]] = []

    def add(self, method: str, url: str, *results: Any) -> None:
        self.responses.setdefault((method, url), []).extend(results)

    def requests(self, method: Optional[str] = None) -> List[Tuple[str, str, Optional[Any]]]:
        return [call for call in self.calls if method is None or call[0] == method]

    def handle(self, method: str, url: str, *, payload: Optional[Any] = None, **_: Any) -> Any:
        self.calls.append((method, url, copy.deepcopy(payload)))
        queue = self.responses.get((method, url))
        if not queue:
            raise _not_found(url)
        result = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(result, BaseException):
            raise result
        return copy.deepcopy(result)


@pytest.fixture()
def fake_api(mocker):
    fake = FakeAPI()
    for method in ['get', 'post', 'put', 'delete']:
        mocker.patch.object(api, method, side_effect=lambda url, _method=method, **kw:
                            fake.handle(_method, url, **kw))
    return fake
