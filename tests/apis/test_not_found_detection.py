import aiohttp
import pytest

import konverge
from konverge._cogs.clients.errors import APIConflictError, APIError, APINotFoundError, \
                                         APIServerError, is_not_found


def status(reason, message='irrelevant'):
    return {'kind': 'Status', 'reason': reason, 'message': message}


@pytest.mark.parametrize('error', [
    pytest.param(APINotFoundError(None, status=404), id='typed-404'),
    pytest.param(APINotFoundError(status('NotFound'), status=404), id='typed-404-with-payload'),
    pytest.param(APIError(status('NotFound'), status=400), id='reason-notfound'),
])
def test_typed_not_found_errors_are_detected(error):
    assert is_not_found(error)


@pytest.mark.parametrize('error', [
    pytest.param(APIConflictError(status('Conflict', 'x not found'), status=409), id='conflict'),
    pytest.param(APIServerError(status('InternalError', 'x not found'), status=500), id='server'),
    pytest.param(APIError(None, status=400), id='no-payload'),
])
def test_typed_errors_ignore_the_text(error):
    assert not is_not_found(error)


def test_aiohttp_404_is_detected(mocker):
    error = aiohttp.ClientResponseError(request_info=mocker.Mock(), history=(), status=404)
    assert is_not_found(error)


def test_aiohttp_other_statuses_are_not_detected(mocker):
    error = aiohttp.ClientResponseError(request_info=mocker.Mock(), history=(),
                                        status=500, message='x not found')
    assert not is_not_found(error)


@pytest.mark.parametrize('text, expected', [
    ('deployments.apps "nginx" not found', True),
    ('nginx not found', True),
    ('not found', False),  # nothing before it
    ('nginx is not ready', False),
    ('', False),
])
def test_untyped_errors_are_detected_by_text(text, expected):
    assert is_not_found(RuntimeError(text)) == expected


def test_api_errors_are_exported_publicly():
    assert konverge.APINotFoundError is APINotFoundError
    assert issubclass(konverge.APINotFoundError, konverge.APIError)
    assert konverge.is_not_found is is_not_found


def test_status_details_are_exposed():
    payload = dict(status('NotFound'), details={'name': 'nginx', 'kind': 'deployments'})
    error = APINotFoundError(payload, status=404)
    assert error.details == {'name': 'nginx', 'kind': 'deployments'}
    assert error.code is None
    assert str(error) == 'irrelevant'


def test_errors_without_payloads_have_no_details():
    error = APIError(None, status=400)
    assert error.details is None
    assert error.reason is None
    assert str(error) == 'K8s API error with HTTP status 400'
