from json.decoder import JSONDecodeError
from unittest.mock import Mock

import pytest


def make_response(status_code: int=200, data=None, url: str='http://explorer.test/', undecodable: bool=False) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.url = url
    if undecodable:
        response.json.side_effect = JSONDecodeError('Expecting value', '', 0)
    else:
        response.json.return_value = data
    return response


@pytest.fixture(autouse=True)
def api_settings(settings):
    settings.EXPLORER_API_URL = 'http://explorer.test'
    settings.HISTORY_API_URL = 'http://history.test'
    return settings


@pytest.fixture
def api_session(mocker):
    session = mocker.Mock()
    mocker.patch('main.utils.Session', return_value=session)
    return session


@pytest.fixture
def response_factory():
    return make_response
