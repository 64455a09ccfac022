"""Unit tests for runtime utilities in runtime.py.

Test coverage includes:

1. running_locally() behavior
2. get_header() case-insensitive lookup
3. get_caller_identity() precedence
   - X-Forwarded-For first entry, trimmed
   - Peer address (REST and HTTP API payloads)
   - Existing session cookie
   - New session when nothing else is available
"""

import pytest

from idemshort.constants import ENV
from idemshort.utils.runtime import running_locally, get_header, get_caller_identity


# -------------------------------
# 1. running_locally()
# -------------------------------


@pytest.mark.parametrize(
    'app_env, sam_flag, expected',
    [
        ('local', None, True),
        ('dev', None, False),
        ('dev', 'true', True),
    ],
)
def test_running_locally(monkeypatch, app_env, sam_flag, expected):
    monkeypatch.setenv(ENV.App.APP_ENV, app_env)

    if sam_flag is None:
        monkeypatch.delenv(ENV.App.AWS_SAM_LOCAL, raising=False)
    else:
        monkeypatch.setenv(ENV.App.AWS_SAM_LOCAL, sam_flag)

    assert running_locally() is expected


# -------------------------------
# 2. get_header()
# -------------------------------


@pytest.mark.parametrize('name', ['x-forwarded-for', 'X-Forwarded-For', 'X-FORWARDED-FOR'])
def test_get_header_is_case_insensitive(name):
    event = {'headers': {'x-Forwarded-for': '203.0.113.7'}}
    assert get_header(event, name) == '203.0.113.7'


@pytest.mark.parametrize('event', [{}, {'headers': None}, {'headers': {'Other': 'x'}}])
def test_get_header_missing(event):
    assert get_header(event, 'X-Forwarded-For') is None


# -------------------------------
# 3. get_caller_identity()
# -------------------------------


@pytest.fixture
def rest_event():
    return {
        'headers': {'X-Forwarded-For': ' 203.0.113.7 , 10.0.0.1'},
        'requestContext': {'identity': {'sourceIp': '198.51.100.2'}},
    }


def test_forwarded_for_takes_precedence(rest_event):
    assert get_caller_identity(rest_event) == ('203.0.113.7', None)


def test_peer_address_rest_api(rest_event):
    del rest_event['headers']['X-Forwarded-For']
    assert get_caller_identity(rest_event) == ('198.51.100.2', None)


def test_peer_address_http_api():
    event = {'requestContext': {'http': {'sourceIp': '198.51.100.3'}}}
    assert get_caller_identity(event) == ('198.51.100.3', None)


@pytest.mark.parametrize('forwarded_for', ['', ' ', ', 10.0.0.1'])
def test_empty_forwarded_for_falls_through(forwarded_for):
    event = {'headers': {'X-Forwarded-For': forwarded_for}, 'requestContext': {'identity': {'sourceIp': '198.51.100.2'}}}
    assert get_caller_identity(event) == ('198.51.100.2', None)


@pytest.mark.parametrize(
    'event',
    [
        {'headers': {'Cookie': 'theme=dark; sid=abc123'}},
        {'cookies': ['theme=dark', 'sid=abc123']},
    ],
)
def test_existing_session(event):
    assert get_caller_identity(event) == ('session:abc123', None)


def test_new_session():
    identity, session_id = get_caller_identity({'headers': {'Cookie': 'theme=dark'}})

    assert session_id is not None
    assert len(session_id) == 32
    assert identity == f'session:{session_id}'


def test_new_sessions_are_unique():
    assert get_caller_identity({})[1] != get_caller_identity({})[1]
