"""Shared fixtures for the test suite."""

from typing import Any, Optional
from unittest import mock

import requests

from untis_bot.config import Settings


def make_settings(**overrides: Any) -> Settings:
    """Settings built from keyword arguments only, ignoring any .env file."""
    values = {
        "untis_subdomain": "mese",
        "untis_school": "Test+School",
        "untis_username": "student",
        "untis_password": "secret",
        "untis_class_id": 661,
        "telegram_bot_token": "123:abc",
        "telegram_chat_id": "-1001",
        "log_file": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def json_response(body: Any, status: int = 200, text: Optional[str] = None) -> mock.Mock:
    """A fake requests.Response returning ``body`` from ``json()``."""
    response = mock.Mock(spec=requests.Response)
    response.status_code = status
    response.text = text if text is not None else str(body)
    response.json.return_value = body
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status} Error"
        )
    else:
        response.raise_for_status.return_value = None
    return response


def fake_http(*responses: Any) -> mock.Mock:
    """A fake requests.Session whose ``post`` yields ``responses`` in order."""
    http = mock.Mock(spec=requests.Session)
    http.headers = {}
    http.post.side_effect = list(responses)
    return http
