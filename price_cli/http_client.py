from __future__ import annotations

import json
from typing import Any, Dict, Optional

import click
import requests
from requests import Response

from .config import APISettings


class APIClient:
    """Thin wrapper over requests to talk to the Price API."""

    def __init__(self, settings: APISettings, timeout: int = 30) -> None:
        self.settings = settings
        self.timeout = timeout
        self.session = requests.Session()

    @property
    def headers(self) -> Dict[str, str]:
        return {"Accept": "application/json"}

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.settings.base_url}{path}"
        try:
            response = self.session.get(url, headers=self.headers, params=params, timeout=self.timeout)
        except requests.RequestException as exc:
            raise click.ClickException(f"GET {url} failed: {exc}") from exc
        return self._handle_response(response)

    def _handle_response(self, response: Response) -> Any:
        if not response.ok:
            self._raise_for_status(response)
        try:
            return response.json()
        except json.JSONDecodeError as exc:
            raise click.ClickException("Response was not valid JSON") from exc

    def _raise_for_status(self, response: Response) -> None:
        try:
            payload = response.json()
            message = payload.get("detail") or payload
        except Exception:
            message = response.text
        raise click.ClickException(
            f"Request failed with status {response.status_code}: {message}"
        )
