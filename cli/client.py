from __future__ import annotations

import json
from typing import Any, Dict, NoReturn

import httpx
import typer

from cli.config import CLIConfig
from services.payloads import PayloadFormat


class ApiClient:
    """Minimal HTTP client that talks to the sensor API like a device would."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def send_reading(
        self,
        temperature: float,
        humidity: float,
        payload_format: PayloadFormat = PayloadFormat.form,
    ) -> Dict[str, Any]:
        fields = {"temp": temperature, "hum": humidity}
        if payload_format is PayloadFormat.json:
            request = {
                "content": json.dumps(fields),
                "headers": {"Content-Type": "application/json"},
            }
        elif payload_format is PayloadFormat.form:
            request = {"data": {key: str(value) for key, value in fields.items()}}
        else:
            request = {
                "content": f"temp={temperature}&hum={humidity}",
                "headers": {"Content-Type": "text/plain"},
            }
        return self._request_json("POST", "/api/data", **request)

    def get_readings(self) -> Dict[str, Any]:
        return self._request_json("GET", "/api/data")

    def get_health(self) -> Dict[str, Any]:
        return self._request_json("GET", "/api/health")

    def ping(self) -> str:
        response = self._send("GET", "/api/test")
        return response.text

    def _request_json(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        response = self._send(method, url, **kwargs)
        payload = response.json()
        if not isinstance(payload, dict):
            raise typer.BadParameter(f"Unexpected response payload from {url}.")
        return payload

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(code=1) from exc
        return response

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> NoReturn:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail") or data.get("error")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
