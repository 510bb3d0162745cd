from __future__ import annotations

from typing import Any, Dict, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the air monitor service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def send_payload(self, payload: str) -> Dict[str, Any]:
        """Post one raw device line, exactly as the ESP32 bridge does."""
        return self._request("POST", "/api/data", json={"data": payload})

    def get_status(self) -> Dict[str, Any]:
        return self._request("GET", "/api/status")

    def get_history(
        self, hours: Optional[int] = None, limit: Optional[int] = None
    ) -> Dict[str, Any]:
        return self._request("GET", "/api/history", params=_params(hours=hours, limit=limit))

    def get_stats(self, hours: Optional[int] = None) -> Dict[str, Any]:
        return self._request("GET", "/api/stats", params=_params(hours=hours))

    def get_analysis(self, hours: Optional[int] = None) -> Dict[str, Any]:
        return self._request("GET", "/api/analysis", params=_params(hours=hours))

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
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
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: Any = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def _params(**values: Optional[int]) -> Dict[str, int]:
    return {key: value for key, value in values.items() if value is not None}
