import json
from typing import Any, Optional

import requests

from src.sdk.logger.log_record import LogRecord
from src.sdk.logger.sink_errors import EncodingError, RemoteError

PUSH_LOGS_PATH = "/api/v1/observatory/logs"


class RemoteLogSink:
    """
    Sink that pushes each record to an observatory service over HTTP.

    One synchronous POST per record, as a batch of one. No retry and,
    unless `timeout` is given, no deadline: a hung service blocks the
    caller.
    """

    def __init__(
        self,
        base_uri: str,
        *,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_uri = base_uri.rstrip("/")
        self.timeout = timeout
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()

    @property
    def endpoint_url(self) -> str:
        return f"{self.base_uri}{PUSH_LOGS_PATH}"

    @staticmethod
    def build_payload(record: LogRecord) -> dict[str, Any]:
        return {
            "logs": [
                {
                    "message": record.message,
                    "logLevel": record.level.value,
                    "data": dict(record.context),
                    "module": None,
                    "submodule": None,
                }
            ]
        }

    def write(self, record: LogRecord) -> None:
        try:
            data = json.dumps(self.build_payload(record), ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise EncodingError("RemoteLogSink", f"failed to encode observatory log message: {e}") from e

        try:
            response = self._session.post(
                self.endpoint_url,
                data=data,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise RemoteError("RemoteLogSink", f"failed to send observatory log message: {e}") from e

        try:
            if response.status_code != 200:
                raise RemoteError(
                    "RemoteLogSink",
                    f"observatory log request failed with status: {response.status_code} {response.reason}",
                    status_code=response.status_code,
                )
        finally:
            response.close()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()
