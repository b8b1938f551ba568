import logging
from http import HTTPStatus

import requests

from estimate_dashboard.config.sections import Remote
from estimate_dashboard.type_defs import EstimateId, JsonObject, is_json_object

logger = logging.getLogger(__name__)

SUCCESS_STATUS_CODES = frozenset(
    {HTTPStatus.OK.value, HTTPStatus.CREATED.value, HTTPStatus.NO_CONTENT.value}
)
PREVIEW_LIMIT = 200


def _preview_response_body(response: requests.Response) -> str:
    text = getattr(response, "text", "") or ""
    return text if len(text) <= PREVIEW_LIMIT else f"{text[:PREVIEW_LIMIT]}..."


class Client(requests.Session):
    """Row-store client for a PostgREST table endpoint.

    Every call is a single attempt. Failures raise: ``PermissionError`` for
    rejected credentials, ``requests.RequestException`` for transport errors and
    unexpected status codes, ``ValueError`` for payloads that are not rows.
    """

    REST_PATH = "rest/v1"

    def __init__(self, base_url: str, token: str, table: str = "estimates", timeout: float = 10.0):
        super().__init__()

        self.base_url = base_url.rstrip("/")
        self.token = token
        self.table = table
        self.timeout = timeout
        self.headers.update(
            {
                "accept": "application/json",
                "apikey": self.token,
                "Authorization": f"Bearer {self.token}",
            }
        )

    @classmethod
    def from_settings(cls, remote: Remote) -> "Client":
        return cls(
            base_url=remote.endpoint_url,
            token=remote.access_token,
            table=remote.table,
            timeout=remote.timeout,
        )

    @property
    def table_url(self) -> str:
        return f"{self.base_url}/{self.REST_PATH}/{self.table}"

    def request(self, method: str, url: str, *args, **kwargs) -> requests.Response:
        kwargs.setdefault("timeout", self.timeout)
        response = super().request(method, url, *args, **kwargs)

        if response.status_code in (HTTPStatus.UNAUTHORIZED.value, HTTPStatus.FORBIDDEN.value):
            logger.error("Received authorization error: %s", _preview_response_body(response))
            raise PermissionError("Authorization failed with the provided token.")

        elif response.status_code not in SUCCESS_STATUS_CODES:
            raise requests.RequestException(
                f"Received unexpected status code: {response.status_code}. "
                f"Response content: {_preview_response_body(response)}"
            )

        return response

    def select_all(self, order_by: str = "id") -> list[JsonObject]:
        response = self.get(self.table_url, params={"select": "*", "order": f"{order_by}.asc"})
        rows = response.json()
        if not isinstance(rows, list) or not all(is_json_object(row) for row in rows):
            raise ValueError(f"Expected a list of rows from {self.table}, got {type(rows).__name__}")
        return rows

    def insert(self, rows: JsonObject | list[JsonObject]) -> None:
        self.post(self.table_url, json=rows, headers={"Prefer": "return=minimal"})

    def update(self, estimate_id: EstimateId, row: JsonObject) -> None:
        self.patch(
            self.table_url,
            params={"id": f"eq.{estimate_id}"},
            json=row,
            headers={"Prefer": "return=minimal"},
        )

    def delete_by_id(self, estimate_id: EstimateId) -> None:
        self.delete(self.table_url, params={"id": f"eq.{estimate_id}"})
