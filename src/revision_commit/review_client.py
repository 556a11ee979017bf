"""Review service client interface and HTTP implementation."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from revision_commit.config import Config
from revision_commit.errors import TransportError

logger = logging.getLogger(__name__)


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass
class RevisionRef:
    """A revision as reported by the review service."""
    id: int
    name: str
    source_path: Optional[str] = None

    @property
    def label(self) -> str:
        return f"D{self.id}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RevisionRef":
        try:
            return cls(
                id=int(data["id"]),
                name=data.get("name", ""),
                source_path=data.get("source_path"),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise TransportError(f"Unexpected revision format from review service: {data!r} ({e})")


def parse_revision_id(value: Any) -> int:
    """Accept 123, "123" or "D123"."""
    text = str(value).strip()
    if text[:1] in ("D", "d"):
        text = text[1:]
    try:
        return int(text)
    except ValueError:
        raise ValueError(f"Invalid revision ID: {value!r}")


class ReviewServiceClient(ABC):
    """Abstract interface for the remote review service."""

    @abstractmethod
    def find_committable_revisions(self, owner_id: str) -> List[RevisionRef]:
        """
        List revisions owned by `owner_id` which have been accepted.

        Raises:
            TransportError: On API or network errors
        """
        pass

    @abstractmethod
    def get_commit_paths(self, revision_id: int) -> List[str]:
        """Return the revision's declared path set."""
        pass

    @abstractmethod
    def get_commit_message(self, revision_id: int) -> str:
        """Return the rendered commit message for the revision."""
        pass

    @abstractmethod
    def mark_committed(self, revision_id: int) -> None:
        """Mark the revision as committed on the service."""
        pass


class HttpReviewClient(ReviewServiceClient):
    """JSON-over-HTTP review service client.

    Every call is a POST to `{base_url}/api/{method}` with a body of
    `{"params": {...}, "token": ...}`. The service answers with
    `{"result": ..., "error_code": ..., "error_info": ...}`.
    """

    def __init__(
        self,
        base_url: str,
        api_token: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Review service root URL
            api_token: API token sent with every call
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
        self.timeout = timeout
        self.transport = transport

    def _make_request(self, method: str, payload: dict) -> dict:
        """Make HTTP request to the review service."""
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            response = client.post(
                f"{self.base_url}/api/{method}",
                json=payload,
            )
            response.raise_for_status()
            return response.json()

    def call(self, method: str, params: Dict[str, Any]) -> Any:
        """
        Call a review service method and return its result.

        Raises:
            TransportError: On HTTP, network or service-level errors
        """
        payload = {"params": params, "token": self.api_token}
        logger.debug("Calling %s with %s", method, params)

        try:
            data = self._make_request(method, payload)

        except httpx.HTTPStatusError as e:
            # Extract error message from response if available
            try:
                error_msg = e.response.json().get("error_info") or str(e)
            except Exception:
                error_msg = str(e)
            raise TransportError(f"{method}: {error_msg}")

        except httpx.TimeoutException:
            raise TransportError(f"{method}: request timed out after {self.timeout}s")
        except httpx.RequestError as e:
            raise TransportError(f"{method}: network error: {e}")
        except ValueError:
            raise TransportError(f"{method}: response was not valid JSON")

        if not isinstance(data, dict):
            raise TransportError(f"{method}: unexpected response format")

        if data.get("error_code"):
            error_msg = f"{method}: {data['error_code']}"
            if data.get("error_info"):
                error_msg = f"{error_msg}: {data['error_info']}"
            raise TransportError(error_msg)

        return data.get("result")

    def find_committable_revisions(self, owner_id: str) -> List[RevisionRef]:
        result = self.call(
            "revision.find",
            {"query": "committable", "owners": [owner_id]},
        )
        return [RevisionRef.from_dict(item) for item in result or []]

    def get_commit_paths(self, revision_id: int) -> List[str]:
        result = self.call("revision.getcommitpaths", {"revision_id": revision_id})
        if not isinstance(result, list):
            raise TransportError("revision.getcommitpaths: expected a list of paths")
        return [str(path) for path in result]

    def get_commit_message(self, revision_id: int) -> str:
        result = self.call("revision.getcommitmessage", {"revision_id": revision_id})
        if not isinstance(result, str):
            raise TransportError("revision.getcommitmessage: expected a string")
        return result

    def mark_committed(self, revision_id: int) -> None:
        self.call("revision.markcommitted", {"revision_id": revision_id})


def get_review_client(config: Config) -> HttpReviewClient:
    """Get a review service client instance from configuration."""
    return HttpReviewClient(
        base_url=config.review_url,
        api_token=config.api_token,
        timeout=config.timeout,
    )
