from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from day_planner.errors import ProviderFetchError

logger = logging.getLogger(__name__)

# Gmail accepts at most 100 calls per batch request.
BATCH_LIMIT = 100


class GmailClient:
    """EmailProvider backed by the Gmail REST API."""

    def __init__(self, credentials: Credentials, user_id: str = "me"):
        # Gmail userId, "me" refers to the authenticated user.
        self._user_id = user_id
        self._service = build("gmail", "v1", credentials=credentials, cache_discovery=False)

    def list_messages(self, query: str = "", max_results: int = 10) -> List[str]:
        """
        List message IDs matching a Gmail search query.
        Example query: 'newer_than:1d in:inbox'
        """
        resp = (
            self._service.users()
            .messages()
            .list(userId=self._user_id, q=query, maxResults=max_results)
            .execute()
        )
        return [m["id"] for m in resp.get("messages", [])]

    def get_message(self, message_id: str, fmt: str = "full") -> Dict[str, Any]:
        """
        Fetch a full message resource.
        fmt: 'full' | 'metadata' | 'minimal' | 'raw'
        """
        return (
            self._service.users()
            .messages()
            .get(userId=self._user_id, id=message_id, format=fmt)
            .execute()
        )

    def get_messages(self, message_ids: List[str], fmt: str = "full") -> List[Dict[str, Any]]:
        """
        Fetch several message resources through Gmail batch requests.
        Results keep the order of message_ids; the first failed item is raised.
        """
        results: Dict[str, Dict[str, Any]] = {}
        errors: List[Exception] = []

        def _collect(request_id: str, response: Dict[str, Any], exception: Optional[Exception]) -> None:
            if exception is not None:
                errors.append(exception)
            else:
                results[request_id] = response

        for start in range(0, len(message_ids), BATCH_LIMIT):
            batch = self._service.new_batch_http_request(callback=_collect)
            for mid in message_ids[start:start + BATCH_LIMIT]:
                request = (
                    self._service.users()
                    .messages()
                    .get(userId=self._user_id, id=mid, format=fmt)
                )
                batch.add(request, request_id=mid)
            batch.execute()
            if errors:
                raise errors[0]
        return [results[mid] for mid in message_ids if mid in results]

    def list_raw_messages(self, limit: int = 20) -> List[Dict[str, Any]]:
        """Return the newest `limit` messages as full Gmail message resources."""
        try:
            message_ids = self.list_messages(max_results=limit)
            messages = self.get_messages(message_ids) if message_ids else []
        except HttpError as exc:
            raise ProviderFetchError("email", f"Gmail request failed: {exc}", cause=exc) from exc
        logger.debug("Fetched %d Gmail messages", len(messages))
        return messages

    def get_raw_message(self, message_id: str) -> Dict[str, Any]:
        try:
            return self.get_message(message_id)
        except HttpError as exc:
            raise ProviderFetchError(
                "email", f"Gmail message {message_id} unavailable: {exc}", cause=exc
            ) from exc
