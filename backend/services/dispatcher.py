"""
Request Dispatcher - HTTP transport to the chat backend.

The session manager only depends on the Dispatcher protocol. HttpDispatcher
is the shipped implementation: it posts JSON over httpx and converts every
transport problem into a TransportError whose code tells the classifier
what went wrong. It never decides what the user sees.

Endpoints (relative to api_url):
    POST   /chat            send a message
    DELETE /session/{id}    tear down a session
    GET    /session/{id}    session info
    POST   /cta-action      report a CTA click
    POST   /feedback        report message feedback
    POST   {autocomplete_url}  suggestions for partial input
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol

import httpx
from pydantic import BaseModel

from errors import TransportError
from logging_config import log_dispatch

from .models import CTAButton

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# OUTBOUND BODIES
# =============================================================================


class RequestContext(BaseModel):
    userAgent: str
    timestamp: int


class ChatRequest(BaseModel):
    message: str
    sessionId: str
    timestamp: str
    context: RequestContext


class CompletionRequest(BaseModel):
    message: str
    sessionId: str
    source: str = "portal"
    playType: str = "Basic Option"


class CTAActionRequest(BaseModel):
    action: str
    actionName: str
    sessionId: str
    timestamp: str


class FeedbackRequest(BaseModel):
    messageId: str
    rating: int
    comment: Optional[str] = None
    sessionId: str
    timestamp: str


# =============================================================================
# DISPATCHER
# =============================================================================


class Dispatcher(Protocol):
    """Capability the session manager needs from a transport.

    Every method returns the decoded body or raises TransportError.
    """

    async def send(self, message: str, session_id: str) -> Any: ...

    async def teardown(self, session_id: str) -> Any: ...

    async def session_info(self, session_id: str) -> Any: ...

    async def autocomplete(self, partial: str, session_id: str) -> Any: ...

    async def cta_action(self, button: CTAButton, session_id: str) -> Any: ...

    async def feedback(self, message_id: str, rating: int, comment: Optional[str], session_id: str) -> Any: ...


class HttpDispatcher:
    """httpx-based Dispatcher.

    Args:
        api_url: Backend base URL (e.g. "http://localhost:3000/api")
        autocomplete_url: Full URL of the autocomplete endpoint
        timeout: Request timeout in seconds
        user_agent: Reported in the chat request context
        client: Optional pre-built AsyncClient (tests pass one with a MockTransport)
    """

    def __init__(
        self,
        api_url: str,
        autocomplete_url: Optional[str] = None,
        timeout: float = 30.0,
        user_agent: str = "chatdesk",
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.autocomplete_url = autocomplete_url or f"{self.api_url}/autocomplete"
        self.user_agent = user_agent
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_config(cls, client: Optional[httpx.AsyncClient] = None) -> "HttpDispatcher":
        from config import runtime_config

        return cls(
            api_url=runtime_config.api_url,
            autocomplete_url=runtime_config.autocomplete_url,
            timeout=runtime_config.request_timeout_s,
            user_agent=runtime_config.user_agent,
            client=client,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _headers(session_id: str) -> Dict[str, str]:
        return {"Content-Type": "application/json", "X-Session-ID": session_id}

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        """JSON bodies are decoded; anything else is returned as text."""
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def _request(
        self,
        method: str,
        url: str,
        session_id: str,
        body: Optional[BaseModel] = None,
    ) -> Any:
        endpoint = f"{method} {url}"
        log_dispatch(logger, "start", endpoint)
        started = time.monotonic()

        try:
            response = await self._client.request(
                method,
                url,
                headers=self._headers(session_id),
                json=body.model_dump(exclude_none=True) if body is not None else None,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            raise TransportError(
                "Backend rejected request",
                details=f"{endpoint} returned status {status_code}",
                status_code=status_code,
                endpoint=endpoint,
            )
        except httpx.TimeoutException:
            raise TransportError(
                "Backend timed out",
                details=f"{endpoint} took too long",
                error_type="timeout",
                endpoint=endpoint,
            )
        except httpx.RequestError as exc:
            raise TransportError(
                "Backend unreachable",
                details=str(exc) or type(exc).__name__,
                error_type="unreachable",
                status_code=0,
                endpoint=endpoint,
            )

        log_dispatch(logger, "end", endpoint, time.monotonic() - started)
        return self._decode(response)

    async def send(self, message: str, session_id: str) -> Any:
        body = ChatRequest(
            message=message,
            sessionId=session_id,
            timestamp=_now_iso(),
            context=RequestContext(userAgent=self.user_agent, timestamp=int(time.time() * 1000)),
        )
        return await self._request("POST", f"{self.api_url}/chat", session_id, body)

    async def teardown(self, session_id: str) -> Any:
        return await self._request("DELETE", f"{self.api_url}/session/{session_id}", session_id)

    async def session_info(self, session_id: str) -> Any:
        return await self._request("GET", f"{self.api_url}/session/{session_id}", session_id)

    async def autocomplete(self, partial: str, session_id: str) -> Any:
        body = CompletionRequest(message=partial, sessionId=session_id)
        return await self._request("POST", self.autocomplete_url, session_id, body)

    async def cta_action(self, button: CTAButton, session_id: str) -> Any:
        body = CTAActionRequest(
            action=button.value,
            actionName=button.label,
            sessionId=session_id,
            timestamp=_now_iso(),
        )
        return await self._request("POST", f"{self.api_url}/cta-action", session_id, body)

    async def feedback(self, message_id: str, rating: int, comment: Optional[str], session_id: str) -> Any:
        body = FeedbackRequest(
            messageId=message_id,
            rating=rating,
            comment=comment,
            sessionId=session_id,
            timestamp=_now_iso(),
        )
        return await self._request("POST", f"{self.api_url}/feedback", session_id, body)
