"""
ChatDesk Session Manager - session identity, message history and send cycle.

States:
    IDLE --send_message(text)--> AWAITING_REPLY --reply or failure--> IDLE

send_message() never raises for backend problems: a successful payload is
normalized, a failure is classified (or simulated, in simulated mode), and
either way one assistant message is appended. Listeners registered with
subscribe() get a ChatEvent on every transition.

Usage:
    manager = await ChatSessionManager.create()
    unsubscribe = manager.subscribe(render)
    response = await manager.send_message("hello")
"""

import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from config import ClientConfig, runtime_config
from errors import (
    ChatDeskError,
    SessionTeardownError,
    TransportError,
    ValidationError,
    handle_async_errors,
    log_error,
    success_response,
)
from logging_config import log_failure, log_message_in, log_message_out

from .dispatcher import Dispatcher, HttpDispatcher
from .error_classifier import FailureCategory, FailureSignal, classify, to_response
from .kv_store import KeyValueStore, get_identity_store, get_preference_store
from .models import CanonicalResponse, ChatEvent, CTAButton, Message
from .normalizer import normalize
from .simulator import ReplySimulator

logger = logging.getLogger(__name__)

LOCAL_ONLY_WARNING = "Session cleared locally only"

Listener = Callable[[ChatEvent], None]


class ChatState(Enum):
    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"


def _new_message_id() -> str:
    return f"msg_{uuid.uuid4().hex}"


def _new_session_id() -> str:
    return f"session_{uuid.uuid4().hex}"


class ChatSessionManager:
    """Owns the session id, the append-only history and the busy flag.

    Args:
        dispatcher: Transport to the backend, or None when no backend is reachable
        preference_store: Holds the simulated-mode flag
        identity_store: Holds the session id for reconnects
        simulator: Reply generator for simulated mode
        config: Client settings (defaults to the runtime singleton)
    """

    def __init__(
        self,
        dispatcher: Optional[Dispatcher],
        preference_store: KeyValueStore,
        identity_store: KeyValueStore,
        simulator: Optional[ReplySimulator] = None,
        config: Optional[ClientConfig] = None,
    ):
        self.config = config or runtime_config
        self.dispatcher = dispatcher
        self.preferences = preference_store
        self.identity = identity_store
        self.simulator = simulator or ReplySimulator(latency_ms=self.config.sim_latency_ms)

        self._state = ChatState.IDLE
        self._messages: List[Message] = []
        self._session_id: Optional[str] = None
        self._listeners: List[Listener] = []

    @classmethod
    async def create(cls, dispatcher: Optional[Dispatcher] = None, offline: bool = False) -> "ChatSessionManager":
        """Build a manager wired to the configured stores and HTTP backend."""
        if dispatcher is None and not offline:
            dispatcher = HttpDispatcher.from_config()
        return cls(
            dispatcher=dispatcher,
            preference_store=await get_preference_store(),
            identity_store=await get_identity_store(),
        )

    async def aclose(self) -> None:
        close = getattr(self.dispatcher, "aclose", None)
        if close is not None:
            await close()

    # === State ===

    @property
    def state(self) -> ChatState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state is ChatState.AWAITING_REPLY

    @property
    def messages(self) -> List[Message]:
        """Snapshot of the history, oldest first."""
        return list(self._messages)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for ChatEvents. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, kind: str) -> None:
        event = ChatEvent(kind=kind, messages=self.messages, busy=self.busy)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Chat listener failed on {kind} event: {e}", exc_info=True)

    def _set_state(self, state: ChatState) -> None:
        if state is not self._state:
            self._state = state
            self._publish("loading")

    def _append(self, message: Message) -> None:
        self._messages.append(message)
        self._publish("messages")

    # === Session identity ===

    async def _store_call(self, func: Callable, *args: Any) -> Any:
        """Run a store operation; store failures degrade to None."""
        try:
            return await func(*args)
        except Exception as e:
            logger.warning(f"Store operation {getattr(func, '__name__', func)} failed: {e}")
            return None

    async def get_session_id(self) -> str:
        """Current session id, loaded from the identity store or created on first use."""
        if self._session_id:
            return self._session_id

        stored = await self._store_call(self.identity.get, self.config.session_key)
        if isinstance(stored, str) and stored:
            self._session_id = stored
            logger.debug(f"Session resumed: {stored}")
            return stored

        return await self._start_session()

    async def _start_session(self) -> str:
        session_id = _new_session_id()
        self._session_id = session_id
        await self._store_call(self.identity.set, self.config.session_key, session_id)
        logger.info(f"Session started: {session_id}")
        return session_id

    # === Simulated mode ===

    async def is_simulated_mode_enabled(self) -> bool:
        value = await self._store_call(self.preferences.get, self.config.preference_key)
        if value is None:
            return self.config.simulated_mode_default
        return value == "true"

    async def enable_simulated_mode(self) -> None:
        await self._store_call(self.preferences.set, self.config.preference_key, "true")
        logger.info("Simulated mode enabled")

    async def disable_simulated_mode(self) -> None:
        await self._store_call(self.preferences.remove, self.config.preference_key)
        logger.info("Simulated mode disabled")

    # === Send cycle ===

    async def send_message(self, text: str) -> Optional[CanonicalResponse]:
        """Send a user message and append the assistant reply.

        Returns None (and changes nothing) when ``text`` is blank or a send
        is already in flight. Otherwise always returns the CanonicalResponse
        that was appended, whether it came from the backend, the error
        classifier or the simulator.
        """
        if not isinstance(text, str) or not text.strip():
            logger.debug("Ignoring blank message")
            return None
        if self.busy:
            logger.debug("Ignoring message while a reply is pending")
            return None

        # Guard is set before the first await so concurrent calls see it
        self._set_state(ChatState.AWAITING_REPLY)
        try:
            self._append(Message(id=_new_message_id(), text=text, is_from_user=True))

            try:
                response = await self._resolve_reply(text)
            except Exception as e:
                log_error(logger, e, context="send_message")
                response = to_response(classify(e))

            self._append(Message(
                id=_new_message_id(),
                text=response.text,
                is_from_user=False,
                response=response,
                segments=list(response.segments),
            ))
            log_message_out(logger, len(response.segments), len(response.actions), response.simulated)
            return response
        finally:
            self._set_state(ChatState.IDLE)

    async def _resolve_reply(self, text: str) -> CanonicalResponse:
        session_id = await self.get_session_id()
        log_message_in(logger, text, session=session_id)

        if self.dispatcher is None:
            signal = FailureSignal(FailureCategory.CONNECTIVITY, status_code=0, detail="No backend configured")
            return await self._reply_for_failure(signal, text)

        try:
            payload = await self.dispatcher.send(text, session_id)
        except ChatDeskError as e:
            return await self._reply_for_failure(FailureSignal.from_exception(e), text)
        except Exception as e:
            log_error(logger, e, context="Dispatch")
            return await self._reply_for_failure(FailureSignal.from_exception(e), text)

        return normalize(payload)

    async def _reply_for_failure(self, signal: FailureSignal, text: str) -> CanonicalResponse:
        classification = classify(signal)
        simulated = await self.is_simulated_mode_enabled()
        log_failure(logger, signal.category.value, signal.status_code, simulated)

        if simulated:
            try:
                return await self.simulator.simulate(text)
            except Exception as e:
                log_error(logger, e, context="Simulator")

        return to_response(classification)

    # === Session lifecycle ===

    async def clear_session(self) -> Dict[str, Any]:
        """Tear down the remote session and reset local state.

        The local reset always happens. A failed teardown only adds a
        warning to the result.
        """
        old_session_id = await self.get_session_id()
        warning = None

        try:
            if self.dispatcher is None:
                raise SessionTeardownError("No backend configured", session_id=old_session_id)
            await self.dispatcher.teardown(old_session_id)
        except Exception as e:
            logger.warning(f"Session clear failed: {e}")
            warning = LOCAL_ONLY_WARNING

        await self._store_call(self.identity.remove, self.config.session_key)
        self._session_id = None
        await self._start_session()
        self._messages = []
        self._publish("cleared")
        return success_response(warning=warning)

    def _local_session_info(self) -> Dict[str, Any]:
        return {
            "sessionId": self._session_id,
            "messages": len(self._messages),
            "created": datetime.now(timezone.utc).isoformat(),
        }

    @handle_async_errors("session_info", fallback=lambda self: self._local_session_info())
    async def get_session_info(self) -> Dict[str, Any]:
        """Remote session info, or a locally built summary when the backend fails."""
        session_id = await self.get_session_id()
        if self.dispatcher is None:
            raise TransportError("No backend configured", error_type="unreachable")
        info = await self.dispatcher.session_info(session_id)
        if not isinstance(info, dict):
            return self._local_session_info()
        return info

    # === Auxiliary backend calls ===

    @handle_async_errors("autocomplete", fallback=lambda *args, **kwargs: [])
    async def get_completions(self, partial: str) -> List[str]:
        """Autocomplete suggestions for partial input. Failures yield []."""
        if not isinstance(partial, str) or len(partial.strip()) < self.config.completion_min_chars:
            return []
        if self.dispatcher is None:
            return []

        session_id = await self.get_session_id()
        suggestions = await self.dispatcher.autocomplete(partial, session_id)
        if not isinstance(suggestions, list):
            return []
        return [s for s in suggestions if isinstance(s, str) and s.strip()]

    async def handle_cta_action(self, button: CTAButton) -> Any:
        """Report a CTA click. Raises TransportError on failure."""
        session_id = await self.get_session_id()
        if self.dispatcher is None:
            raise TransportError("No backend configured", error_type="unreachable")
        try:
            return await self.dispatcher.cta_action(button, session_id)
        except TransportError as e:
            logger.error(f"CTA action failed: {e}")
            raise

    async def send_feedback(self, message_id: str, rating: int, comment: Optional[str] = None) -> Any:
        """Report feedback for a message. Raises TransportError on failure."""
        if isinstance(rating, bool) or not isinstance(rating, int):
            raise ValidationError(
                "Invalid feedback rating",
                parameter="rating",
                expected="integer",
                received=repr(rating),
            )

        session_id = await self.get_session_id()
        if self.dispatcher is None:
            raise TransportError("No backend configured", error_type="unreachable")
        try:
            return await self.dispatcher.feedback(message_id, rating, comment, session_id)
        except TransportError as e:
            logger.error(f"Feedback submission failed: {e}")
            raise
