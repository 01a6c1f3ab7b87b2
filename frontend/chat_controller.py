"""Client-side controller for the chat page.

Owns the session id, the visible transcript and the input state, and talks
to the relay API over HTTP. Rendering is left to the caller (see
``streamlit_app.py``); the controller only decides what is shown.

States:
    IDLE               input enabled, no request in flight
    AWAITING_RESPONSE  input disabled, one chat request in flight

A submit while awaiting is ignored, so there is at most one outstanding
request per page.
"""
from __future__ import annotations

import html
import logging
import os
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

BACKEND_URL = os.getenv("CHAT_BACKEND_URL", "http://localhost:3000")

GREETING = "Hello! I'm your AI assistant. How can I help you today?"
CONNECTION_ERROR = "Sorry, I'm having trouble connecting. Please try again."


class ControllerState(str, Enum):
    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"


class TransportError(Exception):
    """The relay could not be reached or returned an unreadable body."""


def generate_session_id() -> str:
    """Return a fresh ``session_<epoch-ms>_<random>`` identifier."""
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def escape_html(text: str) -> str:
    """Escape ``& < > " '`` so untrusted text can be placed in markup."""
    return html.escape(text, quote=True)


@dataclass
class Message:
    """One entry in the visible transcript."""
    content: str
    sender: str  # "user" or "bot"
    is_error: bool = False
    typing: bool = False
    time: str = field(default_factory=lambda: datetime.now().strftime("%H:%M:%S"))

    def render_html(self) -> str:
        """Markup for this message; content is always escaped."""
        if self.typing:
            dots = '<div class="typing-dot"></div>' * 3
            return f'<div class="message bot-message"><div class="typing-indicator">{dots}</div></div>'

        label = "You:" if self.sender == "user" else "AI Bot:"
        style = ' style="color: #e74c3c"' if self.is_error else ""
        return (
            f'<div class="message {self.sender}-message">'
            f'<div class="message-content"{style}><strong>{label}</strong> {escape_html(self.content)}</div>'
            f'<div class="message-time">{escape_html(self.time)}</div>'
            f'</div>'
        )


class ChatApi:
    """Thin HTTP client for the relay endpoints."""

    def __init__(self, base_url: str = BACKEND_URL, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.http = session or requests.Session()

    def send_chat(self, message: str, session_id: str) -> Tuple[bool, Dict[str, Any]]:
        return self._request("POST", "/api/chat", json={"message": message, "sessionId": session_id})

    def clear_conversation(self, session_id: str) -> Tuple[bool, Dict[str, Any]]:
        return self._request("DELETE", f"/api/conversation/{quote(session_id, safe='')}")

    def add_training(self, input: str, output: str, category: str) -> Tuple[bool, Dict[str, Any]]:
        return self._request(
            "POST", "/api/train", json={"input": input, "output": output, "category": category}
        )

    def _request(self, method: str, path: str, **kwargs) -> Tuple[bool, Dict[str, Any]]:
        """
        Issue a request and decode its JSON body.

        Returns:
            (response.ok, decoded body)

        Raises:
            TransportError: On network failure or a non-JSON body
        """
        try:
            response = self.http.request(method, f"{self.base_url}{path}", **kwargs)
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise TransportError(str(e)) from e

        if not isinstance(data, dict):
            raise TransportError(f"Unexpected response body from {path}")
        return response.ok, data


class ChatController:
    """
    State machine behind the chat page.

    Args:
        api: ChatApi (or any object with the same methods)
        on_change: Called with the controller after every visible change,
            so a renderer can redraw while a request is in flight
    """

    def __init__(self, api: ChatApi, on_change: Optional[Callable[["ChatController"], None]] = None):
        self.api = api
        self.on_change = on_change
        self.session_id = generate_session_id()
        self.state = ControllerState.IDLE
        self.transcript: List[Message] = [Message(GREETING, "bot", time="Just now")]
        self.focus_requested = True
        self.send_label = "Send"
        self.notice: Optional[str] = None

    @property
    def input_enabled(self) -> bool:
        return self.state is ControllerState.IDLE

    def submit(self, text: str) -> bool:
        """
        Send a user message.

        Blank text and calls made while a request is in flight are ignored.

        Returns:
            True if a request was issued
        """
        message = (text or "").strip()
        if not message or self.state is not ControllerState.IDLE:
            return False

        self._set_awaiting(True)
        typing_indicator = Message("", "bot", typing=True)

        # Whatever is raised in here, the page must come back to IDLE
        try:
            self.transcript.append(Message(message, "user"))
            self.transcript.append(typing_indicator)
            self._changed()

            try:
                ok, data = self.api.send_chat(message, self.session_id)
            except TransportError as e:
                logger.error(f"Chat error: {e}")
                reply = Message(CONNECTION_ERROR, "bot", is_error=True)
            else:
                if ok:
                    reply = Message(str(data.get("response", "")), "bot")
                else:
                    error = data.get("error", "Unknown error")
                    reply = Message(f"Sorry, I encountered an error: {error}", "bot", is_error=True)

            self._remove(typing_indicator)
            self.transcript.append(reply)
        finally:
            self._remove(typing_indicator)
            self._set_awaiting(False)
            self.focus_requested = True

        self._changed()
        return True

    def clear_chat(self, confirmed: bool) -> bool:
        """
        Clear the conversation on the server and start a new session.

        Args:
            confirmed: The user confirmed the action; nothing happens otherwise

        Returns:
            True if the transcript was reset
        """
        if not confirmed:
            return False

        try:
            self.api.clear_conversation(self.session_id)
        except TransportError as e:
            logger.error(f"Error clearing chat: {e}")
            self.notice = "Failed to clear chat history"
            self._changed()
            return False

        self.transcript = [Message(GREETING, "bot", time="Just now")]
        self.session_id = generate_session_id()
        self.notice = None
        self._changed()
        return True

    def submit_training(self, input: str, output: str, category: str = "general") -> str:
        """
        Send a training example.

        Returns:
            Notice text to show the user
        """
        input = (input or "").strip()
        output = (output or "").strip()
        if not input or not output:
            return "Please fill in both input and output fields"

        try:
            ok, data = self.api.add_training(input, output, category)
        except TransportError as e:
            logger.error(f"Training error: {e}")
            return "Failed to add training data"

        if ok:
            return f"Training data added successfully! Total examples: {data.get('totalExamples')}"
        return f"Error adding training data: {data.get('error', 'Unknown error')}"

    def render_html(self) -> str:
        return "\n".join(message.render_html() for message in self.transcript)

    def _set_awaiting(self, awaiting: bool) -> None:
        self.state = ControllerState.AWAITING_RESPONSE if awaiting else ControllerState.IDLE
        self.send_label = "Sending..." if awaiting else "Send"

    def _remove(self, message: Message) -> None:
        self.transcript = [m for m in self.transcript if m is not message]

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self)
