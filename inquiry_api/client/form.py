import asyncio
import webbrowser
from enum import Enum
from typing import Callable, Dict, Optional

import httpx

from inquiry_api.client.whatsapp import build_whatsapp_link, build_whatsapp_message
from inquiry_api.constants import (
    DEFAULT_PHONE_PREFIX,
    GENERIC_CLIENT_ERROR,
    INQUIRY_ENDPOINT,
    RESET_DELAY_SECONDS,
)
from inquiry_api.core.exceptions import NetworkError
from inquiry_api.core.logger import get_logger

logger = get_logger(__name__)

FIELD_NAMES = ("fullName", "companyName", "email", "phone", "question")


class FormState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    ERROR = "error"


ALLOWED_TRANSITIONS = {
    FormState.IDLE: {FormState.SUBMITTING},
    FormState.SUBMITTING: {FormState.SUCCESS, FormState.ERROR},
    FormState.SUCCESS: {FormState.IDLE},
    FormState.ERROR: {FormState.SUBMITTING, FormState.IDLE},
}


class FormStateError(RuntimeError):
    pass


def blank_fields() -> Dict[str, str]:
    fields = {name: "" for name in FIELD_NAMES}
    fields["phone"] = DEFAULT_PHONE_PREFIX
    return fields


def _response_error(response: httpx.Response) -> str:
    fallback = f"Request failed ({response.status_code})"
    try:
        data = response.json()
    except ValueError:
        return fallback
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return fallback


class InquiryForm:
    """Client side of the inquiry flow.

    Holds the raw field values, posts them to the inquiry endpoint and tracks
    the outcome as a :class:`FormState`. After a successful submission the
    form clears itself once ``reset_delay`` seconds have passed.

    The WhatsApp path (:meth:`whatsapp_inquiry`) does not touch the state.
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        client: Optional[httpx.AsyncClient] = None,
        opener: Callable[[str], object] = webbrowser.open_new_tab,
        reset_delay: float = RESET_DELAY_SECONDS,
        timeout: float = 30.0,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._opener = opener
        self.reset_delay = reset_delay
        self.fields = blank_fields()
        self.state = FormState.IDLE
        self.error: Optional[str] = None
        self._reset_task: Optional[asyncio.Task] = None

    async def __aenter__(self) -> "InquiryForm":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @property
    def can_submit(self) -> bool:
        return self.state in (FormState.IDLE, FormState.ERROR)

    def _transition(self, new_state: FormState) -> None:
        if new_state not in ALLOWED_TRANSITIONS[self.state]:
            raise FormStateError(f"Invalid form transition {self.state.value} -> {new_state.value}")
        self.state = new_state

    def update_field(self, name: str, value: str) -> None:
        if name not in self.fields:
            raise KeyError(name)
        self.fields[name] = value

    def build_payload(self) -> Dict[str, str]:
        payload = {name: self.fields[name].strip() for name in FIELD_NAMES if name != "question"}
        question = self.fields["question"].strip()
        if question:
            payload["question"] = question
        return payload

    async def _post(self, payload: Dict[str, str]) -> httpx.Response:
        try:
            return await self._client.post(INQUIRY_ENDPOINT, json=payload)
        except httpx.RequestError as exc:
            raise NetworkError(str(exc)) from exc

    async def submit(self) -> FormState:
        if not self.can_submit:
            logger.info(f"Ignoring submit while form is {self.state.value}")
            return self.state

        self.error = None
        self._transition(FormState.SUBMITTING)

        try:
            response = await self._post(self.build_payload())
        except NetworkError as e:
            logger.error(f"Inquiry request failed: {e}")
            self.error = str(e) or GENERIC_CLIENT_ERROR
            self._transition(FormState.ERROR)
            return self.state

        if not response.is_success:
            self.error = _response_error(response)
            logger.warning(f"Inquiry rejected with status={response.status_code}: {self.error}")
            self._transition(FormState.ERROR)
            return self.state

        self._transition(FormState.SUCCESS)
        self._reset_task = asyncio.create_task(self._reset_later())
        return self.state

    async def _reset_later(self) -> None:
        await asyncio.sleep(self.reset_delay)
        # A manual reset or a new outcome may have happened meanwhile
        if self.state is FormState.SUCCESS:
            self._clear()

    def _clear(self) -> None:
        self.fields = blank_fields()
        self.error = None
        if self.state is not FormState.IDLE:
            self._transition(FormState.IDLE)

    def reset(self) -> None:
        """Clear the form now, dropping any pending auto-reset.

        Not allowed while a submission is in flight.
        """
        if self.state is FormState.SUBMITTING:
            raise FormStateError("Cannot reset while a submission is in flight")
        if self._reset_task is not None and not self._reset_task.done():
            self._reset_task.cancel()
        self._reset_task = None
        self._clear()

    async def wait_for_reset(self) -> None:
        if self._reset_task is not None:
            await self._reset_task

    def whatsapp_inquiry(self) -> str:
        url = build_whatsapp_link(build_whatsapp_message(self.fields))
        self._opener(url)
        return url

    async def aclose(self) -> None:
        if self._reset_task is not None and not self._reset_task.done():
            self._reset_task.cancel()
        if self._owns_client:
            await self._client.aclose()
