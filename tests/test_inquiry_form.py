import asyncio
import json

import httpx
import pytest
from httpx import ASGITransport

from inquiry_api.client.form import FormState, FormStateError, InquiryForm, blank_fields
from inquiry_api.core.config import MailConfig
from inquiry_api.main import app
from inquiry_api.routes import inquiry_router as inquiry_routes


def _fill(form, **overrides):
    values = {
        "fullName": " Jane Doe ",
        "companyName": "Acme LLC",
        "email": "jane@acme.com ",
        "phone": "+971501234567",
        "question": "",
    }
    values.update(overrides)
    for name, value in values.items():
        form.update_field(name, value)


class _Server:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def _form(handler, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://testserver")
    return InquiryForm(client=client, **kwargs)


def test_new_form_starts_idle_with_phone_prefix():
    form = _form(_Server(httpx.Response(200)))
    assert form.state is FormState.IDLE
    assert form.fields == {
        "fullName": "",
        "companyName": "",
        "email": "",
        "phone": "+971",
        "question": "",
    }


def test_update_field_rejects_unknown_names():
    form = _form(_Server(httpx.Response(200)))
    with pytest.raises(KeyError):
        form.update_field("website", "acme.com")


def test_submit_posts_trimmed_values_and_resets_after_success():
    asyncio.run(_run_submit_success_test())


async def _run_submit_success_test():
    server = _Server(httpx.Response(200, json={"success": True}))
    form = _form(server, reset_delay=0)
    _fill(form, question="   ")

    state = await form.submit()

    assert state is FormState.SUCCESS
    assert form.error is None
    [request] = server.requests
    assert request.method == "POST"
    assert request.url.path == "/api/send-inquiry"
    assert json.loads(request.content) == {
        "fullName": "Jane Doe",
        "companyName": "Acme LLC",
        "email": "jane@acme.com",
        "phone": "+971501234567",
    }

    await form.wait_for_reset()
    assert form.state is FormState.IDLE
    assert form.fields == blank_fields()
    assert form.fields["phone"] == "+971"
    await form.aclose()


def test_manual_reset_cancels_pending_auto_reset():
    asyncio.run(_run_manual_reset_test())


async def _run_manual_reset_test():
    form = _form(_Server(httpx.Response(200, json={"success": True})), reset_delay=0.01)
    _fill(form, question="Do we need Peppol?")
    assert await form.submit() is FormState.SUCCESS

    form.reset()
    await form.wait_for_reset()
    await asyncio.sleep(0.02)

    assert form.state is FormState.IDLE
    assert form.fields == blank_fields()
    await form.aclose()


def test_reset_from_error_clears_message_and_fields():
    asyncio.run(_run_reset_from_error_test())


async def _run_reset_from_error_test():
    form = _form(_Server(httpx.Response(500, json={"error": "Email configuration is missing"})))
    _fill(form)
    assert await form.submit() is FormState.ERROR

    form.reset()

    assert form.state is FormState.IDLE
    assert form.error is None
    assert form.fields == blank_fields()
    await form.aclose()


def test_reset_is_refused_while_submitting():
    form = _form(_Server(httpx.Response(200)))
    form.state = FormState.SUBMITTING
    with pytest.raises(FormStateError, match="in flight"):
        form.reset()


def test_server_error_message_is_shown_and_fields_kept():
    asyncio.run(_run_server_error_test())


async def _run_server_error_test():
    server = _Server(
        httpx.Response(400, json={"error": "Missing required fields: fullName, companyName, email, phone"})
    )
    form = _form(server)
    _fill(form, companyName="")

    state = await form.submit()

    assert state is FormState.ERROR
    assert form.error == "Missing required fields: fullName, companyName, email, phone"
    assert form.fields["fullName"] == " Jane Doe "
    await form.aclose()


def test_unparsable_error_body_reports_status():
    asyncio.run(_run_unparsable_error_test())


async def _run_unparsable_error_test():
    form = _form(_Server(httpx.Response(502, text="<html>Bad gateway</html>")))
    _fill(form)

    await form.submit()

    assert form.state is FormState.ERROR
    assert form.error == "Request failed (502)"
    await form.aclose()


def test_network_failure_moves_to_error_and_allows_resubmit():
    asyncio.run(_run_network_failure_test())


async def _run_network_failure_test():
    server = _Server(httpx.ConnectError("Connection refused"))
    form = _form(server, reset_delay=0)
    _fill(form)

    assert await form.submit() is FormState.ERROR
    assert form.error == "Connection refused"

    server.response = httpx.Response(200, json={"success": True})
    assert await form.submit() is FormState.SUCCESS
    assert form.error is None
    assert len(server.requests) == 2
    await form.aclose()


def test_empty_network_error_uses_generic_message():
    asyncio.run(_run_empty_network_error_test())


async def _run_empty_network_error_test():
    form = _form(_Server(httpx.ConnectError("")))
    _fill(form)

    await form.submit()

    assert form.error == "Something went wrong. Please try again."
    await form.aclose()


def test_submit_is_ignored_while_in_flight_or_successful():
    asyncio.run(_run_submit_ignored_test())


async def _run_submit_ignored_test():
    server = _Server(httpx.Response(200, json={"success": True}))
    form = _form(server, reset_delay=60)
    _fill(form)

    form.state = FormState.SUBMITTING
    assert await form.submit() is FormState.SUBMITTING
    assert server.requests == []

    form.state = FormState.IDLE
    assert await form.submit() is FormState.SUCCESS
    assert await form.submit() is FormState.SUCCESS
    assert len(server.requests) == 1
    await form.aclose()


def test_invalid_transition_is_refused():
    form = _form(_Server(httpx.Response(200)))
    with pytest.raises(FormStateError, match="idle -> success"):
        form._transition(FormState.SUCCESS)


def test_whatsapp_inquiry_opens_prefilled_link_without_touching_state():
    opened = []
    form = _form(_Server(httpx.Response(200)), opener=opened.append)
    form.update_field("fullName", "Jane Doe")

    url = form.whatsapp_inquiry()

    assert opened == [url]
    assert url.startswith("https://wa.me/971551177659?text=")
    assert "Name%3A%20Jane%20Doe%0APhone%3A%20%2B971%0A%0AHi%2C%20I'm%20interested" in url
    assert form.state is FormState.IDLE


def test_form_against_inquiry_endpoint(monkeypatch):
    asyncio.run(_run_form_against_endpoint_test(monkeypatch))


async def _run_form_against_endpoint_test(monkeypatch):
    sent = []

    async def _deliver(config, inquiry):
        sent.append(inquiry)

    monkeypatch.setattr(inquiry_routes, "deliver_inquiry", _deliver)
    app.dependency_overrides[inquiry_routes.get_mail_config] = lambda: MailConfig(
        host="smtp.example.com",
        port=587,
        user="mailer",
        password="secret",
        sender="noreply@krvauditing.co",
        recipient="sales@krvauditing.co",
    )
    client = httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")
    try:
        async with InquiryForm(client=client, reset_delay=60) as form:
            _fill(form, question="Do we need Peppol?\nWe issue 200 invoices a month.")
            assert await form.submit() is FormState.SUCCESS
    finally:
        app.dependency_overrides.clear()
        await client.aclose()

    [inquiry] = sent
    assert inquiry.full_name == "Jane Doe"
    assert inquiry.question == "Do we need Peppol?\nWe issue 200 invoices a month."
