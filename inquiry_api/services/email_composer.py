from dataclasses import dataclass
from html import escape

from inquiry_api.models.inquiry_request import Inquiry

SUBJECT_TEMPLATE = "UAE e-Invoicing inquiry from {full_name} ({company_name})"
HTML_HEADING = "New e-Invoicing compliance inquiry"


@dataclass(frozen=True)
class ComposedEmail:
    subject: str
    text: str
    html: str


def build_subject(inquiry: Inquiry) -> str:
    return SUBJECT_TEMPLATE.format(
        full_name=inquiry.full_name, company_name=inquiry.company_name
    )


def build_text_body(inquiry: Inquiry) -> str:
    lines = [
        f"Name: {inquiry.full_name}",
        f"Company: {inquiry.company_name}",
        f"Email: {inquiry.email}",
        f"Phone: {inquiry.phone}",
    ]
    if inquiry.question:
        lines.append(f"Question: {inquiry.question}")
    return "\n".join(lines)


def build_html_body(inquiry: Inquiry) -> str:
    # Every user value is escaped before it lands in markup
    parts = [
        f"<h2>{HTML_HEADING}</h2>",
        f"<p><strong>Name:</strong> {escape(inquiry.full_name)}</p>",
        f"<p><strong>Company:</strong> {escape(inquiry.company_name)}</p>",
        f"<p><strong>Email:</strong> {escape(inquiry.email)}</p>",
        f"<p><strong>Phone:</strong> {escape(inquiry.phone)}</p>",
    ]
    if inquiry.question:
        question = escape(inquiry.question).replace("\n", "<br/>")
        parts.append(f"<p><strong>Question:</strong><br/>{question}</p>")
    return "\n".join(parts)


def compose_inquiry_email(inquiry: Inquiry) -> ComposedEmail:
    return ComposedEmail(
        subject=build_subject(inquiry),
        text=build_text_body(inquiry),
        html=build_html_body(inquiry),
    )
