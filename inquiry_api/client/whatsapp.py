from typing import Mapping
from urllib.parse import quote

from inquiry_api.constants import WHATSAPP_BASE_URL, WHATSAPP_NUMBER, WHATSAPP_STANDARD_TEXT

# Form field name -> label used in the chat summary, in display order
SUMMARY_LABELS = (
    ("fullName", "Name"),
    ("companyName", "Company"),
    ("email", "Email"),
    ("phone", "Phone"),
    ("question", "Question"),
)

# Characters encodeURIComponent leaves untouched besides letters and digits
_URI_COMPONENT_SAFE = "-_.!~*'()"


def build_whatsapp_message(fields: Mapping[str, str]) -> str:
    """Summarise the filled-in fields and append the standard greeting."""
    details = []
    for name, label in SUMMARY_LABELS:
        value = (fields.get(name) or "").strip()
        if value:
            details.append(f"{label}: {value}")

    if not details:
        return WHATSAPP_STANDARD_TEXT
    return "\n".join(details) + "\n\n" + WHATSAPP_STANDARD_TEXT


def build_whatsapp_link(message: str, number: str = WHATSAPP_NUMBER) -> str:
    return f"{WHATSAPP_BASE_URL}/{number}?text={quote(message, safe=_URI_COMPONENT_SAFE)}"
