INQUIRY_ENDPOINT = "/api/send-inquiry"

DEFAULT_PHONE_PREFIX = "+971"
RESET_DELAY_SECONDS = 3.0

WHATSAPP_NUMBER = "971551177659"
WHATSAPP_BASE_URL = "https://wa.me"
WHATSAPP_STANDARD_TEXT = (
    "Hi, I'm interested in learning more about UAE e-Invoicing compliance with KRV Auditing."
)

GENERIC_CLIENT_ERROR = "Something went wrong. Please try again."
