import requests

from chemist.core.config import settings
from chemist.core.exceptions import NotificationError


def send_sms(to_phone: str, message: str) -> dict:
    if not settings.AFRICAS_TALKING_API_KEY:
        raise NotificationError("AFRICAS_TALKING_API_KEY is not configured")

    payload = {
        "username": settings.AFRICAS_TALKING_USERNAME,
        "to": to_phone,
        "message": message,
    }

    headers = {
        "apiKey": settings.AFRICAS_TALKING_API_KEY,
        "Content-Type": "application/x-www-form-urlencoded",
        "Accept": "application/json",
    }

    try:
        response = requests.post(
            settings.SMS_API_URL,
            data=payload,
            headers=headers,
            timeout=settings.SMS_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        raise NotificationError(f"SMS gateway unreachable: {exc}") from exc

    if response.status_code >= 400:
        raise NotificationError(f"SMS sending failed: {response.text}")

    return response.json()
