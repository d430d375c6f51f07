"""Leave status email — fixed Indonesian template sent through the Resend HTTP API."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import httpx

from backend.common.constants import LeaveStatus
from backend.common.dates import format_date_id
from backend.common.exceptions import ConfigurationException, DeliveryException
from backend.config import settings

logger = logging.getLogger(__name__)

_STATUS_COLOR = {
    LeaveStatus.approved: "#28a745",
    LeaveStatus.rejected: "#dc3545",
}


def render_leave_status_email(
    *,
    name: str,
    status: LeaveStatus,
    request_title: str,
    start_date: date,
    end_date: date,
) -> tuple[str, str]:
    """Return ``(subject, html)`` for a decided leave request."""
    if status not in _STATUS_COLOR:
        raise ValueError(f"No email template for status {status.value!r}.")

    approved = status == LeaveStatus.approved
    subject = (
        f'Selamat! Pengajuan Cuti Anda Disetujui: "{request_title}"'
        if approved
        else f'Informasi Pengajuan Cuti Ditolak: "{request_title}"'
    )
    intro = (
        "Kami dengan gembira memberitahukan bahwa pengajuan cuti Anda telah disetujui oleh admin."
        if approved
        else "Dengan berat hati kami memberitahukan bahwa pengajuan cuti Anda belum dapat disetujui oleh admin."
    )

    html = f"""
        <div style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
            <h2 style="color: #D32F2F;">Pembaruan Status Pengajuan Cuti</h2>
            <p>Yth. {name},</p>
            <p>{intro}</p>
            <hr style="border: none; border-top: 1px solid #eee;">
            <p style="margin-bottom: 5px;"><strong>Judul Pengajuan:</strong> {request_title}</p>
            <p style="margin-bottom: 5px;"><strong>Tanggal:</strong> {format_date_id(start_date)} - {format_date_id(end_date)}</p>
            <p style="margin-bottom: 5px;"><strong>Status Saat Ini:</strong> <strong style="color: {_STATUS_COLOR[status]};">{status.value}</strong></p>
            <hr style="border: none; border-top: 1px solid #eee;">
            <p>Anda dapat melihat detail lebih lanjut dengan login ke aplikasi {settings.APP_NAME}.</p>
            <p>Terima kasih atas perhatiannya.</p>
            <br>
            <p style="font-size: 0.8em; color: #777;"><em>Ini adalah email otomatis, mohon untuk tidak membalas.</em></p>
        </div>
    """
    return subject, html


def check_email_configuration() -> None:
    """Raise ConfigurationException when sender credentials are missing."""
    if not settings.RESEND_API_KEY:
        raise ConfigurationException(
            "Konfigurasi email server tidak lengkap (API Key tidak ditemukan)."
        )
    if not settings.RESEND_FROM_EMAIL:
        raise ConfigurationException(
            "Konfigurasi email server tidak lengkap (Alamat email pengirim tidak ditemukan)."
        )


async def send_leave_status_email(
    *,
    to: str,
    name: str,
    status: LeaveStatus,
    request_title: str,
    start_date: date,
    end_date: date,
) -> dict[str, Any]:
    """Render and send the status email. Returns the provider's response body."""
    check_email_configuration()

    subject, html = render_leave_status_email(
        name=name,
        status=status,
        request_title=request_title,
        start_date=start_date,
        end_date=end_date,
    )
    payload = {
        "from": f"{settings.EMAIL_SENDER_NAME} <{settings.RESEND_FROM_EMAIL}>",
        "to": [to],
        "subject": subject,
        "html": html,
    }

    try:
        async with httpx.AsyncClient(timeout=15) as client:
            resp = await client.post(
                settings.RESEND_API_URL,
                json=payload,
                headers={"Authorization": f"Bearer {settings.RESEND_API_KEY}"},
            )
    except httpx.HTTPError as exc:
        logger.error("Email transport error for %s: %s", to, exc)
        raise DeliveryException(f"Gagal mengirim email: {exc}") from exc

    if resp.status_code >= 400:
        message = _error_message(resp)
        logger.error("Email API rejected send to %s (%s): %s", to, resp.status_code, message)
        raise DeliveryException(f"Gagal mengirim email: {message}")

    try:
        body = resp.json()
    except ValueError as exc:
        logger.error("Email API returned an unreadable body for %s: %r", to, resp.text[:200])
        raise DeliveryException("Gagal mengirim email: respons server email tidak valid.") from exc
    if not isinstance(body, dict):
        raise DeliveryException("Gagal mengirim email: respons server email tidak valid.")
    return body


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return resp.text
