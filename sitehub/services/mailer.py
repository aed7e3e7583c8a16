"""Emails a published archive as an attachment over SMTP."""
from __future__ import annotations

import asyncio
import logging
from email.message import EmailMessage
from email.utils import formatdate
from pathlib import Path

import aiosmtplib

from sitehub.config import Settings
from sitehub.errors import DispatchError

logger = logging.getLogger(__name__)


class Mailer:
    def __init__(self, settings: Settings):
        self.settings = settings

    def build_message(self, archive_path: Path) -> EmailMessage:
        s = self.settings
        msg = EmailMessage()
        msg["From"] = s.mail_from or s.smtp_username
        msg["To"] = s.publish_recipient
        msg["Date"] = formatdate(localtime=True)
        msg["Subject"] = f"{s.app_name}: published website"
        msg.set_content("Your website has been published. The zip archive is attached.")
        msg.add_attachment(
            archive_path.read_bytes(),
            maintype="application",
            subtype="zip",
            filename=archive_path.name,
        )
        return msg

    async def send_archive(self, archive_path: Path) -> None:
        s = self.settings
        if not s.mail_configured:
            raise DispatchError("SMTP is not configured")

        try:
            msg = await asyncio.to_thread(self.build_message, archive_path)
        except OSError as exc:
            raise DispatchError(f"Could not read archive {archive_path.name}: {exc}") from exc

        try:
            await aiosmtplib.send(
                msg,
                hostname=s.smtp_host,
                port=s.smtp_port,
                username=s.smtp_username or None,
                password=s.smtp_password or None,
                use_tls=s.smtp_use_tls,
                start_tls=s.smtp_start_tls and not s.smtp_use_tls,
                timeout=s.smtp_timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            raise DispatchError(f"SMTP delivery failed: {exc}") from exc

        logger.info("Archive %s emailed to %s", archive_path.name, s.publish_recipient)
