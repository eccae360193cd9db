"""Unit tests for the email notifier and message templates"""

import asyncio

from notifications import EmailNotifier, templates


class FailingMail:
    async def send_message(self, message):
        raise ConnectionRefusedError("SMTP server unavailable")


class RecordingMail:
    def __init__(self):
        self.messages = []

    async def send_message(self, message):
        self.messages.append(message)


class TestEmailNotifier:
    def test_log_only_mode(self, caplog):
        notifier = EmailNotifier()

        with caplog.at_level("INFO"):
            sent = asyncio.run(notifier.send("tendai.moyo@example.com", "Subject", "Body"))

        assert sent is True
        assert "log only" in caplog.text

    def test_hands_message_to_mail_server(self):
        mail = RecordingMail()

        sent = asyncio.run(EmailNotifier(mail=mail).send("tendai.moyo@example.com", "Subject", "Body"))

        assert sent is True
        assert mail.messages[0].subject == "Subject"

    def test_failure_is_reported_not_raised(self):
        sent = asyncio.run(EmailNotifier(mail=FailingMail()).send("tendai.moyo@example.com", "Subject", "Body"))

        assert sent is False


class TestTemplates:
    def test_resume_code(self):
        subject, body = templates.resume_code("IND-APP-2025-0001", "042137", 30)

        assert "IND-APP-2025-0001" in subject
        assert "Your verification code is 042137." in body
        assert "30 minutes" in body

    def test_acceptance_includes_member_number(self):
        _, body = templates.registry_decision("Tendai Moyo", "IND-APP-2025-0001", "accepted", "EAC-MBR-2025-0001")

        assert "EAC-MBR-2025-0001" in body

    def test_rejection(self):
        _, body = templates.registry_decision("Tendai Moyo", "IND-APP-2025-0001", "rejected")

        assert "has not been approved" in body
