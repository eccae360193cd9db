"""Plain-text bodies for applicant emails"""

from typing import Tuple


def application_started(display_name: str, application_id: str, fee_amount, fee_currency: str) -> Tuple[str, str]:
    subject = f"Application {application_id} received"
    body = (
        f"Dear {display_name},\n\n"
        f"Your estate agent registration application has been created with reference "
        f"{application_id}.\n\n"
        f"Next steps:\n"
        f"  1. Upload the required supporting documents.\n"
        f"  2. Pay the application fee of {fee_currency} {fee_amount} online, "
        f"or upload proof of payment.\n"
        f"  3. Submit the application for review.\n\n"
        f"Keep this reference to resume your application later.\n\n"
        f"Estate Agents Council"
    )
    return subject, body


def resume_code(application_id: str, code: str, ttl_minutes: int) -> Tuple[str, str]:
    subject = f"Your verification code for application {application_id}"
    body = (
        f"Your verification code is {code}.\n\n"
        f"It expires in {ttl_minutes} minutes. If you did not request this code, "
        f"you can ignore this email.\n\n"
        f"Estate Agents Council"
    )
    return subject, body


def application_submitted(display_name: str, application_id: str) -> Tuple[str, str]:
    subject = f"Application {application_id} submitted"
    body = (
        f"Dear {display_name},\n\n"
        f"Your application {application_id} has been submitted and is now under review. "
        f"We will contact you if anything further is needed.\n\n"
        f"Estate Agents Council"
    )
    return subject, body


def registry_decision(display_name: str, application_id: str, decision: str, member_id=None) -> Tuple[str, str]:
    subject = f"Decision on application {application_id}"
    if decision == "accepted":
        outcome = f"has been accepted. Your member number is {member_id}."
    else:
        outcome = "has not been approved. Please contact the registry for details."
    body = (
        f"Dear {display_name},\n\n"
        f"Your application {application_id} {outcome}\n\n"
        f"Estate Agents Council"
    )
    return subject, body
