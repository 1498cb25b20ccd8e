import hashlib
import hmac
import logging
import time

from django.conf import settings
from django.db import transaction

from .exceptions import InvalidPaymentSignature, MissingFields, PaymentNotConfigured
from .meetings import build_channel_name, build_meeting_link
from .mentorships import upsert_mentorship_from_session
from .models import Session
from .notifications import send_booking_emails


logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "mentorId",
    "studentName",
    "title",
    "startTime",
    "endTime",
    "paymentId",
    "orderId",
    "razorpaySignature",
)


def expected_signature(order_id, payment_id, secret):
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_signature(order_id, payment_id, signature, secret) -> bool:
    expected = expected_signature(order_id, payment_id, secret)
    return hmac.compare_digest(expected.encode("utf-8"), str(signature or "").encode("utf-8"))


def missing_fields(payload, fields=REQUIRED_FIELDS):
    return [name for name in fields if not str(payload.get(name) or "").strip()]


def confirm_payment(data):
    """
    Create the paid session behind a verified gateway signature.

    `data` is the validated booking: snake_case keys with parsed datetimes.
    Mentorship upsert and emails run after the session row exists and never
    fail the booking.
    """
    secret = settings.RAZORPAY_KEY_SECRET
    if not secret:
        logger.error("Payment confirmation attempted without a gateway secret configured")
        raise PaymentNotConfigured()

    if not verify_signature(data["order_id"], data["payment_id"], data["razorpay_signature"], secret):
        logger.warning("Payment signature mismatch for order %s", data["order_id"])
        raise InvalidPaymentSignature("Payment signature verification failed.")

    stamp = int(time.time() * 1000)
    with transaction.atomic():
        session = Session.objects.create(
            mentor_id=data["mentor_id"],
            student_id=data.get("student_id") or "",
            student_email=data.get("student_email") or "",
            student_name=data["student_name"],
            title=data["title"],
            description=data.get("description") or "",
            start_time=data["start_time"],
            end_time=data["end_time"],
            status="scheduled",
            payment_status="paid",
            booking_type="paid",
            amount=data.get("amount"),
            meeting_link=build_meeting_link(stamp),
            channel_name=build_channel_name(stamp, data["mentor_id"]),
            payment_id=data["payment_id"],
            order_id=data["order_id"],
            payment_signature=data["razorpay_signature"],
        )
        transaction.on_commit(lambda: send_booking_emails(session))

    try:
        upsert_mentorship_from_session(session)
    except Exception:
        logger.exception("Mentorship upsert failed after payment for session %s", session.pk)

    logger.info("Paid session %s confirmed for mentor %s", session.pk, session.mentor_id)
    return session
