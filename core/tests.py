import os
import subprocess
import sys
from datetime import datetime, timedelta
from decimal import Decimal
from io import StringIO
from unittest.mock import patch
from zoneinfo import ZoneInfo

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core import mail
from django.core.management import call_command
from django.db import DatabaseError, IntegrityError, transaction
from django.test import SimpleTestCase, TestCase, override_settings
from django.utils import timezone
from rest_framework.settings import api_settings

from core.auth import IdentityProviderAuthentication
from core.dashboard import (
    availability_slots,
    earnings_summary,
    format_inr,
    humanize_time_ago,
    mentee_roster,
    mentor_stats,
    pending_requests,
)
from core.directory import availability_text, infer_domain, initials, mentor_directory
from core.exceptions import (
    InvalidPaymentSignature,
    InvalidTimeRange,
    MissingFields,
    MissingLinkage,
    PaymentNotConfigured,
)
from core.handlers import envelope_exception_handler
from core.identity import (
    IdentityProviderError,
    ProviderUser,
    claim_invited_mentorships,
    fetch_provider_user,
    sync_user,
)
from core.meetings import evaluate_join, open_session_for_join
from core.mentorships import (
    add_mentee,
    ensure_mentorships_from_sessions,
    reconcile_mentorship,
    upsert_mentorship_from_session,
)
from core.models import (
    LegacySessionLink,
    MenteeMessage,
    MenteePlan,
    Mentor,
    Mentorship,
    MentorshipLink,
    Session,
    Student,
    UserProfile,
)
from core.payments import confirm_payment, expected_signature, verify_signature
from core.profiles import location_text, student_timeline, timeline_to_profile
from core.roles import resolve_roles

User = get_user_model()
IST = ZoneInfo("Asia/Kolkata")


def make_user(external_id, email="", role="unassigned"):
    user = User.objects.create(username=external_id, email=email)
    UserProfile.objects.create(user=user, external_id=external_id, display_name=external_id, role=role)
    return user


def make_session(mentor_id, start, minutes=60, **fields):
    values = {
        "student_name": "Asha Rao",
        "student_id": "user_student_1",
        "student_email": "asha@example.com",
        "title": "Career planning",
    }
    values.update(fields)
    return Session.objects.create(
        mentor_id=mentor_id,
        start_time=start,
        end_time=start + timedelta(minutes=minutes),
        **values,
    )


class ProjectBootTests(SimpleTestCase):
    def test_system_checks_pass(self):
        call_command("check", stdout=StringIO())

    def test_rest_framework_hooks_resolve(self):
        self.assertIs(api_settings.EXCEPTION_HANDLER, envelope_exception_handler)
        self.assertEqual(api_settings.DEFAULT_AUTHENTICATION_CLASSES, [IdentityProviderAuthentication])

    def test_fresh_interpreter_boots(self):
        env = {**os.environ, "DJANGO_SETTINGS_MODULE": "mentorship_backend.settings_test"}
        result = subprocess.run(
            [sys.executable, "manage.py", "check"],
            cwd=settings.BASE_DIR,
            env=env,
            capture_output=True,
            text=True,
            timeout=120,
        )
        self.assertEqual(result.returncode, 0, result.stderr)


class SessionModelTests(TestCase):
    def test_duration_is_derived_from_the_time_range(self):
        start = timezone.now() + timedelta(days=1)
        session = make_session("user_mentor_1", start, minutes=45)
        self.assertEqual(session.duration_minutes, 45)

    def test_end_before_start_is_rejected(self):
        start = timezone.now()
        with self.assertRaises(InvalidTimeRange):
            Session.objects.create(
                mentor_id="user_mentor_1",
                student_name="Asha",
                title="Bad range",
                start_time=start,
                end_time=start,
            )

    def test_student_email_is_lowercased(self):
        session = make_session("user_mentor_1", timezone.now(), student_email="  Asha@Example.COM ")
        self.assertEqual(session.student_email, "asha@example.com")


class MentorshipModelTests(TestCase):
    def test_mentorship_needs_an_identifier(self):
        with self.assertRaises(MissingFields):
            Mentorship.objects.create(mentor_id="user_mentor_1", mentee_name="Nobody")

    def test_duplicate_mentee_email_per_mentor_is_rejected(self):
        Mentorship.objects.create(mentor_id="user_mentor_1", mentee_email="Asha@example.com")
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Mentorship.objects.create(mentor_id="user_mentor_1", mentee_email="asha@example.com")

    def test_same_mentee_email_allowed_for_other_mentors(self):
        Mentorship.objects.create(mentor_id="user_mentor_1", mentee_email="asha@example.com")
        Mentorship.objects.create(mentor_id="user_mentor_2", mentee_email="asha@example.com")
        self.assertEqual(Mentorship.objects.filter(mentee_email="asha@example.com").count(), 2)


class LinkedRecordTests(TestCase):
    def test_message_without_link_is_rejected(self):
        with self.assertRaises(MissingLinkage):
            MenteeMessage.objects.create(mentor_id="user_mentor_1", message="hello")

    def test_for_link_attaches_the_mentorship(self):
        mentorship = Mentorship.objects.create(mentor_id="user_mentor_1", mentee_email="asha@example.com")
        message = MenteeMessage.for_link(MentorshipLink(mentorship.pk), mentor_id="user_mentor_1", message="hi")
        message.save()
        self.assertEqual(message.link, MentorshipLink(mentorship.pk))

    def test_legacy_plan_reports_its_session_link(self):
        session = make_session("user_mentor_1", timezone.now())
        plan = MenteePlan.for_link(LegacySessionLink(session.pk), mentor_id="user_mentor_1", progress=30)
        plan.save()
        self.assertEqual(plan.link, LegacySessionLink(session.pk))


class MentorshipReconcilerTests(TestCase):
    def setUp(self):
        self.now = timezone.now()

    def test_backfill_creates_one_mentorship_per_mentee_and_is_idempotent(self):
        make_session("user_mentor_1", self.now - timedelta(days=3))
        make_session("user_mentor_1", self.now - timedelta(days=1))
        make_session(
            "user_mentor_1",
            self.now + timedelta(days=2),
            student_id="",
            student_email="ravi@example.com",
            student_name="Ravi",
        )

        ensure_mentorships_from_sessions("user_mentor_1")
        ensure_mentorships_from_sessions("user_mentor_1")

        self.assertEqual(Mentorship.objects.filter(mentor_id="user_mentor_1").count(), 2)

    def test_latest_session_name_and_goal_win(self):
        make_session("user_mentor_1", self.now - timedelta(days=10), student_name="Old Name", title="Old goal")
        make_session("user_mentor_1", self.now - timedelta(days=1), student_name="New Name", title="New goal")

        ensure_mentorships_from_sessions("user_mentor_1")

        mentorship = Mentorship.objects.get(mentor_id="user_mentor_1")
        self.assertEqual(mentorship.mentee_name, "New Name")
        self.assertEqual(mentorship.goal, "New goal")

    def test_sessions_without_any_mentee_identity_are_skipped(self):
        make_session("user_mentor_1", self.now, student_id="", student_email="")
        self.assertEqual(ensure_mentorships_from_sessions("user_mentor_1"), [])
        self.assertFalse(Mentorship.objects.exists())

    def test_email_match_attaches_external_id(self):
        invited = add_mentee("user_mentor_1", "Asha", "asha@example.com", "Interview prep")
        make_session("user_mentor_1", self.now)

        ensure_mentorships_from_sessions("user_mentor_1")

        invited.refresh_from_db()
        self.assertEqual(invited.mentee_external_id, "user_student_1")
        self.assertEqual(Mentorship.objects.count(), 1)

    def test_backfill_links_legacy_plan(self):
        session = make_session("user_mentor_1", self.now - timedelta(days=2))
        plan = MenteePlan.for_link(LegacySessionLink(session.pk), mentor_id="user_mentor_1", progress=40)
        plan.save()

        ensure_mentorships_from_sessions("user_mentor_1")

        plan.refresh_from_db()
        self.assertEqual(plan.mentorship, Mentorship.objects.get(mentor_id="user_mentor_1"))

    def test_unique_violation_turns_into_update(self):
        existing = Mentorship.objects.create(mentor_id="user_mentor_1", mentee_email="asha@example.com")
        with patch("core.mentorships.find_mentorship", side_effect=[None, existing]):
            mentorship, created = reconcile_mentorship(
                "user_mentor_1", email="asha@example.com", name="Asha", goal="System design"
            )
        self.assertFalse(created)
        self.assertEqual(mentorship.pk, existing.pk)
        self.assertEqual(mentorship.goal, "System design")

    def test_upsert_from_session_forces_active(self):
        Mentorship.objects.create(mentor_id="user_mentor_1", mentee_email="asha@example.com", status="paused")
        session = make_session("user_mentor_1", self.now)

        mentorship = upsert_mentorship_from_session(session)

        self.assertEqual(mentorship.status, "active")
        self.assertEqual(mentorship.mentee_external_id, "user_student_1")

    def test_add_mentee_status_mapping(self):
        invited = add_mentee("user_mentor_1", "Asha", "asha@example.com", "Goal", status="New")
        active = add_mentee("user_mentor_1", "Ravi", "ravi@example.com", "Goal", status="Active")
        self.assertEqual(invited.status, "invited")
        self.assertEqual(active.status, "active")


class IdentitySyncTests(TestCase):
    def test_sync_creates_user_once(self):
        first = sync_user(ProviderUser("user_abc", "abc@example.com", "Abc Person"))
        second = sync_user(ProviderUser("user_abc", "abc@example.com", "Abc Person"))

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(first.userprofile.external_id, "user_abc")
        self.assertEqual(first.userprofile.role, "unassigned")

    def test_sync_attaches_external_id_to_existing_email(self):
        user = User.objects.create(username="legacy", email="Legacy@Example.com")

        synced = sync_user(ProviderUser("user_legacy", "legacy@example.com", "Legacy User"))

        self.assertEqual(synced.pk, user.pk)
        self.assertEqual(UserProfile.objects.get(user=user).external_id, "user_legacy")

    def test_sync_keeps_existing_profile_on_shared_email(self):
        user_a = make_user("user_a", "same@example.com")

        user_b = sync_user(ProviderUser("user_b", "same@example.com", "Second Account"))

        self.assertNotEqual(user_b.pk, user_a.pk)
        self.assertEqual(UserProfile.objects.get(user=user_a).external_id, "user_a")
        self.assertEqual(UserProfile.objects.get(user=user_b).external_id, "user_b")
        self.assertEqual(sync_user(ProviderUser("user_a", "same@example.com")).pk, user_a.pk)

    def test_sync_rereads_user_after_concurrent_create(self):
        existing = make_user("user_race", "race@example.com")

        with patch("core.identity._find_existing", return_value=(None, None)), patch(
            "core.identity._create", side_effect=IntegrityError("duplicate")
        ):
            synced = sync_user(ProviderUser("user_race", "race@example.com"))

        self.assertEqual(synced.pk, existing.pk)

    def test_sync_refreshes_display_name(self):
        sync_user(ProviderUser("user_abc", "abc@example.com", "Old Name"))
        sync_user(ProviderUser("user_abc", "abc@example.com", "New Name"))
        self.assertEqual(UserProfile.objects.get(external_id="user_abc").display_name, "New Name")

    @patch("core.identity._request_provider_user")
    def test_fetch_reads_primary_email(self, mock_request):
        mock_request.return_value = {
            "primary_email_address_id": "e2",
            "email_addresses": [
                {"id": "e1", "email_address": "other@example.com"},
                {"id": "e2", "email_address": "Primary@Example.com"},
            ],
            "first_name": "Meera",
            "last_name": "Iyer",
        }
        provider_user = fetch_provider_user("user_meera")
        self.assertEqual(provider_user.email, "primary@example.com")
        self.assertEqual(provider_user.name, "Meera Iyer")

    @patch("core.identity._request_provider_user", side_effect=IdentityProviderError("down"))
    def test_fetch_falls_back_to_id_only(self, _mock_request):
        provider_user = fetch_provider_user("user_offline")
        self.assertEqual(provider_user, ProviderUser("user_offline"))

    def test_authentication_maps_sub_claim_to_user(self):
        with patch("core.auth.fetch_provider_user", return_value=ProviderUser("user_jwt", "jwt@example.com", "Jwt")):
            user = IdentityProviderAuthentication().get_user({"sub": "user_jwt"})
        self.assertEqual(user.userprofile.external_id, "user_jwt")
        self.assertEqual(user.email, "jwt@example.com")

    def test_claim_invited_mentorships(self):
        invited = Mentorship.objects.create(
            mentor_id="user_mentor_1", mentee_email="asha@example.com", status="invited"
        )
        Mentorship.objects.create(
            mentor_id="user_mentor_2",
            mentee_email="asha@example.com",
            mentee_external_id="user_other",
            status="paused",
        )

        claimed = claim_invited_mentorships("user_asha", "Asha@Example.com")

        invited.refresh_from_db()
        self.assertEqual(claimed, 1)
        self.assertEqual(invited.mentee_external_id, "user_asha")
        self.assertEqual(invited.status, "active")


class RoleResolverTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = make_user("user_multi", "multi@example.com")
        Mentor.objects.create(user=cls.user, name="Multi Mentor")
        Student.objects.create(user=cls.user, full_name="Multi Student")

    def test_mentor_wins_over_student(self):
        context = resolve_roles(self.user)
        self.assertEqual(context.role, "mentor")
        self.assertTrue(context.has("student"))
        self.assertFalse(context.has("founder"))

    def test_failing_lookup_does_not_block_others(self):
        with patch.object(Mentor.objects, "filter", side_effect=DatabaseError("boom")):
            context = resolve_roles(self.user)
        self.assertIsNone(context.mentor)
        self.assertEqual(context.role, "student")


class JoinGateTests(TestCase):
    def build(self, start_offset, **fields):
        now = timezone.now()
        start = now + start_offset
        values = {"payment_status": "paid", "status": "scheduled"}
        values.update(fields)
        session = Session(
            mentor_id="user_mentor_1",
            student_name="Asha",
            title="Mock interview",
            start_time=start,
            end_time=start + timedelta(minutes=60),
            **values,
        )
        return session, now

    def test_unpaid_session_is_rejected(self):
        session, now = self.build(timedelta(minutes=5), payment_status="pending")
        decision = evaluate_join(session, now)
        self.assertFalse(decision.allowed)
        self.assertIn("Payment not confirmed", decision.reason)

    def test_cancelled_session_is_rejected(self):
        session, now = self.build(timedelta(minutes=5), status="cancelled")
        self.assertEqual(evaluate_join(session, now).reason, "Session is cancelled. Cannot join.")

    def test_ended_session_is_rejected(self):
        session, now = self.build(timedelta(hours=-3))
        self.assertEqual(evaluate_join(session, now).reason, "Session has ended.")

    def test_too_early_reports_minutes_until_join(self):
        session, now = self.build(timedelta(minutes=20))
        decision = evaluate_join(session, now)
        self.assertFalse(decision.allowed)
        self.assertEqual(decision.minutes_until_join, 5)

    def test_window_opens_fifteen_minutes_before_start(self):
        session, now = self.build(timedelta(minutes=15))
        self.assertTrue(evaluate_join(session, now).allowed)
        session, now = self.build(timedelta(minutes=14))
        self.assertTrue(evaluate_join(session, now).allowed)

    def test_open_session_moves_to_ongoing_and_assigns_channel(self):
        now = timezone.now()
        session = make_session(
            "user_mentor_1", now + timedelta(minutes=10), payment_status="paid", status="scheduled"
        )

        open_session_for_join(session, now)

        session.refresh_from_db()
        self.assertEqual(session.status, "ongoing")
        self.assertEqual(session.started_at, now)
        self.assertEqual(session.channel_name, f"session-{session.pk}")


class PaymentConfirmationTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        mentor_user = make_user("user_mentor_1", "mentor@example.com", role="mentor")
        Mentor.objects.create(user=mentor_user, name="Priya")

    def booking(self, **overrides):
        start = timezone.now() + timedelta(days=1)
        data = {
            "mentor_id": "user_mentor_1",
            "student_id": "user_student_1",
            "student_email": "asha@example.com",
            "student_name": "Asha Rao",
            "title": "Resume review",
            "description": "",
            "start_time": start,
            "end_time": start + timedelta(minutes=30),
            "amount": Decimal("1200"),
            "order_id": "order_1",
            "payment_id": "pay_1",
        }
        data["razorpay_signature"] = expected_signature("order_1", "pay_1", "test_razorpay_secret")
        data.update(overrides)
        return data

    def test_signature_verification(self):
        signature = expected_signature("order_9", "pay_9", "secret")
        self.assertTrue(verify_signature("order_9", "pay_9", signature, "secret"))
        self.assertFalse(verify_signature("order_9", "pay_9", "0" * 64, "secret"))
        self.assertFalse(verify_signature("order_9", "pay_9", None, "secret"))

    def test_confirm_creates_paid_session_and_mentorship(self):
        with self.captureOnCommitCallbacks(execute=True):
            session = confirm_payment(self.booking())

        self.assertEqual(session.payment_status, "paid")
        self.assertEqual(session.booking_type, "paid")
        self.assertEqual(session.status, "scheduled")
        self.assertTrue(session.meeting_link.startswith("https://meet.jit.si/aureeture-session-"))
        self.assertTrue(session.channel_name.endswith("mentor_1"))
        mentorship = Mentorship.objects.get(mentor_id="user_mentor_1")
        self.assertEqual(mentorship.status, "active")
        self.assertEqual(len(mail.outbox), 2)
        self.assertEqual(sorted(message.to[0] for message in mail.outbox), ["asha@example.com", "mentor@example.com"])

    def test_unknown_mentor_only_notifies_student(self):
        with self.captureOnCommitCallbacks(execute=True):
            confirm_payment(self.booking(mentor_id="user_mentor_missing"))
        self.assertEqual([message.to for message in mail.outbox], [["asha@example.com"]])

    def test_bad_signature_creates_nothing(self):
        with self.assertRaises(InvalidPaymentSignature):
            confirm_payment(self.booking(razorpay_signature="forged"))
        self.assertFalse(Session.objects.exists())

    @override_settings(RAZORPAY_KEY_SECRET="")
    def test_missing_secret_is_a_server_error(self):
        with self.assertRaises(PaymentNotConfigured):
            confirm_payment(self.booking())

    def test_mentorship_failure_does_not_fail_the_booking(self):
        with patch("core.payments.upsert_mentorship_from_session", side_effect=DatabaseError("down")):
            session = confirm_payment(self.booking())
        self.assertTrue(Session.objects.filter(pk=session.pk).exists())
        self.assertFalse(Mentorship.objects.exists())

    @override_settings(NOTIFICATIONS_ENABLED=False)
    def test_notifications_can_be_disabled(self):
        with self.captureOnCommitCallbacks(execute=True):
            confirm_payment(self.booking())
        self.assertEqual(len(mail.outbox), 0)


class FormattingTests(TestCase):
    def test_format_inr_uses_indian_grouping(self):
        self.assertEqual(format_inr(Decimal("1234567.50")), "₹12,34,567.5")
        self.assertEqual(format_inr(2500), "₹2,500")
        self.assertEqual(format_inr(None), "₹0")

    def test_humanize_time_ago(self):
        now = timezone.now()
        self.assertEqual(humanize_time_ago(now, now), "Just now")
        self.assertEqual(humanize_time_ago(now - timedelta(minutes=12), now), "12 min ago")
        self.assertEqual(humanize_time_ago(now - timedelta(hours=3), now), "3 hours ago")
        self.assertEqual(humanize_time_ago(now - timedelta(days=2), now), "Today")


class MentorDashboardTests(TestCase):
    def setUp(self):
        self.now = datetime(2026, 3, 15, 12, 0, tzinfo=IST)

    def at(self, month, day, hour=10):
        return datetime(2026, month, day, hour, 0, tzinfo=IST)

    def test_stats_compare_calendar_months(self):
        make_session("user_mentor_1", self.at(2, 10), status="completed", payment_status="paid", amount=Decimal("1000"))
        make_session("user_mentor_1", self.at(3, 5), status="completed", payment_status="paid", amount=Decimal("1500"))
        make_session("user_mentor_1", self.at(3, 6), status="draft", payment_status="paid", amount=Decimal("9000"))
        make_session(
            "user_mentor_1",
            self.at(3, 20),
            student_id="user_student_2",
            student_email="ravi@example.com",
            student_name="Ravi",
        )

        stats = mentor_stats("user_mentor_1", self.now)

        self.assertEqual(stats["earnings"]["total"], 2500)
        self.assertEqual(stats["earnings"]["formatted"], "₹2,500")
        self.assertEqual(stats["earnings"]["change"], 50)
        self.assertEqual(stats["earnings"]["changeType"], "increase")
        self.assertEqual(stats["mentees"], {"active": 1, "total": 2, "newRequests": 1})

    def test_stats_change_is_zero_without_last_month(self):
        make_session("user_mentor_1", self.at(3, 5), status="completed", payment_status="paid", amount=Decimal("1500"))
        self.assertEqual(mentor_stats("user_mentor_1", self.now)["earnings"]["change"], 0)

    def test_pending_requests_mix_paid_bookings_and_feedback(self):
        now = timezone.now()
        paid = make_session("user_mentor_1", now + timedelta(days=1), payment_status="paid")
        owed = make_session("user_mentor_1", now - timedelta(days=2), status="completed")
        make_session("user_mentor_1", now - timedelta(hours=3), status="completed")
        make_session("user_mentor_1", now - timedelta(days=3), status="completed", notes="Great session")

        requests = pending_requests("user_mentor_1", now)["requests"]

        self.assertEqual([item["id"] for item in requests], [f"paid-{paid.pk}", f"feedback-{owed.pk}"])
        self.assertEqual(requests[0]["createdAt"], "Just now")
        self.assertTrue(requests[0]["autoConfirmed"])
        self.assertEqual(requests[1]["action"], "write_feedback")

    def test_roster_prefers_plan_progress(self):
        make_session("user_mentor_1", self.at(3, 1), status="completed")
        make_session("user_mentor_1", self.at(3, 2), status="cancelled")
        roster = mentee_roster("user_mentor_1", self.now)
        self.assertEqual(roster["total"], 1)
        self.assertEqual(roster["mentees"][0]["progress"], 50)
        self.assertEqual(roster["mentees"][0]["status"], "Paused")
        self.assertEqual(roster["mentees"][0]["lastSession"], "2 Mar 2026")

        mentorship = Mentorship.objects.get(mentor_id="user_mentor_1")
        MenteePlan.for_link(MentorshipLink(mentorship.pk), mentor_id="user_mentor_1", progress=80).save()
        roster = mentee_roster("user_mentor_1", self.now)
        self.assertEqual(roster["mentees"][0]["progress"], 80)

    def test_earnings_summary(self):
        first = make_session(
            "user_mentor_1", self.at(3, 2), status="completed", payment_status="paid", amount=Decimal("1500")
        )
        make_session(
            "user_mentor_1",
            self.at(2, 20),
            minutes=30,
            status="completed",
            payment_status="paid",
            amount=Decimal("1000"),
        )
        make_session("user_mentor_1", self.at(3, 25), payment_status="paid", amount=Decimal("700"))

        summary = earnings_summary("user_mentor_1", self.now)

        self.assertEqual([item["month"] for item in summary["earningsChart"]], ["Oct", "Nov", "Dec", "Jan", "Feb", "Mar"])
        self.assertEqual(summary["earningsChart"][-1]["amount"], 1500)
        self.assertEqual(summary["earningsChart"][-2]["amount"], 1000)
        self.assertEqual(summary["growth"], 50)
        self.assertEqual(summary["pendingPayout"], 700)
        self.assertEqual(summary["totalPaidOut"], 2500)
        self.assertEqual(summary["totalSessions"], 2)
        self.assertEqual(summary["avgHourlyRate"], 1667)
        self.assertEqual(summary["paymentHistory"][0]["id"], f"TXN-{str(first.pk).zfill(4)[-4:]}")
        self.assertEqual(summary["paymentHistory"][0]["amount"], "₹1,500")

    def test_earnings_history_does_not_leak_between_calls(self):
        make_session("user_mentor_1", self.at(3, 2), status="completed", payment_status="paid", amount=Decimal("1500"))
        first = earnings_summary("user_mentor_1", self.now)
        second = earnings_summary("user_mentor_1", self.now)
        other = earnings_summary("user_mentor_2", self.now)
        self.assertEqual(first["paymentHistory"], second["paymentHistory"])
        self.assertEqual(other["paymentHistory"], [])

    def test_earnings_period_filter(self):
        make_session("user_mentor_1", self.at(3, 2), status="completed", payment_status="paid", amount=Decimal("1500"))
        make_session("user_mentor_1", self.at(2, 2), status="completed", payment_status="paid", amount=Decimal("900"))
        summary = earnings_summary("user_mentor_1", self.now, period="this_month")
        self.assertEqual(len(summary["paymentHistory"]), 1)


class AvailabilitySlotTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.user = make_user("user_mentor_1", "mentor@example.com", role="mentor")
        cls.mentor = Mentor.objects.create(
            user=cls.user,
            name="Priya",
            weekly_availability=[
                {"id": "w1", "day": "Monday", "startTime": "10:00", "endTime": "12:00", "isActive": True},
                {"id": "w2", "day": "Tuesday", "startTime": "10:00", "endTime": "12:00", "isActive": False},
            ],
            override_availability=[
                {"id": "o1", "date": "2026-03-23", "isBlocked": True},
            ],
        )

    def test_slots_follow_weekly_template_and_overrides(self):
        make_session(
            "user_mentor_1",
            datetime(2026, 3, 16, 10, 30, tzinfo=IST),
            status="scheduled",
        )

        result = availability_slots(
            self.mentor,
            "user_mentor_1",
            start=datetime(2026, 3, 16, 0, 0, tzinfo=IST),
            end=datetime(2026, 3, 29, 23, 59, tzinfo=IST),
        )

        self.assertEqual(len(result["slots"]), 1)
        slot = result["slots"][0]
        self.assertEqual(slot["startTime"], "2026-03-16T04:30:00Z")
        self.assertEqual(slot["endTime"], "2026-03-16T06:30:00Z")
        self.assertTrue(slot["isAvailable"])
        self.assertTrue(slot["isBooked"])

    def monday_slot(self):
        result = availability_slots(
            self.mentor,
            "user_mentor_1",
            start=datetime(2026, 3, 16, 0, 0, tzinfo=IST),
            end=datetime(2026, 3, 16, 23, 59, tzinfo=IST),
        )
        return result["slots"][0]

    def test_session_straddling_slot_start_books_it(self):
        make_session("user_mentor_1", datetime(2026, 3, 16, 9, 30, tzinfo=IST), minutes=60)
        self.assertTrue(self.monday_slot()["isBooked"])

    def test_session_ending_at_slot_start_leaves_it_free(self):
        make_session("user_mentor_1", datetime(2026, 3, 16, 9, 0, tzinfo=IST), minutes=60)
        self.assertFalse(self.monday_slot()["isBooked"])

    def test_cancelled_overlap_leaves_slot_free(self):
        make_session(
            "user_mentor_1", datetime(2026, 3, 16, 9, 30, tzinfo=IST), minutes=60, status="cancelled"
        )
        self.assertFalse(self.monday_slot()["isBooked"])


class MentorDirectoryTests(TestCase):
    def test_infer_domain(self):
        self.assertEqual(infer_domain("Senior UX Designer", []), "Design")
        self.assertEqual(infer_domain("Lead Engineer", ["Python"]), "Data Science")
        self.assertEqual(infer_domain("Principal PM", ["B2B SaaS"]), "Product")
        self.assertEqual(infer_domain("Head", ["Growth"]), "Marketing")
        self.assertEqual(infer_domain("Staff Engineer", ["Golang"]), "Software")

    def test_availability_text(self):
        now = datetime(2026, 3, 15, 12, 0, tzinfo=IST)
        self.assertEqual(availability_text(None, now), "Available Now")
        self.assertEqual(availability_text(now + timedelta(hours=5), now), "Tomorrow")
        self.assertEqual(availability_text(datetime(2026, 3, 18, 9, 0, tzinfo=IST), now), "Wed 18 Mar")

    def test_initials(self):
        self.assertEqual(initials("priya raman iyer"), "PR")

    def test_directory_prices_from_sessions_then_rate(self):
        priced = Mentor.objects.create(user=make_user("user_mentor_1"), name="Priya Raman")
        Mentor.objects.create(
            user=make_user("user_mentor_2"), name="Rohan Mehta", expected_hourly_rate=Decimal("3000")
        )
        Mentor.objects.create(user=make_user("user_mentor_3"), name="Sameer Khan")
        now = timezone.now()
        make_session("user_mentor_1", now - timedelta(days=2), status="completed", amount=Decimal("2000"))
        make_session("user_mentor_1", now + timedelta(days=2), amount=Decimal("3000"))

        directory = mentor_directory(now)

        cards = {card["id"]: card for card in directory["mentors"]}
        self.assertEqual(cards["user_mentor_1"]["price"], 2500)
        self.assertEqual(cards["user_mentor_1"]["reviews"], 1)
        self.assertEqual(cards["user_mentor_2"]["price"], 3000)
        self.assertEqual(cards["user_mentor_3"]["price"], 2500)
        self.assertEqual(cards["user_mentor_3"]["expertise"], ["Mentorship"])
        self.assertEqual(cards["user_mentor_3"]["linkedinUrl"], "https://www.linkedin.com/in/sameer-khan")
        self.assertEqual(directory["stats"]["totalMentors"], 3)
        self.assertEqual(directory["stats"]["activeSessions"], 1)
        self.assertEqual(priced.external_id, "user_mentor_1")


class StudentTimelineTests(SimpleTestCase):
    def test_location_text_skips_blank_parts(self):
        self.assertEqual(location_text({"city": "Pune", "state": "", "country": "India"}), "Pune, India")
        self.assertEqual(location_text(None), "")

    def test_timeline_puts_current_entries_first(self):
        student = Student(
            experiences=[{"role": "Intern", "company": "Acme", "startDate": "2022-01", "endDate": "2022-06"}],
            educations=[{"degree": "M.Tech", "school": "IISc", "startYear": "2024"}],
            projects=["not a dict"],
        )
        timeline = student_timeline(student)
        self.assertEqual([(item["type"], item["isCurrent"]) for item in timeline], [("education", True), ("work", False)])

    def test_current_items_drop_their_end_date(self):
        lists = timeline_to_profile(
            [
                {"type": "work", "title": "Analyst", "endDate": "2025-01", "isCurrent": True},
                {"type": "project", "title": "Chatbot", "description": "Side project"},
            ]
        )
        self.assertIsNone(lists["experiences"][0]["endDate"])
        self.assertEqual(lists["educations"], [])
        self.assertEqual(lists["projects"][0]["name"], "Chatbot")
