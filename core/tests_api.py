from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from django.conf import settings
from django.core import mail
from django.db import DatabaseError
from django.test import override_settings
from django.utils import timezone
from rest_framework.test import APITestCase

from core.models import (
    Founder,
    MenteeMessage,
    MenteePlan,
    Mentor,
    Mentorship,
    MentorshipLink,
    Milestone,
    Session,
    Student,
    UserProfile,
)
from core.payments import expected_signature
from core.schema import PUBLIC_PATHS, MentorshipSchemaGenerator
from core.tests import make_session, make_user


MENTOR_ID = "user_mentor_1"
STUDENT_ID = "user_student_1"


class MarketplaceApiTestCase(APITestCase):
    @classmethod
    def setUpTestData(cls):
        cls.mentor_user = make_user(MENTOR_ID, "priya@example.com", role="mentor")
        cls.mentor = Mentor.objects.create(
            user=cls.mentor_user,
            name="Priya Raman",
            current_role="Senior UX Designer",
            specialization_tags=["Figma", "Design Systems", "Research", "Careers"],
            is_onboarded=True,
            is_verified=True,
            weekly_availability=[
                {"id": "w1", "day": "Monday", "startTime": "10:00", "endTime": "12:00", "isActive": True},
            ],
        )
        cls.other_mentor_user = make_user("user_mentor_2", "rohan@example.com", role="mentor")
        Mentor.objects.create(user=cls.other_mentor_user, name="Rohan Mehta", is_onboarded=True)
        cls.student_user = make_user(STUDENT_ID, "asha@example.com", role="student")
        Student.objects.create(user=cls.student_user, full_name="Asha Rao", email="asha@example.com")

    def as_mentor(self):
        self.client.force_authenticate(user=self.mentor_user)

    def as_student(self):
        self.client.force_authenticate(user=self.student_user)

    def assertError(self, response, status_code, code):
        self.assertEqual(response.status_code, status_code, response.data)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["error"]["code"], code)


class RoleGuardApiTests(MarketplaceApiTestCase):
    def test_unauthenticated_request_is_rejected(self):
        response = self.client.get(f"/api/mentor/stats/?mentorId={MENTOR_ID}")
        self.assertError(response, 401, "not_authenticated")

    def test_student_cannot_reach_mentor_endpoints(self):
        self.as_student()
        response = self.client.get(f"/api/mentor/stats/?mentorId={MENTOR_ID}")
        self.assertError(response, 403, "role_not_provisioned")
        self.assertEqual(response.data["error"]["message"], "Access denied: mentor role not provisioned")

    def test_active_role_header_must_match(self):
        self.as_mentor()
        response = self.client.get(
            f"/api/mentor/stats/?mentorId={MENTOR_ID}",
            HTTP_X_ACTIVE_ROLE="student",
        )
        self.assertError(response, 403, "active_role_mismatch")
        self.assertEqual(
            response.data["error"]["message"], "Active role mismatch. Expected mentor, got student"
        )

    def test_mentor_id_is_required(self):
        self.as_mentor()
        response = self.client.get("/api/mentor/stats/")
        self.assertError(response, 400, "missing_fields")
        self.assertEqual(response.data["missingFields"], ["mentorId"])
        self.assertEqual(response.data["error"]["message"], "mentorId is required")

    def test_mentor_cannot_read_another_mentors_data(self):
        self.as_mentor()
        response = self.client.get("/api/mentor/stats/?mentorId=user_mentor_2")
        self.assertError(response, 403, "forbidden")

    @override_settings(CLERK_JWKS_URL="")
    def test_missing_identity_provider_is_unavailable(self):
        response = self.client.get(f"/api/mentor/stats/?mentorId={MENTOR_ID}")
        self.assertError(response, 503, "auth_unavailable")

    @override_settings(CLERK_JWKS_URL="", DEBUG=True)
    def test_development_header_signs_in(self):
        response = self.client.get(
            "/api/role-onboarding/mentor/status/",
            HTTP_X_DEV_USER_ID="user_dev",
        )
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data["data"]["hasProfile"])
        self.assertTrue(UserProfile.objects.filter(external_id="user_dev").exists())


class MentorSessionApiTests(MarketplaceApiTestCase):
    def setUp(self):
        self.as_mentor()
        self.now = timezone.now()

    def url(self, suffix=""):
        return f"/api/mentor-sessions/{suffix}?mentorId={MENTOR_ID}"

    def test_list_splits_upcoming_and_past(self):
        make_session(MENTOR_ID, self.now + timedelta(days=1), title="Upcoming")
        make_session(MENTOR_ID, self.now - timedelta(days=2), status="completed", title="Done")
        make_session("user_mentor_2", self.now + timedelta(days=1), title="Not mine")

        response = self.client.get(self.url())

        self.assertEqual(response.status_code, 200)
        self.assertEqual([s["title"] for s in response.data["upcoming"]], ["Upcoming"])
        self.assertEqual([s["title"] for s in response.data["past"]], ["Done"])

    def test_list_scope_filters_by_time(self):
        make_session(MENTOR_ID, self.now + timedelta(days=1), title="Upcoming")
        make_session(MENTOR_ID, self.now - timedelta(days=2), status="completed", title="Done")

        response = self.client.get(self.url() + "&scope=past")

        self.assertEqual(response.data["upcoming"], [])
        self.assertEqual([s["title"] for s in response.data["past"]], ["Done"])

    def test_create_manual_session(self):
        start = self.now + timedelta(days=3)
        response = self.client.post(
            "/api/mentor-sessions/",
            {
                "mentorId": MENTOR_ID,
                "studentId": STUDENT_ID,
                "studentName": "Asha Rao",
                "studentEmail": "Asha@Example.com",
                "title": "Mock interview",
                "startTime": start.isoformat(),
                "endTime": (start + timedelta(minutes=45)).isoformat(),
                "amount": 1500,
            },
            format="json",
        )

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["durationMinutes"], 45)
        self.assertEqual(response.data["status"], "scheduled")
        self.assertEqual(response.data["paymentStatus"], "pending")
        self.assertEqual(response.data["bookingType"], "manual")
        self.assertEqual(response.data["studentEmail"], "asha@example.com")
        self.assertEqual(response.data["amount"], 1500)

    def test_create_reports_missing_fields(self):
        response = self.client.post(
            "/api/mentor-sessions/",
            {"mentorId": MENTOR_ID, "title": "Mock interview"},
            format="json",
        )
        self.assertError(response, 400, "missing_fields")
        self.assertEqual(response.data["missingFields"], ["studentName", "startTime", "endTime"])

    def test_create_rejects_inverted_time_range(self):
        start = self.now + timedelta(days=3)
        response = self.client.post(
            "/api/mentor-sessions/",
            {
                "mentorId": MENTOR_ID,
                "studentName": "Asha Rao",
                "title": "Mock interview",
                "startTime": start.isoformat(),
                "endTime": start.isoformat(),
            },
            format="json",
        )
        self.assertError(response, 400, "invalid")
        self.assertIn("endTime", response.data["fields"])

    def test_retrieve_validates_id_and_scope(self):
        foreign = make_session("user_mentor_2", self.now + timedelta(days=1))

        self.assertError(self.client.get(self.url("abc/")), 400, "invalid_id")
        response = self.client.get(self.url(f"{foreign.pk}/"))
        self.assertError(response, 404, "not_found")
        self.assertEqual(response.data["error"]["message"], "Session not found")

    def test_reschedule_needs_both_times(self):
        session = make_session(MENTOR_ID, self.now + timedelta(days=1))
        response = self.client.patch(
            self.url(f"{session.pk}/"),
            {"startTime": (self.now + timedelta(days=2)).isoformat()},
            format="json",
        )
        self.assertError(response, 400, "invalid")

    def test_reschedule_recomputes_duration(self):
        session = make_session(MENTOR_ID, self.now + timedelta(days=1))
        start = self.now + timedelta(days=2)
        response = self.client.patch(
            self.url(f"{session.pk}/"),
            {"startTime": start.isoformat(), "endTime": (start + timedelta(minutes=90)).isoformat()},
            format="json",
        )
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(response.data["durationMinutes"], 90)

    def test_update_rejects_unknown_status(self):
        session = make_session(MENTOR_ID, self.now + timedelta(days=1))
        response = self.client.patch(self.url(f"{session.pk}/"), {"status": "archived"}, format="json")
        self.assertError(response, 400, "invalid")

    def test_update_notes(self):
        session = make_session(MENTOR_ID, self.now - timedelta(days=1), status="completed")
        response = self.client.patch(self.url(f"{session.pk}/"), {"notes": "Practice STAR answers"}, format="json")
        self.assertEqual(response.status_code, 200)
        session.refresh_from_db()
        self.assertEqual(session.notes, "Practice STAR answers")

    def test_complete_stamps_end(self):
        session = make_session(MENTOR_ID, self.now - timedelta(hours=1))
        response = self.client.post(self.url(f"{session.pk}/complete/"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "completed")
        self.assertIsNotNone(response.data["endedAt"])

    def test_delete_is_owner_scoped(self):
        session = make_session(MENTOR_ID, self.now + timedelta(days=1))
        foreign = make_session("user_mentor_2", self.now + timedelta(days=1))

        self.assertEqual(self.client.delete(self.url(f"{session.pk}/")).status_code, 204)
        self.assertEqual(self.client.delete(self.url(f"{foreign.pk}/")).status_code, 404)
        self.assertFalse(Session.objects.filter(pk=session.pk).exists())
        self.assertTrue(Session.objects.filter(pk=foreign.pk).exists())


class JoinGateApiTests(MarketplaceApiTestCase):
    def setUp(self):
        self.as_mentor()

    def verify(self, session):
        return self.client.get(f"/api/mentor-sessions/{session.pk}/verify-join/?mentorId={MENTOR_ID}")

    def test_early_join_reports_minutes_remaining(self):
        session = make_session(MENTOR_ID, timezone.now() + timedelta(minutes=20), payment_status="paid")
        response = self.verify(session)
        self.assertError(response, 403, "join_not_allowed")
        self.assertFalse(response.data["canJoin"])
        self.assertEqual(response.data["minutesUntilJoin"], 5)

    def test_join_inside_window_starts_the_session(self):
        session = make_session(MENTOR_ID, timezone.now() + timedelta(minutes=14), payment_status="paid")

        response = self.verify(session)

        self.assertEqual(response.status_code, 200, response.data)
        self.assertTrue(response.data["canJoin"])
        self.assertEqual(response.data["role"], "host")
        self.assertEqual(response.data["channelName"], f"session-{session.pk}")
        session.refresh_from_db()
        self.assertEqual(session.status, "ongoing")
        self.assertIsNotNone(session.started_at)

    def test_unpaid_session_cannot_be_joined(self):
        session = make_session(MENTOR_ID, timezone.now() + timedelta(minutes=5))
        response = self.verify(session)
        self.assertError(response, 403, "join_not_allowed")
        self.assertEqual(
            response.data["error"]["message"],
            "Payment not confirmed. Cannot join session until payment is confirmed.",
        )

    def test_completed_session_cannot_be_joined(self):
        session = make_session(
            MENTOR_ID, timezone.now() + timedelta(minutes=5), payment_status="paid", status="completed"
        )
        response = self.verify(session)
        self.assertEqual(response.data["error"]["message"], "Session is completed. Cannot join.")


class PaymentConfirmationApiTests(MarketplaceApiTestCase):
    def payload(self, **overrides):
        start = timezone.now() + timedelta(days=2)
        data = {
            "mentorId": MENTOR_ID,
            "studentId": STUDENT_ID,
            "studentName": "Asha Rao",
            "studentEmail": "asha@example.com",
            "title": "Portfolio review",
            "startTime": start.isoformat(),
            "endTime": (start + timedelta(minutes=60)).isoformat(),
            "amount": 2500,
            "orderId": "order_abc",
            "paymentId": "pay_abc",
            "razorpaySignature": expected_signature("order_abc", "pay_abc", settings.RAZORPAY_KEY_SECRET),
        }
        data.update(overrides)
        return data

    def test_confirmed_payment_books_session(self):
        self.as_student()
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post("/api/mentor-sessions/confirm-payment/", self.payload(), format="json")

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["message"], "Session confirmed, signature verified, and notifications sent")
        self.assertEqual(response.data["session"]["paymentStatus"], "paid")
        self.assertEqual(response.data["session"]["bookingType"], "paid")
        self.assertTrue(response.data["session"]["meetingLink"])
        mentorship = Mentorship.objects.get(mentor_id=MENTOR_ID, mentee_external_id=STUDENT_ID)
        self.assertEqual(mentorship.status, "active")
        self.assertEqual(sorted(message.to[0] for message in mail.outbox), ["asha@example.com", "priya@example.com"])

    def test_mentor_email_comes_from_mentor_account(self):
        self.as_student()
        payload = self.payload(mentorEmail="attacker@example.com", mentorName="Someone Else")
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post("/api/mentor-sessions/confirm-payment/", payload, format="json")

        self.assertEqual(response.status_code, 201, response.data)
        recipients = [message.to[0] for message in mail.outbox]
        self.assertIn("priya@example.com", recipients)
        self.assertNotIn("attacker@example.com", recipients)
        mentor_mail = next(message for message in mail.outbox if message.to == ["priya@example.com"])
        self.assertIn("Hi Priya Raman", mentor_mail.body)

    def test_forged_signature_is_rejected(self):
        self.as_student()
        response = self.client.post(
            "/api/mentor-sessions/confirm-payment/",
            self.payload(razorpaySignature="forged"),
            format="json",
        )
        self.assertError(response, 400, "invalid_signature")
        self.assertFalse(Session.objects.exists())

    def test_missing_payment_fields(self):
        self.as_student()
        payload = self.payload()
        payload.pop("razorpaySignature")
        payload.pop("orderId")
        response = self.client.post("/api/mentor-sessions/confirm-payment/", payload, format="json")
        self.assertError(response, 400, "missing_fields")
        self.assertEqual(response.data["missingFields"], ["orderId", "razorpaySignature"])

    def test_requires_authentication(self):
        response = self.client.post("/api/mentor-sessions/confirm-payment/", self.payload(), format="json")
        self.assertError(response, 401, "not_authenticated")


class MentorMenteeApiTests(MarketplaceApiTestCase):
    def setUp(self):
        self.as_mentor()

    def url(self, suffix=""):
        return f"/api/mentor-mentees/{suffix}?mentorId={MENTOR_ID}"

    def mentorship(self, **fields):
        values = {"mentor_id": MENTOR_ID, "mentee_email": "asha@example.com", "mentee_name": "Asha Rao"}
        values.update(fields)
        return Mentorship.objects.create(**values)

    def test_roster_backfills_from_sessions(self):
        make_session(MENTOR_ID, timezone.now() + timedelta(days=1))

        response = self.client.get(self.url())

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["total"], 1)
        mentee = response.data["mentees"][0]
        self.assertEqual(mentee["name"], "Asha Rao")
        self.assertEqual(mentee["status"], "Active")
        self.assertEqual(mentee["lastSession"], "Never")

    def test_add_mentee_creates_invited_mentorship(self):
        response = self.client.post(
            "/api/mentor-mentees/",
            {"mentorId": MENTOR_ID, "name": "Ravi", "email": "Ravi@Example.com", "goal": "Interview prep"},
            format="json",
        )

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["status"], "New")
        self.assertEqual(response.data["progress"], 0)
        self.assertEqual(response.data["lastSession"], "Never")
        mentorship = Mentorship.objects.get(mentor_id=MENTOR_ID, mentee_email="ravi@example.com")
        self.assertEqual(mentorship.status, "invited")

    def test_add_mentee_requires_goal(self):
        response = self.client.post(
            "/api/mentor-mentees/",
            {"mentorId": MENTOR_ID, "name": "Ravi", "email": "ravi@example.com"},
            format="json",
        )
        self.assertError(response, 400, "missing_fields")
        self.assertEqual(response.data["missingFields"], ["goal"])

    def test_detail_id_errors(self):
        foreign = self.mentorship(mentor_id="user_mentor_2")

        response = self.client.get(self.url("abc/"))
        self.assertError(response, 400, "invalid_id")
        self.assertEqual(response.data["error"]["message"], "Invalid mentee id")
        response = self.client.get(self.url(f"{foreign.pk}/"))
        self.assertError(response, 404, "not_found")
        self.assertEqual(response.data["error"]["message"], "Mentee not found")

    def test_detail_includes_plan(self):
        mentorship = self.mentorship(mentee_external_id=STUDENT_ID)
        plan = MenteePlan.for_link(MentorshipLink(mentorship.pk), mentor_id=MENTOR_ID, progress=25, notes="")
        plan.save()
        Milestone.objects.create(plan=plan, title="Resume", description="Tighten bullet points")

        response = self.client.get(self.url(f"{mentorship.pk}/"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["progress"], 25)
        self.assertIsNone(response.data["notes"])
        self.assertEqual([m["title"] for m in response.data["milestones"]], ["Resume"])

    def test_plan_update(self):
        mentorship = self.mentorship()

        response = self.client.patch(
            self.url(f"{mentorship.pk}/plan/"), {"progress": 40, "notes": "Focus on DSA"}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data, {"success": True, "data": {"notes": "Focus on DSA", "progress": 40}})

        response = self.client.patch(self.url(f"{mentorship.pk}/plan/"), {"progress": 150}, format="json")
        self.assertError(response, 400, "invalid")

    def test_milestone_lifecycle(self):
        mentorship = self.mentorship()

        response = self.client.post(
            self.url(f"{mentorship.pk}/milestones/"),
            {"title": "Mock interview", "description": "Two rounds", "dueDate": "2026-12-01T10:00:00Z"},
            format="json",
        )
        self.assertEqual(response.status_code, 201, response.data)
        milestone_id = response.data["data"]["id"]
        self.assertFalse(response.data["data"]["completed"])
        self.assertEqual(response.data["data"]["dueDate"], "2026-12-01T10:00:00Z")

        response = self.client.patch(
            self.url(f"{mentorship.pk}/milestones/{milestone_id}/"), {"completed": True}, format="json"
        )
        self.assertEqual(response.status_code, 200, response.data)
        self.assertTrue(response.data["data"]["completed"])

        response = self.client.delete(self.url(f"{mentorship.pk}/milestones/{milestone_id}/"))
        self.assertEqual(response.status_code, 204)

        response = self.client.patch(
            self.url(f"{mentorship.pk}/milestones/{milestone_id}/"), {"completed": False}, format="json"
        )
        self.assertError(response, 404, "not_found")
        self.assertEqual(response.data["error"]["message"], "Milestone not found")

    def test_milestone_requires_description(self):
        mentorship = self.mentorship()
        response = self.client.post(self.url(f"{mentorship.pk}/milestones/"), {"title": "Resume"}, format="json")
        self.assertError(response, 400, "missing_fields")
        self.assertEqual(response.data["missingFields"], ["description"])

    def test_send_message(self):
        mentorship = self.mentorship()

        response = self.client.post(
            self.url(f"{mentorship.pk}/message/"), {"message": "  See you Monday  "}, format="json"
        )

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["data"]["sender"], "mentor")
        message = MenteeMessage.objects.get(mentorship=mentorship)
        self.assertEqual(message.message, "See you Monday")

    def test_empty_message_is_rejected(self):
        mentorship = self.mentorship()
        response = self.client.post(self.url(f"{mentorship.pk}/message/"), {"message": "   "}, format="json")
        self.assertError(response, 400, "missing_fields")


class MentorDashboardApiTests(MarketplaceApiTestCase):
    def setUp(self):
        self.as_mentor()

    def test_stats(self):
        make_session(
            MENTOR_ID,
            timezone.now() - timedelta(hours=3),
            status="completed",
            payment_status="paid",
            amount=Decimal("1500"),
        )
        response = self.client.get(f"/api/mentor/stats/?mentorId={MENTOR_ID}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["earnings"]["total"], 1500)
        self.assertEqual(response.data["earnings"]["currency"], "INR")
        self.assertEqual(response.data["mentees"]["active"], 0)
        self.assertEqual(response.data["mentees"]["total"], 1)

    def test_unexpected_error_renders_server_error_envelope(self):
        with patch("core.api_views.mentor_stats", side_effect=DatabaseError("down")):
            response = self.client.get(f"/api/mentor/stats/?mentorId={MENTOR_ID}")
        self.assertError(response, 500, "server_error")
        self.assertEqual(response.data["error"]["message"], "An error occurred on the server.")

    def test_pending_requests(self):
        session = make_session(MENTOR_ID, timezone.now() + timedelta(days=1), payment_status="paid")
        response = self.client.get(f"/api/mentor/pending-requests/?mentorId={MENTOR_ID}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["requests"][0]["sessionId"], session.pk)

    def test_earnings(self):
        response = self.client.get(f"/api/mentor/earnings/?mentorId={MENTOR_ID}&period=last_90_days")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data["earningsChart"]), 6)
        self.assertEqual(response.data["paymentHistory"], [])

    def test_availability_slots(self):
        response = self.client.get(
            f"/api/mentor-availability/slots/?mentorId={MENTOR_ID}&startDate=2026-03-16&endDate=2026-03-22"
        )
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(len(response.data["slots"]), 1)
        self.assertFalse(response.data["slots"][0]["isBooked"])

    def test_availability_for_unknown_mentor(self):
        response = self.client.get("/api/mentor-availability/slots/?mentorId=user_nobody")
        self.assertError(response, 404, "not_found")

    def test_availability_rejects_bad_dates(self):
        response = self.client.get(f"/api/mentor-availability/slots/?mentorId={MENTOR_ID}&startDate=soon")
        self.assertError(response, 400, "invalid")


class StudentApiTests(MarketplaceApiTestCase):
    def setUp(self):
        self.as_student()
        self.now = timezone.now()

    def test_student_sessions(self):
        make_session(MENTOR_ID, self.now + timedelta(days=1), title="Next")
        make_session(MENTOR_ID, self.now - timedelta(days=1), status="completed", notes="Great work", title="Last")
        make_session(MENTOR_ID, self.now + timedelta(days=1), student_id="user_other", title="Someone else")

        response = self.client.get(f"/api/student-sessions/?studentId={STUDENT_ID}")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["total"], 2)
        self.assertEqual([s["title"] for s in response.data["upcoming"]], ["Next"])
        self.assertIsNone(response.data["upcoming"][0]["notes"])
        self.assertEqual(response.data["past"][0]["notes"], "Great work")

    def test_student_session_detail_is_scoped(self):
        mine = make_session(MENTOR_ID, self.now + timedelta(days=1))
        other = make_session(MENTOR_ID, self.now + timedelta(days=1), student_id="user_other")

        response = self.client.get(f"/api/student-sessions/{mine.pk}/?studentId={STUDENT_ID}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["mentorId"], MENTOR_ID)
        response = self.client.get(f"/api/student-sessions/{other.pk}/?studentId={STUDENT_ID}")
        self.assertError(response, 404, "not_found")

    def test_student_cannot_read_other_students(self):
        response = self.client.get("/api/student-sessions/?studentId=user_other")
        self.assertError(response, 403, "forbidden")

    def test_my_mentors(self):
        Mentorship.objects.create(mentor_id=MENTOR_ID, mentee_external_id=STUDENT_ID, status="active")
        Mentorship.objects.create(mentor_id="user_mentor_2", mentee_external_id=STUDENT_ID, status="ended")

        response = self.client.get(f"/api/student/my-mentors/?studentId={STUDENT_ID}")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["total"], 1)
        mentor = response.data["mentors"][0]
        self.assertEqual(mentor["name"], "Priya Raman")
        self.assertEqual(mentor["expertise"], ["Figma", "Design Systems", "Research"])


class StudentProfileApiTests(MarketplaceApiTestCase):
    def setUp(self):
        self.as_student()

    def test_profile_builds_timeline_newest_first(self):
        Student.objects.filter(user=self.student_user).update(
            experiences=[
                {"company": "Acme", "role": "Intern", "startDate": "2023-01", "endDate": "2023-06"},
                {"company": "Zeta", "role": "Analyst", "startDate": "2024-01"},
            ],
            educations=[
                {"school": "IIT Delhi", "degree": "B.Tech", "major": "CS", "startYear": "2019", "endYear": "2023"},
            ],
            projects=[{"name": "Portfolio", "description": "Personal site"}],
            location={"city": "Pune", "country": "India"},
        )

        response = self.client.get("/api/student/profile/")

        self.assertEqual(response.status_code, 200, response.data)
        data = response.data["data"]
        self.assertEqual(data["personalInfo"]["name"], "Asha Rao")
        self.assertEqual(data["personalInfo"]["location"], "Pune, India")
        self.assertEqual(data["careerSnapshot"], {"currentRole": "Analyst", "currentCompany": "Zeta"})
        timeline = data["timelineItems"]
        self.assertEqual([item["title"] for item in timeline], ["Analyst", "Intern", "B.Tech", "Portfolio"])
        self.assertTrue(timeline[0]["isCurrent"])
        self.assertEqual(timeline[2]["subtitle"], "IIT Delhi")
        self.assertEqual(timeline[3]["subtitle"], "Personal Project")

    def test_update_maps_timeline_back_to_profile_lists(self):
        payload = {
            "skills": ["Figma"],
            "timelineItems": [
                {
                    "type": "work",
                    "title": "Designer",
                    "subtitle": "Acme",
                    "startDate": "2024-02",
                    "endDate": "2024-05",
                    "isCurrent": True,
                },
                {
                    "type": "education",
                    "title": "B.Des",
                    "subtitle": "NID",
                    "description": "Interaction",
                    "startDate": "2018",
                    "endDate": "2022",
                },
            ],
        }

        response = self.client.put("/api/student/profile/", payload, format="json")

        self.assertEqual(response.status_code, 200, response.data)
        student = Student.objects.get(user=self.student_user)
        self.assertEqual(
            student.experiences,
            [{"role": "Designer", "company": "Acme", "description": "", "startDate": "2024-02", "endDate": None}],
        )
        self.assertEqual(
            student.educations,
            [{"degree": "B.Des", "school": "NID", "major": "Interaction", "startYear": "2018", "endYear": "2022"}],
        )
        self.assertEqual(student.projects, [])
        self.assertEqual(student.skills, ["Figma"])
        self.assertEqual(response.data["data"]["careerSnapshot"]["currentCompany"], "Acme")

    def test_update_without_timeline_keeps_history(self):
        Student.objects.filter(user=self.student_user).update(projects=[{"name": "Portfolio"}])

        response = self.client.put("/api/student/profile/", {"phone": "+91 90000 00000"}, format="json")

        self.assertEqual(response.status_code, 200, response.data)
        student = Student.objects.get(user=self.student_user)
        self.assertEqual(student.phone, "+91 90000 00000")
        self.assertEqual(student.projects, [{"name": "Portfolio"}])

    def test_unknown_timeline_type_is_rejected(self):
        response = self.client.put(
            "/api/student/profile/",
            {"timelineItems": [{"type": "hobby", "title": "Chess"}]},
            format="json",
        )
        self.assertError(response, 400, "invalid")
        self.assertIn("timelineItems", response.data["fields"])

    def test_mentor_without_student_profile_is_denied(self):
        self.as_mentor()
        response = self.client.get("/api/student/profile/")
        self.assertError(response, 403, "role_not_provisioned")


class MentorDirectoryApiTests(MarketplaceApiTestCase):
    def test_directory_is_public(self):
        response = self.client.get("/api/mentors/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["stats"]["totalMentors"], 2)
        cards = {card["id"]: card for card in response.data["mentors"]}
        self.assertEqual(cards[MENTOR_ID]["domain"], "Design")
        self.assertEqual(cards[MENTOR_ID]["avatarInitial"], "PR")
        self.assertTrue(cards[MENTOR_ID]["verified"])

    def test_health_is_public(self):
        response = self.client.get("/api/health/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "ok")


class RoleOnboardingApiTests(MarketplaceApiTestCase):
    def setUp(self):
        self.user = make_user("user_new", "new@example.com")
        self.client.force_authenticate(user=self.user)

    def test_mentor_onboarding_flow(self):
        self.assertError(self.client.get("/api/role-onboarding/mentor/"), 404, "not_found")

        response = self.client.post(
            "/api/role-onboarding/mentor/",
            {
                "name": "Meera Iyer",
                "currentRole": "Lead Data Scientist",
                "company": "Acme",
                "specializationTags": ["ML", "Python"],
                "pricing": {"expectedHourlyRate": 3000, "expectedHalfHourRate": 1600},
                "timezone": "Asia/Kolkata",
                "weeklyAvailability": [
                    {"id": "w1", "day": "Monday", "startTime": "09:00", "endTime": "11:00"},
                ],
            },
            format="json",
        )

        self.assertEqual(response.status_code, 200, response.data)
        self.assertTrue(response.data["data"]["isOnboarded"])
        self.assertEqual(response.data["data"]["pricing"]["expectedHourlyRate"], 3000)
        self.assertTrue(response.data["data"]["weeklyAvailability"][0]["isActive"])
        self.assertEqual(UserProfile.objects.get(user=self.user).role, "mentor")

        response = self.client.patch("/api/role-onboarding/mentor/", {"company": "Globex"}, format="json")
        self.assertEqual(response.status_code, 200, response.data)
        mentor = Mentor.objects.get(user=self.user)
        self.assertEqual(mentor.company, "Globex")
        self.assertEqual(mentor.name, "Meera Iyer")

        response = self.client.get("/api/role-onboarding/mentor/status/")
        self.assertEqual(response.data, {"success": True, "data": {"isOnboarded": True, "hasProfile": True}})

    def test_mentor_onboarding_validates_availability(self):
        response = self.client.post(
            "/api/role-onboarding/mentor/",
            {
                "name": "Meera Iyer",
                "weeklyAvailability": [{"id": "w1", "day": "Funday", "startTime": "09:00", "endTime": "11:00"}],
            },
            format="json",
        )
        self.assertError(response, 400, "invalid")
        self.assertFalse(Mentor.objects.filter(user=self.user).exists())

    def test_student_onboarding(self):
        response = self.client.post(
            "/api/role-onboarding/student/",
            {"fullName": "New Student", "skills": ["python"]},
            format="json",
        )
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(Student.objects.get(user=self.user).email, "new@example.com")
        self.assertEqual(UserProfile.objects.get(user=self.user).role, "student")

        response = self.client.get("/api/role-onboarding/student/status/")
        self.assertTrue(response.data["data"]["isOnboarded"])

    def test_founder_onboarding(self):
        response = self.client.post(
            "/api/role-onboarding/founder/",
            {"companyName": "Acme Labs", "stage": "mvp"},
            format="json",
        )
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(Founder.objects.get(user=self.user).company_name, "Acme Labs")
        self.assertEqual(UserProfile.objects.get(user=self.user).role, "founder")

    def test_existing_role_is_kept(self):
        self.client.force_authenticate(user=self.mentor_user)
        response = self.client.post("/api/role-onboarding/student/", {"fullName": "Priya"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(UserProfile.objects.get(user=self.mentor_user).role, "mentor")


class AuthVerifyApiTests(MarketplaceApiTestCase):
    def test_verify_claims_invited_mentorships(self):
        user = make_user("user_invited", "invited@example.com")
        Mentorship.objects.create(mentor_id=MENTOR_ID, mentee_email="invited@example.com", status="invited")
        self.client.force_authenticate(user=user)

        response = self.client.post("/api/auth/verify/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["claimedMentorships"], 1)
        self.assertIsNone(response.data["role"])
        self.assertFalse(response.data["profileExists"])
        self.assertEqual(Mentorship.objects.get(mentee_email="invited@example.com").mentee_external_id, "user_invited")

    def test_verify_reports_role(self):
        self.as_mentor()
        response = self.client.post("/api/auth/verify/")
        self.assertEqual(response.data["userId"], MENTOR_ID)
        self.assertEqual(response.data["role"], "mentor")
        self.assertTrue(response.data["onboardingComplete"])


class ApiSchemaTests(APITestCase):
    def test_schema_is_public_and_tagged(self):
        response = self.client.get("/api/schema/")
        self.assertEqual(response.status_code, 200)
        paths = response.data["paths"]
        self.assertIn("/api/mentor-sessions/{id}/verify-join/", paths)
        self.assertEqual(paths["/api/mentor/stats/"]["get"]["tags"], ["Mentor"])
        self.assertEqual(paths["/api/mentor-sessions/confirm-payment/"]["post"]["tags"], ["Student"])
        self.assertEqual(paths["/api/mentor/stats/"]["get"]["security"], [{"HTTPBearer": []}])
        self.assertNotIn("security", paths["/api/mentors/"]["get"])

    def test_all_protected_operations_reject_unauthenticated_requests(self):
        schema = MentorshipSchemaGenerator().get_schema(request=None, public=True)
        checked = 0
        for path, operations in schema["paths"].items():
            if path in PUBLIC_PATHS:
                continue
            url = path.replace("{id}", "1").replace("{milestone_id}", "1")
            for method in operations:
                response = self.client.generic(method.upper(), url)
                self.assertEqual(response.status_code, 401, f"{method.upper()} {path}")
                checked += 1
        self.assertGreater(checked, 20)
