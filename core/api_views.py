import logging
from datetime import datetime, time

from django.db import transaction
from django.db.models import Q
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, ValidationError
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .auth import external_id_for
from .dashboard import (
    availability_slots,
    earnings_summary,
    mentee_detail,
    mentee_roster,
    mentee_summary,
    mentor_stats,
    milestone_payload,
    pending_requests,
)
from .directory import mentor_directory, student_mentors
from .exceptions import InvalidIdentifier, JoinNotAllowed, MissingFields
from .identity import claim_invited_mentorships
from .meetings import evaluate_join, open_session_for_join
from .mentorships import add_mentee, get_or_create_plan, link_for
from .models import Founder, MenteeMessage, Mentor, Mentorship, Milestone, Session, Student, UserProfile
from .payments import REQUIRED_FIELDS, confirm_payment, missing_fields
from .permissions import IsMentor, IsStudent, ensure_owner, require_query_param
from .profiles import student_profile_payload
from .roles import ROLE_FOUNDER, ROLE_MENTOR, ROLE_STUDENT, get_role_context, reset_role_context
from .serializers import (
    FounderProfileSerializer,
    MenteeCreateSerializer,
    MenteeMessageSerializer,
    MentorProfileSerializer,
    MilestoneSerializer,
    PaymentConfirmationSerializer,
    PlanUpdateSerializer,
    SessionCreateSerializer,
    SessionSerializer,
    SessionUpdateSerializer,
    StudentProfileSerializer,
    StudentProfileUpdateSerializer,
    StudentSessionSerializer,
)


logger = logging.getLogger(__name__)

SESSION_SCOPES = {"all", "upcoming", "past"}
ENDED_STATUSES = ("completed", "cancelled")


def parse_pk(value, message):
    try:
        return int(str(value))
    except (TypeError, ValueError):
        raise InvalidIdentifier(message)


def owned_mentor_id(request):
    """The `mentorId` from the query (or body) after checking it is the caller's."""
    value = request.query_params.get("mentorId")
    if not value and isinstance(request.data, dict):
        value = request.data.get("mentorId")
    if not str(value or "").strip():
        raise MissingFields(["mentorId"], detail="mentorId is required")
    return ensure_owner(request, str(value).strip())


def owned_student_id(request):
    return ensure_owner(request, require_query_param(request, "studentId"))


def require_fields(data, fields):
    missing = missing_fields(data, fields)
    if missing:
        raise MissingFields(missing)


def session_scope(request):
    scope = request.query_params.get("scope") or "all"
    if scope not in SESSION_SCOPES:
        raise ValidationError({"scope": [f"Must be one of: {', '.join(sorted(SESSION_SCOPES))}."]})
    return scope


def parse_window_bound(value, end_of_day=False):
    if not value:
        return None
    try:
        day = parse_date(value)
        moment = parse_datetime(value) if day is None else None
    except ValueError:
        day = moment = None
    if day is not None:
        moment = datetime.combine(day, time.max if end_of_day else time.min)
    if moment is None:
        raise ValidationError({"date": [f"Invalid date: {value}"]})
    if timezone.is_naive(moment):
        moment = timezone.make_aware(moment)
    return moment


def mark_role(user, role):
    UserProfile.objects.filter(user=user, role="unassigned").update(role=role, updated_at=timezone.now())


class HealthView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response({"status": "ok", "time": timezone.now().isoformat()})


class AuthVerifyView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        user = request.user
        external_id = external_id_for(user)
        claimed = claim_invited_mentorships(external_id, user.email)
        context = get_role_context(request)
        role = context.role
        onboarding_complete = bool(
            (context.mentor and context.mentor.is_onboarded) or context.student or context.founder
        )
        return Response(
            {
                "userId": external_id,
                "role": role,
                "profileExists": role is not None,
                "onboardingComplete": onboarding_complete,
                "claimedMentorships": claimed,
            }
        )


class MentorSessionViewSet(viewsets.GenericViewSet):
    serializer_class = SessionSerializer
    permission_classes = [IsMentor]

    def get_permissions(self):
        if self.action == "confirm_payment":
            return [IsAuthenticated()]
        return super().get_permissions()

    def get_queryset(self):
        return Session.objects.filter(mentor_id=owned_mentor_id(self.request))

    def get_session(self, pk):
        session_id = parse_pk(pk, "Invalid session id")
        session = self.get_queryset().filter(pk=session_id).first()
        if session is None:
            raise NotFound("Session not found")
        return session

    def list(self, request):
        scope = session_scope(request)
        now = timezone.now()
        queryset = self.get_queryset().order_by("start_time", "id")
        if scope == "upcoming":
            queryset = queryset.filter(start_time__gte=now)
        elif scope == "past":
            queryset = queryset.filter(end_time__lt=now)
        sessions = list(queryset)
        upcoming = [s for s in sessions if s.start_time >= now or s.status in Session.JOINABLE_STATUSES]
        past = [s for s in sessions if s.end_time < now or s.status in ENDED_STATUSES]
        return Response(
            {
                "upcoming": SessionSerializer(upcoming, many=True).data,
                "past": SessionSerializer(past, many=True).data,
            }
        )

    def retrieve(self, request, pk=None):
        return Response(SessionSerializer(self.get_session(pk)).data)

    def create(self, request):
        require_fields(request.data, SessionCreateSerializer.REQUIRED)
        owned_mentor_id(request)
        serializer = SessionCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        session = Session.objects.create(
            status="scheduled",
            payment_status="pending",
            booking_type="manual",
            **serializer.validated_data,
        )
        logger.info("Manual session %s created for mentor %s", session.pk, session.mentor_id)
        return Response(SessionSerializer(session).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        session = self.get_session(pk)
        serializer = SessionUpdateSerializer(session, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        session = serializer.save()
        return Response(SessionSerializer(session).data)

    def destroy(self, request, pk=None):
        session = self.get_session(pk)
        session.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"], url_path="verify-join")
    def verify_join(self, request, pk=None):
        session = self.get_session(pk)
        now = timezone.now()
        decision = evaluate_join(session, now)
        if not decision.allowed:
            raise JoinNotAllowed(decision.reason, minutes_until_join=decision.minutes_until_join)
        session = open_session_for_join(session, now)
        return Response(
            {
                "canJoin": True,
                "meetingLink": session.meeting_link,
                "sessionId": session.pk,
                "channelName": session.channel_name,
                "role": "host",
            }
        )

    @action(detail=True, methods=["post"], url_path="complete")
    def complete(self, request, pk=None):
        session = self.get_session(pk)
        session.status = "completed"
        session.ended_at = session.ended_at or timezone.now()
        session.save(update_fields=["status", "ended_at", "updated_at"])
        return Response(SessionSerializer(session).data)

    @action(detail=False, methods=["post"], url_path="confirm-payment")
    def confirm_payment(self, request):
        require_fields(request.data, REQUIRED_FIELDS)
        serializer = PaymentConfirmationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        session = confirm_payment(serializer.validated_data)
        return Response(
            {
                "session": SessionSerializer(session).data,
                "message": "Session confirmed, signature verified, and notifications sent",
            },
            status=status.HTTP_201_CREATED,
        )


class MentorMenteeViewSet(viewsets.GenericViewSet):
    serializer_class = MenteeCreateSerializer
    permission_classes = [IsMentor]

    def get_mentorship(self, pk, mentor_id):
        mentorship_id = parse_pk(pk, "Invalid mentee id")
        mentorship = Mentorship.objects.filter(pk=mentorship_id, mentor_id=mentor_id).first()
        if mentorship is None:
            raise NotFound("Mentee not found")
        return mentorship

    def list(self, request):
        mentor_id = owned_mentor_id(request)
        return Response(mentee_roster(mentor_id, timezone.now()))

    def create(self, request):
        require_fields(request.data, MenteeCreateSerializer.REQUIRED)
        mentor_id = owned_mentor_id(request)
        serializer = MenteeCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        mentorship = add_mentee(mentor_id, data["name"], data["email"], data["goal"], data.get("status"))
        summary = mentee_summary(mentorship, [], None, timezone.now())
        return Response(summary, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        mentorship = self.get_mentorship(pk, owned_mentor_id(request))
        return Response(mentee_detail(mentorship, timezone.now()))

    @action(detail=True, methods=["patch"], url_path="plan")
    def plan(self, request, pk=None):
        mentorship = self.get_mentorship(pk, owned_mentor_id(request))
        serializer = PlanUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        plan = get_or_create_plan(mentorship)
        changed = []
        for field in ("notes", "progress"):
            if field in serializer.validated_data:
                setattr(plan, field, serializer.validated_data[field])
                changed.append(field)
        if changed:
            plan.save(update_fields=changed + ["updated_at"])
        return Response({"success": True, "data": {"notes": plan.notes, "progress": plan.progress}})

    @action(detail=True, methods=["post"], url_path="milestones")
    def milestones(self, request, pk=None):
        mentorship = self.get_mentorship(pk, owned_mentor_id(request))
        require_fields(request.data, ("title", "description"))
        serializer = MilestoneSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        with transaction.atomic():
            plan = get_or_create_plan(mentorship)
            milestone = serializer.save(plan=plan, completed=False)
        return Response(
            {"success": True, "data": milestone_payload(milestone)},
            status=status.HTTP_201_CREATED,
        )

    @action(
        detail=True,
        methods=["patch", "delete"],
        url_path=r"milestones/(?P<milestone_id>[^/.]+)",
        url_name="milestone-detail",
    )
    def milestone_detail(self, request, pk=None, milestone_id=None):
        mentorship = self.get_mentorship(pk, owned_mentor_id(request))
        milestone_pk = parse_pk(milestone_id, "Invalid milestone id")
        milestone = Milestone.objects.filter(pk=milestone_pk, plan__mentorship=mentorship).first()
        if milestone is None:
            raise NotFound("Milestone not found")

        if request.method == "DELETE":
            milestone.delete()
            return Response(status=status.HTTP_204_NO_CONTENT)

        serializer = MilestoneSerializer(milestone, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        milestone = serializer.save()
        return Response({"success": True, "data": milestone_payload(milestone)})

    @action(detail=True, methods=["post"], url_path="message")
    def message(self, request, pk=None):
        mentor_id = owned_mentor_id(request)
        require_fields(request.data, ("message",))
        mentorship = self.get_mentorship(pk, mentor_id)
        serializer = MenteeMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        message = MenteeMessage.for_link(
            link_for(mentorship),
            mentor_id=mentor_id,
            sender="mentor",
            message=serializer.validated_data["message"],
        )
        message.save()
        return Response(
            {"success": True, "data": MenteeMessageSerializer(message).data},
            status=status.HTTP_201_CREATED,
        )


class MentorStatsView(APIView):
    permission_classes = [IsMentor]

    def get(self, request):
        return Response(mentor_stats(owned_mentor_id(request), timezone.now()))


class MentorPendingRequestsView(APIView):
    permission_classes = [IsMentor]

    def get(self, request):
        return Response(pending_requests(owned_mentor_id(request), timezone.now()))


class MentorEarningsView(APIView):
    permission_classes = [IsMentor]

    def get(self, request):
        mentor_id = owned_mentor_id(request)
        period = request.query_params.get("period") or "all"
        return Response(earnings_summary(mentor_id, timezone.now(), period=period))


class MentorAvailabilitySlotsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        mentor_id = require_query_param(request, "mentorId")
        start = parse_window_bound(request.query_params.get("startDate"))
        end = parse_window_bound(request.query_params.get("endDate"), end_of_day=True)
        mentor = Mentor.objects.filter(user__userprofile__external_id=mentor_id).first()
        if mentor is None:
            raise NotFound("Mentor availability not found")
        return Response(availability_slots(mentor, mentor_id, start=start, end=end, now=timezone.now()))


class StudentSessionViewSet(viewsets.GenericViewSet):
    serializer_class = StudentSessionSerializer
    permission_classes = [IsStudent]

    def get_queryset(self):
        return Session.objects.filter(student_id=owned_student_id(self.request))

    def list(self, request):
        scope = session_scope(request)
        now = timezone.now()
        queryset = self.get_queryset().order_by("-start_time", "-id")
        if scope == "upcoming":
            queryset = queryset.filter(start_time__gte=now, status__in=Session.JOINABLE_STATUSES)
        elif scope == "past":
            queryset = queryset.filter(Q(end_time__lt=now) | Q(status__in=ENDED_STATUSES))
        sessions = list(queryset)
        upcoming = [s for s in sessions if s.start_time >= now and s.status in Session.JOINABLE_STATUSES]
        past = [s for s in sessions if s.end_time < now or s.status in ENDED_STATUSES]
        return Response(
            {
                "upcoming": StudentSessionSerializer(upcoming, many=True).data,
                "past": StudentSessionSerializer(past, many=True).data,
                "total": len(sessions),
            }
        )

    def retrieve(self, request, pk=None):
        session_id = parse_pk(pk, "Invalid session id")
        session = self.get_queryset().filter(pk=session_id).first()
        if session is None:
            raise NotFound("Session not found")
        return Response(StudentSessionSerializer(session).data)


class StudentMentorsView(APIView):
    permission_classes = [IsStudent]

    def get(self, request):
        return Response(student_mentors(owned_student_id(request)))


class StudentProfileView(APIView):
    permission_classes = [IsStudent]

    def get(self, request):
        student = get_role_context(request).student
        return Response({"success": True, "data": student_profile_payload(student)})

    def put(self, request):
        student = get_role_context(request).student
        serializer = StudentProfileUpdateSerializer(student, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        student = serializer.save()
        return Response({"success": True, "data": student_profile_payload(student)})


class MentorDirectoryView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        return Response(mentor_directory(timezone.now()))


class MentorOnboardingView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        mentor = Mentor.objects.filter(user=request.user).first()
        if mentor is None:
            raise NotFound("Mentor profile not found")
        return Response({"success": True, "data": MentorProfileSerializer(mentor).data})

    def post(self, request):
        return self._upsert(request, partial=False)

    def patch(self, request):
        return self._upsert(request, partial=True)

    def _upsert(self, request, partial):
        mentor = Mentor.objects.filter(user=request.user).first()
        serializer = MentorProfileSerializer(mentor, data=request.data, partial=partial or mentor is not None)
        serializer.is_valid(raise_exception=True)
        extra = {}
        if request.method == "POST":
            extra = {"is_onboarded": True, "onboarded_at": (mentor and mentor.onboarded_at) or timezone.now()}
        if mentor is None:
            extra["user"] = request.user
        mentor = serializer.save(**extra)
        mark_role(request.user, ROLE_MENTOR)
        reset_role_context(request)
        logger.info("Mentor profile %s saved for user %s", mentor.pk, request.user.pk)
        return Response({"success": True, "data": MentorProfileSerializer(mentor).data})


class MentorOnboardingStatusView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        mentor = Mentor.objects.filter(user=request.user).first()
        return Response(
            {
                "success": True,
                "data": {
                    "isOnboarded": bool(mentor and mentor.is_onboarded),
                    "hasProfile": mentor is not None,
                },
            }
        )


class StudentOnboardingView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        student = Student.objects.filter(user=request.user).first()
        serializer = StudentProfileSerializer(student, data=request.data, partial=student is not None)
        serializer.is_valid(raise_exception=True)
        if student is None:
            student = serializer.save(user=request.user, email=request.data.get("email") or request.user.email)
        else:
            student = serializer.save()
        mark_role(request.user, ROLE_STUDENT)
        reset_role_context(request)
        return Response({"success": True, "data": StudentProfileSerializer(student).data})


class StudentOnboardingStatusView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        has_profile = Student.objects.filter(user=request.user).exists()
        return Response(
            {"success": True, "data": {"isOnboarded": has_profile, "hasProfile": has_profile}}
        )


class FounderOnboardingView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request):
        founder = Founder.objects.filter(user=request.user).first()
        serializer = FounderProfileSerializer(founder, data=request.data, partial=founder is not None)
        serializer.is_valid(raise_exception=True)
        if founder is None:
            founder = serializer.save(user=request.user, email=request.data.get("email") or request.user.email)
        else:
            founder = serializer.save()
        mark_role(request.user, ROLE_FOUNDER)
        reset_role_context(request)
        return Response({"success": True, "data": FounderProfileSerializer(founder).data})
