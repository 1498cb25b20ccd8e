from zoneinfo import available_timezones

from rest_framework import serializers

from .dashboard import DAY_NAMES, as_number
from .models import Founder, MenteeMessage, Mentor, Milestone, Session, Student
from .profiles import TIMELINE_TYPES, timeline_to_profile


CLOCK_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class MoneyField(serializers.DecimalField):
    """Decimal on input, plain JSON number on output."""

    def __init__(self, **kwargs):
        kwargs.setdefault("max_digits", 10)
        kwargs.setdefault("decimal_places", 2)
        kwargs.setdefault("min_value", 0)
        super().__init__(**kwargs)

    def to_representation(self, value):
        if value is None:
            return None
        return as_number(value)


class SessionSerializer(serializers.ModelSerializer):
    mentorId = serializers.CharField(source="mentor_id", read_only=True)
    studentId = serializers.CharField(source="student_id", read_only=True)
    studentName = serializers.CharField(source="student_name", read_only=True)
    studentEmail = serializers.CharField(source="student_email", read_only=True)
    startTime = serializers.DateTimeField(source="start_time", read_only=True)
    endTime = serializers.DateTimeField(source="end_time", read_only=True)
    durationMinutes = serializers.IntegerField(source="duration_minutes", read_only=True)
    paymentStatus = serializers.CharField(source="payment_status", read_only=True)
    bookingType = serializers.CharField(source="booking_type", read_only=True)
    amount = MoneyField(read_only=True)
    meetingLink = serializers.CharField(source="meeting_link", read_only=True)
    channelName = serializers.CharField(source="channel_name", read_only=True)
    recordingUrl = serializers.CharField(source="recording_url", read_only=True)
    orderId = serializers.CharField(source="order_id", read_only=True)
    paymentId = serializers.CharField(source="payment_id", read_only=True)
    startedAt = serializers.DateTimeField(source="started_at", read_only=True)
    endedAt = serializers.DateTimeField(source="ended_at", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Session
        fields = [
            "id",
            "mentorId",
            "studentId",
            "studentName",
            "studentEmail",
            "title",
            "description",
            "startTime",
            "endTime",
            "durationMinutes",
            "status",
            "paymentStatus",
            "bookingType",
            "amount",
            "currency",
            "meetingLink",
            "channelName",
            "recordingUrl",
            "notes",
            "orderId",
            "paymentId",
            "startedAt",
            "endedAt",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields


class StudentSessionSerializer(SessionSerializer):
    notes = serializers.SerializerMethodField()

    class Meta(SessionSerializer.Meta):
        fields = [
            "id",
            "mentorId",
            "title",
            "description",
            "startTime",
            "endTime",
            "durationMinutes",
            "status",
            "paymentStatus",
            "meetingLink",
            "recordingUrl",
            "notes",
            "amount",
            "currency",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields

    def get_notes(self, obj):
        return obj.notes or None


class TimeRangeMixin:
    def validate(self, attrs):
        attrs = super().validate(attrs)
        start = attrs.get("start_time")
        end = attrs.get("end_time")
        if start and end and end <= start:
            raise serializers.ValidationError({"endTime": ["End time must be after start time."]})
        return attrs


class SessionCreateSerializer(TimeRangeMixin, serializers.Serializer):
    mentorId = serializers.CharField(source="mentor_id", max_length=191)
    studentId = serializers.CharField(source="student_id", max_length=191, required=False, allow_blank=True)
    studentName = serializers.CharField(source="student_name", max_length=255)
    studentEmail = serializers.EmailField(source="student_email", required=False, allow_blank=True)
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    startTime = serializers.DateTimeField(source="start_time")
    endTime = serializers.DateTimeField(source="end_time")
    amount = MoneyField(required=False, allow_null=True)
    meetingLink = serializers.URLField(source="meeting_link", max_length=500, required=False, allow_blank=True)

    REQUIRED = ("mentorId", "studentName", "title", "startTime", "endTime")


class SessionUpdateSerializer(TimeRangeMixin, serializers.Serializer):
    status = serializers.ChoiceField(choices=Session.LIFECYCLE_STATUSES, required=False)
    startTime = serializers.DateTimeField(source="start_time", required=False)
    endTime = serializers.DateTimeField(source="end_time", required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    meetingLink = serializers.URLField(source="meeting_link", max_length=500, required=False, allow_blank=True)
    recordingUrl = serializers.URLField(source="recording_url", max_length=500, required=False, allow_blank=True)

    def validate(self, attrs):
        if ("start_time" in attrs) != ("end_time" in attrs):
            raise serializers.ValidationError(
                {"startTime": ["Both startTime and endTime are required when rescheduling."]}
            )
        return super().validate(attrs)

    def update(self, instance, validated_data):
        for field, value in validated_data.items():
            setattr(instance, field, value)
        instance.save()
        return instance


class PaymentConfirmationSerializer(TimeRangeMixin, serializers.Serializer):
    mentorId = serializers.CharField(source="mentor_id", max_length=191)
    studentId = serializers.CharField(source="student_id", max_length=191, required=False, allow_blank=True)
    studentName = serializers.CharField(source="student_name", max_length=255)
    studentEmail = serializers.EmailField(source="student_email", required=False, allow_blank=True)
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True)
    startTime = serializers.DateTimeField(source="start_time")
    endTime = serializers.DateTimeField(source="end_time")
    amount = MoneyField(required=False, allow_null=True)
    paymentId = serializers.CharField(source="payment_id", max_length=191)
    orderId = serializers.CharField(source="order_id", max_length=191)
    razorpaySignature = serializers.CharField(source="razorpay_signature", max_length=255)


class MenteeCreateSerializer(serializers.Serializer):
    mentorId = serializers.CharField(source="mentor_id", max_length=191)
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField()
    goal = serializers.CharField()
    status = serializers.ChoiceField(choices=["Active", "Paused", "New"], required=False)

    REQUIRED = ("mentorId", "name", "email", "goal")


class PlanUpdateSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True)
    progress = serializers.IntegerField(required=False, min_value=0, max_value=100)


class MilestoneSerializer(serializers.ModelSerializer):
    dueDate = serializers.DateTimeField(source="due_date", required=False, allow_null=True)

    class Meta:
        model = Milestone
        fields = ["id", "title", "description", "completed", "dueDate"]
        read_only_fields = ["id"]
        extra_kwargs = {"completed": {"required": False}}


class MenteeMessageSerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = MenteeMessage
        fields = ["id", "sender", "message", "createdAt"]
        read_only_fields = ["id", "sender", "createdAt"]

    def validate_message(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("message is required")
        return value


class WeeklySlotSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=64)
    day = serializers.ChoiceField(choices=DAY_NAMES)
    startTime = serializers.RegexField(CLOCK_PATTERN)
    endTime = serializers.RegexField(CLOCK_PATTERN)
    isActive = serializers.BooleanField(default=True)

    def validate(self, attrs):
        if attrs["endTime"] <= attrs["startTime"]:
            raise serializers.ValidationError({"endTime": ["End time must be after start time."]})
        return attrs


class OverrideSlotSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=64)
    date = serializers.DateField()
    startTime = serializers.RegexField(CLOCK_PATTERN, required=False, allow_blank=True)
    endTime = serializers.RegexField(CLOCK_PATTERN, required=False, allow_blank=True)
    isBlocked = serializers.BooleanField(default=False)

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        value["date"] = value["date"].isoformat()
        return value


class PricingSerializer(serializers.Serializer):
    expectedHourlyRate = MoneyField(source="expected_hourly_rate", required=False, allow_null=True)
    expectedHalfHourRate = MoneyField(source="expected_half_hour_rate", required=False, allow_null=True)
    currency = serializers.CharField(max_length=8, default="INR")


class MentorProfileSerializer(serializers.ModelSerializer):
    currentRole = serializers.CharField(source="current_role", max_length=255, required=False, allow_blank=True)
    linkedinUrl = serializers.URLField(source="linkedin_url", max_length=500, required=False, allow_blank=True)
    resumeUrl = serializers.URLField(source="resume_url", max_length=500, required=False, allow_blank=True)
    totalExperienceYears = serializers.IntegerField(
        source="total_experience_years", required=False, allow_null=True, min_value=0
    )
    educationDegree = serializers.CharField(source="education_degree", required=False, allow_blank=True)
    educationCollege = serializers.CharField(source="education_college", required=False, allow_blank=True)
    specializationTags = serializers.ListField(
        source="specialization_tags", child=serializers.CharField(max_length=100), required=False
    )
    pricing = PricingSerializer(source="*", required=False)
    weeklyAvailability = serializers.ListField(
        source="weekly_availability", child=WeeklySlotSerializer(), required=False
    )
    overrideAvailability = serializers.ListField(
        source="override_availability", child=OverrideSlotSerializer(), required=False
    )
    isOnboarded = serializers.BooleanField(source="is_onboarded", read_only=True)
    onboardedAt = serializers.DateTimeField(source="onboarded_at", read_only=True)
    mentoringFocus = serializers.CharField(source="mentoring_focus", required=False, allow_blank=True)
    idealMentee = serializers.CharField(source="ideal_mentee", required=False, allow_blank=True)
    minNoticeHours = serializers.IntegerField(source="min_notice_hours", required=False, allow_null=True, min_value=0)
    maxSessionsPerWeek = serializers.IntegerField(
        source="max_sessions_per_week", required=False, allow_null=True, min_value=0
    )
    preSessionNotesRequired = serializers.BooleanField(source="pre_session_notes_required", required=False)
    allowRecording = serializers.BooleanField(source="allow_recording", required=False)
    isVerified = serializers.BooleanField(source="is_verified", required=False)
    isOnline = serializers.BooleanField(source="is_online", required=False)
    avatarUrl = serializers.URLField(source="avatar_url", max_length=500, required=False, allow_blank=True)

    class Meta:
        model = Mentor
        fields = [
            "id",
            "name",
            "currentRole",
            "company",
            "linkedinUrl",
            "resumeUrl",
            "totalExperienceYears",
            "educationDegree",
            "educationCollege",
            "specializationTags",
            "pricing",
            "timezone",
            "weeklyAvailability",
            "overrideAvailability",
            "isOnboarded",
            "onboardedAt",
            "bio",
            "location",
            "mentoringFocus",
            "idealMentee",
            "languages",
            "minNoticeHours",
            "maxSessionsPerWeek",
            "preSessionNotesRequired",
            "allowRecording",
            "isVerified",
            "isOnline",
            "avatarUrl",
        ]
        read_only_fields = ["id"]
        extra_kwargs = {
            "company": {"required": False},
            "timezone": {"required": False},
            "bio": {"required": False},
            "location": {"required": False},
            "languages": {"required": False},
        }

    def validate_timezone(self, value):
        if value and value not in available_timezones():
            raise serializers.ValidationError("Unknown timezone.")
        return value


class StudentProfileSerializer(serializers.ModelSerializer):
    fullName = serializers.CharField(source="full_name", max_length=255, required=False, allow_blank=True)
    linkedinUrl = serializers.URLField(source="linkedin_url", max_length=500, required=False, allow_blank=True)
    resumeFile = serializers.CharField(source="resume_file", max_length=500, required=False, allow_blank=True)
    educations = serializers.ListField(child=serializers.DictField(), required=False)
    experiences = serializers.ListField(child=serializers.DictField(), required=False)
    projects = serializers.ListField(child=serializers.DictField(), required=False)
    links = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False)
    skills = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    location = serializers.DictField(required=False)
    availability = serializers.DictField(required=False)
    preferences = serializers.DictField(required=False)

    class Meta:
        model = Student
        fields = [
            "id",
            "fullName",
            "email",
            "phone",
            "linkedinUrl",
            "resumeFile",
            "educations",
            "experiences",
            "projects",
            "awards",
            "links",
            "skills",
            "location",
            "availability",
            "preferences",
        ]
        read_only_fields = ["id"]
        extra_kwargs = {
            "email": {"required": False},
            "phone": {"required": False},
            "awards": {"required": False},
        }


class TimelineItemSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True)
    type = serializers.ChoiceField(choices=TIMELINE_TYPES)
    title = serializers.CharField(max_length=255)
    subtitle = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")
    startDate = serializers.CharField(max_length=32, required=False, allow_blank=True, allow_null=True, default=None)
    endDate = serializers.CharField(max_length=32, required=False, allow_blank=True, allow_null=True, default=None)
    isCurrent = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        for key in ("startDate", "endDate"):
            attrs[key] = attrs.get(key) or None
        return attrs


class StudentProfileUpdateSerializer(StudentProfileSerializer):
    timelineItems = TimelineItemSerializer(many=True, required=False, write_only=True)

    class Meta(StudentProfileSerializer.Meta):
        fields = StudentProfileSerializer.Meta.fields + ["timelineItems"]

    def update(self, instance, validated_data):
        timeline = validated_data.pop("timelineItems", None)
        if timeline is not None:
            validated_data.update(timeline_to_profile(timeline))
        return super().update(instance, validated_data)


class FounderProfileSerializer(serializers.ModelSerializer):
    linkedinUrl = serializers.URLField(source="linkedin_url", max_length=500, required=False, allow_blank=True)
    companyName = serializers.CharField(source="company_name", max_length=255, required=False, allow_blank=True)
    ideaDescription = serializers.CharField(source="idea_description", required=False, allow_blank=True)
    needs = serializers.ListField(child=serializers.CharField(max_length=100), required=False)

    class Meta:
        model = Founder
        fields = [
            "id",
            "name",
            "email",
            "linkedinUrl",
            "companyName",
            "headline",
            "ideaDescription",
            "stage",
            "needs",
            "website",
            "location",
        ]
        read_only_fields = ["id"]
        extra_kwargs = {
            "name": {"required": False},
            "email": {"required": False},
            "headline": {"required": False},
            "stage": {"required": False},
            "website": {"required": False},
            "location": {"required": False},
        }
