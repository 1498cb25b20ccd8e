from django.contrib import admin, messages
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.utils import timezone

from .mentorships import ensure_mentorships_from_sessions
from .models import (
    Founder,
    MenteeMessage,
    MenteePlan,
    Mentor,
    Mentorship,
    Milestone,
    Session,
    Student,
    UserProfile,
)

User = get_user_model()


class UserProfileInline(admin.StackedInline):
    model = UserProfile
    can_delete = False
    extra = 0
    max_num = 1


class AppUserAdmin(DjangoUserAdmin):
    inlines = (UserProfileInline,)
    list_display = DjangoUserAdmin.list_display + ('external_id', 'profile_role')

    @admin.display(description='External id')
    def external_id(self, obj):
        return getattr(getattr(obj, 'userprofile', None), 'external_id', '-')

    @admin.display(description='Role')
    def profile_role(self, obj):
        return getattr(getattr(obj, 'userprofile', None), 'role', '-')


try:
    admin.site.unregister(User)
except admin.sites.NotRegistered:
    pass
admin.site.register(User, AppUserAdmin)


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'external_id', 'display_name', 'role', 'created_at')
    list_filter = ('role',)
    search_fields = ('external_id', 'display_name', 'user__username', 'user__email')


@admin.register(Mentor)
class MentorAdmin(admin.ModelAdmin):
    list_display = (
        'name',
        'current_role',
        'company',
        'expected_hourly_rate',
        'is_onboarded',
        'is_verified',
        'created_at',
    )
    list_filter = ('is_onboarded', 'is_verified', 'is_online')
    search_fields = ('name', 'company', 'user__email', 'user__userprofile__external_id')
    readonly_fields = ('created_at', 'updated_at', 'onboarded_at')
    actions = ('mark_verified', 'backfill_mentorships')

    @admin.action(description='Mark selected mentors as verified')
    def mark_verified(self, request, queryset):
        updated = queryset.update(is_verified=True, updated_at=timezone.now())
        self.message_user(request, f'{updated} mentor(s) verified.', level=messages.SUCCESS)

    @admin.action(description='Backfill mentorships from sessions')
    def backfill_mentorships(self, request, queryset):
        total = 0
        for mentor in queryset.select_related('user__userprofile'):
            if mentor.external_id:
                total += len(ensure_mentorships_from_sessions(mentor.external_id))
        self.message_user(request, f'{total} mentorship(s) reconciled.', level=messages.SUCCESS)


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ('full_name', 'email', 'phone', 'created_at')
    search_fields = ('full_name', 'email', 'user__userprofile__external_id')


@admin.register(Founder)
class FounderAdmin(admin.ModelAdmin):
    list_display = ('name', 'company_name', 'stage', 'created_at')
    list_filter = ('stage',)
    search_fields = ('name', 'company_name', 'email')


@admin.register(Session)
class SessionAdmin(admin.ModelAdmin):
    list_display = (
        'id',
        'title',
        'mentor_id',
        'student_name',
        'start_time',
        'status',
        'payment_status',
        'booking_type',
        'amount',
    )
    list_filter = ('status', 'payment_status', 'booking_type')
    search_fields = ('title', 'mentor_id', 'student_id', 'student_email', 'student_name', 'order_id')
    readonly_fields = ('duration_minutes', 'payment_signature', 'created_at', 'updated_at')
    date_hierarchy = 'start_time'


@admin.register(Mentorship)
class MentorshipAdmin(admin.ModelAdmin):
    list_display = ('id', 'mentor_id', 'mentee_name', 'mentee_email', 'mentee_external_id', 'status', 'updated_at')
    list_filter = ('status',)
    search_fields = ('mentor_id', 'mentee_name', 'mentee_email', 'mentee_external_id')


class MilestoneInline(admin.TabularInline):
    model = Milestone
    extra = 0


@admin.register(MenteePlan)
class MenteePlanAdmin(admin.ModelAdmin):
    list_display = ('id', 'mentor_id', 'mentorship', 'session', 'progress', 'updated_at')
    search_fields = ('mentor_id', 'mentorship__mentee_name', 'mentorship__mentee_email')
    inlines = (MilestoneInline,)


@admin.register(MenteeMessage)
class MenteeMessageAdmin(admin.ModelAdmin):
    list_display = ('id', 'mentor_id', 'mentorship', 'session', 'sender', 'created_at')
    list_filter = ('sender',)
    search_fields = ('mentor_id', 'message')
