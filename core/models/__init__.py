from .founder import Founder
from .mentor import Mentor
from .mentorship import Mentorship
from .progress import (
    LegacySessionLink,
    MenteeMessage,
    MenteePlan,
    MentorshipLink,
    Milestone,
)
from .session import Session
from .student import Student
from .user_profile import UserProfile

__all__ = [
    'Founder',
    'Mentor',
    'Mentorship',
    'MentorshipLink',
    'LegacySessionLink',
    'MenteePlan',
    'Milestone',
    'MenteeMessage',
    'Session',
    'Student',
    'UserProfile',
]
