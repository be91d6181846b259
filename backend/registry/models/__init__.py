from registry.models.identity import Identity
from registry.models.course import Course
from registry.models.student import Student
from registry.models.user_role import UserRole, AppRole
from registry.models.profile import Profile
from registry.models import triggers

__all__ = ["Identity", "Course", "Student", "UserRole", "AppRole", "Profile", "triggers"]
