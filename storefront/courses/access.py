"""
Course access rules.

Access to course playback is granted if and only if the user has an
enrollment for the course with status ``paid``. Pending and refunded
enrollments, staff flags and anything else do not count.
"""

from typing import Set

from rest_framework.exceptions import PermissionDenied

from .models import Course, Enrollment

NOT_ENROLLED_MESSAGE = "You need to purchase this course to watch it."


def is_enrolled(user, course: Course) -> bool:
    if user is None or not user.is_authenticated:
        return False
    return Enrollment.objects.filter(
        user=user, course=course, status=Enrollment.Status.PAID
    ).exists()


def enrolled_course_ids(user) -> Set[int]:
    if user is None or not user.is_authenticated:
        return set()
    return set(
        Enrollment.objects.filter(user=user, status=Enrollment.Status.PAID).values_list(
            "course_id", flat=True
        )
    )


def require_enrollment(user, course: Course) -> None:
    """Raise ``PermissionDenied`` (403) unless ``user`` paid for ``course``."""
    if not is_enrolled(user, course):
        raise PermissionDenied(NOT_ENROLLED_MESSAGE)
