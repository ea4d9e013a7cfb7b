"""
Storefront Course Models

Models:
- Course: a paid video course
- CourseVideo: one YouTube video of a course, in display order
- Enrollment: proof that a user bought a course

Only an enrollment with status ``paid`` grants access to playback.

Author: CraftHub Development Team
Version: 1.0.0
"""

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

__all__ = ["Course", "CourseVideo", "Enrollment"]


class Course(models.Model):
    title = models.CharField(_("Title"), max_length=200)
    description = models.TextField(_("Description"), blank=True, default="")
    price = models.DecimalField(_("Price"), max_digits=10, decimal_places=2)
    thumbnail_url = models.URLField(_("Thumbnail URL"), max_length=500, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Course")
        verbose_name_plural = _("Courses")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.title


class CourseVideo(models.Model):
    """
    A course video. ``youtube_id`` and ``thumbnail_url`` are derived from
    ``youtube_url`` when the course is saved through the API.
    """

    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="videos")
    title = models.CharField(_("Title"), max_length=200)
    youtube_url = models.URLField(_("YouTube URL"), max_length=500)
    youtube_id = models.CharField(_("YouTube ID"), max_length=11)
    thumbnail_url = models.URLField(_("Thumbnail URL"), max_length=500, blank=True, default="")
    order = models.PositiveIntegerField(_("Order"), default=0)

    class Meta:
        verbose_name = _("Course Video")
        verbose_name_plural = _("Course Videos")
        ordering = ["course", "order", "id"]

    def __str__(self) -> str:
        return f"{self.course.title}: {self.title}"


class Enrollment(models.Model):
    """
    Enrollment of a user in a course, keyed by ``"{user_id}_{course_id}"``.
    """

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending")
        PAID = "paid", _("Paid")
        REFUNDED = "refunded", _("Refunded")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="enrollments"
    )
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="enrollments")
    status = models.CharField(_("Status"), max_length=20, choices=Status.choices, default=Status.PENDING)
    payment_id = models.CharField(_("Payment ID"), max_length=255, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Enrollment")
        verbose_name_plural = _("Enrollments")
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["user", "course"], name="unique_enrollment_per_course"),
        ]

    def __str__(self) -> str:
        return f"{self.enrollment_key} ({self.status})"

    @property
    def enrollment_key(self) -> str:
        return f"{self.user_id}_{self.course_id}"

    @property
    def is_paid(self) -> bool:
        return self.status == self.Status.PAID
