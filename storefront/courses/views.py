"""
Storefront Course Views

Endpoints:
- GET    /api/courses/                               catalog with ``is_enrolled``
- POST   /api/courses/                               create (staff)
- GET    /api/courses/<id>/                          detail
- PATCH/DELETE /api/courses/<id>/                    update / delete (staff)
- POST   /api/courses/<id>/enroll/                   start payment
- POST   /api/courses/<id>/enroll/confirm/           payment widget success handler
- GET    /api/courses/<id>/playback/                 videos + overlay (paid enrollment)
- POST   /api/courses/<id>/playback/session-check/   single-active-session check
- GET    /api/courses/mine/                          courses the caller paid for

Author: CraftHub Development Team
Version: 1.0.0
"""

import logging

from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import CraftHubException
from ..permissions import IsAdminOrReadOnly
from ..users.context import AuthContext
from ..users.cookies import clear_auth_cookies, device_session_token
from ..users.models import read_active_session_token
from .access import enrolled_course_ids, require_enrollment
from .enrollment import confirm_enrollment, start_enrollment
from .models import Course
from .playback import TRIGGERS, PlaybackSession
from .protection import overlay_config
from .serializers import CourseSerializer, CourseWriteSerializer, PlaybackVideoSerializer

logger = logging.getLogger(__name__)


class EnrolledIdsMixin:
    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["enrolled_ids"] = enrolled_course_ids(self.request.user)
        return context


class CourseListCreateView(EnrolledIdsMixin, generics.ListCreateAPIView):
    queryset = Course.objects.prefetch_related("videos")
    permission_classes = [IsAdminOrReadOnly]
    pagination_class = None

    def get_serializer_class(self):
        if self.request.method == "POST":
            return CourseWriteSerializer
        return CourseSerializer

    def create(self, request, *args, **kwargs):
        serializer = CourseWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        course = serializer.save()
        logger.info("Course %s created with %s video(s)", course.pk, course.videos.count())
        return Response(
            CourseSerializer(course, context=self.get_serializer_context()).data,
            status=status.HTTP_201_CREATED,
        )


class CourseDetailView(EnrolledIdsMixin, generics.RetrieveUpdateDestroyAPIView):
    queryset = Course.objects.prefetch_related("videos")
    permission_classes = [IsAdminOrReadOnly]
    serializer_class = CourseSerializer

    def update(self, request, *args, **kwargs):
        course = self.get_object()
        serializer = CourseWriteSerializer(course, data=request.data, partial=kwargs.get("partial", False))
        serializer.is_valid(raise_exception=True)
        course = self.get_queryset().get(pk=serializer.save().pk)
        return Response(CourseSerializer(course, context=self.get_serializer_context()).data)

    def perform_destroy(self, instance):
        logger.info("Deleting course %s (%s)", instance.pk, instance.title)
        super().perform_destroy(instance)


class MyCoursesView(EnrolledIdsMixin, generics.ListAPIView):
    serializer_class = CourseSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        return Course.objects.filter(pk__in=enrolled_course_ids(self.request.user)).prefetch_related("videos")


class EnrollView(APIView):
    """Returns the payment widget parameters for buying a course."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        course = get_object_or_404(Course, pk=pk)
        try:
            params = start_enrollment(AuthContext.from_request(request), course)
        except CraftHubException as e:
            return Response(e.to_dict(), status=e.status_code)
        return Response(params, status=status.HTTP_200_OK)


class EnrollConfirmView(APIView):
    """
    Success handler of the payment widget.

    Body: {"payment_id": "pi_..."}
    """

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        course = get_object_or_404(Course, pk=pk)
        payment_id = request.data.get("payment_id")
        if not payment_id:
            return Response({"detail": "payment_id is required."}, status=status.HTTP_400_BAD_REQUEST)
        try:
            enrollment, operator_link = confirm_enrollment(
                AuthContext.from_request(request), course, payment_id
            )
        except CraftHubException as e:
            return Response(e.to_dict(), status=e.status_code)
        return Response({
            "enrollment": enrollment.enrollment_key,
            "status": enrollment.status,
            "operator_link": operator_link,
        })


class CoursePlaybackView(APIView):
    """
    Videos with embed URLs plus the overlay configuration. Requires a paid
    enrollment; the device session token is not checked here.
    """

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, pk):
        course = get_object_or_404(Course, pk=pk)
        require_enrollment(request.user, course)
        return Response({
            "course": {"id": course.pk, "title": course.title, "description": course.description},
            "videos": PlaybackVideoSerializer(course.videos.all(), many=True).data,
            "overlay": overlay_config(request.user),
        })


class PlaybackSessionCheckView(APIView):
    """
    Runs one single-active-session check for the playback page.

    Body: {"trigger": "mount" | "focus" | "visibility", "visible": true}
    The device's token comes from the ``X-Device-Session`` header or the
    ``device_session_token`` cookie.
    """

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        course = get_object_or_404(Course, pk=pk)
        require_enrollment(request.user, course)

        trigger = request.data.get("trigger", "mount")
        if trigger not in TRIGGERS:
            return Response(
                {"detail": f"trigger must be one of {', '.join(TRIGGERS)}."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        visible = request.data.get("visible", True)
        if isinstance(visible, str):
            visible = visible.lower() not in ("false", "0", "hidden")

        outcome = {"message": None, "redirect": None}
        session = PlaybackSession(
            auth=AuthContext.from_request(request),
            read_profile_token=read_active_session_token,
            local_token=device_session_token(request),
            notify=lambda message: outcome.update(message=message),
            navigate=lambda path: outcome.update(redirect=path),
            visible=bool(visible),
        )
        superseded = session.dispatch(trigger, visible=bool(visible))

        response = Response({"superseded": superseded, **outcome})
        if superseded:
            clear_auth_cookies(response)
        return response
