"""
Shared fixtures for the storefront test suites.
"""

from decimal import Decimal

from django.conf import settings
from django.contrib.auth.models import User
from rest_framework_simplejwt.tokens import RefreshToken

from storefront.models import Course, CourseVideo, Enrollment, Product

TEST_PASSWORD = "Kr4ft-Hub-Passw0rd!"


def make_user(email="asha@example.com", password=TEST_PASSWORD, **extra) -> User:
    return User.objects.create_user(username=email, email=email, password=password, **extra)


def make_staff(email="operator@example.com") -> User:
    return make_user(email=email, is_staff=True)


def sign_in_client(client, user, session_token=None) -> RefreshToken:
    """Put a valid JWT pair (and optionally a device session token) into the client's cookies."""
    refresh = RefreshToken.for_user(user)
    client.cookies[settings.AUTH_COOKIE_ACCESS] = str(refresh.access_token)
    client.cookies[settings.AUTH_COOKIE_REFRESH] = str(refresh)
    if session_token is not None:
        client.cookies[settings.DEVICE_SESSION_COOKIE] = session_token
    return refresh


def make_product(name="Acrylic Paint Set", price="100.00", **extra) -> Product:
    extra.setdefault("images", ["https://img.example.com/products/paint.jpg"])
    return Product.objects.create(name=name, price=Decimal(price), **extra)


def make_course(title="Resin Art for Beginners", price="1999.00", videos=1) -> Course:
    course = Course.objects.create(title=title, price=Decimal(price))
    for position in range(videos):
        CourseVideo.objects.create(
            course=course,
            title=f"Lesson {position + 1}",
            youtube_url="https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            youtube_id="dQw4w9WgXcQ",
            thumbnail_url="https://img.youtube.com/vi/dQw4w9WgXcQ/hqdefault.jpg",
            order=position,
        )
    return course


def enroll(user, course, status=Enrollment.Status.PAID, payment_id="pi_test_123") -> Enrollment:
    return Enrollment.objects.create(user=user, course=course, status=status, payment_id=payment_id)
