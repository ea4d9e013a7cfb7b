"""
Storefront Django Admin Configuration

Back office for the operator, rendered through jazzmin.

Sections:
- User Management: users with their profile and active session token
- Catalog: products, ratings and reviews
- Shop: cart lines and orders with status editing
- Courses: courses with inline YouTube videos, enrollments

Author: CraftHub Development Team
Version: 1.0.0
"""

from typing import Optional

from django import forms
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import User
from django.db.models import Count, QuerySet
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _

from .courses.serializers import INVALID_VIDEO_URL_MESSAGE
from .courses.youtube import extract_youtube_id, thumbnail_url
from .models import (
    CartItem,
    Course,
    CourseVideo,
    Enrollment,
    Order,
    Product,
    Profile,
    Rating,
    Review,
)
from .shop.pricing import format_price

# --- User Management Administration ---


class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False
    verbose_name_plural = "Profile Information"
    fk_name = "user"
    fields = ("phone", "active_session_token", "session_rotated_at")
    readonly_fields = ("active_session_token", "session_rotated_at")

    def get_extra(self, request: HttpRequest, obj: Optional[User] = None, **kwargs) -> int:
        return 0


class UserAdmin(BaseUserAdmin):
    """
    User administration with the storefront profile inline.
    """

    inlines = (ProfileInline,)
    list_display = (
        "username",
        "email",
        "first_name",
        "last_name",
        "is_staff",
        "is_active",
        "get_session_rotated_at",
    )
    list_select_related = ("profile",)
    list_filter = ("is_staff", "is_superuser", "is_active", "date_joined")
    search_fields = ("username", "first_name", "last_name", "email")
    ordering = ("username",)

    @admin.display(description=_("Last Sign-in"))
    def get_session_rotated_at(self, instance: User):
        try:
            return instance.profile.session_rotated_at
        except Profile.DoesNotExist:
            return None


admin.site.unregister(User)
admin.site.register(User, UserAdmin)

# --- Catalog Administration ---


class ReviewInline(admin.TabularInline):
    model = Review
    extra = 0
    fields = ("author_name", "rating", "comment", "created_at")
    readonly_fields = ("created_at",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """
    Product administration. Images are uploaded through the API; here the
    URL list can be reordered or trimmed.
    """

    list_display = ("name", "get_price", "original_price", "in_stock", "average_rating", "ratings_count")
    list_filter = ("in_stock", "created_at")
    list_editable = ("in_stock",)
    search_fields = ("name", "description")
    readonly_fields = ("average_rating", "ratings_count", "created_at", "updated_at")
    inlines = [ReviewInline]

    fieldsets = (
        (_("Basic Information"), {"fields": ("name", "description", "images")}),
        (_("Pricing & Availability"), {"fields": ("price", "original_price", "in_stock")}),
        (
            _("Details"),
            {
                "fields": ("features", "specifications", "delivery_estimate", "package_contains", "warranty"),
                "classes": ("collapse",),
            },
        ),
        (_("Ratings"), {"fields": ("average_rating", "ratings_count")}),
        (_("Timestamps"), {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )

    @admin.display(description=_("Price"), ordering="price")
    def get_price(self, obj: Product) -> str:
        return format_price(obj.price)


@admin.register(Rating)
class RatingAdmin(admin.ModelAdmin):
    list_display = ("product", "user", "rating", "created_at")
    list_filter = ("rating",)
    search_fields = ("product__name", "user__email")
    autocomplete_fields = ("product", "user")
    readonly_fields = ("created_at",)

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).select_related("product", "user")


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("product", "author_name", "rating", "created_at")
    list_filter = ("rating", "created_at")
    search_fields = ("product__name", "author_name", "comment")
    readonly_fields = ("created_at",)


# --- Shop Administration ---


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ("user", "name", "quantity", "price", "added_at")
    search_fields = ("user__email", "name")
    readonly_fields = ("added_at",)


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Order back office: search by id or customer, edit the free-text status.
    """

    list_display = ("id", "get_customer", "get_total", "status", "created_at")
    list_filter = ("status", "created_at")
    list_editable = ("status",)
    search_fields = ("id", "shipping_info__fullName", "shipping_info__email", "user__email")
    readonly_fields = ("items", "total", "payment_info", "created_at", "updated_at")
    date_hierarchy = "created_at"

    @admin.display(description=_("Customer"))
    def get_customer(self, obj: Order) -> str:
        return obj.customer_name or str(obj.user or "")

    @admin.display(description=_("Total"), ordering="total")
    def get_total(self, obj: Order) -> str:
        return format_price(obj.total)


# --- Courses Administration ---


class CourseVideoForm(forms.ModelForm):
    """Derives the video id and thumbnail from the YouTube URL."""

    class Meta:
        model = CourseVideo
        fields = ("title", "youtube_url", "order")

    def clean_youtube_url(self):
        url = (self.cleaned_data.get("youtube_url") or "").strip()
        if not extract_youtube_id(url):
            raise forms.ValidationError(INVALID_VIDEO_URL_MESSAGE)
        return url

    def save(self, commit=True):
        video = super().save(commit=False)
        video.youtube_id = extract_youtube_id(video.youtube_url)
        video.thumbnail_url = thumbnail_url(video.youtube_id)
        if commit:
            video.save()
        return video


class CourseVideoInline(admin.TabularInline):
    model = CourseVideo
    form = CourseVideoForm
    extra = 1
    fields = ("title", "youtube_url", "order")
    ordering = ("order",)


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("title", "get_price", "video_count", "created_at")
    search_fields = ("title", "description")
    readonly_fields = ("created_at", "updated_at")
    inlines = [CourseVideoInline]

    fieldsets = (
        (_("Course Information"), {"fields": ("title", "description", "price", "thumbnail_url")}),
        (_("Timestamps"), {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).annotate(_video_count=Count("videos"))

    @admin.display(description=_("Price"), ordering="price")
    def get_price(self, obj: Course) -> str:
        return format_price(obj.price)

    @admin.display(description=_("Videos"), ordering="_video_count")
    def video_count(self, obj: Course) -> int:
        return obj._video_count


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ("get_key", "user", "course", "status", "payment_id", "created_at")
    list_filter = ("status", "course")
    search_fields = ("user__email", "course__title", "payment_id")
    autocomplete_fields = ("user", "course")
    readonly_fields = ("created_at", "updated_at")

    @admin.display(description=_("Enrollment"))
    def get_key(self, obj: Enrollment) -> str:
        return obj.enrollment_key

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).select_related("user", "course")
