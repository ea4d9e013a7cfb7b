"""
Storefront Catalog Models

Models:
- Product: A craft-supply item with images, stock flag and rating aggregate
- Rating: One write-once star rating per (product, user)
- Review: Free-text customer review shown on the product page

The rating aggregate (``average_rating``, ``ratings_count``) is stored on the
product and maintained by ``catalog.services.submit_rating``.

Author: CraftHub Development Team
Version: 1.0.0
"""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

__all__ = ["Product", "Rating", "Review"]

DEFAULT_DELIVERY_ESTIMATE = "5-9 business days"
DEFAULT_PACKAGE_CONTAINS = "1 x Product, User Manual"
DEFAULT_WARRANTY = "1 Year Manufacturer Warranty"


class Product(models.Model):
    """
    Craft-supply product.

    Attributes:
        name, description: Display texts
        price: Current selling price
        original_price: Optional list price; a discount is shown when higher
        images: Ordered list of image URLs (first one is the cover)
        in_stock: Availability flag toggled by the operator
        average_rating, ratings_count: Rating aggregate
        features, specifications: Detail-page content
    """

    name = models.CharField(_("Name"), max_length=200)
    description = models.TextField(_("Description"), blank=True, default="")
    price = models.DecimalField(_("Price"), max_digits=10, decimal_places=2)
    original_price = models.DecimalField(
        _("Original Price"), max_digits=10, decimal_places=2, null=True, blank=True
    )
    images = models.JSONField(_("Images"), default=list, blank=True)
    in_stock = models.BooleanField(_("In Stock"), default=True)

    average_rating = models.FloatField(_("Average Rating"), default=0.0)
    ratings_count = models.PositiveIntegerField(_("Ratings Count"), default=0)

    features = models.JSONField(_("Features"), default=list, blank=True)
    specifications = models.JSONField(_("Specifications"), default=dict, blank=True)
    delivery_estimate = models.CharField(
        _("Delivery Estimate"), max_length=100, default=DEFAULT_DELIVERY_ESTIMATE
    )
    package_contains = models.CharField(
        _("Package Contains"), max_length=200, default=DEFAULT_PACKAGE_CONTAINS
    )
    warranty = models.CharField(_("Warranty"), max_length=100, default=DEFAULT_WARRANTY)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Product")
        verbose_name_plural = _("Products")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.name

    @property
    def cover_image(self) -> str:
        return self.images[0] if self.images else ""

    @property
    def discount_percent(self) -> int:
        """Rounded discount against ``original_price`` (0 when none)."""
        if not self.original_price or self.original_price <= self.price:
            return 0
        ratio = (Decimal(self.original_price) - Decimal(self.price)) / Decimal(self.original_price)
        return int(round(ratio * 100))


class Rating(models.Model):
    """
    A user's star rating for a product. Written once, never updated.
    """

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="ratings")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="product_ratings"
    )
    rating = models.PositiveSmallIntegerField(
        _("Rating"), validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Rating")
        verbose_name_plural = _("Ratings")
        constraints = [
            models.UniqueConstraint(fields=["product", "user"], name="unique_rating_per_user"),
        ]

    def __str__(self) -> str:
        return f"{self.user} rated {self.product} {self.rating}/5"


class Review(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="reviews")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="product_reviews",
    )
    author_name = models.CharField(_("Author Name"), max_length=150, blank=True, default="")
    rating = models.PositiveSmallIntegerField(
        _("Rating"), validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    comment = models.TextField(_("Comment"))
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Review")
        verbose_name_plural = _("Reviews")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Review of {self.product} by {self.author_name or self.user}"
