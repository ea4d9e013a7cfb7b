"""
Storefront Catalog Services

Business logic behind the catalog endpoints:

- search_products: case-insensitive search over name and description
- submit_rating: write-once rating with read-modify-write aggregate update
- add_review: free-text review
- upload_product_images: count/type validation, then one-by-one uploads

Author: CraftHub Development Team
Version: 1.0.0
"""

import logging
from typing import List, Optional, Sequence, Tuple

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Q, QuerySet

from core.exceptions import ValidationFailed
from core.storage import ImageHostClient
from .models import Product, Rating, Review

logger = logging.getLogger(__name__)


def search_products(term: Optional[str] = None) -> QuerySet:
    queryset = Product.objects.all()
    term = (term or "").strip()
    if term:
        queryset = queryset.filter(Q(name__icontains=term) | Q(description__icontains=term))
    return queryset


def _validate_star_value(value) -> int:
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValidationFailed("Rating must be a whole number between 1 and 5.")
    if not 1 <= value <= 5:
        raise ValidationFailed("Rating must be a whole number between 1 and 5.")
    return value


def submit_rating(product: Product, user, value) -> Tuple[Rating, bool]:
    """
    Record ``user``'s rating for ``product`` once.

    A second attempt is a no-op: the stored rating and the aggregate stay as
    they are. The aggregate is recomputed from the product's current values
    as ``(avg * count + value) / (count + 1)``; concurrent raters can lose an
    update.

    Returns:
        Tuple of (rating, created)

    Raises:
        ValidationFailed: Value outside 1..5
    """
    value = _validate_star_value(value)

    existing = Rating.objects.filter(product=product, user=user).first()
    if existing is not None:
        logger.info("User %s already rated product %s; ignoring", user.pk, product.pk)
        return existing, False

    try:
        with transaction.atomic():
            rating = Rating.objects.create(product=product, user=user, rating=value)
            current = Product.objects.values("average_rating", "ratings_count").get(pk=product.pk)
            count = current["ratings_count"]
            new_average = (current["average_rating"] * count + value) / (count + 1)
            Product.objects.filter(pk=product.pk).update(
                average_rating=new_average, ratings_count=count + 1
            )
    except IntegrityError:
        logger.info("Concurrent rating for product %s by user %s; keeping the first", product.pk, user.pk)
        return Rating.objects.get(product=product, user=user), False

    product.refresh_from_db(fields=["average_rating", "ratings_count"])
    logger.info("User %s rated product %s with %s", user.pk, product.pk, value)
    return rating, True


def add_review(product: Product, user, rating, comment: str) -> Review:
    value = _validate_star_value(rating)
    comment = (comment or "").strip()
    if not comment:
        raise ValidationFailed("Please write a comment.")
    return Review.objects.create(
        product=product,
        user=user,
        author_name=user.get_full_name() or user.email or user.username,
        rating=value,
        comment=comment,
    )


def validate_image_count(files: Sequence, required: bool = True) -> None:
    maximum = settings.MAX_PRODUCT_IMAGES
    count = len(files)
    if count > maximum or (required and count < 1):
        raise ValidationFailed(
            f"Please select between 1 and {maximum} images.",
            details={"count": count, "max": maximum},
        )


def upload_product_images(files: Sequence, client: Optional[ImageHostClient] = None) -> List[str]:
    """
    Upload product images one at a time.

    Every file is validated before the first upload starts, so a bad count,
    size or type never results in a partial upload.

    Returns:
        Public URLs in upload order
    """
    validate_image_count(files)
    client = client or ImageHostClient()
    for upload in files:
        client.validate(upload)
    return [client.upload(upload) for upload in files]
