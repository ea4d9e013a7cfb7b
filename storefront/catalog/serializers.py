"""
Storefront Catalog Serializers

Serializers:
- ProductSerializer: list/detail payload incl. derived discount and the
  caller's own rating
- ProductDetailSerializer: ProductSerializer plus reviews
- ProductWriteSerializer: operator create/update (images handled separately)
- ReviewSerializer, RatingInputSerializer, StockSerializer

Author: CraftHub Development Team
Version: 1.0.0
"""

import json

from rest_framework import serializers

from ..shop.pricing import format_price
from .models import Product, Review


class FlexibleJSONField(serializers.JSONField):
    """JSONField that also accepts JSON-encoded strings (multipart forms)."""

    def to_internal_value(self, data):
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except ValueError:
                self.fail("invalid")
        return super().to_internal_value(data)


class ReviewSerializer(serializers.ModelSerializer):
    class Meta:
        model = Review
        fields = ("id", "author_name", "rating", "comment", "created_at")
        read_only_fields = ("id", "author_name", "created_at")


class ProductSerializer(serializers.ModelSerializer):
    """
    Product payload for the shop pages.

    Expects ``user_ratings`` ({product_id: stars}) in the serializer
    context to fill ``my_rating`` without a query per product.
    """

    cover_image = serializers.CharField(read_only=True)
    discount_percent = serializers.IntegerField(read_only=True)
    price_display = serializers.SerializerMethodField()
    original_price_display = serializers.SerializerMethodField()
    my_rating = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = (
            "id", "name", "description", "price", "price_display",
            "original_price", "original_price_display", "discount_percent",
            "images", "cover_image", "in_stock", "average_rating",
            "ratings_count", "my_rating", "features", "specifications",
            "delivery_estimate", "package_contains", "warranty", "created_at",
        )
        read_only_fields = fields

    def get_price_display(self, obj: Product) -> str:
        return format_price(obj.price)

    def get_original_price_display(self, obj: Product):
        return format_price(obj.original_price) if obj.original_price else None

    def get_my_rating(self, obj: Product):
        return self.context.get("user_ratings", {}).get(obj.pk)


class ProductDetailSerializer(ProductSerializer):
    reviews = ReviewSerializer(many=True, read_only=True)

    class Meta(ProductSerializer.Meta):
        fields = ProductSerializer.Meta.fields + ("reviews",)
        read_only_fields = fields


class ProductWriteSerializer(serializers.ModelSerializer):
    in_stock = serializers.BooleanField(required=False, default=True)
    features = FlexibleJSONField(required=False)
    specifications = FlexibleJSONField(required=False)

    class Meta:
        model = Product
        fields = (
            "name", "description", "price", "original_price", "in_stock",
            "features", "specifications", "delivery_estimate",
            "package_contains", "warranty",
        )

    def validate_price(self, value):
        if value <= 0:
            raise serializers.ValidationError("Price must be greater than zero.")
        return value

    def validate_features(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Features must be a list.")
        return [str(item) for item in value if str(item).strip()]

    def validate_specifications(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Specifications must be an object.")
        return value


class RatingInputSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)


class StockSerializer(serializers.Serializer):
    in_stock = serializers.BooleanField(required=False, allow_null=True, default=None)
