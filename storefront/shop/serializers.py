"""
Storefront Shop Serializers

Author: CraftHub Development Team
Version: 1.0.0
"""

from rest_framework import serializers

from .models import CartItem, Order
from .pricing import format_price


class CartItemSerializer(serializers.ModelSerializer):
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    price_display = serializers.SerializerMethodField()

    class Meta:
        model = CartItem
        fields = ("id", "product", "name", "price", "price_display", "image", "quantity", "line_total", "added_at")
        read_only_fields = fields

    def get_price_display(self, obj: CartItem) -> str:
        return format_price(obj.price)


class CartSerializer(serializers.Serializer):
    items = CartItemSerializer(many=True)
    total_items = serializers.IntegerField()
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_display = serializers.CharField()


class AddToCartSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()


class QuantityChangeSerializer(serializers.Serializer):
    delta = serializers.IntegerField()

    def validate_delta(self, value: int) -> int:
        if value == 0:
            raise serializers.ValidationError("Delta must not be zero.")
        return value


class CheckoutSerializer(serializers.Serializer):
    """
    Checkout request. Shipping fields are checked by the service so that the
    error lists every missing field at once.
    """

    shipping_info = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False, default=dict)
    buy_now_product_id = serializers.IntegerField(required=False, allow_null=True)
    payment_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class OrderSerializer(serializers.ModelSerializer):
    total_display = serializers.SerializerMethodField()
    user_email = serializers.SerializerMethodField()
    user_name = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = (
            "id", "user", "user_email", "user_name", "items", "total", "total_display",
            "shipping_info", "payment_info", "status", "created_at", "updated_at",
        )
        read_only_fields = fields

    def get_total_display(self, obj: Order) -> str:
        return format_price(obj.total)

    def get_user_email(self, obj: Order) -> str:
        return obj.user.email if obj.user else ""

    def get_user_name(self, obj: Order) -> str:
        if obj.user is None:
            return obj.customer_name
        return obj.user.get_full_name() or obj.customer_name or obj.user.username


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.CharField(allow_blank=True)
