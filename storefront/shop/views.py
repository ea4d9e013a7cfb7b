"""
Storefront Shop Views

Endpoints:
- GET    /api/cart/                      cart lines and totals
- POST   /api/cart/items/                add a product
- PATCH  /api/cart/items/<id>/           change quantity by delta
- DELETE /api/cart/items/<id>/           remove a line
- POST   /api/checkout/payment-intent/   payment widget parameters for the checkout
- POST   /api/checkout/                  place the order
- GET    /api/orders/mine/               caller's orders
- GET    /api/admin/orders/              search/sort all orders (staff)
- POST   /api/admin/orders/<id>/status/  set status (staff)
- DELETE /api/admin/orders/<id>/         delete order (staff)

Author: CraftHub Development Team
Version: 1.0.0
"""

import logging

from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import CraftHubException
from core.payments.gateway import publishable_key
from ..catalog.models import Product
from ..users.context import AuthContext
from .models import CartItem, Order
from .serializers import (
    AddToCartSerializer,
    CartItemSerializer,
    CartSerializer,
    CheckoutSerializer,
    OrderSerializer,
    OrderStatusSerializer,
    QuantityChangeSerializer,
)
from .services import (
    add_to_cart,
    cart_summary,
    change_quantity,
    create_order_payment,
    place_order,
    remove_line,
    search_orders,
    set_order_status,
)

logger = logging.getLogger(__name__)


# --- Cart ---


class CartView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(CartSerializer(cart_summary(request.user)).data)


class CartItemAddView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = AddToCartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        product = get_object_or_404(Product, pk=serializer.validated_data["product_id"])
        try:
            item = add_to_cart(request.user, product)
        except CraftHubException as e:
            return Response(e.to_dict(), status=e.status_code)
        return Response(CartItemSerializer(item).data, status=status.HTTP_201_CREATED)


class CartItemDetailView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def patch(self, request, pk):
        serializer = QuantityChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            item = change_quantity(request.user, pk, serializer.validated_data["delta"])
        except CartItem.DoesNotExist:
            return Response({"detail": "Cart item not found."}, status=status.HTTP_404_NOT_FOUND)
        if item is None:
            return Response({"removed": True, "id": pk})
        return Response({"removed": False, **CartItemSerializer(item).data})

    def delete(self, request, pk):
        if not remove_line(request.user, pk):
            return Response({"detail": "Cart item not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response(status=status.HTTP_204_NO_CONTENT)


# --- Checkout ---


class CheckoutPaymentIntentView(APIView):
    """Starts the payment widget for the current cart (or buy-now product)."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        try:
            intent, amount_minor = create_order_payment(
                AuthContext.from_request(request),
                buy_now_product_id=request.data.get("buy_now_product_id"),
            )
        except CraftHubException as e:
            return Response(e.to_dict(), status=e.status_code)
        return Response({
            "payment_id": intent["id"],
            "client_secret": intent["client_secret"],
            "amount": amount_minor,
            "currency": intent.get("currency"),
            "publishable_key": publishable_key(),
        })


class CheckoutView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            order, operator_link = place_order(
                AuthContext.from_request(request),
                data.get("shipping_info") or {},
                buy_now_product_id=data.get("buy_now_product_id"),
                payment_id=data.get("payment_id") or None,
            )
        except CraftHubException as e:
            return Response(e.to_dict(), status=e.status_code)

        return Response(
            {"order": OrderSerializer(order).data, "operator_link": operator_link},
            status=status.HTTP_201_CREATED,
        )


class MyOrdersView(generics.ListAPIView):
    serializer_class = OrderSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        return Order.objects.filter(user=self.request.user).select_related("user")


# --- Order administration ---


class AdminOrderListView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def get(self, request):
        params = request.query_params
        orders = search_orders(
            params.get("search", ""),
            sort=params.get("sort", "created_at"),
            direction=params.get("direction", "desc"),
        )
        return Response(OrderSerializer(orders, many=True).data)


class AdminOrderStatusView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def post(self, request, pk):
        order = get_object_or_404(Order, pk=pk)
        serializer = OrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            set_order_status(order, serializer.validated_data["status"])
        except CraftHubException as e:
            return Response(e.to_dict(), status=e.status_code)
        return Response(OrderSerializer(order).data)


class AdminOrderDeleteView(generics.DestroyAPIView):
    queryset = Order.objects.all()
    permission_classes = [permissions.IsAdminUser]

    def perform_destroy(self, instance):
        logger.info("Deleting order %s", instance.pk)
        super().perform_destroy(instance)
