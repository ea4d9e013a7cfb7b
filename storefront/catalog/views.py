"""
Storefront Catalog Views

Endpoints:
- GET  /api/products/                 list (``?search=``)
- POST /api/products/                 create (staff, multipart with images)
- GET  /api/products/<id>/            detail with reviews
- PATCH/DELETE /api/products/<id>/    update / delete (staff)
- POST /api/products/<id>/stock/      toggle or set availability (staff)
- POST /api/products/<id>/rate/       write-once rating
- GET/POST /api/products/<id>/reviews/

Author: CraftHub Development Team
Version: 1.0.0
"""

import logging

from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from core.exceptions import CraftHubException
from ..permissions import IsAdminOrReadOnly
from .models import Product, Rating
from .serializers import (
    ProductDetailSerializer,
    ProductSerializer,
    ProductWriteSerializer,
    RatingInputSerializer,
    ReviewSerializer,
    StockSerializer,
)
from .services import (
    add_review,
    search_products,
    submit_rating,
    upload_product_images,
)

logger = logging.getLogger(__name__)


class UserRatingsMixin:
    """Puts the caller's own ratings into the serializer context."""

    def get_serializer_context(self):
        context = super().get_serializer_context()
        user = self.request.user
        if user and user.is_authenticated:
            context["user_ratings"] = dict(
                Rating.objects.filter(user=user).values_list("product_id", "rating")
            )
        return context


class ProductListCreateView(UserRatingsMixin, generics.ListCreateAPIView):
    permission_classes = [IsAdminOrReadOnly]
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    serializer_class = ProductSerializer

    def get_queryset(self):
        return search_products(self.request.query_params.get("search"))

    def create(self, request, *args, **kwargs):
        serializer = ProductWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            urls = upload_product_images(request.FILES.getlist("images"))
        except CraftHubException as e:
            return Response(e.to_dict(), status=e.status_code)

        product = serializer.save(images=urls)
        logger.info("Product %s created with %s image(s)", product.pk, len(urls))
        return Response(
            ProductSerializer(product, context=self.get_serializer_context()).data,
            status=status.HTTP_201_CREATED,
        )


class ProductDetailView(UserRatingsMixin, generics.RetrieveUpdateDestroyAPIView):
    queryset = Product.objects.prefetch_related("reviews")
    permission_classes = [IsAdminOrReadOnly]
    parser_classes = [MultiPartParser, FormParser, JSONParser]
    serializer_class = ProductDetailSerializer

    def update(self, request, *args, **kwargs):
        product = self.get_object()
        serializer = ProductWriteSerializer(product, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        files = request.FILES.getlist("images")
        extra = {}
        if files:
            try:
                extra["images"] = upload_product_images(files)
            except CraftHubException as e:
                return Response(e.to_dict(), status=e.status_code)

        product = serializer.save(**extra)
        return Response(ProductDetailSerializer(product, context=self.get_serializer_context()).data)

    def perform_destroy(self, instance):
        logger.info("Deleting product %s (%s)", instance.pk, instance.name)
        super().perform_destroy(instance)


class ProductStockView(APIView):
    """Set ``in_stock`` explicitly, or flip it when no value is sent."""

    permission_classes = [permissions.IsAdminUser]

    def post(self, request, pk):
        product = get_object_or_404(Product, pk=pk)
        serializer = StockSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        value = serializer.validated_data.get("in_stock")
        product.in_stock = (not product.in_stock) if value is None else value
        product.save(update_fields=["in_stock", "updated_at"])
        return Response({"id": product.pk, "in_stock": product.in_stock})


class ProductRateView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        product = get_object_or_404(Product, pk=pk)
        serializer = RatingInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        rating, created = submit_rating(product, request.user, serializer.validated_data["rating"])
        return Response(
            {
                "created": created,
                "rating": rating.rating,
                "average_rating": product.average_rating,
                "ratings_count": product.ratings_count,
            },
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class ProductReviewListCreateView(APIView):
    def get_permissions(self):
        if self.request.method == "POST":
            return [permissions.IsAuthenticated()]
        return [permissions.AllowAny()]

    def get(self, request, pk):
        product = get_object_or_404(Product, pk=pk)
        return Response(ReviewSerializer(product.reviews.all(), many=True).data)

    def post(self, request, pk):
        product = get_object_or_404(Product, pk=pk)
        try:
            review = add_review(product, request.user, request.data.get("rating"), request.data.get("comment"))
        except CraftHubException as e:
            return Response(e.to_dict(), status=e.status_code)
        return Response(ReviewSerializer(review).data, status=status.HTTP_201_CREATED)
