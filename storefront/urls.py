"""
Storefront URL Configuration

URL Structure:
- /api/auth/: sign-up, sign-in (email and social), token refresh, sign-out,
  password reset and current user
- /api/products/: catalog, ratings and reviews
- /api/cart/, /api/checkout/, /api/orders/: shopping flow
- /api/admin/orders/: order back office
- /api/courses/: course catalog, enrollment and playback

Author: CraftHub Development Team
Version: 1.0.0
"""

from typing import List

from django.urls import URLPattern, include, path

from .catalog import views as catalog_views
from .courses import views as course_views
from .shop import views as shop_views
from .users import views as user_views

app_name = "storefront"

# --- Authentication and Account ---

auth_urlpatterns: List[URLPattern] = [
    path("sign-up/", user_views.SignUpView.as_view(), name="sign-up"),
    path("sign-in/", user_views.SignInView.as_view(), name="sign-in"),
    path("social/", user_views.SocialSignInView.as_view(), name="social-sign-in"),
    path("token/refresh/", user_views.CookieTokenRefreshView.as_view(), name="token-refresh"),
    path("sign-out/", user_views.SignOutView.as_view(), name="sign-out"),
    path("password-reset/", user_views.PasswordResetRequestView.as_view(), name="password-reset"),
    path(
        "password-reset/confirm/",
        user_views.PasswordResetConfirmView.as_view(),
        name="password-reset-confirm",
    ),
    path("me/", user_views.CurrentUserView.as_view(), name="me"),
]

# --- Catalog ---

products_urlpatterns: List[URLPattern] = [
    path("", catalog_views.ProductListCreateView.as_view(), name="product-list"),
    path("<int:pk>/", catalog_views.ProductDetailView.as_view(), name="product-detail"),
    path("<int:pk>/stock/", catalog_views.ProductStockView.as_view(), name="product-stock"),
    path("<int:pk>/rate/", catalog_views.ProductRateView.as_view(), name="product-rate"),
    path("<int:pk>/reviews/", catalog_views.ProductReviewListCreateView.as_view(), name="product-reviews"),
]

# --- Cart, Checkout and Orders ---

cart_urlpatterns: List[URLPattern] = [
    path("", shop_views.CartView.as_view(), name="cart"),
    path("items/", shop_views.CartItemAddView.as_view(), name="cart-item-add"),
    path("items/<int:pk>/", shop_views.CartItemDetailView.as_view(), name="cart-item-detail"),
]

checkout_urlpatterns: List[URLPattern] = [
    path("", shop_views.CheckoutView.as_view(), name="checkout"),
    path("payment-intent/", shop_views.CheckoutPaymentIntentView.as_view(), name="checkout-payment-intent"),
]

orders_urlpatterns: List[URLPattern] = [
    path("mine/", shop_views.MyOrdersView.as_view(), name="my-orders"),
]

admin_urlpatterns: List[URLPattern] = [
    path("orders/", shop_views.AdminOrderListView.as_view(), name="admin-order-list"),
    path("orders/<int:pk>/", shop_views.AdminOrderDeleteView.as_view(), name="admin-order-delete"),
    path("orders/<int:pk>/status/", shop_views.AdminOrderStatusView.as_view(), name="admin-order-status"),
]

# --- Courses ---

courses_urlpatterns: List[URLPattern] = [
    path("", course_views.CourseListCreateView.as_view(), name="course-list"),
    path("mine/", course_views.MyCoursesView.as_view(), name="my-courses"),
    path("<int:pk>/", course_views.CourseDetailView.as_view(), name="course-detail"),
    path("<int:pk>/enroll/", course_views.EnrollView.as_view(), name="course-enroll"),
    path("<int:pk>/enroll/confirm/", course_views.EnrollConfirmView.as_view(), name="course-enroll-confirm"),
    path("<int:pk>/playback/", course_views.CoursePlaybackView.as_view(), name="course-playback"),
    path(
        "<int:pk>/playback/session-check/",
        course_views.PlaybackSessionCheckView.as_view(),
        name="course-session-check",
    ),
]

urlpatterns: List[URLPattern] = [
    path("auth/", include((auth_urlpatterns, "auth"))),
    path("products/", include((products_urlpatterns, "products"))),
    path("cart/", include((cart_urlpatterns, "cart"))),
    path("checkout/", include((checkout_urlpatterns, "checkout"))),
    path("orders/", include((orders_urlpatterns, "orders"))),
    path("admin/", include((admin_urlpatterns, "admin"))),
    path("courses/", include((courses_urlpatterns, "courses"))),
]
