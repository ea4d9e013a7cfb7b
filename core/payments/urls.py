from django.urls import path

from .views import PaymentConfigView

app_name = "payments"

urlpatterns = [
    path("config/", PaymentConfigView.as_view(), name="payment-config"),
]
