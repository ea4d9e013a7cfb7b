from decimal import Decimal
from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from core.exceptions import ImageUploadError, ValidationFailed
from storefront.catalog.services import submit_rating, upload_product_images, validate_image_count
from storefront.models import Product, Rating
from storefront.tests.helpers import make_product, make_staff, make_user, sign_in_client


def image_file(name="craft.jpg", content_type="image/jpeg", size=64):
    return SimpleUploadedFile(name, b"\xff" * size, content_type=content_type)


class ProductModelTests(TestCase):
    def test_discount_percent_against_original_price(self):
        product = make_product(price="750.00", original_price=Decimal("1000.00"))
        self.assertEqual(product.discount_percent, 25)

    def test_no_discount_without_higher_original_price(self):
        self.assertEqual(make_product(price="100.00").discount_percent, 0)
        self.assertEqual(make_product(price="100.00", original_price=Decimal("90.00")).discount_percent, 0)

    def test_cover_image_is_first_image(self):
        product = make_product(images=["https://img/1.jpg", "https://img/2.jpg"])
        self.assertEqual(product.cover_image, "https://img/1.jpg")
        self.assertEqual(make_product(images=[]).cover_image, "")


class RatingTests(TestCase):
    def setUp(self):
        self.product = make_product()
        self.user = make_user()

    def test_rating_is_write_once(self):
        rating, created = submit_rating(self.product, self.user, 4)
        self.assertTrue(created)

        again, created_again = submit_rating(self.product, self.user, 2)

        self.assertFalse(created_again)
        self.assertEqual(again.pk, rating.pk)
        self.assertEqual(Rating.objects.get(product=self.product, user=self.user).rating, 4)
        self.product.refresh_from_db()
        self.assertEqual(self.product.ratings_count, 1)
        self.assertEqual(self.product.average_rating, 4.0)

    def test_average_is_updated_incrementally(self):
        submit_rating(self.product, self.user, 5)
        submit_rating(self.product, make_user("second@example.com"), 2)
        self.product.refresh_from_db()
        self.assertEqual(self.product.ratings_count, 2)
        self.assertAlmostEqual(self.product.average_rating, 3.5)

    def test_out_of_range_rating_is_rejected(self):
        with self.assertRaises(ValidationFailed):
            submit_rating(self.product, self.user, 6)
        self.assertFalse(Rating.objects.exists())


@override_settings(MAX_PRODUCT_IMAGES=5)
class ImageUploadServiceTests(TestCase):
    def test_image_count_bounds(self):
        validate_image_count([image_file()])
        validate_image_count([image_file() for _ in range(5)])
        with self.assertRaisesMessage(ValidationFailed, "Please select between 1 and 5 images."):
            validate_image_count([])
        with self.assertRaisesMessage(ValidationFailed, "Please select between 1 and 5 images."):
            validate_image_count([image_file() for _ in range(6)])

    def test_optional_image_set_may_be_empty(self):
        validate_image_count([], required=False)

    def test_uploads_run_one_by_one_in_order(self):
        client = mock.Mock()
        client.upload.side_effect = ["https://img/a.jpg", "https://img/b.jpg"]
        files = [image_file("a.jpg"), image_file("b.jpg")]

        urls = upload_product_images(files, client=client)

        self.assertEqual(urls, ["https://img/a.jpg", "https://img/b.jpg"])
        self.assertEqual([c.args[0] for c in client.upload.call_args_list], files)

    def test_invalid_file_stops_before_any_upload(self):
        client = mock.Mock()
        client.validate.side_effect = [None, ValidationFailed("Only image files can be uploaded.")]

        with self.assertRaises(ValidationFailed):
            upload_product_images([image_file(), image_file("notes.txt", "text/plain")], client=client)
        client.upload.assert_not_called()


class ProductApiTests(APITestCase):
    def setUp(self):
        self.staff = make_staff()
        self.customer = make_user()

    def test_list_is_public_and_searchable(self):
        make_product(name="Macrame Cord", description="cotton rope")
        make_product(name="Resin Kit", description="epoxy")

        response = self.client.get("/api/products/", {"search": "COTTON"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p["name"] for p in response.json()], ["Macrame Cord"])

    def test_list_shows_price_display_and_own_rating(self):
        product = make_product(price="250.00")
        submit_rating(product, self.customer, 4)
        sign_in_client(self.client, self.customer)

        item = self.client.get("/api/products/").json()[0]

        self.assertEqual(item["price_display"], "₹250.00")
        self.assertEqual(item["my_rating"], 4)

    @mock.patch("storefront.catalog.services.ImageHostClient")
    def test_staff_creates_product_with_images(self, host_cls):
        host_cls.return_value.upload.side_effect = ["https://img/1.jpg", "https://img/2.jpg"]
        sign_in_client(self.client, self.staff)

        response = self.client.post(
            "/api/products/",
            {
                "name": "Embroidery Kit",
                "price": "399.00",
                "features": '["12 threads", "bamboo hoop"]',
                "images": [image_file("1.jpg"), image_file("2.jpg")],
            },
            format="multipart",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.content)
        product = Product.objects.get(name="Embroidery Kit")
        self.assertEqual(product.images, ["https://img/1.jpg", "https://img/2.jpg"])
        self.assertEqual(product.features, ["12 threads", "bamboo hoop"])
        self.assertTrue(product.in_stock)

    @mock.patch("storefront.catalog.services.ImageHostClient")
    def test_wrong_image_count_is_rejected_before_upload(self, host_cls):
        sign_in_client(self.client, self.staff)

        none = self.client.post("/api/products/", {"name": "Kit", "price": "10.00"}, format="multipart")
        too_many = self.client.post(
            "/api/products/",
            {"name": "Kit", "price": "10.00", "images": [image_file(f"{i}.jpg") for i in range(6)]},
            format="multipart",
        )

        self.assertEqual(none.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(too_many.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(none.json()["error_code"], "validation_failed")
        host_cls.return_value.upload.assert_not_called()
        self.assertFalse(Product.objects.exists())

    @mock.patch("storefront.catalog.services.ImageHostClient")
    def test_image_host_failure_answers_502(self, host_cls):
        host_cls.return_value.upload.side_effect = ImageUploadError()
        sign_in_client(self.client, self.staff)

        response = self.client.post(
            "/api/products/",
            {"name": "Kit", "price": "10.00", "images": [image_file()]},
            format="multipart",
        )

        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.json()["service"], "image_host")
        self.assertFalse(Product.objects.exists())

    def test_customers_cannot_create_products(self):
        sign_in_client(self.client, self.customer)
        response = self.client.post("/api/products/", {"name": "Kit", "price": "10.00"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_toggles_and_sets_stock(self):
        product = make_product()
        sign_in_client(self.client, self.staff)

        toggled = self.client.post(f"/api/products/{product.pk}/stock/", {}, format="json")
        self.assertFalse(toggled.json()["in_stock"])

        explicit = self.client.post(f"/api/products/{product.pk}/stock/", {"in_stock": False}, format="json")
        self.assertFalse(explicit.json()["in_stock"])

        toggled_back = self.client.post(f"/api/products/{product.pk}/stock/", {}, format="json")
        self.assertTrue(toggled_back.json()["in_stock"])

    def test_rate_endpoint_is_write_once(self):
        product = make_product()
        sign_in_client(self.client, self.customer)

        first = self.client.post(f"/api/products/{product.pk}/rate/", {"rating": 4}, format="json")
        second = self.client.post(f"/api/products/{product.pk}/rate/", {"rating": 2}, format="json")

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(second.json()["rating"], 4)
        self.assertEqual(second.json()["ratings_count"], 1)

    def test_rating_requires_sign_in(self):
        product = make_product()
        response = self.client.post(f"/api/products/{product.pk}/rate/", {"rating": 4}, format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_reviews_are_listed_on_detail(self):
        product = make_product()
        sign_in_client(self.client, self.customer)

        created = self.client.post(
            f"/api/products/{product.pk}/reviews/", {"rating": 5, "comment": "Lovely colours"}, format="json"
        )
        detail = self.client.get(f"/api/products/{product.pk}/")

        self.assertEqual(created.status_code, status.HTTP_201_CREATED)
        self.assertEqual(detail.json()["reviews"][0]["comment"], "Lovely colours")

    def test_empty_review_is_rejected(self):
        product = make_product()
        sign_in_client(self.client, self.customer)
        response = self.client.post(
            f"/api/products/{product.pk}/reviews/", {"rating": 5, "comment": "  "}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
