"""Seed Catalog Management Command"""

import logging
from decimal import Decimal

from django.contrib.auth.models import User
from django.core.management.base import BaseCommand
from django.db import transaction

from storefront.courses.youtube import extract_youtube_id, thumbnail_url
from storefront.models import Course, CourseVideo, Product

logger = logging.getLogger(__name__)

DEMO_PRODUCTS = [
    {
        "name": "Acrylic Paint Set (24 colours)",
        "description": "Quick-drying, non-toxic acrylic paints for canvas, wood and paper.",
        "price": Decimal("899.00"),
        "original_price": Decimal("1199.00"),
        "features": ["24 x 12ml tubes", "Non-toxic", "Fade resistant"],
        "specifications": {"Volume": "12ml per tube", "Finish": "Satin"},
    },
    {
        "name": "Macrame Cotton Cord 5mm",
        "description": "Single-strand cotton cord for wall hangings and plant hangers.",
        "price": Decimal("549.00"),
        "original_price": Decimal("649.00"),
        "features": ["100 m roll", "Soft single twist"],
        "specifications": {"Thickness": "5mm", "Material": "100% cotton"},
    },
    {
        "name": "Resin Art Starter Kit",
        "description": "Epoxy resin, hardener, pigments and silicone moulds.",
        "price": Decimal("1499.00"),
        "original_price": None,
        "features": ["1:1 mix ratio", "Bubble-free formula", "6 moulds"],
        "specifications": {"Resin": "500g", "Hardener": "500g"},
    },
    {
        "name": "Embroidery Hoop Kit",
        "description": "Beginner embroidery kit with pattern, threads and bamboo hoop.",
        "price": Decimal("399.00"),
        "original_price": Decimal("499.00"),
        "features": ["Printed pattern", "12 thread colours"],
        "specifications": {"Hoop": "20cm bamboo"},
    },
]

DEMO_COURSES = [
    {
        "title": "Resin Art for Beginners",
        "description": "From mixing ratios to demoulding: a complete beginner course.",
        "price": Decimal("1999.00"),
        "videos": [
            ("Tools and safety", "https://www.youtube.com/watch?v=dQw4w9WgXcQ"),
            ("Your first coaster", "https://youtu.be/9bZkp7q19f0"),
        ],
    },
    {
        "title": "Macrame Wall Hangings",
        "description": "Learn the core knots and finish three wall hangings.",
        "price": Decimal("1499.00"),
        "videos": [
            ("Square knot and half hitch", "https://www.youtube.com/embed/3JZ_D3ELwOQ"),
        ],
    },
]


class Command(BaseCommand):
    help = "Seeds demo products, courses and an operator account"

    def add_arguments(self, parser):
        parser.add_argument(
            "--flush",
            action="store_true",
            help="Delete existing products and courses before seeding",
        )
        parser.add_argument(
            "--admin-email",
            default="admin@crafthub.local",
            help="Email of the staff account to create if missing",
        )
        parser.add_argument(
            "--admin-password",
            default="admin",
            help="Password of the staff account (only used when it is created)",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options["flush"]:
            Product.objects.all().delete()
            Course.objects.all().delete()
            self.stdout.write(self.style.WARNING("Existing products and courses deleted"))

        self.seed_admin(options["admin_email"], options["admin_password"])
        products = self.seed_products()
        courses = self.seed_courses()

        self.stdout.write(
            self.style.SUCCESS(f"Seeded {products} product(s) and {courses} course(s)")
        )

    def seed_admin(self, email, password):
        user, created = User.objects.get_or_create(
            username=email,
            defaults={"email": email, "is_staff": True, "is_superuser": True},
        )
        if created:
            user.set_password(password)
            user.save()
            self.stdout.write(f"Created staff account {email}")

    def seed_products(self) -> int:
        created_count = 0
        for data in DEMO_PRODUCTS:
            _, created = Product.objects.get_or_create(name=data["name"], defaults=data)
            created_count += int(created)
        return created_count

    def seed_courses(self) -> int:
        created_count = 0
        for data in DEMO_COURSES:
            course, created = Course.objects.get_or_create(
                title=data["title"],
                defaults={"description": data["description"], "price": data["price"]},
            )
            if not created:
                continue
            created_count += 1
            for position, (title, url) in enumerate(data["videos"]):
                video_id = extract_youtube_id(url)
                if not video_id:
                    logger.warning("Skipping unrecognised video URL %s", url)
                    continue
                CourseVideo.objects.create(
                    course=course,
                    title=title,
                    youtube_url=url,
                    youtube_id=video_id,
                    thumbnail_url=thumbnail_url(video_id),
                    order=position,
                )
            first = course.videos.first()
            if first:
                course.thumbnail_url = first.thumbnail_url
                course.save(update_fields=["thumbnail_url", "updated_at"])
        return created_count
