"""Setup Image Host CORS Management Command"""

import json
import logging

from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings
from django.core.management.base import BaseCommand

from core.storage import ImageHostClient

logger = logging.getLogger(__name__)


def build_cors_config(origins):
    return {
        "CORSRules": [
            {
                "AllowedOrigins": list(origins),
                "AllowedMethods": ["GET", "HEAD"],
                "AllowedHeaders": ["*"],
                "ExposeHeaders": ["Content-Length", "Content-Type", "ETag", "Last-Modified"],
                "MaxAgeSeconds": 3000,
            }
        ]
    }


class Command(BaseCommand):
    help = "Konfiguriert CORS für den Image-Bucket, damit das Frontend Produktbilder laden kann"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Zeige nur was konfiguriert werden würde, ohne tatsächlich zu ändern",
        )
        parser.add_argument(
            "--verify",
            action="store_true",
            help="Verifiziere die aktuelle CORS-Konfiguration",
        )

    def handle(self, *args, **options):
        host = ImageHostClient()

        if options["verify"]:
            self.verify_cors_configuration(host)
            return

        origins = [settings.FRONTEND_URL, *settings.CORS_ALLOWED_ORIGINS]
        cors_config = build_cors_config(dict.fromkeys(o for o in origins if o))

        if options["dry_run"]:
            self.stdout.write(self.style.WARNING("DRY RUN: CORS-Konfiguration wird nur simuliert"))
            self.stdout.write(json.dumps(cors_config, indent=2))
            return

        try:
            host.get_s3_client().put_bucket_cors(Bucket=host.bucket, CORSConfiguration=cors_config)
        except (ClientError, BotoCoreError) as e:
            logger.error("CORS setup for bucket %s failed: %s", host.bucket, e)
            self.stdout.write(self.style.ERROR(f"Fehler bei CORS-Konfiguration: {e}"))
            return

        self.stdout.write(
            self.style.SUCCESS(f"CORS-Konfiguration für Bucket '{host.bucket}' erfolgreich angewendet")
        )
        for origin in cors_config["CORSRules"][0]["AllowedOrigins"]:
            self.stdout.write(f"   - {origin}")

    def verify_cors_configuration(self, host):
        try:
            cors_config = host.get_s3_client().get_bucket_cors(Bucket=host.bucket)
        except (ClientError, BotoCoreError) as e:
            self.stdout.write(self.style.ERROR(f"Keine CORS-Konfiguration gefunden: {e}"))
            return
        self.stdout.write(self.style.SUCCESS("CORS-Konfiguration gefunden:"))
        self.stdout.write(json.dumps(cors_config.get("CORSRules", []), indent=2))
