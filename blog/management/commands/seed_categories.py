from django.core.management.base import BaseCommand
from django.db import transaction

from blog.models import Category
from blog.moderation import ensure_general_category

DEFAULT_CATEGORIES = [
    'Technology',
    'Lifestyle',
    'Travel',
    'Food & Cooking',
    'Fitness & Health',
    'Fashion',
    'Personal Finance',
    'Education',
    'Entertainment',
    'Gaming',
    'Books & Literature',
    'DIY & Crafts',
]


class Command(BaseCommand):
    help = "Create the default approved categories (and General) if missing."

    def handle(self, *args, **options):
        existing = {name.lower() for name in Category.objects.values_list('name', flat=True)}
        missing = [name for name in DEFAULT_CATEGORIES if name.lower() not in existing]

        with transaction.atomic():
            Category.objects.bulk_create(
                [Category(name=name, is_approved=True, suggested_by=None) for name in missing]
            )
            ensure_general_category()

        if not missing:
            self.stdout.write("No new categories to add; all categories already exist.")
            return
        self.stdout.write(self.style.SUCCESS(f"Added {len(missing)} categories:"))
        for name in missing:
            self.stdout.write(f"- {name}")
