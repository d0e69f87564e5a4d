from django.core.management.base import BaseCommand, CommandError

from blog.models import User


class Command(BaseCommand):
    help = "Give (or with --revoke, take away) moderation rights for an account."

    def add_arguments(self, parser):
        parser.add_argument('username')
        parser.add_argument('--revoke', action='store_true')

    def handle(self, *args, **options):
        user = User.objects.filter(username=options['username']).first()
        if user is None:
            raise CommandError(f"No user named {options['username']!r}")

        user.is_admin = not options['revoke']
        if user.is_admin:
            # Admins cannot be moderated, so a standing suspension is lifted.
            user.is_suspended = False
            user.suspended_until = None
        user.save(update_fields=['is_admin', 'is_suspended', 'suspended_until', 'updated_at'])

        state = "is now an admin" if user.is_admin else "is no longer an admin"
        self.stdout.write(self.style.SUCCESS(f"{user.username} {state}"))
