from __future__ import annotations

from datetime import timedelta
from io import StringIO

import pytest
from django.core.management import CommandError, call_command
from django.utils import timezone

from blog.models import Category

pytestmark = pytest.mark.django_db


def test_seed_categories_is_idempotent() -> None:
    Category.objects.create(name="technology", is_approved=True)
    out = StringIO()
    call_command("seed_categories", stdout=out)

    names = {c.name.lower() for c in Category.objects.filter(is_approved=True)}
    assert "general" in names
    assert "travel" in names
    assert Category.objects.filter(name__iexact="technology").count() == 1
    assert "Added 11 categories" in out.getvalue()

    out = StringIO()
    call_command("seed_categories", stdout=out)
    assert "already exist" in out.getvalue()


def test_grant_admin_lifts_suspension(bob) -> None:
    bob.is_suspended = True
    bob.suspended_until = timezone.now() + timedelta(days=1)
    bob.save()

    call_command("grant_admin", "bob", stdout=StringIO())
    bob.refresh_from_db()
    assert bob.is_admin and not bob.is_suspended and bob.suspended_until is None

    call_command("grant_admin", "bob", "--revoke", stdout=StringIO())
    bob.refresh_from_db()
    assert not bob.is_admin

    with pytest.raises(CommandError):
        call_command("grant_admin", "nobody")
