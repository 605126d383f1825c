from __future__ import annotations

import logging

from django.contrib.auth.models import Group
from django.db.models.signals import post_migrate
from django.dispatch import receiver


logger = logging.getLogger(__name__)

# Role groups checked by the API views; superusers bypass them.
ROLE_GROUPS = ("Manager", "Store Keeper", "Finance")


@receiver(post_migrate)
def ensure_groups(sender, **kwargs):
    for name in ROLE_GROUPS:
        _, created = Group.objects.get_or_create(name=name)
        if created:
            logger.info("Created role group %s", name)
