from __future__ import annotations

import logging

from django.db.models.signals import post_save
from django.db.models.signals import post_migrate
from django.dispatch import receiver
from django.contrib.auth.models import Group, Permission

from .models import CashFlowTransaction, AuditLog


logger = logging.getLogger(__name__)


@receiver(post_save, sender=CashFlowTransaction)
def log_transaction_create_or_update(sender, instance: CashFlowTransaction, created: bool, **kwargs):
    try:
        AuditLog.objects.create(
            action='created' if created else 'updated',
            model='CashFlowTransaction',
            object_id=str(instance.pk),
            user=instance.created_by,
            note=instance.description or '',
        )
    except Exception:
        # Do not block business flow on audit errors
        logger.exception("Audit log write failed for transaction %s", instance.pk)


@receiver(post_migrate)
def ensure_groups(sender, **kwargs):
    if getattr(sender, 'name', None) != 'cash_management':
        return
    finance, _ = Group.objects.get_or_create(name='Finance')
    manager, _ = Group.objects.get_or_create(name='Manager')

    def get_perm(code, model):
        try:
            return Permission.objects.get_by_natural_key(code, 'cash_management', model)
        except Permission.DoesNotExist:
            return None

    finance_perms = [
        get_perm('view_bankaccount', 'bankaccount'),
        get_perm('view_cashflowtransaction', 'cashflowtransaction'),
        get_perm('add_cashflowtransaction', 'cashflowtransaction'),
        get_perm('view_payable', 'payable'),
        get_perm('add_payable', 'payable'),
        get_perm('view_receivable', 'receivable'),
        get_perm('add_receivable', 'receivable'),
    ]
    manager_perms = finance_perms + [
        get_perm('add_bankaccount', 'bankaccount'),
        get_perm('change_bankaccount', 'bankaccount'),
        get_perm('change_payable', 'payable'),
        get_perm('change_receivable', 'receivable'),
    ]
    for group, perms in ((finance, finance_perms), (manager, manager_perms)):
        for p in perms:
            if p:
                group.permissions.add(p)
