"""Signals for automatic Order status history tracking.

Services may set ``order._status_change_notes`` before saving to attach a
note (e.g. "Cancelled by customer") to the history row.
"""

from __future__ import annotations

from typing import Optional

from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from modules.orders.models import Order, OrderStatusHistory


@receiver(pre_save, sender=Order)
def _capture_previous_status(sender, instance: Order, **kwargs) -> None:
    if instance._state.adding:
        instance._previous_status = None
        return
    instance._previous_status = (
        sender.objects.filter(pk=instance.pk).values_list("status", flat=True).first()
    )


@receiver(post_save, sender=Order)
def _create_status_history(sender, instance: Order, created: bool, **kwargs) -> None:
    previous_status: Optional[str] = getattr(instance, "_previous_status", None)
    notes = getattr(instance, "_status_change_notes", None)

    if created or previous_status != instance.status:
        if notes is None:
            notes = "Order placed" if created else ""
        OrderStatusHistory.objects.create(
            order=instance,
            old_status=previous_status,
            new_status=instance.status,
            notes=notes,
        )

    for attr in ("_previous_status", "_status_change_notes"):
        if hasattr(instance, attr):
            delattr(instance, attr)
