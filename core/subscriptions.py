"""
Live Model Subscriptions

Explicit subscribe/unsubscribe interface over Django's model signals. A
subscriber registers a callback for one model and receives a fresh, ordered
snapshot of the model's rows immediately and again after every save or delete
of that model. The returned handle must be cancelled when the consumer goes
away; it can also be used as a context manager.

Changes written by other processes do not fire local signals. Long-running
consumers (see the ``watch_orders`` management command) call ``refresh()``
periodically, which re-delivers the snapshot only when it actually changed.

Example:
    >>> def show(orders):
    ...     print(len(orders))
    >>> with subscribe(Order, show, ordering=("-created_at",)) as subscription:
    ...     ...

Author: CraftHub Development Team
Version: 1.0.0
"""

import logging
import uuid
from typing import Any, Callable, List, Optional, Sequence, Tuple, Type

from django.db import models
from django.db.models.signals import post_delete, post_save

logger = logging.getLogger(__name__)

SnapshotCallback = Callable[[List[models.Model]], Any]


class Subscription:
    """
    Handle for one live subscription.

    Attributes:
        model: Model class being observed
        ordering: Ordering applied to every snapshot
        active: False once ``cancel()`` has run
    """

    def __init__(
        self,
        model: Type[models.Model],
        callback: SnapshotCallback,
        ordering: Sequence[str] = (),
        queryset: Optional[models.QuerySet] = None,
    ) -> None:
        self.model = model
        self.ordering = tuple(ordering)
        self.active = False
        self._callback = callback
        self._queryset = queryset
        self._dispatch_uid = f"subscription-{uuid.uuid4().hex}"
        self._fingerprint: Optional[Tuple] = None

    def __repr__(self) -> str:
        return (
            f"<Subscription(model={self.model.__name__}, "
            f"ordering={self.ordering}, active={self.active})>"
        )

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.cancel()

    def snapshot(self) -> List[models.Model]:
        """Return the current ordered rows for the observed model."""
        queryset = self._queryset if self._queryset is not None else self.model.objects.all()
        queryset = queryset.all()
        if self.ordering:
            queryset = queryset.order_by(*self.ordering)
        return list(queryset)

    def start(self) -> "Subscription":
        """Connect the signal receivers and deliver the initial snapshot."""
        if self.active:
            return self
        post_save.connect(
            self._on_change,
            sender=self.model,
            weak=False,
            dispatch_uid=f"{self._dispatch_uid}-save",
        )
        post_delete.connect(
            self._on_change,
            sender=self.model,
            weak=False,
            dispatch_uid=f"{self._dispatch_uid}-delete",
        )
        self.active = True
        logger.debug("Subscribed to %s (%s)", self.model.__name__, self._dispatch_uid)
        self._deliver()
        return self

    def refresh(self) -> bool:
        """
        Re-deliver the snapshot if it changed since the last delivery.

        Returns:
            True if the callback ran, False otherwise
        """
        if not self.active:
            return False
        rows = self.snapshot()
        if self._fingerprint_of(rows) == self._fingerprint:
            return False
        self._deliver(rows)
        return True

    def cancel(self) -> None:
        """Disconnect the receivers. Safe to call more than once."""
        if not self.active:
            return
        post_save.disconnect(sender=self.model, dispatch_uid=f"{self._dispatch_uid}-save")
        post_delete.disconnect(sender=self.model, dispatch_uid=f"{self._dispatch_uid}-delete")
        self.active = False
        logger.debug("Cancelled subscription to %s (%s)", self.model.__name__, self._dispatch_uid)

    def _on_change(self, sender, **kwargs) -> None:
        if self.active:
            self._deliver()

    def _deliver(self, rows: Optional[List[models.Model]] = None) -> None:
        if rows is None:
            rows = self.snapshot()
        self._fingerprint = self._fingerprint_of(rows)
        self._callback(rows)

    @staticmethod
    def _fingerprint_of(rows: List[models.Model]) -> Tuple:
        return tuple((row.pk, getattr(row, "updated_at", None)) for row in rows)


def subscribe(
    model: Type[models.Model],
    callback: SnapshotCallback,
    ordering: Sequence[str] = (),
    queryset: Optional[models.QuerySet] = None,
) -> Subscription:
    """
    Subscribe ``callback`` to ordered snapshots of ``model``.

    Args:
        model: Model class to observe
        callback: Called with the list of rows on subscribe and on every change
        ordering: ``order_by`` arguments for each snapshot
        queryset: Optional narrower queryset (for example one user's orders)

    Returns:
        The active ``Subscription`` handle
    """
    return Subscription(model, callback, ordering=ordering, queryset=queryset).start()
