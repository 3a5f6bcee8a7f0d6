"""A single price level of aggregated limit-order depth."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass

INVALID_LEVEL_PRICE = 0
"""Price held by a blank level."""


@dataclass
class DepthLevel:
    """Orders at one price, aggregated into a count and a total quantity."""

    price: int = INVALID_LEVEL_PRICE
    order_count: int = 0
    aggregate_qty: int = 0
    is_excess: bool = False
    last_change: int = 0

    def init(self, price: int, is_excess: bool) -> None:
        """Reset the level to an empty one at ``price``.

        The change id is left alone; the caller assigns it.
        """
        self.price = price
        self.order_count = 0
        self.aggregate_qty = 0
        self.is_excess = is_excess

    def add_order(self, qty: int) -> None:
        """Add an order of ``qty`` to the level."""
        self.order_count += 1
        self.aggregate_qty += qty

    def close_order(self, qty: int) -> bool:
        """Remove an order of open quantity ``qty``.

        Returns True when the last order on the level was closed, leaving
        it empty.
        """
        if self.order_count == 0:
            raise ValueError("close_order: order count too low")
        if self.order_count == 1:
            self.order_count = 0
            self.aggregate_qty = 0
            return True
        if qty > self.aggregate_qty:
            raise ValueError("close_order: level quantity too low")
        self.order_count -= 1
        self.aggregate_qty -= qty
        return False

    def increase_qty(self, qty: int) -> None:
        """Raise the aggregate quantity by ``qty``."""
        self.aggregate_qty += qty

    def decrease_qty(self, qty: int) -> None:
        """Lower the aggregate quantity by ``qty``."""
        if qty > self.aggregate_qty:
            raise ValueError("decrease_qty: level quantity too low")
        self.aggregate_qty -= qty

    def changed_since(self, last_published_change: int) -> bool:
        """Whether the level changed after the given change id."""
        return self.last_change > last_published_change

    def copy(self) -> DepthLevel:
        """Return an independent copy of this level."""
        return dataclasses.replace(self)