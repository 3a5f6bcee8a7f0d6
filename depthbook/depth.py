"""Limit-order depth aggregated by price, with a fixed number of visible levels."""

from __future__ import annotations

import abc
from typing import Any

from depthbook.level import INVALID_LEVEL_PRICE, DepthLevel

MARKET_ORDER_BID_SORT_PRICE = 2**64 - 1
"""Sort price of a market bid: better than any limit bid."""

MARKET_ORDER_ASK_SORT_PRICE = 0
"""Sort price of a market ask: better than any limit ask."""


class BboListener(abc.ABC):
    """Listener of top-of-book changes."""

    @abc.abstractmethod
    def on_bbo_change(self, book: Any, depth: Depth) -> None:
        """Called when the best bid or best offer of ``book`` changes."""


def _assign(dst: DepthLevel, src: DepthLevel) -> None:
    """Copy ``src`` over ``dst`` in place, keeping ``dst``'s excess flag."""
    dst.price = src.price
    dst.order_count = src.order_count
    dst.aggregate_qty = src.aggregate_qty
    if src.price != INVALID_LEVEL_PRICE:
        dst.last_change = src.last_change


class Depth:
    """Bid and ask levels aggregated by price.

    The best ``size`` levels of each side are visible; worse levels are kept
    as excess and move into view as better levels are erased.
    """

    def __init__(self, size: int = 5) -> None:
        if size < 1:
            raise ValueError("Depth size less than one not allowed")
        self._size = size
        self._levels = [DepthLevel() for _ in range(size * 2)]
        self._last_change = 0
        self._last_published_change = 0
        self._ignore_bid_fill_qty = 0
        self._ignore_ask_fill_qty = 0
        self._excess_bids: dict[int, DepthLevel] = {}
        self._excess_asks: dict[int, DepthLevel] = {}

    @property
    def size(self) -> int:
        """Number of visible levels on each side."""
        return self._size

    def bids(self) -> list[DepthLevel]:
        """Visible bid levels, best first."""
        return self._levels[: self._size]

    def asks(self) -> list[DepthLevel]:
        """Visible ask levels, best first."""
        return self._levels[self._size :]

    def last_bid_level(self) -> DepthLevel:
        """The worst visible bid level."""
        return self._levels[self._size - 1]

    def last_ask_level(self) -> DepthLevel:
        """The worst visible ask level."""
        return self._levels[self._size * 2 - 1]

    def add_order(self, price: int, qty: int, is_bid: bool) -> None:
        """Add an order of ``qty`` at ``price``."""
        last_change_copy = self._last_change
        level = self._find_level(price, is_bid)
        if level is not None:
            level.add_order(qty)
            if not level.is_excess:
                self._last_change = last_change_copy + 1
                level.last_change = last_change_copy + 1

    def ignore_fill_qty(self, qty: int, is_bid: bool) -> None:
        """Ignore future fills of ``qty`` on a side, matched at accept time."""
        if is_bid:
            if self._ignore_bid_fill_qty:
                raise RuntimeError("Unexpected ignore_bid_fill_qty")
            self._ignore_bid_fill_qty = qty
        else:
            if self._ignore_ask_fill_qty:
                raise RuntimeError("Unexpected ignore_ask_fill_qty")
            self._ignore_ask_fill_qty = qty

    def fill_order(self, price: int, fill_qty: int, filled: bool, is_bid: bool) -> None:
        """Apply a fill of ``fill_qty``; ``filled`` means the order is complete."""
        if is_bid and self._ignore_bid_fill_qty:
            self._ignore_bid_fill_qty -= fill_qty
        elif not is_bid and self._ignore_ask_fill_qty:
            self._ignore_ask_fill_qty -= fill_qty
        elif filled:
            self.close_order(price, fill_qty, is_bid)
        else:
            self.change_qty_order(price, -fill_qty, is_bid)

    def close_order(self, price: int, open_qty: int, is_bid: bool) -> bool:
        """Cancel or fill an order; True if a visible level was erased."""
        level = self._find_level(price, is_bid, create=False)
        if level is not None:
            if level.close_order(open_qty):
                self._erase_level(level, is_bid)
                return True
            self._last_change += 1
            level.last_change = self._last_change
        return False

    def change_qty_order(self, price: int, qty_delta: int, is_bid: bool) -> None:
        """Change the open quantity of an order at ``price`` by ``qty_delta``."""
        level = self._find_level(price, is_bid, create=False)
        if level is not None and qty_delta:
            if qty_delta > 0:
                level.increase_qty(qty_delta)
            else:
                level.decrease_qty(-qty_delta)
            self._last_change += 1
            level.last_change = self._last_change

    def replace_order(
        self,
        current_price: int,
        new_price: int,
        current_qty: int,
        new_qty: int,
        is_bid: bool,
    ) -> bool:
        """Replace an order's price and quantity; True if a level was erased."""
        if current_price == new_price:
            self.change_qty_order(current_price, new_qty - current_qty, is_bid)
            return False
        self.add_order(new_price, new_qty, is_bid)
        return self.close_order(current_price, current_qty, is_bid)

    def needs_bid_restoration(self) -> tuple[bool, int]:
        """Whether bids need restoring after an erase, and the price to restore after."""
        if self._size > 1:
            price = self._levels[self._size - 2].price
            return price != INVALID_LEVEL_PRICE, price
        return True, MARKET_ORDER_BID_SORT_PRICE

    def needs_ask_restoration(self) -> tuple[bool, int]:
        """Whether asks need restoring after an erase, and the price to restore after."""
        if self._size > 1:
            price = self._levels[self._size * 2 - 2].price
            return price != INVALID_LEVEL_PRICE, price
        return True, MARKET_ORDER_ASK_SORT_PRICE

    def changed(self) -> bool:
        """Whether the depth changed since it was last published."""
        return self._last_change > self._last_published_change

    def last_change(self) -> int:
        """Id of the last change."""
        return self._last_change

    def last_published_change(self) -> int:
        """Id of the last published change."""
        return self._last_published_change

    def published(self) -> None:
        """Note that the current state has been published."""
        self._last_published_change = self._last_change

    def _side_range(self, is_bid: bool) -> range:
        if is_bid:
            return range(0, self._size)
        return range(self._size, self._size * 2)

    def _excess(self, is_bid: bool) -> dict[int, DepthLevel]:
        return self._excess_bids if is_bid else self._excess_asks

    def _find_level(self, price: int, is_bid: bool, create: bool = True) -> DepthLevel | None:
        for index in self._side_range(is_bid):
            level = self._levels[index]
            if level.price == price:
                return level
            if not create:
                continue
            if level.price == INVALID_LEVEL_PRICE:
                level.init(price, False)
                return level
            worse = level.price < price if is_bid else level.price > price
            if worse:
                self._insert_level_before(index, is_bid, price)
                return self._levels[index]
        excess = self._excess(is_bid)
        level = excess.get(price)
        if level is None and create:
            level = DepthLevel()
            level.init(price, True)
            excess[price] = level
        return level

    def _insert_level_before(self, index: int, is_bid: bool, price: int) -> None:
        side = self._side_range(is_bid)
        last_index = side.stop - 1
        last_level = self._levels[last_index]
        if last_level.price != INVALID_LEVEL_PRICE:
            excess_level = DepthLevel()
            excess_level.init(0, True)
            _assign(excess_level, last_level)
            self._excess(is_bid).setdefault(last_level.price, excess_level)
        self._last_change += 1
        for current in range(last_index - 1, index - 1, -1):
            source = self._levels[current]
            target = self._levels[current + 1]
            _assign(target, source)
            if source.price != INVALID_LEVEL_PRICE:
                target.last_change = self._last_change
        self._levels[index].init(price, False)

    def _erase_level(self, level: DepthLevel, is_bid: bool) -> None:
        excess = self._excess(is_bid)
        if level.is_excess:
            excess.pop(level.price, None)
            return
        side = self._side_range(is_bid)
        last_index = side.stop - 1
        index = next(i for i in side if self._levels[i] is level)
        self._last_change += 1
        for current in range(index, last_index):
            current_level = self._levels[current]
            if current_level.price != INVALID_LEVEL_PRICE or current == index:
                _assign(current_level, self._levels[current + 1])
                current_level.last_change = self._last_change
        last_level = self._levels[last_index]
        if index == last_index or last_level.price != INVALID_LEVEL_PRICE:
            if excess:
                best = max(excess) if is_bid else min(excess)
                _assign(last_level, excess.pop(best))
            else:
                last_level.init(INVALID_LEVEL_PRICE, False)
            last_level.last_change = self._last_change