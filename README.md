# depthbook

Aggregated market depth for a limit order book. Orders are grouped by
price into a fixed number of visible levels per side; deeper prices are
kept aside as excess levels and move into view when a visible level is
erased. Every visible level records the change number of its last
update, so a publisher can send only the levels that changed since the
last publish.

## Installation

```
pip install depthbook
```

## Usage

```python
from depthbook.depth import Depth

depth = Depth(5)                   # five visible levels per side
depth.add_order(1236, 300, True)   # bid
depth.add_order(1235, 200, True)
depth.add_order(1235, 400, True)
depth.add_order(1240, 100, False)  # ask

best_bid = depth.bids()[0]
print(best_bid.price, best_bid.order_count, best_bid.aggregate_qty)
# 1236 1 300

depth.close_order(1236, 300, True)   # True: the level was erased
depth.change_qty_order(1235, -50, True)

if depth.changed():
    for level in depth.bids():
        if level.changed_since(depth.last_published_change()):
            ...                      # send this level
    depth.published()
```

Bids are listed best (highest price) first and asks best (lowest price)
first. A blank visible level has price `0`
(`depthbook.level.INVALID_LEVEL_PRICE`).

### `depthbook.depth.Depth`

- `Depth(size=5)` – `size` visible levels per side; a size below one
  raises `ValueError`. The `size` property returns it.
- `bids()`, `asks()` – the visible levels of each side;
  `last_bid_level()`, `last_ask_level()` – the worst visible level.
- `add_order(price, qty, is_bid)` – add an order's open quantity.
- `close_order(price, open_qty, is_bid)` – remove an order; returns
  `True` if a level was erased.
- `change_qty_order(price, qty_delta, is_bid)` – adjust a level's
  quantity by a positive or negative amount.
- `replace_order(current_price, new_price, current_qty, new_qty, is_bid)`
  – resize an order in place, or move it to a new price; returns `True`
  if the old level was erased.
- `fill_order(price, fill_qty, filled, is_bid)` and
  `ignore_fill_qty(qty, is_bid)` – apply fills, skipping fill quantity
  already accounted for when an order was accepted. Setting an ignored
  quantity on a side that still has one raises `RuntimeError`.
- `needs_bid_restoration()` / `needs_ask_restoration()` – return a
  `(needed, price)` pair telling an order book whether, and after which
  price, to refill the last visible level.
- `changed()`, `last_change()`, `last_published_change()`, `published()`
  – change tracking for publishing.

### `depthbook.level.DepthLevel`

A dataclass with `price`, `order_count`, `aggregate_qty`, `is_excess` and
`last_change`, and the methods `init`, `add_order`, `close_order`,
`increase_qty`, `decrease_qty`, `changed_since` and `copy`. Removing more
quantity than a level holds raises `ValueError`.

### `depthbook.depth.BboListener`

An abstract interface with one method, `on_bbo_change(book, depth)`, for
receiving top-of-book change notifications.

## What this package does not do

It keeps depth only. It holds no individual orders, does no matching,
and never calls a `BboListener` itself: an order book that matches orders
and notifies listeners has to be supplied by the caller. There is no
command-line program, network feed or storage.

## Running the tests

```
pip install -e ".[test]"
pytest
```