"""
Cart session store tests (process-local, per session).
"""
import pytest

from orderdesk.core.cart import CartStore
from orderdesk.core.errors import CartLineNotFound, InvalidRequest


def add_latte(store, session_id="s1", quantity=1, **options):
    surcharge = 500 * bool(options.get("shot")) + 300 * bool(options.get("syrup"))
    return store.add(
        session_id, menu_id="latte", name="Cafe Latte", price=3500,
        quantity=quantity, options=options, option_surcharge=surcharge,
    )


def test_add_computes_total_price():
    store = CartStore()

    cart_line = add_latte(store, quantity=2, shot=True)

    assert cart_line.total_price == (3500 + 500) * 2
    assert store.get("s1") == [cart_line]


def test_sessions_are_isolated():
    store = CartStore()
    add_latte(store, "alice")
    add_latte(store, "alice")
    add_latte(store, "bob")

    assert len(store.get("alice")) == 2
    assert len(store.get("bob")) == 1
    assert store.get("carol") == []


def test_update_quantity_reprices_line():
    store = CartStore()
    cart_line = add_latte(store, syrup=True)

    updated = store.update_quantity("s1", cart_line.id, 3)

    assert updated.quantity == 3
    assert updated.total_price == 3800 * 3
    assert store.get("s1")[0].quantity == 3


def test_line_ids_are_not_reachable_from_other_sessions():
    store = CartStore()
    cart_line = add_latte(store, "alice")

    with pytest.raises(CartLineNotFound):
        store.update_quantity("bob", cart_line.id, 2)
    with pytest.raises(CartLineNotFound):
        store.remove("bob", cart_line.id)
    assert store.get("alice") == [cart_line]


def test_remove_line():
    store = CartStore()
    first = add_latte(store)
    second = add_latte(store)

    store.remove("s1", first.id)

    assert store.get("s1") == [second]
    with pytest.raises(CartLineNotFound):
        store.remove("s1", first.id)


@pytest.mark.parametrize("quantity", [0, -1])
def test_non_positive_quantity_rejected(quantity):
    store = CartStore()
    with pytest.raises(InvalidRequest):
        add_latte(store, quantity=quantity)
    cart_line = add_latte(store)
    with pytest.raises(InvalidRequest):
        store.update_quantity("s1", cart_line.id, quantity)


def test_discard_keeps_lines_added_later():
    store = CartStore()
    ordered = add_latte(store)
    added_later = add_latte(store)

    store.discard("s1", {ordered.id})

    assert store.get("s1") == [added_later]
    store.discard("s1", {added_later.id})
    assert store.get("s1") == []


def test_get_returns_a_copy():
    store = CartStore()
    add_latte(store)

    store.get("s1").clear()

    assert len(store.get("s1")) == 1
