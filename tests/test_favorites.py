from __future__ import annotations

import pytest

from fuel_tracker.exceptions import FavoriteNotFoundError, ValidationError
from fuel_tracker.services.favorites import FavoritesStore
from fuel_tracker.services.types import FuelKind


@pytest.mark.django_db
def test_add_and_list_favorites_in_insertion_order() -> None:
    store = FavoritesStore("test-profile")

    first = store.add("Brussel", "Luik", 6.5, "diesel")
    second = store.add(" Gent ", "Antwerpen")

    favorites = store.load_all()
    assert [favorite.id for favorite in favorites] == [first.id, second.id]
    assert favorites[0].fuel_kind is FuelKind.DIESEL
    assert favorites[0].consumption_l_per_100km == 6.5
    assert favorites[1].departure_label == "Gent"
    assert favorites[1].fuel_kind is None
    assert favorites[1].consumption_l_per_100km is None
    assert store.count() == 2


@pytest.mark.django_db
def test_delete_favorite_by_id() -> None:
    store = FavoritesStore("test-profile")
    kept = store.add("Brussel", "Luik")
    dropped = store.add("Gent", "Antwerpen")

    store.delete(dropped.id)

    assert [favorite.id for favorite in store.load_all()] == [kept.id]
    with pytest.raises(FavoriteNotFoundError):
        store.delete(dropped.id)
    with pytest.raises(LookupError):
        store.get(dropped.id)


@pytest.mark.django_db
def test_favorites_are_scoped_per_profile() -> None:
    favorite = FavoritesStore("first").add("Brussel", "Luik")

    assert FavoritesStore("second").load_all() == []
    with pytest.raises(FavoriteNotFoundError):
        FavoritesStore("second").delete(favorite.id)


@pytest.mark.django_db
@pytest.mark.parametrize(
    "departure,destination,consumption,fuel_kind",
    [
        ("", "Luik", None, None),
        ("Brussel", "Luik", 40, None),
        ("Brussel", "Luik", "veel", None),
        ("Brussel", "Luik", None, "kerosene"),
    ],
)
def test_invalid_favorites_are_rejected(departure, destination, consumption, fuel_kind) -> None:
    store = FavoritesStore("test-profile")

    with pytest.raises(ValidationError):
        store.add(departure, destination, consumption, fuel_kind)

    assert store.count() == 0
