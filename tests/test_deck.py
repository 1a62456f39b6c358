import random
from collections import Counter

import pytest

from classes import generate_deck, shuffle


@pytest.mark.parametrize("rows,cols", [(1, 1), (2, 2), (2, 3), (3, 3), (4, 5), (5, 5), (6, 6)])
def test_deck_fills_every_cell_with_pairs_and_at_most_one_singleton(rows, cols):
    deck = generate_deck(rows, cols, palette_size=4, rng=random.Random(rows * 10 + cols))
    assert len(deck) == rows * cols

    odd_counts = [card_id for card_id, count in Counter(deck).items() if count % 2]
    if (rows * cols) % 2:
        assert len(odd_counts) == 1
    else:
        assert odd_counts == []


def test_pairs_use_sequential_ids_while_palette_is_large_enough():
    deck = generate_deck(3, 4, palette_size=10, rng=random.Random(7))
    assert Counter(deck) == {i: 2 for i in range(6)}


def test_small_palette_falls_back_to_random_ids_in_range():
    deck = generate_deck(4, 4, palette_size=3, rng=random.Random(3))
    counts = Counter(deck)
    assert set(counts) <= {0, 1, 2}
    assert all(count % 2 == 0 for count in counts.values())
    # the first three pairs always use ids 0, 1 and 2
    assert all(counts[i] >= 2 for i in range(3))


def test_two_by_two_with_single_face_is_two_pairs_of_the_same_id():
    deck = generate_deck(2, 2, palette_size=1, rng=random.Random(0))
    assert deck == [0, 0, 0, 0]


def test_invalid_palette_size_is_rejected():
    with pytest.raises(ValueError):
        generate_deck(2, 2, palette_size=0)


def test_shuffle_is_a_permutation():
    rng = random.Random(42)
    items = [5, 1, 1, 2, 3, 3, 9, 0]
    shuffled = shuffle(list(items), rng)
    assert sorted(shuffled) == sorted(items)


def test_shuffle_works_in_place_and_handles_short_lists():
    items = [1, 2, 3]
    assert shuffle(items, random.Random(1)) is items
    assert shuffle([], random.Random(1)) == []
    assert shuffle([4], random.Random(1)) == [4]


def test_shuffle_reaches_every_arrangement():
    rng = random.Random(99)
    seen = {tuple(shuffle([0, 1, 2], rng)) for _ in range(300)}
    assert len(seen) == 6
