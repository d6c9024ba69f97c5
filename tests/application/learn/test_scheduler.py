import random

import pytest

from unibrain.application.learn.scheduler import MasteryScheduler
from unibrain.domain.exceptions import UnknownCardError
from unibrain.domain.models import Flashcard


@pytest.fixture
def scheduler(stub_random, clock):
    return MasteryScheduler(rng=stub_random, clock=clock)


# ---------- Session Start ----------


def test_start_session_creates_one_state_per_card(scheduler, flashcards):
    state = scheduler.start_session(flashcards)

    assert len(state.cards) == 3
    for card_id, card_state in state.cards.items():
        assert card_state.card_id == card_id
        assert card_state.card is flashcards[card_id]
        assert card_state.mastery == 0
        assert card_state.times_correct == 0
        assert card_state.times_incorrect == 0
        assert card_state.last_seen_at is None
    assert state.current is not None
    assert not state.complete


def test_identical_cards_are_tracked_separately(scheduler):
    card = Flashcard(question="Q", answer="A")
    state = scheduler.start_session([card, Flashcard(question="Q", answer="A")])

    assert len(state.cards) == 2
    scheduler.record_response(state, 0, True)
    assert state.cards[0].mastery == 25
    assert state.cards[1].mastery == 0


def test_empty_deck_is_terminal_not_an_error(scheduler, stub_random):
    state = scheduler.start_session([])

    assert state.is_empty
    assert state.complete
    assert state.current is None
    assert state.avg_mastery == 0.0
    assert scheduler.select_next(state) is None
    assert stub_random.calls == []


# ---------- Selection ----------


def test_select_prefers_lowest_mastery_without_jitter(scheduler, flashcards):
    state = scheduler.start_session(flashcards)
    state.cards[0].mastery = 50
    state.cards[1].mastery = 10
    state.cards[2].mastery = 75

    assert scheduler.select_next(state).card_id == 1
    assert state.current.card_id == 1


def test_jitter_can_overcome_a_small_mastery_gap(make_random, clock, flashcards):
    state = MasteryScheduler(rng=make_random([0.0]), clock=clock).start_session(flashcards)
    state.cards[1].mastery = 10

    # weights: card0 = 100 + 0, card1 = 90 + 15, card2 = 100 + 2
    picker = MasteryScheduler(rng=make_random([0.0, 15.0, 2.0]), clock=clock)
    assert picker.select_next(state).card_id == 1


def test_jitter_is_drawn_from_zero_to_twenty(scheduler, flashcards, stub_random):
    state = scheduler.start_session(flashcards)

    assert stub_random.calls == [(0, 20.0)] * 3
    scheduler.select_next(state)
    assert len(stub_random.calls) == 6


def test_select_skips_mastered_cards(scheduler, flashcards):
    state = scheduler.start_session(flashcards)
    state.cards[0].mastery = 100
    state.cards[2].mastery = 100

    for _ in range(5):
        assert scheduler.select_next(state).card_id == 1


def test_select_completes_when_everything_is_mastered(scheduler, flashcards):
    state = scheduler.start_session(flashcards)
    for card_state in state.cards.values():
        card_state.mastery = 100

    assert scheduler.select_next(state) is None
    assert state.complete
    assert state.current is None


def test_seeded_random_gives_reproducible_order(flashcards):
    def run(seed):
        scheduler = MasteryScheduler(rng=random.Random(seed))
        state = scheduler.start_session(flashcards * 3)
        order = []
        while not state.complete:
            card = state.current
            order.append(card.card_id)
            if not scheduler.record_response(state, card.card_id, True):
                scheduler.select_next(state)
        return order

    assert run(7) == run(7)


# ---------- Responses ----------


def test_correct_response_adds_25(scheduler, flashcards, clock):
    state = scheduler.start_session(flashcards)

    scheduler.record_response(state, 0, True)

    card_state = state.cards[0]
    assert card_state.mastery == 25
    assert card_state.times_correct == 1
    assert card_state.times_incorrect == 0
    assert card_state.last_seen_at == clock.now


def test_incorrect_response_subtracts_15_and_floors_at_zero(scheduler, flashcards):
    state = scheduler.start_session(flashcards)

    scheduler.record_response(state, 0, False)
    assert state.cards[0].mastery == 0
    assert state.cards[0].times_incorrect == 1
    assert state.cards[0].seen

    state.cards[1].mastery = 40
    scheduler.record_response(state, 1, False)
    assert state.cards[1].mastery == 25


def test_four_correct_reach_full_mastery_and_cap(scheduler, flashcards):
    state = scheduler.start_session(flashcards)

    for expected in (25, 50, 75, 100, 100):
        scheduler.record_response(state, 2, True)
        assert state.cards[2].mastery == expected


def test_miss_after_full_mastery_drops_to_85(scheduler, flashcards):
    state = scheduler.start_session(flashcards)
    for _ in range(4):
        scheduler.record_response(state, 0, True)

    scheduler.record_response(state, 0, False)
    assert state.cards[0].mastery == 85


def test_unknown_card_is_a_contract_violation(scheduler, flashcards):
    state = scheduler.start_session(flashcards)

    with pytest.raises(UnknownCardError) as exc_info:
        scheduler.record_response(state, 99, True)
    assert exc_info.value.card_id == 99


def test_stats_track_streaks_and_accuracy(scheduler, flashcards):
    state = scheduler.start_session(flashcards)

    for knew in (True, True, True, False, True):
        scheduler.record_response(state, 0, knew)

    stats = state.stats
    assert stats.cards_studied == 5
    assert stats.correct_count == 4
    assert stats.current_streak == 1
    assert stats.best_streak == 3
    assert stats.accuracy == 80


# ---------- Properties ----------


@pytest.mark.parametrize("seed", range(10))
def test_mastery_always_within_bounds(seed, flashcards):
    rng = random.Random(seed)
    scheduler = MasteryScheduler(rng=rng)
    state = scheduler.start_session(flashcards)

    for _ in range(200):
        card_id = rng.randrange(len(flashcards))
        scheduler.record_response(state, card_id, rng.random() < 0.5)
        assert all(0 <= s.mastery <= 100 for s in state.cards.values())


@pytest.mark.parametrize("seed", range(5))
def test_exposure_never_reverts(seed, flashcards):
    rng = random.Random(seed)
    scheduler = MasteryScheduler(rng=rng)
    state = scheduler.start_session(flashcards)
    seen: set[int] = set()

    for _ in range(50):
        card_id = rng.randrange(len(flashcards))
        scheduler.record_response(state, card_id, rng.random() < 0.5)
        seen.add(card_id)
        assert {s.card_id for s in state.cards.values() if s.seen} == seen


def test_never_complete_while_a_card_is_unseen(scheduler):
    deck = [Flashcard(question=f"Q{i}", answer=f"A{i}") for i in range(5)]
    state = scheduler.start_session(deck)

    for card_id in range(4):
        for _ in range(6):
            assert scheduler.record_response(state, card_id, True) is False

    assert state.avg_mastery == 80
    assert state.cards[4].last_seen_at is None
    assert not state.complete


@pytest.mark.parametrize("n_cards", [1, 2, 5, 12])
def test_all_correct_session_completes_within_four_rounds(n_cards):
    deck = [Flashcard(question=f"Q{i}", answer=f"A{i}") for i in range(n_cards)]
    scheduler = MasteryScheduler(rng=random.Random(n_cards))
    state = scheduler.start_session(deck)

    while not state.complete:
        assert state.stats.cards_studied < 4 * n_cards
        if not scheduler.record_response(state, state.current.card_id, True):
            scheduler.select_next(state)

    assert state.all_seen
    assert state.avg_mastery >= 80
    assert state.stats.cards_studied <= 4 * n_cards


def test_completion_uses_average_not_per_card_threshold(scheduler):
    # One card left at 0 still lets the session end when the average reaches 80.
    deck = [Flashcard(question=f"Q{i}", answer=f"A{i}") for i in range(5)]
    state = scheduler.start_session(deck)
    for card_id in range(4):
        for _ in range(4):
            scheduler.record_response(state, card_id, True)

    assert scheduler.record_response(state, 4, False) is True
    assert state.complete
    assert state.cards[4].mastery == 0
    assert state.current is None


# ---------- Reset ----------


def test_reset_discards_all_progress(scheduler, flashcards):
    state = scheduler.start_session(flashcards)
    for card_id in range(3):
        scheduler.record_response(state, card_id, True)

    fresh = scheduler.reset_session(flashcards)

    assert all(s.mastery == 0 and s.last_seen_at is None for s in fresh.cards.values())
    assert fresh.stats.cards_studied == 0
    assert fresh.stats.current_streak == 0
    assert fresh.current is not None
