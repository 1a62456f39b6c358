from classes import Card
from scheduler import Scheduler
from tests.conftest import RecordingPresentation


class StubResolver:
    """Resolver stand-in that records flips and can be forced busy."""

    def __init__(self):
        self.is_busy = False
        self.flipped = []

    def on_card_flipped(self, card):
        self.flipped.append(card)


def make_card(card_id=3):
    scheduler = Scheduler()
    resolver = StubResolver()
    presentation = RecordingPresentation()
    card = Card(card_id, 0, scheduler, resolver, presentation, flip_duration=0.3)
    return card, scheduler, resolver, presentation


def test_request_flip_starts_animation_and_notifies_resolver():
    card, scheduler, resolver, presentation = make_card()
    assert card.request_flip()
    assert card.is_animating
    assert not card.is_face_up
    assert resolver.flipped == [card]

    # face swaps at the midpoint
    scheduler.tick(0.15)
    assert card.is_face_up
    assert card.is_animating
    assert ("render_card", 0, True, 3) in presentation.calls

    scheduler.tick(0.15)
    assert card.is_face_up
    assert not card.is_animating
    assert card.flip_progress == 0.0


def test_flip_progress_moves_forward_during_animation():
    card, scheduler, _, _ = make_card()
    card.request_flip()
    samples = []
    for _ in range(6):
        scheduler.tick(0.05)
        samples.append(card.flip_progress)
    assert samples[:5] == sorted(samples[:5])
    assert 0.0 < samples[2] < 1.0


def test_request_flip_is_ignored_while_animating_or_face_up():
    card, scheduler, resolver, _ = make_card()
    card.request_flip()
    assert not card.request_flip()
    scheduler.tick(0.3)
    scheduler.tick(0.01)
    assert card.is_face_up
    assert not card.request_flip()
    assert resolver.flipped == [card]


def test_request_flip_is_ignored_when_resolver_busy():
    card, _, resolver, _ = make_card()
    resolver.is_busy = True
    assert not card.request_flip()
    assert not card.is_animating
    assert resolver.flipped == []


def test_matched_card_cannot_flip_or_reset():
    card, scheduler, _, _ = make_card()
    card.request_flip()
    scheduler.tick(0.15)
    scheduler.tick(0.15)
    card.match()
    card.match()
    assert card.is_matched
    assert not card.reset_flip_animated()
    assert card.is_face_up


def test_reset_flip_animated_turns_card_face_down():
    card, scheduler, _, presentation = make_card()
    assert not card.reset_flip_animated()  # already face down

    card.request_flip()
    assert not card.reset_flip_animated()  # mid-flip
    scheduler.tick(0.15)
    scheduler.tick(0.15)

    assert card.reset_flip_animated()
    scheduler.tick(0.15)
    assert not card.is_face_up
    scheduler.tick(0.15)
    assert not card.is_animating
    assert ("render_card", 0, False, 3) in presentation.calls


def test_destroyed_card_ignores_requests_and_pending_animation():
    card, scheduler, resolver, presentation = make_card()
    card.request_flip()
    card.destroy()
    scheduler.tick(0.15)
    assert not card.is_face_up
    assert not card.request_flip()
    assert not card.reset_flip_animated()
    assert all(call[0] != "render_card" for call in presentation.calls)


def test_single_long_frame_completes_the_whole_flip():
    card, scheduler, _, presentation = make_card()
    card.request_flip()
    scheduler.tick(1.0)
    assert card.is_face_up
    assert not card.is_animating
    assert card.flip_progress == 0.0
    assert ("render_card", 0, True, 3) in presentation.calls
