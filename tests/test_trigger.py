from gallery.feed.trigger import VisibilityTrigger

from fakes import FakeObserver


class TriggerHarness:
    def __init__(self):
        self.observer = FakeObserver()
        self.loading = False
        self.fired = 0
        self.trigger = VisibilityTrigger(
            observer=self.observer,
            is_loading=lambda: self.loading,
            on_visible=self.on_visible,
        )

    def on_visible(self):
        self.fired += 1


def test_attach_creates_single_observation():
    harness = TriggerHarness()

    harness.trigger.attach("p1-19")

    assert [item.element for item in harness.observer.active()] == ["p1-19"]
    assert harness.trigger.observed_element == "p1-19"
    assert harness.trigger.is_attached


def test_reattach_tears_down_previous_observation():
    harness = TriggerHarness()

    harness.trigger.attach("p1-19")
    harness.trigger.attach("p2-14")
    harness.trigger.attach("p3-9")

    assert [item.element for item in harness.observer.active()] == ["p3-9"]
    assert all(item.disconnected for item in harness.observer.observations[:2])


def test_attach_is_skipped_while_loading():
    harness = TriggerHarness()
    harness.trigger.attach("p1-19")

    harness.loading = True
    harness.trigger.attach("p2-14")

    assert harness.observer.active() == []
    assert harness.trigger.observed_element is None
    assert not harness.trigger.is_attached


def test_attach_reads_loading_state_at_call_time():
    harness = TriggerHarness()
    harness.loading = True
    harness.trigger.attach("p1-19")

    harness.loading = False
    harness.trigger.attach("p1-19")

    assert [item.element for item in harness.observer.active()] == ["p1-19"]


def test_attach_without_element_observes_nothing():
    harness = TriggerHarness()
    harness.trigger.attach("p1-19")

    harness.trigger.attach(None)

    assert harness.observer.active() == []


def test_fires_once_per_transition_into_view():
    harness = TriggerHarness()
    harness.trigger.attach("p1-19")
    observation = harness.observer.observations[0]

    observation.fire(False)
    observation.fire(True)
    observation.fire(True)
    observation.fire(True)

    assert harness.fired == 1


def test_leaving_and_reentering_view_fires_again():
    harness = TriggerHarness()
    harness.trigger.attach("p1-19")
    observation = harness.observer.observations[0]

    observation.fire(True)
    observation.fire(False)
    observation.fire(True)

    assert harness.fired == 2


def test_new_observation_starts_out_of_view():
    harness = TriggerHarness()
    harness.trigger.attach("p1-19")
    harness.observer.observations[0].fire(True)

    harness.trigger.attach("p2-14")
    harness.observer.observations[1].fire(True)

    assert harness.fired == 2


def test_callbacks_from_torn_down_observation_are_ignored():
    harness = TriggerHarness()
    harness.trigger.attach("p1-19")
    stale = harness.observer.observations[0]
    harness.trigger.attach("p2-14")

    stale.fire(True)

    assert harness.fired == 0


def test_detach_disconnects():
    harness = TriggerHarness()
    harness.trigger.attach("p1-19")

    harness.trigger.detach()
    harness.trigger.detach()

    assert harness.observer.active() == []
    assert harness.trigger.observed_element is None
