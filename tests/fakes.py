from __future__ import annotations

import threading

from gallery.domain.models import PhotoRecord


def make_photos(page: int, count: int) -> list[PhotoRecord]:
    return [
        PhotoRecord(
            id=f"p{page}-{index}",
            thumbnail_url=f"https://images.example.test/{page}/{index}.jpg",
            author_name=f"Author {page}.{index}",
            alt_text=f"photo {index} of page {page}",
        )
        for index in range(count)
    ]


class FakeFeedClient:
    """Serves canned pages; an entry may be an exception to raise instead."""

    def __init__(self, pages=None):
        self.pages = pages or {}
        self.calls = []
        self.gate = None

    def hold(self):
        self.gate = threading.Event()
        return self.gate

    def get_page(self, page):
        self.calls.append(page)
        if self.gate is not None:
            self.gate.wait(5)
        result = self.pages.get(page, [])
        if isinstance(result, Exception):
            raise result
        return list(result)


class FakeObservation:
    def __init__(self, element, callback):
        self.element = element
        self.callback = callback
        self.disconnected = False

    def disconnect(self):
        self.disconnected = True

    def fire(self, visible):
        self.callback(visible)


class FakeObserver:
    def __init__(self):
        self.observations = []

    def observe(self, element, callback):
        observation = FakeObservation(element, callback)
        self.observations.append(observation)
        return observation

    def active(self):
        return [item for item in self.observations if not item.disconnected]
