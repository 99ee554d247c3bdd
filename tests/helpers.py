"""
In-memory stand-ins for the browser extractor and the preference store.
"""

from ligmir.infrastructure.data_models import CharacterSheet
from ligmir.infrastructure.errors import StoreError


class FakeExtractor:
    """Returns a fixed sheet, or raises a fixed error, and records requested URLs."""

    def __init__(self, sheet=None, error=None):
        self.sheet = sheet if sheet is not None else CharacterSheet({"Perception": 3})
        self.error = error
        self.calls = []

    def extract(self, url, timeout=None):
        self.calls.append((url, timeout))
        if self.error is not None:
            raise self.error
        return self.sheet


class FakeStore:
    """Dictionary-backed preference store that can be told to fail."""

    def __init__(self, fail_reads=False, fail_writes=False):
        self.data = {}
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes

    def get_character_id(self, user_id):
        if self.fail_reads:
            raise StoreError("connection refused")
        return self.data.get(user_id)

    def set_character_id(self, user_id, character_id):
        if self.fail_writes:
            raise StoreError("connection refused")
        self.data[user_id] = character_id
