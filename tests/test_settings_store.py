import pytest

from shared.settings_store import FirestoreSettingsStore


class _Snap:
    def __init__(self, data):
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return self._data


class _FakeFirestore:
    def __init__(self, docs):
        self.docs = docs
        self.reads = []

    def collection(self, name):
        fs = self

        class _Col:
            def document(self, doc_id):
                class _Doc:
                    def get(self_inner):
                        fs.reads.append(f"{name}/{doc_id}")
                        return _Snap(fs.docs.get(f"{name}/{doc_id}"))

                return _Doc()

        return _Col()


def test_reads_configured_document_every_time() -> None:
    db = _FakeFirestore({"settings/gemini": {"apiKey": " abc ", "model": "gemini-2.5-pro"}})
    store = FirestoreSettingsStore(client=db)
    first = store.load()
    store.load()
    assert first.api_key == "abc"
    assert first.model == "gemini-2.5-pro"
    assert db.reads == ["settings/gemini", "settings/gemini"]


def test_missing_document_returns_none() -> None:
    store = FirestoreSettingsStore(collection="config", document="ai", client=_FakeFirestore({}))
    assert store.load() is None


@pytest.mark.parametrize("data", [{}, {"apiKey": None}, {"apiKey": 42, "model": 7}])
def test_unusable_fields_become_blank(data) -> None:
    store = FirestoreSettingsStore(client=_FakeFirestore({"settings/gemini": data}))
    loaded = store.load()
    assert loaded.api_key == ""
    assert loaded.model is None


def test_read_errors_propagate() -> None:
    class _Broken:
        def collection(self, name):
            raise RuntimeError("unavailable")

    with pytest.raises(RuntimeError):
        FirestoreSettingsStore(client=_Broken()).load()
