"""Tests for snapshot storage and engine export/import."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from bayesian_classifier import (
    BayesianClassifier,
    ClassifierConfig,
    FileStorage,
    MemoryStorage,
    ModelSnapshot,
    PersistenceError,
    Storage,
)


@pytest.fixture
def snapshot() -> ModelSnapshot:
    return ModelSnapshot(
        categories={"spam": 2.0, "ham": 1.0},
        words={"pills": {"spam": 2.0}, "meeting": {"ham": 1.0}, "offer": {"spam": 1.0, "ham": 1.0}},
    )


class FailingStorage(Storage):
    """Storage whose every operation fails."""

    def __init__(self) -> None:
        self.saves = 0

    def exists(self) -> bool:
        return True

    def save(self, snapshot: ModelSnapshot) -> None:
        self.saves += 1
        raise PersistenceError("disk full")

    def load(self) -> ModelSnapshot:
        raise PersistenceError("unreadable")


# ---------------------------------------------------------------------------
# ModelSnapshot
# ---------------------------------------------------------------------------

class TestModelSnapshot:
    """Tests for ModelSnapshot serialization."""

    def test_dict_layout(self, snapshot: ModelSnapshot) -> None:
        data = snapshot.to_dict()
        assert set(data) == {"category", "words"}
        assert data["category"] == {"spam": 2.0, "ham": 1.0}

    def test_from_dict(self, snapshot: ModelSnapshot) -> None:
        assert ModelSnapshot.from_dict(snapshot.to_dict()) == snapshot

    def test_missing_sections_are_empty(self) -> None:
        restored = ModelSnapshot.from_dict({})
        assert restored.is_empty

    def test_rejects_non_mapping(self) -> None:
        with pytest.raises(ValueError):
            ModelSnapshot.from_dict([1, 2, 3])  # type: ignore[arg-type]

    def test_to_tables(self, snapshot: ModelSnapshot) -> None:
        terms, categories = snapshot.to_tables()
        assert terms.lookup("offer", "ham") == 1.0
        assert categories.total() == 3.0


# ---------------------------------------------------------------------------
# Storage backends
# ---------------------------------------------------------------------------

class TestMemoryStorage:
    """Tests for MemoryStorage."""

    def test_empty(self, memory_storage: MemoryStorage) -> None:
        assert not memory_storage.exists()
        with pytest.raises(PersistenceError):
            memory_storage.load()

    def test_round_trip(self, memory_storage: MemoryStorage, snapshot: ModelSnapshot) -> None:
        memory_storage.save(snapshot)
        assert memory_storage.exists()
        assert memory_storage.load() == snapshot

    def test_saved_copy_is_isolated(self, memory_storage: MemoryStorage, snapshot: ModelSnapshot) -> None:
        memory_storage.save(snapshot)
        snapshot.words["pills"]["spam"] = 100.0
        assert memory_storage.load().words["pills"]["spam"] == 2.0


class TestFileStorage:
    """Tests for FileStorage."""

    def test_missing_file(self, file_storage: FileStorage) -> None:
        assert not file_storage.exists()
        with pytest.raises(PersistenceError, match="No model file"):
            file_storage.load()

    def test_round_trip(self, file_storage: FileStorage, snapshot: ModelSnapshot) -> None:
        file_storage.save(snapshot)
        assert file_storage.exists()
        assert file_storage.load() == snapshot

    def test_creates_parent_directories(self, file_storage: FileStorage, model_path: Path,
                                        snapshot: ModelSnapshot) -> None:
        assert not model_path.parent.exists()
        file_storage.save(snapshot)
        assert model_path.is_file()

    def test_writes_json(self, file_storage: FileStorage, model_path: Path,
                         snapshot: ModelSnapshot) -> None:
        file_storage.save(snapshot)
        data = json.loads(model_path.read_text(encoding="utf-8"))
        assert data["words"]["offer"] == {"spam": 1.0, "ham": 1.0}

    def test_no_temp_files_left(self, file_storage: FileStorage, model_path: Path,
                                snapshot: ModelSnapshot) -> None:
        file_storage.save(snapshot)
        file_storage.save(snapshot)
        assert [p.name for p in model_path.parent.iterdir()] == ["model.json"]

    def test_unicode_terms(self, file_storage: FileStorage) -> None:
        snap = ModelSnapshot(categories={"体育": 1.0}, words={"足球": {"体育": 1.0}})
        file_storage.save(snap)
        assert file_storage.load() == snap

    def test_corrupt_file(self, file_storage: FileStorage, model_path: Path) -> None:
        model_path.parent.mkdir(parents=True)
        model_path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PersistenceError, match="Corrupt"):
            file_storage.load()

    def test_malformed_structure(self, file_storage: FileStorage, model_path: Path) -> None:
        model_path.parent.mkdir(parents=True)
        model_path.write_text(json.dumps({"category": {"spam": "many"}}), encoding="utf-8")
        with pytest.raises(PersistenceError):
            file_storage.load()

    def test_unwritable_target(self, tmp_path: Path, snapshot: ModelSnapshot) -> None:
        # The target path is an existing directory, so the replace fails
        target = tmp_path / "occupied"
        target.mkdir()
        (target / "keep").write_text("x", encoding="utf-8")
        with pytest.raises(PersistenceError, match="Failed to save"):
            FileStorage(target).save(snapshot)


# ---------------------------------------------------------------------------
# Engine export / import
# ---------------------------------------------------------------------------

class TestExportImport:
    """Tests for BayesianClassifier persistence."""

    def _engine(self, storage: Storage, **kwargs) -> BayesianClassifier:
        return BayesianClassifier(
            ClassifierConfig(default_prob=0.5, default_weight=1.0, storage=storage), **kwargs
        )

    def test_round_trip(self, memory_storage: MemoryStorage) -> None:
        source = self._engine(memory_storage)
        source.train("buy cheap pills", "spam")
        source.train("meeting agenda attached", "ham")
        source.train_delimited("a/b/a", "x")
        source.export()

        target = self._engine(memory_storage, autoload=False)
        assert target.snapshot().is_empty
        target.import_()
        assert target.snapshot() == source.snapshot()
        assert target.categorize("buy pills") == source.categorize("buy pills")

    def test_import_replaces_model(self, memory_storage: MemoryStorage) -> None:
        engine = self._engine(memory_storage)
        engine.train("original words", "old")
        engine.export()
        engine.train("later words", "new")
        engine.import_()
        assert dict(engine.list_categories()) == {"old": 1.0}
        assert engine.score_word("later") == []

    def test_autoload_on_construction(self, file_storage: FileStorage) -> None:
        first = self._engine(file_storage)
        first.train("buy cheap pills", "spam")
        first.export()

        second = self._engine(FileStorage(file_storage.path))
        assert second.snapshot() == first.snapshot()

    def test_missing_snapshot_starts_empty(self, file_storage: FileStorage) -> None:
        engine = self._engine(file_storage)
        assert engine.snapshot().is_empty

    def test_corrupt_snapshot_fails_construction(self, file_storage: FileStorage,
                                                 model_path: Path) -> None:
        model_path.parent.mkdir(parents=True)
        model_path.write_text("garbage", encoding="utf-8")
        with pytest.raises(PersistenceError):
            self._engine(file_storage)

    def test_export_without_storage(self, classifier: BayesianClassifier) -> None:
        with pytest.raises(PersistenceError, match="No storage"):
            classifier.export()
        with pytest.raises(PersistenceError, match="No storage"):
            classifier.import_()
        assert classifier.export_now() is False

    def test_export_now(self, memory_storage: MemoryStorage) -> None:
        engine = self._engine(memory_storage)
        engine.train("hello world", "greeting")
        assert engine.export_now() is True
        assert memory_storage.load().categories == {"greeting": 1.0}

    def test_failed_export_keeps_serving(self) -> None:
        engine = self._engine(FailingStorage(), autoload=False)
        engine.train("buy cheap pills", "spam")
        with pytest.raises(PersistenceError):
            engine.export()
        assert engine.export_now() is False
        engine.train("more pills", "spam")
        assert engine.list_categories()["spam"] == 2

    def test_failed_import_keeps_model(self) -> None:
        engine = self._engine(FailingStorage(), autoload=False)
        engine.train("buy cheap pills", "spam")
        with pytest.raises(PersistenceError):
            engine.import_()
        assert engine.list_categories()["spam"] == 1

    def test_snapshot_is_detached(self, trained: BayesianClassifier) -> None:
        snap = trained.snapshot()
        trained.train("cheap pills again", "spam")
        assert snap.categories["spam"] == 4.0
        assert snap.words["cheap"] == {"spam": 2.0}
