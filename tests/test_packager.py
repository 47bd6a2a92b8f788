"""Tests for catalog packaging."""

import shutil
from pathlib import Path

import pytest
import trimesh

from roomcat.catalog import (
    CATALOG_INDEX_FILENAME,
    EMPTY_FILENAME,
    Catalog,
    CatalogEntry,
    Vocabulary,
    check_hierarchy,
    generate_catalog,
    is_generated_model,
)
from roomcat.errors import (
    CannotConvertModel,
    CannotCreateCatalog,
    FolderHierarchyCompromised,
    FolderHierarchyNotCreated,
    NonExistingPath,
    NotADirectory,
    WrongExtension,
)

from conftest import write_box_model


STORAGE_DEFAULT = Path("Resources") / "Storage" / "Default"


# ============================================================================
# Input validation
# ============================================================================


class TestInputValidation:
    """Tests for generate_catalog preconditions."""

    def test_missing_input(self, tmp_path):
        with pytest.raises(NonExistingPath, match="doesn't exist"):
            generate_catalog(tmp_path / "missing", tmp_path / "Out.bundle")

    def test_input_is_a_file(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("x")
        with pytest.raises(NotADirectory):
            generate_catalog(path, tmp_path / "Out.bundle")

    def test_wrong_bundle_extension(self, catalog_dir, tmp_path):
        with pytest.raises(WrongExtension, match=r"\.bundle"):
            generate_catalog(catalog_dir, tmp_path / "Out.zip")

    def test_bundle_extension_is_case_insensitive(self, catalog_dir, tmp_path):
        report = generate_catalog(catalog_dir, tmp_path / "Out.BUNDLE")
        assert report.bundle_path.is_dir()

    def test_bundle_inside_input_rejected(self, catalog_dir):
        with pytest.raises(CannotCreateCatalog):
            generate_catalog(catalog_dir, catalog_dir / "Out.bundle")


class TestCheckHierarchy:
    """Tests for the top-level shape check."""

    def test_empty_folder_not_created(self, tmp_path):
        with pytest.raises(FolderHierarchyNotCreated, match="create-folders"):
            check_hierarchy(tmp_path)

    def test_stray_file_compromises(self, catalog_dir):
        (catalog_dir / "notes.txt").write_text("todo")
        with pytest.raises(FolderHierarchyCompromised):
            check_hierarchy(catalog_dir)

    def test_stray_folder_compromises(self, catalog_dir):
        (catalog_dir / "Models").mkdir()
        with pytest.raises(FolderHierarchyCompromised):
            check_hierarchy(catalog_dir)

    def test_hidden_files_and_index_allowed(self, catalog_dir):
        (catalog_dir / ".DS_Store").write_bytes(b"")
        Catalog.build_default().write(catalog_dir / CATALOG_INDEX_FILENAME)

        check_hierarchy(catalog_dir)

    def test_generate_rejects_compromised_hierarchy(self, catalog_dir, tmp_path):
        (catalog_dir / "readme.md").write_text("# catalog")
        with pytest.raises(FolderHierarchyCompromised):
            generate_catalog(catalog_dir, tmp_path / "Out.bundle")
        assert not (tmp_path / "Out.bundle").exists()


# ============================================================================
# Packaging
# ============================================================================


class TestGenerateCatalog:
    """Tests for model discovery, conversion and bundle layout."""

    def test_empty_folders_get_markers(self, catalog_dir, tmp_path):
        bundle = tmp_path / "Out.bundle"
        report = generate_catalog(catalog_dir, bundle)

        assert report.missing_count == report.entry_count == len(Catalog.build_default())
        catalog = Catalog.read(bundle / CATALOG_INDEX_FILENAME)
        for entry in catalog:
            assert entry.model_filename is None
            assert (bundle / entry.folder_path / EMPTY_FILENAME).is_file()
            assert (bundle / entry.folder_path / EMPTY_FILENAME).stat().st_size == 0

    def test_storage_model_end_to_end(self, catalog_dir, tmp_path):
        write_box_model(catalog_dir / STORAGE_DEFAULT / "cabinet.obj", (1.0, 2.0, 0.5))
        bundle = tmp_path / "RoomPlanCatalog.bundle"

        report = generate_catalog(catalog_dir, bundle)

        catalog = Catalog.read(bundle / CATALOG_INDEX_FILENAME)
        with_models = [entry for entry in catalog if entry.has_model]
        assert len(with_models) == 1
        entry = with_models[0]
        assert entry.category == "storage"
        assert entry.attributes == ()
        assert entry.model_filename == "cabinet.rooms.glb"
        model_path = bundle / entry.folder_path / entry.model_filename
        assert is_generated_model(model_path)
        assert isinstance(trimesh.load(str(model_path)), (trimesh.Scene, trimesh.Trimesh))
        assert report.missing_count == report.entry_count - 1

    def test_source_models_pruned_from_bundle(self, catalog_dir, tmp_path):
        source = write_box_model(catalog_dir / STORAGE_DEFAULT / "cabinet.obj")
        bundle = tmp_path / "Out.bundle"

        generate_catalog(catalog_dir, bundle)

        assert sorted(p.name for p in (bundle / STORAGE_DEFAULT).iterdir()) == [
            "cabinet.rooms.glb"
        ]
        # The input folder keeps its sources
        assert source.is_file()
        assert (catalog_dir / STORAGE_DEFAULT / "cabinet.rooms.glb").is_file()

    def test_stale_marker_removed_when_model_added(self, catalog_dir, tmp_path):
        generate_catalog(catalog_dir, tmp_path / "First.bundle")
        assert (catalog_dir / STORAGE_DEFAULT / EMPTY_FILENAME).is_file()

        write_box_model(catalog_dir / STORAGE_DEFAULT / "cabinet.obj")
        generate_catalog(catalog_dir, tmp_path / "Second.bundle")

        assert not (catalog_dir / STORAGE_DEFAULT / EMPTY_FILENAME).exists()
        assert not (tmp_path / "Second.bundle" / STORAGE_DEFAULT / EMPTY_FILENAME).exists()

    def test_generated_models_reused_byte_identical(self, catalog_dir, tmp_path):
        reference = write_box_model(tmp_path / "reference.rooms.glb")
        original = reference.read_bytes()
        catalog = Catalog.build_default()
        for entry in catalog:
            shutil.copyfile(reference, catalog_dir / entry.folder_path / "model.rooms.glb")

        bundle = tmp_path / "Out.bundle"
        report = generate_catalog(catalog_dir, bundle)

        assert report.missing_count == 0
        for entry in Catalog.read(bundle / CATALOG_INDEX_FILENAME):
            assert entry.model_filename == "model.rooms.glb"
            assert (bundle / entry.folder_path / "model.rooms.glb").read_bytes() == original
            assert (catalog_dir / entry.folder_path / "model.rooms.glb").read_bytes() == original

    def test_glb_source_copied_unchanged(self, catalog_dir, tmp_path):
        source = write_box_model(catalog_dir / STORAGE_DEFAULT / "cabinet.glb")

        generate_catalog(catalog_dir, tmp_path / "Out.bundle")

        generated = catalog_dir / STORAGE_DEFAULT / "cabinet.rooms.glb"
        assert generated.read_bytes() == source.read_bytes()

    def test_lexicographic_tie_break(self, catalog_dir, tmp_path):
        folder = catalog_dir / STORAGE_DEFAULT
        write_box_model(folder / "b_cabinet.obj")
        write_box_model(folder / "a_cabinet.obj")

        report = generate_catalog(catalog_dir, tmp_path / "Out.bundle")

        entry = report.catalog.find("storage")
        assert entry.model_filename == "a_cabinet.rooms.glb"
        assert not (folder / "b_cabinet.rooms.glb").exists()

    def test_unrecognized_files_ignored(self, catalog_dir, tmp_path):
        (catalog_dir / STORAGE_DEFAULT / "notes.txt").write_text("measure twice")

        report = generate_catalog(catalog_dir, tmp_path / "Out.bundle")

        assert report.catalog.find("storage").model_filename is None
        assert not (tmp_path / "Out.bundle" / STORAGE_DEFAULT / "notes.txt").exists()

    def test_missing_folders_omitted_from_index(self, catalog_dir, tmp_path):
        shutil.rmtree(catalog_dir / "Resources" / "Chair")

        report = generate_catalog(catalog_dir, tmp_path / "Out.bundle")

        assert all(entry.category != "chair" for entry in report.catalog)

    def test_index_written_to_input(self, catalog_dir, tmp_path):
        generate_catalog(catalog_dir, tmp_path / "Out.bundle")
        assert (catalog_dir / CATALOG_INDEX_FILENAME).is_file()

    def test_regenerate_replaces_bundle(self, catalog_dir, tmp_path):
        bundle = tmp_path / "Out.bundle"
        generate_catalog(catalog_dir, bundle)
        write_box_model(catalog_dir / STORAGE_DEFAULT / "cabinet.obj")

        report = generate_catalog(catalog_dir, bundle)

        assert report.catalog.find("storage").model_filename == "cabinet.rooms.glb"
        assert (bundle / STORAGE_DEFAULT / "cabinet.rooms.glb").is_file()
        assert [p.name for p in tmp_path.iterdir() if p.name.startswith(".")] == []

    def test_conversion_failure_is_fatal(self, catalog_dir, tmp_path, monkeypatch):
        write_box_model(catalog_dir / STORAGE_DEFAULT / "broken.obj")

        def fail_load(*args, **kwargs):
            raise ValueError("unreadable mesh")

        monkeypatch.setattr(trimesh, "load", fail_load)
        bundle = tmp_path / "Out.bundle"

        with pytest.raises(CannotConvertModel, match="broken.obj"):
            generate_catalog(catalog_dir, bundle)

        assert not bundle.exists()
        assert not (catalog_dir / STORAGE_DEFAULT / "broken.rooms.glb").exists()

    def test_drift_warning_for_orphaned_models(self, catalog_dir, tmp_path, caplog):
        Catalog([CatalogEntry(category="storage", model_filename="old.rooms.glb")]).write(
            catalog_dir / CATALOG_INDEX_FILENAME
        )
        vocabulary = Vocabulary(
            ["storage", "sofa"],
            {"SofaType": {"rectangular": "rectangular"}},
            {"sofa": ["SofaType"]},
        )

        with caplog.at_level("WARNING"):
            report = generate_catalog(catalog_dir, tmp_path / "Out.bundle", vocabulary=vocabulary)

        assert "Resources/Storage/Default/old.rooms.glb is no longer part of the catalog" in caplog.text
        assert [entry.folder_path for entry in report.catalog] == [
            "Resources/Sofa/Default",
            "Resources/Sofa/Rectangular",
        ]

    def test_unparseable_previous_index_ignored(self, catalog_dir, tmp_path, caplog):
        (catalog_dir / CATALOG_INDEX_FILENAME).write_bytes(b"corrupted")

        with caplog.at_level("WARNING"):
            generate_catalog(catalog_dir, tmp_path / "Out.bundle")

        assert "Ignoring previous catalog index" in caplog.text
        assert len(Catalog.read(catalog_dir / CATALOG_INDEX_FILENAME)) == len(Catalog.build_default())

    def test_drift_warning_for_removed_category(self, catalog_dir, tmp_path, caplog):
        Catalog([CatalogEntry(category="chair", model_filename="old.rooms.glb")]).write(
            catalog_dir / CATALOG_INDEX_FILENAME
        )
        vocabulary = Vocabulary(["storage"], {}, {})

        with caplog.at_level("WARNING"):
            report = generate_catalog(catalog_dir, tmp_path / "Out.bundle", vocabulary=vocabulary)

        assert "Resources/Chair/Default/old.rooms.glb is no longer part of the catalog" in caplog.text
        assert "Ignoring previous catalog index" not in caplog.text
        assert [entry.category for entry in report.catalog] == ["storage"]

    def test_drift_warning_for_removed_attribute_value(self, catalog_dir, tmp_path, caplog):
        vocabulary = Vocabulary.default()
        cabinet = vocabulary.attribute("storage", "StorageType.cabinet")
        Catalog([
            CatalogEntry(category="storage", attributes=(cabinet,), model_filename="cabinet.rooms.glb")
        ]).write(catalog_dir / CATALOG_INDEX_FILENAME)
        shelves_only = Vocabulary(
            ["storage"],
            {"StorageType": {"shelf": "shelf"}},
            {"storage": ["StorageType"]},
        )

        with caplog.at_level("WARNING"):
            generate_catalog(catalog_dir, tmp_path / "Out.bundle", vocabulary=shelves_only)

        assert "Resources/Storage/Cabinet/cabinet.rooms.glb is no longer part of the catalog" in caplog.text

    def test_no_drift_warning_for_kept_entries(self, catalog_dir, tmp_path, caplog):
        write_box_model(catalog_dir / STORAGE_DEFAULT / "cabinet.obj")
        generate_catalog(catalog_dir, tmp_path / "Out.bundle")

        with caplog.at_level("WARNING"):
            generate_catalog(catalog_dir, tmp_path / "Out.bundle")

        assert "no longer part of the catalog" not in caplog.text

    def test_floor_plan_files_ignored(self, catalog_dir, tmp_path):
        folder = catalog_dir / STORAGE_DEFAULT
        (folder / "plan.dxf").write_text("0\nSECTION\n2\nENTITIES\n0\nENDSEC\n0\nEOF\n")
        (folder / "points.xyz").write_text("0 0 0\n1 1 1\n")
        (folder / "models.zip").write_bytes(b"PK\x05\x06" + b"\x00" * 18)

        report = generate_catalog(catalog_dir, tmp_path / "Out.bundle")

        assert report.catalog.find("storage").model_filename is None
        assert (tmp_path / "Out.bundle" / STORAGE_DEFAULT / EMPTY_FILENAME).is_file()

    def test_failed_swap_keeps_previous_bundle(self, catalog_dir, tmp_path, monkeypatch):
        bundle = tmp_path / "Out.bundle"
        write_box_model(catalog_dir / STORAGE_DEFAULT / "cabinet.obj")
        generate_catalog(catalog_dir, bundle)
        original_rename = Path.rename

        def failing_rename(self, target):
            # Only the final move of the staging copy fails
            if self.name == bundle.name and self.parent != bundle.parent:
                raise OSError("disk full")
            return original_rename(self, target)

        monkeypatch.setattr(Path, "rename", failing_rename)

        with pytest.raises(CannotCreateCatalog, match="disk full"):
            generate_catalog(catalog_dir, bundle)

        assert (bundle / CATALOG_INDEX_FILENAME).is_file()
        assert (bundle / STORAGE_DEFAULT / "cabinet.rooms.glb").is_file()
        assert [p.name for p in tmp_path.iterdir() if p.name.startswith(".")] == []
