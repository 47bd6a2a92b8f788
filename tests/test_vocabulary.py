"""Tests for the category/attribute vocabulary."""

import json

import pytest

from roomcat.catalog import Vocabulary
from roomcat.errors import CannotParseVocabulary
from roomcat.catalog.vocabulary import ROOMPLAN_CATEGORIES, UNIDENTIFIED


class TestVocabulary:
    """Tests for the default and file-based vocabularies."""

    def test_default_categories_in_framework_order(self, vocabulary):
        assert vocabulary.categories() == ROOMPLAN_CATEGORIES
        assert vocabulary.categories()[0] == "storage"

    def test_categories_without_attributes(self, vocabulary):
        assert vocabulary.attribute_kinds("toilet") == []
        assert vocabulary.supported_combinations("toilet") == []

    def test_storage_combinations(self, vocabulary):
        combinations = vocabulary.supported_combinations("storage")
        assert [[a.tag for a in combo] for combo in combinations] == [
            ["StorageType.cabinet"],
            ["StorageType.shelf"],
        ]

    def test_combinations_follow_kind_order(self, vocabulary):
        kinds = vocabulary.attribute_kinds("chair")
        for combination in vocabulary.supported_combinations("chair"):
            assert [a.kind for a in combination] == kinds

    def test_combinations_exclude_unidentified(self, vocabulary):
        for category in vocabulary.categories():
            for combination in vocabulary.supported_combinations(category):
                assert all(a.value != UNIDENTIFIED for a in combination)

    def test_chair_combination_count(self, vocabulary):
        # 3 types x 2 backs x 2 arms x 2 legs
        assert len(vocabulary.supported_combinations("chair")) == 24

    def test_attribute_lookup(self, vocabulary):
        attribute = vocabulary.attribute("chair", "ChairArmType.existing")
        assert attribute.kind == "ChairArmType"
        assert attribute.value == "existing"
        assert attribute.short_identifier == "existingArms"

    def test_attribute_lookup_is_category_scoped(self, vocabulary):
        with pytest.raises(KeyError):
            vocabulary.attribute("sofa", "ChairType.dining")

    def test_unknown_attribute_value(self, vocabulary):
        with pytest.raises(KeyError):
            vocabulary.attribute("chair", "ChairType.throne")

    def test_rejects_unknown_kind(self):
        with pytest.raises(ValueError, match="Unknown attribute kind"):
            Vocabulary(["lamp"], {}, {"lamp": ["LampType"]})

    def test_rejects_attributes_for_unknown_category(self):
        with pytest.raises(ValueError, match="unknown category"):
            Vocabulary(["lamp"], {"LampType": {"floor": "floor"}}, {"rug": ["LampType"]})

    def test_from_file(self, tmp_path):
        path = tmp_path / "vocabulary.json"
        path.write_text(json.dumps({
            "categories": ["lamp", "rug"],
            "attributeKinds": {"LampType": {"floor": "floorLamp", "desk": "deskLamp"}},
            "categoryAttributes": {"lamp": ["LampType"]},
        }))

        vocabulary = Vocabulary.from_file(path)

        assert vocabulary.categories() == ["lamp", "rug"]
        combinations = vocabulary.supported_combinations("lamp")
        assert [combo[0].short_identifier for combo in combinations] == ["floorLamp", "deskLamp"]

    def test_from_file_malformed_json(self, tmp_path):
        path = tmp_path / "vocabulary.json"
        path.write_text("{not json")

        with pytest.raises(CannotParseVocabulary, match="vocabulary.json"):
            Vocabulary.from_file(path)

    def test_from_file_missing(self, tmp_path):
        with pytest.raises(CannotParseVocabulary):
            Vocabulary.from_file(tmp_path / "missing.json")

    def test_from_file_without_categories(self, tmp_path):
        path = tmp_path / "vocabulary.json"
        path.write_text(json.dumps({"attributeKinds": {}}))

        with pytest.raises(CannotParseVocabulary, match="categories"):
            Vocabulary.from_file(path)
