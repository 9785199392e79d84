import pytest

from searchwalk import DocField, Document, DocumentSerializationError, FieldType, Id, SortField
from searchwalk.config import DocumentOptions


class TestDocumentMeta:
    def test_options_are_collected(self, entity_model):
        options = entity_model._meta

        assert isinstance(options, DocumentOptions)
        assert options.index_name == "test-search-after"
        assert options.id_field == "id"
        assert options.field_types == {"id": FieldType.AUTO, "message": FieldType.TEXT}

    def test_sortable_fields(self, article_model):
        options = article_model._meta

        assert options.is_sortable("slug")
        assert options.is_sortable("year")
        assert options.is_sortable("rating")
        assert not options.is_sortable("title")
        assert not options.is_sortable("nope")

    def test_missing_meta(self):
        with pytest.raises(ValueError, match="missing a 'class Meta'"):

            class NoMeta(Document):
                id: int = Id()

    def test_missing_index_name(self):
        with pytest.raises(ValueError, match="missing an 'index_name'"):

            class NoIndex(Document):
                class Meta:
                    pass

                id: int = Id()

    def test_missing_id(self):
        with pytest.raises(ValueError, match="must have exactly one field defined with Id"):

            class NoId(Document):
                class Meta:
                    index_name = "no-id"

                name: str

    def test_two_ids(self):
        with pytest.raises(ValueError, match="only one field defined with Id"):

            class TwoIds(Document):
                class Meta:
                    index_name = "two-ids"

                a: int = Id()
                b: int = Id()

    def test_subclass_inherits_options(self, entity_model):
        class Extended(entity_model):
            tag: str = DocField(FieldType.KEYWORD, default="x")

        assert Extended._meta.index_name == "test-search-after"
        assert Extended._meta.id_field == "id"
        assert Extended._meta.field_types["tag"] is FieldType.KEYWORD
        # The parent is untouched
        assert "tag" not in entity_model._meta.field_types

    def test_subclass_can_override_index(self, entity_model):
        class Archived(entity_model):
            class Meta:
                index_name = "archived"

        assert Archived.index_name() == "archived"
        assert Archived._meta.id_field == "id"


class TestDocument:
    def test_equality_by_value(self, entity_model):
        assert entity_model(id=1, message="message 1") == entity_model(id=1, message="message 1")
        assert entity_model(id=1, message="message 1") != entity_model(id=1, message="other")
        assert entity_model(id=None, message=None) == entity_model(id=None, message=None)

    def test_get_id(self, article_model, articles):
        assert articles[0].get_id() == "a-1"

    def test_sort_values(self, article_model, articles):
        sort = (SortField.desc("year"), SortField.asc("slug"))
        assert articles[0].sort_values(sort) == [2021, "a-1"]

    def test_source_roundtrip(self, entity_model):
        entity = entity_model(id=5, message="message 5")
        assert entity.to_source() == {"id": 5, "message": "message 5"}
        assert entity_model.from_source(entity.to_source()) == entity

    def test_from_source_rejects_foreign_data(self, entity_model):
        with pytest.raises(DocumentSerializationError, match="does not match SearchAfterEntity"):
            entity_model.from_source({"id": "not-a-number", "message": "x"})

    def test_extra_fields_forbidden(self, entity_model):
        with pytest.raises(DocumentSerializationError):
            entity_model.from_source({"id": 1, "message": "x", "unexpected": True})
