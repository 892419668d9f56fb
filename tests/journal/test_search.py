"""Tests for inkwell.journal.search (ContentQuery)."""

import pytest

from inkwell.journal import ContentQuery, DateKey

JAN_1 = DateKey(2024, 1, 1)
JAN_2 = DateKey(2024, 1, 2)


class TestContentQuery:
    async def test_case_insensitive_substring(self, store):
        await store.write(JAN_1, "Went to the beach")
        await store.write(JAN_2, "Planning a VACATION")
        query = ContentQuery(store, "vacation")

        assert await query(JAN_2) is True
        assert await query(JAN_1) is False

    async def test_mixed_case_query(self, store):
        await store.write(JAN_1, "<p>straße und Meer</p>")
        assert await ContentQuery(store, "STRASSE")(JAN_1) is True
        assert await ContentQuery(store, "Meer")(JAN_1) is True

    async def test_missing_entry_does_not_match_text(self, store):
        assert await ContentQuery(store, "vacation")(JAN_1) is False

    @pytest.mark.parametrize("query", ["", "   "])
    def test_rejects_blank_query(self, store, query):
        with pytest.raises(ValueError):
            ContentQuery(store, query)

    def test_repr(self, store):
        assert repr(ContentQuery(store, "beach")) == "ContentQuery('beach')"
