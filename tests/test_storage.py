"""Tests for the document stores."""

import pytest
from webdistill.errors import PersistenceError
from webdistill.models.config import StorageConfig
from webdistill.models.document import Document, Heading, Link, StructuredMeta, WikipediaMeta
from webdistill.storage import InMemoryDocumentStore, SqliteDocumentStore, create_store


def make_document(owner=None, **kwargs):
    fields = {
        "source_url": "https://en.wikipedia.org/wiki/Ada_Lovelace",
        "title": "Ada Lovelace",
        "site_name": "Wikipedia",
        "markdown": "# Ada Lovelace\n",
        "content_html": "<h1>Ada Lovelace</h1>",
        "plain_text": "Ada Lovelace",
        "owner": owner,
    }
    fields.update(kwargs)
    return Document(**fields)


class TestCreateStore:
    """Tests for create_store."""

    def test_backends(self, tmp_path):
        """Test backend selection."""
        assert isinstance(create_store(StorageConfig(backend="memory")), InMemoryDocumentStore)
        assert isinstance(
            create_store(StorageConfig(backend="sqlite", path=tmp_path / "docs.db")),
            SqliteDocumentStore,
        )
        assert create_store(StorageConfig(backend="none")) is None


class TestInMemoryDocumentStore:
    """Tests for InMemoryDocumentStore."""

    @pytest.mark.asyncio
    async def test_create_and_find(self):
        """Test that created documents can be read back."""
        store = InMemoryDocumentStore()

        doc_id = await store.create(make_document())
        found = await store.find_by_id(doc_id)

        assert found.id == doc_id
        assert found.title == "Ada Lovelace"
        assert await store.find_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_returns_copies(self):
        """Test that callers can't mutate stored state."""
        store = InMemoryDocumentStore()
        doc_id = await store.create(make_document())

        found = await store.find_by_id(doc_id)
        found.title = "Changed"

        assert (await store.find_by_id(doc_id)).title == "Ada Lovelace"

    @pytest.mark.asyncio
    async def test_update(self):
        """Test field updates and their guards."""
        store = InMemoryDocumentStore()
        doc_id = await store.create(make_document(needs_transcript=True))

        await store.update(doc_id, markdown="# New\n", needs_transcript=False)
        found = await store.find_by_id(doc_id)
        assert found.markdown == "# New\n"
        assert found.needs_transcript is False

        with pytest.raises(PersistenceError):
            await store.update(doc_id, source_url="https://evil.example")
        with pytest.raises(PersistenceError):
            await store.update("missing", markdown="x")

    @pytest.mark.asyncio
    async def test_count(self):
        """Test counting per owner."""
        store = InMemoryDocumentStore()
        await store.create(make_document(owner="alice"))
        await store.create(make_document(owner="alice"))
        await store.create(make_document(owner="bob"))

        assert await store.count() == 3
        assert await store.count("alice") == 2
        assert await store.count("carol") == 0


class TestSqliteDocumentStore:
    """Tests for SqliteDocumentStore."""

    @pytest.mark.asyncio
    async def test_round_trip(self, tmp_path):
        """Test that every persisted field survives a reopen."""
        path = tmp_path / "nested" / "docs.db"
        structured = StructuredMeta(
            headings=[Heading(level=1, text="Ada Lovelace")],
            links=[Link(text="Babbage", href="https://en.wikipedia.org/wiki/Charles_Babbage")],
            language="en",
            wikipedia=WikipediaMeta(infobox={"Born": "1815"}, categories=["Mathematicians"]),
        )
        document = make_document(
            owner="alice",
            structured_meta=structured,
            needs_transcript=True,
            byline="Jane Doe",
            published_time="2024-05-01",
        )

        store = SqliteDocumentStore(path)
        doc_id = await store.create(document)
        store.close()

        reopened = SqliteDocumentStore(path)
        try:
            found = await reopened.find_by_id(doc_id)
        finally:
            reopened.close()

        assert found.id == doc_id
        assert found.owner == "alice"
        assert found.title == "Ada Lovelace"
        assert found.needs_transcript is True
        assert found.scraped_at == document.scraped_at
        assert found.structured_meta == structured
        assert found.byline == "Jane Doe"
        assert found.excerpt is None
        assert found.published_time == "2024-05-01"

    @pytest.mark.asyncio
    async def test_update_and_count(self, tmp_path):
        """Test updates, owner counts and missing ids."""
        store = SqliteDocumentStore(tmp_path / "docs.db")
        try:
            doc_id = await store.create(make_document(owner="alice", needs_transcript=True))
            await store.create(make_document(owner="bob"))

            await store.update(doc_id, markdown="# Updated\n", needs_transcript=False)
            found = await store.find_by_id(doc_id)

            assert found.markdown == "# Updated\n"
            assert found.needs_transcript is False
            assert await store.count() == 2
            assert await store.count("alice") == 1
            assert await store.find_by_id("missing") is None

            with pytest.raises(PersistenceError):
                await store.update("missing", markdown="x")
            with pytest.raises(PersistenceError):
                await store.update(doc_id, owner="mallory")
        finally:
            store.close()

    @pytest.mark.asyncio
    async def test_unwritable_database(self, tmp_path):
        """Test that backend failures surface as PersistenceError."""
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        store = SqliteDocumentStore(blocker / "docs.db")

        with pytest.raises(PersistenceError):
            await store.create(make_document())
