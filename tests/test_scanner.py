"""Tests for document discovery and reading."""

from pathlib import PurePosixPath

import pytest

from translate_md.exceptions import DocumentReadError
from translate_md.scanner import (
    DocumentEntry,
    MarkupKind,
    find_documents,
    markup_kind_for,
    read_document,
)


@pytest.fixture
def tree(input_dir):
    (input_dir / "a.md").write_text("# A")
    (input_dir / "b.html").write_text("<p>B</p>")
    (input_dir / "notes.txt").write_text("ignored")
    (input_dir / "guide").mkdir()
    (input_dir / "guide" / "c.markdown").write_text("# C")
    (input_dir / "translated" / "fr").mkdir(parents=True)
    (input_dir / "translated" / "fr" / "a.md").write_text("# A (fr)")
    return input_dir


class TestFindDocuments:
    def test_lists_supported_documents_sorted(self, tree):
        entries = find_documents(tree, exclude=tree / "translated")

        assert entries == [
            DocumentEntry(PurePosixPath("a.md"), MarkupKind.MARKDOWN),
            DocumentEntry(PurePosixPath("b.html"), MarkupKind.HTML),
            DocumentEntry(PurePosixPath("guide/c.markdown"), MarkupKind.MARKDOWN),
        ]

    def test_without_exclude_includes_output_tree(self, tree):
        paths = [str(e.relative_path) for e in find_documents(tree)]

        assert "translated/fr/a.md" in paths

    def test_non_recursive(self, tree):
        paths = [str(e.relative_path) for e in find_documents(tree, recursive=False)]

        assert paths == ["a.md", "b.html"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            find_documents(tmp_path / "nope")

    def test_not_a_directory(self, tmp_path):
        path = tmp_path / "file.md"
        path.write_text("x")

        with pytest.raises(NotADirectoryError):
            find_documents(path)

    def test_returns_fresh_list_each_call(self, tree):
        first = find_documents(tree)
        first.clear()

        assert find_documents(tree)


class TestMarkupKind:
    @pytest.mark.parametrize(
        "name, kind",
        [
            ("x.md", MarkupKind.MARKDOWN),
            ("x.MD", MarkupKind.MARKDOWN),
            ("x.htm", MarkupKind.HTML),
            ("x.html", MarkupKind.HTML),
            ("x.pdf", None),
        ],
    )
    def test_kind_from_extension(self, name, kind):
        assert markup_kind_for(PurePosixPath(name)) is kind

    def test_only_html_embeds_resources(self):
        assert MarkupKind.HTML.embeds_resources
        assert not MarkupKind.MARKDOWN.embeds_resources


class TestReadDocument:
    async def test_reads_content(self, tree):
        entry = DocumentEntry(PurePosixPath("guide/c.markdown"), MarkupKind.MARKDOWN)

        document = await read_document(tree, entry)

        assert document.content == "# C"
        assert document.length == 3
        assert document.name == "guide/c.markdown"
        assert document.source_path == tree / "guide" / "c.markdown"

    async def test_undecodable_file_raises_read_error(self, input_dir):
        (input_dir / "bad.md").write_bytes(b"\xff\xfe\xfa invalid utf-8")
        entry = DocumentEntry(PurePosixPath("bad.md"), MarkupKind.MARKDOWN)

        with pytest.raises(DocumentReadError):
            await read_document(input_dir, entry)

    async def test_missing_file_raises_read_error(self, input_dir):
        entry = DocumentEntry(PurePosixPath("gone.md"), MarkupKind.MARKDOWN)

        with pytest.raises(DocumentReadError, match="gone.md"):
            await read_document(input_dir, entry)
