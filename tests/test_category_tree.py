"""Test assembling flat categories into a tree."""

from storefront.adapters.interfaces.catalog_source import build_category_tree
from storefront.adapters.interfaces.normalizer import dedupe_tags, strip_html


def _subtree_slugs(category):
    return [node.slug for node in category.walk()]


class TestBuildCategoryTree:
    """Test parent joins, roots and broken links."""

    def test_children_attach_to_parents(self, make_category):
        roots = build_category_tree([
            make_category("antennas"),
            make_category("yagi", parent="antennas"),
            make_category("panel", parent="antennas"),
            make_category("cables"),
        ])
        assert [r.slug for r in roots] == ["antennas", "cables"]
        assert [c.slug for c in roots[0].subcategories] == ["yagi", "panel"]
        assert roots[0].subcategories[0].parent.title == "Antennas"

    def test_unknown_parent_becomes_root(self, make_category):
        roots = build_category_tree([make_category("orphan", parent="gone")])
        assert [r.slug for r in roots] == ["orphan"]
        assert roots[0].is_root

    def test_self_parent_becomes_root(self, make_category):
        roots = build_category_tree([make_category("loop", parent="loop")])
        assert [r.slug for r in roots] == ["loop"]
        assert roots[0].subcategories == []

    def test_cycle_is_broken(self, make_category):
        """Test that no category ends up inside its own subtree."""
        categories = [
            make_category("a", parent="c"),
            make_category("b", parent="a"),
            make_category("c", parent="b"),
        ]
        roots = build_category_tree(categories)
        assert len(roots) == 1
        assert sorted(_subtree_slugs(roots[0])) == ["a", "b", "c"]
        for category in categories:
            assert _subtree_slugs(category).count(category.slug) == 1

    def test_rebuilding_is_stable(self, make_category):
        categories = [make_category("antennas"), make_category("yagi", parent="antennas")]
        build_category_tree(categories)
        roots = build_category_tree(categories)
        assert [c.slug for c in roots[0].subcategories] == ["yagi"]

    def test_find_in_subtree(self, make_category):
        roots = build_category_tree([
            make_category("antennas"),
            make_category("yagi", parent="antennas"),
            make_category("long-yagi", parent="yagi"),
        ])
        assert roots[0].find("long-yagi").parent.slug == "yagi"
        assert roots[0].find("missing") is None


class TestTextHelpers:
    """Test the shared normalization helpers."""

    def test_dedupe_tags_ignores_case_and_plural(self):
        assert dedupe_tags(["Antenna", "antennas", "Outdoor", "", None]) == ["Antenna", "Outdoor"]

    def test_double_s_is_not_a_plural(self):
        assert dedupe_tags(["brass", "bras"]) == ["brass", "bras"]

    def test_strip_html(self):
        assert strip_html("<p>Low&nbsp;loss <em>cable</em></p>") == "Low loss cable"
        assert strip_html(None) == ""
