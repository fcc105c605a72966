"""Tests for the Drupal JSON:API content loader."""

import pytest

from app.services.drupal import ContentSourceError, load_content_nodes, record_to_node

_FIRST_PAGE = "/jsonapi/node/building?include=field_design_template"
_SECOND_PAGE = "/jsonapi/node/building?page=2"


def _record(node_id, title, alias, template_id=None, bundle="building", **attributes):
    relationships = {}
    if template_id:
        relationships["field_design_template"] = {
            "data": {"type": "taxonomy_term--design_template", "id": template_id}
        }
    return {
        "type": f"node--{bundle}",
        "id": node_id,
        "attributes": {"title": title, "path": {"alias": alias, "langcode": "en"}, **attributes},
        "relationships": relationships,
    }


_TEMPLATE = {
    "type": "taxonomy_term--design_template",
    "id": "t-location",
    "attributes": {"name": "Location", "field_machine_name": "location"},
}


class TestRecordToNode:
    def test_copies_attributes_and_namespaces_type(self):
        record = _record(
            "b1",
            "Hatcher Library",
            "/hatcher",
            field_breadcrumb="/api/breadcrumb/b1",
            field_parent_menu="/api/parents/b1",
            body={"value": "<p>ignored</p>"},
        )
        node = record_to_node(record, {})

        assert node.id == "b1"
        assert node.type == "node__building"
        assert node.title == "Hatcher Library"
        assert node.path.alias == "/hatcher"
        assert node.field_breadcrumb == "/api/breadcrumb/b1"
        assert node.field_parent_menu == "/api/parents/b1"
        assert node.field_child_menu is None

    def test_resolves_included_relationship(self):
        record = _record("b1", "Hatcher", "/hatcher", template_id="t-location")
        included = {("taxonomy_term--design_template", "t-location"): dict(_TEMPLATE["attributes"])}

        node = record_to_node(record, included)

        assert node.relationships["field_design_template"]["field_machine_name"] == "location"

    def test_unresolved_relationship_keeps_linkage(self):
        record = _record("b1", "Hatcher", "/hatcher", template_id="t-missing")
        node = record_to_node(record, {})
        assert node.relationships["field_design_template"] == {
            "type": "taxonomy_term--design_template",
            "id": "t-missing",
        }


class TestLoadContentNodes:
    def test_follows_pagination(self, fake_cms, run_with_session):
        cms = fake_cms(
            {
                _FIRST_PAGE: {
                    "data": [_record("b1", "Hatcher", "/hatcher", template_id="t-location")],
                    "included": [_TEMPLATE],
                    "links": {"next": {"href": "https://cms.example.edu" + _SECOND_PAGE}},
                },
                _SECOND_PAGE: {"data": [_record("b2", "Shapiro", "/shapiro")], "links": {}},
            }
        )

        _, nodes = run_with_session(cms, lambda session: load_content_nodes(session, ["building"]))

        assert [node.id for node in nodes] == ["b1", "b2"]
        assert nodes[0].relationships["field_design_template"]["field_machine_name"] == "location"

    def test_duplicate_ids_across_bundles_dropped(self, fake_cms, run_with_session):
        cms = fake_cms(
            {
                _FIRST_PAGE: {"data": [_record("x1", "One", "/one")]},
                "/jsonapi/node/page?include=field_design_template": {
                    "data": [_record("x1", "One", "/one", bundle="page"), _record("p2", "Two", "/two", bundle="page")]
                },
            }
        )

        _, nodes = run_with_session(
            cms, lambda session: load_content_nodes(session, ["building", "page"])
        )

        assert [(node.id, node.type) for node in nodes] == [
            ("x1", "node__building"),
            ("p2", "node__page"),
        ]

    def test_malformed_record_skipped(self, fake_cms, run_with_session):
        cms = fake_cms({_FIRST_PAGE: {"data": [{"attributes": {}}, _record("b1", "Hatcher", "/hatcher")]}})

        _, nodes = run_with_session(cms, lambda session: load_content_nodes(session, ["building"]))

        assert [node.id for node in nodes] == ["b1"]

    def test_unreachable_listing_raises(self, fake_cms, run_with_session):
        cms = fake_cms({_FIRST_PAGE: 500})

        with pytest.raises(ContentSourceError):
            run_with_session(cms, lambda session: load_content_nodes(session, ["building"]))

    def test_unexpected_payload_raises(self, fake_cms, run_with_session):
        cms = fake_cms({_FIRST_PAGE: [{"uuid": "x"}]})

        with pytest.raises(ContentSourceError):
            run_with_session(cms, lambda session: load_content_nodes(session, ["building"]))
