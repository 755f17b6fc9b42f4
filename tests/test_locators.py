"""Tests for line scoring and the per-framework locators."""

from pathlib import Path

import pytest

from conftest import write_files
from sourcelens.locators import AngularLocator, HtmlLocator, ReactLocator, VueLocator, match_score
from sourcelens.models import ElementDescriptor, SourceSearchOptions
from sourcelens.rules import SYNTAX, classify_element, score_line


class TestScoreLine:
    """Weighted rule table applied to a single line."""

    def test_requires_tag(self):
        descriptor = ElementDescriptor(tag_name="button", id="go")
        assert score_line(descriptor, '<a id="go">', SYNTAX["react"]) is None

    def test_tag_name_must_end(self):
        descriptor = ElementDescriptor(tag_name="Button")
        assert score_line(descriptor, "<ButtonGroup>", SYNTAX["react"]) is None

    def test_weights_accumulate(self):
        descriptor = ElementDescriptor(tag_name="div", id="card", class_name="box")
        match = score_line(descriptor, '<div id="card" className="box wide">', SYNTAX["react"])

        assert match.confidence == pytest.approx(0.9)
        assert match.matched_rules == ["tag", "id", "class"]
        assert match.column == 1

    def test_confidence_is_clamped(self):
        descriptor = ElementDescriptor(
            tag_name="button", id="b", class_name="x y z", text_content="Press me now"
        )
        line = '  <button id="b" className="x y z">Press me now</button>'

        assert score_line(descriptor, line, SYNTAX["react"]).confidence == 1.0

    def test_short_text_ignored(self):
        descriptor = ElementDescriptor(tag_name="span", text_content="Hi")
        match = score_line(descriptor, "<span>Hi</span>", SYNTAX["react"])

        assert match.matched_rules == ["tag"]

    def test_vue_bound_class(self):
        descriptor = ElementDescriptor(tag_name="div", class_name="active")
        match = score_line(descriptor, '<div :class="active">', SYNTAX["vue"])

        assert "class" in match.matched_rules

    @pytest.mark.parametrize(
        "tag,expected",
        [
            ("Header", "component"),
            ("button", "element"),
            ("BUTTON", "element"),
            ("Fragment", "fragment"),
            ("React.Fragment", "fragment"),
        ],
    )
    def test_classify_element(self, tag, expected):
        assert classify_element(tag) == expected


class TestMatchScore:
    def test_exact(self):
        assert match_score("header", "Header") == (1.0, "exact")

    def test_partial(self):
        assert match_score("Head", "Header") == (0.8, "partial")

    def test_fuzzy(self):
        score, kind = match_score("Hdr", "Header")
        assert kind == "fuzzy"
        assert score == pytest.approx(0.6)

    def test_no_match(self):
        assert match_score("xyz", "Form")[0] == 0.0


class TestReactLocator:
    """Resolution against the sample React project."""

    def test_finds_button(self, sample_react_app_path: Path):
        locator = ReactLocator()
        descriptor = ElementDescriptor(
            tag_name="BUTTON", id="submit-btn", class_name="btn primary", text_content="Submit order"
        )

        info = locator.find_element_source(descriptor, sample_react_app_path)

        assert info is not None
        assert Path(info.file_path).name == "Form.jsx"
        assert info.line_number == 9
        assert info.column_number == 7
        assert info.component_name == "Form"
        assert info.element_type == "element"
        assert info.confidence == 1.0
        assert info.additional_info["module_type"] == "jsx"
        assert info.additional_info["matched_rules"] == ["tag", "id", "class", "text"]

    def test_comment_lines_skipped(self, temp_dir: Path):
        write_files(temp_dir, {
            "Card.jsx": "// <section id=\"hero\">\nexport const Card = () => (\n  <section id=\"hero\" />\n);\n",
        })

        info = ReactLocator().find_element_source(ElementDescriptor(tag_name="section"), temp_dir)

        assert info.line_number == 3

    def test_missing_element(self, sample_react_app_path: Path):
        descriptor = ElementDescriptor(tag_name="table")
        assert ReactLocator().find_element_source(descriptor, sample_react_app_path) is None

    def test_component_tag(self, sample_react_app_path: Path):
        info = ReactLocator().find_element_source(ElementDescriptor(tag_name="Header"), sample_react_app_path)

        assert info.element_type == "component"
        assert info.component_name == "App"

    def test_best_match_prefers_higher_score(self, temp_dir: Path):
        write_files(temp_dir, {
            "A.jsx": "export function A() {\n  return <li>one</li>;\n}\n",
            "B.jsx": "export function B() {\n  return <li id=\"target\">two</li>;\n}\n",
        })
        descriptor = ElementDescriptor(tag_name="li", id="target")

        first = ReactLocator(search_mode="first-match").find_element_source(descriptor, temp_dir)
        best = ReactLocator(search_mode="best-match").find_element_source(descriptor, temp_dir)

        assert first.component_name == "A"
        assert best.component_name == "B"
        assert best.confidence > first.confidence

    def test_usages_reduce_to_base_name(self):
        content = "<Layout.Header /><Button /><Button /><div />"
        assert ReactLocator().find_component_usages(Path("x.jsx"), content) == ["Layout", "Button"]

    @pytest.mark.parametrize(
        "content,expected",
        [
            ("export default function Page() {}", "Page"),
            ("export class Modal extends React.Component {}", "Modal"),
            ("const Card = React.memo(function Card() {})", "Card"),
            ("const Input = forwardRef((props, ref) => null)", "Input"),
            ("const value = 1;", "Widget"),
        ],
    )
    def test_component_name(self, content, expected):
        assert ReactLocator().extract_component_name(Path("Widget.jsx"), content) == expected

    def test_hierarchy(self, sample_react_app_path: Path):
        root = ReactLocator().build_component_hierarchy(sample_react_app_path)

        assert root.component_name == "App"
        assert [c.component_name for c in root.children] == ["Header", "Form"]
        assert all(c.depth == 1 and c.parent is root for c in root.children)

    def test_search_components(self, sample_react_app_path: Path):
        options = SourceSearchOptions(root_path=str(sample_react_app_path))

        matches = ReactLocator().search_components("Head", options)

        assert [m.component_name for m in matches] == ["Header"]
        match = matches[0]
        assert match.match_type == "partial"
        assert match.location.line == 3
        assert match.context.matched_lines == ["export function Header({ title }) {"]
        assert match.context.before_lines == ["import React from 'react';", ""]

    def test_search_respects_framework_filter(self, sample_react_app_path: Path):
        options = SourceSearchOptions(root_path=str(sample_react_app_path), frameworks=["vue"])
        assert ReactLocator().search_components("Header", options) == []


VUE_COMPONENT = """<template>
  <div class="card">
    <user-avatar />
    <button class="primary">Save</button>
  </div>
</template>

<script>
export default {
  name: 'user-card',
  data() { return { html: '<button class="primary">' } }
}
</script>
"""


class TestVueLocator:
    def test_only_template_is_scanned(self, temp_dir: Path):
        write_files(temp_dir, {"src/UserCard.vue": VUE_COMPONENT})
        descriptor = ElementDescriptor(tag_name="button", class_name="primary")

        info = VueLocator().find_element_source(descriptor, temp_dir)

        assert info.line_number == 4
        assert info.component_name == "UserCard"
        assert info.additional_info["module_type"] == "vue"

    def test_script_markup_not_matched(self, temp_dir: Path):
        write_files(temp_dir, {"Plain.vue": "<script>\nconst t = '<table>'\n</script>\n"})
        descriptor = ElementDescriptor(tag_name="table")

        assert VueLocator().find_element_source(descriptor, temp_dir) is None

    def test_kebab_usages(self, temp_dir: Path):
        write_files(temp_dir, {
            "src/UserCard.vue": VUE_COMPONENT,
            "src/UserAvatar.vue": "<template><img /></template>\n",
        })

        root = VueLocator().build_component_hierarchy(temp_dir)

        assert root.component_name == "UserCard"
        assert root.children[0].component_name == "UserAvatar"


class TestAngularLocator:
    def test_inline_template(self, temp_dir: Path):
        write_files(temp_dir, {
            "src/app/nav.component.ts": (
                "import { Component } from '@angular/core';\n"
                "@Component({\n"
                "  selector: 'app-nav',\n"
                "  template: `\n"
                "    <nav class=\"main\">Links</nav>\n"
                "  `,\n"
                "})\n"
                "export class NavComponent {}\n"
            ),
        })

        info = AngularLocator().find_element_source(ElementDescriptor(tag_name="nav"), temp_dir)

        assert info.line_number == 5
        assert info.component_name == "NavComponent"

    def test_template_file_uses_companion_class(self, temp_dir: Path):
        write_files(temp_dir, {
            "src/app/app.component.ts": (
                "@Component({ selector: 'app-root', templateUrl: './app.component.html' })\n"
                "export class AppComponent {}\n"
            ),
            "src/app/app.component.html": "<main>\n  <app-nav></app-nav>\n</main>\n",
            "src/app/nav.component.ts": (
                "@Component({ selector: 'app-nav', template: `<nav></nav>` })\n"
                "export class NavComponent {}\n"
            ),
        })

        info = AngularLocator().find_element_source(ElementDescriptor(tag_name="main"), temp_dir)
        root = AngularLocator().build_component_hierarchy(temp_dir)

        assert info.component_name == "AppComponent"
        assert root.component_name == "AppComponent"
        assert [c.component_name for c in root.children] == ["NavComponent"]

    def test_template_without_companion(self):
        name = AngularLocator().extract_component_name(Path("/nowhere/user-list.component.html"), "")
        assert name == "UserListComponent"


class TestHtmlLocator:
    def test_exact_attribute_match(self, temp_dir: Path):
        write_files(temp_dir, {
            "index.html": '<div class="a b">x</div>\n<div id="main" class="a">y</div>\n',
        })

        info = HtmlLocator().find_element_source(
            ElementDescriptor(tag_name="DIV", id="main", class_name="a"), temp_dir
        )

        assert info.line_number == 2
        assert info.confidence == pytest.approx(0.8)
        assert info.component_name == "DIV"

    def test_partial_class_does_not_match(self, temp_dir: Path):
        write_files(temp_dir, {"index.html": '<div class="a b">x</div>\n'})

        info = HtmlLocator().find_element_source(ElementDescriptor(tag_name="div", class_name="a"), temp_dir)

        assert info is None

    def test_no_hierarchy_or_search(self, temp_dir: Path):
        locator = HtmlLocator()
        assert locator.build_component_hierarchy(temp_dir) is None
        assert locator.search_components("x", SourceSearchOptions(root_path=str(temp_dir))) == []
