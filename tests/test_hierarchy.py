"""Tests for component graph construction."""

from pathlib import Path

from conftest import write_files
from sourcelens.hierarchy import HierarchyBuilder
from sourcelens.locators import ReactLocator
from sourcelens.scanner import FileScanner


def _build(root: Path):
    locator = ReactLocator()
    files = FileScanner().find_files(root, ["**/*.jsx"])
    builder = HierarchyBuilder("react", locator.extract_component_name, locator.find_component_usages)
    return builder.build(files)


def test_self_reference_ignored(temp_dir: Path):
    write_files(temp_dir, {
        "Tree.jsx": "export function Tree({ items }) {\n  return <ul>{items.map(i => <Tree items={i} />)}</ul>;\n}\n",
    })

    roots = _build(temp_dir)

    assert len(roots) == 1
    assert roots[0].children == []


def test_cycle_is_traversed_once(temp_dir: Path):
    write_files(temp_dir, {
        "A.jsx": "export function A() { return <B />; }\n",
        "B.jsx": "export function B() { return <A />; }\n",
        "Root.jsx": "export function Root() { return <A />; }\n",
    })

    roots = _build(temp_dir)

    assert [r.component_name for r in roots] == ["Root"]
    root = roots[0]
    names = [node.component_name for node in root.walk()]
    assert names == ["Root", "A", "B"]
    assert root.find("B").parent.component_name == "A"
    assert root.find("Missing") is None
    depths = {node.component_name: node.depth for node in root.walk()}
    assert depths == {"Root": 0, "A": 1, "B": 2}
    # serialisation must terminate despite A <-> B
    assert root.to_dict()["children"][0]["component_name"] == "A"


def test_first_parent_wins(temp_dir: Path):
    write_files(temp_dir, {
        "Button.jsx": "export function Button() { return <button />; }\n",
        "Form.jsx": "export function Form() { return <Button />; }\n",
        "Toolbar.jsx": "export function Toolbar() { return <Button />; }\n",
    })

    roots = _build(temp_dir)
    by_name = {r.component_name: r for r in roots}

    assert set(by_name) == {"Form", "Toolbar"}
    button = by_name["Form"].children[0]
    assert button.parent is by_name["Form"]
    assert button in by_name["Toolbar"].children


def test_duplicate_names_keep_first_file(temp_dir: Path):
    write_files(temp_dir, {
        "a/Card.jsx": "export function Card() { return <div />; }\n",
        "b/Card.jsx": "export function Card() { return <span />; }\n",
    })

    roots = _build(temp_dir)

    assert len(roots) == 1
    assert Path(roots[0].file_path).parent.name == "a"


def test_unreadable_files_are_skipped(temp_dir: Path):
    write_files(temp_dir, {"Ok.jsx": "export function Ok() { return <div />; }\n"})
    builder = HierarchyBuilder(
        "react", ReactLocator().extract_component_name, ReactLocator().find_component_usages
    )

    roots = builder.build([temp_dir / "Ok.jsx", temp_dir / "Missing.jsx"])

    assert [r.component_name for r in roots] == ["Ok"]
