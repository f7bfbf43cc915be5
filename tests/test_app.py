from __future__ import annotations

import pytest

tk = pytest.importorskip("tkinter")

import section_merger  # noqa: E402
from pdfsections.sections import Section  # noqa: E402


@pytest.fixture
def app(tmp_path, monkeypatch):
    try:
        root = tk.Tk()
    except tk.TclError:
        pytest.skip("no display available")
    root.withdraw()
    monkeypatch.setattr(section_merger, "default_config_path", lambda: tmp_path / "config.json")
    monkeypatch.setattr(section_merger.SectionMergerApp, "_check_ghostscript", lambda self: None)
    app = section_merger.SectionMergerApp(root)
    monkeypatch.setattr(app, "regenerate", lambda force=False: None)
    yield app
    root.destroy()


def test_page_counts_arriving_keep_the_selection(app, tmp_path):
    for number in ("1", "2", "3"):
        app.sections.append(Section(section_number=number, path=tmp_path / f"{number}.pdf"))
    app.refresh_list()
    selected = app.sections[1].id
    app.tree.selection_set(selected)

    app._on_page_counts_resolved({app.sections[0].id: 5})

    assert app.tree.selection() == (selected,)
    assert app.sections[0].page_count == 5


def test_page_counts_arriving_without_selection(app, tmp_path):
    app.sections.append(Section(section_number="1", path=tmp_path / "1.pdf"))
    app.refresh_list()

    app._on_page_counts_resolved({app.sections[0].id: 2, "gone": 7})

    assert app.tree.selection() == ()
    assert app.sections[0].page_count == 2
