"""Tests for the shared page chrome."""

from unittest.mock import MagicMock

from packtrack.ui import widgets


def test_theme_applied_on_every_page(monkeypatch):
    fake_ui = MagicMock()
    monkeypatch.setattr(widgets, "ui", fake_ui)

    widgets.render_nav("dashboard")
    widgets.render_nav("programme")

    assert fake_ui.colors.call_count == 2
    assert fake_ui.add_css.call_count == 2
    assert ".pt-dossier" in fake_ui.add_css.call_args.args[0]
