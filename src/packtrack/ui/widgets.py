from __future__ import annotations

from contextlib import contextmanager

from nicegui import ui

from packtrack.core.models import DossierProgress
from packtrack.core.tonnage import format_tonnage


def apply_theme() -> None:
    """Apply the theme to the current page (colors and CSS are per client)."""
    try:
        ui.colors(
            primary="#1e3a8a",  # blue-900
            secondary="#c8a24a",  # gold
            positive="#10b981",  # emerald-500
            negative="#dc2626",  # red-600
            warning="#f59e0b",  # amber-500
        )
    except Exception:
        # Keep running even if NiceGUI changes the API.
        pass

    ui.add_css(
        """
        body { background: #f8fafc; }
        .pt-container { max-width: 1200px; margin: 0 auto; padding: 16px; }
        .pt-subtitle { color: #475569; }
        .pt-header { border-bottom: 1px solid rgba(15, 23, 42, 0.08); }
        .pt-kpi .q-card { border: 1px solid rgba(15, 23, 42, 0.08); }
        .pt-dossier { border-left: 8px solid #1e3a8a; }
        """
    )


@contextmanager
def page_container():
    with ui.element("div").classes("pt-container"):
        yield


def render_nav(active: str | None = None, *, title: str = "PackTrack") -> None:
    apply_theme()
    active_key = active or "dashboard"
    sections: list[tuple[str, str, str]] = [
        ("dashboard", "Dashboard", "/"),
        ("saisie", "New shift", "/saisie"),
        ("historique", "History", "/historique"),
        ("programme", "Export program", "/programme"),
    ]

    with ui.header().classes("pt-header bg-white text-slate-900"):
        with ui.row().classes("w-full items-center justify-between gap-4 px-4 py-2"):
            with ui.row().classes("items-center gap-3"):
                ui.icon("inventory_2", color="primary").classes("text-3xl")
                ui.label(title).classes("text-xl md:text-2xl font-semibold leading-none")
            with ui.row().classes("items-center gap-1"):
                for key, label, path in sections:
                    props = "dense no-caps color=primary" + (" unelevated" if key == active_key else " flat")
                    ui.button(label, on_click=lambda p=path: ui.navigate.to(p)).props(props)


def stat_card(label: str, value: str, subtext: str = "", *, icon: str = "insights") -> None:
    with ui.card().classes("p-4 pt-kpi"):
        with ui.row().classes("items-center gap-3"):
            ui.icon(icon, color="primary").classes("text-2xl")
            ui.label(label).classes("text-sm text-slate-500")
        ui.label(value).classes("text-2xl font-bold")
        if subtext:
            ui.label(subtext).classes("text-xs text-slate-400")


def render_dossier_card(p: DossierProgress) -> None:
    t = p.target
    with ui.card().classes("w-full p-4 pt-dossier"):
        with ui.row().classes("w-full items-start justify-between gap-6"):
            with ui.column().classes("gap-1 min-w-[260px]"):
                ui.label(f"# {t.dossier_reference or '-'}").classes("text-2xl font-bold text-blue-900")
                ui.label(f"SAP: {t.sap_code or '-'}").classes("text-sm text-slate-500")
                with ui.row().classes("w-full justify-between text-xs text-slate-500"):
                    ui.label("Production progress")
                    ui.label(f"{p.percent}%").classes("font-bold")
                ui.linear_progress(value=p.percent / 100.0, show_value=False).props(
                    "rounded size=10px " + ("color=positive" if p.is_complete else "color=primary")
                )
                with ui.row().classes("w-full justify-between text-xs text-slate-500"):
                    ui.label(f"Target: {t.planned_tonnage:,.2f} T")
                    ui.label(f"Done: {p.produced_tonnage:,.2f} T").classes("font-bold")

            with ui.grid(columns=2).classes("gap-x-8 gap-y-2 text-sm"):
                ui.label("Destination").classes("text-slate-400")
                ui.label(t.destination or "-")
                ui.label("Logistics / PIC").classes("text-slate-400")
                ui.label(f"{t.maritime_agent or '-'} · {t.manager or '-'}")
                ui.label("Window").classes("text-slate-400")
                ui.label(f"{t.start_date or '?'} → {t.deadline or '?'}")
                ui.label("Units").classes("text-slate-400")
                ui.label(f"{p.produced_units} / {t.planned_units} (remaining {p.remaining_units})")

            with ui.column().classes("gap-1 min-w-[200px]"):
                ui.label("Recent activity").classes("text-xs uppercase text-slate-400")
                recent = p.recent(3)
                if not recent:
                    ui.label("Awaiting production").classes("text-xs text-slate-300")
                for h in recent:
                    with ui.row().classes("w-full justify-between text-xs"):
                        ui.label(h.entry_date.isoformat()).classes("text-slate-400")
                        ui.label(format_tonnage(h.tonnage)).classes("font-bold text-blue-900")
                if p.is_complete:
                    ui.icon("check_circle", color="positive").classes("text-3xl")
