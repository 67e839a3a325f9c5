from __future__ import annotations

import inspect
import logging
from datetime import date, datetime

from nicegui import ui

from packtrack.core.aggregator import aggregate, category_distribution, platform_breakdown, trend
from packtrack.core.catalog import PLATFORM_LABELS, SHIFTS, category_config, shift_for_time, shift_window
from packtrack.core.history import SORT_FIELDS, filter_entries, sort_entries
from packtrack.core.models import Order, OrderCategory, Platform, ShiftEntry
from packtrack.core.reconciler import apply_dossier, filter_progress, lookup_dossier, reconcile_program
from packtrack.core.tonnage import format_tonnage, sum_tonnage
from packtrack.core.validation import OrderDraft, ValidationError, build_entry, order_to_draft, validate_order
from packtrack.data.export import export_orders_csv, export_orders_xlsx
from packtrack.data.master_program_io import import_master_program_bytes
from packtrack.data.repository import Repository
from packtrack.ui.widgets import page_container, render_dossier_card, render_nav, stat_card

logger = logging.getLogger(__name__)

_SHIFT_OPTIONS = {w.period.value: w.display() for w in SHIFTS}
_PLATFORM_OPTIONS = {p.value: label for p, label in PLATFORM_LABELS.items()}
_CATEGORY_OPTIONS = {c.value: category_config(c).label for c in OrderCategory}


async def _read_upload(e) -> bytes:
    # NiceGUI moved the uploaded file from `e.content` to `e.file` across versions.
    if hasattr(e, "content"):
        return e.content.read()
    f = getattr(e, "file", None)
    if f is not None and hasattr(f, "read"):
        if inspect.iscoroutinefunction(f.read):
            return await f.read()
        return f.read()
    raise ValueError("could not read uploaded file")


def _draft_payload(state: dict) -> dict:
    return {
        "platform": state["platform"],
        "entry_date": state["entry_date"],
        "shift": state["shift"],
        "operator_name": state["operator_name"],
        "notes": state["notes"],
        "orders": [vars(order_to_draft(o)) for o in state["orders"]],
    }


def _restore_orders(raw_orders: list[dict]) -> list[Order]:
    orders: list[Order] = []
    for d in raw_orders or []:
        try:
            orders.append(validate_order(OrderDraft(**d)))
        except (TypeError, ValidationError) as ex:
            logger.warning("Dropping invalid order from saved draft: %s", ex)
    return orders


def register_pages(repo: Repository, *, title: str = "PackTrack") -> None:
    @ui.page("/")
    def dashboard() -> None:
        render_nav("dashboard", title=title)
        entries = repo.list_entries()
        stats = aggregate(entries)

        with page_container():
            ui.label("Dashboard").classes("text-2xl font-semibold")
            ui.separator()

            if not entries:
                ui.label("No production data yet").classes("text-xl font-semibold")
                ui.label("Start recording shift entries to see analytics and trends.").classes("pt-subtitle")
                return

            with ui.element("div").classes("w-full grid gap-4 grid-cols-1 sm:grid-cols-2 lg:grid-cols-4"):
                stat_card(
                    "Total production",
                    format_tonnage(stats.total_tonnage),
                    f"{stats.entry_count} total entries",
                    icon="inventory_2",
                )
                stat_card("Avg per shift", format_tonnage(stats.average_tonnage), "Lifetime average", icon="trending_up")
                stat_card(
                    "Export focus",
                    format_tonnage(stats.export_tonnage),
                    f"{stats.category_share(OrderCategory.EXPORT):.1f}% of total",
                    icon="local_shipping",
                )
                stat_card("Dossiers", str(stats.unique_dossiers), "Distinct dossier references", icon="tag")

            limit = repo.get_config_int(key="trend_limit", default=10)
            points = trend(entries, limit=limit)
            dist = category_distribution(stats)

            with ui.element("div").classes("w-full grid gap-4 grid-cols-1 lg:grid-cols-3 mt-4"):
                with ui.card().classes("lg:col-span-2"):
                    ui.label(f"Production trend (last {limit} entries)").classes("text-lg font-semibold")
                    ui.echart(
                        {
                            "tooltip": {"trigger": "axis"},
                            "grid": {"left": 50, "right": 20, "top": 30, "bottom": 45},
                            "xAxis": {
                                "type": "category",
                                "data": [f"{p.entry_date:%d %b} {shift_window(p.shift).label}" for p in points],
                            },
                            "yAxis": {"type": "value", "name": "T"},
                            "series": [
                                {
                                    "name": "Tonnage",
                                    "type": "line",
                                    "data": [p.tonnage for p in points],
                                    "smooth": True,
                                    "areaStyle": {},
                                }
                            ],
                        }
                    ).classes("w-full")

                with ui.card():
                    ui.label("Distribution").classes("text-lg font-semibold")
                    ui.echart(
                        {
                            "tooltip": {"trigger": "item"},
                            "series": [
                                {
                                    "type": "pie",
                                    "radius": ["45%", "70%"],
                                    "data": [
                                        {"name": category_config(c).label, "value": tons} for c, tons, _ in dist
                                    ],
                                }
                            ],
                        }
                    ).classes("w-full")
                    for c, tons, share in dist:
                        with ui.row().classes("w-full justify-between text-sm"):
                            ui.label(category_config(c).label)
                            ui.label(f"{share:.0f}%").classes("font-bold")

                    ui.separator()
                    for p, tons in platform_breakdown(entries).items():
                        with ui.row().classes("w-full justify-between text-sm"):
                            ui.label(PLATFORM_LABELS[p])
                            ui.label(format_tonnage(tons))

    @ui.page("/saisie")
    def saisie(entry: int | None = None, platform: str | None = None) -> None:
        render_nav("saisie", title=title)

        editing: ShiftEntry | None = None
        if entry is not None:
            try:
                editing = repo.get_entry(int(entry))
            except KeyError:
                ui.notify(f"Shift entry {entry} not found", color="negative")

        saved = None if editing else repo.load_draft()

        with page_container():
            if editing is None and platform is None and not (saved and saved.get("platform")):
                ui.label("Choose your line").classes("text-2xl font-semibold")
                ui.label("Select the active packaging platform to start the shift.").classes("pt-subtitle")
                with ui.row().classes("w-full gap-6 mt-4"):
                    for p, label in PLATFORM_LABELS.items():
                        ui.button(
                            label,
                            icon="factory",
                            on_click=lambda pp=p: ui.navigate.to(f"/saisie?platform={pp.value}"),
                        ).props("size=xl unelevated color=primary").classes("w-72 h-40")
                return

            if editing is not None:
                state = {
                    "platform": editing.platform.value,
                    "entry_date": editing.entry_date.isoformat(),
                    "shift": editing.shift.value,
                    "operator_name": editing.operator_name,
                    "notes": editing.notes or "",
                    "orders": list(editing.orders),
                }
            else:
                saved = saved or {}
                state = {
                    "platform": platform or saved.get("platform") or Platform.BIG_BAG.value,
                    "entry_date": saved.get("entry_date") or date.today().isoformat(),
                    "shift": saved.get("shift") or shift_for_time(datetime.now().time()).value,
                    "operator_name": saved.get("operator_name") or "",
                    "notes": saved.get("notes") or "",
                    "orders": _restore_orders(saved.get("orders") or []),
                }
            form = {"draft": OrderDraft.for_category(OrderCategory.EXPORT)}
            strict = repo.get_config_bool(key="strict_shipping_fields", default=False)
            program = repo.list_master_program()

            def persist_draft() -> None:
                if editing is None:
                    repo.save_draft(_draft_payload(state))

            def set_meta(key: str, value) -> None:
                state[key] = value
                persist_draft()
                session_total.refresh()

            with ui.row().classes("w-full items-center justify-between"):
                ui.label("Edit shift" if editing else "New production shift").classes("text-2xl font-semibold")
                if editing:
                    ui.badge("EDITING MODE", color="warning")

            with ui.element("div").classes("w-full grid gap-4 grid-cols-1 lg:grid-cols-3"):
                with ui.card().classes("p-4"):
                    ui.label("Session info").classes("text-lg font-semibold")
                    ui.input("Shift operator", value=state["operator_name"],
                             on_change=lambda e: set_meta("operator_name", e.value)).classes("w-full")
                    ui.input("Date", value=state["entry_date"],
                             on_change=lambda e: set_meta("entry_date", e.value)).props("type=date").classes("w-full")
                    ui.select(_PLATFORM_OPTIONS, value=state["platform"], label="Platform",
                              on_change=lambda e: set_meta("platform", e.value)).classes("w-full")
                    ui.radio(_SHIFT_OPTIONS, value=state["shift"],
                             on_change=lambda e: set_meta("shift", e.value))
                    ui.textarea("Notes", value=state["notes"],
                                on_change=lambda e: set_meta("notes", e.value)).classes("w-full")

                    @ui.refreshable
                    def session_total() -> None:
                        total = sum_tonnage(o.tonnage for o in state["orders"])
                        ui.label("Calculated session output").classes("text-xs uppercase text-slate-400 mt-4")
                        ui.label(format_tonnage(total)).classes("text-4xl font-bold text-blue-900")
                        ui.label(f"{len(state['orders'])} orders").classes("text-sm text-slate-500")

                    session_total()

                    def submit() -> None:
                        try:
                            finalized = build_entry(
                                entry_date=date.fromisoformat(str(state["entry_date"])),
                                shift=state["shift"],
                                platform=state["platform"],
                                operator_name=state["operator_name"],
                                orders=state["orders"],
                                notes=state["notes"],
                                submitted_at=editing.submitted_at if editing else None,
                            )
                            if editing is not None:
                                repo.update_entry(int(editing.entry_id), finalized)
                                ui.notify(f"Shift {editing.entry_id} updated")
                            else:
                                new_id = repo.add_entry(finalized)
                                repo.clear_draft()
                                ui.notify(f"Shift {new_id} saved ({format_tonnage(finalized.total_tonnage)})")
                            ui.navigate.to("/historique")
                        except (ValidationError, ValueError) as ex:
                            ui.notify(str(ex), color="negative")
                        except Exception as ex:
                            logger.exception("Saving shift entry failed")
                            ui.notify(f"Database error: {ex}", color="negative")

                    with ui.row().classes("w-full gap-2 mt-2"):
                        ui.button("Update shift" if editing else "Submit shift", icon="save", on_click=submit).props(
                            "unelevated color=" + ("warning" if editing else "primary")
                        )
                        if editing:
                            ui.button("Cancel", on_click=lambda: ui.navigate.to("/historique")).props("flat")

                with ui.card().classes("p-4 lg:col-span-2"):
                    ui.label("Add order").classes("text-lg font-semibold")

                    @ui.refreshable
                    def builder() -> None:
                        d: OrderDraft = form["draft"]
                        cfg = category_config(d.category)

                        def on_category(e) -> None:
                            form["draft"] = form["draft"].switch_category(e.value)
                            builder.refresh()

                        def field(name: str):
                            def _set(e) -> None:
                                setattr(form["draft"], name, e.value)
                                preview.refresh()
                            return _set

                        ui.toggle(_CATEGORY_OPTIONS, value=d.category.value, on_change=on_category)
                        with ui.row().classes("w-full gap-4"):
                            ui.select(list(cfg.articles), value=d.article_code, label="Article",
                                      on_change=field("article_code")).classes("w-40")
                            ui.number("Quantity (units)", value=d.unit_count or None, min=0, step=1,
                                      on_change=field("unit_count")).classes("w-40")
                            ui.toggle({w: f"{w} T" for w in cfg.weight_options}, value=d.unit_weight,
                                      on_change=field("unit_weight"))
                            if cfg.has_pallet:
                                ui.toggle({p.value: p.value.replace("_", " ").title() for p in cfg.allowed_pallets},
                                          value=d.pallet.value if d.pallet else None, on_change=field("pallet"))

                        with ui.row().classes("w-full gap-4"):
                            ui.input("Ops / destination", value=d.ops_name or "",
                                     on_change=field("ops_name")).classes("w-56")
                            dossier_in = ui.input("Dossier", value=d.dossier_reference or "",
                                                  on_change=field("dossier_reference")).classes("w-40")
                            ui.input("SAP order", value=d.sap_code or "", on_change=field("sap_code")).classes("w-40")
                            ui.input("Maritime agent", value=d.maritime_agent or "",
                                     on_change=field("maritime_agent")).classes("w-48")

                            def do_lookup() -> None:
                                ref = dossier_in.value or form["draft"].sap_code
                                target = lookup_dossier(program, ref)
                                if target is None:
                                    ui.notify("No dossier match found", color="warning")
                                    return
                                apply_dossier(form["draft"], target)
                                builder.refresh()

                            ui.button(icon="search", on_click=do_lookup).props("flat round").tooltip(
                                "Look up the dossier in the master program"
                            )

                        if d.category == OrderCategory.EXPORT:
                            with ui.row().classes("w-full gap-4"):
                                ui.input("N° BL", value=d.bl_number or "", on_change=field("bl_number"))
                                ui.input("N° TC", value=d.container_number or "", on_change=field("container_number"))
                                ui.input("N° Plombe", value=d.seal_number or "", on_change=field("seal_number"))
                        elif d.category == OrderCategory.LOCAL:
                            ui.input("Truck matricule", value=d.truck_id or "", on_change=field("truck_id"))

                        @ui.refreshable
                        def preview() -> None:
                            dd: OrderDraft = form["draft"]
                            ui.label(
                                f"{dd.unit_count or 0} × {cfg.units_per_load} × {dd.unit_weight} = "
                                f"{format_tonnage(dd.preview_tonnage())}"
                            ).classes("text-lg font-bold text-blue-900")

                        preview()

                        def add_order() -> None:
                            try:
                                order = validate_order(form["draft"], strict=strict)
                            except ValidationError as ex:
                                ui.notify(str(ex), color="negative")
                                return
                            state["orders"].append(order)
                            form["draft"] = OrderDraft.for_category(order.category)
                            persist_draft()
                            builder.refresh()
                            orders_list.refresh()
                            session_total.refresh()

                        ui.button("Add order", icon="add", on_click=add_order).props("unelevated color=primary")

                    builder()

            @ui.refreshable
            def orders_list() -> None:
                ui.label("Shift orders").classes("text-lg font-semibold mt-4")
                if not state["orders"]:
                    ui.label("(no orders yet)").classes("text-gray-500")
                    return

                def remove(idx: int) -> None:
                    del state["orders"][idx]
                    persist_draft()
                    orders_list.refresh()
                    session_total.refresh()

                for idx, o in enumerate(state["orders"]):
                    with ui.card().classes("w-full p-2"):
                        with ui.row().classes("w-full items-center justify-between"):
                            ui.label(
                                f"{category_config(o.category).label} · {o.article_code} · "
                                f"{o.unit_count} × {o.units_per_load} × {o.unit_weight} T"
                            )
                            ui.label(" · ".join(x for x in (o.dossier_reference, o.sap_code, o.ops_name) if x)).classes(
                                "text-sm text-slate-500"
                            )
                            ui.label(format_tonnage(o.tonnage)).classes("font-bold")
                            ui.button(icon="delete", on_click=lambda i=idx: remove(i)).props("flat round color=negative")

            orders_list()

    @ui.page("/historique")
    def historique() -> None:
        render_nav("historique", title=title)
        entries = repo.list_entries()
        filters = {"search": "", "shift": "All", "platform": "All", "sort": "date", "descending": True}

        def current() -> list[ShiftEntry]:
            rows = filter_entries(
                entries, search=filters["search"], shift=filters["shift"], platform=filters["platform"]
            )
            return sort_entries(rows, filters["sort"], descending=filters["descending"])

        with page_container():
            with ui.row().classes("w-full items-center justify-between"):
                ui.label("Production history").classes("text-2xl font-semibold")
                with ui.row().classes("gap-2"):
                    ui.button(
                        "Export CSV",
                        icon="download",
                        on_click=lambda: ui.download(
                            export_orders_csv(current()), f"packtrack-report-{datetime.now():%Y-%m-%dT%H-%M-%S}.csv"
                        ),
                    ).props("outline")
                    ui.button(
                        "Export Excel",
                        icon="table_view",
                        on_click=lambda: ui.download(
                            export_orders_xlsx(current()), f"packtrack-report-{datetime.now():%Y-%m-%dT%H-%M-%S}.xlsx"
                        ),
                    ).props("outline")

            def set_filter(key: str, value) -> None:
                filters[key] = value
                entry_list.refresh()

            with ui.row().classes("w-full gap-4 items-end"):
                ui.input("Search operator / notes", on_change=lambda e: set_filter("search", e.value)).classes("w-64")
                ui.select({"All": "All shifts", **_SHIFT_OPTIONS}, value="All", label="Shift",
                          on_change=lambda e: set_filter("shift", e.value)).classes("w-56")
                ui.select({"All": "All platforms", **_PLATFORM_OPTIONS}, value="All", label="Platform",
                          on_change=lambda e: set_filter("platform", e.value)).classes("w-44")
                ui.select(list(SORT_FIELDS), value="date", label="Sort by",
                          on_change=lambda e: set_filter("sort", e.value)).classes("w-36")
                ui.checkbox("Descending", value=True, on_change=lambda e: set_filter("descending", bool(e.value)))

            delete_dialog = ui.dialog().props("persistent")
            pending = {"entry": None}

            def ask_delete(e: ShiftEntry) -> None:
                pending["entry"] = e
                delete_dialog.open()

            def confirm_delete() -> None:
                e = pending["entry"]
                delete_dialog.close()
                if e is None:
                    return
                try:
                    repo.delete_entry(int(e.entry_id))
                except Exception as ex:
                    logger.exception("Deleting shift entry failed")
                    ui.notify(f"Failed to delete record: {ex}", color="negative")
                    return
                entries[:] = [x for x in entries if x.entry_id != e.entry_id]
                ui.notify(f"Shift {e.entry_id} deleted")
                entry_list.refresh()

            with delete_dialog:
                with ui.card().classes("p-6"):
                    ui.label("Delete this shift and all its orders? This cannot be undone.")
                    with ui.row().classes("w-full justify-end"):
                        ui.button("Cancel", on_click=delete_dialog.close).props("flat")
                        ui.button("Delete", on_click=confirm_delete).props("unelevated color=negative")

            @ui.refreshable
            def entry_list() -> None:
                rows = current()
                if not rows:
                    ui.label("(no shifts match the filters)").classes("text-gray-500")
                    return
                for e in rows:
                    header = (
                        f"{e.entry_date.isoformat()} · {shift_window(e.shift).label} · "
                        f"{PLATFORM_LABELS[Platform(e.platform)]} · {e.operator_name} · {format_tonnage(e.total_tonnage)}"
                    )
                    with ui.expansion(header, icon="assignment").classes("w-full bg-white"):
                        if e.notes:
                            ui.label(e.notes).classes("text-sm text-slate-600 italic")
                        ui.table(
                            columns=[
                                {"name": "category", "label": "Category", "field": "category"},
                                {"name": "article", "label": "Article", "field": "article"},
                                {"name": "refs", "label": "Dossier / SAP", "field": "refs"},
                                {"name": "shipping", "label": "BL / TC / Seal / Truck", "field": "shipping"},
                                {"name": "qty", "label": "Qty", "field": "qty"},
                                {"name": "weight", "label": "T/unit", "field": "weight"},
                                {"name": "pallet", "label": "Pallet", "field": "pallet"},
                                {"name": "tons", "label": "Tonnage", "field": "tons"},
                            ],
                            rows=[
                                {
                                    "_row_id": i,
                                    "category": category_config(o.category).label,
                                    "article": o.article_code,
                                    "refs": " / ".join(x for x in (o.dossier_reference, o.sap_code) if x) or "-",
                                    "shipping": " / ".join(
                                        x for x in (o.bl_number, o.container_number, o.seal_number, o.truck_id) if x
                                    ) or "-",
                                    "qty": o.unit_count,
                                    "weight": o.unit_weight,
                                    "pallet": o.pallet.value if o.pallet else "-",
                                    "tons": f"{o.tonnage:,.2f}",
                                }
                                for i, o in enumerate(e.orders)
                            ],
                            row_key="_row_id",
                        ).classes("w-full").props("dense flat bordered")
                        with ui.row().classes("w-full justify-end"):
                            ui.button(
                                "Edit", icon="edit", on_click=lambda x=e: ui.navigate.to(f"/saisie?entry={x.entry_id}")
                            ).props("flat")
                            ui.button("Delete", icon="delete", on_click=lambda x=e: ask_delete(x)).props(
                                "flat color=negative"
                            )

            entry_list()

    @ui.page("/programme")
    def programme() -> None:
        render_nav("programme", title=title)
        progress = reconcile_program(repo.list_master_program(), repo.list_entries())
        search = {"term": ""}

        with page_container():
            with ui.row().classes("w-full items-center justify-between"):
                with ui.column().classes("gap-0"):
                    ui.label("Export program").classes("text-2xl font-semibold")
                    ui.label("Master target tracking").classes("pt-subtitle")
                ui.input(
                    "Search dossier, SAP or destination",
                    on_change=lambda e: (search.update(term=e.value or ""), dossier_list.refresh()),
                ).classes("w-96")

            @ui.refreshable
            def dossier_list() -> None:
                rows = filter_progress(progress, search["term"])
                if not rows:
                    ui.label("No dossiers found matching your search").classes("text-gray-500")
                    return
                for p in rows:
                    render_dossier_card(p)

            dossier_list()

            ui.label(
                "Progress is tracked by matching the Dossier or SAP order entered on each shift order "
                "against the master program."
            ).classes("text-sm text-slate-400 italic mt-4")

            async def handle_upload(e) -> None:
                try:
                    content = await _read_upload(e)
                    rows = import_master_program_bytes(content)
                    n = repo.replace_master_program(rows)
                    ui.notify(f"Master program imported ({n} dossiers)")
                    ui.navigate.to("/programme")
                except Exception as ex:
                    logger.exception("Master program import failed")
                    ui.notify(f"Error importing master program: {ex}", color="negative")

            with ui.card().classes("p-4 mt-4"):
                ui.label("Update master program").classes("text-lg font-semibold")
                ui.label("Excel with N° Dossier, SAP, Destination, Nbre, Qté, Maritime, PIC, dates.").classes(
                    "text-slate-600"
                )
                ui.upload(label="Master program (.xlsx)", on_upload=handle_upload).props("accept=.xlsx max-files=1")
