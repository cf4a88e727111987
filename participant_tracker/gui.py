# -------------------------------------------------------------------------------------------------
# gui code sections
# -------------------------------------------------------------------------------------------------
# constants and defaults
# gui controller
# initialization
# tree helpers
# inline editors
# layout and panels
# input wiring
# record actions
# csv import and export
# view refresh
# table sorting
# state updates
# run loop
# entrypoint
# -------------------------------------------------------------------------------------------------

from pathlib import Path
import tkinter as tk
from tkinter import filedialog, messagebox

import ttkbootstrap as ttk
from ttkbootstrap.constants import END, LEFT, W, X

from participant_tracker import utils
from participant_tracker.app import Tracker, load_tracker
from participant_tracker.config import Config
from participant_tracker.participant import resolve_field_name
from participant_tracker.state import AddParticipant, SetDraft, SetFilter, SetSearch
from participant_tracker.view import FILTER_LABELS, FILTER_MODES

# constants and defaults -------------------------------------------------------------------
# centralizes user interface labels, colors, and column layout
PALETTE = {
    "background": "#EAEFF3",
    "panel": "#EFF1F3",
    "header": "#D4DEE7",
    "field": "#F2F4F7",
    "text": "#111111",
    "accent": "#3F627D",
}
TABLE_COLUMNS = {
    "name": ("Name", 200, W),
    "identifier": ("ID/Ref", 110, W),
    "phone": ("Phone", 120, W),
    "attended": ("Attended", 80, "center"),
    "receivedStipend": ("Stipend", 80, "center"),
    "stipendDate": ("Date", 150, W),
    "markedBy": ("Marked by", 120, W),
    "notes": ("Notes", 240, W),
}
TOGGLE_COLUMNS = ("attended", "receivedStipend")
SUMMARY_LABELS = {
    "total_count": "Total",
    "attended_count": "Attended",
    "paid_count": "Received",
    "unpaid_count": "Not yet received",
}
CSV_FILETYPES = [("CSV", "*.csv"), ("All files", "*.*")]


# gui controller ---------------------------------------------------------------------------
# wraps the tracker controller with widgets; all record changes go through the tracker
class TrackerGUI:
    """GUI for recording participants, attendance, and stipend status."""

    # initialization ---------------------------------------------------------------------------
    def __init__(self, tracker: Tracker, config: Config | None = None):
        """Initialize GUI state, resources, and layout."""
        self.tracker = tracker
        self.config = config or Config()

        self.root = ttk.Window(themename="flatly")
        self.root.title("Participant Tracker")
        self.root.geometry("1500x900")
        self.root.minsize(1000, 600)

        self.sort_column: str | None = None
        self.sort_descending = False
        self.cell_editor: ttk.Entry | None = None
        self.context_menu: tk.Menu | None = None

        self.name_variable = tk.StringVar()
        self.identifier_variable = tk.StringVar()
        self.phone_variable = tk.StringVar()
        self.search_variable = tk.StringVar(value=tracker.state.search)
        self.filter_variable = tk.StringVar(
            value=FILTER_LABELS[tracker.state.filter_mode]
        )
        self.replace_on_import_variable = tk.BooleanVar(value=False)
        self.status_variable = tk.StringVar(value="Ready")
        self.summary_variables = {
            key: tk.StringVar(value="0") for key in SUMMARY_LABELS
        }

        style = ttk.Style()
        palette = PALETTE
        self.root.configure(background=palette["background"])
        self.root.option_add("*TButton.takefocus", "0")
        style.configure("TFrame", background=palette["panel"])
        style.configure("TLabel", font=("Segoe UI", 10), background=palette["panel"])
        style.configure("TButton", font=("Segoe UI", 10))
        style.configure(
            "TEntry",
            fieldbackground=palette["field"],
            foreground=palette["text"],
        )
        style.configure("TLabelframe", background=palette["panel"])
        style.configure(
            "TLabelframe.Label",
            font=("Segoe UI", 10, "bold"),
            background=palette["panel"],
            foreground=style.colors.dark,
        )
        style.configure(
            "Treeview",
            rowheight=30,
            background=palette["panel"],
            fieldbackground=palette["panel"],
        )
        style.configure(
            "Treeview.Heading",
            background=palette["header"],
            foreground=style.colors.dark,
            font=("Segoe UI", 9, "bold"),
            borderwidth=1,
            relief="raised",
        )
        style.map("Treeview.Heading", background=[("active", palette["header"])])
        style.configure(
            "Count.TLabel",
            font=("Segoe UI", 18, "bold"),
            background=palette["panel"],
            foreground=palette["accent"],
        )
        style.configure(
            "Status.TLabel",
            background=palette["panel"],
            foreground=palette["text"],
            font=("Segoe UI", 9),
        )

        self._build_layout()
        self._register_variable_traces()
        self._refresh_views()

        self.root.protocol("WM_DELETE_WINDOW", self._on_close)

    # tree helpers -----------------------------------------------------------------------------
    def _get_tree_column_name(self, column_id: str) -> str | None:
        """Map a Treeview column id to its logical column name.

        Args:
            column_id: Tk column identifier (ex: "#2").

        Returns:
            str | None: Column name or None when unknown.
        """
        if column_id == "#0":
            return None
        try:
            index = int(column_id[1:]) - 1
        except ValueError:
            return None
        columns = list(self.tree["columns"])
        if 0 <= index < len(columns):
            return columns[index]
        return None

    # inline editors ---------------------------------------------------------------------------
    # edits text cells in place so the table behaves like a form
    def _clear_cell_editor(self) -> None:
        """Remove any active inline editor."""
        if self.cell_editor:
            self.cell_editor.destroy()
            self.cell_editor = None

    def _show_cell_editor(
        self, item_id: str, column_id: str, initial: str, on_commit
    ) -> None:
        """Show an inline entry over a table cell.

        Args:
            item_id: Row identifier (the participant id).
            column_id: Column identifier to edit.
            initial: Text placed in the entry.
            on_commit: Callback invoked with the entered text.
        """
        self._clear_cell_editor()
        bbox = self.tree.bbox(item_id, column_id)
        if not bbox:
            return
        x, y, width, height = bbox
        editor = ttk.Entry(self.tree)
        editor.insert(0, initial)
        editor.select_range(0, END)
        editor.place(x=x, y=y, width=width, height=height)
        editor.focus_set()
        self.cell_editor = editor

        def finish(commit: bool) -> None:
            """Finalize the inline editor with optional commit."""
            if self.cell_editor is not editor:
                return
            value = editor.get()
            editor.destroy()
            self.cell_editor = None
            if commit:
                on_commit(value)

        editor.bind("<Return>", lambda _event: finish(True))
        editor.bind("<FocusOut>", lambda _event: finish(True))
        editor.bind("<Escape>", lambda _event: finish(False))

    # layout and panels ------------------------------------------------------------------------
    def _build_layout(self) -> None:
        """Build the top-level layout containers."""
        container = tk.Frame(self.root, background=PALETTE["background"])
        container.grid(row=0, column=0, sticky="nsew", padx=10, pady=10)
        self.root.rowconfigure(0, weight=1)
        self.root.columnconfigure(0, weight=1)

        # counters and forms on the left, the participant table takes the rest
        left_column = tk.Frame(container, background=PALETTE["background"])
        right_column = tk.Frame(container, background=PALETTE["background"])
        left_column.grid(row=0, column=0, sticky="nsew", padx=(0, 10))
        right_column.grid(row=0, column=1, sticky="nsew")
        container.columnconfigure(0, weight=0)
        container.columnconfigure(1, weight=1)
        container.rowconfigure(0, weight=1)
        left_column.columnconfigure(0, weight=1)
        right_column.columnconfigure(0, weight=1)
        right_column.rowconfigure(0, weight=1)

        summary_panel = ttk.Labelframe(left_column, text="Summary", padding=10)
        summary_panel.grid(row=0, column=0, sticky="nsew", pady=(0, 10))
        self._build_summary_panel(summary_panel)

        add_panel = ttk.Labelframe(left_column, text="Add Participant", padding=10)
        add_panel.grid(row=1, column=0, sticky="nsew", pady=(0, 10))
        self._build_add_panel(add_panel)

        data_panel = ttk.Labelframe(left_column, text="Data", padding=10)
        data_panel.grid(row=2, column=0, sticky="nsew")
        self._build_data_panel(data_panel)

        table_panel = ttk.Labelframe(right_column, text="Participants", padding=10)
        table_panel.grid(row=0, column=0, sticky="nsew")
        self._build_table_panel(table_panel)

    def _build_summary_panel(self, parent: ttk.Labelframe) -> None:
        for index, (key, label) in enumerate(SUMMARY_LABELS.items()):
            row, column = divmod(index, 2)
            cell = ttk.Frame(parent, padding=(6, 4))
            cell.grid(row=row, column=column, sticky="nsew")
            ttk.Label(cell, text=label).pack(anchor=W)
            ttk.Label(
                cell, textvariable=self.summary_variables[key], style="Count.TLabel"
            ).pack(anchor=W)
        parent.columnconfigure(0, weight=1)
        parent.columnconfigure(1, weight=1)

    def _build_add_panel(self, parent: ttk.Labelframe) -> None:
        form = ttk.Frame(parent)
        form.pack(fill=X)
        self._add_labeled_entry(form, "Full name", self.name_variable, 0)
        self._add_labeled_entry(form, "ID/Ref no.", self.identifier_variable, 1)
        self._add_labeled_entry(form, "Phone no.", self.phone_variable, 2)
        ttk.Button(
            parent,
            text="Add",
            bootstyle="primary",
            command=self._add_participant,
        ).pack(anchor="e", pady=(8, 0))

    def _build_data_panel(self, parent: ttk.Labelframe) -> None:
        button_row = ttk.Frame(parent)
        button_row.pack(fill=X, pady=(0, 8))
        ttk.Button(button_row, text="Import CSV", command=self._import_csv).pack(
            side=LEFT, padx=4
        )
        ttk.Button(
            button_row,
            text="Export CSV",
            bootstyle="success",
            command=self._export_csv,
        ).pack(side=LEFT, padx=4)
        ttk.Checkbutton(
            parent,
            text="Replace list on import",
            variable=self.replace_on_import_variable,
        ).pack(anchor=W, pady=(0, 6))

        storage_row = ttk.Frame(parent)
        storage_row.pack(fill=X, pady=(0, 6))
        ttk.Label(storage_row, text="Storage").pack(side=LEFT, padx=(0, 6))
        storage_entry = ttk.Entry(storage_row, width=40)
        storage_entry.insert(0, str(self.tracker.storage.path))
        storage_entry.configure(state="readonly")
        storage_entry.pack(side=LEFT, fill=X, expand=True)

        ttk.Label(
            parent,
            textvariable=self.status_variable,
            anchor=W,
            style="Status.TLabel",
        ).pack(fill=X)

    def _build_table_panel(self, parent: ttk.Labelframe) -> None:
        parent.columnconfigure(0, weight=1)
        parent.rowconfigure(1, weight=1)

        filter_row = ttk.Frame(parent)
        filter_row.grid(row=0, column=0, columnspan=2, sticky="ew", pady=(0, 6))
        ttk.Label(filter_row, text="Search").pack(side=LEFT, padx=(0, 6))
        ttk.Entry(filter_row, textvariable=self.search_variable, width=40).pack(
            side=LEFT, padx=(0, 12)
        )
        ttk.Label(filter_row, text="Show").pack(side=LEFT, padx=(0, 6))
        ttk.Combobox(
            filter_row,
            textvariable=self.filter_variable,
            values=[FILTER_LABELS[mode] for mode in FILTER_MODES],
            state="readonly",
            width=18,
        ).pack(side=LEFT)

        self.tree = ttk.Treeview(
            parent,
            columns=tuple(TABLE_COLUMNS),
            show="headings",
            height=20,
        )
        for column_name, (_, width, anchor) in TABLE_COLUMNS.items():
            self.tree.column(column_name, width=width, anchor=anchor)
        self._update_sort_headings()
        self.tree.bind("<Button-1>", self._on_tree_click)
        self.tree.bind("<Double-1>", self._on_tree_double_click)
        self.tree.bind("<Button-3>", self._on_tree_right_click)
        self.tree.grid(row=1, column=0, sticky="nsew")

        scrollbar = ttk.Scrollbar(parent, orient="vertical")
        scrollbar.grid(row=1, column=1, sticky="ns")
        self.tree.configure(yscrollcommand=scrollbar.set)
        scrollbar.configure(command=self.tree.yview)

        self.context_menu = tk.Menu(self.root, tearoff=0)
        self.context_menu.add_command(label="Delete", command=self._remove_selected)

    def _add_labeled_entry(
        self, parent: ttk.Frame, label: str, variable: tk.StringVar, row: int
    ) -> None:
        """Add a label+entry pair to a grid row.

        Args:
            parent: Container for the widgets.
            label: Label text.
            variable: StringVar bound to the entry.
            row: Grid row.
        """
        ttk.Label(parent, text=label).grid(row=row, column=0, sticky=W, padx=4, pady=2)
        entry_widget = ttk.Entry(parent, textvariable=variable, width=28)
        entry_widget.grid(row=row, column=1, sticky="ew", padx=4, pady=2)
        entry_widget.bind("<Return>", lambda _event: self._add_participant())
        parent.columnconfigure(1, weight=1)

    # input wiring -----------------------------------------------------------------------------
    def _register_variable_traces(self) -> None:
        """Mirror form and filter inputs into the tracker state."""
        self.name_variable.trace_add("write", self._on_draft_change)
        self.identifier_variable.trace_add("write", self._on_draft_change)
        self.phone_variable.trace_add("write", self._on_draft_change)
        self.search_variable.trace_add("write", self._on_search_change)
        self.filter_variable.trace_add("write", self._on_filter_change)

    def _on_draft_change(self, *_) -> None:
        self.tracker.dispatch(
            SetDraft(
                name=self.name_variable.get(),
                identifier=self.identifier_variable.get(),
                phone=self.phone_variable.get(),
            )
        )

    def _on_search_change(self, *_) -> None:
        self.tracker.dispatch(SetSearch(text=self.search_variable.get()))
        self._refresh_table()

    def _on_filter_change(self, *_) -> None:
        labels_to_modes = {label: mode for mode, label in FILTER_LABELS.items()}
        mode = labels_to_modes.get(self.filter_variable.get(), "all")
        self.tracker.dispatch(SetFilter(mode=mode))
        self._refresh_table()

    def _on_close(self) -> None:
        """Close the application window."""
        self.root.destroy()

    # record actions ---------------------------------------------------------------------------
    def _add_participant(self) -> None:
        """Add the participant described by the form."""
        before = len(self.tracker.records)
        self.tracker.dispatch(AddParticipant())
        if len(self.tracker.records) == before:
            self._set_status("Enter a name first")
            return
        # the reducer cleared the draft; clear the form to match
        for variable in (
            self.name_variable,
            self.identifier_variable,
            self.phone_variable,
        ):
            variable.set("")
        self._set_status(f"Added {self.tracker.records[0]}")
        self._refresh_views()

    def _on_tree_click(self, event) -> str | None:
        """Toggle flag cells on a single click.

        Args:
            event: Tkinter click event.

        Returns:
            str | None: "break" when the click is handled.
        """
        region = self.tree.identify_region(event.x, event.y)
        if region == "heading":
            return None
        item_id = self.tree.identify_row(event.y)
        if not item_id:
            return None
        column_name = self._get_tree_column_name(self.tree.identify_column(event.x))
        if column_name not in TOGGLE_COLUMNS:
            return None

        self.tree.selection_set(item_id)
        self._toggle_flag(item_id, column_name)
        return "break"

    def _on_tree_double_click(self, event) -> str | None:
        """Open the inline editor for text cells."""
        if self.tree.identify_region(event.x, event.y) != "cell":
            return None
        item_id = self.tree.identify_row(event.y)
        column_id = self.tree.identify_column(event.x)
        column_name = self._get_tree_column_name(column_id)
        if not item_id or not column_name or column_name in TOGGLE_COLUMNS:
            return None

        record = self.tracker.get(item_id)
        if record is None:
            return "break"
        initial = getattr(record, resolve_field_name(column_name)) or ""
        self._show_cell_editor(
            item_id,
            column_id,
            initial,
            lambda value: self._commit_text(item_id, column_name, value),
        )
        return "break"

    def _on_tree_right_click(self, event) -> str | None:
        item_id = self.tree.identify_row(event.y)
        if not item_id:
            return None
        self.tree.selection_set(item_id)
        if self.context_menu:
            self.context_menu.tk_popup(event.x_root, event.y_root)
        return "break"

    def _toggle_flag(self, participant_id: str, column_name: str) -> None:
        """Flip a flag column on one participant."""
        record = self.tracker.get(participant_id)
        if record is None:
            return
        current = getattr(record, resolve_field_name(column_name))
        self._commit_field(participant_id, column_name, not current)

    def _commit_text(self, participant_id: str, column_name: str, value: str) -> None:
        """Store edited cell text; blank optional text becomes None.

        Args:
            participant_id: Participant to update.
            column_name: Column being edited.
            value: Text from the inline editor.
        """
        if column_name == "name":
            value = value.strip()
            if not value:
                messagebox.showwarning("Name", "Name cannot be blank.")
                return
            self._commit_field(participant_id, column_name, value)
            return
        self._commit_field(participant_id, column_name, utils.clean_optional(value))

    def _commit_field(self, participant_id: str, field: str, value) -> None:
        try:
            self.tracker.set_field(participant_id, field, value)
        except OSError as exc:
            messagebox.showerror("Error", f"Failed to save: {exc}")
            return
        self._refresh_views()

    def _remove_selected(self) -> None:
        """Remove the selected participant after confirmation."""
        selection = self.tree.selection()
        if not selection:
            return
        record = self.tracker.get(selection[0])
        if record is None:
            return
        if not messagebox.askyesno("Delete", f"Remove {record}?"):
            return
        try:
            self.tracker.remove(record.id)
        except OSError as exc:
            messagebox.showerror("Error", f"Failed to save: {exc}")
            return
        self._set_status(f"Removed {record}")
        self._refresh_views()

    # csv import and export --------------------------------------------------------------------
    def _import_csv(self) -> None:
        """Prompt for a CSV file and merge it into the list."""
        path = filedialog.askopenfilename(filetypes=CSV_FILETYPES)
        if not path:
            return
        try:
            count = self.tracker.import_csv(
                Path(path), replace=self.replace_on_import_variable.get()
            )
        except OSError as exc:
            messagebox.showerror("Error", f"Failed to import CSV: {exc}")
            return
        self._set_status(f"Imported {count} participant(s)")
        self._refresh_views()

    def _export_csv(self) -> None:
        """Prompt for a destination and write the CSV export."""
        path = filedialog.asksaveasfilename(
            defaultextension=".csv",
            initialfile=self.config.export_filename,
            filetypes=CSV_FILETYPES,
        )
        if not path:
            return
        try:
            saved = self.tracker.export_csv(Path(path))
        except OSError as exc:
            messagebox.showerror("Error", f"Failed to export CSV: {exc}")
            return
        self._set_status(f"Saved {saved.name}")

    # view refresh -----------------------------------------------------------------------------
    def _refresh_views(self) -> None:
        self._refresh_summary()
        self._refresh_table()

    def _refresh_summary(self) -> None:
        summary = self.tracker.summary()
        for key, variable in self.summary_variables.items():
            variable.set(str(getattr(summary, key)))

    def _refresh_table(self) -> None:
        """Render the filtered participant list."""
        self._clear_cell_editor()
        self.tree.delete(*self.tree.get_children())

        records = self.tracker.visible_records()
        if self.sort_column is not None:
            records = utils.sort_records(
                records,
                resolve_field_name(self.sort_column),
                ascending=not self.sort_descending,
            )

        for r in records:
            self.tree.insert(
                "",
                END,
                iid=r.id,
                values=(
                    r.name,
                    r.identifier or "",
                    r.phone or "",
                    utils.format_flag(r.attended),
                    utils.format_flag(r.received_stipend),
                    utils.format_stipend_date(r.stipend_date),
                    r.marked_by or "",
                    r.notes or "",
                ),
            )

    # table sorting ----------------------------------------------------------------------------
    # sorting changes only the display order, never the stored order
    def _sort_table(self, column_name: str) -> None:
        """Sort the table by a selected column; a third click restores list order.

        Args:
            column_name: Column key to sort by.
        """
        if self.sort_column != column_name:
            self.sort_column = column_name
            self.sort_descending = False
        elif not self.sort_descending:
            self.sort_descending = True
        else:
            self.sort_column = None
            self.sort_descending = False
        self._update_sort_headings()
        self._refresh_table()

    def _update_sort_headings(self) -> None:
        """Update table headers to show sort direction."""
        for column_name, (label, _, anchor) in TABLE_COLUMNS.items():
            heading_label = label
            if column_name == self.sort_column:
                heading_label = f"{label} ↓" if self.sort_descending else f"{label} ↑"
            self.tree.heading(
                column_name,
                text=heading_label,
                anchor=anchor,
                command=lambda c=column_name: self._sort_table(c),
            )

    # state updates ----------------------------------------------------------------------------
    def _set_status(self, text: str) -> None:
        """Update the status message.

        Args:
            text: Status text to display.
        """
        self.status_variable.set(text)

    # run loop --------------------------------------------------------------------------------
    def run(self) -> None:
        """Start the Tkinter main loop."""
        self.root.mainloop()


# entrypoint ----------------------------------------------------------------------------------
def main() -> None:
    config = Config()
    TrackerGUI(load_tracker(config), config).run()


if __name__ == "__main__":
    main()
