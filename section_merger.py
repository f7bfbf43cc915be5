import tkinter as tk
from tkinter import filedialog, messagebox, ttk
from PIL import ImageTk
from pathlib import Path
import ctypes
import logging
import os
import threading

from pdfsections.assembler import Progress, save_output
from pdfsections.flatten import GhostscriptFlattener
from pdfsections.layout import Anchor, Horizontal, LayoutConfig, Orientation, Vertical
from pdfsections.preview import render_pages
from pdfsections.runner import AssemblyRunner
from pdfsections.sections import SectionList, read_page_counts
from pdfsections.settings import (
    config_from_settings,
    config_to_settings,
    default_config_path,
    load_settings,
    save_settings,
)

__VERSION__ = "1.0.0"

logger = logging.getLogger("section_merger")

PREVIEW_WIDTH = 520


def configure_logging(level=logging.INFO) -> None:
    formatter = logging.Formatter('%(asctime)s-%(levelname)s-[%(name)s]: %(message)s')
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(handler)


def _enable_dpi_awareness() -> None:
    if os.name != 'nt':
        return
    try:
        ctypes.windll.shcore.SetProcessDpiAwareness(2)
    except Exception:
        try:
            ctypes.windll.user32.SetProcessDPIAware()
        except Exception:
            pass


class ToolTip:
    """Create a tooltip for a given widget"""
    def __init__(self, widget, text):
        self.widget = widget
        self.text = text
        self.tooltip_window = None
        self.widget.bind("<Enter>", self.show_tooltip)
        self.widget.bind("<Leave>", self.hide_tooltip)

    def show_tooltip(self, event=None):
        if self.tooltip_window or not self.text:
            return
        x = self.widget.winfo_rootx() + 25
        y = self.widget.winfo_rooty() + 25

        self.tooltip_window = tw = tk.Toplevel(self.widget)
        tw.wm_overrideredirect(True)
        tw.wm_geometry(f"+{x}+{y}")

        label = tk.Label(tw, text=self.text, justify=tk.LEFT,
                         background="#ffffe0", relief=tk.SOLID, borderwidth=1,
                         font=("Arial", 9), padx=8, pady=6)
        label.pack()

    def hide_tooltip(self, event=None):
        if self.tooltip_window:
            self.tooltip_window.destroy()
            self.tooltip_window = None


class SectionMergerApp:
    def _get_dpi_scale(self) -> float:
        try:
            return self.root.winfo_fpixels("1i") / 96.0
        except tk.TclError:
            return 1.0

    def _scale_geometry(self, width: int, height: int) -> tuple[int, int]:
        scale = self._get_dpi_scale()
        return max(1, int(width * scale)), max(1, int(height * scale))

    def __init__(self, root):
        self.root = root
        self.root.title("PDF Section Merger")

        window_width, window_height = self._scale_geometry(1100, 720)
        screen_width = self.root.winfo_screenwidth()
        center_x = int((screen_width - window_width) / 2)
        self.root.geometry(f"{window_width}x{window_height}+{center_x}+5")
        self.root.minsize(600, 400)

        self.config_file = default_config_path()
        self.config = config_from_settings(load_settings(self.config_file))

        self.sections = SectionList()
        self.output_bytes = None
        self.preview_images = []
        self.drag_start_index = None
        self.add_files_directory = str(Path.home())

        self.flattener = GhostscriptFlattener()
        self.ghostscript_available = None
        self.runner = AssemblyRunner(
            on_result=self._on_assembly_done,
            on_error=self._on_assembly_error,
            on_progress=self._on_progress,
            dispatch=lambda func, *args: self.root.after(0, func, *args),
            flattener=self.flattener,
        )

        # Tk variables mirror the layout configuration
        self.insert_blank_page = tk.BooleanVar(value=self.config.insert_blank_page)
        self.flatten_annotations = tk.BooleanVar(value=self.config.flatten_annotations)
        self.orientation = tk.StringVar(value=self.config.orientation.value)
        self.number_format = tk.StringVar(value=self.config.number_format)
        self.horizontal = tk.StringVar(value=self.config.anchor.horizontal.value)
        self.vertical = tk.StringVar(value=self.config.anchor.vertical.value)
        self.margin = tk.StringVar(value=str(self.config.margin))
        self.font_size = tk.StringVar(value=str(self.config.font_size))
        self.auto_update = tk.BooleanVar(value=self.config.auto_update)
        self.section_number = tk.StringVar()

        self._build_ui()
        self._check_ghostscript()

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _build_ui(self):
        paned = ttk.PanedWindow(self.root, orient=tk.HORIZONTAL)
        paned.pack(fill=tk.BOTH, expand=True)

        left = ttk.Frame(paned, padding=10)
        right = ttk.Frame(paned, padding=10)
        paned.add(left, weight=1)
        paned.add(right, weight=2)

        self.notice_label = tk.Label(left, text="", fg="#8a6d00", wraplength=320, justify=tk.LEFT)
        self.notice_label.pack(fill=tk.X)

        self._build_settings(left)
        self._build_section_list(left)
        self._build_toolbar(right)
        self._build_preview(right)

    def _build_settings(self, parent):
        frame = ttk.LabelFrame(parent, text="Settings", padding=8)
        frame.pack(fill=tk.X, pady=(0, 8))

        merge_check = ttk.Checkbutton(frame, text="Merge files")
        merge_check.state(["selected", "disabled"])
        merge_check.grid(row=0, column=0, columnspan=2, sticky="w")

        ttk.Checkbutton(
            frame, text="Insert blank page between sections",
            variable=self.insert_blank_page, command=self._on_settings_changed
        ).grid(row=1, column=0, columnspan=2, sticky="w")

        self.flatten_checkbox = ttk.Checkbutton(
            frame, text="Flatten annotations (Ghostscript)",
            variable=self.flatten_annotations, command=self._on_settings_changed
        )
        self.flatten_checkbox.grid(row=2, column=0, columnspan=2, sticky="w")

        rows = [
            ("Orientation", self.orientation, [o.value for o in Orientation]),
            ("Vertical position", self.vertical, [v.value for v in Vertical]),
            ("Horizontal position", self.horizontal, [h.value for h in Horizontal]),
        ]
        for row, (label, var, values) in enumerate(rows, start=3):
            ttk.Label(frame, text=label).grid(row=row, column=0, sticky="w", pady=2)
            combo = ttk.Combobox(frame, textvariable=var, values=values, state="readonly", width=14)
            combo.grid(row=row, column=1, sticky="ew", pady=2)
            combo.bind("<<ComboboxSelected>>", lambda e: self._on_settings_changed())

        entries = [
            ("Format", self.number_format, "Use {section} and {page} as placeholders"),
            ("Margin", self.margin, "Distance from the page edge in points"),
            ("Font size", self.font_size, None),
        ]
        for row, (label, var, tip) in enumerate(entries, start=6):
            ttk.Label(frame, text=label).grid(row=row, column=0, sticky="w", pady=2)
            entry = ttk.Entry(frame, textvariable=var, width=16)
            entry.grid(row=row, column=1, sticky="ew", pady=2)
            entry.bind("<Return>", lambda e: self._on_settings_changed())
            entry.bind("<FocusOut>", lambda e: self._on_settings_changed())
            if tip:
                ToolTip(entry, tip)

        frame.columnconfigure(1, weight=1)

    def _build_section_list(self, parent):
        frame = ttk.LabelFrame(parent, text="Sections", padding=8)
        frame.pack(fill=tk.BOTH, expand=True)

        buttons = ttk.Frame(frame)
        buttons.pack(fill=tk.X)
        for text, command in (
            ("Add files...", self.add_files),
            ("Remove", self.remove_section),
            ("Clear", self.clear_sections),
            ("Up", self.move_up),
            ("Down", self.move_down),
            ("Enable/Disable", self.toggle_enabled),
        ):
            ttk.Button(buttons, text=text, command=command).pack(side=tk.LEFT, padx=1)

        self.tree = ttk.Treeview(
            frame,
            columns=("enabled", "section", "file", "pages"),
            show="headings",
            selectmode="browse",
            height=12,
        )
        for column, heading, width in (
            ("enabled", "On", 40),
            ("section", "Section", 70),
            ("file", "File", 200),
            ("pages", "Pages", 50),
        ):
            self.tree.heading(column, text=heading)
            self.tree.column(column, width=width, stretch=(column == "file"))
        self.tree.pack(fill=tk.BOTH, expand=True, pady=6)

        self.tree.bind("<<TreeviewSelect>>", self._on_select)
        self.tree.bind("<ButtonPress-1>", self.on_row_click)
        self.tree.bind("<ButtonRelease-1>", self.on_row_release)
        self.tree.bind("<Double-1>", lambda e: self.toggle_enabled())

        edit = ttk.Frame(frame)
        edit.pack(fill=tk.X)
        ttk.Label(edit, text="Section number").pack(side=tk.LEFT)
        entry = ttk.Entry(edit, textvariable=self.section_number, width=12)
        entry.pack(side=tk.LEFT, padx=4)
        entry.bind("<Return>", lambda e: self.apply_section_number())
        ttk.Button(edit, text="Apply", command=self.apply_section_number).pack(side=tk.LEFT)

    def _build_toolbar(self, parent):
        bar = ttk.Frame(parent)
        bar.pack(fill=tk.X)

        ttk.Checkbutton(
            bar, text="Auto update", variable=self.auto_update,
            command=self._on_settings_changed
        ).pack(side=tk.LEFT)
        ttk.Button(bar, text="Refresh", command=lambda: self.regenerate(force=True)).pack(side=tk.LEFT, padx=4)
        self.save_button = ttk.Button(bar, text="Save as...", command=self.save_as, state=tk.DISABLED)
        self.save_button.pack(side=tk.RIGHT)

        self.progress_bar = ttk.Progressbar(bar, mode="determinate", length=200)
        self.progress_bar.pack(side=tk.RIGHT, padx=8)

        self.status_label = tk.Label(parent, text="Add PDF files to begin", anchor="w", fg="#666666")
        self.status_label.pack(fill=tk.X, pady=(4, 4))

    def _build_preview(self, parent):
        frame = ttk.Frame(parent)
        frame.pack(fill=tk.BOTH, expand=True)

        self.preview_canvas = tk.Canvas(frame, bg="#E8E8E8", highlightthickness=0)
        scrollbar = ttk.Scrollbar(frame, orient=tk.VERTICAL, command=self.preview_canvas.yview)
        self.preview_canvas.configure(yscrollcommand=scrollbar.set)
        scrollbar.pack(side=tk.RIGHT, fill=tk.Y)
        self.preview_canvas.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)

        def _on_mousewheel(event):
            self.preview_canvas.yview_scroll(int(-1 * (event.delta / 120)), "units")
        self.preview_canvas.bind("<MouseWheel>", _on_mousewheel)

    # ------------------------------------------------------------------
    # Ghostscript
    # ------------------------------------------------------------------

    def _check_ghostscript(self):
        def worker():
            available = self.flattener.is_available()
            self.root.after(0, self._on_ghostscript_checked, available)
        threading.Thread(target=worker, daemon=True).start()

    def _on_ghostscript_checked(self, available: bool):
        self.ghostscript_available = available
        if not available:
            self.flatten_annotations.set(False)
            self.flatten_checkbox.state(["disabled"])
            self.notice_label.config(
                text="Ghostscript was not found. Install Ghostscript to flatten annotations."
            )
            self._on_settings_changed()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def _read_config(self) -> LayoutConfig:
        return self.config.updated(
            insert_blank_page=self.insert_blank_page.get(),
            flatten_annotations=self.flatten_annotations.get(),
            orientation=self.orientation.get(),
            number_format=self.number_format.get(),
            anchor=Anchor.from_parts(self.horizontal.get(), self.vertical.get()),
            margin=float(self.margin.get()),
            font_size=float(self.font_size.get()),
            auto_update=self.auto_update.get(),
        )

    def _on_settings_changed(self):
        try:
            config = self._read_config()
        except ValueError as e:
            self._set_status(f"Invalid setting: {e}", error=True)
            return
        if config == self.config:
            return
        self.config = config
        save_settings(self.config_file, config_to_settings(config))
        self.regenerate()

    # ------------------------------------------------------------------
    # Section list
    # ------------------------------------------------------------------

    def add_files(self):
        paths = filedialog.askopenfilenames(
            title="Select PDF files",
            initialdir=self.add_files_directory,
            filetypes=[("PDF files", "*.pdf")],
        )
        if not paths:
            return
        self.add_files_directory = os.path.dirname(paths[0])
        added = self.sections.add_files(paths)
        self.refresh_list()
        if added:
            self._resolve_page_counts()

    def _resolve_page_counts(self):
        pending = self.sections.pending_page_counts()

        def worker():
            counts = read_page_counts(pending)
            self.root.after(0, self._on_page_counts_resolved, counts)
        threading.Thread(target=worker, daemon=True).start()

    def _on_page_counts_resolved(self, counts):
        self.sections.apply_page_counts(counts)
        self.refresh_list(self._selected_index())
        self.regenerate()

    def _selected_index(self):
        selection = self.tree.selection()
        if not selection:
            return None
        return self.sections.index_of(selection[0])

    def _after_list_change(self, select_index=None):
        self.refresh_list(select_index)
        self.regenerate()

    def remove_section(self):
        index = self._selected_index()
        if index is None:
            return
        self.sections.remove_at(index)
        self._after_list_change(min(index, len(self.sections) - 1))

    def clear_sections(self):
        if not len(self.sections):
            return
        if messagebox.askyesno("Clear sections", "Remove all sections from the list?"):
            self.sections.clear()
            self._after_list_change()

    def move_up(self):
        index = self._selected_index()
        if index is None or index == 0:
            return
        self.sections.move_up(index)
        self._after_list_change(index - 1)

    def move_down(self):
        index = self._selected_index()
        if index is None or index >= len(self.sections) - 1:
            return
        self.sections.move_down(index)
        self._after_list_change(index + 1)

    def toggle_enabled(self):
        index = self._selected_index()
        if index is None:
            return
        section = self.sections[index]
        self.sections.update(section.id, enabled=not section.enabled)
        self._after_list_change(index)

    def apply_section_number(self):
        index = self._selected_index()
        if index is None:
            return
        section = self.sections[index]
        value = self.section_number.get()
        if value == section.section_number:
            return
        self.sections.update(section.id, section_number=value)
        self._after_list_change(index)

    def _on_select(self, event=None):
        index = self._selected_index()
        if index is not None:
            self.section_number.set(self.sections[index].section_number)

    def on_row_click(self, event):
        row = self.tree.identify_row(event.y)
        self.drag_start_index = self.sections.index_of(row) if row else None

    def on_row_release(self, event):
        start = self.drag_start_index
        self.drag_start_index = None
        row = self.tree.identify_row(event.y)
        if start is None or not row:
            return
        target = self.sections.index_of(row)
        if target != start:
            self.sections.move(start, target)
            self._after_list_change(target)

    def refresh_list(self, select_index=None):
        self.tree.delete(*self.tree.get_children())
        for section in self.sections:
            self.tree.insert(
                "",
                tk.END,
                iid=section.id,
                values=(
                    "✓" if section.enabled else "",
                    section.section_number,
                    section.display_name,
                    section.page_count or "",
                ),
            )
        if select_index is not None and 0 <= select_index < len(self.sections):
            section_id = self.sections[select_index].id
            self.tree.selection_set(section_id)
            self.tree.see(section_id)

    # ------------------------------------------------------------------
    # Assembly and preview
    # ------------------------------------------------------------------

    def regenerate(self, force=False):
        if not len(self.sections):
            self.runner.invalidate()
            self._on_progress(Progress(0, 0))
            self.output_bytes = None
            self._show_preview([])
            self.save_button.config(state=tk.DISABLED)
            self._set_status("Add PDF files to begin")
            return
        if not (self.config.auto_update or force):
            return
        self._set_status("Generating preview...")
        self.runner.request(self.sections.snapshot(), self.config)

    def _on_progress(self, progress: Progress):
        self.progress_bar.config(maximum=max(progress.total, 1), value=progress.current)

    def _on_assembly_done(self, data: bytes):
        self.output_bytes = data
        try:
            images = render_pages(data, zoom=1.0)
        except Exception as e:
            logger.error("Preview rendering failed: %s", e)
            self._set_status(f"Preview failed: {e}", error=True)
            return
        self._show_preview(images)
        self.save_button.config(state=tk.NORMAL)
        self._set_status(f"{len(images)} pages")

    def _on_assembly_error(self, error: Exception):
        self._set_status(f"Error: {error}", error=True)

    def _show_preview(self, images):
        self.preview_canvas.delete("all")
        self.preview_images = []
        y = 10
        for img in images:
            if img.width > PREVIEW_WIDTH:
                ratio = PREVIEW_WIDTH / img.width
                img = img.resize((PREVIEW_WIDTH, int(img.height * ratio)))
            photo = ImageTk.PhotoImage(img)
            self.preview_images.append(photo)
            self.preview_canvas.create_image(10, y, image=photo, anchor="nw")
            y += photo.height() + 10
        self.preview_canvas.configure(scrollregion=(0, 0, PREVIEW_WIDTH + 20, y))

    def _set_status(self, text, error=False):
        self.status_label.config(text=text, fg="#B00020" if error else "#666666")

    def save_as(self):
        if not self.output_bytes:
            return
        output_file = filedialog.asksaveasfilename(
            title="Save merged PDF",
            defaultextension=".pdf",
            initialfile="output.pdf",
            filetypes=[("PDF files", "*.pdf")],
        )
        if not output_file:
            return
        try:
            save_output(self.output_bytes, output_file)
        except OSError as e:
            messagebox.showerror("Save failed", str(e))
            return
        self._set_status(f"Saved {Path(output_file).name}")


def main():
    configure_logging()
    _enable_dpi_awareness()
    root = tk.Tk()
    SectionMergerApp(root)
    root.mainloop()


if __name__ == "__main__":
    main()
