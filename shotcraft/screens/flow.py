import queue
import logging
import tkinter as tk
from dataclasses import replace
from tkinter import ttk
from typing import Optional

from shotcraft.core.app import Screen, COLOR_BG_SCREEN, COLOR_BG_LIGHT, warn
from shotcraft.core.objects import DEVICE_SIZES, SOURCE_LANGUAGE, Project
from shotcraft.core.state import state, save_project, save_state, CACHE_PATH
from shotcraft.canvas import (
    CompositionEngine,
    FontsManager,
    ImageManager,
    InteractionController,
    Pair,
    THEME_PRESETS,
    add_text_slide,
    apply_theme_preset,
    mockup_image_ref,
    move_screenshot,
    plan_render_items,
    remove_screenshot,
)

logger = logging.getLogger(__name__)

POLL_MS = 30


class PreviewCanvas(ttk.Frame):
    """One render item (single screen or linked pair) with its drag and button controls."""

    def __init__(self, parent, screen: "ScreensFlowScreen", item):
        super().__init__(parent, style="Card.TFrame", padding=6)
        self.s = screen
        self.item = item
        self._photo = None
        self._requested_ref: Optional[str] = None
        self.slot = screen.images.slot()

        w, h = self._display_size()
        self.canvas = tk.Canvas(self, width=w, height=h, highlightthickness=0, bg=COLOR_BG_LIGHT, cursor="fleur")
        self.canvas.pack(side="top")
        self._image_id = self.canvas.create_image(0, 0, anchor="nw")

        self.controller = InteractionController(
            item,
            on_change=self.s.set_screenshots,
            subscribe=self._subscribe,
            container_size=lambda: (self.canvas.winfo_width(), self.canvas.winfo_height()),
            screenshots=self.s.project.screenshots,
            style=self.s.project.style,
            on_preview=self.redraw,
            translation=self.s.project.translation,
            language=state.active_language,
        )
        self.canvas.bind("<ButtonPress>", self._on_press)
        self._build_controls()
        self.redraw()

    def _display_size(self) -> tuple[int, int]:
        screens = 2 if isinstance(self.item, Pair) else 1
        e = self.s.engine
        return int(round(e.preview_width * screens)), int(round(e.preview_height))

    def _build_controls(self):
        row = ttk.Frame(self, style="Card.TFrame")
        row.pack(side="top", fill="x", pady=(6, 0))
        c = self.controller
        ttk.Button(row, text="⟲", width=3, style="Tool.TButton", command=c.rotate_left).pack(side="left")
        ttk.Button(row, text="⟳", width=3, style="Tool.TButton", command=c.rotate_right).pack(side="left", padx=(2, 8))
        if isinstance(self.item, Pair):
            ttk.Button(row, text="Unlink", style="Tool.TButton", command=c.unlink).pack(side="left")
            label = f"{self.item.primary + 1}–{self.item.secondary + 1}"
        else:
            idx = self.item.index
            if idx < len(self.s.project.screenshots) - 1:
                ttk.Button(row, text="Link →", style="Tool.TButton", command=c.link_to_next).pack(side="left")
            ttk.Button(row, text="◀", width=2, style="Tool.TButton",
                       command=lambda: self.s.move(idx, "left")).pack(side="left", padx=(8, 0))
            ttk.Button(row, text="▶", width=2, style="Tool.TButton",
                       command=lambda: self.s.move(idx, "right")).pack(side="left")
            ttk.Button(row, text="✕", width=2, style="Tool.TButton",
                       command=lambda: self.s.remove(idx)).pack(side="right")
            label = str(idx + 1)
        ttk.Label(row, text=label, style="Muted.TLabel").pack(side="right", padx=6)

    # ---- Pointer ----
    def _on_press(self, e):
        self.controller.pointer_down(e.x_root, e.y_root, e.num)

    def _subscribe(self, on_move, on_up):
        root = self.winfo_toplevel()
        move_id = root.bind("<B1-Motion>", lambda e: on_move(e.x_root, e.y_root), add="+")
        up_id = root.bind("<ButtonRelease-1>", lambda e: on_up(e.x_root, e.y_root), add="+")

        def _unsubscribe():
            try:
                root.unbind("<B1-Motion>", move_id)
                root.unbind("<ButtonRelease-1>", up_id)
            except tk.TclError:
                logger.debug("Pointer listeners already gone")
        return _unsubscribe

    # ---- Drawing ----
    def _mockup_image(self):
        project = self.s.project
        primary = self.item.primary if isinstance(self.item, Pair) else self.item.index
        ref = mockup_image_ref(project.screenshots, primary)
        if not ref or not project.style.show_mockup:
            return None
        if ref != self._requested_ref or self.s.images.is_cached(ref):
            self._requested_ref = ref
            return self.slot.request(ref, lambda _img: self.redraw())
        return None

    def redraw(self, settings=None):
        from PIL import Image, ImageTk

        project = self.s.project
        try:
            img = self.s.engine.render_item(
                self.item,
                project.screenshots,
                project.style,
                project.translation,
                state.active_language,
                image=self._mockup_image(),
                settings=settings,
                fetch_image=False,
            )
        except Exception:
            logger.exception("Failed to render preview for %s", self.item)
            return
        size = self._display_size()
        if img.size != size:
            img = img.resize(size, Image.Resampling.LANCZOS)
        self._photo = ImageTk.PhotoImage(img)
        self.canvas.itemconfigure(self._image_id, image=self._photo)

    def destroy(self):
        self.controller.close()
        self.slot.close()
        super().destroy()


class ScreensFlowScreen(Screen):
    """Horizontal strip of screen previews with project-wide controls."""

    def __init__(self, master, app, project: Optional[Project] = None, project_path: str = ""):
        super().__init__(master, app)
        self.project = project or Project()
        self.project_path = project_path or state.project_path
        if self.project.device_size in DEVICE_SIZES:
            state.device_size = self.project.device_size

        self._callbacks: "queue.Queue" = queue.Queue()
        self.fonts = FontsManager()
        self.images = ImageManager(dispatcher=self._callbacks.put)
        self.engine = self._make_engine()
        self._previews: list[PreviewCanvas] = []

        self.header(self, self.project.name)
        self._build_toolbar()
        self._build_strip()
        self.bottom_nav(self, on_back=self.app.quit_app, on_next=self.save)
        self.rebuild()
        self.after(POLL_MS, self._poll)

    def _make_engine(self) -> CompositionEngine:
        return CompositionEngine(
            state.device_size,
            preview_height=state.preview_height,
            pixel_ratio=state.pixel_ratio,
            fonts=self.fonts,
            images=self.images,
        )

    def _build_toolbar(self):
        bar = ttk.Frame(self, style="Screen.TFrame")
        bar.pack(fill="x", padx=12, pady=(0, 8))

        ttk.Label(bar, text="Device:", style="Label.TLabel").pack(side="left")
        self.device_var = tk.StringVar(value=state.device_size)
        dev = ttk.Combobox(bar, textvariable=self.device_var, values=list(DEVICE_SIZES), state="readonly", width=16)
        dev.pack(side="left", padx=(4, 16))
        dev.bind("<<ComboboxSelected>>", lambda _e: self._on_device())

        ttk.Label(bar, text="Language:", style="Label.TLabel").pack(side="left")
        languages = [SOURCE_LANGUAGE] + [l for l in self.project.target_languages if l != SOURCE_LANGUAGE]
        if state.active_language not in languages:
            state.active_language = SOURCE_LANGUAGE
        self.language_var = tk.StringVar(value=state.active_language)
        lang = ttk.Combobox(bar, textvariable=self.language_var, values=languages, state="readonly", width=8)
        lang.pack(side="left", padx=(4, 16))
        lang.bind("<<ComboboxSelected>>", lambda _e: self._on_language())

        ttk.Label(bar, text="Theme:", style="Label.TLabel").pack(side="left")
        self.theme_var = tk.StringVar(value="")
        theme = ttk.Combobox(bar, textvariable=self.theme_var, values=list(THEME_PRESETS), state="readonly", width=16)
        theme.pack(side="left", padx=(4, 16))
        theme.bind("<<ComboboxSelected>>", lambda _e: self._on_theme())

        ttk.Button(bar, text="Add text slide", command=self._on_add_text).pack(side="right")

    def _build_strip(self):
        wrap = ttk.Frame(self, style="Screen.TFrame")
        wrap.pack(expand=True, fill="both", padx=12)
        self.strip_canvas = tk.Canvas(wrap, bg=COLOR_BG_SCREEN, highlightthickness=0)
        scroll = ttk.Scrollbar(wrap, orient="horizontal", command=self.strip_canvas.xview)
        self.strip_canvas.configure(xscrollcommand=scroll.set)
        scroll.pack(side="bottom", fill="x")
        self.strip_canvas.pack(expand=True, fill="both")
        self.strip = ttk.Frame(self.strip_canvas, style="Screen.TFrame")
        self.strip_canvas.create_window(0, 0, window=self.strip, anchor="nw")
        self.strip.bind("<Configure>", lambda _e: self.strip_canvas.configure(scrollregion=self.strip_canvas.bbox("all")))

    # ---- State changes ----
    def rebuild(self):
        for p in self._previews:
            p.destroy()
        self._previews = []
        for item in plan_render_items(self.project.screenshots):
            p = PreviewCanvas(self.strip, self, item)
            p.pack(side="left", padx=8, pady=8, anchor="n")
            self._previews.append(p)

    def set_screenshots(self, items):
        self.project = replace(self.project, screenshots=tuple(items))
        # rebuild after the current event handler returns; it may belong to a preview being replaced
        self.after_idle(self.rebuild)

    def move(self, index: int, direction: str):
        self.set_screenshots(move_screenshot(self.project.screenshots, index, direction))

    def remove(self, index: int):
        self.set_screenshots(remove_screenshot(self.project.screenshots, index))

    def _on_add_text(self):
        self.set_screenshots(add_text_slide(self.project.screenshots))

    def _on_device(self):
        state.device_size = self.device_var.get()
        self.project = replace(self.project, device_size=state.device_size)
        self.engine = self._make_engine()
        self.rebuild()

    def _on_language(self):
        state.active_language = self.language_var.get()
        for p in self._previews:
            p.controller.update(self.project.screenshots, language=state.active_language)
            p.redraw()

    def _on_theme(self):
        self.project = replace(self.project, style=apply_theme_preset(self.project.style, self.theme_var.get()))
        self.rebuild()

    def _poll(self):
        while True:
            try:
                fn = self._callbacks.get_nowait()
            except queue.Empty:
                break
            try:
                fn()
            except Exception:
                logger.exception("Image callback failed")
        if self.winfo_exists():
            self.after(POLL_MS, self._poll)

    def save(self):
        if not self.project_path:
            warn("No project file to save to.")
            return
        try:
            save_project(self.project_path, self.project.to_dict())
            save_state(CACHE_PATH)
        except Exception:
            logger.exception("Failed to save project to %s", self.project_path)
            warn("Could not save the project. See the log for details.")
            return
        logger.info("Saved project to %s", self.project_path)

    def destroy(self):
        for p in self._previews:
            p.destroy()
        self._previews = []
        super().destroy()
