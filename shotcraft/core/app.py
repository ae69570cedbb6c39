# App (Tk), ttk styles, base Screen
import tkinter as tk
from tkinter import ttk, messagebox

from .state import APP_TITLE

# Shared UI colors
COLOR_BG_SCREEN = "#2b2b2e"
COLOR_BG_DARK = "#1d1d1f"
COLOR_BG_LIGHT = "#3a3a3d"
COLOR_TEXT = "#f5f5f7"
COLOR_MUTED = "#a1a1a6"

UI_FONT = "Helvetica"


def warn(message: str, title: str = "Warning"):
    messagebox.showwarning(title, message)


def apply_styles(root):
    style = ttk.Style(root)
    style.theme_use("clam")
    style.configure("Screen.TFrame", background=COLOR_BG_SCREEN)
    style.configure("Title.TFrame",  background=COLOR_BG_DARK)
    style.configure("Card.TFrame",   background=COLOR_BG_LIGHT)
    style.configure("Brand.TLabel",  background=COLOR_BG_DARK, foreground=COLOR_TEXT, font=(UI_FONT, 18, "bold"))
    style.configure("H1.TLabel",     background=COLOR_BG_SCREEN, foreground=COLOR_TEXT, font=(UI_FONT, 16))
    style.configure("Label.TLabel",  background=COLOR_BG_SCREEN, foreground=COLOR_TEXT, font=(UI_FONT, 11))
    style.configure("Muted.TLabel",  background=COLOR_BG_LIGHT, foreground=COLOR_MUTED, font=(UI_FONT, 10))
    style.configure("Tool.TButton",  padding=(6, 2))


class App(tk.Tk):
    def __init__(self, title: str = APP_TITLE, size: str = "1280x800"):
        super().__init__()
        self.title(title)
        self.size = (int(size.split("x")[0]), int(size.split("x")[1]))

        self.resizable(True, True)
        self.minsize(800, 600)
        self.geometry(size)
        self.is_fullscreen = False

        self.configure(bg=COLOR_BG_SCREEN)
        apply_styles(self)
        self.current = None
        self._history: list[type] = []

    def show_screen(self, screen_cls, push_history: bool = True, **kwargs):
        if self.current is not None:
            if push_history:
                self._history.append(self.current.__class__)
            self.current.destroy()
        # clear global hotkeys between screens
        self.unbind("<Escape>")
        self.current = screen_cls(self, self, **kwargs)
        self.current.pack(expand=True, fill="both")

    def quit_app(self):
        self.destroy()

    def go_back(self):
        if self._history:
            prev = self._history.pop()
            self.show_screen(prev, push_history=False)
        else:
            self.quit_app()

    def toggle_fullscreen(self):
        self.is_fullscreen = not self.is_fullscreen
        self.attributes("-fullscreen", self.is_fullscreen)
        if not self.is_fullscreen:
            self.geometry(f"{self.size[0]}x{self.size[1]}")


class Screen(ttk.Frame):
    def __init__(self, master: tk.Tk, app: App):
        super().__init__(master)
        self.app = app
        self.configure(style="Screen.TFrame")
        self.app.bind("<F11>", lambda _e: self.app.toggle_fullscreen())

    def brand_bar(self, parent):
        bar = ttk.Frame(parent, style="Title.TFrame", height=40)
        bar.pack(fill="x")
        bar.pack_propagate(False)
        ttk.Label(bar, text=APP_TITLE, style="Brand.TLabel").pack(side="left", padx=10)
        return bar

    def header(self, parent, title_text: str):
        self.brand_bar(parent)
        ttk.Label(parent, text=title_text, style="H1.TLabel").pack(pady=(12, 6))

    def bottom_nav(self, parent, on_back=None, on_next=None, next_text="Save", back_text="Quit"):
        row = ttk.Frame(parent, style="Screen.TFrame")
        row.pack(fill="x", side="bottom", pady=12)
        if on_back is None:
            on_back = self.app.go_back
        if back_text:
            ttk.Button(row, text=back_text, command=on_back).pack(side="left", padx=12)
        if on_next is not None and next_text:
            ttk.Button(row, text=next_text, command=on_next).pack(side="right", padx=12)
        if on_back:
            self.app.bind("<Escape>", lambda _e: on_back())
        return row
