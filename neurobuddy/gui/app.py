import tkinter as tk
from tkinter import filedialog, scrolledtext
import threading
import webbrowser
from pathlib import Path

from neurobuddy.api.service import get_default_coordinator
from neurobuddy.domain.models import ChatState, ConversationSnapshot
from neurobuddy.infrastructure.logging.logger import logger
from neurobuddy.rendering.renderer import render_conversation_html, render_segments


TITLE = "NeuroBuddy: Asistente de Pares Craneales"
PLACEHOLDER = "Escribe tu pregunta sobre los pares craneales..."
THINKING = "NeuroBuddy está pensando..."
WELCOME = (
    "¡Hola! Soy NeuroBuddy.\n"
    "Tu asistente experto en los 12 pares craneales. Pregúntame algo como:\n\n"
    "  \"¿Qué función tiene el Nervio Vago?\"\n"
    "  \"¿Cuál es el foramen de salida del Trigémino?\"\n"
    "  \"Lista los nervios puramente motores\"\n"
)


class App:
    def __init__(self, root, coordinator=None):
        self.root = root
        self.root.title(TITLE)
        self.root.configure(bg="#0f172a")
        self.coordinator = coordinator or get_default_coordinator()
        self._links = {}
        tk.Label(root, text=TITLE, font=("TkDefaultFont", 14, "bold"), fg="#a5b4fc", bg="#0f172a").pack(fill=tk.X, pady=6)
        self.chat = scrolledtext.ScrolledText(root, width=90, height=28, wrap=tk.WORD, bg="#1e293b", fg="#e5e7eb")
        self.chat.pack(fill=tk.BOTH, expand=True, padx=8)
        self.chat.tag_config("user", foreground="#c7d2fe", justify=tk.RIGHT, rmargin=8)
        self.chat.tag_config("model", foreground="#e5e7eb", lmargin1=8, lmargin2=8)
        self.chat.tag_config("bold", font=("TkDefaultFont", 10, "bold"))
        self.chat.tag_config("sources_heading", foreground="#94a3b8", font=("TkDefaultFont", 9, "bold"))
        self.chat.tag_config("source", foreground="#a5b4fc", underline=True)
        self.chat.tag_config("welcome", foreground="#9ca3af", justify=tk.CENTER)
        self.chat.tag_config("thinking", foreground="#cbd5e1")
        self.banner = tk.Label(root, text="", fg="#f87171", bg="#450a0a")
        bottom = tk.Frame(root, bg="#0f172a")
        bottom.pack(fill=tk.X, side=tk.BOTTOM, padx=8, pady=8)
        self.entry = tk.Entry(bottom)
        self.entry.pack(side=tk.LEFT, fill=tk.X, expand=True)
        self.entry.bind("<Return>", self.on_send_event)
        self.entry.bind("<FocusIn>", self._clear_placeholder)
        self.entry.bind("<FocusOut>", self._show_placeholder)
        self.send_btn = tk.Button(bottom, text="Enviar", command=self.on_send)
        self.send_btn.pack(side=tk.LEFT)
        tk.Button(bottom, text="Exportar HTML", command=self.on_export).pack(side=tk.LEFT)
        self._placeholder_on = False
        self._show_placeholder()
        self.coordinator.add_listener(lambda snap: self.root.after(0, lambda: self.refresh(snap)))
        self.refresh(self.coordinator.snapshot())

    def refresh(self, snap: ConversationSnapshot):
        self.chat.config(state=tk.NORMAL)
        self.chat.delete(1.0, tk.END)
        for tag in list(self._links):
            self.chat.tag_delete(tag)
        self._links.clear()
        if not snap.turns and not snap.is_loading:
            self.chat.insert(tk.END, WELCOME, "welcome")
        for turn in snap.turns:
            for seg in render_segments(turn):
                tags = seg.tags
                if seg.uri:
                    link_tag = f"link-{len(self._links)}"
                    self._links[link_tag] = seg.uri
                    self.chat.tag_bind(link_tag, "<Button-1>", lambda e, uri=seg.uri: webbrowser.open_new_tab(uri))
                    tags = tags + (link_tag,)
                self.chat.insert(tk.END, seg.text, tags)
            self.chat.insert(tk.END, "\n")
        if snap.is_loading:
            self.chat.insert(tk.END, THINKING + "\n", "thinking")
        self.chat.config(state=tk.DISABLED)
        self.chat.see(tk.END)
        if snap.error:
            self.banner.config(text=snap.error)
            self.banner.pack(fill=tk.X, padx=8, before=self.chat)
        else:
            self.banner.pack_forget()
        enabled = self.coordinator.has_session and snap.state is ChatState.IDLE
        self.entry.config(state=tk.NORMAL if enabled else tk.DISABLED)
        self.send_btn.config(state=tk.NORMAL if enabled else tk.DISABLED)

    def on_send(self):
        if self._placeholder_on:
            return
        text = self.entry.get().strip()
        if not text or self.coordinator.state is not ChatState.IDLE:
            return
        self.entry.delete(0, tk.END)

        def worker():
            self.coordinator.submit(text)

        threading.Thread(target=worker, daemon=True).start()

    def on_send_event(self, event):
        self.on_send()
        return "break"

    def on_export(self):
        path = filedialog.asksaveasfilename(defaultextension=".html", filetypes=[("HTML", "*.html")])
        if not path:
            return
        body = render_conversation_html(self.coordinator.turns)
        Path(path).write_text(f"<!DOCTYPE html>\n<html><meta charset=\"utf-8\"><body>\n{body}\n</body></html>\n", encoding="utf-8")
        logger.info("Exported conversation", extra={"extra": {"path": path}})

    def _clear_placeholder(self, event=None):
        if self._placeholder_on:
            self.entry.delete(0, tk.END)
            self.entry.config(fg="black")
            self._placeholder_on = False

    def _show_placeholder(self, event=None):
        if not self.entry.get():
            self.entry.insert(0, PLACEHOLDER)
            self.entry.config(fg="grey")
            self._placeholder_on = True


def main():
    root = tk.Tk()
    App(root)
    root.mainloop()


if __name__ == "__main__":
    main()
