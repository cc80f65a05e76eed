"""
tkinter window for the assembler: pick a .asm file, assemble it, and see
where the .mc and .dat memory images were written.
"""

from tkinter import Tk, StringVar
from tkinter import ttk
from tkinter import filedialog, messagebox

ASM_FILETYPES = [("Assembly Files", "*.asm"), ("All Files", "*.*")]


class AssemblerView:
    def __init__(self, title="One Address Assembler"):
        self.root = Tk()
        self.root.title(title)
        self.root.geometry("640x280")
        self.root.columnconfigure(0, weight=1)

        # label text is bound to these, the controller only sets values
        self.input_var = StringVar(self.root, value="")
        self.mc_var = StringVar(self.root, value="")
        self.dat_var = StringVar(self.root, value="")
        self.status_var = StringVar(self.root, value="Ready")

        self.on_load_file = None
        self.on_assemble = None
        self.buttons = {}

        self._build(title)

    def _build(self, title):
        frame = ttk.Frame(self.root, padding="12")
        frame.grid(column=0, row=0, sticky="nsew")
        frame.columnconfigure(1, weight=1)

        ttk.Label(frame, text=title, font=("TkDefaultFont", 12, "bold")).grid(
            column=0, row=0, columnspan=3, pady=(0, 10))

        # one row per file: caption, path, and for the input row the Load button
        rows = [("Input file:", self.input_var), ("Machine code (.mc):", self.mc_var),
                ("Data (.dat):", self.dat_var)]
        for row, (caption, var) in enumerate(rows, start=1):
            ttk.Label(frame, text=caption).grid(column=0, row=row, sticky="w", padx=(0, 8), pady=2)
            ttk.Entry(frame, textvariable=var, state="readonly").grid(
                column=1, row=row, sticky="ew", pady=2)

        self.buttons["load"] = ttk.Button(frame, text="Load File", command=lambda: self._fire(self.on_load_file))
        self.buttons["load"].grid(column=2, row=1, padx=(8, 0))
        self.buttons["assemble"] = ttk.Button(frame, text="Assemble", state="disabled",
                                              command=lambda: self._fire(self.on_assemble))
        self.buttons["assemble"].grid(column=2, row=2, padx=(8, 0))

        ttk.Separator(frame).grid(column=0, row=4, columnspan=3, sticky="ew", pady=10)
        ttk.Label(frame, textvariable=self.status_var, wraplength=600).grid(
            column=0, row=5, columnspan=3, sticky="w")

    @staticmethod
    def _fire(callback):
        if callback:
            callback()

    def set_load_callback(self, callback):
        self.on_load_file = callback

    def set_assemble_callback(self, callback):
        self.on_assemble = callback

    def show_file_dialog(self):
        """Ask for a source file; returns "" when the dialog is cancelled"""
        return filedialog.askopenfilename(title="Select an assembly file", filetypes=ASM_FILETYPES)

    def show_error(self, title, message):
        messagebox.showerror(title, message, parent=self.root)

    def update_files(self, input_file, mc_file, dat_file):
        self.input_var.set(input_file)
        self.mc_var.set(mc_file)
        self.dat_var.set(dat_file)

    def update_status(self, status_text):
        self.status_var.set(status_text)

    def set_button_state(self, button_name, state):
        """state is 'normal' or 'disabled'"""
        button = self.buttons.get(button_name)
        if button is not None:
            button.config(state=state)

    def run(self):
        self.root.mainloop()

    def destroy(self):
        self.root.destroy()
