"""
Controller class for the Assembler application.
Handles user interactions and coordinates between Model and View.
"""

from .model import AssemblerModel
from .view import AssemblerView


class AssemblerController:
    def __init__(self, model=None, view=None):
        self.model = model if model is not None else AssemblerModel()
        self.view = view if view is not None else AssemblerView()

        # Set up view callbacks
        self.view.set_load_callback(self.handle_load_file)
        self.view.set_assemble_callback(self.handle_assemble)

        self.update_view()

    def handle_load_file(self):
        """Handle the load file button click"""
        file_path = self.view.show_file_dialog()

        if file_path:
            if self.model.set_file(file_path):
                mc_file, dat_file = self.model.get_outputs()
                self.view.update_files(self.model.get_file(), mc_file, dat_file)
                self.view.set_button_state("assemble", "normal")
            else:
                self.view.show_error("File extension not supported", self.model.get_status())
            self.view.update_status(self.model.get_status())
        else:
            if not self.model.is_file_loaded():
                self.model.set_status("No file selected")
                self.view.update_status(self.model.get_status())

    def handle_assemble(self):
        """Handle the assemble button click"""
        if not self.model.is_file_loaded():
            self.model.set_status("You must have a valid file to assemble")
            self.view.update_status(self.model.get_status())
            return False

        # Disable assemble button during processing
        self.view.set_button_state("assemble", "disabled")

        try:
            success = self.model.assemble()
        finally:
            self.view.update_status(self.model.get_status())
            self.view.set_button_state("assemble", "normal")

        if not success:
            self.view.show_error("Assembly failed", self.model.get_status())
        return success

    def update_view(self):
        """Update the view with current model state"""
        self.view.update_status(self.model.get_status())

    def run(self):
        """Start the application"""
        self.view.run()
