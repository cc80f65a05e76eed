"""
Model class for the Assembler application.
Handles data management and business logic.
"""

from .assembler import AssemblerError, assemble_file, output_paths


class AssemblerModel:
    def __init__(self):
        self.target_file = ""
        self.mc_file = ""
        self.dat_file = ""
        self.status = "Ready"
        self.is_running = False

    def set_file(self, file_path):
        """Set the target file path and derive the output file names"""
        if not str(file_path).endswith(".asm"):
            self.status = "Input file must be a .asm file"
            return False
        self.target_file = str(file_path)
        mc_path, dat_path = output_paths(self.target_file)
        self.mc_file = str(mc_path)
        self.dat_file = str(dat_path)
        self.status = f"Loaded: {file_path}"
        return True

    def get_file(self):
        """Get the current target file path"""
        return self.target_file

    def get_outputs(self):
        """Get the (.mc, .dat) output file paths"""
        return self.mc_file, self.dat_file

    def get_status(self):
        """Get the current status"""
        return self.status

    def set_status(self, status):
        """Set the current status"""
        self.status = status

    def is_file_loaded(self):
        """Check if a file is loaded"""
        return bool(self.target_file.strip())

    def assemble(self):
        """
        Perform the assembly process.
        Returns True if successful, False otherwise.
        """
        if not self.is_file_loaded():
            self.status = "You must have a valid file to assemble"
            return False

        self.is_running = True
        self.status = "Running assembly..."

        try:
            assemble_file(self.target_file)
            self.status = "Program assembled correctly"
            return True
        except AssemblerError as e:
            self.status = f"Assembly failed: {e}"
            return False
        except OSError as e:
            self.status = f"Assembly failed: {e.strerror or e}: {e.filename or self.target_file}"
            return False
        finally:
            self.is_running = False

    def clear_file(self):
        """Clear the currently loaded file"""
        self.target_file = ""
        self.mc_file = ""
        self.dat_file = ""
        self.status = "No file selected"
