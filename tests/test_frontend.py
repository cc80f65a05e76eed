"""
Tests for the command line entry point and the GUI model (no widgets).
"""
import pytest

from oneaddr.main import main
from oneaddr.model import AssemblerModel

SOURCE = ".text\n.label start\naddi 5\nstor result\nbeqz start\n.data\n.label result\n.number 0\n"


@pytest.fixture
def program(tmp_path):
    path = tmp_path / "prog.asm"
    path.write_text(SOURCE)
    return path


@pytest.fixture
def broken(tmp_path):
    path = tmp_path / "broken.asm"
    path.write_text(".text\nclac\nbeqz nowhere\n")
    return path


class TestModel:
    def test_set_file_derives_outputs(self, program):
        model = AssemblerModel()
        assert model.set_file(str(program))
        assert model.is_file_loaded()
        mc_file, dat_file = model.get_outputs()
        assert mc_file.endswith("prog.mc")
        assert dat_file.endswith("prog.dat")

    def test_rejects_non_asm(self, tmp_path):
        model = AssemblerModel()
        assert not model.set_file(str(tmp_path / "prog.txt"))
        assert not model.is_file_loaded()
        assert "must be a .asm file" in model.get_status()

    def test_assemble_without_file(self):
        model = AssemblerModel()
        assert not model.assemble()
        assert "valid file" in model.get_status()

    def test_assemble(self, program):
        model = AssemblerModel()
        model.set_file(str(program))
        assert model.assemble()
        assert model.get_status() == "Program assembled correctly"
        assert not model.is_running
        assert (program.parent / "prog.mc").read_text().splitlines() == ["v2.0 raw", "1005", "4000", "5000"]

    def test_assemble_error(self, broken):
        model = AssemblerModel()
        model.set_file(str(broken))
        assert not model.assemble()
        assert "Line 3" in model.get_status()
        assert "nowhere" in model.get_status()
        assert not (broken.parent / "broken.mc").exists()

    def test_assemble_missing_file(self, tmp_path):
        model = AssemblerModel()
        model.set_file(str(tmp_path / "gone.asm"))
        assert not model.assemble()
        assert model.get_status().startswith("Assembly failed")

    def test_clear_file(self, program):
        model = AssemblerModel()
        model.set_file(str(program))
        model.clear_file()
        assert not model.is_file_loaded()
        assert model.get_outputs() == ("", "")


class TestCommandLine:
    def test_assemble(self, program, capsys):
        assert main([str(program)]) == 0
        assert "assembled correctly" in capsys.readouterr().out
        assert (program.parent / "prog.dat").read_text() == "v2.0 raw\n0000\n"

    def test_output_option(self, program, tmp_path):
        assert main([str(program), "-o", str(tmp_path / "image")]) == 0
        assert (tmp_path / "image.mc").exists()
        assert (tmp_path / "image.dat").exists()

    def test_symbols(self, program, capsys):
        assert main([str(program), "--symbols"]) == 0
        out = capsys.readouterr().out
        assert "start" in out
        assert "result" in out

    def test_error_exit_code(self, broken, capsys):
        assert main([str(broken)]) == 1
        err = capsys.readouterr().err
        assert "Line 3" in err
        assert not (broken.parent / "broken.mc").exists()

    def test_non_asm_input(self, tmp_path, capsys):
        assert main([str(tmp_path / "prog.s")]) == 1
        assert ".asm" in capsys.readouterr().err

    def test_missing_input(self, tmp_path, capsys):
        assert main([str(tmp_path / "gone.asm")]) == 1
        assert "Error" in capsys.readouterr().err


@pytest.fixture
def not_utf8(tmp_path):
    path = tmp_path / "latin1.asm"
    path.write_bytes(b"clac\n# caf\xe9\naddi 5 \xff\n")
    return path


class TestUndecodableSource:
    def test_command_line_reports_line(self, not_utf8, capsys):
        assert main([str(not_utf8)]) == 1
        err = capsys.readouterr().err
        assert "Line 2" in err
        assert "UTF-8" in err
        assert not (not_utf8.parent / "latin1.mc").exists()

    def test_model_reports_line(self, not_utf8):
        model = AssemblerModel()
        model.set_file(str(not_utf8))
        assert not model.assemble()
        assert not model.is_running
        assert "Line 2" in model.get_status()


class FakeView:
    """Records what the controller asks of the window."""
    def __init__(self, file_path=""):
        self.file_path = file_path
        self.status = None
        self.states = {}
        self.errors = []
        self.files = None

    def set_load_callback(self, callback):
        self.on_load_file = callback

    def set_assemble_callback(self, callback):
        self.on_assemble = callback

    def show_file_dialog(self):
        return self.file_path

    def show_error(self, title, message):
        self.errors.append((title, message))

    def update_files(self, input_file, mc_file, dat_file):
        self.files = (input_file, mc_file, dat_file)

    def update_status(self, status_text):
        self.status = status_text

    def set_button_state(self, button_name, state):
        self.states[button_name] = state


class TestController:
    @pytest.fixture(autouse=True)
    def _controller_module(self):
        pytest.importorskip("tkinter")
        from oneaddr.controller import AssemblerController
        self.controller_class = AssemblerController

    def _controller(self, file_path):
        view = FakeView(str(file_path))
        controller = self.controller_class(model=AssemblerModel(), view=view)
        view.on_load_file()
        return controller, view

    def test_load_and_assemble(self, program):
        controller, view = self._controller(program)
        assert view.states["assemble"] == "normal"
        assert view.files[1].endswith("prog.mc")
        assert view.on_assemble()
        assert view.status == "Program assembled correctly"
        assert view.errors == []

    def test_failure_reenables_assemble(self, not_utf8):
        controller, view = self._controller(not_utf8)
        assert not view.on_assemble()
        assert view.states["assemble"] == "normal"
        assert "Line 2" in view.status
        assert view.errors[0][0] == "Assembly failed"

    def test_rejects_non_asm(self, tmp_path):
        controller, view = self._controller(tmp_path / "prog.txt")
        assert "assemble" not in view.states
        assert view.errors[0][0] == "File extension not supported"
