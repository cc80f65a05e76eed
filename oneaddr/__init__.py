"""
One-address CPU assembler
=========================
Two-pass assembler producing Logisim raw memory images (.mc text segment,
.dat data segment) for the 1-address CPU.

    assembler.py:  opcode table, line classifier, pass 1 / pass 2, file driver
    model.py, view.py, controller.py:  tkinter front end
    main.py:  command line entry point
"""

__version__ = "1.0.0"

from .assembler import AssemblerError, Label, Segment, assemble_file, assemble_lines
