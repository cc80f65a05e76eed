"""
Main entry point for the Assembler application.

    python -m oneaddr.main                       start the GUI
    python -m oneaddr.main prog.asm [-o out]     assemble prog.asm into out.mc / out.dat
"""

import argparse
import logging
import sys

from .assembler import AssemblerError, assemble_file, dump_symbol_table, pass1


def run_gui():
    """Create and start the MVC application"""
    # tkinter is only needed for the GUI
    from .controller import AssemblerController

    app_controller = AssemblerController()
    app_controller.run()


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="oneaddr-asm",
        description="Two-pass assembler for the 1-address CPU (Logisim memory images)",
    )
    parser.add_argument("input", nargs="?", help="Input .asm file (omit to start the GUI)")
    parser.add_argument("-o", "--output",
                        help="Base name of the .mc and .dat files (default: input name)")
    parser.add_argument("--symbols", action="store_true",
                        help="Print the symbol table after assembling")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Print pass details to stderr")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )

    if args.input is None:
        run_gui()
        return 0

    if not args.input.endswith(".asm"):
        print(f"Error: input file must be a .asm file: {args.input}", file=sys.stderr)
        return 1

    try:
        mc_path, dat_path = assemble_file(args.input, args.output)
        if args.symbols:
            with open(args.input, encoding="utf-8") as src:
                print(dump_symbol_table(pass1(src)))
    except AssemblerError as e:
        print(f"Assembler error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Program assembled correctly: {mc_path}, {dat_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
