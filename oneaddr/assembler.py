"""
Two-pass assembler for the 1-address CPU.

Pass 1 walks the source and builds the symbol table (label -> address, segment).
Pass 2 walks it again, resolves labels and writes two Logisim memory images:
the text segment machine code (.mc) and the data segment values (.dat).
"""
import logging
import re
from collections import namedtuple
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)

#first line of every Logisim raw memory image
HEADER = "v2.0 raw"

#error kinds carried by AssemblerError
SYNTAX = "syntax"
DUPLICATE_LABEL = "duplicate-label"
LABEL_NOT_FOUND = "label-not-found"
UNKNOWN_OPERATOR = "unknown-operator"
NOT_A_NUMBER = "not-a-number"
OUT_OF_RANGE = "out-of-range"


class AssemblerError(Exception):
    """Raised on any assembly error. Assembly stops at the first one."""
    def __init__(self, message, line_num=0, kind=SYNTAX):
        self.message = message
        self.line_num = line_num
        self.kind = kind
        super().__init__(f"Line {line_num}: {message}" if line_num else message)


class Segment(Enum):
    TEXT = "text"
    DATA = "data"


@dataclass(frozen=True)
class Label:
    """A symbol table entry. Two labels are the same label if they share a name."""
    name: str
    address: int = field(compare=False)
    segment: Segment = field(compare=False)


class SegmentTracker:
    """Current segment plus one word counter per segment. Each pass makes its own."""
    def __init__(self):
        self.segment = Segment.TEXT
        self.counters = {Segment.TEXT: 0, Segment.DATA: 0}

    def switch(self, segment):
        self.segment = segment

    @property
    def address(self):
        return self.counters[self.segment]

    def advance(self):
        """Account for one word in the current segment, return the address it took."""
        address = self.counters[self.segment]
        self.counters[self.segment] = address + 1
        return address


# --- Opcode table ---

#imm and addr only document the addressing kind, both encode the same way
OPERAND_FORMATS = {'none', 'imm', 'addr'}

#load the opcode table
def load_optab(filename="optab.csv"):
    file_path = Path(filename)
    # resolve relative paths against the module directory
    if not file_path.is_absolute():
        file_path = Path(__file__).parent / file_path

    # if not found, fail immediately
    if not file_path.exists():
        raise FileNotFoundError(f"optab file not found: {file_path}")

    df = pd.read_csv(file_path, dtype=str, keep_default_na=False)
    # strip whitespace from column names
    df.columns = df.columns.str.strip()

    optab = {}
    for idx, row in df.iterrows():
        name = str(row.get('name', '')).strip()
        if not name:
            raise ValueError(f"Missing instruction name (row {idx}) in optab: {file_path}")
        if name in optab:
            raise ValueError(f"Duplicate instruction '{name}' (row {idx}) in optab: {file_path}")
        opcode_str = str(row.get('opcode', '')).strip()
        if not opcode_str:
            raise ValueError(f"Missing opcode for instruction '{name}' (row {idx}) in optab: {file_path}")
        try:
            opcode = int(opcode_str, 16)
        except ValueError:
            raise ValueError(f"Invalid hex opcode '{opcode_str}' for instruction '{name}' (row {idx}) in optab: {file_path}")
        if not 0 <= opcode <= 0xFF:
            raise ValueError(f"Opcode '{opcode_str}' for instruction '{name}' does not fit in 2 hex digits (row {idx})")
        operand_format = str(row.get('format', '')).strip().lower()
        if operand_format not in OPERAND_FORMATS:
            raise ValueError(f"Unknown operand format '{operand_format}' for instruction '{name}' (row {idx}) in optab: {file_path}")
        optab[name] = {'opcode': opcode, 'format': operand_format}
    return optab


# --- Number encoding ---

_INTEGER = re.compile(r"[+-]?[0-9]+")

#turns a signed int into its two's complement hex string, exactly width digits
def hexstr(value, width):
    return f"{value & ((1 << (4 * width)) - 1):0{width}x}"

def parse_number(text, line_num, width):
    """Parse a decimal literal that must fit a signed field of width hex digits."""
    if not _INTEGER.fullmatch(text):
        raise AssemblerError(f"invalid input {text}, valid number must be specified", line_num, NOT_A_NUMBER)
    value = int(text)
    bits = 4 * width
    low, high = -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    if not low <= value <= high:
        raise AssemblerError(f"number must be {low} <= n <= {high}, got {value}", line_num, OUT_OF_RANGE)
    return value

def encode_data(text, line_num):
    """Encode a .number literal as a 16-bit data word."""
    return hexstr(parse_number(text, line_num, 4), 4)


# --- Instruction encoders ---

def resolve_operand(operand, symtab, line_num, mnemonic):
    """Replace a label operand with its address. Anything else is returned as is."""
    if operand[:1].isalpha():
        label = symtab.get(operand)
        if label is None:
            raise AssemblerError(f"label {operand} not found for {mnemonic}", line_num, LABEL_NOT_FOUND)
        return str(label.address)
    return operand

def _constant_encoder(mnemonic, opcode):
    word = f"{opcode:02x}00"

    def encode(operand, symtab, line_num):
        if operand:
            raise AssemblerError(f"{mnemonic} takes no operand", line_num, SYNTAX)
        return word
    return encode

def _operand_encoder(mnemonic, opcode):
    prefix = f"{opcode:02x}"

    def encode(operand, symtab, line_num):
        if not operand:
            raise AssemblerError(f"{mnemonic} requires an operand", line_num, SYNTAX)
        value = parse_number(resolve_operand(operand, symtab, line_num, mnemonic), line_num, 2)
        return prefix + hexstr(value, 2)
    return encode

def build_encoders(optab):
    """Map each mnemonic to a function (operand, symtab, line_num) -> 4 digit word."""
    encoders = {}
    for name, entry in optab.items():
        if entry['format'] == 'none':
            encoders[name] = _constant_encoder(name, entry['opcode'])
        else:
            encoders[name] = _operand_encoder(name, entry['opcode'])
    return encoders

OPTAB = load_optab()
ENCODERS = build_encoders(OPTAB)

def get_encoder(mnemonic):
    return ENCODERS.get(mnemonic)


# --- Line classification ---

COMMENT = 'comment'
BLANK = 'blank'
SEGMENT = 'segment'
LABEL = 'label'
NUMBER = 'number'
INSTRUCTION = 'instruction'

SEGMENT_DIRECTIVES = {'.text': Segment.TEXT, '.data': Segment.DATA}

ParsedLine = namedtuple('ParsedLine', ['kind', 'token', 'operand'])

def classify_line(line, line_num, segment):
    """Split a source line into tokens and decide what kind of line it is.

    token is the directive or mnemonic, operand the single argument ("" if none).
    Only .number lines may occupy space in the data segment.
    """
    tokens = line.split()
    if not tokens:
        return ParsedLine(BLANK, "", "")
    first = tokens[0]
    if first.startswith('#'):
        return ParsedLine(COMMENT, first, "")

    if first in SEGMENT_DIRECTIVES:
        if len(tokens) != 1:
            raise AssemblerError(f"Nothing can follow {first}", line_num, SYNTAX)
        return ParsedLine(SEGMENT, first, "")

    if first == '.label':
        if len(tokens) != 2:
            raise AssemblerError("Syntax is '.label name'. Nothing can follow name", line_num, SYNTAX)
        if not tokens[1][:1].isalpha():
            raise AssemblerError(f"Label name {tokens[1]} must start with a letter", line_num, SYNTAX)
        return ParsedLine(LABEL, first, tokens[1])

    if segment is Segment.DATA:
        if first != '.number':
            raise AssemblerError("Only .number directives allowed in .data segment", line_num, SYNTAX)
        if len(tokens) != 2:
            raise AssemblerError("Syntax is '.number value'", line_num, SYNTAX)
        return ParsedLine(NUMBER, first, tokens[1])

    if first == '.number':
        raise AssemblerError(".number directives only allowed in .data segment", line_num, SYNTAX)
    if len(tokens) > 2:
        raise AssemblerError(f"{first} takes at most one operand", line_num, SYNTAX)
    return ParsedLine(INSTRUCTION, first, tokens[1] if len(tokens) == 2 else "")


#PASS 1 - building the symbol table
def define_label(symtab, name, tracker, line_num):
    if name in symtab:
        raise AssemblerError(f"Duplicate label name {name}", line_num, DUPLICATE_LABEL)
    label = Label(name, tracker.address, tracker.segment)
    symtab[name] = label
    logger.debug(f"L{line_num}: define {name} = {label.address} ({label.segment.value})")
    return label

def pass1(lines):
    symtab = {}
    tracker = SegmentTracker()
    for line_num, line in enumerate(lines, start=1):
        parsed = classify_line(line, line_num, tracker.segment)
        if parsed.kind in (COMMENT, BLANK):
            continue
        if parsed.kind == SEGMENT:
            tracker.switch(SEGMENT_DIRECTIVES[parsed.token])
        elif parsed.kind == LABEL:
            define_label(symtab, parsed.operand, tracker, line_num)
        else:
            #.number in data, instruction in text: one word each
            tracker.advance()
    logger.debug(f"pass 1: {len(symtab)} labels, {tracker.counters[Segment.TEXT]} text words, "
                 f"{tracker.counters[Segment.DATA]} data words")
    return symtab


#PASS 2 - encoding
def encode_lines(symtab, lines):
    """Yield (segment, word) for every line that occupies memory, in program order."""
    tracker = SegmentTracker()
    for line_num, line in enumerate(lines, start=1):
        parsed = classify_line(line, line_num, tracker.segment)
        if parsed.kind in (COMMENT, BLANK, LABEL):
            continue
        if parsed.kind == SEGMENT:
            tracker.switch(SEGMENT_DIRECTIVES[parsed.token])
            continue
        if parsed.kind == NUMBER:
            word = encode_data(parsed.operand, line_num)
        else:
            encoder = get_encoder(parsed.token)
            if encoder is None:
                raise AssemblerError(f"Operator {parsed.token} not found", line_num, UNKNOWN_OPERATOR)
            word = encoder(parsed.operand, symtab, line_num)
        tracker.advance()
        yield tracker.segment, word

def pass2(symtab, lines, mc, dat):
    """Write the machine code image to mc and the data image to dat.

    Both sinks are closed when this returns, whether or not assembly succeeded.
    """
    try:
        try:
            mc.write(HEADER + "\n")
            dat.write(HEADER + "\n")
            for segment, word in encode_lines(symtab, lines):
                if segment is Segment.DATA:
                    dat.write(word + "\n")
                else:
                    mc.write(word + "\n")
        finally:
            mc.close()
    finally:
        dat.close()


def assemble_lines(lines):
    """Assemble an in-memory sequence of lines. Returns (symtab, mc words, dat words)."""
    symtab = pass1(lines)
    mc_words, dat_words = [], []
    for segment, word in encode_lines(symtab, lines):
        (dat_words if segment is Segment.DATA else mc_words).append(word)
    return symtab, mc_words, dat_words

def output_paths(input_file, output_base=None):
    """The .mc and .dat paths for an input file (or an explicit output base name)."""
    base = str(output_base) if output_base else str(Path(input_file).with_suffix(''))
    return Path(f"{base}.mc"), Path(f"{base}.dat")

def _remove(*paths):
    for path in paths:
        if path.exists():
            path.unlink()

def undecodable_line(input_file):
    """First line of input_file that is not valid UTF-8, 0 if every line decodes."""
    with open(input_file, "rb") as src:
        for line_num, raw in enumerate(src, start=1):
            try:
                raw.decode("utf-8")
            except UnicodeDecodeError:
                return line_num
    return 0

def assemble_file(input_file, output_base=None):
    """Assemble input_file into <base>.mc and <base>.dat.

    The source is opened once per pass. If anything fails the output files are
    removed so no partial image is left behind.
    """
    mc_path, dat_path = output_paths(input_file, output_base)
    try:
        with open(input_file, encoding="utf-8") as src:
            symtab = pass1(src)
        with open(input_file, encoding="utf-8") as src:
            mc = open(mc_path, "w", encoding="utf-8")
            try:
                dat = open(dat_path, "w", encoding="utf-8")
            except OSError:
                mc.close()
                raise
            pass2(symtab, src, mc, dat)
    except UnicodeDecodeError as e:
        _remove(mc_path, dat_path)
        raise AssemblerError(f"{input_file} is not UTF-8 text: {e.reason}",
                             undecodable_line(input_file), SYNTAX) from e
    except Exception:
        _remove(mc_path, dat_path)
        raise
    logger.info(f"Assembled {input_file} -> {mc_path}, {dat_path}")
    return mc_path, dat_path

def dump_symbol_table(symtab):
    """Symbol table listing, ordered by segment then address."""
    order = {Segment.TEXT: 0, Segment.DATA: 1}
    rows = sorted(symtab.values(), key=lambda l: (order[l.segment], l.address, l.name))
    listing = [f"{'Label':<20}{'Seg':<6}Addr", "-" * 30]
    for label in rows:
        listing.append(f"{label.name:<20}{label.segment.value:<6}{label.address}")
    return "\n".join(listing)
