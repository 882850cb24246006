# tracefile.py
import logging
import math
from collections import namedtuple

from address import ADDRESS_DIGITS, decode_address
from errors import ResourceError, TraceFormatError

logger = logging.getLogger(__name__)

MIN_LINE_LENGTH = 6
NO_OPERAND = "0" * ADDRESS_DIGITS
OPERAND_WIDTH = 4

# Fixed column layout of a trace line:
#   EIP (04): 7c809767 83 6d f8 04      sub ...
#   dstM: 0012ff10 --------    srcM: 7c80975c --------
EIP_PREFIX = "EIP"
EIP_WIDTH = slice(5, 7)
EIP_ADDRESS = slice(10, 10 + ADDRESS_DIGITS)
DST_ADDRESS = slice(6, 6 + ADDRESS_DIGITS)
SRC_ADDRESS = slice(33, 33 + ADDRESS_DIGITS)

InstructionFetch = namedtuple("InstructionFetch", ["width", "address"])
MemoryOperands = namedtuple("MemoryOperands", ["destination", "source"])


def _column(line, span, name, line_number):
    if len(line) < span.stop:
        raise TraceFormatError(
            f"{name} expected at columns {span.start}-{span.stop - 1} but line has {len(line)} characters",
            line_number,
        )
    return line[span]


def parse_trace_line(line, line_number=None):
    """
    Parse one trace line into an InstructionFetch or MemoryOperands record.
    Returns None for blank or short lines. Absent operands (00000000) are
    returned as None.
    """
    line = line.rstrip("\r\n")
    if len(line) < MIN_LINE_LENGTH:
        return None

    if line.startswith(EIP_PREFIX):
        width_text = _column(line, EIP_WIDTH, "access width", line_number).strip()
        if not (width_text.isascii() and width_text.isdigit()):
            raise TraceFormatError(f"invalid access width {width_text!r}", line_number)
        address = _column(line, EIP_ADDRESS, "instruction address", line_number)
        return InstructionFetch(int(width_text), address)

    destination = _column(line, DST_ADDRESS, "destination address", line_number)
    source = _column(line, SRC_ADDRESS, "source address", line_number)
    return MemoryOperands(
        None if destination == NO_OPERAND else destination,
        None if source == NO_OPERAND else source,
    )


class TraceProcessor:
    def __init__(self, cache, geometry, stats):
        self.cache = cache
        self.geometry = geometry
        self.stats = stats

    def handle_address(self, address, width, is_instruction):
        """
        Run every cache access needed for `width` bytes at `address`.
        An access that runs past the end of its block continues in the
        next index value with the same tag.
        """
        stats = self.stats
        stats.tick()
        tag, index, offset = decode_address(address, self.geometry)
        span = math.ceil((offset + width) / self.geometry.block_size)
        for k in range(span):
            stats.total_cache_accesses += 1
            self.cache.access(tag, index + k)
        stats.total_addresses += 1

        if is_instruction:
            stats.cpi_cycles += 2
            stats.num_instructions += 1
        else:
            stats.cpi_cycles += 1

    def process_record(self, record):
        if isinstance(record, InstructionFetch):
            self.handle_address(record.address, record.width, True)
            return
        for address in (record.destination, record.source):
            if address is not None:
                self.handle_address(address, OPERAND_WIDTH, False)

    def process_lines(self, lines):
        """Process text or raw ASCII byte lines; returns the record count."""
        processed = 0
        for line_number, line in enumerate(lines, start=1):
            if isinstance(line, bytes):
                try:
                    line = line.decode("ascii")
                except UnicodeDecodeError as exc:
                    raise TraceFormatError(
                        f"non-ASCII byte {line[exc.start]:#04x} at column {exc.start}", line_number
                    ) from exc
            record = parse_trace_line(line, line_number)
            if record is None:
                continue
            self.process_record(record)
            processed += 1
        return processed

    def process_file(self, path):
        """Simulate every record of a trace file; returns the record count."""
        try:
            f = open(path, "rb")
        except OSError as exc:
            raise ResourceError(f"unable to open trace file {path!r}: {exc.strerror}") from exc
        with f:
            processed = self.process_lines(f)
        logger.info("processed %d trace records from %s", processed, path)
        return processed
