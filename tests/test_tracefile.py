import pytest

from cache import SetAssociativeCache, row_count
from tests.helpers import eip, make_geometry, operands
from errors import MalformedAddress, ResourceError, TraceFormatError
from replacement import make_replacement_policy
from simstats import SimulationStatistics
from tracefile import InstructionFetch, MemoryOperands, TraceProcessor, parse_trace_line


def build_processor(**geometry_kwargs):
    geometry = make_geometry(**geometry_kwargs)
    stats = SimulationStatistics()
    policy = make_replacement_policy("RR", geometry.associativity, row_count(geometry))
    cache = SetAssociativeCache(geometry, policy, stats)
    return TraceProcessor(cache, geometry, stats), cache, stats


def test_parse_instruction_fetch():
    assert parse_trace_line(eip("7c809767") + "\n") == InstructionFetch(4, "7c809767")


def test_parse_single_digit_width():
    assert parse_trace_line("EIP ( 2): 0040a1b2 90 nop") == InstructionFetch(2, "0040a1b2")


def test_parse_memory_operands():
    record = parse_trace_line(operands("0012ff10", "7c80975c"))
    assert record == MemoryOperands("0012ff10", "7c80975c")


def test_zero_operands_are_absent():
    assert parse_trace_line(operands("00000000", "0000abcd")) == MemoryOperands(None, "0000abcd")
    assert parse_trace_line(operands()) == MemoryOperands(None, None)


@pytest.mark.parametrize("line", ["", "\n", "abc", "12345\n", "\r\n"])
def test_short_lines_are_skipped(line):
    assert parse_trace_line(line) is None


def test_bad_width_is_rejected():
    with pytest.raises(TraceFormatError):
        parse_trace_line("EIP (xx): 7c809767 90 nop")


def test_truncated_lines_are_rejected():
    with pytest.raises(TraceFormatError) as excinfo:
        parse_trace_line("EIP (04): 7c80", line_number=12)
    assert "line 12" in str(excinfo.value)
    with pytest.raises(TraceFormatError):
        parse_trace_line("dstM: 0012ff10 --------")


def test_operand_line_with_only_a_source():
    processor, _, stats = build_processor(block_size=64)
    processor.process_record(parse_trace_line(operands("00000000", "0000abcd")))
    assert stats.total_cache_accesses == 1
    assert stats.total_addresses == 1
    assert stats.num_instructions == 0
    assert stats.cpi_cycles == 64 + 1


def test_operand_line_with_both_addresses():
    processor, _, stats = build_processor(block_size=64)
    processor.process_record(parse_trace_line(operands("00001000", "00002000")))
    assert stats.total_addresses == 2
    assert stats.total_cache_accesses == 2
    assert stats.cpi_cycles == 2 * (64 + 1)


def test_instruction_fetch_within_one_block():
    processor, _, stats = build_processor(block_size=64)
    line = eip("00001000")
    processor.process_record(parse_trace_line(line))
    assert stats.total_cache_accesses == 1
    assert stats.num_instructions == 1
    assert stats.cpi_cycles == 64 + 2

    processor.process_record(parse_trace_line(line))
    assert stats.cache_hits == 1
    assert stats.cpi_cycles == 64 + 2 + 1 + 2


def test_access_spanning_two_blocks_uses_next_index():
    processor, cache, stats = build_processor(block_size=4, associativity=1)
    # offset 2, index 1: six bytes reach into the next block
    processor.process_record(InstructionFetch(4, "00000006"))
    assert stats.total_cache_accesses == 2
    assert stats.total_addresses == 1
    assert not cache.blocks[0].valid
    assert cache.blocks[1].valid and cache.blocks[2].valid
    assert cache.blocks[1].tag == cache.blocks[2].tag == 0


def test_wide_access_spans_several_blocks():
    processor, _, stats = build_processor(block_size=4, associativity=1)
    processor.process_record(InstructionFetch(11, "00000000"))
    assert stats.total_cache_accesses == 3


def test_logical_cycle_advances_per_address():
    processor, _, stats = build_processor(block_size=64)
    processor.process_record(MemoryOperands("00001000", "00002000"))
    processor.process_record(InstructionFetch(4, "00003000"))
    assert stats.logical_cycle == 3


def test_process_file(write_trace):
    processor, _, stats = build_processor(block_size=16, associativity=2)
    path = write_trace([
        eip("7c809767"),
        operands("0012ff10", "00000000"),
        "",
        eip("7c80976b", width=3),
        operands("00000000", "00000000"),
        eip("7c809767"),
    ])
    assert processor.process_file(path) == 5
    assert stats.num_instructions == 3
    assert stats.total_addresses == 4
    assert stats.cache_hits >= 1
    assert stats.cache_hits + stats.compulsory_misses + stats.conflict_misses == stats.total_cache_accesses


def test_missing_trace_file(tmp_path):
    processor, _, _ = build_processor()
    with pytest.raises(ResourceError):
        processor.process_file(tmp_path / "missing.trc")


def test_malformed_address_aborts(write_trace):
    processor, _, _ = build_processor()
    path = write_trace([eip("7c809767"), eip("7c80976z")])
    with pytest.raises(MalformedAddress):
        processor.process_file(path)


def test_unicode_digit_width_is_rejected():
    with pytest.raises(TraceFormatError):
        parse_trace_line("EIP ( ²): 7c809767 90 nop")


def test_non_ascii_bytes_are_rejected(write_raw_trace):
    processor, _, stats = build_processor()
    path = write_raw_trace(eip("7c809767").encode() + b"\n\xff\xfe garbage\n")
    with pytest.raises(TraceFormatError) as excinfo:
        processor.process_file(path)
    assert "line 2" in str(excinfo.value)
    assert stats.total_addresses == 1


def test_crlf_trace_file(write_raw_trace):
    processor, _, stats = build_processor()
    path = write_raw_trace(eip("7c809767").encode() + b"\r\n\r\n" + operands("0012ff10").encode() + b"\r\n")
    assert processor.process_file(path) == 2
    assert stats.total_addresses == 2
