from geometry import CacheConfiguration, calculate_geometry


def make_config(cache_size_kb=1, block_size=4, associativity=1, policy="RR", trace_file="trace.txt"):
    return CacheConfiguration(
        trace_file=str(trace_file),
        cache_size_kb=cache_size_kb,
        block_size=block_size,
        associativity=associativity,
        replacement_policy=policy,
    )


def make_geometry(**kwargs):
    return calculate_geometry(make_config(**kwargs))


def eip(address, width=4):
    return f"EIP ({width:02d}): {address} 83 6d f8 04      sub dword [ebp-0x8],0x4"


def operands(destination="00000000", source="00000000"):
    return f"dstM: {destination} --------    srcM: {source} --------"
