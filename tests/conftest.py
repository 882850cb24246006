import pytest


@pytest.fixture
def write_trace(tmp_path):
    def write(lines, name="trace.txt"):
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n")
        return path
    return write


@pytest.fixture
def write_raw_trace(tmp_path):
    def write(data, name="trace.txt"):
        path = tmp_path / name
        path.write_bytes(data)
        return path
    return write
