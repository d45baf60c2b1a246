import pytest

from nemsolve.common import TokenStream
from nemsolve.cx import CrossSections

CX_TEXT = """(
REGION_NUM 2
GROUP 1 (
DIFFUSION 1.5 1.2
REMOVAL 0.025 0.03
SCATTER 0.015 0.0
FISSION 0.007 0.008
CHI 1.0 1.0
);
GROUP 2 (
DIFFUSION 0.4 0.35
REMOVAL 0.1 0.12
NOTE
SCATTER 0.0 0.0
FISSION 0.13 0.15
CHI 0.0 0.0
);
);
Geometry
"""


def _loaded():
    cx = CrossSections(2)
    stream = TokenStream(CX_TEXT)
    cx.read(stream)
    return cx, stream


class RecordingNode:
    def __init__(self, region):
        self.region = region
        self.calls = []

    def set_cross_section(self, *args):
        self.calls.append(args)


def test_read_fills_tables_per_region_and_group():
    cx, _ = _loaded()
    assert cx.regions == 2
    assert cx.diffusion == [[1.5, 0.4], [1.2, 0.35]]
    assert cx.removal == [[0.025, 0.1], [0.03, 0.12]]
    assert cx.scattering == [[0.015, 0.0], [0.0, 0.0]]
    assert cx.fission == [[0.007, 0.13], [0.008, 0.15]]
    assert cx.chi == [[1.0, 0.0], [1.0, 0.0]]


def test_read_stops_after_end_mark():
    _, stream = _loaded()
    assert stream.next_token() == "Geometry"


def test_region_returns_rows_of_that_region():
    cx, _ = _loaded()
    d, r, s, f, chi = cx.region(2)
    assert d == [1.2, 0.35]
    assert r == [0.03, 0.12]
    assert s == [0.0, 0.0]
    assert f == [0.008, 0.15]
    assert chi == [1.0, 0.0]


@pytest.mark.parametrize("region", [0, 3, -1])
def test_region_outside_range_raises(region):
    cx, _ = _loaded()
    with pytest.raises(ValueError):
        cx.region(region)


def test_group_outside_range_raises():
    cx = CrossSections(2)
    text = "( REGION_NUM 1 GROUP 3 ( DIFFUSION 1.0 ); );"
    with pytest.raises(ValueError):
        cx.read(TokenStream(text))


def test_negative_region_count_raises():
    with pytest.raises(ValueError):
        CrossSections(1).read(TokenStream("( REGION_NUM -2 );"))


def test_truncated_table_raises():
    cx = CrossSections(1)
    with pytest.raises(EOFError):
        cx.read(TokenStream("( REGION_NUM 1 GROUP 1 ( DIFFUSION 1.0"))


def test_bad_number_raises():
    cx = CrossSections(1)
    with pytest.raises(ValueError):
        cx.read(TokenStream("( REGION_NUM 1 GROUP 1 ( REMOVAL abc ); );"))


def test_missing_block_end_reads_to_end_of_input():
    cx = CrossSections(1)
    cx.read(TokenStream("( REGION_NUM 1 GROUP 1 ( CHI 0.5 );"))
    assert cx.chi == [[0.5]]


def test_set_coefficients_passes_region_rows():
    cx, _ = _loaded()
    nodes = [RecordingNode(1), RecordingNode(2), RecordingNode(1)]
    cx.set_coefficients(nodes)
    assert nodes[0].calls == [cx.region(1)]
    assert nodes[1].calls == [cx.region(2)]
    assert nodes[2].calls == [cx.region(1)]


def test_set_coefficients_rejects_unknown_region():
    cx, _ = _loaded()
    with pytest.raises(ValueError):
        cx.set_coefficients([RecordingNode(5)])


def test_format_header_and_section_order():
    cx, _ = _loaded()
    text = cx.format()
    assert text.startswith("\n[CX]\nRegion : 2\nGroup : 2\n")
    positions = [
        text.index(f"\n[{title}]\n\n")
        for title in ("DIFFUSION", "REMOVAL", "SCATTERING", "FISSION", "CHI")
    ]
    assert positions == sorted(positions)
    assert "1.50e+00 4.00e-01 \n" in text


def test_format_one_line_per_region():
    cx, _ = _loaded()
    section = cx.format().split("[CHI]\n\n", 1)[1]
    rows = [line for line in section.split("\n") if line]
    assert len(rows) == cx.regions
    assert all(len(row.split()) == cx.groups for row in rows)