import csv
import io
import pytest
from pathlib import Path
from media_table import config
from media_table.models import MediaRecord
from media_table.reporting import TableRenderer, bitrate_exceeds, truncate_middle


def make_record(name, bitrate):
    return MediaRecord.from_fields(
        Path(name),
        [name, "1.00 GB", "01:00:00", "23.98", bitrate, "1920x1080", "h264", "High", "8bit", "2CH 192k"],
    )


def test_truncate_middle():
    assert truncate_middle("short.mkv", 65) == "short.mkv"
    assert truncate_middle("abcdefghijklmnop.mkv", 11) == "abcd....mkv"
    assert len(truncate_middle("x" * 100, 65)) <= 65
    assert truncate_middle("abcdef", 3) == "abc"


def test_bitrate_exceeds_threshold():
    assert bitrate_exceeds("25.00 Mbps", 10.0)
    assert bitrate_exceeds("12 000 kb/s", 10.0)
    assert not bitrate_exceeds("9.99 Mbps", 10.0)
    assert not bitrate_exceeds("", 10.0)
    assert not bitrate_exceeds("25.00 Mbps", None)


def test_build_table_highlights_only_high_bitrates():
    renderer = TableRenderer(bitrate_threshold=10.0)
    table = renderer.build_table([make_record("low.mkv", "4.00 Mbps"), make_record("high.mkv", "40.00 Mbps")])

    assert [c.header for c in table.columns] == list(config.HEADERS)
    bitrate_cells = list(table.columns[config.COLUMN_INDEX["bitrate"]].cells)
    assert bitrate_cells[0].spans == []
    assert [span.style for span in bitrate_cells[1].spans] == [config.HIGHLIGHT_STYLE]
    assert table.columns[config.COLUMN_INDEX["size"]].justify == "right"
    assert table.columns[config.COLUMN_INDEX["depth"]].justify == "center"


def test_render_box_table_aligns_rows():
    out = io.StringIO()
    TableRenderer(style="box", color=False).render(
        [make_record("a.mkv", "4.00 Mbps"), make_record("much_longer_name.mkv", "40.00 Mbps")], out
    )
    lines = out.getvalue().splitlines()

    assert "Filename" in lines[1] and "Bitrate" in lines[1]
    assert any("much_longer_name.mkv" in line for line in lines)
    # Every line of a box table has the same width
    assert len({len(line) for line in lines}) == 1
    assert "\x1b[" not in out.getvalue()


def test_render_plain_table_has_no_borders():
    out = io.StringIO()
    TableRenderer(style="plain", color=False).render([make_record("a.mkv", "4.00 Mbps")], out)
    text = out.getvalue()
    assert "Filename" in text and "a.mkv" in text
    assert "│" not in text and "┌" not in text


def test_render_truncates_filenames():
    out = io.StringIO()
    long_name = "a" * 40 + ".mkv"
    TableRenderer(style="plain", color=False, filename_length=20).render([make_record(long_name, "1 Mbps")], out)
    assert long_name not in out.getvalue()
    assert truncate_middle(long_name, 20) in out.getvalue()


def test_render_csv():
    out = io.StringIO()
    TableRenderer(style="csv").render([make_record("a,b.mkv", "4.00 Mbps")], out)
    out.seek(0)
    rows = list(csv.reader(out))
    assert rows[0] == list(config.HEADERS)
    assert rows[1][0] == "a,b.mkv"
    assert rows[1][4] == "4.00 Mbps"


def test_unknown_style_rejected():
    with pytest.raises(ValueError):
        TableRenderer(style="html")


class TerminalBuffer(io.StringIO):
    def isatty(self):
        return True


def test_render_on_narrow_terminal_keeps_every_cell(monkeypatch):
    monkeypatch.setenv("COLUMNS", "120")
    record = MediaRecord.from_fields(
        Path("movie.mkv"),
        ["Some.Long.Movie.Name.2160p.UHD.BluRay.HEVC.Atmos.mkv", "58.3 GiB", "02:14:08.123", "23.976",
         "55.4 Mb/s", "3840x2160", "HEVC", "Main 10@L5.1@High", "10 bits", "TrueHD 8ch, AC-3 6ch"],
    )
    out = TerminalBuffer()
    TableRenderer(style="box", color=False).render([record], out)

    text = out.getvalue()
    for value in record.row():
        assert value in text
    assert "…" not in text
