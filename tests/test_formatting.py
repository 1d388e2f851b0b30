import pytest

from palm.formatting import progress_bar, render_table, truncate

FULL = "\u2588"
EMPTY = "\u2591"


def test_progress_bar_half():
    assert progress_bar(50, 10) == FULL * 5 + EMPTY * 5


def test_progress_bar_clamps_over_hundred():
    assert progress_bar(150, 4) == FULL * 4


def test_progress_bar_zero_is_empty():
    assert progress_bar(0, 3) == EMPTY * 3


@pytest.mark.parametrize("percent", [0, 12.5, 33, 80, 99.9, 100, 250])
@pytest.mark.parametrize("width", [1, 20, 30])
def test_progress_bar_width_invariant(percent, width):
    bar = progress_bar(percent, width)
    assert len(bar) == width
    assert set(bar) <= {FULL, EMPTY}
    assert bar == FULL * bar.count(FULL) + EMPTY * bar.count(EMPTY)


def test_progress_bar_monotonic():
    counts = [progress_bar(p, 30).count(FULL) for p in range(0, 101, 5)]
    assert counts == sorted(counts)


def test_truncate_short_text_untouched():
    assert truncate("hello", 10) == "hello"
    assert truncate("hello", 5) == "hello"


def test_truncate_long_text():
    assert truncate("abcdefghij", 5) == "ab..."


@pytest.mark.parametrize("limit", [4, 10, 30])
def test_truncate_length_invariant(limit):
    text = "x" * 100
    result = truncate(text, limit)
    assert len(result) == limit
    assert result.endswith("...")


def test_render_table_aligns_columns():
    table = render_table(["Name", "Category"], [["a", "x"], ["longer", "y"]])
    lines = table.split("\n")
    assert len(lines) == 4
    column = lines[0].index("Category")
    assert lines[2].index("x") == column
    assert lines[3].index("y") == column
    assert set(lines[1].strip()) <= {"\u2500", " "}


def test_render_table_contains_all_cells():
    rows = [["alpha", "1"], ["beta", "2"]]
    table = render_table(["Tool", "Count"], rows)
    for row in rows:
        for cell in row:
            assert cell in table


def test_render_table_pads_short_rows():
    table = render_table(["A", "B", "C"], [["one"]])
    lines = table.split("\n")
    assert lines[2].strip() == "one"
    assert len(lines) == 3


def test_render_table_ignores_ansi_in_width():
    colored = "\x1b[32mok\x1b[0m"
    table = render_table(["S", "Name"], [[colored, "n1"], ["ok", "n2"]])
    lines = table.split("\n")
    assert lines[2].index("n1") - len("\x1b[32m\x1b[0m") == lines[3].index("n2")