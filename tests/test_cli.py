import pytest

from fortune_voronoi.__main__ import main, parse_sites
from fortune_voronoi.errors import ValidationError
from fortune_voronoi.geometry import Point


def _write_sites(tmp_path, text):
    path = tmp_path / "sites.txt"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_parse_sites_accepts_spaces_commas_and_comments():
    text = "# header\n0 0\n  2,0  \n\n1, 2 # apex\n"
    assert parse_sites(text) == [Point(0, 0), Point(2, 0), Point(1, 2)]


@pytest.mark.parametrize("text, line", [("0 0\n1\n", 2), ("0 0\n1 2 3\n", 2), ("x 1\n", 1)])
def test_parse_sites_reports_line_numbers(text, line):
    with pytest.raises(ValidationError) as excinfo:
        parse_sites(text)
    assert f"[line {line}]" in str(excinfo.value)


def test_cli_prints_summary(tmp_path, capsys):
    path = _write_sites(tmp_path, "0 0\n2 0\n1 2\n")

    main([path, "--summary", "--check"])

    out = capsys.readouterr().out.strip()
    assert out == "sites=3 vertices=8 voronoi_vertices=1 half_edges=20 interior_edges=3"


def test_cli_prints_dcel_tables(tmp_path, capsys):
    path = _write_sites(tmp_path, "0 0\n")

    main([path, "--margin", "2"])

    out = capsys.readouterr().out
    assert "Vertex  Coordinates  IncidentEdge" in out
    assert "b0  (-2, -2)  e0" in out
    assert "HalfEdge  Origin  Twin  IncidentFace  Next  Prev" in out


def test_cli_exits_non_zero_on_bad_input(tmp_path):
    path = _write_sites(tmp_path, "0 0\n0 0\n")

    with pytest.raises(SystemExit) as excinfo:
        main([path])

    assert excinfo.value.code == 1


def test_cli_exits_non_zero_on_consistency_warnings(tmp_path, monkeypatch):
    from fortune_voronoi import __main__ as cli
    from fortune_voronoi.consistency import MeshWarning

    monkeypatch.setattr(cli, "check_mesh", lambda mesh: [MeshWarning('euler', 'broken')])
    path = _write_sites(tmp_path, "0 0\n2 0\n1 2\n")

    with pytest.raises(SystemExit) as excinfo:
        main([path, "--summary", "--check"])

    assert excinfo.value.code == 1


@pytest.mark.parametrize("margin", ["0", "-2"])
def test_cli_exits_non_zero_on_non_positive_margin(tmp_path, margin):
    path = _write_sites(tmp_path, "0 0\n2 0\n1 2\n")

    with pytest.raises(SystemExit) as excinfo:
        main([path, "--summary", f"--margin={margin}"])

    assert excinfo.value.code == 1
