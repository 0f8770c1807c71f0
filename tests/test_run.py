import json

from run import build_parser, main

from tests.nodes import boolean, document, frame, page, rect


def _write(tmp_path, doc):
    path = tmp_path / "design.json"
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path


class TestCommandLine:
    def test_arguments(self):
        args = build_parser().parse_args(
            ["in.json", "out", "--assets", "a", "--flag", "break_booleans", "--flag", "prerender_shapes",
             "--canvas", "Home"]
        )
        assert args.document == "in.json"
        assert args.output_dir == "out"
        assert args.assets == "a"
        assert args.flags == ["break_booleans", "prerender_shapes"]
        assert args.canvases == ["Home"]

    def test_conversion(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("FIGMAQML_LOG_DIR", str(tmp_path / "logs"))
        source = _write(tmp_path, document([page([frame("1:1", "Home", [rect("1:2")])])]))
        assert main([str(source), str(tmp_path / "out")]) == 0
        assert (tmp_path / "out" / "Home_figma.qml").exists()
        assert "Home_figma.qml" in capsys.readouterr().out

    def test_fatal_error_exit_code(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FIGMAQML_LOG_DIR", str(tmp_path / "logs"))
        doc = document([page([frame("1:1", children=[boolean("UNION", [rect("3:1")])])])])
        assert main([str(_write(tmp_path, doc)), str(tmp_path / "out")]) == 1
        assert not (tmp_path / "out").exists()

    def test_unknown_flag(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FIGMAQML_LOG_DIR", str(tmp_path / "logs"))
        assert main(["in.json", str(tmp_path / "out"), "--flag", "shiny"]) == 2

    def test_missing_document(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FIGMAQML_LOG_DIR", str(tmp_path / "logs"))
        assert main([str(tmp_path / "none.json"), str(tmp_path / "out")]) == 1
