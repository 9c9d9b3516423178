"""
CLI pipeline stage tests

Exercises env_check → sources_find → sources_expand → results_report on a
small content tree, without going through argument parsing.
"""

import pytest

from shortdown.__main__ import (
    document_expand,
    env_check,
    error_format,
    results_report,
    sources_expand,
    sources_find,
)
from shortdown.lib.expander import Expander
from shortdown.models import ProgramState, pipeline


@pytest.fixture
def content(tmp_path):
    """inputdir with two articles, a data dir and a site config"""
    inputdir = tmp_path / "content"
    (inputdir / "posts").mkdir(parents=True)
    (inputdir / "data").mkdir()
    (inputdir / "data" / "t.csv").write_text("a,b\n1,2\n", encoding="utf-8")
    (inputdir / "posts" / "one.md").write_text(
        '# One\n{{< table src="t.csv" >}}\n', encoding="utf-8"
    )
    (inputdir / "two.md").write_text(
        'Two {{< external-link "https://e.com" "e" >}}\n{{< subscribe >}}\n', encoding="utf-8"
    )
    (inputdir / "site.yaml").write_text("subscribe:\n  html: <sub/>\n", encoding="utf-8")
    return inputdir


def state_make(inputdir, outputdir, **kwargs):
    defaults = dict(inputdir=inputdir, outputdir=outputdir, verbosity=0, pattern="**/*.md")
    defaults.update(kwargs)
    return ProgramState(**defaults)


class TestEnvCheck:
    """Environment validation"""

    def test_resolves_paths(self, content, tmp_path):
        state = env_check(state_make(content, tmp_path / "out", siteConfig="site.yaml"))

        assert state.envOK is True
        assert state.dataInputdir == content / "data"
        assert state.siteConfigFile == content / "site.yaml"
        assert (tmp_path / "out").is_dir()

    def test_custom_data_dir(self, content, tmp_path):
        state = env_check(state_make(content, tmp_path / "out", dataDir=str(tmp_path)))
        assert state.dataInputdir == tmp_path

    def test_missing_input_file(self, content, tmp_path):
        with pytest.raises(SystemExit) as info:
            env_check(state_make(content, tmp_path / "out", inputFile="nope.md"))
        assert info.value.code == 1

    def test_missing_site_config(self, content, tmp_path):
        with pytest.raises(SystemExit):
            env_check(state_make(content, tmp_path / "out", siteConfig="nope.yaml"))

    def test_same_input_and_output(self, content):
        with pytest.raises(SystemExit):
            env_check(state_make(content, content))

    def test_input_file_outside_inputdir(self, content, tmp_path):
        (tmp_path / "outside.md").write_text("# Outside\n", encoding="utf-8")
        with pytest.raises(SystemExit) as info:
            env_check(state_make(content, tmp_path / "out", inputFile="../outside.md"))
        assert info.value.code == 1


class TestSourcesFind:
    """Article selection"""

    def test_pattern(self, content, tmp_path):
        state = sources_find(env_check(state_make(content, tmp_path / "out")))
        assert state.sourceFiles == [content / "posts" / "one.md", content / "two.md"]

    def test_single_file(self, content, tmp_path):
        state = sources_find(env_check(state_make(content, tmp_path / "out", inputFile="two.md")))
        assert state.sourceFiles == [content / "two.md"]

    def test_outputdir_inside_inputdir_skipped(self, content):
        build = content / "build"
        (build / "posts").mkdir(parents=True)
        (build / "posts" / "one.md").write_text("<table></table>\n", encoding="utf-8")

        state = sources_find(env_check(state_make(content, build)))
        assert state.sourceFiles == [content / "posts" / "one.md", content / "two.md"]

    def test_no_match(self, content, tmp_path):
        with pytest.raises(SystemExit):
            sources_find(env_check(state_make(content, tmp_path / "out", pattern="*.rst")))


class TestExpansion:
    """Expanding and writing articles"""

    @pytest.mark.parametrize("jobs", [1, 4])
    def test_full_pipeline(self, content, tmp_path, jobs):
        out = tmp_path / "out"
        state = pipeline(
            state_make(content, out, siteConfig="site.yaml", jobs=jobs),
            env_check, sources_find, sources_expand, results_report,
        )

        assert all(result["status"] for result in state.expandResults)
        one = (out / "posts" / "one.md").read_text(encoding="utf-8")
        two = (out / "two.md").read_text(encoding="utf-8")
        assert "<tr><td>1</td><td>2</td></tr>" in one
        assert 'href="https://e.com"' in two
        assert two.endswith("<sub/>\n")

    def test_failure_not_written(self, content, tmp_path):
        (content / "bad.md").write_text("{{< subscribe extra >}}", encoding="utf-8")
        out = tmp_path / "out"
        state = sources_expand(sources_find(env_check(state_make(content, out))))

        failed = [r for r in state.expandResults if not r["status"]]
        assert len(failed) == 1
        assert failed[0]["error"]["kind"] == "ArityError"
        assert not (out / "bad.md").exists()
        assert (out / "two.md").exists()

        with pytest.raises(SystemExit) as info:
            results_report(state)
        assert info.value.code == 1

    def test_undecodable_csv_reported(self, content, tmp_path):
        (content / "data" / "t.csv").write_bytes(b"a,b\ncaf\xe9,2\n")
        out = tmp_path / "out"
        state = sources_expand(sources_find(env_check(state_make(content, out))))

        failed = [r for r in state.expandResults if not r["status"]]
        assert len(failed) == 1
        assert failed[0]["error"]["kind"] == "MalformedTableError"
        assert not (out / "posts" / "one.md").exists()
        assert (out / "two.md").exists()

    def test_document_expand_read_error(self, content, tmp_path):
        (content / "latin1.md").write_bytes(b"caf\xe9")
        result = document_expand(Expander(), content / "latin1.md", content, tmp_path)

        assert result["status"] is False
        assert result["error"]["kind"] == "ReadError"


class TestErrorFormat:
    """Failure messages"""

    def test_full_context(self):
        error = {"kind": "MalformedTableError", "message": "Row has 3 cells",
                 "directive": "table", "line": 4, "column": 1, "row": 1}
        assert error_format(error) == "MalformedTableError: Row has 3 cells [directive 'table' at 4:1 row 1]"

    def test_no_context(self):
        assert error_format({"kind": "ReadError", "message": "boom"}) == "ReadError: boom"
