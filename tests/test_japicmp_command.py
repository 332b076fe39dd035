import os
import tempfile
import unittest
from pathlib import Path

from apidiff.errors import ComparatorError, MissingArtifactsError
from apidiff.japicmp import JapicmpComparator, JapicmpRunner, build_comparison_config, build_japicmp_command, check_sides
from apidiff.models import AccessModifier, ArtifactReference, ComparisonConfig, PairRequest, ReleaseRoot
from apidiff.settings import DEFAULT_STYLESHEET, Settings


def _refs(root: str, version: str, *names: str) -> list:
    return [ArtifactReference(path=Path(root) / n, version=version) for n in names]


class TestComparisonConfig(unittest.TestCase):
    def test_fixed_defaults_and_title(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            settings = Settings(output_dir=Path(td) / "target")
            request = PairRequest(
                old=ReleaseRoot(Path("/w/jetty-9.4")),
                new=ReleaseRoot(Path("/w/jetty-10.0")),
                name="jetty-9.4-to-10.0",
            )
            cfg = build_comparison_config(
                request, old_version="9.4.31.v20200723", new_version="10.0.0", settings=settings
            )

            self.assertEqual(Path(td) / "target" / "jetty-9.4-to-10.0-diff.html", cfg.output_file)
            self.assertEqual(
                "Changes in Eclipse Jetty APIs from 9.4.31.v20200723 to 10.0.0", cfg.title
            )
            self.assertIs(AccessModifier.PROTECTED, cfg.access_modifier)
            self.assertTrue(cfg.ignore_missing_classes)
            self.assertTrue(cfg.only_modifications)
            self.assertFalse(cfg.only_binary_incompatible)
            self.assertFalse(cfg.ignore_missing_old_version)
            self.assertFalse(cfg.ignore_missing_new_version)
            self.assertFalse(cfg.semantic_versioning)
            self.assertTrue(cfg.create_schema_file)
            self.assertEqual(DEFAULT_STYLESHEET, cfg.html_stylesheet)
            self.assertTrue(DEFAULT_STYLESHEET.exists())
            self.assertEqual(Path(td) / "target" / "work" / "jetty-9.4-to-10.0", cfg.work_dir)

    def test_blank_version_gives_blank_title_token(self) -> None:
        request = PairRequest(ReleaseRoot(Path("/a")), ReleaseRoot(Path("/b")), "a-to-b")
        cfg = build_comparison_config(request, old_version="", new_version="2", settings=Settings())
        self.assertEqual("Changes in Eclipse Jetty APIs from  to 2", cfg.title)


class TestJapicmpCommand(unittest.TestCase):
    def _config(self, **kw) -> ComparisonConfig:
        base = dict(
            output_file=Path("/out/x-diff.html"),
            title="t",
            work_dir=Path("/out/work/x"),
            html_stylesheet=Path("/css/report.css"),
        )
        base.update(kw)
        return ComparisonConfig(**base)

    def test_default_command(self) -> None:
        old = _refs("/old/dep", "1", "a.jar", "b.jar")
        new = _refs("/new/dep", "2", "a.jar")
        cmd = build_japicmp_command(
            java_bin="java", jar=Path("/lib/japicmp.jar"), old=old, new=new, config=self._config()
        )

        self.assertEqual(["java", "-jar", "/lib/japicmp.jar"], cmd[:3])
        self.assertEqual("/old/dep/a.jar;/old/dep/b.jar", cmd[cmd.index("--old") + 1])
        self.assertEqual("/new/dep/a.jar", cmd[cmd.index("--new") + 1])
        self.assertEqual("protected", cmd[cmd.index("--access-modifier") + 1])
        self.assertIn("--only-modified", cmd)
        self.assertIn("--ignore-missing-classes", cmd)
        self.assertNotIn("--semantic-versioning", cmd)
        self.assertNotIn("--only-incompatible", cmd)
        self.assertEqual("/out/work/x/x-diff.html", cmd[cmd.index("--html-file") + 1])
        self.assertEqual("/out/work/x/x-diff.xml", cmd[cmd.index("--xml-file") + 1])
        self.assertEqual("/css/report.css", cmd[cmd.index("--html-stylesheet") + 1])

    def test_optional_flags(self) -> None:
        cfg = self._config(
            semantic_versioning=True,
            only_binary_incompatible=True,
            ignore_missing_classes=False,
            only_modifications=False,
            html_stylesheet=None,
            access_modifier=AccessModifier.PUBLIC,
        )
        cmd = build_japicmp_command(java_bin="java", jar=Path("j.jar"), old=[], new=[], config=cfg)
        self.assertIn("--semantic-versioning", cmd)
        self.assertIn("--only-incompatible", cmd)
        self.assertNotIn("--ignore-missing-classes", cmd)
        self.assertNotIn("--only-modified", cmd)
        self.assertNotIn("--html-stylesheet", cmd)
        self.assertEqual("public", cmd[cmd.index("--access-modifier") + 1])

    def test_empty_side_is_fatal_unless_tolerated(self) -> None:
        some = _refs("/d", "1", "a.jar")
        with self.assertRaises(MissingArtifactsError):
            check_sides([], some, self._config())
        with self.assertRaises(MissingArtifactsError):
            check_sides(some, [], self._config())
        check_sides([], some, self._config(ignore_missing_old_version=True))
        check_sides(some, some, self._config())

    def test_compare_checks_sides_before_needing_java(self) -> None:
        runner = JapicmpRunner(jar=None, java_bin="definitely-not-java")
        with self.assertRaises(MissingArtifactsError):
            runner.compare([], [], self._config())

    def test_compare_requires_configured_jar(self) -> None:
        runner = JapicmpRunner(jar=None)
        some = _refs("/d", "1", "a.jar")
        with self.assertRaises(FileNotFoundError):
            runner.compare(some, some, self._config())

    def test_describe_without_jar(self) -> None:
        comparator = JapicmpComparator(JapicmpRunner(jar=None, java_bin="java"))
        text = comparator.describe(_refs("/o", "1", "a.jar"), _refs("/n", "2", "a.jar"), self._config())
        self.assertTrue(text.startswith("java -jar japicmp.jar --old /o/a.jar --new /n/a.jar"))


@unittest.skipIf(os.name == "nt", "shell scripts stand in for java")
class TestJapicmpRunnerCompare(unittest.TestCase):
    """Drives ``compare`` with a shell script in place of the java binary."""

    def setUp(self) -> None:
        self._td = tempfile.TemporaryDirectory()
        self.base = Path(self._td.name)
        self.jar = self.base / "lib" / "japicmp.jar"
        self.jar.parent.mkdir()
        self.jar.write_bytes(b"PK")
        self.config = ComparisonConfig(
            output_file=self.base / "target" / "x-diff.html",
            title="t",
            work_dir=self.base / "target" / "work" / "x",
            html_stylesheet=None,
        )
        self.old = _refs(str(self.base / "old"), "1", "a.jar")
        self.new = _refs(str(self.base / "new"), "2", "a.jar")

    def tearDown(self) -> None:
        self._td.cleanup()

    def _runner(self, body: str) -> JapicmpRunner:
        script = self.base / "fake-java"
        script.write_text("#!/bin/sh\n" + body, encoding="utf-8")
        script.chmod(0o755)
        return JapicmpRunner(jar=self.jar, java_bin=str(script), quiet=True)

    def test_non_zero_exit_carries_stderr_tail(self) -> None:
        runner = self._runner("echo 'Exception in thread main' >&2\necho boom >&2\nexit 3\n")
        with self.assertRaises(ComparatorError) as cm:
            runner.compare(self.old, self.new, self.config)

        self.assertIn("code 3", str(cm.exception))
        self.assertIn("boom", str(cm.exception))
        self.assertEqual(3, cm.exception.result.exit_code)
        self.assertEqual(["Exception in thread main", "boom"], cm.exception.result.stderr_tail())

    def test_success_without_html_is_an_error(self) -> None:
        runner = self._runner("exit 0\n")
        with self.assertRaises(ComparatorError) as cm:
            runner.compare(self.old, self.new, self.config)
        self.assertIn("did not produce", str(cm.exception))
        self.assertEqual(0, cm.exception.result.exit_code)

    def test_stale_staged_output_is_removed_first(self) -> None:
        self.config.work_dir.mkdir(parents=True)
        self.config.staged_html.write_text("<html>old run</html>", encoding="utf-8")
        self.config.staged_xml.write_text("<japicmp/>", encoding="utf-8")

        runner = self._runner("exit 0\n")
        with self.assertRaises(ComparatorError):
            runner.compare(self.old, self.new, self.config)
        self.assertFalse(self.config.staged_html.exists())
        self.assertFalse(self.config.staged_xml.exists())

    def test_success_returns_staged_output(self) -> None:
        runner = self._runner(
            'while [ $# -gt 0 ]; do\n'
            '  case "$1" in\n'
            '    --html-file) echo "<html></html>" > "$2"; shift ;;\n'
            '    --xml-file) echo "<japicmp/>" > "$2"; shift ;;\n'
            '  esac\n'
            '  shift\n'
            'done\n'
            'exit 0\n'
        )
        result = runner.compare(self.old, self.new, self.config)

        self.assertEqual(self.config.staged_html, result.html_path)
        self.assertTrue(result.exists())
        self.assertEqual(0, result.cmd.exit_code)
        self.assertIn("--old " + str(self.base / "old" / "a.jar"), result.cmd.command_str)


if __name__ == "__main__":
    unittest.main()
