"""File selection: inclusion, exclusion, size bound and traversal errors."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from gzip_static.errors import TraversalError
from gzip_static.patterns import compile_type_patterns
from gzip_static.selector import is_eligible, select_files


def _write(path: Path, size: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    return path


def _names(root: Path, paths) -> list[str]:
    return [path.relative_to(root).as_posix() for path in paths]


class IsEligibleTests(unittest.TestCase):
    def test_all_constraints_are_anded(self) -> None:
        include = compile_type_patterns(["html", "gz"])
        exclude = compile_type_patterns(["gz"])
        self.assertTrue(is_eligible("a.html", 100, include, exclude, 50))
        self.assertFalse(is_eligible("a.css", 100, include, exclude, 50))
        self.assertFalse(is_eligible("a.html.gz", 100, include, exclude, 50))
        self.assertFalse(is_eligible("a.html", 50, include, exclude, 50))

    def test_no_constraints_accepts_everything(self) -> None:
        self.assertTrue(is_eligible("anything", 0))


class SelectFilesTests(unittest.TestCase):
    def test_selects_matching_files_recursively_in_sorted_order(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _write(root / "b.html", 100)
            _write(root / "a.css", 100)
            _write(root / "sub" / "deep" / "page.HTML", 100)
            _write(root / "image.png", 100)
            (root / "emptydir").mkdir()

            selected = select_files(root, include=compile_type_patterns(["html", "css"]))
            self.assertEqual(_names(root, selected), ["a.css", "b.html", "sub/deep/page.HTML"])

    def test_wildcard_extension_patterns(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            for name in ("a.html", "a.xhtml", "a.zhtml"):
                _write(root / name, 10)
            selected = select_files(root, include=compile_type_patterns(["?html"]))
            self.assertEqual(_names(root, selected), ["a.xhtml", "a.zhtml"])

    def test_minimum_length_is_a_strict_lower_bound(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _write(root / "exact.txt", 50)
            _write(root / "over.txt", 51)
            _write(root / "under.txt", 3)
            selected = select_files(root, include=compile_type_patterns(["txt"]), min_length=50)
            self.assertEqual(_names(root, selected), ["over.txt"])

    def test_exclusion_wins_over_inclusion(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _write(root / "archive.gz", 100)
            _write(root / "page.html", 100)
            selected = select_files(
                root,
                include=compile_type_patterns(["gz", "html"]),
                exclude=compile_type_patterns(["gz"]),
            )
            self.assertEqual(_names(root, selected), ["page.html"])

    def test_empty_include_set_selects_every_regular_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _write(root / "README", 5)
            _write(root / "x.bin", 5)
            self.assertEqual(_names(root, select_files(root)), ["README", "x.bin"])

    @unittest.skipIf(not hasattr(os, "symlink"), "symlinks not supported")
    def test_symlinks_are_neither_followed_nor_yielded(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp) / "site"
            outside = Path(tmp) / "outside"
            _write(root / "real.html", 100)
            _write(outside / "elsewhere.html", 100)
            (root / "link.html").symlink_to(root / "real.html")
            (root / "linked_dir").symlink_to(outside, target_is_directory=True)

            selected = select_files(root, include=compile_type_patterns(["html"]))
            self.assertEqual(_names(root, selected), ["real.html"])

    def test_relative_root_yields_relative_paths(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            _write(Path(tmp) / "site" / "index.html", 100)
            previous_cwd = Path.cwd()
            try:
                os.chdir(tmp)
                selected = list(select_files(Path("site")))
            finally:
                os.chdir(previous_cwd)
            self.assertEqual(selected, [Path("site") / "index.html"])

    def test_each_call_is_a_fresh_traversal(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _write(root / "one.txt", 10)
            self.assertEqual(_names(root, select_files(root)), ["one.txt"])
            _write(root / "two.txt", 10)
            self.assertEqual(_names(root, select_files(root)), ["one.txt", "two.txt"])

    def test_missing_root_raises_traversal_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            missing = Path(tmp) / "gone"
            with self.assertRaises(TraversalError) as ctx:
                list(select_files(missing))
            self.assertEqual(ctx.exception.path, missing)

    def test_file_root_raises_traversal_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = _write(Path(tmp) / "file.html", 10)
            with self.assertRaises(TraversalError):
                list(select_files(target))

    def test_unlistable_subdirectory_aborts_walk(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            _write(root / "a.html", 100)
            _write(root / "locked" / "b.html", 100)
            real_scandir = os.scandir

            def fake_scandir(path):
                if Path(path).name == "locked":
                    raise PermissionError(13, "Permission denied", os.fspath(path))
                return real_scandir(path)

            with mock.patch("os.scandir", side_effect=fake_scandir):
                with self.assertRaises(TraversalError) as ctx:
                    list(select_files(root))
            self.assertEqual(ctx.exception.path.name, "locked")


if __name__ == "__main__":
    unittest.main()
