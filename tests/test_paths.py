"""
clido Test Suite — TODO File Location
======================================
Path precedence and the open-or-create handle.
"""
import sys
import os
import tempfile
import unittest
import unittest.mock as mock

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from clido.paths import TODO_PATH_ENV, default_todo_path, open_todo_file, resolve_todo_path


class TestResolveTodoPath(unittest.TestCase):

    def test_explicit_wins(self):
        with mock.patch.dict(os.environ, {TODO_PATH_ENV: "/env/TODOS.bin"}):
            self.assertEqual(resolve_todo_path("/cli/TODOS.bin"), "/cli/TODOS.bin")

    def test_environment_next(self):
        with mock.patch.dict(os.environ, {TODO_PATH_ENV: "/env/TODOS.bin"}):
            self.assertEqual(resolve_todo_path(), "/env/TODOS.bin")

    def test_default_last(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(resolve_todo_path(), default_todo_path())

    def test_default_per_platform(self):
        with mock.patch("clido.paths.sys.platform", "win32"):
            self.assertEqual(default_todo_path(), "TODOS.bin")
        with mock.patch("clido.paths.sys.platform", "linux"):
            self.assertEqual(default_todo_path(), "/usr/local/share/clido/TODOS.bin")

    def test_user_expanded(self):
        self.assertFalse(resolve_todo_path("~/TODOS.bin").startswith("~"))


class TestOpenTodoFile(unittest.TestCase):

    def test_creates_missing_file_and_parents(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "nested", "TODOS.bin")
            with mock.patch("builtins.print"):
                with open_todo_file(path) as stream:
                    self.assertEqual(stream.read(), b"")
            self.assertTrue(os.path.exists(path))
            self.assertEqual(os.path.getsize(path), 0)

    def test_existing_file_not_truncated(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "TODOS.bin")
            with open(path, "wb") as f:
                f.write(b"\x00\x00\x00\x00\x00")
            with open_todo_file(path) as stream:
                self.assertEqual(stream.tell(), 0)
                self.assertEqual(stream.read(), b"\x00\x00\x00\x00\x00")

    def test_closed_after_exception(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "TODOS.bin")
            opened = []
            with mock.patch("builtins.print"):
                with self.assertRaises(RuntimeError):
                    with open_todo_file(path) as stream:
                        opened.append(stream)
                        raise RuntimeError("boom")
            self.assertTrue(opened[0].closed)

    def test_unopenable_path_raises_oserror(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with self.assertRaises(OSError):
                with open_todo_file(tmpdir):
                    pass


if __name__ == "__main__":
    unittest.main()
