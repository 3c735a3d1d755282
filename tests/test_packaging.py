import fnmatch
import os
import sys
import tomllib
import unittest

# Ensure project src/ is on sys.path for imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
src_path = os.path.join(ROOT, "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from main import DshApp  # noqa: E402


class PackagingTestCase(unittest.TestCase):
    def setUp(self):
        with open(os.path.join(ROOT, "pyproject.toml"), "rb") as f:
            self.setuptools = tomllib.load(f)["tool"]["setuptools"]

    def test_stylesheets_are_installed_with_their_package(self):
        packages = self.setuptools["packages"]
        package_data = self.setuptools.get("package-data", {})

        for css in DshApp.CSS_PATH:
            # CSS_PATH is resolved relative to main.py
            self.assertTrue(os.path.isfile(os.path.join(src_path, css)), css)

            package, _, rest = css.partition("/")
            self.assertIn(package, packages)
            self.assertTrue(
                any(fnmatch.fnmatch(rest, p) for p in package_data.get(package, [])),
                f"{css} is not shipped as package data",
            )

