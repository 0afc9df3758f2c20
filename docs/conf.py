"""Sphinx configuration for python-dirigera docs."""
import os
import sys
from datetime import datetime

from importlib_metadata import version  # type: ignore

sys.path.insert(0, os.path.abspath(".."))

project = "python-dirigera"
author = "python-dirigera contributors"
copyright = f"{datetime.now().year}, {author}"
release = version("python-dirigera")

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
]

root_doc = "index"
autodoc_member_order = "bysource"
autodoc_default_options = {
    "members": True,
    "show-inheritance": True,
}

exclude_patterns = ["_build"]

html_theme = "sphinx_rtd_theme"
