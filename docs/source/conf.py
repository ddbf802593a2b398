"""Sphinx configuration for the fennec API reference."""

import os
import sys

sys.path.insert(0, os.path.abspath("../.."))

project = "fennec"
author = "fennec contributors"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx.ext.viewcode",
    "sphinx_immaterial",
]

exclude_patterns: list[str] = []

html_theme = "sphinx_immaterial"
html_theme_options = {
    "font": False,
    "features": ["search.highlight", "toc.follow"],
}

napoleon_numpy_docstring = False

# Records are pydantic models; their config attribute is noise in the API pages
autodoc_default_options = {
    "members": True,
    "member-order": "bysource",
    "exclude-members": "model_config",
}
autodoc_typehints = "description"
