import os
import sys
from datetime import datetime

sys.path.insert(0, os.path.abspath(os.path.join("..", "..", "src")))

from huecli import __version__  # noqa: E402

project = "huecli"
author = ""
release = __version__
copyright = f"{datetime.now().year}, {author}"  # noqa

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx.ext.autosectionlabel",
    "sphinx.ext.viewcode",
]

autosectionlabel_prefix_document = True
templates_path = ["_templates"]
exclude_patterns = []

# Sphinx >= 5 uses root_doc; keep master_doc for older compat
root_doc = "index"

html_theme = "sphinx_rtd_theme"
html_static_path = ["_static"]
