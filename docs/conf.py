# Sphinx configuration for the coupledfe documentation.

import os
import sys

sys.path.insert(0, os.path.abspath('../src'))

project = 'coupledfe'
author = 'CoupledFE Team'
release = '0.1.0'
version = '0.1'

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.napoleon',
    'sphinx.ext.mathjax',
    'sphinx.ext.viewcode',
]

# Docstrings use Google style (Args/Returns/Raises)
napoleon_google_docstring = True
napoleon_numpy_docstring = False

autodoc_default_options = {
    'members': True,
    'member-order': 'bysource',
    'show-inheritance': True,
}
autodoc_typehints = 'description'

root_doc = 'index'
exclude_patterns = ['_build']

html_theme = 'sphinx_rtd_theme'
