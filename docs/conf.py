# -*- coding: utf-8 -*-
import datetime as dt

from feedsheets import __version__


project = 'feedsheets'
copyright = 'Squarespace Data Engineering, {}'.format(dt.date.today().year)
author = 'Squarespace Data Engineering'

version = __version__
release = __version__

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.intersphinx',
    'sphinx.ext.napoleon',
    'sphinx.ext.viewcode',
]

# Model classes document their constructor arguments in __init__
autoclass_content = 'both'
autodoc_member_order = 'bysource'
napoleon_google_docstring = True
napoleon_numpy_docstring = False

exclude_patterns = ['_build']
html_theme = 'sphinx_rtd_theme'
master_doc = 'index'
source_suffix = '.rst'

# Feed elements and the transport are plain library objects without their own inventories
nitpick_ignore = [
    ('py:class', 'httplib2.Http'),
    ('py:class', 'xml.etree.ElementTree.Element'),
    ('py:class', 'feedsheets.auth.AuthToken'),
]

intersphinx_mapping = {
    'python': ('https://docs.python.org/3/', None),
    'pandas': ('https://pandas.pydata.org/docs/', None),
    'numpy': ('https://numpy.org/doc/stable/', None),
}
