"""
Version import for the Code Suggest backend.

Single source of truth: codesuggest/_version.py
"""

from codesuggest._version import __version__, __release_date__
