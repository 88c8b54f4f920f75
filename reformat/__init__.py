"""
Conversion front end for the Reformat service.

This package resolves uploaded files to a canonical type, restricts the
output formats offered for them, and hands the actual conversion off to a
remote conversion endpoint.
"""

__version__ = "1.0.0"
