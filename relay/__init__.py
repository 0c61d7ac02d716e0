"""
HTTP relay forwarding trusted requests as APNs pushes or templated emails.
"""

__version__ = "1.0.0"
