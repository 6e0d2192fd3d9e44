"""Infrastructure layer — the remote stand directory and file decoding.

This layer depends on stdlib, third-party libs (requests, openpyxl) and
the domain models it produces. It must never import from services,
commands, or output.
"""
