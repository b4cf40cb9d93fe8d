"""Test fixtures for govm tests.

Fixtures are organized by type:

- installations: Fake Go installation roots, archives and install layouts

Import fixtures in your tests using:
    from tests.fixtures.installations import make_go_install, install_root
"""

__all__ = [
    "installations",
]
