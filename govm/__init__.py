"""
govm - Go version manager.

Installs multiple Go distributions side by side under one install root and
switches the active one through a single symlink.
"""
