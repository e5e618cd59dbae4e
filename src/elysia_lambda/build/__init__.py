"""
Build pipeline stages: entry rewrite, launcher, bundling and packaging.
"""
