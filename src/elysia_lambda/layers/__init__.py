"""
Bun runtime layer discovery and publishing.
"""
