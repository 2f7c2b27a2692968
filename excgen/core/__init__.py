# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Core data shared by every generator stage: spans, diagnostics, errors, the type
table and the declaration descriptors.
"""

__all__ = []
