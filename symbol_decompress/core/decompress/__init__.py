"""Substitution decompression engine.

Replays the encoder's substitution numbering over a compressed symbol tree and
returns the fully expanded tree together with the table of ids it assigned.
"""
