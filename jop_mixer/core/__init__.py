"""jop_mixer.core — Foundation layer.

Colour conversion, the dye table, mixing, the mix cache, search and result
projection. This module has NO dependencies on jop_mixer.commands or
jop_mixer.registry. Only stdlib and numpy are allowed here.
"""
