"""Light Cycle: path authoring and multi-cycle simulation for a grid routing puzzle."""

__version__ = "0.1.0"
