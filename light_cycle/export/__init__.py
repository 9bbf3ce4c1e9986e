"""I/O package for Light Cycle runs."""

from .csv_writer import RunLogWriter
from .reporter import Reporter

__all__ = ['RunLogWriter', 'Reporter']
