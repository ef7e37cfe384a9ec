"""A small teaching operating system: segmented CPU, FIFO/HRRN kernel and block file system."""

__version__ = "0.1.0"