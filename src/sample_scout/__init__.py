"""
Sample Scout - local audio sample indexing and waveform peak caching.
"""

__version__ = "0.1.0"
