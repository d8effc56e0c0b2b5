"""Adaptive squelch, AM/NFM demodulation, AFC and UDP audio streaming for airband receivers."""

__version__ = "0.1.0"