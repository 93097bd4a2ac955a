"""Domain layer - sample library indexing and waveform peak caching."""
