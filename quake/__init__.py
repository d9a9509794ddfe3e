"""JMA seismic/tsunami feed conversion service."""
