"""Core physics, configuration and bookkeeping for the orbit trainer."""
