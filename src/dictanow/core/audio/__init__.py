"""Audio capture (``recorder``) and signal analysis (``analysis``)."""
