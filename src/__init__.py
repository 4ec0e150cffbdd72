"""NeurOn - AI-generated memory training in the terminal."""
