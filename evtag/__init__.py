"""evtag command-line application."""
