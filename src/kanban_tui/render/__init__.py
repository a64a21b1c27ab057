"""Terminal rendering: layout geometry, the segment compositor and the screen frame."""
