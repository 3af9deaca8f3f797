"""MindMate team chat: Inside Out emotion debate and summaries."""
