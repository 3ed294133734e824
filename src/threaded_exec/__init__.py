"""Run shell commands off the calling thread and deliver output + exit status to a callback."""
