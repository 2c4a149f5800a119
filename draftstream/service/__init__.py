"""Outer layer: the scripted dev producer (FastAPI) and the command line."""
