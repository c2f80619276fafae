"""Repository and registry interfaces."""
