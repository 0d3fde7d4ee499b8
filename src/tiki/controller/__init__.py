"""Controllers turning key actions into store and navigation commands."""
