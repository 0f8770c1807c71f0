"""Core generation layer: parsing, emitters, converter and services."""
