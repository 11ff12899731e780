# Path: scripts/__init__.py
# Purpose: Package initializer for command line entry points.
# Layer: scripts.
# Details: Holds the serve and cleanup console scripts.
