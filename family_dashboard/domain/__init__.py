"""Snapshot pipeline: build, publish and schedule refreshes."""
