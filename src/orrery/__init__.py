"""Orrery: deterministic procedural universe generation."""
