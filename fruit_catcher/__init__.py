"""
Fruit Catcher Package
=====================

This package contains the simulation core of the lane-based Fruit Catcher
arcade game. It controls:

- Item catalog and weighted spawn selection
- Per-frame fall and collision resolution
- Scoring, levels and speed progression
- Session lifecycle and countdown

All tunable parameters are in game_config.yaml.
"""
