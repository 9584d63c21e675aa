"""Command-line tools for playing and benchmarking Fruit Catcher."""
