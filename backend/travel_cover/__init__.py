"""Travel Cover - parametric travel insurance backend"""

__version__ = "1.0.0"
