"""bldgreport — building compliance lookup and Word report generation."""

__version__ = "1.0.0"
