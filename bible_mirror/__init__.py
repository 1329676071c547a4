"""bible-mirror - bilingual Bible reader with synchronized display surfaces."""

__version__ = "0.1.0"
