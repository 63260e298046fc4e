"""eventfund — all-or-nothing event crowdfunding with receipt tokens."""

__version__ = "0.1.0"
