"""PropertyHub invoicing core: invoices, per-resident splits and settlement."""

__version__ = "0.1.0"
