"""Cancellation implementation parts; import from ``draftstream.base.cancellation``."""
