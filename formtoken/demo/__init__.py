"""Demo application for formtoken."""
